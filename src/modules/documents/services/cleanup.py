import logging
import time
from typing import Optional

from sqlalchemy.orm import Session

from modules.documents.models.document import Document
from modules.documents.services.storage import LocalBlobStore

logger = logging.getLogger(__name__)


def delete_orphaned_blobs(session: Session, store: LocalBlobStore, grace_minutes: int = 60,
                          now: Optional[float] = None) -> int:
    """Remove blobs no document points to.

    Blobs younger than the grace period are kept: an upload writes its blob
    before the record is committed.
    """
    now = now if now is not None else time.time()
    cutoff = now - grace_minutes * 60

    referenced = {path for (path,) in session.query(Document.file_path).all()}

    removed = 0
    for path in store.list_paths():
        if path in referenced:
            continue
        try:
            if store.modified_at(path) > cutoff:
                continue
            if store.delete(path):
                removed += 1
        except OSError as e:
            logger.error("Error deleting orphaned blob %s: %s", path, e)

    if removed:
        logger.info("Orphan sweep removed %d blob(s)", removed)
    return removed
