import logging

from apscheduler.schedulers.background import BackgroundScheduler

from config import settings
from database import SessionLocal
from modules.documents.services.cleanup import delete_orphaned_blobs
from modules.documents.services.storage import get_blob_store

logger = logging.getLogger(__name__)


def run_orphan_sweep() -> int:
    with SessionLocal() as session:
        return delete_orphaned_blobs(session, get_blob_store(), settings.ORPHAN_SWEEP_GRACE_MINUTES)


def start_orphan_sweep_job() -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(run_orphan_sweep, 'interval', hours=settings.ORPHAN_SWEEP_INTERVAL_HOURS)
    scheduler.start()
    logger.info("Orphan sweep scheduled every %d hour(s)", settings.ORPHAN_SWEEP_INTERVAL_HOURS)
    return scheduler
