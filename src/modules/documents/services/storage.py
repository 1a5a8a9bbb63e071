import logging
import os
import secrets
import time
from functools import lru_cache
from typing import List, Optional

from config import settings
from modules.common.errors import InternalError

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Blob store on the local filesystem; a blob is addressed by its path."""

    def __init__(self, root: str):
        self.root = root

    def put(self, data: bytes, suggested_name: str) -> str:
        base, ext = os.path.splitext(suggested_name)
        unique_name = f"{base}-{int(time.time() * 1000)}-{secrets.token_hex(4)}{ext}"
        path = os.path.join(self.root, unique_name)
        try:
            os.makedirs(self.root, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error("Could not write blob %s: %s", path, e)
            raise InternalError("File storage unavailable")
        return path

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def get(self, path: str) -> Optional[bytes]:
        """Blob contents, None when the blob is missing"""
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def delete(self, path: str) -> bool:
        """Remove a blob; False when it was already gone"""
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        return True

    def list_paths(self) -> List[str]:
        if not os.path.isdir(self.root):
            return []
        return [
            os.path.join(self.root, entry)
            for entry in os.listdir(self.root)
            if os.path.isfile(os.path.join(self.root, entry))
        ]

    def modified_at(self, path: str) -> float:
        return os.path.getmtime(path)


@lru_cache()
def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore(settings.UPLOAD_DIR)
