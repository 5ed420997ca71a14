# casenotes/utils/storage.py
import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from casenotes.core.config import settings
from casenotes.core.exceptions import StorageError

logger = logging.getLogger(__name__)


def generate_stored_name(original_name: str) -> str:
    # keep the extension for content sniffing; the rest is random
    ext = Path(original_name or "").suffix.lower()
    if not ext.isascii() or len(ext) > 10:
        ext = ""
    return f"{uuid.uuid4().hex}{ext}"


class AttachmentStorage(ABC):
    """Where attachment bytes live. Rows only ever hold the stored name."""

    @abstractmethod
    def save(self, data: bytes, original_name: str) -> str:
        """Store the bytes and return the generated stored name."""

    @abstractmethod
    def read(self, stored_name: str) -> bytes:
        ...

    @abstractmethod
    def delete(self, stored_name: str):
        """Remove the blob. Removing a missing blob is not an error."""


class LocalDiskStorage(AttachmentStorage):
    def __init__(self, upload_dir: str = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, stored_name: str) -> Path:
        path = (self.upload_dir / stored_name).resolve()
        if path.parent != self.upload_dir.resolve():
            raise StorageError("Invalid stored file name", detail=stored_name)
        return path

    def save(self, data: bytes, original_name: str) -> str:
        stored_name = generate_stored_name(original_name)
        path = self._path(stored_name)
        tmp_path = path.with_name(path.name + ".part")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError("Failed to write attachment", detail=str(e)) from e
        logger.debug("Stored %d bytes as %s", len(data), stored_name)
        return stored_name

    def read(self, stored_name: str) -> bytes:
        path = self._path(stored_name)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError("Failed to read attachment", detail=str(e)) from e

    def delete(self, stored_name: str):
        path = self._path(stored_name)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError("Failed to delete attachment", detail=str(e)) from e


def get_storage() -> AttachmentStorage:
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "local":
        return LocalDiskStorage(settings.UPLOAD_DIR)
    if backend == "s3":
        from casenotes.utils.s3 import S3Storage
        return S3Storage.from_settings()
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
