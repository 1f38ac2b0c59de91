"""
File-backed photo storage.

Each blob is a single file in the blob directory, named by its blob id.
Blob ids are random, so a blob is written exactly once and never overwritten.
Disk I/O runs in a worker thread so callers only suspend on it.
"""
import asyncio
import logging
import uuid
from pathlib import Path
from typing import Optional

from .errors import NotFound, StorageError

logger = logging.getLogger(__name__)


def new_blob_id(filename: Optional[str] = None) -> str:
    """Generate a fresh blob id, keeping the extension of the uploaded file name."""
    blob_id = uuid.uuid4().hex
    if filename:
        suffix = Path(filename).suffix.lower()
        if 1 < len(suffix) <= 10 and suffix[1:].isalnum():
            blob_id += suffix
    return blob_id


class BlobStore:
    """Maps blob ids to files under ``root``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def ensure_dir(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create blob directory {self.root}: {e}") from e

    def path_for(self, blob_id: str) -> Optional[Path]:
        """Path of a blob, or None if the id could point outside the blob directory."""
        if not blob_id or blob_id.startswith('.') or Path(blob_id).name != blob_id:
            return None
        if '/' in blob_id or '\\' in blob_id:
            return None
        return self.root / blob_id

    async def put(self, data: bytes, filename: Optional[str] = None) -> str:
        """Store ``data`` under a fresh blob id and return the id."""
        blob_id = new_blob_id(filename)
        await asyncio.to_thread(self._write_new, self.root / blob_id, data)
        logger.debug(f"Stored blob {blob_id} ({len(data)} bytes)")
        return blob_id

    async def get(self, blob_id: str) -> bytes:
        path = self.path_for(blob_id)
        if path is None:
            raise NotFound(f"Blob {blob_id!r} not found")
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise NotFound(f"Blob {blob_id!r} not found") from None
        except OSError as e:
            raise StorageError(f"Failed to read blob {blob_id}: {e}") from e

    async def delete(self, blob_id: str) -> None:
        """Remove a blob. Deleting a blob that is already gone is not an error."""
        path = self.path_for(blob_id)
        if path is None:
            return
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Failed to delete blob {blob_id}: {e}") from e
        logger.debug(f"Deleted blob {blob_id}")

    @staticmethod
    def _write_new(path: Path, data: bytes) -> None:
        try:
            with open(path, 'xb') as f:
                f.write(data)
        except FileExistsError as e:
            raise StorageError(f"Blob {path.name} already exists") from e
        except OSError as e:
            # Don't leave a truncated blob behind
            path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write blob {path.name}: {e}") from e
