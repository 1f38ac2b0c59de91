"""
Inventory store facade.

Combines the persistence gate and the blob store into the item lifecycle
operations used by the HTTP layer. Photos are written before the item table
is touched and old photos are removed only after the change is persisted, so
an item never references a blob that isn't on disk.
"""
import asyncio
import logging
import mimetypes
from typing import List, Optional, Tuple

from .blobs import BlobStore
from .config import StoreConfig
from .errors import NotFound, StorageError, StoreError, ValidationError
from .gate import PersistenceGate
from .models import CleanupWarning, Item, ItemResult, ItemUpdate, SearchResult

logger = logging.getLogger(__name__)

PHOTO_MARKER = " [photo]"


def photo_media_type(blob_id: str) -> str:
    """Guess the content type of a photo from its blob id extension."""
    media_type, _ = mimetypes.guess_type(blob_id)
    return media_type or "application/octet-stream"


class InventoryStore:
    """Persistent store of inventory items and their photos."""

    def __init__(self, config: StoreConfig):
        self.config = config
        self.gate = PersistenceGate(config.document_path)
        self.blobs = BlobStore(config.blob_dir)

    async def open(self) -> "InventoryStore":
        """Create the cache layout if needed and load the inventory document."""
        await asyncio.to_thread(self.blobs.ensure_dir)
        await self.gate.open()
        return self

    async def register(
        self,
        name: str,
        description: str = "",
        photo: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> Item:
        """Create a new item, storing its photo first when one is given."""
        if not name or not name.strip():
            raise ValidationError("Item name is required")

        blob_id = await self.blobs.put(photo, filename) if photo else None
        try:
            item = await self.gate.with_exclusive_access(
                lambda table: table.insert(name, description, photo=blob_id)
            )
        except StoreError:
            if blob_id:
                await self._cleanup(blob_id)
            raise

        logger.info(f"Registered item {item.id}: {item.name}")
        return item

    def get(self, item_id: int) -> Item:
        return self.gate.snapshot.get(item_id)

    def list(self) -> List[Item]:
        return self.gate.snapshot.list()

    async def update(self, item_id: int, fields: ItemUpdate) -> Item:
        """Apply the non-empty fields of ``fields`` to an item."""
        item = await self.gate.with_exclusive_access(lambda table: table.update(item_id, fields))
        logger.info(f"Updated item {item_id}")
        return item

    async def delete(self, item_id: int) -> ItemResult:
        """Remove an item and its photo."""
        item = await self.gate.with_exclusive_access(lambda table: table.remove(item_id))
        warnings = await self._cleanup(item.photo)
        logger.info(f"Deleted item {item_id}")
        return ItemResult(item=item, warnings=warnings)

    async def set_photo(self, item_id: int, data: Optional[bytes], filename: Optional[str] = None) -> ItemResult:
        """
        Replace the photo of an item.

        The new photo is stored before the item is updated. If the update
        fails the new photo is removed again; if it succeeds the previous
        photo is removed. A previous photo that cannot be removed is reported
        in the result's warnings instead of failing the call.
        """
        if not data:
            raise ValidationError("Photo payload is required")
        # Fail fast for unknown ids; the gate checks again under the lock
        self.get(item_id)

        blob_id = await self.blobs.put(data, filename)
        try:
            item, old_blob_id = await self.gate.with_exclusive_access(
                lambda table: table.set_photo(item_id, blob_id)
            )
        except StoreError:
            await self._cleanup(blob_id)
            raise

        warnings = await self._cleanup(old_blob_id)
        logger.info(f"Set photo of item {item_id} to {blob_id}")
        return ItemResult(item=item, warnings=warnings)

    async def get_photo(self, item_id: int) -> Tuple[bytes, str]:
        """
        Read the photo of an item.

        Returns the photo bytes and their media type, both taken from the same
        photo reference. If the photo is replaced while it is being read, the
        old blob may already be gone; the read then follows the new reference.
        """
        item = self.get(item_id)
        while True:
            if not item.photo:
                raise NotFound(f"Item {item_id} has no photo")
            try:
                content = await self.blobs.get(item.photo)
            except NotFound:
                current = self.get(item_id)
                if current.photo == item.photo:
                    raise
                item = current
                continue
            return content, photo_media_type(item.photo)

    def search(self, item_id: int, include_photo: bool = False) -> SearchResult:
        """Look up an item by id and return its public view."""
        item = self.get(item_id)
        description = item.description
        photo_url = None
        if include_photo and item.photo:
            description += PHOTO_MARKER
            photo_url = f"/inventory/{item.id}/photo"
        return SearchResult(id=item.id, name=item.name, description=description, photo_url=photo_url)

    async def _cleanup(self, blob_id: Optional[str]) -> List[CleanupWarning]:
        """Remove a blob that is no longer referenced."""
        if not blob_id:
            return []
        try:
            await self.blobs.delete(blob_id)
        except StorageError as e:
            logger.warning(f"Could not remove orphaned photo {blob_id}: {e}")
            return [CleanupWarning(blob_id=blob_id, reason=str(e))]
        return []
