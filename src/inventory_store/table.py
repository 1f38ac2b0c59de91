"""
In-memory item table.

The table holds the full item collection in insertion order together with the
id counter. It knows nothing about disk or locking; the persistence gate hands
it a private copy for every mutation and persists the result.
"""
from typing import Any, Dict, List, Optional, Tuple

import pydantic

from .errors import NotFound, StorageError, ValidationError
from .models import Item, ItemUpdate


class RecordTable:
    """Ordered collection of items keyed by id."""

    def __init__(self, items: Optional[List[Item]] = None, next_id: int = 1):
        # dicts keep insertion order, which is the listing order
        self._items: dict[int, Item] = {}
        for item in items or []:
            if item.id in self._items:
                raise StorageError(f"Duplicate item id {item.id} in inventory document")
            self._items[item.id] = item
        highest = max(self._items, default=0)
        self.next_id = max(next_id, highest + 1, 1)

    def __len__(self) -> int:
        return len(self._items)

    def copy(self) -> "RecordTable":
        # Items are frozen, so sharing them between copies is safe
        table = RecordTable.__new__(RecordTable)
        table._items = dict(self._items)
        table.next_id = self.next_id
        return table

    def insert(self, name: str, description: str = "", photo: Optional[str] = None) -> Item:
        if not name or not name.strip():
            raise ValidationError("Item name is required")
        item = Item(id=self.next_id, name=name, description=description or "", photo=photo)
        self._items[item.id] = item
        self.next_id += 1
        return item

    def get(self, item_id: int) -> Item:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFound(f"Item {item_id} not found") from None

    def list(self) -> List[Item]:
        return list(self._items.values())

    def update(self, item_id: int, fields: ItemUpdate) -> Item:
        item = self.get(item_id)
        changes = fields.changes()
        if changes:
            item = item.model_copy(update=changes)
            self._items[item_id] = item
        return item

    def set_photo(self, item_id: int, blob_id: Optional[str]) -> Tuple[Item, Optional[str]]:
        """Swap the photo reference. Returns the updated item and the previous blob id."""
        item = self.get(item_id)
        old_blob_id = item.photo
        item = item.model_copy(update={"photo": blob_id})
        self._items[item_id] = item
        return item, old_blob_id

    def remove(self, item_id: int) -> Item:
        item = self.get(item_id)
        del self._items[item_id]
        return item

    def to_document(self) -> Dict[str, Any]:
        return {
            "next_id": self.next_id,
            "items": [item.model_dump() for item in self._items.values()],
        }

    @classmethod
    def from_document(cls, data: Any) -> "RecordTable":
        """
        Build a table from a loaded inventory document.

        Accepts the ``{"next_id": ..., "items": [...]}`` layout as well as a
        bare list of items. The id counter never goes below the highest
        stored id + 1.

        Raises:
            StorageError: if the document is not a valid inventory
        """
        if isinstance(data, list):
            raw_items, next_id = data, 1
        elif isinstance(data, dict):
            raw_items = data.get("items", [])
            next_id = data.get("next_id", 1)
        else:
            raise StorageError("Inventory document must be a JSON object or list")

        if not isinstance(raw_items, list) or type(next_id) is not int:
            raise StorageError("Inventory document is malformed")

        try:
            items = [Item.model_validate(raw, strict=True) for raw in raw_items]
        except pydantic.ValidationError as e:
            raise StorageError(f"Invalid item in inventory document: {e}") from e

        for item in items:
            if item.id <= 0:
                raise StorageError(f"Invalid item id {item.id} in inventory document")
            if not item.name.strip():
                raise StorageError(f"Item {item.id} in inventory document has no name")

        return cls(items, next_id=next_id)
