"""
Data models shared by the store and the HTTP layer.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """One inventory record. Instances are never mutated; updates build a copy."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str = ""
    photo: Optional[str] = None  # blob id, None when the item has no photo


class ItemUpdate(BaseModel):
    """
    Partial update of an item.

    A field left as None was not supplied. A field supplied as an empty string
    is treated the same way: the stored value is kept, so a name can never be
    cleared and a description can never be emptied through an update.
    """
    name: Optional[str] = None
    description: Optional[str] = None

    def changes(self) -> dict:
        """Fields that will actually be applied."""
        changes = {}
        # same rule as on insert: a blank name is no name
        if self.name and self.name.strip():
            changes["name"] = self.name
        if self.description:
            changes["description"] = self.description
        return changes


class CleanupWarning(BaseModel):
    """A blob that should have been removed but could not be."""
    blob_id: str
    reason: str


class ItemResult(BaseModel):
    """Outcome of a mutation that may leave an orphaned blob behind."""
    item: Item
    warnings: list[CleanupWarning] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Projected view of an item returned by search."""
    id: int
    name: str
    description: str
    photo_url: Optional[str] = None
