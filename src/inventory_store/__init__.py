"""
Inventory Store - A persistent record store for inventory items with photos

Features:
- Durable JSON inventory document with write-through updates
- Photo blobs stored on disk next to the document
- Serialized mutations safe under concurrent requests
- FastAPI server and CLI tools
"""

__version__ = "0.1.0"

from .config import StoreConfig
from .errors import NotFound, StorageError, StoreError, ValidationError
from .models import CleanupWarning, Item, ItemResult, ItemUpdate, SearchResult
from .store import InventoryStore

__all__ = [
    "InventoryStore",
    "StoreConfig",
    "Item",
    "ItemUpdate",
    "ItemResult",
    "CleanupWarning",
    "SearchResult",
    "StoreError",
    "ValidationError",
    "NotFound",
    "StorageError",
]
