"""
Error types raised by the inventory store.

ValidationError and NotFound are expected outcomes the caller can act on.
StorageError means the disk could not be read or written.
"""


class StoreError(Exception):
    """Base class for all inventory store errors."""


class ValidationError(StoreError):
    """Bad or missing input, e.g. an empty item name."""


class NotFound(StoreError):
    """Unknown item id, item without a photo, or missing blob file."""


class StorageError(StoreError):
    """The inventory document or blob directory could not be accessed."""
