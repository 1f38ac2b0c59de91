"""
Persistence gate for the inventory document.

All mutations of the item table go through ``with_exclusive_access``: one
mutation at a time runs against a private copy of the current snapshot, the
whole document is written to disk, and only then is the copy published as the
new snapshot. Readers use ``snapshot`` without locking and always see a fully
persisted state.
"""
import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar, Union

from .errors import StorageError
from .table import RecordTable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def save_json(data: Any, output_file: Path) -> None:
    """
    Atomically replace ``output_file`` with ``data`` as JSON.

    The document is written to a temporary file in the same directory, flushed
    to disk and renamed over the target, so a crash or a concurrent reader
    never sees a half-written file.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{output_file.name}.", suffix=".tmp", dir=output_file.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, output_file)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def load_json(json_file: Path) -> Any:
    """Load a JSON document."""
    with open(json_file, 'r', encoding='utf-8') as f:
        return json.load(f)


class PersistenceGate:
    """Owns the inventory document, its in-memory snapshot and the id counter."""

    def __init__(self, document_path: Path):
        self.document_path = Path(document_path)
        self._lock = asyncio.Lock()
        self._snapshot = RecordTable()

    @property
    def snapshot(self) -> RecordTable:
        """Most recently persisted table. Treat as read-only."""
        return self._snapshot

    async def open(self) -> RecordTable:
        """Load the document from disk, creating an empty one if it doesn't exist."""
        async with self._lock:
            self._snapshot = await asyncio.to_thread(self._load_or_create)
        logger.info(
            f"Loaded inventory from {self.document_path}: "
            f"{len(self._snapshot)} items, next id {self._snapshot.next_id}"
        )
        return self._snapshot

    async def with_exclusive_access(
        self, operation: Callable[[RecordTable], Union[T, Awaitable[T]]]
    ) -> T:
        """
        Run ``operation`` on a copy of the table and persist the result.

        Only one operation runs at a time. If the operation raises, nothing is
        written and the snapshot is left as it was. If writing the document
        fails, StorageError is raised and the snapshot is also left as it was.

        Args:
            operation: called with the private table copy; may be a coroutine function

        Returns:
            Whatever ``operation`` returned
        """
        async with self._lock:
            table = self._snapshot.copy()
            result = operation(table)
            if asyncio.iscoroutine(result):
                result = await result
            try:
                await asyncio.to_thread(save_json, table.to_document(), self.document_path)
            except OSError as e:
                raise StorageError(f"Failed to write {self.document_path}: {e}") from e
            self._snapshot = table
            return result

    def _load_or_create(self) -> RecordTable:
        try:
            self.document_path.parent.mkdir(parents=True, exist_ok=True)
            if not self.document_path.exists():
                table = RecordTable()
                save_json(table.to_document(), self.document_path)
                logger.info(f"Created empty inventory document {self.document_path}")
                return table
            data = load_json(self.document_path)
        except ValueError as e:
            raise StorageError(f"{self.document_path} is not valid JSON: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {self.document_path}: {e}") from e
        return RecordTable.from_document(data)
