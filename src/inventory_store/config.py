"""
Store configuration.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_CACHE_DIR = "cache"


@dataclass(frozen=True)
class StoreConfig:
    """Where the inventory document and the photo blobs live."""
    cache_dir: Path
    document_name: str = "inventory.json"
    blob_dirname: str = "photos"

    @property
    def document_path(self) -> Path:
        return self.cache_dir / self.document_name

    @property
    def blob_dir(self) -> Path:
        return self.cache_dir / self.blob_dirname

    @classmethod
    def from_env(cls, cache_dir: Optional[Path] = None) -> "StoreConfig":
        """Build a config, falling back to INVENTORY_CACHE_DIR and then ./cache."""
        if cache_dir is None:
            cache_dir = Path(os.environ.get("INVENTORY_CACHE_DIR", DEFAULT_CACHE_DIR))
        return cls(cache_dir=Path(cache_dir).resolve())
