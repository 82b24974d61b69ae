"""Upload cache for bundlectl.

Records which asset keys have already been reported as uploaded, so an
interrupted run can resume with only the remaining pairs, and journals every
unit the network has accepted.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from bundlectl.core.exceptions import ConfigurationError
from bundlectl.models.progress import BatchResult

# =============================================================================
# Constants
# =============================================================================

CACHE_FILENAME = ".bundlectl-cache.json"
CACHE_VERSION = 1


def default_cache_path(assets_dir: Path) -> Path:
    """Cache file next to the assets directory."""
    resolved = assets_dir.expanduser().resolve()
    return resolved.parent / f"{resolved.name}{CACHE_FILENAME}"


# =============================================================================
# Cached Item
# =============================================================================


@dataclass
class CachedItem:
    """An uploaded asset pair."""

    link: str
    image: str
    name: str = ""
    uploaded_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "link": self.link,
            "image": self.image,
            "name": self.name,
            "uploaded_at": self.uploaded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CachedItem:
        """Create from dictionary."""
        return cls(
            link=data["link"],
            image=data.get("image", ""),
            name=data.get("name", ""),
            uploaded_at=(
                datetime.fromisoformat(data["uploaded_at"])
                if data.get("uploaded_at")
                else datetime.now()
            ),
        )


# =============================================================================
# UploadCache
# =============================================================================


class UploadCache:
    """JSON-file record of reported keys and submitted units."""

    def __init__(self, cache_file: Path):
        """Initialize cache.

        Args:
            cache_file: Path to the cache file. Created on first save.
        """
        self.cache_file = cache_file
        self.items: dict[str, CachedItem] = {}
        self.submitted_units: dict[str, str] = {}

    @classmethod
    def load(cls, cache_file: Path) -> UploadCache:
        """Load a cache file, or start empty if it does not exist.

        Raises:
            ConfigurationError: If the file exists but cannot be parsed.
        """
        cache = cls(cache_file)
        if not cache_file.exists():
            return cache

        try:
            with open(cache_file) as f:
                data = json.load(f)
            cache.items = {
                key: CachedItem.from_dict(item) for key, item in data.get("items", {}).items()
            }
            cache.submitted_units = dict(data.get("submitted_units", {}))
        except (OSError, json.JSONDecodeError, KeyError, ValueError, AttributeError) as e:
            raise ConfigurationError(
                f"Failed to load upload cache: {e}", field="cache", value=str(cache_file)
            ) from e
        return cache

    def save(self) -> None:
        """Write the cache atomically."""
        self.cache_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": CACHE_VERSION,
            "items": {key: item.to_dict() for key, item in self.items.items()},
            "submitted_units": self.submitted_units,
        }
        tmp_file = self.cache_file.with_name(self.cache_file.name + ".tmp")
        with open(tmp_file, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_file, self.cache_file)

    # =========================================================================
    # Records
    # =========================================================================

    def has(self, key: str) -> bool:
        """Check if a key was already reported."""
        return key in self.items

    def record_batch(self, result: BatchResult) -> None:
        """Store every pair of a reported batch."""
        for key, link, metadata in zip(
            result.keys, result.link_uris, result.updated_metadata, strict=True
        ):
            name = getattr(metadata, "name", "") or ""
            self.items[key] = CachedItem(link=link, image=metadata.image, name=str(name))

    def record_unit(self, unit_id: str, tx_id: str) -> None:
        """Journal a unit accepted by the network, and persist immediately."""
        self.submitted_units[unit_id] = tx_id
        self.save()

    def summary(self) -> dict[str, Any]:
        """Counts for display."""
        return {
            "cache_file": str(self.cache_file),
            "uploaded_pairs": len(self.items),
            "submitted_units": len(self.submitted_units),
        }
