"""Base model with common configuration for all documents."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json_bytes(self) -> bytes:
        """Compact JSON encoding, as signed and uploaded."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False).encode(
            "utf-8"
        )
