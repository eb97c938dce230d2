"""Pydantic data models describing primary-key shapes.

Attribute descriptors themselves stay plain dictionaries because the external
ORM consumes them as such; only the key helpers go through validation.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

__all__ = [
    "KeyKind",
    "PrimaryKeySpec",
    "new_uuid",
]


class KeyKind(str, enum.Enum):
    """Supported primary-key flavours."""

    UUID = "uuid"
    INTEGER = "integer"


def new_uuid() -> str:
    """Return a fresh random UUID rendered as a string."""
    return str(uuid4())


class PrimaryKeySpec(BaseModel):
    """Validated request for a primary-key attribute."""

    kind: KeyKind = Field(..., description="Generated identifier (uuid) or sequential identifier (integer)")
    auto_increment: Optional[bool] = Field(
        default=None,
        alias="autoIncrement",
        description="Only meaningful for integer keys; None means use the configured default",
    )

    model_config = {"populate_by_name": True, "extra": "forbid", "frozen": True}

    @model_validator(mode="after")
    def check_auto_increment_kind(self) -> "PrimaryKeySpec":
        if self.kind is KeyKind.UUID and self.auto_increment is not None:
            raise ValueError("autoIncrement only applies to integer keys")
        return self

    def to_attribute(self, default_auto_increment: bool = True) -> Dict[str, Any]:
        """Render the attribute descriptor the ORM expects for this key."""

        if self.kind is KeyKind.UUID:
            return {
                "type": "string",
                "unique": True,
                "primaryKey": True,
                "defaultsTo": new_uuid,
            }
        return {
            "type": "integer",
            "unique": True,
            "primaryKey": True,
            "autoIncrement": default_auto_increment if self.auto_increment is None else self.auto_increment,
        }
