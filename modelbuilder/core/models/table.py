"""Translate model descriptors into SQLAlchemy tables and declarative classes."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, MetaData, String, Table, Text

from modelbuilder.exceptions import MalformedArgumentError

from .base import Base
from .events import bind_lifecycle_events

__all__ = [
    "build_table",
    "declare_model",
]

logger = logging.getLogger(__name__)

_COLUMN_TYPES = {
    "string": String,
    "text": Text,
    "integer": Integer,
    "float": Float,
    "boolean": Boolean,
    "date": Date,
    "datetime": DateTime,
    "json": JSON,
}


def _column(name: str, attribute: Dict[str, Any]) -> Column:
    type_name = attribute.get("type", "string")
    try:
        column_type = _COLUMN_TYPES[type_name]
    except KeyError:
        raise MalformedArgumentError(f"attribute {name!r} has unsupported type {type_name!r}") from None

    if type_name == "string" and attribute.get("maxLength"):
        column_type = String(length=attribute["maxLength"])
    elif type_name == "datetime":
        column_type = DateTime(timezone=True)

    primary_key = bool(attribute.get("primaryKey"))
    kwargs: Dict[str, Any] = {
        "primary_key": primary_key,
        "unique": bool(attribute.get("unique")) and not primary_key,
        "nullable": not (primary_key or attribute.get("required")),
    }
    if "autoIncrement" in attribute:
        kwargs["autoincrement"] = bool(attribute["autoIncrement"])
    if "defaultsTo" in attribute:
        kwargs["default"] = attribute["defaultsTo"]
    return Column(name, column_type, **kwargs)


def build_table(table_name: str, descriptor: Dict[str, Any], metadata: MetaData) -> Table:
    """Build a :class:`~sqlalchemy.Table` with one column per field attribute.

    Callable attributes are instance methods and get no column.
    """
    columns = [
        _column(name, attribute)
        for name, attribute in descriptor.get("attributes", {}).items()
        if not callable(attribute)
    ]
    if not columns:
        raise MalformedArgumentError(f"model {table_name!r} has no field attributes")
    logger.debug("Built table %s with columns %s", table_name, [c.name for c in columns])
    return Table(table_name, metadata, *columns)


def declare_model(
    class_name: str,
    descriptor: Dict[str, Any],
    base: Optional[Any] = None,
    table_name: Optional[str] = None,
) -> type:
    """Create a declarative class for ``descriptor`` with its lifecycles bound.

    Callable attributes become methods of the generated class.
    """
    base = base if base is not None else Base
    table = build_table(table_name or class_name.lower(), descriptor, base.metadata)

    namespace: Dict[str, Any] = {"__table__": table}
    for name, attribute in descriptor["attributes"].items():
        if callable(attribute):
            namespace[name] = attribute

    mapped = type(class_name, (base,), namespace)
    bind_lifecycle_events(mapped, descriptor)
    return mapped
