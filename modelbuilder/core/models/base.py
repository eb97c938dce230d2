"""Declarative base and shared SQLAlchemy metadata for bridged models.

Descriptors turned into SQLAlchemy tables by :mod:`modelbuilder.core.models.table`
are attached to the :data:`metadata` defined here unless a caller supplies its
own base.  The naming convention keeps constraint and index names predictable
across dialects.
"""

from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

__all__ = [
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "make_base",
]

NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

Base = declarative_base(metadata=metadata)


def make_base():
    """Return a fresh declarative base with its own metadata.

    Useful when the same descriptor has to be mapped more than once, e.g. in
    tests, without clashing table definitions.
    """
    return declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))
