"""Centralised builder configuration powered by *pydantic-settings*.

The :class:`Settings` object provides a typed view over environment variables
prefixed with ``MODELBUILDER_``.  A singleton instance can be obtained via
:func:`get_settings` which caches the loaded values for the process lifetime.

Example environment variables recognised::

    MODELBUILDER_KEY_ATTRIBUTE=id
    MODELBUILDER_DEFAULT_AUTO_INCREMENT=false
    MODELBUILDER_GUARD_CONTINUATION=true

When no env vars are set the builder behaves exactly like the Sails model
builder it mirrors: an ``id`` key, auto-incrementing integer keys and no guard
against repeated continuation calls.
"""

from __future__ import annotations

import functools

from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "Settings",
    "get_settings",
]


class Settings(BaseSettings):
    """Builder configuration loaded from the OS environment or .env file."""

    key_attribute: str = "id"
    default_auto_increment: bool = True
    guard_continuation: bool = False

    model_config = SettingsConfigDict(
        env_prefix="MODELBUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton :class:`Settings` instance for the process."""
    return Settings()  # type: ignore[call-arg]
