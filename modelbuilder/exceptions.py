"""Exception types raised by the model builder and its SQLAlchemy bridge."""

from __future__ import annotations

from typing import Any

__all__ = [
    "ModelBuilderError",
    "MalformedArgumentError",
    "LifecycleAbortedError",
    "PendingContinuationError",
]


class ModelBuilderError(Exception):
    """Base class for every error raised by :mod:`modelbuilder`."""


class MalformedArgumentError(ModelBuilderError, ValueError):
    """An operation received an argument of the wrong shape."""


class LifecycleAbortedError(ModelBuilderError):
    """A lifecycle continuation was invoked with an error value.

    The reported value is kept on :attr:`reason` so callers can inspect what
    the handler reported.
    """

    def __init__(self, lifecycle: str, reason: Any) -> None:
        super().__init__(f"{lifecycle} aborted: {reason}")
        self.lifecycle = lifecycle
        self.reason = reason


class PendingContinuationError(ModelBuilderError):
    """A handler adopted a continuation but had not invoked it in time."""

    def __init__(self, lifecycle: str) -> None:
        super().__init__(
            f"{lifecycle} continuation was adopted but not invoked before the ORM event returned"
        )
        self.lifecycle = lifecycle
