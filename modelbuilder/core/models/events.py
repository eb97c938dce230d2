"""Drive descriptor lifecycles from SQLAlchemy mapper events.

SQLAlchemy fires its mapper events synchronously inside ``Session.flush``;
the continuation handed to each trampoline must therefore have been invoked
by the time the trampoline returns.  An adopted continuation that is still
pending at that point raises :class:`PendingContinuationError`, and a
continuation invoked with an error value raises
:class:`LifecycleAbortedError`, which aborts the flush.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Tuple

from sqlalchemy import event

from modelbuilder.core.lifecycle import Lifecycle
from modelbuilder.exceptions import LifecycleAbortedError, PendingContinuationError

__all__ = [
    "MAPPER_EVENTS",
    "bind_lifecycle_events",
    "run_lifecycle",
]

logger = logging.getLogger(__name__)

MAPPER_EVENTS: Dict[str, Tuple[Lifecycle, ...]] = {
    "before_insert": (Lifecycle.BEFORE_VALIDATE, Lifecycle.AFTER_VALIDATE, Lifecycle.BEFORE_CREATE),
    "after_insert": (Lifecycle.AFTER_CREATE,),
    "before_update": (Lifecycle.BEFORE_VALIDATE, Lifecycle.AFTER_VALIDATE, Lifecycle.BEFORE_UPDATE),
    "after_update": (Lifecycle.AFTER_UPDATE,),
    "before_delete": (Lifecycle.BEFORE_DESTROY,),
    "after_delete": (Lifecycle.AFTER_DESTROY,),
}


def run_lifecycle(descriptor: Dict[str, Any], lifecycle: Lifecycle, instance: Any) -> None:
    """Invoke one lifecycle of ``descriptor`` and wait for its continuation synchronously."""
    trampoline = descriptor.get(lifecycle.value)
    if trampoline is None:
        return

    calls: List[Tuple[Any, ...]] = []

    def continuation(*args: Any) -> None:
        calls.append(args)

    trampoline(instance, continuation)

    if not calls:
        raise PendingContinuationError(lifecycle.value)
    if calls[0] and calls[0][0] is not None:
        logger.info("%s aborted for %r: %s", lifecycle.value, instance, calls[0][0])
        raise LifecycleAbortedError(lifecycle.value, calls[0][0])


def _listener(descriptor: Dict[str, Any], lifecycles: Tuple[Lifecycle, ...]) -> Callable[..., None]:
    def listener(mapper: Any, connection: Any, target: Any) -> None:
        for lifecycle in lifecycles:
            run_lifecycle(descriptor, lifecycle, target)

    return listener


def bind_lifecycle_events(mapped_class: type, descriptor: Dict[str, Any]) -> List[Tuple[str, Callable[..., None]]]:
    """Listen on the mapper events of ``mapped_class`` and forward them to ``descriptor``.

    Returns the ``(event name, listener)`` pairs so callers can remove them
    with :func:`sqlalchemy.event.remove`.
    """
    bound = []
    for event_name, lifecycles in MAPPER_EVENTS.items():
        listener = _listener(descriptor, lifecycles)
        event.listen(mapped_class, event_name, listener)
        bound.append((event_name, listener))
    logger.debug("Bound lifecycle events for %s", mapped_class.__name__)
    return bound
