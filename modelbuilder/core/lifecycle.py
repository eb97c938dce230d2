"""Lifecycle dispatcher wrapping the ORM's before/after callbacks.

The ORM calls each lifecycle as ``fn(instance, continuation)`` and waits for
``continuation`` to be invoked before it proceeds.  The dispatcher installs
one such *trampoline* per lifecycle on the model descriptor.  A trampoline
runs every subscribed handler as ``handler(instance, continuation, assume)``
and, unless a handler adopted the continuation, invokes it once the handlers
have returned.

A handler adopts the continuation either by calling ``assume()`` (promising
to call ``continuation`` later, e.g. after asynchronous work) or simply by
calling ``continuation`` itself.

Example::

    dispatcher = LifecycleDispatcher()

    @dispatcher.subscribe(Lifecycle.BEFORE_CREATE)
    def hash_password(instance, continuation, assume):
        assume()
        hasher.submit(instance["password"], lambda digest: (
            instance.update(password=digest), continuation()))
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from modelbuilder.exceptions import MalformedArgumentError

__all__ = [
    "Lifecycle",
    "TriggerState",
    "Continuation",
    "LifecycleDispatcher",
    "LifecycleHandler",
    "Trampoline",
]

logger = logging.getLogger(__name__)

LifecycleHandler = Callable[[Any, Callable[..., Any], Callable[[], None]], None]
Trampoline = Callable[[Any, Callable[..., Any]], None]


class Lifecycle(str, enum.Enum):
    """Lifecycle callbacks recognised by the ORM; values are the descriptor keys."""

    BEFORE_VALIDATE = "beforeValidate"
    AFTER_VALIDATE = "afterValidate"
    BEFORE_CREATE = "beforeCreate"
    AFTER_CREATE = "afterCreate"
    BEFORE_UPDATE = "beforeUpdate"
    AFTER_UPDATE = "afterUpdate"
    BEFORE_DESTROY = "beforeDestroy"
    AFTER_DESTROY = "afterDestroy"

    @classmethod
    def coerce(cls, name: Union["Lifecycle", str]) -> "Lifecycle":
        try:
            return cls(name)
        except (TypeError, ValueError):
            raise MalformedArgumentError(f"unknown lifecycle {name!r}") from None


class TriggerState(str, enum.Enum):
    """Progress of a single lifecycle trigger."""

    IDLE = "idle"
    HANDLERS_RUNNING = "handlers_running"
    AUTO_COMPLETED = "auto_completed"
    ADOPTED_PENDING = "adopted_pending"
    COMPLETED = "completed"


class Continuation:
    """Continuation cell owned by exactly one trigger.

    Calling the cell adopts it and forwards the call to the ORM's callback.
    With ``guard=True`` only the first call is forwarded; later calls are
    dropped and logged.
    """

    def __init__(self, lifecycle: Lifecycle, callback: Callable[..., Any], *, guard: bool = False) -> None:
        self.lifecycle = lifecycle
        self.adopted = False
        self.calls = 0
        self.state = TriggerState.IDLE
        self.auto_completed = False
        self.history: List[TriggerState] = [TriggerState.IDLE]
        self._callback = callback
        self._guard = guard

    def assume(self) -> None:
        """Declare that a handler will invoke the continuation itself."""
        self.adopted = True

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.assume()
        self.forward(*args, **kwargs)

    @property
    def completed(self) -> bool:
        return self.state is TriggerState.COMPLETED

    def forward(self, *args: Any, **kwargs: Any) -> None:
        """Invoke the ORM callback without adopting the continuation."""
        if self._guard and self.calls:
            logger.warning(
                "Ignoring repeated %s continuation call (%d already forwarded)",
                self.lifecycle.value,
                self.calls,
            )
            return
        self.calls += 1
        # Completion is only recorded once the synchronous handler pass is over.
        if self.state not in (TriggerState.HANDLERS_RUNNING, TriggerState.COMPLETED):
            self.enter(TriggerState.COMPLETED)
        self._callback(*args, **kwargs)

    def enter(self, state: TriggerState) -> None:
        self.state = state
        self.history.append(state)

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Continuation lifecycle={self.lifecycle.value} state={self.state.value} "
            f"adopted={self.adopted} calls={self.calls}>"
        )


class LifecycleDispatcher:
    """Per-builder registry of lifecycle handlers.

    Parameters
    guard_continuation
        Drop second and later continuation calls within one trigger instead
        of forwarding them to the ORM.
    """

    def __init__(self, *, guard_continuation: bool = False) -> None:
        self.guard_continuation = guard_continuation
        self._handlers: Dict[Lifecycle, List[LifecycleHandler]] = {lifecycle: [] for lifecycle in Lifecycle}

    def subscribe(
        self,
        name: Union[Lifecycle, str],
        handler: Optional[LifecycleHandler] = None,
    ) -> Union[LifecycleHandler, Callable[[LifecycleHandler], LifecycleHandler]]:
        """Subscribe ``handler`` to a lifecycle.

        Can be called directly or used as a decorator::

            @dispatcher.subscribe("beforeCreate")
            def handler(instance, continuation, assume):
                ...
        """
        lifecycle = Lifecycle.coerce(name)

        def decorator(fn: LifecycleHandler) -> LifecycleHandler:
            if not callable(fn):
                raise MalformedArgumentError(f"lifecycle handlers must be callable, got {fn!r}")
            self._handlers[lifecycle].append(fn)
            logger.debug("Subscribed %s -> %s", lifecycle.value, getattr(fn, "__name__", fn))
            return fn

        if handler is not None:
            return decorator(handler)
        return decorator

    def unsubscribe(self, name: Union[Lifecycle, str], handler: LifecycleHandler) -> None:
        """Remove ``handler`` from a lifecycle; unknown handlers are ignored."""
        lifecycle = Lifecycle.coerce(name)
        try:
            self._handlers[lifecycle].remove(handler)
            logger.debug("Unsubscribed %s -> %s", lifecycle.value, getattr(handler, "__name__", handler))
        except ValueError:
            pass

    def has_subscribers(self, name: Union[Lifecycle, str]) -> bool:
        return bool(self._handlers[Lifecycle.coerce(name)])

    def handlers(self, name: Union[Lifecycle, str]) -> Tuple[LifecycleHandler, ...]:
        return tuple(self._handlers[Lifecycle.coerce(name)])

    def dispatch(self, name: Union[Lifecycle, str], instance: Any, continuation: Callable[..., Any]) -> Continuation:
        """Run the handlers for one lifecycle invocation and return its continuation cell."""
        lifecycle = Lifecycle.coerce(name)
        cell = Continuation(lifecycle, continuation, guard=self.guard_continuation)

        # Snapshot so handlers unsubscribing themselves do not shift the iteration.
        handlers = list(self._handlers[lifecycle])
        if not handlers:
            self._auto_complete(cell)
            return cell

        cell.enter(TriggerState.HANDLERS_RUNNING)
        for handler in handlers:
            handler(instance, cell, cell.assume)

        if not cell.adopted:
            self._auto_complete(cell)
        elif cell.calls:
            cell.enter(TriggerState.COMPLETED)
        else:
            cell.enter(TriggerState.ADOPTED_PENDING)

        logger.debug(
            "%s dispatched to %d handler(s): %s", lifecycle.value, len(handlers), cell.state.value
        )
        return cell

    @staticmethod
    def _auto_complete(cell: Continuation) -> None:
        cell.auto_completed = True
        cell.enter(TriggerState.AUTO_COMPLETED)
        cell.forward()

    def trigger(
        self,
        name: Union[Lifecycle, str],
        instance: Any,
        continuation: Optional[Callable[..., Any]] = None,
    ) -> Continuation:
        """Fire a lifecycle without the ORM; ``continuation`` defaults to a no-op."""
        return self.dispatch(name, instance, continuation or (lambda *args, **kwargs: None))

    def trampoline(self, name: Union[Lifecycle, str]) -> Trampoline:
        """Return the ``(instance, continuation)`` function the ORM expects for a lifecycle."""
        lifecycle = Lifecycle.coerce(name)

        def trampoline(instance: Any, continuation: Callable[..., Any]) -> None:
            self.dispatch(lifecycle, instance, continuation)

        trampoline.__name__ = trampoline.__qualname__ = lifecycle.value
        return trampoline

    def install_trampoline(self, descriptor: Dict[str, Any], name: Union[Lifecycle, str]) -> None:
        lifecycle = Lifecycle.coerce(name)
        descriptor[lifecycle.value] = self.trampoline(lifecycle)

    def install_all(self, descriptor: Dict[str, Any]) -> None:
        """Install a trampoline for every lifecycle onto ``descriptor``."""
        for lifecycle in Lifecycle:
            self.install_trampoline(descriptor, lifecycle)
