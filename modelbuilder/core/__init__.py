"""Core components: the attribute store and the lifecycle dispatcher."""

from .attributes import AttributeStore  # noqa: F401
from .lifecycle import Continuation, Lifecycle, LifecycleDispatcher, TriggerState  # noqa: F401
