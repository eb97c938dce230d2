"""Fluent builder for Sails/Waterline-style model descriptors."""

from modelbuilder.builder import ModelBuilder, create_builder
from modelbuilder.core.attributes import AttributeStore
from modelbuilder.core.lifecycle import Continuation, Lifecycle, LifecycleDispatcher, TriggerState
from modelbuilder.data_models import KeyKind
from modelbuilder.exceptions import (
    LifecycleAbortedError,
    MalformedArgumentError,
    ModelBuilderError,
    PendingContinuationError,
)

__all__ = [
    "AttributeStore",
    "Continuation",
    "KeyKind",
    "Lifecycle",
    "LifecycleAbortedError",
    "LifecycleDispatcher",
    "MalformedArgumentError",
    "ModelBuilder",
    "ModelBuilderError",
    "PendingContinuationError",
    "TriggerState",
    "create_builder",
]
