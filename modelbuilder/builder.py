"""Fluent builder producing model descriptors for a Sails/Waterline-style ORM.

Typical usage inside a model module::

    from modelbuilder import create_builder

    (
        create_builder()
        .uuid_key()
        .attr({"email": {"type": "string", "unique": True}})
        .attr(["firstName", "lastName"], {"type": "string", "maxLength": 45})
        .mark_required()
        .before_create(hash_password)
        .export(__name__)
    )

Every mutator returns the builder so the whole model reads as one chain.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from types import ModuleType
from typing import Any, Callable, Optional, Union

from modelbuilder.core.attributes import AttributeNames, AttributeStore, ModelDescriptor
from modelbuilder.core.lifecycle import Lifecycle, LifecycleDispatcher, LifecycleHandler
from modelbuilder.data_models import KeyKind
from modelbuilder.exceptions import MalformedArgumentError
from modelbuilder.settings import Settings, get_settings

__all__ = [
    "ModelBuilder",
    "create_builder",
]

logger = logging.getLogger(__name__)


def _shortcut(lifecycle: Lifecycle) -> Callable[["ModelBuilder", LifecycleHandler], "ModelBuilder"]:
    def subscribe(self: "ModelBuilder", handler: LifecycleHandler) -> "ModelBuilder":
        return self.on(lifecycle, handler)

    subscribe.__doc__ = f"Subscribe ``handler`` to ``{lifecycle.value}``."
    return subscribe


class ModelBuilder:
    """Builds one model descriptor and owns its lifecycle handlers."""

    def __init__(self, model: Optional[ModelDescriptor] = None, *, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.store = AttributeStore(settings=self.settings)
        self.events = LifecycleDispatcher(guard_continuation=self.settings.guard_continuation)
        self.set_model(model if model is not None else self.store.model)

    @property
    def model(self) -> ModelDescriptor:
        return self.store.model

    def set_model(self, descriptor: ModelDescriptor) -> "ModelBuilder":
        """Adopt ``descriptor`` as the working model and wire its lifecycles."""
        self.store.set_model(descriptor)
        self.events.install_all(self.store.model)
        return self

    # -- keys ---------------------------------------------------------------

    def set_key(self, kind: Union[KeyKind, str], auto_increment: Optional[bool] = None) -> "ModelBuilder":
        self.store.set_key(kind, auto_increment)
        return self

    def uuid_key(self) -> "ModelBuilder":
        self.store.uuid_key()
        return self

    def int_key(self, auto_increment: Optional[bool] = None) -> "ModelBuilder":
        self.store.int_key(auto_increment)
        return self

    # -- attributes -----------------------------------------------------------

    def set_attribute(self, *args: Any) -> "ModelBuilder":
        """See :meth:`AttributeStore.set_attribute` for the accepted shapes."""
        self.store.set_attribute(*args)
        return self

    attr = set_attribute

    def merge_attribute_map(self, attributes: Mapping) -> "ModelBuilder":
        self.store.merge_attribute_map(attributes)
        return self

    def set_attribute_property(self, name: str, key: str, value: Any) -> "ModelBuilder":
        self.store.set_attribute_property(name, key, value)
        return self

    def merge_shared_properties(self, names: AttributeNames, properties: Mapping) -> "ModelBuilder":
        self.store.merge_shared_properties(names, properties)
        return self

    def remove_attribute(self, name: str) -> "ModelBuilder":
        self.store.remove_attribute(name)
        return self

    def mark_required(self, *names: Any) -> "ModelBuilder":
        self.store.mark_required(*names)
        return self

    # -- lifecycle events -----------------------------------------------------

    def on(self, name: Union[Lifecycle, str], handler: LifecycleHandler) -> "ModelBuilder":
        self.events.subscribe(name, handler)
        return self

    def off(self, name: Union[Lifecycle, str], handler: LifecycleHandler) -> "ModelBuilder":
        self.events.unsubscribe(name, handler)
        return self

    subscribe = on
    unsubscribe = off

    def trigger(
        self,
        name: Union[Lifecycle, str],
        instance: Any,
        continuation: Optional[Callable[..., Any]] = None,
    ) -> "ModelBuilder":
        """Fire a lifecycle's handlers directly, outside of the ORM."""
        self.events.trigger(name, instance, continuation)
        return self

    before_validate = _shortcut(Lifecycle.BEFORE_VALIDATE)
    after_validate = _shortcut(Lifecycle.AFTER_VALIDATE)
    before_create = _shortcut(Lifecycle.BEFORE_CREATE)
    after_create = _shortcut(Lifecycle.AFTER_CREATE)
    before_update = _shortcut(Lifecycle.BEFORE_UPDATE)
    after_update = _shortcut(Lifecycle.AFTER_UPDATE)
    before_destroy = _shortcut(Lifecycle.BEFORE_DESTROY)
    after_destroy = _shortcut(Lifecycle.AFTER_DESTROY)

    # -- export -------------------------------------------------------------

    def export(self, target: Union[ModuleType, str, Any], name: str = "model") -> "ModelBuilder":
        """Publish the descriptor as ``target.<name>``.

        ``target`` is a module, a module name (usually ``__name__``) or any
        object accepting attribute assignment.
        """
        if isinstance(target, str):
            module = sys.modules.get(target)
            if module is None:
                raise MalformedArgumentError(f"module {target!r} is not loaded")
            target = module
        setattr(target, name, self.model)
        logger.debug("Exported model descriptor as %s.%s", getattr(target, "__name__", target), name)
        return self


def create_builder(model: Optional[ModelDescriptor] = None, settings: Optional[Settings] = None) -> ModelBuilder:
    """Return a new :class:`ModelBuilder`, optionally around an existing descriptor."""
    return ModelBuilder(model, settings=settings)
