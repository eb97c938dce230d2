"""Attribute store holding the model descriptor under construction.

The descriptor is a plain ``dict`` with an ``attributes`` mapping from
attribute name to attribute descriptor.  An attribute descriptor is itself a
``dict`` of properties (``type``, ``required``, ``maxLength`` ...) unless the
attribute is a callable, which the ORM treats as an instance method.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from modelbuilder.data_models import KeyKind, PrimaryKeySpec
from modelbuilder.exceptions import MalformedArgumentError
from modelbuilder.settings import Settings, get_settings

__all__ = [
    "AttributeStore",
    "ModelDescriptor",
    "AttributeNames",
]

logger = logging.getLogger(__name__)

ModelDescriptor = Dict[str, Any]
AttributeNames = Union[str, List[str], tuple]


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise MalformedArgumentError(f"attribute names must be non-empty strings, got {name!r}")
    return name


def _check_properties(properties: Any) -> Mapping:
    if not isinstance(properties, Mapping):
        raise MalformedArgumentError(
            f"attribute properties must be a mapping, got {type(properties).__name__}"
        )
    return properties


def _normalise_names(names: Any) -> List[str]:
    if isinstance(names, (list, tuple)):
        return [_check_name(name) for name in names]
    return [_check_name(names)]


class AttributeStore:
    """Mutable holder for one model descriptor.

    Every mutator returns the store so calls can be chained.  The store knows
    nothing about lifecycles; :class:`modelbuilder.builder.ModelBuilder`
    re-applies lifecycle wiring whenever the descriptor is replaced.
    """

    def __init__(
        self,
        descriptor: Optional[ModelDescriptor] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._descriptor: ModelDescriptor = {"attributes": {}}
        if descriptor is not None:
            self.set_model(descriptor)

    # ------------------------------------------------------------------
    # Descriptor access
    # ------------------------------------------------------------------

    @property
    def model(self) -> ModelDescriptor:
        """The descriptor currently being built."""
        return self._descriptor

    @property
    def attributes(self) -> Dict[str, Any]:
        return self._descriptor["attributes"]

    def set_model(self, descriptor: ModelDescriptor) -> "AttributeStore":
        """Replace the working descriptor, adding an empty ``attributes`` table if missing."""
        if not isinstance(descriptor, dict):
            raise MalformedArgumentError(
                f"model descriptor must be a dict, got {type(descriptor).__name__}"
            )
        if descriptor.get("attributes") is None:
            descriptor["attributes"] = {}
        self._descriptor = descriptor
        return self

    def attribute_names(self) -> List[str]:
        return list(self.attributes)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def set_key(self, kind: Union[KeyKind, str], auto_increment: Optional[bool] = None) -> "AttributeStore":
        """Install the primary-key attribute.

        ``kind`` is :attr:`KeyKind.UUID` for a string key with a generated
        default or :attr:`KeyKind.INTEGER` for a sequential key.
        ``auto_increment`` only applies to integer keys (passing it with a
        UUID key raises) and falls back to
        :attr:`Settings.default_auto_increment`.
        """
        try:
            spec = PrimaryKeySpec(kind=kind, auto_increment=auto_increment)
        except ValidationError as exc:
            raise MalformedArgumentError(f"invalid primary key request: {exc}") from exc

        name = self._settings.key_attribute
        self.attributes[name] = spec.to_attribute(self._settings.default_auto_increment)
        logger.debug("Installed %s primary key %r", spec.kind.value, name)
        return self

    def uuid_key(self) -> "AttributeStore":
        return self.set_key(KeyKind.UUID)

    def int_key(self, auto_increment: Optional[bool] = None) -> "AttributeStore":
        return self.set_key(KeyKind.INTEGER, auto_increment)

    # ------------------------------------------------------------------
    # Attribute merging
    # ------------------------------------------------------------------

    def merge_attribute_map(self, attributes: Mapping) -> "AttributeStore":
        """Merge a mapping of attribute name -> descriptor into the model.

        Callable descriptors replace whatever is stored outright; mappings
        are shallow-merged into the stored descriptor (created if absent).
        Every entry is checked before anything is written.
        """
        _check_properties(attributes)
        for name, incoming in attributes.items():
            _check_name(name)
            if not callable(incoming):
                _check_properties(incoming)
                self._check_mergeable(name)

        for name, incoming in attributes.items():
            if callable(incoming):
                self.attributes[name] = incoming
            else:
                self._editable(name).update(incoming)
        return self

    def set_attribute_property(self, name: str, key: str, value: Any) -> "AttributeStore":
        """Set a single property on a single attribute."""
        self._check_mergeable(_check_name(name))
        if not isinstance(key, str) or not key:
            raise MalformedArgumentError(f"property names must be non-empty strings, got {key!r}")
        self._editable(name)[key] = value
        return self

    def merge_shared_properties(self, names: AttributeNames, properties: Mapping) -> "AttributeStore":
        """Shallow-merge the same properties into every named attribute."""
        _check_properties(properties)
        targets = _normalise_names(names)
        for name in targets:
            self._check_mergeable(name)

        for name in targets:
            self._editable(name).update(properties)
        return self

    def remove_attribute(self, name: str) -> "AttributeStore":
        self.attributes.pop(_check_name(name), None)
        return self

    def set_attribute(self, *args: Any) -> "AttributeStore":
        """Dispatch to one of the three merge operations based on the arguments.

        * ``set_attribute({"name": {"type": "string"}})``
        * ``set_attribute("name", "type", "string")``
        * ``set_attribute(["parentId", "childId"], {"type": "string"})``
        """
        if not args:
            raise MalformedArgumentError("set_attribute() needs at least one argument")
        if isinstance(args[0], Mapping):
            if len(args) != 1:
                raise MalformedArgumentError("an attribute mapping must be the only argument")
            return self.merge_attribute_map(args[0])
        if len(args) == 3:
            return self.set_attribute_property(*args)
        if len(args) != 2:
            raise MalformedArgumentError(
                f"set_attribute() takes a mapping, (name, key, value) or (names, properties); got {len(args)} arguments"
            )
        return self.merge_shared_properties(args[0], args[1])

    attr = set_attribute

    def mark_required(self, *names: Any) -> "AttributeStore":
        """Mark attributes as required.

        With no arguments every known attribute is marked, except callable
        attributes which are instance methods rather than fields.  Otherwise
        accepts one name, several names or a single list of names.
        """
        if not names:
            targets: Iterable[str] = [
                name for name, value in self.attributes.items() if not callable(value)
            ]
        elif len(names) == 1 and isinstance(names[0], (list, tuple)):
            targets = names[0]
        else:
            targets = names
        return self.merge_shared_properties(list(targets), {"required": True})

    # ------------------------------------------------------------------

    def _check_mergeable(self, name: str) -> None:
        if callable(self.attributes.get(name)):
            raise MalformedArgumentError(
                f"attribute {name!r} is a callable; replace it with an attribute mapping instead of merging"
            )

    def _editable(self, name: str) -> Dict[str, Any]:
        current = self.attributes.get(name)
        if current is None:
            current = {}
            self.attributes[name] = current
        return current
