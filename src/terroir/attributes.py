# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Immutable attribute sets produced by detectors.

An :class:`AttributeSet` maps semantic-convention keys to scalar values.  A
present key always carries a value: ``None`` values are dropped at
construction, so detectors can pass optional fields through verbatim.

Merging follows one rule: the updating set wins on collisions, except that an
empty value (missing, ``""`` or an empty sequence) never overwrites a value
already present::

    >>> merge(AttributeSet({"k": "v1"}), AttributeSet({"k": "v2"}))
    AttributeSet({'k': 'v2'})
    >>> merge(AttributeSet({"k": "v1"}), AttributeSet({"k": ""}))
    AttributeSet({'k': 'v1'})
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple, Union

from opentelemetry.sdk.resources import Resource

Scalar = Union[str, bool, int, float]
AttributeValue = Union[Scalar, Tuple[Scalar, ...]]

_SCALAR_TYPES = (str, bool, int, float)


def _check_value(key: str, value: Any) -> AttributeValue:
    if isinstance(value, _SCALAR_TYPES):
        return value
    if isinstance(value, (list, tuple)):
        items = tuple(value)
        if all(isinstance(item, _SCALAR_TYPES) for item in items) and len({type(item) for item in items}) <= 1:
            return items
    raise TypeError(f"Unsupported value for attribute {key!r}: {type(value).__name__}")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


class AttributeSet(Mapping):
    """Read-only mapping of resource attributes.

    Args:
        attributes: Initial attributes.  Keys must be strings; values must be
            ``str``, ``bool``, ``int``, ``float`` or a homogeneous sequence of
            those.  ``None`` values are omitted.

    Raises:
        TypeError: On a non-string key or an unsupported value type.
    """

    __slots__ = ("_attributes",)

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None) -> None:
        cleaned: Dict[str, AttributeValue] = {}
        for key, value in (attributes or {}).items():
            if not isinstance(key, str):
                raise TypeError(f"Attribute keys must be strings, got {type(key).__name__}")
            if value is None:
                continue
            cleaned[key] = _check_value(key, value)
        self._attributes = MappingProxyType(cleaned)

    @classmethod
    def empty(cls) -> AttributeSet:
        """Return the shared "no information" set."""
        return EMPTY

    def __getitem__(self, key: str) -> AttributeValue:
        return self._attributes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __hash__(self) -> int:
        return hash(frozenset(self._attributes.items()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._attributes)!r})"

    def merge(self, other: Mapping[str, Any]) -> AttributeSet:
        """Return a new set with *other* layered on top of this one."""
        if not other:
            return self
        merged: Dict[str, Any] = dict(self._attributes)
        for key, value in other.items():
            if _is_empty(value):
                continue
            merged[key] = value
        return AttributeSet(merged)

    def to_dict(self) -> Dict[str, AttributeValue]:
        return dict(self._attributes)

    def to_resource(self, schema_url: Optional[str] = None) -> Resource:
        """Wrap the attributes in an OpenTelemetry :class:`Resource`.

        ``Resource`` is built directly rather than through ``Resource.create``
        so no SDK defaults or environment attributes are mixed in.
        """
        return Resource(self.to_dict(), schema_url)


EMPTY = AttributeSet()


def coerce(attributes: Union[AttributeSet, Mapping[str, Any], None]) -> AttributeSet:
    """Return *attributes* as an :class:`AttributeSet`."""
    if isinstance(attributes, AttributeSet):
        return attributes
    if not attributes:
        return EMPTY
    return AttributeSet(attributes)


def merge(a: Mapping[str, Any], b: Mapping[str, Any]) -> AttributeSet:
    """Merge two attribute sets; see the module docstring for precedence."""
    return coerce(a).merge(b)


def merge_all(sets: Sequence[Mapping[str, Any]]) -> AttributeSet:
    """Fold *sets* left to right through :func:`merge`."""
    result = EMPTY
    for attributes in sets:
        result = result.merge(attributes)
    return result


__all__ = [
    "EMPTY",
    "AttributeSet",
    "AttributeValue",
    "coerce",
    "merge",
    "merge_all",
]
