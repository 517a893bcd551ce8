"""
Read-only view over decoded JSON schema data.

Schemas arrive as plain decoded JSON (dicts, lists, str, int/float, bool,
None). ``SchemaValue`` tags each node with its ``JsonKind`` and offers
``try_get`` style accessors that return ``None`` instead of raising, so a
missing or malformed key always falls back rather than failing.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterator


class JsonKind(Enum):
    """Kind of a decoded JSON value"""

    MISSING = "missing"
    NULL = "null"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


def kind_of(value: Any) -> JsonKind:
    """Classify a decoded JSON value. bool is checked before int on purpose."""
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, dict):
        return JsonKind.OBJECT
    if isinstance(value, (list, tuple)):
        return JsonKind.ARRAY
    return JsonKind.MISSING


class SchemaValue:
    """A tagged JSON node. ``SchemaValue.missing()`` stands for an absent key."""

    __slots__ = ("_value", "_kind")

    def __init__(self, value: Any = None, kind: JsonKind | None = None):
        self._value = value
        self._kind = kind if kind is not None else kind_of(value)

    @classmethod
    def missing(cls) -> SchemaValue:
        return cls(None, JsonKind.MISSING)

    @property
    def kind(self) -> JsonKind:
        return self._kind

    @property
    def value(self) -> Any:
        return self._value

    @property
    def is_missing(self) -> bool:
        return self._kind is JsonKind.MISSING

    def get(self, key: str) -> SchemaValue:
        """Child of an object node, or a missing node"""
        if self._kind is JsonKind.OBJECT and key in self._value:
            return SchemaValue(self._value[key])
        return SchemaValue.missing()

    def try_get_string(self, key: str) -> str | None:
        child = self.get(key)
        return child.value if child.kind is JsonKind.STRING else None

    def try_get_object(self, key: str) -> SchemaValue | None:
        child = self.get(key)
        return child if child.kind is JsonKind.OBJECT else None

    def try_get_array(self, key: str) -> list[Any] | None:
        child = self.get(key)
        return list(child.value) if child.kind is JsonKind.ARRAY else None

    def items(self) -> Iterator[tuple[str, SchemaValue]]:
        """Object members in insertion order; nothing for other kinds"""
        if self._kind is JsonKind.OBJECT:
            for key, value in self._value.items():
                yield key, SchemaValue(value)

    def raw_text(self) -> str:
        """Compact JSON text of this node"""
        if self._kind is JsonKind.MISSING:
            return ""
        return json.dumps(self._value, separators=(",", ":"), ensure_ascii=False)

    def __repr__(self) -> str:
        return f"SchemaValue({self._kind.value}, {self._value!r})"
