"""
Type and default resolution for schema properties.

The declared ``type`` tag decides the semantic type. The default value is
read by the kind of the JSON value actually stored under ``default``, which
may disagree with the tag; the stored kind wins.
"""

import math
from typing import Any

from toolbridge.schema.types import SemanticType
from toolbridge.schema.values import JsonKind, SchemaValue

TYPE_TAGS: dict[str, SemanticType] = {
    "string": SemanticType.STRING,
    "number": SemanticType.NUMBER,
    "array": SemanticType.ARRAY,
}


def resolve_semantic_type(prop: SchemaValue) -> SemanticType:
    """
    Map a property's ``type`` tag to a SemanticType.

    No tag at all resolves to STRING. A tag outside TYPE_TAGS (including
    "integer", "boolean", "object" and non-string tags such as
    ``["string", "null"]``) resolves to UNSPECIFIED.
    """
    type_node = prop.get("type")
    if type_node.is_missing:
        return SemanticType.STRING
    if type_node.kind is not JsonKind.STRING:
        return SemanticType.UNSPECIFIED
    return TYPE_TAGS.get(type_node.value, SemanticType.UNSPECIFIED)


def raw_type_tag(prop: SchemaValue) -> str | None:
    """The declared tag as text, for diagnostics"""
    type_node = prop.get("type")
    if type_node.is_missing:
        return None
    if type_node.kind is JsonKind.STRING:
        return type_node.value
    return type_node.raw_text()


def _to_double(number: Any) -> float:
    try:
        return float(number)
    except OverflowError:
        # integer literals beyond the float range saturate
        return math.inf if number > 0 else -math.inf


def extract_default(prop: SchemaValue) -> Any:
    """
    Literal default of a property, or None when ``default`` is absent.

    string -> str, number -> float, true/false -> bool, anything else
    (object, array, null) -> its compact JSON text.
    """
    node = prop.get("default")
    kind = node.kind

    if kind is JsonKind.MISSING:
        return None
    if kind is JsonKind.STRING:
        return node.value
    if kind is JsonKind.NUMBER:
        return _to_double(node.value)
    if kind is JsonKind.BOOLEAN:
        return bool(node.value)
    return node.raw_text()
