"""
Schema Extractor
================

Turns a tool's raw input schema into an ordered tuple of
``ParameterDescriptor`` and a normalized snapshot of the schema.

Only ``properties``, ``required`` and, per property, ``type``,
``description`` and ``default`` are read. Every other keyword is ignored.
Malformed sections degrade to "nothing declared" instead of raising.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from toolbridge.core.logging import get_standard_logger
from toolbridge.schema.resolver import extract_default, raw_type_tag, resolve_semantic_type
from toolbridge.schema.types import ParameterDescriptor
from toolbridge.schema.values import JsonKind, SchemaValue

logger = get_standard_logger("toolbridge.schema")


def required_names(schema: SchemaValue) -> list[str]:
    """Names listed under ``required``; non-string entries are skipped"""
    names = schema.try_get_array("required") or []
    return [n for n in names if isinstance(n, str)]


def extract_parameters(schema: Any, tool_name: str = "") -> tuple[ParameterDescriptor, ...]:
    """
    Build one descriptor per entry of ``schema["properties"]``, in order.

    Args:
        schema: Decoded JSON schema of the tool input (may be None)
        tool_name: Used only in log messages

    Returns:
        Immutable tuple of descriptors; empty when no properties are declared
    """
    root = SchemaValue(schema)
    required = required_names(root)
    properties = root.try_get_object("properties")

    if properties is None:
        if required:
            logger.warning(
                f"Tool '{tool_name}' requires {required} but declares no properties"
            )
        return ()

    descriptors = []
    for name, prop in properties.items():
        type_node = prop.get("type")
        if not type_node.is_missing and type_node.kind is not JsonKind.STRING:
            logger.warning(
                f"Tool '{tool_name}' parameter '{name}' has non-string type tag "
                f"{type_node.raw_text()}"
            )

        descriptor = ParameterDescriptor(
            name=name,
            semantic_type=resolve_semantic_type(prop),
            required=name in required,
            default_value=extract_default(prop),
            raw_type_tag=raw_type_tag(prop),
            description=prop.try_get_string("description"),
        )
        logger.debug(f"Tool '{tool_name}' parameter: {descriptor}")
        descriptors.append(descriptor)

    declared = {d.name for d in descriptors}
    orphans = [n for n in required if n not in declared]
    if orphans:
        logger.warning(
            f"Tool '{tool_name}' lists required parameters not found in properties: {orphans}"
        )

    return tuple(descriptors)


def build_schema_snapshot(schema: Any) -> dict[str, Any]:
    """
    Normalized schema exposed for introspection.

    Always ``{"type": "object"}``, plus a private copy of the original
    ``properties`` map when one is declared.
    """
    snapshot: dict[str, Any] = {"type": "object"}
    properties = SchemaValue(schema).try_get_object("properties")
    if properties is not None:
        snapshot["properties"] = deepcopy(properties.value)
    return snapshot
