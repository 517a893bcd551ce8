"""
Schema interpretation: descriptors, type/default resolution, extraction.
"""

from toolbridge.schema.extractor import build_schema_snapshot, extract_parameters
from toolbridge.schema.resolver import extract_default, resolve_semantic_type
from toolbridge.schema.types import MISSING, ParameterDescriptor, SemanticType, is_missing
from toolbridge.schema.values import JsonKind, SchemaValue

__all__ = [
    "MISSING",
    "JsonKind",
    "ParameterDescriptor",
    "SchemaValue",
    "SemanticType",
    "build_schema_snapshot",
    "extract_default",
    "extract_parameters",
    "is_missing",
    "resolve_semantic_type",
]
