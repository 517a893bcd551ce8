"""Parameter model shared by the extractor, the binder and the tool facade."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SemanticType(Enum):
    """Value type a parameter is coerced to"""

    STRING = "string"
    NUMBER = "number"
    ARRAY = "array"
    UNSPECIFIED = "unspecified"


class _MissingArgument:
    """Marker bound for a required argument the caller did not supply."""

    _instance = None

    def __new__(cls) -> "_MissingArgument":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_MissingArgument":
        return self

    def __deepcopy__(self, memo: dict) -> "_MissingArgument":
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _MissingArgument()


def is_missing(value: Any) -> bool:
    return value is MISSING


@dataclass(frozen=True)
class ParameterDescriptor:
    """One schema property, normalized."""

    name: str
    semantic_type: SemanticType = SemanticType.STRING
    required: bool = False
    default_value: Any = None
    raw_type_tag: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.semantic_type.value,
            "required": self.required,
            "default": self.default_value,
            "raw_type": self.raw_type_tag,
            "description": self.description,
        }
