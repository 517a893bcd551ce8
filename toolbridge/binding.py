"""
Argument Binder
===============

Reconciles caller-supplied arguments with a tool's parameter list.

For each parameter, in schema order:
1. caller supplied a value -> coerce it to the parameter's semantic type
2. not required -> the declared default, or None when there is none
3. required -> the MISSING marker

Coercion is best-effort: a value that cannot be converted is forwarded
unchanged. Validation belongs to the remote tool.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence
from numbers import Real
from typing import Any

from toolbridge.core.exceptions import ToolConstructionError
from toolbridge.core.logging import get_standard_logger
from toolbridge.schema.types import MISSING, ParameterDescriptor, SemanticType

logger = get_standard_logger("toolbridge.binding")


class BoundArguments(Mapping[str, Any]):
    """Per-invocation mapping of parameter name to bound value, in schema order."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BoundArguments):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    @property
    def missing(self) -> list[str]:
        """Names bound to the MISSING marker"""
        return [name for name, value in self._values.items() if value is MISSING]

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def to_wire(self) -> dict[str, Any]:
        """Arguments as sent over JSON; MISSING entries are left out"""
        return {name: value for name, value in self._values.items() if value is not MISSING}

    def __repr__(self) -> str:
        return f"BoundArguments({self._values!r})"


# =============================================================================
# Coercion
# =============================================================================


def _to_string(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Real):
        try:
            return str(value)
        except ValueError:
            # int above the interpreter's digit limit for str()
            return value
    return value


def _to_number(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return value
    if isinstance(value, Real):
        try:
            return float(value)
        except OverflowError:
            return value
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return value
        return number if math.isfinite(number) else value
    return value


def _to_array(value: Any) -> Any:
    if isinstance(value, list):
        return value
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    return value


_COERCERS = {
    SemanticType.STRING: _to_string,
    SemanticType.NUMBER: _to_number,
    SemanticType.ARRAY: _to_array,
}


def coerce_value(value: Any, semantic_type: SemanticType) -> Any:
    """
    Convert a caller value toward ``semantic_type``.

    Never raises. None and values of UNSPECIFIED parameters pass through.
    """
    if value is None:
        return None
    coercer = _COERCERS.get(semantic_type)
    if coercer is None:
        return value
    return coercer(value)


# =============================================================================
# Binding
# =============================================================================


def bind_arguments(
    parameters: Sequence[ParameterDescriptor] | None,
    arguments: Mapping[str, Any] | None,
) -> BoundArguments:
    """
    Build a fresh BoundArguments for one invocation.

    Args:
        parameters: The tool's descriptor list
        arguments: Caller values by name; unknown names are ignored

    Raises:
        ToolConstructionError: parameter list is unavailable
    """
    if parameters is None:
        raise ToolConstructionError("parameter list is unavailable")

    supplied = arguments or {}
    bound: dict[str, Any] = {}

    for param in parameters:
        if param.name in supplied:
            bound[param.name] = coerce_value(supplied[param.name], param.semantic_type)
        elif not param.required:
            bound[param.name] = param.default_value
        else:
            bound[param.name] = MISSING
            logger.debug(f"Required argument '{param.name}' not supplied")

    ignored = [name for name in supplied if name not in bound]
    if ignored:
        logger.debug(f"Ignoring undeclared arguments: {ignored}")

    return BoundArguments(bound)
