"""Attribute value coercion for predicate matching.

This module flattens heterogeneously typed record values into the
string candidates that filter targets are compared against. Named
wrappers such as enums and ``str`` subclasses are reduced to their
underlying value before classification.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Literal

CoercedKind = Literal["string", "bool", "int", "float", "string_sequence", "unsupported"]

_MAX_ALIAS_DEPTH = 8


@dataclass(frozen=True)
class CoercedValue:
    """Comparable form of one attribute value.

    Attributes:
        kind: Classified shape of the original value.
        candidates: Strings a filter target may match; empty when unsupported.
    """

    kind: CoercedKind
    candidates: tuple[str, ...] = ()

    @property
    def supported(self) -> bool:
        return self.kind != "unsupported"


UNSUPPORTED = CoercedValue(kind="unsupported")


def coerce_value(value: object) -> CoercedValue:
    """Coerce a stored attribute value into comparable strings.

    Args:
        value: Raw attribute value from a record.

    Returns:
        Coerced value; ``UNSUPPORTED`` for shapes that cannot be flattened.
    """
    scalar = _coerce_scalar(value)
    if scalar is not None:
        return scalar
    if isinstance(value, (list, tuple)):
        return _coerce_string_sequence(value)
    return UNSUPPORTED


def coerce_scalar_text(value: object) -> str | None:
    """Return the single comparable string of a scalar value.

    Args:
        value: Scalar value such as a string, enum, bool, or number.

    Returns:
        Canonical string, or None if the value is not a supported scalar.
    """
    scalar = _coerce_scalar(value)
    if scalar is None:
        return None
    return scalar.candidates[0]


def format_float(value: float) -> str:
    """Format a float as the shortest text that parses back to it.

    Args:
        value: Float value.

    Returns:
        Decimal text; integral values carry no fractional part.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _coerce_scalar(value: object) -> CoercedValue | None:
    value = _unwrap_enum(value)
    if isinstance(value, str):
        return CoercedValue(kind="string", candidates=(str.__str__(value),))
    if isinstance(value, bool):
        return CoercedValue(kind="bool", candidates=("true" if value else "false",))
    if isinstance(value, int):
        return CoercedValue(kind="int", candidates=(int.__repr__(value),))
    if isinstance(value, float):
        return CoercedValue(kind="float", candidates=(format_float(value),))
    return None


def _coerce_string_sequence(items: list[object] | tuple[object, ...]) -> CoercedValue:
    candidates: list[str] = []
    for item in items:
        item = _unwrap_enum(item)
        if not isinstance(item, str):
            return UNSUPPORTED
        candidates.append(str.__str__(item))
    return CoercedValue(kind="string_sequence", candidates=tuple(candidates))


def _unwrap_enum(value: object) -> object:
    # Enum members may wrap other enum members; stop at the first plain value.
    depth = 0
    while isinstance(value, Enum) and depth < _MAX_ALIAS_DEPTH:
        value = value.value
        depth += 1
    return value
