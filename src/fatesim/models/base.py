"""Shared pydantic configuration for simulation models."""

import math

from pydantic import BaseModel, ConfigDict, ValidationInfo
from pydantic.alias_generators import to_camel


class FrozenModel(BaseModel):
    """Immutable model serialized with camelCase keys.

    Transitions never mutate a model; they build a new one with
    ``model_copy(update=...)``. Note that ``model_copy`` skips validation,
    so callers that change clamped fields must clamp explicitly.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        allow_inf_nan=False,
    )


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to the specified range."""
    return max(min_val, min(max_val, value))


def finite_number(value: object) -> float:
    """Return value as a float, rejecting bools, non-numbers, NaN and infinities.

    Raises:
        ValueError: If value is not a finite real number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"expected a finite number, got {value}")
    return float(value)


def strict_ranges(info: ValidationInfo) -> bool:
    """True when validation should reject out-of-range values instead of clamping.

    Loading stored or imported documents sets ``{"strict_ranges": True}`` as
    the validation context; in-process construction clamps.
    """
    return bool(info.context and info.context.get("strict_ranges"))


def bounded(value: float, min_val: float, max_val: float, info: ValidationInfo) -> float:
    """Clamp value, or reject it when strict ranges are in effect.

    Raises:
        ValueError: If strict ranges are in effect and value is out of range
    """
    if strict_ranges(info) and not min_val <= value <= max_val:
        raise ValueError(f"must be between {min_val} and {max_val}, got {value}")
    return clamp(value, min_val, max_val)
