# errors.py
"""
Exceptions raised by reparam.

The three numeric error kinds subclass `ValueError` so that code written
against the usual "bad argument raises ValueError" convention keeps working.
Every message names the offending parameter and the violated constraint.
"""
from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "ReparamError",
    "DomainError",
    "InvalidInputError",
    "BoundaryModeError",
    "InferenceError",
]


class ReparamError(Exception):
    """Base class for all reparam errors."""


class DomainError(ReparamError, ValueError):
    """A numeric argument lies outside the function's valid domain.

    Attributes:
        param: Name of the offending parameter.
        value: The rejected value (may be an array).
        constraint: Human-readable constraint, e.g. ``"0 < theta < 1"``.
    """

    def __init__(self, param: str, value: Any, constraint: str):
        self.param = param
        self.value = value
        self.constraint = constraint
        super().__init__(f"{param} must satisfy {constraint}; got {value!r}")


class InvalidInputError(ReparamError, ValueError):
    """A trial sequence (or data binding) is empty or malformed."""

    def __init__(self, param: str, reason: str):
        self.param = param
        self.reason = reason
        super().__init__(f"invalid {param}: {reason}")


class BoundaryModeError(ReparamError, ValueError):
    """The Beta(a, b) density has no interior mode.

    Attributes:
        a, b: The Beta shape parameters.
        location: ``0.0`` or ``1.0`` when the density is maximal at that
            end of the unit interval, ``None`` when there is no unique mode
            (uniform or bimodal density).
    """

    def __init__(self, a: float, b: float, location: Optional[float]):
        self.a = a
        self.b = b
        self.location = location
        if location is None:
            where = "no unique mode"
        else:
            where = f"mode at {location:g}"
        super().__init__(
            f"Beta(a={a!r}, b={b!r}) has no interior mode ({where}); "
            f"an interior mode requires a > 1 and b > 1"
        )


class InferenceError(ReparamError, RuntimeError):
    """The inference engine failed to produce a usable result."""
