# custom_types.py
"""
Type aliases shared across reparam.

We generally follow the conventions:
- Annotate function input with `ArrayLike`
- Annotate function output with `Array`
"""
from __future__ import annotations
from typing import TypeAlias, TypeVar, Union
from numpy.random import Generator as NumpyRNG

from numpy.typing import (
    NDArray as NumpyArray,
    ArrayLike as NumpyArrayLike
)

from numpy import (
    floating as NumpyFloating,
    number as NumpyNumber
)

Array = NumpyArray
ArrayLike: TypeAlias = NumpyArrayLike
Float: TypeAlias = NumpyFloating
Number: TypeAlias = NumpyNumber
PRNG: TypeAlias = NumpyRNG
T = TypeVar("T", bound=NumpyNumber)

# A seed or an already constructed generator; see `reparam.array_backend.utils._as_rng`.
SeedLike: TypeAlias = Union[int, NumpyRNG, None]
