# array_backend/utils.py
"""
Utility functions for array canonicalization used by reparam.

Notes
-----
The numeric functions in reparam accept either scalars or array-likes.
Scalars come back as Python floats, array-likes come back as float arrays
of the same shape. `_as_float_array` and `_like_input` implement that round
trip so the transforms themselves only ever see ndarrays.

All functions that return arrays accept `copy: bool = True` where a copy
matters. When `copy=True` the returned array is guaranteed to be a
different object from the input.
"""

from __future__ import annotations

import numpy as np
from typing import Any, Tuple

from ..custom_types import Array, ArrayLike, PRNG, SeedLike
from ..errors import DomainError


def _is_array(x: Any) -> bool:
    return isinstance(x, np.ndarray)

def _as_array(x: Any) -> Array:
    try:
        return np.asarray(x)
    except Exception as e:
        raise TypeError(
            f"Could not convert input to array.\n"
            f"Input type: {type(x).__name__}\n"
            f"Input value: {repr(x)}\n"
            f"Original error: {e}"
        ) from e

def _is_numpy_scalar(x: Any) -> bool:
    """Return true if object is a numpy generic or Python scalar"""
    return np.isscalar(x) or isinstance(x, np.generic)


def _ensure_real_scalar(x: Any, *, as_array: bool = False) -> float|int|Array:
    """
    Return a Python scalar or 0d array for inputs that contain a single real value.

    Accepts:
      - Python scalars (int, float)
      - numpy scalar types (np.float64(...), np.int32(...))
      - 0-D numpy arrays (shape == ())

    Returns:
        If as_array=False (default), returns a Python scalar (float or int).
        If as_array=True, returns a 0-D array.

    Raises:
      ValueError if input contains more than one element or is not a float/int.
    """
    # fast path for Python/numpy scalar
    if _is_numpy_scalar(x):
        if isinstance(x, (str, bytes)):
            raise ValueError(f"_ensure_real_scalar: input is not numeric: {x!r}")
        # np.iscomplexobj handles python numbers too (returns False for ints/floats)
        if np.iscomplexobj(x):
            raise ValueError(f"_ensure_real_scalar: input is complex-valued: {x!r}")
        if isinstance(x, np.generic) and not as_array:
            return x.item()
        if as_array:
            return np.array(x)
        # Python scalar
        return x

    arr = _as_array(x)
    if arr.size != 1:
        raise ValueError(f"_ensure_real_scalar: input must contain exactly one element; got size={arr.size}, shape={arr.shape}")
    if np.iscomplexobj(arr):
        raise ValueError(f"_ensure_real_scalar: input is complex-valued (shape={arr.shape}).")

    if as_array:
        return np.array(arr.reshape(()))  # 0-D array
    return arr.item()


def _ensure_vector(x: ArrayLike, *, as_column: bool = False,
                   length: int | None = None, copy: bool = True) -> Array:
    """
    Ensure input is returned as a 1-D vector (canonical shape (n,)) by default.
    If as_column=True, return shape (n,1).

    Accepts:
      - 1D arrays -> (n,) (or (n,1) if as_column)
      - 2D arrays shaped (n,1) or (1,n) -> converted appropriately
      - 0D scalar -> treated as length-1 vector (1,) or (1,1) if as_column

    Raises:
      ValueError for incompatible shapes (ndim > 2 or 2D with both dims >1)
    """
    arr = _as_array(x)

    if arr.ndim == 0:
        v = arr.reshape((1,))
        out = v.reshape((-1, 1)) if as_column else v
    elif arr.ndim == 1:
        out = arr.reshape((-1, 1)) if as_column else arr
    elif arr.ndim == 2:
        num_rows, num_cols = arr.shape
        if num_rows == 1 or num_cols == 1:
            v = np.ravel(arr)
            out = v.reshape((-1, 1)) if as_column else v
        else:
            raise ValueError(f"_ensure_vector: 2D input has shape {arr.shape}, which is not a vector (expected (n,1) or (1,n)).")
    else:
        raise ValueError(f"_ensure_vector: input has too many dimensions (ndim={arr.ndim}).")

    # validate vector length
    if length is not None and out.size != length:
        raise ValueError(f"_ensure_vector: required length {length}. Got {out.size}.")

    return out.copy() if copy else out


# ------------------------------------------------------------------------------
# Scalar-or-array round trip
# ------------------------------------------------------------------------------

def _as_float_array(x: ArrayLike) -> Tuple[Array, bool]:
    """Convert `x` to a float array and report whether it was a scalar.

    Returns:
        (arr, is_scalar): `arr` is a float64 ndarray (0-D for scalar input).

    Raises:
        TypeError if `x` is not real-valued numeric data.
    """
    is_scalar = _is_numpy_scalar(x) or (_is_array(x) and np.ndim(x) == 0)
    arr = _as_array(x)
    if arr.dtype.kind not in "biuf":
        raise TypeError(f"expected real numeric input; got dtype {arr.dtype} ({type(x).__name__})")
    return arr.astype(float), is_scalar


def _like_input(out: Array, is_scalar: bool) -> float | Array:
    """Return a Python float for scalar inputs, the array otherwise."""
    if is_scalar:
        return float(np.asarray(out).reshape(()))
    return out


# ------------------------------------------------------------------------------
# Random number generators
# ------------------------------------------------------------------------------

def _as_rng(seed: SeedLike) -> PRNG:
    """Return a `np.random.Generator` for a seed or an existing generator.

    An existing generator is returned as is, so that callers threading one
    generator through several calls keep advancing the same stream.
    """
    if isinstance(seed, np.random.Generator):
        return seed
    if isinstance(seed, (bool, np.bool_)):
        raise TypeError(f"seed must be an int, a numpy Generator or None; got {seed!r}")
    if seed is None:
        return np.random.default_rng()
    if isinstance(seed, (int, np.integer)):
        if seed < 0:
            raise DomainError("seed", seed, "seed >= 0")
        return np.random.default_rng(seed)
    raise TypeError(f"seed must be an int, a numpy Generator or None; got {type(seed).__name__}")
