# coding=utf-8
"""
Bit-vector primitives over the sample index space.

A bit-vector is a 1-D numpy boolean array with one element per sample. A
block is a 2-D boolean array holding one bit-vector per row. Binary
operations write into their first argument in place. Most of them use
numpy `out=` ufuncs; `bv_or_eq_and` builds one temporary for `b & c`.

License: MIT
"""
from __future__ import annotations

import numpy as np

from .exceptions import AllocationError


def bv_init(n_samples: int) -> np.ndarray:
    """Allocate a zeroed bit-vector of length n_samples."""
    try:
        return np.zeros(n_samples, dtype=bool)
    except MemoryError as e:
        raise AllocationError(f"Could not allocate bit-vector of {n_samples} samples") from e


def bv_init_block(n_rows: int, n_samples: int) -> np.ndarray:
    """Allocate a zeroed (n_rows, n_samples) block of bit-vectors."""
    try:
        return np.zeros((n_rows, n_samples), dtype=bool)
    except MemoryError as e:
        raise AllocationError(
            f"Could not allocate {n_rows} bit-vectors of {n_samples} samples") from e


def bv_clone(v: np.ndarray) -> np.ndarray:
    try:
        return v.copy()
    except MemoryError as e:
        raise AllocationError(f"Could not clone bit-vector of shape {v.shape}") from e


def bv_set_all(v: np.ndarray) -> np.ndarray:
    v[...] = True
    return v


def bv_and(dest: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """dest = a & b"""
    return np.logical_and(a, b, out=dest)


def bv_and_eq_not(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """a &= ~b"""
    # a & ~b == a > b for booleans, and avoids a temporary for ~b
    return np.greater(a, b, out=a)


def bv_or_eq(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """a |= b"""
    return np.logical_or(a, b, out=a)


def bv_or_eq_and(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    """a |= (b & c)"""
    a |= b & c
    return a


def bv_n_ones(v: np.ndarray) -> int:
    return int(np.count_nonzero(v))


def bv_is_zero(v: np.ndarray) -> bool:
    return not v.any()


def bv_format(v: np.ndarray) -> str:
    """Render a bit-vector as a string of 0s and 1s, sample 0 first."""
    return ''.join('1' if bit else '0' for bit in v)
