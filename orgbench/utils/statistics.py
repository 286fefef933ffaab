"""Numeric primitives shared by every engine component.

All functions accept any numeric sequence (lists, tuples, numpy arrays,
pandas Series) and never mutate their input. Degenerate inputs resolve to 0
instead of raising: empty sequences, single values, zero variance.
"""

import math
from collections.abc import Sequence

import numpy as np
import pandas as pd

type Numbers = Sequence[float] | np.ndarray | pd.Series


def _as_array(values: Numbers) -> np.ndarray:
    return np.array(values, dtype=float, copy=True)


def total(values: Numbers) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.sum())


def average(values: Numbers) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.sum() / arr.size)


def median(values: Numbers) -> float:
    arr = np.sort(_as_array(values))
    n = arr.size
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 0:
        return float((arr[mid - 1] + arr[mid]) / 2)
    return float(arr[mid])


def standard_deviation(values: Numbers) -> float:
    """Population standard deviation (divides by n)."""
    arr = _as_array(values)
    if arr.size <= 1 or np.all(arr == arr[0]):
        return 0.0
    return float(np.std(arr, ddof=0))


def percentile(values: Numbers, p: float) -> float:
    """Nearest-rank percentile: the element at rank ceil(p/100 * n), 1-based."""
    arr = np.sort(_as_array(values))
    n = arr.size
    if n == 0:
        return 0.0
    rank = math.ceil(p / 100 * n)
    rank = min(max(rank, 1), n)
    return float(arr[rank - 1])


def z_score(value: float, mean: float, stddev: float) -> float:
    if stddev == 0:
        return 0.0
    return (value - mean) / stddev
