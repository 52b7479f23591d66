"""Plain vector arithmetic used by the ranker."""
from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from common.errors import DimensionMismatch

Vector = Sequence[float]


def as_array(v: Vector) -> np.ndarray:
    return np.asarray(v, dtype=np.float64).reshape(-1)


def check_same_dimension(a: Vector, b: Vector) -> None:
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))


def unit_scaled(v: Vector) -> Tuple[np.ndarray, float]:
    """
    Return ``v`` divided by its largest absolute component, plus that scale.
    Squaring the scaled values cannot overflow or underflow to zero, and the
    direction (hence any cosine) is unchanged. A zero vector comes back as-is
    with scale 0.
    """
    arr = as_array(v)
    scale = float(np.max(np.abs(arr))) if arr.size else 0.0
    if scale == 0:
        return arr, 0.0
    return arr / scale, scale


def dot_product(a: Vector, b: Vector) -> float:
    check_same_dimension(a, b)
    return float(np.dot(as_array(a), as_array(b)))


def magnitude(v: Vector) -> float:
    scaled, scale = unit_scaled(v)
    return scale * float(np.linalg.norm(scaled))


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine of the angle between ``a`` and ``b``.

    A zero vector is treated as dissimilar to everything, itself included,
    so the result is 0.0 instead of NaN. The value is clipped to [-1, 1].
    """
    check_same_dimension(a, b)
    unit_a, scale_a = unit_scaled(a)
    unit_b, scale_b = unit_scaled(b)
    if scale_a == 0 or scale_b == 0:
        return 0.0
    cos = np.dot(unit_a, unit_b) / (np.linalg.norm(unit_a) * np.linalg.norm(unit_b))
    return float(np.clip(cos, -1.0, 1.0))


def add_vectors(a: Vector, b: Vector) -> List[float]:
    check_same_dimension(a, b)
    return (as_array(a) + as_array(b)).tolist()


def subtract_vectors(a: Vector, b: Vector) -> List[float]:
    check_same_dimension(a, b)
    return (as_array(a) - as_array(b)).tolist()
