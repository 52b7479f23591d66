import math

import pytest

from common.errors import DimensionMismatch
from retrieval.vector_math import (
    add_vectors,
    cosine_similarity,
    dot_product,
    magnitude,
    subtract_vectors,
)


def test_dot_product():
    assert dot_product([1, 2, 3], [4, 5, 6]) == 32
    assert dot_product([1, 0], [0, 1]) == 0


def test_dot_product_dimension_mismatch():
    with pytest.raises(DimensionMismatch, match="Vectors must have the same dimension"):
        dot_product([1, 2], [1, 2, 3])


def test_magnitude():
    assert magnitude([3, 4]) == 5
    assert magnitude([1, 0, 0]) == 1
    assert magnitude([1, 1, 1]) == pytest.approx(math.sqrt(3))


def test_cosine_similarity_values():
    assert cosine_similarity([1, 2, 3], [1, 2, 3]) == pytest.approx(1)
    assert cosine_similarity([1, 0], [0, 1]) == 0
    assert cosine_similarity([1, 1], [1, 0]) == pytest.approx(0.7071, abs=1e-4)
    assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1)


def test_cosine_similarity_zero_vectors():
    assert cosine_similarity([0, 0], [1, 2]) == 0
    assert cosine_similarity([1, 2], [0, 0]) == 0
    assert cosine_similarity([0, 0], [0, 0]) == 0


def test_cosine_similarity_stays_in_bounds():
    vectors = [[0.1, 0.2, 0.3], [1e-8, 3.0, -2.0], [-5, 4, 3], [0.3, 0.3, 0.3]]
    for a in vectors:
        assert cosine_similarity(a, a) == pytest.approx(1)
        for b in vectors:
            assert -1.0 <= cosine_similarity(a, b) <= 1.0


def test_cosine_similarity_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        cosine_similarity([1, 0], [1, 0, 0])


def test_vector_arithmetic():
    assert add_vectors([1, 2], [3, 4]) == [4, 6]
    assert subtract_vectors([1, 2], [3, 4]) == [-2, -2]
    with pytest.raises(DimensionMismatch):
        add_vectors([1], [1, 2])


def test_cosine_similarity_extreme_magnitudes():
    assert cosine_similarity([1e200, 1e200], [1e200, 1e200]) == pytest.approx(1)
    assert cosine_similarity([1e200, 0], [1e200, 1e200]) == pytest.approx(0.7071, abs=1e-4)
    assert cosine_similarity([1e-200, 1e-200], [3, 3]) == pytest.approx(1)
    assert -1.0 <= cosine_similarity([1e300, -1e300], [-1e300, 2e300]) <= 1.0
    assert magnitude([3e200, 4e200]) == pytest.approx(5e200)
