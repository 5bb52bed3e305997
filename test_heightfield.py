"""
Tests for the HeightField container.
"""

import numpy as np
import pytest

from terragen import HeightField, InvalidArgument


def test_dimensions_count_points():
    """Width and height are point counts, elevations indexed [y, x]."""

    field = HeightField.from_rows([
        [0.0, 1.0, 2.0],
        [3.0, 4.0, 5.0],
    ])

    assert field.width == 3
    assert field.height == 2
    assert field.dimensions == (3, 2)
    assert field.size == 6
    assert field.elevation_at(2, 1) == 5.0
    assert field.elevation_at(0, 1) == 3.0
    assert field.min() == 0.0
    assert field.max() == 5.0


def test_immutable_after_construction():
    """The backing array is a frozen copy of the input."""

    source = np.arange(9, dtype=np.float64).reshape(3, 3)
    field = HeightField(source)

    source[0, 0] = 100.0
    assert field.elevation_at(0, 0) == 0.0

    assert not field.elevations.flags.writeable
    with pytest.raises(ValueError):
        field.elevations[1, 1] = 7.0


@pytest.mark.parametrize("rows", [
    [[1.0]],
    [[1.0, 2.0, 3.0]],
    [[1.0], [2.0]],
    np.zeros((0, 0)),
])
def test_degenerate_fields_rejected(rows):
    """Single-point, single-row and empty grids are invalid."""

    with pytest.raises(InvalidArgument):
        HeightField(np.asarray(rows, dtype=np.float64))


def test_non_finite_and_wrong_rank_rejected():
    with pytest.raises(InvalidArgument):
        HeightField.from_rows([[0.0, np.nan], [1.0, 2.0]])

    with pytest.raises(InvalidArgument):
        HeightField.from_rows([[0.0, np.inf], [1.0, 2.0]])

    with pytest.raises(InvalidArgument):
        HeightField(np.zeros((2, 2, 2)))


def test_out_of_bounds_query():
    field = HeightField(np.zeros((4, 5)))

    assert field.contains(4, 3)
    assert not field.contains(5, 0)
    assert not field.contains(0, -1)

    with pytest.raises(InvalidArgument):
        field.elevation_at(5, 0)
    with pytest.raises(InvalidArgument):
        field.elevation_at(-1, 2)
