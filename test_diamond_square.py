"""
Tests for diamond-square height field synthesis.

Uses a fixed-seed NumpyRandomSource for determinism and a scripted source
to check the averaging and range decay by hand.
"""

import numpy as np
import pytest

from terragen import InvalidArgument, NumpyRandomSource, generate_random
from terragen.procgen import grid_side


class ScriptedSource:
    """Returns fixed corners on the first draw and zero offsets afterwards."""

    def __init__(self, corners):
        self.corners = corners
        self.calls = []

    def uniform(self, low, high, size=None):
        self.calls.append((low, high, size))
        if len(self.calls) == 1:
            return np.array(self.corners, dtype=np.float64)
        return np.zeros(size)


@pytest.mark.parametrize("iterations", [0, 1, 2, 3, 4, 5])
def test_grid_side(iterations):
    """Side length is 2 ** iterations + 1."""

    field = generate_random(1.0, 50.0, iterations, NumpyRandomSource(seed=1))

    expected = 2 ** iterations + 1
    assert grid_side(iterations) == expected
    assert field.width == expected
    assert field.height == expected


def test_two_iterations_give_five_by_five():
    field = generate_random(0.5, 100.0, 2, NumpyRandomSource(seed=0))
    assert field.dimensions == (5, 5)
    assert np.all(np.isfinite(field.elevations))


def test_same_seed_is_bit_identical():
    """Identically seeded sources reproduce the same field exactly."""

    first = generate_random(1.2, 80.0, 6, NumpyRandomSource(seed=1234))
    second = generate_random(1.2, 80.0, 6, NumpyRandomSource(seed=1234))

    assert first.elevations.tobytes() == second.elevations.tobytes()


def test_different_seeds_differ():
    first = generate_random(1.0, 80.0, 5, NumpyRandomSource(seed=1))
    second = generate_random(1.0, 80.0, 5, NumpyRandomSource(seed=2))

    assert not np.array_equal(first.elevations, second.elevations)


def test_corners_seeded_in_range():
    """Corners are never rewritten by later passes."""

    max_seed_height = 30.0
    for seed in range(10):
        field = generate_random(1.0, max_seed_height, 4, NumpyRandomSource(seed=seed))
        grid = field.elevations
        for corner in (grid[0, 0], grid[0, -1], grid[-1, 0], grid[-1, -1]):
            assert 0.0 <= corner < max_seed_height


def test_zero_iterations_keeps_corners():
    source = ScriptedSource([1.0, 2.0, 3.0, 4.0])
    field = generate_random(1.0, 10.0, 0, source)

    np.testing.assert_array_equal(field.elevations, [[1.0, 2.0], [3.0, 4.0]])
    assert len(source.calls) == 1


def test_border_midpoints_average_three_neighbours():
    """Edge midpoints average only the neighbours that exist."""

    source = ScriptedSource([4.0, 8.0, 12.0, 16.0])
    field = generate_random(1.0, 10.0, 1, source)
    grid = field.elevations

    # Square step
    assert grid[1, 1] == pytest.approx(10.0)

    # Diamond step on the border: two corners plus the center
    assert grid[0, 1] == pytest.approx((4.0 + 8.0 + 10.0) / 3.0)
    assert grid[1, 0] == pytest.approx((4.0 + 12.0 + 10.0) / 3.0)
    assert grid[1, 2] == pytest.approx((8.0 + 16.0 + 10.0) / 3.0)
    assert grid[2, 1] == pytest.approx((12.0 + 16.0 + 10.0) / 3.0)


def test_interior_midpoints_average_four_neighbours():
    source = ScriptedSource([4.0, 8.0, 12.0, 16.0])
    field = generate_random(1.0, 10.0, 2, source)
    grid = field.elevations

    assert grid[2, 2] == pytest.approx(10.0)
    assert grid[1, 1] == pytest.approx(7.5)
    assert grid[3, 1] == pytest.approx(65.0 / 6.0)

    # Interior midpoint: left, right, up and down neighbours
    assert grid[2, 1] == pytest.approx(9.25)


def test_range_decays_by_roughness():
    """Offsets start at max_seed_height and shrink by 2 ** -roughness per pass."""

    source = ScriptedSource([0.0, 0.0, 0.0, 0.0])
    generate_random(1.0, 100.0, 2, source)

    # Corners, then square + two diamond draws per pass
    assert len(source.calls) == 1 + 3 * 2
    assert source.calls[0][:2] == (0.0, 100.0)

    for low, high, _ in source.calls[1:4]:
        assert (low, high) == (-100.0, 100.0)
    for low, high, _ in source.calls[4:7]:
        assert (low, high) == (-50.0, 50.0)


def test_higher_roughness_is_smoother():
    """Faster decay leaves less high-frequency detail between neighbours."""

    rough = generate_random(0.2, 100.0, 7, NumpyRandomSource(seed=99))
    smooth = generate_random(2.0, 100.0, 7, NumpyRandomSource(seed=99))

    def neighbour_jump(field):
        return np.abs(np.diff(field.elevations, axis=1)).mean()

    assert neighbour_jump(smooth) < neighbour_jump(rough)


@pytest.mark.parametrize("iterations", [-1, -5, 1.5, True, "3"])
def test_invalid_iterations(iterations):
    with pytest.raises(InvalidArgument):
        generate_random(1.0, 10.0, iterations, NumpyRandomSource(seed=0))


def test_invalid_heights_and_roughness():
    with pytest.raises(InvalidArgument):
        generate_random(1.0, -1.0, 2, NumpyRandomSource(seed=0))

    with pytest.raises(InvalidArgument):
        generate_random(float("nan"), 10.0, 2, NumpyRandomSource(seed=0))

    with pytest.raises(InvalidArgument):
        generate_random(1.0, float("inf"), 2, NumpyRandomSource(seed=0))


def test_default_source_is_time_seeded():
    """Without an injected source the generator still runs."""

    field = generate_random(1.0, 10.0, 3)
    assert field.dimensions == (9, 9)


@pytest.mark.parametrize("roughness, max_seed_height", [(None, 10.0), ("1.0", 10.0), (1.0, None), (True, 10.0)])
def test_non_numeric_arguments(roughness, max_seed_height):
    with pytest.raises(InvalidArgument):
        generate_random(roughness, max_seed_height, 2, NumpyRandomSource(seed=0))


def test_growing_range_without_passes_is_unused():
    """With no passes the decay never applies, so any finite roughness works."""

    field = generate_random(-1100.0, 10.0, 0, NumpyRandomSource(seed=0))
    assert field.dimensions == (2, 2)


@pytest.mark.parametrize("roughness, iterations", [(-1100.0, 1), (-150.0, 8)])
def test_range_overflow_rejected(roughness, iterations):
    """A negative roughness whose range would overflow a float is rejected up front."""

    source = ScriptedSource([0.0, 0.0, 0.0, 0.0])

    with pytest.raises(InvalidArgument):
        generate_random(roughness, 100.0, iterations, source)
    assert source.calls == []


def test_negative_roughness_within_limits():
    """Negative roughness grows the range each pass, which is allowed while it stays finite."""

    source = ScriptedSource([0.0, 0.0, 0.0, 0.0])
    generate_random(-1.0, 10.0, 3, source)

    assert [high for _, high, _ in source.calls[1::3]] == [10.0, 20.0, 40.0]
