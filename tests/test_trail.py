import numpy as np
import pytest

from bh_movie.core.trail import TrailBuffer


def _point(idx: int):
    return (float(idx), float(idx) * 2.0, -float(idx))


def test_empty_trail_has_empty_range():
    trail = TrailBuffer(capacity=4)
    assert trail.visible_range() == (0, 0)
    assert len(trail) == 0
    assert trail.visible_points().shape == (0, 3)


@pytest.mark.parametrize("count", [1, 2, 4])
def test_growth_phase_draws_written_prefix(count):
    trail = TrailBuffer(capacity=5)
    for idx in range(count):
        trail.append(_point(idx))
    assert trail.visible_range() == (0, count)
    np.testing.assert_allclose(trail.visible_points(), [_point(idx) for idx in range(count)])


@pytest.mark.parametrize("count", [5, 6, 12, 23])
def test_full_ring_draws_whole_buffer(count):
    trail = TrailBuffer(capacity=5)
    for idx in range(count):
        trail.append(_point(idx))
        if idx + 1 >= 5:
            assert trail.visible_range() == (0, 5)
    assert trail.is_full
    assert len(trail) == 5


def test_overwrite_keeps_latest_point_per_slot():
    capacity = 4
    trail = TrailBuffer(capacity=capacity)
    total = 11
    for idx in range(total):
        trail.append(_point(idx))

    for slot in range(capacity):
        latest = max(idx for idx in range(total) if idx % capacity == slot)
        np.testing.assert_array_equal(trail.slot(slot), _point(latest))


def test_cursor_wraps_within_capacity():
    trail = TrailBuffer(capacity=3)
    seen = []
    for idx in range(7):
        trail.append(_point(idx))
        assert 0 <= trail.cursor < trail.capacity
        seen.append(trail.cursor)
    assert seen == [1, 2, 0, 1, 2, 0, 1]


def test_visible_range_query_is_idempotent():
    trail = TrailBuffer(capacity=3)
    trail.append(_point(0))
    assert trail.visible_range() == trail.visible_range()
    for idx in range(5):
        trail.append(_point(idx))
    first = trail.visible_range()
    assert trail.visible_range() == first


def test_capacity_three_wraparound_scenario():
    trail = TrailBuffer(capacity=3)
    for x in (1, 2, 3, 4):
        trail.append((x, 0, 0))

    assert trail.visible_range() == (0, 3)
    np.testing.assert_array_equal(trail.slot(0), (4, 0, 0))
    np.testing.assert_array_equal(trail.slot(1), (2, 0, 0))
    np.testing.assert_array_equal(trail.slot(2), (3, 0, 0))


def test_visible_points_is_read_only_view():
    trail = TrailBuffer(capacity=3)
    trail.append((1, 2, 3))
    view = trail.visible_points()
    with pytest.raises(ValueError):
        view[0, 0] = 9.0
    trail.append((4, 5, 6))
    np.testing.assert_array_equal(trail.slot(0), (1, 2, 3))


def test_slot_returns_a_copy():
    trail = TrailBuffer(capacity=2)
    trail.append((1, 1, 1))
    slot = trail.slot(0)
    slot[:] = 0
    np.testing.assert_array_equal(trail.slot(0), (1, 1, 1))


@pytest.mark.parametrize("capacity", [0, -3])
def test_rejects_non_positive_capacity(capacity):
    with pytest.raises(ValueError):
        TrailBuffer(capacity=capacity)
