import numpy as np
import pytest
from hypothesis import given, strategies

from WarpDS import SegmentTree, Status, build_segment_tree

values = strategies.integers(min_value=-1_000, max_value=1_000)


def test_range_sums_and_point_set():
    segment_tree = build_segment_tree([1, 3, 5, 7, 9, 11])

    assert segment_tree.range_sum(0, 5) == (Status.OK, 36)
    assert segment_tree.range_sum(1, 3) == (Status.OK, 15)
    assert segment_tree.point_set(2, 6) == 1
    assert segment_tree.range_sum(1, 3) == (Status.OK, 16)
    assert segment_tree.values().tolist() == [1, 3, 6, 7, 9, 11]


@pytest.mark.parametrize("left, right", [(3, 2), (-1, 2), (0, 6), (6, 6)])
def test_invalid_ranges(left, right):
    segment_tree = build_segment_tree([1, 3, 5, 7, 9, 11])
    assert segment_tree.range_sum(left, right) == (Status.OUT_OF_RANGE, 0)


def test_point_set_out_of_range():
    segment_tree = build_segment_tree([4, 4])

    assert segment_tree.point_set(2, 1) == 0
    assert segment_tree.point_set(-1, 1) == 0
    assert segment_tree.values().tolist() == [4, 4]


def test_empty_tree():
    segment_tree = SegmentTree(np.zeros(0, dtype=np.int64))

    assert segment_tree.size() == 0
    assert segment_tree.range_sum(0, 0) == (Status.OUT_OF_RANGE, 0)
    assert segment_tree.point_set(0, 1) == 0
    assert segment_tree.values().size == 0


def test_single_element():
    segment_tree = build_segment_tree([42])

    assert segment_tree.range_sum(0, 0) == (Status.OK, 42)
    assert segment_tree.internal_array()[0] == 42


def test_root_slot_holds_total():
    data = np.arange(1, 17, dtype=np.int64)
    segment_tree = build_segment_tree(data)

    internal = segment_tree.internal_array()
    assert internal.size == 4 * data.size
    assert internal[0] == data.sum()


@given(
    strategies.lists(values, min_size=1, max_size=60),
    strategies.lists(strategies.tuples(strategies.integers(-2, 62), values), max_size=40),
    strategies.integers(-2, 62),
    strategies.integers(-2, 62),
)
def test_matches_naive_model(data, assignments, left, right):
    segment_tree = build_segment_tree(data)
    model = list(data)

    for index, value in assignments:
        applied = segment_tree.point_set(index, value)
        assert applied == (0 <= index < len(model))
        if applied:
            model[index] = value

    status, total = segment_tree.range_sum(left, right)
    if 0 <= left <= right < len(model):
        assert status == Status.OK
        assert total == sum(model[left:right + 1])
    else:
        assert (status, total) == (Status.OUT_OF_RANGE, 0)
    assert segment_tree.values().tolist() == model
