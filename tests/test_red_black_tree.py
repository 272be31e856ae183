import math

import numpy as np
import pytest
from hypothesis import given, strategies

from WarpDS import RedBlackTree, Status, build_rbt, fill_rbt, remove_rbt
from WarpDS.RedBlackTreeArray import BLACK, NIL, RED

keys = strategies.integers(min_value=-10_000, max_value=10_000)


def check_red_black(rbt):
    """Assert the red-black properties and return the black height (NIL not counted)."""

    assert rbt.get_color(rbt.root) == BLACK
    assert rbt.get_color(NIL) == BLACK

    def walk(index, parent, low, high):
        if index == NIL:
            return 0
        value = rbt.get_value(index)
        assert low < value < high
        assert rbt.get_parent(index) == parent

        color = rbt.get_color(index)
        left = rbt.get_left(index)
        right = rbt.get_right(index)
        if color == RED:
            assert rbt.get_color(left) == BLACK
            assert rbt.get_color(right) == BLACK

        left_height = walk(left, index, low, value)
        right_height = walk(right, index, value, high)
        assert left_height == right_height
        return left_height + (1 if color == BLACK else 0)

    return walk(rbt.root, NIL, -math.inf, math.inf)


def test_textbook_insert_sequence():
    rbt = build_rbt([11, 2, 14, 1, 7, 15, 5, 8, 4])

    assert rbt.inorder().tolist() == [1, 2, 4, 5, 7, 8, 11, 14, 15]
    assert rbt.get_color(rbt.root) == BLACK
    assert not rbt.is_red(rbt.root)
    check_red_black(rbt)
    # the classic fixup ends with 7 at the root
    assert rbt.get_value(rbt.root) == 7


def test_empty_tree():
    rbt = RedBlackTree(0)

    assert rbt.is_empty()
    assert rbt.height == -1
    assert rbt.black_height == 0
    assert rbt.min() == (Status.EMPTY, 0)
    assert rbt.max() == (Status.EMPTY, 0)
    assert rbt.remove(3) == 0
    assert rbt.get_node(NIL) == (0, 0, 0, 0, BLACK)


def test_single_insert_is_black_root():
    rbt = RedBlackTree(1)
    assert rbt.insert(42) == 1
    assert rbt.get_color(rbt.root) == BLACK
    assert rbt.black_height == 1
    assert rbt.height == 0


def test_duplicate_insert(sample):
    rbt = build_rbt(sample)
    assert rbt.insert(30) == 0
    assert rbt.size() == sample.size


def test_min_max_contains(sample):
    rbt = build_rbt(sample)

    assert rbt.min() == (Status.OK, 10)
    assert rbt.max() == (Status.OK, 90)
    assert rbt.contains(25)
    assert not rbt.contains(26)
    assert rbt.get_value(rbt.search(70)) == 70
    assert rbt.search(71) == NIL


def test_remove_until_empty(sample):
    rbt = build_rbt(sample)

    for value in sample:
        assert rbt.remove(value) == 1
        assert not rbt.contains(value)
        if not rbt.is_empty():
            check_red_black(rbt)

    assert rbt.is_empty()
    assert rbt.root == NIL
    assert rbt.inorder().size == 0


def test_orders():
    rbt = build_rbt([2, 1, 3])
    assert rbt.preorder().tolist() == [2, 1, 3]
    assert rbt.postorder().tolist() == [1, 3, 2]


def test_arena_growth():
    rbt = RedBlackTree(1)
    values = np.arange(500, 0, -1, dtype=np.int64)

    assert fill_rbt(rbt, values) == 500
    assert rbt.capacity >= 500
    assert remove_rbt(rbt, values[::2]) == 250
    assert rbt.size() == 250
    check_red_black(rbt)


def test_build_rejects_nested_input():
    with pytest.raises(ValueError):
        build_rbt(np.zeros((2, 2)))


@given(strategies.lists(keys, max_size=150), strategies.lists(keys, max_size=150))
def test_matches_set_model(inserted, removed):
    rbt = RedBlackTree(2)
    model = set()

    for value in inserted:
        assert rbt.insert(value) == (value not in model)
        model.add(value)
    for value in removed:
        assert rbt.remove(value) == (value in model)
        model.discard(value)

    assert rbt.size() == len(model)
    assert rbt.inorder().tolist() == sorted(model)
    if model:
        assert check_red_black(rbt) == rbt.black_height
        assert rbt.height <= 2 * math.log2(len(model) + 1)
    else:
        assert rbt.root == NIL
