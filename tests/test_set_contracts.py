"""Contracts shared by every set-like structure: emptiness, size accounting, membership."""

import pytest
from hypothesis import given, strategies

from WarpDS import AVLTree, BitTrie, RedBlackTree, SkipList

FACTORIES = {
    "avl": lambda: AVLTree(2),
    "red_black": lambda: RedBlackTree(2),
    "skip_list": lambda: SkipList(2, 31337),
    "bit_trie": lambda: BitTrie(2),
}

# the trie only stores 31-bit non-negative words
members = strategies.integers(min_value=0, max_value=5_000)


def ascending_values(structure):
    if hasattr(structure, "to_array"):
        return structure.to_array().tolist()
    return structure.inorder().tolist()


@pytest.fixture(scope="module", params=sorted(FACTORIES))
def factory(request):
    return FACTORIES[request.param]


def test_fresh_structure_is_empty(factory):
    structure = factory()
    assert structure.is_empty()
    assert structure.size() == 0
    assert ascending_values(structure) == []


@given(data=strategies.lists(members, unique=True, max_size=80))
def test_insert_then_remove_all_restores_empty(factory, data):
    structure = factory()

    for value in data:
        assert structure.insert(value) == 1
    for value in reversed(data):
        assert structure.remove(value) == 1

    assert structure.is_empty()
    assert structure.size() == 0
    assert ascending_values(structure) == []
    if isinstance(structure, (AVLTree, RedBlackTree)):
        assert structure.root == 0
        assert structure.height == -1
    if isinstance(structure, BitTrie):
        assert structure.root_count == 0


@given(
    operations=strategies.lists(
        strategies.tuples(strategies.booleans(), strategies.integers(0, 40)),
        max_size=120,
    )
)
def test_size_changes_by_one_per_successful_operation(factory, operations):
    structure = factory()

    for is_insert, value in operations:
        before = structure.size()
        if is_insert:
            changed = structure.insert(value)
            assert structure.size() == before + changed
        else:
            changed = structure.remove(value)
            assert structure.size() == before - changed


@given(
    data=strategies.lists(members, max_size=80),
    lookups=strategies.lists(members, max_size=40),
)
def test_contains_exactly_what_was_inserted(factory, data, lookups):
    structure = factory()
    for value in data:
        structure.insert(value)

    expected = set(data)
    for value in list(expected) + lookups:
        assert structure.contains(value) == (value in expected)
