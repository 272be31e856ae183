import pytest
from hypothesis import given, strategies

from WarpDS import BitTrie, Status, build_trie

words = strategies.integers(min_value=0, max_value=2**31 - 1)


def test_max_xor_prefers_complement():
    trie = build_trie([3, 7, 11, 13])

    assert trie.max_xor(6) == (Status.OK, 11)
    assert trie.max_xor(0) == (Status.OK, 13)


def test_empty_trie():
    trie = BitTrie(4)

    assert trie.is_empty()
    assert trie.max_xor(5) == (Status.EMPTY, 0)
    assert trie.remove(5) == 0
    assert trie.root_count == 0
    assert trie.to_array().size == 0


@pytest.mark.parametrize("value", [-1, 2**31, 2**40])
def test_out_of_domain_values(value):
    trie = build_trie([1])

    assert trie.insert(value) == 0
    assert not trie.contains(value)
    assert trie.remove(value) == 0
    assert trie.max_xor(value) == (Status.INVALID_ARGUMENT, 0)
    assert trie.size() == 1


def test_duplicate_does_not_change_counts():
    trie = BitTrie(4)

    assert trie.insert(9) == 1
    nodes = trie.node_count()
    assert trie.insert(9) == 0
    assert trie.root_count == 1
    assert trie.node_count() == nodes


def test_try_insert_and_try_remove_report_refusals():
    trie = BitTrie(4)

    assert trie.try_insert(12) == Status.OK
    assert trie.try_insert(12) == Status.DUPLICATE
    assert trie.try_insert(-1) == Status.INVALID_ARGUMENT
    assert trie.try_insert(2**31) == Status.INVALID_ARGUMENT
    assert trie.size() == 1

    assert trie.try_remove(5) == Status.NOT_FOUND
    assert trie.try_remove(-1) == Status.INVALID_ARGUMENT
    assert trie.size() == 1
    assert trie.try_remove(12) == Status.OK
    assert trie.try_remove(12) == Status.NOT_FOUND
    assert trie.is_empty()


def test_remove_prunes_unused_paths():
    trie = BitTrie(4)
    assert trie.node_count() == 1

    trie.insert(0)
    assert trie.node_count() == 1 + trie.bits
    trie.insert(1)
    # 0 and 1 share every node but the last edge
    assert trie.node_count() == 2 + trie.bits

    assert trie.remove(0) == 1
    assert trie.node_count() == 1 + trie.bits
    assert trie.contains(1)
    assert not trie.contains(0)

    assert trie.remove(1) == 1
    assert trie.node_count() == 1
    assert trie.root_count == 0


def test_largest_value():
    top = 2**31 - 1
    trie = build_trie([0, top])

    assert trie.max_xor(0) == (Status.OK, top)
    assert trie.max_xor(top) == (Status.OK, 0)
    assert trie.to_array().tolist() == [0, top]


def test_build_skips_out_of_domain_values():
    trie = build_trie([5, -3, 2**31, 5, 8])
    assert trie.to_array().tolist() == [5, 8]


@given(strategies.lists(words, min_size=1, max_size=60), words)
def test_max_xor_is_optimal(data, query):
    trie = build_trie(data)

    status, value = trie.max_xor(query)

    assert status == Status.OK
    assert value in data
    assert value ^ query == max(item ^ query for item in data)


@given(strategies.lists(words, max_size=60), strategies.lists(words, max_size=60))
def test_matches_set_model(inserted, removed):
    trie = BitTrie(8)
    model = set()

    for value in inserted:
        assert trie.insert(value) == (value not in model)
        model.add(value)
    for value in removed + list(inserted[:10]):
        assert trie.remove(value) == (value in model)
        model.discard(value)

    assert trie.size() == len(model) == trie.root_count
    assert trie.to_array().tolist() == sorted(model)
    if not model:
        assert trie.node_count() == 1
