import pytest
from hypothesis import given, strategies

from WarpDS import DisjointSet, union_pairs


def test_unions_merge_sets():
    dsu = DisjointSet(6)

    assert dsu.union(0, 1) == 1
    assert dsu.union(2, 3) == 1
    assert dsu.union(0, 2) == 1

    assert dsu.set_count() == 3
    assert dsu.same_set(1, 3)
    assert not dsu.same_set(1, 4)
    assert dsu.set_size(0) == 4


def test_union_of_joined_elements_is_a_no_op():
    dsu = DisjointSet(3)

    assert dsu.union(0, 1) == 1
    assert dsu.union(1, 0) == 0
    assert dsu.union(2, 2) == 0
    assert dsu.set_count() == 2


def test_tie_attaches_second_root_under_first():
    dsu = DisjointSet(4)
    dsu.union(2, 3)
    assert dsu.find(3) == 2


def test_smaller_set_goes_under_larger():
    dsu = DisjointSet(5)
    dsu.union(0, 1)
    dsu.union(0, 2)
    dsu.union(3, 0)

    assert dsu.find(3) == 0
    assert dsu.set_size(3) == 4


def test_find_compresses_paths():
    dsu = DisjointSet(4)
    dsu.union(2, 3)   # 3 -> 2
    dsu.union(0, 1)   # 1 -> 0
    dsu.union(0, 2)   # 2 -> 0

    assert dsu.parents().tolist() == [0, 0, 0, 2]
    assert dsu.find(3) == 0
    assert dsu.parents().tolist() == [0, 0, 0, 0]


def test_out_of_range_elements():
    dsu = DisjointSet(3)

    assert dsu.find(3) == -1
    assert dsu.find(-1) == -1
    assert dsu.union(0, 7) == 0
    assert not dsu.same_set(-1, -1)
    assert not dsu.same_set(0, 5)
    assert dsu.set_size(9) == 0
    assert dsu.set_count() == 3


@pytest.mark.parametrize("x, y", [(3, 9), (9, 3), (-1, 3), (3, -4)])
def test_refused_union_leaves_forest_untouched(x, y):
    dsu = DisjointSet(4)
    dsu.union(2, 3)
    dsu.union(0, 1)
    dsu.union(0, 2)
    before = dsu.parents().tolist()
    assert before == [0, 0, 0, 2]

    assert dsu.union(x, y) == 0
    assert not dsu.same_set(x, y)

    assert dsu.parents().tolist() == before
    assert dsu.set_count() == 1


def test_empty_domain():
    dsu = DisjointSet(0)

    assert dsu.set_count() == 0
    assert len(dsu) == 0
    assert dsu.find(0) == -1


def test_negative_domain_rejected():
    with pytest.raises(ValueError):
        DisjointSet(-2)


def test_union_pairs():
    dsu = DisjointSet(5)
    assert union_pairs(dsu, [(0, 1), (1, 2), (0, 2), (3, 9)]) == 2
    assert dsu.set_count() == 3
    assert union_pairs(dsu, []) == 0


@given(
    strategies.integers(min_value=1, max_value=40).flatmap(
        lambda n: strategies.tuples(
            strategies.just(n),
            strategies.lists(
                strategies.tuples(strategies.integers(0, n - 1), strategies.integers(0, n - 1)),
                max_size=60,
            ),
        )
    )
)
def test_matches_label_model(case):
    n, pairs = case
    dsu = DisjointSet(n)
    labels = list(range(n))

    for x, y in pairs:
        merged = dsu.union(x, y)
        assert merged == (labels[x] != labels[y])
        if merged:
            old, new = labels[y], labels[x]
            labels = [new if label == old else label for label in labels]

    assert dsu.set_count() == len(set(labels))
    for x in range(n):
        assert dsu.set_size(x) == labels.count(labels[x])
        for y in range(n):
            assert dsu.same_set(x, y) == (labels[x] == labels[y])
