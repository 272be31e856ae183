import numpy as np
import pytest
from hypothesis import given, strategies

from WarpDS import SkipList, build_skip_list
from WarpDS.SkipListArray import MAX_LEVEL, random_level, splitmix64

keys = strategies.integers(min_value=-10_000, max_value=10_000)
seeds = strategies.integers(min_value=0, max_value=2**63 - 1)


def check_levels(skip_list):
    """Every level is sorted, a subsequence of the level below it, and the top level is occupied."""

    below = skip_list.to_array().tolist()
    assert below == sorted(set(below))
    if below:
        assert skip_list.level_counts()[skip_list.max_level] > 0
    else:
        assert skip_list.max_level == 0
    for level in range(1, MAX_LEVEL):
        current = skip_list.level_values(level).tolist()
        assert current == sorted(current)
        assert set(current) <= set(below)
        if level > skip_list.max_level:
            assert current == []
        below = current


def test_seeded_scenario():
    skip_list = build_skip_list([10, 5, 20, 1, 15, 25, 7, 12], seed=12345)

    assert skip_list.contains(15)
    assert not skip_list.contains(6)
    assert skip_list.to_array().tolist() == [1, 5, 7, 10, 12, 15, 20, 25]
    check_levels(skip_list)


def test_same_seed_same_shape():
    values = np.arange(64, dtype=np.int64)
    first = build_skip_list(values, seed=7)
    second = build_skip_list(values, seed=7)

    assert first.max_level == second.max_level
    assert first.level_counts().tolist() == second.level_counts().tolist()
    assert [first.level_of(v) for v in values] == [second.level_of(v) for v in values]


def test_empty_list():
    skip_list = SkipList(0, 1)

    assert skip_list.is_empty()
    assert skip_list.size() == 0
    assert skip_list.max_level == 0
    assert not skip_list.contains(0)
    assert skip_list.remove(0) == 0
    assert skip_list.to_array().size == 0
    assert skip_list.level_of(3) == -1


def test_duplicates_and_removal():
    skip_list = SkipList(4, 99)

    assert skip_list.insert(3) == 1
    assert skip_list.insert(3) == 0
    assert skip_list.size() == 1
    assert skip_list.remove(4) == 0
    assert skip_list.remove(3) == 1
    assert skip_list.remove(3) == 0
    assert skip_list.is_empty()
    assert skip_list.max_level == 0


def test_level_counts_match_levels():
    skip_list = build_skip_list(np.arange(200, dtype=np.int64), seed=2024)
    counts = skip_list.level_counts()

    assert counts[0] == 200
    assert all(counts[level] >= counts[level + 1] for level in range(MAX_LEVEL - 1))
    assert counts[skip_list.max_level] > 0
    for value in (0, 57, 199):
        assert 0 <= skip_list.level_of(value) <= skip_list.max_level


def test_top_level_shrinks_when_tallest_nodes_leave():
    values = np.arange(300, dtype=np.int64)
    skip_list = build_skip_list(values, seed=77)

    # strip the tallest nodes first; the top level must follow them down
    tallest_first = sorted(values.tolist(), key=skip_list.level_of, reverse=True)
    for value in tallest_first[:-1]:
        assert skip_list.remove(value) == 1
        check_levels(skip_list)

    assert skip_list.size() == 1
    assert skip_list.max_level == skip_list.level_of(tallest_first[-1])


def test_level_values_out_of_range():
    skip_list = build_skip_list([1, 2, 3])
    assert skip_list.level_values(-1).size == 0
    assert skip_list.level_values(MAX_LEVEL).size == 0


def test_random_level_is_clamped():
    state = np.uint64(1)
    for _ in range(1000):
        state, level = random_level(state, MAX_LEVEL)
        assert 0 <= level <= MAX_LEVEL - 1


def test_random_level_promotes_about_half():
    state = np.uint64(1)
    levels = []
    for _ in range(4000):
        state, level = random_level(state, MAX_LEVEL)
        levels.append(level)

    promoted = sum(1 for level in levels if level >= 1) / len(levels)
    assert 0.45 < promoted < 0.55
    assert random_level(np.uint64(5), 1) == (np.uint64(5), 0)


def test_splitmix64_is_deterministic():
    assert splitmix64(np.uint64(0)) == splitmix64(np.uint64(0))
    assert splitmix64(np.uint64(0))[1] != splitmix64(np.uint64(1))[1]


def test_constructor_rejects_negative_arguments():
    with pytest.raises(ValueError):
        SkipList(-1, 0)
    with pytest.raises(ValueError):
        SkipList(4, -3)


@given(
    strategies.lists(keys, max_size=150),
    strategies.lists(keys, max_size=150),
    seeds,
)
def test_matches_set_model(inserted, removed, seed):
    skip_list = SkipList(1, seed)
    model = set()

    for value in inserted:
        assert skip_list.insert(value) == (value not in model)
        model.add(value)
    for value in removed:
        assert skip_list.remove(value) == (value in model)
        model.discard(value)

    assert skip_list.size() == len(model)
    assert skip_list.to_array().tolist() == sorted(model)
    assert 0 <= skip_list.max_level < MAX_LEVEL
    check_levels(skip_list)
