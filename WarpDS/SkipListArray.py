import logging

import numpy as np
from numba import njit, int64, uint64
from numba.experimental import jitclass
from typing import Optional, Sequence, Tuple

from ._arena import allocate, as_int64_array, grow_rows, grow_vector, needs_growth
from .config import DEFAULT_CAPACITY, JIT_CACHE, SKIP_LIST_MAX_LEVEL, SKIP_LIST_P, SKIP_LIST_SEED



logger = logging.getLogger(__name__)


# Arena layout:
#     value[N], level[N], forward[N, MAX_LEVEL]
#     Row 0 is the null link, row 1 the head sentinel (-infinity),
#     data nodes start at row 2. A node of level L uses forward[:, 0..L].
NULL      = 0
HEAD      = 1
MAX_LEVEL = SKIP_LIST_MAX_LEVEL
P         = SKIP_LIST_P


# SplitMix64 constants
GOLDEN_GAMMA = np.uint64(0x9E3779B97F4A7C15)
MIX_1        = np.uint64(0xBF58476D1CE4E5B9)
MIX_2        = np.uint64(0x94D049BB133111EB)
SHIFT_30     = np.uint64(30)
SHIFT_27     = np.uint64(27)
SHIFT_31     = np.uint64(31)
SHIFT_11     = np.uint64(11)
TO_UNIT      = 1.0 / 9007199254740992.0  # 2**-53



# ---------- JIT-Compiled Random Level Source ----------
@njit(inline="always")
def splitmix64(
    state: np.uint64

) -> Tuple[np.uint64, np.uint64]:

    """
    Advance a SplitMix64 generator.

    :param state: Current 64-bit generator state
    :return: (new_state, 64 random bits)
    """

    state = state + GOLDEN_GAMMA
    z     = state
    z     = (z ^ (z >> SHIFT_30)) * MIX_1
    z     = (z ^ (z >> SHIFT_27)) * MIX_2
    return state, z ^ (z >> SHIFT_31)

@njit(inline="always")
def random_level(
    state:     np.uint64,
    max_level: np.int64

) -> Tuple[np.uint64, np.int64]:

    """
    Draw a node level: the number of consecutive coin flips that land below P
    before the first failure, clamped to max_level - 1. Each flip takes the
    top 53 bits of a fresh SplitMix64 word as a uniform double in [0, 1).

    :return: (new_state, level)
    """

    level = 0
    while level < max_level - 1:
        state, bits = splitmix64(state)
        if np.float64(bits >> SHIFT_11) * TO_UNIT >= P:
            break
        level += 1
    return state, level



# ---------- JIT-Compiled Skip List Core Operations ----------
@njit(inline="always")
def find_predecessors(
    values:     np.ndarray,
    forward:    np.ndarray,
    top_level:  np.int64,
    value:      np.int64,
    update:     np.ndarray

) -> np.int64:

    """
    Descend from the head at `top_level`, storing in `update[l]` the
    rightmost node at level l whose value is strictly less than `value`.

    Returns:
        np.int64: The level-0 successor of the final predecessor (NULL if none).
    """

    current = HEAD
    for level in range(top_level, -1, -1):
        nxt = forward[current, level]
        while nxt != NULL and values[nxt] < value:
            current = nxt
            nxt     = forward[current, level]
        update[level] = current
    return forward[current, 0]

@njit(boundscheck=False, cache=JIT_CACHE)
def insert(
    values:        np.ndarray,
    levels:        np.ndarray,
    forward:       np.ndarray,
    top_level:     np.int64,
    free:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    update:        np.ndarray,
    state:         np.uint64,
    value:         np.int64

) -> Tuple[np.int64, np.int64, np.int64, np.int64, np.uint64]:

    """
    Insert `value` unless already present.

    A level L is drawn for the new node; levels above the current top
    get the head as predecessor and raise the top. The node is spliced in
    between each predecessor and its former successor on levels 0..L.

    Returns
    -------
    Tuple[np.int64, np.int64, np.int64, np.int64, np.uint64]
        (inserted, top_level, free, free_list_top, state).
    """

    successor = find_predecessors(values, forward, top_level, value, update)
    if successor != NULL and values[successor] == value:
        return 0, top_level, free, free_list_top, state

    state, new_level = random_level(state, forward.shape[1])
    if new_level > top_level:
        for level in range(top_level + 1, new_level + 1):
            update[level] = HEAD
        top_level = new_level

    node, free, free_list_top = allocate(free, free_list, free_list_top)
    values[node] = value
    levels[node] = new_level
    for level in range(new_level + 1):
        forward[node, level]          = forward[update[level], level]
        forward[update[level], level] = node

    return 1, top_level, free, free_list_top, state

@njit(boundscheck=False, cache=JIT_CACHE)
def remove(
    values:        np.ndarray,
    levels:        np.ndarray,
    forward:       np.ndarray,
    top_level:     np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    update:        np.ndarray,
    value:         np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Unlink the node holding `value` from every level it reaches, free it,
    then lower the top level while the head's link at that level is empty.

    Returns:
        Tuple[np.int64, np.int64, np.int64]: (removed, top_level, free_list_top).
    """

    node = find_predecessors(values, forward, top_level, value, update)
    if node == NULL or values[node] != value:
        return 0, top_level, free_list_top

    for level in range(levels[node] + 1):
        if forward[update[level], level] == node:
            forward[update[level], level] = forward[node, level]

    values[node]     = 0
    levels[node]     = 0
    forward[node, :] = NULL
    free_list[free_list_top] = node
    free_list_top += 1

    while top_level > 0 and forward[HEAD, top_level] == NULL:
        top_level -= 1

    return 1, top_level, free_list_top

@njit(inline="always")
def _search(
    values:    np.ndarray,
    forward:   np.ndarray,
    top_level: np.int64,
    value:     np.int64

) -> np.int64:

    current = HEAD
    for level in range(top_level, -1, -1):
        nxt = forward[current, level]
        while nxt != NULL and values[nxt] < value:
            current = nxt
            nxt     = forward[current, level]

    candidate = forward[current, 0]
    if candidate != NULL and values[candidate] == value:
        return candidate
    return NULL

@njit(cache=JIT_CACHE)
def level_traversal(
    values:  np.ndarray,
    forward: np.ndarray,
    level:   np.int64,
    count:   np.int64

) -> np.ndarray:

    """
    Values reachable from the head along `level`, in list order.
    """

    out     = np.zeros(count, dtype=np.int64)
    written = 0
    current = forward[HEAD, level]
    while current != NULL and written < count:
        out[written] = values[current]
        written += 1
        current = forward[current, level]
    return out[:written].copy()



# --------- SkipList API ---------
spec = [
    ("count"         , int64),
    ("top_level"     , int64),
    ("values"        , int64[:]),
    ("levels"        , int64[:]),
    ("forward"       , int64[:, :]),
    ("_free"         , int64),
    ("_free_list"    , int64[:]),
    ("_free_list_top", int64),
    ("_update"       , int64[:]),
    ("_state"        , uint64),

]

@jitclass(spec)
class SkipList:
    """
    Array-backed skip list over unique int64 values.

    Node levels are geometric with p = 1/2, drawn from a SplitMix64 generator
    owned by the instance, so a given seed always produces the same shape.

    Attributes:
        count (int64): Number of stored values.
        top_level (int64): Highest level any data node currently reaches.
        values (int64[:]): Value of each row.
        levels (int64[:]): Level of each row.
        forward (int64[:, :]): Forward links, one column per level.
    """

    def __init__(
        self,
        capacity: int,
        seed:     int

    ) -> None:

        if capacity < 0:
            raise ValueError("The capacity of a SkipList must be non-negative")
        if seed < 0:
            raise ValueError("The seed of a SkipList must be non-negative")

        rows = capacity + 2
        self.count          = 0
        self.top_level      = 0
        self.values         = np.zeros(rows, dtype=np.int64)
        self.levels         = np.zeros(rows, dtype=np.int64)
        self.forward        = np.zeros((rows, MAX_LEVEL), dtype=np.int64)
        self._free          = 2
        self._free_list     = np.zeros(rows, dtype=np.int64)
        self._free_list_top = 0
        self._update        = np.zeros(MAX_LEVEL, dtype=np.int64)
        self._state         = np.uint64(seed)

        self.levels[HEAD] = MAX_LEVEL - 1

    def _reserve(self) -> None:
        if needs_growth(self.forward, self._free, self._free_list_top):
            self.forward    = grow_rows(self.forward)
            rows            = self.forward.shape[0]
            self.values     = grow_vector(self.values, rows)
            self.levels     = grow_vector(self.levels, rows)
            self._free_list = grow_vector(self._free_list, rows)

    @property
    def max_level(self) -> int:
        """Current max level (0 when empty)."""
        return self.top_level

    @property
    def capacity(self) -> int:
        return self.forward.shape[0] - 2

    def size(self) -> int:
        return self.count

    def is_empty(self) -> bool:
        return self.count == 0

    def insert(
        self,
        value: int

    ) -> int:
        """Returns 1 if inserted, 0 if the value was already present."""

        self._reserve()

        inserted, self.top_level, self._free, self._free_list_top, self._state = insert(
            self.values,
            self.levels,
            self.forward,
            self.top_level,
            self._free,
            self._free_list,
            self._free_list_top,
            self._update,
            self._state,
            value
        )

        self.count += inserted
        return inserted

    def remove(
        self,
        value: int

    ) -> int:
        """Returns 1 if the value was found and removed, 0 otherwise."""

        if self.count == 0:
            return 0

        removed, self.top_level, self._free_list_top = remove(
            self.values,
            self.levels,
            self.forward,
            self.top_level,
            self._free_list,
            self._free_list_top,
            self._update,
            value
        )

        self.count -= removed
        return removed

    def contains(
        self,
        value: int

    ) -> bool:

        return _search(self.values, self.forward, self.top_level, value) != NULL

    def level_of(
        self,
        value: int

    ) -> int:

        """Level of the node holding `value`, or -1 if absent."""

        node = _search(self.values, self.forward, self.top_level, value)
        if node == NULL:
            return -1
        return self.levels[node]

    def to_array(self) -> np.ndarray:
        """Ascending level-0 traversal."""
        return level_traversal(self.values, self.forward, 0, self.count)

    def level_values(
        self,
        level: int

    ) -> np.ndarray:

        if level < 0 or level >= MAX_LEVEL:
            return np.zeros(0, dtype=np.int64)
        return level_traversal(self.values, self.forward, level, self.count)

    def level_counts(self) -> np.ndarray:
        """Number of data nodes linked at each level."""

        counts = np.zeros(MAX_LEVEL, dtype=np.int64)
        for level in range(MAX_LEVEL):
            current = self.forward[HEAD, level]
            while current != NULL:
                counts[level] += 1
                current = self.forward[current, level]
        return counts

    def __len__(self) -> int:
        return self.count



# --------- Utils ---------
@njit(cache=JIT_CACHE)
def fill_skip_list(
    skip_list: 'SkipList',
    data:      np.ndarray

) -> int:

    inserted = 0
    for i in range(data.size):
        inserted += skip_list.insert(data[i])
    return inserted

def build_skip_list(
    data:     Sequence[int],
    seed:     Optional[int] = None,
    capacity: int = DEFAULT_CAPACITY

) -> SkipList:

    """
    Build a SkipList from any integer sequence.

    :param data: Values to insert, in insertion order
    :param seed: Generator seed; the configured default when omitted
    :param capacity: Minimum number of data rows to preallocate
    """

    values = as_int64_array(data)

    if seed is None:
        seed = SKIP_LIST_SEED

    skip_list = SkipList(max(capacity, values.size), seed)
    inserted  = fill_skip_list(skip_list, values)
    logger.debug("Built SkipList with %d values, seed=%d, top level %d", inserted, seed, skip_list.top_level)

    return skip_list
