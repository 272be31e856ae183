import logging

import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Sequence, Tuple

from ._arena import allocate, as_int64_array, grow_rows, grow_vector, release
from .config import DEFAULT_CAPACITY, JIT_CACHE, TRIE_BITS
from .status import DUPLICATE, EMPTY, INVALID_ARGUMENT, NOT_FOUND, OK



logger = logging.getLogger(__name__)


# Node record layout:
#     [child0 | child1 | count | end]
#     child0/child1 are the edges for bit 0 and bit 1, count is the number
#     of stored values whose path visits the node, end flags a terminal.
#     Row 0 is the null handle, row 1 the root.
CHILD0      = 0
CHILD1      = 1
COUNT       = 2
END         = 3
NODE_FIELDS = 4

ROOT        = 1
BITS        = TRIE_BITS
VALUE_LIMIT = 1 << TRIE_BITS



# ---------- JIT-Compiled Trie Core Operations ----------
@njit(inline="always")
def _in_domain(
    value: np.int64

) -> bool:

    return 0 <= value < VALUE_LIMIT

@njit(inline="always")
def _bit(
    value: np.int64,
    shift: np.int64

) -> np.int64:

    return (value >> shift) & 1

@njit(inline="always")
def _terminal(
    trie:  np.ndarray,
    value: np.int64

) -> np.int64:

    """
    Row reached by following `value`'s bits MSB first, 0 if the path breaks.
    """

    node = ROOT
    for shift in range(BITS - 1, -1, -1):
        node = trie[node, CHILD0 + _bit(value, shift)]
        if node == 0:
            return 0
    return node

@njit(inline="always")
def contains(
    trie:  np.ndarray,
    value: np.int64

) -> bool:

    if not _in_domain(value):
        return False
    node = _terminal(trie, value)
    return node != 0 and trie[node, END] == 1

@njit(boundscheck=False, cache=JIT_CACHE)
def insert(
    trie:          np.ndarray,
    free:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    value:         np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Insert `value`, creating missing nodes and counting the new path.

    Membership is checked before any count is touched, so a duplicate leaves
    the trie unchanged. The caller guarantees BITS free rows.

    Returns:
        Tuple[np.int64, np.int64, np.int64]: (inserted, free, free_list_top).
    """

    if not _in_domain(value) or contains(trie, value):
        return 0, free, free_list_top

    node = ROOT
    trie[node, COUNT] += 1
    for shift in range(BITS - 1, -1, -1):
        edge  = CHILD0 + _bit(value, shift)
        child = trie[node, edge]
        if child == 0:
            child, free, free_list_top = allocate(free, free_list, free_list_top)
            trie[node, edge] = child
        node = child
        trie[node, COUNT] += 1

    trie[node, END] = 1
    return 1, free, free_list_top

@njit(boundscheck=False, cache=JIT_CACHE)
def remove(
    trie:          np.ndarray,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    path:          np.ndarray,
    value:         np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Remove `value`: clear its terminal flag, decrement the count of every
    node on its path, then prune bottom-up each node left with count 0 and
    no terminal flag, unlinking it from its parent.

    Returns:
        Tuple[np.int64, np.int64]: (removed, free_list_top).
    """

    if not contains(trie, value):
        return 0, free_list_top

    node    = ROOT
    path[0] = ROOT
    trie[node, COUNT] -= 1
    for depth in range(1, BITS + 1):
        node = trie[node, CHILD0 + _bit(value, BITS - depth)]
        path[depth] = node
        trie[node, COUNT] -= 1

    trie[node, END] = 0

    for depth in range(BITS, 0, -1):
        node = path[depth]
        if trie[node, COUNT] != 0 or trie[node, END] == 1:
            break
        parent = path[depth - 1]
        trie[parent, CHILD0 + _bit(value, BITS - depth)] = 0
        free_list_top = release(trie, node, free_list, free_list_top)

    return 1, free_list_top

@njit(cache=JIT_CACHE)
def max_xor(
    trie:  np.ndarray,
    query: np.int64

) -> np.int64:

    """
    Stored value maximising value ^ query.

    From the MSB down, follow the edge opposite to the query's bit when that
    child exists with a non-zero count, otherwise the other edge. The trie
    must not be empty.
    """

    node   = ROOT
    result = 0
    for shift in range(BITS - 1, -1, -1):
        wanted = 1 - _bit(query, shift)
        child  = trie[node, CHILD0 + wanted]
        if child != 0 and trie[child, COUNT] > 0:
            bit = wanted
        else:
            bit   = 1 - wanted
            child = trie[node, CHILD0 + bit]
        result = (result << 1) | bit
        node   = child
    return result

@njit(cache=JIT_CACHE)
def collect_values(
    trie:  np.ndarray,
    count: np.int64

) -> np.ndarray:

    """
    Stored values in ascending order (depth-first, bit 0 before bit 1).
    """

    out     = np.zeros(count, dtype=np.int64)
    written = 0
    if count == 0:
        return out

    nodes    = np.zeros(2 * BITS + 2, dtype=np.int64)
    prefixes = np.zeros(2 * BITS + 2, dtype=np.int64)
    depths   = np.zeros(2 * BITS + 2, dtype=np.int64)
    nodes[0] = ROOT
    top      = 1

    while top > 0:
        top -= 1
        node   = nodes[top]
        prefix = prefixes[top]
        depth  = depths[top]

        if depth == BITS:
            if trie[node, END] == 1:
                out[written] = prefix
                written += 1
            continue

        # bit 1 pushed first so bit 0 comes out first
        for bit in range(1, -1, -1):
            child = trie[node, CHILD0 + bit]
            if child != 0:
                nodes[top]    = child
                prefixes[top] = (prefix << 1) | bit
                depths[top]   = depth + 1
                top += 1

    return out



# --------- BitTrie API ---------
spec = [
    ("count"         , int64),
    ("trie"          , int64[:, :]),
    ("_free"         , int64),
    ("_free_list"    , int64[:]),
    ("_free_list_top", int64),
    ("_path"         , int64[:]),

]

@jitclass(spec)
class BitTrie:
    """
    Binary trie over non-negative 31-bit integers with max-XOR queries.

    Every value is a fixed-length path of 31 edges, most significant bit
    first. Nodes carry a paths-through count and are pruned once no stored
    value uses them.
    """

    def __init__(
        self,
        capacity: int

    ) -> None:

        if capacity < 0:
            raise ValueError("The capacity of a BitTrie must be non-negative")

        rows = capacity + 2
        self.count          = 0
        self.trie           = np.zeros((rows, NODE_FIELDS), dtype=np.int64)
        self._free          = 2
        self._free_list     = np.zeros(rows, dtype=np.int64)
        self._free_list_top = 0
        self._path          = np.zeros(BITS + 1, dtype=np.int64)

    def _reserve(self) -> None:
        """Make room for one full-length path."""

        while self._free_list_top + self.trie.shape[0] - self._free < BITS:
            self.trie       = grow_rows(self.trie)
            self._free_list = grow_vector(self._free_list, self.trie.shape[0])

    @property
    def root_count(self) -> int:
        """Paths-through count of the root, i.e. the number of stored values."""
        return self.trie[ROOT, COUNT]

    @property
    def bits(self) -> int:
        return BITS

    def size(self) -> int:
        return self.count

    def is_empty(self) -> bool:
        return self.count == 0

    def try_insert(
        self,
        value: int

    ) -> int:

        """
        Insert `value` and say why when nothing happened.

        Returns:
            int: OK, DUPLICATE, or INVALID_ARGUMENT for a value outside [0, 2**31).
        """

        if not _in_domain(value):
            return INVALID_ARGUMENT

        self._reserve()

        inserted, self._free, self._free_list_top = insert(
            self.trie,
            self._free,
            self._free_list,
            self._free_list_top,
            value
        )

        if inserted == 0:
            return DUPLICATE

        self.count += 1
        return OK

    def insert(
        self,
        value: int

    ) -> int:
        """Returns 1 if inserted, 0 for a duplicate or a value outside [0, 2**31)."""

        return 1 if self.try_insert(value) == OK else 0

    def contains(
        self,
        value: int

    ) -> bool:

        return contains(self.trie, value)

    def try_remove(
        self,
        value: int

    ) -> int:
        """OK, NOT_FOUND, or INVALID_ARGUMENT for a value outside [0, 2**31)."""

        if not _in_domain(value):
            return INVALID_ARGUMENT

        removed, self._free_list_top = remove(
            self.trie,
            self._free_list,
            self._free_list_top,
            self._path,
            value
        )

        if removed == 0:
            return NOT_FOUND

        self.count -= 1
        return OK

    def remove(
        self,
        value: int

    ) -> int:

        return 1 if self.try_remove(value) == OK else 0

    def max_xor(
        self,
        query: int

    ) -> Tuple[int, int]:

        """
        (status, value) where value is the stored number maximising value ^ query.

        EMPTY on an empty trie, INVALID_ARGUMENT for a query outside [0, 2**31).
        """

        if self.count == 0:
            return EMPTY, 0
        if not _in_domain(query):
            return INVALID_ARGUMENT, 0

        return OK, max_xor(self.trie, query)

    def node_count(self) -> int:
        """Rows currently in use, root included."""
        return self._free - 1 - self._free_list_top

    def to_array(self) -> np.ndarray:
        return collect_values(self.trie, self.count)

    def __len__(self) -> int:
        return self.count



# --------- Utils ---------
@njit(cache=JIT_CACHE)
def fill_trie(
    trie: 'BitTrie',
    data: np.ndarray

) -> int:

    inserted = 0
    for i in range(data.size):
        inserted += trie.insert(data[i])
    return inserted

def build_trie(
    data:     Sequence[int],
    capacity: int = DEFAULT_CAPACITY

) -> BitTrie:

    """
    Build a BitTrie from any integer sequence; values outside [0, 2**31) are skipped.
    """

    values = as_int64_array(data)

    trie     = BitTrie(max(capacity, values.size))
    inserted = fill_trie(trie, values)
    logger.debug("Built BitTrie with %d values (%d skipped)", inserted, values.size - inserted)

    return trie
