import logging

import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Sequence, Tuple

from ._arena import as_int64_array
from .config import JIT_CACHE
from .status import OK, OUT_OF_RANGE



logger = logging.getLogger(__name__)


# Implicit complete binary tree in a flat array:
#     root = 0, left(k) = 2k + 1, right(k) = 2k + 2, split m = (l + r) // 2
#     4 * n slots always suffice for this layout.
CAPACITY_FACTOR = 4



# ---------- JIT-Compiled Recursive Kernels ----------
@njit(cache=JIT_CACHE)
def build(
    values: np.ndarray,
    tree:   np.ndarray,
    node:   np.int64,
    left:   np.int64,
    right:  np.int64

) -> np.int64:

    """
    Fill `tree[node]` with the sum of values[left..right], recursing into
    both halves. Each slot is written once, so the build is O(n).
    """

    if left == right:
        tree[node] = values[left]
        return tree[node]

    mid   = (left + right) // 2
    total = build(values, tree, 2 * node + 1, left, mid) \
          + build(values, tree, 2 * node + 2, mid + 1, right)
    tree[node] = total
    return total

@njit(cache=JIT_CACHE)
def query(
    tree:  np.ndarray,
    node:  np.int64,
    left:  np.int64,
    right: np.int64,
    ql:    np.int64,
    qr:    np.int64

) -> np.int64:

    """
    Sum of the query range [ql, qr] restricted to the node range [left, right].
    """

    if qr < left or right < ql: # disjoint
        return 0
    if ql <= left and right <= qr: # contained
        return tree[node]

    mid = (left + right) // 2
    return query(tree, 2 * node + 1, left, mid, ql, qr) \
         + query(tree, 2 * node + 2, mid + 1, right, ql, qr)

@njit(cache=JIT_CACHE)
def update(
    tree:  np.ndarray,
    node:  np.int64,
    left:  np.int64,
    right: np.int64,
    index: np.int64,
    value: np.int64

) -> np.int64:

    """
    Set leaf `index` to `value` and re-aggregate every ancestor on the way back up.
    Returns the new aggregate of `node`.
    """

    if left == right:
        tree[node] = value
        return value

    mid = (left + right) // 2
    if index <= mid:
        update(tree, 2 * node + 1, left, mid, index, value)
    else:
        update(tree, 2 * node + 2, mid + 1, right, index, value)

    tree[node] = tree[2 * node + 1] + tree[2 * node + 2]
    return tree[node]

@njit(cache=JIT_CACHE)
def collect_leaves(
    tree:  np.ndarray,
    node:  np.int64,
    left:  np.int64,
    right: np.int64,
    out:   np.ndarray

) -> np.int64:

    """
    Copy the leaf aggregates (the logical array) into `out`. Returns the leaf count.
    """

    if left == right:
        out[left] = tree[node]
        return 1

    mid = (left + right) // 2
    return collect_leaves(tree, 2 * node + 1, left, mid, out) \
         + collect_leaves(tree, 2 * node + 2, mid + 1, right, out)



# --------- SegmentTree API ---------
spec = [
    ("n"   , int64),
    ("tree", int64[:]),

]

@jitclass(spec)
class SegmentTree:
    """
    Range-sum segment tree with point assignment over a fixed-length array.

    Built from a snapshot of int64 values; `n = 0` yields a valid empty tree
    on which every query reports OUT_OF_RANGE.
    """

    def __init__(
        self,
        values: np.ndarray

    ) -> None:

        self.n    = values.size
        self.tree = np.zeros(CAPACITY_FACTOR * self.n, dtype=np.int64)
        if self.n > 0:
            build(values, self.tree, 0, 0, self.n - 1)

    def size(self) -> int:
        return self.n

    def point_set(
        self,
        index: int,
        value: int

    ) -> int:
        """Assign A[index] = value. Returns 1 on success, 0 if `index` is outside [0, n)."""

        if index < 0 or index >= self.n:
            return 0

        update(self.tree, 0, 0, self.n - 1, index, value)
        return 1

    def range_sum(
        self,
        left:  int,
        right: int

    ) -> Tuple[int, int]:

        """
        Inclusive range sum as (status, value).

        OUT_OF_RANGE when left > right or either end lies outside [0, n).
        """

        if left > right or left < 0 or right >= self.n:
            return OUT_OF_RANGE, 0

        return OK, query(self.tree, 0, 0, self.n - 1, left, right)

    def values(self) -> np.ndarray:
        """Current logical array, read back from the leaves."""

        out = np.zeros(self.n, dtype=np.int64)
        if self.n > 0:
            collect_leaves(self.tree, 0, 0, self.n - 1, out)
        return out

    def internal_array(self) -> np.ndarray:
        return self.tree.copy()

    def __len__(self) -> int:
        return self.n



# --------- Utils ---------
def build_segment_tree(
    data: Sequence[int]

) -> SegmentTree:

    """
    Build a SegmentTree from any integer sequence.
    """

    values = as_int64_array(data)

    segment_tree = SegmentTree(values)
    logger.debug("Built SegmentTree over %d values (%d slots)", values.size, CAPACITY_FACTOR * values.size)

    return segment_tree
