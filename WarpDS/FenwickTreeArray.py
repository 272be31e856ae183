import logging

import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Sequence

from ._arena import as_int64_array
from .config import JIT_CACHE



logger = logging.getLogger(__name__)



# ---------- JIT-Compiled Fenwick Core Operations ----------
@njit(inline="always")
def point_add(
    tree:  np.ndarray,
    n:     np.int64,
    index: np.int64,
    delta: np.int64

) -> np.int64:

    """
    Add `delta` at 1-based `index`, climbing i += i & -i.

    Returns:
        np.int64: 1 on success, 0 if `index` is outside [1, n].
    """

    if index < 1 or index > n:
        return 0

    i = index
    while i <= n:
        tree[i] += delta
        i += i & -i
    return 1

@njit(inline="always")
def prefix_sum(
    tree:  np.ndarray,
    n:     np.int64,
    index: np.int64

) -> np.int64:

    """
    Sum over [1, index]; 0 for index <= 0, index clamped to n.
    """

    if index <= 0:
        return 0

    i     = min(index, n)
    total = 0
    while i > 0:
        total += tree[i]
        i -= i & -i
    return total

@njit(inline="always")
def range_sum(
    tree:  np.ndarray,
    n:     np.int64,
    left:  np.int64,
    right: np.int64

) -> np.int64:

    """
    Sum over [left, right] after clamping to [1, n]; 0 for an empty range.
    """

    left  = max(left, 1)
    right = min(right, n)
    if left > right:
        return 0
    return prefix_sum(tree, n, right) - prefix_sum(tree, n, left - 1)

@njit(cache=JIT_CACHE)
def build_internal(
    values: np.ndarray

) -> np.ndarray:

    """
    Linear-time construction: every slot pushes its finished partial sum to
    the slot that covers it next (i + (i & -i)).

    Args:
        values (np.ndarray): Logical array; values[0] is index 1.

    Returns:
        np.ndarray: Internal array of length n + 1, slot 0 unused.
    """

    n    = values.size
    tree = np.zeros(n + 1, dtype=np.int64)
    for i in range(1, n + 1):
        tree[i] += values[i - 1]
        parent = i + (i & -i)
        if parent <= n:
            tree[parent] += tree[i]
    return tree



# --------- FenwickTree API ---------
spec = [
    ("n"   , int64),
    ("tree", int64[:]),

]

@jitclass(spec)
class FenwickTree:
    """
    Fenwick (binary indexed) tree over a fixed 1-indexed domain [1, n].

    Slot i of the internal array aggregates the (i & -i) entries ending at i.
    Updates outside the domain are refused; prefix queries are clamped.
    """

    def __init__(
        self,
        n: int

    ) -> None:

        if n < 0:
            raise ValueError("The size of a FenwickTree must be non-negative")

        self.n    = n
        self.tree = np.zeros(n + 1, dtype=np.int64)

    def size(self) -> int:
        return self.n

    def point_add(
        self,
        index: int,
        delta: int

    ) -> int:
        """Returns 1 if applied, 0 if `index` is outside [1, n]."""

        return point_add(self.tree, self.n, index, delta)

    def prefix_sum(
        self,
        index: int

    ) -> int:

        return prefix_sum(self.tree, self.n, index)

    def range_sum(
        self,
        left:  int,
        right: int

    ) -> int:

        return range_sum(self.tree, self.n, left, right)

    def internal_array(self) -> np.ndarray:
        return self.tree.copy()

    def __len__(self) -> int:
        return self.n



# --------- Utils ---------
def build_fenwick(
    data: Sequence[int]

) -> FenwickTree:

    """
    Build a FenwickTree from a snapshot; data[0] becomes index 1.
    """

    values = as_int64_array(data)

    fenwick      = FenwickTree(values.size)
    fenwick.tree = build_internal(values)
    logger.debug("Built FenwickTree over %d slots", values.size)

    return fenwick
