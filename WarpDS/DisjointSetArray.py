import logging

import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Iterable, Tuple

from ._arena import as_int64_array
from .config import JIT_CACHE



logger = logging.getLogger(__name__)



# ---------- JIT-Compiled DSU Core Operations ----------
@njit(inline="always")
def find(
    parent:  np.ndarray,
    element: np.int64

) -> np.int64:

    """
    Representative of `element`'s set with full path compression: a first
    pass locates the root, a second re-points every visited node at it.

    Returns:
        np.int64: The root index, or -1 if `element` is outside [0, n).
    """

    if element < 0 or element >= parent.size:
        return -1

    root = element
    while parent[root] != root:
        root = parent[root]

    current = element
    while parent[current] != root:
        nxt             = parent[current]
        parent[current] = root
        current         = nxt

    return root

@njit(inline="always")
def union(
    parent: np.ndarray,
    size:   np.ndarray,
    x:      np.int64,
    y:      np.int64

) -> np.int64:

    """
    Union by size. The smaller root goes under the larger one; on a tie
    y's root goes under x's root.

    Returns:
        np.int64: 1 if two sets were merged, 0 if out of range or already joined.
    """

    n = parent.size
    if x < 0 or x >= n or y < 0 or y >= n:
        return 0

    root_x = find(parent, x)
    root_y = find(parent, y)
    if root_x == root_y:
        return 0

    if size[root_x] < size[root_y]:
        root_x, root_y = root_y, root_x

    parent[root_y]  = root_x
    size[root_x]   += size[root_y]
    return 1



# --------- DisjointSet API ---------
spec = [
    ("n"     , int64),
    ("sets"  , int64),
    ("parent", int64[:]),
    ("size"  , int64[:]),

]

@jitclass(spec)
class DisjointSet:
    """
    Disjoint-set union over the fixed domain {0, ..., n - 1}.

    Union by size plus full path compression; `size` is only meaningful at
    roots. Out-of-range elements are reported, never raised.
    """

    def __init__(
        self,
        n: int

    ) -> None:

        if n < 0:
            raise ValueError("The domain size of a DisjointSet must be non-negative")

        self.n      = n
        self.sets   = n
        self.parent = np.arange(n).astype(np.int64)
        self.size   = np.ones(n, dtype=np.int64)

    def find(
        self,
        element: int

    ) -> int:
        """Root of `element`'s set, or -1 if out of range."""

        return find(self.parent, element)

    def union(
        self,
        x: int,
        y: int

    ) -> int:
        """Returns 1 if two sets were merged, 0 otherwise."""

        merged = union(self.parent, self.size, x, y)
        self.sets -= merged
        return merged

    def same_set(
        self,
        x: int,
        y: int

    ) -> bool:

        if x < 0 or x >= self.n or y < 0 or y >= self.n:
            return False
        return find(self.parent, x) == find(self.parent, y)

    def set_size(
        self,
        element: int

    ) -> int:
        """Size of `element`'s set, 0 if out of range."""

        root = find(self.parent, element)
        if root == -1:
            return 0
        return self.size[root]

    def set_count(self) -> int:
        return self.sets

    def parents(self) -> np.ndarray:
        """Copy of the raw parent array (shows the effect of path compression)."""
        return self.parent.copy()

    def __len__(self) -> int:
        return self.n



# --------- Utils ---------
@njit(cache=JIT_CACHE)
def union_all(
    dsu:   'DisjointSet',
    pairs: np.ndarray

) -> int:

    """
    Apply `union` to every row of an [m, 2] array of element pairs.

    Returns:
        int: Number of unions that merged two sets.
    """

    merged = 0
    for i in range(pairs.shape[0]):
        merged += dsu.union(pairs[i, 0], pairs[i, 1])
    return merged

def union_pairs(
    dsu:   DisjointSet,
    pairs: Iterable[Tuple[int, int]]

) -> int:

    """
    Union every (x, y) pair of an iterable; out-of-range pairs are skipped.
    """

    array = as_int64_array(np.asarray(list(pairs)).reshape(-1, 2), ndim=2)
    merged = union_all(dsu, array)
    logger.debug("Applied %d unions (%d merged), %d sets remain", array.shape[0], merged, dsu.set_count())

    return merged
