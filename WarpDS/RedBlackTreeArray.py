import logging

import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Sequence, Tuple

from ._arena import (
    LEFT, RIGHT, VALUE,
    allocate, as_int64_array, grow_rows, grow_vector, needs_growth, release,
    inorder_traversal, preorder_traversal, postorder_traversal, subtree_height,
)
from .config import DEFAULT_CAPACITY, JIT_CACHE
from .status import EMPTY, OK



logger = logging.getLogger(__name__)


# Node record layout:
#     [value | left | right | parent | color]
#     Row 0 is the NIL sentinel. Zero-filled rows are black, so the
#     sentinel is black from the moment the arena exists.
PARENT      = 3
COLOR       = 4
NODE_FIELDS = 5

NIL   = 0
BLACK = 0
RED   = 1



# ---------- JIT-Compiled Rotations ----------
@njit(inline="always")
def _transplant(
    tree: np.ndarray,
    root: np.int64,
    u:    np.int64,
    v:    np.int64

) -> np.int64:

    """
    Replace the subtree rooted at `u` by the one rooted at `v`.

    `v.parent` is written even when `v` is NIL; the delete fixup reads it.
    Returns the (possibly new) root.
    """

    parent = tree[u, PARENT]
    if parent == NIL:
        root = v
    elif u == tree[parent, LEFT]:
        tree[parent, LEFT] = v
    else:
        tree[parent, RIGHT] = v
    tree[v, PARENT] = parent
    return root

@njit(inline="always")
def left_rotate(
    tree: np.ndarray,
    root: np.int64,
    x:    np.int64

) -> np.int64:

    """
    Rotate left around `x`: its right child `y` takes its place and `x`
    becomes y's left child. Parent links are kept consistent, NIL included.

    :return: The (possibly new) root index
    """

    y = tree[x, RIGHT]

    tree[x, RIGHT] = tree[y, LEFT]
    if tree[y, LEFT] != NIL:
        tree[tree[y, LEFT], PARENT] = x

    root = _transplant(tree, root, x, y)

    tree[y, LEFT]   = x
    tree[x, PARENT] = y
    return root

@njit(inline="always")
def right_rotate(
    tree: np.ndarray,
    root: np.int64,
    x:    np.int64

) -> np.int64:

    """
    Mirror of `left_rotate`: the left child of `x` becomes the subtree root.
    """

    y = tree[x, LEFT]

    tree[x, LEFT] = tree[y, RIGHT]
    if tree[y, RIGHT] != NIL:
        tree[tree[y, RIGHT], PARENT] = x

    root = _transplant(tree, root, x, y)

    tree[y, RIGHT]  = x
    tree[x, PARENT] = y
    return root



# ---------- JIT-Compiled Red-Black Core Operations ----------
@njit(cache=JIT_CACHE)
def insert_fixup(
    tree: np.ndarray,
    root: np.int64,
    z:    np.int64

) -> np.int64:

    """
    Restore the red-black properties after `z` was attached as a red leaf.

    While z's parent is red:
        - red uncle: push the blackness down from the grandparent and
          continue from the grandparent;
        - black uncle, z an inner grandchild: rotate around the parent to
          turn it into the outer case;
        - black uncle, z an outer grandchild: recolor parent and
          grandparent, rotate around the grandparent outward.
    The root is blackened at the end.
    """

    while tree[tree[z, PARENT], COLOR] == RED:
        p = tree[z, PARENT]
        g = tree[p, PARENT]

        if p == tree[g, LEFT]:
            u = tree[g, RIGHT]
            if tree[u, COLOR] == RED:
                tree[p, COLOR] = BLACK
                tree[u, COLOR] = BLACK
                tree[g, COLOR] = RED
                z = g
            else:
                if z == tree[p, RIGHT]: # inner
                    z    = p
                    root = left_rotate(tree, root, z)
                    p    = tree[z, PARENT]
                    g    = tree[p, PARENT]
                tree[p, COLOR] = BLACK
                tree[g, COLOR] = RED
                root = right_rotate(tree, root, g)
        else:
            u = tree[g, LEFT]
            if tree[u, COLOR] == RED:
                tree[p, COLOR] = BLACK
                tree[u, COLOR] = BLACK
                tree[g, COLOR] = RED
                z = g
            else:
                if z == tree[p, LEFT]: # inner
                    z    = p
                    root = right_rotate(tree, root, z)
                    p    = tree[z, PARENT]
                    g    = tree[p, PARENT]
                tree[p, COLOR] = BLACK
                tree[g, COLOR] = RED
                root = left_rotate(tree, root, g)

    tree[root, COLOR] = BLACK
    return root

@njit(boundscheck=False, cache=JIT_CACHE)
def insert(
    tree:          np.ndarray,
    root:          np.int64,
    free:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    value:         np.int64

) -> Tuple[np.int64, np.int64, np.int64, np.int64]:

    """
    BST insertion of a red leaf followed by `insert_fixup`.

    The caller guarantees a free row is available.

    Returns
    -------
    Tuple[np.int64, np.int64, np.int64, np.int64]
        (inserted, root, free, free_list_top); inserted is 0 for a duplicate.
    """

    parent  = NIL
    current = root
    while current != NIL:
        parent = current
        if value == tree[current, VALUE]:
            return 0, root, free, free_list_top
        elif value < tree[current, VALUE]:
            current = tree[current, LEFT]
        else:
            current = tree[current, RIGHT]

    z, free, free_list_top = allocate(free, free_list, free_list_top)
    tree[z, VALUE]  = value
    tree[z, LEFT]   = NIL
    tree[z, RIGHT]  = NIL
    tree[z, PARENT] = parent
    tree[z, COLOR]  = RED

    if parent == NIL:
        root = z
    elif value < tree[parent, VALUE]:
        tree[parent, LEFT] = z
    else:
        tree[parent, RIGHT] = z

    root = insert_fixup(tree, root, z)
    return 1, root, free, free_list_top

@njit(cache=JIT_CACHE)
def delete_fixup(
    tree: np.ndarray,
    root: np.int64,
    x:    np.int64

) -> np.int64:

    """
    Remove the extra black carried by `x` after a black node was spliced out.

    With w the sibling of x (cases mirrored when x is a right child):
        1. w red: recolor, rotate around the parent, take the new sibling.
        2. w black with two black children: w turns red, move up.
        3. w black, outer child black, inner red: rotate around w.
        4. w black, outer child red: rotate around the parent and stop.
    `x` may be NIL; its parent slot was set by the splice.
    """

    while x != root and tree[x, COLOR] == BLACK:
        p = tree[x, PARENT]

        if x == tree[p, LEFT]:
            w = tree[p, RIGHT]
            if tree[w, COLOR] == RED: # case 1
                tree[w, COLOR] = BLACK
                tree[p, COLOR] = RED
                root = left_rotate(tree, root, p)
                w    = tree[p, RIGHT]

            if tree[tree[w, LEFT], COLOR] == BLACK and tree[tree[w, RIGHT], COLOR] == BLACK: # case 2
                tree[w, COLOR] = RED
                x = p
            else:
                if tree[tree[w, RIGHT], COLOR] == BLACK: # case 3
                    tree[tree[w, LEFT], COLOR] = BLACK
                    tree[w, COLOR] = RED
                    root = right_rotate(tree, root, w)
                    w    = tree[p, RIGHT]

                # case 4
                tree[w, COLOR] = tree[p, COLOR]
                tree[p, COLOR] = BLACK
                tree[tree[w, RIGHT], COLOR] = BLACK
                root = left_rotate(tree, root, p)
                x    = root
        else:
            w = tree[p, LEFT]
            if tree[w, COLOR] == RED: # case 1
                tree[w, COLOR] = BLACK
                tree[p, COLOR] = RED
                root = right_rotate(tree, root, p)
                w    = tree[p, LEFT]

            if tree[tree[w, RIGHT], COLOR] == BLACK and tree[tree[w, LEFT], COLOR] == BLACK: # case 2
                tree[w, COLOR] = RED
                x = p
            else:
                if tree[tree[w, LEFT], COLOR] == BLACK: # case 3
                    tree[tree[w, RIGHT], COLOR] = BLACK
                    tree[w, COLOR] = RED
                    root = left_rotate(tree, root, w)
                    w    = tree[p, LEFT]

                # case 4
                tree[w, COLOR] = tree[p, COLOR]
                tree[p, COLOR] = BLACK
                tree[tree[w, LEFT], COLOR] = BLACK
                root = right_rotate(tree, root, p)
                x    = root

    tree[x, COLOR] = BLACK
    return root

@njit(boundscheck=False, cache=JIT_CACHE)
def remove(
    tree:          np.ndarray,
    root:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    value:         np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Delete `value` from the tree.

    The spliced-out row `y` is the target itself when it has at most one
    real child, otherwise its in-order successor, whose value is copied into
    the target first. `x` is y's only child (possibly NIL) and takes y's
    place; if y was black, `delete_fixup` runs from x.

    Returns:
        Tuple[np.int64, np.int64, np.int64]:
            (removed, root, free_list_top); removed is 0 if the value is absent.
    """

    z = root
    while z != NIL and tree[z, VALUE] != value:
        if value < tree[z, VALUE]:
            z = tree[z, LEFT]
        else:
            z = tree[z, RIGHT]

    if z == NIL:
        return 0, root, free_list_top

    y = z
    if tree[z, LEFT] != NIL and tree[z, RIGHT] != NIL:
        y = tree[z, RIGHT]
        while tree[y, LEFT] != NIL:
            y = tree[y, LEFT]
        tree[z, VALUE] = tree[y, VALUE]

    x = tree[y, LEFT] if tree[y, LEFT] != NIL else tree[y, RIGHT]
    y_original_color = tree[y, COLOR]

    root = _transplant(tree, root, y, x)

    if y_original_color == BLACK:
        root = delete_fixup(tree, root, x)

    free_list_top = release(tree, y, free_list, free_list_top)

    # the sentinel's parent slot is scratch space for the fixup only
    tree[NIL, PARENT] = NIL
    tree[NIL, COLOR]  = BLACK
    return 1, root, free_list_top

@njit(inline="always")
def _search_single(
    tree:  np.ndarray,
    root:  np.int64,
    value: np.int64

) -> np.int64:

    current_index = root
    while current_index != NIL:
        value_curr = tree[current_index, VALUE]
        if value == value_curr:
            return current_index
        elif value < value_curr:
            current_index = tree[current_index, LEFT]
        else:
            current_index = tree[current_index, RIGHT]
    return NIL

@njit(inline="always")
def _black_height(
    tree: np.ndarray,
    root: np.int64

) -> np.int64:

    """
    Black nodes on the leftmost root-to-NIL path (the NIL leaf itself not counted).
    """

    height  = 0
    current = root
    while current != NIL:
        if tree[current, COLOR] == BLACK:
            height += 1
        current = tree[current, LEFT]
    return height



# --------- RedBlackTree API ---------
spec = [
    ("count"         , int64),
    ("tree"          , int64[:, :]),
    ("root"          , int64),
    ("_free"         , int64),
    ("_free_list"    , int64[:]),
    ("_free_list_top", int64),

]

@jitclass(spec)
class RedBlackTree:
    """
    Array-backed Red-Black tree implemented as a Numba jitclass.

    Row 0 of the arena is the shared NIL sentinel: always black, and the
    target of every absent child or parent link.

    Attributes:
        count (int64): Number of stored values.
        tree (int64[:, :]): [capacity + 1, 5] node records.
        root (int64): Index of the root, NIL (0) when empty.
    """

    def __init__(
        self,
        capacity: int

    ) -> None:

        if capacity < 0:
            raise ValueError("The capacity of a RedBlackTree must be non-negative")

        self.count          = 0
        self.tree           = np.zeros((capacity + 1, NODE_FIELDS), dtype=np.int64)
        self.root           = NIL
        self._free          = 1
        self._free_list     = np.zeros(capacity + 1, dtype=np.int64)
        self._free_list_top = 0

    def _reserve(self) -> None:
        if needs_growth(self.tree, self._free, self._free_list_top):
            self.tree       = grow_rows(self.tree)
            self._free_list = grow_vector(self._free_list, self.tree.shape[0])

    @property
    def capacity(self) -> int:
        return self.tree.shape[0] - 1

    @property
    def height(self) -> int:
        """Edges on the longest root-to-leaf path, -1 when empty."""
        return subtree_height(self.tree, self.root, self.count)

    @property
    def black_height(self) -> int:
        return _black_height(self.tree, self.root)

    def size(self) -> int:
        return self.count

    def is_empty(self) -> bool:
        return self.count == 0

    def get_node(
        self,
        index: int

    ) -> Tuple[int, int, int, int, int]:

        """
        Returns:
            Tuple[int, int, int, int, int]: (value, left, right, parent, color)
            of the row at `index`; the NIL row reads as (0, 0, 0, 0, BLACK).
        """

        return (
            self.tree[index, VALUE],
            self.tree[index, LEFT],
            self.tree[index, RIGHT],
            self.tree[index, PARENT],
            self.tree[index, COLOR]
        )

    def get_value(
        self,
        index: int

    ) -> int:

        return self.tree[index, VALUE]

    def get_left(
        self,
        index: int

    ) -> int:

        return self.tree[index, LEFT]

    def get_right(
        self,
        index: int

    ) -> int:

        return self.tree[index, RIGHT]

    def get_parent(
        self,
        index: int

    ) -> int:

        return self.tree[index, PARENT]

    def get_color(
        self,
        index: int

    ) -> int:

        return self.tree[index, COLOR]

    def is_red(
        self,
        index: int

    ) -> bool:

        return self.tree[index, COLOR] == RED

    def min(self) -> Tuple[int, int]:
        if self.root == NIL:
            return EMPTY, 0

        current = self.root
        while self.tree[current, LEFT] != NIL:
            current = self.tree[current, LEFT]
        return OK, self.tree[current, VALUE]

    def max(self) -> Tuple[int, int]:
        if self.root == NIL:
            return EMPTY, 0

        current = self.root
        while self.tree[current, RIGHT] != NIL:
            current = self.tree[current, RIGHT]
        return OK, self.tree[current, VALUE]

    def insert(
        self,
        value: int

    ) -> int:
        """Inserts a unique value. Returns 1 if inserted, 0 for a duplicate."""

        self._reserve()

        inserted, self.root, self._free, self._free_list_top = insert(
            self.tree,
            self.root,
            self._free,
            self._free_list,
            self._free_list_top,
            value
        )

        self.count += inserted
        return inserted

    def remove(
        self,
        value: int

    ) -> int:
        """Deletes a value. Returns 1 if found and removed, 0 otherwise."""

        if self.count == 0:
            return 0

        removed, self.root, self._free_list_top = remove(
            self.tree,
            self.root,
            self._free_list,
            self._free_list_top,
            value
        )

        self.count -= removed
        return removed

    def search(
        self,
        value: int

    ) -> int:
        """Node index holding `value`, or NIL (0)."""

        return _search_single(self.tree, self.root, value)

    def contains(
        self,
        value: int

    ) -> bool:

        return _search_single(self.tree, self.root, value) != NIL

    def inorder(self) -> np.ndarray:
        return inorder_traversal(self.tree, self.root, self.count)

    def preorder(self) -> np.ndarray:
        return preorder_traversal(self.tree, self.root, self.count)

    def postorder(self) -> np.ndarray:
        return postorder_traversal(self.tree, self.root, self.count)

    def __len__(self) -> int:
        return self.count

    def __str__(self) -> str:
        return "RedBlackTree(size=" + str(self.count) + ", root=" + str(self.root) + ", black_height=" + str(self.black_height) + ")"



# --------- Utils ---------
@njit(cache=JIT_CACHE)
def fill_rbt(
    rbt:  'RedBlackTree',
    data: np.ndarray

) -> int:

    inserted = 0
    for i in range(data.size):
        inserted += rbt.insert(data[i])
    return inserted

@njit(cache=JIT_CACHE)
def remove_rbt(
    rbt:    'RedBlackTree',
    values: np.ndarray

) -> int:

    removed = 0
    for i in range(values.size):
        removed += rbt.remove(values[i])
    return removed

def build_rbt(
    data:     Sequence[int],
    capacity: int = DEFAULT_CAPACITY

) -> RedBlackTree:

    """
    Builds a RedBlackTree from any integer sequence, inserting in order.
    """

    values = as_int64_array(data)

    rbt      = RedBlackTree(max(capacity, values.size))
    inserted = fill_rbt(rbt, values)
    logger.debug("Built RedBlackTree with %d values (%d duplicates skipped)", inserted, values.size - inserted)

    return rbt
