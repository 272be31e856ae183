import logging

import numpy as np
from numba import njit, prange, int64
from numba.experimental import jitclass
from typing import Sequence, Tuple

from ._arena import (
    LEFT, RIGHT, VALUE,
    allocate, as_int64_array, grow_rows, grow_vector, needs_growth, release,
    inorder_traversal, postorder_traversal, preorder_traversal,
)
from .config import DEFAULT_CAPACITY, JIT_CACHE, PATH_CAPACITY
from .status import EMPTY, OK



logger = logging.getLogger(__name__)


# Node record layout (one row of the arena):
#     [value | left | right | height]
#     Row 0 is the null handle; real nodes start at row 1.
#     height(leaf) = 0, height(null) = -1
HEIGHT       = 3
NODE_FIELDS  = 4



# ---------- JIT-Compiled Field Helpers ----------
@njit(inline="always")
def _get_height(
    tree:  np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Height of the subtree rooted at `index`, -1 for the null handle.
    """

    if index == 0:
        return -1
    return tree[index, HEIGHT]

@njit(inline="always")
def _update_height(
    tree:  np.ndarray,
    index: np.int64

) -> None:

    """
    Recompute the height of `index` from its children.
    """

    tree[index, HEIGHT] = max(
        _get_height(tree, tree[index, LEFT]),
        _get_height(tree, tree[index, RIGHT])
    ) + 1

@njit(inline="always")
def balance_factor(
    tree:  np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Balance factor h(right) - h(left) of a node; 0 for the null handle.
    """

    if index == 0:
        return 0
    return _get_height(tree, tree[index, RIGHT]) - _get_height(tree, tree[index, LEFT])

@njit(inline="always")
def _init_node(
    tree:  np.ndarray,
    index: np.int64,
    value: np.int64

) -> None:

    tree[index, VALUE]  = value
    tree[index, LEFT]   = 0
    tree[index, RIGHT]  = 0
    tree[index, HEIGHT] = 0

@njit(inline="always")
def _relink(
    tree:         np.ndarray,
    path:         np.ndarray,
    idx:          np.int64,
    old_sub_root: np.int64,
    new_sub_root: np.int64,
    root:         np.int64

) -> np.int64:

    """
    Point the parent of `old_sub_root` (path[idx - 1]) at `new_sub_root`.
    Returns the (possibly new) tree root.
    """

    if idx > 0:
        parent = path[idx - 1]
        if tree[parent, LEFT] == old_sub_root:
            tree[parent, LEFT] = new_sub_root
        else:
            tree[parent, RIGHT] = new_sub_root
        return root
    return new_sub_root



# ---------- JIT-Compiled AVLTree Core Operations ----------
@njit(inline="always")
def get_successor(
    tree:       np.ndarray,
    index:      np.int64,
    path:       np.ndarray,
    path_index: np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Walk to the leftmost row of the right subtree of `index`.

    Every row passed on the way is appended to `path`, so that the ancestors
    of the successor row (the one that is really unlinked) are retraced
    after its key has been copied up into `index`. The caller guarantees a
    non-empty right subtree.

    Args:
        tree (np.ndarray): [rows, 4] int64 arena, columns VALUE, LEFT, RIGHT, HEIGHT.
        index (np.int64): Row with two children whose key is being removed.
        path (np.ndarray): Ancestor stack shared with `remove`.
        path_index (np.int64): Number of rows already on the stack.

    Returns:
        Tuple[np.int64, np.int64]: (successor row, new stack length).
    """

    curr = tree[index, RIGHT]

    while curr != 0:
        path[path_index] = curr
        path_index += 1
        curr = tree[curr, LEFT]

    return path[path_index - 1], path_index

@njit(inline="always")
def right_rotation( # SRR: Single Right Rotation
    tree:  np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Perform a single right rotation (SRR) on an AVL tree stored as an array.

    The left child of the target node becomes the new root of the subtree and
    the target node becomes its right child. In-order sequence is preserved.
    Heights of the two moved nodes are recomputed bottom-up.

    :param tree: Array-based AVL tree of node records
    :type tree: np.ndarray
    :param index: Index of the node to rotate
    :type index: np.int64
    :return: Index of the new root of the rotated subtree
    :rtype: np.int64
    """

    left_index = tree[index, LEFT]

    # Rotate
    tree[index, LEFT]       = tree[left_index, RIGHT]
    tree[left_index, RIGHT] = index

    # Old root first, it is now a child of the new root
    _update_height(tree, index)
    _update_height(tree, left_index)

    return left_index # new root

@njit(inline="always")
def left_rotation( # SLR: Single Left Rotation
    tree:  np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Perform a single left rotation (SLR) on an AVL tree stored as an array.

    This rotation is applied when a node becomes right-heavy.
    The right child of the target node becomes the new root of the subtree,
    and the target node becomes the left child of that node.

    :param tree: Array-based AVL tree of node records
    :type tree: np.ndarray
    :param index: Index of the subtree root to rotate
    :type index: np.int64
    :return: Index of the new root after rotation
    :rtype: np.int64
    """

    right_index = tree[index, RIGHT]

    # Rotate
    tree[index, RIGHT]      = tree[right_index, LEFT]
    tree[right_index, LEFT] = index

    _update_height(tree, index)
    _update_height(tree, right_index)

    return right_index # new root

@njit(boundscheck=False, cache=JIT_CACHE)
def insert(
    tree:          np.ndarray,
    root:          np.int64  ,
    free:          np.int64  , # start from 1
    free_list:     np.ndarray,
    free_list_top: np.int64  ,
    path:          np.ndarray, # use in rebalancing
    value:         np.int64

) -> Tuple[np.int64, np.int64, np.int64, np.int64]:

    """
    Insert a new value into an array-based AVL tree with rebalancing.

    The caller guarantees that at least one row is available (either
    `free < tree.shape[0]` or a non-empty free list).

    Parameters
    ----------
    tree : np.ndarray
        The [N, 4] array holding all node records.
    root : np.int64
        Index of the current root node (0 if tree is empty).
    free : np.int64
        Next never-used row in `tree`.
    free_list : np.ndarray
        Stack of previously freed node indices for reuse.
    free_list_top : np.int64
        Top index of the free_list stack (0 if empty).
    path : np.ndarray
        Preallocated array to store the traversal path for bottom-up rebalancing.
    value : np.int64
        The value to insert.

    Returns
    -------
    Tuple[np.int64, np.int64, np.int64, np.int64]
        (inserted, root, free, free_list_top); inserted is 0 for a duplicate.
    """

    # First node
    if root == 0:
        new_index, free, free_list_top = allocate(free, free_list, free_list_top)
        _init_node(tree, new_index, value)
        return 1, new_index, free, free_list_top

    # Descend, recording ancestors
    current_index = root
    path_index    = 0
    while True:
        path[path_index] = current_index
        path_index += 1

        current_value = tree[current_index, VALUE]
        if value == current_value:
            return 0, root, free, free_list_top

        course = RIGHT if value > current_value else LEFT
        child  = tree[current_index, course]
        if child == 0:
            new_index, free, free_list_top = allocate(free, free_list, free_list_top)
            _init_node(tree, new_index, value)
            tree[current_index, course] = new_index
            break

        current_index = child

    # Rebalancing
    for idx in range(path_index - 1, -1, -1):
        node_index = path[idx]
        old_height = tree[node_index, HEIGHT]
        _update_height(tree, node_index)

        bf           = balance_factor(tree, node_index)
        new_sub_root = node_index

        if bf < -1: # L
            left_index = tree[node_index, LEFT]

            if value < tree[left_index, VALUE]: # LL
                new_sub_root = right_rotation(tree, node_index)

            else: # LR
                tree[node_index, LEFT] = left_rotation(tree, left_index)
                new_sub_root = right_rotation(tree, node_index)

        elif bf > 1: # R
            right_index = tree[node_index, RIGHT]

            if value > tree[right_index, VALUE]: # RR
                new_sub_root = left_rotation(tree, node_index)

            else: # RL
                tree[node_index, RIGHT] = right_rotation(tree, right_index)
                new_sub_root = left_rotation(tree, node_index)

        if new_sub_root != node_index:
            # a rotation after insertion restores the subtree's old height
            root = _relink(tree, path, idx, node_index, new_sub_root, root)
            break

        if tree[node_index, HEIGHT] == old_height:
            break

    return 1, root, free, free_list_top

@njit(boundscheck=False, cache=JIT_CACHE)
def remove(
    tree:           np.ndarray,
    root:           np.int64,
    free_list:      np.ndarray,
    free_list_top:  np.int64,
    path:           np.ndarray,
    value:          np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Delete `value` from the tree rooted at `root`.

    The descent pushes every visited row onto `path`. A row with two children
    takes its successor's key, and the successor row (which has no left
    child) is the one spliced out instead; otherwise the row itself is
    replaced by its only child, or by 0. The spliced row goes back onto the
    free stack through `release`. The stack is then unwound from the spliced
    row's parent to the root: heights are refreshed, and any row whose balance
    leaves [-1, 1] is rotated, single or double depending on the sign of the
    heavier child's balance. Unlike insertion, the climb never stops early.

    Args:
        tree (np.ndarray): [rows, 4] int64 arena, columns VALUE, LEFT, RIGHT, HEIGHT.
        root (np.int64): Current root row, 0 for an empty tree.
        free_list (np.ndarray): Stack of recycled rows.
        free_list_top (np.int64): Number of rows on that stack.
        path (np.ndarray): Scratch stack with room for one row per tree level.
        value (np.int64): Key to delete.

    Returns:
        Tuple[np.int64, np.int64, np.int64]:
            (1 if the key was present else 0, new root, new free_list_top).
    """

    # Search
    path_index    = 0
    current_index = root

    while current_index != 0:
        path[path_index] = current_index
        path_index += 1

        v_curr = tree[current_index, VALUE]
        if value == v_curr:
            break
        elif value < v_curr:
            current_index = tree[current_index, LEFT]
        else:
            current_index = tree[current_index, RIGHT]

    if current_index == 0:
        return 0, root, free_list_top

    target_idx = current_index
    if tree[target_idx, LEFT] != 0 and tree[target_idx, RIGHT] != 0:
        successor_idx, path_index = get_successor(tree, target_idx, path, path_index)
        tree[target_idx, VALUE]   = tree[successor_idx, VALUE]
        actual_remove_idx         = successor_idx
    else:
        actual_remove_idx = target_idx

    rl          = tree[actual_remove_idx, LEFT]
    replacement = rl if rl != 0 else tree[actual_remove_idx, RIGHT]

    if path_index > 1:
        parent_idx = path[path_index - 2]
        if tree[parent_idx, LEFT] == actual_remove_idx:
            tree[parent_idx, LEFT] = replacement
        else:
            tree[parent_idx, RIGHT] = replacement
    else:
        root = replacement

    free_list_top = release(tree, actual_remove_idx, free_list, free_list_top)

    # Rebalancing
    for i in range(path_index - 2, -1, -1):
        node_idx = path[i]
        _update_height(tree, node_idx)

        bf           = balance_factor(tree, node_idx)
        new_sub_root = node_idx

        if bf < -1: # L
            cl_idx = tree[node_idx, LEFT]
            if balance_factor(tree, cl_idx) <= 0: # LL
                new_sub_root = right_rotation(tree, node_idx)
            else: # LR
                tree[node_idx, LEFT] = left_rotation(tree, cl_idx)
                new_sub_root = right_rotation(tree, node_idx)

        elif bf > 1: # R
            cr_idx = tree[node_idx, RIGHT]
            if balance_factor(tree, cr_idx) >= 0: # RR
                new_sub_root = left_rotation(tree, node_idx)
            else: # RL
                tree[node_idx, RIGHT] = right_rotation(tree, cr_idx)
                new_sub_root = left_rotation(tree, node_idx)

        if new_sub_root != node_idx:
            root = _relink(tree, path, i, node_idx, new_sub_root, root)

    return 1, root, free_list_top

@njit(inline="always")
def _search_single(
    tree:  np.ndarray,
    root:  np.int64,
    value: np.int64

) -> np.int64:

    """
    Performs a fast iterative search for a single value in the array-based AVL tree.

    Args:
        tree (np.ndarray): [rows, 4] int64 arena, columns VALUE, LEFT, RIGHT, HEIGHT.
        root (np.int64): The index of the root node to start the search from.
        value (np.int64): The specific value to locate within the tree.

    Returns:
        np.int64: The index of the node containing the value if found;
                  otherwise, returns 0.
    """

    current_index = root
    while current_index != 0:
        value_curr = tree[current_index, VALUE]

        if value == value_curr:
            return current_index

        elif value < value_curr:
            current_index = tree[current_index, LEFT]

        else:
            current_index = tree[current_index, RIGHT]

    return 0

@njit(parallel=True)
def _search_bulk(
    tree:   np.ndarray,
    root:   np.int64,
    values: np.ndarray

) -> np.ndarray:

    """
    Executes parallel searches for multiple values across the AVL tree.

    Lookups never write to the arena, so the queries are split across all
    available cores with 'prange'.

    Returns:
        np.ndarray: A 1D array of int64 node indices, one per query;
                    0 for values not found.
    """

    size    = values.size
    results = np.zeros(size, dtype=np.int64)
    for i in prange(size):
        results[i] = _search_single(
            tree, root, values[i]
        )

    return results



# --------- AVLTree API ---------
spec = [
    ("count"         , int64),
    ("tree"          , int64[:, :]),
    ("root"          , int64),
    ("_free"         , int64),
    ("_free_list"    , int64[:]),
    ("_free_list_top", int64),
    ("_path"         , int64[:]),

]

@jitclass(spec)
class AVLTree:
    """
    Array-backed AVL Tree implemented as a Numba jitclass.

    Node records live in rows of a 2D int64 array, row 0 being the null
    handle. Removed rows are recycled through a free list and the arena
    doubles when it runs out of rows.

    Attributes:
        count (int64): Current number of stored values.
        tree (int64[:, :]): Underlying 2D array [capacity + 1, 4] of node records.
        root (int64): Index of the current root node (0 if empty).
    """

    def __init__(
        self,
        capacity: int

    ) -> None:

        if capacity < 0:
            raise ValueError("The capacity of an AVLTree must be non-negative")

        self.count          = 0
        self.tree           = np.zeros((capacity + 1, NODE_FIELDS), dtype=np.int64)
        self.root           = 0
        self._free          = 1
        self._free_list     = np.zeros(capacity + 1, dtype=np.int64)
        self._free_list_top = 0
        self._path          = np.zeros(PATH_CAPACITY, dtype=np.int64)

    def _reserve(self) -> None:
        """Double the arena when no row is left for a new node."""

        if needs_growth(self.tree, self._free, self._free_list_top):
            self.tree       = grow_rows(self.tree)
            self._free_list = grow_vector(self._free_list, self.tree.shape[0])

    @property
    def capacity(self) -> int:
        return self.tree.shape[0] - 1

    @property
    def height(self) -> int:
        """Height of the whole tree: -1 when empty, 0 for a single node."""
        return _get_height(self.tree, self.root)

    @property
    def root_info(self) -> Tuple[int, int, int, int]:
        return self.get_node(self.root)

    def size(self) -> int:
        return self.count

    def is_empty(self) -> bool:
        return self.count == 0

    def get_node(
        self,
        index: int

    ) -> Tuple[int, int, int, int]:

        """
        Unpack all fields of a specific node index.

        Args:
            index (int): The index of the node in the tree array.

        Returns:
            Tuple[int, int, int, int]: (value, left_index, right_index, height).
        """

        if index == 0:
            return 0, 0, 0, -1

        return (
            self.tree[index, VALUE],
            self.tree[index, LEFT],
            self.tree[index, RIGHT],
            self.tree[index, HEIGHT]
        )

    def get_value(
        self,
        index: int

    ) -> int:

        if index == 0:
            return 0
        return self.tree[index, VALUE]

    def get_left(
        self,
        index: int

    ) -> int:

        """
        Get the index of the left child for the given node.

        Returns:
            int: The index of the left child, or 0 if no child exists.
        """

        if index == 0:
            return 0
        return self.tree[index, LEFT]

    def get_right(
        self,
        index: int

    ) -> int:

        if index == 0:
            return 0
        return self.tree[index, RIGHT]

    def get_height(
        self,
        index: int

    ) -> int:

        """
        Get the current height of a specific node (-1 for the null handle).
        """

        return _get_height(self.tree, index)

    def balance(
        self,
        index: int

    ) -> int:

        """Balance factor h(right) - h(left) of the node at `index`."""

        return balance_factor(self.tree, index)

    def successor(
        self,
        index: int

    ) -> int:

        """
        Find the in-order successor of a node within its own subtree.

        Returns:
            int: The index of the smallest node in the right subtree,
                 or 0 if no right child exists.
        """

        current = self.tree[index, RIGHT]
        if current == 0:
            return 0

        while self.tree[current, LEFT] != 0:
            current = self.tree[current, LEFT]
        return current

    def predecessor(
        self,
        index: int

    ) -> int:

        """
        Find the in-order predecessor of a node within its own subtree.

        Returns:
            int: The index of the largest node in the left subtree,
                 or 0 if no left child exists.
        """

        current = self.tree[index, LEFT]
        if current == 0:
            return 0

        while self.tree[current, RIGHT] != 0:
            current = self.tree[current, RIGHT]
        return current

    def min(self) -> Tuple[int, int]:
        """Smallest stored value as (status, value); EMPTY on an empty tree."""

        if self.root == 0:
            return EMPTY, 0

        current = self.root
        while self.tree[current, LEFT] != 0:
            current = self.tree[current, LEFT]
        return OK, self.tree[current, VALUE]

    def max(self) -> Tuple[int, int]:
        """Largest stored value as (status, value); EMPTY on an empty tree."""

        if self.root == 0:
            return EMPTY, 0

        current = self.root
        while self.tree[current, RIGHT] != 0:
            current = self.tree[current, RIGHT]
        return OK, self.tree[current, VALUE]

    def insert(
        self,
        value: int

    ) -> int:
        """Inserts a unique value with auto-rebalancing. Returns 1 if success, 0 if duplicate."""

        self._reserve()

        inserted, self.root, self._free, self._free_list_top = insert(
            self.tree,
            self.root,
            self._free,
            self._free_list,
            self._free_list_top,
            self._path,
            value
        )

        self.count += inserted
        return inserted

    def remove(
        self,
        value: int

    ) -> int:
        """Deletes a value and stabilizes the tree. Returns 1 if found and removed, 0 otherwise."""

        if self.count == 0:
            return 0

        success, root, free_list_top = remove(
            self.tree,
            self.root,
            self._free_list,
            self._free_list_top,
            self._path,
            value
        )

        if success:
            self.root           = root
            self._free_list_top = free_list_top
            self.count -= 1
            return 1

        return 0

    def search(
        self,
        value: int

    ) -> int:
        """Locates a value using iterative BST search. Returns the node index or 0 if not found."""

        return _search_single(
            self.tree,
            self.root,
            value
        )

    def contains(
        self,
        value: int

    ) -> bool:

        return _search_single(self.tree, self.root, value) != 0

    def search_bulk(
        self,
        values: np.ndarray

    ) -> np.ndarray:
        """Performs parallelized multi-value search using all available CPU cores."""

        return _search_bulk(
            self.tree,
            self.root,
            values
        )

    def update_value(
        self,
        old_value: int,
        new_value: int

    ) -> int:
        """
        Replaces a value by removal and re-insertion to maintain AVL properties.
        Returns 0 without change if `old_value` is absent or `new_value` already present.
        """

        if old_value == new_value:
            return 1 if self.contains(old_value) else 0

        if self.contains(new_value):
            return 0

        if self.remove(old_value):
            self.insert(new_value)
            return 1

        return 0

    def inorder(self) -> np.ndarray:
        """
        Generates a sorted array of all elements using In-order traversal.
        """
        return inorder_traversal(self.tree, self.root, self.count)

    def preorder(self) -> np.ndarray:
        return preorder_traversal(self.tree, self.root, self.count)

    def postorder(self) -> np.ndarray:
        return postorder_traversal(self.tree, self.root, self.count)

    def __len__(self) -> int:
        return self.count

    def __str__(self) -> str:
        return "AVLTree(size=" + str(self.count) + ", root=" + str(self.root) + ", height=" + str(self.height) + ")"



# --------- Utils ---------
@njit(cache=JIT_CACHE)
def fill_avl(
    avl:  'AVLTree',
    data: np.ndarray

) -> int:

    """
    Populates an existing AVLTree with multiple values in a JIT loop.

    Args:
        avl (AVLTree): An instance of the AVLTree class to be populated.
        data (np.ndarray): 1D array of int64 values to be inserted into the tree.

    Returns:
        int: How many values were actually inserted (duplicates are skipped).
    """

    inserted = 0
    for i in range(data.size):
        inserted += avl.insert(data[i])
    return inserted

@njit(cache=JIT_CACHE)
def remove_avl(
    tree:   'AVLTree',
    values: np.ndarray

) -> int:
    """
    Perform batch removal of multiple values from the AVL tree.

    Values that are not in the tree are silently ignored.

    Returns:
        int: How many values were removed.
    """

    removed = 0
    for i in range(values.size):
        removed += tree.remove(values[i])
    return removed

def build_avl(
    data:     Sequence[int],
    capacity: int = DEFAULT_CAPACITY

) -> AVLTree:

    """
    Builds and populates an AVLTree from any integer sequence.

    :param data: Values to insert, in insertion order
    :param capacity: Minimum number of rows to preallocate
    :return: A balanced tree containing every distinct value of ``data``
    """

    values = as_int64_array(data)

    avl      = AVLTree(max(capacity, values.size))
    inserted = fill_avl(avl, values)
    logger.debug("Built AVLTree with %d values (%d duplicates skipped)", inserted, values.size - inserted)

    return avl
