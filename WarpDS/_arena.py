import numpy as np
from numba import njit
from typing import Tuple

from .config import JIT_CACHE



# Binary-tree node records shared by the AVL and Red-Black arenas:
#     [value | left | right | ...structure specific fields]
#     Row 0 is the null handle (the NIL sentinel for the Red-Black tree).
VALUE = 0
LEFT  = 1
RIGHT = 2



# ---------- JIT-Compiled Row Management ----------
@njit(inline="always")
def allocate(
    free:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Take a row from the free list, or the next never-used row.

    Returns:
        Tuple[np.int64, np.int64, np.int64]: (index, free, free_list_top).
    """

    if free_list_top > 0:
        free_list_top -= 1
        return free_list[free_list_top], free, free_list_top
    return free, free + 1, free_list_top

@njit(inline="always")
def release(
    arena:         np.ndarray,
    index:         np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64

) -> np.int64:

    """
    Clear a row and push it on the free list. Returns the new free_list_top.
    """

    arena[index, :] = 0
    free_list[free_list_top] = index
    return free_list_top + 1

@njit(inline="always")
def needs_growth(
    arena:         np.ndarray,
    free:          np.int64,
    free_list_top: np.int64

) -> bool:

    return free_list_top == 0 and free >= arena.shape[0]

@njit(cache=JIT_CACHE)
def grow_rows(
    arena: np.ndarray

) -> np.ndarray:

    """
    Return a copy of a 2D arena with twice as many (zeroed) rows.
    """

    rows  = arena.shape[0]
    grown = np.zeros((max(rows, 1) * 2, arena.shape[1]), dtype=np.int64)
    grown[:rows] = arena
    return grown

@njit(cache=JIT_CACHE)
def grow_vector(
    vector: np.ndarray,
    size:   np.int64

) -> np.ndarray:

    """
    Return a copy of a 1D array extended with zeros to `size` entries.
    """

    grown = np.zeros(size, dtype=np.int64)
    grown[:vector.shape[0]] = vector
    return grown



# --------- Binary Tree Traversals ---------
@njit(cache=JIT_CACHE)
def inorder_traversal( # LVR
    tree:         np.ndarray,
    root:         np.int64,
    current_size: np.int64

) -> np.ndarray:

    """
    Extracts all tree values in ascending order.
    """

    traverse = np.zeros(current_size, dtype=np.int64)
    stack    = np.zeros(max(current_size, 1), dtype=np.int64)

    current_index = root
    stack_idx     = 0
    traverse_idx  = 0

    while traverse_idx < current_size:

        while current_index != 0:
            stack[stack_idx] = current_index
            stack_idx += 1
            current_index = tree[current_index, LEFT]

        if stack_idx > 0:
            stack_idx -= 1
            current_index = stack[stack_idx]

            traverse[traverse_idx] = tree[current_index, VALUE]
            traverse_idx += 1

            current_index = tree[current_index, RIGHT]

        else:
            break

    return traverse

@njit(cache=JIT_CACHE)
def preorder_traversal( # VLR
    tree:         np.ndarray,
    root:         np.int64,
    current_size: np.int64

) -> np.ndarray:

    traverse = np.zeros(current_size, dtype=np.int64)
    if root == 0:
        return traverse

    stack        = np.zeros(current_size, dtype=np.int64)
    stack[0]     = root
    stack_idx    = 1
    traverse_idx = 0

    while stack_idx > 0:
        stack_idx -= 1
        current_index = stack[stack_idx]
        traverse[traverse_idx] = tree[current_index, VALUE]
        traverse_idx += 1

        # right pushed first so left is visited first
        if tree[current_index, RIGHT] != 0:
            stack[stack_idx] = tree[current_index, RIGHT]
            stack_idx += 1
        if tree[current_index, LEFT] != 0:
            stack[stack_idx] = tree[current_index, LEFT]
            stack_idx += 1

    return traverse

@njit(cache=JIT_CACHE)
def postorder_traversal( # LRV
    tree:         np.ndarray,
    root:         np.int64,
    current_size: np.int64

) -> np.ndarray:

    """
    Post-order values, produced as a mirrored pre-order (VRL) written back to front.
    """

    traverse = np.zeros(current_size, dtype=np.int64)
    if root == 0:
        return traverse

    stack        = np.zeros(current_size, dtype=np.int64)
    stack[0]     = root
    stack_idx    = 1
    traverse_idx = current_size - 1

    while stack_idx > 0:
        stack_idx -= 1
        current_index = stack[stack_idx]
        traverse[traverse_idx] = tree[current_index, VALUE]
        traverse_idx -= 1

        if tree[current_index, LEFT] != 0:
            stack[stack_idx] = tree[current_index, LEFT]
            stack_idx += 1
        if tree[current_index, RIGHT] != 0:
            stack[stack_idx] = tree[current_index, RIGHT]
            stack_idx += 1

    return traverse

@njit(cache=JIT_CACHE)
def subtree_height(
    tree:         np.ndarray,
    root:         np.int64,
    current_size: np.int64

) -> np.int64:

    """
    Height of a binary tree measured by walking it (-1 when empty).
    """

    if root == 0:
        return -1

    nodes  = np.zeros(current_size, dtype=np.int64)
    depths = np.zeros(current_size, dtype=np.int64)
    nodes[0]  = root
    stack_idx = 1
    height    = 0

    while stack_idx > 0:
        stack_idx -= 1
        current_index = nodes[stack_idx]
        depth         = depths[stack_idx]
        height        = max(height, depth)

        left_index  = tree[current_index, LEFT]
        right_index = tree[current_index, RIGHT]
        if left_index != 0:
            nodes[stack_idx]  = left_index
            depths[stack_idx] = depth + 1
            stack_idx += 1
        if right_index != 0:
            nodes[stack_idx]  = right_index
            depths[stack_idx] = depth + 1
            stack_idx += 1

    return height



# --------- Snapshots ---------
def as_int64_array(
    data,
    ndim: int = 1

) -> np.ndarray:

    """
    Convert an integer sequence into a contiguous int64 array for the kernels.

    :param data: Any sequence or array of integers
    :param ndim: Required number of dimensions
    :raises ValueError: If the shape is wrong or the values are not integers
    """

    array = np.asarray(data)
    if array.ndim != ndim:
        raise ValueError(f"Expected a {ndim}-D sequence of integers, got shape {array.shape}")
    # an empty list comes back as float64
    if array.size > 0 and array.dtype.kind not in "iu":
        raise ValueError(f"Expected integer values, got dtype {array.dtype}")

    return np.ascontiguousarray(array, dtype=np.int64)
