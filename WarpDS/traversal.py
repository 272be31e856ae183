from typing import Any, Callable



Visitor = Callable[[int], Any]


def _visit(
    values,
    visitor: Visitor

) -> int:

    count = 0
    for value in values:
        visitor(int(value))
        count += 1
    return count


def in_order(
    tree,
    visitor: Visitor

) -> int:

    """
    Call ``visitor(value)`` for every value of an AVL or Red-Black tree in ascending order.

    :param tree: An ``AVLTree`` or ``RedBlackTree``
    :param visitor: Any callable; closures carry their own context
    :return: Number of values visited
    """

    return _visit(tree.inorder(), visitor)


def pre_order(
    tree,
    visitor: Visitor

) -> int:

    return _visit(tree.preorder(), visitor)


def post_order(
    tree,
    visitor: Visitor

) -> int:

    return _visit(tree.postorder(), visitor)


def ascending(
    structure,
    visitor: Visitor

) -> int:

    """
    Call ``visitor(value)`` for every value of a set-like structure in ascending order.

    Works with anything exposing ``to_array()`` (``SkipList``, ``BitTrie``)
    or ``inorder()`` (the binary search trees).
    """

    if hasattr(structure, "to_array"):
        values = structure.to_array()
    elif hasattr(structure, "inorder"):
        values = structure.inorder()
    else:
        raise TypeError(f"{type(structure).__name__} has no ascending traversal")

    return _visit(values, visitor)
