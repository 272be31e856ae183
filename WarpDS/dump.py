import logging

from typing import List

from .AVLTreeArray import AVLTree
from .BitTrieArray import BitTrie
from .DisjointSetArray import DisjointSet
from .FenwickTreeArray import FenwickTree
from .RedBlackTreeArray import RED, RedBlackTree
from .SegmentTreeArray import SegmentTree
from .SkipListArray import SkipList



logger = logging.getLogger(__name__)


# ---------- Binary search trees ----------
def _render_bst(
    tree,
    label

) -> List[str]:

    """
    Sideways rendering: right subtree above, left subtree below, one node per line.
    """

    lines = []
    stack = [(tree.root, 0, False)]
    while stack:
        index, depth, expanded = stack.pop()
        if index == 0:
            continue
        if expanded:
            lines.append("    " * depth + label(index))
            continue
        # popped in reverse: right, node, left
        stack.append((tree.get_left(index), depth + 1, False))
        stack.append((index, depth, True))
        stack.append((tree.get_right(index), depth + 1, False))
    return lines


def dump_avl(tree: AVLTree) -> str:
    header = f"AVLTree size={tree.size()} height={tree.height}"
    lines  = _render_bst(
        tree,
        lambda i: f"{tree.get_value(i)} (h={tree.get_height(i)}, bf={tree.balance(i)})"
    )
    return _emit(header, lines)


def dump_rbt(tree: RedBlackTree) -> str:
    header = f"RedBlackTree size={tree.size()} height={tree.height} black_height={tree.black_height}"
    lines  = _render_bst(
        tree,
        lambda i: f"{tree.get_value(i)} ({'R' if tree.get_color(i) == RED else 'B'})"
    )
    return _emit(header, lines)


# ---------- Sequences and sets ----------
def dump_skip_list(skip_list: SkipList) -> str:
    header = f"SkipList size={skip_list.size()} max_level={skip_list.max_level}"
    lines  = []
    for level in range(skip_list.max_level, -1, -1):
        values = " -> ".join(str(v) for v in skip_list.level_values(level))
        lines.append(f"L{level:<2} head -> {values}" if values else f"L{level:<2} head")
    return _emit(header, lines)


def dump_trie(trie: BitTrie) -> str:
    header = f"BitTrie size={trie.size()} nodes={trie.node_count()} root_count={trie.root_count}"
    lines  = [f"{int(v):>10} {int(v):0{trie.bits}b}" for v in trie.to_array()]
    return _emit(header, lines)


def dump_fenwick(fenwick: FenwickTree) -> str:
    internal = fenwick.internal_array()
    header   = f"FenwickTree n={fenwick.size()}"
    lines    = [f"[{i}] span={i & -i} sum={internal[i]}" for i in range(1, internal.size)]
    return _emit(header, lines)


def dump_segment_tree(segment_tree: SegmentTree) -> str:
    header = f"SegmentTree n={segment_tree.size()}"
    lines  = [
        "leaves: " + " ".join(str(v) for v in segment_tree.values()),
        "slots:  " + " ".join(str(v) for v in segment_tree.internal_array()),
    ]
    return _emit(header, lines)


def dump_disjoint_set(dsu: DisjointSet) -> str:
    # walk a copy so the dump leaves the forest uncompressed
    parents = dsu.parents()
    groups  = {}
    for element in range(parents.size):
        root = element
        while parents[root] != root:
            root = parents[root]
        groups.setdefault(int(root), []).append(element)

    header = f"DisjointSet n={len(dsu)} sets={dsu.set_count()}"
    lines  = [f"{root}: {members}" for root, members in sorted(groups.items())]
    return _emit(header, lines)



def _emit(
    header: str,
    lines:  List[str]

) -> str:

    text = "\n".join([header] + lines)
    logger.debug("%s", text)
    return text


_RENDERERS = (
    (AVLTree, dump_avl),
    (RedBlackTree, dump_rbt),
    (SkipList, dump_skip_list),
    (BitTrie, dump_trie),
    (FenwickTree, dump_fenwick),
    (SegmentTree, dump_segment_tree),
    (DisjointSet, dump_disjoint_set),
)


def dump(structure) -> str:
    """
    Debug text for any WarpDS structure. The layout is for humans and may change.

    :raises TypeError: If ``structure`` is not a WarpDS structure
    """

    for cls, renderer in _RENDERERS:
        if isinstance(structure, cls):
            return renderer(structure)
    raise TypeError(f"No dump available for {type(structure).__name__}")
