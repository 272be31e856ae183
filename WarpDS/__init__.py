import logging

from .status import Status
from .AVLTreeArray import AVLTree, build_avl, fill_avl, remove_avl
from .RedBlackTreeArray import RedBlackTree, build_rbt, fill_rbt, remove_rbt
from .SkipListArray import SkipList, build_skip_list
from .FenwickTreeArray import FenwickTree, build_fenwick
from .SegmentTreeArray import SegmentTree, build_segment_tree
from .DisjointSetArray import DisjointSet, union_pairs
from .BitTrieArray import BitTrie, build_trie
from .dump import dump
from .warmup import warmup

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "Status",
    "AVLTree", "build_avl", "fill_avl", "remove_avl",
    "RedBlackTree", "build_rbt", "fill_rbt", "remove_rbt",
    "SkipList", "build_skip_list",
    "FenwickTree", "build_fenwick",
    "SegmentTree", "build_segment_tree",
    "DisjointSet", "union_pairs",
    "BitTrie", "build_trie",
    "dump",
    "warmup",
]
