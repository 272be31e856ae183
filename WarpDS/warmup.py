import logging
import time

import numpy as np

from .AVLTreeArray import build_avl, remove_avl
from .BitTrieArray import build_trie
from .DisjointSetArray import DisjointSet, union_pairs
from .FenwickTreeArray import build_fenwick
from .RedBlackTreeArray import build_rbt, remove_rbt
from .SegmentTreeArray import build_segment_tree
from .SkipListArray import build_skip_list



logger = logging.getLogger(__name__)


def warmup() -> float:
    """
    Run every structure once on a tiny input so numba compiles the kernels
    up front instead of on the first real call.

    :return: Total wall time in seconds
    """

    sample = np.array([5, 3, 8, 1, 4, 7, 9], dtype=np.int64)
    steps  = (
        ("AVLTree", lambda: remove_avl(build_avl(sample), sample[:3])),
        ("AVLTree.search_bulk", lambda: build_avl(sample).search_bulk(sample)),
        ("RedBlackTree", lambda: remove_rbt(build_rbt(sample), sample[:3])),
        ("SkipList", lambda: build_skip_list(sample).remove(4)),
        ("BitTrie", lambda: build_trie(sample).max_xor(2)[1]),
        ("FenwickTree", lambda: build_fenwick(sample).range_sum(2, 5)),
        ("SegmentTree", lambda: build_segment_tree(sample).range_sum(1, 4)[1]),
        ("DisjointSet", lambda: union_pairs(DisjointSet(sample.size), [(0, 1), (2, 3)])),
    )

    total = 0.0
    for name, step in steps:
        started = time.perf_counter()
        step()
        elapsed = time.perf_counter() - started
        total  += elapsed
        logger.debug("Compiled %s in %.3fs", name, elapsed)

    logger.info("WarpDS warmup finished in %.3fs", total)
    return total
