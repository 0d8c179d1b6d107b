# label_coarsening/node_ordering.py
from __future__ import annotations
from typing import Optional
import numpy as np

from .random_functions import RandomBits, as_random_bits


def validate_permutation(permutation: np.ndarray, n_nodes: int) -> np.ndarray:
    """Return ``permutation`` as int64, raising ValueError unless it is a bijection on 0..n-1."""
    perm = np.asarray(permutation)
    if perm.ndim != 1 or perm.shape[0] != n_nodes:
        raise ValueError(f"Permutation must have shape ({n_nodes},), got {perm.shape}")
    if n_nodes == 0:
        return perm.astype(np.int64)
    if not np.issubdtype(perm.dtype, np.integer):
        raise ValueError(f"Permutation must hold integer node ids, got dtype {perm.dtype}")
    if perm.min() < 0 or perm.max() >= n_nodes:
        raise ValueError(f"Permutation entries must lie in [0, {n_nodes - 1}]")
    seen = np.bincount(perm, minlength=n_nodes)
    if np.any(seen != 1):
        raise ValueError("Permutation must visit every node exactly once")
    return perm.astype(np.int64, copy=False)


class NodeOrdering:
    """Produces the node visitation order for one propagation run."""

    def order_nodes(self, config, graph, rng: Optional[RandomBits] = None) -> np.ndarray:
        n = graph.number_of_nodes()
        method = config.node_ordering

        if method == "identity":
            return np.arange(n, dtype=np.int64)

        elif method == "random":
            rng = as_random_bits(rng, config.random_state)
            return rng.permutation(n)

        elif method == "degree":
            # ascending degree, ties keep index order
            return np.argsort(graph.get_all_degrees(), kind="stable").astype(np.int64)

        raise ValueError(f"Unknown node ordering: {method}")
