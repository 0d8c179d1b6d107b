# label_coarsening/contraction.py
from __future__ import annotations
from typing import Optional
import numpy as np
import scipy.sparse as sp

from .graph_access import GraphAccess


def contract_graph(graph: GraphAccess, coarse_mapping: np.ndarray,
                   n_coarse: Optional[int] = None) -> GraphAccess:
    """
    Collapse every cluster of ``coarse_mapping`` into one coarse node.

    Coarse node weights are the summed member weights, coarse edge weights
    the summed weights of the fine edges running between two clusters.
    Edges inside a cluster are dropped.
    """
    mapping = np.asarray(coarse_mapping, dtype=np.int64)
    n = graph.number_of_nodes()
    if mapping.shape != (n,):
        raise ValueError(f"coarse_mapping must have shape ({n},), got {mapping.shape}")
    if n_coarse is None:
        n_coarse = int(mapping.max()) + 1 if n else 0
    if n and (mapping.min() < 0 or mapping.max() >= n_coarse):
        raise ValueError(f"coarse_mapping values must lie in [0, {n_coarse - 1}]")

    node_weights = np.zeros(n_coarse, dtype=np.int64)
    np.add.at(node_weights, mapping, graph.node_weights)

    coo = graph.graph.tocoo()
    ms = mapping[coo.row]
    mt = mapping[coo.col]
    keep = (ms != mt)

    # duplicates are summed by the COO -> CSR conversion
    coarse = sp.coo_matrix(
        (coo.data[keep], (ms[keep], mt[keep])),
        shape=(n_coarse, n_coarse)
    ).tocsr()
    coarse.sort_indices()

    return GraphAccess(coarse, node_weights=node_weights)
