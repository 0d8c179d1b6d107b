# label_coarsening/coarsen.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import time
import numpy as np

from .config import LabelPropagationConfig
from .contraction import contract_graph
from .graph_access import GraphAccess
from .random_functions import RandomBits
from .size_constraint_label_propagation import SizeConstraintLabelPropagation


@dataclass
class CoarsenedLevel:
    level: int
    membership: np.ndarray             # shape (n_nodes_at_parent,), values in [0..C-1]
    sizes: np.ndarray                  # node weight per supernode, shape (C,)
    graph: GraphAccess                 # coarse graph (C nodes)
    params: Dict[str, Any]             # clustering params, pass statistics, timestamp
    parent_level: Optional[int]        # None for original graph, else previous level


def coarsen_once(graph: GraphAccess,
                 config: LabelPropagationConfig,
                 rng: Optional[RandomBits] = None,
                 level: int = 0,
                 parent_level: Optional[int] = None) -> CoarsenedLevel:
    """Cluster ``graph`` once with size-constrained label propagation and contract it."""
    result = SizeConstraintLabelPropagation().match(config, graph, rng=rng)
    coarse = contract_graph(graph, result.coarse_mapping, result.n_clusters)

    params = config.to_dict()
    params.update({
        "method": "size_constraint_label_propagation",
        "block_upperbound": result.block_upperbound,
        "change_counts": list(result.change_counts),
        "passes_run": result.passes_run,
        "fine_nodes": graph.number_of_nodes(),
        "coarse_nodes": result.n_clusters,
        "timestamp": time.time(),
    })

    return CoarsenedLevel(
        level=level,
        membership=result.coarse_mapping,
        sizes=result.cluster_sizes,
        graph=coarse,
        params=params,
        parent_level=parent_level,
    )
