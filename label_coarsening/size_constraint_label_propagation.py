"""
Size-constrained label propagation clustering, used as the coarsening step
of a multilevel graph pipeline.

Every node starts in its own cluster. In each pass the nodes are visited in
the order given by the node ordering, and each node moves to the cluster
holding the largest share of its incident edge weight, provided that cluster
can take the node's weight without exceeding the block upper bound. A node
may always stay where it is. Ties are broken by fair random bits.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import warnings

import numpy as np
import numba as nb

from .config import LabelPropagationConfig
from .core_utilities import PerformanceMonitor
from .node_ordering import NodeOrdering, validate_permutation
from .random_functions import RandomBits, as_random_bits

# Global performance monitor
perf_monitor = PerformanceMonitor(enabled=True)

# columns of a move log row
MOVE_NODE, MOVE_FROM, MOVE_TO, MOVE_SIZE_AFTER = 0, 1, 2, 3


@dataclass
class LabelPropagationResult:
    cluster_id: np.ndarray              # dense ids in [0..n_clusters-1], per node
    n_clusters: int
    permutation: np.ndarray             # visitation order used for every pass
    cluster_sizes: np.ndarray           # total node weight per dense id
    block_upperbound: int
    change_counts: List[int] = field(default_factory=list)   # moved nodes per pass
    moves: Optional[List[np.ndarray]] = None                 # per pass, rows (node, from, to, size_after)
    coarse_mapping: Optional[np.ndarray] = None

    @property
    def passes_run(self) -> int:
        return len(self.change_counts)


# ============================================================================
# NUMBA KERNEL
# ============================================================================

@nb.njit(cache=True)  # NOTE: no parallel=True, commits must be visible in-pass
def _label_propagation_pass(indptr, indices, edge_weights, node_weights, permutation,
                            cluster_id, cluster_sizes, hash_map, tie_bits,
                            block_upperbound, record_moves, move_log):
    change_counter = 0
    for i in range(permutation.shape[0]):
        node = permutation[i]
        start = indptr[node]; end = indptr[node + 1]

        for e in range(start, end):
            hash_map[cluster_id[indices[e]]] += edge_weights[e]

        # second sweep finds the max and resets the accumulator
        my_block  = cluster_id[node]
        max_block = my_block
        max_value = 0
        node_weight = node_weights[node]
        for e in range(start, end):
            cur_block = cluster_id[indices[e]]
            cur_value = hash_map[cur_block]
            if ((cur_value > max_value or (cur_value == max_value and tie_bits[e] != 0))
                    and (cluster_sizes[cur_block] + node_weight <= block_upperbound
                         or cur_block == my_block)):
                max_value = cur_value
                max_block = cur_block

            hash_map[cur_block] = 0

        cluster_sizes[my_block]  -= node_weight
        cluster_sizes[max_block] += node_weight
        if max_block != my_block:
            if record_moves:
                move_log[change_counter, 0] = node
                move_log[change_counter, 1] = my_block
                move_log[change_counter, 2] = max_block
                move_log[change_counter, 3] = cluster_sizes[max_block]
            change_counter += 1
        cluster_id[node] = max_block

    return change_counter


# ============================================================================
# LABEL PROPAGATION
# ============================================================================

def label_propagation(config: LabelPropagationConfig,
                      graph,
                      cluster_id: Optional[np.ndarray] = None,
                      rng: Optional[RandomBits] = None,
                      block_upperbound: Optional[int] = None,
                      permutation: Optional[np.ndarray] = None,
                      apply_to_graph: bool = False,
                      record_moves: bool = False) -> LabelPropagationResult:
    """
    Run size-constrained label propagation and compact the resulting ids.

    Parameters:
    -----------
    config : LabelPropagationConfig
        Pass count, node ordering, seed and convergence option.
    graph : GraphAccess
        Graph to cluster. Only read unless ``apply_to_graph`` is set.
    cluster_id : numpy.ndarray, optional
        int64 buffer of length N that receives the cluster ids. Allocated when None.
    rng : RandomBits, optional
        Source of tie-breaking bits. Seeded from ``config.random_state`` when None.
    block_upperbound : int, optional
        Integer capacity. Defaults to ``ceil(config.upper_bound_partition)``.
    permutation : numpy.ndarray, optional
        Visitation order. Produced by ``NodeOrdering`` when None.
    apply_to_graph : bool
        Also write the dense ids and the cluster count onto the graph.
    record_moves : bool
        Keep a per-pass log of every node move.

    Returns:
    --------
    LabelPropagationResult
    """
    n = graph.number_of_nodes()
    if block_upperbound is None:
        block_upperbound = config.block_upperbound
    block_upperbound = int(block_upperbound)
    # int64 ceiling for the kernel; sizes never exceed the total weight
    kernel_upperbound = min(block_upperbound, np.iinfo(np.int64).max - graph.total_node_weight())
    rng = as_random_bits(rng, config.random_state)

    if cluster_id is None:
        cluster_id = np.empty(n, dtype=np.int64)
    elif cluster_id.shape != (n,):
        raise ValueError(f"cluster_id must have shape ({n},), got {cluster_id.shape}")
    cluster_id[:] = np.arange(n)

    if permutation is None:
        permutation = NodeOrdering().order_nodes(config, graph, rng)
    permutation = validate_permutation(permutation, n)

    node_weights = graph.node_weights
    cluster_sizes = node_weights.astype(np.int64, copy=True)
    hash_map = np.zeros(n, dtype=graph.edge_weights.dtype)
    move_log = np.empty((n if record_moves else 0, 4), dtype=np.int64)

    heavy = int(np.count_nonzero(node_weights > kernel_upperbound))
    if heavy:
        warnings.warn(f"{heavy} node(s) weigh more than the block upper bound "
                      f"{block_upperbound} and will stay in singleton clusters")

    if config.verbose:
        print(f"[SCLP] {n:,} nodes, {graph.number_of_edges():,} directed edges, "
              f"block upper bound {block_upperbound}, {config.label_iterations} passes")

    change_counts = []
    moves = [] if record_moves else None
    for j in range(config.label_iterations):
        tie_bits = rng.bits(graph.number_of_edges())
        with perf_monitor.timed_operation("label propagation pass"):
            changes = _label_propagation_pass(
                graph.indptr, graph.indices, graph.edge_weights, node_weights, permutation,
                cluster_id, cluster_sizes, hash_map, tie_bits,
                kernel_upperbound, record_moves, move_log
            )
        change_counts.append(int(changes))
        if record_moves:
            moves.append(move_log[:changes].copy())

        if config.verbose:
            print(f"[SCLP]   pass {j+1}: {changes:,} nodes moved")

        if config.stop_on_convergence and changes == 0:
            if config.verbose:
                print(f"[SCLP]   converged after {j+1} passes")
            break

    n_clusters = remap_cluster_ids(graph, cluster_id, apply_to_graph=apply_to_graph)

    dense_sizes = np.zeros(n_clusters, dtype=np.int64)
    np.add.at(dense_sizes, cluster_id, node_weights)

    if config.verbose:
        print(f"[SCLP] {n_clusters:,} clusters")

    return LabelPropagationResult(
        cluster_id=cluster_id,
        n_clusters=n_clusters,
        permutation=permutation,
        cluster_sizes=dense_sizes,
        block_upperbound=block_upperbound,
        change_counts=change_counts,
        moves=moves,
    )


def remap_cluster_ids(graph, cluster_id: np.ndarray, apply_to_graph: bool = False) -> int:
    """
    Relabel ``cluster_id`` in place to dense ids ``0..k-1`` and return ``k``.

    Ids are handed out in order of first appearance when walking the nodes
    by index. With ``apply_to_graph`` the ids also become the graph's
    partition labeling and ``k`` its partition count.
    """
    n = graph.number_of_nodes()
    if cluster_id.shape != (n,):
        raise ValueError(f"cluster_id must have shape ({n},), got {cluster_id.shape}")

    if n == 0:
        n_clusters = 0
    else:
        uniq, first_seen, inverse = np.unique(cluster_id, return_index=True, return_inverse=True)
        n_clusters = int(uniq.shape[0])
        dense = np.empty(n_clusters, dtype=np.int64)
        dense[np.argsort(first_seen)] = np.arange(n_clusters)
        cluster_id[:] = dense[inverse.ravel()]

    if apply_to_graph:
        graph.set_partition_map(cluster_id)
        graph.set_partition_count(n_clusters)

    return n_clusters


def create_coarse_mapping(graph, cluster_id: np.ndarray,
                          coarse_mapping: Optional[np.ndarray] = None) -> np.ndarray:
    """Copy the per-node cluster ids into the coarse mapping buffer."""
    n = graph.number_of_nodes()
    if coarse_mapping is None:
        coarse_mapping = np.empty(n, dtype=np.int64)
    elif coarse_mapping.shape != (n,):
        raise ValueError(f"coarse_mapping must have shape ({n},), got {coarse_mapping.shape}")

    coarse_mapping[:] = cluster_id
    return coarse_mapping


# ============================================================================
# DRIVER
# ============================================================================

class SizeConstraintLabelPropagation:
    """Clusters one graph for one coarsening step."""

    def __init__(self, monitor: Optional[PerformanceMonitor] = None):
        self.monitor = monitor if monitor is not None else perf_monitor

    def match(self, config: LabelPropagationConfig, graph,
              coarse_mapping: Optional[np.ndarray] = None,
              rng: Optional[RandomBits] = None,
              apply_to_graph: bool = False,
              record_moves: bool = False) -> LabelPropagationResult:
        """
        Cluster ``graph`` and fill ``coarse_mapping``.

        The graph's partition count is set to the number of clusters. With
        ``apply_to_graph`` each node's partition index is set as well.
        """
        n = graph.number_of_nodes()
        if coarse_mapping is None:
            coarse_mapping = np.zeros(n, dtype=np.int64)
        elif coarse_mapping.shape != (n,):
            raise ValueError(f"coarse_mapping must have shape ({n},), got {coarse_mapping.shape}")

        with self.monitor.timed_operation("size constraint label propagation", verbose=config.verbose):
            result = self.match_internal(config, graph, coarse_mapping, rng,
                                         apply_to_graph=apply_to_graph,
                                         record_moves=record_moves)

        graph.set_partition_count(result.n_clusters)

        if config.verbose:
            self.monitor.print_timing_summary()
        return result

    def match_internal(self, config, graph, coarse_mapping, rng=None,
                       apply_to_graph=False, record_moves=False):
        cluster_id = np.empty(graph.number_of_nodes(), dtype=np.int64)
        block_upperbound = config.block_upperbound

        result = label_propagation(config, graph, cluster_id, rng=rng,
                                   block_upperbound=block_upperbound,
                                   apply_to_graph=apply_to_graph,
                                   record_moves=record_moves)
        result.coarse_mapping = create_coarse_mapping(graph, cluster_id, coarse_mapping)
        return result
