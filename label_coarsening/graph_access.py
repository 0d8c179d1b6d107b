"""
GraphAccess - weighted undirected graph in CSR form with per-node weights
and a partition labeling.
"""
import numpy as np
import numba as nb
import scipy.sparse as sp


@nb.njit(cache=True)
def _build_csr_arrays_from_pairs(a, b, w, n):
    # every pair is stored in both directions except self-loops, stored once
    deg = np.zeros(n, np.int64)
    m = a.size
    for i in range(m):
        deg[a[i]] += 1
        if a[i] != b[i]:
            deg[b[i]] += 1

    indptr = np.empty(n + 1, np.int64)
    indptr[0] = 0
    for i in range(n):
        indptr[i + 1] = indptr[i] + deg[i]

    nnz = indptr[n]
    indices = np.empty(nnz, np.int64)
    data    = np.empty(nnz, dtype=w.dtype)

    cursor = indptr[:-1].copy()
    for i in range(m):
        u = a[i]; v = b[i]; wt = w[i]
        pu = cursor[u]; indices[pu] = v; data[pu] = wt; cursor[u] = pu + 1
        if u != v:
            pv = cursor[v]; indices[pv] = u; data[pv] = wt; cursor[v] = pv + 1

    return indptr, indices, data


@nb.njit(cache=True)
def _row_sort_inplace(indptr, indices, data):
    for i in range(indptr.size - 1):
        s = indptr[i]; e = indptr[i+1]
        # insertion sort, stable for parallel edges
        for j in range(s + 1, e):
            key_idx = indices[j]
            key_val = data[j]
            k = j - 1
            while k >= s and indices[k] > key_idx:
                indices[k + 1] = indices[k]
                data[k + 1]    = data[k]
                k -= 1
            indices[k + 1] = key_idx
            data[k + 1]    = key_val


def _edge_weight_dtype(values):
    values = np.asarray(values)
    if values.dtype == np.bool_ or np.issubdtype(values.dtype, np.integer):
        return np.int64
    return np.float64


def _as_node_weights(node_weights, n_nodes):
    if node_weights is None:
        return np.ones(n_nodes, dtype=np.int64)

    raw = np.asarray(node_weights)
    if raw.ndim != 1 or raw.shape[0] != n_nodes:
        raise ValueError(f"node_weights must have shape ({n_nodes},), got {raw.shape}")
    if raw.size and not np.issubdtype(raw.dtype, np.integer):
        if not np.all(np.isfinite(raw)) or not np.all(raw == np.round(raw)):
            raise ValueError("node_weights must be integral")
    weights = raw.astype(np.int64)
    if weights.size and weights.min() < 0:
        raise ValueError("node_weights must be non-negative")
    return weights


class GraphAccess:
    """
    Weighted undirected graph stored as a symmetric CSR matrix.

    Node ``u``'s out-edges are the CSR entries ``indptr[u]:indptr[u+1]``;
    every undirected edge appears once in each endpoint's row and a
    self-loop appears once. Parallel edges are kept as separate entries.
    """

    def __init__(self, adjacency, node_weights=None):
        """
        Initialize a GraphAccess.

        Parameters:
        -----------
        adjacency : scipy.sparse matrix or array-like
            Square, symmetric adjacency matrix. Nonzero entries are edges.
        node_weights : array-like, optional
            Non-negative integer weight per node. Defaults to all ones.
        """
        graph = sp.csr_matrix(adjacency)
        if graph.shape[0] != graph.shape[1]:
            raise ValueError(f"Adjacency must be square, got shape {graph.shape}")

        dtype = _edge_weight_dtype(graph.data)
        self.graph = sp.csr_matrix(
            (graph.data.astype(dtype), graph.indices.astype(np.int64), graph.indptr.astype(np.int64)),
            shape=graph.shape,
        )
        asymmetry = (self.graph - self.graph.T).tocsr()
        asymmetry.eliminate_zeros()
        if asymmetry.nnz:
            raise ValueError("Adjacency must be symmetric")
        self.n_nodes = int(graph.shape[0])
        self.node_weights = _as_node_weights(node_weights, self.n_nodes)

        self.partition_index = np.zeros(self.n_nodes, dtype=np.int64)
        self.partition_count = 1 if self.n_nodes > 0 else 0

    @classmethod
    def from_edge_list(cls, sources, targets, weights=None, n_nodes=None, node_weights=None):
        """
        Build a graph from an undirected edge list.

        Each (source, target) pair is inserted in both directions, rows are
        sorted by target. ``n_nodes`` defaults to ``max(id) + 1``.
        """
        a = np.asarray(sources, dtype=np.int64).ravel()
        b = np.asarray(targets, dtype=np.int64).ravel()
        if a.shape != b.shape:
            raise ValueError("sources and targets must have the same length")

        if weights is None:
            w = np.ones(a.shape[0], dtype=np.int64)
        else:
            w = np.asarray(weights).ravel()
            if w.shape != a.shape:
                raise ValueError("weights must have the same length as sources")
            w = w.astype(_edge_weight_dtype(w), copy=False)

        if n_nodes is None:
            n_nodes = int(max(a.max(initial=-1), b.max(initial=-1)) + 1)
        n = int(n_nodes)

        if a.size and (min(a.min(), b.min()) < 0 or max(a.max(), b.max()) >= n):
            raise ValueError(f"Edge endpoints must lie in [0, {n - 1}]")

        indptr, indices, data = _build_csr_arrays_from_pairs(a, b, w, n)
        _row_sort_inplace(indptr, indices, data)

        adjacency = sp.csr_matrix((data, indices, indptr), shape=(n, n), copy=False)
        return cls(adjacency, node_weights=node_weights)

    # ---- CSR views -------------------------------------------------------

    @property
    def indptr(self):
        return self.graph.indptr

    @property
    def indices(self):
        return self.graph.indices

    @property
    def edge_weights(self):
        return self.graph.data

    def number_of_nodes(self):
        return self.n_nodes

    def number_of_edges(self):
        """Number of directed CSR entries (twice the undirected edges, plus self-loops)."""
        return int(self.graph.nnz)

    def get_node_weight(self, node_idx):
        return int(self.node_weights[node_idx])

    def total_node_weight(self):
        return int(self.node_weights.sum())

    def get_neighbors(self, node_idx):
        """
        Get neighbors of a node.

        Parameters:
        -----------
        node_idx : int
            Index of the node

        Returns:
        --------
        neighbors : numpy.ndarray
            Neighbor indices
        weights : numpy.ndarray
            Corresponding edge weights
        """
        if node_idx < 0 or node_idx >= self.n_nodes:
            raise ValueError(f"Node index {node_idx} out of range [0, {self.n_nodes-1}]")

        start, end = self.graph.indptr[node_idx], self.graph.indptr[node_idx+1]
        return self.graph.indices[start:end], self.graph.data[start:end]

    def get_node_degree(self, node_idx):
        """Get the degree of a node"""
        return int(self.graph.indptr[node_idx+1] - self.graph.indptr[node_idx])

    def get_all_degrees(self):
        """Get the degrees of all nodes"""
        return np.diff(self.graph.indptr)

    # ---- partition labeling ----------------------------------------------

    def set_partition_index(self, node_idx, partition):
        self.partition_index[node_idx] = partition

    def set_partition_map(self, labels):
        """Set the partition index of every node at once"""
        labels = np.asarray(labels)
        if labels.shape != (self.n_nodes,):
            raise ValueError(f"labels must have shape ({self.n_nodes},), got {labels.shape}")
        self.partition_index[:] = labels

    def get_partition_index(self, node_idx):
        return int(self.partition_index[node_idx])

    def set_partition_count(self, count):
        self.partition_count = int(count)

    def get_partition_count(self):
        return self.partition_count

    def __str__(self):
        return (f"GraphAccess with {self.n_nodes} nodes, "
                f"{self.graph.nnz} directed edges, total node weight {self.total_node_weight()}")

    def __repr__(self):
        return self.__str__()
