"""Shared test fixtures - small graphs and bit sources."""

import numpy as np
import pytest

from label_coarsening import GraphAccess, LabelPropagationConfig, ConstantBits, RandomBits


@pytest.fixture
def path_graph():
    """0 - 1 - 2 - 3 with unit node and edge weights."""
    return GraphAccess.from_edge_list([0, 1, 2], [1, 2, 3])


@pytest.fixture
def long_path_graph():
    """0 - 1 - 2 - 3 - 4 - 5."""
    return GraphAccess.from_edge_list([0, 1, 2, 3, 4], [1, 2, 3, 4, 5])


@pytest.fixture
def complete_graph():
    """K5 with unit weights."""
    src, dst = np.triu_indices(5, k=1)
    return GraphAccess.from_edge_list(src, dst)


@pytest.fixture
def random_graph():
    """Sparse random graph with random node and edge weights."""
    rng = np.random.default_rng(7)
    n = 200
    src = rng.integers(0, n, size=800)
    dst = rng.integers(0, n, size=800)
    weights = rng.integers(1, 5, size=800)
    node_weights = rng.integers(1, 4, size=n)
    return GraphAccess.from_edge_list(src, dst, weights, n_nodes=n, node_weights=node_weights)


@pytest.fixture
def no_ties():
    return ConstantBits(False)


@pytest.fixture
def always_ties():
    return ConstantBits(True)


@pytest.fixture
def seeded_bits():
    return RandomBits(1234)


def make_config(**kwargs):
    params = dict(upper_bound_partition=2, label_iterations=1, node_ordering="identity")
    params.update(kwargs)
    return LabelPropagationConfig(**params)
