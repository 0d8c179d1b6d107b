"""Tests for id compaction, mapping export and the driver."""

import numpy as np
import pytest

from label_coarsening import (
    GraphAccess,
    PerformanceMonitor,
    RandomBits,
    SizeConstraintLabelPropagation,
    create_coarse_mapping,
    remap_cluster_ids,
)
from tests.conftest import make_config


@pytest.fixture
def five_nodes():
    return GraphAccess.from_edge_list([0, 1, 2, 3], [1, 2, 3, 4])


class TestRemapClusterIds:
    """Tests for dense relabeling."""

    def test_first_appearance_order(self, five_nodes):
        cluster_id = np.array([7, 3, 7, 9, 3], dtype=np.int64)
        k = remap_cluster_ids(five_nodes, cluster_id)
        assert k == 3
        assert list(cluster_id) == [0, 1, 0, 2, 1]

    def test_grouping_preserved(self, five_nodes):
        before = np.array([4, 4, 0, 2, 0], dtype=np.int64)
        after = before.copy()
        remap_cluster_ids(five_nodes, after)
        assert np.array_equal(before[:, None] == before[None, :], after[:, None] == after[None, :])

    def test_count_matches_distinct_ids(self, five_nodes):
        cluster_id = np.array([2, 2, 2, 2, 2], dtype=np.int64)
        assert remap_cluster_ids(five_nodes, cluster_id) == 1
        assert list(cluster_id) == [0] * 5

    def test_graph_untouched_by_default(self, five_nodes):
        remap_cluster_ids(five_nodes, np.array([1, 1, 3, 3, 4], dtype=np.int64))
        assert five_nodes.get_partition_count() == 1
        assert not five_nodes.partition_index.any()

    def test_apply_to_graph(self, five_nodes):
        cluster_id = np.array([1, 1, 3, 3, 4], dtype=np.int64)
        remap_cluster_ids(five_nodes, cluster_id, apply_to_graph=True)
        assert list(five_nodes.partition_index) == [0, 0, 1, 1, 2]
        assert five_nodes.get_partition_count() == 3

    def test_wrong_length(self, five_nodes):
        with pytest.raises(ValueError):
            remap_cluster_ids(five_nodes, np.zeros(3, dtype=np.int64))


class TestCreateCoarseMapping:
    """Tests for the mapping export."""

    def test_allocates(self, five_nodes):
        mapping = create_coarse_mapping(five_nodes, np.array([0, 0, 1, 1, 2]))
        assert list(mapping) == [0, 0, 1, 1, 2]
        assert mapping.dtype == np.int64

    def test_fills_buffer(self, five_nodes):
        buffer = np.zeros(5, dtype=np.int64)
        mapping = create_coarse_mapping(five_nodes, np.array([0, 1, 1, 2, 2]), buffer)
        assert mapping is buffer
        assert list(buffer) == [0, 1, 1, 2, 2]

    def test_buffer_wrong_size(self, five_nodes):
        with pytest.raises(ValueError):
            create_coarse_mapping(five_nodes, np.zeros(5, dtype=np.int64), np.zeros(4, dtype=np.int64))


class TestSizeConstraintLabelPropagation:
    """Tests for the driver."""

    def test_match_fills_mapping_and_partition_count(self, path_graph, no_ties):
        buffer = np.full(4, -1, dtype=np.int64)
        result = SizeConstraintLabelPropagation().match(make_config(), path_graph,
                                                         coarse_mapping=buffer, rng=no_ties)
        assert result.coarse_mapping is buffer
        assert list(buffer) == [0, 0, 1, 1]
        assert result.n_clusters == 2
        assert path_graph.get_partition_count() == 2
        # partition indices only written on request
        assert not path_graph.partition_index.any()

    def test_match_apply_to_graph(self, path_graph, no_ties):
        result = SizeConstraintLabelPropagation().match(make_config(), path_graph, rng=no_ties,
                                                         apply_to_graph=True)
        assert np.array_equal(path_graph.partition_index, result.coarse_mapping)
        assert path_graph.get_partition_count() == result.n_clusters

    def test_match_allocates_mapping(self, random_graph):
        result = SizeConstraintLabelPropagation().match(
            make_config(upper_bound_partition=9, label_iterations=3), random_graph, rng=RandomBits(4))
        assert result.coarse_mapping.shape == (random_graph.number_of_nodes(),)
        assert np.array_equal(result.coarse_mapping, result.cluster_id)
        assert result.coarse_mapping.max() == result.n_clusters - 1

    def test_match_mapping_wrong_size(self, path_graph):
        with pytest.raises(ValueError):
            SizeConstraintLabelPropagation().match(make_config(), path_graph,
                                                   coarse_mapping=np.zeros(2, dtype=np.int64))

    def test_match_zero_iterations(self, random_graph):
        n = random_graph.number_of_nodes()
        result = SizeConstraintLabelPropagation().match(make_config(upper_bound_partition=10, label_iterations=0), random_graph)
        assert np.array_equal(result.coarse_mapping, np.arange(n))
        assert random_graph.get_partition_count() == n

    def test_timing_recorded(self, path_graph):
        monitor = PerformanceMonitor()
        SizeConstraintLabelPropagation(monitor=monitor).match(make_config(), path_graph)
        assert monitor.timing_counts["size constraint label propagation"] == 1
        assert monitor.timing_stats["size constraint label propagation"] >= 0.0

    def test_verbose_output(self, path_graph, no_ties, capsys):
        config = make_config(verbose=True)
        SizeConstraintLabelPropagation(monitor=PerformanceMonitor()).match(config, path_graph, rng=no_ties)
        out = capsys.readouterr().out
        assert "[SCLP]" in out
        assert "pass 1" in out
        assert "TIMING SUMMARY" in out
