"""
Tests for clustering coefficients, the triad census and hierarchical
clustering.
"""

from math import comb

import numpy as np
import pytest
from scipy.cluster.hierarchy import linkage as scipy_linkage
from scipy.spatial.distance import squareform

from socnetkit.common.exceptions import ConfigurationError, ValidationError
from socnetkit.matrix.matrix import Matrix
from socnetkit.network.clustering import (
    TRIAD_TYPES,
    hierarchical_clustering,
    local_clustering_coefficient,
    triad_census
)
from socnetkit.network.generators import (
    complete_graph,
    cycle_graph,
    erdos_renyi,
    path_graph,
    star_graph
)
from socnetkit.network.store import GraphStore


def _directed(n, arcs) -> GraphStore:
    store = GraphStore()
    for name in range(n):
        store.add_vertex(name)
    for source, target in arcs:
        store.add_edge(source, target)
    return store


class TestClusteringCoefficient:
    """Test local clustering coefficients."""

    def test_complete_graph(self):
        result = local_clustering_coefficient(complete_graph(5).view())
        np.testing.assert_allclose(result.coefficients, np.ones(5))
        assert result.mean == 1.0
        assert result.variance == 0.0

    def test_star_graph(self):
        result = local_clustering_coefficient(star_graph(4).view())
        np.testing.assert_array_equal(result.coefficients, np.zeros(5))

    def test_low_degree_is_zero(self):
        result = local_clustering_coefficient(path_graph(2).view())
        np.testing.assert_array_equal(result.coefficients, np.zeros(2))

    def test_triangle_with_tail(self):
        store = GraphStore()
        for name in range(4):
            store.add_vertex(name)
        for a, b in [(0, 1), (1, 2), (2, 0), (2, 3)]:
            store.add_edge(a, b)
            store.add_edge(b, a)
        result = local_clustering_coefficient(store.view())
        assert result.score(2) == pytest.approx(1 / 3)
        assert result.score(0) == pytest.approx(1.0)
        assert result.score(3) == 0.0

    def test_directed_denominator(self):
        # 1 and 2 are neighbours of 0; one of the two possible arcs between them exists
        result = local_clustering_coefficient(_directed(3, [(0, 1), (0, 2), (1, 2)]).view())
        assert result.score(0) == pytest.approx(0.5)

    def test_to_frame(self):
        frame = local_clustering_coefficient(complete_graph(3).view()).to_frame()
        assert frame.columns == ["node_id", "clustering_coefficient"]
        assert frame.height == 3

    def test_absent_vertex(self):
        assert local_clustering_coefficient(complete_graph(3).view()).score(42) == 0.0


class TestTriadCensus:
    """Test the M-A-N triad census."""

    @pytest.mark.parametrize("arcs, expected", [
        ([], "003"),
        ([(0, 1)], "012"),
        ([(0, 1), (1, 0)], "102"),
        ([(1, 0), (1, 2)], "021D"),
        ([(0, 1), (2, 1)], "021U"),
        ([(0, 1), (1, 2)], "021C"),
        ([(0, 1), (1, 0), (2, 1)], "111D"),
        ([(0, 1), (1, 0), (1, 2)], "111U"),
        ([(0, 1), (1, 2), (0, 2)], "030T"),
        ([(0, 1), (1, 2), (2, 0)], "030C"),
        ([(0, 1), (1, 0), (1, 2), (2, 1)], "201"),
        ([(0, 2), (2, 0), (1, 0), (1, 2)], "120D"),
        ([(0, 2), (2, 0), (0, 1), (2, 1)], "120U"),
        ([(0, 1), (1, 2), (0, 2), (2, 0)], "120C"),
        ([(0, 1), (1, 0), (1, 2), (2, 1), (0, 2)], "210"),
        ([(0, 1), (1, 0), (1, 2), (2, 1), (0, 2), (2, 0)], "300"),
    ])
    def test_single_triads(self, arcs, expected):
        census = triad_census(_directed(3, arcs).view())
        assert census[expected] == 1
        assert sum(census.values()) == 1

    def test_type_order(self):
        census = triad_census(_directed(3, []).view())
        assert list(census) == TRIAD_TYPES

    @pytest.mark.parametrize("seed", range(5))
    def test_counts_sum_to_all_triads(self, seed):
        view = erdos_renyi(9, 0.3, directed=True, seed=seed).view()
        assert sum(triad_census(view).values()) == comb(9, 3)

    def test_undirected_graph_has_only_symmetric_types(self):
        census = triad_census(erdos_renyi(8, 0.4, seed=2).view())
        for name, count in census.items():
            if name not in ("003", "102", "201", "300"):
                assert count == 0

    def test_complete_graph(self):
        census = triad_census(complete_graph(5).view())
        assert census["300"] == comb(5, 3)

    def test_cycle_graph(self):
        census = triad_census(cycle_graph(5).view())
        assert census["201"] == 5
        assert census["102"] == 5
        assert census["003"] == 0

    def test_small_graphs(self):
        assert sum(triad_census(path_graph(2).view()).values()) == 0


class TestHierarchicalClustering:
    """Test agglomerative clustering against scipy."""

    def setup_method(self):
        rng = np.random.default_rng(7)
        points = rng.random((8, 2))
        diff = points[:, None, :] - points[None, :, :]
        self.distances = np.sqrt((diff ** 2).sum(axis=2))

    @pytest.mark.parametrize("method", ["single", "complete", "average"])
    def test_levels_match_scipy(self, method):
        result = hierarchical_clustering(self.distances, method)
        expected = scipy_linkage(squareform(self.distances, checks=False), method=method)
        np.testing.assert_allclose(result.levels, expected[:, 2])
        np.testing.assert_allclose(result.linkage_matrix()[:, 3], expected[:, 3])

    @pytest.mark.parametrize("method", ["single", "complete", "average"])
    def test_merge_count_and_monotone_levels(self, method):
        result = hierarchical_clustering(Matrix.from_array(self.distances), method)
        assert len(result.merges) == 7
        assert all(a <= b + 1e-12 for a, b in zip(result.levels, result.levels[1:]))
        assert result.merges[-1].size == 8

    def test_tie_breaks_on_smallest_pair(self):
        distances = np.array([
            [0, 1, 1, 1],
            [1, 0, 1, 1],
            [1, 1, 0, 1],
            [1, 1, 1, 0],
        ], dtype=float)
        result = hierarchical_clustering(distances, "single")
        first = result.merges[0]
        assert (first.left, first.right) == (0, 1)

    def test_names_and_members(self):
        distances = np.array([[0, 1, 4], [1, 0, 4], [4, 4, 0]], dtype=float)
        result = hierarchical_clustering(distances, "complete", names=[10, 20, 30])
        assert result.merges[0].members == [10, 20]
        assert result.merges[1].members == [10, 20, 30]
        assert result.merges[1].level == 4.0

    def test_clusters_at(self):
        distances = np.array([[0, 1, 4], [1, 0, 4], [4, 4, 0]], dtype=float)
        result = hierarchical_clustering(distances, "average", names=[10, 20, 30])
        assert result.clusters_at(0.5) == [[10], [20], [30]]
        assert result.clusters_at(1.0) == [[10, 20], [30]]
        assert result.clusters_at(10.0) == [[10, 20, 30]]

    def test_average_linkage_is_size_weighted(self):
        distances = np.array([
            [0, 1, 2, 6],
            [1, 0, 4, 6],
            [2, 4, 0, 9],
            [6, 6, 9, 0],
        ], dtype=float)
        result = hierarchical_clustering(distances, "average")
        assert result.levels[1] == pytest.approx(3.0)
        assert result.levels[2] == pytest.approx(7.0)

    def test_trivial_inputs(self):
        assert hierarchical_clustering(np.zeros((1, 1))).merges == []
        assert hierarchical_clustering(np.zeros((0, 0))).linkage_matrix().shape == (0, 4)

    def test_to_frame(self):
        frame = hierarchical_clustering(self.distances).to_frame()
        assert frame.height == 7
        assert frame.columns == ["step", "left", "right", "level", "size"]

    def test_invalid_linkage(self):
        with pytest.raises(ConfigurationError):
            hierarchical_clustering(self.distances, "ward")

    def test_name_count_mismatch(self):
        with pytest.raises(ValidationError, match="names"):
            hierarchical_clustering(self.distances, names=[1, 2])
