"""
Tests for matrices derived from graph views.
"""

import math

import numpy as np
import pytest

from socnetkit.common.exceptions import ConfigurationError
from socnetkit.matrix import builders
from socnetkit.network.distances import compute_geodesics
from socnetkit.network.generators import cycle_graph, path_graph, star_graph
from socnetkit.network.store import GraphStore


def _weighted_directed() -> GraphStore:
    store = GraphStore()
    for name in (1, 2, 3):
        store.add_vertex(name)
    store.add_edge(1, 2, weight=2.0)
    store.add_edge(2, 3, weight=0.5)
    store.add_edge(3, 2, weight=1.0)
    return store


class TestAdjacencyBuilders:
    """Test adjacency-based matrices."""

    def test_undirected_adjacency_is_symmetric(self):
        assert builders.adjacency_matrix(star_graph(3).view()).is_symmetric()

    def test_directed_adjacency(self):
        matrix = builders.adjacency_matrix(_weighted_directed().view())
        assert matrix.item(0, 1) == 2.0
        assert matrix.item(1, 0) == 0.0
        assert not matrix.is_symmetric()

    def test_unweighted_adjacency(self):
        matrix = builders.adjacency_matrix(_weighted_directed().view(), weighted=False)
        assert matrix.item(0, 1) == 1.0
        assert matrix.item(1, 2) == 1.0

    def test_symmetrized_adjacency(self):
        matrix = builders.adjacency_matrix(_weighted_directed().view(), symmetrize=True)
        assert matrix.is_symmetric()
        assert matrix.item(1, 0) == 2.0
        assert matrix.item(1, 2) == 1.0

    def test_degree_and_laplacian(self):
        view = star_graph(3).view()
        degree = builders.degree_matrix(view)
        laplacian = builders.laplacian_matrix(view)
        assert degree.item(0, 0) == 3.0
        assert laplacian.item(0, 1) == -1.0
        np.testing.assert_allclose(laplacian.row_sums(), np.zeros(4))

    def test_cocitation(self):
        store = GraphStore()
        for name in range(3):
            store.add_vertex(name)
        store.add_edge(0, 1)
        store.add_edge(0, 2)
        matrix = builders.cocitation_matrix(store.view())
        assert matrix.item(1, 2) == 1.0
        assert matrix.item(1, 1) == 1.0
        assert matrix.item(0, 0) == 0.0

    def test_walks(self):
        matrix = builders.walks_matrix(path_graph(3).view(), 2)
        assert matrix.item(0, 2) == 1.0
        assert matrix.item(1, 1) == 2.0
        assert matrix.item(0, 1) == 0.0

    def test_walks_length_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            builders.walks_matrix(path_graph(3).view(), 0)


class TestGeodesicBuilders:
    """Test matrices derived from shortest-path results."""

    def test_distance_matrix_keeps_infinity(self):
        geodesics = compute_geodesics(path_graph(3, directed=True).view())
        matrix = builders.distance_matrix(geodesics)
        assert matrix.item(0, 2) == 2.0
        assert math.isinf(matrix.item(2, 0))

    def test_distance_matrix_is_a_copy(self):
        geodesics = compute_geodesics(path_graph(3).view())
        matrix = builders.distance_matrix(geodesics)
        matrix.set_item(0, 1, 99.0)
        assert geodesics.distance(0, 1) == 1.0

    def test_geodesics_count(self):
        matrix = builders.geodesics_count_matrix(compute_geodesics(cycle_graph(4).view()))
        assert matrix.item(0, 2) == 2.0
        assert matrix.item(0, 1) == 1.0

    def test_reachability(self):
        matrix = builders.reachability_matrix(compute_geodesics(path_graph(3, directed=True).view()))
        np.testing.assert_array_equal(matrix.data, np.triu(np.ones((3, 3))))
