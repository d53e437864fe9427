"""
Tests for graph generators.
"""

import pytest

from socnetkit.common.exceptions import ConfigurationError
from socnetkit.network.generators import (
    complete_graph,
    cycle_graph,
    erdos_renyi,
    lattice_graph,
    path_graph,
    ring_lattice,
    star_graph
)


class TestDeterministicGenerators:
    """Test fixed-shape graphs."""

    def test_path_graph(self):
        store = path_graph(4)
        assert store.vertex_names() == [0, 1, 2, 3]
        assert store.edge_count() == 6
        assert store.is_symmetric()

    def test_directed_path_graph(self):
        store = path_graph(4, directed=True)
        assert store.edge_count() == 3
        assert store.has_edge(0, 1)
        assert not store.has_edge(1, 0)

    def test_cycle_graph(self):
        store = cycle_graph(5)
        assert store.edge_count() == 10
        assert store.has_edge(4, 0)

    def test_cycle_needs_three_vertices(self):
        with pytest.raises(ConfigurationError, match="at least 3"):
            cycle_graph(2)

    def test_star_graph(self):
        store = star_graph(4)
        assert store.vertex_count() == 5
        assert store.out_degree(0) == 4
        assert store.out_degree(3) == 1

    def test_complete_graph(self):
        assert complete_graph(5).edge_count() == 20
        assert complete_graph(4, directed=True).edge_count() == 12

    def test_ring_lattice(self):
        store = ring_lattice(6, 4)
        assert all(store.out_degree(v) == 4 for v in store.vertex_names())

    def test_ring_lattice_odd_degree(self):
        with pytest.raises(ConfigurationError):
            ring_lattice(6, 3)

    def test_empty_graphs(self):
        assert path_graph(0).vertex_count() == 0
        assert complete_graph(1).edge_count() == 0


class TestLattice:
    """Test grid lattices."""

    def test_square_lattice(self):
        store = lattice_graph(3)
        assert store.vertex_count() == 9
        assert store.edge_count() == 24
        assert store.out_degree(4) == 4
        assert store.out_degree(0) == 2

    def test_circular_lattice_is_regular(self):
        store = lattice_graph(4, circular=True)
        assert all(store.out_degree(v) == 4 for v in store.vertex_names())

    def test_one_dimensional_lattice_is_a_path(self):
        assert lattice_graph(5, dimension=1).edge_count() == path_graph(5).edge_count()

    def test_neighborhood(self):
        store = lattice_graph(5, dimension=1, neighborhood=2)
        assert store.has_edge(0, 2)
        assert not store.has_edge(0, 3)

    def test_directed_lattice(self):
        store = lattice_graph(3, directed=True)
        assert store.edge_count() == 12
        assert store.has_edge(0, 1)
        assert not store.has_edge(1, 0)


class TestErdosRenyi:
    """Test G(n, p) random graphs."""

    def test_seed_is_reproducible(self):
        first = list((s, t) for s, t, _ in erdos_renyi(10, 0.3, seed=42).edges())
        second = list((s, t) for s, t, _ in erdos_renyi(10, 0.3, seed=42).edges())
        assert first == second

    def test_extreme_probabilities(self):
        assert erdos_renyi(6, 0.0, seed=1).edge_count() == 0
        assert erdos_renyi(6, 1.0, seed=1).edge_count() == 30
        assert erdos_renyi(6, 1.0, directed=True, seed=1).edge_count() == 30

    def test_undirected_is_symmetric(self):
        assert erdos_renyi(12, 0.4, seed=5).is_symmetric()

    def test_invalid_probability(self):
        with pytest.raises(ConfigurationError, match="Probability"):
            erdos_renyi(5, 1.5)
