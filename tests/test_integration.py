"""
End-to-end workflows: edge list in, figures, clusters and a drawing out.
"""

import math

import networkit as nk
import numpy as np
import polars as pl
import pytest

from socnetkit import Canvas, GraphStore, NetworkAnalyzer
from socnetkit.network import (
    build_store_from_edgelist,
    compare_centrality_indices,
    get_centrality_summary,
    identify_central_vertices,
    store_to_edgelist,
    to_networkit
)


class TestKiteWorkflow:
    """Analyse a small two-relation organisation network."""

    def setup_method(self):
        advice = [(1, 2), (1, 3), (2, 3), (3, 4), (4, 5), (5, 6), (5, 7), (6, 7)]
        friendship = [(2, 1), (4, 3), (7, 5)]
        rows = [(s, t, "advice") for s, t in advice] + [(s, t, "friendship") for s, t in friendship]
        self.edges = pl.DataFrame(
            rows, schema={"source": pl.Int64, "target": pl.Int64, "relation": pl.Utf8},
            orient="row"
        )
        self.store = build_store_from_edgelist(self.edges, relation_col="relation", directed=False)
        self.analyzer = NetworkAnalyzer(self.store, canvas=Canvas(600, 400, 20))

    def test_store_shape(self):
        assert self.store.relation_names == ["advice", "friendship"]
        assert self.store.vertex_count() == 7
        assert self.store.edge_count("advice") == 16
        assert self.store.edge_count("friendship") == 6

    def test_bridge_vertices_are_most_between(self):
        result = self.analyzer.centrality("betweenness", relation="advice")
        top = identify_central_vertices(result, top_k=3)
        assert set(top) == {3, 4, 5}
        assert result.score(4)[0] == pytest.approx(9.0)

    def test_relations_are_analysed_separately(self):
        assert self.analyzer.is_connected("advice")
        assert not self.analyzer.is_connected("friendship")
        assert self.analyzer.diameter("advice") == 4.0

    def test_summary_and_comparison(self):
        betweenness = self.analyzer.centrality("betweenness", relation="advice")
        stress = self.analyzer.centrality("stress", relation="advice")
        summary = get_centrality_summary(betweenness)
        assert summary["count"] == 7
        assert summary["max_node"] in (3, 4, 5)
        comparison = compare_centrality_indices(betweenness, stress)
        assert comparison["pearson"] > 0.9
        assert comparison["n_vertices"] == 7

    def test_distribution(self):
        distribution = self.analyzer.centrality("degree", relation="advice").distribution()
        assert distribution.columns == ["score", "frequency"]
        assert distribution["frequency"].sum() == 7

    def test_clusters_join_equivalent_vertices_first(self):
        result = self.analyzer.cluster(matrix="distances", linkage="average", relation="advice")
        assert len(result.merges) == 6
        assert result.linkage_matrix().shape == (6, 4)
        assert result.clusters_at(0.0) == [[1, 2], [3], [4], [5], [6, 7]]
        assert result.clusters_at(result.levels[-1]) == [[1, 2, 3, 4, 5, 6, 7]]

    def test_layout_and_export(self):
        result = self.analyzer.layout("fruchterman_reingold", iterations=40, seed=5,
                                      relation="advice")
        canvas = self.analyzer.canvas
        assert all(canvas.contains(x, y) for x, y in result.positions.values())
        assert self.store.positions() == result.positions

        exported = store_to_edgelist(self.store, relation="advice")
        assert exported.height == 16
        rebuilt = build_store_from_edgelist(exported.select(["source", "target"]))
        assert rebuilt.edge_count() == 16

    def test_networkit_agrees_on_structure(self):
        graph, mapper = to_networkit(self.store, relation="advice")
        assert graph.numberOfNodes() == 7
        assert graph.numberOfEdges() == 8
        components = nk.components.ConnectedComponents(graph)
        components.run()
        assert components.numberOfComponents() == 1
        degree = self.analyzer.centrality("degree", relation="advice")
        for name in self.store.vertex_names():
            assert graph.degree(mapper.get_index(name)) == degree.score(name)[0]


class TestDisconnectedTriangles:
    """Two disjoint triangles exercise every connectivity fallback."""

    def setup_method(self):
        edges = pl.DataFrame({"source": [0, 1, 2, 3, 4, 5], "target": [1, 2, 0, 4, 5, 3]})
        self.store = build_store_from_edgelist(edges, directed=False)
        self.analyzer = NetworkAnalyzer(self.store)

    def test_connectivity_dependent_indices(self):
        assert not self.analyzer.is_connected()
        closeness = self.analyzer.centrality("closeness")
        influence = self.analyzer.centrality("influence_range_closeness")
        np.testing.assert_array_equal(closeness.raw, np.zeros(6))
        assert np.all(influence.raw > 0)

    def test_information_centrality_fails_gracefully(self):
        result = self.analyzer.centrality("information")
        assert not result.success
        np.testing.assert_array_equal(result.raw, np.zeros(6))

    def test_distances_between_components(self):
        assert math.isinf(self.analyzer.distance(0, 3))
        assert self.analyzer.average_distance() == 1.0
        assert self.analyzer.triad_census()["300"] == 2


class TestEmptyStore:
    """Queries on a store without vertices."""

    def test_empty_store(self):
        analyzer = NetworkAnalyzer(GraphStore())
        assert analyzer.diameter() == 0.0
        assert analyzer.is_connected()
        with pytest.warns(UserWarning, match="Empty graph"):
            result = analyzer.centrality("degree")
        assert result.names == []
        assert analyzer.layout(iterations=5).positions == {}
