"""
Tests for the force-directed layouts.
"""

import math

import pytest

from socnetkit.common.exceptions import ValidationError
from socnetkit.layout.force_directed import (
    FR_FREEZE_ITERATION,
    _undirected_distances,
    fruchterman_reingold,
    kamada_kawai,
    spring_embedder
)
from socnetkit.layout.placement import Canvas, circular_placement, random_placement
from socnetkit.network.generators import cycle_graph, erdos_renyi, path_graph
from socnetkit.network.store import EdgeType, GraphStore

LAYOUTS = [spring_embedder, fruchterman_reingold, kamada_kawai]


def _distance(positions, a, b):
    (xa, ya), (xb, yb) = positions[a], positions[b]
    return math.hypot(xa - xb, ya - yb)


def _two_triangles() -> GraphStore:
    store = GraphStore()
    for name in range(6):
        store.add_vertex(name)
    for a, b in [(0, 1), (1, 2), (2, 0), (3, 4), (4, 5), (5, 3)]:
        store.add_edge(a, b, edge_type=EdgeType.UNDIRECTED)
    return store


class TestCommonBehaviour:
    """Properties every layout shares."""

    def setup_method(self):
        self.canvas = Canvas()
        self.view = erdos_renyi(12, 0.3, seed=4).view()
        self.start = random_placement(self.view.names, self.canvas, seed=4)

    @pytest.mark.parametrize("layout", LAYOUTS)
    def test_positions_stay_on_canvas(self, layout):
        result = layout(self.view, self.start, self.canvas, iterations=30, seed=1)
        assert set(result.positions) == set(self.view.names)
        assert all(self.canvas.contains(x, y) for x, y in result.positions.values())

    @pytest.mark.parametrize("layout", LAYOUTS)
    def test_iteration_budget(self, layout):
        result = layout(self.view, self.start, self.canvas, iterations=7, seed=1)
        assert result.iterations <= 7

    @pytest.mark.parametrize("layout", LAYOUTS)
    def test_history_and_progress(self, layout):
        calls = []
        result = layout(self.view, self.start, self.canvas, iterations=5, seed=1,
                        record_history=True,
                        progress=lambda done, total: calls.append((done, total)))
        assert len(result.history) == len(calls)
        assert all(total == 5 for _, total in calls)
        if calls:
            assert result.history[-1] == result.positions

    @pytest.mark.parametrize("layout", LAYOUTS)
    def test_same_seed_same_result(self, layout):
        first = layout(self.view, self.start, self.canvas, iterations=10, seed=8)
        second = layout(self.view, self.start, self.canvas, iterations=10, seed=8)
        assert first.positions == second.positions

    @pytest.mark.parametrize("layout", LAYOUTS)
    def test_empty_view(self, layout):
        result = layout(GraphStore().view(), {}, self.canvas)
        assert result.positions == {}
        assert result.converged

    @pytest.mark.parametrize("layout", LAYOUTS)
    def test_missing_positions(self, layout):
        with pytest.raises(ValidationError, match="Missing initial positions"):
            layout(self.view, {}, self.canvas)

    @pytest.mark.parametrize("layout", LAYOUTS)
    def test_initial_positions_are_clamped(self, layout):
        view = path_graph(2).view()
        result = layout(view, {0: (-100.0, -100.0), 1: (5000.0, 5000.0)}, self.canvas,
                        iterations=1, seed=0)
        assert all(self.canvas.contains(x, y) for x, y in result.positions.values())


class TestSpringEmbedder:
    """Test the Eades model."""

    def setup_method(self):
        self.canvas = Canvas()

    def test_long_spring_contracts(self):
        view = path_graph(2).view()
        start = {0: (100.0, 300.0), 1: (700.0, 300.0)}
        result = spring_embedder(view, start, self.canvas, iterations=1, natural_length=100.0)
        assert _distance(result.positions, 0, 1) < 600.0

    def test_close_strangers_repel(self):
        store = GraphStore()
        store.add_vertex(0)
        store.add_vertex(1)
        start = {0: (390.0, 300.0), 1: (410.0, 300.0)}
        result = spring_embedder(store.view(), start, self.canvas, iterations=1,
                                 natural_length=100.0)
        assert _distance(result.positions, 0, 1) > 20.0

    def test_adjacent_pair_feels_repulsion(self):
        view = path_graph(2).view()
        start = {0: (325.0, 300.0), 1: (475.0, 300.0)}
        result = spring_embedder(view, start, self.canvas, iterations=1,
                                 natural_length=100.0, step=1.0)
        # each end moves by 100 * (2 log 1.5 - 1 / 1.5^2)
        expected = 150.0 - 2 * 100.0 * (2.0 * math.log(1.5) - 1.0 / 2.25)
        assert _distance(result.positions, 0, 1) == pytest.approx(expected)

    def test_settles_where_spring_balances_repulsion(self):
        view = path_graph(2).view()
        start = {0: (350.0, 300.0), 1: (450.0, 300.0)}
        result = spring_embedder(view, start, self.canvas, iterations=200, natural_length=100.0)
        assert result.converged
        # root of 2 log d = 1 / d^2
        assert _distance(result.positions, 0, 1) == pytest.approx(132.79, abs=1.0)


class TestFruchtermanReingold:
    """Test the Fruchterman-Reingold model."""

    def setup_method(self):
        self.canvas = Canvas()
        self.view = cycle_graph(8).view()
        self.start = circular_placement(self.view.names, self.canvas, radius=50)

    def test_runs_whole_budget_without_freeze(self):
        result = fruchterman_reingold(self.view, self.start, self.canvas, iterations=12,
                                      freeze_iteration=None)
        assert result.iterations == 12
        assert not result.converged

    def test_default_run_freezes(self):
        view = path_graph(3).view()
        start = circular_placement(view.names, self.canvas)
        result = fruchterman_reingold(view, start, self.canvas, iterations=2000)
        assert result.converged
        assert result.iterations == FR_FREEZE_ITERATION

    def test_freeze_iteration(self):
        result = fruchterman_reingold(self.view, self.start, self.canvas, iterations=50,
                                      freeze_iteration=5, record_history=True)
        assert result.converged
        assert result.iterations == 5
        assert len(result.history) == 5

    def test_displacement_capped_by_temperature(self):
        result = fruchterman_reingold(self.view, self.start, self.canvas, iterations=1,
                                      initial_temperature=3.0)
        for name in self.view.names:
            assert _distance({0: self.start[name], 1: result.positions[name]}, 0, 1) <= 3.0 + 1e-9

    def test_strangers_move_apart(self):
        store = GraphStore()
        store.add_vertex(0)
        store.add_vertex(1)
        start = {0: (390.0, 300.0), 1: (410.0, 300.0)}
        result = fruchterman_reingold(store.view(), start, self.canvas, iterations=1)
        assert _distance(result.positions, 0, 1) > 20.0


class TestKamadaKawai:
    """Test the Kamada-Kawai model."""

    def setup_method(self):
        self.canvas = Canvas()

    def test_pair_at_ideal_length_converges(self):
        view = path_graph(2).view()
        start = circular_placement(view.names, self.canvas)
        result = kamada_kawai(view, start, self.canvas)
        assert result.converged
        assert result.iterations == 1

    def test_off_canvas_step_relocates_vertex(self):
        view = path_graph(2).view()
        # the Newton step sends vertex 0 to x = -500
        start = {0: (20.0, 300.0), 1: (60.0, 300.0)}
        result = kamada_kawai(view, start, self.canvas, iterations=1, inner_iterations=1, seed=6)
        assert result.positions[0] != (20.0, 300.0)
        assert self.canvas.contains(*result.positions[0])
        assert result.positions[1] == (60.0, 300.0)

    def test_distances_ignore_direction(self):
        store = GraphStore()
        for name in range(3):
            store.add_vertex(name)
        store.add_edge(0, 1)
        store.add_edge(2, 1)
        distances = _undirected_distances(store.view())
        assert distances[0, 2] == 2.0
        assert distances[2, 0] == 2.0
        assert distances[0, 1] == 1.0

    def test_single_vertex(self):
        store = GraphStore()
        store.add_vertex(5)
        result = kamada_kawai(store.view(), {5: (100.0, 100.0)}, self.canvas)
        assert result.converged
        assert result.positions == {5: (100.0, 100.0)}

    def test_disconnected_graph_terminates(self):
        view = _two_triangles().view()
        start = random_placement(view.names, self.canvas, seed=2)
        result = kamada_kawai(view, start, self.canvas, iterations=40, seed=2)
        assert result.iterations <= 40
        assert all(self.canvas.contains(x, y) for x, y in result.positions.values())

    def test_coincident_start_terminates(self):
        view = cycle_graph(5).view()
        start = {name: (400.0, 300.0) for name in view.names}
        result = kamada_kawai(view, start, self.canvas, iterations=20, seed=3)
        assert result.iterations <= 20
        assert all(math.isfinite(x) and math.isfinite(y) for x, y in result.positions.values())

