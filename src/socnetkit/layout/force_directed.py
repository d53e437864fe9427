"""
Force-directed layouts.

Three models are available:

- :func:`spring_embedder` (Eades): logarithmic springs between adjacent
  vertices, short-range inverse-square repulsion between every pair.
- :func:`fruchterman_reingold`: attraction ``d^2/k`` along ties, repulsion
  ``k^2/d`` between every pair, displacement capped by a cooling
  temperature.
- :func:`kamada_kawai`: spring energy minimisation where the ideal distance
  of a pair is proportional to its geodesic distance, relaxed one vertex
  at a time by two-dimensional Newton steps.

All layouts read an initial position for every vertex, never leave the
canvas and never fail; an exhausted iteration budget is reported through
``LayoutResult.converged``.
"""

from dataclasses import dataclass, field
import math
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..common.exceptions import require_positive
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..common.validators import validate_positions
from ..network.distances import compute_geodesics
from ..network.store import GraphView
from .placement import Canvas, Position

logger = get_logger(__name__)

LayoutProgress = Callable[[int, int], None]

# Eades spring embedder
SPRING_ATTRACTION = 2.0
SPRING_REPULSION = 1.0
SPRING_STEP = 0.1
SPRING_TOLERANCE = 1e-3

# Fruchterman-Reingold
FR_OPTIMAL_DISTANCE_FACTOR = 1.0
FR_COOLING = 0.95
FR_MIN_TEMPERATURE = 1.0
FR_FREEZE_ITERATION = 80

# Kamada-Kawai
KK_SPRING_STRENGTH = 1.0
KK_EPSILON = 0.1
KK_MAX_INNER_ITERATIONS = 50

MIN_DISTANCE = 1e-6


@dataclass
class LayoutResult:
    """
    Outcome of a layout run.

    Attributes
    ----------
    positions : Dict[int, Tuple[float, float]]
        Final position of every vertex
    iterations : int
        Iterations performed
    converged : bool
        Whether the stopping criterion was met before the budget ran out
    history : List[Dict[int, Tuple[float, float]]]
        Positions after every iteration when history recording was requested
    """

    positions: Dict[int, Position]
    iterations: int
    converged: bool
    history: List[Dict[int, Position]] = field(default_factory=list)


def _initial_coordinates(
    view: GraphView,
    positions: Dict[int, Position],
    canvas: Canvas
) -> np.ndarray:
    validate_positions(positions, view.names)
    coords = np.array([positions[name] for name in view.names], dtype=float).reshape(-1, 2)
    return canvas.clamp_array(coords)


def _as_positions(view: GraphView, coords: np.ndarray) -> Dict[int, Position]:
    return {name: (float(coords[i, 0]), float(coords[i, 1])) for i, name in enumerate(view.names)}


def _undirected_pairs(view: GraphView) -> List[Tuple[int, int]]:
    """Adjacent index pairs ``i < j``, ignoring direction and self-loops."""
    pairs = set()
    for i, arcs in enumerate(view.out_arcs):
        for j in arcs:
            if i != j:
                pairs.add((min(i, j), max(i, j)))
    return sorted(pairs)


def _undirected_distances(view: GraphView) -> np.ndarray:
    """Geodesic distances with every tie read in both directions."""
    neighbors = [{j: 1.0 for j in view.neighbors(i)} for i in range(view.size)]
    undirected = GraphView(view.relation, view.names, neighbors, neighbors,
                           symmetric=True, weighted=False, generation=view.generation)
    return compute_geodesics(undirected).distances.copy()


def _separate(delta: np.ndarray, rng: np.random.Generator) -> Tuple[np.ndarray, float]:
    """Direction and length of a displacement, with a random nudge for coincident points."""
    distance = float(math.hypot(delta[0], delta[1]))
    if distance < MIN_DISTANCE:
        angle = rng.uniform(0.0, 2.0 * math.pi)
        return np.array([math.cos(angle), math.sin(angle)]), MIN_DISTANCE
    return delta / distance, distance


def _finish(
    name: str,
    view: GraphView,
    coords: np.ndarray,
    iterations: int,
    converged: bool,
    history: List[Dict[int, Position]]
) -> LayoutResult:
    if not converged:
        logger.debug("%s layout stopped after %d iterations without converging",
                     name, iterations)
    return LayoutResult(_as_positions(view, coords), iterations, converged, history)


def spring_embedder(
    view: GraphView,
    positions: Dict[int, Position],
    canvas: Canvas,
    iterations: int = 100,
    natural_length: Optional[float] = None,
    attraction: float = SPRING_ATTRACTION,
    repulsion: float = SPRING_REPULSION,
    step: float = SPRING_STEP,
    seed: Optional[int] = None,
    progress: Optional[LayoutProgress] = None,
    record_history: bool = False
) -> LayoutResult:
    """
    Eades spring embedder.

    Coordinates are measured in units of ``natural_length`` pixels. Adjacent
    vertices pull each other with ``c1 * log(d / c2)``; every pair pushes
    apart with ``c3 / d^2``, a force that vanishes beyond ``2 * c2``. Each vertex moves by ``c4 * F`` per iteration.

    Parameters
    ----------
    view : GraphView
        Graph to draw; ties are treated as undirected
    positions : Dict[int, Tuple[float, float]]
        Initial position of every vertex
    canvas : Canvas
        Drawing area
    iterations : int, default 100
        Iteration budget
    natural_length : float, optional
        Spring length ``c2`` in pixels, ``canvas.scale / sqrt(N)`` by default
    attraction : float, default 2.0
        Spring constant ``c1``
    repulsion : float, default 1.0
        Repulsion constant ``c3``
    step : float, default 0.1
        Velocity factor ``c4``
    seed : int, optional
        Seed for nudging coincident vertices apart
    progress : callable, optional
        Called as ``progress(iteration, iterations)``
    record_history : bool, default False
        Keep the positions after every iteration
    """
    require_positive(iterations, "iterations", allow_zero=True)
    log_function_entry("spring_embedder", vertices=view.size, iterations=iterations)

    coords = _initial_coordinates(view, positions, canvas)
    n = view.size
    history: List[Dict[int, Position]] = []
    if n == 0:
        return LayoutResult({}, 0, True, history)

    unit = natural_length if natural_length is not None else canvas.scale / math.sqrt(n)
    rng = np.random.default_rng(seed)
    adjacent = set(_undirected_pairs(view))

    converged = False
    done = 0
    with LoggingTimer("spring_embedder", {"vertices": n}):
        for done in range(1, iterations + 1):
            scaled = coords / unit
            forces = np.zeros((n, 2))
            for i in range(n):
                for j in range(i + 1, n):
                    direction, d = _separate(scaled[j] - scaled[i], rng)
                    magnitude = -repulsion / (d * d) if d < 2.0 else 0.0
                    if (i, j) in adjacent:
                        magnitude += attraction * math.log(d)
                    forces[i] += magnitude * direction
                    forces[j] -= magnitude * direction

            movement = step * forces * unit
            coords = canvas.clamp_array(coords + movement)

            if record_history:
                history.append(_as_positions(view, coords))
            if progress is not None:
                progress(done, iterations)
            if float(np.max(np.abs(movement))) / unit < SPRING_TOLERANCE:
                converged = True
                break

    return _finish("spring_embedder", view, coords, done, converged, history)


def fruchterman_reingold(
    view: GraphView,
    positions: Dict[int, Position],
    canvas: Canvas,
    iterations: int = 100,
    optimal_distance_factor: float = FR_OPTIMAL_DISTANCE_FACTOR,
    initial_temperature: Optional[float] = None,
    cooling: float = FR_COOLING,
    min_temperature: float = FR_MIN_TEMPERATURE,
    freeze_iteration: Optional[int] = FR_FREEZE_ITERATION,
    seed: Optional[int] = None,
    progress: Optional[LayoutProgress] = None,
    record_history: bool = False
) -> LayoutResult:
    """
    Fruchterman-Reingold layout.

    With ``k = C * sqrt(area / N)``, tied vertices attract with ``d^2 / k``
    and every pair repels with ``k^2 / d``. The displacement of a vertex is
    capped by the temperature ``max(t0 * cooling^i, t_min)``, which drops to
    zero from ``freeze_iteration`` on.

    Parameters
    ----------
    initial_temperature : float, optional
        ``t0``, a tenth of the canvas width by default
    freeze_iteration : int, optional, default 80
        Iteration from which vertices stop moving; None never freezes
    """
    require_positive(iterations, "iterations", allow_zero=True)
    require_positive(optimal_distance_factor, "optimal_distance_factor")
    log_function_entry("fruchterman_reingold", vertices=view.size, iterations=iterations)

    coords = _initial_coordinates(view, positions, canvas)
    n = view.size
    history: List[Dict[int, Position]] = []
    if n == 0:
        return LayoutResult({}, 0, True, history)

    k = optimal_distance_factor * math.sqrt(canvas.area / n)
    t0 = canvas.width / 10.0 if initial_temperature is None else initial_temperature
    rng = np.random.default_rng(seed)
    edges = _undirected_pairs(view)

    converged = False
    done = 0
    with LoggingTimer("fruchterman_reingold", {"vertices": n}):
        for done in range(1, iterations + 1):
            iteration = done - 1
            if freeze_iteration is not None and iteration >= freeze_iteration:
                converged = True
                done = iteration
                break
            temperature = max(t0 * cooling ** iteration, min_temperature)

            displacement = np.zeros((n, 2))
            for i in range(n):
                for j in range(i + 1, n):
                    direction, d = _separate(coords[i] - coords[j], rng)
                    push = (k * k / d) * direction
                    displacement[i] += push
                    displacement[j] -= push
            for i, j in edges:
                direction, d = _separate(coords[i] - coords[j], rng)
                pull = (d * d / k) * direction
                displacement[i] -= pull
                displacement[j] += pull

            lengths = np.hypot(displacement[:, 0], displacement[:, 1])
            capped = np.minimum(lengths, temperature)
            scale = np.divide(capped, lengths, out=np.zeros_like(lengths), where=lengths > 0)
            coords = canvas.clamp_array(coords + displacement * scale[:, None])

            if record_history:
                history.append(_as_positions(view, coords))
            if progress is not None:
                progress(done, iterations)

    return _finish("fruchterman_reingold", view, coords, done, converged, history)


def kamada_kawai(
    view: GraphView,
    positions: Dict[int, Position],
    canvas: Canvas,
    iterations: int = 500,
    spring_strength: float = KK_SPRING_STRENGTH,
    epsilon: float = KK_EPSILON,
    inner_iterations: int = KK_MAX_INNER_ITERATIONS,
    seed: Optional[int] = None,
    progress: Optional[LayoutProgress] = None,
    record_history: bool = False
) -> LayoutResult:
    """
    Kamada-Kawai spring layout.

    The ideal length of a pair is ``l_ij = L * d_ij`` with
    ``L = canvas.scale / diameter`` and its stiffness ``k_ij = K / d_ij^2``.
    Distances ignore tie direction; unreachable pairs are treated as being
    ``diameter + 1`` apart. Each outer iteration picks the vertex with the
    largest energy gradient and relaxes it with Newton steps until its
    gradient drops below ``epsilon``. A step that is singular, non-finite
    or lands outside the canvas is replaced by a random position inside
    the canvas.

    Parameters
    ----------
    iterations : int, default 500
        Budget of outer iterations (vertex selections)
    spring_strength : float, default 1.0
        ``K``
    epsilon : float, default 0.1
        Gradient magnitude under which a vertex counts as settled
    inner_iterations : int, default 50
        Newton steps allowed per selected vertex
    """
    require_positive(iterations, "iterations", allow_zero=True)
    require_positive(epsilon, "epsilon")
    log_function_entry("kamada_kawai", vertices=view.size, iterations=iterations)

    coords = _initial_coordinates(view, positions, canvas)
    n = view.size
    history: List[Dict[int, Position]] = []
    if n <= 1:
        return LayoutResult(_as_positions(view, coords), 0, True, history)

    rng = np.random.default_rng(seed)
    distances = _undirected_distances(view)
    finite = np.isfinite(distances)
    diameter = float(distances[finite].max()) if finite.any() else 0.0
    distances[~finite] = diameter + 1.0
    np.fill_diagonal(distances, 0.0)

    edge_length = canvas.scale / max(diameter, 1.0)
    lengths = edge_length * distances
    with np.errstate(divide="ignore"):
        stiffness = np.where(distances > 0, spring_strength / distances ** 2, 0.0)

    def gradient(m: int) -> Tuple[float, float]:
        delta = coords[m] - coords
        d = np.maximum(np.hypot(delta[:, 0], delta[:, 1]), MIN_DISTANCE)
        factor = stiffness[m] * (1.0 - lengths[m] / d)
        factor[m] = 0.0
        return float(np.sum(factor * delta[:, 0])), float(np.sum(factor * delta[:, 1]))

    def newton_step(m: int, ex: float, ey: float) -> Optional[np.ndarray]:
        delta = coords[m] - coords
        d = np.maximum(np.hypot(delta[:, 0], delta[:, 1]), MIN_DISTANCE)
        d3 = d ** 3
        k, l = stiffness[m], lengths[m]
        mask = np.arange(n) != m
        exx = float(np.sum((k * (1.0 - l * delta[:, 1] ** 2 / d3))[mask]))
        eyy = float(np.sum((k * (1.0 - l * delta[:, 0] ** 2 / d3))[mask]))
        exy = float(np.sum((k * l * delta[:, 0] * delta[:, 1] / d3)[mask]))
        determinant = exx * eyy - exy * exy
        if abs(determinant) < 1e-12:
            return None
        dx = (-ex * eyy + ey * exy) / determinant
        dy = (-ey * exx + ex * exy) / determinant
        if not (math.isfinite(dx) and math.isfinite(dy)):
            return None
        step = np.array([dx, dy])
        return step if canvas.contains(*(coords[m] + step)) else None

    converged = False
    done = 0
    with LoggingTimer("kamada_kawai", {"vertices": n}):
        for done in range(1, iterations + 1):
            gradients = [gradient(m) for m in range(n)]
            magnitudes = [math.hypot(ex, ey) for ex, ey in gradients]
            m = int(np.argmax(magnitudes))
            if magnitudes[m] < epsilon:
                converged = True
                break

            ex, ey = gradients[m]
            for _ in range(inner_iterations):
                step = newton_step(m, ex, ey)
                if step is None:
                    coords[m] = canvas.random_point(rng)
                    logger.debug("Kamada-Kawai: divergent step for vertex %d, relocated",
                                 view.names[m])
                else:
                    coords[m] = coords[m] + step
                ex, ey = gradient(m)
                if math.hypot(ex, ey) < epsilon:
                    break

            if record_history:
                history.append(_as_positions(view, coords))
            if progress is not None:
                progress(done, iterations)

    return _finish("kamada_kawai", view, coords, done, converged, history)
