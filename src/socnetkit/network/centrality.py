"""
Centrality and prestige indices.

Every index is reported three ways: the raw per-vertex score, a
standardized score (divided by a theoretical maximum, by N-1 or by a
running sum depending on the index) and, where the index has one, a
group-level centralization. Summary statistics and a discretised
distribution of the standardized scores come with each result.

Distance-based indices (closeness, influence range closeness, betweenness,
stress, eccentricity, power, proximity prestige) read the per-source
workspaces produced by :mod:`socnetkit.network.distances`; betweenness and
stress use Brandes' backward accumulation over the predecessor lists.

Indices that need connectivity degrade to 0 for the vertices concerned.
Information centrality reports a failed matrix inversion through
``CentralityResult.success``; the iterative indices report an exhausted
budget through ``CentralityResult.converged``.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple
import warnings

import numpy as np
import polars as pl
from scipy.stats import spearmanr

from ..common.exceptions import (
    ComputationError,
    ConfigurationError,
    validate_parameter
)
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..matrix.builders import adjacency_matrix
from ..matrix.matrix import INVERSION_METHODS, Matrix
from .distances import GeodesicResult, compute_geodesics
from .store import GraphView

logger = get_logger(__name__)

AVAILABLE_INDICES = [
    "degree", "degree_prestige", "closeness", "influence_range_closeness",
    "betweenness", "stress", "eccentricity", "power", "eigenvector",
    "information", "pagerank", "proximity_prestige"
]

DISTANCE_INDICES = {
    "closeness", "influence_range_closeness", "betweenness", "stress",
    "eccentricity", "power", "proximity_prestige"
}

DEFAULT_DAMPING = 0.85
PAGERANK_TOLERANCE = 1e-5
PAGERANK_MAX_ITERATIONS = 1000
EIGENVECTOR_TOLERANCE = 1e-7
EIGENVECTOR_MAX_ITERATIONS = 500
EIGENVECTOR_SHIFT = 1.0


@dataclass
class CentralityStatistics:
    """Aggregates over the standardized scores of one index."""

    sum: float
    mean: float
    variance: float
    min: float
    max: float
    min_node: int
    max_node: int
    raw_sum: float
    classes: int


@dataclass
class CentralityResult:
    """
    Scores of one index for every vertex of a view.

    Attributes
    ----------
    index : str
        Index name, one of ``AVAILABLE_INDICES``
    names : List[int]
        Vertex names in score order
    raw : np.ndarray
        Raw scores
    standardized : np.ndarray
        Standardized scores
    group : float or None
        Group centralization, None when the index defines none
    statistics : CentralityStatistics
        Aggregates over the standardized scores
    success : bool
        False when a required matrix inversion failed
    converged : bool
        False when an iterative index exhausted its budget
    iterations : int
        Iterations used by iterative indices, 0 otherwise
    """

    index: str
    names: List[int]
    raw: np.ndarray
    standardized: np.ndarray
    group: Optional[float]
    statistics: CentralityStatistics
    success: bool = True
    converged: bool = True
    iterations: int = 0

    def score(self, name: int) -> Tuple[float, float]:
        """``(raw, standardized)`` for a vertex, ``(0.0, 0.0)`` when absent."""
        try:
            i = self.names.index(name)
        except ValueError:
            return 0.0, 0.0
        return float(self.raw[i]), float(self.standardized[i])

    def copy(self) -> "CentralityResult":
        return replace(self, names=list(self.names), raw=self.raw.copy(),
                       standardized=self.standardized.copy(),
                       statistics=replace(self.statistics))

    def to_frame(self) -> pl.DataFrame:
        """One row per vertex with ``node_id``, ``raw`` and ``standardized``."""
        return pl.DataFrame({
            "node_id": self.names,
            "raw": self.raw.tolist(),
            "standardized": self.standardized.tolist(),
        }, schema={"node_id": pl.Int64, "raw": pl.Float64, "standardized": pl.Float64})

    def distribution(self, precision: int = 3) -> pl.DataFrame:
        """
        Frequency of each standardized score after rounding.

        Returns
        -------
        pl.DataFrame
            Columns ``score`` and ``frequency``, sorted by score
        """
        frame = pl.DataFrame(
            {"score": np.round(self.standardized, precision).tolist()},
            schema={"score": pl.Float64}
        )
        return (
            frame.group_by("score")
            .agg(pl.len().alias("frequency"))
            .sort("score")
        )


def compute_centrality(
    view: GraphView,
    index: str,
    geodesics: Optional[GeodesicResult] = None,
    weighted: bool = False,
    invert_weights: bool = False,
    symmetrize: bool = False,
    damping: float = DEFAULT_DAMPING,
    inversion_method: str = "lu"
) -> CentralityResult:
    """
    Compute one centrality or prestige index for every vertex of a view.

    Parameters
    ----------
    view : GraphView
        Graph snapshot; drop isolates when building it to exclude them
    index : str
        One of ``AVAILABLE_INDICES``
    geodesics : GeodesicResult, optional
        Precomputed shortest paths for the same view and weighting. When
        omitted and the index needs distances they are computed here.
    weighted : bool, default False
        Use arc weights (degree sums, weighted shortest paths, weighted
        adjacency matrices)
    invert_weights : bool, default False
        With ``weighted``, treat ``1 / weight`` as arc length
    symmetrize : bool, default False
        Symmetrize the adjacency matrix before eigenvector power iteration
    damping : float, default 0.85
        PageRank damping factor
    inversion_method : {"lu", "gauss-jordan"}, default "lu"
        Inversion used by information centrality

    Returns
    -------
    CentralityResult
        Raw and standardized scores with statistics

    Raises
    ------
    ConfigurationError
        If the index or a parameter is invalid
    ComputationError
        If the computation fails unexpectedly

    Examples
    --------
    >>> from socnetkit.network.generators import star_graph
    >>> result = compute_centrality(star_graph(4).view(), "betweenness")
    >>> result.score(0)
    (6.0, 1.0)

    Notes
    -----
    Time Complexity:
    - Degree, prestige: O(V + E)
    - Distance-based indices: O(V * E) unweighted, O(V * E log V) weighted
    - Eigenvector, PageRank: O(k * V^2) and O(k * E) for k iterations
    - Information: O(V^3)
    """
    log_function_entry("compute_centrality", index=index, vertices=view.size,
                       weighted=weighted, invert_weights=invert_weights)

    _validate_centrality_parameters(index, damping, inversion_method)

    if view.size == 0:
        warnings.warn("Empty graph provided. Returning empty centrality result.")
        empty = np.zeros(0)
        return CentralityResult(index, [], empty, empty, None, _statistics([], empty, empty))

    with LoggingTimer(f"{index}_centrality", {"vertices": view.size}):
        try:
            if index in DISTANCE_INDICES and geodesics is None:
                geodesics = compute_geodesics(view, weighted=weighted,
                                              invert_weights=invert_weights)

            if index == "degree":
                outcome = _degree(view, weighted, incoming=False)
            elif index == "degree_prestige":
                outcome = _degree(view, weighted, incoming=True)
            elif index == "closeness":
                outcome = _closeness(geodesics)
            elif index == "influence_range_closeness":
                outcome = _influence_range_closeness(geodesics)
            elif index == "betweenness":
                outcome = _betweenness(geodesics)
            elif index == "stress":
                outcome = _stress(geodesics)
            elif index == "eccentricity":
                outcome = _eccentricity(geodesics)
            elif index == "power":
                outcome = _power(geodesics)
            elif index == "eigenvector":
                outcome = _eigenvector(view, weighted, symmetrize)
            elif index == "information":
                outcome = _information(view, weighted, inversion_method)
            elif index == "pagerank":
                outcome = _pagerank(view, weighted, damping)
            else:
                outcome = _proximity_prestige(geodesics)
        except (ConfigurationError, ComputationError):
            raise
        except Exception as e:
            raise ComputationError(
                f"Failed to calculate {index} centrality: {str(e)}",
                operation=f"calculate_{index}",
                error_type="computation",
                resource_info={"vertices": view.size, "arcs": view.arc_count},
                cause=e
            )

    raw = np.nan_to_num(outcome.raw, nan=0.0, posinf=0.0, neginf=0.0)
    standardized = np.nan_to_num(outcome.standardized, nan=0.0, posinf=0.0, neginf=0.0)

    result = CentralityResult(
        index=index,
        names=list(view.names),
        raw=raw,
        standardized=standardized,
        group=outcome.group,
        statistics=_statistics(view.names, raw, standardized),
        success=outcome.success,
        converged=outcome.converged,
        iterations=outcome.iterations
    )

    logger.info("%s centrality computed for %d vertices (mean %.4f)",
                index, view.size, result.statistics.mean)
    return result


def _validate_centrality_parameters(index: str, damping: float, inversion_method: str) -> None:
    validate_parameter(index, AVAILABLE_INDICES, "index", "compute_centrality")
    validate_parameter(inversion_method, INVERSION_METHODS, "inversion_method",
                       "compute_centrality")
    if not 0.0 < damping < 1.0:
        raise ConfigurationError(
            f"Damping factor must lie strictly between 0 and 1, got {damping}",
            parameter="damping",
            value=damping
        )


@dataclass
class _Outcome:
    raw: np.ndarray
    standardized: np.ndarray
    group: Optional[float] = None
    success: bool = True
    converged: bool = True
    iterations: int = 0


def _statistics(names: List[int], raw: np.ndarray, standardized: np.ndarray) -> CentralityStatistics:
    if len(standardized) == 0:
        return CentralityStatistics(0.0, 0.0, 0.0, 0.0, 0.0, -1, -1, 0.0, 0)

    mean = float(standardized.mean())
    min_i = int(np.argmin(standardized))
    max_i = int(np.argmax(standardized))
    return CentralityStatistics(
        sum=float(standardized.sum()),
        mean=mean,
        variance=float(np.mean((standardized - mean) ** 2)),
        min=float(standardized[min_i]),
        max=float(standardized[max_i]),
        min_node=names[min_i],
        max_node=names[max_i],
        raw_sum=float(raw.sum()),
        classes=len(np.unique(np.round(standardized, 6)))
    )


def _divide_or_zero(values: np.ndarray, denominator: float) -> np.ndarray:
    if denominator == 0:
        return np.zeros_like(values)
    return values / denominator


# ----------------------------------------------------------------------
# degree


def _degree(view: GraphView, weighted: bool, incoming: bool) -> _Outcome:
    n = view.size
    arcs = view.in_arcs if incoming else view.out_arcs
    raw = np.array([
        sum(w if weighted else 1.0 for j, w in arcs[i].items() if j != i)
        for i in range(n)
    ])

    if weighted:
        return _Outcome(raw, _divide_or_zero(raw, raw.sum()))

    standardized = _divide_or_zero(raw, n - 1)
    spread = float(np.sum(standardized.max() - standardized))
    if view.symmetric:
        group = spread / (n - 2) if n >= 3 else 0.0
    else:
        group = spread / (n - 1) if n >= 3 else 0.0
    return _Outcome(raw, standardized, group)


# ----------------------------------------------------------------------
# distance based


def _closeness(geodesics: GeodesicResult) -> _Outcome:
    n = geodesics.size
    raw = np.array([
        1.0 / p.distance_sum if p.reaches_all() and p.distance_sum > 0 else 0.0
        for p in geodesics.paths
    ])
    standardized = raw * (n - 1)

    group = 0.0
    if n >= 3:
        spread = float(np.sum(standardized.max() - standardized))
        group = spread * (2 * n - 3) / ((n - 1) * (n - 2))
    return _Outcome(raw, standardized, group)


def _influence_range_closeness(geodesics: GeodesicResult) -> _Outcome:
    n = geodesics.size
    raw = np.zeros(n)
    for i, p in enumerate(geodesics.paths):
        if p.reachable > 0 and p.distance_sum > 0:
            raw[i] = (p.reachable / (n - 1)) / (p.distance_sum / p.reachable)
    return _Outcome(raw, raw.copy())


def _accumulate(geodesics: GeodesicResult) -> Tuple[np.ndarray, np.ndarray]:
    """Brandes backward pass yielding betweenness and stress together."""
    n = geodesics.size
    betweenness = np.zeros(n)
    stress = np.zeros(n)

    for paths in geodesics.paths:
        source = paths.source
        sigma = paths.sigma
        delta = np.zeros(n)
        through = np.zeros(n)

        for w in reversed(paths.order):
            for v in paths.predecessors[w]:
                delta[v] += sigma[v] / sigma[w] * (1.0 + delta[w])
                through[v] += 1.0 + through[w]
            if w != source:
                betweenness[w] += delta[w]
                stress[w] += sigma[w] * through[w]

    if geodesics.symmetric:
        betweenness /= 2.0
        stress /= 2.0
    return betweenness, stress


def _betweenness(geodesics: GeodesicResult) -> _Outcome:
    n = geodesics.size
    raw, _ = _accumulate(geodesics)

    if n <= 2:
        denominator = 1.0
    elif geodesics.symmetric:
        denominator = (n - 1) * (n - 2) / 2.0
    else:
        denominator = float((n - 1) * (n - 2))
    standardized = raw / denominator

    group = float(np.sum(standardized.max() - standardized)) / (n - 1) if n > 1 else 0.0
    return _Outcome(raw, standardized, group)


def _stress(geodesics: GeodesicResult) -> _Outcome:
    _, raw = _accumulate(geodesics)
    return _Outcome(raw, _divide_or_zero(raw, raw.sum()))


def _eccentricity(geodesics: GeodesicResult) -> _Outcome:
    raw = np.array([
        1.0 / p.eccentricity if p.reaches_all() and p.eccentricity > 0 else 0.0
        for p in geodesics.paths
    ])
    return _Outcome(raw, raw.copy())


def _power(geodesics: GeodesicResult) -> _Outcome:
    n = geodesics.size
    raw = np.zeros(n)
    standardized = np.zeros(n)
    for i, p in enumerate(geodesics.paths):
        reached = p.distance[np.isfinite(p.distance) & (p.distance > 0)]
        raw[i] = float(np.sum(1.0 / reached))
        component_size = p.reachable + 1
        if component_size > 1:
            standardized[i] = raw[i] / (component_size - 1)
    return _Outcome(raw, standardized)


def _proximity_prestige(geodesics: GeodesicResult) -> _Outcome:
    n = geodesics.size
    raw = np.zeros(n)
    for i in range(n):
        column = geodesics.distances[:, i]
        mask = np.isfinite(column)
        mask[i] = False
        influencers = int(mask.sum())
        total = float(column[mask].sum())
        if influencers > 0 and total > 0:
            raw[i] = (influencers / (n - 1)) / (total / influencers)
    return _Outcome(raw, raw.copy())


# ----------------------------------------------------------------------
# matrix based


def _eigenvector(view: GraphView, weighted: bool, symmetrize: bool) -> _Outcome:
    matrix = adjacency_matrix(view, weighted=weighted, symmetrize=symmetrize)
    result = matrix.power_iteration(
        tolerance=EIGENVECTOR_TOLERANCE,
        max_iterations=EIGENVECTOR_MAX_ITERATIONS,
        shift=EIGENVECTOR_SHIFT
    )

    if result.eigenvalue <= EIGENVECTOR_TOLERANCE:
        zeros = np.zeros(view.size)
        return _Outcome(zeros, zeros.copy(), converged=result.converged,
                        iterations=result.iterations)

    raw = np.abs(result.vector) / np.max(np.abs(result.vector))
    logger.debug("Leading eigenvalue %.6f after %d iterations",
                 result.eigenvalue, result.iterations)
    return _Outcome(raw, _divide_or_zero(raw, raw.sum()),
                    converged=result.converged, iterations=result.iterations)


def _information(view: GraphView, weighted: bool, inversion_method: str) -> _Outcome:
    n = view.size
    raw = np.zeros(n)

    adjacency = adjacency_matrix(view, weighted=weighted, symmetrize=True).data
    np.fill_diagonal(adjacency, 0.0)
    connected = np.flatnonzero(adjacency.sum(axis=1) > 0)
    if len(connected) == 0:
        logger.warning("Information centrality needs at least one tie")
        return _Outcome(raw, raw.copy(), success=False)

    sub = adjacency[np.ix_(connected, connected)]
    m = len(connected)
    weights = 1.0 - sub
    np.fill_diagonal(weights, 1.0 + sub.sum(axis=1))

    inverse, ok = Matrix.from_array(weights).inverse(method=inversion_method)
    if not ok:
        logger.warning("Information centrality: weight matrix is singular, "
                       "the graph is probably disconnected")
        return _Outcome(raw, raw.copy(), success=False)

    c = inverse.data
    trace = float(np.trace(c))
    row_sum = float(c[0].sum())
    scores = 1.0 / (np.diag(c) + (trace - 2.0 * row_sum) / m)
    raw[connected] = scores
    return _Outcome(raw, _divide_or_zero(raw, raw.sum()))


def _pagerank(view: GraphView, weighted: bool, damping: float) -> _Outcome:
    n = view.size
    scores = np.full(n, 1.0 / n)

    if view.arc_count == 0:
        return _Outcome(scores, _divide_or_zero(scores, scores.max()), iterations=0)

    out_strength = np.array([
        sum(w if weighted else 1.0 for w in arcs.values()) for arcs in view.out_arcs
    ])

    converged = False
    iterations = 0
    for iterations in range(1, PAGERANK_MAX_ITERATIONS + 1):
        updated = np.full(n, (1.0 - damping) / n)
        for j, arcs in enumerate(view.out_arcs):
            if out_strength[j] == 0:
                continue
            share = damping * scores[j] / out_strength[j]
            for i, w in arcs.items():
                updated[i] += share * (w if weighted else 1.0)
        change = float(np.max(np.abs(updated - scores)))
        scores = updated
        if change < PAGERANK_TOLERANCE:
            converged = True
            break

    if not converged:
        logger.warning("PageRank did not converge within %d iterations",
                       PAGERANK_MAX_ITERATIONS)

    return _Outcome(scores, _divide_or_zero(scores, scores.max()),
                    converged=converged, iterations=iterations)


# ----------------------------------------------------------------------
# reporting helpers


def get_centrality_summary(result: CentralityResult) -> Dict[str, Any]:
    """
    Summary statistics of a result as a plain dictionary.

    Examples
    --------
    >>> summary = get_centrality_summary(result)
    >>> summary["mean"]
    """
    stats = result.statistics
    return {
        "index": result.index,
        "count": len(result.names),
        "sum": stats.sum,
        "mean": stats.mean,
        "variance": stats.variance,
        "min": stats.min,
        "max": stats.max,
        "min_node": stats.min_node,
        "max_node": stats.max_node,
        "group": result.group,
        "classes": stats.classes,
    }


def identify_central_vertices(
    result: CentralityResult,
    top_k: int = 10,
    threshold: Optional[float] = None
) -> List[int]:
    """
    Vertex names with the highest standardized scores.

    Parameters
    ----------
    result : CentralityResult
        Result of :func:`compute_centrality`
    top_k : int, default 10
        Number of vertices to return
    threshold : float, optional
        Keep only vertices whose standardized score reaches this value
    """
    frame = result.to_frame().sort(["standardized", "node_id"], descending=[True, False])
    if threshold is not None:
        frame = frame.filter(pl.col("standardized") >= threshold)
    return frame.head(top_k)["node_id"].to_list()


def compare_centrality_indices(
    first: CentralityResult,
    second: CentralityResult
) -> Dict[str, float]:
    """
    Pearson and Spearman correlation between two indices over the same view.

    Raises
    ------
    ConfigurationError
        If the two results do not cover the same vertices
    """
    if first.names != second.names:
        raise ConfigurationError(
            "Centrality results cover different vertex sets",
            parameter="second"
        )

    values1, values2 = first.standardized, second.standardized
    if len(values1) < 2 or np.std(values1) == 0 or np.std(values2) == 0:
        return {"pearson": 0.0, "spearman": 0.0, "n_vertices": len(values1)}

    pearson_corr = np.corrcoef(values1, values2)[0, 1]
    spearman_corr, _ = spearmanr(values1, values2)

    return {
        "pearson": float(pearson_corr) if not np.isnan(pearson_corr) else 0.0,
        "spearman": float(spearman_corr) if not np.isnan(spearman_corr) else 0.0,
        "n_vertices": len(values1)
    }
