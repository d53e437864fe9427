"""
Query facade over a :class:`GraphStore`.

:class:`NetworkAnalyzer` answers distance, centrality, matrix, clustering
and layout queries by building the right :class:`GraphView` and calling the
algorithm modules. Results are memoised per parameter key; the cache is
dropped as a whole whenever the store reports a structural change.
"""

from typing import Any, Callable, Dict, Hashable, Optional, Tuple

import numpy as np

from ..common.exceptions import validate_parameter
from ..common.logging_config import get_logger
from ..layout import (
    LAYOUT_ALGORITHMS,
    PLACEMENTS,
    Canvas,
    LayoutResult,
    circular_placement,
    fruchterman_reingold,
    kamada_kawai,
    random_placement,
    spring_embedder
)
from ..matrix import builders
from ..matrix.matrix import InversionResult, Matrix
from .centrality import DISTANCE_INDICES, CentralityResult, compute_centrality
from .clustering import (
    ClusteringCoefficientResult,
    HierarchicalClusteringResult,
    hierarchical_clustering,
    local_clustering_coefficient,
    triad_census
)
from .distances import INFINITY, GeodesicResult, compute_geodesics
from .store import GraphStore, GraphView, RelationRef

logger = get_logger(__name__)

MATRIX_KINDS = [
    "adjacency", "degree", "laplacian", "cocitation", "distances", "geodesics",
    "reachability", "walks", "dissimilarities", "similarities", "pearson"
]
CLUSTER_MATRICES = ["adjacency", "distances"]


class NetworkAnalyzer:
    """
    Memoising query interface for one store.

    Parameters
    ----------
    store : GraphStore
        Store to analyse; the analyzer subscribes to its change signal
    canvas : Canvas, optional
        Drawing area used by :meth:`layout`

    Examples
    --------
    >>> from socnetkit.network.generators import path_graph
    >>> analyzer = NetworkAnalyzer(path_graph(4))
    >>> analyzer.distance(0, 3)
    3.0
    >>> analyzer.centrality("betweenness").score(1)
    (2.0, 0.6666666666666666)
    """

    def __init__(self, store: GraphStore, canvas: Optional[Canvas] = None) -> None:
        self.store = store
        self.canvas = canvas if canvas is not None else Canvas()
        self._cache: Dict[Hashable, Any] = {}
        self.cache_hits = 0
        store.add_listener(self._invalidate)

    def _invalidate(self, generation: int) -> None:
        if self._cache:
            logger.debug("Dropping %d cached results at generation %d",
                         len(self._cache), generation)
        self._cache.clear()

    def detach(self) -> None:
        """Stop listening to the store and drop every cached result."""
        self.store.remove_listener(self._invalidate)
        self._cache.clear()

    def _memo(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        if key in self._cache:
            self.cache_hits += 1
            return self._cache[key]
        value = compute()
        self._cache[key] = value
        return value

    # ------------------------------------------------------------------
    # views and distances

    def view(
        self,
        relation: Optional[RelationRef] = None,
        drop_isolates: bool = False
    ) -> GraphView:
        rel = self.store.resolve_relation(relation)
        return self._memo(
            ("view", rel, drop_isolates),
            lambda: self.store.view(rel, drop_isolates=drop_isolates)
        )

    def geodesics(
        self,
        relation: Optional[RelationRef] = None,
        weighted: bool = False,
        invert_weights: bool = False,
        drop_isolates: bool = False
    ) -> GeodesicResult:
        """All-pairs shortest paths of a relation, computed once per generation."""
        rel = self.store.resolve_relation(relation)
        return self._memo(
            ("geodesics", rel, weighted, invert_weights, drop_isolates),
            lambda: compute_geodesics(self.view(rel, drop_isolates), weighted=weighted,
                                      invert_weights=invert_weights)
        )

    def _pair_indices(self, source: int, target: int, view: GraphView) -> Tuple[int, int]:
        return view.index_of(source), view.index_of(target)

    def distance(
        self,
        source: int,
        target: int,
        relation: Optional[RelationRef] = None,
        weighted: bool = False,
        invert_weights: bool = False
    ) -> float:
        """Geodesic distance, ``inf`` when unreachable or either vertex is absent."""
        result = self.geodesics(relation, weighted, invert_weights)
        i, j = self._pair_indices(source, target, self.view(relation))
        if i < 0 or j < 0:
            return INFINITY
        return result.distance(i, j)

    def shortest_path_count(
        self,
        source: int,
        target: int,
        relation: Optional[RelationRef] = None,
        weighted: bool = False,
        invert_weights: bool = False
    ) -> int:
        """Number of geodesics between two vertices, 0 when absent or unreachable."""
        result = self.geodesics(relation, weighted, invert_weights)
        i, j = self._pair_indices(source, target, self.view(relation))
        if i < 0 or j < 0:
            return 0
        return result.path_count(i, j)

    def is_connected(self, relation: Optional[RelationRef] = None) -> bool:
        return self.geodesics(relation).connected

    def diameter(
        self,
        relation: Optional[RelationRef] = None,
        weighted: bool = False,
        invert_weights: bool = False
    ) -> float:
        return self.geodesics(relation, weighted, invert_weights).diameter

    def average_distance(
        self,
        relation: Optional[RelationRef] = None,
        weighted: bool = False,
        invert_weights: bool = False
    ) -> float:
        return self.geodesics(relation, weighted, invert_weights).average_distance

    def eccentricity(
        self,
        name: int,
        relation: Optional[RelationRef] = None,
        weighted: bool = False,
        invert_weights: bool = False
    ) -> float:
        """Largest finite distance from a vertex, 0.0 when the vertex is absent."""
        result = self.geodesics(relation, weighted, invert_weights)
        i = self.view(relation).index_of(name)
        if i < 0:
            return 0.0
        return float(result.paths[i].eccentricity)

    # ------------------------------------------------------------------
    # centrality and cohesion

    def centrality(
        self,
        index: str,
        drop_isolates: bool = False,
        weighted: bool = False,
        invert_weights: bool = False,
        relation: Optional[RelationRef] = None,
        **options: Any
    ) -> CentralityResult:
        """
        Centrality or prestige index over a relation.

        Extra keyword arguments (``symmetrize``, ``damping``,
        ``inversion_method``) go to
        :func:`socnetkit.network.centrality.compute_centrality`.
        """
        rel = self.store.resolve_relation(relation)
        key = ("centrality", index, rel, drop_isolates, weighted, invert_weights,
               tuple(sorted(options.items())))

        def compute() -> CentralityResult:
            view = self.view(rel, drop_isolates)
            geodesics = None
            if view.size > 0 and index in DISTANCE_INDICES:
                geodesics = self.geodesics(rel, weighted, invert_weights, drop_isolates)
            return compute_centrality(view, index, geodesics=geodesics, weighted=weighted,
                                      invert_weights=invert_weights, **options)

        return self._memo(key, compute).copy()

    def clustering_coefficient(
        self,
        relation: Optional[RelationRef] = None,
        drop_isolates: bool = False
    ) -> ClusteringCoefficientResult:
        rel = self.store.resolve_relation(relation)
        return self._memo(
            ("clustering_coefficient", rel, drop_isolates),
            lambda: local_clustering_coefficient(self.view(rel, drop_isolates))
        )

    def triad_census(self, relation: Optional[RelationRef] = None) -> Dict[str, int]:
        rel = self.store.resolve_relation(relation)
        census = self._memo(("triad_census", rel), lambda: triad_census(self.view(rel)))
        return dict(census)

    # ------------------------------------------------------------------
    # matrices

    def matrix(
        self,
        kind: str,
        relation: Optional[RelationRef] = None,
        weighted: bool = True,
        drop_isolates: bool = False,
        **params: Any
    ) -> Matrix:
        """
        Matrix derived from a relation.

        Parameters
        ----------
        kind : str
            One of ``MATRIX_KINDS``
        weighted : bool, default True
            Use arc weights for adjacency-based kinds and as path lengths
            for distance-based kinds
        **params
            ``symmetrize`` (adjacency), ``length`` (walks), ``invert_weights``
            (distances, geodesics, reachability), ``source`` ("adjacency" or
            "distances"), ``variables`` and ``include_diagonal`` for the
            profile comparisons, ``metric`` (dissimilarities) and
            ``measure`` (similarities)

        Returns
        -------
        Matrix
            A copy the caller may modify
        """
        validate_parameter(kind, MATRIX_KINDS, "kind", "NetworkAnalyzer.matrix")
        rel = self.store.resolve_relation(relation)
        key = ("matrix", kind, rel, weighted, drop_isolates, tuple(sorted(params.items())))
        return self._memo(key, lambda: self._build_matrix(kind, rel, weighted,
                                                          drop_isolates, dict(params))).copy()

    def _build_matrix(
        self,
        kind: str,
        relation: int,
        weighted: bool,
        drop_isolates: bool,
        params: Dict[str, Any]
    ) -> Matrix:
        view = self.view(relation, drop_isolates)
        invert_weights = params.pop("invert_weights", False)

        def geodesics() -> GeodesicResult:
            return self.geodesics(relation, weighted and view.weighted, invert_weights,
                                  drop_isolates)

        if kind == "adjacency":
            return builders.adjacency_matrix(view, weighted, params.get("symmetrize", False))
        if kind == "degree":
            return builders.degree_matrix(view, weighted)
        if kind == "laplacian":
            return builders.laplacian_matrix(view, weighted)
        if kind == "cocitation":
            return builders.cocitation_matrix(view, weighted)
        if kind == "distances":
            return builders.distance_matrix(geodesics())
        if kind == "geodesics":
            return builders.geodesics_count_matrix(geodesics())
        if kind == "reachability":
            return builders.reachability_matrix(geodesics())
        if kind == "walks":
            return builders.walks_matrix(view, params.get("length", 1))

        source = params.get("source", "adjacency")
        validate_parameter(source, CLUSTER_MATRICES, "source", "NetworkAnalyzer.matrix")
        base = (
            builders.adjacency_matrix(view, weighted)
            if source == "adjacency"
            else _finite_distances(builders.distance_matrix(geodesics()))
        )
        variables = params.get("variables", "rows")
        include_diagonal = params.get("include_diagonal", False)
        if kind == "dissimilarities":
            return base.dissimilarities(params.get("metric", "euclidean"), variables,
                                        include_diagonal)
        if kind == "similarities":
            return base.similarities(params.get("measure", "simple"), variables,
                                     include_diagonal)
        return base.pearson(variables, include_diagonal)

    def inverse(
        self,
        method: str = "lu",
        kind: str = "adjacency",
        relation: Optional[RelationRef] = None,
        weighted: bool = True,
        drop_isolates: bool = False
    ) -> InversionResult:
        """Invert one of the derived matrices; failure is reported, not raised."""
        return self.matrix(kind, relation, weighted, drop_isolates).inverse(method)

    # ------------------------------------------------------------------
    # clustering

    def cluster(
        self,
        linkage: str = "average",
        metric: str = "euclidean",
        matrix: str = "adjacency",
        variables: str = "both",
        drop_isolates: bool = False,
        include_diagonal: bool = False,
        relation: Optional[RelationRef] = None
    ) -> HierarchicalClusteringResult:
        """
        Hierarchical clustering of the vertices by the dissimilarity of their
        adjacency or geodesic-distance profiles.

        In the distance matrix unreachable pairs count as N apart.
        """
        validate_parameter(matrix, CLUSTER_MATRICES, "matrix", "NetworkAnalyzer.cluster")
        rel = self.store.resolve_relation(relation)
        key = ("cluster", linkage, metric, matrix, variables, drop_isolates,
               include_diagonal, rel)

        def compute() -> HierarchicalClusteringResult:
            dissimilarities = self.matrix(
                "dissimilarities", rel, weighted=True, drop_isolates=drop_isolates,
                source=matrix, metric=metric, variables=variables,
                include_diagonal=include_diagonal
            )
            names = self.view(rel, drop_isolates).names
            return hierarchical_clustering(dissimilarities, linkage, names)

        return self._memo(key, compute)

    # ------------------------------------------------------------------
    # layout

    def layout(
        self,
        algorithm: str = "fruchterman_reingold",
        iterations: int = 100,
        initial_placement: str = "circular",
        apply: bool = True,
        relation: Optional[RelationRef] = None,
        seed: Optional[int] = None,
        **params: Any
    ) -> LayoutResult:
        """
        Run a force-directed layout over the enabled vertices.

        Parameters
        ----------
        algorithm : {"spring", "fruchterman_reingold", "kamada_kawai"}
            Layout model
        initial_placement : {"random", "circular", "current"}
            Starting positions; "current" uses the stored ones
        apply : bool, default True
            Write the final positions back to the store. Positions are not
            topology, so cached results stay valid.
        **params
            Forwarded to the layout function (``progress``,
            ``record_history`` and model constants)
        """
        validate_parameter(algorithm, LAYOUT_ALGORITHMS, "algorithm", "NetworkAnalyzer.layout")
        validate_parameter(initial_placement, PLACEMENTS, "initial_placement",
                           "NetworkAnalyzer.layout")
        view = self.view(relation)

        if initial_placement == "random":
            positions = random_placement(view.names, self.canvas, seed)
        elif initial_placement == "circular":
            positions = circular_placement(view.names, self.canvas)
        else:
            stored = self.store.positions()
            positions = {name: stored[name] for name in view.names}

        layout_function = {
            "spring": spring_embedder,
            "fruchterman_reingold": fruchterman_reingold,
            "kamada_kawai": kamada_kawai,
        }[algorithm]
        result = layout_function(view, positions, self.canvas, iterations=iterations,
                                 seed=seed, **params)

        if apply:
            for name, (x, y) in result.positions.items():
                self.store.set_position(name, x, y)

        logger.info("%s layout of %d vertices: %d iterations, converged=%s",
                    algorithm, view.size, result.iterations, result.converged)
        return result


def _finite_distances(matrix: Matrix) -> Matrix:
    """Replace unreachable (infinite) distances by the number of vertices."""
    data = matrix.data.copy()
    data[~np.isfinite(data)] = float(matrix.rows)
    return Matrix.from_array(data)
