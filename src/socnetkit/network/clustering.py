"""
Cohesion and clustering: local clustering coefficients, the M-A-N triad
census and agglomerative hierarchical clustering of a dissimilarity matrix.
"""

from dataclasses import dataclass, field
from math import comb
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import polars as pl

from ..common.exceptions import ValidationError, validate_parameter
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..common.validators import validate_square_matrix
from ..matrix.matrix import Matrix
from .store import GraphView

logger = get_logger(__name__)

LINKAGE_METHODS = ["single", "complete", "average"]

TRIAD_TYPES = [
    "003", "012", "102", "021D", "021U", "021C", "111D", "111U",
    "030T", "030C", "201", "120D", "120U", "120C", "210", "300"
]


# ----------------------------------------------------------------------
# clustering coefficient


@dataclass
class ClusteringCoefficientResult:
    """Local clustering coefficient of every vertex of a view."""

    names: List[int]
    coefficients: np.ndarray

    @property
    def mean(self) -> float:
        """Network clustering coefficient (average of the local ones)."""
        return float(self.coefficients.mean()) if len(self.coefficients) else 0.0

    @property
    def variance(self) -> float:
        return float(self.coefficients.var()) if len(self.coefficients) else 0.0

    def score(self, name: int) -> float:
        try:
            return float(self.coefficients[self.names.index(name)])
        except ValueError:
            return 0.0

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame({
            "node_id": self.names,
            "clustering_coefficient": self.coefficients.tolist(),
        }, schema={"node_id": pl.Int64, "clustering_coefficient": pl.Float64})


def local_clustering_coefficient(view: GraphView) -> ClusteringCoefficientResult:
    """
    Share of possible ties among each vertex's neighbours that are present.

    The neighbourhood of a vertex is the union of its in and out
    neighbours. On a symmetric view the denominator is ``k(k-1)/2`` edges,
    otherwise ``k(k-1)`` arcs. Vertices with fewer than two neighbours
    score 0.

    Examples
    --------
    >>> from socnetkit.network.generators import complete_graph
    >>> local_clustering_coefficient(complete_graph(4).view()).mean
    1.0
    """
    log_function_entry("local_clustering_coefficient", vertices=view.size)

    coefficients = np.zeros(view.size)
    for i in range(view.size):
        neighborhood = view.neighbors(i)
        k = len(neighborhood)
        if k <= 1:
            continue
        arcs = sum(
            1 for j in neighborhood
            for target in view.out_arcs[j]
            if target != j and target in neighborhood
        )
        # arcs/(k(k-1)) equals edges/(k(k-1)/2) when every tie is mutual
        coefficients[i] = arcs / (k * (k - 1))

    return ClusteringCoefficientResult(list(view.names), coefficients)


# ----------------------------------------------------------------------
# triad census


def _classify_triad(view: GraphView, a: int, b: int, c: int) -> str:
    """M-A-N type of the triad formed by three distinct indices."""
    def arc(s: int, t: int) -> bool:
        return t in view.out_arcs[s]

    pairs = [(a, b), (a, c), (b, c)]
    mutual: List[Tuple[int, int]] = []
    asym: List[Tuple[int, int]] = []
    for s, t in pairs:
        forward, backward = arc(s, t), arc(t, s)
        if forward and backward:
            mutual.append((s, t))
        elif forward:
            asym.append((s, t))
        elif backward:
            asym.append((t, s))

    m, n_asym = len(mutual), len(asym)

    if m == 0 and n_asym == 0:
        return "003"
    if m == 0 and n_asym == 1:
        return "012"
    if m == 1 and n_asym == 0:
        return "102"
    if m == 0 and n_asym == 2:
        (s1, t1), (s2, t2) = asym
        if s1 == s2:
            return "021D"
        if t1 == t2:
            return "021U"
        return "021C"
    if m == 1 and n_asym == 1:
        source, target = asym[0]
        # the arc either enters or leaves the mutual dyad
        return "111D" if target in mutual[0] else "111U"
    if m == 0 and n_asym == 3:
        senders = {s for s, _ in asym}
        return "030C" if len(senders) == 3 else "030T"
    if m == 2 and n_asym == 0:
        return "201"
    if m == 1 and n_asym == 2:
        (s1, t1), (s2, t2) = asym
        if s1 == s2:
            return "120D"
        if t1 == t2:
            return "120U"
        return "120C"
    if m == 2 and n_asym == 1:
        return "210"
    return "300"


def triad_census(view: GraphView) -> Dict[str, int]:
    """
    Count every triad of the view by its M-A-N type.

    Only triads containing at least one tie are visited; the empty 003
    triads are obtained by subtraction from ``C(N, 3)``.

    Returns
    -------
    Dict[str, int]
        Counts keyed by type in the conventional order
        (003, 012, 102, 021D, ..., 300), summing to ``C(N, 3)``

    Examples
    --------
    >>> from socnetkit.network.generators import complete_graph
    >>> triad_census(complete_graph(3).view())["300"]
    1
    """
    log_function_entry("triad_census", vertices=view.size)

    n = view.size
    census = {name: 0 for name in TRIAD_TYPES}
    neighbors = [view.neighbors(i) for i in range(n)]

    with LoggingTimer("triad_census", {"vertices": n}):
        for v in range(n):
            for u in neighbors[v]:
                if u <= v:
                    continue
                shared = (neighbors[v] | neighbors[u]) - {u, v}
                dyad_type = "102" if (u in view.out_arcs[v] and v in view.out_arcs[u]) else "012"
                census[dyad_type] += n - len(shared) - 2
                for w in shared:
                    if u < w or (v < w < u and w not in neighbors[v]):
                        census[_classify_triad(view, v, u, w)] += 1

    census["003"] = comb(n, 3) - sum(census.values())
    return census


# ----------------------------------------------------------------------
# hierarchical clustering


@dataclass
class Merge:
    """
    One agglomeration step.

    ``left`` and ``right`` use the scipy numbering: ids below N are the
    original observations, id ``N + k`` is the cluster formed at step k.
    """

    step: int
    left: int
    right: int
    level: float
    size: int
    members: List[int] = field(default_factory=list)


@dataclass
class HierarchicalClusteringResult:
    """Merge history of an agglomerative clustering run."""

    names: List[int]
    linkage: str
    merges: List[Merge]

    @property
    def levels(self) -> List[float]:
        return [m.level for m in self.merges]

    def linkage_matrix(self) -> np.ndarray:
        """``(N-1) x 4`` array in the layout of ``scipy.cluster.hierarchy.linkage``."""
        if not self.merges:
            return np.zeros((0, 4))
        return np.array(
            [[m.left, m.right, m.level, m.size] for m in self.merges],
            dtype=float
        )

    def clusters_at(self, level: float) -> List[List[int]]:
        """
        Cut the hierarchy at a level.

        Returns
        -------
        List[List[int]]
            Clusters formed by every merge at or below ``level``, each a
            sorted list of vertex names, ordered by their first member
        """
        n = len(self.names)
        groups: Dict[int, List[int]] = {i: [self.names[i]] for i in range(n)}
        for merge in self.merges:
            if merge.level > level:
                break
            groups[n + merge.step] = groups.pop(merge.left) + groups.pop(merge.right)
        return sorted((sorted(g) for g in groups.values()), key=lambda g: g[0])

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame({
            "step": [m.step for m in self.merges],
            "left": [m.left for m in self.merges],
            "right": [m.right for m in self.merges],
            "level": [m.level for m in self.merges],
            "size": [m.size for m in self.merges],
        }, schema={"step": pl.Int64, "left": pl.Int64, "right": pl.Int64,
                   "level": pl.Float64, "size": pl.Int64})


def hierarchical_clustering(
    dissimilarities: Union[Matrix, np.ndarray],
    linkage: str = "average",
    names: Optional[Sequence[int]] = None
) -> HierarchicalClusteringResult:
    """
    Agglomerative clustering with single, complete or average linkage.

    At every step the two closest clusters are merged. Inter-cluster
    distances are keyed by the ordered pair of cluster ids; on ties the
    smallest pair wins. Average linkage is the size-weighted mean
    (UPGMA).

    Parameters
    ----------
    dissimilarities : Matrix or np.ndarray
        Symmetric N x N dissimilarity matrix; the diagonal is ignored
    linkage : {"single", "complete", "average"}, default "average"
        How the distance to a merged cluster is derived
    names : sequence of int, optional
        Vertex name of each row, ``0..N-1`` when omitted

    Returns
    -------
    HierarchicalClusteringResult
        Exactly N-1 merges (none for N <= 1)

    Raises
    ------
    ConfigurationError
        If the linkage method is unknown
    ValidationError
        If the matrix is not square or names do not match its size
    """
    validate_parameter(linkage, LINKAGE_METHODS, "linkage", "hierarchical_clustering")
    data = dissimilarities.data if isinstance(dissimilarities, Matrix) else np.asarray(
        dissimilarities, dtype=float)
    n, _ = validate_square_matrix(data, "dissimilarities")

    names = list(range(n)) if names is None else list(names)
    if len(names) != n:
        raise ValidationError(
            f"Expected {n} names, got {len(names)}",
            field="names",
            value=len(names)
        )

    log_function_entry("hierarchical_clustering", observations=n, linkage=linkage)

    members: Dict[int, List[int]] = {i: [i] for i in range(n)}
    distance: Dict[Tuple[int, int], float] = {
        (i, j): float(data[i, j]) for i in range(n) for j in range(i + 1, n)
    }
    merges: List[Merge] = []

    with LoggingTimer("hierarchical_clustering", {"observations": n, "linkage": linkage}):
        for step in range(n - 1):
            (left, right), level = min(distance.items(), key=lambda item: (item[1], item[0]))
            merged = n + step
            left_members = members.pop(left)
            right_members = members.pop(right)
            size_left, size_right = len(left_members), len(right_members)

            for other in members:
                d_left = distance.pop(_pair(other, left))
                d_right = distance.pop(_pair(other, right))
                if linkage == "single":
                    d = min(d_left, d_right)
                elif linkage == "complete":
                    d = max(d_left, d_right)
                else:
                    d = (size_left * d_left + size_right * d_right) / (size_left + size_right)
                distance[(other, merged)] = d
            del distance[(left, right)]

            members[merged] = left_members + right_members
            merges.append(Merge(
                step=step,
                left=left,
                right=right,
                level=level,
                size=len(members[merged]),
                members=sorted(names[i] for i in members[merged])
            ))

    logger.info("Hierarchical clustering (%s) of %d observations: %d merges",
                linkage, n, len(merges))
    return HierarchicalClusteringResult(names=names, linkage=linkage, merges=merges)


def _pair(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)
