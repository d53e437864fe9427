"""
Matrices derived from graph views and shortest-path results.

All builders return a :class:`Matrix` indexed like the view they were built
from (row/column i is ``view.names[i]``).
"""

from typing import TYPE_CHECKING

import numpy as np

from ..common.exceptions import require_positive
from .matrix import Matrix

if TYPE_CHECKING:
    from ..network.distances import GeodesicResult
    from ..network.store import GraphView


def adjacency_matrix(
    view: "GraphView",
    weighted: bool = True,
    symmetrize: bool = False
) -> Matrix:
    """
    Adjacency matrix of a view.

    Parameters
    ----------
    view : GraphView
        Graph snapshot (isolates and disabled items are already decided by
        how the view was built)
    weighted : bool, default True
        Store arc weights; otherwise 1 for every arc
    symmetrize : bool, default False
        Make every tie mutual, keeping the larger weight of each pair

    Examples
    --------
    >>> from socnetkit.network.generators import star_graph
    >>> adjacency_matrix(star_graph(4).view()).is_symmetric()
    True
    """
    n = view.size
    data = np.zeros((n, n))
    for i, arcs in enumerate(view.out_arcs):
        for j, weight in arcs.items():
            data[i, j] = weight if weighted else 1.0
    matrix = Matrix.from_array(data)
    return matrix.symmetrize() if symmetrize else matrix


def degree_matrix(view: "GraphView", weighted: bool = True) -> Matrix:
    return adjacency_matrix(view, weighted).degree_matrix()


def laplacian_matrix(view: "GraphView", weighted: bool = True) -> Matrix:
    return adjacency_matrix(view, weighted).laplacian()


def cocitation_matrix(view: "GraphView", weighted: bool = False) -> Matrix:
    return adjacency_matrix(view, weighted).cocitation()


def distance_matrix(geodesics: "GeodesicResult") -> Matrix:
    """Geodesic distances; unreachable pairs keep ``inf``."""
    return Matrix.from_array(geodesics.distances.copy())


def geodesics_count_matrix(geodesics: "GeodesicResult") -> Matrix:
    """Number of shortest paths between every ordered pair."""
    return Matrix.from_array(geodesics.sigma.copy())


def reachability_matrix(geodesics: "GeodesicResult") -> Matrix:
    return Matrix.from_array(geodesics.reachability_matrix())


def walks_matrix(view: "GraphView", length: int) -> Matrix:
    """Number of walks of exactly ``length`` arcs between every ordered pair."""
    require_positive(length, "length")
    return adjacency_matrix(view, weighted=False).power(length)
