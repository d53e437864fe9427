"""
Deterministic and random graph generators.

Every generator returns a fresh :class:`GraphStore` whose vertices are named
``0 .. N-1``. Undirected graphs are built from ``EdgeType.UNDIRECTED``
edges, so each tie is stored as two arcs of equal weight.
"""

from itertools import product
from typing import List, Optional, Tuple

import numpy as np

from ..common.exceptions import ConfigurationError, require_positive
from ..common.logging_config import get_logger
from .store import EdgeType, GraphStore

logger = get_logger(__name__)


def _empty_store(n: int) -> GraphStore:
    store = GraphStore()
    for name in range(n):
        store.add_vertex(name)
    return store


def _edge_type(directed: bool) -> EdgeType:
    return EdgeType.DIRECTED if directed else EdgeType.UNDIRECTED


def path_graph(n: int, directed: bool = False) -> GraphStore:
    """Vertices ``0 .. n-1`` joined in a line."""
    require_positive(n, "n", allow_zero=True)
    store = _empty_store(n)
    for i in range(n - 1):
        store.add_edge(i, i + 1, edge_type=_edge_type(directed))
    return store


def cycle_graph(n: int, directed: bool = False) -> GraphStore:
    """A path closed into a ring; needs at least 3 vertices."""
    if n < 3:
        raise ConfigurationError(
            f"A cycle needs at least 3 vertices, got {n}",
            parameter="n",
            value=n
        )
    store = path_graph(n, directed)
    store.add_edge(n - 1, 0, edge_type=_edge_type(directed))
    return store


def star_graph(leaves: int) -> GraphStore:
    """
    Undirected star: vertex 0 at the centre joined to ``leaves`` leaves.

    Examples
    --------
    >>> star_graph(4).vertex_count()
    5
    """
    require_positive(leaves, "leaves", allow_zero=True)
    store = _empty_store(leaves + 1)
    for leaf in range(1, leaves + 1):
        store.add_edge(0, leaf, edge_type=EdgeType.UNDIRECTED)
    return store


def complete_graph(n: int, directed: bool = False) -> GraphStore:
    """Every pair of distinct vertices tied."""
    require_positive(n, "n", allow_zero=True)
    store = _empty_store(n)
    for i in range(n):
        for j in range(i + 1, n):
            if directed:
                store.add_edge(i, j)
                store.add_edge(j, i)
            else:
                store.add_edge(i, j, edge_type=EdgeType.UNDIRECTED)
    return store


def ring_lattice(n: int, degree: int) -> GraphStore:
    """
    Undirected ring where each vertex is tied to its ``degree / 2`` nearest
    neighbours on either side.

    Raises
    ------
    ConfigurationError
        If ``degree`` is odd or not smaller than ``n``
    """
    if degree % 2 != 0 or not 0 <= degree < n:
        raise ConfigurationError(
            f"Ring lattice degree must be even and below {n}, got {degree}",
            parameter="degree",
            value=degree
        )
    store = _empty_store(n)
    for i in range(n):
        for step in range(1, degree // 2 + 1):
            store.add_edge(i, (i + step) % n, edge_type=EdgeType.UNDIRECTED)
    return store


def lattice_graph(
    length: int,
    dimension: int = 2,
    neighborhood: int = 1,
    directed: bool = False,
    circular: bool = False
) -> GraphStore:
    """
    Regular grid of ``length ** dimension`` vertices.

    Vertex coordinates are enumerated in row-major order. Each vertex is
    tied to the vertices up to ``neighborhood`` steps away along a single
    axis. With ``circular`` every axis wraps around (a torus); a directed
    lattice points every arc towards increasing coordinates.

    Examples
    --------
    >>> lattice_graph(3).edge_count()
    24
    """
    require_positive(length, "length")
    require_positive(dimension, "dimension")
    require_positive(neighborhood, "neighborhood")

    coordinates: List[Tuple[int, ...]] = list(product(range(length), repeat=dimension))
    position = {coord: i for i, coord in enumerate(coordinates)}
    store = _empty_store(len(coordinates))

    for coord in coordinates:
        for axis in range(dimension):
            for step in range(1, neighborhood + 1):
                shifted = coord[axis] + step
                if shifted >= length:
                    if not circular:
                        continue
                    shifted %= length
                other = coord[:axis] + (shifted,) + coord[axis + 1:]
                source, target = position[coord], position[other]
                if source != target:
                    store.add_edge(source, target, edge_type=_edge_type(directed))

    logger.debug("Generated %d-dimensional lattice with %d vertices",
                 dimension, len(coordinates))
    return store


def erdos_renyi(
    n: int,
    p: float,
    directed: bool = False,
    seed: Optional[int] = None
) -> GraphStore:
    """
    G(n, p) random graph: each possible tie exists independently with
    probability ``p``.

    Parameters
    ----------
    n : int
        Number of vertices
    p : float
        Tie probability in [0, 1]
    directed : bool, default False
        Draw each ordered pair separately
    seed : int, optional
        Seed for ``numpy.random.default_rng``
    """
    require_positive(n, "n", allow_zero=True)
    if not 0.0 <= p <= 1.0:
        raise ConfigurationError(
            f"Probability must lie in [0, 1], got {p}",
            parameter="p",
            value=p
        )

    rng = np.random.default_rng(seed)
    store = _empty_store(n)
    for i in range(n):
        for j in range(n) if directed else range(i + 1, n):
            if i != j and rng.random() < p:
                store.add_edge(i, j, edge_type=_edge_type(directed))

    logger.debug("Generated G(%d, %.3f) with %d arcs", n, p, store.edge_count())
    return store
