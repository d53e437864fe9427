"""
Graph store and network analysis.

- Multiplex store with relations, vertices, arcs and immutable views
- Shortest paths, centrality and prestige indices
- Clustering coefficient, triad census and hierarchical clustering
- Edge-list construction, generators and the memoising analyzer
"""

from .store import EdgeType, Arc, Vertex, GraphView, GraphStore
from .distances import (
    SourcePaths,
    GeodesicResult,
    breadth_first,
    dijkstra,
    single_source,
    compute_geodesics
)
from .centrality import (
    AVAILABLE_INDICES,
    CentralityResult,
    CentralityStatistics,
    compute_centrality,
    get_centrality_summary,
    identify_central_vertices,
    compare_centrality_indices
)
from .clustering import (
    TRIAD_TYPES,
    LINKAGE_METHODS,
    ClusteringCoefficientResult,
    Merge,
    HierarchicalClusteringResult,
    local_clustering_coefficient,
    triad_census,
    hierarchical_clustering
)
from .construction import (
    build_store_from_edgelist,
    store_to_edgelist,
    to_networkit,
    get_store_info
)
from .generators import (
    path_graph,
    cycle_graph,
    star_graph,
    complete_graph,
    ring_lattice,
    lattice_graph,
    erdos_renyi
)
from .analyzer import NetworkAnalyzer
