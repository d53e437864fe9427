"""
socnetkit - Social network analysis library.

A multiplex graph store with the classic social network analysis toolbox:
shortest paths, centrality and prestige indices, matrix operations,
cohesion measures, hierarchical clustering and force-directed layouts.

Modules:
    common: Exceptions, validation, ID mapping and logging configuration
    network: Graph store, algorithms and the NetworkAnalyzer facade
    matrix: Dense matrix library and graph-derived matrices
    layout: Canvas, initial placement and force-directed layouts
"""

__version__ = "0.1.0"

from .common import setup_logging, NetworkAnalysisError
from .network import GraphStore, EdgeType, NetworkAnalyzer
from .matrix import Matrix
from .layout import Canvas
