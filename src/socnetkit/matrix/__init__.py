"""
Dense matrix library: storage, inversion, power iteration and pairwise
profile comparisons, plus builders deriving matrices from graph views.
"""

from .matrix import (
    Matrix,
    InversionResult,
    PowerIterationResult,
    INVERSION_METHODS,
    DISSIMILARITY_METRICS,
    SIMILARITY_MEASURES,
    VARIABLE_LOCATIONS
)
from .builders import (
    adjacency_matrix,
    degree_matrix,
    laplacian_matrix,
    cocitation_matrix,
    distance_matrix,
    geodesics_count_matrix,
    reachability_matrix,
    walks_matrix
)
