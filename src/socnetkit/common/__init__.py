"""
Common utilities for the socnetkit library.

- Exception hierarchy
- Vertex name to index mapping
- Input validation for edge lists, matrices and position maps
- Logging configuration
"""

from .exceptions import (
    NetworkAnalysisError,
    ValidationError,
    StructuralError,
    ConfigurationError,
    ComputationError,
    validate_parameter,
    require_positive
)

from .id_mapper import IDMapper
from .validators import (
    validate_edgelist_dataframe,
    validate_square_matrix,
    validate_positions
)

from .logging_config import (
    setup_logging,
    get_logger,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter,
    PerformanceFilter
)
