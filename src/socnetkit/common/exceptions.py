"""
Exception hierarchy for the socnetkit library.

Structural queries never raise: absent vertices and edges answer with
sentinels (-1 index, 0.0 weight, infinite distance). The exceptions below
cover the remaining failure modes: invalid input, invalid parameters,
mutations that would corrupt the topology, and unrecoverable numerical
failures.
"""

from typing import Dict, Any, Optional, List, Union
import traceback


class NetworkAnalysisError(Exception):
    """
    Base exception for all socnetkit errors.

    Parameters
    ----------
    message : str
        Human-readable error message describing what went wrong
    details : Dict[str, Any], optional
        Additional structured information about the error
    cause : Exception, optional
        The underlying exception that caused this error
    context : Dict[str, Any], optional
        Additional context about the operation that failed

    Examples
    --------
    >>> raise NetworkAnalysisError("Centrality computation failed")
    >>> raise NetworkAnalysisError(
    ...     "Relation has no arcs",
    ...     details={"relation": 2, "vertices": 10}
    ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

        full_message = message

        if self.details:
            detail_parts = []
            for key, value in self.details.items():
                if isinstance(value, (list, dict)) and len(str(value)) > 100:
                    detail_parts.append(f"{key}=<{type(value).__name__} with {len(value)} items>")
                else:
                    detail_parts.append(f"{key}={value}")

            if detail_parts:
                full_message += f" (Details: {', '.join(detail_parts)})"

        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            if context_parts:
                full_message += f" (Context: {', '.join(context_parts)})"

        super().__init__(full_message)

        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **kwargs: Any) -> 'NetworkAnalysisError':
        """
        Add additional context to the exception and return it.

        Examples
        --------
        >>> error = NetworkAnalysisError("Failed")
        >>> error.add_context(operation="geodesics", relation=0)
        """
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        """Return every piece of information attached to the error."""
        return {
            "exception_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if hasattr(self, '__traceback__') else None
        }


class ValidationError(NetworkAnalysisError):
    """
    Exception raised for malformed input data.

    Raised when an edge list, a matrix or a position map handed to the
    library does not have the expected shape or content.

    Parameters
    ----------
    message : str
        Descriptive error message explaining the validation failure
    field : str, optional
        Name of the field or column that failed validation
    value : Any, optional
        The invalid value that caused the error
    expected : str, optional
        Description of what was expected
    details : Dict[str, Any], optional
        Additional details about the validation failure

    Examples
    --------
    >>> raise ValidationError("Column contains null values", field="source")
    >>> raise ValidationError(
    ...     "Matrix must be square",
    ...     field="matrix",
    ...     value=(3, 4),
    ...     expected="n x n"
    ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        enhanced_details = details or {}
        if field is not None:
            enhanced_details["field"] = field
        if value is not None:
            enhanced_details["invalid_value"] = value
        if expected is not None:
            enhanced_details["expected"] = expected

        if field:
            enhanced_message = f"Validation error in field '{field}': {message}"
        else:
            enhanced_message = f"Validation error: {message}"

        super().__init__(enhanced_message, details=enhanced_details, **kwargs)


class StructuralError(NetworkAnalysisError):
    """
    Exception raised when a mutation would leave the store inconsistent.

    Adding an arc between vertices that do not exist, inserting a vertex
    under a name that is already taken, or selecting a relation that was
    never created all raise this error. Read-only queries never do.

    Parameters
    ----------
    message : str
        Description of the structural problem
    vertex : int, optional
        Vertex name involved in the failed mutation
    relation : int, optional
        Relation index involved in the failed mutation
    operation : str, optional
        Mutation that failed (e.g. "add_edge", "add_vertex")

    Examples
    --------
    >>> raise StructuralError(
    ...     "Target vertex does not exist",
    ...     vertex=42,
    ...     operation="add_edge"
    ... )
    """

    def __init__(
        self,
        message: str,
        vertex: Optional[int] = None,
        relation: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.vertex = vertex
        self.relation = relation
        self.operation = operation

        context = {}
        if vertex is not None:
            context["vertex"] = vertex
        if relation is not None:
            context["relation"] = relation
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)


class ConfigurationError(NetworkAnalysisError):
    """
    Exception raised for invalid configuration or parameter values.

    Parameters
    ----------
    message : str
        Description of the configuration error
    parameter : str, optional
        Name of the problematic parameter
    value : Any, optional
        The invalid parameter value
    valid_options : List[Any], optional
        List of valid options for the parameter
    function : str, optional
        Name of the function where the error occurred

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Invalid linkage",
    ...     parameter="linkage",
    ...     value="ward",
    ...     valid_options=["single", "complete", "average"]
    ... )
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        details = kwargs.get('details', {})
        if parameter:
            details["parameter"] = parameter
        if value is not None:
            details["invalid_value"] = value
        if valid_options:
            details["valid_options"] = valid_options
        if function:
            details["function"] = function

        enhanced_message = message
        if parameter and valid_options:
            enhanced_message += f". Valid options for '{parameter}': {valid_options}"

        kwargs["details"] = details
        super().__init__(enhanced_message, **kwargs)


class ComputationError(NetworkAnalysisError):
    """
    Exception raised when a computation cannot produce any result.

    Soft failures (disconnected graphs, singular matrices, exhausted
    iteration budgets) are reported through result flags instead. This
    error wraps unexpected failures inside an algorithm so callers get the
    operation name and graph size along with the original exception.

    Parameters
    ----------
    message : str
        Description of the computational error
    operation : str, optional
        The computational operation that failed
    error_type : str, optional
        Type of computational error (e.g., "numerical", "computation")
    resource_info : Dict[str, Any], optional
        Information about the input size when the error occurred

    Examples
    --------
    >>> raise ComputationError(
    ...     "Betweenness accumulation failed",
    ...     operation="betweenness",
    ...     error_type="computation",
    ...     resource_info={"vertices": 120}
    ... )
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        resource_info: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        self.resource_info = resource_info or {}

        context = {}
        if operation:
            context["operation"] = operation
        if error_type:
            context["error_type"] = error_type

        details = kwargs.get('details', {})
        details.update(self.resource_info)

        kwargs["details"] = details
        kwargs["context"] = context

        super().__init__(message, **kwargs)


def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Validate that a parameter value is in the list of valid options.

    Raises
    ------
    ConfigurationError
        If value is not in valid_options
    """
    if value not in valid_options:
        raise ConfigurationError(
            f"Invalid value for parameter '{parameter_name}': {value}",
            parameter=parameter_name,
            value=value,
            valid_options=valid_options,
            function=function_name
        )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Validate that a numeric parameter is positive.

    Parameters
    ----------
    value : Union[int, float]
        The numeric value to validate
    parameter_name : str
        Name of the parameter
    allow_zero : bool, default False
        Whether to allow zero values

    Raises
    ------
    ConfigurationError
        If value is not positive (or non-negative if allow_zero=True)
    """
    if allow_zero and value < 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be non-negative, got {value}",
            parameter=parameter_name,
            value=value
        )
    elif not allow_zero and value <= 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be positive, got {value}",
            parameter=parameter_name,
            value=value
        )
