"""
Input validation utilities for the socnetkit library.

These checks run at the library boundary, on data handed over by parsers
and hosts, before anything is inserted into a store or fed to the matrix
routines.
"""

from typing import Dict, Optional, Tuple
import warnings

import numpy as np
import polars as pl

from .exceptions import ValidationError


def validate_edgelist_dataframe(
    df: pl.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
    weight_col: Optional[str] = None,
    relation_col: Optional[str] = None,
    allow_self_loops: bool = True,
    allow_negative_weights: bool = False
) -> None:
    """
    Validate an edge list DataFrame before building a store from it.

    Parameters
    ----------
    df : pl.DataFrame
        Edge list DataFrame to validate
    source_col : str, default "source"
        Name of the source vertex column (integer vertex names)
    target_col : str, default "target"
        Name of the target vertex column (integer vertex names)
    weight_col : str, optional
        Name of the arc weight column
    relation_col : str, optional
        Name of the column holding relation names
    allow_self_loops : bool, default True
        Whether arcs from a vertex to itself are accepted
    allow_negative_weights : bool, default False
        Whether negative weights are accepted. Weighted shortest paths
        require non-negative weights.

    Raises
    ------
    ValidationError
        If the DataFrame fails any validation check

    Examples
    --------
    >>> df = pl.DataFrame({"source": [1, 2], "target": [2, 3], "weight": [1.0, 2.5]})
    >>> validate_edgelist_dataframe(df, weight_col="weight")
    """
    if df.is_empty():
        raise ValidationError("DataFrame is empty", field="dataframe")

    required_cols = [source_col, target_col]
    optional_cols = [col for col in [weight_col, relation_col] if col is not None]

    missing_cols = [col for col in required_cols + optional_cols if col not in df.columns]
    if missing_cols:
        raise ValidationError(
            f"Missing required columns: {missing_cols}",
            field="columns",
            details={"available_columns": df.columns, "missing": missing_cols}
        )

    for col in required_cols:
        null_count = df[col].null_count()
        if null_count > 0:
            raise ValidationError(
                f"Column contains {null_count} null values",
                field=col,
                details={"null_count": null_count, "total_rows": len(df)}
            )
        if not df[col].dtype.is_integer():
            raise ValidationError(
                f"Vertex names must be integers, got {df[col].dtype}",
                field=col,
                expected="integer column"
            )

    if weight_col is not None:
        weight_series = df[weight_col]

        if not weight_series.dtype.is_numeric():
            raise ValidationError(
                f"Weight column must be numeric, got {weight_series.dtype}",
                field=weight_col,
                details={"dtype": str(weight_series.dtype)}
            )

        null_count = weight_series.null_count()
        if null_count > 0:
            raise ValidationError(
                f"Weight column contains {null_count} null values",
                field=weight_col,
                details={"null_count": null_count}
            )

        if not allow_negative_weights:
            min_weight = weight_series.min()
            if min_weight is not None and min_weight < 0:
                negative_count = int((weight_series < 0).sum())
                raise ValidationError(
                    f"Weight column contains {negative_count} negative values. "
                    f"Minimum weight: {min_weight}",
                    field=weight_col,
                    details={"min_weight": min_weight, "negative_count": negative_count}
                )

    if relation_col is not None and df[relation_col].null_count() > 0:
        raise ValidationError(
            "Relation column contains null values",
            field=relation_col
        )

    if not allow_self_loops:
        self_loop_count = int((df[source_col] == df[target_col]).sum())
        if self_loop_count > 0:
            raise ValidationError(
                f"Found {self_loop_count} self-loops (arcs from a vertex to itself)",
                field="edges",
                details={"self_loop_count": self_loop_count, "allow_self_loops": False}
            )

    key_cols = [source_col, target_col] + ([relation_col] if relation_col else [])
    duplicate_count = int(df.select(key_cols).is_duplicated().sum())
    if duplicate_count > 0:
        warnings.warn(
            f"Edge list contains {duplicate_count} duplicated arcs; "
            "they are merged into a single arc."
        )


def validate_square_matrix(array: np.ndarray, name: str = "matrix") -> Tuple[int, int]:
    """
    Check that ``array`` is a finite two-dimensional square array.

    Returns
    -------
    Tuple[int, int]
        The shape of the array

    Raises
    ------
    ValidationError
        If the array is not 2-D, not square or holds NaN values
    """
    if array.ndim != 2:
        raise ValidationError(
            f"Expected a 2-D array, got {array.ndim} dimensions",
            field=name,
            value=array.shape
        )
    rows, cols = array.shape
    if rows != cols:
        raise ValidationError(
            "Matrix must be square",
            field=name,
            value=(rows, cols),
            expected="n x n"
        )
    if np.isnan(array).any():
        raise ValidationError("Matrix contains NaN values", field=name)
    return rows, cols


def validate_positions(
    positions: Dict[int, Tuple[float, float]],
    names: list
) -> None:
    """
    Check that a position map covers every vertex of a layout run.

    Raises
    ------
    ValidationError
        If a vertex has no position or a coordinate is not finite
    """
    missing = [name for name in names if name not in positions]
    if missing:
        raise ValidationError(
            f"Missing initial positions for {len(missing)} vertices",
            field="positions",
            details={"missing": missing}
        )
    for name in names:
        x, y = positions[name]
        if not (np.isfinite(x) and np.isfinite(y)):
            raise ValidationError(
                f"Position of vertex {name} is not finite",
                field="positions",
                value=(x, y)
            )
