"""
Tests for input validation functions.

Covers both valid inputs (should pass) and invalid inputs (should raise
ValidationError).
"""

import warnings

import numpy as np
import polars as pl
import pytest

from socnetkit.common.exceptions import ValidationError
from socnetkit.common.validators import (
    validate_edgelist_dataframe,
    validate_square_matrix,
    validate_positions
)


class TestValidateEdgelistDataframe:
    """Test edge list DataFrame validation."""

    def test_valid_basic_edgelist(self):
        df = pl.DataFrame({"source": [1, 2, 3], "target": [2, 3, 1]})
        validate_edgelist_dataframe(df)

    def test_valid_edgelist_with_weights_and_relations(self):
        df = pl.DataFrame({
            "source": [1, 2, 3],
            "target": [2, 3, 1],
            "weight": [1.0, 2.5, 0.8],
            "relation": ["friends", "friends", "work"]
        })
        validate_edgelist_dataframe(df, weight_col="weight", relation_col="relation")

    def test_valid_edgelist_custom_columns(self):
        df = pl.DataFrame({"from_node": [1, 2], "to_node": [2, 1]})
        validate_edgelist_dataframe(df, source_col="from_node", target_col="to_node")

    def test_empty_dataframe(self):
        with pytest.raises(ValidationError, match="DataFrame is empty"):
            validate_edgelist_dataframe(pl.DataFrame())

    def test_missing_required_columns(self):
        df = pl.DataFrame({"source": [1, 2]})
        with pytest.raises(ValidationError, match="Missing required columns"):
            validate_edgelist_dataframe(df)

    def test_missing_weight_column(self):
        df = pl.DataFrame({"source": [1], "target": [2]})
        with pytest.raises(ValidationError, match="Missing required columns"):
            validate_edgelist_dataframe(df, weight_col="weight")

    def test_null_vertex_names(self):
        df = pl.DataFrame({"source": [1, None], "target": [2, 3]})
        with pytest.raises(ValidationError, match="null values"):
            validate_edgelist_dataframe(df)

    def test_non_integer_vertex_names(self):
        df = pl.DataFrame({"source": ["A", "B"], "target": ["B", "A"]})
        with pytest.raises(ValidationError, match="must be integers"):
            validate_edgelist_dataframe(df)

    def test_non_numeric_weights(self):
        df = pl.DataFrame({"source": [1], "target": [2], "weight": ["heavy"]})
        with pytest.raises(ValidationError, match="must be numeric"):
            validate_edgelist_dataframe(df, weight_col="weight")

    def test_negative_weights(self):
        df = pl.DataFrame({"source": [1, 2], "target": [2, 3], "weight": [1.0, -2.0]})
        with pytest.raises(ValidationError, match="negative values"):
            validate_edgelist_dataframe(df, weight_col="weight")

    def test_negative_weights_allowed(self):
        df = pl.DataFrame({"source": [1, 2], "target": [2, 3], "weight": [1.0, -2.0]})
        validate_edgelist_dataframe(df, weight_col="weight", allow_negative_weights=True)

    def test_self_loops_rejected(self):
        df = pl.DataFrame({"source": [1, 2], "target": [1, 3]})
        with pytest.raises(ValidationError, match="self-loops"):
            validate_edgelist_dataframe(df, allow_self_loops=False)

    def test_null_relation(self):
        df = pl.DataFrame({"source": [1, 2], "target": [2, 3], "relation": ["a", None]})
        with pytest.raises(ValidationError, match="Relation column"):
            validate_edgelist_dataframe(df, relation_col="relation")

    def test_duplicate_arcs_warn(self):
        df = pl.DataFrame({"source": [1, 1], "target": [2, 2]})
        with pytest.warns(UserWarning, match="duplicated arcs"):
            validate_edgelist_dataframe(df)

    def test_same_pair_in_different_relations_does_not_warn(self):
        df = pl.DataFrame({"source": [1, 1], "target": [2, 2], "relation": ["a", "b"]})
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            validate_edgelist_dataframe(df, relation_col="relation")


class TestValidateSquareMatrix:
    """Test square matrix validation."""

    def test_valid(self):
        assert validate_square_matrix(np.eye(3)) == (3, 3)

    def test_not_two_dimensional(self):
        with pytest.raises(ValidationError, match="2-D"):
            validate_square_matrix(np.ones(4))

    def test_not_square(self):
        with pytest.raises(ValidationError, match="square"):
            validate_square_matrix(np.ones((2, 3)))

    def test_nan(self):
        data = np.eye(2)
        data[0, 1] = np.nan
        with pytest.raises(ValidationError, match="NaN"):
            validate_square_matrix(data)

    def test_infinity_is_accepted(self):
        data = np.array([[0.0, np.inf], [np.inf, 0.0]])
        assert validate_square_matrix(data) == (2, 2)


class TestValidatePositions:
    """Test position map validation."""

    def test_valid(self):
        validate_positions({1: (0.0, 1.0), 2: (3.0, 4.0)}, [1, 2])

    def test_missing_vertex(self):
        with pytest.raises(ValidationError, match="Missing initial positions"):
            validate_positions({1: (0.0, 1.0)}, [1, 2])

    def test_non_finite(self):
        with pytest.raises(ValidationError, match="not finite"):
            validate_positions({1: (float("nan"), 1.0)}, [1])
