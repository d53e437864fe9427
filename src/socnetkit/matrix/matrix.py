"""
Dense matrix container and linear-algebra primitives.

:class:`Matrix` wraps a two-dimensional ``float64`` numpy array and adds the
operations the centrality and clustering engines need: inversion by LU
decomposition (scipy) or Gauss-Jordan elimination with singularity
reporting, power iteration for the dominant eigenpair, and pairwise
dissimilarity, similarity and correlation matrices over row, column or
concatenated profiles.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple, Union
import warnings

import numpy as np
import polars as pl
import scipy.linalg
from scipy.spatial import distance as spatial_distance

from ..common.exceptions import ConfigurationError, ValidationError, validate_parameter
from ..common.logging_config import get_logger
from ..common.validators import validate_square_matrix

logger = get_logger(__name__)

INVERSION_METHODS = ["lu", "gauss-jordan"]
DISSIMILARITY_METRICS = ["euclidean", "manhattan", "hamming", "jaccard", "chebyshev"]
SIMILARITY_MEASURES = ["simple", "jaccard", "cosine"]
VARIABLE_LOCATIONS = ["rows", "columns", "both"]

SINGULARITY_EPSILON = 1e-12
POWER_ITERATION_TOLERANCE = 1e-7
POWER_ITERATION_MAX_ITERATIONS = 500


class InversionResult(NamedTuple):
    """Inverse matrix (None on failure) and an explicit success flag."""

    matrix: Optional["Matrix"]
    success: bool


class PowerIterationResult(NamedTuple):
    """Dominant eigenvector estimate with its summary statistics."""

    vector: np.ndarray
    eigenvalue: float
    iterations: int
    converged: bool
    sum: float
    min: float
    max: float
    min_index: int
    max_index: int


class Matrix:
    """
    Dense real matrix with explicit dimensions.

    Parameters
    ----------
    rows : int
        Number of rows
    cols : int, optional
        Number of columns, defaults to ``rows``
    fill : float, default 0.0
        Initial value of every cell

    Examples
    --------
    >>> m = Matrix.from_array([[2.0, 0.0], [0.0, 4.0]])
    >>> inverse, ok = m.inverse()
    >>> ok, inverse.item(1, 1)
    (True, 0.25)
    """

    def __init__(self, rows: int, cols: Optional[int] = None, fill: float = 0.0) -> None:
        cols = rows if cols is None else cols
        if rows < 0 or cols < 0:
            raise ValidationError("Matrix dimensions must be non-negative",
                                  field="shape", value=(rows, cols))
        self.data = np.full((rows, cols), float(fill))

    @classmethod
    def from_array(cls, values: Union[np.ndarray, Sequence[Sequence[float]]]) -> "Matrix":
        array = np.array(values, dtype=float)
        if array.ndim != 2:
            if array.size == 0:
                array = array.reshape(0, 0)
            else:
                raise ValidationError(
                    f"Expected a 2-D array, got {array.ndim} dimensions",
                    field="values"
                )
        matrix = cls(0)
        matrix.data = array
        return matrix

    @classmethod
    def identity(cls, size: int) -> "Matrix":
        return cls.from_array(np.eye(size))

    @classmethod
    def zeros(cls, rows: int, cols: Optional[int] = None) -> "Matrix":
        return cls(rows, cols)

    # ------------------------------------------------------------------
    # element access

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def cols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    def item(self, row: int, col: int) -> float:
        return float(self.data[row, col])

    def set_item(self, row: int, col: int, value: float) -> None:
        self.data[row, col] = value

    def copy(self) -> "Matrix":
        return Matrix.from_array(self.data.copy())

    def to_frame(self, names: Optional[List] = None) -> pl.DataFrame:
        """Matrix as a DataFrame, one column per matrix column."""
        labels = [str(n) for n in (names or range(self.cols))]
        frame = pl.DataFrame({label: self.data[:, j] for j, label in enumerate(labels)})
        if names is not None and len(names) == self.rows:
            frame = frame.insert_column(0, pl.Series("node_id", list(names)))
        return frame

    # ------------------------------------------------------------------
    # arithmetic

    def _check_same_shape(self, other: "Matrix", operation: str) -> None:
        if self.shape != other.shape:
            raise ValidationError(
                f"Cannot {operation} matrices of shapes {self.shape} and {other.shape}",
                field="shape"
            )

    def __add__(self, other: "Matrix") -> "Matrix":
        self._check_same_shape(other, "add")
        return Matrix.from_array(self.data + other.data)

    def __sub__(self, other: "Matrix") -> "Matrix":
        self._check_same_shape(other, "subtract")
        return Matrix.from_array(self.data - other.data)

    def __mul__(self, other: Union["Matrix", float, int]) -> "Matrix":
        if isinstance(other, Matrix):
            if self.cols != other.rows:
                raise ValidationError(
                    f"Cannot multiply matrices of shapes {self.shape} and {other.shape}",
                    field="shape"
                )
            return Matrix.from_array(self.data @ other.data)
        return Matrix.from_array(self.data * float(other))

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.allclose(self.data, other.data))

    def __repr__(self) -> str:
        return f"Matrix(rows={self.rows}, cols={self.cols})"

    # ------------------------------------------------------------------
    # derived matrices

    def transpose(self) -> "Matrix":
        return Matrix.from_array(self.data.T.copy())

    def is_symmetric(self) -> bool:
        return self.rows == self.cols and bool(np.array_equal(self.data, self.data.T))

    def symmetrize(self) -> "Matrix":
        """Make every tie mutual, keeping the larger of the two weights."""
        return Matrix.from_array(np.maximum(self.data, self.data.T))

    def row_sums(self) -> np.ndarray:
        return self.data.sum(axis=1)

    def column_sums(self) -> np.ndarray:
        return self.data.sum(axis=0)

    def degree_matrix(self) -> "Matrix":
        """Diagonal matrix of row sums (out-degrees)."""
        return Matrix.from_array(np.diag(self.row_sums()))

    def laplacian(self) -> "Matrix":
        """``D - A`` with D the out-degree matrix."""
        return self.degree_matrix() - self

    def cocitation(self) -> "Matrix":
        """``A^T A``: entry (i, j) counts the vertices citing both i and j."""
        return Matrix.from_array(self.data.T @ self.data)

    def power(self, exponent: int) -> "Matrix":
        """Integer matrix power; entry (i, j) of ``A^k`` counts walks of length k."""
        if exponent < 0:
            raise ConfigurationError("Matrix power must be non-negative",
                                     parameter="exponent", value=exponent)
        return Matrix.from_array(np.linalg.matrix_power(self.data, exponent))

    # ------------------------------------------------------------------
    # inversion

    def inverse(self, method: str = "lu") -> InversionResult:
        """
        Invert the matrix.

        Parameters
        ----------
        method : {"lu", "gauss-jordan"}, default "lu"
            LU factorisation via scipy, or in-place Gauss-Jordan elimination
            with partial pivoting

        Returns
        -------
        InversionResult
            ``(inverse, True)`` on success, ``(None, False)`` when the matrix
            is singular. No approximate inverse is ever returned.
        """
        validate_parameter(method, INVERSION_METHODS, "method", "Matrix.inverse")
        validate_square_matrix(self.data)

        if self.rows == 0:
            return InversionResult(Matrix(0), True)

        if method == "lu":
            inverse = _lu_inverse(self.data)
        else:
            inverse = _gauss_jordan_inverse(self.data)

        if inverse is None or not np.all(np.isfinite(inverse)):
            logger.warning("Matrix of size %d is singular, inversion (%s) failed",
                           self.rows, method)
            return InversionResult(None, False)

        return InversionResult(Matrix.from_array(inverse), True)

    # ------------------------------------------------------------------
    # eigenvector

    def power_iteration(
        self,
        initial: Optional[np.ndarray] = None,
        tolerance: float = POWER_ITERATION_TOLERANCE,
        max_iterations: int = POWER_ITERATION_MAX_ITERATIONS,
        shift: float = 0.0
    ) -> PowerIterationResult:
        """
        Estimate the dominant eigenvector by repeated multiplication.

        Each step computes ``(A + shift * I) x`` and rescales it so that its
        largest absolute entry is 1. Iteration stops when no entry moves by
        more than ``tolerance`` or after ``max_iterations`` steps; on
        exhaustion the last vector is returned with ``converged=False``.

        A positive ``shift`` keeps the eigenvectors but breaks the
        oscillation power iteration shows on bipartite graphs; the reported
        eigenvalue has the shift removed.
        """
        validate_square_matrix(self.data)
        n = self.rows
        if n == 0:
            return PowerIterationResult(np.zeros(0), 0.0, 0, True, 0.0, 0.0, 0.0, -1, -1)

        operator = self.data + shift * np.eye(n)
        x = np.ones(n) if initial is None else np.asarray(initial, dtype=float).copy()
        eigenvalue = 0.0
        converged = False
        iterations = 0

        for iterations in range(1, max_iterations + 1):
            y = operator @ x
            scale = np.max(np.abs(y))
            if scale == 0:
                x = y
                eigenvalue = 0.0
                converged = True
                break
            y = y / scale
            change = np.max(np.abs(y - x))
            x = y
            eigenvalue = scale - shift
            if change < tolerance:
                converged = True
                break

        if not converged:
            logger.warning("Power iteration did not converge within %d iterations",
                           max_iterations)

        return PowerIterationResult(
            vector=x,
            eigenvalue=float(eigenvalue),
            iterations=iterations,
            converged=converged,
            sum=float(x.sum()),
            min=float(x.min()),
            max=float(x.max()),
            min_index=int(np.argmin(x)),
            max_index=int(np.argmax(x))
        )

    # ------------------------------------------------------------------
    # pairwise profiles

    def dissimilarities(
        self,
        metric: str = "euclidean",
        variables: str = "rows",
        include_diagonal: bool = False
    ) -> "Matrix":
        """
        Pairwise dissimilarity between actors' tie profiles.

        Parameters
        ----------
        metric : str, default "euclidean"
            One of euclidean, manhattan, hamming (number of mismatching
            positions), jaccard (on binarised profiles) or chebyshev
        variables : {"rows", "columns", "both"}, default "rows"
            Compare outgoing profiles, incoming profiles, or both
            concatenated
        include_diagonal : bool, default False
            When False, positions i and j are left out of both profiles when
            comparing actors i and j (self-ties are not evidence)

        Returns
        -------
        Matrix
            Symmetric N x N matrix with zero diagonal
        """
        validate_parameter(metric, DISSIMILARITY_METRICS, "metric", "Matrix.dissimilarities")
        return self._pairwise(lambda u, v: _dissimilarity(metric, u, v),
                              variables, include_diagonal, diagonal_value=0.0)

    def similarities(
        self,
        measure: str = "simple",
        variables: str = "rows",
        include_diagonal: bool = False
    ) -> "Matrix":
        """
        Pairwise similarity between actors' tie profiles.

        ``simple`` is the share of exactly matching positions, ``jaccard``
        the share of co-present ties among positions where either actor has
        a tie, ``cosine`` the cosine of the two profiles.
        """
        validate_parameter(measure, SIMILARITY_MEASURES, "measure", "Matrix.similarities")
        return self._pairwise(lambda u, v: _similarity(measure, u, v),
                              variables, include_diagonal, diagonal_value=1.0)

    def pearson(self, variables: str = "rows", include_diagonal: bool = False) -> "Matrix":
        """
        Pearson correlation between actors' tie profiles.

        Pairs where a profile has zero variance correlate as 0.
        """
        return self._pairwise(_pearson, variables, include_diagonal, diagonal_value=1.0)

    def _pairwise(self, func, variables: str, include_diagonal: bool,
                  diagonal_value: float) -> "Matrix":
        validate_parameter(variables, VARIABLE_LOCATIONS, "variables", "Matrix._pairwise")
        validate_square_matrix(self.data)
        n = self.rows
        result = np.full((n, n), 0.0)
        np.fill_diagonal(result, diagonal_value)

        for i in range(n):
            for j in range(i + 1, n):
                u, v = self._profiles(i, j, variables, include_diagonal)
                value = float(func(u, v))
                result[i, j] = value
                result[j, i] = value

        return Matrix.from_array(result)

    def _profiles(self, i: int, j: int, variables: str,
                  include_diagonal: bool) -> Tuple[np.ndarray, np.ndarray]:
        keep = np.ones(self.rows, dtype=bool)
        if not include_diagonal:
            keep[[i, j]] = False

        parts_i, parts_j = [], []
        if variables in ("rows", "both"):
            parts_i.append(self.data[i, keep])
            parts_j.append(self.data[j, keep])
        if variables in ("columns", "both"):
            parts_i.append(self.data[keep, i])
            parts_j.append(self.data[keep, j])
        return np.concatenate(parts_i), np.concatenate(parts_j)


def _lu_inverse(array: np.ndarray) -> Optional[np.ndarray]:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", scipy.linalg.LinAlgWarning)
        lu, piv = scipy.linalg.lu_factor(array, check_finite=True)
    pivots = np.abs(np.diag(lu))
    if pivots.min() < SINGULARITY_EPSILON * max(1.0, np.abs(array).max()):
        return None
    return scipy.linalg.lu_solve((lu, piv), np.eye(array.shape[0]))


def _gauss_jordan_inverse(array: np.ndarray) -> Optional[np.ndarray]:
    n = array.shape[0]
    work = np.hstack([array.astype(float), np.eye(n)])
    threshold = SINGULARITY_EPSILON * max(1.0, np.abs(array).max())

    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(work[col:, col])))
        if abs(work[pivot_row, col]) < threshold:
            return None
        if pivot_row != col:
            work[[col, pivot_row]] = work[[pivot_row, col]]
        work[col] /= work[col, col]
        for row in range(n):
            if row != col and work[row, col] != 0.0:
                work[row] -= work[row, col] * work[col]

    return work[:, n:]


def _dissimilarity(metric: str, u: np.ndarray, v: np.ndarray) -> float:
    if len(u) == 0:
        return 0.0
    if metric == "euclidean":
        return spatial_distance.euclidean(u, v)
    if metric == "manhattan":
        return spatial_distance.cityblock(u, v)
    if metric == "hamming":
        return spatial_distance.hamming(u, v) * len(u)
    if metric == "chebyshev":
        return spatial_distance.chebyshev(u, v)
    # jaccard on presence/absence
    u_bool, v_bool = u != 0, v != 0
    if not (u_bool | v_bool).any():
        return 0.0
    return spatial_distance.jaccard(u_bool, v_bool)


def _similarity(measure: str, u: np.ndarray, v: np.ndarray) -> float:
    if len(u) == 0:
        return 1.0
    if measure == "simple":
        return float(np.mean(u == v))
    if measure == "jaccard":
        u_bool, v_bool = u != 0, v != 0
        either = np.sum(u_bool | v_bool)
        return float(np.sum(u_bool & v_bool) / either) if either else 1.0
    norm = np.linalg.norm(u) * np.linalg.norm(v)
    return float(np.dot(u, v) / norm) if norm else 0.0


def _pearson(u: np.ndarray, v: np.ndarray) -> float:
    if len(u) < 2 or np.std(u) == 0 or np.std(v) == 0:
        return 0.0
    return float(np.corrcoef(u, v)[0, 1])
