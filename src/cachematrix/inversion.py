"""NumPy-backed matrix inversion used to fill the inverse cache.

An *inverter* is any callable ``inverter(matrix, **options) -> Matrix`` that
returns the inverse of a square matrix and raises
:class:`~cachematrix.errors.SingularMatrixError` when there is none.  The
resolver treats it as a trusted collaborator and never inspects the result.

The built-in :func:`invert` dispatches to one of the registered methods and
then rejects numerically degenerate results the same way R's ``solve`` does:
the reciprocal 1-norm condition number must not fall below ``tol``.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Protocol

import numpy as np
import pandas as pd

from .config.settings import get_settings
from .errors import (
    ConfigurationError,
    InvalidShapeError,
    SingularMatrixError,
    ValidationError,
)
from .matrix import Matrix

DEFAULT_TOLERANCE = float(np.finfo(np.float64).eps)


class Inverter(Protocol):
    def __call__(self, matrix: Matrix, **options: object) -> Matrix:
        ...


def _lu_inverse(values: np.ndarray) -> np.ndarray:
    return np.linalg.inv(values)


def _solve_inverse(values: np.ndarray) -> np.ndarray:
    identity = np.eye(values.shape[0], dtype=np.result_type(values, np.float64))
    return np.linalg.solve(values, identity)


INVERTER_REGISTRY: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "lu": _lu_inverse,
    "solve": _solve_inverse,
}


def register_inverter(name: str, func: Callable[[np.ndarray], np.ndarray]) -> None:
    """Register ``func`` under ``name`` for use as ``invert(..., method=name)``."""

    INVERTER_REGISTRY[name] = func


def reciprocal_condition(values: np.ndarray, inverse: np.ndarray) -> float:
    """Return ``1 / (||A||_1 * ||A^-1||_1)``, or ``0.0`` when it is not finite."""

    with np.errstate(over="ignore", invalid="ignore"):
        product = np.linalg.norm(values, 1) * np.linalg.norm(inverse, 1)
    if not np.isfinite(product) or product == 0:
        return 0.0
    return float(1.0 / product)


def _values(matrix: Matrix) -> np.ndarray:
    if not isinstance(matrix, pd.DataFrame):
        return np.asarray(matrix)
    # Nullable extension dtypes (Int64, Float64) would otherwise come back as object.
    if any(pd.api.types.is_extension_array_dtype(dtype) for dtype in matrix.dtypes):
        return matrix.to_numpy(dtype=np.float64, na_value=np.nan)
    return matrix.to_numpy()


def check_square(matrix: Matrix) -> None:
    """Raise :class:`InvalidShapeError` unless ``matrix`` is square."""

    rows, cols = matrix.shape
    if rows != cols:
        raise InvalidShapeError(
            f"Matrix must be square to be inverted, got {rows}x{cols}",
            context={"rows": int(rows), "cols": int(cols)},
        )


def invert(
    matrix: Matrix,
    *,
    method: Optional[str] = None,
    tol: Optional[float] = None,
) -> Matrix:
    """Return the inverse of ``matrix``.

    Parameters
    ----------
    matrix:
        Square ``numpy.ndarray`` or ``pandas.DataFrame``.
    method:
        Key in :data:`INVERTER_REGISTRY`; defaults to
        ``Settings.default_method``.
    tol:
        Smallest acceptable reciprocal condition number.  Defaults to
        ``Settings.tolerance`` and then to the float64 machine epsilon;
        ``0`` only rejects exactly singular input.

    Returns
    -------
    numpy.ndarray or pandas.DataFrame
        For a DataFrame the inverse is labelled with the input's columns as
        its index and the input's index as its columns.

    Raises
    ------
    InvalidShapeError
        If ``matrix`` is not square.
    ValidationError
        If ``matrix`` contains NaN or infinite entries.
    SingularMatrixError
        If ``matrix`` is singular or computationally singular under ``tol``.
    ConfigurationError
        If ``method`` is not registered.
    """

    settings = get_settings()
    if method is None:
        method = settings.default_method
    if tol is None:
        tol = settings.tolerance

    try:
        routine = INVERTER_REGISTRY[method]
    except KeyError:
        raise ConfigurationError(
            f"Unknown inversion method: {method!r}",
            context={"available": sorted(INVERTER_REGISTRY)},
        ) from None

    check_square(matrix)
    values = _values(matrix)
    if not np.issubdtype(values.dtype, np.number):
        raise ValidationError(
            "Matrix entries must be numeric",
            context={"dtype": str(values.dtype)},
        )
    if not np.all(np.isfinite(values)):
        raise ValidationError("Matrix contains NaN or infinite entries")

    threshold = DEFAULT_TOLERANCE if tol is None else float(tol)
    try:
        inverse = routine(values)
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError(
            "Matrix is exactly singular",
            method=method,
            context={"shape": list(values.shape)},
            cause=exc,
        ) from exc

    rcond = reciprocal_condition(values, inverse)
    if values.size and rcond < threshold:
        raise SingularMatrixError(
            f"system is computationally singular: reciprocal condition number = {rcond:g}",
            rcond=rcond,
            method=method,
            context={"tol": threshold},
        )

    if isinstance(matrix, pd.DataFrame):
        return pd.DataFrame(inverse, index=matrix.columns, columns=matrix.index)
    return inverse


__all__ = [
    "DEFAULT_TOLERANCE",
    "INVERTER_REGISTRY",
    "Inverter",
    "check_square",
    "invert",
    "reciprocal_condition",
    "register_inverter",
]
