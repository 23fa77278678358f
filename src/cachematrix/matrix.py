"""A matrix holder that caches its inverse.

A :class:`CacheMatrix` owns two slots: the wrapped matrix and an optional
cached inverse.  Replacing the matrix always empties the inverse slot, so the
slot is either ``None`` or the inverse of the matrix currently wrapped.  The
class knows nothing about inversion; filling the slot is the job of
:class:`cachematrix.resolver.InverseResolver`.

Both slots hold private copies.  Arrays are stored read-only and handed out
as-is; DataFrames cannot be frozen, so they are copied on the way out too.
Editing a value after passing it in, or editing what a getter returned, never
reaches the cached state.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from .errors import InvalidShapeError, ValidationError

Matrix = Union[np.ndarray, pd.DataFrame]


def _is_numeric(dtype: Any) -> bool:
    return pd.api.types.is_numeric_dtype(dtype) and not pd.api.types.is_bool_dtype(dtype)


def as_matrix(value: Any) -> Matrix:
    """Return a private two-dimensional copy of ``value``.

    DataFrames stay DataFrames so their labels survive inversion; anything
    else becomes a read-only :class:`numpy.ndarray`.
    """

    if isinstance(value, pd.DataFrame):
        non_numeric = [
            str(column) for column, dtype in value.dtypes.items() if not _is_numeric(dtype)
        ]
        if non_numeric:
            raise ValidationError(
                "Matrix entries must be numeric",
                context={"columns": non_numeric},
            )
        return value.copy()
    try:
        array = np.array(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            "Matrix data could not be converted to an array",
            cause=exc,
        ) from exc
    if array.ndim != 2:
        raise InvalidShapeError.for_shape(
            array.shape,
            f"Matrix must be two-dimensional, got {array.ndim} dimension(s)",
        )
    if not _is_numeric(array.dtype):
        raise ValidationError(
            "Matrix entries must be numeric",
            context={"dtype": str(array.dtype)},
        )
    array.setflags(write=False)
    return array


def _frozen_copy(value: Matrix) -> Matrix:
    if isinstance(value, pd.DataFrame):
        return value.copy()
    array = np.array(value)
    array.setflags(write=False)
    return array


def _handout(value: Matrix) -> Matrix:
    # Read-only arrays are safe to share.
    return value.copy() if isinstance(value, pd.DataFrame) else value


class CacheMatrix:
    """Mutable holder for a matrix and its lazily computed inverse."""

    def __init__(self, initial: Any) -> None:
        self._matrix: Matrix = as_matrix(initial)
        self._cached_inverse: Optional[Matrix] = None
        self._version = 0

    def set_matrix(self, new_value: Any) -> None:
        """Replace the wrapped matrix and drop the cached inverse.

        No equality check is made: every replacement invalidates.
        """

        self._matrix = as_matrix(new_value)
        self._cached_inverse = None
        self._version += 1

    def get_matrix(self) -> Matrix:
        return _handout(self._matrix)

    def set_cached_inverse(self, inverse: Matrix) -> None:
        """Store a copy of ``inverse`` in the cache slot without verifying it."""

        self._cached_inverse = _frozen_copy(inverse)

    def get_cached_inverse(self) -> Optional[Matrix]:
        """Return the cached inverse, or ``None`` when it has not been computed."""

        if self._cached_inverse is None:
            return None
        return _handout(self._cached_inverse)

    def has_cached_inverse(self) -> bool:
        return self._cached_inverse is not None

    @property
    def version(self) -> int:
        """Number of times the wrapped matrix has been replaced."""

        return self._version

    @property
    def shape(self) -> tuple[int, int]:
        rows, cols = self._matrix.shape
        return int(rows), int(cols)

    def __repr__(self) -> str:
        cached = "cached" if self.has_cached_inverse() else "empty"
        return f"CacheMatrix(shape={self.shape}, inverse={cached}, version={self._version})"


__all__ = ["CacheMatrix", "Matrix", "as_matrix"]
