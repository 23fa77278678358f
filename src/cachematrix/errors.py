"""Error taxonomy for cachematrix.

Every error raised by the package derives from :class:`CacheMatrixError` and
carries an :class:`ErrorCode`, a user-facing message and a context mapping.
Context values are summarised before they are serialised: matrices become
their shape and dtype, NumPy scalars become plain numbers, so a payload never
embeds a full matrix.
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from threading import Lock
from typing import Any, Mapping, MutableMapping, Optional, Sequence, Type

import numpy as np
import pandas as pd
from numpy.linalg import LinAlgError


class ErrorCode(str, Enum):
    """Stable identifiers for error categories used across the project."""

    VALIDATION = "validation"
    COMPUTE = "compute"
    CONFIG = "config"
    UNKNOWN = "unknown"


def summarize_value(value: Any) -> Any:
    """Return a JSON-serialisable stand-in for ``value``."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return {"shape": [int(n) for n in value.shape], "dtype": str(value.dtype)}
    if isinstance(value, pd.DataFrame):
        return {
            "shape": [int(n) for n in value.shape],
            "dtype": sorted({str(dtype) for dtype in value.dtypes}),
        }
    if isinstance(value, Mapping):
        return summarize_context(value)
    if isinstance(value, (list, tuple, set)):
        return [summarize_value(v) for v in value]
    return repr(value)


def summarize_context(context: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return ``context`` with every value passed through :func:`summarize_value`."""

    if not context:
        return {}
    return {str(key): summarize_value(value) for key, value in context.items()}


def describe_exception(exc: BaseException, *, max_depth: int = 3) -> dict[str, Any]:
    """Return a serialisable description of ``exc`` and its causes."""

    seen: set[int] = set()

    def _describe(err: BaseException, depth: int) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": type(err).__name__, "message": str(err)}
        if id(err) in seen:
            payload["cycle"] = True
            return payload
        seen.add(id(err))
        if depth >= max_depth:
            return payload
        if err.__cause__ is not None:
            payload["cause"] = _describe(err.__cause__, depth + 1)
        elif err.__context__ is not None and not err.__suppress_context__:
            payload["context"] = _describe(err.__context__, depth + 1)
        return payload

    return _describe(exc, 0)


class CacheMatrixError(Exception):
    """Base class for structured application errors."""

    code: ErrorCode
    user_message: str
    context: MutableMapping[str, Any]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | str = ErrorCode.UNKNOWN,
        user_message: str | None = None,
        context: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.user_message = user_message or message
        self.context = dict(context or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **context: Any) -> "CacheMatrixError":
        """Attach additional context to the error in-place."""

        for key, value in context.items():
            if value is not None:
                self.context[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return a serialisable payload describing the error."""

        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.user_message,
            "type": self.__class__.__name__,
        }
        if self.context:
            payload["context"] = summarize_context(self.context)
        if self.cause is not None:
            payload["cause"] = describe_exception(self.cause)
        return payload


class ValidationError(CacheMatrixError):
    def __init__(self, message: str = "Validation error", **kwargs: Any) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, **kwargs)


class InvalidShapeError(ValidationError):
    """Raised when a matrix value does not have the shape an operation needs."""

    def __init__(self, message: str = "Matrix has an invalid shape", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)

    @classmethod
    def for_shape(cls, shape: Sequence[int], message: str) -> "InvalidShapeError":
        return cls(message, context={"shape": [int(n) for n in shape]})


class ComputeError(CacheMatrixError):
    def __init__(self, message: str = "Computation error", **kwargs: Any) -> None:
        super().__init__(message, code=ErrorCode.COMPUTE, **kwargs)


class SingularMatrixError(ComputeError, LinAlgError):
    """Raised by an inverter when the matrix has no (numerically usable) inverse.

    Also a :class:`numpy.linalg.LinAlgError`, so code written against plain
    NumPy inversion keeps catching it.  ``rcond`` is the reciprocal condition
    number that failed the tolerance check, or ``None`` for exact singularity.
    """

    def __init__(
        self,
        message: str = "Matrix is singular",
        *,
        rcond: Optional[float] = None,
        method: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.rcond = rcond
        self.method = method
        self.add_context(rcond=rcond, method=method)


class ConfigurationError(CacheMatrixError):
    def __init__(self, message: str = "Configuration error", **kwargs: Any) -> None:
        super().__init__(message, code=ErrorCode.CONFIG, **kwargs)


def wrap_error(
    exc: Exception,
    error_cls: Type[CacheMatrixError] = CacheMatrixError,
    *,
    message: str,
    context: Mapping[str, Any] | None = None,
) -> CacheMatrixError:
    """Return a :class:`CacheMatrixError` wrapping ``exc``.

    Existing :class:`CacheMatrixError` instances are enriched with ``context``
    instead of being re-wrapped.
    """

    if isinstance(exc, CacheMatrixError):
        if context:
            exc.add_context(**dict(context))
        return exc
    return error_cls(message, context=context, cause=exc)


_error_counts: Counter[str] = Counter()
_counter_lock = Lock()


def record_error(error: CacheMatrixError) -> None:
    """Increment in-memory metrics for ``error``."""

    with _counter_lock:
        _error_counts[error.code.value] += 1


def get_error_metrics() -> dict[str, int]:
    """Return a snapshot of error counts by :class:`ErrorCode`."""

    with _counter_lock:
        return dict(_error_counts)


def reset_error_metrics() -> None:
    """Reset the in-memory error metrics (intended for tests)."""

    with _counter_lock:
        _error_counts.clear()


__all__ = [
    "CacheMatrixError",
    "ComputeError",
    "ConfigurationError",
    "describe_exception",
    "ErrorCode",
    "InvalidShapeError",
    "SingularMatrixError",
    "ValidationError",
    "get_error_metrics",
    "record_error",
    "reset_error_metrics",
    "summarize_context",
    "summarize_value",
    "wrap_error",
]
