"""Matrices that remember their inverse.

Wrap a matrix in :class:`CacheMatrix` and ask :class:`InverseResolver` (or
:func:`cache_solve`) for its inverse; the first call inverts, later calls
return the cached result until the matrix is replaced.
"""

from __future__ import annotations

from .errors import (
    CacheMatrixError,
    ConfigurationError,
    InvalidShapeError,
    SingularMatrixError,
    ValidationError,
)
from .inversion import INVERTER_REGISTRY, invert, register_inverter
from .matrix import CacheMatrix
from .resolver import InverseResolver, ResolverStats, cache_solve

__version__ = "0.1.0"

__all__ = [
    "CacheMatrix",
    "CacheMatrixError",
    "ConfigurationError",
    "INVERTER_REGISTRY",
    "InvalidShapeError",
    "InverseResolver",
    "ResolverStats",
    "SingularMatrixError",
    "ValidationError",
    "cache_solve",
    "invert",
    "register_inverter",
]
