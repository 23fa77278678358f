"""Serve matrix inverses from a :class:`CacheMatrix`, computing them on a miss."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional

from .config.settings import Settings, get_settings
from .errors import CacheMatrixError
from .inversion import Inverter, check_square, invert
from .logging import StructuredLoggerAdapter, get_logger, log_exception
from .matrix import CacheMatrix, Matrix

HitCallback = Callable[[CacheMatrix], None]


@dataclass
class ResolverStats:
    """Running hit/miss counters for one resolver."""

    hits: int = 0
    misses: int = 0
    failures: int = 0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        return self.hits / self.lookups if self.lookups else 0.0

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["hit_ratio"] = round(self.hit_ratio, 4)
        return payload


class InverseResolver:
    """Return the inverse of a :class:`CacheMatrix`, filling its cache on a miss.

    Parameters
    ----------
    inverter:
        Callable computing an inverse; extra ``resolve`` keyword arguments
        are forwarded to it unchanged.
    settings:
        Overrides :func:`~cachematrix.config.get_settings`.
    on_hit:
        Optional callback invoked with the :class:`CacheMatrix` on every hit.
    logger:
        Structured logger for hit events and failures.
    """

    def __init__(
        self,
        inverter: Inverter = invert,
        *,
        settings: Optional[Settings] = None,
        on_hit: Optional[HitCallback] = None,
        logger: Optional[StructuredLoggerAdapter] = None,
    ) -> None:
        self._inverter = inverter
        self._settings = settings
        self._on_hit = on_hit
        self._logger = logger or get_logger(__name__, component="inverse_resolver")
        self.stats = ResolverStats()

    @property
    def settings(self) -> Settings:
        return self._settings if self._settings is not None else get_settings()

    def resolve(self, cm: CacheMatrix, **options: Any) -> Matrix:
        """Return the inverse of the matrix wrapped by ``cm``.

        ``options`` only reach the inverter on a miss; a cached inverse is
        returned regardless of them.  Errors from the inverter propagate
        unchanged and leave the cache slot empty.
        """

        cached = cm.get_cached_inverse()
        if cached is not None:
            self.stats.hits += 1
            self._emit_hit(cm)
            return cached

        self.stats.misses += 1
        version = cm.version
        self._logger.event(
            logging.DEBUG,
            "cache_miss",
            "Computing inverse",
            shape=cm.shape,
            version=version,
            options=sorted(options),
        )
        matrix = cm.get_matrix()
        try:
            if self.settings.eager_shape_check:
                check_square(matrix)
            inverse = self._inverter(matrix, **options)
        except CacheMatrixError as exc:
            self.stats.failures += 1
            log_exception(
                self._logger,
                exc,
                event="inverse_failed",
                context={"shape": list(cm.shape), "version": version},
            )
            raise
        except Exception:
            self.stats.failures += 1
            raise

        # The matrix was replaced while inverting; the result belongs to the old one.
        if cm.version != version:
            return inverse
        cm.set_cached_inverse(inverse)
        return cm.get_cached_inverse()

    def reset_stats(self) -> None:
        self.stats = ResolverStats()

    def _emit_hit(self, cm: CacheMatrix) -> None:
        settings = self.settings
        if settings.log_cache_hits:
            self._logger.event(
                settings.hit_log_levelno,
                "cache_hit",
                "Using cached data",
                shape=cm.shape,
                version=cm.version,
            )
        if self._on_hit is not None:
            self._on_hit(cm)


_default_resolver: Optional[InverseResolver] = None


def default_resolver() -> InverseResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = InverseResolver()
    return _default_resolver


def cache_solve(cm: CacheMatrix, **options: Any) -> Matrix:
    """Resolve the inverse of ``cm`` with the shared default resolver."""

    return default_resolver().resolve(cm, **options)


__all__ = [
    "HitCallback",
    "InverseResolver",
    "ResolverStats",
    "cache_solve",
    "default_resolver",
]
