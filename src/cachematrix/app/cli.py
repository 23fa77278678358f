"""Command line interface for the cachematrix package."""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from cachematrix.config.settings import get_settings
from cachematrix.errors import CacheMatrixError, ErrorCode, ValidationError, wrap_error
from cachematrix.inversion import INVERTER_REGISTRY
from cachematrix.matrix import CacheMatrix, Matrix
from cachematrix.resolver import InverseResolver, ResolverStats

DEFAULT_REPEAT = 2
EXIT_VALIDATION = 2
EXIT_COMPUTE = 1


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""

    parser = argparse.ArgumentParser(
        prog="cachematrix",
        description="Invert a square matrix stored as CSV, caching the inverse",
        allow_abbrev=False,
    )
    parser.add_argument("path", type=Path, help="CSV file holding the matrix")
    parser.add_argument(
        "--method",
        choices=sorted(INVERTER_REGISTRY.keys()),
        default=None,
        help="Inversion method (defaults to CACHEMATRIX_DEFAULT_METHOD or 'lu')",
    )
    parser.add_argument(
        "--tol",
        type=float,
        default=None,
        help="Smallest acceptable reciprocal condition number",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=DEFAULT_REPEAT,
        help="How many times to resolve the inverse through the cache",
    )
    parser.add_argument(
        "--header",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Treat the first CSV row and column as labels",
    )
    parser.add_argument(
        "--output-csv", type=Path, help="Optional path to write the inverse as CSV"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print cache hit/miss counters and per-call timings",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    args = build_parser().parse_args(argv)
    if args.repeat < 1:
        build_parser().error("--repeat must be at least 1")
    return args


@dataclass(frozen=True)
class ResolveResult:
    """Outcome of resolving the inverse ``repeat`` times."""

    inverse: Matrix
    stats: ResolverStats
    durations: list[float]


def load_matrix(path: Path, *, header: bool = True) -> Matrix:
    """Read a matrix from ``path``; labelled files become DataFrames."""

    try:
        if header:
            return pd.read_csv(path, index_col=0)
        return pd.read_csv(path, header=None).to_numpy()
    except (OSError, ValueError) as exc:
        raise wrap_error(
            exc,
            ValidationError,
            message=f"Could not read matrix from {path}",
            context={"path": str(path)},
        ) from exc


def _resolve_step(args: argparse.Namespace, matrix: Matrix) -> ResolveResult:
    """Resolve the inverse repeatedly through one cache matrix."""

    resolver = InverseResolver()
    cm = CacheMatrix(matrix)
    options = {}
    if args.method is not None:
        options["method"] = args.method
    if args.tol is not None:
        options["tol"] = args.tol

    def timed_resolve() -> tuple[Matrix, float]:
        start = time.perf_counter()
        result = resolver.resolve(cm, **options)
        return result, time.perf_counter() - start

    inverse, elapsed = timed_resolve()
    durations = [elapsed]
    for _ in range(args.repeat - 1):
        inverse, elapsed = timed_resolve()
        durations.append(elapsed)
    return ResolveResult(inverse=inverse, stats=resolver.stats, durations=durations)


def _render_inverse(inverse: Matrix) -> str:
    if isinstance(inverse, pd.DataFrame):
        return inverse.to_string()
    return np.array2string(np.asarray(inverse), precision=6, suppress_small=True)


def _write_output(inverse: Matrix, path: Path, *, header: bool) -> None:
    frame = inverse if isinstance(inverse, pd.DataFrame) else pd.DataFrame(inverse)
    frame.to_csv(path, header=header, index=header)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI."""

    args = parse_args(argv)
    try:
        get_settings()
    except PydanticValidationError as exc:
        print(f"error: invalid CACHEMATRIX_* settings: {exc}", file=sys.stderr)
        return EXIT_VALIDATION

    try:
        matrix = load_matrix(args.path, header=args.header)
        result = _resolve_step(args, matrix)
    except CacheMatrixError as exc:
        print(f"error: {exc.user_message}", file=sys.stderr)
        if exc.code in (ErrorCode.VALIDATION, ErrorCode.CONFIG):
            return EXIT_VALIDATION
        return EXIT_COMPUTE

    print(_render_inverse(result.inverse))

    if args.output_csv:
        _write_output(result.inverse, args.output_csv, header=args.header)
        print(f"\nWrote inverse to {args.output_csv}")

    if args.stats:
        stats = result.stats
        timings = ", ".join(f"{value * 1000:.3f}ms" for value in result.durations)
        print(
            "\nCache: "
            f"hits={stats.hits}, misses={stats.misses}, "
            f"hit_ratio={stats.hit_ratio:.2f}\n"
            f"Timings: {timings}"
        )
    return 0


__all__ = [
    "ResolveResult",
    "build_parser",
    "load_matrix",
    "main",
    "parse_args",
]
