"""Command-line entrypoints exposed via :mod:`cachematrix.cli`."""

from __future__ import annotations

from importlib import import_module

_APP_CLI = import_module("cachematrix.app.cli")

__all__ = list(_APP_CLI.__all__)

for _attr in __all__:
    globals()[_attr] = getattr(_APP_CLI, _attr)

del _attr, _APP_CLI, import_module


if __name__ == "__main__":
    raise SystemExit(globals()["main"]())
