import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    from cachematrix.config import settings as settings_module
    from cachematrix.errors import reset_error_metrics

    for name in (
        "CACHEMATRIX_DEFAULT_METHOD",
        "CACHEMATRIX_TOLERANCE",
        "CACHEMATRIX_EAGER_SHAPE_CHECK",
        "CACHEMATRIX_LOG_CACHE_HITS",
        "CACHEMATRIX_HIT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings_module.reset_settings()
    reset_error_metrics()
    yield
    settings_module.reset_settings()


class CountingInverter:
    """Inverter double that records how often it was called and with what."""

    def __init__(self, inverter=None):
        from cachematrix.inversion import invert

        self._inverter = inverter or invert
        self.calls: list[dict] = []

    def __call__(self, matrix, **options):
        self.calls.append(dict(options))
        return self._inverter(matrix, **options)


@pytest.fixture
def counting_inverter() -> CountingInverter:
    return CountingInverter()
