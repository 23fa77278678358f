"""Tests for the NumPy-backed inversion routine."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from cachematrix import inversion
from cachematrix.errors import (
    ConfigurationError,
    InvalidShapeError,
    SingularMatrixError,
    ValidationError,
)


@pytest.mark.parametrize("method", ["lu", "solve"])
def test_invert_returns_two_sided_inverse(method: str) -> None:
    rng = np.random.default_rng(7)
    matrix = rng.normal(size=(5, 5)) + 5 * np.eye(5)

    inverse = inversion.invert(matrix, method=method)

    np.testing.assert_allclose(matrix @ inverse, np.eye(5), atol=1e-10)
    np.testing.assert_allclose(inverse @ matrix, np.eye(5), atol=1e-10)


def test_invert_zero_matrix_raises_singular_error() -> None:
    with pytest.raises(SingularMatrixError) as excinfo:
        inversion.invert(np.zeros((2, 2)))

    assert isinstance(excinfo.value.__cause__, np.linalg.LinAlgError)
    assert excinfo.value.to_dict()["code"] == "compute"


def test_singular_error_is_a_numpy_linalg_error() -> None:
    with pytest.raises(np.linalg.LinAlgError):
        inversion.invert(np.array([[1.0, 2.0], [2.0, 4.0]]))


def test_nearly_singular_matrix_is_rejected_under_tolerance() -> None:
    matrix = np.array([[1.0, 1.0], [1.0, 1.0 + 1e-10]])

    with pytest.raises(SingularMatrixError, match="computationally singular"):
        inversion.invert(matrix, tol=1e-8)

    inverse = inversion.invert(matrix, tol=0)
    assert inverse.shape == (2, 2)


def test_default_tolerance_comes_from_settings(monkeypatch) -> None:
    from cachematrix.config.settings import reset_settings

    matrix = np.array([[1.0, 1.0], [1.0, 1.0 + 1e-10]])
    monkeypatch.setenv("CACHEMATRIX_TOLERANCE", "1e-6")
    reset_settings()

    with pytest.raises(SingularMatrixError):
        inversion.invert(matrix)


def test_non_square_matrix_raises_invalid_shape() -> None:
    with pytest.raises(InvalidShapeError) as excinfo:
        inversion.invert(np.array([[1, 2, 3], [4, 5, 6]]))

    assert excinfo.value.context == {"rows": 2, "cols": 3}


def test_non_finite_entries_raise_validation_error() -> None:
    with pytest.raises(ValidationError):
        inversion.invert(np.array([[1.0, np.nan], [0.0, 1.0]]))


def test_unknown_method_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        inversion.invert(np.eye(2), method="qr")

    assert "lu" in excinfo.value.context["available"]


def test_dataframe_inverse_swaps_labels() -> None:
    frame = pd.DataFrame(
        [[2.0, 0.0], [0.0, 4.0]],
        index=["r1", "r2"],
        columns=["c1", "c2"],
    )

    inverse = inversion.invert(frame)

    expected = pd.DataFrame(
        [[0.5, 0.0], [0.0, 0.25]],
        index=["c1", "c2"],
        columns=["r1", "r2"],
    )
    pd.testing.assert_frame_equal(inverse, expected)


def test_register_inverter_makes_method_available(monkeypatch) -> None:
    monkeypatch.setattr(inversion, "INVERTER_REGISTRY", dict(inversion.INVERTER_REGISTRY))
    inversion.register_inverter("pinv", np.linalg.pinv)

    inverse = inversion.invert(np.diag([2.0, 5.0]), method="pinv")

    np.testing.assert_allclose(inverse, np.diag([0.5, 0.2]))


def test_reciprocal_condition_of_identity_is_one() -> None:
    assert inversion.reciprocal_condition(np.eye(3), np.eye(3)) == pytest.approx(1.0)


def test_nullable_float_dataframe_is_inverted() -> None:
    frame = pd.DataFrame([[4.0, 0.0], [0.0, 5.0]], dtype="Float64")

    inverse = inversion.invert(frame)

    np.testing.assert_allclose(inverse.to_numpy(), [[0.25, 0.0], [0.0, 0.2]])


def test_missing_value_in_nullable_dataframe_is_non_finite() -> None:
    frame = pd.DataFrame([[1, 0], [pd.NA, 1]], dtype="Int64")

    with pytest.raises(ValidationError, match="NaN or infinite"):
        inversion.invert(frame)


def test_computational_singularity_reports_rcond() -> None:
    matrix = np.array([[1.0, 1.0], [1.0, 1.0 + 1e-10]])

    with pytest.raises(SingularMatrixError) as excinfo:
        inversion.invert(matrix, tol=1e-8, method="solve")

    assert 0 < excinfo.value.rcond < 1e-8
    assert excinfo.value.method == "solve"
