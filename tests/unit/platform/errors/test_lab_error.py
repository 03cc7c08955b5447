from __future__ import annotations

from datetime import date

import pytest

from strategy_lab.platform.errors import LabError


def test_lab_error_trims_fields_and_sorts_details() -> None:
    """
    Verify normalization of code, message and nested details.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Non-JSON detail values are kept as strings.
    Raises:
        AssertionError: If normalized payload differs.
    Side Effects:
        None.
    """
    error = LabError(
        code=" quota_limit ",
        message=" Daily limit reached ",
        details={"b": (1, 2), "a": {"until": date(2026, 3, 11)}},
    )

    assert str(error) == "quota_limit: Daily limit reached"
    assert list(error.details or {}) == ["a", "b"]
    assert error.to_payload() == {
        "error": {
            "code": "quota_limit",
            "message": "Daily limit reached",
            "details": {"a": {"until": "2026-03-11"}, "b": [1, 2]},
        }
    }


def test_lab_error_rejects_blank_fields_and_non_mapping_details() -> None:
    with pytest.raises(ValueError):
        LabError(code=" ", message="boom")
    with pytest.raises(ValueError):
        LabError(code="unexpected_error", message="")
    with pytest.raises(TypeError):
        LabError(code="unexpected_error", message="boom", details=["x"])  # type: ignore[arg-type]


def test_focus_field_is_first_validation_item() -> None:
    error = LabError(
        code="validation_error",
        message="Strategy configuration is invalid",
        details={
            "errors": [
                {"path": "name", "message": "Strategy name is required"},
                {"path": "date_range", "message": "Start date must be before end date"},
            ]
        },
    )

    assert error.is_validation_error
    assert error.focus_field == "name"
    assert LabError(code="quota_limit", message="Daily limit").focus_field is None
