from __future__ import annotations

import pytest

from strategy_lab.shared_kernel.primitives import UserId


def test_user_id_from_string_parses_decimal() -> None:
    """
    Verify UserId parses base-10 string values and renders them back.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Surrounding whitespace is ignored.
    Raises:
        AssertionError: If parsing fails unexpectedly.
    Side Effects:
        None.
    """
    user_id = UserId.from_string(" 42 ")

    assert user_id == UserId(42)
    assert str(user_id) == "42"


@pytest.mark.parametrize("raw_value", [0, -3, True, "7"])
def test_user_id_rejects_non_positive_and_non_int(raw_value: object) -> None:
    with pytest.raises(ValueError):
        UserId(raw_value)  # type: ignore[arg-type]


def test_user_id_from_string_rejects_blank() -> None:
    with pytest.raises(ValueError):
        UserId.from_string("   ")
