from __future__ import annotations

from strategy_lab.contexts.backtest_queue.application.use_cases import (
    backtest_job_action_failed,
    map_backtest_queue_exception,
)
from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestConfigurationInvalidError,
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
    NotificationChannelUnavailableError,
)
from strategy_lab.platform.errors import LabError


def test_map_configuration_error_preserves_item_order() -> None:
    """
    Verify validation errors keep validator priority order in payload.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        The first item is the field that receives focus.
    Raises:
        AssertionError: If mapped payload differs.
    Side Effects:
        None.
    """
    error = BacktestConfigurationInvalidError(
        "Strategy configuration is invalid",
        errors=[
            {"path": "name", "code": "invalid", "message": "Strategy name is required"},
            {"path": "date_range", "code": "invalid", "message": "Start date must be before"},
        ],
    )

    mapped = map_backtest_queue_exception(error=error)

    assert mapped.code == "validation_error"
    assert mapped.to_payload()["error"]["details"]["errors"][0]["path"] == "name"
    assert mapped.to_payload()["error"]["details"]["errors"][1]["path"] == "date_range"


def test_map_queue_exceptions_to_canonical_codes() -> None:
    rejected = map_backtest_queue_exception(
        error=BacktestQueueRequestRejectedError("", status_code=422)
    )
    assert rejected.code == "backtest_queue_rejected"
    assert rejected.message == "Backtest queue request rejected"
    assert rejected.details == {"status_code": 422}

    unavailable = map_backtest_queue_exception(error=BacktestQueueTransportError("timeout"))
    assert unavailable.code == "backtest_queue_unavailable"

    channel = map_backtest_queue_exception(
        error=NotificationChannelUnavailableError("telegram missing")
    )
    assert channel.code == "notification_channel_unavailable"

    assert map_backtest_queue_exception(error=ValueError("bad")).code == "validation_error"
    assert map_backtest_queue_exception(error=RuntimeError("boom")).code == "unexpected_error"


def test_lab_error_passes_through_unchanged() -> None:
    error = LabError(code="conflict", message="Already running")

    assert map_backtest_queue_exception(error=error) is error


def test_action_failed_error_carries_action_context() -> None:
    error = backtest_job_action_failed(
        action="cancel",
        job_id=7,
        message="",
        status_code=500,
    )

    assert error.code == "backtest_job_action_failed"
    assert error.message == "Backtest job cancel failed"
    assert error.details == {"action": "cancel", "job_id": 7, "status_code": 500}
