from __future__ import annotations

from typing import Any, Mapping, Sequence

from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestConfigurationInvalidError,
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
    NotificationChannelUnavailableError,
)
from strategy_lab.contexts.backtest_queue.domain.value_objects import NotificationChannel
from strategy_lab.platform.errors import LabError


def validation_error(
    *,
    message: str,
    errors: Sequence[Mapping[str, str]] | None = None,
) -> LabError:
    """
    Build canonical `validation_error` LabError preserving the validator field order.

    Related:
      - src/strategy_lab/contexts/backtest_queue/domain/errors/backtest_queue_errors.py
      - src/strategy_lab/contexts/strategy_config/domain/services/configuration_validator.py
      - src/strategy_lab/platform/errors/lab_error.py

    Args:
        message: Human-readable validation failure message.
        errors: Optional validation items list.
    Returns:
        LabError: Canonical validation error.
    Assumptions:
        Items are already in focus priority order; the first item is the field the UI
        scrolls to.
    Raises:
        None.
    Side Effects:
        None.
    """
    details: dict[str, Any] = {}
    if errors is not None:
        details["errors"] = [
            {
                "path": str(item.get("path", "unknown")),
                "code": str(item.get("code", "validation_error")),
                "message": str(item.get("message", "Validation error")),
            }
            for item in errors
        ]
    return LabError(
        code="validation_error",
        message=message,
        details=details,
    )


def notification_channel_unavailable(*, channel: NotificationChannel) -> LabError:
    """
    Build deterministic error for a notification channel the user has not configured.

    Args:
        channel: Channel picked by the user.
    Returns:
        LabError: Canonical `notification_channel_unavailable` payload.
    Assumptions:
        Only telegram-backed channels can be unavailable.
    Raises:
        None.
    Side Effects:
        None.
    """
    return LabError(
        code="notification_channel_unavailable",
        message="Connect Telegram in your profile to use this notification option",
        details={"notify_via": channel.value},
    )


def backtest_job_action_failed(
    *,
    action: str,
    job_id: int | None,
    message: str,
    status_code: int | None = None,
) -> LabError:
    """
    Build deterministic error for a failed cancel, delete, force-fail or reset action.

    Args:
        action: Action name.
        job_id: Target job id or None for bulk actions.
        message: Raw server or transport message.
        status_code: HTTP status when the server answered.
    Returns:
        LabError: Canonical `backtest_job_action_failed` payload.
    Assumptions:
        None.
    Raises:
        None.
    Side Effects:
        None.
    """
    details: dict[str, Any] = {"action": action}
    if job_id is not None:
        details["job_id"] = job_id
    if status_code is not None:
        details["status_code"] = status_code
    return LabError(
        code="backtest_job_action_failed",
        message=message or f"Backtest job {action} failed",
        details=details,
    )


def map_backtest_queue_exception(*, error: Exception) -> LabError:
    """
    Map known backtest queue exceptions to canonical LabError contract.

    Args:
        error: Exception raised by submission use-case or gateway.
    Returns:
        LabError: Canonical error.
    Assumptions:
        Unknown exceptions map to `unexpected_error` without leaking internals.
    Raises:
        None.
    Side Effects:
        None.
    """
    if isinstance(error, LabError):
        return error

    if isinstance(error, BacktestConfigurationInvalidError):
        normalized_errors = error.errors if len(error.errors) > 0 else None
        return validation_error(message=str(error), errors=normalized_errors)

    if isinstance(error, NotificationChannelUnavailableError):
        return LabError(code="notification_channel_unavailable", message=str(error))

    if isinstance(error, BacktestQueueRequestRejectedError):
        return LabError(
            code="backtest_queue_rejected",
            message=error.message or "Backtest queue request rejected",
            details={"status_code": error.status_code},
        )

    if isinstance(error, BacktestQueueTransportError):
        return LabError(code="backtest_queue_unavailable", message=str(error) or "unavailable")

    if isinstance(error, ValueError):
        return validation_error(message=str(error))

    return LabError(
        code="unexpected_error",
        message="Unexpected backtest queue error",
    )
