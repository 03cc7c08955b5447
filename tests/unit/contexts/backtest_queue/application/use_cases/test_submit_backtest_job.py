from __future__ import annotations

from datetime import date

import pytest

from strategy_lab.contexts.backtest_queue.application.dto import (
    BacktestJobHandle,
    BacktestQueueReceipt,
    BacktestSubmissionRejection,
    BacktestSubmissionRequest,
)
from strategy_lab.contexts.backtest_queue.application.use_cases import (
    SubmitBacktestJobUseCase,
)
from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestConfigurationInvalidError,
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
)
from strategy_lab.contexts.backtest_queue.domain.value_objects import (
    NotificationChannel,
    UserProfileSnapshot,
)
from strategy_lab.contexts.strategy_config.domain.entities import StrategyConfiguration
from strategy_lab.contexts.strategy_config.domain.value_objects import FlatConditions
from strategy_lab.platform.errors import LabError
from strategy_lab.shared_kernel.primitives import TradingMode, UserId

_TODAY = date(2024, 6, 15)


class _GatewayStub:
    """
    Queue gateway stub recording submissions and replaying one scripted outcome.
    """

    def __init__(
        self,
        *,
        receipt: BacktestQueueReceipt | None = None,
        error: Exception | None = None,
    ) -> None:
        """
        Store scripted submission outcome.

        Args:
            receipt: Receipt returned on success.
            error: Exception raised instead of returning a receipt.
        Returns:
            None.
        Assumptions:
            Only `submit` is used by the submission use-case.
        Raises:
            None.
        Side Effects:
            None.
        """
        self._receipt = receipt if receipt is not None else BacktestQueueReceipt(job_id=41)
        self._error = error
        self.requests: list[BacktestSubmissionRequest] = []

    def submit(self, *, request: BacktestSubmissionRequest) -> BacktestQueueReceipt:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return self._receipt


def _profile(*, telegram: bool = False) -> UserProfileSnapshot:
    return UserProfileSnapshot(
        user_id=UserId(9),
        email="trader@example.com",
        telegram_configured=telegram,
    )


def _configuration() -> StrategyConfiguration:
    return StrategyConfiguration.create_default(today=_TODAY, trading_mode=TradingMode.CRYPTO)


def _execute(
    gateway: _GatewayStub,
    *,
    configuration: StrategyConfiguration | None = None,
    notify_via: NotificationChannel = NotificationChannel.EMAIL,
    profile: UserProfileSnapshot | None = None,
) -> BacktestJobHandle | BacktestSubmissionRejection:
    use_case = SubmitBacktestJobUseCase(gateway=gateway, trading_mode=TradingMode.CRYPTO)
    return use_case.execute(
        configuration=configuration if configuration is not None else _configuration(),
        notify_via=notify_via,
        profile=profile if profile is not None else _profile(),
        today=_TODAY,
    )


def test_invalid_configuration_never_reaches_gateway() -> None:
    """
    Verify validation failures are raised before any network call.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Error items follow focus priority order.
    Raises:
        AssertionError: If gateway is called or error items differ.
    Side Effects:
        None.
    """
    gateway = _GatewayStub()
    configuration = _configuration().with_updates(
        name="",
        max_concurrent_positions=0,
        signal_conditions=FlatConditions(),
    )

    with pytest.raises(BacktestConfigurationInvalidError) as error_info:
        _execute(gateway, configuration=configuration)

    assert gateway.requests == []
    assert error_info.value.fields == (
        "name",
        "max_concurrent_positions",
        "entry_conditions",
    )
    assert error_info.value.errors[0]["code"] == "invalid"


def test_unavailable_notification_channel_is_rejected_before_submit() -> None:
    gateway = _GatewayStub()

    with pytest.raises(LabError) as error_info:
        _execute(gateway, notify_via=NotificationChannel.TELEGRAM)

    assert error_info.value.code == "notification_channel_unavailable"
    assert error_info.value.details == {"notify_via": "telegram"}
    assert gateway.requests == []


def test_successful_submission_returns_handle_with_receipt_values() -> None:
    """
    Verify request body and handle of an accepted submission.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Notification email is taken from the profile snapshot.
    Raises:
        AssertionError: If request or handle differs.
    Side Effects:
        None.
    """
    gateway = _GatewayStub(
        receipt=BacktestQueueReceipt(job_id=41, queue_position=3, estimated_wait_minutes=6)
    )

    handle = _execute(
        gateway,
        notify_via=NotificationChannel.BOTH,
        profile=_profile(telegram=True),
    )

    assert handle == BacktestJobHandle(
        job_id=41,
        queue_position=3,
        estimated_wait_minutes=6.0,
        notify_via=NotificationChannel.BOTH,
        strategy_name="My Strategy",
    )
    [request] = gateway.requests
    assert request.notify_via is NotificationChannel.BOTH
    assert request.notify_email == "trader@example.com"
    assert request.payload["strategy_name"] == "My Strategy"
    assert request.payload["pairs"] == ["BTC/USDT"]


def test_missing_receipt_values_fall_back_to_display_defaults() -> None:
    gateway = _GatewayStub(
        receipt=BacktestQueueReceipt(job_id=5, queue_position=None, estimated_wait_minutes=None)
    )

    handle = _execute(gateway)

    assert isinstance(handle, BacktestJobHandle)
    assert handle.queue_position == 1
    assert handle.estimated_wait_minutes == 10.0


@pytest.mark.parametrize(
    "error",
    [
        BacktestQueueRequestRejectedError(
            "Daily limit reached",
            status_code=403,
            limit_reached=True,
            upgrade_url="https://example.com/upgrade",
        ),
        BacktestQueueRequestRejectedError("Too many backtests", status_code=429),
    ],
)
def test_quota_refusals_become_quota_limit_rejections(
    error: BacktestQueueRequestRejectedError,
) -> None:
    rejection = _execute(_GatewayStub(error=error))

    assert isinstance(rejection, BacktestSubmissionRejection)
    assert rejection.is_quota_limit
    assert rejection.message == error.message
    assert rejection.upgrade_url == error.upgrade_url


def test_other_rejections_and_transport_errors_become_failures() -> None:
    rejected = _execute(
        _GatewayStub(
            error=BacktestQueueRequestRejectedError("Invalid payload", status_code=400)
        )
    )
    assert rejected == BacktestSubmissionRejection(reason="failure", message="Invalid payload")

    unreachable = _execute(
        _GatewayStub(error=BacktestQueueTransportError("API request failed: 503 - down"))
    )
    assert isinstance(unreachable, BacktestSubmissionRejection)
    assert unreachable.reason == "failure"
    assert unreachable.message == "API request failed: 503 - down"
    assert unreachable.upgrade_url is None
