from __future__ import annotations

import logging
from datetime import date

from strategy_lab.contexts.backtest_queue.application.dto import (
    DEFAULT_ESTIMATED_WAIT_MINUTES,
    DEFAULT_QUEUE_POSITION,
    BacktestJobHandle,
    BacktestQueueReceipt,
    BacktestSubmissionRejection,
    BacktestSubmissionRequest,
)
from strategy_lab.contexts.backtest_queue.application.ports import BacktestQueueGateway
from strategy_lab.contexts.backtest_queue.application.use_cases.errors import (
    notification_channel_unavailable,
)
from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestConfigurationInvalidError,
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
    NotificationChannelUnavailableError,
)
from strategy_lab.contexts.backtest_queue.domain.services import ensure_channel_available
from strategy_lab.contexts.backtest_queue.domain.value_objects import (
    NotificationChannel,
    UserProfileSnapshot,
)
from strategy_lab.contexts.strategy_config.domain.entities import StrategyConfiguration
from strategy_lab.contexts.strategy_config.domain.services import (
    serialize_engine_payload,
    validate_strategy_configuration,
)
from strategy_lab.shared_kernel.primitives import TradingMode

log = logging.getLogger(__name__)

# Quota refusals from servers that do not set `limitReached` explicitly.
_QUOTA_STATUS_CODES = frozenset({402, 429})


class SubmitBacktestJobUseCase:
    """
    SubmitBacktestJobUseCase — validate, serialize and enqueue one strategy simulation.

    Related:
      - src/strategy_lab/contexts/strategy_config/domain/services/configuration_validator.py
      - src/strategy_lab/contexts/strategy_config/domain/services/engine_payload.py
      - src/strategy_lab/contexts/backtest_queue/application/ports/backtest_queue_gateway.py
    """

    def __init__(
        self,
        *,
        gateway: BacktestQueueGateway,
        trading_mode: TradingMode,
    ) -> None:
        """
        Initialize submission use-case dependencies.

        Args:
            gateway: Queue server port.
            trading_mode: Market family of the current deployment.
        Returns:
            None.
        Assumptions:
            Trading mode is fixed for the lifetime of the process.
        Raises:
            ValueError: If required dependencies are missing.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("SubmitBacktestJobUseCase requires gateway")
        if not isinstance(trading_mode, TradingMode):
            raise ValueError("SubmitBacktestJobUseCase requires trading_mode")
        self._gateway = gateway
        self._trading_mode = trading_mode

    def execute(
        self,
        *,
        configuration: StrategyConfiguration,
        notify_via: NotificationChannel,
        profile: UserProfileSnapshot,
        today: date,
    ) -> BacktestJobHandle | BacktestSubmissionRejection:
        """
        Submit a configuration to the shared queue.

        Args:
            configuration: Configuration as currently edited.
            notify_via: Notification channel chosen for this job.
            profile: Profile snapshot captured when the form was opened.
            today: Current calendar date used by date validation.
        Returns:
            BacktestJobHandle | BacktestSubmissionRejection: Handle with the initial queue
                position and wait estimate, or a structured quota/failure rejection.
        Assumptions:
            Validation runs before anything touches the network. The chosen channel is
            stored on the handle and never changed afterwards.
        Raises:
            BacktestConfigurationInvalidError: If the configuration is not submittable;
                items are in focus priority order.
            LabError: If the notification channel is not configured on the profile.
        Side Effects:
            Creates one job on the queue server when validation passes.
        """
        errors = validate_strategy_configuration(
            configuration,
            today=today,
            trading_mode=self._trading_mode,
        )
        if errors:
            raise BacktestConfigurationInvalidError(
                "Strategy configuration is invalid",
                errors=[
                    {"path": field_name, "code": "invalid", "message": message}
                    for field_name, message in errors.items()
                ],
            )

        try:
            channel = ensure_channel_available(notify_via, profile)
        except NotificationChannelUnavailableError as error:
            raise notification_channel_unavailable(channel=notify_via) from error

        request = BacktestSubmissionRequest(
            payload=serialize_engine_payload(configuration, trading_mode=self._trading_mode),
            notify_via=channel,
            notify_email=profile.email,
        )

        try:
            receipt = self._gateway.submit(request=request)
        except BacktestQueueRequestRejectedError as error:
            return _rejection_from_server(error=error)
        except BacktestQueueTransportError as error:
            log.warning(
                "event=submit_failed component=backtest-queue user_id=%s error=%s",
                profile.user_id,
                error,
            )
            return BacktestSubmissionRejection(
                reason="failure",
                message=str(error) or "Backtest queue is unavailable",
            )

        log.info(
            "event=job_submitted component=backtest-queue user_id=%s job_id=%s notify_via=%s",
            profile.user_id,
            receipt.job_id,
            channel.value,
        )
        return _handle_from_receipt(
            receipt=receipt,
            channel=channel,
            strategy_name=configuration.name.strip(),
        )


def _handle_from_receipt(
    *,
    receipt: BacktestQueueReceipt,
    channel: NotificationChannel,
    strategy_name: str,
) -> BacktestJobHandle:
    queue_position = receipt.queue_position
    if queue_position is None or queue_position < 1:
        queue_position = DEFAULT_QUEUE_POSITION
    estimated_wait = receipt.estimated_wait_minutes
    if estimated_wait is None or estimated_wait < 0:
        estimated_wait = DEFAULT_ESTIMATED_WAIT_MINUTES
    return BacktestJobHandle(
        job_id=receipt.job_id,
        queue_position=queue_position,
        estimated_wait_minutes=float(estimated_wait),
        notify_via=channel,
        strategy_name=strategy_name,
    )


def _rejection_from_server(
    *,
    error: BacktestQueueRequestRejectedError,
) -> BacktestSubmissionRejection:
    """
    Classify a 4xx submission answer.

    Args:
        error: Rejection raised by the gateway.
    Returns:
        BacktestSubmissionRejection: `quota_limit` when the server reports a reached
            limit, `failure` with the raw message otherwise.
    Assumptions:
        402 and 429 answers are quota refusals even without the explicit flag.
    Raises:
        None.
    Side Effects:
        None.
    """
    if error.limit_reached or error.status_code in _QUOTA_STATUS_CODES:
        return BacktestSubmissionRejection(
            reason="quota_limit",
            message=error.message or "Backtest limit reached",
            upgrade_url=error.upgrade_url,
        )
    return BacktestSubmissionRejection(
        reason="failure",
        message=error.message or f"Backtest submission rejected with status {error.status_code}",
    )
