from __future__ import annotations

from typing import Mapping, Sequence


class BacktestQueueDomainError(ValueError):
    """
    Base deterministic domain error for the backtest queue client context.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/errors.py
      - src/strategy_lab/platform/errors/lab_error.py
    """


class BacktestJobTransitionError(BacktestQueueDomainError):
    """
    Raised when a job snapshot violates lifecycle invariants.

    Related:
      - src/strategy_lab/contexts/backtest_queue/domain/entities/backtest_job_snapshot.py
    """


class NotificationChannelUnavailableError(BacktestQueueDomainError):
    """
    Raised when a job asks to be notified through a channel the user has not configured.

    Related:
      - src/strategy_lab/contexts/backtest_queue/domain/services/notification_policy.py
    """


class BacktestConfigurationInvalidError(BacktestQueueDomainError):
    """
    Raised when a submission is attempted with a configuration that fails validation.

    Related:
      - src/strategy_lab/contexts/strategy_config/domain/services/configuration_validator.py
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Sequence[Mapping[str, str]] | None = None,
    ) -> None:
        """
        Build validation error with optional deterministic item payload.

        Args:
            message: Human-readable validation failure description.
            errors: Optional detailed validation items (`path`, `code`, `message`).
        Returns:
            None.
        Assumptions:
            Item order is the field priority order of the validator.
        Raises:
            None.
        Side Effects:
            Stores normalized immutable validation items.
        """
        super().__init__(message)
        normalized_errors: list[dict[str, str]] = []
        if errors is not None:
            for item in errors:
                normalized_errors.append(
                    {
                        "path": str(item.get("path", "unknown")),
                        "code": str(item.get("code", "validation_error")),
                        "message": str(item.get("message", "Validation error")),
                    }
                )
        self._errors = tuple(normalized_errors)

    @property
    def errors(self) -> tuple[Mapping[str, str], ...]:
        return self._errors

    @property
    def fields(self) -> tuple[str, ...]:
        """Invalid field names in priority order."""
        return tuple(item["path"] for item in self._errors)


class BacktestQueueTransportError(Exception):
    """
    Raised by queue gateways when the server cannot be reached or answers with 5xx.

    Transient by nature: pollers log and retry on the next cycle.

    Related:
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/
        httpx_backtest_queue_gateway.py
    """


class BacktestQueueRequestRejectedError(Exception):
    """
    Raised by queue gateways when the server rejects a request with a 4xx answer.

    Related:
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/
        httpx_backtest_queue_gateway.py
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        limit_reached: bool = False,
        upgrade_url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.limit_reached = limit_reached
        self.upgrade_url = upgrade_url

    @property
    def is_conflict(self) -> bool:
        """True for 409 answers, used for already-final jobs."""
        return self.status_code == 409

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
