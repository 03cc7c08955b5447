from __future__ import annotations

from enum import Enum


class NotificationChannel(str, Enum):
    """
    Channel the simulation engine uses to announce a finished job.

    Related:
      - src/strategy_lab/contexts/backtest_queue/domain/services/notification_policy.py
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
    """

    EMAIL = "email"
    TELEGRAM = "telegram"
    BOTH = "both"

    @property
    def requires_telegram(self) -> bool:
        return self is not NotificationChannel.EMAIL
