from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from strategy_lab.contexts.backtest_queue.adapters.outbound.notifications import (
    LogOnlyCompletionListener,
)
from strategy_lab.contexts.backtest_queue.application.dto import BacktestCompletionNotice
from strategy_lab.contexts.backtest_queue.domain.value_objects import BacktestResultSummary

_NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_exact_notice_is_logged_at_info(caplog: pytest.LogCaptureFixture) -> None:
    notice = BacktestCompletionNotice(
        job_id=7,
        strategy_name="Dip Buyer",
        status="completed",
        observed_at=_NOW,
        result=BacktestResultSummary(result_id=501, job_id=7, strategy_name="Dip Buyer"),
        attribution="exact",
    )

    with caplog.at_level(logging.INFO):
        LogOnlyCompletionListener().on_backtest_completed(notice=notice)

    [record] = caplog.records
    assert record.levelno == logging.INFO
    assert "attribution=exact" in record.getMessage()
    assert "result_id=501" in record.getMessage()


def test_heuristic_notice_is_logged_as_warning(caplog: pytest.LogCaptureFixture) -> None:
    """
    Verify results matched only by recency are flagged in logs.

    Args:
        caplog: pytest log capture fixture.
    Returns:
        None.
    Assumptions:
        Heuristic result may belong to a different job.
    Raises:
        AssertionError: If log level or message differs.
    Side Effects:
        None.
    """
    notice = BacktestCompletionNotice(
        job_id=8,
        strategy_name="Breakout",
        status="completed",
        observed_at=_NOW,
        result=BacktestResultSummary(result_id=502, job_id=None, strategy_name="Breakout"),
        attribution="heuristic",
    )

    with caplog.at_level(logging.INFO):
        LogOnlyCompletionListener().on_backtest_completed(notice=notice)

    [record] = caplog.records
    assert record.levelno == logging.WARNING
    assert "job_id=8" in record.getMessage()
    assert "result_id=502" in record.getMessage()
