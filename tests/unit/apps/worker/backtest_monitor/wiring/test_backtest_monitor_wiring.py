from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from apps.worker.backtest_monitor.wiring.modules import (
    BacktestMonitorApp,
    build_backtest_admin_monitor_app,
    build_backtest_monitor_app,
)
from strategy_lab.contexts.backtest_queue.adapters.outbound import (
    load_backtest_client_runtime_config,
)
from strategy_lab.contexts.backtest_queue.application import (
    BacktestJobMonitorHooks,
    BacktestQueueAdminMonitor,
)
from strategy_lab.shared_kernel.primitives import UserId


class _MetricsStub:
    """
    Metrics bundle stub avoiding registration in the default Prometheus registry.
    """

    def __init__(self) -> None:
        self.live_jobs: list[int] = []

    def monitor_hooks(self) -> BacktestJobMonitorHooks:
        return BacktestJobMonitorHooks(on_live_jobs=self.live_jobs.append)


def test_build_backtest_monitor_app_wires_gateway_with_token_and_hooks() -> None:
    """
    Verify wiring passes configured base URL, API token and metrics hooks.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Tests run from repository root so `configs/test` is readable.
    Raises:
        AssertionError: If wired monitor does not reach the mocked server.
    Side Effects:
        None.
    """
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            status_code=200,
            json=[
                {
                    "id": 7,
                    "userId": 5,
                    "strategyName": "Dip Buyer",
                    "status": "queued",
                    "queuePosition": 1,
                    "createdAt": "2026-03-10T11:00:00Z",
                }
            ],
        )

    runtime_config = load_backtest_client_runtime_config(
        Path("configs/test/backtest_client.yaml"),
        environ={},
    )
    metrics = _MetricsStub()
    app = build_backtest_monitor_app(
        runtime_config=runtime_config,
        environ={"STRATEGY_LAB_API_TOKEN": "secret"},
        metrics_port=9400,
        user_id=UserId(5),
        transport=httpx.MockTransport(handler),
        metrics=metrics,  # type: ignore[arg-type]
    )

    assert isinstance(app, BacktestMonitorApp)
    assert asyncio.run(app.monitor.refresh_once())
    assert app.monitor.live_job_ids() == (7,)
    assert metrics.live_jobs[-1] == 1
    [request] = requests
    assert request.url.host == "backtest-api.test"
    assert request.url.path == "/backtest/queue/my-active"
    assert request.headers["authorization"] == "Bearer secret"


def test_build_backtest_monitor_app_rejects_non_positive_metrics_port() -> None:
    runtime_config = load_backtest_client_runtime_config(
        Path("configs/test/backtest_client.yaml"),
        environ={},
    )

    with pytest.raises(ValueError, match="metrics_port"):
        build_backtest_monitor_app(
            runtime_config=runtime_config,
            environ={},
            metrics_port=0,
            user_id=UserId(5),
            transport=httpx.MockTransport(lambda request: httpx.Response(status_code=200)),
            metrics=_MetricsStub(),  # type: ignore[arg-type]
        )


def test_build_backtest_admin_monitor_app_uses_admin_section() -> None:
    """
    Verify operator wiring reads `admin` settings and polls listing plus counters.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Tests run from repository root so `configs/test` is readable.
    Raises:
        AssertionError: If wired monitor settings or requests differ.
    Side Effects:
        None.
    """
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path == "/backtest/queue/stats":
            return httpx.Response(
                status_code=200,
                json={"queued": 0, "processing": 1, "completed": 9, "totalInQueue": 1},
            )
        return httpx.Response(
            status_code=200,
            json=[
                {
                    "id": 11,
                    "userId": 8,
                    "strategyName": "Trend Rider",
                    "status": "processing",
                    "progress": 25,
                    "createdAt": "2026-03-10T11:00:00Z",
                    "startedAt": "2026-03-10T11:05:00Z",
                }
            ],
        )

    runtime_config = load_backtest_client_runtime_config(
        Path("configs/test/backtest_client.yaml"),
        environ={},
    )
    metrics = _MetricsStub()
    app = build_backtest_admin_monitor_app(
        runtime_config=runtime_config,
        environ={"STRATEGY_LAB_API_TOKEN": "secret"},
        metrics_port=9401,
        transport=httpx.MockTransport(handler),
        metrics=metrics,  # type: ignore[arg-type]
    )

    assert isinstance(app.monitor, BacktestQueueAdminMonitor)
    assert app.monitor.poll_interval_seconds == runtime_config.admin.poll_interval_seconds
    assert asyncio.run(app.run_once())
    assert [job.job_id for job in app.monitor.jobs()] == [11]
    assert app.monitor.stats() is not None
    assert metrics.live_jobs[-1] == 1
    assert paths == ["/backtest/queue/all", "/backtest/queue/stats"]
