from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

import httpx
from prometheus_client import Counter, Gauge, start_http_server

from strategy_lab.contexts.backtest_queue.adapters.outbound import (
    BacktestClientRuntimeConfig,
    HttpxBacktestQueueGateway,
    LogOnlyCompletionListener,
    resolve_api_token,
)
from strategy_lab.contexts.backtest_queue.application import (
    BacktestJobMonitor,
    BacktestJobMonitorHooks,
    BacktestQueueAdminMonitor,
)
from strategy_lab.platform.time import SystemClock
from strategy_lab.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class BacktestMonitorMetrics:
    """
    BacktestMonitorMetrics — Prometheus metrics bundle for the backtest monitor worker.

    Related:
      - apps/worker/backtest_monitor/main/main.py
      - src/strategy_lab/contexts/backtest_queue/application/services/
        backtest_job_monitor_hooks.py
    """

    def __init__(self) -> None:
        """
        Register Prometheus metrics used by backtest monitor runtime.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Metrics are created once per worker process.
        Raises:
            ValueError: Propagated by prometheus client on duplicate metric names.
        Side Effects:
            Registers metrics in default Prometheus registry.
        """
        self.poll_cycles_total = Counter(
            "backtest_monitor_poll_cycles_total",
            "Backtest monitor successful poll cycles count",
        )
        self.poll_failures_total = Counter(
            "backtest_monitor_poll_failures_total",
            "Backtest monitor failed poll cycles count",
        )
        self.completion_notices_total = Counter(
            "backtest_monitor_completion_notices_total",
            "Backtest monitor completion notices raised count",
        )
        self.action_failures_total = Counter(
            "backtest_monitor_action_failures_total",
            "Backtest monitor failed job actions count",
        )
        self.live_jobs = Gauge(
            "backtest_monitor_live_jobs",
            "Backtest monitor jobs currently tracked as queued or processing",
        )

    def monitor_hooks(self) -> BacktestJobMonitorHooks:
        """
        Build metrics callbacks bundle for the job monitor service.

        Args:
            None.
        Returns:
            BacktestJobMonitorHooks: Hook callbacks bound to Prometheus metrics.
        Assumptions:
            Hook callbacks are lightweight and called on the event-loop task.
        Raises:
            None.
        Side Effects:
            None.
        """
        return BacktestJobMonitorHooks(
            on_poll_success=self.poll_cycles_total.inc,
            on_poll_error=self.poll_failures_total.inc,
            on_completion_notice=self.completion_notices_total.inc,
            on_action_failed=self.action_failures_total.inc,
            on_live_jobs=self.live_jobs.set,
        )


@dataclass(frozen=True, slots=True)
class BacktestMonitorApp:
    """
    BacktestMonitorApp — runtime wrapper over one user monitor or the operator monitor.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
      - src/strategy_lab/contexts/backtest_queue/application/services/
        backtest_queue_admin_monitor.py
      - apps/worker/backtest_monitor/main/main.py
      - configs/dev/backtest_client.yaml
    """

    monitor: BacktestJobMonitor | BacktestQueueAdminMonitor
    metrics_port: int

    def __post_init__(self) -> None:
        if self.metrics_port <= 0:
            raise ValueError("BacktestMonitorApp.metrics_port must be > 0")

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Run monitor loop until stop event is set.

        Args:
            stop_event: Cooperative shutdown signal shared with process entrypoint.
        Returns:
            None.
        Assumptions:
            Monitor handles poll failures itself and keeps running.
        Raises:
            None.
        Side Effects:
            Starts Prometheus HTTP endpoint and performs network IO each cycle.
        """
        start_http_server(self.metrics_port)
        log.info(
            "event=metrics_server_started component=backtest-monitor port=%s",
            self.metrics_port,
        )
        await self.monitor.run(stop_event)

    async def run_once(self) -> bool:
        """Run one refresh cycle without metrics endpoint; returns whether the poll succeeded."""
        return await self.monitor.refresh_once()


def build_backtest_monitor_app(
    *,
    runtime_config: BacktestClientRuntimeConfig,
    environ: Mapping[str, str],
    metrics_port: int,
    user_id: UserId,
    transport: httpx.BaseTransport | None = None,
    metrics: BacktestMonitorMetrics | None = None,
) -> BacktestMonitorApp:
    """
    Build fully wired backtest monitor worker app.

    Args:
        runtime_config: Validated backtest client runtime config.
        environ: Runtime environment mapping holding the API token.
        metrics_port: Prometheus HTTP endpoint port.
        user_id: Queue owner whose jobs are monitored.
        transport: Optional httpx transport override used in tests.
        metrics: Optional pre-registered metrics bundle.
    Returns:
        BacktestMonitorApp: Ready-to-run app instance.
    Assumptions:
        Missing API token is allowed for local servers without auth.
    Raises:
        ValueError: If runtime values are invalid.
    Side Effects:
        Registers Prometheus metrics when `metrics` is not provided.
    """
    gateway = _build_gateway(runtime_config=runtime_config, environ=environ, transport=transport)
    effective_metrics = metrics if metrics is not None else BacktestMonitorMetrics()
    monitor = BacktestJobMonitor(
        gateway=gateway,
        clock=SystemClock(),
        owner_id=user_id,
        listener=LogOnlyCompletionListener(),
        hooks=effective_metrics.monitor_hooks(),
        poll_interval_seconds=runtime_config.monitor.poll_interval_seconds,
    )
    return BacktestMonitorApp(monitor=monitor, metrics_port=metrics_port)


def build_backtest_admin_monitor_app(
    *,
    runtime_config: BacktestClientRuntimeConfig,
    environ: Mapping[str, str],
    metrics_port: int,
    transport: httpx.BaseTransport | None = None,
    metrics: BacktestMonitorMetrics | None = None,
) -> BacktestMonitorApp:
    """
    Build operator monitor app following every user's jobs and queue counters.

    Args:
        runtime_config: Validated backtest client runtime config; `admin` section is used.
        environ: Runtime environment mapping holding the API token.
        metrics_port: Prometheus HTTP endpoint port.
        transport: Optional httpx transport override used in tests.
        metrics: Optional pre-registered metrics bundle.
    Returns:
        BacktestMonitorApp: Ready-to-run app instance.
    Assumptions:
        API token grants the operator role; the server rejects operator calls otherwise.
    Raises:
        ValueError: If runtime values are invalid.
    Side Effects:
        Registers Prometheus metrics when `metrics` is not provided.
    """
    gateway = _build_gateway(runtime_config=runtime_config, environ=environ, transport=transport)
    effective_metrics = metrics if metrics is not None else BacktestMonitorMetrics()
    monitor = BacktestQueueAdminMonitor(
        gateway=gateway,
        clock=SystemClock(),
        stuck_after=timedelta(minutes=runtime_config.admin.stuck_after_minutes),
        hooks=effective_metrics.monitor_hooks(),
        poll_interval_seconds=runtime_config.admin.poll_interval_seconds,
    )
    return BacktestMonitorApp(monitor=monitor, metrics_port=metrics_port)


def _build_gateway(
    *,
    runtime_config: BacktestClientRuntimeConfig,
    environ: Mapping[str, str],
    transport: httpx.BaseTransport | None,
) -> HttpxBacktestQueueGateway:
    api_token = resolve_api_token(config=runtime_config.api, environ=environ)
    if api_token is None:
        log.warning(
            "event=api_token_missing component=backtest-monitor token_env=%s",
            runtime_config.api.token_env,
        )
    return HttpxBacktestQueueGateway(
        api_base_url=runtime_config.api.base_url,
        api_token=api_token,
        timeout_seconds=runtime_config.api.timeout_s,
        transport=transport,
    )
