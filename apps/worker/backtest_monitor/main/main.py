from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from typing import Mapping

from apps.worker.backtest_monitor.wiring.modules import (
    build_backtest_admin_monitor_app,
    build_backtest_monitor_app,
)
from strategy_lab.contexts.backtest_queue.adapters.outbound import (
    load_backtest_client_runtime_config,
    resolve_backtest_client_config_path,
)
from strategy_lab.shared_kernel.primitives import UserId

_LOG_LEVEL_ENV_KEY = "STRATEGY_LAB_LOG_LEVEL"

log = logging.getLogger(__name__)


def _configure_logging(*, environ: Mapping[str, str]) -> None:
    """
    Configure root logging of the monitor process.

    Args:
        environ: Runtime environment mapping; `STRATEGY_LAB_LOG_LEVEL` picks the level.
    Returns:
        None.
    Assumptions:
        Unknown level names fall back to INFO.
    Raises:
        None.
    Side Effects:
        Installs root handler and format.
    """
    level_name = environ.get(_LOG_LEVEL_ENV_KEY, "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="backtest-monitor",
        description="Follow queued and running backtests of one user or, with --admin, every user.",
    )
    parser.add_argument("--user-id", type=int, default=None, help="Queue owner id to follow")
    parser.add_argument(
        "--admin",
        action="store_true",
        help="Follow every user's jobs and queue counters with operator settings",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="backtest_client.yaml path; overrides STRATEGY_LAB_BACKTEST_CLIENT_CONFIG",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Prometheus port; overrides backtest_client.metrics_port",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single refresh cycle without metrics endpoint and exit",
    )
    return parser


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    """
    Route SIGINT and SIGTERM to the shared stop event.

    Args:
        stop_event: Event awaited by the monitor loop.
    Returns:
        None.
    Assumptions:
        Called from a coroutine; platforms without loop signal support use `signal.signal`.
    Raises:
        None.
    Side Effects:
        Replaces process signal handlers.
    """
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except NotImplementedError:
            signal.signal(signum, lambda *_args: loop.call_soon_threadsafe(stop_event.set))


async def _run_async(
    config_path: str | None,
    metrics_port: int | None,
    user_id: int | None,
    once: bool = False,
    admin: bool = False,
) -> int:
    """
    Load runtime config, wire the monitor and run it.

    Args:
        config_path: `--config` value.
        metrics_port: `--metrics-port` value.
        user_id: `--user-id` value; ignored in admin mode.
        once: Whether to run one refresh cycle instead of the loop.
        admin: Whether to run the operator monitor over every user's jobs.
    Returns:
        int: `0` on clean shutdown; in `--once` mode `1` when the refresh failed.
    Assumptions:
        API token comes from the env variable named by `api.token_env`.
    Raises:
        ValueError: If the metrics port override is not positive or user id is missing
            outside admin mode.
        Exception: Config loading and wiring errors are propagated.
    Side Effects:
        Performs network IO and, in loop mode, serves Prometheus metrics.
    """
    if metrics_port is not None and metrics_port <= 0:
        raise ValueError("--metrics-port must be > 0 when provided")
    if not admin and user_id is None:
        raise ValueError("--user-id is required unless --admin is set")

    config_file = resolve_backtest_client_config_path(
        environ=os.environ,
        cli_config_path=config_path,
    )
    runtime_config = load_backtest_client_runtime_config(config_file, environ=os.environ)
    effective_port = metrics_port if metrics_port is not None else runtime_config.metrics_port
    if admin:
        app = build_backtest_admin_monitor_app(
            runtime_config=runtime_config,
            environ=os.environ,
            metrics_port=effective_port,
        )
    else:
        app = build_backtest_monitor_app(
            runtime_config=runtime_config,
            environ=os.environ,
            metrics_port=effective_port,
            user_id=UserId(user_id),
        )
    log.info(
        "event=monitor_starting config=%s user_id=%s admin=%s trading_mode=%s once=%s",
        config_file,
        user_id,
        admin,
        runtime_config.trading_mode.value,
        once,
    )

    if once:
        return 0 if await app.run_once() else 1

    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)
    await app.run(stop_event)
    log.info("event=monitor_stopped user_id=%s admin=%s", user_id, admin)
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Console entrypoint of the backtest monitor worker.

    Args:
        argv: Arguments without program name; `None` reads `sys.argv`.
    Returns:
        int: Process exit code.
    Assumptions:
        Startup errors are reported through logging rather than tracebacks on stderr.
    Raises:
        SystemExit: On invalid command-line arguments, including a missing `--user-id`
            outside admin mode.
    Side Effects:
        Configures logging and owns the asyncio event loop.
    """
    _configure_logging(environ=os.environ)
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.user_id is None and not args.admin:
        parser.error("--user-id is required unless --admin is set")
    try:
        return asyncio.run(
            _run_async(
                config_path=args.config,
                metrics_port=args.metrics_port,
                user_id=args.user_id,
                once=args.once,
                admin=args.admin,
            )
        )
    except Exception:  # noqa: BLE001
        log.exception("event=monitor_failed user_id=%s admin=%s", args.user_id, args.admin)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
