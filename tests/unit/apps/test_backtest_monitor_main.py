from __future__ import annotations

import asyncio
from pathlib import Path
from types import SimpleNamespace

import pytest

from apps.worker.backtest_monitor.main import main as backtest_monitor_main


class _NoOpApp:
    """
    No-op app stub used to isolate backtest monitor entrypoint tests.
    """

    async def run(self, _stop_event: asyncio.Event) -> None:
        return None


def _patch_config(monkeypatch, *, metrics_port: int = 9210) -> None:
    monkeypatch.setattr(
        backtest_monitor_main,
        "resolve_backtest_client_config_path",
        lambda *, environ, cli_config_path: Path("configs/dev/backtest_client.yaml"),
    )
    monkeypatch.setattr(
        backtest_monitor_main,
        "load_backtest_client_runtime_config",
        lambda _path, *, environ: SimpleNamespace(
            metrics_port=metrics_port,
            trading_mode=SimpleNamespace(value="stocks"),
        ),
    )
    monkeypatch.setattr(
        backtest_monitor_main,
        "_install_signal_handlers",
        lambda _stop_event: None,
    )


def test_run_async_metrics_port_cli_override_has_priority(monkeypatch) -> None:
    """
    Verify CLI `--metrics-port` override wins over configured metrics port.

    Args:
        monkeypatch: pytest monkeypatch fixture.
    Returns:
        None.
    Assumptions:
        Runtime config already passed validation before app wiring.
    Raises:
        AssertionError: If build function receives wrong ports or user id.
    Side Effects:
        None.
    """
    received: list[tuple[int, int]] = []
    _patch_config(monkeypatch, metrics_port=9210)

    def _build_app(*, runtime_config, environ, metrics_port: int, user_id) -> _NoOpApp:
        _ = runtime_config, environ
        received.append((metrics_port, user_id.value))
        return _NoOpApp()

    monkeypatch.setattr(backtest_monitor_main, "build_backtest_monitor_app", _build_app)

    cli_override_exit_code = asyncio.run(
        backtest_monitor_main._run_async(config_path=None, metrics_port=9400, user_id=5)
    )
    default_exit_code = asyncio.run(
        backtest_monitor_main._run_async(config_path=None, metrics_port=None, user_id=5)
    )

    assert cli_override_exit_code == 0
    assert default_exit_code == 0
    assert received == [(9400, 5), (9210, 5)]


def test_run_async_rejects_non_positive_metrics_port(monkeypatch) -> None:
    _patch_config(monkeypatch)

    with pytest.raises(ValueError, match="--metrics-port"):
        asyncio.run(
            backtest_monitor_main._run_async(config_path=None, metrics_port=0, user_id=5)
        )


def test_main_returns_one_when_config_cannot_be_loaded(monkeypatch) -> None:
    """
    Verify entrypoint converts startup failures into exit code 1.

    Args:
        monkeypatch: pytest monkeypatch fixture.
    Returns:
        None.
    Assumptions:
        Startup errors are logged, not propagated to the interpreter.
    Raises:
        AssertionError: If exit code differs from one.
    Side Effects:
        None.
    """
    monkeypatch.setattr(
        backtest_monitor_main,
        "resolve_backtest_client_config_path",
        lambda *, environ, cli_config_path: Path("configs/missing/backtest_client.yaml"),
    )

    def _load(_path, *, environ):
        _ = environ
        raise FileNotFoundError("backtest client config not found")

    monkeypatch.setattr(backtest_monitor_main, "load_backtest_client_runtime_config", _load)

    assert backtest_monitor_main.main(["--user-id", "5"]) == 1


def test_main_requires_user_id() -> None:
    with pytest.raises(SystemExit):
        backtest_monitor_main.main([])


class _OneShotApp:
    """
    App stub scripting the outcome of a single refresh cycle.
    """

    def __init__(self, succeeded: bool) -> None:
        self.succeeded = succeeded
        self.loop_started = False

    async def run(self, _stop_event: asyncio.Event) -> None:
        self.loop_started = True

    async def run_once(self) -> bool:
        return self.succeeded


@pytest.mark.parametrize(("succeeded", "exit_code"), [(True, 0), (False, 1)])
def test_run_async_once_mode_reports_refresh_outcome(
    monkeypatch,
    succeeded: bool,
    exit_code: int,
) -> None:
    app = _OneShotApp(succeeded)
    _patch_config(monkeypatch)
    monkeypatch.setattr(
        backtest_monitor_main,
        "build_backtest_monitor_app",
        lambda **_kwargs: app,
    )

    result = asyncio.run(
        backtest_monitor_main._run_async(
            config_path=None,
            metrics_port=None,
            user_id=5,
            once=True,
        )
    )

    assert result == exit_code
    assert not app.loop_started


def test_run_async_admin_mode_builds_operator_app(monkeypatch) -> None:
    """
    Verify `--admin` wires the operator monitor instead of a per-user one.

    Args:
        monkeypatch: pytest monkeypatch fixture.
    Returns:
        None.
    Assumptions:
        Admin mode needs no user id.
    Raises:
        AssertionError: If the wrong builder runs or port is not forwarded.
    Side Effects:
        None.
    """
    received: list[int] = []
    _patch_config(monkeypatch, metrics_port=9210)

    def _build_admin_app(*, runtime_config, environ, metrics_port: int) -> _NoOpApp:
        _ = runtime_config, environ
        received.append(metrics_port)
        return _NoOpApp()

    def _build_user_app(**_kwargs) -> _NoOpApp:
        raise AssertionError("per-user app must not be built in admin mode")

    monkeypatch.setattr(
        backtest_monitor_main,
        "build_backtest_admin_monitor_app",
        _build_admin_app,
    )
    monkeypatch.setattr(backtest_monitor_main, "build_backtest_monitor_app", _build_user_app)

    exit_code = asyncio.run(
        backtest_monitor_main._run_async(
            config_path=None,
            metrics_port=None,
            user_id=None,
            admin=True,
        )
    )

    assert exit_code == 0
    assert received == [9210]


def test_run_async_requires_user_id_outside_admin_mode(monkeypatch) -> None:
    _patch_config(monkeypatch)

    with pytest.raises(ValueError, match="--user-id"):
        asyncio.run(
            backtest_monitor_main._run_async(config_path=None, metrics_port=None, user_id=None)
        )


def test_main_accepts_admin_flag_without_user_id(monkeypatch) -> None:
    calls: list[dict[str, object]] = []

    async def _run(**kwargs) -> int:
        calls.append(kwargs)
        return 0

    monkeypatch.setattr(backtest_monitor_main, "_run_async", _run)

    assert backtest_monitor_main.main(["--admin", "--once"]) == 0
    [call] = calls
    assert call["admin"] is True
    assert call["user_id"] is None
    assert call["once"] is True
