from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from strategy_lab.shared_kernel.primitives import TradingMode

from .scalar_env_overrides import resolve_bounded_int_override, resolve_trading_mode_override

_BACKTEST_CLIENT_CONFIG_PATH_KEY = "STRATEGY_LAB_BACKTEST_CLIENT_CONFIG"
_ENV_NAME_KEY = "STRATEGY_LAB_ENV"
_ALLOWED_ENVS = ("dev", "prod", "test")
_MONITOR_POLL_INTERVAL_ENV_KEY = "STRATEGY_LAB_MONITOR_POLL_INTERVAL_SECONDS"
_TRADING_MODE_ENV_KEY = "STRATEGY_LAB_TRADING_MODE"

MIN_POLL_INTERVAL_SECONDS = 1
MAX_POLL_INTERVAL_SECONDS = 60


@dataclass(frozen=True, slots=True)
class BacktestClientApiConfig:
    """
    BacktestClientApiConfig — queue server connection settings.

    The bearer token itself never appears in YAML; `token_env` names the variable
    that holds it.

    Related:
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/
        httpx_backtest_queue_gateway.py
      - apps/worker/backtest_monitor/wiring/modules/backtest_monitor.py
    """

    base_url: str
    timeout_s: float
    token_env: str | None

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise ValueError("backtest_client.api.base_url must be non-empty")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("backtest_client.api.base_url must be http(s) URL")
        if self.timeout_s <= 0:
            raise ValueError("backtest_client.api.timeout_s must be > 0")


@dataclass(frozen=True, slots=True)
class BacktestMonitorConfig:
    """Per-user job monitor refresh settings."""

    poll_interval_seconds: int

    def __post_init__(self) -> None:
        _ensure_poll_interval(
            name="backtest_client.monitor.poll_interval_seconds",
            value=self.poll_interval_seconds,
        )


@dataclass(frozen=True, slots=True)
class BacktestAdminConfig:
    """
    BacktestAdminConfig — operator queue view refresh and staleness settings.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/
        backtest_queue_admin_monitor.py
    """

    poll_interval_seconds: int
    stuck_after_minutes: int

    def __post_init__(self) -> None:
        _ensure_poll_interval(
            name="backtest_client.admin.poll_interval_seconds",
            value=self.poll_interval_seconds,
        )
        if self.stuck_after_minutes <= 0:
            raise ValueError("backtest_client.admin.stuck_after_minutes must be > 0")


@dataclass(frozen=True, slots=True)
class BacktestClientRuntimeConfig:
    """
    BacktestClientRuntimeConfig — top-level runtime config of the backtest queue client.

    Related:
      - apps/worker/backtest_monitor/main/main.py
      - apps/worker/backtest_monitor/wiring/modules/backtest_monitor.py
      - configs/dev/backtest_client.yaml
    """

    version: int
    api: BacktestClientApiConfig
    monitor: BacktestMonitorConfig
    admin: BacktestAdminConfig
    trading_mode: TradingMode
    metrics_port: int

    def __post_init__(self) -> None:
        """
        Validate top-level runtime config invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Only config schema version 1 is supported.
        Raises:
            ValueError: If version or metrics port is invalid.
        Side Effects:
            None.
        """
        if self.version != 1:
            raise ValueError(f"backtest_client config version must be 1, got {self.version}")
        if self.metrics_port <= 0:
            raise ValueError("backtest_client.metrics_port must be > 0")


def resolve_backtest_client_config_path(
    *,
    environ: Mapping[str, str],
    cli_config_path: str | Path | None = None,
) -> Path:
    """
    Resolve backtest client runtime config path using CLI/env/fallback precedence.

    Related:
      - apps/worker/backtest_monitor/main/main.py

    Args:
        environ: Runtime environment mapping.
        cli_config_path: Optional explicit CLI override path.
    Returns:
        Path: Resolved path to runtime config.
    Assumptions:
        Precedence is CLI `--config` > `STRATEGY_LAB_BACKTEST_CLIENT_CONFIG` >
        `configs/<env>/backtest_client.yaml`.
    Raises:
        ValueError: If `STRATEGY_LAB_ENV` value is invalid.
    Side Effects:
        None.
    """
    if cli_config_path is not None:
        raw_cli_path = str(cli_config_path).strip()
        if raw_cli_path:
            return Path(raw_cli_path)

    override_path = environ.get(_BACKTEST_CLIENT_CONFIG_PATH_KEY, "").strip()
    if override_path:
        return Path(override_path)

    env_name = _resolve_env_name(environ=environ)
    return Path("configs") / env_name / "backtest_client.yaml"


def load_backtest_client_runtime_config(
    path: str | Path,
    *,
    environ: Mapping[str, str] | None = None,
) -> BacktestClientRuntimeConfig:
    """
    Load and validate backtest client runtime YAML config with scalar env overrides.

    Args:
        path: Path to `backtest_client.yaml`.
        environ: Optional runtime environment mapping used for scalar overrides.
    Returns:
        BacktestClientRuntimeConfig: Parsed runtime config.
    Assumptions:
        YAML has top-level `version` and `backtest_client` mapping; every section is
        optional and falls back to defaults.
    Raises:
        FileNotFoundError: If config path does not exist.
        ValueError: If YAML shape/values or env overrides are invalid.
    Side Effects:
        Reads one config file from disk.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"backtest client config not found: {config_path}")

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(raw, Mapping):
        raise ValueError("backtest client config must be mapping at top-level")
    root = _Section(path="", data=raw)
    env = os.environ if environ is None else environ

    client = root.section("backtest_client", required=True)
    api = client.section("api")
    monitor = client.section("monitor")
    admin = client.section("admin")
    trading = client.section("trading")

    return BacktestClientRuntimeConfig(
        version=root.integer("version"),
        api=BacktestClientApiConfig(
            base_url=api.text("base_url", default="http://localhost:8080"),
            timeout_s=api.number("timeout_s", default=10.0),
            token_env=api.optional_text("token_env", default="STRATEGY_LAB_API_TOKEN"),
        ),
        monitor=BacktestMonitorConfig(
            poll_interval_seconds=resolve_bounded_int_override(
                environ=env,
                key=_MONITOR_POLL_INTERVAL_ENV_KEY,
                default=monitor.integer("poll_interval_seconds", default=3),
                min_value=MIN_POLL_INTERVAL_SECONDS,
                max_value=MAX_POLL_INTERVAL_SECONDS,
            ),
        ),
        admin=BacktestAdminConfig(
            poll_interval_seconds=admin.integer("poll_interval_seconds", default=10),
            stuck_after_minutes=admin.integer("stuck_after_minutes", default=30),
        ),
        trading_mode=resolve_trading_mode_override(
            environ=env,
            key=_TRADING_MODE_ENV_KEY,
            default=trading.trading_mode("mode", default=TradingMode.STOCKS),
        ),
        metrics_port=client.integer("metrics_port", default=9210),
    )


def resolve_api_token(
    *,
    config: BacktestClientApiConfig,
    environ: Mapping[str, str],
) -> str | None:
    """Read bearer token from the env variable named by `api.token_env`; blank is None."""
    if config.token_env is None:
        return None
    token = environ.get(config.token_env, "").strip()
    return token or None


def _ensure_poll_interval(*, name: str, value: int) -> None:
    if not MIN_POLL_INTERVAL_SECONDS <= value <= MAX_POLL_INTERVAL_SECONDS:
        raise ValueError(
            f"{name} must be in [{MIN_POLL_INTERVAL_SECONDS}, {MAX_POLL_INTERVAL_SECONDS}], "
            f"got {value}"
        )


def _resolve_env_name(*, environ: Mapping[str, str]) -> str:
    """
    Resolve normalized runtime environment name for config fallback path.

    Args:
        environ: Runtime environment mapping.
    Returns:
        str: One of `dev`, `prod`, or `test`.
    Assumptions:
        Missing `STRATEGY_LAB_ENV` defaults to `dev`.
    Raises:
        ValueError: If value is outside allowed environment literals.
    Side Effects:
        None.
    """
    raw_env_name = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env_name not in _ALLOWED_ENVS:
        raise ValueError(
            f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env_name!r}"
        )
    return raw_env_name



@dataclass(frozen=True, slots=True)
class _Section:
    """
    _Section — typed reader over one mapping of the YAML document.

    Absent keys fall back to the given default; present keys must have the expected
    YAML type. Error messages carry the dotted key path, e.g. `backtest_client.api`.
    """

    path: str
    data: Mapping[str, Any]

    def _key_path(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def _require(self, key: str) -> Any:
        value = self.data.get(key)
        if value is None:
            raise ValueError(f"missing required key: {self._key_path(key)}")
        return value

    def section(self, key: str, *, required: bool = False) -> _Section:
        value = self._require(key) if required else self.data.get(key)
        if value is None:
            return _Section(path=self._key_path(key), data={})
        if not isinstance(value, Mapping):
            raise ValueError(
                f"expected mapping at key '{self._key_path(key)}', got {type(value).__name__}"
            )
        return _Section(path=self._key_path(key), data=value)

    def integer(self, key: str, *, default: int | None = None) -> int:
        """
        Read integer value; bool is rejected even though it subclasses int.

        Args:
            key: Key inside this section.
            default: Fallback for absent key; `None` makes the key required.
        Returns:
            int: Parsed value.
        Assumptions:
            YAML `1.0` is a float and is rejected.
        Raises:
            ValueError: If key is required and absent or value is not int.
        Side Effects:
            None.
        """
        if key not in self.data and default is not None:
            return default
        value = self._require(key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(
                f"expected int at key '{self._key_path(key)}', got {type(value).__name__}"
            )
        return value

    def number(self, key: str, *, default: float) -> float:
        if key not in self.data:
            return default
        value = self.data[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(
                f"expected number at key '{self._key_path(key)}', got {type(value).__name__}"
            )
        return float(value)

    def text(self, key: str, *, default: str) -> str:
        if key not in self.data:
            return default
        value = self.optional_text(key, default=None)
        if value is None:
            raise ValueError(f"key '{self._key_path(key)}' must be non-empty")
        return value

    def optional_text(self, key: str, *, default: str | None) -> str | None:
        """Read string value; explicit null and blank strings both mean None."""
        if key not in self.data:
            return default
        value = self.data[key]
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(
                f"expected string at key '{self._key_path(key)}', got {type(value).__name__}"
            )
        return value.strip() or None

    def trading_mode(self, key: str, *, default: TradingMode) -> TradingMode:
        raw_value = self.text(key, default=default.value).lower()
        try:
            return TradingMode(raw_value)
        except ValueError as error:
            raise ValueError(
                f"key '{self._key_path(key)}' must be 'crypto' or 'stocks', got {raw_value!r}"
            ) from error
