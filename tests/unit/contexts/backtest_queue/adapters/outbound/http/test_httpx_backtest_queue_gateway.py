from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import pytest

from strategy_lab.contexts.backtest_queue.adapters.outbound.http import (
    HttpxBacktestQueueGateway,
)
from strategy_lab.contexts.backtest_queue.application.dto import (
    BacktestQueueReceipt,
    BacktestSubmissionRequest,
)
from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
)
from strategy_lab.contexts.backtest_queue.domain.value_objects import NotificationChannel
from strategy_lab.shared_kernel.primitives import UserId

_BASE_URL = "http://backtest-api.local/"


def _gateway(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    api_token: str | None = "token-123",
) -> HttpxBacktestQueueGateway:
    return HttpxBacktestQueueGateway(
        api_base_url=_BASE_URL,
        api_token=api_token,
        transport=httpx.MockTransport(handler),
    )


def test_submit_posts_payload_with_notification_preference() -> None:
    """
    Verify submission request shape and receipt mapping.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Bearer token is attached when configured.
    Raises:
        AssertionError: If request or receipt differs.
    Side Effects:
        None.
    """
    captured: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["auth"] = request.headers.get("authorization")
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            status_code=201,
            json={"queueId": 41, "queuePosition": 3, "estimatedWaitMinutes": 6, "extra": 1},
        )

    receipt = _gateway(handler).submit(
        request=BacktestSubmissionRequest(
            payload={"strategy_name": "Dip Buyer", "pairs": ["BTC/USDT"]},
            notify_via=NotificationChannel.TELEGRAM,
            notify_email=None,
        )
    )

    assert receipt == BacktestQueueReceipt(job_id=41, queue_position=3, estimated_wait_minutes=6)
    assert captured["method"] == "POST"
    assert captured["path"] == "/backtest/queue"
    assert captured["auth"] == "Bearer token-123"
    assert captured["body"] == {
        "payload": {"strategy_name": "Dip Buyer", "pairs": ["BTC/USDT"]},
        "notifyVia": "telegram",
        "notifyEmail": "",
    }


def test_list_my_active_maps_camel_case_rows_to_snapshots() -> None:
    """
    Verify job listing mapping including UTC normalization.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Naive timestamps are read as UTC and unknown fields are ignored.
    Raises:
        AssertionError: If mapped snapshots differ.
    Side Effects:
        None.
    """
    rows = [
        {
            "id": 7,
            "userId": 5,
            "strategyName": "Dip Buyer",
            "status": "queued",
            "queuePosition": 2,
            "notifyVia": "both",
            "createdAt": "2026-03-10T11:00:00",
            "priority": "high",
        },
        {
            "id": 8,
            "userId": 5,
            "strategyName": "Breakout",
            "status": "processing",
            "queuePosition": 4,
            "progress": 42.5,
            "createdAt": "2026-03-10T10:00:00Z",
            "startedAt": "2026-03-10T13:00:00+02:00",
            "estimatedSeconds": 90,
        },
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/backtest/queue/my-active"
        return httpx.Response(status_code=200, json=rows)

    queued, processing = _gateway(handler).list_my_active()

    assert queued.job_id == 7
    assert queued.owner_id == UserId(5)
    assert queued.queue_position == 2
    assert queued.notify_via is NotificationChannel.BOTH
    assert queued.created_at == datetime(2026, 3, 10, 11, 0, tzinfo=timezone.utc)
    assert processing.queue_position is None
    assert processing.progress_percent == 42.5
    assert processing.notify_via is NotificationChannel.EMAIL
    assert processing.started_at == datetime(2026, 3, 10, 11, 0, tzinfo=timezone.utc)
    assert processing.estimated_duration_seconds == 90.0


def test_empty_listing_body_is_empty_tuple() -> None:
    gateway = _gateway(lambda request: httpx.Response(status_code=200, content=b""))

    assert gateway.list_my_active() == ()


def test_malformed_listing_is_transport_error() -> None:
    gateway = _gateway(
        lambda request: httpx.Response(status_code=200, json=[{"id": 1, "status": "paused"}])
    )

    with pytest.raises(BacktestQueueTransportError):
        gateway.list_my_active()

    not_a_list = _gateway(lambda request: httpx.Response(status_code=200, json={"jobs": []}))
    with pytest.raises(BacktestQueueTransportError):
        not_a_list.list_my_active()


def test_latest_completed_result_forwards_job_id_and_accepts_wrapped_list() -> None:
    captured: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured.update(dict(request.url.params))
        return httpx.Response(
            status_code=200,
            json={
                "results": [
                    {
                        "id": 501,
                        "queueId": 7,
                        "strategyName": " Dip Buyer ",
                        "createdAt": "2026-03-10T12:00:00Z",
                        "metrics": {"net_profit": 12.5},
                    }
                ]
            },
        )

    result = _gateway(handler).latest_completed_result(job_id=7)

    assert captured == {"limit": "1", "queueId": "7"}
    assert result is not None
    assert result.result_id == 501
    assert result.matches_job(7)
    assert result.strategy_name == "Dip Buyer"
    assert result.completed_at == datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
    assert result.metrics["net_profit"] == 12.5


def test_latest_completed_result_returns_none_for_empty_history() -> None:
    gateway = _gateway(lambda request: httpx.Response(status_code=200, json=[]))

    assert gateway.latest_completed_result(job_id=None) is None


def test_rejection_carries_server_message_and_quota_flags() -> None:
    """
    Verify 4xx answers become rejection errors.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        `error` field takes precedence over `message`.
    Raises:
        AssertionError: If rejection fields differ.
    Side Effects:
        None.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=403,
            json={
                "error": "Daily backtest limit reached",
                "message": "ignored",
                "limitReached": True,
                "upgrade": "https://example.com/pricing",
            },
        )

    with pytest.raises(BacktestQueueRequestRejectedError) as error_info:
        _gateway(handler).submit(
            request=BacktestSubmissionRequest(payload={}, notify_via=NotificationChannel.EMAIL)
        )

    error = error_info.value
    assert error.status_code == 403
    assert error.message == "Daily backtest limit reached"
    assert error.limit_reached is True
    assert error.upgrade_url == "https://example.com/pricing"


def test_rejection_without_json_body_uses_status_text() -> None:
    gateway = _gateway(lambda request: httpx.Response(status_code=409, text="conflict"))

    with pytest.raises(BacktestQueueRequestRejectedError) as error_info:
        gateway.cancel(job_id=7)

    assert error_info.value.is_conflict
    assert error_info.value.message == "API request failed: 409 - conflict"


def test_server_errors_and_network_failures_are_transport_errors() -> None:
    failing = _gateway(lambda request: httpx.Response(status_code=503, text="maintenance"))
    with pytest.raises(BacktestQueueTransportError, match="API request failed: 503 - maintenance"):
        failing.stats()

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BacktestQueueTransportError):
        _gateway(unreachable).list_all()


def test_job_actions_use_expected_routes() -> None:
    """
    Verify cancel, delete, force-fail and reset routes.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        No-content answers are success.
    Raises:
        AssertionError: If routes or bodies differ.
    Side Effects:
        None.
    """
    calls: list[tuple[str, str, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path, request.content))
        if request.url.path.endswith("reset-stuck"):
            return httpx.Response(status_code=200, json={"reset": 2})
        return httpx.Response(status_code=204)

    gateway = _gateway(handler, api_token=None)

    gateway.cancel(job_id=7)
    gateway.delete(job_id=7)
    gateway.force_fail(job_id=9, reason="Worker lost")
    assert gateway.reset_stuck() == 2

    assert [(method, path) for method, path, _ in calls] == [
        ("POST", "/backtest/queue/7/cancel"),
        ("DELETE", "/backtest/queue/7"),
        ("POST", "/backtest/queue/9/force-fail"),
        ("POST", "/backtest/queue/reset-stuck"),
    ]
    assert json.loads(calls[2][2]) == {"reason": "Worker lost"}


def test_stats_maps_counters() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers.get("authorization") is None
        return httpx.Response(
            status_code=200,
            json={
                "queued": 4,
                "processing": 2,
                "completed": 120,
                "totalInQueue": 6,
                "estimatedWaitMinutes": 18.5,
            },
        )

    stats = _gateway(handler, api_token="  ").stats()

    assert stats.queued == 4
    assert stats.total_in_queue == 6
    assert stats.estimated_wait_minutes == 18.5


def test_gateway_rejects_invalid_settings() -> None:
    with pytest.raises(ValueError):
        HttpxBacktestQueueGateway(api_base_url="  ")
    with pytest.raises(ValueError):
        HttpxBacktestQueueGateway(api_base_url="http://api.local", timeout_seconds=0)
