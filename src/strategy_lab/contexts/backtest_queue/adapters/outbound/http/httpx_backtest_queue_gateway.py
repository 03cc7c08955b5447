from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, TypeVar

import httpx

from strategy_lab.contexts.backtest_queue.application.dto import (
    BacktestQueueReceipt,
    BacktestSubmissionRequest,
)
from strategy_lab.contexts.backtest_queue.application.ports import BacktestQueueGateway
from strategy_lab.contexts.backtest_queue.domain.entities import BacktestJobSnapshot
from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
)
from strategy_lab.contexts.backtest_queue.domain.value_objects import (
    BacktestQueueStats,
    BacktestResultSummary,
)

from .backtest_queue_wire import (
    BacktestJobSnapshotWire,
    BacktestQueueErrorWire,
    BacktestQueueReceiptWire,
    BacktestQueueStatsWire,
    BacktestResultWire,
    submission_body,
)

log = logging.getLogger(__name__)

_T = TypeVar("_T")

_QUEUE_PATH = "/backtest/queue"
_MY_ACTIVE_PATH = "/backtest/queue/my-active"
_ALL_PATH = "/backtest/queue/all"
_STATS_PATH = "/backtest/queue/stats"
_RESET_STUCK_PATH = "/backtest/queue/reset-stuck"
_RESULTS_PATH = "/backtest/results"


class HttpxBacktestQueueGateway(BacktestQueueGateway):
    """
    HttpxBacktestQueueGateway — `BacktestQueueGateway` over the queue server REST API.

    Network errors, timeouts, 5xx answers and unparseable bodies raise
    `BacktestQueueTransportError`; 4xx answers raise `BacktestQueueRequestRejectedError`
    with the server message and quota flags.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/ports/backtest_queue_gateway.py
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/backtest_queue_wire.py
      - apps/worker/backtest_monitor/wiring/modules/backtest_monitor.py
    """

    def __init__(
        self,
        *,
        api_base_url: str,
        api_token: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize adapter with immutable HTTP settings and optional mock transport.

        Args:
            api_base_url: Absolute API base URL.
            api_token: Optional bearer token of the current user.
            timeout_seconds: Per-request timeout.
            transport: Optional httpx transport override used in tests.
        Returns:
            None.
        Assumptions:
            None.
        Raises:
            ValueError: If URL is blank or timeout is non-positive.
        Side Effects:
            None.
        """
        normalized_api_base_url = api_base_url.strip().rstrip("/")
        if not normalized_api_base_url:
            raise ValueError("HttpxBacktestQueueGateway requires non-empty api_base_url")
        if timeout_seconds <= 0:
            raise ValueError("HttpxBacktestQueueGateway requires positive timeout_seconds")

        self._api_base_url = normalized_api_base_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._headers = {"Content-Type": "application/json"}
        if api_token is not None and api_token.strip():
            self._headers["Authorization"] = f"Bearer {api_token.strip()}"

    def submit(self, *, request: BacktestSubmissionRequest) -> BacktestQueueReceipt:
        payload = self._request("POST", _QUEUE_PATH, json_body=submission_body(request))
        return _parse(lambda: BacktestQueueReceiptWire.model_validate(payload).to_domain())

    def list_my_active(self) -> tuple[BacktestJobSnapshot, ...]:
        payload = self._request("GET", _MY_ACTIVE_PATH)
        return _parse_snapshots(payload=payload)

    def latest_completed_result(self, *, job_id: int | None) -> BacktestResultSummary | None:
        """
        Fetch the most recent completed result of the current user.

        Args:
            job_id: Job whose result is wanted; forwarded as `queueId`.
        Returns:
            BacktestResultSummary | None: First result row or None when the list is empty.
        Assumptions:
            Server returns results newest first, either as a list or as `{"results": [...]}`.
        Raises:
            BacktestQueueTransportError: On transport failure or malformed body.
            BacktestQueueRequestRejectedError: On 4xx answer.
        Side Effects:
            Performs one outbound HTTP request.
        """
        params: dict[str, Any] = {"limit": 1}
        if job_id is not None:
            params["queueId"] = job_id
        payload = self._request("GET", _RESULTS_PATH, params=params)
        if isinstance(payload, Mapping):
            payload = payload.get("results", [])
        if not isinstance(payload, list):
            raise BacktestQueueTransportError("results response is not a list")
        if not payload:
            return None
        first = payload[0]
        return _parse(lambda: BacktestResultWire.model_validate(first).to_domain())

    def cancel(self, *, job_id: int) -> None:
        self._request("POST", f"{_QUEUE_PATH}/{job_id}/cancel")

    def delete(self, *, job_id: int) -> None:
        self._request("DELETE", f"{_QUEUE_PATH}/{job_id}")

    def force_fail(self, *, job_id: int, reason: str) -> None:
        self._request("POST", f"{_QUEUE_PATH}/{job_id}/force-fail", json_body={"reason": reason})

    def reset_stuck(self) -> int:
        payload = self._request("POST", _RESET_STUCK_PATH)
        if isinstance(payload, Mapping):
            reset = payload.get("reset", 0)
            if isinstance(reset, int) and not isinstance(reset, bool) and reset >= 0:
                return reset
        raise BacktestQueueTransportError("reset-stuck response has no reset count")

    def list_all(self) -> tuple[BacktestJobSnapshot, ...]:
        payload = self._request("GET", _ALL_PATH)
        return _parse_snapshots(payload=payload)

    def stats(self) -> BacktestQueueStats:
        payload = self._request("GET", _STATS_PATH)
        return _parse(lambda: BacktestQueueStatsWire.model_validate(payload).to_domain())

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Perform one HTTP call and classify its outcome.

        Args:
            method: HTTP method.
            path: API path relative to base URL.
            json_body: Optional JSON body.
            params: Optional query parameters.
        Returns:
            Any: Decoded JSON body or None for empty answers.
        Assumptions:
            Any 2xx answer is success.
        Raises:
            BacktestQueueTransportError: On network failure, 5xx or invalid JSON.
            BacktestQueueRequestRejectedError: On 4xx answer.
        Side Effects:
            Performs one outbound HTTP request.
        """
        endpoint_url = f"{self._api_base_url}{path}"
        try:
            with httpx.Client(
                timeout=self._timeout_seconds,
                transport=self._transport,
            ) as http_client:
                response = http_client.request(
                    method,
                    endpoint_url,
                    headers=self._headers,
                    json=dict(json_body) if json_body is not None else None,
                    params=dict(params) if params is not None else None,
                )
        except httpx.HTTPError as error:
            raise BacktestQueueTransportError(
                f"Backtest queue request failed: {method} {path}: {error}"
            ) from error

        if response.status_code >= 500:
            raise BacktestQueueTransportError(
                f"API request failed: {response.status_code} - {response.text}"
            )
        if response.status_code >= 400:
            raise _rejection(response=response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            raise BacktestQueueTransportError(
                f"Backtest queue response is not valid JSON: {method} {path}"
            ) from error


def _rejection(*, response: httpx.Response) -> BacktestQueueRequestRejectedError:
    """
    Build rejection error from a 4xx answer.

    Args:
        response: 4xx HTTP response.
    Returns:
        BacktestQueueRequestRejectedError: Error with server message and quota flags.
    Assumptions:
        Body may be JSON error object, plain text or empty.
    Raises:
        None.
    Side Effects:
        None.
    """
    details = BacktestQueueErrorWire()
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        try:
            details = BacktestQueueErrorWire.model_validate(body)
        except ValueError:
            log.debug("event=error_body_unparsed status=%s", response.status_code)
    message = details.text() or f"API request failed: {response.status_code} - {response.text}"
    return BacktestQueueRequestRejectedError(
        message,
        status_code=response.status_code,
        limit_reached=details.limit_reached,
        upgrade_url=details.upgrade,
    )


def _parse_snapshots(*, payload: Any) -> tuple[BacktestJobSnapshot, ...]:
    if payload is None:
        return ()
    if not isinstance(payload, list):
        raise BacktestQueueTransportError("job list response is not a list")
    return _parse(
        lambda: tuple(BacktestJobSnapshotWire.model_validate(item).to_domain() for item in payload)
    )


def _parse(build: Callable[[], _T]) -> _T:
    """
    Run one wire-to-domain mapping and report malformed bodies as transport errors.

    Args:
        build: Zero-argument mapping callable.
    Returns:
        _T: Mapped domain value.
    Assumptions:
        Pydantic validation errors and domain invariant errors are both `ValueError`.
    Raises:
        BacktestQueueTransportError: If body does not match the contract.
    Side Effects:
        None.
    """
    try:
        return build()
    except ValueError as error:
        raise BacktestQueueTransportError(f"Backtest queue response is malformed: {error}") from error
