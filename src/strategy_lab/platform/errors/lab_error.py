from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

_VALIDATION_ERROR_CODE = "validation_error"


@dataclass(frozen=True, slots=True)
class LabError(Exception):
    """
    LabError — error surfaced to the strategy editor and queue monitor views.

    `code` is the token views branch on (`validation_error`, `quota_limit`,
    `backtest_queue_unavailable`, ...); `details` is frozen into sorted plain
    structures so two errors built from equal inputs serialize identically.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/errors.py
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
    """

    code: str
    message: str
    details: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        """
        Trim code and message and copy details into plain sorted containers.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Detail values are JSON-like; anything else is kept as its `str()` form.
        Raises:
            ValueError: If code or message is blank after trimming.
            TypeError: If details is given but is not a mapping.
        Side Effects:
            Replaces frozen fields through `object.__setattr__`.
        """
        code = self.code.strip()
        message = self.message.strip()
        if not code:
            raise ValueError("LabError.code must be non-empty")
        if not message:
            raise ValueError("LabError.message must be non-empty")
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "message", message)

        if self.details is not None:
            if not isinstance(self.details, Mapping):
                raise TypeError("LabError.details must be a mapping when provided")
            object.__setattr__(self, "details", _plain(self.details))

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @property
    def is_validation_error(self) -> bool:
        return self.code == _VALIDATION_ERROR_CODE

    @property
    def focus_field(self) -> str | None:
        """
        Return the configuration field the editor should scroll to, if any.

        Args:
            None.
        Returns:
            str | None: `path` of the first validation item, or None.
        Assumptions:
            Validation items are already ordered by field priority.
        Raises:
            None.
        Side Effects:
            None.
        """
        if not self.is_validation_error or self.details is None:
            return None
        items = self.details.get("errors") or []
        for item in items:
            if isinstance(item, Mapping) and item.get("path"):
                return str(item["path"])
        return None

    def to_payload(self) -> dict[str, Any]:
        """Return `{"error": {"code", "message", "details"}}` with a fresh details dict."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": dict(self.details or {}),
            }
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _plain(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_plain(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
