from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True, slots=True)
class DateRange:
    """
    DateRange — inclusive calendar window of historical data used by one simulation.

    Both bounds are optional because the range is edited field-by-field in a form;
    completeness and ordering are checked by the configuration validator, not here.

    Related:
      - src/strategy_lab/contexts/strategy_config/domain/services/configuration_validator.py
      - src/strategy_lab/contexts/strategy_config/domain/services/engine_payload.py
    """

    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        """
        Validate bound types.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Datetime values are rejected so that ISO serialization stays date-only.
        Raises:
            ValueError: If one of the bounds is not a `date`.
        Side Effects:
            None.
        """
        for label, value in (("start", self.start), ("end", self.end)):
            if value is None:
                continue
            if isinstance(value, datetime) or not isinstance(value, date):
                raise ValueError(f"DateRange.{label} must be a date, got {value!r}")

    def is_complete(self) -> bool:
        """Return True when both bounds are present."""
        return self.start is not None and self.end is not None

    def to_iso_pair(self) -> tuple[str | None, str | None]:
        """Return `(start, end)` as ISO `YYYY-MM-DD` strings."""
        start = self.start.isoformat() if self.start is not None else None
        end = self.end.isoformat() if self.end is not None else None
        return start, end
