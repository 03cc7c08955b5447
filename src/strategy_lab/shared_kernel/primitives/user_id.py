from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserId:
    """
    UserId — identifier of the account that owns backtest jobs.

    Related:
      - src/strategy_lab/contexts/backtest_queue/domain/entities/backtest_job_snapshot.py
      - src/strategy_lab/contexts/backtest_queue/domain/value_objects/user_profile_snapshot.py
    """

    value: int

    def __post_init__(self) -> None:
        """
        Validate positive integer value of user identifier.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Queue API identifies users by positive integer keys.
        Raises:
            ValueError: If `value` is not a positive integer.
        Side Effects:
            None.
        """
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"UserId requires int value, got {self.value!r}")
        if self.value <= 0:
            raise ValueError(f"UserId must be > 0, got {self.value}")

    @classmethod
    def from_string(cls, raw_value: str) -> UserId:
        """
        Parse user identifier from decimal string representation.

        Args:
            raw_value: Raw decimal string.
        Returns:
            UserId: Parsed user id value object.
        Assumptions:
            Input string is expected to be non-empty and base-10.
        Raises:
            ValueError: If parsing fails.
        Side Effects:
            None.
        """
        stripped = raw_value.strip()
        if not stripped:
            raise ValueError("UserId.from_string requires non-empty value")
        return cls(int(stripped, 10))

    def __str__(self) -> str:
        return str(self.value)
