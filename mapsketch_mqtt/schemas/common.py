"""
Common Schema Types
==================

Bounded Context: Shared Data Structures

Types:
- Timestamp: validated ISO 8601 timestamp, always timezone aware
"""

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class Timestamp:
    """
    ISO 8601 timestamp carried as text on the wire.

    The value is parsed once at construction; naive timestamps are
    rejected so every message orders unambiguously.

    Example:
        >>> Timestamp.now().value
        '2026-10-19T15:30:45.123456+00:00'
        >>> Timestamp("yesterday")
        Traceback (most recent call last):
        ValueError: Invalid ISO timestamp: 'yesterday'
    """
    value: str

    def __post_init__(self):
        parsed = self.to_datetime()
        if parsed.tzinfo is None:
            raise ValueError(f"Timestamp must carry a UTC offset: {self.value!r}")

    @classmethod
    def now(cls) -> 'Timestamp':
        return cls(datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'Timestamp':
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return cls(dt.isoformat())

    def to_datetime(self) -> datetime:
        """
        Raises:
            ValueError: If the value is not ISO 8601
        """
        try:
            return datetime.fromisoformat(self.value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid ISO timestamp: {self.value!r}") from e

    def to_dict(self) -> str:
        return self.value
