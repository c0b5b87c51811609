# File: mediasense/core/shared_types.py

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class TimeRange:
    """
    Value Object representing a valid span of media time.
    Enforces that start_seconds is strictly before end_seconds.
    """
    start_seconds: float
    end_seconds: float

    def __post_init__(self):
        if self.start_seconds < 0 or self.end_seconds < 0:
            raise ValueError("Timestamps cannot be negative.")
        if self.start_seconds >= self.end_seconds:
            raise ValueError(f"Start time ({self.start_seconds}) must be before end time ({self.end_seconds}).")

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds

    @classmethod
    def spanning(cls, starts: Iterable[Optional[float]], ends: Iterable[Optional[float]]) -> Optional["TimeRange"]:
        """
        Smallest range covering the given timestamps, ignoring missing ones.
        Returns None when no valid range can be formed.
        """
        valid_starts = [s for s in starts if s is not None]
        valid_ends = [e for e in ends if e is not None]
        if not valid_starts or not valid_ends:
            return None
        start, end = min(valid_starts), max(valid_ends)
        if start < 0 or end <= start:
            return None
        return cls(start, end)
