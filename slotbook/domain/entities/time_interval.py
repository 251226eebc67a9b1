from __future__ import annotations

from dataclasses import dataclass

MINUTES_PER_DAY = 1440  # also the end-of-day sentinel


@dataclass(frozen=True)
class Interval:
    start: int  # minutes since midnight
    end: int

    @property
    def is_proper(self) -> bool:
        return self.start >= 0 and self.end > self.start

    @property
    def minutes(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> str:
        return _hhmm(self.start)

    @property
    def end_time(self) -> str:
        return _hhmm(self.end)

    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"


def _hhmm(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
