from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from mealplan.core.errors import ParseError, ValidationError
from mealplan.utils.validators import minutes_of_day, normalize_time


@dataclass(frozen=True)
class TimeInterval:
    """Half-open time-of-day interval ``[start, end)`` in ``HH:MM``."""

    start: str
    end: str

    @classmethod
    def parse(cls, time_start: Union[str, int, None], time_end: Union[str, int, None]) -> "TimeInterval":
        start = normalize_time(time_start, "time_start")
        end = normalize_time(time_end, "time_end")
        if minutes_of_day(end) <= minutes_of_day(start):
            raise ValidationError("time_end", "time_end must be after time_start")
        return cls(start, end)

    @classmethod
    def of_block(cls, block) -> "TimeInterval":
        """Interval of a persisted block; unreadable values raise ``ParseError``."""
        try:
            return cls(
                normalize_time(block.time_start, "time_start"),
                normalize_time(block.time_end, "time_end"),
            )
        except ValidationError as exc:
            raise ParseError(f"block {block.id}: {exc.message}") from exc

    @property
    def start_minute(self) -> int:
        return minutes_of_day(self.start)

    @property
    def end_minute(self) -> int:
        return minutes_of_day(self.end)

    def overlaps(self, other: "TimeInterval") -> bool:
        # Touching intervals (end == other.start) do not overlap.
        return self.start_minute < other.end_minute and other.start_minute < self.end_minute

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"
