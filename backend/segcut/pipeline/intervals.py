"""Interval types shared by the planner and the pipeline."""
from dataclasses import dataclass

from .errors import InvalidInterval
from .timecode import TimeInput, format_timestamp, parse_time


@dataclass(frozen=True)
class Interval:
    """A half-open time window [start, end) in seconds."""
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def __repr__(self):
        return f"Interval({self.start:.2f}-{self.end:.2f}, dur={self.duration:.2f}s)"

    @classmethod
    def from_times(cls, start: TimeInput, end: TimeInput) -> "Interval":
        """Build a validated interval from two time representations."""
        interval = cls(parse_time(start), parse_time(end))
        interval.validate()
        return interval

    def validate(self) -> "Interval":
        """Raise InvalidInterval unless 0 <= start < end."""
        if self.start < 0 or self.end <= self.start:
            raise InvalidInterval(
                f"Invalid interval {self.start}-{self.end}: start must be non-negative "
                "and end must be greater than start"
            )
        return self

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "start_timestamp": format_timestamp(self.start),
            "end_timestamp": format_timestamp(self.end),
        }


@dataclass(frozen=True)
class TimestampPair:
    """Raw start/end strings scraped from analysis text."""
    start_time: str
    end_time: str

    def to_interval(self) -> Interval:
        return Interval.from_times(self.start_time, self.end_time)
