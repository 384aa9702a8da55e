"""Time representation parsing.

Every component that needs to interpret a time string goes through
``parse_time``. Accepted forms:

- ``HH:MM:SS`` / ``HH:MM:SS.mmm``
- ``MM:SS`` / ``MM:SS.mmm``
- plain seconds, integer or fractional (``"45"``, ``"45.25"``, ``45.25``)
"""
import math
import re
from typing import Union

from .errors import InvalidTimeFormat, MissingTime

TimeInput = Union[str, int, float, None]

_EXPECTED = "Expected HH:MM:SS.mmm, MM:SS.mmm, or a number of seconds."

_WHOLE = re.compile(r"[0-9]+")
_DECIMAL = re.compile(r"[0-9]+(?:\.[0-9]+)?|\.[0-9]+")


def _finish(seconds: float, raw: TimeInput) -> float:
    if not math.isfinite(seconds) or seconds < 0:
        raise InvalidTimeFormat(f'Invalid time value: "{raw}". Time must be a non-negative number of seconds.')
    return seconds


def parse_time(value: TimeInput) -> float:
    """
    Parse a time representation into seconds.

    Args:
        value: Time string or number of seconds

    Returns:
        Seconds as a float, never rounded

    Raises:
        MissingTime: If value is None
        InvalidTimeFormat: If value cannot be interpreted
    """
    if value is None:
        raise MissingTime("Time input cannot be empty (got None).")

    if isinstance(value, bool):
        raise InvalidTimeFormat(f'Invalid time format: "{value}". {_EXPECTED}')

    if isinstance(value, (int, float)):
        return _finish(float(value), value)

    text = str(value).strip()
    if not text:
        raise InvalidTimeFormat("Time string cannot be empty after trimming.")

    if ":" in text:
        parts = text.split(":")
        if len(parts) not in (2, 3):
            raise InvalidTimeFormat(f'Invalid time format: "{value}". {_EXPECTED}')
        *whole, secs = parts
        if not all(_WHOLE.fullmatch(part) for part in whole) or not _DECIMAL.fullmatch(secs):
            raise InvalidTimeFormat(f'Invalid time string: "{value}". {_EXPECTED}')
        seconds = 0.0
        for part in whole:
            seconds = (seconds + int(part)) * 60
        return _finish(seconds + float(secs), value)

    if not _DECIMAL.fullmatch(text):
        raise InvalidTimeFormat(f'Invalid time format: "{value}". {_EXPECTED}')
    return _finish(float(text), value)


def format_timestamp(seconds: float) -> str:
    """Render seconds as HH:MM:SS.mmm."""
    millis = int(round(seconds * 1000))
    hours, rem = divmod(millis, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, ms = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{ms:03d}"


def format_seconds(seconds: float) -> str:
    """Render seconds for ffmpeg seek arguments (``12.5``, ``30``)."""
    text = f"{seconds:.6f}".rstrip("0").rstrip(".")
    return text or "0"
