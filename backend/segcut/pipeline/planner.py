"""Keep/remove interval planning.

Both planning modes reduce to one complement walk over a start-sorted remove
set. Overlapping remove intervals are not merged: the cursor only moves
forward, so the part of a later interval that overlaps an earlier one is
absorbed without error.
"""
import logging
import math
from typing import Iterable, List

from .errors import EmptyRetainSet, PreconditionFailed
from .intervals import Interval

logger = logging.getLogger(__name__)


def _check_duration(total_duration: float) -> float:
    if total_duration is None or not math.isfinite(total_duration) or total_duration <= 0:
        raise PreconditionFailed(f"Could not determine a usable video duration (got {total_duration!r})")
    return float(total_duration)


def plan_retain(remove: Iterable[Interval], total_duration: float) -> List[Interval]:
    """
    Compute the intervals to keep given the intervals to remove.

    Args:
        remove: Intervals to discard, in any order, possibly overlapping
        total_duration: Source duration in seconds

    Returns:
        Strictly increasing, non-overlapping, non-empty retain intervals

    Raises:
        PreconditionFailed: If the duration is missing or not positive
        EmptyRetainSet: If nothing would be left
    """
    total_duration = _check_duration(total_duration)
    ordered = sorted(remove, key=lambda interval: interval.start)

    retain = []
    cursor = 0.0
    for interval in ordered:
        if cursor < interval.start:
            retain.append(Interval(cursor, min(interval.start, total_duration)))
        cursor = max(cursor, interval.end)
        if cursor >= total_duration:
            break

    if cursor < total_duration:
        retain.append(Interval(cursor, total_duration))

    if not retain:
        raise EmptyRetainSet("No segments to keep; the entire video would be removed")

    logger.debug(f"Planned {len(retain)} retain interval(s) from {len(ordered)} removal(s): {retain}")
    return retain


def synthesize_keep_removals(keep: Interval, total_duration: float) -> List[Interval]:
    """Build the remove set that leaves only ``keep``."""
    total_duration = _check_duration(total_duration)
    removals = []
    if keep.start > 0:
        removals.append(Interval(0.0, keep.start))
    if keep.end < total_duration:
        removals.append(Interval(keep.end, total_duration))
    return removals


def plan_keep(keep: Interval, total_duration: float) -> List[Interval]:
    """
    Compute the retain set for keeping a single interval.

    Goes through the same complement walk as ``plan_retain``.
    """
    keep.validate()
    return plan_retain(synthesize_keep_removals(keep, total_duration), total_duration)
