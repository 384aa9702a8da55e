"""Timestamp scraping from free-form video analysis text.

This is a purely syntactic scan: it trusts the analysis service to emit
well-formed ``HH:MM:SS[.fff]`` tokens and does not try to tell timestamps
apart from other numbers in the text.
"""
import re
from typing import List

from .errors import NoTimestampsFound
from .intervals import Interval, TimestampPair

TIMESTAMP_PATTERN = re.compile(r"\b(\d{2}:\d{2}:\d{2}(?:\.\d+)?)\b")


def find_timestamps(text: str) -> List[str]:
    """Return every timestamp token in order of appearance."""
    return TIMESTAMP_PATTERN.findall(text or "")


def extract_timestamp_pairs(text: str) -> List[TimestampPair]:
    """
    Pair consecutive timestamp tokens into (start, end) candidates.

    Tokens 0/1 form the first pair, 2/3 the second, and so on. A trailing
    token without a partner is dropped.

    Raises:
        NoTimestampsFound: If fewer than two tokens are present
    """
    matches = find_timestamps(text)
    pairs = [
        TimestampPair(start_time=matches[i], end_time=matches[i + 1])
        for i in range(0, len(matches) - 1, 2)
    ]
    if not pairs:
        raise NoTimestampsFound(
            f"No valid timestamps found in analysis response (found {len(matches)} timestamp token(s), need at least 2)"
        )
    return pairs


def pairs_to_intervals(pairs: List[TimestampPair]) -> List[Interval]:
    """Convert scraped pairs to validated intervals."""
    return [pair.to_interval() for pair in pairs]
