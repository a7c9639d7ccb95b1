"""Staleness flag parsing."""

import re

from sweepy.exceptions import StalenessParseError

_STALENESS_RE = re.compile(r"^\s*(\d+)\s*([dhms]?)\s*$", re.IGNORECASE)

# Seconds per unit; a bare number means days
_UNIT_SECONDS = {
    "": 86400,
    "d": 86400,
    "h": 3600,
    "m": 60,
    "s": 1,
}


def parse_staleness(value: str) -> int:
    """
    Convert a staleness flag value to whole days.

    Accepts a bare non-negative integer (days) or a number with one of the
    suffixes d, h, m or s. Partial days are truncated, so "47h" is 1.

    Raises:
        StalenessParseError: If the value is not in one of those forms
    """
    match = _STALENESS_RE.match(value or "")
    if not match:
        raise StalenessParseError(
            f"Invalid staleness {value!r}: use a whole number of days or e.g. 30d, 48h"
        )
    amount, unit = int(match.group(1)), match.group(2).lower()
    return amount * _UNIT_SECONDS[unit] // 86400
