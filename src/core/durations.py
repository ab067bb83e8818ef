"""Duration string parsing.

This module parses Go-style duration strings such as ``15s`` or ``1m30s``
used by the retry timeout flag and environment variable.
"""

from __future__ import annotations

import re

from core.errors import ExportConfigError

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_COMPONENT_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(raw_value: str) -> float:
    """Parse a duration string into seconds.

    Args:
        raw_value: Duration such as ``15s``, ``500ms`` or ``1h2m3s``.

    Returns:
        Duration in seconds.

    Raises:
        ExportConfigError: If the value is empty, negative, or malformed.
    """
    text = raw_value.strip()
    if text in ("0", "+0"):
        return 0.0
    if text.startswith("-"):
        raise ExportConfigError(
            f"Invalid duration '{raw_value}': negative durations are not allowed. "
            "Use a positive value such as 15s."
        )
    text = text.removeprefix("+")
    position = 0
    total_seconds = 0.0
    while position < len(text):
        match = _COMPONENT_PATTERN.match(text, position)
        if match is None:
            _raise_invalid_duration(raw_value)
        total_seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position == 0:
        _raise_invalid_duration(raw_value)
    return total_seconds


def _raise_invalid_duration(raw_value: str) -> None:
    raise ExportConfigError(
        f"Invalid duration '{raw_value}': expected a number with a unit "
        "(ns, us, ms, s, m, h), e.g. 15s or 1m30s."
    )
