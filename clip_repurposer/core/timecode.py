"""Clip-time string codec.

Clip suggestions and legacy transcript markers express time as ``mm:ss``
or ``hh:mm:ss``. Everything downstream works in integer seconds.

RULES:
- Exactly 2 parts → mm:ss; exactly 3 parts → hh:mm:ss; anything else is malformed
- Every part must be a non-negative integer; no upper bound is enforced
- Malformed input raises ClipTimeError, never silently coerces to 0
"""

from __future__ import annotations


class ClipTimeError(ValueError):
    """Raised when a clip-time string cannot be parsed."""


def parse_clip_time(value: str) -> int:
    """Parse ``mm:ss`` or ``hh:mm:ss`` into integer seconds.

    Args:
        value: Clip-time string, e.g. ``"01:05"`` or ``"01:02:03"``.

    Returns:
        Offset in whole seconds (``"01:05"`` → 65, ``"01:02:03"`` → 3723).

    Raises:
        ClipTimeError: If the string has the wrong shape or a non-integer part.
    """
    if not isinstance(value, str):
        raise ClipTimeError("Clip time must be a string, got {!r}".format(value))

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ClipTimeError(
            "Malformed clip time '{}': expected mm:ss or hh:mm:ss".format(value)
        )

    numbers = []
    for part in parts:
        part = part.strip()
        if not (part.isascii() and part.isdigit()):
            raise ClipTimeError(
                "Malformed clip time '{}': '{}' is not a non-negative integer".format(
                    value, part
                )
            )
        numbers.append(int(part))

    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds

    hours, minutes, seconds = numbers
    return hours * 3600 + minutes * 60 + seconds


def format_timestamp(seconds: float) -> str:
    """Format seconds as a zero-padded ``MM:SS`` transcript marker label.

    Minutes are not wrapped into hours, so a 75-minute offset renders as
    ``"75:00"``, which parse_clip_time reads back as 4500.
    """
    total = int(seconds)
    if total < 0:
        raise ValueError("Timestamp cannot be negative: {}".format(seconds))
    return "{:02d}:{:02d}".format(total // 60, total % 60)
