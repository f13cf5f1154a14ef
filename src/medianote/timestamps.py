"""Timestamp formatting and parsing.

Markers are ``HH:MM:SS`` with no cap on hours, so ``100:00:00`` is a valid
marker for a very long recording. Link suffixes may also be a bare count of
seconds.
"""

from __future__ import annotations

import re

from medianote.errors import TimestampParseError

_HMS_RE = re.compile(r"^(\d+):([0-5]\d):([0-5]\d)$")
_SECONDS_RE = re.compile(r"^\d+$")


def format_timestamp(seconds: int | float) -> str:
    """Return *seconds* as zero-padded ``HH:MM:SS``. Fractions are dropped."""
    if seconds < 0:
        raise ValueError(f"negative offset: {seconds}")
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


def parse_timestamp(text: str) -> int:
    """Return the second count for an ``hh:mm:ss`` literal or a bare integer."""
    value = text.strip()
    m = _HMS_RE.match(value)
    if m:
        hours, mins, secs = (int(g) for g in m.groups())
        return hours * 3600 + mins * 60 + secs
    if _SECONDS_RE.match(value):
        return int(value)
    raise TimestampParseError(f"failed to parse timestamp: {text!r}")


def split_link_target(target: str) -> tuple[str, int | None]:
    """Split ``path::suffix`` into the path and its offset in seconds.

    A target without ``::`` has no offset and returns ``None``. Callers treat
    ``None`` and ``0`` alike: open the file without seeking.
    """
    if "::" not in target:
        return target, None
    path, suffix = target.rsplit("::", 1)
    if not suffix:
        return path, None
    return path, parse_timestamp(suffix)
