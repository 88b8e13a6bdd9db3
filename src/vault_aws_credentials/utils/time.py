"""Time and duration helpers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

# Units accepted by Vault and Go's time.ParseDuration.
_DURATION_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_BARE_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Parse a Vault/Go style duration such as ``30m`` or ``1h30m``.

    Bare numbers (``"1800"`` or ``1800``) are treated as seconds, which is
    how Vault itself interprets a unit-less ``ttl``.

    Raises ``ValueError`` for empty, negative, or unparseable input.
    """
    if isinstance(value, timedelta):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    elif isinstance(value, (int, float)):
        result = timedelta(seconds=value)
    else:
        text = value.strip()
        if not text:
            raise ValueError("Duration must not be empty")
        if text.startswith("-"):
            raise ValueError(f"Duration must not be negative: {value!r}")
        text = text.lstrip("+")
        if _BARE_NUMBER.fullmatch(text):
            result = timedelta(seconds=float(text))
        else:
            result = _parse_units(text, value)

    if result < timedelta(0):
        raise ValueError(f"Duration must not be negative: {value!r}")
    return result


def _parse_units(text: str, original: str) -> timedelta:
    total = timedelta(0)
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"Invalid duration: {original!r}")
    return total


def format_duration(value: timedelta) -> str:
    """Render a duration as whole seconds (``"1800s"``) for Vault requests."""
    return f"{int(value.total_seconds())}s"
