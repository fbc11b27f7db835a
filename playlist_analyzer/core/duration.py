"""Compact duration encoding codec and human-readable duration formatting.

Durations arrive from the upstream API in the compact form ``PT#H#M#S``
(every component optional, integers only). This module converts them into
whole seconds and renders seconds back into the short ``H:MM:SS`` form and
the long ``1d 2h 3m 4s`` form used by API responses and exported reports.
"""

import re
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


class MalformedDurationError(ValueError):
    """Raised when a duration string does not follow the compact encoding."""

    pass


@dataclass(frozen=True)
class DurationParseResult:
    """Result of parsing a compact duration string.

    ``valid`` tells a genuine zero-length duration apart from a value that
    could not be parsed (both carry ``seconds == 0``).
    """

    seconds: int
    valid: bool


@dataclass(frozen=True)
class DurationBreakdown:
    """Seconds decomposed into days, hours, minutes and seconds."""

    days: int
    hours: int
    minutes: int
    seconds: int
    formatted: str


def parse_duration(raw: Any) -> DurationParseResult:
    """
    Parse a compact duration string.

    Args:
        raw: Duration as received from the API (e.g. "PT1H2M10S")

    Returns:
        DurationParseResult with the total seconds and a validity flag
    """
    if not isinstance(raw, str):
        return DurationParseResult(seconds=0, valid=False)

    match = DURATION_PATTERN.fullmatch(raw.strip())
    if not match:
        return DurationParseResult(seconds=0, valid=False)

    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    total = hours * SECONDS_PER_HOUR + minutes * SECONDS_PER_MINUTE + seconds
    return DurationParseResult(seconds=total, valid=True)


def parse_duration_strict(raw: Any) -> int:
    """
    Parse a compact duration string, rejecting malformed values.

    Args:
        raw: Duration as received from the API

    Returns:
        Total duration in seconds

    Raises:
        MalformedDurationError: If the value does not match the encoding
    """
    result = parse_duration(raw)
    if not result.valid:
        raise MalformedDurationError(f"Malformed duration: {raw!r}")
    return result.seconds


def decode_duration(raw: Any) -> int:
    """
    Decode a compact duration string into seconds.

    Malformed values decode to 0 so one bad record never aborts an
    aggregation.

    Args:
        raw: Duration as received from the API

    Returns:
        Total duration in seconds (0 when malformed)
    """
    try:
        return parse_duration_strict(raw)
    except MalformedDurationError:
        logger.debug("malformed_duration", raw=raw)
        return 0


def format_short(seconds: int) -> str:
    """
    Format seconds as "H:MM:SS", or "M:SS" when under one hour.

    Args:
        seconds: Non-negative number of seconds

    Returns:
        Short duration string (e.g. "1:01:01", "0:59")
    """
    hours, remainder = divmod(seconds, SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, SECONDS_PER_MINUTE)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_long(seconds: int) -> DurationBreakdown:
    """
    Decompose seconds into days, hours, minutes and seconds.

    Only non-zero components appear in ``formatted``; zero seconds yields
    an empty string.

    Args:
        seconds: Non-negative number of seconds

    Returns:
        DurationBreakdown (e.g. formatted "1d 1h 1m 1s" for 90061)

    Raises:
        ValueError: If seconds is negative
    """
    if seconds < 0:
        raise ValueError(f"Duration must not be negative, got {seconds}")

    days, remainder = divmod(seconds, SECONDS_PER_DAY)
    hours, remainder = divmod(remainder, SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, SECONDS_PER_MINUTE)

    parts = []
    for value, unit in ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s")):
        if value > 0:
            parts.append(f"{value}{unit}")

    return DurationBreakdown(
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=secs,
        formatted=" ".join(parts),
    )
