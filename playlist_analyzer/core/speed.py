"""Playback speed projections."""

import math
from dataclasses import dataclass
from typing import Tuple

from playlist_analyzer.core.duration import format_long

# Speeds shown in the summary sheet and the default API response
SUMMARY_SPEEDS: Tuple[float, ...] = (1, 1.25, 1.5, 1.75, 2)

# Speeds compared in the speed analysis sheet, ascending
COMPARISON_SPEEDS: Tuple[float, ...] = (1, 1.25, 1.5, 1.75, 2, 2.25, 2.5)


@dataclass(frozen=True)
class SpeedProjection:
    """Duration of some content when played back at a given speed."""

    speed_multiplier: float
    projected_duration_seconds: int
    formatted: str


def project(base_seconds: int, speed: float) -> SpeedProjection:
    """
    Project a duration onto a playback speed.

    Args:
        base_seconds: Duration at normal speed
        speed: Playback speed multiplier (must be positive)

    Returns:
        SpeedProjection with floor(base_seconds / speed) seconds

    Raises:
        ValueError: If speed is not positive
    """
    if speed <= 0:
        raise ValueError(f"Playback speed must be positive, got {speed}")

    projected = math.floor(base_seconds / speed)
    return SpeedProjection(
        speed_multiplier=speed,
        projected_duration_seconds=projected,
        formatted=format_long(projected).formatted,
    )


def time_saved(base_seconds: int, speed: float) -> int:
    """Seconds saved by watching at ``speed`` instead of normal speed."""
    return base_seconds - project(base_seconds, speed).projected_duration_seconds


def speed_label(speed: float) -> str:
    """Render a speed multiplier as "1x", "1.25x", "2x"."""
    return f"{speed:g}x"
