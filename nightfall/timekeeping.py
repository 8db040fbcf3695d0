"""Timing constants for text reveal and jump scares (milliseconds)."""

from __future__ import annotations

REVEAL_INTERVAL_MS = 50
SCARE_DURATION_MS = 1500
JUMP_SCARE_DELAY_MS = 600
MIN_TEXT_SPEED = 0.1


def normalize_duration(value: object) -> int:
    try:
        duration = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    return max(duration, 0)


def compute_reveal_interval(text_speed: float, *, reduce_animations: bool = False) -> int:
    """Milliseconds per revealed character; ``0`` means show text at once."""
    if reduce_animations:
        return 0
    try:
        speed = float(text_speed)
    except (TypeError, ValueError):
        speed = 1.0
    if speed <= 0:
        return 0
    return max(int(round(REVEAL_INTERVAL_MS / max(speed, MIN_TEXT_SPEED))), 1)
