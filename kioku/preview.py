"""
kioku.preview
-------------

Human-readable previews of the delay each answer button would schedule.
"""

from __future__ import annotations
from datetime import timedelta
from kioku.card import CardProgress
from kioku.grade import Grade
from kioku.settings import Settings
from kioku.transition import plan_answer

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1440


def format_interval(minutes: int) -> str:
    """
    Formats a delay given in minutes, e.g. "10 min", "2 hours" or "7 days".
    """

    if minutes < MINUTES_PER_HOUR:
        return f"{minutes} min"

    if minutes < MINUTES_PER_DAY:
        hours = _round_half_up(minutes / MINUTES_PER_HOUR)
        return f"{hours} hour" if hours == 1 else f"{hours} hours"

    days = _round_half_up(minutes / MINUTES_PER_DAY)
    return f"{days} day" if days == 1 else f"{days} days"


def preview_delay(progress: CardProgress, grade: Grade, settings: Settings) -> timedelta:
    """
    Returns the time until the card would be due again if answered with the given grade.
    """

    return plan_answer(progress, grade, settings).delay


def preview_interval(progress: CardProgress, grade: Grade, settings: Settings) -> str:
    """
    Previews what answering a card with the given grade would schedule, without answering it.

    Args:
        progress: The card being previewed. It is not modified.
        grade: The grade to preview.
        settings: The settings of the card's deck.

    Returns:
        str: The formatted delay until the card would be due again.
    """

    delay = preview_delay(progress, grade, settings)
    return format_interval(int(delay.total_seconds()) // 60)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


__all__ = ["format_interval", "preview_delay", "preview_interval"]
