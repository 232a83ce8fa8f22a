"""
kioku.queue
-----------

This module builds the study queue of a deck.

Classes:
    StudyQueue: The due, new and learning cards of a deck at a given moment.

Functions:
    sort_by_priority: Orders cards by state priority, then by due date.
    build_queue: Partitions a deck's cards into a StudyQueue.
    pick_next: Chooses the single next card to study from a StudyQueue.
"""

from __future__ import annotations
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing_extensions import assert_never
from kioku.card import CardProgress
from kioku.settings import Settings
from kioku.state import CardState

STATE_PRIORITY = {
    CardState.Relearning: 0,
    CardState.Learning: 1,
    CardState.Review: 2,
    CardState.New: 3,
}


@dataclass
class StudyQueue:
    """
    The cards of a deck that can be studied right now, split into buckets.

    Attributes:
        due: Review-state cards due today, sorted by due date.
        new: New-state cards, at most new_cards_per_day of them.
        learning: Learning- and Relearning-state cards that are due, Relearning first.
    """

    due: list[CardProgress] = field(default_factory=list)
    new: list[CardProgress] = field(default_factory=list)
    learning: list[CardProgress] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.due) + len(self.new) + len(self.learning)


def sort_by_priority(cards: Iterable[CardProgress]) -> list[CardProgress]:
    """
    Returns the cards ordered Relearning, Learning, Review, New, and by ascending due date within a state.
    """

    return sorted(cards, key=lambda card: (STATE_PRIORITY[card.state], card.due))


def build_queue(
    all_progress: Iterable[CardProgress], settings: Settings, now: datetime
) -> StudyQueue:
    """
    Partitions a deck's cards into due, new and learning buckets.

    A Review-state card is due if its due date falls on or before the calendar day of `now`,
    in `now`'s timezone. Learning- and Relearning-state cards must be due to the minute.
    Cards that are not yet due appear in no bucket.

    Args:
        all_progress: Every card of the deck.
        settings: The settings of the deck.
        now: The current date and time, timezone-aware.

    Returns:
        StudyQueue: The sorted and truncated buckets.
    """

    start_of_tomorrow = now.replace(
        hour=0, minute=0, second=0, microsecond=0
    ) + timedelta(days=1)

    due_cards: list[CardProgress] = []
    new_cards: list[CardProgress] = []
    learning_cards: list[CardProgress] = []

    for card in all_progress:
        match card.state:
            case CardState.New:
                new_cards.append(card)
            case CardState.Learning | CardState.Relearning:
                if card.due <= now:
                    learning_cards.append(card)
            case CardState.Review:
                if card.due < start_of_tomorrow:
                    due_cards.append(card)
            case _:
                assert_never(card.state)

    return StudyQueue(
        due=sort_by_priority(due_cards),
        new=new_cards[: settings.new_cards_per_day],
        learning=sort_by_priority(learning_cards),
    )


def pick_next(
    queue: StudyQueue, new_remaining: int | None = None
) -> CardProgress | None:
    """
    Chooses the next card to study: learning cards first, then due cards, then new cards.

    Args:
        queue: The deck's current study queue.
        new_remaining: How many more new cards may be studied today, or None for no further limit.

    Returns:
        The next card, or None if there is nothing left to study.
    """

    if queue.learning:
        return queue.learning[0]

    if queue.due:
        return queue.due[0]

    if queue.new and (new_remaining is None or new_remaining > 0):
        return queue.new[0]

    return None


__all__ = ["StudyQueue", "sort_by_priority", "build_queue", "pick_next"]
