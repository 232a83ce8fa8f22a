"""
kioku.card
----------

This module defines the CardProgress class.

Classes:
    CardProgress: The scheduling state of one item of a deck.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
import json
from typing import TypedDict
from typing_extensions import Self
from kioku.settings import Settings
from kioku.state import CardState


class CardProgressDict(TypedDict):
    """
    JSON-serializable dictionary representation of a CardProgress object.
    """

    item_id: int
    state: int
    ease_factor: float
    interval: int
    due: str
    learning_step: int
    repetitions: int
    lapses: int
    last_review: str | None


@dataclass(init=False)
class CardProgress:
    """
    Represents the study progress of a single vocabulary word or grammar point.

    Attributes:
        item_id: The id of the item, unique within its deck.
        state: The card's current learning state.
        ease_factor: The multiplier applied to the interval on each successful review.
        interval: The current review spacing in days, or 0 if the card has not graduated.
        due: The date and time when the card is due next.
        learning_step: The card's current learning or relearning step, or 0 outside of those states.
        repetitions: The number of consecutive successful answers since the last reset.
        lapses: The number of times the card was forgotten while in the Review state.
        last_review: The date and time of the card's last review.
    """

    item_id: int
    state: CardState
    ease_factor: float
    interval: int
    due: datetime
    learning_step: int
    repetitions: int
    lapses: int
    last_review: datetime | None

    def __init__(
        self,
        item_id: int,
        state: CardState = CardState.New,
        ease_factor: float = Settings.starting_ease,
        interval: int = 0,
        due: datetime | None = None,
        learning_step: int = 0,
        repetitions: int = 0,
        lapses: int = 0,
        last_review: datetime | None = None,
    ) -> None:
        self.item_id = item_id
        self.state = state
        self.ease_factor = ease_factor
        self.interval = interval

        if due is None:
            due = datetime.now(timezone.utc)
        self.due = due

        self.learning_step = learning_step
        self.repetitions = repetitions
        self.lapses = lapses
        self.last_review = last_review

    def is_due(self, now: datetime) -> bool:
        """
        Returns whether the card may be studied at the given date and time.
        """

        return self.due <= now

    def to_dict(self) -> CardProgressDict:
        """
        Returns a JSON-serializable dictionary representation of the CardProgress object.

        This method is specifically useful for storing CardProgress objects in a key-value store.

        Returns:
            A dictionary representation of the CardProgress object.
        """

        return {
            "item_id": self.item_id,
            "state": self.state.value,
            "ease_factor": self.ease_factor,
            "interval": self.interval,
            "due": self.due.isoformat(),
            "learning_step": self.learning_step,
            "repetitions": self.repetitions,
            "lapses": self.lapses,
            "last_review": self.last_review.isoformat() if self.last_review else None,
        }

    @classmethod
    def from_dict(cls, source_dict: CardProgressDict) -> Self:
        """
        Creates a CardProgress object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing CardProgress object.

        Returns:
            A CardProgress object created from the provided dictionary.
        """

        return cls(
            item_id=int(source_dict["item_id"]),
            state=CardState(int(source_dict["state"])),
            ease_factor=float(source_dict["ease_factor"]),
            interval=int(source_dict["interval"]),
            due=datetime.fromisoformat(source_dict["due"]),
            learning_step=int(source_dict["learning_step"]),
            repetitions=int(source_dict["repetitions"]),
            lapses=int(source_dict["lapses"]),
            last_review=(
                datetime.fromisoformat(source_dict["last_review"])
                if source_dict["last_review"]
                else None
            ),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the CardProgress object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the CardProgress object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a CardProgress object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing CardProgress object.

        Returns:
            Self: A CardProgress object created from the JSON string.
        """

        source_dict: CardProgressDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


def create_initial_progress(
    item_id: int, settings: Settings | None = None, now: datetime | None = None
) -> CardProgress:
    """
    Creates the progress record of an item that has never been studied.

    Args:
        item_id: The id of the item.
        settings: The settings of the item's deck. Defaults to Settings().
        now: The creation date and time, which is also the card's due date. Defaults to the current UTC time.

    Returns:
        CardProgress: A New-state card that is due immediately.
    """

    if settings is None:
        settings = Settings()

    if now is None:
        now = datetime.now(timezone.utc)

    return CardProgress(
        item_id=item_id,
        state=CardState.New,
        ease_factor=settings.starting_ease,
        interval=0,
        due=now,
        learning_step=0,
        repetitions=0,
        lapses=0,
        last_review=None,
    )


__all__ = ["CardProgress", "create_initial_progress"]
