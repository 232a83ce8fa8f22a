"""
kioku.scheduler
---------------

This module defines the Scheduler class.

Classes:
    Scheduler: The spaced-repetition scheduler of one deck.
"""

from __future__ import annotations
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing_extensions import Self
from kioku.card import CardProgress, create_initial_progress
from kioku.clock import Clock, utc_now
from kioku.grade import Grade
from kioku.preview import preview_interval
from kioku.queue import StudyQueue, build_queue
from kioku.review_log import ReviewLog
from kioku.settings import Settings, SettingsDict
from kioku.transition import process_answer


@dataclass(init=False)
class Scheduler:
    """
    A simplified SM-2 scheduler with two-button grading.

    Enables answering cards, building study queues and previewing intervals for a single deck.

    Attributes:
        settings: The fixed scheduling parameters of the deck.
        clock: Returns the current timezone-aware UTC datetime whenever no explicit time is given.
    """

    settings: Settings
    clock: Clock

    def __init__(self, settings: Settings | None = None, clock: Clock = utc_now) -> None:
        if settings is None:
            settings = Settings()

        self.settings = settings
        self.clock = clock

    def create_card(self, item_id: int) -> CardProgress:
        """
        Creates the progress record of an item that has never been studied, due now.
        """

        return create_initial_progress(item_id, settings=self.settings, now=self.clock())

    def review_card(
        self,
        card: CardProgress,
        grade: Grade,
        review_datetime: datetime | None = None,
        review_duration: int | None = None,
    ) -> tuple[CardProgress, ReviewLog]:
        """
        Answers a card with a given grade at a given time.

        Args:
            card: The card being answered.
            grade: The grade given to the card.
            review_datetime: The date and time of the answer. Defaults to the scheduler's clock.
            review_duration: The number of milliseconds it took to answer or None if unspecified.

        Returns:
            tuple[CardProgress,ReviewLog]: A tuple containing the updated card and its corresponding review log.

        Raises:
            ValueError: If the `review_datetime` argument is not timezone-aware and set to UTC.
        """

        if review_datetime is None:
            review_datetime = self.clock()

        updated_card = process_answer(card, grade, self.settings, review_datetime)

        review_log = ReviewLog(
            item_id=card.item_id,
            grade=grade,
            review_datetime=review_datetime,
            previous_state=card.state,
            review_duration=review_duration,
        )

        return updated_card, review_log

    def reschedule_card(
        self, card: CardProgress, review_logs: list[ReviewLog]
    ) -> CardProgress:
        """
        Replays a card's review logs with this scheduler's settings.

        Useful after a deck's settings changed, to reschedule its cards as if they had always been
        scheduled with the new settings.

        Args:
            card: The card to be rescheduled.
            review_logs: A list of that card's review logs (order doesn't matter).

        Returns:
            CardProgress: A new card that has been rescheduled with this scheduler.

        Raises:
            ValueError: If any of the review logs belong to a different item.
        """

        for review_log in review_logs:
            if review_log.item_id != card.item_id:
                raise ValueError(
                    f"ReviewLog item_id {review_log.item_id} does not match CardProgress item_id {card.item_id}"
                )

        review_logs = sorted(review_logs, key=lambda log: log.review_datetime)

        if len(review_logs) == 0:
            return create_initial_progress(
                card.item_id, settings=self.settings, now=card.due
            )

        rescheduled_card = create_initial_progress(
            card.item_id,
            settings=self.settings,
            now=review_logs[0].review_datetime,
        )

        for review_log in review_logs:
            rescheduled_card, _ = self.review_card(
                card=rescheduled_card,
                grade=review_log.grade,
                review_datetime=review_log.review_datetime,
            )

        return rescheduled_card

    def preview(self, card: CardProgress, grade: Grade) -> str:
        """
        Returns the human-readable delay that answering the card with the given grade would schedule.
        """

        return preview_interval(card, grade, self.settings)

    def build_queue(
        self, cards: Iterable[CardProgress], now: datetime | None = None
    ) -> StudyQueue:
        """
        Builds the deck's study queue at the given time, defaulting to the scheduler's clock.
        """

        if now is None:
            now = self.clock()

        return build_queue(cards, self.settings, now)

    def to_dict(self) -> SettingsDict:
        """
        Returns a JSON-serializable dictionary representation of the Scheduler's settings.
        """

        return self.settings.to_dict()

    @classmethod
    def from_dict(cls, source_dict: SettingsDict) -> Self:
        """
        Creates a Scheduler object from a dictionary of settings.
        """

        return cls(settings=Settings.from_dict(source_dict))

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Scheduler's settings.
        """

        return self.settings.to_json(indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Scheduler object from a JSON-serialized string of settings.
        """

        return cls(settings=Settings.from_json(source_json))


__all__ = ["Scheduler"]
