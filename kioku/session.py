"""
kioku.session
-------------

This module defines the StudySession class, the thin controller between a deck's scheduler
and its storage.

One StudySession serves one deck. Vocabulary lists, reverse-direction lists and grammar lists
differ only in their item ids, storage key and settings.

Classes:
    StudySession: Picks the next card of a deck and records answers.
    TodayStats: What is left to study today.
    OverallStats: How the cards of a deck are distributed over the learning states.
    DifficultItem: An item that has been forgotten at least once.
"""

from __future__ import annotations
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
import logging
from typing import Any
from typing_extensions import assert_never
from kioku.card import CardProgress, create_initial_progress
from kioku.clock import Clock, utc_now
from kioku.grade import Grade
from kioku.queue import StudyQueue, pick_next
from kioku.review_log import ReviewLog
from kioku.scheduler import Scheduler
from kioku.settings import Settings
from kioku.state import CardState
from kioku.storage import Storage, StorageError

logger = logging.getLogger(__name__)


@dataclass
class TodayStats:
    """
    What is left to study today.

    Attributes:
        new_remaining: New cards that may still be started today.
        review_remaining: Review-state cards due today.
        learning_remaining: Learning- and Relearning-state cards due now.
        completed_today: New cards started plus reviews completed today.
    """

    new_remaining: int
    review_remaining: int
    learning_remaining: int
    completed_today: int


@dataclass
class OverallStats:
    """
    How the cards of a deck are distributed over the learning states.

    Attributes:
        total: The number of items in the deck.
        new: Items never studied.
        learning: Learning- and Relearning-state cards.
        young: Review-state cards below the mature interval.
        mature: Review-state cards at or beyond the mature interval.
    """

    total: int
    new: int
    learning: int
    young: int
    mature: int


@dataclass
class DifficultItem:
    """
    An item that has been forgotten at least once.

    Attributes:
        item_id: The id of the item.
        lapses: How many times the item was forgotten in the Review state.
    """

    item_id: int
    lapses: int


class StudySession:
    """
    Wraps a deck's Scheduler with storage and a clock.

    Every answer reads the deck's whole progress collection, updates one record and writes the
    whole collection back. A single writer per storage key is assumed.

    Attributes:
        item_ids: The ids of every item of the deck, in study order for new cards.
        storage: The key-value store holding the deck's progress.
        storage_key: The key of the deck's progress collection.
        scheduler: The deck's scheduler.
        tz: The timezone whose calendar days delimit "today".
    """

    def __init__(
        self,
        item_ids: Iterable[int],
        storage: Storage,
        storage_key: str,
        settings: Settings | None = None,
        clock: Clock = utc_now,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.item_ids = list(dict.fromkeys(item_ids))
        self._item_id_set = set(self.item_ids)
        self.storage = storage
        self.storage_key = storage_key
        self.scheduler = Scheduler(settings=settings, clock=clock)
        self.tz = tz

        self._progress_map: dict[int, CardProgress] | None = None

    @property
    def settings(self) -> Settings:
        return self.scheduler.settings

    @property
    def today_key(self) -> str:
        return f"{self.storage_key}-today-stats"

    @property
    def practice_dates_key(self) -> str:
        return f"{self.storage_key}-practice-dates"

    @property
    def review_logs_key(self) -> str:
        return f"{self.storage_key}-review-logs"

    @property
    def progress_map(self) -> dict[int, CardProgress]:
        if self._progress_map is None:
            self._progress_map = self._load_progress()
        return self._progress_map

    def _load_progress(self) -> dict[int, CardProgress]:
        saved = self.storage.load(self.storage_key)
        if saved is None:
            return {}

        try:
            cards = [CardProgress.from_dict(card_dict) for card_dict in saved]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Malformed progress collection under {self.storage_key!r}"
            ) from e

        logger.debug("Loaded %d cards from %s", len(cards), self.storage_key)
        return {card.item_id: card for card in cards}

    def _save_progress(self) -> None:
        self.storage.save(
            self.storage_key, [card.to_dict() for card in self.progress_map.values()]
        )

    def _now(self) -> datetime:
        # stored datetimes are UTC whatever timezone the clock reports in
        return self.scheduler.clock().astimezone(timezone.utc)

    def _today(self) -> str:
        return self._now().astimezone(self.tz).date().isoformat()

    def _load_today(self) -> dict[str, Any]:
        today = self._today()
        saved = self.storage.load(self.today_key)

        # counters belong to one calendar day
        if saved is None or saved.get("date") != today:
            return {
                "date": today,
                "new_studied": 0,
                "reviews_completed": 0,
                "correct": 0,
                "incorrect": 0,
            }
        return saved

    def _record_answer(self, review_log: ReviewLog) -> None:
        today_data = self._load_today()

        if review_log.previous_state == CardState.New:
            today_data["new_studied"] += 1
        elif review_log.previous_state == CardState.Review:
            today_data["reviews_completed"] += 1

        if review_log.grade == Grade.Good:
            today_data["correct"] += 1
        else:
            today_data["incorrect"] += 1

        self.storage.save(self.today_key, today_data)

        practice_dates = self.practice_dates()
        if today_data["date"] not in practice_dates:
            practice_dates.append(today_data["date"])
            self.storage.save(self.practice_dates_key, sorted(practice_dates))

    def _append_review_log(self, review_log: ReviewLog) -> None:
        saved = list(self.storage.load(self.review_logs_key) or [])
        saved.append(review_log.to_dict())
        self.storage.save(self.review_logs_key, saved)

    def _get_or_create(self, item_id: int) -> CardProgress:
        if item_id not in self._item_id_set:
            raise KeyError(f"Item {item_id} is not part of deck {self.storage_key!r}")

        card = self.progress_map.get(item_id)
        if card is None:
            card = create_initial_progress(item_id, settings=self.settings, now=self._now())
        return card

    def all_progress(self) -> list[CardProgress]:
        """
        Returns a card for every item of the deck, creating New-state cards for items that were never studied.
        """

        now = self._now()
        return [
            self.progress_map.get(item_id)
            or create_initial_progress(item_id, settings=self.settings, now=now)
            for item_id in self.item_ids
        ]

    def queue(self) -> StudyQueue:
        return self.scheduler.build_queue(
            self.all_progress(), now=self._now().astimezone(self.tz)
        )

    def today_stats(self) -> TodayStats:
        queue = self.queue()
        today_data = self._load_today()
        new_remaining = max(
            0, self.settings.new_cards_per_day - today_data["new_studied"]
        )

        return TodayStats(
            new_remaining=min(new_remaining, len(queue.new)),
            review_remaining=len(queue.due),
            learning_remaining=len(queue.learning),
            completed_today=today_data["new_studied"] + today_data["reviews_completed"],
        )

    def next_card(self) -> CardProgress | None:
        """
        Returns the card to study next: learning cards first, then due reviews, then new cards while today's new-card allowance lasts.
        """

        return pick_next(self.queue(), new_remaining=self.today_stats().new_remaining)

    def answer(
        self, item_id: int, grade: Grade, review_duration: int | None = None
    ) -> tuple[CardProgress, CardProgress | None]:
        """
        Answers an item, stores the result and returns the updated card with the next card to study.

        The progress collection is written first, then the review log, today's counters and the
        practice dates. The writes are not transactional: if a later write fails, the card stays
        answered and the error propagates with the statistics left behind.

        Raises:
            KeyError: If the item is not part of the deck.
            StorageError: If the storage cannot be written.
        """

        card = self._get_or_create(item_id)
        updated_card, review_log = self.scheduler.review_card(
            card, grade, review_datetime=self._now(), review_duration=review_duration
        )

        self.progress_map[item_id] = updated_card
        self._save_progress()
        self._append_review_log(review_log)
        self._record_answer(review_log)

        logger.debug(
            "Answered item %s with %s: %s -> %s, due %s",
            item_id,
            grade.name,
            card.state.name,
            updated_card.state.name,
            updated_card.due.isoformat(),
        )

        return updated_card, self.next_card()

    def preview(self, item_id: int, grade: Grade) -> str:
        """
        Raises:
            KeyError: If the item is not part of the deck.
        """

        return self.scheduler.preview(self._get_or_create(item_id), grade)

    def overall_stats(self) -> OverallStats:
        new = learning = young = mature = 0

        for card in self.all_progress():
            match card.state:
                case CardState.New:
                    new += 1
                case CardState.Learning | CardState.Relearning:
                    learning += 1
                case CardState.Review:
                    if card.interval >= self.settings.mature_interval:
                        mature += 1
                    else:
                        young += 1
                case _:
                    assert_never(card.state)

        return OverallStats(
            total=len(self.item_ids),
            new=new,
            learning=learning,
            young=young,
            mature=mature,
        )

    def difficult_items(self, excluded: Iterable[int] = ()) -> list[DifficultItem]:
        """
        Returns the items that were forgotten at least once, most lapses first.

        Args:
            excluded: Item ids to leave out of the list.
        """

        excluded = set(excluded)
        items = [
            DifficultItem(item_id=card.item_id, lapses=card.lapses)
            for card in self.progress_map.values()
            if card.lapses > 0 and card.item_id not in excluded
        ]
        return sorted(items, key=lambda item: item.lapses, reverse=True)

    def practice_dates(self) -> list[str]:
        return list(self.storage.load(self.practice_dates_key) or [])

    def review_logs(self, item_id: int | None = None) -> list[ReviewLog]:
        """
        Returns the deck's stored review logs in answer order, optionally only those of one item.

        Raises:
            StorageError: If the stored review logs are malformed.
        """

        saved = self.storage.load(self.review_logs_key) or []

        try:
            review_logs = [ReviewLog.from_dict(log_dict) for log_dict in saved]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Malformed review logs under {self.review_logs_key!r}"
            ) from e

        if item_id is not None:
            review_logs = [log for log in review_logs if log.item_id == item_id]
        return review_logs

    def reschedule(self, settings: Settings) -> None:
        """
        Switches the deck to new settings and replays every stored review log with them.

        Cards with no stored review logs keep their progress.

        Args:
            settings: The deck's new settings.
        """

        self.scheduler = Scheduler(settings=settings, clock=self.scheduler.clock)

        logs_by_item: dict[int, list[ReviewLog]] = {}
        for review_log in self.review_logs():
            logs_by_item.setdefault(review_log.item_id, []).append(review_log)

        for item_id, review_logs in logs_by_item.items():
            if item_id not in self._item_id_set:
                continue
            card = self.scheduler.create_card(item_id)
            self.progress_map[item_id] = self.scheduler.reschedule_card(card, review_logs)

        self._save_progress()
        logger.info(
            "Rescheduled %d cards of %s", len(logs_by_item), self.storage_key
        )

    def remove(self, item_id: int) -> None:
        """
        Forgets an item's progress and review logs. The item comes back as a New-state card.
        """

        if self.progress_map.pop(item_id, None) is not None:
            self._save_progress()
            logger.debug("Removed progress of item %s", item_id)

        saved = self.storage.load(self.review_logs_key)
        if saved:
            kept = [log_dict for log_dict in saved if log_dict.get("item_id") != item_id]
            if len(kept) != len(saved):
                self.storage.save(self.review_logs_key, kept)

    def reset(self) -> None:
        """
        Clears the deck's progress, review logs, today's counters and practice dates.
        """

        self._progress_map = {}
        self.storage.delete(self.storage_key)
        self.storage.delete(self.today_key)
        self.storage.delete(self.practice_dates_key)
        self.storage.delete(self.review_logs_key)
        logger.info("Reset progress of %s", self.storage_key)


__all__ = [
    "StudySession",
    "TodayStats",
    "OverallStats",
    "DifficultItem",
]
