from kioku.card import CardProgress, create_initial_progress
from kioku.review_log import ReviewLog
from kioku.scheduler import Scheduler
from kioku.settings import Settings
from kioku.state import CardState
from kioku.grade import Grade

from datetime import datetime, timedelta, timezone
import json
import pytest

NOW = datetime(2024, 3, 10, 12, 30, 0, 0, timezone.utc)


class TestCardProgress:
    def test_create_initial_progress(self):
        settings = Settings(starting_ease=2.5)
        card = create_initial_progress(42, settings=settings, now=NOW)

        assert card.item_id == 42
        assert card.state == CardState.New
        assert card.ease_factor == 2.5
        assert card.interval == 0
        assert card.due == NOW
        assert card.learning_step == 0
        assert card.repetitions == 0
        assert card.lapses == 0
        assert card.last_review is None

    def test_create_initial_progress_defaults(self):
        card = create_initial_progress(1)

        assert card.ease_factor == Settings().starting_ease
        assert card.due.tzinfo == timezone.utc
        # new cards should be due immediately after creation
        assert card.is_due(datetime.now(timezone.utc))

    def test_is_due(self):
        card = create_initial_progress(1, now=NOW)

        assert card.is_due(NOW)
        assert card.is_due(NOW + timedelta(seconds=1))
        assert not card.is_due(NOW - timedelta(seconds=1))

    def test_dict_serialize(self):
        scheduler = Scheduler()
        card = create_initial_progress(1, now=NOW)

        # card object is not naturally JSON serializable
        with pytest.raises(TypeError):
            json.dumps(card.__dict__)

        assert type(json.dumps(card.to_dict())) is str
        assert CardProgress.from_dict(card.to_dict()) == card

        reviewed_card, _ = scheduler.review_card(card, Grade.Good, NOW)
        copied_reviewed_card = CardProgress.from_dict(reviewed_card.to_dict())

        assert vars(reviewed_card) == vars(copied_reviewed_card)
        assert card.to_dict() != reviewed_card.to_dict()

    def test_json_serialize(self):
        card = CardProgress(
            item_id=9,
            state=CardState.Relearning,
            ease_factor=1.9,
            interval=4,
            due=NOW,
            learning_step=1,
            repetitions=0,
            lapses=3,
            last_review=NOW - timedelta(minutes=10),
        )

        copied_card = CardProgress.from_json(card.to_json())

        assert copied_card == card
        assert copied_card.to_json() == card.to_json()


class TestReviewLog:
    def test_json_serialize(self):
        scheduler = Scheduler()
        card = create_initial_progress(1, now=NOW)

        _, review_log = scheduler.review_card(card, Grade.Again, NOW, review_duration=3000)

        # ReviewLog object is not naturally JSON-serializable
        with pytest.raises(TypeError):
            json.dumps(review_log.__dict__)

        copied_review_log = ReviewLog.from_json(review_log.to_json())
        assert copied_review_log == review_log
        assert copied_review_log.previous_state == CardState.New

        copied_review_log = ReviewLog.from_dict(review_log.to_dict())
        assert copied_review_log == review_log
