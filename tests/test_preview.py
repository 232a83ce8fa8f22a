from kioku.preview import format_interval, preview_delay, preview_interval
from kioku.transition import process_answer
from kioku.card import CardProgress, create_initial_progress
from kioku.settings import Settings
from kioku.state import CardState
from kioku.grade import Grade

from datetime import datetime, timedelta, timezone
import pytest

NOW = datetime(2024, 3, 10, 12, 30, 0, 0, timezone.utc)


class TestFormatInterval:
    @pytest.mark.parametrize(
        "minutes, expected",
        [
            (1, "1 min"),
            (10, "10 min"),
            (59, "59 min"),
            (60, "1 hour"),
            (90, "2 hours"),
            (600, "10 hours"),
            (1439, "24 hours"),
            (1440, "1 day"),
            (4320, "3 days"),
            (10080, "7 days"),
        ],
    )
    def test_units(self, minutes, expected):
        assert format_interval(minutes) == expected


class TestPreviewInterval:
    def test_new_card(self):
        settings = Settings(learning_steps=[10, 1440, 4320])
        card = create_initial_progress(1, settings=settings, now=NOW)

        assert preview_interval(card, Grade.Again, settings) == "10 min"
        assert preview_interval(card, Grade.Good, settings) == "1 day"

    def test_last_learning_step_previews_graduation(self):
        settings = Settings(learning_steps=[10, 1440, 4320], graduating_interval=7)
        card = CardProgress(item_id=1, state=CardState.Learning, learning_step=2, due=NOW)

        assert preview_interval(card, Grade.Good, settings) == "7 days"

    def test_review_card(self):
        settings = Settings()
        card = CardProgress(
            item_id=1, state=CardState.Review, ease_factor=1.4, interval=7, due=NOW
        )

        assert preview_interval(card, Grade.Good, settings) == "10 days"
        assert preview_interval(card, Grade.Again, settings) == "10 min"

    def test_review_card_with_relearn_lapses(self):
        settings = Settings(relearn_lapses=True, relearning_steps=[30, 1440])
        card = CardProgress(
            item_id=1, state=CardState.Review, ease_factor=1.4, interval=7, due=NOW
        )

        assert preview_interval(card, Grade.Again, settings) == "30 min"

    def test_preview_does_not_change_the_card(self):
        settings = Settings()
        card = create_initial_progress(1, settings=settings, now=NOW)
        before = card.to_dict()

        preview_interval(card, Grade.Good, settings)

        assert card.to_dict() == before


class TestPreviewAgreement:
    @pytest.mark.parametrize("relearn_lapses", [False, True])
    def test_preview_matches_transition(self, relearn_lapses):
        settings = Settings(relearn_lapses=relearn_lapses, maximum_interval=90)
        cards = [
            create_initial_progress(1, settings=settings, now=NOW),
            CardProgress(item_id=2, state=CardState.Learning, learning_step=1, due=NOW),
            CardProgress(item_id=3, state=CardState.Learning, learning_step=2, due=NOW),
            CardProgress(item_id=4, state=CardState.Review, ease_factor=1.4, interval=7, due=NOW),
            CardProgress(item_id=5, state=CardState.Review, ease_factor=2.5, interval=80, due=NOW),
            CardProgress(item_id=6, state=CardState.Relearning, learning_step=0, interval=4, due=NOW),
            CardProgress(item_id=7, state=CardState.Relearning, learning_step=1, interval=4, due=NOW),
        ]

        for card in cards:
            for grade in Grade:
                answered = process_answer(card, grade, settings, NOW)
                delay = answered.due - NOW

                assert preview_delay(card, grade, settings) == delay
                assert preview_interval(card, grade, settings) == format_interval(
                    int(delay / timedelta(minutes=1))
                )
