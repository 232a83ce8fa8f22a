"""
kioku.transition
----------------

This module defines the answer-processing transition of the scheduler.

A transition is computed in two stages: plan_answer() derives every field of the next card
together with the delay until the card is due again, and process_answer() applies that plan
at a given point in time. Previews use the plan directly, so a preview always matches the
transition that would actually happen.

Classes:
    AnswerPlan: The outcome of answering a card, independent of when the answer happens.

Functions:
    plan_answer: Computes the AnswerPlan for a card and a grade.
    process_answer: Returns the card that results from answering a card at a given time.
"""

from __future__ import annotations
from copy import copy
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import math
from typing_extensions import assert_never
from kioku.card import CardProgress
from kioku.grade import Grade
from kioku.settings import MINIMUM_EASE, Settings
from kioku.state import CardState


@dataclass(frozen=True)
class AnswerPlan:
    """
    The outcome of answering a card.

    Attributes:
        state: The card's next state.
        learning_step: The card's next learning or relearning step.
        interval: The card's next interval in days.
        ease_factor: The card's next ease factor.
        repetitions: The card's next count of consecutive successful answers.
        lapses: The card's next lapse count.
        delay: The time from the answer until the card is due again.
    """

    state: CardState
    learning_step: int
    interval: int
    ease_factor: float
    repetitions: int
    lapses: int
    delay: timedelta


def plan_answer(progress: CardProgress, grade: Grade, settings: Settings) -> AnswerPlan:
    """
    Computes what answering a card with the given grade does to it.

    Args:
        progress: The card being answered. It is not modified.
        grade: The grade given to the card.
        settings: The settings of the card's deck.

    Returns:
        AnswerPlan: The card's next scheduling fields and the delay until it is due.
    """

    match progress.state:
        case CardState.New | CardState.Learning:
            return _plan_learning(progress, grade, settings)
        case CardState.Review:
            return _plan_review(progress, grade, settings)
        case CardState.Relearning:
            return _plan_relearning(progress, grade, settings)
        case _:
            assert_never(progress.state)


def process_answer(
    progress: CardProgress, grade: Grade, settings: Settings, now: datetime
) -> CardProgress:
    """
    Answers a card with a given grade at a given time.

    Args:
        progress: The card being answered. It is not modified.
        grade: The grade given to the card.
        settings: The settings of the card's deck.
        now: The date and time of the answer.

    Returns:
        CardProgress: A new card holding the updated schedule, with last_review set to now.

    Raises:
        ValueError: If `now` is not timezone-aware and set to UTC.
    """

    if (now.tzinfo is None) or (now.tzinfo != timezone.utc):
        raise ValueError("datetime must be timezone-aware and set to UTC")

    plan = plan_answer(progress, grade, settings)

    card = copy(progress)
    card.state = plan.state
    card.learning_step = plan.learning_step
    card.interval = plan.interval
    card.ease_factor = plan.ease_factor
    card.repetitions = plan.repetitions
    card.lapses = plan.lapses
    card.due = now + plan.delay
    card.last_review = now

    return card


def _plan_learning(
    progress: CardProgress, grade: Grade, settings: Settings
) -> AnswerPlan:
    learning_steps = settings.learning_steps

    match grade:
        case Grade.Again:
            return AnswerPlan(
                state=CardState.Learning,
                learning_step=0,
                interval=progress.interval,
                ease_factor=progress.ease_factor,
                repetitions=0,
                lapses=progress.lapses,
                delay=_minutes(learning_steps[0]),
            )

        case Grade.Good:
            # a corrupted negative step counts as the start of the ladder
            next_step = max(progress.learning_step + 1, 0)

            if next_step >= len(learning_steps):  # graduate
                return AnswerPlan(
                    state=CardState.Review,
                    learning_step=0,
                    interval=settings.graduating_interval,
                    ease_factor=progress.ease_factor,
                    repetitions=progress.repetitions + 1,
                    lapses=progress.lapses,
                    delay=timedelta(days=settings.graduating_interval),
                )

            return AnswerPlan(
                state=CardState.Learning,
                learning_step=next_step,
                interval=progress.interval,
                ease_factor=progress.ease_factor,
                repetitions=progress.repetitions + 1,
                lapses=progress.lapses,
                delay=_minutes(learning_steps[next_step]),
            )

        case _:
            assert_never(grade)


def _plan_review(progress: CardProgress, grade: Grade, settings: Settings) -> AnswerPlan:
    match grade:
        case Grade.Again:
            ease_factor = max(
                MINIMUM_EASE, progress.ease_factor - settings.lapse_ease_penalty
            )

            if settings.relearn_lapses:
                interval = max(
                    settings.minimum_interval,
                    _round_half_up(progress.interval * settings.lapse_interval_factor),
                )
                return AnswerPlan(
                    state=CardState.Relearning,
                    learning_step=0,
                    interval=interval,
                    ease_factor=ease_factor,
                    repetitions=0,
                    lapses=progress.lapses + 1,
                    delay=_minutes(settings.relearning_steps[0]),
                )

            # back to the start of the learning ladder
            return AnswerPlan(
                state=CardState.Learning,
                learning_step=0,
                interval=0,
                ease_factor=ease_factor,
                repetitions=0,
                lapses=progress.lapses + 1,
                delay=_minutes(settings.learning_steps[0]),
            )

        case Grade.Good:
            interval = _clamp_interval(
                interval=_round_half_up(progress.interval * progress.ease_factor),
                settings=settings,
            )
            return AnswerPlan(
                state=CardState.Review,
                learning_step=0,
                interval=interval,
                ease_factor=progress.ease_factor,
                repetitions=progress.repetitions + 1,
                lapses=progress.lapses,
                delay=timedelta(days=interval),
            )

        case _:
            assert_never(grade)


def _plan_relearning(
    progress: CardProgress, grade: Grade, settings: Settings
) -> AnswerPlan:
    relearning_steps = settings.relearning_steps

    match grade:
        case Grade.Again:
            return AnswerPlan(
                state=CardState.Relearning,
                learning_step=0,
                interval=progress.interval,
                ease_factor=progress.ease_factor,
                repetitions=progress.repetitions,
                lapses=progress.lapses,
                delay=_minutes(relearning_steps[0]),
            )

        case Grade.Good:
            # a corrupted negative step counts as the start of the ladder
            next_step = max(progress.learning_step + 1, 0)

            if next_step >= len(relearning_steps):  # back to Review
                interval = _clamp_interval(interval=progress.interval, settings=settings)
                return AnswerPlan(
                    state=CardState.Review,
                    learning_step=0,
                    interval=interval,
                    ease_factor=progress.ease_factor,
                    repetitions=1,
                    lapses=progress.lapses,
                    delay=timedelta(days=interval),
                )

            return AnswerPlan(
                state=CardState.Relearning,
                learning_step=next_step,
                interval=progress.interval,
                ease_factor=progress.ease_factor,
                repetitions=progress.repetitions,
                lapses=progress.lapses,
                delay=_minutes(relearning_steps[next_step]),
            )

        case _:
            assert_never(grade)


def _clamp_interval(*, interval: int, settings: Settings) -> int:
    interval = max(interval, settings.minimum_interval)
    interval = min(interval, settings.maximum_interval)
    return interval


def _round_half_up(value: float) -> int:
    # intervals are full days; .5 always rounds up
    return math.floor(value + 0.5)


def _minutes(minutes: int) -> timedelta:
    return timedelta(minutes=minutes)


__all__ = ["AnswerPlan", "plan_answer", "process_answer"]
