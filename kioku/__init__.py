"""
kioku
-----

Kioku is a spaced-repetition scheduler for vocabulary and grammar decks, based on a simplified SM-2 algorithm with two-button grading.
"""

from kioku.scheduler import Scheduler
from kioku.state import CardState
from kioku.grade import Grade
from kioku.settings import Settings
from kioku.card import CardProgress, create_initial_progress
from kioku.review_log import ReviewLog
from kioku.transition import AnswerPlan, plan_answer, process_answer
from kioku.queue import StudyQueue, build_queue, pick_next, sort_by_priority
from kioku.preview import format_interval, preview_interval
from kioku.clock import FrozenClock, utc_now
from kioku.storage import JsonFileStorage, MemoryStorage, StorageError
from kioku.session import StudySession

__all__ = [
    "Scheduler",
    "CardState",
    "Grade",
    "Settings",
    "CardProgress",
    "create_initial_progress",
    "ReviewLog",
    "AnswerPlan",
    "plan_answer",
    "process_answer",
    "StudyQueue",
    "build_queue",
    "pick_next",
    "sort_by_priority",
    "format_interval",
    "preview_interval",
    "FrozenClock",
    "utc_now",
    "JsonFileStorage",
    "MemoryStorage",
    "StorageError",
    "StudySession",
]
