"""
kioku.review_log
----------------

This module defines the ReviewLog class.

Classes:
    ReviewLog: Represents the log entry of a card that has been answered.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict
import json
from typing_extensions import Self
from kioku.grade import Grade
from kioku.state import CardState


class ReviewLogDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ReviewLog object.
    """

    item_id: int
    grade: int
    review_datetime: str
    previous_state: int
    review_duration: int | None


@dataclass
class ReviewLog:
    """
    Represents the log entry of a CardProgress object that has been answered.

    Attributes:
        item_id: The id of the item being answered.
        grade: The grade given to the card.
        review_datetime: The date and time of the answer.
        previous_state: The state the card was in before the answer was processed.
        review_duration: The number of milliseconds it took to answer or None if unspecified.
    """

    item_id: int
    grade: Grade
    review_datetime: datetime
    previous_state: CardState
    review_duration: int | None = None

    def to_dict(self) -> ReviewLogDict:
        """
        Returns a dictionary representation of the ReviewLog object.

        Returns:
            A dictionary representation of the ReviewLog object.
        """

        return {
            "item_id": self.item_id,
            "grade": int(self.grade),
            "review_datetime": self.review_datetime.isoformat(),
            "previous_state": int(self.previous_state),
            "review_duration": self.review_duration,
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewLogDict) -> Self:
        """
        Creates a ReviewLog object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ReviewLog object.

        Returns:
            A ReviewLog object created from the provided dictionary.
        """

        return cls(
            item_id=source_dict["item_id"],
            grade=Grade(int(source_dict["grade"])),
            review_datetime=datetime.fromisoformat(source_dict["review_datetime"]),
            previous_state=CardState(int(source_dict["previous_state"])),
            review_duration=source_dict["review_duration"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the ReviewLog object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the ReviewLog object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a ReviewLog object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing ReviewLog object.

        Returns:
            Self: A ReviewLog object created from the JSON string.
        """

        source_dict: ReviewLogDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["ReviewLog"]
