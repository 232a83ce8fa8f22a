"""
kioku.settings
--------------

This module defines the per-deck Settings class as well as the constants used to validate it.

Classes:
    Settings: The fixed scheduling parameters of one deck.
"""

from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass
import json
from typing import TypedDict
from typing_extensions import Self

MINIMUM_EASE = 1.3

DEFAULT_LEARNING_STEPS = (10, 1440, 4320)
DEFAULT_RELEARNING_STEPS = (10, 1440)


class SettingsDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Settings object.
    """

    learning_steps: list[int]
    relearning_steps: list[int]
    graduating_interval: int
    starting_ease: float
    maximum_interval: int
    lapse_ease_penalty: float
    new_cards_per_day: int
    relearn_lapses: bool
    lapse_interval_factor: float
    minimum_interval: int
    mature_interval: int


@dataclass(frozen=True)
class Settings:
    """
    The scheduling parameters of a single deck.

    Settings are configuration constants: they are validated once on construction and never change afterwards.

    Attributes:
        learning_steps: Delays in minutes between the steps of the learning ladder.
        relearning_steps: Delays in minutes between the steps of the relearning ladder.
        graduating_interval: The interval in days a card receives when it leaves the learning ladder.
        starting_ease: The ease factor given to new cards.
        maximum_interval: The maximum number of days a Review-state card can be scheduled into the future.
        lapse_ease_penalty: The amount subtracted from the ease factor when a Review-state card is forgotten.
        new_cards_per_day: The maximum number of new cards offered per day.
        relearn_lapses: Whether forgotten Review-state cards go through the relearning ladder instead of the learning ladder.
        lapse_interval_factor: The share of the interval a card keeps when it lapses into the relearning ladder.
        minimum_interval: The minimum number of days a Review-state card can be scheduled into the future.
        mature_interval: The interval in days from which a Review-state card counts as mature.
    """

    learning_steps: tuple[int, ...] = DEFAULT_LEARNING_STEPS
    relearning_steps: tuple[int, ...] = DEFAULT_RELEARNING_STEPS
    graduating_interval: int = 7
    starting_ease: float = 1.4
    maximum_interval: int = 120
    lapse_ease_penalty: float = 0.2
    new_cards_per_day: int = 200
    relearn_lapses: bool = False
    lapse_interval_factor: float = 0.5
    minimum_interval: int = 1
    mature_interval: int = 21

    def __post_init__(self) -> None:
        # step ladders are always stored as tuples
        object.__setattr__(self, "learning_steps", tuple(self.learning_steps))
        object.__setattr__(self, "relearning_steps", tuple(self.relearning_steps))

        self._validate()

    def _validate(self) -> None:
        error_messages = []

        error_messages.extend(
            self._validate_steps(name="learning_steps", steps=self.learning_steps)
        )
        error_messages.extend(
            self._validate_steps(name="relearning_steps", steps=self.relearning_steps)
        )

        if self.graduating_interval <= 0:
            error_messages.append(
                f"graduating_interval = {self.graduating_interval} must be positive"
            )
        if self.starting_ease < MINIMUM_EASE:
            error_messages.append(
                f"starting_ease = {self.starting_ease} must be at least {MINIMUM_EASE}"
            )
        if self.maximum_interval <= 0:
            error_messages.append(
                f"maximum_interval = {self.maximum_interval} must be positive"
            )
        if self.minimum_interval <= 0:
            error_messages.append(
                f"minimum_interval = {self.minimum_interval} must be positive"
            )
        if self.minimum_interval > self.maximum_interval:
            error_messages.append(
                f"minimum_interval = {self.minimum_interval} is larger than maximum_interval = {self.maximum_interval}"
            )
        if self.lapse_ease_penalty < 0:
            error_messages.append(
                f"lapse_ease_penalty = {self.lapse_ease_penalty} must not be negative"
            )
        if not 0 < self.lapse_interval_factor <= 1:
            error_messages.append(
                f"lapse_interval_factor = {self.lapse_interval_factor} is out of bounds: (0, 1]"
            )
        if self.new_cards_per_day < 0:
            error_messages.append(
                f"new_cards_per_day = {self.new_cards_per_day} must not be negative"
            )
        if self.mature_interval <= 0:
            error_messages.append(
                f"mature_interval = {self.mature_interval} must be positive"
            )

        if len(error_messages) > 0:
            raise ValueError("Invalid settings:\n" + "\n".join(error_messages))

    @staticmethod
    def _validate_steps(*, name: str, steps: Sequence[int]) -> list[str]:
        if len(steps) == 0:
            return [f"{name} must contain at least one step"]

        return [
            f"{name}[{index}] = {step} must be a positive number of minutes"
            for index, step in enumerate(steps)
            if step <= 0
        ]

    def to_dict(self) -> SettingsDict:
        """
        Returns a JSON-serializable dictionary representation of the Settings object.

        Returns:
            A dictionary representation of the Settings object.
        """

        return {
            "learning_steps": list(self.learning_steps),
            "relearning_steps": list(self.relearning_steps),
            "graduating_interval": self.graduating_interval,
            "starting_ease": self.starting_ease,
            "maximum_interval": self.maximum_interval,
            "lapse_ease_penalty": self.lapse_ease_penalty,
            "new_cards_per_day": self.new_cards_per_day,
            "relearn_lapses": self.relearn_lapses,
            "lapse_interval_factor": self.lapse_interval_factor,
            "minimum_interval": self.minimum_interval,
            "mature_interval": self.mature_interval,
        }

    @classmethod
    def from_dict(cls, source_dict: SettingsDict) -> Self:
        """
        Creates a Settings object from an existing dictionary.

        Keys missing from the dictionary fall back to their defaults.

        Args:
            source_dict: A dictionary representing an existing Settings object.

        Returns:
            A Settings object created from the provided dictionary.

        Raises:
            ValueError: If the resulting settings are invalid.
        """

        return cls(**source_dict)

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Settings object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Settings object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Settings object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Settings object.

        Returns:
            Self: A Settings object created from the JSON string.
        """

        source_dict: SettingsDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["Settings", "MINIMUM_EASE"]
