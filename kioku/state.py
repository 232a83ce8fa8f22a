from enum import IntEnum


class CardState(IntEnum):
    """
    Enum representing the learning state of a CardProgress object.
    """

    New = 0
    Learning = 1
    Review = 2
    Relearning = 3


__all__ = ["CardState"]
