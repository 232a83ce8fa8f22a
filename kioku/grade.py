from enum import IntEnum


class Grade(IntEnum):
    """
    Enum representing the two possible answers when studying an item.
    """

    Again = 1
    Good = 2


__all__ = ["Grade"]
