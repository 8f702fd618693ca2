"""Enums for the Sports Store library."""

from enum import Enum, IntEnum


class RecordAction(str, Enum):
    """Write operations routed through the cascade handlers."""

    INSERT = "insert"
    UPDATE = "update"
    REMOVE = "remove"


class Gender(IntEnum):
    """Gender values used to calculate the maximum pulse."""

    UNDEFINED = 0
    DIVERSE = 1
    MALE = 2
    FEMALE = 3


class TrainingLevel(IntEnum):
    """Training experience of a user."""

    BEGINNER = 0
    AMATEUR = 1
    PROFI = 2


class MovementTypeKey(str, Enum):
    """Business keys of the predefined movement types."""

    PAUSE = "P"
    SLOW_WALKING = "LG"
    SPEEDY_WALKING = "ZG"
    RUNNING = "L"
    SPRINT = "R"
