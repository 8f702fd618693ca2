"""Persistent domain records.

Records are built by callers and handed to the repository for persistence.
Composite records (Track, RunningPlan) own their children; the repository
stores each child as its own document.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.enums import Gender, MovementTypeKey, TrainingLevel
from ..utils.uuid_factory import (
    generate_email_address,
    generate_training_type_name,
    generate_uuid,
)


DEFAULT_MOVEMENT_TYPE_COLOR = "green"
TRAINING_DEFAULT_IMAGE_NAME = "ic_training"

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


class PersistentObject(BaseModel):
    """Base class for every record the repository can store."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    uuid: str = Field(default_factory=generate_uuid, min_length=1)


class User(PersistentObject):
    """The single user of an installation. Unique on email address."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_address: str = Field(default_factory=generate_email_address)
    birthday: Optional[date] = None
    gender: Gender = Gender.UNDEFINED
    training_level: TrainingLevel = TrainingLevel.BEGINNER
    max_pulse: int = 0
    active_running_plan_uuid: Optional[str] = None


class TrainingType(PersistentObject):
    """Reference data describing a kind of training. Unique on name."""

    name: str = Field(default_factory=generate_training_type_name)
    image_name: str = TRAINING_DEFAULT_IMAGE_NAME
    remarks: Optional[str] = None
    speed: float = 0.0


class MovementType(PersistentObject):
    """Reference data for a running unit. Identified by its short key, not its uuid."""

    key: str
    string_for_key: str = ""
    color_string: str = DEFAULT_MOVEMENT_TYPE_COLOR
    speed: float = 0.0
    pace: float = 0.0

    @field_validator("key")
    @classmethod
    def validate_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("movement type key must not be blank")
        return value

    @classmethod
    def predefined(cls, key: MovementTypeKey, **kwargs) -> "MovementType":
        return cls(key=key.value, **kwargs)


class LocationData(PersistentObject):
    """A coordinate sample of a track."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    provider: str = "gps"
    latitude: float = Field(default=0.0, ge=LATITUDE_RANGE[0], le=LATITUDE_RANGE[1])
    longitude: float = Field(default=0.0, ge=LONGITUDE_RANGE[0], le=LONGITUDE_RANGE[1])
    altitude: float = 0.0
    speed: float = 0.0


class Track(PersistentObject):
    """A recorded route owning an ordered list of location samples."""

    name: str = ""
    remarks: Optional[str] = None
    start_time: Optional[datetime] = None
    stop_time: Optional[datetime] = None
    locations: List[LocationData] = Field(default_factory=list)


class Training(PersistentObject):
    """A completed training. References its type and track, owns neither."""

    name: str = ""
    remarks: Optional[str] = None
    training_date: Optional[datetime] = None
    training_type_uuid: Optional[str] = None
    track_uuid: Optional[str] = None
    distance: float = 0.0
    duration: int = 0


class RunningUnit(PersistentObject):
    """A timed movement within a plan entry."""

    duration: int = 0  # minutes
    movement_type: MovementType
    completed: bool = False


class RunningPlanEntry(PersistentObject):
    """One training day of a running plan."""

    day: int = 1  # day of week, 1 is monday
    week: int = 1
    running_units: List[RunningUnit] = Field(default_factory=list)

    @field_validator("day")
    @classmethod
    def clamp_day(cls, value: int) -> int:
        return value if 1 <= value <= 7 else 1

    @field_validator("week")
    @classmethod
    def clamp_week(cls, value: int) -> int:
        return value if 1 <= value <= 52 else 1

    @property
    def duration(self) -> int:
        return sum(unit.duration for unit in self.running_units)

    @property
    def is_completed(self) -> bool:
        return all(unit.completed for unit in self.running_units)

    @property
    def percent_completed(self) -> int:
        if not self.running_units:
            return 0
        completed = sum(1 for unit in self.running_units if unit.completed)
        return completed * 100 // len(self.running_units)

    def sort_key(self):
        return (self.week, self.day)


class RunningPlan(PersistentObject):
    """A plan of training days, kept in (week, day) order."""

    name: str = ""
    remarks: Optional[str] = None
    order_number: int = 0
    start_date: Optional[date] = None
    is_template: bool = False
    entries: List[RunningPlanEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def sort_entries(self) -> "RunningPlan":
        ordered = sorted(self.entries, key=RunningPlanEntry.sort_key)
        if ordered != self.entries:
            # bypass validate_assignment to avoid re-entering this validator
            self.__dict__["entries"] = ordered
        return self

    @property
    def duration(self) -> int:
        return sum(entry.duration for entry in self.entries)

    @property
    def is_completed(self) -> bool:
        return all(entry.is_completed for entry in self.entries)

    @property
    def percent_completed(self) -> int:
        units = [unit for entry in self.entries for unit in entry.running_units]
        if not units:
            return 0
        return sum(1 for unit in units if unit.completed) * 100 // len(units)
