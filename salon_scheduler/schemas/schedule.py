from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime
from enum import Enum
from uuid import uuid4

from salon_scheduler.core.errors import InvalidTimeFormat
from salon_scheduler.utils.time_utils import clock_to_minutes

class Period(str, Enum):
    AM = "AM"
    PM = "PM"

class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        # date.weekday(): Monday == 0
        return list(cls)[day.weekday()]

class TimeRange(BaseModel):
    start: str  # "9:00"
    startPeriod: Period
    end: str  # "12:00"
    endPeriod: Period
    id: str = Field(default_factory=lambda: uuid4().hex)

    @field_validator("startPeriod", "endPeriod", mode="before")
    @classmethod
    def normalize_period(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def check_order(self) -> "TimeRange":
        try:
            start_minutes, end_minutes = self.minutes()
        except InvalidTimeFormat as e:
            raise ValueError(e.message)
        if start_minutes >= end_minutes:
            raise ValueError(
                f"Range {self.start} {self.startPeriod.value} - {self.end} {self.endPeriod.value} "
                "must end after it starts on the same day"
            )
        return self

    def start_minutes(self) -> int:
        return clock_to_minutes(self.start, self.startPeriod.value)

    def end_minutes(self) -> int:
        return clock_to_minutes(self.end, self.endPeriod.value)

    def minutes(self):
        return self.start_minutes(), self.end_minutes()

class DaySchedule(BaseModel):
    enabled: bool = False
    slots: List[TimeRange] = []

    @model_validator(mode="after")
    def check_no_overlap(self) -> "DaySchedule":
        ordered = sorted(self.slots, key=lambda r: r.start_minutes())
        for previous, current in zip(ordered, ordered[1:]):
            if current.start_minutes() < previous.end_minutes():
                raise ValueError(
                    f"Working hours {previous.id} and {current.id} overlap"
                )
        return self

    @property
    def is_bookable(self) -> bool:
        return self.enabled and bool(self.slots)

    def ordered_ranges(self) -> List[TimeRange]:
        return sorted(self.slots, key=lambda r: r.start_minutes())

class WeeklySchedule(BaseModel):
    monday: DaySchedule
    tuesday: DaySchedule
    wednesday: DaySchedule
    thursday: DaySchedule
    friday: DaySchedule
    saturday: DaySchedule
    sunday: DaySchedule

    def day(self, weekday: Weekday) -> DaySchedule:
        return getattr(self, weekday.value)

    def for_date(self, day: date) -> DaySchedule:
        return self.day(Weekday.from_date(day))

class ExceptionDate(BaseModel):
    date: date  # "2025-09-05"

class StylistAvailability(BaseModel):
    stylistId: str
    weeklySchedule: WeeklySchedule
    exceptions: List[ExceptionDate] = []
    timezone: Optional[str] = None  # IANA name, e.g. "America/New_York"
    lastUpdated: Optional[datetime] = None

    def exception_dates(self) -> set:
        return {exc.date for exc in self.exceptions}

    def is_exception(self, day: date) -> bool:
        return day in self.exception_dates()
