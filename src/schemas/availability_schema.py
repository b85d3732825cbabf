"""Availability rules, sessions and the resolved slot/day/summary views."""

import datetime as dt
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from src.utils import WEEKDAY_CODES, time_to_minutes


class RuleStatus(str, Enum):
    """Status an availability rule can declare."""

    AVAILABLE = "Available"
    MAYBE = "Maybe"
    UNAVAILABLE = "Unavailable"


class SlotStatus(str, Enum):
    """Resolved status of a single slot."""

    AVAILABLE = "Available"
    MAYBE = "Maybe"
    UNAVAILABLE = "Unavailable"
    BOOKED = "Booked"
    BLANK = "Blank"


class RuleSource(str, Enum):
    WEB_APP = "web_app"
    CHATBOT = "chatbot"
    BOOKING = "booking"


WeekdayCode = Literal["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class _RuleFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    engineer_id: str
    engineer_name: Optional[str] = None
    status: RuleStatus
    source: RuleSource = RuleSource.WEB_APP


class OneTimeRuleDraft(_RuleFields):
    """A one-time rule covering the half-open interval [start, end)."""

    rule_type: Literal["one-time"] = "one-time"
    start_datetime: dt.datetime
    end_datetime: dt.datetime

    @model_validator(mode="after")
    def _end_after_start(self) -> "OneTimeRuleDraft":
        start, end = self.start_datetime, self.end_datetime
        # Mixed naive/aware pairs are only comparable once a time zone is applied.
        if (start.tzinfo is None) == (end.tzinfo is None) and end <= start:
            raise ValueError("end_datetime must be after start_datetime")
        return self


class RecurringRuleDraft(_RuleFields):
    """A weekly rule on a weekday set and a wall-clock window.

    ``end_time <= start_time`` means the window wraps past midnight.
    ``effective_from`` / ``effective_until`` are inclusive date bounds.
    """

    rule_type: Literal["recurring"] = "recurring"
    start_time: str
    end_time: str
    recurrence_days: list[WeekdayCode] = Field(min_length=1)
    effective_from: Optional[dt.date] = None
    effective_until: Optional[dt.date] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        minutes = time_to_minutes(value)
        return f"{minutes // 60:02d}:{minutes % 60:02d}"

    @field_validator("recurrence_days")
    @classmethod
    def _order_days(cls, value: list[str]) -> list[str]:
        order = ("Sun",) + WEEKDAY_CODES[:-1]
        return sorted(set(value), key=order.index)

    @model_validator(mode="after")
    def _bounds_ordered(self) -> "RecurringRuleDraft":
        if (
            self.effective_from is not None
            and self.effective_until is not None
            and self.effective_until < self.effective_from
        ):
            raise ValueError("effective_until must not be before effective_from")
        return self


class OneTimeRule(OneTimeRuleDraft):
    id: str
    updated_at: dt.datetime


class RecurringRule(RecurringRuleDraft):
    id: str
    updated_at: dt.datetime


RuleDraft = Annotated[
    Union[OneTimeRuleDraft, RecurringRuleDraft], Field(discriminator="rule_type")
]
AvailabilityRule = Annotated[
    Union[OneTimeRule, RecurringRule], Field(discriminator="rule_type")
]

_rule_adapter: TypeAdapter = TypeAdapter(AvailabilityRule)
_draft_adapter: TypeAdapter = TypeAdapter(RuleDraft)


def parse_rule(data: dict) -> Union[OneTimeRule, RecurringRule]:
    """Validate a stored rule record into its tagged variant."""
    return _rule_adapter.validate_python(data)


def parse_rule_draft(data: dict) -> Union[OneTimeRuleDraft, RecurringRuleDraft]:
    """Validate a write payload (no id / updated_at) into its tagged variant."""
    return _draft_adapter.validate_python(data)


class Session(BaseModel):
    """A booked session. Always overrides rules for the slots it overlaps."""

    model_config = ConfigDict(frozen=True)

    id: str
    engineer_id: str
    engineer_name: Optional[str] = None
    title: str = ""
    start: dt.datetime
    end: dt.datetime


class TimeSlot(BaseModel):
    """One fixed-width slot within a day."""

    time: str
    datetime: AwareDatetime
    status: SlotStatus = SlotStatus.BLANK
    rule_id: Optional[str] = None
    session_id: Optional[str] = None


class DayAvailability(BaseModel):
    date: dt.date
    day_name: str
    slots: list[TimeSlot]


class AvailabilitySummary(BaseModel):
    """Partition of queried engineers into five roll-up buckets."""

    available: list[str] = Field(default_factory=list)
    maybe: list[str] = Field(default_factory=list)
    unavailable: list[str] = Field(default_factory=list)
    booked: list[str] = Field(default_factory=list)
    not_set: list[str] = Field(default_factory=list)


class SummaryBucket(str, Enum):
    """Roll-up classification of one engineer over a query window."""

    AVAILABLE = "available"
    MAYBE = "maybe"
    UNAVAILABLE = "unavailable"
    BOOKED = "booked"
    NOT_SET = "not_set"
