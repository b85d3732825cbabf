"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from src.config import AppConfig, SchedulingConfig, StoreConfig
from src.engine.slots import generate_day_slots
from src.schemas.availability_schema import (
    DayAvailability,
    OneTimeRule,
    RecurringRule,
    RuleSource,
    RuleStatus,
    Session,
    SlotStatus,
)
from src.tools.store import RuleStore
from src.utils import weekday_code

UTC = timezone.utc
NEW_YORK = ZoneInfo("America/New_York")

# 2025-03-14 is a Friday.
FRIDAY = date(2025, 3, 14)
BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def utc_config():
    return AppConfig(scheduling=SchedulingConfig(timezone="UTC", slot_minutes=30))


@pytest.fixture
def store(utc_config):
    return RuleStore(utc_config)


@pytest.fixture
def small_batch_store():
    config = AppConfig(
        scheduling=SchedulingConfig(timezone="UTC", slot_minutes=30),
        store=StoreConfig(batch_size=3),
    )
    return RuleStore(config)


def stamp(minutes: int) -> datetime:
    """An ``updated_at`` value ``minutes`` after a fixed base time."""
    return BASE_TIME + timedelta(minutes=minutes)


def make_one_time(
    rule_id: str,
    status: RuleStatus,
    start: datetime,
    end: datetime,
    updated: int = 0,
    engineer_id: str = "eng1",
) -> OneTimeRule:
    return OneTimeRule(
        id=rule_id,
        engineer_id=engineer_id,
        status=status,
        start_datetime=start,
        end_datetime=end,
        source=RuleSource.WEB_APP,
        updated_at=stamp(updated),
    )


def make_recurring(
    rule_id: str,
    status: RuleStatus,
    days: list[str],
    start_time: str,
    end_time: str,
    updated: int = 0,
    effective_from: Optional[date] = None,
    effective_until: Optional[date] = None,
    engineer_id: str = "eng1",
) -> RecurringRule:
    return RecurringRule(
        id=rule_id,
        engineer_id=engineer_id,
        status=status,
        recurrence_days=days,
        start_time=start_time,
        end_time=end_time,
        effective_from=effective_from,
        effective_until=effective_until,
        source=RuleSource.WEB_APP,
        updated_at=stamp(updated),
    )


def make_session(
    session_id: str, start: datetime, end: datetime, engineer_id: str = "eng1"
) -> Session:
    return Session(id=session_id, engineer_id=engineer_id, title="Install", start=start, end=end)


def at(day: date, hhmm: str, tz=UTC) -> datetime:
    hours, minutes = (int(part) for part in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hours, minutes, tzinfo=tz)


def status_at(day: DayAvailability, hhmm: str) -> SlotStatus:
    return next(slot.status for slot in day.slots if slot.time == hhmm)


def statuses_between(day: DayAvailability, start: str, end: str) -> set[SlotStatus]:
    """Distinct statuses of slots starting in [start, end)."""
    return {slot.status for slot in day.slots if start <= slot.time < end}


def make_day(day: date, statuses: dict[str, SlotStatus]) -> DayAvailability:
    """A day of Blank slots with the given ``{"HH:MM": status}`` overrides."""
    slots = generate_day_slots(day, UTC)
    for slot in slots:
        if slot.time in statuses:
            slot.status = statuses[slot.time]
    return DayAvailability(date=day, day_name=weekday_code(day), slots=slots)
