"""
Rule resolution: turn availability rules and booked sessions into
per-slot statuses for a span of calendar days.

Resolution is a two-phase fold. Rules are first ordered by ``updated_at``
(stable, so equal timestamps keep their input order), then applied to
every slot in that order, each match overwriting the previous one. The
most recently updated matching rule therefore decides the slot, whatever
its type. Sessions are overlaid last and always win.

Correctness depends on ``updated_at`` reflecting true write order; the
store that assigns it must keep it monotonic.

Usage:
    days = resolve(rules, sessions, date(2025, 3, 14), date(2025, 3, 20), tz)
    days[0].slots[26].status  # status of 13:00 on the first day
"""

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, Union

from src.engine.slots import SLOT_MINUTES, generate_day_slots
from src.schemas.availability_schema import (
    AvailabilityRule,
    DayAvailability,
    OneTimeRule,
    RecurringRule,
    Session,
    SlotStatus,
)
from src.utils import next_day, time_to_minutes, to_utc, weekday_code

logger = logging.getLogger(__name__)


def _overlaps(slot_start: datetime, slot_end: datetime, start: datetime, end: datetime) -> bool:
    """Strict half-open overlap: touching boundaries do not overlap."""
    return slot_start < end and slot_end > start


def _one_time_applies(rule: OneTimeRule, slot_start: datetime, slot_end: datetime, tz: tzinfo) -> bool:
    return _overlaps(
        slot_start, slot_end, to_utc(rule.start_datetime, tz), to_utc(rule.end_datetime, tz)
    )


def _recurring_applies_on(rule: RecurringRule, day: date) -> bool:
    """Weekday and effective-date check for a recurring rule."""
    if weekday_code(day) not in rule.recurrence_days:
        return False
    if rule.effective_from is not None and day < rule.effective_from:
        return False
    if rule.effective_until is not None and day > rule.effective_until:
        return False
    return True


def _recurring_covers(rule: RecurringRule, slot_minute: int) -> bool:
    start = time_to_minutes(rule.start_time)
    end = time_to_minutes(rule.end_time)
    if end <= start:
        # Wraps midnight, e.g. 22:00-04:00.
        return slot_minute >= start or slot_minute < end
    return start <= slot_minute < end


def sort_by_recency(rules: Iterable[AvailabilityRule], tz: tzinfo = timezone.utc) -> list[AvailabilityRule]:
    """Order rules oldest-first by ``updated_at``; ties keep input order."""
    return sorted(rules, key=lambda rule: to_utc(rule.updated_at, tz))


def _as_date(value: Union[date, datetime], tz: tzinfo) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def _resolve_day(
    day: date,
    ordered_rules: list[AvailabilityRule],
    sessions: list[Session],
    tz: tzinfo,
    slot_minutes: int,
) -> DayAvailability:
    slots = generate_day_slots(day, tz, slot_minutes)
    step = timedelta(minutes=slot_minutes)

    # Recurring rules not in force today can never match; one-time rules are
    # checked per slot since they may start or end mid-day.
    candidates = [
        rule for rule in ordered_rules
        if isinstance(rule, OneTimeRule) or _recurring_applies_on(rule, day)
    ]

    for slot in slots:
        slot_start = slot.datetime.astimezone(timezone.utc)
        slot_end = slot_start + step
        slot_minute = time_to_minutes(slot.time)

        for rule in candidates:
            if isinstance(rule, OneTimeRule):
                matched = _one_time_applies(rule, slot_start, slot_end, tz)
            else:
                matched = _recurring_covers(rule, slot_minute)
            if matched:
                slot.status = SlotStatus(rule.status.value)
                slot.rule_id = rule.id

        for session in sessions:
            if _overlaps(slot_start, slot_end, to_utc(session.start, tz), to_utc(session.end, tz)):
                slot.status = SlotStatus.BOOKED
                slot.session_id = session.id
                break

    return DayAvailability(date=day, day_name=weekday_code(day), slots=slots)


def resolve(
    rules: Iterable[AvailabilityRule],
    sessions: Iterable[Session],
    start_date: Union[date, datetime],
    end_date: Union[date, datetime],
    tz: tzinfo = timezone.utc,
    slot_minutes: int = SLOT_MINUTES,
) -> list[DayAvailability]:
    """
    Resolve every slot of every day from ``start_date`` to ``end_date`` inclusive.

    Naive rule and session datetimes are read as wall-clock times in
    ``tz``. Datetime bounds are truncated to their calendar date in
    ``tz``. The inputs are never modified; each call builds fresh slots.
    """
    ordered = sort_by_recency(rules, tz)
    session_list = list(sessions)
    first, last = _as_date(start_date, tz), _as_date(end_date, tz)

    days: list[DayAvailability] = []
    day = first
    while day <= last:
        days.append(_resolve_day(day, ordered, session_list, tz, slot_minutes))
        day = next_day(day)

    logger.debug(
        "Resolved %d day(s) from %s with %d rule(s) and %d session(s)",
        len(days), first, len(ordered), len(session_list),
    )
    return days
