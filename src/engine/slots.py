"""Canonical fixed-width slots covering one calendar day."""

from datetime import date, datetime, time, timedelta, timezone, tzinfo

from src.schemas.availability_schema import TimeSlot

SLOT_MINUTES = 30
MINUTES_PER_DAY = 24 * 60


def generate_day_slots(day: date, tz: tzinfo, slot_minutes: int = SLOT_MINUTES) -> list[TimeSlot]:
    """Return every slot of ``day`` in order, all Blank.

    Slots step in elapsed time from the day's first instant in ``tz``, so
    they stay back-to-back across a DST change; ``time`` is the wall
    clock of each start. With the default granularity that is 48 slots,
    labelled 00:00 to 23:30 on an ordinary day.
    """
    day_start = datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)
    slots = []
    for minutes in range(0, MINUTES_PER_DAY, slot_minutes):
        start = (day_start + timedelta(minutes=minutes)).astimezone(tz)
        slots.append(TimeSlot(time=start.strftime("%H:%M"), datetime=start))
    return slots
