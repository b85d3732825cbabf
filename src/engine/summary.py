"""
Roll-up of resolved slots into one bucket per engineer for a time window.

The precedence is deliberately asymmetric. A single Booked or
Unavailable slot anywhere in the window decides the bucket, while Blank
slots mixed with Maybe/Available are tolerated. A clean ``available``
otherwise needs every slot to be Available.
"""

import logging
from datetime import date
from typing import Mapping, Sequence, Union

from src.schemas.availability_schema import (
    AvailabilitySummary,
    DayAvailability,
    SlotStatus,
    SummaryBucket,
)
from src.utils import time_to_minutes

logger = logging.getLogger(__name__)


def classify(statuses: Sequence[SlotStatus]) -> SummaryBucket:
    """Reduce the statuses of one window to a bucket, first match wins."""
    if not statuses:
        return SummaryBucket.NOT_SET
    if SlotStatus.BOOKED in statuses:
        return SummaryBucket.BOOKED
    if SlotStatus.UNAVAILABLE in statuses:
        return SummaryBucket.UNAVAILABLE
    if SlotStatus.BLANK in statuses:
        if all(s == SlotStatus.BLANK for s in statuses):
            return SummaryBucket.NOT_SET
        if SlotStatus.MAYBE in statuses:
            return SummaryBucket.MAYBE
        if SlotStatus.AVAILABLE in statuses:
            return SummaryBucket.AVAILABLE
        return SummaryBucket.NOT_SET
    if SlotStatus.MAYBE in statuses:
        return SummaryBucket.MAYBE
    if all(s == SlotStatus.AVAILABLE for s in statuses):
        return SummaryBucket.AVAILABLE
    return SummaryBucket.NOT_SET


def window_statuses(day: DayAvailability, start_time: str, end_time: str) -> list[SlotStatus]:
    """Statuses of slots starting in [start_time, end_time); no midnight wrap."""
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    return [
        slot.status for slot in day.slots
        if start <= time_to_minutes(slot.time) < end
    ]


def summarize(
    per_engineer_days: Mapping[str, Sequence[DayAvailability]],
    target_date: Union[date, str],
    start_time: str,
    end_time: str,
) -> AvailabilitySummary:
    """Partition engineers into summary buckets for one date and window.

    Engineers keep their mapping order within each bucket. An engineer
    with no day for ``target_date`` or no slots in the window is
    ``not_set``.
    """
    if isinstance(target_date, str):
        target_date = date.fromisoformat(target_date)

    summary = AvailabilitySummary()
    for name, days in per_engineer_days.items():
        day = next((d for d in days if d.date == target_date), None)
        statuses = window_statuses(day, start_time, end_time) if day is not None else []
        bucket = classify(statuses)
        getattr(summary, bucket.value).append(name)
        logger.debug("Engineer '%s' classified as %s for %s", name, bucket.value, target_date)
    return summary
