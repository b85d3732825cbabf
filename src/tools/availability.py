"""
Availability lookups over the rule store.

Resolves each engineer's rules and sessions through the engine and
shapes the result for external clients (chat automations, the calendar
view): a five-bucket summary for a window, a detailed per-slot
breakdown, or a whole-day summary by default.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, TypedDict

from src.engine import resolve, summarize
from src.logging_context import get_request_logger
from src.schemas.availability_schema import DayAvailability
from src.schemas.engineer_schema import Engineer
from src.tools.store import RuleStore

logger = get_request_logger(__name__)

DAYS_PER_WEEK = 7


class AvailabilityQueryResult(TypedDict, total=False):
    """Result from query_availability."""

    date: str
    start_time: str
    end_time: str
    summary: dict[str, list[str]]
    engineers: dict[str, list[dict]]


def resolve_engineer_days(
    store: RuleStore, engineer: Engineer, start_date: date, end_date: date
) -> list[DayAvailability]:
    """Resolve one engineer's rules and sessions over an inclusive date span."""
    tz = store.tz
    window_start = datetime.combine(start_date, time.min, tzinfo=tz)
    # Through the whole day after end_date, so sessions running past midnight are still seen.
    window_end = datetime.combine(end_date + timedelta(days=2), time.min, tzinfo=tz)

    rules = store.get_rules(engineer.id)
    sessions = store.get_sessions(window_start, window_end, engineer.id)
    logger.debug(
        "Resolving %s: %d rule(s), %d session(s)", engineer.name, len(rules), len(sessions)
    )
    return resolve(
        rules,
        sessions,
        start_date,
        end_date,
        tz=tz,
        slot_minutes=store.config.scheduling.slot_minutes,
    )


def query_availability(
    store: RuleStore,
    date_str: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    engineer: Optional[str] = None,
    detailed: bool = False,
) -> AvailabilityQueryResult:
    """
    Point-in-time availability for one date.

    With both ``start`` and ``end`` returns the summary for that window.
    Otherwise ``detailed`` returns every slot per engineer, and the
    default is a whole-day summary. ``engineer`` narrows the lookup to
    one engineer by name or id; an unknown engineer raises
    EngineerNotFoundError.
    """
    target = date.fromisoformat(date_str)
    engineers = [store.find_engineer(engineer)] if engineer else store.list_engineers()

    per_engineer = {
        eng.name: resolve_engineer_days(store, eng, target, target) for eng in engineers
    }

    if start and end:
        summary = summarize(per_engineer, target, start, end)
        logger.info("Summary for %s %s-%s over %d engineer(s)", date_str, start, end, len(engineers))
        return {
            "date": date_str,
            "start_time": start,
            "end_time": end,
            "summary": summary.model_dump(),
        }

    if detailed:
        logger.info("Detailed availability for %s over %d engineer(s)", date_str, len(engineers))
        return {
            "date": date_str,
            "engineers": {
                name: [day.model_dump(mode="json") for day in days]
                for name, days in per_engineer.items()
            },
        }

    query = store.config.query
    summary = summarize(per_engineer, target, query.default_window_start, query.default_window_end)
    logger.info("Whole-day summary for %s over %d engineer(s)", date_str, len(engineers))
    return {"date": date_str, "summary": summary.model_dump()}


def get_engineer_week(
    store: RuleStore, engineer: str, week_start: date, days: int = DAYS_PER_WEEK
) -> list[DayAvailability]:
    """Resolved days for one engineer starting at ``week_start``, as the calendar view shows them."""
    eng = store.find_engineer(engineer)
    return resolve_engineer_days(store, eng, week_start, week_start + timedelta(days=days - 1))
