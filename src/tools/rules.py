"""
Availability rule writes: single, batched, deletions, and the chatbot
endpoint that turns an extracted chat message into a rule.
"""

from datetime import date, timedelta
from typing import Any, Optional, TypedDict, Union

from src.errors import RuleValidationError
from src.logging_context import get_request_logger
from src.schemas.availability_schema import (
    AvailabilityRule,
    OneTimeRuleDraft,
    RecurringRuleDraft,
    RuleSource,
    parse_rule_draft,
)
from src.schemas.request_schema import ChatbotRuleRequest
from src.tools.store import RuleStore

logger = get_request_logger(__name__)


class ChatbotResult(TypedDict):
    """Result from chatbot_set_availability."""

    success: bool
    message: str
    rule: AvailabilityRule


def create_rule(store: RuleStore, payload: dict[str, Any]) -> AvailabilityRule:
    """Validate a single rule payload and store it."""
    return store.create_rule(parse_rule_draft(payload))


def create_rules(store: RuleStore, payloads: list[dict[str, Any]]) -> list[AvailabilityRule]:
    """Validate every payload first, then store them as one batched write."""
    drafts = [parse_rule_draft(payload) for payload in payloads]
    created = store.batch_create_rules(drafts)
    logger.info("Batch created %d rule(s)", len(created))
    return created


def save_rules(
    store: RuleStore, body: Union[dict[str, Any], list[dict[str, Any]]]
) -> Union[AvailabilityRule, list[AvailabilityRule]]:
    """Write endpoint body: ``{"rules": [...]}`` for a batch, or a single rule payload."""
    if isinstance(body, dict) and isinstance(body.get("rules"), list):
        return create_rules(store, body["rules"])
    if isinstance(body, list):
        return create_rules(store, body)
    return create_rule(store, body)


def delete_rule(store: RuleStore, rule_id: str) -> None:
    if not rule_id:
        raise RuleValidationError("Rule ID required")
    store.delete_rule(rule_id)


def _require(request: ChatbotRuleRequest, names: list[str], rule_kind: str) -> None:
    missing = [name for name in names if not getattr(request, name)]
    if missing:
        raise RuleValidationError(
            f"{', '.join(missing)} required for {rule_kind} rules"
        )


def overnight_end_date(day: str, start_time: str, end_time: str) -> str:
    """Date the one-time rule ends on: the next day when the end time sorts before the start.

    Examples:
        >>> overnight_end_date("2025-03-14", "22:00", "02:00")
        '2025-03-15'
        >>> overnight_end_date("2025-03-14", "09:00", "17:00")
        '2025-03-14'
    """
    if end_time < start_time:
        return (date.fromisoformat(day) + timedelta(days=1)).isoformat()
    return day


def chatbot_set_availability(
    store: RuleStore, request: Union[ChatbotRuleRequest, dict[str, Any]]
) -> ChatbotResult:
    """
    Create a rule from a chat-extracted availability statement.

    A non-empty ``days`` list makes a recurring rule; otherwise a
    one-time rule on ``date``. One-time rules whose end time sorts
    before their start time end on the following day.
    """
    if not isinstance(request, ChatbotRuleRequest):
        request = ChatbotRuleRequest(**request)
    engineer = store.find_engineer(request.engineer)

    draft: Union[OneTimeRuleDraft, RecurringRuleDraft]
    if request.is_recurring:
        _require(request, ["start_time", "end_time"], "recurring")
        draft = RecurringRuleDraft(
            engineer_id=engineer.id,
            engineer_name=engineer.name,
            status=request.status,
            source=RuleSource.CHATBOT,
            start_time=request.start_time,
            end_time=request.end_time,
            recurrence_days=request.days,
            effective_from=_optional_date(request.effective_from),
            effective_until=_optional_date(request.effective_until),
        )
        when = ", ".join(request.days)
    else:
        _require(request, ["date", "start_time", "end_time"], "one-time")
        end_day = overnight_end_date(request.date, request.start_time, request.end_time)
        draft = OneTimeRuleDraft(
            engineer_id=engineer.id,
            engineer_name=engineer.name,
            status=request.status,
            source=RuleSource.CHATBOT,
            start_datetime=f"{request.date}T{request.start_time}:00",
            end_datetime=f"{end_day}T{request.end_time}:00",
        )
        when = request.date

    rule = store.create_rule(draft)
    message = (
        f"Set {engineer.name} as {request.status.value} on {when} "
        f"from {request.start_time} to {request.end_time}"
    )
    logger.info("Chatbot rule %s: %s", rule.id, message)
    return {"success": True, "message": message, "rule": rule}


def _optional_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None
