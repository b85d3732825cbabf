"""Payloads accepted by the chatbot-facing write endpoint."""

from typing import Optional

from pydantic import BaseModel, Field

from src.schemas.availability_schema import RuleStatus, WeekdayCode


class ChatbotRuleRequest(BaseModel):
    """
    Availability statement extracted from a chat message.

    A non-empty ``days`` list makes it a recurring rule; otherwise
    ``date`` + ``start_time`` + ``end_time`` describe a one-time rule.
    Field completeness is checked by the write service, which knows
    which rule type is being built.
    """
    engineer: str = Field(min_length=1)
    status: RuleStatus
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    days: list[WeekdayCode] = Field(default_factory=list)
    effective_from: Optional[str] = None
    effective_until: Optional[str] = None

    @property
    def is_recurring(self) -> bool:
        return bool(self.days)
