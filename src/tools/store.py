"""
In-memory rule, session and engineer store.

Stands in for the spreadsheet-style backing store. It is constructed
with an explicit AppConfig rather than reading module-level handles, so
tests and the CLI each work against their own instance.

The store assigns ``updated_at`` on every rule write and keeps it
strictly increasing, even when the clock does not advance between
writes. Resolution relies on this ordering.
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

from src.config import AppConfig
from src.errors import EngineerNotFoundError, RuleNotFoundError
from src.schemas.availability_schema import (
    AvailabilityRule,
    OneTimeRule,
    OneTimeRuleDraft,
    RecurringRule,
    RuleDraft,
    Session,
    parse_rule,
)
from src.schemas.engineer_schema import Engineer
from src.utils import to_utc

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_record_id() -> str:
    return f"rec{uuid.uuid4().hex[:14]}"


class RuleStore:
    """Holds engineers, availability rules and booked sessions."""

    def __init__(self, config: AppConfig, clock: Callable[[], datetime] = _utcnow) -> None:
        self.config = config
        self._clock = clock
        self._engineers: dict[str, Engineer] = {}
        self._rules: dict[str, AvailabilityRule] = {}
        self._sessions: dict[str, Session] = {}
        self._last_stamp: Optional[datetime] = None
        self._lock = threading.Lock()

    @classmethod
    def from_snapshot(cls, data: dict[str, Any], config: AppConfig) -> "RuleStore":
        """Build a store from a ``{"engineers", "rules", "sessions"}`` mapping."""
        store = cls(config)
        for record in data.get("engineers", []):
            store._engineers[record["id"]] = Engineer(**record)
        for record in data.get("rules", []):
            store._remember(parse_rule(record))
        for record in data.get("sessions", []):
            session = Session(**record)
            store._sessions[session.id] = session
        logger.info(
            "Loaded snapshot: %d engineer(s), %d rule(s), %d session(s)",
            len(store._engineers), len(store._rules), len(store._sessions),
        )
        return store

    @property
    def tz(self):
        return self.config.scheduling.tzinfo

    # --- Engineers ---

    def add_engineer(
        self,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        active: bool = True,
        engineer_id: Optional[str] = None,
    ) -> Engineer:
        engineer = Engineer(
            id=engineer_id or _new_record_id(),
            name=name,
            email=email,
            phone=phone,
            active=active,
        )
        self._engineers[engineer.id] = engineer
        logger.info("Engineer added: %s (%s)", engineer.name, engineer.id)
        return engineer

    def list_engineers(self, active_only: bool = True) -> list[Engineer]:
        return [e for e in self._engineers.values() if e.active or not active_only]

    def find_engineer(self, name_or_id: str) -> Engineer:
        """Look up an active engineer by case-insensitive name or exact id."""
        for engineer in self.list_engineers():
            if engineer.matches(name_or_id):
                return engineer
        raise EngineerNotFoundError(f'Engineer "{name_or_id}" not found')

    # --- Rules ---

    def get_rules(self, engineer_id: Optional[str] = None) -> list[AvailabilityRule]:
        """All rules in insertion order, optionally for one engineer."""
        return [
            rule for rule in self._rules.values()
            if engineer_id is None or rule.engineer_id == engineer_id
        ]

    def _next_stamp(self) -> datetime:
        with self._lock:
            stamp = self._clock()
            if self._last_stamp is not None and stamp <= self._last_stamp:
                stamp = self._last_stamp + timedelta(microseconds=1)
            self._last_stamp = stamp
            return stamp

    def _remember(self, rule: AvailabilityRule) -> None:
        self._rules[rule.id] = rule
        stamp = to_utc(rule.updated_at, self.tz)
        if self._last_stamp is None or stamp > self._last_stamp:
            self._last_stamp = stamp

    def create_rule(self, draft: RuleDraft) -> AvailabilityRule:
        """Store a new rule, assigning its id and ``updated_at``."""
        rule_cls = OneTimeRule if isinstance(draft, OneTimeRuleDraft) else RecurringRule
        rule = rule_cls(
            **draft.model_dump(exclude={"id", "updated_at"}),
            id=_new_record_id(),
            updated_at=self._next_stamp(),
        )
        self._rules[rule.id] = rule
        logger.info(
            "Rule created: %s (%s, %s) for engineer %s via %s",
            rule.id, rule.rule_type, rule.status.value, rule.engineer_id, rule.source.value,
        )
        return rule

    def batch_create_rules(self, drafts: Iterable[RuleDraft]) -> list[AvailabilityRule]:
        """Create many rules, written in groups of ``store.batch_size``."""
        drafts = list(drafts)
        batch_size = self.config.store.batch_size
        created: list[AvailabilityRule] = []
        for offset in range(0, len(drafts), batch_size):
            batch = drafts[offset:offset + batch_size]
            created.extend(self.create_rule(draft) for draft in batch)
            logger.debug("Wrote rule batch %d (%d rule(s))", offset // batch_size + 1, len(batch))
        return created

    def delete_rule(self, rule_id: str) -> None:
        if rule_id not in self._rules:
            raise RuleNotFoundError(f"Rule {rule_id} not found")
        del self._rules[rule_id]
        logger.info("Rule deleted: %s", rule_id)

    # --- Sessions ---

    def add_session(
        self,
        engineer_id: str,
        start: datetime,
        end: datetime,
        title: str = "",
        session_id: Optional[str] = None,
    ) -> Session:
        session = Session(
            id=session_id or _new_record_id(),
            engineer_id=engineer_id,
            title=title,
            start=start,
            end=end,
        )
        self._sessions[session.id] = session
        logger.info("Session added: %s for engineer %s", session.id, engineer_id)
        return session

    def get_sessions(
        self, start: datetime, end: datetime, engineer_id: Optional[str] = None
    ) -> list[Session]:
        """Sessions overlapping [start, end), optionally for one engineer."""
        lower, upper = to_utc(start, self.tz), to_utc(end, self.tz)
        return [
            session for session in self._sessions.values()
            if (engineer_id is None or session.engineer_id == engineer_id)
            and to_utc(session.start, self.tz) < upper
            and to_utc(session.end, self.tz) > lower
        ]
