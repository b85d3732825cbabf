"""Tests for the in-memory rule/session/engineer store."""

from datetime import datetime, timezone

import pytest

from src.errors import EngineerNotFoundError, RuleNotFoundError
from src.schemas.availability_schema import (
    OneTimeRule,
    OneTimeRuleDraft,
    RecurringRule,
    RecurringRuleDraft,
    RuleSource,
    RuleStatus,
)
from src.tools.store import RuleStore
from tests.conftest import FRIDAY, at


def _one_time_draft(engineer_id: str = "eng1", start: str = "09:00", end: str = "10:00") -> OneTimeRuleDraft:
    return OneTimeRuleDraft(
        engineer_id=engineer_id,
        status=RuleStatus.AVAILABLE,
        start_datetime=at(FRIDAY, start),
        end_datetime=at(FRIDAY, end),
    )


class TestEngineers:
    def test_find_by_name_case_insensitive(self, store):
        store.add_engineer("Dana Ortiz", engineer_id="eng1")
        assert store.find_engineer("dana ortiz").id == "eng1"

    def test_find_by_id(self, store):
        store.add_engineer("Dana Ortiz", engineer_id="eng1")
        assert store.find_engineer("eng1").name == "Dana Ortiz"

    def test_unknown_engineer_raises(self, store):
        with pytest.raises(EngineerNotFoundError, match="Nobody"):
            store.find_engineer("Nobody")

    def test_inactive_engineers_hidden(self, store):
        store.add_engineer("Dana Ortiz", engineer_id="eng1")
        store.add_engineer("Sam Lee", engineer_id="eng2", active=False)
        assert [e.name for e in store.list_engineers()] == ["Dana Ortiz"]
        assert len(store.list_engineers(active_only=False)) == 2
        with pytest.raises(EngineerNotFoundError):
            store.find_engineer("Sam Lee")


class TestRuleWrites:
    def test_create_assigns_id_and_stamp(self, store):
        rule = store.create_rule(_one_time_draft())
        assert isinstance(rule, OneTimeRule)
        assert rule.id.startswith("rec")
        assert rule.updated_at.tzinfo is not None
        assert store.get_rules("eng1") == [rule]

    def test_create_recurring(self, store):
        rule = store.create_rule(
            RecurringRuleDraft(
                engineer_id="eng1",
                status=RuleStatus.MAYBE,
                start_time="9:00",
                end_time="17:00",
                recurrence_days=["Wed", "Mon", "Mon"],
                source=RuleSource.BOOKING,
            )
        )
        assert isinstance(rule, RecurringRule)
        assert rule.start_time == "09:00"
        assert rule.recurrence_days == ["Mon", "Wed"]
        assert rule.source == RuleSource.BOOKING

    def test_stamps_strictly_increase_with_frozen_clock(self, utc_config):
        frozen = datetime(2025, 3, 1, tzinfo=timezone.utc)
        store = RuleStore(utc_config, clock=lambda: frozen)
        first = store.create_rule(_one_time_draft())
        second = store.create_rule(_one_time_draft())
        assert first.updated_at == frozen
        assert second.updated_at > first.updated_at

    def test_get_rules_filters_by_engineer(self, store):
        store.create_rule(_one_time_draft("eng1"))
        store.create_rule(_one_time_draft("eng2"))
        assert len(store.get_rules()) == 2
        assert [r.engineer_id for r in store.get_rules("eng2")] == ["eng2"]

    def test_batch_create_preserves_order(self, small_batch_store):
        drafts = [_one_time_draft(start=f"{h:02d}:00", end=f"{h:02d}:30") for h in range(8)]
        created = small_batch_store.batch_create_rules(drafts)
        assert len(created) == 8
        assert [r.start_datetime.hour for r in created] == list(range(8))
        stamps = [r.updated_at for r in created]
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == 8

    def test_delete_rule(self, store):
        rule = store.create_rule(_one_time_draft())
        store.delete_rule(rule.id)
        assert store.get_rules() == []

    def test_delete_unknown_rule_raises(self, store):
        with pytest.raises(RuleNotFoundError):
            store.delete_rule("recmissing")


class TestSessions:
    def test_overlap_filter(self, store):
        store.add_session("eng1", at(FRIDAY, "09:00"), at(FRIDAY, "10:00"), session_id="s1")
        store.add_session("eng1", at(FRIDAY, "23:00"), at(FRIDAY, "23:59"), session_id="s2")
        store.add_session("eng2", at(FRIDAY, "09:00"), at(FRIDAY, "10:00"), session_id="s3")
        found = store.get_sessions(at(FRIDAY, "08:00"), at(FRIDAY, "12:00"), "eng1")
        assert [s.id for s in found] == ["s1"]

    def test_session_starting_at_window_start_included(self, store):
        store.add_session("eng1", at(FRIDAY, "00:00"), at(FRIDAY, "01:00"), session_id="s1")
        found = store.get_sessions(at(FRIDAY, "00:00"), at(FRIDAY, "12:00"))
        assert [s.id for s in found] == ["s1"]


class TestSnapshot:
    def test_from_snapshot(self, utc_config):
        store = RuleStore.from_snapshot(
            {
                "engineers": [{"id": "eng1", "name": "Dana Ortiz"}],
                "rules": [
                    {
                        "id": "rec1",
                        "engineer_id": "eng1",
                        "status": "Available",
                        "rule_type": "recurring",
                        "start_time": "09:00",
                        "end_time": "17:00",
                        "recurrence_days": ["Fri"],
                        "updated_at": "2030-01-01T00:00:00Z",
                    }
                ],
                "sessions": [
                    {
                        "id": "s1",
                        "engineer_id": "eng1",
                        "start": "2025-03-14T10:00:00Z",
                        "end": "2025-03-14T11:00:00Z",
                    }
                ],
            },
            utc_config,
        )
        assert isinstance(store.get_rules()[0], RecurringRule)
        assert store.find_engineer("Dana Ortiz").id == "eng1"
        # New writes must sort after snapshot rules even with a stale clock.
        created = store.create_rule(_one_time_draft())
        assert created.updated_at > store.get_rules()[0].updated_at
