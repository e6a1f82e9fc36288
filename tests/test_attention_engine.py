"""
Tests for compute_attention_items: ordering, dedup, fault tolerance.
"""

import logging
from datetime import UTC, datetime

import pytest

from projectdesk import config
from projectdesk.attention import (
    RULES,
    AttentionCategory,
    AttentionPriority,
    AttentionRule,
    ProjectSnapshot,
    compute_attention_items,
    summarize,
)
from projectdesk.contracts import AttentionThresholds
from tests.fixtures import days_ago, project, snapshot


@pytest.fixture
def busy_snapshot():
    """A project tripping several rules across both priorities."""
    return snapshot(
        quotes=[{"id": "q1", "status": "Sent", "sent_at": days_ago(40)}],
        invoices=[{"id": "inv-1", "total_amount": 1000, "amount_paid": 400, "status": "OVERDUE"}],
        jobs=[{"id": "j1", "status": "Open"}],
        trade_requirements=[{"id": "t1", "trade_type": "Electrician", "is_required": True}],
        emails=[{"id": "e1", "direction": "inbound", "sent_at": days_ago(4)}],
    )


class TestEmptyInput:
    @pytest.mark.parametrize("value", [None, {}, ProjectSnapshot(), {"project": None, "quotes": None}])
    def test_returns_empty_list(self, value, now):
        assert compute_attention_items(value, now=now) == []

    def test_project_without_collections(self, now):
        assert compute_attention_items({"project": project()}, now=now) == []

    def test_garbage_collections(self, now):
        data = {"project": project(), "quotes": "x", "invoices": 5, "jobs": [None, 3], "purchaseOrders": {"id": 1}}
        assert compute_attention_items(data, now=now) == []


class TestScenarios:
    def test_overdue_invoice(self, now):
        data = snapshot(invoices=[{"id": "inv-1", "total_amount": 1000, "amount_paid": 400, "status": "OVERDUE"}])
        items = compute_attention_items(data, now=now)
        assert len(items) == 1
        item = items[0]
        assert item.category == AttentionCategory.FINANCE
        assert item.priority == AttentionPriority.HIGH
        assert item.entity_id == "inv-1"
        assert "inv-1" in item.id

    def test_stale_sent_quote(self, now):
        data = snapshot(quotes=[{"id": "q1", "status": "Sent", "sent_at": days_ago(40)}])
        items = compute_attention_items(data, now=now)
        assert [(i.category, i.priority) for i in items] == [(AttentionCategory.SALES, AttentionPriority.MEDIUM)]


class TestOrdering:
    def test_high_before_medium(self, busy_snapshot, now):
        items = compute_attention_items(busy_snapshot, now=now)
        priorities = [i.priority for i in items]
        assert priorities == sorted(priorities, key=lambda p: p.rank)
        assert priorities[0] == AttentionPriority.HIGH
        assert priorities[-1] == AttentionPriority.MEDIUM

    def test_registration_order_breaks_ties(self, busy_snapshot, now):
        items = compute_attention_items(busy_snapshot, now=now)
        assert [i.rule for i in items] == [
            "invoice_overdue",
            "trade_not_booked",
            "quote_stale",
            "job_unscheduled",
            "client_awaiting_response",
        ]

    def test_medium_rule_registered_first_still_sorts_after_high(self, now):
        def medium(snapshot, ctx):
            yield "x", "medium first"

        def high(snapshot, ctx):
            yield "y", "high second"

        rules = [
            AttentionRule("m", AttentionCategory.OPS, AttentionPriority.MEDIUM, "jobs", medium),
            AttentionRule("h", AttentionCategory.OPS, AttentionPriority.HIGH, "jobs", high),
        ]
        items = compute_attention_items(snapshot(), now=now, rules=rules)
        assert [i.rule for i in items] == ["h", "m"]

    def test_max_items(self, busy_snapshot, now):
        items = compute_attention_items(busy_snapshot, now=now, max_items=2)
        assert [i.rule for i in items] == ["invoice_overdue", "trade_not_booked"]
        assert compute_attention_items(busy_snapshot, now=now, max_items=0) == []


class TestIdempotence:
    def test_same_ids_on_rederivation(self, busy_snapshot, now):
        first_run = compute_attention_items(busy_snapshot, now=now)
        second_run = compute_attention_items(busy_snapshot, now=now)
        assert [i.id for i in first_run] == [i.id for i in second_run]
        assert first_run == second_run

    def test_id_shape(self, busy_snapshot, now):
        ids = {i.id for i in compute_attention_items(busy_snapshot, now=now)}
        assert "Finance:invoice_overdue:inv-1" in ids
        assert "Sales:quote_stale:q1" in ids

    def test_duplicate_ids_collapse(self, now):
        def twice(snapshot, ctx):
            yield "same", "first"
            yield "same", "second"

        rules = [AttentionRule("dup", AttentionCategory.OPS, AttentionPriority.MEDIUM, "jobs", twice)]
        items = compute_attention_items(snapshot(), now=now, rules=rules)
        assert [i.message for i in items] == ["first"]

    def test_snapshot_not_mutated(self, busy_snapshot, now):
        before = repr(busy_snapshot)
        compute_attention_items(busy_snapshot, now=now)
        assert repr(busy_snapshot) == before


class TestFaultTolerance:
    def test_failing_rule_is_skipped(self, busy_snapshot, now, caplog):
        def broken(snapshot, ctx):
            raise TypeError("bad record")
            yield  # pragma: no cover

        rules = (AttentionRule("broken", AttentionCategory.OPS, AttentionPriority.HIGH, "jobs", broken),) + RULES
        with caplog.at_level(logging.WARNING, logger="projectdesk.attention.engine"):
            items = compute_attention_items(busy_snapshot, now=now, rules=rules)

        assert "broken" not in {i.rule for i in items}
        assert len(items) == 5
        assert any("broken" in r.getMessage() for r in caplog.records)

    def test_rule_failing_midway_contributes_nothing(self, now):
        def partial(snapshot, ctx):
            yield "a", "emitted before failure"
            raise ValueError("boom")

        rules = [AttentionRule("partial", AttentionCategory.OPS, AttentionPriority.HIGH, "jobs", partial)]
        assert compute_attention_items(snapshot(), now=now, rules=rules) == []


class TestNow:
    def test_accepts_iso_string(self, busy_snapshot):
        items = compute_attention_items(busy_snapshot, now="2026-03-16T09:00:00Z")
        assert len(items) == 5

    def test_rejects_garbage_now(self, busy_snapshot):
        with pytest.raises(ValueError):
            compute_attention_items(busy_snapshot, now="yesterday")

    def test_defaults_to_current_time(self):
        data = snapshot(invoices=[{"id": "inv-1", "status": "OVERDUE"}])
        assert len(compute_attention_items(data)) == 1


class TestThresholdDefaults:
    def test_configuration_on_disk_is_not_read(self, monkeypatch, tmp_path, now):
        config_file = tmp_path / "attention_thresholds.yaml"
        config_file.write_text("thresholds:\n  quote_stale_days: 14\n")
        monkeypatch.setattr(config, "THRESHOLDS_FILE", str(config_file))
        monkeypatch.setattr(config, "ENVIRONMENT", "lenient")
        data = snapshot(quotes=[{"id": "q1", "status": "Sent", "sent_at": days_ago(20)}])

        first_run = compute_attention_items(data, now=now)
        config_file.write_text("thresholds:\n  quote_stale_days: 30\n")
        second_run = compute_attention_items(data, now=now)

        assert [i.id for i in first_run] == ["Sales:quote_stale:q1"]
        assert second_run == first_run

    def test_explicit_thresholds_apply(self, now):
        data = snapshot(quotes=[{"id": "q1", "status": "Sent", "sent_at": days_ago(20)}])
        assert compute_attention_items(data, now=now, thresholds=AttentionThresholds(quote_stale_days=30)) == []


class TestSnapshot:
    def test_camel_case_keys(self):
        snap = ProjectSnapshot.from_dict(
            {
                "project": {"id": 12},
                "purchaseOrders": [{"id": "po1"}],
                "manualLogs": [{"id": "l1"}],
                "tradeRequirements": [{"id": "t1"}],
            }
        )
        assert snap.project_id == "12"
        assert snap.purchase_orders == [{"id": "po1"}]
        assert snap.manual_logs == [{"id": "l1"}]
        assert snap.trade_requirements == [{"id": "t1"}]

    def test_coerces_bad_values(self):
        snap = ProjectSnapshot(project="nope", quotes=None, jobs=[1, {"id": "j"}])
        assert snap.project is None
        assert snap.quotes == []
        assert snap.jobs == [{"id": "j"}]
        assert snap.project_id == "project"


class TestSerialization:
    def test_to_dict(self, now):
        data = snapshot(invoices=[{"id": "inv-1", "status": "OVERDUE"}])
        item = compute_attention_items(data, now=now)[0]
        assert item.to_dict() == {
            "id": "Finance:invoice_overdue:inv-1",
            "category": "Finance",
            "priority": "HIGH",
            "message": "Invoice inv-1 overdue",
            "deepLinkTab": "invoices",
            "rule": "invoice_overdue",
            "entityId": "inv-1",
        }

    def test_summarize(self, busy_snapshot, now):
        summary = summarize(compute_attention_items(busy_snapshot, now=now))
        assert summary["by_priority"] == {"HIGH": 2, "MEDIUM": 3}
        assert summary["by_category"]["Ops"] == 1


def test_now_fixture_is_utc(now):
    assert now.tzinfo is UTC
    assert now == datetime(2026, 3, 16, 9, 0, tzinfo=UTC)
