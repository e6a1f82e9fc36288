"""
Attention Engine: Evaluate the rule registry over a project snapshot.

Ordering contract:
- HIGH before MEDIUM
- equal priority keeps rule registration order, then emission order
- the first item for a given id wins

A rule that raises on unexpected data is logged and skipped; the other rules
still run.

The engine reads no configuration: thresholds arrive as an argument and
default to the declared values.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from projectdesk.contracts.thresholds import AttentionThresholds
from projectdesk.observability import DerivationContext, get_logger
from projectdesk.records import parse_timestamp

from .models import AttentionItem, ProjectSnapshot, attention_id
from .rules import RULES, AttentionRule, RuleContext

logger = get_logger(__name__)

# Data-shape failures a rule may hit on records nobody validated
RULE_ERRORS = (TypeError, ValueError, KeyError, AttributeError, ArithmeticError)


def _resolve_now(now: datetime | str | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    parsed = parse_timestamp(now)
    if parsed is None:
        raise ValueError(f"Unparseable evaluation time: {now!r}")
    return parsed


def _as_snapshot(snapshot: ProjectSnapshot | Mapping[str, Any] | None) -> ProjectSnapshot:
    if isinstance(snapshot, ProjectSnapshot):
        return snapshot
    return ProjectSnapshot.from_dict(snapshot)


def evaluate_rule(
    rule: AttentionRule,
    snapshot: ProjectSnapshot | Mapping[str, Any] | None,
    now: datetime | str | None = None,
    thresholds: AttentionThresholds | None = None,
) -> list[AttentionItem]:
    """
    Run a single rule and wrap its findings as AttentionItems.

    Raises whatever the rule raises; compute_attention_items is the
    fault-tolerant entry point.
    """
    snapshot = _as_snapshot(snapshot)
    ctx = RuleContext(
        now=_resolve_now(now),
        thresholds=thresholds if thresholds is not None else AttentionThresholds(),
    )
    return list(_run(rule, snapshot, ctx))


def _run(rule: AttentionRule, snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterable[AttentionItem]:
    for entity_id, message in rule.evaluate(snapshot, ctx):
        entity_id = str(entity_id)
        yield AttentionItem(
            id=attention_id(rule.category, rule.name, entity_id),
            category=rule.category,
            priority=rule.priority,
            message=message,
            deep_link_tab=rule.deep_link_tab,
            rule=rule.name,
            entity_id=entity_id,
        )


def compute_attention_items(
    snapshot: ProjectSnapshot | Mapping[str, Any] | None,
    *,
    now: datetime | str | None = None,
    thresholds: AttentionThresholds | None = None,
    rules: Iterable[AttentionRule] | None = None,
    max_items: int | None = None,
) -> list[AttentionItem]:
    """
    Derive the prioritized attention list for one project.

    Args:
        snapshot: ProjectSnapshot, or a mapping accepted by
            ProjectSnapshot.from_dict
        now: Evaluation instant; defaults to the current UTC time
        thresholds: Rule thresholds; defaults to AttentionThresholds().
            Callers resolve configured values with load_thresholds()
        rules: Rule registry override; defaults to RULES
        max_items: Optional cap applied after ordering

    Returns:
        New list of AttentionItem. Empty when the snapshot is empty.
    """
    snapshot = _as_snapshot(snapshot)
    if snapshot.is_empty():
        return []

    ctx = RuleContext(
        now=_resolve_now(now),
        thresholds=thresholds if thresholds is not None else AttentionThresholds(),
    )
    registry = tuple(rules) if rules is not None else RULES

    collected: list[AttentionItem] = []
    seen: set[str] = set()

    with DerivationContext(project_id=snapshot.project_id):
        for rule in registry:
            try:
                found = list(_run(rule, snapshot, ctx))
            except RULE_ERRORS as exc:
                logger.warning(
                    "Attention rule %s failed: %s",
                    rule.name,
                    exc,
                    extra={"rule": rule.name},
                )
                continue

            for item in found:
                if item.id in seen:
                    continue
                seen.add(item.id)
                collected.append(item)

        # Stable: ties keep registration then emission order
        ordered = sorted(collected, key=lambda item: item.priority.rank)
        if max_items is not None:
            ordered = ordered[: max(max_items, 0)]

        logger.debug(
            "Derived attention items",
            extra={"items": len(ordered), "rules": len(registry)},
        )

    return ordered


def summarize(items: Iterable[AttentionItem]) -> dict[str, dict[str, int]]:
    """Counts per category and per priority, for panel badges."""
    items = list(items)
    return {
        "by_category": dict(Counter(item.category.value for item in items)),
        "by_priority": dict(Counter(item.priority.value for item in items)),
    }
