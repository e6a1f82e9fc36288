"""
Attention Rules: Registry of independent project-state checks.

Each rule declares its category, priority and deep-link tab statically and
yields (entity_id, message) pairs for the condition it tests. Rules read the
snapshot only; a rule with nothing to look at yields nothing.

Registration order in RULES is the tie-break between equal-priority items,
so new rules go where they should sort, not at the end by default.
"""

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from projectdesk.contracts.thresholds import AttentionThresholds
from projectdesk.records import (
    as_records,
    days_between,
    first,
    flag,
    is_outbound,
    number,
    record_id,
    status_key,
    status_of,
    text,
    timestamp,
)

from .models import AttentionCategory, AttentionPriority, ProjectSnapshot
from .sentiment import detect_negative_sentiment, email_time

# =============================================================================
# STATUS VOCABULARY (normalized with records.status_key)
# =============================================================================

CLOSED_JOB_STATUSES = frozenset(("completed", "cancelled"))
SETTLED_INVOICE_STATUSES = frozenset(("paid", "void", "voided", "deleted"))
CLOSED_PO_STATUSES = frozenset(("received", "completed", "cancelled"))
PART_READY_STATUSES = frozenset(
    (
        "received",
        "invehicle",
        "instorage",
        "inloadingbay",
        "reserved",
        "available",
        "installed",
        "ready",
    )
)
INSTALL_PROJECT_TYPES = frozenset(
    ("Garage Door Install", "Gate Install", "Roller Shutter Install", "Multiple")
)

Finding = tuple[str, str]


@dataclass(frozen=True)
class RuleContext:
    """Evaluation inputs shared by every rule in one derivation."""

    now: datetime
    thresholds: AttentionThresholds


@dataclass(frozen=True)
class AttentionRule:
    """A named, independently testable attention check."""

    name: str
    category: AttentionCategory
    priority: AttentionPriority
    deep_link_tab: str
    evaluate: Callable[[ProjectSnapshot, RuleContext], Iterable[Finding]]
    description: str = ""


def _entity_id(record: Mapping[str, Any], kind: str, index: int) -> str:
    return record_id(record) or f"{kind}-{index}"


def _reference(record: Mapping[str, Any], *keys: str) -> str:
    return text(record, *keys) or text(record, "id", default="Unknown")


def _job_open(job: Mapping[str, Any]) -> bool:
    return status_of(job) not in CLOSED_JOB_STATUSES


def _latest(times: Iterable[datetime | None]) -> datetime | None:
    present = [t for t in times if t is not None]
    return max(present) if present else None


def _log_time(log: Mapping[str, Any]) -> datetime | None:
    return timestamp(log, "created_date", "created_at")


# =============================================================================
# OPS / FINANCE / REQUIREMENTS (HIGH)
# =============================================================================


def client_not_confirmed(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    """Client unconfirmed while a visit is due inside the confirmation window."""
    project = snapshot.project
    if project is None or flag(project, "client_confirmed"):
        return

    window = timedelta(hours=ctx.thresholds.client_confirmation_window_hours)
    upcoming = []
    for index, job in enumerate(snapshot.jobs):
        scheduled = timestamp(job, "scheduled_date")
        if scheduled is None or not _job_open(job):
            continue
        if ctx.now <= scheduled <= ctx.now + window:
            upcoming.append((scheduled, index, job))

    if not upcoming:
        return

    scheduled, index, job = min(upcoming, key=lambda entry: (entry[0], entry[1]))
    hours_until = round((scheduled - ctx.now).total_seconds() / 3600)
    yield _entity_id(job, "job", index), f"Client not confirmed - job in {hours_until}h"


def deposit_missing(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    """Quote accepted but no deposit has landed."""
    if snapshot.project is None:
        return
    accepted = [q for q in snapshot.quotes if status_of(q) == "accepted"]
    if not accepted:
        return

    payments = as_records(first(snapshot.project, "payments"))
    deposit_paid = any(
        status_key(first(p, "payment_status")) == "paid" and "deposit" in text(p, "payment_name").lower()
        for p in payments
    )
    invoice_paid = any((number(inv, "amount_paid") or 0) > 0 for inv in snapshot.invoices)

    if not deposit_paid and not invoice_paid:
        yield snapshot.project_id, "Deposit not received (quote accepted)"


def invoice_overdue(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    """Unsettled invoice with a balance outstanding past its due marker."""
    cutoff = ctx.now - timedelta(days=ctx.thresholds.invoice_grace_days)

    for index, invoice in enumerate(snapshot.invoices):
        status = status_of(invoice)
        if status in SETTLED_INVOICE_STATUSES:
            continue

        total = number(invoice, "total_amount", "total")
        paid = number(invoice, "amount_paid") or 0.0
        if total is not None:
            outstanding = total - paid
        else:
            outstanding = number(invoice, "amount_due")
        if outstanding is not None and outstanding <= 0:
            continue

        due = timestamp(invoice, "due_date")
        past_due = due is not None and due < cutoff
        if status != "overdue" and not past_due:
            continue

        reference = _reference(invoice, "invoice_number", "number")
        if due is not None and due < ctx.now:
            message = f"Invoice {reference} overdue ({days_between(due, ctx.now)} days)"
        else:
            message = f"Invoice {reference} overdue"
        yield _entity_id(invoice, "invoice", index), message


def _part_ready(part: Mapping[str, Any], purchase_orders: dict[str, Mapping[str, Any]]) -> bool:
    status = status_of(part)
    if status in ("cancelled", "installed"):
        return True

    po_id = first(part, "purchase_order_id")
    if po_id is not None:
        linked = purchase_orders.get(str(po_id))
        if linked is not None and status_of(linked) in PART_READY_STATUSES:
            return True

    if status in PART_READY_STATUSES:
        return True

    return (number(part, "received_qty", "quantity_received") or 0) > 0


def install_parts_not_ready(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    """Future install visit booked while parts are still outstanding."""
    install_booked = False
    for job in snapshot.jobs:
        job_type = text(job, "job_type_name", "job_type").lower()
        scheduled = timestamp(job, "scheduled_date")
        if "install" in job_type and scheduled is not None and scheduled > ctx.now and _job_open(job):
            install_booked = True
            break
    if not install_booked:
        return

    purchase_orders = {
        po_id: po for po in snapshot.purchase_orders if (po_id := record_id(po)) is not None
    }
    not_ready = [part for part in snapshot.parts if not _part_ready(part, purchase_orders)]
    if not_ready:
        yield snapshot.project_id, f"Install scheduled but parts not ready ({len(not_ready)})"


def _install_doors(snapshot: ProjectSnapshot) -> list[Mapping[str, Any]] | None:
    """Doors of an install-type project; None when the project is not one."""
    if snapshot.project is None:
        return None
    if text(snapshot.project, "project_type") not in INSTALL_PROJECT_TYPES:
        return None
    return as_records(first(snapshot.project, "doors"))


def requirements_measurements(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    doors = _install_doors(snapshot)
    if doors is None:
        return
    if not any(first(d, "height") is not None and first(d, "width") is not None for d in doors):
        yield snapshot.project_id, "Requirements missing: measurements"


def requirements_door_info(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    doors = _install_doors(snapshot)
    if doors is None:
        return
    if not any(first(d, "type", "style") is not None for d in doors):
        yield snapshot.project_id, "Requirements missing: door information"


def trade_not_booked(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    """Required third-party trade that nobody has booked."""
    for index, trade in enumerate(snapshot.trade_requirements):
        if not flag(trade, "is_required"):
            continue
        if any(flag(trade, key) for key in ("is_booked", "fulfilled", "is_fulfilled")):
            continue
        trade_type = text(trade, "trade_type", "name", default="trade")
        yield _entity_id(trade, "trade", index), f"Third-party trade not booked: {trade_type}"


# =============================================================================
# SALES / OPS / COMMS (MEDIUM)
# =============================================================================


def quote_stale(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    """Quote sent but never opened within the staleness window."""
    threshold = timedelta(days=ctx.thresholds.quote_stale_days)

    for index, quote in enumerate(snapshot.quotes):
        if status_of(quote) != "sent":
            continue
        if first(quote, "viewed_at", "accepted_at") is not None:
            continue
        sent = timestamp(quote, "sent_at", "created_at")
        if sent is None or ctx.now - sent <= threshold:
            continue
        reference = _reference(quote, "quote_number", "name")
        yield (
            _entity_id(quote, "quote", index),
            f"Quote {reference} sent {days_between(sent, ctx.now)} days ago, not viewed",
        )


def job_unscheduled(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    for index, job in enumerate(snapshot.jobs):
        if status_of(job) == "open" and timestamp(job, "scheduled_date") is None:
            reference = _reference(job, "job_number")
            yield _entity_id(job, "job", index), f"Job {reference} has no visit scheduled"


def visit_overdue(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    cutoff = ctx.now - timedelta(days=ctx.thresholds.visit_overdue_grace_days)

    for index, job in enumerate(snapshot.jobs):
        scheduled = timestamp(job, "scheduled_date")
        if scheduled is None or not _job_open(job):
            continue
        if scheduled < cutoff:
            yield _entity_id(job, "job", index), "Visit overdue: not marked completed"


def po_eta_missed(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    cutoff = ctx.now - timedelta(days=ctx.thresholds.po_eta_grace_days)

    for index, po in enumerate(snapshot.purchase_orders):
        if status_of(po) in CLOSED_PO_STATUSES:
            continue
        expected = timestamp(po, "expected_date", "eta_date")
        if expected is None or expected >= cutoff:
            continue
        reference = text(po, "po_number", "supplier_name", default="Unknown")
        yield _entity_id(po, "po", index), f"PO ETA missed: {reference}"


def _followed_up_since(snapshot: ProjectSnapshot, since: datetime) -> bool:
    """Any outbound email or manual log strictly after since."""
    last_outbound = _latest(email_time(e) for e in snapshot.emails if is_outbound(e))
    last_log = _latest(_log_time(log) for log in snapshot.manual_logs)
    return any(t is not None and t > since for t in (last_outbound, last_log))


def client_awaiting_response(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    """Latest inbound email is newer than anything we sent or logged."""
    latest_index = None
    latest_time = None
    for index, email in enumerate(snapshot.emails):
        if is_outbound(email):
            continue
        sent = email_time(email)
        if sent is not None and (latest_time is None or sent > latest_time):
            latest_index, latest_time = index, sent

    if latest_time is None or _followed_up_since(snapshot, latest_time):
        return

    waited = ctx.now - latest_time
    if waited <= timedelta(hours=ctx.thresholds.inbound_response_hours):
        return

    email = snapshot.emails[latest_index]
    yield _entity_id(email, "email", latest_index), "Client email awaiting response"


def negative_sentiment(snapshot: ProjectSnapshot, ctx: RuleContext) -> Iterator[Finding]:
    hit = detect_negative_sentiment(snapshot.emails)
    if hit is None:
        return
    # Undated hit counts as unanswered
    if hit.timestamp is not None and _followed_up_since(snapshot, hit.timestamp):
        return
    yield hit.email_id or snapshot.project_id, "Client frustration detected: follow up required"


# =============================================================================
# REGISTRY
# =============================================================================

RULES: tuple[AttentionRule, ...] = (
    AttentionRule(
        name="client_not_confirmed",
        category=AttentionCategory.OPS,
        priority=AttentionPriority.HIGH,
        deep_link_tab="overview",
        evaluate=client_not_confirmed,
        description="Client not confirmed with a visit inside the confirmation window",
    ),
    AttentionRule(
        name="deposit_missing",
        category=AttentionCategory.FINANCE,
        priority=AttentionPriority.HIGH,
        deep_link_tab="invoices",
        evaluate=deposit_missing,
        description="Quote accepted, no deposit received",
    ),
    AttentionRule(
        name="invoice_overdue",
        category=AttentionCategory.FINANCE,
        priority=AttentionPriority.HIGH,
        deep_link_tab="invoices",
        evaluate=invoice_overdue,
        description="Invoice with a balance outstanding past its due date",
    ),
    AttentionRule(
        name="install_parts_not_ready",
        category=AttentionCategory.OPS,
        priority=AttentionPriority.HIGH,
        deep_link_tab="parts",
        evaluate=install_parts_not_ready,
        description="Install booked while parts are outstanding",
    ),
    AttentionRule(
        name="requirements_measurements",
        category=AttentionCategory.REQUIREMENTS,
        priority=AttentionPriority.HIGH,
        deep_link_tab="requirements",
        evaluate=requirements_measurements,
        description="Install project without door measurements",
    ),
    AttentionRule(
        name="requirements_door_info",
        category=AttentionCategory.REQUIREMENTS,
        priority=AttentionPriority.HIGH,
        deep_link_tab="requirements",
        evaluate=requirements_door_info,
        description="Install project without door type or style",
    ),
    AttentionRule(
        name="trade_not_booked",
        category=AttentionCategory.REQUIREMENTS,
        priority=AttentionPriority.HIGH,
        deep_link_tab="requirements",
        evaluate=trade_not_booked,
        description="Required third-party trade not booked",
    ),
    AttentionRule(
        name="quote_stale",
        category=AttentionCategory.SALES,
        priority=AttentionPriority.MEDIUM,
        deep_link_tab="quoting",
        evaluate=quote_stale,
        description="Sent quote not viewed within the staleness window",
    ),
    AttentionRule(
        name="job_unscheduled",
        category=AttentionCategory.OPS,
        priority=AttentionPriority.MEDIUM,
        deep_link_tab="visits",
        evaluate=job_unscheduled,
        description="Open job without a scheduled visit",
    ),
    AttentionRule(
        name="visit_overdue",
        category=AttentionCategory.OPS,
        priority=AttentionPriority.MEDIUM,
        deep_link_tab="visits",
        evaluate=visit_overdue,
        description="Scheduled visit in the past and not completed",
    ),
    AttentionRule(
        name="po_eta_missed",
        category=AttentionCategory.OPS,
        priority=AttentionPriority.MEDIUM,
        deep_link_tab="parts",
        evaluate=po_eta_missed,
        description="Purchase order past its expected date",
    ),
    AttentionRule(
        name="client_awaiting_response",
        category=AttentionCategory.COMMS,
        priority=AttentionPriority.MEDIUM,
        deep_link_tab="activity",
        evaluate=client_awaiting_response,
        description="Inbound client email not answered",
    ),
    AttentionRule(
        name="negative_sentiment",
        category=AttentionCategory.COMMS,
        priority=AttentionPriority.MEDIUM,
        deep_link_tab="activity",
        evaluate=negative_sentiment,
        description="Frustrated client email without a follow-up",
    ),
)

RULES_BY_NAME: dict[str, AttentionRule] = {rule.name: rule for rule in RULES}
