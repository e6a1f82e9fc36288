"""
Unified Activity Thread: Merge per-source activity into one feed.

Source precedence is email -> message -> note. Within the email source,
individual emails come first, then threads that none of the supplied emails
belong to. The merged list is sorted newest first with a stable sort, so
equal timestamps keep source precedence and input order, and entries without
a timestamp sink to the end in emission order.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from projectdesk.observability import get_logger
from projectdesk.records import as_records, first, record_id

from .adapters import (
    email_thread_to_item,
    email_to_item,
    job_message_to_item,
    project_message_to_item,
)
from .models import ActivityItem, ActivityType

logger = get_logger(__name__)

# Source keys as sent by the dashboard, with snake_case aliases
_SOURCE_KEYS = {
    "emails": ("emails",),
    "email_threads": ("emailThreads", "email_threads"),
    "project_messages": ("projectMessages", "project_messages"),
    "job_messages": ("jobMessages", "job_messages"),
}

_EARLIEST = datetime.min.replace(tzinfo=UTC)

THREAD_VIEWS = ("all", "external", "internal")


def _source(sources: Mapping[str, Any] | None, name: str, override: Any) -> list[Mapping[str, Any]]:
    if override is not None:
        return as_records(override)
    if not isinstance(sources, Mapping):
        return []
    for key in _SOURCE_KEYS[name]:
        if key in sources:
            return as_records(sources[key])
    return []


def _sort_key(item: ActivityItem) -> tuple[bool, datetime]:
    if item.timestamp is None:
        return (False, _EARLIEST)
    return (True, item.timestamp)


def build_thread(
    sources: Mapping[str, Any] | None = None,
    *,
    emails: Any = None,
    email_threads: Any = None,
    project_messages: Any = None,
    job_messages: Any = None,
) -> list[ActivityItem]:
    """
    Build the unified activity feed for one project.

    Args:
        sources: Mapping with emails, emailThreads, projectMessages and
            jobMessages (snake_case keys also accepted)
        emails, email_threads, project_messages, job_messages: Per-source
            collections; take precedence over the mapping

    Returns:
        New list of ActivityItem, newest first. Never raises on malformed
        input; any missing or non-list collection counts as empty.
    """
    email_records = _source(sources, "emails", emails)
    thread_records = _source(sources, "email_threads", email_threads)
    message_records = _source(sources, "project_messages", project_messages)
    note_records = _source(sources, "job_messages", job_messages)

    thread_subjects: dict[str, str] = {}
    for thread in thread_records:
        tid = record_id(thread)
        subject = first(thread, "subject")
        if tid is not None and subject is not None and tid not in thread_subjects:
            thread_subjects[tid] = str(subject)

    covered_threads = {
        str(first(email, "thread_id")) for email in email_records if first(email, "thread_id") is not None
    }

    items: list[ActivityItem] = []
    items.extend(
        email_to_item(record, index, thread_subjects) for index, record in enumerate(email_records)
    )
    items.extend(
        email_thread_to_item(record, index)
        for index, record in enumerate(thread_records)
        if record_id(record) not in covered_threads
    )
    items.extend(project_message_to_item(record, index) for index, record in enumerate(message_records))
    items.extend(job_message_to_item(record, index) for index, record in enumerate(note_records))

    # sorted() stays stable with reverse=True
    ordered = sorted(items, key=_sort_key, reverse=True)

    logger.debug(
        "Built activity thread",
        extra={
            "emails": len(email_records),
            "email_threads": len(thread_records),
            "project_messages": len(message_records),
            "job_messages": len(note_records),
            "items": len(ordered),
        },
    )
    return ordered


def filter_thread(items: list[ActivityItem], view: str = "all") -> list[ActivityItem]:
    """
    Narrow a built thread to one of the activity tab views.

    - all: everything
    - external: email traffic
    - internal: project messages and job notes

    Unknown views return the full list. Always returns a new list.
    """
    if view == "external":
        return [item for item in items if item.type == ActivityType.EMAIL]
    if view == "internal":
        return [item for item in items if item.type != ActivityType.EMAIL]
    return list(items)
