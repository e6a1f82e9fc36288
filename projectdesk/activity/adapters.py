"""
Source Adapters: One normalization function per activity source.

Each adapter maps one raw record to one ActivityItem. Adapters never drop a
record for missing optional fields: absent timestamps stay None, absent
authors get the placeholder.
"""

import posixpath
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from projectdesk import config
from projectdesk.records import first, flag, is_outbound, record_id, text, timestamp

from .models import ActivityItem, ActivityType, Attachment

INTERNAL_MESSAGE_TYPES = frozenset(("internal", "manual", "note"))


def _item_id(prefix: str, record: Mapping[str, Any], source: str, index: int) -> str:
    rid = record_id(record)
    if rid is None:
        return f"{prefix}-{source}-{index}"
    return f"{prefix}-{rid}"


def _author(record: Mapping[str, Any], name_keys: tuple[str, ...], address_keys: tuple[str, ...]) -> str:
    return text(record, *name_keys) or text(record, *address_keys) or config.UNKNOWN_AUTHOR


def _body(record: Mapping[str, Any], *keys: str) -> str:
    value = first(record, *keys)
    return str(value) if value is not None else ""


def _attachment_name(url: str) -> str:
    path = urlparse(url).path or url
    return posixpath.basename(path.rstrip("/")) or url


def attachments_of(record: Mapping[str, Any]) -> tuple[Attachment, ...]:
    """
    Ordered attachments of a record.

    Entries may be URL strings or mappings with url/file_url and
    name/filename. Entries without a URL are skipped.
    """
    raw = first(record, "attachments")
    if not isinstance(raw, (list, tuple)):
        return ()

    result = []
    for entry in raw:
        if isinstance(entry, str):
            url = entry.strip()
            name = _attachment_name(url) if url else ""
        elif isinstance(entry, Mapping):
            url = text(entry, "url", "file_url", "download_url")
            name = text(entry, "name", "filename", "file_name")
            if url and not name:
                name = _attachment_name(url)
        else:
            continue
        if url:
            result.append(Attachment(url=url, name=name))
    return tuple(result)


def email_to_item(
    record: Mapping[str, Any],
    index: int = 0,
    thread_subjects: Mapping[str, str] | None = None,
) -> ActivityItem:
    thread_id = first(record, "thread_id")
    thread_id = str(thread_id) if thread_id is not None else None
    subject = text(record, "subject")
    if not subject and thread_subjects and thread_id is not None:
        subject = thread_subjects.get(thread_id, "")

    return ActivityItem(
        id=_item_id("email", record, "email", index),
        type=ActivityType.EMAIL,
        timestamp=timestamp(record, "sent_at", "created_at"),
        author_name=_author(record, ("from_name", "sender_name"), ("from_address", "from_email")),
        body=_body(record, "body_html", "body_text", "content", "snippet"),
        attachments=attachments_of(record),
        metadata={
            "source": "email",
            "subject": subject or None,
            "is_outbound": is_outbound(record),
            "is_internal": False,
            "thread_id": thread_id,
        },
    )


def email_thread_to_item(record: Mapping[str, Any], index: int = 0) -> ActivityItem:
    """Summary entry for a thread none of whose emails were supplied."""
    return ActivityItem(
        id=_item_id("email-thread", record, "summary", index),
        type=ActivityType.EMAIL,
        timestamp=timestamp(record, "last_message_date", "created_date"),
        author_name=_author(record, ("from_name",), ("from_address",)),
        body=_body(record, "last_message_snippet", "snippet"),
        attachments=attachments_of(record),
        metadata={
            "source": "email_thread",
            "subject": text(record, "subject") or None,
            "is_outbound": is_outbound(record),
            "is_internal": False,
            "thread_id": record_id(record),
        },
    )


def project_message_to_item(record: Mapping[str, Any], index: int = 0) -> ActivityItem:
    message_type = text(record, "message_type").lower()
    internal = flag(record, "is_internal") or message_type in INTERNAL_MESSAGE_TYPES

    return ActivityItem(
        id=_item_id("message", record, "message", index),
        type=ActivityType.MESSAGE,
        timestamp=timestamp(record, "created_date"),
        author_name=_author(record, ("sender_name", "created_by_name"), ("sender_email", "created_by")),
        body=_body(record, "content", "message"),
        attachments=attachments_of(record),
        metadata={
            "source": "project_message",
            "subject": None,
            "is_outbound": False,
            "is_internal": internal,
            "message_type": message_type or None,
        },
    )


def job_message_to_item(record: Mapping[str, Any], index: int = 0) -> ActivityItem:
    job_id = first(record, "job_id")
    return ActivityItem(
        id=_item_id("note", record, "note", index),
        type=ActivityType.NOTE,
        timestamp=timestamp(record, "created_at", "created_date"),
        author_name=_author(record, ("sender_name", "technician_name"), ("sender_email", "technician_email")),
        body=_body(record, "message", "content", "note"),
        attachments=attachments_of(record),
        metadata={
            "source": "job_message",
            "subject": None,
            "is_outbound": False,
            "is_internal": True,
            "job_id": str(job_id) if job_id is not None else None,
        },
    )
