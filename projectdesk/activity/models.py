"""
Activity Models: Normalized activity feed entries.

An ActivityItem is derived, never persisted: built fresh on every
build_thread() call and discarded after render.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from projectdesk import config

_MARKUP_TAG = re.compile(r"<[^>]*>")


class ActivityType(StrEnum):
    """Feed entry kinds, in source precedence order."""

    EMAIL = "email"
    MESSAGE = "message"
    NOTE = "note"


@dataclass(frozen=True)
class Attachment:
    url: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "name": self.name}


def strip_markup(body: str | None) -> str:
    """Remove every <...> tag from body."""
    if not body:
        return ""
    return _MARKUP_TAG.sub("", str(body))


def preview_text(
    body: str | None,
    limit: int = config.PREVIEW_LIMIT,
    ellipsis: str = config.PREVIEW_ELLIPSIS,
) -> str:
    """
    Markup-free preview of body.

    Tags are stripped first, then the text is cut to limit characters.
    The ellipsis is appended only when something was cut.
    """
    plain = strip_markup(body)
    if len(plain) <= limit:
        return plain
    return plain[:limit] + ellipsis


@dataclass(frozen=True)
class ActivityItem:
    """One entry of the unified project activity feed."""

    id: str
    type: ActivityType
    timestamp: datetime | None
    author_name: str
    body: str = ""
    attachments: tuple[Attachment, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def preview(self) -> str:
        return preview_text(self.body)

    @property
    def subject(self) -> str | None:
        return self.metadata.get("subject")

    @property
    def is_outbound(self) -> bool:
        return bool(self.metadata.get("is_outbound"))

    @property
    def is_internal(self) -> bool:
        return bool(self.metadata.get("is_internal"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "authorName": self.author_name,
            "body": self.body,
            "preview": self.preview,
            "attachments": [a.to_dict() for a in self.attachments],
            "metadata": dict(self.metadata),
        }
