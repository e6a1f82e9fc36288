"""
Keyword-based frustration detection over inbound client email.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from projectdesk.records import first, is_outbound, record_id, timestamp

NEGATIVE_KEYWORDS = (
    "disappointed",
    "frustrated",
    "unhappy",
    "unacceptable",
    "dissatisfied",
    "complaint",
    "unprofessional",
    "poor service",
    "not happy",
    "very upset",
    "terrible",
    "horrible",
    "awful",
    "disgusted",
    "angry",
    "furious",
    "fed up",
    "sick of",
    "had enough",
    "this is ridiculous",
    "this is unacceptable",
    "extremely poor",
    "very disappointed",
    "very frustrated",
    "still waiting",
    "no response",
    "why hasn't",
    "ridiculous",
    "please explain",
    "call me immediately",
)

_TAG = re.compile(r"<[^>]*>")
_EPOCH = datetime.fromtimestamp(0, UTC)


@dataclass(frozen=True)
class SentimentHit:
    email_id: str | None
    timestamp: datetime | None
    matched_keyword: str


def email_time(email: Mapping[str, Any]) -> datetime | None:
    return timestamp(email, "sent_at", "created_at")


def email_content(email: Mapping[str, Any]) -> str:
    value = first(email, "body_text", "content", "body_html", "snippet")
    if value is None:
        return ""
    return _TAG.sub(" ", str(value)).lower()


def detect_negative_sentiment(
    emails: Iterable[Mapping[str, Any]],
    keywords: Iterable[str] = NEGATIVE_KEYWORDS,
) -> SentimentHit | None:
    """
    Newest inbound email containing a frustration keyword.

    Emails without a timestamp are considered oldest. Returns None when
    nothing matches.
    """
    keywords = tuple(keywords)
    inbound = [email for email in emails if not is_outbound(email)]
    inbound.sort(key=lambda email: email_time(email) or _EPOCH, reverse=True)

    for email in inbound:
        content = email_content(email)
        if not content:
            continue
        for keyword in keywords:
            if keyword in content:
                return SentimentHit(
                    email_id=record_id(email),
                    timestamp=email_time(email),
                    matched_keyword=keyword,
                )
    return None
