"""
Activity Module: Unified project activity feed.

This module provides:
- models.py: ActivityItem, Attachment and preview helpers
- adapters.py: One normalization function per source collection
- thread.py: build_thread() merge and sort, filter_thread() views
"""

from .adapters import (
    email_thread_to_item,
    email_to_item,
    job_message_to_item,
    project_message_to_item,
)
from .models import ActivityItem, ActivityType, Attachment, preview_text, strip_markup
from .thread import THREAD_VIEWS, build_thread, filter_thread

__all__ = [
    # Models
    "ActivityItem",
    "ActivityType",
    "Attachment",
    "preview_text",
    "strip_markup",
    # Adapters
    "email_to_item",
    "email_thread_to_item",
    "project_message_to_item",
    "job_message_to_item",
    # Thread
    "THREAD_VIEWS",
    "build_thread",
    "filter_thread",
]
