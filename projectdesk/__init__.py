# ProjectDesk - Derivation Core
"""
Pure derivations over one project's records.

- build_thread(): unified, newest-first activity feed
- compute_attention_items(): prioritized attention callouts
"""

from .activity import ActivityItem, ActivityType, Attachment, build_thread, filter_thread, preview_text
from .attention import (
    AttentionCategory,
    AttentionItem,
    AttentionPriority,
    ProjectSnapshot,
    compute_attention_items,
)
from .contracts import AttentionThresholds, load_thresholds

__version__ = "0.3.0"

__all__ = [
    "ActivityItem",
    "ActivityType",
    "Attachment",
    "build_thread",
    "filter_thread",
    "preview_text",
    "AttentionCategory",
    "AttentionItem",
    "AttentionPriority",
    "ProjectSnapshot",
    "compute_attention_items",
    "AttentionThresholds",
    "load_thresholds",
]
