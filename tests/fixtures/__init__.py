"""
Test fixtures for deterministic testing.

This module provides:
- records: Record builders and timestamps relative to a pinned NOW
"""

from .records import NOW, at, days_ago, days_ahead, hours_ago, hours_ahead, iso, project, snapshot

__all__ = [
    "NOW",
    "at",
    "days_ago",
    "days_ahead",
    "hours_ago",
    "hours_ahead",
    "iso",
    "project",
    "snapshot",
]
