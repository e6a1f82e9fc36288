"""
Centralized configuration for ProjectDesk.

All values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os

# ============================================================
# Environment
# ============================================================

ENVIRONMENT: str = os.environ.get("PROJECTDESK_ENV", "default")
"""Threshold environment profile: one of default, strict, lenient."""

THRESHOLDS_FILE: str | None = os.environ.get("PROJECTDESK_THRESHOLDS_FILE") or None
"""Explicit path to an attention thresholds YAML file."""

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("PROJECTDESK_LOG_LEVEL", "INFO")
"""Root log level used by the CLI."""

_log_json = os.environ.get("PROJECTDESK_LOG_JSON", "").strip().lower()
LOG_JSON: bool | None = {"1": True, "true": True, "0": False, "false": False}.get(_log_json)
"""Force JSON (true) or human (false) log lines. Unset = auto-detect."""

# ============================================================
# Activity feed
# ============================================================

PREVIEW_LIMIT: int = 150
"""Characters kept in an activity body preview."""

PREVIEW_ELLIPSIS: str = "..."
"""Marker appended when a preview was truncated."""

UNKNOWN_AUTHOR: str = "Unknown"
"""Placeholder shown when a record has neither a name nor an address."""
