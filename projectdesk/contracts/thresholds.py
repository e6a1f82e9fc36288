"""
Thresholds Module: Attention Rule Thresholds with Justifications.

- Every threshold an attention rule reads is declared here
- Thresholds are environment-specific
- Hard-coded defaults, environment overrides, then the YAML file

THRESHOLD JUSTIFICATIONS:
========================

QUOTE_STALE_DAYS = 14
  - Why: A sent quote nobody has opened for two weeks is unlikely to be
    opened without a follow-up call.
  - Source: Quote follow-up board (hot/warm/cold buckets).
  - Risk: Lower values flood the Sales column with quotes still in review.

INVOICE_GRACE_DAYS = 0
  - Why: An unpaid invoice past its due date is overdue the next day.
  - Source: Xero due-date semantics.
  - Risk: Raising it hides genuinely late payers.

CLIENT_CONFIRMATION_WINDOW_HOURS = 24
  - Why: Crews are dispatched the day before; an unconfirmed client inside
    that window means a likely wasted visit.
  - Source: Scheduling desk.

INBOUND_RESPONSE_HOURS = 48
  - Why: Client emails are answered within two business days.
  - Source: Comms service level.

VISIT_OVERDUE_GRACE_DAYS = 0 / PO_ETA_GRACE_DAYS = 0
  - Why: A visit still open after its date, or a PO past its ETA, needs a
    human to reconcile the record on the next pass.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from projectdesk import config, paths

logger = logging.getLogger(__name__)


class ThresholdViolation(Exception):
    """Raised when threshold configuration is invalid."""

    pass


@dataclass
class ThresholdConfig:
    """Configuration for a single threshold."""

    name: str
    value: float
    description: str
    justification: str


# =============================================================================
# THRESHOLD DEFINITIONS
# =============================================================================

DEFAULT_THRESHOLDS = {
    "quote_stale_days": ThresholdConfig(
        name="quote_stale_days",
        value=14,
        description="Days a quote may sit in Sent without being viewed or accepted",
        justification="Two weeks unopened means the quote needs a follow-up call",
    ),
    "invoice_grace_days": ThresholdConfig(
        name="invoice_grace_days",
        value=0,
        description="Days past due_date before an unpaid invoice is flagged",
        justification="Overdue means past the due date",
    ),
    "client_confirmation_window_hours": ThresholdConfig(
        name="client_confirmation_window_hours",
        value=24,
        description="Hours before a scheduled job within which the client must be confirmed",
        justification="Crews are dispatched the day before",
    ),
    "inbound_response_hours": ThresholdConfig(
        name="inbound_response_hours",
        value=48,
        description="Hours an inbound client email may wait for a reply",
        justification="Client emails are answered within two business days",
    ),
    "visit_overdue_grace_days": ThresholdConfig(
        name="visit_overdue_grace_days",
        value=0,
        description="Days past scheduled_date before an open visit is flagged",
        justification="Visits are closed out on the day",
    ),
    "po_eta_grace_days": ThresholdConfig(
        name="po_eta_grace_days",
        value=0,
        description="Days past expected_date before an open purchase order is flagged",
        justification="A missed ETA needs supplier follow-up",
    ),
}


# Environment-specific overrides
ENVIRONMENT_OVERRIDES: dict[str, dict[str, float]] = {
    "default": {},
    "strict": {
        # Tighter follow-up for high-touch accounts
        "quote_stale_days": 7,
        "inbound_response_hours": 24,
    },
    "lenient": {
        # Slower-moving commercial pipeline
        "quote_stale_days": 40,
        "invoice_grace_days": 7,
        "inbound_response_hours": 72,
        "visit_overdue_grace_days": 1,
        "po_eta_grace_days": 3,
    },
}


@dataclass(frozen=True)
class AttentionThresholds:
    """Resolved thresholds handed to attention rules."""

    quote_stale_days: float = 14
    invoice_grace_days: float = 0
    client_confirmation_window_hours: float = 24
    inbound_response_hours: float = 48
    visit_overdue_grace_days: float = 0
    po_eta_grace_days: float = 0

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# THRESHOLD ACCESS
# =============================================================================


def get_thresholds_for_environment(environment: str = "default") -> dict[str, float]:
    """
    Get thresholds for a specific environment.

    Args:
        environment: One of "default", "strict", "lenient". Unknown names
            fall back to the defaults.

    Returns:
        Dict mapping threshold name to value
    """
    thresholds = {k: v.value for k, v in DEFAULT_THRESHOLDS.items()}

    if environment not in ENVIRONMENT_OVERRIDES:
        logger.warning("Unknown threshold environment %r, using defaults", environment)
    thresholds.update(ENVIRONMENT_OVERRIDES.get(environment, {}))

    return thresholds


def _load_file(path: Path) -> dict[str, Any]:
    """Read the thresholds YAML. Missing file = no overrides."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as exc:
        logger.error("Failed to load attention thresholds from %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        logger.error("Attention thresholds file %s is not a mapping, ignoring", path)
        return {}

    # Accept either a flat mapping or one nested under "thresholds"
    section = data.get("thresholds", data)
    return section if isinstance(section, dict) else {}


def validate_thresholds(values: dict[str, Any]) -> dict[str, float]:
    """
    Check threshold values are known, numeric and non-negative.

    Unknown names are logged and dropped.

    Raises:
        ThresholdViolation: If any known threshold has an invalid value
    """
    validated: dict[str, float] = {}
    violations = []

    for name, value in values.items():
        if name not in DEFAULT_THRESHOLDS:
            logger.warning("Ignoring unknown attention threshold %r", name)
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            violations.append(f"{name}: expected a number, got {value!r}")
            continue
        if value < 0:
            violations.append(f"{name}: must be >= 0, got {value!r}")
            continue
        validated[name] = value

    if violations:
        raise ThresholdViolation(
            f"Threshold check failed with {len(violations)} violation(s):\n"
            + "\n".join(f"  - {v}" for v in violations)
        )
    return validated


def load_thresholds(
    environment: str | None = None,
    path: Path | str | None = None,
) -> AttentionThresholds:
    """
    Resolve attention thresholds.

    Merge order: DEFAULT_THRESHOLDS -> ENVIRONMENT_OVERRIDES[environment]
    -> YAML file. Returns a new object on every call.

    Args:
        environment: Override profile; defaults to PROJECTDESK_ENV
        path: YAML file; defaults to paths.thresholds_path()
    """
    environment = environment or config.ENVIRONMENT
    values = get_thresholds_for_environment(environment)

    file_path = Path(path) if path is not None else paths.thresholds_path()
    values.update(validate_thresholds(_load_file(file_path)))

    return AttentionThresholds(**values)
