"""
Test configuration: ensures repo root is in sys.path + determinism guards.

Every test runs against a fixed evaluation instant and the shipped default
threshold profile, regardless of PROJECTDESK_* variables in the developer's
shell.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import projectdesk and tests.fixtures
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from projectdesk import config  # noqa: E402
from projectdesk.contracts import AttentionThresholds  # noqa: E402
from tests.fixtures import NOW  # noqa: E402

# =============================================================================
# DETERMINISM GUARD: pin configuration
# =============================================================================


@pytest.fixture(autouse=True)
def _pin_config(monkeypatch):
    """Ignore PROJECTDESK_ENV / PROJECTDESK_THRESHOLDS_FILE from the shell."""
    monkeypatch.setattr(config, "ENVIRONMENT", "default")
    monkeypatch.setattr(config, "THRESHOLDS_FILE", None)


# =============================================================================
# SHARED FIXTURES
# =============================================================================


@pytest.fixture
def now():
    """Fixed evaluation instant (a Monday morning)."""
    return NOW


@pytest.fixture
def thresholds():
    """Default thresholds, independent of the YAML file on disk."""
    return AttentionThresholds()
