"""
Derivation context with context-local storage.
"""

import contextvars
from typing import Optional

# Context-local project id; concurrent derivations each see their own value
_project_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "project_id", default=None
)


def get_project_id() -> Optional[str]:
    """Get the project id of the derivation running in this context."""
    return _project_id_var.get()


def set_project_id(project_id: Optional[str]) -> contextvars.Token:
    """Set the project id in context. Returns token for reset."""
    return _project_id_var.set(project_id)


class DerivationContext:
    """
    Context manager for derivation-scoped logging.

    Usage:
        with DerivationContext(project_id="proj-123"):
            logger.info("Deriving")
            # All logs within this block carry project_id

    Nesting is safe; exiting restores the outer value.
    """

    def __init__(self, project_id: Optional[str] = None):
        self.project_id = project_id
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "DerivationContext":
        self._token = set_project_id(self.project_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _project_id_var.reset(self._token)
            self._token = None
