"""
Observability for the derivation core: structured logging and derivation context.
"""

from .context import DerivationContext, get_project_id, set_project_id
from .logging import HumanFormatter, JSONFormatter, configure_logging, get_logger

__all__ = [
    "DerivationContext",
    "get_project_id",
    "set_project_id",
    "JSONFormatter",
    "HumanFormatter",
    "configure_logging",
    "get_logger",
]
