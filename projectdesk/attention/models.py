"""
Attention Models: Snapshot input and derived attention items.

AttentionItems are recomputed from scratch on every call; there is no
dismissed state here.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from projectdesk.records import as_mapping, as_records


class AttentionCategory(StrEnum):
    """Closed set of attention categories."""

    FINANCE = "Finance"
    OPS = "Ops"
    REQUIREMENTS = "Requirements"
    COMMS = "Comms"
    SALES = "Sales"


class AttentionPriority(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"

    @property
    def rank(self) -> int:
        return 0 if self is AttentionPriority.HIGH else 1


def attention_id(category: AttentionCategory, rule_name: str, entity_id: str) -> str:
    """Stable composite key: re-deriving unchanged input yields the same id."""
    return f"{category.value}:{rule_name}:{entity_id}"


@dataclass(frozen=True)
class AttentionItem:
    """A single "needs attention" callout with its deep-link target."""

    id: str
    category: AttentionCategory
    priority: AttentionPriority
    message: str
    deep_link_tab: str
    rule: str
    entity_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "priority": self.priority.value,
            "message": self.message,
            "deepLinkTab": self.deep_link_tab,
            "rule": self.rule,
            "entityId": self.entity_id,
        }


# Collection fields, with the record store's camelCase spelling
_COLLECTIONS = {
    "quotes": ("quotes",),
    "invoices": ("invoices",),
    "jobs": ("jobs",),
    "parts": ("parts",),
    "purchase_orders": ("purchase_orders", "purchaseOrders"),
    "emails": ("emails",),
    "manual_logs": ("manual_logs", "manualLogs"),
    "trade_requirements": ("trade_requirements", "tradeRequirements"),
}


@dataclass
class ProjectSnapshot:
    """
    One project plus its related record collections at a point in time.

    Collections are always lists of mappings after construction, whatever
    was passed in.
    """

    project: Mapping[str, Any] | None = None
    quotes: list[Mapping[str, Any]] = field(default_factory=list)
    invoices: list[Mapping[str, Any]] = field(default_factory=list)
    jobs: list[Mapping[str, Any]] = field(default_factory=list)
    parts: list[Mapping[str, Any]] = field(default_factory=list)
    purchase_orders: list[Mapping[str, Any]] = field(default_factory=list)
    emails: list[Mapping[str, Any]] = field(default_factory=list)
    manual_logs: list[Mapping[str, Any]] = field(default_factory=list)
    trade_requirements: list[Mapping[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.project = as_mapping(self.project)
        for name in _COLLECTIONS:
            setattr(self, name, as_records(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ProjectSnapshot":
        if not isinstance(data, Mapping):
            return cls()
        kwargs: dict[str, Any] = {"project": data.get("project")}
        for name, keys in _COLLECTIONS.items():
            for key in keys:
                if key in data:
                    kwargs[name] = data[key]
                    break
        return cls(**kwargs)

    @property
    def project_id(self) -> str:
        if self.project is not None:
            value = self.project.get("id")
            if value is not None and value != "":
                return str(value)
        return "project"

    def is_empty(self) -> bool:
        return self.project is None and not any(getattr(self, name) for name in _COLLECTIONS)
