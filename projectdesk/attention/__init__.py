"""
Attention Module: Derived "needs attention" callouts for a project.

This module provides:
- models.py: ProjectSnapshot input, AttentionItem output, closed enums
- rules.py: Ordered registry of independent rules
- sentiment.py: Frustration keyword detection over inbound email
- engine.py: compute_attention_items() evaluation, ordering, dedup
"""

from .engine import compute_attention_items, evaluate_rule, summarize
from .models import (
    AttentionCategory,
    AttentionItem,
    AttentionPriority,
    ProjectSnapshot,
    attention_id,
)
from .rules import RULES, RULES_BY_NAME, AttentionRule, RuleContext
from .sentiment import NEGATIVE_KEYWORDS, SentimentHit, detect_negative_sentiment

__all__ = [
    # Models
    "AttentionCategory",
    "AttentionItem",
    "AttentionPriority",
    "ProjectSnapshot",
    "attention_id",
    # Rules
    "RULES",
    "RULES_BY_NAME",
    "AttentionRule",
    "RuleContext",
    # Sentiment
    "NEGATIVE_KEYWORDS",
    "SentimentHit",
    "detect_negative_sentiment",
    # Engine
    "compute_attention_items",
    "evaluate_rule",
    "summarize",
]
