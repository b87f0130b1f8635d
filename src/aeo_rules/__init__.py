"""AEO Rules - score pages for answer engine visibility."""

__version__ = "0.1.0"

from .models import (
    Category,
    EvidenceItem,
    EvidenceType,
    IssueSeverity,
    PageContent,
    RuleConfig,
    RuleIssue,
    RuleResult,
)
from .registry import RuleRegistry, default_registry
from .scoring import PageScore, score_page, summarize_site

__all__ = [
    "__version__",
    "Category",
    "EvidenceItem",
    "EvidenceType",
    "IssueSeverity",
    "PageContent",
    "RuleConfig",
    "RuleIssue",
    "RuleResult",
    "RuleRegistry",
    "default_registry",
    "PageScore",
    "score_page",
    "summarize_site",
]
