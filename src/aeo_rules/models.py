"""Data models for rule evaluation results."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from bs4 import BeautifulSoup


class EvidenceType(Enum):
    """Kind of observation recorded by a rule."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


class IssueSeverity(Enum):
    """Severity of a catalogued issue."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    IssueSeverity.CRITICAL: 4,
    IssueSeverity.HIGH: 3,
    IssueSeverity.MEDIUM: 2,
    IssueSeverity.LOW: 1,
}


class Category(Enum):
    """Rule category, used for grouping and weighting."""
    TECHNICAL = "TECHNICAL"
    CONTENT = "CONTENT"
    STRUCTURE = "STRUCTURE"
    AUTHORITY = "AUTHORITY"
    QUALITY = "QUALITY"


@dataclass
class PageContent:
    """Already-fetched page content handed to rules.

    Rules only read it; which fields are filled depends on who built it.
    """
    url: str
    html: str = ""
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = field(default_factory=list)
    content: Optional[str] = None
    headings: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_html(cls, url: str, html: str) -> "PageContent":
        """Build page content by parsing raw HTML."""
        soup = BeautifulSoup(html, "lxml")

        title_tag = soup.find("title")
        title = title_tag.get_text(strip=True) if title_tag else None

        desc_tag = soup.find("meta", attrs={"name": "description"})
        description = desc_tag.get("content", "").strip() if desc_tag else None

        kw_tag = soup.find("meta", attrs={"name": "keywords"})
        keywords = []
        if kw_tag and kw_tag.get("content"):
            keywords = [k.strip() for k in kw_tag["content"].split(",") if k.strip()]

        headings = {}
        for level in range(1, 7):
            texts = [h.get_text(" ", strip=True) for h in soup.find_all(f"h{level}")]
            if texts:
                headings[f"h{level}"] = texts

        # Visible text only
        for tag in soup.find_all(["script", "style", "noscript", "template"]):
            tag.decompose()
        body = soup.body or soup
        text = body.get_text(" ", strip=True)

        return cls(
            url=url,
            html=html,
            title=title,
            description=description,
            keywords=keywords,
            content=text or None,
            headings=headings,
        )


@dataclass(frozen=True)
class EvidenceItem:
    """A single narrative observation made while evaluating a rule.

    ``metadata`` may hold ``score`` (signed delta applied), ``maxScore``,
    ``target`` and ``code``. It is stored read-only.
    """
    type: EvidenceType
    message: str
    topic: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value, "message": self.message}
        if self.topic:
            data["topic"] = self.topic
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class RuleIssue:
    """A stable-identity finding backed by an issue catalog entry."""
    id: str
    severity: IssueSeverity
    description: str
    recommendation: str
    affected_elements: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "description": self.description,
            "recommendation": self.recommendation,
            "affectedElements": list(self.affected_elements),
        }


@dataclass(frozen=True)
class ScoreComponent:
    """One entry of the score breakdown ledger."""
    component: str
    points: int


@dataclass(frozen=True)
class RuleConfig:
    """Impact metadata attached to a rule."""
    impact_score: int
    page_types: tuple[str, ...] = ()  # empty means all page types
    is_domain_level: bool = False


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one ``evaluate()`` call."""
    rule_id: str
    rule_name: str
    category: Category
    score: int  # 0-100
    evidence: tuple[EvidenceItem, ...] = ()
    issues: tuple[RuleIssue, ...] = ()
    details: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    PASS_THRESHOLD = 60

    @property
    def passed(self) -> bool:
        return self.score >= self.PASS_THRESHOLD

    @property
    def issue_ids(self) -> list[str]:
        return [issue.id for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "category": self.category.value,
            "score": self.score,
            "passed": self.passed,
            "evidence": [e.to_dict() for e in self.evidence],
            "issues": [i.to_dict() for i in self.issues],
            "details": list(self.details),
            "recommendations": list(self.recommendations),
        }
