"""Rule contract, base class and score ledger."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import SplitResult, urlsplit

from .. import evidence as ev
from ..models import (
    Category,
    EvidenceItem,
    PageContent,
    RuleConfig,
    RuleIssue,
    RuleResult,
    ScoreComponent,
)

MAX_SCORE = 100


@runtime_checkable
class Rule(Protocol):
    """Anything the registry can run against a page."""

    id: str
    name: str
    category: Category
    config: RuleConfig

    async def evaluate(self, url: str, content: PageContent) -> RuleResult: ...


class ScoreLedger:
    """Running score plus the ordered list of components that produced it.

    Every change to the score goes through :meth:`deduct` or :meth:`add`, so
    the rendered breakdown always sums to the reported total.
    """

    def __init__(self, base: int = MAX_SCORE, max_score: int = MAX_SCORE):
        self.max_score = max_score
        self._components: list[ScoreComponent] = [ScoreComponent("Base score", base)]

    @classmethod
    def empty(cls, max_score: int = MAX_SCORE) -> "ScoreLedger":
        ledger = cls(max_score=max_score)
        ledger._components.clear()
        return ledger

    def deduct(self, component: str, points: int) -> int:
        """Record a penalty of ``points`` and return the signed delta."""
        delta = -abs(points)
        self._components.append(ScoreComponent(component, delta))
        return delta

    def add(self, component: str, points: int) -> int:
        self._components.append(ScoreComponent(component, points))
        return points

    @property
    def breakdown(self) -> tuple[ScoreComponent, ...]:
        return tuple(self._components)

    @property
    def raw_total(self) -> int:
        return sum(c.points for c in self._components)

    @property
    def score(self) -> int:
        """Total clamped to [0, max_score]."""
        return max(0, min(self.max_score, self.raw_total))

    def render(self) -> list[EvidenceItem]:
        return ev.score_calculation(self._components, self.score, self.max_score)


class Evaluation:
    """Accumulates evidence, issues and recommendations for one evaluate() call.

    A penalty writes its ledger component, its evidence item (carrying the
    same signed delta) and its issue together.
    """

    def __init__(self, ledger: Optional[ScoreLedger] = None):
        self.ledger = ledger or ScoreLedger()
        self.evidence: list[EvidenceItem] = []
        self.issues: list[RuleIssue] = []
        self.recommendations: list[str] = []

    def note(
        self,
        item: EvidenceItem,
        issue: Optional[RuleIssue] = None,
        recommendation: Optional[str] = None,
    ) -> None:
        """Record an observation that does not change the score."""
        self.evidence.append(item)
        if issue is not None:
            self.issues.append(issue)
        if recommendation:
            self.recommend(recommendation)

    def recommend(self, recommendation: str) -> None:
        if recommendation not in self.recommendations:
            self.recommendations.append(recommendation)

    def penalize(
        self,
        builder: Callable[..., EvidenceItem],
        message: str,
        *,
        component: str,
        points: int,
        topic: Optional[str] = None,
        issue: Optional[RuleIssue] = None,
        recommendation: Optional[str] = None,
        **metadata,
    ) -> None:
        delta = self.ledger.deduct(component, points)
        self.note(builder(message, topic, score=delta, **metadata), issue, recommendation)

    @property
    def score(self) -> int:
        return self.ledger.score

    def finish(self, rule: "BaseRule", details: Optional[Iterable[str]] = None) -> RuleResult:
        """Append the score calculation block and build the result."""
        evidence = list(self.evidence)
        evidence.extend(self.ledger.render())
        return rule.create_result(
            self.ledger.score,
            evidence,
            self.issues,
            details,
            self.recommendations,
        )


def parse_absolute_url(url: str) -> SplitResult:
    """Split ``url``, raising ValueError unless it is absolute."""
    if not isinstance(url, str) or not url.strip():
        raise ValueError("URL is empty")
    parsed = urlsplit(url.strip())
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid URL: {url!r} is not an absolute URL")
    parsed.port  # raises ValueError for a malformed port
    if not parsed.hostname:
        raise ValueError(f"Invalid URL: {url!r} has no host")
    return parsed


class BaseRule(ABC):
    """Shared identity and result assembly for concrete rules."""

    def __init__(self, rule_id: str, name: str, category: Category, config: RuleConfig):
        if not rule_id:
            raise ValueError("Rule id must not be empty")
        if not 1 <= config.impact_score <= 5:
            raise ValueError(f"Rule {rule_id}: impact_score must be within 1..5, got {config.impact_score}")
        self.id = rule_id
        self.name = name
        self.category = category
        self.config = config

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"

    def applies_to(self, page_type: Optional[str]) -> bool:
        if not self.config.page_types or page_type is None:
            return True
        return page_type in self.config.page_types

    @abstractmethod
    async def evaluate(self, url: str, content: PageContent) -> RuleResult:
        """Evaluate the rule for one page.

        Expected failures (malformed input, unavailable external judge) are
        turned into evidence, never raised.
        """

    def create_result(
        self,
        score: int,
        evidence: Iterable[EvidenceItem],
        issues: Optional[Iterable[RuleIssue]] = None,
        details: Optional[Iterable[str]] = None,
        recommendations: Optional[Iterable[str]] = None,
    ) -> RuleResult:
        return RuleResult(
            rule_id=self.id,
            rule_name=self.name,
            category=self.category,
            score=score,
            evidence=tuple(evidence),
            issues=tuple(issues or ()),
            details=tuple(details or ()),
            recommendations=tuple(recommendations or ()),
        )

    def failed_result(self, message: str) -> RuleResult:
        """0-scored result explaining why the rule could not run."""
        ledger = ScoreLedger.empty()
        evidence = [ev.info(f"Error evaluating {self.name}: {message}", "Error")]
        evidence.extend(ledger.render())
        return self.create_result(ledger.score, evidence, details=[f"error: {message}"])
