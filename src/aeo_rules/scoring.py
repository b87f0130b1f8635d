"""Run rules against pages and aggregate their results."""

import asyncio
import logging
import time
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from . import evidence as ev
from .models import Category, IssueSeverity, PageContent, RuleIssue, RuleResult
from .registry import RuleRegistry
from .rules import Rule

logger = logging.getLogger(__name__)

QUICK_WIN_COUNT = 5


@dataclass
class Recommendation:
    """A deduplicated recommendation and the rule it came from."""
    content: str
    rule_id: str
    category: Category


@dataclass
class CategoryScore:
    """Impact-weighted score of the rules in one category."""
    category: Category
    score: int  # 0-100
    weight: float
    applied_rules: int = 0
    passed_rules: int = 0
    rule_results: list[RuleResult] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "score": self.score,
            "weight": self.weight,
            "appliedRules": self.applied_rules,
            "passedRules": self.passed_rules,
            "ruleResults": [r.to_dict() for r in self.rule_results],
            "issues": list(self.issues),
            "recommendations": [
                {"content": r.content, "ruleId": r.rule_id, "ruleCategory": r.category.value}
                for r in self.recommendations
            ],
        }


@dataclass
class PageScore:
    """All rule results for one page plus the rolled-up scores."""
    url: str
    page_type: Optional[str]
    category_scores: dict[Category, CategoryScore] = field(default_factory=dict)
    global_score: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_ms: int = 0

    @property
    def rule_results(self) -> list[RuleResult]:
        return [r for c in self.category_scores.values() for r in c.rule_results]

    @property
    def all_issues(self) -> list[tuple[RuleResult, RuleIssue]]:
        return [(r, issue) for r in self.rule_results for issue in r.issues]

    @property
    def total_issues(self) -> int:
        return len(self.all_issues)

    @property
    def critical_issues(self) -> int:
        return sum(1 for _, issue in self.all_issues if issue.severity is IssueSeverity.CRITICAL)

    @property
    def quick_wins(self) -> list[tuple[RuleResult, RuleIssue]]:
        """Most severe issues first; ties keep rule order."""
        return sorted(self.all_issues, key=lambda pair: pair[1].severity.rank, reverse=True)[:QUICK_WIN_COUNT]

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "pageType": self.page_type,
            "timestamp": self.timestamp.isoformat(),
            "durationMs": self.duration_ms,
            "globalScore": self.global_score,
            "totalIssues": self.total_issues,
            "criticalIssues": self.critical_issues,
            "categoryScores": {
                c.value.lower(): score.to_dict() for c, score in self.category_scores.items()
            },
        }


def failed_rule_result(rule: Rule, exc: BaseException) -> RuleResult:
    """0-scored stand-in for a rule that raised."""
    message = f"Error executing rule: {exc}"
    evidence = [ev.error(message, "Error")]
    evidence.extend(ev.score_calculation([], 0))
    return RuleResult(
        rule_id=rule.id,
        rule_name=rule.name,
        category=rule.category,
        score=0,
        evidence=tuple(evidence),
        details=(f"error: {exc}",),
    )


async def evaluate_rule(rule: Rule, url: str, content: PageContent) -> RuleResult:
    start = time.time()
    try:
        result = await rule.evaluate(url, content)
    except Exception as e:
        logger.exception("Error executing rule %s on %s", rule.id, url)
        return failed_rule_result(rule, e)
    logger.debug("Rule %s completed in %dms", rule.id, int((time.time() - start) * 1000))
    return result


async def evaluate_rules(rules: Sequence[Rule], url: str, content: PageContent) -> list[RuleResult]:
    """Run ``rules`` concurrently; results keep the order of ``rules``."""
    return list(await asyncio.gather(*(evaluate_rule(rule, url, content) for rule in rules)))


def _weighted_mean(pairs: Iterable[tuple[float, float]]) -> int:
    total = weight_sum = 0.0
    for value, weight in pairs:
        total += value * weight
        weight_sum += weight
    return round(total / weight_sum) if weight_sum > 0 else 0


def category_score(
    category: Category,
    weight: float,
    rules: Sequence[Rule],
    results: Sequence[RuleResult],
) -> CategoryScore:
    """Aggregate the results of the rules in one category."""
    issues: list[str] = []
    recommendations: dict[tuple[str, str], Recommendation] = {}

    for result in results:
        for issue in result.issues:
            if issue.description not in issues:
                issues.append(issue.description)
            key = (result.rule_id, issue.recommendation)
            recommendations.setdefault(key, Recommendation(issue.recommendation, result.rule_id, category))
        for text in result.recommendations:
            recommendations.setdefault((result.rule_id, text), Recommendation(text, result.rule_id, category))

    impacts = {rule.id: rule.config.impact_score for rule in rules}
    return CategoryScore(
        category=category,
        score=_weighted_mean((r.score, impacts.get(r.rule_id, 1)) for r in results),
        weight=weight,
        applied_rules=len(results),
        passed_rules=sum(1 for r in results if r.passed),
        rule_results=list(results),
        issues=issues,
        recommendations=list(recommendations.values()),
    )


async def score_page(
    registry: RuleRegistry,
    url: str,
    content: PageContent,
    page_type: Optional[str] = None,
) -> PageScore:
    """Evaluate every applicable rule for a page and roll the results up."""
    start = time.time()
    rules = registry.for_page_type(page_type)
    logger.debug("Scoring %s with %d rules", url, len(rules))

    results = await evaluate_rules(rules, url, content)

    weights = registry.category_weights()
    page = PageScore(url=url, page_type=page_type)
    for category in Category:
        pairs = [(rule, result) for rule, result in zip(rules, results) if rule.category == category]
        page.category_scores[category] = category_score(
            category,
            weights.get(category, 1.0),
            [rule for rule, _ in pairs],
            [result for _, result in pairs],
        )

    page.global_score = _weighted_mean(
        (c.score, c.weight) for c in page.category_scores.values() if c.applied_rules > 0
    )
    page.duration_ms = int((time.time() - start) * 1000)
    logger.info(
        "Scored %s in %dms - global score %d, %d issues",
        url, page.duration_ms, page.global_score, page.total_issues,
    )
    return page


@dataclass
class SiteSummary:
    """Roll-up across the scored pages of one site."""
    pages: int
    average_score: float
    category_averages: dict[Category, float] = field(default_factory=dict)
    issue_frequency: dict[str, int] = field(default_factory=dict)  # "rule_id:ISSUE_ID" -> pages
    worst_pages: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pages": self.pages,
            "averageScore": self.average_score,
            "categoryAverages": {c.value.lower(): v for c, v in self.category_averages.items()},
            "issueFrequency": dict(self.issue_frequency),
            "worstPages": [{"url": url, "score": score} for url, score in self.worst_pages],
        }


def summarize_site(page_scores: Sequence[PageScore], worst: int = 5) -> SiteSummary:
    if not page_scores:
        return SiteSummary(pages=0, average_score=0.0)

    category_averages = {}
    for category in Category:
        scores = [
            p.category_scores[category].score
            for p in page_scores
            if category in p.category_scores and p.category_scores[category].applied_rules > 0
        ]
        if scores:
            category_averages[category] = round(sum(scores) / len(scores), 1)

    frequency: Counter = Counter()
    for page in page_scores:
        # Count each issue once per page
        frequency.update({f"{result.rule_id}:{issue.id}" for result, issue in page.all_issues})

    ranked = sorted(page_scores, key=lambda p: p.global_score)
    return SiteSummary(
        pages=len(page_scores),
        average_score=round(sum(p.global_score for p in page_scores) / len(page_scores), 1),
        category_averages=category_averages,
        issue_frequency=dict(frequency.most_common()),
        worst_pages=[(p.url, p.global_score) for p in ranked[:worst]],
    )
