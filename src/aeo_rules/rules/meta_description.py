"""Meta description rule."""

import logging
import re
from collections import Counter
from typing import Optional

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field

from .. import evidence as ev
from ..issues import MetaDescriptionIssueId as IssueId
from ..issues import create_meta_description_issue as create_issue
from ..llm import StructuredOutputProvider, get_structured_output
from ..models import Category, PageContent, RuleConfig, RuleResult
from .base import BaseRule, Evaluation

logger = logging.getLogger(__name__)

LLM_TEMPERATURE = 0.3

OPTIMAL_LENGTH = (120, 160)
TOO_SHORT_LENGTH = 50
TOO_LONG_LENGTH = 170
ACCEPTABLE_MAX_LENGTH = 200

SERP_CHARACTERS = re.compile(r"[→•✓★†‡§¶]")
CTA_PATTERNS = [
    re.compile(r"\b(?:learn|discover|find out|explore|get|start|try|see|read)\b", re.IGNORECASE),
    re.compile(r"\b(?:best|top|guide|how to|tips|free|new|exclusive)\b", re.IGNORECASE),
]


class Topic:
    TAG_PRESENCE = "Tag Presence"
    CONTENT_LENGTH = "Content Length"
    KEYWORD_STUFFING = "Keyword Stuffing"
    COMPELLING_LANGUAGE = "Compelling Language"
    SPECIAL_CHARS = "Special Characters"
    UNIQUENESS = "Uniqueness"
    OVERALL_QUALITY = "Overall Quality"


class CompellingLanguage(BaseModel):
    """Schema of the AI verdict on a meta description's language."""

    model_config = ConfigDict(extra="forbid")

    has_compelling_language: bool = Field(description="Whether the description contains call-to-action or persuasive language")
    compelling_words: list[str] = Field(description="Compelling or action-oriented words found, if any")
    language: str = Field(description="Detected language of the description")
    analysis: str = Field(description="Brief explanation of the verdict")
    suggestions: list[str] = Field(description="Concrete suggestions to make the language more compelling")


def _prompt(description: str) -> str:
    return f"""Analyze this meta description for compelling, action-oriented language that would encourage clicks in search results:

Meta Description: "{description}"

Evaluate whether it contains:
1. Call-to-action words (learn, discover, explore, get, try, etc.)
2. Compelling adjectives (best, top, exclusive, new, free, etc.)
3. Persuasive language that encourages engagement
4. Action-oriented verbs

Consider this in ANY language - not just English. Detect the language and analyze appropriately."""


def find_cta_words(text: str) -> list[str]:
    words = []
    for pattern in CTA_PATTERNS:
        words.extend(m.group(0) for m in pattern.finditer(text))
    return words


def repeated_words(text: str) -> list[tuple[str, int]]:
    counts = Counter(w for w in text.lower().split() if len(w) > 3)
    return [(word, count) for word, count in counts.items() if count > 2]


class MetaDescriptionRule(BaseRule):
    """Scores the page's meta description.

    Compelling language is judged by a language model when a provider is
    given, and by a call-to-action word list otherwise or when the call fails.
    """

    def __init__(self, provider: Optional[StructuredOutputProvider] = None, model: Optional[str] = None):
        super().__init__(
            "meta_description",
            "Meta Description",
            Category.STRUCTURE,
            RuleConfig(impact_score=3),
        )
        self.provider = provider
        self.model = model

    async def evaluate(self, url: str, content: PageContent) -> RuleResult:
        soup = BeautifulSoup(content.html or "", "lxml")
        description = self._description(soup, content)
        result = Evaluation()

        if description is None:
            result.penalize(
                ev.error,
                "No meta description found",
                topic=Topic.TAG_PRESENCE,
                component="Missing meta description",
                points=100,
                max_score=100,
                issue=create_issue(IssueId.NO_META_DESCRIPTION, [url]),
                recommendation="Add a meta description tag with 120-160 characters",
            )
            return result.finish(self)

        result.note(ev.info("Meta description present", Topic.TAG_PRESENCE, code=description))

        self._check_length(result, description)
        self._check_keyword_stuffing(result, description)
        await self._check_compelling_language(result, description)
        self._check_special_characters(result, description)
        self._check_uniqueness(result, description, soup, content)

        score = result.score
        if score >= 60:
            result.note(ev.success("Good meta description", Topic.OVERALL_QUALITY))
        elif score >= 40:
            result.note(ev.warning("Meta description needs improvement", Topic.OVERALL_QUALITY))
        else:
            result.note(ev.error("Poor meta description", Topic.OVERALL_QUALITY))

        return result.finish(self)

    @staticmethod
    def _description(soup: BeautifulSoup, content: PageContent) -> Optional[str]:
        tag = soup.find("meta", attrs={"name": re.compile(r"^description$", re.IGNORECASE)})
        if tag is not None and tag.get("content") is not None:
            return tag["content"].strip()
        if not content.html and content.description:
            return content.description.strip()
        return None

    def _check_length(self, result: Evaluation, description: str) -> None:
        length = len(description)
        low, high = OPTIMAL_LENGTH
        target = f"{low}-{high} characters"

        if low <= length <= high:
            result.note(ev.success(
                f"Good meta description found ({length} characters)",
                Topic.CONTENT_LENGTH, target=target, code=description,
            ))
        elif TOO_SHORT_LENGTH <= length < low:
            result.penalize(
                ev.warning, f"Too short meta description found ({length} characters)",
                topic=Topic.CONTENT_LENGTH, component="Short length", points=17, max_score=27,
                target=target, code=description,
                recommendation="Expand meta description to 120-160 characters",
            )
        elif high < length <= ACCEPTABLE_MAX_LENGTH:
            issue = None
            if length > TOO_LONG_LENGTH:
                issue = create_issue(IssueId.TOO_LONG, [description],
                                     f"Meta description too long ({length} characters)")
            result.penalize(
                ev.warning, f"Too long meta description found ({length} characters)",
                topic=Topic.CONTENT_LENGTH, component="Long length", points=17, max_score=27,
                target=target, code=description, issue=issue,
                recommendation="Shorten meta description to 120-160 characters",
            )
        elif length > ACCEPTABLE_MAX_LENGTH:
            result.penalize(
                ev.error, f"Much too long meta description found ({length} characters)",
                topic=Topic.CONTENT_LENGTH, component="Very long length", points=27, max_score=27,
                target=target, code=description,
                issue=create_issue(IssueId.TOO_LONG, [description],
                                   f"Meta description too long ({length} characters)"),
                recommendation="Significantly shorten meta description to 120-160 characters",
            )
        else:
            result.penalize(
                ev.error, f"Much too short meta description found ({length} characters)",
                topic=Topic.CONTENT_LENGTH, component="Very short length", points=27, max_score=27,
                target=target, code=description,
                issue=create_issue(IssueId.TOO_SHORT, [description],
                                   f"Meta description too short ({length} characters)"),
                recommendation="Significantly expand meta description to 120-160 characters",
            )

    def _check_keyword_stuffing(self, result: Evaluation, description: str) -> None:
        repeated = repeated_words(description)
        if not repeated:
            result.note(ev.success("No keyword stuffing detected", Topic.KEYWORD_STUFFING))
            return

        summary = ", ".join(f'"{word}" ({count}x)' for word, count in repeated)
        result.penalize(
            ev.warning, f"Possible keyword stuffing: {summary}",
            topic=Topic.KEYWORD_STUFFING, component="Keyword stuffing penalty", points=20, max_score=20,
            issue=create_issue(IssueId.KEYWORD_STUFFING, [w for w, _ in repeated],
                               f"Possible keyword stuffing: {summary}"),
        )

    async def _check_compelling_language(self, result: Evaluation, description: str) -> None:
        verdict = None
        if self.provider is not None and self.provider.is_configured():
            try:
                answer = await get_structured_output(
                    self.provider,
                    _prompt(description),
                    CompellingLanguage,
                    temperature=LLM_TEMPERATURE,
                    model=self.model,
                )
                verdict = CompellingLanguage.model_validate(answer)
            except Exception as e:
                logger.warning("Compelling language AI analysis failed, using word list: %s", e)

        if verdict is not None:
            has_compelling = verdict.has_compelling_language
            words = verdict.compelling_words
            label = verdict.language
            target = verdict.analysis
            suggestions = verdict.suggestions
        else:
            words = find_cta_words(description)
            has_compelling = bool(words)
            label = "basic analysis"
            target = None
            suggestions = []

        if has_compelling:
            result.note(ev.success(
                f"Contains compelling language ({label})",
                Topic.COMPELLING_LANGUAGE,
                code=", ".join(words) or None,
                target=target,
            ))
            return

        result.penalize(
            ev.warning, f"Lacks compelling call-to-action language ({label})",
            topic=Topic.COMPELLING_LANGUAGE, component="Lacks compelling language", points=15, max_score=15,
            target=target or "Add action-oriented words for +15 points",
            issue=create_issue(IssueId.LACKS_COMPELLING),
        )
        for suggestion in suggestions:
            result.recommend(suggestion)
        if not suggestions:
            result.recommend("Add action-oriented words (learn, discover, explore, etc.)")

    def _check_special_characters(self, result: Evaluation, description: str) -> None:
        if SERP_CHARACTERS.search(description):
            result.note(ev.success("Uses special characters for SERP enhancement", Topic.SPECIAL_CHARS))
        else:
            result.penalize(
                ev.info, "No special characters used",
                topic=Topic.SPECIAL_CHARS, component="No special characters", points=5, max_score=5,
                target="Consider adding special characters (→•✓★) for visual appeal",
            )

    def _check_uniqueness(self, result: Evaluation, description: str, soup: BeautifulSoup,
                          content: PageContent) -> None:
        title_tag = soup.find("title")
        title = title_tag.get_text(strip=True) if title_tag else (content.title or "")
        h1_tag = soup.find("h1")
        if h1_tag is not None:
            h1 = h1_tag.get_text(" ", strip=True)
        else:
            h1 = (content.headings.get("h1") or [""])[0]

        lowered = description.lower()
        if title and lowered == title.lower():
            result.penalize(
                ev.error, "Duplicates title tag",
                topic=Topic.UNIQUENESS, component="Duplicates title penalty", points=30, max_score=30,
                code=title, issue=create_issue(IssueId.DUPLICATES_TITLE, [title]),
            )
        elif h1 and lowered == h1.lower():
            result.penalize(
                ev.error, "Duplicates H1 tag",
                topic=Topic.UNIQUENESS, component="Duplicates H1 penalty", points=30, max_score=30,
                code=h1, issue=create_issue(IssueId.DUPLICATES_H1, [h1]),
            )
        else:
            snippet = description if len(description) <= 60 else description[:60] + "..."
            result.note(ev.success(
                "Unique description (not duplicate of title/H1)",
                Topic.UNIQUENESS, code=snippet,
            ))
