"""URL structure rule.

Scores how clean, readable and crawlable a page URL is. The URL alone is
enough: page content is accepted for the uniform rule signature but unused.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Optional
from urllib.parse import SplitResult, parse_qsl

from .. import evidence as ev
from ..issues import UrlStructureIssueId as IssueId
from ..issues import create_url_structure_issue as create_issue
from ..models import Category, PageContent, RuleConfig, RuleResult
from .base import BaseRule, Evaluation, parse_absolute_url

RULE_ID = "url_structure"
RULE_NAME = "URL Structure & Optimization"
RULE_CONFIG = RuleConfig(impact_score=2, page_types=(), is_domain_level=False)

MAX_URL_LENGTH = 200
COMFORTABLE_URL_LENGTH = 100
MAX_DEPTH = 5
MAX_QUERY_PARAMS = 3
MIN_LETTER_RATIO = 0.5
MAX_UNHYPHENATED_SEGMENT = 15
MAX_SHOWN_WORDS = 8

GENERIC_TERMS = frozenset({
    "page", "post", "item", "content", "view", "article", "entry", "node", "detail",
})

_READABLE = re.compile(r"^[a-z0-9-]+$")
_HEX_ID = re.compile(r"^[0-9a-f]{8,}$")
_UUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")
_SEPARATORS = re.compile(r"[_\s]+")
_BLACKLIST = re.compile(r"""[!@#$%^&*()+=\[\]{};:'"<>?\\|]""")
_FILE_EXTENSION = re.compile(r"\.(html|htm|php|asp|jsp)$", re.IGNORECASE)


class Topic:
    LENGTH = "URL Length"
    PROTOCOL = "Protocol"
    READABILITY = "Readability"
    SPECIAL_CHARS = "Special Characters"
    KEYWORDS = "Keyword Optimization"
    HIERARCHY = "Hierarchy"
    PARAMETERS = "Query Parameters"
    TRAILING_SLASH = "Trailing Slash"
    FILE_EXTENSION = "File Extension"
    OVERALL = "Overall Quality"


@dataclass(frozen=True)
class PathJudgment:
    """Verdict on the parts of a URL that need judgment rather than counting."""
    descriptive: bool
    keyword_optimized: bool
    logical_hierarchy: bool
    descriptive_words: tuple[str, ...] = ()
    descriptive_reason: str = ""
    keyword_issue: Optional[IssueId] = None
    keyword_reason: str = ""
    keyword_terms: tuple[str, ...] = ()
    hierarchy_reason: str = ""
    source: str = "heuristic"  # heuristic | llm | fallback


def path_segments(path: str) -> list[str]:
    """Non-empty path segments."""
    return [s for s in path.split("/") if s]


def _normalize_segment(segment: str) -> str:
    return _SEPARATORS.sub("-", segment.lower())


def is_id_like(token: str) -> bool:
    """Numeric ids, hex hashes and UUIDs."""
    token = token.lower()
    if token.isdigit():
        return True
    if _UUID.match(token):
        return True
    return bool(_HEX_ID.match(token)) and any(ch.isdigit() for ch in token)


def is_descriptive_path(path: str) -> bool:
    """Whether every path segment reads as words.

    Separator style and case are scored by the special character check, so
    underscores and spaces count as word separators here.
    """
    segments = [_normalize_segment(s) for s in path_segments(path)]
    if not segments:
        return True

    for segment in segments:
        if not _READABLE.match(segment):
            return False
        letters = sum(ch.isalpha() for ch in segment)
        if letters / len(segment) < MIN_LETTER_RATIO:
            return False
        if is_id_like(segment):
            return False

    uses_hyphens = any("-" in s for s in segments)
    return uses_hyphens or all(len(s) < MAX_UNHYPHENATED_SEGMENT for s in segments)


def descriptive_words(path: str) -> list[str]:
    return [
        word
        for segment in path_segments(path)
        for word in _normalize_segment(segment).split("-")
        if len(word) > 2
    ]


def keyword_problem(path: str) -> tuple[Optional[IssueId], list[str]]:
    """Return the keyword issue for ``path`` and the words behind it."""
    segments = path_segments(path.lower())
    if not segments:
        return None, []

    counts = Counter(
        word
        for segment in segments
        for word in segment.split("-")
        if len(word) > 2
    )
    stuffed = [word for word, count in counts.items() if count > 2]
    if stuffed:
        return IssueId.KEYWORD_STUFFING, stuffed

    generic = [s for s in segments if s in GENERIC_TERMS]
    if generic:
        return IssueId.GENERIC_TERMS, generic

    return None, []


def has_logical_hierarchy(path: str) -> bool:
    """Deeper segments should not be much shorter than their parent."""
    segments = path_segments(path)
    if len(segments) <= 2:
        return True
    return all(
        len(child) >= len(parent) * 0.5
        for parent, child in zip(segments, segments[1:])
    )


def heuristic_judgment(path: str) -> PathJudgment:
    descriptive = is_descriptive_path(path)
    keyword_issue, keyword_terms = keyword_problem(path)
    if keyword_issue is IssueId.KEYWORD_STUFFING:
        keyword_reason = "Avoid keyword repetition in URL structure"
    elif keyword_issue is IssueId.GENERIC_TERMS:
        keyword_reason = "Replace generic terms with descriptive keywords"
    else:
        keyword_reason = ""

    return PathJudgment(
        descriptive=descriptive,
        keyword_optimized=keyword_issue is None,
        logical_hierarchy=has_logical_hierarchy(path),
        descriptive_words=tuple(descriptive_words(path)) if descriptive else (),
        keyword_issue=keyword_issue,
        keyword_reason=keyword_reason,
        keyword_terms=tuple(keyword_terms),
        hierarchy_reason="URL hierarchy seems illogical - ensure parent-child relationship",
    )


class UrlStructureRule(BaseRule):
    """Deterministic URL structure rule.

    Starts at 100 and applies independent deductions in a fixed order:
    length, protocol, readability, special characters, keywords, hierarchy,
    query parameters, trailing slash, file extension.
    """

    def __init__(self):
        super().__init__(RULE_ID, RULE_NAME, Category.TECHNICAL, RULE_CONFIG)

    async def judge_path(self, url: str, path: str) -> PathJudgment:
        """Readability, keyword and hierarchy verdicts for ``path``."""
        return heuristic_judgment(path)

    async def evaluate(self, url: str, content: PageContent) -> RuleResult:
        try:
            parsed = parse_absolute_url(url)
        except ValueError as e:
            return self.failed_result(str(e))

        url = url.strip()
        path = parsed.path or "/"
        result = Evaluation()

        self._check_length(result, url)
        self._check_protocol(result, parsed)

        judgment = await self.judge_path(url, path)
        self._check_readability(result, url, path, judgment)
        self._check_special_characters(result, path)
        self._check_keywords(result, path, judgment)
        self._check_hierarchy(result, path, judgment)
        self._check_parameters(result, parsed)
        self._check_trailing_slash(result, path)
        self._check_file_extension(result, path)
        self._summarize(result)

        return result.finish(self)

    def _check_length(self, result: Evaluation, url: str) -> None:
        length = len(url)
        if length > MAX_URL_LENGTH:
            result.penalize(
                ev.error,
                f"URL too long ({length} chars) - should be under {MAX_URL_LENGTH} characters",
                topic=Topic.LENGTH,
                component="URL too long",
                points=20,
                max_score=20,
                issue=create_issue(IssueId.URL_TOO_LONG, [url], f"URL is {length} characters long"),
            )
        elif length > COMFORTABLE_URL_LENGTH:
            result.penalize(
                ev.warning,
                f"URL is lengthy ({length} chars) - consider shortening",
                topic=Topic.LENGTH,
                component="URL lengthy",
                points=10,
                max_score=20,
                issue=create_issue(IssueId.URL_LENGTHY, [url], f"URL is {length} characters long"),
            )
        else:
            result.note(ev.success(
                f"URL length is good ({length} chars)",
                Topic.LENGTH,
                target=f"Optimal URL length under {COMFORTABLE_URL_LENGTH} characters",
            ))

    def _check_protocol(self, result: Evaluation, parsed: SplitResult) -> None:
        if parsed.scheme.lower() != "https":
            result.penalize(
                ev.error,
                "Not using HTTPS protocol",
                topic=Topic.PROTOCOL,
                component="No HTTPS",
                points=30,
                max_score=30,
                issue=create_issue(IssueId.NO_HTTPS, [f"{parsed.scheme}://{parsed.netloc}"]),
            )
        else:
            result.note(ev.success("Using secure HTTPS protocol", Topic.PROTOCOL))

    def _check_readability(self, result: Evaluation, url: str, path: str, judgment: PathJudgment) -> None:
        if judgment.source == "fallback":
            result.note(ev.info(
                "AI URL analysis unavailable - using conservative defaults",
                Topic.READABILITY,
            ))

        if judgment.descriptive:
            words = list(judgment.descriptive_words)
            code = None
            if words:
                code = ", ".join(words[:MAX_SHOWN_WORDS])
                if len(words) > MAX_SHOWN_WORDS:
                    code += "..."
            result.note(ev.success(
                "URL uses descriptive, readable words",
                Topic.READABILITY,
                code=code,
                target=judgment.descriptive_reason or "Descriptive URLs improve user experience and SEO",
            ))
        else:
            result.penalize(
                ev.warning,
                "URL could be more descriptive",
                topic=Topic.READABILITY,
                component="Non-descriptive URL",
                points=15,
                max_score=15,
                target=judgment.descriptive_reason or None,
                issue=create_issue(IssueId.NOT_DESCRIPTIVE, [path]),
            )

    def _check_special_characters(self, result: Evaluation, path: str) -> None:
        problems = []
        if " " in path:
            problems.append((ev.error, "URL contains unencoded spaces",
                             "Unencoded spaces", IssueId.UNENCODED_SPACES))
        if "_" in path:
            problems.append((ev.warning, "URL uses underscores - hyphens are preferred",
                             "Underscores", IssueId.USES_UNDERSCORES))
        if re.search(r"[A-Z]", path):
            problems.append((ev.warning, "URL contains uppercase letters - use lowercase",
                             "Uppercase letters", IssueId.CONTAINS_UPPERCASE))
        if _BLACKLIST.search(path):
            problems.append((ev.error, "URL contains special characters that should be avoided",
                             "Special characters", IssueId.SPECIAL_CHARACTERS))
        if "//" in path:
            problems.append((ev.warning, "URL contains double slashes",
                             "Double slashes", IssueId.DOUBLE_SLASHES))

        if not problems:
            result.note(ev.success("No problematic special characters in URL", Topic.SPECIAL_CHARS))
            return

        for builder, message, component, issue_id in problems:
            result.penalize(
                builder,
                message,
                topic=Topic.SPECIAL_CHARS,
                component=component,
                points=10,
                max_score=10,
                issue=create_issue(issue_id, [path]),
            )

    def _check_keywords(self, result: Evaluation, path: str, judgment: PathJudgment) -> None:
        if judgment.keyword_optimized:
            result.note(ev.success(
                "URL appears keyword-optimized",
                Topic.KEYWORDS,
                target="Keyword-optimized URLs improve search visibility",
            ))
            return

        issue_id = judgment.keyword_issue or IssueId.GENERIC_TERMS
        affected = list(judgment.keyword_terms) or [path]
        description = None
        if judgment.source != "heuristic" and judgment.keyword_reason:
            description = judgment.keyword_reason
        issue = create_issue(issue_id, affected, description)
        result.note(
            ev.warning(
                "URL could be more keyword-optimized",
                Topic.KEYWORDS,
                code=", ".join(judgment.keyword_terms) or None,
                target=judgment.keyword_reason or None,
            ),
            issue=issue,
            recommendation=issue.recommendation,
        )

    def _check_hierarchy(self, result: Evaluation, path: str, judgment: PathJudgment) -> None:
        depth = len(path_segments(path))
        if depth > MAX_DEPTH:
            result.penalize(
                ev.warning,
                f"URL hierarchy too deep ({depth} levels) - aim for 3-4 levels max",
                topic=Topic.HIERARCHY,
                component="Hierarchy too deep",
                points=10,
                max_score=10,
                issue=create_issue(
                    IssueId.HIERARCHY_TOO_DEEP, [path], f"URL hierarchy is {depth} levels deep",
                ),
            )
        elif not judgment.logical_hierarchy:
            result.penalize(
                ev.warning,
                judgment.hierarchy_reason or "URL hierarchy seems illogical",
                topic=Topic.HIERARCHY,
                component="Illogical hierarchy",
                points=10,
                max_score=10,
                issue=create_issue(IssueId.ILLOGICAL_HIERARCHY, [path]),
            )
        else:
            result.note(ev.success(
                "Clear URL hierarchy/structure",
                Topic.HIERARCHY,
                target="Logical URL structure helps navigation and indexing",
            ))

    def _check_parameters(self, result: Evaluation, parsed: SplitResult) -> None:
        keys = list(dict.fromkeys(k for k, _ in parse_qsl(parsed.query, keep_blank_values=True)))
        if len(keys) > MAX_QUERY_PARAMS:
            result.penalize(
                ev.warning,
                f"Too many URL parameters ({len(keys)}) - consider cleaner URLs",
                topic=Topic.PARAMETERS,
                component="Too many URL parameters",
                points=15,
                max_score=15,
                code=", ".join(keys),
                issue=create_issue(IssueId.TOO_MANY_PARAMETERS, keys),
            )
        elif keys:
            result.note(ev.warning(
                f"URL has {len(keys)} parameter(s): {', '.join(keys)}",
                Topic.PARAMETERS,
            ))

    def _check_trailing_slash(self, result: Evaluation, path: str) -> None:
        if path != "/" and path.endswith("/"):
            result.note(
                ev.info("Has trailing slash", Topic.TRAILING_SLASH),
                recommendation="Ensure consistency with trailing slashes across site",
            )

    def _check_file_extension(self, result: Evaluation, path: str) -> None:
        match = _FILE_EXTENSION.search(path)
        if match:
            result.penalize(
                ev.warning,
                "URL includes file extension - consider extension-less URLs",
                topic=Topic.FILE_EXTENSION,
                component="File extension in URL",
                points=5,
                max_score=5,
                code=match.group(0),
                issue=create_issue(IssueId.HAS_FILE_EXTENSION, [match.group(0)]),
            )

    def _summarize(self, result: Evaluation) -> None:
        score = result.score
        if score >= 80:
            result.note(ev.info("Good URL structure with minor improvements possible", Topic.OVERALL))
        elif score >= 60:
            result.note(ev.warning("Moderate URL structure - several improvements recommended", Topic.OVERALL))
        else:
            result.note(ev.warning("Poor URL structure - significant improvements needed", Topic.OVERALL))
