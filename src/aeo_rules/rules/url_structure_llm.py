"""URL structure rule with AI judgment of readability, keywords and hierarchy."""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..llm import StructuredOutputProvider, get_structured_output
from .url_structure import PathJudgment, UrlStructureRule, descriptive_words, path_segments

logger = logging.getLogger(__name__)

LLM_TEMPERATURE = 0.1

SYSTEM_PROMPT = (
    "You are a strict technical SEO auditor. You judge URLs for readability, "
    "keyword quality and hierarchy. Be conservative: only return true for "
    "genuinely good URLs. When in doubt, return false and explain why in one sentence."
)


class UrlJudgment(BaseModel):
    """Schema of the AI verdict on one URL."""

    model_config = ConfigDict(extra="forbid")

    descriptive: bool = Field(description="Whether the path is made of readable words describing the page")
    descriptive_reason: str = Field(description="One sentence explaining the descriptive verdict")
    keyword_optimized: bool = Field(description="Whether the path carries relevant keywords without stuffing or generic terms")
    keyword_reason: str = Field(description="One sentence explaining the keyword verdict")
    hierarchy: bool = Field(description="Whether the segments go from general to specific in a logical parent-child order")
    hierarchy_reason: str = Field(description="One sentence explaining the hierarchy verdict")


FALLBACK_JUDGMENT = UrlJudgment(
    descriptive=False,
    descriptive_reason="AI analysis unavailable; readability could not be confirmed",
    keyword_optimized=False,
    keyword_reason="AI analysis unavailable; keyword optimization could not be confirmed",
    hierarchy=True,
    hierarchy_reason="AI analysis unavailable; hierarchy not penalized",
)


def build_prompt(url: str, path: str) -> str:
    segments = path_segments(path)
    return f"""Evaluate the structure of this URL for search and AI answer engines.

URL: {url}
Path: {path}
Segments ({len(segments)}): {", ".join(segments) if segments else "(none)"}

Answer three questions:
1. descriptive: Is the path made of real, readable words (not IDs, hashes or codes) that describe the page?
2. keyword_optimized: Does the path contain relevant keywords, without repeating them and without generic terms such as page, post, item, content or view?
3. hierarchy: Do the segments read from general to specific, like category then subcategory then page?

Give a one-sentence reason for each answer."""


class UrlStructureLlmRule(UrlStructureRule):
    """URL structure rule that asks a language model for the judgment calls.

    Length, protocol, special characters, depth, parameters and extensions
    stay deterministic. When the model call fails for any reason a
    conservative verdict is used instead: not descriptive, not
    keyword-optimized, hierarchy acceptable.
    """

    def __init__(self, provider: StructuredOutputProvider, model: Optional[str] = None):
        super().__init__()
        self.provider = provider
        self.model = model

    async def judge_path(self, url: str, path: str) -> PathJudgment:
        if not path_segments(path):
            return PathJudgment(
                descriptive=True,
                keyword_optimized=True,
                logical_hierarchy=True,
                descriptive_reason="Root URL",
                source="llm",
            )

        try:
            answer = await get_structured_output(
                self.provider,
                build_prompt(url, path),
                UrlJudgment,
                temperature=LLM_TEMPERATURE,
                system_prompt=SYSTEM_PROMPT,
                model=self.model,
            )
            verdict = UrlJudgment.model_validate(answer)
            source = "llm"
        except Exception as e:
            logger.warning("URL structure AI analysis failed for %s, using fallback: %s", url, e)
            verdict = FALLBACK_JUDGMENT
            source = "fallback"

        return PathJudgment(
            descriptive=verdict.descriptive,
            keyword_optimized=verdict.keyword_optimized,
            logical_hierarchy=verdict.hierarchy,
            descriptive_words=tuple(descriptive_words(path)) if verdict.descriptive else (),
            descriptive_reason=verdict.descriptive_reason,
            keyword_reason=verdict.keyword_reason,
            hierarchy_reason=verdict.hierarchy_reason,
            source=source,
        )
