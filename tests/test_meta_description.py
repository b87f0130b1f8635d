"""Tests for the meta description rule."""

import pytest

from aeo_rules.evidence import SCORE_CALCULATION_TOPIC
from aeo_rules.issues import META_DESCRIPTION_ISSUES, MetaDescriptionIssueId
from aeo_rules.models import Category, PageContent
from aeo_rules.rules import MetaDescriptionRule
from aeo_rules.rules.meta_description import CompellingLanguage, find_cta_words, repeated_words

GOOD_DESCRIPTION = (
    "Discover how to grow organic tomatoes on a small balcony ✓ soil mixes, "
    "container sizes, watering schedules and harvest tips for beginners."
)


def page(description=None, title="Balcony Tomatoes", h1="Growing tomatoes at home"):
    meta = f'<meta name="description" content="{description}">' if description is not None else ""
    html = (
        f"<html><head><title>{title}</title>{meta}</head>"
        f"<body><h1>{h1}</h1><p>Body text.</p></body></html>"
    )
    return PageContent.from_html("https://example.com/tomatoes", html)


async def evaluate(content, provider=None):
    return await MetaDescriptionRule(provider).evaluate(content.url, content)


class TestMetaDescriptionRule:
    @pytest.mark.asyncio
    async def test_missing_description(self):
        result = await evaluate(page())

        assert result.score == 0
        assert result.issue_ids == ["NO_META_DESCRIPTION"]
        assert "Add a meta description tag with 120-160 characters" in result.recommendations

    @pytest.mark.asyncio
    async def test_optimal_description(self):
        assert 120 <= len(GOOD_DESCRIPTION) <= 160

        result = await evaluate(page(GOOD_DESCRIPTION))

        assert result.score == 100
        assert result.issues == ()

    @pytest.mark.asyncio
    async def test_very_short_flat_description(self):
        result = await evaluate(page("Tomato growing."))

        assert result.score == 53
        assert set(result.issue_ids) == {"TOO_SHORT", "LACKS_COMPELLING"}
        assert "Add action-oriented words (learn, discover, explore, etc.)" in result.recommendations

    @pytest.mark.asyncio
    async def test_keyword_stuffing(self):
        result = await evaluate(page("Best running shoes for trail and road, cheap shoes and trendy shoes here ✓"))

        assert result.score == 63
        assert result.issue_ids == ["KEYWORD_STUFFING"]
        assert result.issues[0].affected_elements == ("shoes",)

    @pytest.mark.asyncio
    async def test_duplicates_title(self):
        result = await evaluate(page("Learn to grow tomatoes", title="Learn to grow tomatoes"))

        assert "DUPLICATES_TITLE" in result.issue_ids
        assert result.score == 38

    @pytest.mark.asyncio
    async def test_duplicates_h1(self):
        result = await evaluate(page("Learn to grow tomatoes", h1="Learn to grow tomatoes"))

        assert "DUPLICATES_H1" in result.issue_ids
        assert "DUPLICATES_TITLE" not in result.issue_ids

    @pytest.mark.asyncio
    async def test_description_without_html(self):
        content = PageContent(url="https://example.com/", description=GOOD_DESCRIPTION)

        result = await evaluate(content)

        assert result.score == 100

    @pytest.mark.asyncio
    async def test_model_verdict_and_suggestions(self, fake_provider):
        verdict = CompellingLanguage(
            has_compelling_language=False,
            compelling_words=[],
            language="English",
            analysis="Informative but passive",
            suggestions=["Open with an action verb"],
        )
        provider = fake_provider(response=verdict)

        result = await evaluate(page(GOOD_DESCRIPTION), provider)

        assert result.score == 85
        assert result.issue_ids == ["LACKS_COMPELLING"]
        assert "Open with an action verb" in result.recommendations
        assert provider.calls[0]["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_model_failure_uses_word_list(self, failing_provider):
        result = await evaluate(page(GOOD_DESCRIPTION), failing_provider)

        assert result.score == 100
        assert len(failing_provider.calls) == 1

    @pytest.mark.asyncio
    async def test_malformed_answer_uses_word_list(self, fake_provider):
        provider = fake_provider(response={"has_compelling_language": "perhaps"})

        result = await evaluate(page(GOOD_DESCRIPTION), provider)

        assert len(provider.calls) == 1
        assert result.score == 100
        compelling = next(e for e in result.evidence if e.topic == "Compelling Language")
        assert compelling.message == "Contains compelling language (basic analysis)"

    @pytest.mark.asyncio
    async def test_malformed_answer_keeps_default_recommendation(self, fake_provider):
        provider = fake_provider(response={"has_compelling_language": False})

        result = await evaluate(page("Tomato growing."), provider)

        assert "LACKS_COMPELLING" in result.issue_ids
        assert "Add action-oriented words (learn, discover, explore, etc.)" in result.recommendations

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_not_called(self, fake_provider):
        provider = fake_provider(configured=False)

        await evaluate(page(GOOD_DESCRIPTION), provider)

        assert provider.calls == []

    def test_rule_identity(self):
        rule = MetaDescriptionRule()

        assert rule.id == "meta_description"
        assert rule.category is Category.STRUCTURE


PAGES = {
    "missing": {},
    "short": {"description": "Tomato growing."},
    "stuffed": {"description": "Best running shoes for trail and road, cheap shoes and trendy shoes here ✓"},
    "duplicate-title": {"description": "Learn to grow tomatoes", "title": "Learn to grow tomatoes"},
    "good": {"description": GOOD_DESCRIPTION},
    "long": {"description": GOOD_DESCRIPTION + " Also covers pruning, staking and feeding through the season."},
}

PROVIDERS = {
    "none": None,
    "compelling": {"response": CompellingLanguage(
        has_compelling_language=True,
        compelling_words=["Discover"],
        language="English",
        analysis="Opens with an action verb",
        suggestions=[],
    )},
    "flat": {"response": CompellingLanguage(
        has_compelling_language=False,
        compelling_words=[],
        language="English",
        analysis="Passive",
        suggestions=["Start with a verb"],
    )},
    "failing": {"error": TimeoutError("model did not answer")},
    "malformed": {"response": {"language": "English"}},
}


def score_deltas(result):
    return [
        item.metadata["score"]
        for item in result.evidence
        if item.topic != SCORE_CALCULATION_TOPIC and "score" in item.metadata
    ]


async def evaluate_case(fake_provider, case, kind):
    settings = PROVIDERS[kind]
    provider = fake_provider(**settings) if settings is not None else None
    return await evaluate(page(**PAGES[case]), provider)


class TestInvariants:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", sorted(PROVIDERS))
    @pytest.mark.parametrize("case", sorted(PAGES))
    async def test_score_matches_deductions(self, fake_provider, case, kind):
        result = await evaluate_case(fake_provider, case, kind)

        assert 0 <= result.score <= 100
        assert result.score == max(0, min(100, 100 + sum(score_deltas(result))))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", sorted(PROVIDERS))
    @pytest.mark.parametrize("case", sorted(PAGES))
    async def test_score_calculation_is_last(self, fake_provider, case, kind):
        result = await evaluate_case(fake_provider, case, kind)

        last = result.evidence[-1]
        assert last.topic == SCORE_CALCULATION_TOPIC
        assert last.message.startswith("Base score: 100")
        assert last.message.endswith(f"Final: {result.score}/100")
        assert sum(1 for e in result.evidence if e.topic == SCORE_CALCULATION_TOPIC) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", sorted(PROVIDERS))
    @pytest.mark.parametrize("case", sorted(PAGES))
    async def test_issues_come_from_catalog(self, fake_provider, case, kind):
        result = await evaluate_case(fake_provider, case, kind)

        for issue in result.issues:
            definition = META_DESCRIPTION_ISSUES[MetaDescriptionIssueId(issue.id)]
            assert issue.severity is definition.severity
            assert issue.recommendation == definition.recommendation


class TestHelpers:
    def test_find_cta_words(self):
        assert find_cta_words("Discover the best tips") == ["Discover", "best", "tips"]
        assert find_cta_words("Tomato growing.") == []

    def test_repeated_words(self):
        assert repeated_words("shoes shoes shoes socks") == [("shoes", 3)]
        assert repeated_words("the the the the") == []
