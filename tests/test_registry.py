"""Tests for the rule registry."""

import pytest

from aeo_rules.models import Category, PageContent, RuleConfig
from aeo_rules.registry import CATEGORY_WEIGHTS, RuleRegistry, default_registry
from aeo_rules.rules import BaseRule, MetaDescriptionRule, UrlStructureLlmRule, UrlStructureRule


class StaticRule(BaseRule):
    """Rule returning a fixed score."""

    def __init__(self, rule_id="static", category=Category.QUALITY, score=70, **config):
        super().__init__(rule_id, rule_id.title(), category, RuleConfig(impact_score=config.pop("impact", 1), **config))
        self.score = score

    async def evaluate(self, url, content):
        return self.create_result(self.score, [])


class TestRuleRegistry:
    def test_register_and_get(self):
        registry = RuleRegistry()
        rule = StaticRule()

        registry.register(rule)

        assert registry.get("static") is rule
        assert "static" in registry
        assert len(registry) == 1
        assert registry.is_enabled("static")

    def test_duplicate_id_is_rejected(self):
        registry = RuleRegistry()
        registry.register(StaticRule())

        with pytest.raises(ValueError, match="already registered"):
            registry.register(StaticRule())

    def test_non_rule_is_rejected(self):
        with pytest.raises(TypeError):
            RuleRegistry().register(object())

    def test_toggle(self):
        registry = RuleRegistry()
        registry.register(StaticRule())

        registry.toggle("static", False)
        assert registry.active() == []
        assert len(registry.all()) == 1

        registry.toggle("static", True)
        assert [r.id for r in registry.active()] == ["static"]

    def test_toggle_unknown_rule(self):
        with pytest.raises(KeyError):
            RuleRegistry().toggle("missing", True)

    def test_for_page_type(self):
        registry = RuleRegistry()
        registry.register(StaticRule("everywhere"))
        registry.register(StaticRule("articles", page_types=("article",)))
        registry.register(StaticRule("site", is_domain_level=True))

        assert [r.id for r in registry.for_page_type("article")] == ["everywhere", "articles"]
        assert [r.id for r in registry.for_page_type("product")] == ["everywhere"]
        assert [r.id for r in registry.for_page_type()] == ["everywhere", "articles"]
        assert [r.id for r in registry.domain_rules()] == ["site"]

    def test_by_category_and_summary(self):
        registry = RuleRegistry()
        registry.register(StaticRule("a", Category.CONTENT))
        registry.register(StaticRule("b", Category.QUALITY))
        registry.toggle("b", False)

        assert [r.id for r in registry.by_category(Category.CONTENT)] == ["a"]
        assert registry.by_category(Category.QUALITY) == []
        summary = registry.summary()
        assert summary["total"] == 2
        assert summary["enabled"] == 1
        assert summary["byCategory"]["CONTENT"] == 1

    def test_category_weights_is_a_copy(self):
        registry = RuleRegistry()

        registry.category_weights()[Category.CONTENT] = 99

        assert registry.category_weights() == CATEGORY_WEIGHTS


class TestDefaultRegistry:
    def test_without_provider(self):
        registry = default_registry()

        assert type(registry.get("url_structure")) is UrlStructureRule
        assert isinstance(registry.get("meta_description"), MetaDescriptionRule)
        assert registry.get("meta_description").provider is None

    def test_with_configured_provider(self, fake_provider):
        provider = fake_provider()

        registry = default_registry(provider, "small-model")

        rule = registry.get("url_structure")
        assert isinstance(rule, UrlStructureLlmRule)
        assert rule.provider is provider
        assert rule.model == "small-model"
        assert registry.get("meta_description").provider is provider

    def test_unconfigured_provider_is_ignored(self, fake_provider):
        registry = default_registry(fake_provider(configured=False))

        assert type(registry.get("url_structure")) is UrlStructureRule
        assert registry.get("meta_description").provider is None


class TestBaseRule:
    def test_impact_must_be_in_range(self):
        with pytest.raises(ValueError):
            StaticRule(impact=6)

    def test_empty_id(self):
        with pytest.raises(ValueError):
            StaticRule("")

    def test_applies_to(self):
        rule = StaticRule(page_types=("article",))

        assert rule.applies_to("article")
        assert rule.applies_to(None)
        assert not rule.applies_to("product")

    @pytest.mark.asyncio
    async def test_static_rule_satisfies_contract(self):
        result = await StaticRule().evaluate("https://example.com/", PageContent(url="https://example.com/"))

        assert result.rule_id == "static"
        assert result.score == 70
        assert result.passed
