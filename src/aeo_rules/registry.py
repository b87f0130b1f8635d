"""Registry of the rules available to the scoring layer."""

import logging
from typing import Optional

from .llm import StructuredOutputProvider
from .models import Category
from .rules import MetaDescriptionRule, Rule, UrlStructureLlmRule, UrlStructureRule

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS = {
    Category.TECHNICAL: 1.5,
    Category.CONTENT: 2.0,
    Category.STRUCTURE: 1.5,
    Category.AUTHORITY: 1.0,
    Category.QUALITY: 1.0,
}


class RuleRegistry:
    """Ordered set of rules keyed by id, each of which can be switched off."""

    def __init__(self):
        self._rules: dict[str, Rule] = {}
        self._enabled: set[str] = set()

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def register(self, rule: Rule) -> None:
        if not isinstance(rule, Rule):
            raise TypeError(f"{rule!r} does not implement the rule interface")
        if rule.id in self._rules:
            raise ValueError(f"Rule {rule.id} is already registered")
        self._rules[rule.id] = rule
        self._enabled.add(rule.id)
        logger.debug("Registered rule: %s (%s)", rule.id, rule.name)

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def all(self) -> list[Rule]:
        return list(self._rules.values())

    def active(self) -> list[Rule]:
        return [r for r in self._rules.values() if r.id in self._enabled]

    def is_enabled(self, rule_id: str) -> bool:
        return rule_id in self._enabled

    def toggle(self, rule_id: str, enabled: bool) -> None:
        if rule_id not in self._rules:
            raise KeyError(f"Rule {rule_id} not found")
        if enabled:
            self._enabled.add(rule_id)
            logger.info("Enabled rule: %s", rule_id)
        else:
            self._enabled.discard(rule_id)
            logger.info("Disabled rule: %s", rule_id)

    def by_category(self, category: Category) -> list[Rule]:
        return [r for r in self.active() if r.category == category]

    def for_page_type(self, page_type: Optional[str] = None) -> list[Rule]:
        """Active page-level rules applying to ``page_type`` (None means any)."""
        rules = []
        for rule in self.active():
            if rule.config.is_domain_level:
                continue
            if rule.config.page_types and page_type is not None and page_type not in rule.config.page_types:
                continue
            rules.append(rule)
        return rules

    def domain_rules(self) -> list[Rule]:
        return [r for r in self.active() if r.config.is_domain_level]

    def category_weights(self) -> dict[Category, float]:
        return dict(CATEGORY_WEIGHTS)

    def summary(self) -> dict:
        by_category = {c.value: 0 for c in Category}
        for rule in self._rules.values():
            by_category[rule.category.value] += 1
        return {
            "total": len(self._rules),
            "enabled": len(self._enabled),
            "byCategory": by_category,
        }


def default_registry(
    provider: Optional[StructuredOutputProvider] = None,
    model: Optional[str] = None,
) -> RuleRegistry:
    """Registry with every built-in rule.

    With a configured provider the AI-assisted URL structure rule replaces
    the deterministic one.
    """
    use_llm = provider is not None and provider.is_configured()
    registry = RuleRegistry()
    if use_llm:
        registry.register(UrlStructureLlmRule(provider, model))
    else:
        registry.register(UrlStructureRule())
    registry.register(MetaDescriptionRule(provider if use_llm else None, model))
    logger.debug("Registered %d rules", len(registry))
    return registry
