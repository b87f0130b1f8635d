"""Scoring rules."""

from .base import BaseRule, Evaluation, Rule, ScoreLedger, parse_absolute_url
from .meta_description import MetaDescriptionRule
from .url_structure import UrlStructureRule
from .url_structure_llm import UrlStructureLlmRule

__all__ = [
    "BaseRule",
    "Evaluation",
    "Rule",
    "ScoreLedger",
    "parse_absolute_url",
    "MetaDescriptionRule",
    "UrlStructureRule",
    "UrlStructureLlmRule",
]
