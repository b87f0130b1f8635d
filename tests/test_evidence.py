"""Tests for evidence builders and the score calculation block."""

import pytest

from aeo_rules import evidence as ev
from aeo_rules.models import EvidenceItem, EvidenceType, ScoreComponent


class TestBuilders:
    def test_builders_set_type(self):
        assert ev.success("ok").type is EvidenceType.SUCCESS
        assert ev.warning("hmm").type is EvidenceType.WARNING
        assert ev.error("bad").type is EvidenceType.ERROR
        assert ev.info("fyi").type is EvidenceType.INFO

    def test_only_given_metadata_is_kept(self):
        item = ev.warning("URL is lengthy", "URL Length", score=-10, target="under 100")

        assert item.topic == "URL Length"
        assert item.metadata == {"score": -10, "target": "under 100"}

    def test_no_metadata(self):
        item = ev.info("Has trailing slash")

        assert item.metadata == {}
        assert item.to_dict() == {"type": "info", "message": "Has trailing slash"}

    def test_zero_score_is_kept(self):
        assert ev.success("fine", score=0).metadata == {"score": 0}

    def test_metadata_is_read_only(self):
        item = ev.warning("URL is lengthy", "URL Length", score=-10)

        with pytest.raises(TypeError):
            item.metadata["score"] = 999
        assert item.metadata["score"] == -10

    def test_metadata_is_copied_on_construction(self):
        metadata = {"score": -5}
        item = EvidenceItem(EvidenceType.WARNING, "Uses underscores", metadata=metadata)

        metadata["score"] = 999

        assert item.metadata == {"score": -5}

    def test_items_hash_without_metadata(self):
        first = ev.info("Has trailing slash", "Trailing Slash", code="/blog/")
        second = ev.info("Has trailing slash", "Trailing Slash", code="/blog/")

        assert first == second
        assert hash(first) == hash(second)


class TestScoreCalculation:
    def test_message_lists_components(self):
        breakdown = [
            ScoreComponent("Base score", 100),
            ScoreComponent("URL too long", -20),
            ScoreComponent("No HTTPS", -30),
        ]

        [item] = ev.score_calculation(breakdown, 50)

        assert item.type is EvidenceType.INFO
        assert item.topic == ev.SCORE_CALCULATION_TOPIC
        assert item.message == "Base score: 100, -20 (URL too long), -30 (No HTTPS) → Final: 50/100"
        assert item.metadata["score"] == 50
        assert item.metadata["maxScore"] == 100
        assert item.metadata["code"].splitlines()[-1].endswith("= 50")

    def test_clamped_total_is_flagged(self):
        breakdown = [ScoreComponent("Base score", 100), ScoreComponent("Missing", -130)]

        [item] = ev.score_calculation(breakdown, 0)

        assert item.message.endswith("→ Final: 0/100 (clamped from -30)")

    def test_empty_breakdown(self):
        [item] = ev.score_calculation([], 0)

        assert item.message == "No score components → Final: 0/100"
        assert "code" not in item.metadata
