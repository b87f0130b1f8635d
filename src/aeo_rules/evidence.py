"""Builders for evidence items and the score calculation block."""

from collections.abc import Sequence
from typing import Any, Optional

from .models import EvidenceItem, EvidenceType, ScoreComponent

SCORE_CALCULATION_TOPIC = "Score Calculation"


def _metadata(
    score: Optional[int],
    max_score: Optional[int],
    target: Optional[str],
    code: Optional[str],
) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    if score is not None:
        metadata["score"] = score
    if max_score is not None:
        metadata["maxScore"] = max_score
    if target is not None:
        metadata["target"] = target
    if code is not None:
        metadata["code"] = code
    return metadata


def _item(
    kind: EvidenceType,
    message: str,
    topic: Optional[str],
    score: Optional[int],
    max_score: Optional[int],
    target: Optional[str],
    code: Optional[str],
) -> EvidenceItem:
    return EvidenceItem(
        type=kind,
        message=message,
        topic=topic,
        metadata=_metadata(score, max_score, target, code),
    )


def success(message: str, topic: Optional[str] = None, *, score: Optional[int] = None,
            max_score: Optional[int] = None, target: Optional[str] = None,
            code: Optional[str] = None) -> EvidenceItem:
    return _item(EvidenceType.SUCCESS, message, topic, score, max_score, target, code)


def warning(message: str, topic: Optional[str] = None, *, score: Optional[int] = None,
            max_score: Optional[int] = None, target: Optional[str] = None,
            code: Optional[str] = None) -> EvidenceItem:
    return _item(EvidenceType.WARNING, message, topic, score, max_score, target, code)


def error(message: str, topic: Optional[str] = None, *, score: Optional[int] = None,
          max_score: Optional[int] = None, target: Optional[str] = None,
          code: Optional[str] = None) -> EvidenceItem:
    return _item(EvidenceType.ERROR, message, topic, score, max_score, target, code)


def info(message: str, topic: Optional[str] = None, *, score: Optional[int] = None,
         max_score: Optional[int] = None, target: Optional[str] = None,
         code: Optional[str] = None) -> EvidenceItem:
    return _item(EvidenceType.INFO, message, topic, score, max_score, target, code)


def _signed(points: int) -> str:
    return f"+{points}" if points >= 0 else str(points)


def score_calculation(
    breakdown: Sequence[ScoreComponent],
    final_score: int,
    max_score: int = 100,
) -> list[EvidenceItem]:
    """Render the score breakdown ledger as the closing evidence block.

    The first component is shown as a plain value ("Base score: 100"), the
    following ones as signed deltas. ``code`` carries the running total one
    line per component.
    """
    if not breakdown:
        return [info(
            f"No score components → Final: {final_score}/{max_score}",
            SCORE_CALCULATION_TOPIC,
            score=final_score,
            max_score=max_score,
        )]

    first, *rest = breakdown
    parts = [f"{first.component}: {first.points}"]
    parts.extend(f"{_signed(c.points)} ({c.component})" for c in rest)

    running = 0
    lines = []
    for c in breakdown:
        running += c.points
        lines.append(f"{c.component:<40} {_signed(c.points):>5}  = {running}")

    message = ", ".join(parts) + f" → Final: {final_score}/{max_score}"
    if running != final_score:
        message += f" (clamped from {running})"
        lines.append(f"{'Clamped to 0-' + str(max_score):<40} {'':>5}  = {final_score}")

    return [info(
        message,
        SCORE_CALCULATION_TOPIC,
        score=final_score,
        max_score=max_score,
        code="\n".join(lines),
    )]
