from __future__ import annotations
from typing import Dict, Mapping, Sequence, Tuple
import logging

from . import config
from .dimensions import group_by_dimension, question_key
from .types import Aggregation, Question

log = logging.getLogger(__name__)


def _percent(earned: float, mx: float) -> float:
    if mx <= 0:
        return 0.0
    pct = earned / mx * 100.0
    if pct < 0.0: return 0.0
    if pct > 100.0: return 100.0
    return pct


def _is_checked(answers: Mapping[str, bool], key: str) -> bool:
    return answers.get(key) is True


def score_section(dimension: str, questions: Sequence[Question], answers: Mapping[str, bool]) -> Tuple[float, float]:
    """Returns (earned, max) for one dimension's questions, in input order."""
    earned = 0.0
    total = 0.0
    for idx, q in enumerate(questions):
        w = q.weight
        total += w
        if _is_checked(answers, question_key(dimension, idx)):
            earned += w
    return earned, total


def aggregate(questions: Sequence[Question], answers: Mapping[str, bool]) -> Aggregation:
    """
    Weighted per-dimension scores for a question set and an answer set.

    Answers are keyed by `{dimension}_{index}` where index is the question's
    position inside its dimension, not its id. Reordering questions within a
    dimension moves answers to different questions.

    - section_scores: percent 0..100 (0 when the dimension max is 0)
    - section_earned / section_max: raw weight sums
    - total_score: sum of earned weights across dimensions
    Dimensions with no questions are absent from every mapping.
    """
    scores: Dict[str, float] = {}
    earned_map: Dict[str, float] = {}
    max_map: Dict[str, float] = {}
    total = 0.0
    for dim, qs in group_by_dimension(questions).items():
        earned, mx = score_section(dim, qs, answers)
        scores[dim] = _percent(earned, mx)
        earned_map[dim] = earned
        max_map[dim] = mx
        total += earned
    if config.DEBUG_TRACE:
        log.info("aggregate total=%.2f sections=%s", total, " ".join(f"{d}={p:.1f}" for d, p in scores.items()))
    return Aggregation(total_score=total, section_scores=scores, section_earned=earned_map, section_max=max_map)


def max_scores(questions: Sequence[Question]) -> Dict[str, float]:
    return {dim: sum(q.weight for q in qs) for dim, qs in group_by_dimension(questions).items()}
