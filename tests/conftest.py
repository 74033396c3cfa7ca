from __future__ import annotations

import pytest

from diagnosis_core.classify import Classifier, StageBand, GradeBand, StageTables
from diagnosis_core.dimensions import DIMENSIONS
from diagnosis_core.types import DiagnosisResult, Question


def build_synthetic_questions(
    *,
    weights: dict[str, list[float | None]] | None = None,
    dimensions: list[str] | None = None,
    per_dimension: int = 2,
) -> list[Question]:
    """Create a deterministic question set for tests and smoke runs."""

    questions: list[Question] = []
    target = dimensions or list(DIMENSIONS)
    for dim in target:
        ws = (weights or {}).get(dim, [1.0] * per_dimension)
        for idx, w in enumerate(ws):
            questions.append(
                Question(
                    id=f"{dim.lower()}_q{idx}",
                    dimension=dim,
                    text=f"{dim} question #{idx}",
                    score_weight=w,
                )
            )
    return questions


def build_result(
    total: float,
    scores: dict[str, float],
    *,
    created_at: str = "2024-01-01T00:00:00+00:00",
    raw: dict[str, float] | None = None,
) -> DiagnosisResult:
    return DiagnosisResult(
        total_score=total,
        dimension_scores=dict(scores),
        stage_result="",
        created_at=created_at,
        dimension_raw=raw,
    )


def build_tables() -> StageTables:
    return StageTables(
        stages=(
            StageBand(0, "Seed", "seed stage"),
            StageBand(50, "Grow", "grow stage"),
            StageBand(90, "Lead", "lead stage"),
        ),
        grades=(GradeBand(0, "C"), GradeBand(50, "B"), GradeBand(90, "A")),
        feedback={"D1": {"low": "d1 low", "mid": "d1 mid", "high": "d1 high"}},
        placeholder="pending",
    )


@pytest.fixture
def synthetic_questions() -> list[Question]:
    return build_synthetic_questions()


@pytest.fixture
def alt_classifier() -> Classifier:
    return Classifier(build_tables())
