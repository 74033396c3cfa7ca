# diagnosis_core/session.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
import logging

from . import config
from .classify import Classifier, default_classifier
from .dimensions import DIMENSION_TITLES, keyed_questions, load_questions
from .scoring import aggregate
from .types import Aggregation, AnswerSet, DiagnosisResult, Question, StageInfo


log = logging.getLogger(__name__)


class EmptyDiagnosisError(ValueError):
    """Raised when a diagnosis with no checked answers is finalized."""


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SectionView:
    dimension: str
    title: str
    earned: float
    max: float
    percent: float
    band: str
    colour: str
    feedback: str


class DiagnosisSession:
    """Answers for one diagnosis run, scored on demand.

    The question list is fixed at construction; its order defines the
    `{dimension}_{index}` answer keys for the whole session.
    """

    def __init__(
        self,
        questions: Optional[Sequence[Question]] = None,
        classifier: Optional[Classifier] = None,
        user_id: Optional[str] = None,
    ):
        self.questions: List[Question] = list(questions) if questions is not None else load_questions()
        self.classifier = classifier or default_classifier()
        self.user_id = user_id
        self.answers: AnswerSet = {}
        self._keys = {key for key, _ in keyed_questions(self.questions)}

    def keys(self) -> List[str]:
        return [key for key, _ in keyed_questions(self.questions)]

    def set_answer(self, key: str, checked: bool) -> None:
        if key not in self._keys:
            log.warning("ignoring answer for unknown question key %s", key)
            return
        self.answers[key] = bool(checked)

    def toggle(self, key: str) -> bool:
        new_val = not self.answers.get(key, False)
        self.set_answer(key, new_val)
        return self.answers.get(key, False)

    def update(self, answers: Dict[str, bool]) -> None:
        for key, val in answers.items():
            self.set_answer(key, val is True)

    def snapshot(self) -> Aggregation:
        return aggregate(self.questions, self.answers)

    def stage(self) -> StageInfo:
        return self.classifier.classify(self.snapshot().total_score)

    def breakdown(self, agg: Optional[Aggregation] = None) -> List[SectionView]:
        agg = agg or self.snapshot()
        out: List[SectionView] = []
        for sec in agg.sections():
            band = self.classifier.band_of(sec.percent)
            out.append(SectionView(
                dimension=sec.dimension,
                title=DIMENSION_TITLES.get(sec.dimension, sec.dimension),
                earned=sec.earned,
                max=sec.max,
                percent=sec.percent,
                band=band.value,
                colour=band.colour,
                feedback=self.classifier.feedback_for(sec.dimension, sec.percent),
            ))
        return out

    def finalize(self, created_at: Optional[str] = None) -> DiagnosisResult:
        agg = self.snapshot()
        if agg.total_score <= 0:
            raise EmptyDiagnosisError("최소 1개 이상의 문항에 응답해주세요.")
        result = DiagnosisResult(
            total_score=agg.total_score,
            dimension_scores=dict(agg.section_scores),
            stage_result=self.classifier.grade_of(agg.total_score),
            created_at=created_at or utcnow_iso(),
            user_id=self.user_id,
            responses=dict(self.answers),
            dimension_raw=dict(agg.section_earned) if config.setting("PERSIST_RAW_SCORES") else None,
        )
        log.info(
            "diagnosis finalized user=%s total=%.1f grade=%s",
            self.user_id or "-", result.total_score, result.stage_result,
        )
        return result
