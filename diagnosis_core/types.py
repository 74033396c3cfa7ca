from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from . import config

AnswerSet = Dict[str, bool]


def coerce_weight(raw: object) -> Optional[float]:
    """Positive float weight, or None when the value falls back to the default."""
    if raw is None:
        return None
    try:
        w = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return w if w > 0 else None

@dataclass
class Question:
    id: str; dimension: str
    text: str = ""
    score_weight: Optional[float] = None

    @property
    def weight(self) -> float:
        w = coerce_weight(self.score_weight)
        return config.DEFAULT_WEIGHT if w is None else w

@dataclass
class SectionAggregate:
    dimension: str
    earned: float
    max: float
    percent: float

@dataclass
class Aggregation:
    total_score: float
    section_scores: Dict[str, float] = field(default_factory=dict)
    section_earned: Dict[str, float] = field(default_factory=dict)
    section_max: Dict[str, float] = field(default_factory=dict)

    def sections(self) -> Iterator[SectionAggregate]:
        for dim, pct in self.section_scores.items():
            yield SectionAggregate(dim, self.section_earned[dim], self.section_max[dim], pct)

class Band(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"

    @property
    def colour(self) -> str:
        return _BAND_COLOURS[self]

class ScoreTier(str, Enum):
    BEST = "best"
    MIDDLE = "middle"
    LOWEST = "lowest"

    @property
    def colour(self) -> str:
        return _TIER_COLOURS[self]

_BAND_COLOURS = {Band.LOW: "red", Band.MID: "amber", Band.HIGH: "green"}
_TIER_COLOURS = {ScoreTier.BEST: "green", ScoreTier.MIDDLE: "indigo", ScoreTier.LOWEST: "rose"}

@dataclass
class StageInfo:
    stage_name: str; short_desc: str
    diagnosed: bool = True

@dataclass
class DiagnosisResult:
    total_score: float
    dimension_scores: Dict[str, float]
    stage_result: str
    created_at: str
    id: Optional[str] = None
    user_id: Optional[str] = None
    responses: AnswerSet = field(default_factory=dict)
    dimension_raw: Optional[Dict[str, float]] = None

    def to_record(self) -> Dict[str, object]:
        rec: Dict[str, object] = {
            "id": self.id,
            "user_id": self.user_id,
            "total_score": self.total_score,
            "dimension_scores": dict(self.dimension_scores),
            "stage_result": self.stage_result,
            "created_at": self.created_at,
            "responses": dict(self.responses),
            "format_version": 1,
        }
        if self.dimension_raw is not None:
            rec["dimension_raw"] = dict(self.dimension_raw)
            rec["format_version"] = 2
        return rec

    @staticmethod
    def from_record(rec: Dict[str, object]) -> "DiagnosisResult":
        raw = rec.get("dimension_raw") if int(rec.get("format_version", 1) or 1) >= 2 else None
        return DiagnosisResult(
            total_score=float(rec.get("total_score", 0.0) or 0.0),
            dimension_scores={str(k): float(v) for k, v in (rec.get("dimension_scores") or {}).items()},
            stage_result=str(rec.get("stage_result", "") or ""),
            created_at=str(rec.get("created_at", "") or ""),
            id=rec.get("id"),
            user_id=rec.get("user_id"),
            responses={str(k): v is True for k, v in (rec.get("responses") or {}).items()},
            dimension_raw={str(k): float(v) for k, v in raw.items()} if isinstance(raw, dict) else None,
        )

@dataclass
class DimensionDelta:
    dimension: str; title: str
    previous: float
    current: float
    diff: float

@dataclass
class GrowthReport:
    score_diff: float
    is_positive: bool
    is_negative: bool
    improved_count: int
    declined_count: int
    most_improved: DimensionDelta
    most_declined: DimensionDelta
    deltas: List[DimensionDelta] = field(default_factory=list)
    previous_created_at: str = ""
