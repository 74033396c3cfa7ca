from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from . import config
from .types import Band, ScoreTier, StageInfo

log = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).with_name("data")


@dataclass(frozen=True)
class StageBand:
    min_score: float
    stage_name: str
    short_desc: str


@dataclass(frozen=True)
class GradeBand:
    min_score: float
    grade: str


@dataclass(frozen=True)
class StageTables:
    """Static lookup tables for one classifier.

    `stages` and `grades` are independent tables over the same score; the
    audit checks that their edges line up.
    """

    stages: Tuple[StageBand, ...]
    grades: Tuple[GradeBand, ...]
    feedback: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    placeholder: str = config.FEEDBACK_PLACEHOLDER
    sentinel: StageInfo = field(
        default_factory=lambda: StageInfo(config.SENTINEL_STAGE_NAME, config.SENTINEL_STAGE_DESC, diagnosed=False)
    )
    sentinel_grade: str = config.SENTINEL_GRADE
    # (low_max, mid_max) on percent and (best, middle) on total; None reads config
    band_edges: Optional[Tuple[float, float]] = None
    tier_edges: Optional[Tuple[float, float]] = None

    @staticmethod
    def from_dicts(stages_doc: Mapping[str, Any], feedback_doc: Mapping[str, Any] | None = None) -> "StageTables":
        stages = tuple(
            sorted(
                (StageBand(float(s["min_score"]), str(s["stage_name"]), str(s.get("short_desc", "")))
                 for s in stages_doc.get("stages", [])),
                key=lambda b: b.min_score,
            )
        )
        grades = tuple(
            sorted(
                (GradeBand(float(g["min_score"]), str(g["grade"])) for g in stages_doc.get("grades", [])),
                key=lambda b: b.min_score,
            )
        )
        sent = stages_doc.get("sentinel") or {}
        fb = feedback_doc or {}
        bands = stages_doc.get("bands") or {}
        tiers = stages_doc.get("tiers") or {}
        return StageTables(
            stages=stages,
            grades=grades,
            feedback={str(k): dict(v) for k, v in (fb.get("feedback") or {}).items()},
            placeholder=str(fb.get("placeholder") or config.FEEDBACK_PLACEHOLDER),
            sentinel=StageInfo(
                str(sent.get("stage_name") or config.SENTINEL_STAGE_NAME),
                str(sent.get("short_desc") or config.SENTINEL_STAGE_DESC),
                diagnosed=False,
            ),
            sentinel_grade=str(sent.get("grade") or config.SENTINEL_GRADE),
            band_edges=(float(bands["low_max"]), float(bands["mid_max"])) if bands else None,
            tier_edges=(float(tiers["best"]), float(tiers["middle"])) if tiers else None,
        )


def _read_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_tables(stages_path: str | Path | None = None, feedback_path: str | Path | None = None) -> StageTables:
    sp = Path(stages_path or config.setting("STAGES_PATH") or _DATA_DIR / "stages.json")
    fp = Path(feedback_path or _DATA_DIR / "feedback.json")
    tables = StageTables.from_dicts(_read_json(sp), _read_json(fp))
    log.debug("loaded %d stages, %d grades from %s", len(tables.stages), len(tables.grades), sp)
    return tables


def band_of(percent: float, edges: Optional[Tuple[float, float]] = None) -> Band:
    low_max, mid_max = edges or (config.BAND_LOW_MAX, config.BAND_MID_MAX)
    p = float(percent)
    if p <= low_max: return Band.LOW
    if p <= mid_max: return Band.MID
    return Band.HIGH


def score_tier(total: float, edges: Optional[Tuple[float, float]] = None) -> ScoreTier:
    best, mid = edges or config.tier_thresholds()
    s = float(total)
    if s >= best: return ScoreTier.BEST
    if s >= mid: return ScoreTier.MIDDLE
    return ScoreTier.LOWEST


class Classifier:
    def __init__(self, tables: StageTables):
        if not tables.stages or not tables.grades:
            raise ValueError("stage and grade tables must not be empty")
        self.tables = tables

    def classify(self, total: float) -> StageInfo:
        s = float(total)
        if s <= 0:
            return self.tables.sentinel
        hit = self.tables.stages[0]
        for band in self.tables.stages:
            if s >= band.min_score:
                hit = band
        return StageInfo(hit.stage_name, hit.short_desc)

    def grade_of(self, total: float) -> str:
        s = float(total)
        if s <= 0:
            return self.tables.sentinel_grade
        hit = self.tables.grades[0]
        for band in self.tables.grades:
            if s >= band.min_score:
                hit = band
        return hit.grade

    def band_of(self, percent: float) -> Band:
        return band_of(percent, self.tables.band_edges)

    def feedback_for(self, dimension: str, percent: float) -> str:
        entry = self.tables.feedback.get(dimension) or {}
        msg = entry.get(self.band_of(percent).value)
        return msg if msg else self.tables.placeholder

    def score_tier(self, total: float) -> ScoreTier:
        return score_tier(total, self.tables.tier_edges)


_DEFAULT: Optional[Classifier] = None


def default_classifier() -> Classifier:
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = Classifier(load_tables())
    return _DEFAULT


def classify(total: float) -> StageInfo:
    return default_classifier().classify(total)


def grade_of(total: float) -> str:
    return default_classifier().grade_of(total)


def feedback_for(dimension: str, percent: float) -> str:
    return default_classifier().feedback_for(dimension, percent)
