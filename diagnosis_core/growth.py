"""Compare two diagnosis snapshots of the same subject."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from . import config
from .dimensions import DIMENSIONS, DIMENSION_TITLES
from .types import DiagnosisResult, DimensionDelta, GrowthReport


def _max_for(max_scores: Mapping[str, float], dimension: str) -> float:
    try:
        mx = float(max_scores.get(dimension) or 0.0)
    except (TypeError, ValueError):
        mx = 0.0
    return mx if mx > 0 else float(config.setting("GROWTH_FALLBACK_MAX"))


def raw_scores(result: DiagnosisResult, max_scores: Mapping[str, float]) -> Dict[str, float]:
    """Raw points per canonical dimension.

    Format 2 records carry raw earned values and are used as stored. Older
    records only keep percent, so raw is rebuilt as percent/100*max, which
    is only meaningful while the dimension's max weight is unchanged.
    """
    out: Dict[str, float] = {}
    stored = result.dimension_raw or {}
    for dim in DIMENSIONS:
        if dim in stored:
            out[dim] = float(stored[dim])
            continue
        pct = float(result.dimension_scores.get(dim, 0.0) or 0.0)
        out[dim] = pct / 100.0 * _max_for(max_scores, dim)
    return out


def diff_growth(
    current: DiagnosisResult,
    previous: Optional[DiagnosisResult],
    max_scores: Mapping[str, float],
) -> Optional[GrowthReport]:
    if previous is None:
        return None

    score_diff = float(current.total_score) - float(previous.total_score)
    cur_raw = raw_scores(current, max_scores)
    prev_raw = raw_scores(previous, max_scores)

    deltas: List[DimensionDelta] = [
        DimensionDelta(
            dimension=dim,
            title=DIMENSION_TITLES[dim],
            previous=prev_raw[dim],
            current=cur_raw[dim],
            diff=cur_raw[dim] - prev_raw[dim],
        )
        for dim in DIMENSIONS
    ]

    # strict comparisons keep the earliest dimension on ties
    best = deltas[0]
    for d in deltas[1:]:
        if d.diff > best.diff:
            best = d

    worst = deltas[0]
    for d in deltas[1:]:
        if d.diff < worst.diff or (d.diff == worst.diff and d.current < worst.current):
            worst = d

    return GrowthReport(
        score_diff=score_diff,
        is_positive=score_diff > 0,
        is_negative=score_diff < 0,
        improved_count=sum(1 for d in deltas if d.diff > 0),
        declined_count=sum(1 for d in deltas if d.diff < 0),
        most_improved=best,
        most_declined=worst,
        deltas=deltas,
        previous_created_at=previous.created_at,
    )


def radar_series(current: Mapping[str, float], previous: Optional[Mapping[str, float]] = None) -> List[Dict[str, object]]:
    """Chart rows for the 7-dimension balance view."""
    rows: List[Dict[str, object]] = []
    for dim in DIMENSIONS:
        rows.append({
            "dimension": dim,
            "subject": DIMENSION_TITLES[dim],
            "current": float(current.get(dim, 0.0) or 0.0),
            "previous": float(previous.get(dim, 0.0) or 0.0) if previous is not None else 0.0,
            "full_mark": 100,
        })
    return rows
