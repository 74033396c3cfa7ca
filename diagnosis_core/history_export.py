"""Helpers to export a subject's diagnosis history in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

from .classify import classify, score_tier
from .dimensions import DIMENSIONS

_FIELDS: tuple[str, ...] = (
    "id",
    "created_at",
    "total_score",
    "stage_result",
    "stage_name",
    "tier",
    *DIMENSIONS,
)


def _normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    dims = record.get("dimension_scores") or {}
    try:
        total = float(record.get("total_score"))
    except (TypeError, ValueError):
        total = 0.0
    for key in _FIELDS:
        if key == "total_score":
            out[key] = round(total, 2)
        elif key in DIMENSIONS:
            try:
                out[key] = round(float(dims.get(key, 0.0)), 2)
            except (TypeError, ValueError):
                out[key] = 0.0
        elif key == "stage_name":
            out[key] = classify(total).stage_name
        elif key == "tier":
            out[key] = score_tier(total).value
        else:
            val = record.get(key)
            out[key] = "" if val is None else str(val)
    return out


def to_json(records: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload for history export."""

    normalized: List[Dict[str, Any]] = [_normalize_record(rec or {}) for rec in records]
    return {"records": normalized}


def to_csv(records: Iterable[Dict[str, Any]]) -> str:
    """Render history records as CSV with a fixed header."""

    normalized = [_normalize_record(rec or {}) for rec in records]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
