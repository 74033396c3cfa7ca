from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from . import config
from .classify import StageTables, load_tables
from .dimensions import DIMENSIONS, load_questions
from .types import Question, coerce_weight

log = logging.getLogger(__name__)


def _blank_dimension() -> dict[str, object]:
    return {"questions": 0, "max": 0.0, "defaulted_weight": 0, "out_of_range_weight": 0}


def audit_items(questions: Iterable[Question]) -> dict[str, object]:
    coverage: dict[str, dict[str, object]] = {dim: _blank_dimension() for dim in DIMENSIONS}
    totals = {"questions": 0, "max": 0.0, "unknown_dimension": 0}
    seen_ids: set[str] = set()
    duplicates: list[str] = []

    for q in questions:
        if q.id in seen_ids:
            duplicates.append(q.id)
        seen_ids.add(q.id)

        if q.dimension not in coverage:
            totals["unknown_dimension"] += 1
            continue

        data = coverage[q.dimension]
        data["questions"] += 1  # type: ignore[operator]
        data["max"] += q.weight  # type: ignore[operator]
        totals["questions"] += 1
        totals["max"] += q.weight

        w = coerce_weight(q.score_weight)
        if w is None:
            data["defaulted_weight"] += 1  # type: ignore[operator]
        elif not (config.WEIGHT_MIN <= w <= config.WEIGHT_MAX):
            data["out_of_range_weight"] += 1  # type: ignore[operator]

    warnings: list[str] = []
    for dim, data in coverage.items():
        if not data["questions"]:
            warnings.append(f"{dim} has no questions and will be left out of results")
        if data["defaulted_weight"]:
            warnings.append(f"{dim} has {data['defaulted_weight']} questions without a valid score_weight (using {config.DEFAULT_WEIGHT})")
        if data["out_of_range_weight"]:
            warnings.append(
                f"{dim} has {data['out_of_range_weight']} weights outside {config.WEIGHT_MIN}..{config.WEIGHT_MAX}"
            )

    if totals["unknown_dimension"]:
        warnings.append(f"{totals['unknown_dimension']} questions use an unknown dimension tag")
    if duplicates:
        warnings.append(f"duplicate question ids: {', '.join(sorted(set(duplicates)))}")
    if config.EXPECTED_TOTAL_WEIGHT and abs(float(totals["max"]) - config.EXPECTED_TOTAL_WEIGHT) > 1e-6:
        warnings.append(f"total weight is {float(totals['max']):g} (expected {config.EXPECTED_TOTAL_WEIGHT:g})")

    summary = {"coverage": coverage, "warnings": warnings, "totals": totals}
    return summary


def audit_tables(tables: StageTables) -> list[str]:
    """Stage and grade tables are defined separately; their edges must agree."""

    warnings: list[str] = []
    stage_edges = [b.min_score for b in tables.stages]
    grade_edges = [b.min_score for b in tables.grades]
    if stage_edges != grade_edges:
        warnings.append(f"stage edges {stage_edges} differ from grade edges {grade_edges}")
    if len({b.grade for b in tables.grades}) != len(tables.grades):
        warnings.append("grade identifiers are not unique")
    if any(b.grade == tables.sentinel_grade for b in tables.grades):
        warnings.append(f"sentinel grade {tables.sentinel_grade!r} is reused by a scored band")
    if stage_edges and stage_edges[0] > 0:
        warnings.append(f"scores in (0, {stage_edges[0]:g}) fall below the first stage")
    for dim in DIMENSIONS:
        entry = tables.feedback.get(dim) or {}
        missing = [band for band in ("low", "mid", "high") if not entry.get(band)]
        if missing:
            warnings.append(f"{dim} feedback missing for bands: {', '.join(missing)}")
    return warnings


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Question Coverage ===")
    for dim in DIMENSIONS:
        data = coverage[dim]
        print(f"  {dim}: questions={data['questions']:2d}  max={float(data['max']):5.1f}")

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    totals = summary["totals"]
    print("\nTotals:", totals)


SUMMARY_PATH = Path("/tmp/question_audit.json")


def write_summary(summary: dict[str, object], path: Path | None = None) -> str:
    path = path or SUMMARY_PATH
    text = json.dumps(summary, indent=2, sort_keys=True, ensure_ascii=False)
    path.write_text(text + "\n", encoding="utf-8")
    print(text)
    return text


def main(_argv: list[str] | None = None) -> int:
    questions = load_questions()
    summary = audit_items(questions)
    table_warnings = audit_tables(load_tables())
    summary["warnings"] = list(summary["warnings"]) + table_warnings  # type: ignore[arg-type]
    for msg in summary["warnings"]:  # type: ignore[union-attr]
        log.warning("audit: %s", msg)
    print_report(summary)
    write_summary(summary)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
