from __future__ import annotations

import pytest

from diagnosis_core import config
from diagnosis_core.dimensions import DIMENSIONS
from diagnosis_core.growth import diff_growth, radar_series, raw_scores

from tests.conftest import build_result

MAXES = {dim: 15.0 for dim in DIMENSIONS}


def test_no_previous_means_no_report():
    current = build_result(40, {"D1": 50})
    assert diff_growth(current, None, MAXES) is None


def test_total_score_delta_and_direction():
    report = diff_growth(build_result(72, {}), build_result(65, {}), MAXES)
    assert report is not None
    assert report.score_diff == pytest.approx(7.0)
    assert report.is_positive is True
    assert report.is_negative is False


def test_zero_delta_is_neither_improved_nor_declined():
    report = diff_growth(build_result(30, {"D1": 40}), build_result(30, {"D1": 40}), MAXES)
    assert report.is_positive is False and report.is_negative is False
    assert report.improved_count == 0 and report.declined_count == 0


def test_raw_reconstruction_uses_max_scores():
    current = build_result(0, {"D1": 50, "D2": 100})
    raw = raw_scores(current, {"D1": 10, "D2": 20})
    assert raw["D1"] == pytest.approx(5.0)
    assert raw["D2"] == pytest.approx(20.0)
    assert raw["D3"] == 0.0


def test_missing_max_falls_back(monkeypatch):
    monkeypatch.setattr(config, "GROWTH_FALLBACK_MAX", 15.0)
    raw = raw_scores(build_result(0, {"D4": 20}), {"D4": 0})
    assert raw["D4"] == pytest.approx(3.0)


def test_stored_raw_values_win_over_percent():
    current = build_result(0, {"D1": 50}, raw={"D1": 7.5})
    assert raw_scores(current, {"D1": 100})["D1"] == pytest.approx(7.5)


def test_dimension_counts_and_extremes():
    previous = build_result(40, {"D1": 20, "D2": 60, "D3": 40, "D4": 20})
    current = build_result(50, {"D1": 60, "D2": 40, "D3": 40, "D4": 60})
    report = diff_growth(current, previous, MAXES)

    assert report.improved_count == 2
    assert report.declined_count == 1
    assert [d.dimension for d in report.deltas] == DIMENSIONS
    assert report.most_declined.dimension == "D2"
    assert report.most_declined.diff == pytest.approx(-3.0)
    # D1 and D4 both gain 40 points of percent -> 6.0 raw; the earlier one wins
    assert report.most_improved.dimension == "D1"
    assert report.most_improved.diff == pytest.approx(6.0)
    assert report.most_improved.title == "시장분석"


def test_most_improved_tie_break_is_stable():
    previous = build_result(0, {})
    current = build_result(10, {"D3": 50, "D6": 50})
    picks = {diff_growth(current, previous, MAXES).most_improved.dimension for _ in range(20)}
    assert picks == {"D3"}


def test_most_declined_tie_prefers_weaker_current_score():
    previous = build_result(50, {"D2": 80, "D5": 60}, raw={"D2": 12.0, "D5": 9.0})
    current = build_result(40, {"D2": 60, "D5": 40}, raw={"D2": 9.0, "D5": 6.0})
    report = diff_growth(current, previous, MAXES)
    assert report.most_declined.diff == pytest.approx(-3.0)
    assert report.most_declined.dimension == "D5"


def test_no_change_reports_first_dimension():
    same = build_result(20, {"D1": 50})
    report = diff_growth(same, same, MAXES)
    assert report.most_improved.dimension == "D1"
    # all diffs are 0, so the weakest current score (0 for D2) is the focus area
    assert report.most_declined.dimension == "D2"


def test_radar_series_fills_missing_dimensions():
    rows = radar_series({"D1": 50}, {"D2": 25})
    assert [r["dimension"] for r in rows] == DIMENSIONS
    assert rows[0]["current"] == 50.0 and rows[0]["previous"] == 0.0
    assert rows[1]["previous"] == 25.0
    assert all(r["full_mark"] == 100 for r in rows)
