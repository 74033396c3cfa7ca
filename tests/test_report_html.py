from __future__ import annotations

from diagnosis_core.growth import diff_growth
from diagnosis_core.report_html import export_report_html, render_report_html
from diagnosis_core.scoring import max_scores
from diagnosis_core.session import DiagnosisSession

from tests.conftest import build_result, build_synthetic_questions


def test_report_renders_breakdown_and_growth(tmp_path):
    questions = build_synthetic_questions()
    sess = DiagnosisSession(questions=questions, user_id="u1")
    sess.update({"D1_0": True, "D1_1": True, "D2_0": True})
    current = sess.finalize(created_at="2024-06-01T00:00:00+00:00")
    previous = build_result(1, {"D1": 50}, created_at="2024-01-01T00:00:00+00:00")

    payload = current.to_record()
    payload["max_scores"] = max_scores(questions)
    payload["growth"] = diff_growth(current, previous, payload["max_scores"])

    out = tmp_path / "report.html"
    export_report_html(payload, str(out))
    html = out.read_text(encoding="utf-8")

    assert "D1. 시장분석" in html
    assert "2.0 / 2" in html
    assert "성장 분석" in html
    assert "지난 진단 대비 2.0점 상승" in html
    assert "가장 크게 성장한 영역" in html
    assert "/users/u1/history.csv" in html


def test_report_for_empty_result_shows_waiting_state():
    html = render_report_html({"total_score": 0, "dimension_scores": {}})
    assert "데이터 대기 중" in html
    assert "진단 대기 중" in html
    assert "성장 분석" not in html


def test_report_without_max_scores_shows_percent():
    html = render_report_html({"total_score": 5, "dimension_scores": {"D3": 40.0}})
    assert "40.0%" in html
    assert "D3. 해결가치" in html
