from __future__ import annotations

import pytest

from diagnosis_core import config
from diagnosis_core.classify import Classifier, band_of, classify, feedback_for, grade_of, load_tables, score_tier
from diagnosis_core.dimensions import DIMENSIONS
from diagnosis_core.types import Band, ScoreTier

from tests.conftest import build_tables


@pytest.mark.parametrize(
    "percent, band",
    [
        (0, Band.LOW),
        (33, Band.LOW),
        (33.01, Band.MID),
        (50, Band.MID),
        (66, Band.MID),
        (66.5, Band.HIGH),
        (100, Band.HIGH),
    ],
)
def test_band_edges(percent, band):
    assert band_of(percent) is band


def test_band_and_tier_colours_are_total():
    assert {b.colour for b in Band} == {"red", "amber", "green"}
    assert {t.colour for t in ScoreTier} == {"green", "indigo", "rose"}


def test_score_tiers():
    assert score_tier(80) is ScoreTier.BEST
    assert score_tier(79.9) is ScoreTier.MIDDLE
    assert score_tier(50) is ScoreTier.MIDDLE
    assert score_tier(49.9) is ScoreTier.LOWEST
    assert score_tier(0) is ScoreTier.LOWEST


def test_score_tier_follows_config(monkeypatch):
    monkeypatch.setattr(config, "SCORE_TIER_BEST", 60.0)
    monkeypatch.setattr(config, "SCORE_TIER_MIDDLE", 30.0)
    assert score_tier(65) is ScoreTier.BEST
    assert score_tier(35) is ScoreTier.MIDDLE


def test_zero_total_is_not_yet_diagnosed():
    stage = classify(0)
    assert stage.diagnosed is False
    assert stage.stage_name == "진단 대기 중"
    lowest = classify(0.1)
    assert lowest.diagnosed is True
    assert lowest.stage_name != stage.stage_name
    assert grade_of(0) == "0"
    assert grade_of(0.1) == "1"


def test_default_stage_mapping_is_monotonic():
    tables = load_tables()
    order = [b.stage_name for b in tables.stages]
    grades = [b.grade for b in tables.grades]
    last_stage, last_grade = -1, -1
    for tenth in range(1, 1001):
        score = tenth / 10.0
        s_idx = order.index(classify(score).stage_name)
        g_idx = grades.index(grade_of(score))
        assert s_idx >= last_stage and g_idx >= last_grade
        assert s_idx == g_idx, "stage and grade tables should agree on band edges"
        last_stage, last_grade = s_idx, g_idx
    assert grade_of(100) == "5"


def test_classifier_with_injected_tables(alt_classifier):
    assert alt_classifier.classify(10).stage_name == "Seed"
    assert alt_classifier.classify(50).stage_name == "Grow"
    assert alt_classifier.classify(95).short_desc == "lead stage"
    assert alt_classifier.grade_of(49.99) == "C"
    assert alt_classifier.grade_of(90) == "A"
    assert alt_classifier.classify(0).diagnosed is False


def test_feedback_lookup_and_placeholder(alt_classifier):
    assert alt_classifier.feedback_for("D1", 10) == "d1 low"
    assert alt_classifier.feedback_for("D1", 50) == "d1 mid"
    assert alt_classifier.feedback_for("D1", 90) == "d1 high"
    assert alt_classifier.feedback_for("D4", 90) == "pending"


def test_default_feedback_covers_every_band():
    for dim in DIMENSIONS:
        for pct in (10, 50, 90):
            assert feedback_for(dim, pct) != config.FEEDBACK_PLACEHOLDER
    assert feedback_for("D8", 50) == config.FEEDBACK_PLACEHOLDER


def test_empty_tables_are_rejected():
    tables = build_tables()
    with pytest.raises(ValueError):
        Classifier(type(tables)(stages=(), grades=tables.grades))


def test_tables_load_from_dicts_and_sort_bands():
    from diagnosis_core.classify import StageTables

    tables = StageTables.from_dicts(
        {
            "stages": [
                {"min_score": 40, "stage_name": "B", "short_desc": "b"},
                {"min_score": 0, "stage_name": "A", "short_desc": "a"},
            ],
            "grades": [{"min_score": 40, "grade": "II"}, {"min_score": 0, "grade": "I"}],
        },
        {"feedback": {}, "placeholder": "..."},
    )
    clf = Classifier(tables)
    assert clf.classify(39).stage_name == "A"
    assert clf.classify(40).stage_name == "B"
    assert clf.grade_of(41) == "II"
    assert clf.feedback_for("D1", 10) == "..."
    assert tables.band_edges is None
    assert tables.tier_edges is None


def test_injected_band_and_tier_edges_override_config(monkeypatch):
    from dataclasses import replace

    monkeypatch.setattr(config, "SCORE_TIER_BEST", 80.0)
    base = build_tables()
    clf = Classifier(replace(base, band_edges=(10.0, 20.0), tier_edges=(40.0, 20.0)))

    assert clf.band_of(15) is Band.MID
    assert clf.band_of(25) is Band.HIGH
    assert clf.feedback_for("D1", 25) == "d1 high"
    assert clf.score_tier(45) is ScoreTier.BEST
    assert clf.score_tier(25) is ScoreTier.MIDDLE

    # the default classifier keeps reading config
    assert band_of(25) is Band.LOW
    assert score_tier(45) is ScoreTier.LOWEST


def test_edges_load_from_stage_document():
    from diagnosis_core.classify import StageTables

    tables = StageTables.from_dicts(
        {
            "stages": [{"min_score": 0, "stage_name": "A"}],
            "grades": [{"min_score": 0, "grade": "I"}],
            "bands": {"low_max": 50, "mid_max": 75},
            "tiers": {"best": 90, "middle": 70},
        }
    )
    clf = Classifier(tables)
    assert clf.band_of(50) is Band.LOW
    assert clf.band_of(76) is Band.HIGH
    assert clf.score_tier(80) is ScoreTier.MIDDLE
