# autoplay.py
from __future__ import annotations
import argparse, os, random, datetime
from typing import Dict, List, Optional
from diagnosis_core.dimensions import keyed_questions, load_questions
from diagnosis_core.growth import diff_growth
from diagnosis_core.report_html import export_report_html
from diagnosis_core.scoring import max_scores
from diagnosis_core.session import DiagnosisSession
from diagnosis_core.types import DiagnosisResult, Question

PROFILES = ("all", "none", "half", "front", "random")

def answers_for(questions: List[Question], profile: str, rng: random.Random) -> Dict[str, bool]:
    """Answer set for a scripted profile.

    - all/none: every key checked / unchecked
    - half: every other key within each dimension
    - front: the first half of each dimension (weight-heavy questions come first)
    - random: coin flip per key
    """
    out: Dict[str, bool] = {}
    for key, _q in keyed_questions(questions):
        idx = int(key.rsplit("_", 1)[1])
        if profile == "all": out[key] = True
        elif profile == "none": out[key] = False
        elif profile == "half": out[key] = idx % 2 == 0
        elif profile == "front": out[key] = idx < 4
        else: out[key] = rng.random() < 0.5
    return out

def run_once(questions: List[Question], profile: str, rng: random.Random, created_at: Optional[str] = None) -> DiagnosisResult:
    sess = DiagnosisSession(questions=questions, user_id="autoplay")
    sess.update(answers_for(questions, profile, rng))
    return sess.finalize(created_at=created_at)

def run(profile: str, previous_profile: Optional[str], seed: Optional[int]) -> str:
    rng = random.Random(seed or 1234)
    questions = load_questions()
    previous = None
    if previous_profile:
        previous = run_once(questions, previous_profile, rng, created_at="1970-01-01T00:00:00+00:00")
    current = run_once(questions, profile, rng)
    maxes = max_scores(questions)
    payload = current.to_record(); payload["max_scores"] = maxes
    report = diff_growth(current, previous, maxes)
    if report is not None:
        payload["growth"] = report
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs("reports", exist_ok=True)
    path = os.path.join("reports", f"auto_{profile}_{ts}.html")
    export_report_html(payload, path)
    print(f"Total {current.total_score:.1f} (grade {current.stage_result})")
    print(f"Report: {path}")
    return path

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--profile", choices=[p for p in PROFILES if p != "none"], default="half")
    ap.add_argument("--previous", choices=[p for p in PROFILES if p != "none"], default=None)
    ap.add_argument("--seed", type=int, default=1337)
    a = ap.parse_args()
    run(a.profile, a.previous, a.seed)

if __name__ == "__main__":
    main()
