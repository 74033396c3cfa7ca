from __future__ import annotations
import os, datetime
from diagnosis_core.dimensions import dimension_title, keyed_questions
from diagnosis_core.report_html import export_report_html
from diagnosis_core.scoring import max_scores
from diagnosis_core.session import DiagnosisSession, EmptyDiagnosisError
def ask(prompt: str) -> bool:
    while True:
        v = input(prompt + " [y/n] ").strip().lower()
        if v in ("y", "yes", "1", "o"): return True
        if v in ("n", "no", "0", "x", ""): return False
        print("Enter y or n.")
def main():
    print("BizDive - 7D 기업경영 심층자가진단")
    session = DiagnosisSession()
    last_dim = None
    for key, q in keyed_questions(session.questions):
        dim = key.split("_", 1)[0]
        if dim != last_dim:
            print(f"\n== {dimension_title(dim)} =="); last_dim = dim
        session.set_answer(key, ask(f"({q.weight:g}점) {q.text}"))
    agg = session.snapshot(); stage = session.stage()
    print(f"\nTotal Score: {agg.total_score:.1f}  |  {stage.stage_name} - {stage.short_desc}")
    for sec in session.breakdown(agg):
        print(f"  {sec.dimension}. {sec.title}: {sec.earned:.1f} / {sec.max:g} ({sec.band}) {sec.feedback}")
    try:
        res = session.finalize()
    except EmptyDiagnosisError as e:
        print(e); return
    payload = res.to_record(); payload["max_scores"] = max_scores(session.questions)
    os.makedirs("reports", exist_ok=True)
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    path = export_report_html(payload, os.path.join("reports", f"diagnosis_{ts}.html"))
    print(f"Done. Report saved to: {path}")
if __name__ == "__main__": main()
