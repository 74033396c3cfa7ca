from __future__ import annotations
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import json, logging, os, uuid, typing as t
from datetime import datetime, timezone

# ---- Core imports ----
from diagnosis_core import dimensions as dims
from diagnosis_core.classify import default_classifier
from diagnosis_core import config
from diagnosis_core.config import load_config
from diagnosis_core.growth import diff_growth, radar_series
from diagnosis_core.history_export import to_json as history_to_json, to_csv as history_to_csv
from diagnosis_core.report_html import render_report_html
from diagnosis_core.scoring import max_scores
from diagnosis_core.session import DiagnosisSession, EmptyDiagnosisError
from diagnosis_core.types import DiagnosisResult
from .storage import (
    delete_record,
    latest_pair_for_user,
    list_records_for_user,
    load_record,
    save_record,
)

log = logging.getLogger(__name__)

app = FastAPI(title="BizDive Diagnosis API")

@app.get("/")
def root():
    return {"status": "ok", "service": "bizdive-diagnosis-api"}

ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class ScoreReq(BaseModel):
    answers: dict[str, bool] = Field(default_factory=dict)

class SaveReq(BaseModel):
    answers: dict[str, bool]
    created_at: datetime | None = None

# ---- Helpers ----
def _serialize(obj: t.Any) -> t.Any:
    return json.loads(json.dumps(obj, default=lambda o: getattr(o, "__dict__", o), ensure_ascii=False))


def _as_utc_iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def _session(user_id: str | None = None) -> DiagnosisSession:
    return DiagnosisSession(questions=dims.load_questions(), user_id=user_id)


def _decorate(record: dict[str, t.Any]) -> dict[str, t.Any]:
    clf = default_classifier()
    total = float(record.get("total_score", 0.0) or 0.0)
    stage = clf.classify(total)
    tier = clf.score_tier(total)
    out = dict(record)
    out["stage"] = {"stage_name": stage.stage_name, "short_desc": stage.short_desc, "diagnosed": stage.diagnosed}
    out["tier"] = {"name": tier.value, "colour": tier.colour}
    return out


def _growth_for(user_id: str) -> tuple[dict[str, t.Any] | None, t.Any]:
    cur, prev = latest_pair_for_user(user_id)
    if cur is None:
        return None, None
    current = DiagnosisResult.from_record(cur)
    previous = DiagnosisResult.from_record(prev) if prev else None
    report = diff_growth(current, previous, max_scores(dims.load_questions()))
    return cur, report

# ---- Health ----
@app.get("/health")
def health():
    cfg = load_config()
    return {
        "questions": len(dims.load_questions()),
        "history_export": config.HISTORY_EXPORT_ENABLED,
        "persist_raw_scores": cfg.get("PERSIST_RAW_SCORES", True),
    }

# ---- Questions & live scoring ----
@app.get("/questions")
def list_questions():
    qs = dims.load_questions()
    maxes = max_scores(qs)
    sections = []
    for dim, group in dims.group_by_dimension(qs).items():
        sections.append({
            "id": dim,
            "title": dims.dimension_title(dim, with_english=True),
            "desc": dims.DIMENSION_DESCS.get(dim, ""),
            "maxScore": maxes[dim],
            "questions": [
                {"key": dims.question_key(dim, idx), "id": q.id, "text": q.text, "weight": q.weight}
                for idx, q in enumerate(group)
            ],
        })
    return {"total": len(qs), "sections": sections}


@app.post("/diagnosis/score")
def score(req: ScoreReq):
    sess = _session()
    sess.update(req.answers)
    agg = sess.snapshot()
    stage = sess.classifier.classify(agg.total_score)
    return {
        "total_score": agg.total_score,
        "section_scores": agg.section_scores,
        "section_earned": agg.section_earned,
        "section_max": agg.section_max,
        "stage": _serialize(stage),
        "breakdown": _serialize(sess.breakdown(agg)),
        "radar": radar_series(agg.section_scores),
    }

# ---- Records ----
@app.post("/users/{user_id}/diagnoses")
def save_diagnosis(user_id: str, req: SaveReq):
    sess = _session(user_id)
    sess.update(req.answers)
    try:
        result = sess.finalize(created_at=_as_utc_iso(req.created_at) if req.created_at else None)
    except EmptyDiagnosisError as e:
        raise HTTPException(400, str(e))
    result.id = str(uuid.uuid4())
    record = result.to_record()
    metadata = {
        "userId": user_id,
        "createdAt": result.created_at,
        "total_score": result.total_score,
        "stage_result": result.stage_result,
    }
    save_record(result.id, record, metadata)
    return _decorate(record)


@app.get("/users/{user_id}/diagnoses")
def list_diagnoses(user_id: str):
    return {"records": [_decorate(r) for r in list_records_for_user(user_id)]}


@app.get("/users/{user_id}/growth")
def growth(user_id: str):
    cur, report = _growth_for(user_id)
    if cur is None:
        raise HTTPException(404, "no diagnosis found")
    prev_scores = None
    if report is not None:
        _, prev = latest_pair_for_user(user_id)
        prev_scores = (prev or {}).get("dimension_scores")
    return {
        "current_id": cur.get("id"),
        "report": _serialize(report) if report is not None else None,
        "radar": radar_series(cur.get("dimension_scores") or {}, prev_scores),
    }


@app.get("/diagnoses/{record_id}")
def get_diagnosis(record_id: str):
    record = load_record(record_id)
    if not record:
        raise HTTPException(404, "diagnosis not found")
    return _decorate(record)


@app.delete("/diagnoses/{record_id}")
def delete_diagnosis(record_id: str):
    ok = delete_record(record_id)
    if not ok:
        raise HTTPException(404, "diagnosis not found")
    return {"ok": True}


@app.get("/diagnoses/{record_id}/report/html")
def report_html_endpoint(record_id: str):
    record = load_record(record_id)
    if not record:
        raise HTTPException(404, "diagnosis not found")
    payload = dict(record)
    payload["max_scores"] = max_scores(dims.load_questions())
    user_id = record.get("user_id")
    if user_id:
        cur, report = _growth_for(user_id)
        if cur is not None and cur.get("id") == record_id and report is not None:
            payload["growth"] = _serialize(report)
    return {"html": render_report_html(payload)}

# ---- History exports ----
@app.get("/users/{user_id}/history.json")
def get_history_json(user_id: str):
    if not config.HISTORY_EXPORT_ENABLED:
        raise HTTPException(404, "history export disabled")
    return {"user_id": user_id, **history_to_json(list_records_for_user(user_id))}


@app.get("/users/{user_id}/history.csv")
def get_history_csv(user_id: str):
    if not config.HISTORY_EXPORT_ENABLED:
        raise HTTPException(404, "history export disabled")
    body = history_to_csv(list_records_for_user(user_id))
    filename = f"{user_id}_history.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )
