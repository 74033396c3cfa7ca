from __future__ import annotations
from html import escape
from typing import Dict, Any, List, Mapping, Optional

from .classify import default_classifier
from . import config
from .dimensions import DIMENSIONS, dimension_title

_BAR_COLOURS = {"red": "#f43f5e", "amber": "#f59e0b", "green": "#10b981"}
_TIER_COLOURS = {"green": "#16a34a", "indigo": "#4f46e5", "rose": "#f43f5e"}


def _as_dict(obj: Any) -> Dict[str, Any]:
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "__dict__"):
        return {k: _as_dict(v) if hasattr(v, "__dict__") else v for k, v in vars(obj).items()}
    return {}


def _row(dim: str, pct: float, earned: Optional[float], mx: Optional[float]) -> str:
    clf = default_classifier()
    band = clf.band_of(pct)
    colour = _BAR_COLOURS[band.colour]
    msg = escape(clf.feedback_for(dim, pct))
    pts = f"{earned:.1f} / {mx:g}" if earned is not None and mx is not None else f"{pct:.1f}%"
    return (
        f"<tr><td>{escape(dimension_title(dim))}</td><td>{pts}</td>"
        f"<td><div class=\"bar\"><div style=\"width:{pct:.1f}%;background:{colour}\"></div></div></td>"
        f"<td class=\"band {band.value}\">{msg}</td></tr>"
    )


def _fmt_diff(v: float) -> str:
    return f"{'+' if v > 0 else ''}{v:.1f}"


def _growth_section(growth: Mapping[str, Any] | Any | None) -> str:
    if not growth:
        return ""
    growth = _as_dict(growth)
    diff = float(growth.get("score_diff", 0.0) or 0.0)
    word = "상승" if growth.get("is_positive") else "하락"
    best = _as_dict(growth.get("most_improved") or {})
    worst = _as_dict(growth.get("most_declined") or {})
    rows: List[str] = []
    for d in growth.get("deltas") or []:
        d = _as_dict(d)
        rows.append(f"<li>{escape(str(d.get('title', d.get('dimension', ''))))}: {_fmt_diff(float(d.get('diff', 0.0)))}</li>")

    def _card(label: str, entry: Dict[str, Any]) -> str:
        if not entry:
            return ""
        return (
            f"<p><b>{label}</b>: {escape(dimension_title(str(entry.get('dimension', ''))))} "
            f"{float(entry.get('previous', 0.0)):.1f}점 → {float(entry.get('current', 0.0)):.1f}점 "
            f"({_fmt_diff(float(entry.get('diff', 0.0)))})</p>"
        )

    return (
        "<h3>성장 분석 (Growth Analysis)</h3>"
        f"<p class=\"growth-total\">지난 진단 대비 {abs(diff):.1f}점 {word}</p>"
        f"<p>{int(growth.get('improved_count', 0))}개 영역 개선 · {int(growth.get('declined_count', 0))}개 영역 하락</p>"
        + _card("가장 크게 성장한 영역", best)
        + _card("집중 개선이 필요한 영역", worst)
        + f"<ul>{''.join(rows)}</ul>"
    )


def render_report_html(result: Dict[str, Any]) -> str:
    clf = default_classifier()
    total = float(result.get("total_score", 0.0) or 0.0)
    stage = clf.classify(total)
    tier = clf.score_tier(total)
    dims: Dict[str, float] = result.get("dimension_scores") or {}
    raw: Dict[str, float] = result.get("dimension_raw") or {}
    max_scores: Dict[str, float] = result.get("max_scores") or {}

    if total <= 0:
        breakdown = (
            "<div class=\"empty\"><p>데이터 대기 중...</p>"
            "<p>문항에 응답하시면 자동으로 분석됩니다.</p></div>"
        )
    else:
        rows: List[str] = []
        for dim in DIMENSIONS:
            if dim not in dims:
                continue
            pct = float(dims.get(dim, 0.0) or 0.0)
            mx = max_scores.get(dim)
            earned = raw.get(dim)
            if earned is None and mx:
                earned = pct / 100.0 * float(mx)
            rows.append(_row(dim, pct, earned, mx))
        breakdown = (
            "<table border='1' cellpadding='6' cellspacing='0'>"
            "<thead><tr><th>영역</th><th>점수</th><th></th><th>피드백</th></tr></thead>"
            f"<tbody>{''.join(rows)}</tbody></table>"
        )

    export_links = ""
    user_id = result.get("user_id")
    if config.HISTORY_EXPORT_ENABLED and user_id:
        uid = escape(str(user_id))
        export_links = (
            "<p class=\"export-links\">"
            f"<a href=\"/users/{uid}/history.json\">진단 이력 (JSON)</a> · "
            f"<a href=\"/users/{uid}/history.csv\">진단 이력 (CSV)</a>"
            "</p>"
        )

    created = escape(str(result.get("created_at") or ""))
    grade = escape(str(result.get("stage_result") or clf.grade_of(total)))

    return f"""<!doctype html>
<html lang="ko">
<head>
<meta charset="utf-8"/>
<title>BizDive 진단 리포트</title>
<style>
 body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,'Helvetica Neue',Arial}}
 .wrap{{max-width:960px;margin:40px auto;padding:0 16px}}
 h1{{margin:0 0 16px}}
 .overall{{font-size:1.1rem;margin:8px 0 16px}}
 .bar{{background:#f3f4f6;border-radius:4px;height:6px;width:160px}}
 .bar div{{height:6px;border-radius:4px}}
 .band.low{{color:#be123c}} .band.mid{{color:#b45309}} .band.high{{color:#047857}}
 .empty{{text-align:center;padding:48px;border:2px dashed #e5e7eb;border-radius:12px}}
 table{{border-collapse:collapse;width:100%}}
 th,td{{text-align:left}}
</style>
</head>
<body>
<div class="wrap">
  <h1>BizDive - 7D 기업경영 심층자가진단</h1>
  <p>{created}</p>
  <div class="stage"><b>Current Stage</b> · Stage {grade}: {escape(stage.stage_name)}<br/>{escape(stage.short_desc)}</div>
  <div class="overall"><b>Total Score:</b> <span style="color:{_TIER_COLOURS[tier.colour]}">{total:.1f}</span></div>

  <h3>상세 진단 결과</h3>
  {breakdown}

  {_growth_section(result.get("growth"))}

  {export_links}
</div>
</body>
</html>"""


def export_report_html(result: Dict[str, Any], path: str) -> str:
    html = render_report_html(result)
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)
    return path
