from __future__ import annotations
import json, logging
from pathlib import Path
from typing import Dict, Iterator, List, Sequence, Tuple

from . import config
from .types import Question

log = logging.getLogger(__name__)

DIMENSIONS = ["D1","D2","D3","D4","D5","D6","D7"]

DIMENSION_TITLES: Dict[str, str] = {
    "D1": "시장분석",
    "D2": "문제이해",
    "D3": "해결가치",
    "D4": "실행역량",
    "D5": "기술역량",
    "D6": "수익모델",
    "D7": "성장전략",
}

DIMENSION_TITLES_EN: Dict[str, str] = {
    "D1": "Market Analysis",
    "D2": "Problem",
    "D3": "Solution",
    "D4": "Execution",
    "D5": "Tech",
    "D6": "BM",
    "D7": "Growth Strategy",
}

DIMENSION_DESCS: Dict[str, str] = {
    "D1": "목표 시장의 규모와 흐름, 경쟁 구도를 데이터로 파악하고 있는지 점검합니다.",
    "D2": "고객이 겪는 문제를 구체적으로 정의하고 검증했는지 점검합니다.",
    "D3": "솔루션이 문제를 해결하는 방식과 차별화된 가치를 점검합니다.",
    "D4": "팀 구성, 일정 관리, 자원 운용 등 실행 체계를 점검합니다.",
    "D5": "핵심 기술의 확보 수준과 지식재산, 개발 역량을 점검합니다.",
    "D6": "수익 구조와 가격 정책, 단위 경제성을 점검합니다.",
    "D7": "투자 유치, 파트너십, 확장 전략 등 성장 경로를 점검합니다.",
}


def dimension_title(dimension: str, *, with_english: bool = False) -> str:
    """`"D1. 시장분석"`; unknown tags come back unchanged."""
    name = DIMENSION_TITLES.get(dimension)
    if name is None:
        return dimension
    label = f"{dimension}. {name}"
    if with_english:
        label += f" ({DIMENSION_TITLES_EN[dimension]})"
    return label


def question_key(dimension: str, index: int) -> str:
    return f"{dimension}_{int(index)}"


def group_by_dimension(questions: Sequence[Question]) -> Dict[str, List[Question]]:
    """Questions per dimension in D1..D7 order; empty dimensions are left out.

    Input order within a dimension is kept verbatim since answer keys are
    positional.
    """
    groups: Dict[str, List[Question]] = {}
    for q in questions:
        groups.setdefault(q.dimension, []).append(q)
    return {d: groups[d] for d in DIMENSIONS if groups.get(d)}


def keyed_questions(questions: Sequence[Question]) -> Iterator[Tuple[str, Question]]:
    for dim, qs in group_by_dimension(questions).items():
        for idx, q in enumerate(qs):
            yield question_key(dim, idx), q


def _questions_path() -> Path:
    configured = config.setting("QUESTIONS_PATH")
    if configured:
        return Path(configured)
    return Path(__file__).with_name("data") / "questions.json"


def load_questions(path: str | Path | None = None) -> List[Question]:
    p = Path(path) if path is not None else _questions_path()
    raw = json.loads(p.read_text(encoding="utf-8"))
    out = [Question(**r) for r in raw]
    log.debug("loaded %d questions from %s", len(out), p)
    return out
