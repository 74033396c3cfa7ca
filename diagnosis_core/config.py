from __future__ import annotations
import os, json, logging, pathlib

log = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


DEFAULT_WEIGHT: float = 1.0

# per-dimension band edges, inclusive upper bounds on percent
BAND_LOW_MAX: float = 33.0
BAND_MID_MAX: float = 66.0

# overall score colour tiers (history list, stage card)
SCORE_TIER_BEST: float = 80.0
SCORE_TIER_MIDDLE: float = 50.0

GROWTH_FALLBACK_MAX: float = 15.0

FEEDBACK_PLACEHOLDER: str = "분석 중..."
SENTINEL_STAGE_NAME: str = "진단 대기 중"
SENTINEL_STAGE_DESC: str = "좌측 문항에 응답하여 단계 확인"
SENTINEL_GRADE: str = "0"

EXPECTED_TOTAL_WEIGHT: float = 100.0
WEIGHT_MIN: float = 1.0
WEIGHT_MAX: float = 2.0

PERSIST_RAW_SCORES: bool = True

HISTORY_EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
# // env overrides for staging/ops; defaults remain conservative.
SCORE_TIER_BEST = _env_float("SCORE_TIER_BEST", SCORE_TIER_BEST)
SCORE_TIER_MIDDLE = _env_float("SCORE_TIER_MIDDLE", SCORE_TIER_MIDDLE)
GROWTH_FALLBACK_MAX = _env_float("GROWTH_FALLBACK_MAX", GROWTH_FALLBACK_MAX)
EXPECTED_TOTAL_WEIGHT = _env_float("EXPECTED_TOTAL_WEIGHT", EXPECTED_TOTAL_WEIGHT)
PERSIST_RAW_SCORES = _env_bool("PERSIST_RAW_SCORES", PERSIST_RAW_SCORES)
HISTORY_EXPORT_ENABLED = _env_bool("HISTORY_EXPORT_ENABLED", HISTORY_EXPORT_ENABLED)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
QUESTIONS_PATH: str | None = os.getenv("QUESTIONS_PATH") or None
STAGES_PATH: str | None = os.getenv("STAGES_PATH") or None
DATA_DIR: str = os.getenv("DATA_DIR") or "data"

CONFIG_PATH = pathlib.Path(os.getenv("DIAGNOSIS_CONFIG", "config.json"))

_FLOAT_KEYS = ("SCORE_TIER_BEST", "SCORE_TIER_MIDDLE", "GROWTH_FALLBACK_MAX")
_PATH_KEYS = ("QUESTIONS_PATH", "STAGES_PATH", "DATA_DIR")


def load_config() -> dict:
    """config.json from the working directory, with environment values on top."""
    cfg = {}
    if CONFIG_PATH.exists():
        try:
            cfg = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("unreadable config at %s, ignoring it", CONFIG_PATH)
            cfg = {}
    e = os.environ
    if e.get("PERSIST_RAW_SCORES"):
        cfg["PERSIST_RAW_SCORES"] = _env_bool("PERSIST_RAW_SCORES", PERSIST_RAW_SCORES)
    for k in _PATH_KEYS:
        if e.get(k): cfg[k] = e.get(k)
    for k in _FLOAT_KEYS:
        if e.get(k): cfg[k] = _env_float(k, globals()[k])
    return cfg


def setting(name: str, cfg: dict | None = None):
    """Value of `name` from config.json/env, else the module constant."""
    cfg = load_config() if cfg is None else cfg
    value = cfg.get(name)
    return globals()[name] if value is None else value


def tier_thresholds(cfg: dict | None = None) -> tuple[float, float]:
    cfg = load_config() if cfg is None else cfg
    best = float(setting("SCORE_TIER_BEST", cfg))
    mid = float(setting("SCORE_TIER_MIDDLE", cfg))
    return (best, mid) if best >= mid else (mid, best)
