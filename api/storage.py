"""Utility helpers for persisting diagnosis records.

Records are plain JSON files on disk plus a small index used for per-user
history listings. Each record is written once and never modified; the
index only grows or shrinks on save/delete.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from diagnosis_core import config


DATA_ROOT = Path(config.setting("DATA_DIR")).resolve()
RECORDS_DIR = DATA_ROOT / "diagnoses"
RECORD_INDEX_PATH = DATA_ROOT / "diagnoses_index.json"

_LOCK = threading.Lock()

log = logging.getLogger(__name__)


def _ensure_dirs() -> None:
    RECORDS_DIR.mkdir(parents=True, exist_ok=True)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("unreadable json at %s, using default", path)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(record: Dict[str, Any]) -> datetime:
    """`created_at` as an aware UTC datetime; unparseable values sort oldest."""
    raw = str(record.get("created_at") or "")
    try:
        ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        log.warning("record %s has unparseable created_at %r", record.get("id"), raw)
        return _EPOCH
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def save_record(record_id: str, record: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    """Persist a diagnosis record and its index metadata."""

    _ensure_dirs()
    record_path = RECORDS_DIR / f"{record_id}.json"

    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RECORD_INDEX_PATH, {})
        index[record_id] = metadata
        _write_json(RECORD_INDEX_PATH, index)

    _write_json(record_path, record)
    log.info("saved diagnosis %s for user %s", record_id, metadata.get("userId") or "-")


def load_record(record_id: str) -> Optional[Dict[str, Any]]:
    path = RECORDS_DIR / f"{record_id}.json"
    if not path.exists():
        return None
    return _read_json(path, None)


def delete_record(record_id: str) -> bool:
    removed = False
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RECORD_INDEX_PATH, {})
        if record_id in index:
            index.pop(record_id, None)
            _write_json(RECORD_INDEX_PATH, index)
            removed = True
    record_path = RECORDS_DIR / f"{record_id}.json"
    if record_path.exists():
        try:
            record_path.unlink()
        except OSError:
            log.warning("could not remove %s", record_path)
    return removed


def list_records_for_user(user_id: str) -> List[Dict[str, Any]]:
    """Full records for a user, newest first."""

    index: Dict[str, Dict[str, Any]] = _read_json(RECORD_INDEX_PATH, {})
    out: List[Dict[str, Any]] = []
    for rid, meta in index.items():
        if meta.get("userId") != user_id:
            continue
        rec = load_record(rid)
        if rec:
            out.append(rec)
    out.sort(key=_created_key, reverse=True)
    return out


def latest_pair_for_user(user_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    records = list_records_for_user(user_id)
    current = records[0] if records else None
    previous = records[1] if len(records) > 1 else None
    return current, previous
