import hashlib
import json
import os
import time
from pathlib import Path
from typing import Optional

from ..config import settings
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

SNAPSHOT_DIR = Path(settings.SNAPSHOT_DIR)
SNAPSHOT_DIR.mkdir(parents=True, exist_ok=True)

TTL_MIN = settings.SNAPSHOT_TTL_MINUTES


def _fname(kind: str, key: str) -> Path:
    # hash-only filename, keys may hold arbitrary characters
    h = hashlib.sha256(f"{kind}:{key.strip()}".encode("utf-8")).hexdigest()
    return SNAPSHOT_DIR / f"{h}.json"


def save_snapshot(kind: str, key: str, payload: dict) -> str:
    path = _fname(kind, key)
    tmp = path.with_suffix(".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, separators=(",", ":"), default=str)
    os.replace(tmp, path)  # atomic
    return str(path)


def _is_fresh(path: Path) -> bool:
    if TTL_MIN <= 0:
        return True
    try:
        age = time.time() - path.stat().st_mtime
        return age <= TTL_MIN * 60
    except FileNotFoundError:
        return False


def load_snapshot(kind: str, key: str) -> Optional[dict]:
    path = _fname(kind, key)
    if not path.exists():
        return None
    if not _is_fresh(path):
        logger.debug(f"stale snapshot dropped: {kind}/{key}")
        path.unlink(missing_ok=True)
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"unreadable snapshot {path}: {e}")
        return None


def clear_snapshot(kind: str, key: str) -> None:
    _fname(kind, key).unlink(missing_ok=True)
