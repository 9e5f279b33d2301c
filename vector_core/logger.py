# vector_core/logger.py
import json
import sys
import threading
from datetime import datetime
from pathlib import Path

from vector_core.settings import get_settings

_write_lock = threading.Lock()
_ECHO_LEVELS = {"warn", "error"}


def _log_path() -> Path:
    date = datetime.now().strftime("%Y-%m-%d")
    return Path(get_settings().log_dir) / f"{date}.jsonl"


def log_event(event_type, payload, level="info"):
    """Append an event to today's JSON-lines log (one object per line)."""
    entry = {
        "timestamp": datetime.now().isoformat(),
        "level": level,
        "type": event_type,
        "payload": payload,
    }
    settings = get_settings()
    path = _log_path()
    with _write_lock:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str) + "\n")

    if settings.log_echo and level in _ECHO_LEVELS:
        print(f"[vectors] [{level.upper()}] {event_type}: {payload}", file=sys.stderr)
    return entry
