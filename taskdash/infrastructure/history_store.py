"""Per-mode line history persisted in the cache directory."""

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from taskdash.config import CACHE_DIR

HISTORY_FILE_NAME = "history.json"

logger = logging.getLogger("taskdash.history")
_LOCK = Lock()


class HistoryStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = path or (CACHE_DIR / HISTORY_FILE_NAME)

    def load(self) -> Dict[str, List[str]]:
        with _LOCK:
            if not self.path.exists():
                return {}
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): [str(x) for x in v] for k, v in data.items() if isinstance(v, list)}

    def save(self, history: Dict[str, List[str]]) -> None:
        with _LOCK:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(history, indent=2, ensure_ascii=False), encoding="utf-8")
            except OSError as exc:
                logger.warning("Could not save history to %s: %s", self.path, exc)


__all__ = ["HistoryStore"]
