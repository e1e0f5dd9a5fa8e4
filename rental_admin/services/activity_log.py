import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from rental_admin.config import settings

logger = logging.getLogger(__name__)

# One lock per log file, shared by every ActivityLog instance in the process
_locks: dict = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _locks_guard:
        return _locks.setdefault(key, threading.Lock())


class ActivityLog:
    """Human-readable activity feed kept as a JSON array, newest first.

    Only the most recent ``limit`` entries are retained. Writers in the same
    process are serialised and the file is swapped in atomically, so a reader
    never sees a half-written list.
    """

    def __init__(self, path: Optional[str] = None, limit: Optional[int] = None):
        self.path = Path(path or settings.ACTIVITY_LOG_PATH)
        self.limit = limit if limit is not None else settings.ACTIVITY_LOG_LIMIT

    def _read(self) -> List[dict]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning("Activity log %s unreadable, starting fresh: %s", self.path, e)
            return []
        if not isinstance(data, list):
            return []
        return data

    def _write(self, entries: List[dict]) -> None:
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=directory, prefix=".logs-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def append(self, message: str) -> dict:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": message,
        }
        logger.info("[SERVER-LOG]: %s", message)
        try:
            with _lock_for(self.path):
                entries = self._read()
                entries.insert(0, entry)
                self._write(entries[: self.limit])
        except OSError:
            # The activity feed must never take a request down with it
            logger.error("Failed to write activity log %s", self.path, exc_info=True)
        return entry

    def entries(self) -> List[dict]:
        return [
            e
            for e in self._read()
            if isinstance(e, dict) and "timestamp" in e and "message" in e
        ]


def get_activity_log() -> ActivityLog:
    return ActivityLog()
