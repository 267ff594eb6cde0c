"""
Local event cache for events created or fetched through the scheduler
"""
import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class LocalEventStore:
    """JSON-file backed list of event dicts; in-memory when no path is given"""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._events: List[Dict] = []
        if self.path and self.path.exists():
            self._events = self._read_file()

    def _read_file(self) -> List[Dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read event store {self.path}: {e}")
            return []
        return data if isinstance(data, list) else []

    def _write_file(self):
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._events, f, indent=2)

    def load(self) -> List[Dict]:
        with self._lock:
            return [dict(event) for event in self._events]

    def save(self, events: List[Dict]):
        with self._lock:
            self._events = [dict(event) for event in events]
            self._write_file()

    def append(self, event: Dict):
        with self._lock:
            self._events.append(dict(event))
            self._write_file()

    def remove(self, event_id: str) -> bool:
        """Remove an event by id; returns False when nothing matched"""
        with self._lock:
            remaining = [event for event in self._events if event.get("id") != event_id]
            removed = len(remaining) != len(self._events)
            self._events = remaining
            if removed:
                self._write_file()
            return removed
