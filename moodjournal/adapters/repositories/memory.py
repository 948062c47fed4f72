"""
In-memory entry store, used by the CLI sample mode and by tests.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from moodjournal.core.models import MoodCategory, MoodEntry, all_categories, resolve_category

logger = logging.getLogger(__name__)


class InMemoryEntryStore:
    """Entry store keeping entries in a dict keyed by id."""

    def __init__(self, entries: Optional[Iterable[MoodEntry]] = None):
        self._lock = threading.Lock()
        self._entries: Dict[str, MoodEntry] = {}
        for entry in entries or []:
            self._entries[entry.id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def all_entries(self) -> List[MoodEntry]:
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.timestamp)

    def fetch_entries(self, start: datetime, end: datetime) -> List[MoodEntry]:
        with self._lock:
            matching = [e for e in self._entries.values() if start <= e.timestamp <= end]
        return sorted(matching, key=lambda e: e.timestamp)

    def create_entry(self, mood: Any, text: Optional[str] = None,
                     timestamp: Optional[datetime] = None) -> MoodEntry:
        if resolve_category(mood) is None:
            raise ValueError(f"Unknown mood identifier: {mood!r}")
        entry = MoodEntry.create(mood, text=text, timestamp=timestamp)
        with self._lock:
            self._entries[entry.id] = entry
        return entry

    def update_entry(self, entry_id: str, mood: Any = None, text: Optional[str] = None) -> bool:
        if mood is not None and resolve_category(mood) is None:
            raise ValueError(f"Unknown mood identifier: {mood!r}")
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                return False
            self._entries[entry_id] = entry.with_changes(mood=mood, text=text)
        return True

    def delete_entry(self, entry_id: str) -> bool:
        with self._lock:
            return self._entries.pop(entry_id, None) is not None

    def get_mood_statistics(self, start: Optional[datetime] = None,
                            end: Optional[datetime] = None) -> Dict[MoodCategory, int]:
        counts = {mood: 0 for mood in all_categories()}
        for entry in self.all_entries():
            if start is not None and entry.timestamp < start:
                continue
            if end is not None and entry.timestamp > end:
                continue
            if entry.category is not None:
                counts[entry.category] += 1
        return counts
