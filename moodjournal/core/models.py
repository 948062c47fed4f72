"""
Domain model for mood journaling.

This module defines the fixed mood taxonomy and the records the analytics
pipeline reads:
- MoodCategory: the five mood stamps and their display/score mappings
- MoodEntry: one timestamped mood record with an optional short note
- AnalysisWindow: the inclusive date range a computation covers
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

MAX_NOTE_LENGTH = 140


# ============================================================================
# MOOD TAXONOMY
# ============================================================================

class MoodCategory(Enum):
    """The five mood stamps, in canonical declaration order."""
    HAPPY = "happy"
    NORMAL = "normal"
    TIRED = "tired"
    ANGRY = "angry"
    SLEEPY = "sleepy"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def emoji(self) -> str:
        return _EMOJIS[self]

    @property
    def theme_color(self) -> str:
        """Pastel color used in light mode."""
        return _THEME_COLORS[self]

    @property
    def dark_theme_color(self) -> str:
        return _DARK_THEME_COLORS[self]

    @property
    def score(self) -> float:
        """Signed value on the -2..+2 scale used for averaging."""
        return _SCORES[self]


_DISPLAY_NAMES = {
    MoodCategory.HAPPY: "Happy",
    MoodCategory.NORMAL: "Normal",
    MoodCategory.TIRED: "Tired",
    MoodCategory.ANGRY: "Angry",
    MoodCategory.SLEEPY: "Sleepy",
}

_EMOJIS = {
    MoodCategory.HAPPY: "😃",
    MoodCategory.NORMAL: "🙂",
    MoodCategory.TIRED: "😫",
    MoodCategory.ANGRY: "😡",
    MoodCategory.SLEEPY: "😴",
}

_THEME_COLORS = {
    MoodCategory.HAPPY: "#FFE5B4",   # Peach
    MoodCategory.NORMAL: "#B4E5FF",  # Sky Blue
    MoodCategory.TIRED: "#E5D4FF",   # Lavender
    MoodCategory.ANGRY: "#FFB4B4",   # Coral
    MoodCategory.SLEEPY: "#C8E6C9",  # Soft Green
}

_DARK_THEME_COLORS = {
    MoodCategory.HAPPY: "#8B6B47",
    MoodCategory.NORMAL: "#4A7A8C",
    MoodCategory.TIRED: "#6B5B8C",
    MoodCategory.ANGRY: "#8B4545",
    MoodCategory.SLEEPY: "#4A6B50",
}

_SCORES = {
    MoodCategory.HAPPY: 2.0,
    MoodCategory.NORMAL: 0.0,
    MoodCategory.TIRED: -1.0,
    MoodCategory.SLEEPY: -0.5,
    MoodCategory.ANGRY: -2.0,
}


def all_categories() -> List[MoodCategory]:
    """Returns the five categories in canonical order."""
    return list(MoodCategory)


def resolve_category(value: Any) -> Optional[MoodCategory]:
    """
    Resolves a stored mood identifier to its category.

    Args:
        value: Raw identifier ("happy") or a MoodCategory.

    Returns:
        The matching MoodCategory, or None when the identifier is unknown.
    """
    if isinstance(value, MoodCategory):
        return value
    if not isinstance(value, str):
        return None
    try:
        return MoodCategory(value.strip().lower())
    except ValueError:
        return None


def truncate_note(text: Optional[str]) -> Optional[str]:
    """Caps a note at MAX_NOTE_LENGTH characters. Longer input is cut, not rejected."""
    if text is None:
        return None
    return text[:MAX_NOTE_LENGTH]


# ============================================================================
# ENTRIES
# ============================================================================

@dataclass(frozen=True)
class MoodEntry:
    """A single mood record as read from the entry store."""
    id: str
    mood: str
    timestamp: datetime
    text: Optional[str] = None

    @classmethod
    def create(cls, mood: Any, text: Optional[str] = None,
               timestamp: Optional[datetime] = None) -> 'MoodEntry':
        """
        Creates a new entry the way the record screen does.

        Args:
            mood: MoodCategory or raw identifier.
            text: Optional note, truncated to 140 characters.
            timestamp: Defaults to now (local time).
        """
        raw = mood.value if isinstance(mood, MoodCategory) else str(mood)
        return cls(
            id=str(uuid.uuid4()),
            mood=raw,
            timestamp=timestamp or datetime.now(),
            text=truncate_note(text),
        )

    def with_changes(self, mood: Any = None, text: Optional[str] = None) -> 'MoodEntry':
        """Returns the edited record; id and timestamp are preserved."""
        changes: Dict[str, Any] = {}
        if mood is not None:
            changes["mood"] = mood.value if isinstance(mood, MoodCategory) else str(mood)
        if text is not None:
            changes["text"] = truncate_note(text)
        return replace(self, **changes)

    @property
    def category(self) -> Optional[MoodCategory]:
        return resolve_category(self.mood)

    @property
    def day(self) -> date:
        return self.timestamp.date()

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "mood": self.mood,
            "text": self.text,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'MoodEntry':
        """
        Builds an entry from a stored document (`_id`, `mood`, `text`, `timestamp`).

        Raises:
            ValueError: If the timestamp is missing or unparseable.
        """
        timestamp = doc.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        if not isinstance(timestamp, datetime):
            raise ValueError(f"Entry {doc.get('_id')} has no valid timestamp")
        return cls(
            id=str(doc.get("_id") or doc.get("id")),
            mood=str(doc.get("mood", "")),
            timestamp=timestamp,
            text=truncate_note(doc.get("text")),
        )


# ============================================================================
# WINDOWS
# ============================================================================

@dataclass(frozen=True)
class AnalysisWindow:
    """Inclusive calendar-date range an analysis covers."""
    start: date
    end: date

    @property
    def days(self) -> int:
        """Elapsed day count, both ends included."""
        return max(1, (self.end - self.start).days + 1)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment.date() <= self.end

    def bounds(self) -> Tuple[datetime, datetime]:
        """Datetime range for store queries: start of first day to end of last."""
        return (datetime.combine(self.start, time.min), datetime.combine(self.end, time.max))

    @classmethod
    def last_days(cls, days: int, today: Optional[date] = None) -> 'AnalysisWindow':
        """Trailing window of `days` calendar days ending today."""
        end = today or date.today()
        return cls(start=end - timedelta(days=days - 1), end=end)

    @classmethod
    def spanning(cls, entries: List[MoodEntry]) -> 'AnalysisWindow':
        """Window from the first to the last entry; today only when empty."""
        if not entries:
            return cls.last_days(1)
        days = [e.day for e in entries]
        return cls(start=min(days), end=max(days))


@dataclass
class RecordedMoods:
    """Entries grouped by resolvability, with malformed ones logged once."""
    scored: List[MoodEntry] = field(default_factory=list)
    malformed: List[MoodEntry] = field(default_factory=list)

    @classmethod
    def split(cls, entries: List[MoodEntry]) -> 'RecordedMoods':
        grouped = cls()
        for entry in entries:
            if entry.category is None:
                grouped.malformed.append(entry)
            else:
                grouped.scored.append(entry)
        if grouped.malformed:
            logger.warning(
                f"[WARN] Skipping {len(grouped.malformed)} entries with unknown mood "
                f"identifiers: {sorted({e.mood for e in grouped.malformed})}"
            )
        return grouped
