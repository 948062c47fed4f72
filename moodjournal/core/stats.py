"""
Statistics engine for mood entries.

Computes the numeric snapshot every report is built on:
- Distribution over the five categories (zero-filled)
- Dominant mood (canonical declaration order breaks ties)
- Average score, consistency, trend and volatility
"""

import logging
import statistics
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from moodjournal.core.config import InsightConfig
from moodjournal.core.models import (
    AnalysisWindow, MoodCategory, MoodEntry, RecordedMoods, all_categories
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Numeric summary of one analysis window."""
    distribution: Dict[MoodCategory, int]
    dominant_mood: MoodCategory
    average_score: float
    consistency: float
    trend: float
    volatility: float
    total_entries: int
    scored_entries: int
    unique_days: int
    window_days: int
    top_moods: List[MoodCategory] = field(default_factory=list)
    low_confidence_trend: bool = True

    def ratio(self, mood: MoodCategory) -> float:
        """Share of scored entries stamped with `mood`."""
        if self.scored_entries == 0:
            return 0.0
        return self.distribution.get(mood, 0) / self.scored_entries

    @property
    def ratios(self) -> Dict[MoodCategory, float]:
        return {mood: self.ratio(mood) for mood in all_categories()}

    @property
    def distinct_moods(self) -> int:
        return sum(1 for count in self.distribution.values() if count > 0)

    def to_dict(self) -> Dict[str, object]:
        return {
            "distribution": {m.value: c for m, c in self.distribution.items()},
            "dominant_mood": self.dominant_mood.value,
            "average_score": round(self.average_score, 3),
            "consistency": round(self.consistency, 3),
            "trend": round(self.trend, 3),
            "volatility": round(self.volatility, 3),
            "total_entries": self.total_entries,
            "scored_entries": self.scored_entries,
            "unique_days": self.unique_days,
            "window_days": self.window_days,
            "top_moods": [m.value for m in self.top_moods],
            "low_confidence_trend": self.low_confidence_trend,
        }


# ============================================================================
# BUILDING BLOCKS
# ============================================================================

def mood_distribution(entries: List[MoodEntry]) -> Dict[MoodCategory, int]:
    """Tally by category. All five keys are present; unresolvable entries are not counted."""
    counts = {mood: 0 for mood in all_categories()}
    for entry in entries:
        category = entry.category
        if category is not None:
            counts[category] += 1
    return counts


def dominant_mood(distribution: Dict[MoodCategory, int],
                  default: Optional[MoodCategory] = MoodCategory.NORMAL) -> Optional[MoodCategory]:
    """
    Arg-max of the distribution.

    Ties resolve to the first category in declaration order
    (Happy, Normal, Tired, Angry, Sleepy); an empty tally yields `default`.
    """
    if not distribution or max(distribution.values(), default=0) == 0:
        return default
    # max() keeps the first maximal element, so iteration order is the tie-break
    return max(all_categories(), key=lambda mood: distribution.get(mood, 0))


def top_moods(distribution: Dict[MoodCategory, int],
              limit: int = InsightConfig.TOP_MOODS_LIMIT) -> List[MoodCategory]:
    """Most frequent categories with at least one entry, canonical tie-break."""
    ranked = sorted(
        (mood for mood in all_categories() if distribution.get(mood, 0) > 0),
        key=lambda mood: distribution[mood],
        reverse=True,
    )
    return ranked[:limit]


def mean_score(entries: List[MoodEntry]) -> float:
    scores = [e.category.score for e in entries if e.category is not None]
    return statistics.mean(scores) if scores else 0.0


def score_trend(entries: List[MoodEntry]) -> float:
    """
    Later-half mean minus earlier-half mean of chronologically sorted entries.

    The split index is `len(entries) // 2`. Fewer than two scored entries
    have no halves to compare and report 0.0.
    """
    scored = sorted((e for e in entries if e.category is not None), key=lambda e: e.timestamp)
    if len(scored) < 2:
        return 0.0
    midpoint = len(scored) // 2
    return mean_score(scored[midpoint:]) - mean_score(scored[:midpoint])


def score_volatility(scores: List[float]) -> float:
    """Population stddev normalized by 4.0 and capped at 1.0."""
    if len(scores) < 2:
        return 0.0
    return min(statistics.pstdev(scores) / InsightConfig.VOLATILITY_DIVISOR, 1.0)


# ============================================================================
# PUBLIC API
# ============================================================================

def compute_statistics(entries: List[MoodEntry],
                       window: Optional[AnalysisWindow] = None) -> StatisticsSnapshot:
    """
    Computes the statistics snapshot for a window.

    Args:
        entries: Entries in any order.
        window: Logical window; only its day count is used, as the
            consistency denominator. Defaults to the span of the entries.

    Returns:
        StatisticsSnapshot. Empty input yields a zeroed snapshot with
        Normal as the dominant mood.
    """
    window = window or AnalysisWindow.spanning(entries)
    grouped = RecordedMoods.split(entries)
    scores = [e.category.score for e in grouped.scored]

    distribution = mood_distribution(grouped.scored)
    unique_days = len({e.day for e in entries})

    # Not clamped: entries outside a short window can push consistency past 1
    snapshot = StatisticsSnapshot(
        distribution=distribution,
        dominant_mood=dominant_mood(distribution),
        average_score=statistics.mean(scores) if scores else 0.0,
        consistency=unique_days / window.days,
        trend=score_trend(grouped.scored),
        volatility=score_volatility(scores),
        total_entries=len(entries),
        scored_entries=len(grouped.scored),
        unique_days=unique_days,
        window_days=window.days,
        top_moods=top_moods(distribution),
        low_confidence_trend=len(scores) < InsightConfig.TREND_CONFIDENT_MIN,
    )
    logger.debug(f"[STATS] {snapshot.to_dict()}")
    return snapshot
