"""
Pattern analysis over mood entries.

Analyzers:
- TimeOfDayAnalyzer: morning / afternoon / evening / night bands, each with
  its own dominant mood, plus fatigue, stress and late-night insights
- WeekdayAnalyzer: average score per weekday, best and worst day
- MoodTrendAnalyzer: per-mood frequency trend and peak weekdays
"""

import logging
import statistics
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from moodjournal.core.config import InsightConfig
from moodjournal.core.models import MoodCategory, MoodEntry, all_categories
from moodjournal.core.stats import dominant_mood, mood_distribution

logger = logging.getLogger(__name__)

WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']

FATIGUE_MOODS = (MoodCategory.TIRED, MoodCategory.SLEEPY)
STRESS_MOODS = (MoodCategory.ANGRY, MoodCategory.TIRED)


# ============================================================================
# ENUMS & RESULT TYPES
# ============================================================================

class TimeBand(Enum):
    """Fixed local-time bands. Night wraps across midnight."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

    @staticmethod
    def for_hour(hour: int) -> 'TimeBand':
        if InsightConfig.MORNING_START <= hour < InsightConfig.AFTERNOON_START:
            return TimeBand.MORNING
        if InsightConfig.AFTERNOON_START <= hour < InsightConfig.EVENING_START:
            return TimeBand.AFTERNOON
        if InsightConfig.EVENING_START <= hour < InsightConfig.NIGHT_START:
            return TimeBand.EVENING
        # 22, 23, 0..5
        return TimeBand.NIGHT


class TimeInsight(Enum):
    """Keys of the qualitative time-of-day insights."""
    MORNING_FATIGUE = "morning_fatigue"
    EVENING_STRESS = "evening_stress"
    AFTERNOON_DIP = "afternoon_dip"
    LATE_NIGHT = "late_night"


class TrendDirection(Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"

    @property
    def emoji(self) -> str:
        return {"increasing": "📈", "decreasing": "📉", "stable": "➡️"}[self.value]


@dataclass(frozen=True)
class BandSummary:
    band: TimeBand
    count: int
    distribution: Dict[MoodCategory, int]
    dominant_mood: Optional[MoodCategory]
    fatigue_ratio: float
    stress_ratio: float


@dataclass(frozen=True)
class TimePattern:
    """Per-band moods plus the insights they triggered."""
    bands: Dict[TimeBand, BandSummary]
    insight_keys: List[TimeInsight] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    late_night_count: int = 0
    dominant_band: Optional[TimeBand] = None

    def has(self, key: TimeInsight) -> bool:
        return key in self.insight_keys

    def to_dict(self) -> Dict[str, object]:
        return {
            "bands": {
                band.value: {
                    "count": summary.count,
                    "dominant_mood": summary.dominant_mood.value if summary.dominant_mood else None,
                    "fatigue_ratio": round(summary.fatigue_ratio, 3),
                    "stress_ratio": round(summary.stress_ratio, 3),
                }
                for band, summary in self.bands.items()
            },
            "insights": list(self.insights),
            "late_night_count": self.late_night_count,
            "dominant_band": self.dominant_band.value if self.dominant_band else None,
        }


@dataclass(frozen=True)
class WeekdayPattern:
    """Average score per weekday (0 = Monday) over days that have entries."""
    averages: Dict[int, float]
    counts: Dict[int, int]
    best_day: Optional[int] = None
    worst_day: Optional[int] = None

    @property
    def spread(self) -> float:
        if self.best_day is None or self.worst_day is None:
            return 0.0
        return abs(self.averages[self.best_day] - self.averages[self.worst_day])

    @property
    def best_day_name(self) -> Optional[str]:
        return WEEKDAYS[self.best_day] if self.best_day is not None else None

    @property
    def worst_day_name(self) -> Optional[str]:
        return WEEKDAYS[self.worst_day] if self.worst_day is not None else None


# ============================================================================
# ANALYZERS
# ============================================================================

def _ratio(part: int, whole: int) -> float:
    return part / whole if whole else 0.0


class TimeOfDayAnalyzer:
    """Buckets entries by local hour and flags recurring time-of-day patterns."""

    @staticmethod
    def analyze(entries: List[MoodEntry]) -> TimePattern:
        buckets: Dict[TimeBand, List[MoodEntry]] = {band: [] for band in TimeBand}
        for entry in entries:
            buckets[TimeBand.for_hour(entry.timestamp.hour)].append(entry)

        bands: Dict[TimeBand, BandSummary] = {}
        for band, band_entries in buckets.items():
            distribution = mood_distribution(band_entries)
            size = len(band_entries)
            bands[band] = BandSummary(
                band=band,
                count=size,
                distribution=distribution,
                dominant_mood=dominant_mood(distribution, default=None) if size else None,
                fatigue_ratio=_ratio(sum(distribution[m] for m in FATIGUE_MOODS), size),
                stress_ratio=_ratio(sum(distribution[m] for m in STRESS_MOODS), size),
            )

        keys: List[TimeInsight] = []
        insights: List[str] = []

        morning = bands[TimeBand.MORNING]
        if morning.fatigue_ratio > InsightConfig.MORNING_FATIGUE_RATIO:
            keys.append(TimeInsight.MORNING_FATIGUE)
            insights.append(
                f"🌅 Mornings cluster around tired or sleepy moods "
                f"({morning.fatigue_ratio:.0%} of morning entries)."
            )

        evening = bands[TimeBand.EVENING]
        if evening.stress_ratio > InsightConfig.EVENING_STRESS_RATIO:
            keys.append(TimeInsight.EVENING_STRESS)
            insights.append(
                f"🌆 Stress tends to build up by the evening "
                f"({evening.stress_ratio:.0%} of evening entries are angry or tired)."
            )

        afternoon = bands[TimeBand.AFTERNOON]
        if afternoon.fatigue_ratio > InsightConfig.AFTERNOON_FATIGUE_RATIO:
            keys.append(TimeInsight.AFTERNOON_DIP)
            insights.append(
                f"☕ Energy dips in the afternoon "
                f"({afternoon.fatigue_ratio:.0%} of afternoon entries)."
            )

        late_night_count = sum(1 for e in entries if e.timestamp.hour >= InsightConfig.LATE_NIGHT_HOUR)
        if late_night_count > len(entries) * InsightConfig.LATE_NIGHT_SHARE:
            keys.append(TimeInsight.LATE_NIGHT)
            insights.append(
                f"🌙 Many moods are logged late at night ({late_night_count} after 23:00). "
                f"An earlier wind-down may help."
            )

        populated = [band for band in TimeBand if bands[band].count > 0]
        dominant_band = max(populated, key=lambda b: bands[b].count) if populated else None

        logger.debug(f"[PATTERNS] Time insights fired: {[k.value for k in keys]}")
        return TimePattern(
            bands=bands,
            insight_keys=keys,
            insights=insights,
            late_night_count=late_night_count,
            dominant_band=dominant_band,
        )


class WeekdayAnalyzer:
    """Average mood score per weekday."""

    @staticmethod
    def analyze(entries: List[MoodEntry]) -> WeekdayPattern:
        scores: Dict[int, List[float]] = {}
        for entry in entries:
            category = entry.category
            if category is None:
                continue
            scores.setdefault(entry.timestamp.weekday(), []).append(category.score)

        averages = {day: statistics.mean(values) for day, values in sorted(scores.items())}
        counts = {day: len(values) for day, values in sorted(scores.items())}
        if not averages:
            return WeekdayPattern(averages={}, counts={})

        best = max(averages, key=lambda day: averages[day])
        worst = min(averages, key=lambda day: averages[day])
        return WeekdayPattern(averages=averages, counts=counts, best_day=best, worst_day=worst)


class MoodTrendAnalyzer:
    """Per-mood frequency trend and peak weekdays."""

    @staticmethod
    def direction(entries: List[MoodEntry], mood: MoodCategory) -> TrendDirection:
        """
        Compares the share of `mood` in the later half against the earlier half.

        Fewer than TREND_CONFIDENT_MIN scored entries is always STABLE.
        """
        scored = sorted((e for e in entries if e.category is not None), key=lambda e: e.timestamp)
        if len(scored) < InsightConfig.TREND_CONFIDENT_MIN:
            return TrendDirection.STABLE

        midpoint = len(scored) // 2
        earlier, recent = scored[:midpoint], scored[midpoint:]
        earlier_rate = _ratio(sum(1 for e in earlier if e.category is mood), len(earlier))
        recent_rate = _ratio(sum(1 for e in recent if e.category is mood), len(recent))

        difference = recent_rate - earlier_rate
        if difference > InsightConfig.MOOD_TREND_DELTA:
            return TrendDirection.INCREASING
        if difference < -InsightConfig.MOOD_TREND_DELTA:
            return TrendDirection.DECREASING
        return TrendDirection.STABLE

    @staticmethod
    def peak_weekdays(entries: List[MoodEntry], mood: MoodCategory) -> List[str]:
        """Weekday names where `mood` was recorded most often (all ties)."""
        counts = [0] * 7
        for entry in entries:
            if entry.category is mood:
                counts[entry.timestamp.weekday()] += 1
        peak = max(counts)
        if peak == 0:
            return []
        return [WEEKDAYS[day] for day in range(7) if counts[day] == peak]


# ============================================================================
# PUBLIC API
# ============================================================================

def analyze_time_pattern(entries: List[MoodEntry]) -> TimePattern:
    return TimeOfDayAnalyzer.analyze(entries)


def analyze_weekday_pattern(entries: List[MoodEntry]) -> WeekdayPattern:
    return WeekdayAnalyzer.analyze(entries)


def mood_trend_directions(entries: List[MoodEntry]) -> Dict[MoodCategory, TrendDirection]:
    return {mood: MoodTrendAnalyzer.direction(entries, mood) for mood in all_categories()}
