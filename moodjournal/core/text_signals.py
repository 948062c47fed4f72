"""
Keyword signals from entry notes.

Scans the short notes attached to entries for stress, positive and healthy
activity keywords. Matching is case-folded substring counting, so 'meditat'
matches both 'meditate' and 'meditation'.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from moodjournal.core.config import InsightConfig
from moodjournal.core.models import MoodEntry

logger = logging.getLogger(__name__)


class TextInsight(Enum):
    STRESS_KEYWORD = "stress_keyword"
    HEALTHY_ACTIVITY = "healthy_activity"
    LOW_SELF_CARE = "low_self_care"
    POSITIVE_NOTES = "positive_notes"


@dataclass(frozen=True)
class TextSignals:
    """Keyword hit counts (only keywords found) and the insights they trigger."""
    stress_hits: Dict[str, int] = field(default_factory=dict)
    positive_hits: Dict[str, int] = field(default_factory=dict)
    health_hits: Dict[str, int] = field(default_factory=dict)
    insight_keys: List[TextInsight] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    top_stress_keyword: Optional[str] = None

    @property
    def stress_total(self) -> int:
        return sum(self.stress_hits.values())

    @property
    def positive_total(self) -> int:
        return sum(self.positive_hits.values())

    @property
    def health_total(self) -> int:
        return sum(self.health_hits.values())

    def has(self, key: TextInsight) -> bool:
        return key in self.insight_keys

    def to_dict(self) -> Dict[str, object]:
        return {
            "stress_hits": dict(self.stress_hits),
            "positive_hits": dict(self.positive_hits),
            "health_hits": dict(self.health_hits),
            "insights": list(self.insights),
        }


def count_keywords(corpus: str, keywords: List[str]) -> Dict[str, int]:
    """Non-overlapping occurrences of each keyword; zero counts are dropped."""
    hits: Dict[str, int] = {}
    for keyword in keywords:
        count = corpus.count(keyword.casefold())
        if count > 0:
            hits[keyword] = count
    return hits


class TextSignalExtractor:
    """Derives text signals from notes."""

    @staticmethod
    def extract(notes: Iterable[Optional[str]], total_entries: int) -> TextSignals:
        """
        Args:
            notes: Entry notes; None and blank notes are ignored.
            total_entries: Entry count the hit ratios are measured against.
        """
        # Newline separator keeps a keyword from matching across two notes
        corpus = "\n".join(note.casefold() for note in notes if note and note.strip())

        stress = count_keywords(corpus, InsightConfig.STRESS_KEYWORDS)
        positive = count_keywords(corpus, InsightConfig.POSITIVE_KEYWORDS)
        health = count_keywords(corpus, InsightConfig.HEALTH_KEYWORDS)

        stress_total = sum(stress.values())
        positive_total = sum(positive.values())
        health_total = sum(health.values())

        keys: List[TextInsight] = []
        insights: List[str] = []
        top_stress: Optional[str] = None

        if stress_total > InsightConfig.STRESS_HIT_RATIO * total_entries:
            # First keyword in list order wins a tie
            top_stress = max(stress, key=lambda k: stress[k])
            keys.append(TextInsight.STRESS_KEYWORD)
            insights.append(
                f"📝 '{top_stress}' shows up often in your notes ({stress[top_stress]} times). "
                f"It may be worth looking at what is behind it."
            )

        if health_total > 0:
            keys.append(TextInsight.HEALTHY_ACTIVITY)
            insights.append("🏃 Your notes mention healthy activities. Keep them in your routine.")
        elif stress_total > positive_total:
            keys.append(TextInsight.LOW_SELF_CARE)
            insights.append(
                "⚠️ Your notes talk about stress more than good moments, "
                "and self-care activities rarely appear."
            )

        if positive_total > InsightConfig.POSITIVE_HIT_RATIO * total_entries:
            keys.append(TextInsight.POSITIVE_NOTES)
            insights.append("😊 Most of your notes are positive. Those moments are worth remembering.")

        logger.debug(
            f"[TEXT] stress={stress_total} positive={positive_total} health={health_total} "
            f"insights={[k.value for k in keys]}"
        )
        return TextSignals(
            stress_hits=stress,
            positive_hits=positive,
            health_hits=health,
            insight_keys=keys,
            insights=insights,
            top_stress_keyword=top_stress,
        )


def extract_text_signals(entries: List[MoodEntry]) -> TextSignals:
    """Text signals for a list of entries, malformed moods included."""
    return TextSignalExtractor.extract((e.text for e in entries), len(entries))
