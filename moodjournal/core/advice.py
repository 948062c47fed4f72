"""
Rule-based advice and template selection.

Three decision layers, all deterministic except the weekly template pick:
1. MoodPattern classification: ordered threshold table, first match wins
2. Weekly template families: five families of typed template functions,
   one picked through an injected random source
3. Contextual advice: a weighted pool (sleep 10, stress 8, fatigue 7,
   positive habit 6, environment 5); the top 3 are returned
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from moodjournal.core.config import InsightConfig
from moodjournal.core.models import MoodCategory
from moodjournal.core.patterns import TimeBand, TimePattern
from moodjournal.core.stats import StatisticsSnapshot
from moodjournal.core.text_signals import TextSignals

logger = logging.getLogger(__name__)


# ============================================================================
# MOOD PATTERN CLASSIFICATION
# ============================================================================

class MoodPattern(Enum):
    """Overall trajectory of a window."""
    IMPROVING = "improving"
    DECLINING = "declining"
    UNSTABLE = "unstable"
    STABLE = "stable"
    POSITIVE = "positive"
    CHALLENGING = "challenging"
    NEUTRAL = "neutral"

    @property
    def display_name(self) -> str:
        return {
            "improving": "Improving",
            "declining": "Needs attention",
            "unstable": "Fluctuating",
            "stable": "Stable",
            "positive": "Positive",
            "challenging": "Challenging",
            "neutral": "Steady",
        }[self.value]

    @property
    def emoji(self) -> str:
        return {
            "improving": "📈",
            "declining": "📉",
            "unstable": "🌊",
            "stable": "⚖️",
            "positive": "✨",
            "challenging": "💪",
            "neutral": "🌤️",
        }[self.value]

    @property
    def color(self) -> str:
        return {
            "improving": "#4CAF50",
            "declining": "#FF9800",
            "unstable": "#9C27B0",
            "stable": "#2196F3",
            "positive": "#8BC34A",
            "challenging": "#F44336",
            "neutral": "#607D8B",
        }[self.value]


def classify_pattern(recent_trend: float, volatility: float,
                     consistency: float, average_score: float) -> MoodPattern:
    """
    Classifies a window. Rules are checked in order and the first match wins,
    so a strong trend outranks high volatility.
    """
    if recent_trend > InsightConfig.PATTERN_IMPROVING_TREND:
        return MoodPattern.IMPROVING
    if recent_trend < InsightConfig.PATTERN_DECLINING_TREND:
        return MoodPattern.DECLINING
    if volatility > InsightConfig.PATTERN_UNSTABLE_VOLATILITY:
        return MoodPattern.UNSTABLE
    if consistency > InsightConfig.PATTERN_STABLE_CONSISTENCY:
        return MoodPattern.STABLE
    if average_score > InsightConfig.PATTERN_POSITIVE_AVERAGE:
        return MoodPattern.POSITIVE
    if average_score < InsightConfig.PATTERN_CHALLENGING_AVERAGE:
        return MoodPattern.CHALLENGING
    return MoodPattern.NEUTRAL


def classify_snapshot(snapshot: StatisticsSnapshot) -> MoodPattern:
    return classify_pattern(snapshot.trend, snapshot.volatility,
                            snapshot.consistency, snapshot.average_score)


PATTERN_ADVICE: Dict[MoodPattern, str] = {
    MoodPattern.IMPROVING: (
        "Your mood is clearly trending upward! Keep doing what you have been doing. "
        "If you recently started a new habit or changed your surroundings, hold on to it."
    ),
    MoodPattern.DECLINING: (
        "Things seem to have been hard lately. Start with enough sleep and regular meals, "
        "and give yourself credit for small wins. You do not have to carry it alone: "
        "talking to someone you trust can help."
    ),
    MoodPattern.UNSTABLE: (
        "Your mood swings quite a bit. A steadier daily rhythm can soften the ups and downs. "
        "Going to bed and waking up at the same time is a good place to start."
    ),
    MoodPattern.STABLE: (
        "You have been in a very steady place. Protect the routine and habits that got you here. "
        "Adding a new challenge now and then can make it even more fulfilling."
    ),
    MoodPattern.POSITIVE: (
        "You have been feeling good overall! Use this energy to try something new or to do "
        "something kind for others. Good moods feed each other."
    ),
    MoodPattern.CHALLENGING: (
        "It has been a tough stretch, and keeping up your journal through it takes real effort. "
        "Take small steps at your own pace. Talking to a professional is always an option when you need it."
    ),
    MoodPattern.NEUTRAL: (
        "You are in a balanced, calm place, and that is worth appreciating. "
        "Adding small goals or things to look forward to can make your days feel fuller."
    ),
}

BASE_ACTION_ITEMS: Dict[MoodPattern, Tuple[str, str]] = {
    MoodPattern.IMPROVING: (
        "Write down the good habits you have now and keep them going",
        "Add one small new challenge",
    ),
    MoodPattern.DECLINING: (
        "Aim for 7-8 hours of sleep",
        "Make time to talk with someone you trust",
    ),
    MoodPattern.UNSTABLE: (
        "Wake up at the same time every day",
        "Set aside relaxing time before bed",
    ),
    MoodPattern.STABLE: (
        "Keep your current routine",
        "Try one new experience this month",
    ),
    MoodPattern.POSITIVE: (
        "Reflect on what brought about this good stretch",
        "Tell the people around you that you appreciate them",
    ),
    MoodPattern.CHALLENGING: (
        "Find one small thing to enjoy each day",
        "Get the basics in order: meals, sleep and movement",
    ),
    MoodPattern.NEUTRAL: (
        "Explore a new hobby or interest",
        "Note three things you are grateful for each day",
    ),
}

NEXT_STEPS: Dict[MoodPattern, Tuple[str, str, str]] = {
    MoodPattern.IMPROVING: (
        "Run this analysis again in two weeks to see your progress",
        "Think about how to strengthen the habits that work",
        "Share positive experiences with the people around you",
    ),
    MoodPattern.DECLINING: (
        "Check how your mood changes over the next week",
        "Consider talking to a professional if needed",
        "Lean on your support network of family and friends",
    ),
    MoodPattern.UNSTABLE: (
        "Keep a steady routine for three weeks",
        "Watch your mood swings more closely",
        "Identify your stressors and plan around them",
    ),
    MoodPattern.STABLE: (
        "Maintain this good state over the long term",
        "Look for new opportunities to grow",
        "Make room to support others",
    ),
    MoodPattern.POSITIVE: (
        "Look closer at what is behind this good state",
        "Spread the positive energy to those around you",
        "Set your next growth goal",
    ),
    MoodPattern.CHALLENGING: (
        "Find one small improvement every week",
        "Check which support resources you can use",
        "Make a long-term recovery plan",
    ),
    MoodPattern.NEUTRAL: (
        "Find activities that feel more rewarding",
        "Meet new people and try new experiences",
        "Clarify your goals for the future",
    ),
}

CONDITIONAL_ACTION_ITEMS: Dict[MoodCategory, str] = {
    MoodCategory.TIRED: "Get proper rest to recover from fatigue",
    MoodCategory.SLEEPY: "Improve sleep quality, for example by avoiding your phone before bed",
    MoodCategory.ANGRY: "Find a way to release stress, such as walks, music or reading",
}
LOW_CONSISTENCY_ACTION = "Find a time of day when journaling is easy to keep up"


def pattern_advice(pattern: MoodPattern) -> str:
    return PATTERN_ADVICE[pattern]


def next_steps(pattern: MoodPattern) -> List[str]:
    return list(NEXT_STEPS[pattern])


def action_items(pattern: MoodPattern, snapshot: StatisticsSnapshot) -> List[str]:
    """Two base items for the pattern, then up to four conditional ones."""
    items = list(BASE_ACTION_ITEMS[pattern])
    for mood, item in CONDITIONAL_ACTION_ITEMS.items():
        if mood in snapshot.top_moods:
            items.append(item)
    if snapshot.consistency < InsightConfig.LOW_CONSISTENCY:
        items.append(LOW_CONSISTENCY_ACTION)
    return items


# ============================================================================
# WEEKLY TEMPLATE FAMILIES
# ============================================================================

class WeekFamily(Enum):
    POSITIVE = "positive_week"
    CHALLENGING = "challenging_week"
    IMPROVING = "improving_week"
    CONSISTENT = "consistent_week"
    BALANCED = "balanced_week"


@dataclass(frozen=True)
class TemplateContext:
    """Every value a weekly template may mention."""
    dominant_mood: str
    recording_days: int
    dominant_mood_count: int
    improving: bool


WeeklyTemplate = Callable[[TemplateContext], str]

WEEKLY_TEMPLATES: Dict[WeekFamily, Tuple[WeeklyTemplate, ...]] = {
    WeekFamily.POSITIVE: (
        lambda c: (f"What a great week! '{c.dominant_mood}' came up the most, and you kept "
                   f"your journal going for {c.recording_days} days. Your mind is in a really good place ✨"),
        lambda c: (f"This week looks like it was full of good things. You felt {c.dominant_mood.lower()} "
                   f"on {c.dominant_mood_count} occasions. Hold on to this momentum!"),
        lambda c: (f"A shining week ⭐️ Lots of '{c.dominant_mood}', and your overall mood "
                   f"stayed very positive."),
    ),
    WeekFamily.CHALLENGING: (
        lambda c: (f"This week seems to have been a bit hard. Logging your mood for "
                   f"{c.recording_days} days through it is a real achievement."),
        lambda c: (f"Well done for getting through it. There were many '{c.dominant_mood}' days, "
                   f"but you still kept your journal going."),
        lambda c: ("It may have been a rough week, but "
                   + ("things picked up a little toward the end, and " if c.improving else "")
                   + "next week will likely feel a bit lighter."),
    ),
    WeekFamily.IMPROVING: (
        lambda c: (f"Your mood lifted toward the end of the week! {c.recording_days} days of entries "
                   f"show how resilient you are."),
        lambda c: "You can see things gradually getting better. Hold on to this upward flow next week!",
        lambda c: ("The week started a little rough but recovered in the second half. "
                   "Noticing changes like this is what journaling is for."),
    ),
    WeekFamily.CONSISTENT: (
        lambda c: (f"A very steady week. You journaled every day and stayed balanced, "
                   f"centered around '{c.dominant_mood}'."),
        lambda c: (f"Great job keeping up your journal! You kept a steady state of mind, "
                   f"mostly feeling {c.dominant_mood.lower()}."),
        lambda c: ("Your consistency is impressive. A steady mood usually means a good daily "
                   "rhythm is in place."),
    ),
    WeekFamily.BALANCED: (
        lambda c: (f"A balanced week. You went through a range of moods and still journaled "
                   f"for {c.recording_days} days."),
        lambda c: (f"Your mood shifted in different directions, and that is perfectly natural. "
                   f"{c.recording_days} days of entries show a rich emotional life."),
        lambda c: (f"Thanks for journaling again this week. Centered around '{c.dominant_mood}', "
                   f"you are taking your natural ups and downs in stride."),
    ),
}


def select_week_family(snapshot: StatisticsSnapshot) -> WeekFamily:
    """Ordered checks on the weekly snapshot, first match wins."""
    if snapshot.average_score > InsightConfig.WEEK_POSITIVE_AVERAGE:
        return WeekFamily.POSITIVE
    if snapshot.average_score < InsightConfig.WEEK_CHALLENGING_AVERAGE:
        return WeekFamily.CHALLENGING
    if snapshot.trend > InsightConfig.WEEK_IMPROVING_TREND:
        return WeekFamily.IMPROVING
    if snapshot.consistency > InsightConfig.WEEK_CONSISTENT:
        return WeekFamily.CONSISTENT
    return WeekFamily.BALANCED


def template_context(snapshot: StatisticsSnapshot) -> TemplateContext:
    return TemplateContext(
        dominant_mood=snapshot.dominant_mood.display_name,
        recording_days=snapshot.unique_days,
        dominant_mood_count=snapshot.distribution.get(snapshot.dominant_mood, 0),
        improving=snapshot.trend > 0,
    )


def render_weekly_summary(snapshot: StatisticsSnapshot,
                          rng: Optional[random.Random] = None) -> Tuple[WeekFamily, str]:
    """
    Picks the template family for the week and renders one of its templates.

    Args:
        snapshot: Weekly statistics.
        rng: Random source; a fresh unseeded one when omitted, so repeated
            calls vary. Pass a seeded Random for reproducible output.
    """
    rng = rng or random.Random()
    family = select_week_family(snapshot)
    template = rng.choice(WEEKLY_TEMPLATES[family])
    return family, template(template_context(snapshot))


def weekly_highlights(snapshot: StatisticsSnapshot) -> List[str]:
    highlights: List[str] = []

    if snapshot.consistency > InsightConfig.WEEK_CONSISTENT:
        highlights.append("🎯 You kept up your journal every day")
    elif snapshot.consistency > InsightConfig.WEEK_EFFORT_CONSISTENCY:
        highlights.append("📝 You are making an effort to keep journaling")

    if snapshot.trend > InsightConfig.WEEK_HIGHLIGHT_TREND:
        highlights.append("📈 Your mood lifted in the second half of the week")
    elif snapshot.trend < -InsightConfig.WEEK_HIGHLIGHT_TREND:
        highlights.append("💙 It was a bit tough, but you kept journaling")

    if snapshot.distinct_moods >= InsightConfig.WEEK_VARIETY_MIN_MOODS:
        highlights.append("🌈 You went through a rich range of emotions")

    return highlights


def weekly_encouragement(snapshot: StatisticsSnapshot) -> str:
    if snapshot.average_score > InsightConfig.ENCOURAGE_GREAT_AVERAGE:
        return "A wonderful week! Keep cherishing this rhythm ✨"
    if snapshot.average_score > InsightConfig.ENCOURAGE_BALANCED_AVERAGE:
        return "A well-balanced week. Small changes matter too 🌱"
    if snapshot.trend > 0:
        return "It was hard, but the second half of the week picked up. You are doing great 💪"
    return "Thank you for this week. Keep journaling and positive changes will show 🌟"


def next_week_focus(snapshot: StatisticsSnapshot) -> str:
    focus = {
        MoodCategory.TIRED: "Next week, why not make rest and recharging a priority?",
        MoodCategory.ANGRY: "Next week, set aside some time to let off steam.",
        MoodCategory.SLEEPY: "Next week, try to get your sleep rhythm back on track.",
        MoodCategory.HAPPY: "Keep this good momentum going next week!",
    }
    return focus.get(snapshot.dominant_mood, "Next week, keep journaling at your own pace.")


# ============================================================================
# CONTEXTUAL ADVICE POOL
# ============================================================================

class AdviceCategory(Enum):
    SLEEP = "sleep"
    STRESS = "stress"
    FATIGUE = "fatigue"
    POSITIVE_HABIT = "positive_habit"
    ENVIRONMENT = "environment"

    @property
    def weight(self) -> int:
        return {
            AdviceCategory.SLEEP: InsightConfig.WEIGHT_SLEEP,
            AdviceCategory.STRESS: InsightConfig.WEIGHT_STRESS,
            AdviceCategory.FATIGUE: InsightConfig.WEIGHT_FATIGUE,
            AdviceCategory.POSITIVE_HABIT: InsightConfig.WEIGHT_POSITIVE_HABIT,
            AdviceCategory.ENVIRONMENT: InsightConfig.WEIGHT_ENVIRONMENT,
        }[self]


@dataclass(frozen=True)
class AdviceCandidate:
    category: AdviceCategory
    text: str

    @property
    def weight(self) -> int:
        return self.category.weight


def _band_mood(time_pattern: TimePattern, band: TimeBand) -> Optional[MoodCategory]:
    return time_pattern.bands[band].dominant_mood


def _sleep_advice(snapshot: StatisticsSnapshot, time_pattern: TimePattern) -> Optional[str]:
    tired_mornings = _band_mood(time_pattern, TimeBand.MORNING) is MoodCategory.TIRED
    if not (snapshot.ratio(MoodCategory.SLEEPY) > InsightConfig.SLEEPY_RATIO
            or snapshot.ratio(MoodCategory.TIRED) > InsightConfig.SLEEP_TIRED_RATIO
            or tired_mornings):
        return None
    if tired_mornings:
        return "Mornings start tired. Go to bed an hour earlier and make the bedroom a restful place."
    return "Aim for 7-8 hours of sleep and put your phone away 2 hours before bed."


def _stress_advice(snapshot: StatisticsSnapshot, signals: TextSignals) -> Optional[str]:
    if snapshot.ratio(MoodCategory.ANGRY) <= InsightConfig.ANGRY_RATIO:
        return None
    if any(keyword in signals.stress_hits for keyword in InsightConfig.WORK_STRESS_KEYWORDS):
        return ("Work seems to be the main source of stress. Take short breaks during the day "
                "and draw a clear line between work time and your own time.")
    return "Try 5 minutes of meditation or deep breathing each day to release built-up tension."


def _fatigue_advice(snapshot: StatisticsSnapshot, time_pattern: TimePattern) -> Optional[str]:
    if snapshot.ratio(MoodCategory.TIRED) <= InsightConfig.TIRED_RATIO:
        return None
    if _band_mood(time_pattern, TimeBand.AFTERNOON) is MoodCategory.TIRED:
        return "Afternoons drag. A 10-minute walk or some light stretching after lunch can help."
    return "Light exercise three times a week, like walking or stretching, builds up your energy."


def _positive_habit_advice(snapshot: StatisticsSnapshot, signals: TextSignals) -> Optional[str]:
    if snapshot.ratio(MoodCategory.HAPPY) > InsightConfig.HAPPY_RATIO:
        return "Happy moods are frequent. Keep up the activities that bring them on."
    if snapshot.ratio(MoodCategory.NORMAL) > InsightConfig.NORMAL_RATIO:
        if not signals.health_hits:
            return "Your days are steady. Add something you enjoy 2-3 times a week."
        return "Keep a gratitude journal and write down three good things before bed."
    return None


def _environment_advice(time_pattern: TimePattern, signals: TextSignals) -> Optional[str]:
    if (_band_mood(time_pattern, TimeBand.EVENING) is MoodCategory.ANGRY
            or len(signals.stress_hits) > InsightConfig.ENVIRONMENT_STRESS_KEYWORDS):
        return "Set up a calm space at home for the evening, with soft light and music you find relaxing."
    return None


def build_advice_pool(snapshot: StatisticsSnapshot, time_pattern: TimePattern,
                      signals: TextSignals) -> List[AdviceCandidate]:
    """At most one candidate per category, so at most five."""
    texts = {
        AdviceCategory.SLEEP: _sleep_advice(snapshot, time_pattern),
        AdviceCategory.STRESS: _stress_advice(snapshot, signals),
        AdviceCategory.FATIGUE: _fatigue_advice(snapshot, time_pattern),
        AdviceCategory.POSITIVE_HABIT: _positive_habit_advice(snapshot, signals),
        AdviceCategory.ENVIRONMENT: _environment_advice(time_pattern, signals),
    }
    return [AdviceCandidate(category, text) for category, text in texts.items() if text]


def contextual_advice(snapshot: StatisticsSnapshot, time_pattern: TimePattern,
                      signals: TextSignals,
                      limit: int = InsightConfig.CONTEXTUAL_ADVICE_LIMIT) -> List[str]:
    """Highest-weight candidates first; fewer than `limit` when fewer rules fire."""
    pool = sorted(build_advice_pool(snapshot, time_pattern, signals),
                  key=lambda c: c.weight, reverse=True)
    logger.debug(f"[ADVICE] Pool: {[(c.category.value, c.weight) for c in pool]}")
    return [candidate.text for candidate in pool[:limit]]
