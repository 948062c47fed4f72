"""
Thresholds, windows and keyword lists for the insight pipeline.

Every hand-tuned number the analyzers and selectors compare against lives
here so the rules can be read (and adjusted) in one place.
"""

from typing import List


class InsightConfig:
    """Centralized configuration for mood insights."""

    # REPORT WINDOWS (days) & MINIMUM ENTRIES
    WEEKLY_WINDOW_DAYS: int = 7
    COACHING_WINDOW_DAYS: int = 14
    WEEKLY_MIN_ENTRIES: int = 3
    COACHING_MIN_ENTRIES: int = 5
    DETAILED_MIN_ENTRIES: int = 3

    # HISTORY CAPS
    WEEKLY_HISTORY_CAP: int = 20
    COACHING_HISTORY_CAP: int = 10
    DETAILED_HISTORY_CAP: int = 15

    # STATISTICS
    VOLATILITY_DIVISOR: float = 4.0   # stddev on the -2..+2 scale
    TREND_CONFIDENT_MIN: int = 6      # fewer scored entries = low-confidence trend
    TOP_MOODS_LIMIT: int = 3

    # TIME OF DAY BANDS (local hour, start inclusive / end exclusive)
    MORNING_START: int = 6
    AFTERNOON_START: int = 12
    EVENING_START: int = 17
    NIGHT_START: int = 22
    LATE_NIGHT_HOUR: int = 23

    MORNING_FATIGUE_RATIO: float = 0.6
    EVENING_STRESS_RATIO: float = 0.5
    AFTERNOON_FATIGUE_RATIO: float = 0.4
    LATE_NIGHT_SHARE: float = 1.0 / 3.0

    # TEXT SIGNALS (share of entry count)
    STRESS_HIT_RATIO: float = 0.3
    POSITIVE_HIT_RATIO: float = 0.4

    # Stress indicators
    STRESS_KEYWORDS: List[str] = [
        'stress', 'busy', 'deadline', 'overtime', 'pressure', 'anxious',
        'worried', 'exhausted', 'overwhelmed', 'ストレス', '忙しい', '残業'
    ]
    # Positive indicators
    POSITIVE_KEYWORDS: List[str] = [
        'fun', 'great', 'grateful', 'relaxed', 'excited', 'love', 'enjoy',
        'proud', 'friends', '楽しい', '嬉しい', 'ありがとう'
    ]
    # Healthy activity indicators
    HEALTH_KEYWORDS: List[str] = [
        'walk', 'run', 'gym', 'yoga', 'exercise', 'workout', 'stretch',
        'meditat', 'slept well', '散歩', '運動', 'ヨガ'
    ]

    # MOOD PATTERN CLASSIFICATION (ordered, first match wins)
    PATTERN_IMPROVING_TREND: float = 0.5
    PATTERN_DECLINING_TREND: float = -0.5
    PATTERN_UNSTABLE_VOLATILITY: float = 0.7
    PATTERN_STABLE_CONSISTENCY: float = 0.8
    PATTERN_POSITIVE_AVERAGE: float = 0.5
    PATTERN_CHALLENGING_AVERAGE: float = -0.3
    LOW_CONSISTENCY: float = 0.5

    # WEEKLY TEMPLATE FAMILIES
    WEEK_POSITIVE_AVERAGE: float = 0.5
    WEEK_CHALLENGING_AVERAGE: float = -0.5
    WEEK_IMPROVING_TREND: float = 0.3
    WEEK_CONSISTENT: float = 0.8
    WEEK_EFFORT_CONSISTENCY: float = 0.5
    WEEK_VARIETY_MIN_MOODS: int = 4
    WEEK_HIGHLIGHT_TREND: float = 0.5

    # CONTEXTUAL ADVICE WEIGHTS
    WEIGHT_SLEEP: int = 10
    WEIGHT_STRESS: int = 8
    WEIGHT_FATIGUE: int = 7
    WEIGHT_POSITIVE_HABIT: int = 6
    WEIGHT_ENVIRONMENT: int = 5
    CONTEXTUAL_ADVICE_LIMIT: int = 3

    # Mood ratio triggers for contextual advice
    SLEEPY_RATIO: float = 0.3
    SLEEP_TIRED_RATIO: float = 0.4
    TIRED_RATIO: float = 0.3
    ANGRY_RATIO: float = 0.25
    HAPPY_RATIO: float = 0.4
    NORMAL_RATIO: float = 0.5
    ENVIRONMENT_STRESS_KEYWORDS: int = 3   # more distinct stress keywords than this

    # Stress keywords that point at work as the source
    WORK_STRESS_KEYWORDS: List[str] = ['busy', 'deadline', 'overtime', '忙しい', '残業']

    # WEEKLY ENCOURAGEMENT
    ENCOURAGE_GREAT_AVERAGE: float = 0.5
    ENCOURAGE_BALANCED_AVERAGE: float = 0.0

    # DETAILED REPORT
    MOOD_TREND_DELTA: float = 0.15
    WEEKDAY_HIGH_IMPACT_SPREAD: float = 0.5
    VOLATILITY_HIGH: float = 0.7
    VOLATILITY_MEDIUM: float = 0.4
    CONSISTENCY_EXCELLENT: float = 0.85
    CONSISTENCY_GOOD: float = 0.6
    OVERALL_TREND_DELTA: float = 0.3
    RECOMMEND_CONSISTENCY_BELOW: float = 0.7
    RECOMMEND_VOLATILITY_ABOVE: float = 0.6
    RECOMMEND_TREND_BELOW: float = -0.2
