"""
Sample mood entries for trying the reports without a database.

Two sets:
- random_week(): one random mood per day for the last 7 days
- coaching_scenarios(): two weeks of recurring patterns (morning fatigue,
  evening stress, afternoon dip, late nights, then healthier habits) that
  trigger most time-of-day, text and advice rules
"""

import random
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from moodjournal.core.models import MoodCategory, MoodEntry, all_categories

RANDOM_NOTES = [
    "Good day overall!",
    "Just a normal day",
    "A little tired",
    "Felt some stress today",
    "Sleepy all day",
]

# (mood, hour, note, days ago)
SCENARIOS: List[Tuple[MoodCategory, int, str, Sequence[int]]] = [
    # Morning fatigue
    (MoodCategory.TIRED, 7, "Tired from the start. Stayed on my phone too late", (1, 3, 5, 7)),
    (MoodCategory.SLEEPY, 8, "Could not sleep at all, bedroom too hot", (2, 4, 6)),
    # Work stress
    (MoodCategory.ANGRY, 17, "Deadline pressure all day", (1, 2, 3)),
    (MoodCategory.TIRED, 19, "Too many meetings, exhausted", (4, 5)),
    (MoodCategory.ANGRY, 18, "Overtime again, stress piling up", (6, 8)),
    # Afternoon dip
    (MoodCategory.TIRED, 14, "Very drowsy after lunch", (1, 3, 5, 7, 9)),
    (MoodCategory.SLEEPY, 15, "Nodding off in the afternoon meeting", (2, 4, 6, 8)),
    # Late nights
    (MoodCategory.SLEEPY, 23, "Late but cannot fall asleep", (1, 2, 4, 6, 8)),
    (MoodCategory.TIRED, 0, "Stayed up late again", (3, 5, 7)),
    # Positive activities
    (MoodCategory.HAPPY, 10, "Morning walk felt great", (9, 10)),
    (MoodCategory.HAPPY, 20, "Yoga helped me feel relaxed", (11,)),
    (MoodCategory.HAPPY, 19, "Went to the gym, feeling great", (12,)),
    # Healthy routine
    (MoodCategory.NORMAL, 21, "Resting early tonight", (10, 11, 13)),
    (MoodCategory.HAPPY, 12, "Meditation calmed me down", (13, 14)),
    # Signs of improvement
    (MoodCategory.NORMAL, 9, "More sleep and I feel better", (9, 10, 11)),
    (MoodCategory.HAPPY, 16, "Sorted my priorities at work, so much lighter", (12, 13)),
]


def random_week(rng: Optional[random.Random] = None,
                now: Optional[datetime] = None) -> List[MoodEntry]:
    rng = rng or random.Random()
    now = now or datetime.now()
    return [
        MoodEntry.create(rng.choice(all_categories()), text=rng.choice(RANDOM_NOTES),
                         timestamp=now - timedelta(days=i))
        for i in range(7)
    ]


def coaching_scenarios(now: Optional[datetime] = None) -> List[MoodEntry]:
    """Deterministic pattern-rich entries, oldest first."""
    now = now or datetime.now()
    entries = []
    for mood, hour, note, days_ago in SCENARIOS:
        for days in days_ago:
            moment = (now - timedelta(days=days)).replace(hour=hour, minute=0, second=0, microsecond=0)
            entries.append(MoodEntry.create(mood, text=note, timestamp=moment))
    return sorted(entries, key=lambda e: e.timestamp)
