import pytest

from moodjournal.core.models import MoodCategory
from moodjournal.core.patterns import (
    MoodTrendAnalyzer, TimeBand, TimeInsight, TrendDirection,
    analyze_time_pattern, analyze_weekday_pattern, mood_trend_directions
)

H, N, T, A, S = (MoodCategory.HAPPY, MoodCategory.NORMAL, MoodCategory.TIRED,
                 MoodCategory.ANGRY, MoodCategory.SLEEPY)


class TestTimeOfDay:
    """Test suite for time-of-day bands and insights."""

    @pytest.mark.parametrize("hour, band", [
        (6, TimeBand.MORNING), (11, TimeBand.MORNING),
        (12, TimeBand.AFTERNOON), (16, TimeBand.AFTERNOON),
        (17, TimeBand.EVENING), (21, TimeBand.EVENING),
        (22, TimeBand.NIGHT), (23, TimeBand.NIGHT), (0, TimeBand.NIGHT), (5, TimeBand.NIGHT),
    ])
    def test_band_boundaries(self, hour, band):
        assert TimeBand.for_hour(hour) is band

    def test_morning_fatigue(self, make_entry):
        entries = [make_entry(T, 0, hour=7), make_entry(S, 1, hour=8),
                   make_entry(T, 2, hour=7), make_entry(H, 3, hour=9)]

        pattern = analyze_time_pattern(entries)

        assert pattern.has(TimeInsight.MORNING_FATIGUE)
        assert pattern.bands[TimeBand.MORNING].fatigue_ratio == pytest.approx(0.75)
        assert pattern.bands[TimeBand.MORNING].dominant_mood is T

    def test_morning_fatigue_needs_more_than_sixty_percent(self, make_entry):
        entries = [make_entry(T, 0, hour=7), make_entry(T, 1, hour=7), make_entry(H, 2, hour=7),
                   make_entry(H, 3, hour=7), make_entry(T, 4, hour=7)]
        # exactly 3/5
        assert not analyze_time_pattern(entries).has(TimeInsight.MORNING_FATIGUE)

    def test_evening_stress(self, make_entry):
        entries = [make_entry(A, 0, hour=18), make_entry(T, 1, hour=19), make_entry(H, 2, hour=20)]
        pattern = analyze_time_pattern(entries)

        assert pattern.has(TimeInsight.EVENING_STRESS)
        assert pattern.dominant_band is TimeBand.EVENING

    def test_afternoon_dip(self, make_entry):
        entries = [make_entry(S, 0, hour=14), make_entry(N, 1, hour=15)]
        assert analyze_time_pattern(entries).has(TimeInsight.AFTERNOON_DIP)

    def test_late_night(self, make_entry):
        entries = [make_entry(N, 0, hour=23), make_entry(N, 1, hour=23),
                   make_entry(N, 2, hour=10), make_entry(N, 3, hour=10)]
        pattern = analyze_time_pattern(entries)

        assert pattern.late_night_count == 2
        assert pattern.has(TimeInsight.LATE_NIGHT)
        assert pattern.insights[-1].startswith("🌙")

    def test_midnight_is_night_but_not_late_night(self, make_entry):
        pattern = analyze_time_pattern([make_entry(T, 0, hour=0)])
        assert pattern.bands[TimeBand.NIGHT].count == 1
        assert pattern.late_night_count == 0

    def test_no_entries(self):
        pattern = analyze_time_pattern([])

        assert pattern.insights == []
        assert pattern.dominant_band is None
        assert all(summary.count == 0 for summary in pattern.bands.values())
        assert pattern.bands[TimeBand.MORNING].dominant_mood is None


class TestWeekdayPattern:

    def test_best_and_worst_day(self, make_entry):
        # offset 0 is a Monday
        entries = [make_entry(H, 0), make_entry(A, 1), make_entry(N, 2), make_entry(H, 7)]
        pattern = analyze_weekday_pattern(entries)

        assert pattern.best_day_name == "Monday"
        assert pattern.worst_day_name == "Tuesday"
        assert pattern.counts[0] == 2
        assert pattern.spread == pytest.approx(4.0)

    def test_empty(self):
        pattern = analyze_weekday_pattern([])
        assert pattern.best_day is None
        assert pattern.spread == 0.0


class TestMoodTrends:

    def test_too_few_entries_is_stable(self, daily_entries):
        entries = daily_entries([N, N, H, H, H])
        assert MoodTrendAnalyzer.direction(entries, H) is TrendDirection.STABLE

    def test_increasing_and_decreasing(self, daily_entries):
        directions = mood_trend_directions(daily_entries([N, N, N, H, H, H]))

        assert directions[H] is TrendDirection.INCREASING
        assert directions[N] is TrendDirection.DECREASING
        assert directions[A] is TrendDirection.STABLE

    def test_peak_weekdays_keeps_ties(self, make_entry):
        entries = [make_entry(T, 0), make_entry(T, 2), make_entry(T, 7), make_entry(T, 9)]
        assert MoodTrendAnalyzer.peak_weekdays(entries, T) == ["Monday", "Wednesday"]
        assert MoodTrendAnalyzer.peak_weekdays(entries, H) == []
