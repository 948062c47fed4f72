import pytest
from datetime import date

from moodjournal.core.models import AnalysisWindow, MoodCategory, MoodEntry
from moodjournal.core.stats import (
    compute_statistics, dominant_mood, mood_distribution, score_trend, score_volatility, top_moods
)

H, N, T, A, S = (MoodCategory.HAPPY, MoodCategory.NORMAL, MoodCategory.TIRED,
                 MoodCategory.ANGRY, MoodCategory.SLEEPY)

WEEK = AnalysisWindow.last_days(7, today=date(2024, 6, 9))


class TestStatisticsEngine:
    """Test suite for compute_statistics and its building blocks."""

    # ========================================================================
    # 1. DISTRIBUTION & DOMINANT MOOD
    # ========================================================================

    def test_distribution_counts_only_resolvable_entries(self, daily_entries):
        entries = daily_entries([H, T, T])
        entries.append(MoodEntry(id="x", mood="bogus", timestamp=entries[0].timestamp))

        snapshot = compute_statistics(entries, WEEK)

        assert sum(snapshot.distribution.values()) == snapshot.scored_entries == 3
        assert snapshot.total_entries == 4
        assert set(snapshot.distribution) == {H, N, T, A, S}

    def test_dominant_tie_breaks_by_canonical_order(self, daily_entries):
        distribution = mood_distribution(daily_entries([S, S, H, H]))
        assert dominant_mood(distribution) is H

    def test_empty_input(self):
        snapshot = compute_statistics([], WEEK)

        assert snapshot.dominant_mood is N
        assert snapshot.average_score == 0.0
        assert snapshot.trend == 0.0
        assert snapshot.volatility == 0.0
        assert snapshot.consistency == 0.0

    def test_top_moods_skips_zero_counts(self, daily_entries):
        distribution = mood_distribution(daily_entries([T, T, A, H, H, H]))
        assert top_moods(distribution) == [H, T, A]
        assert top_moods(distribution, limit=1) == [H]

    # ========================================================================
    # 2. AVERAGE, CONSISTENCY, VOLATILITY
    # ========================================================================

    def test_average_bounds(self, daily_entries):
        assert compute_statistics(daily_entries([H] * 4), WEEK).average_score == 2.0
        assert compute_statistics(daily_entries([A] * 4), WEEK).average_score == -2.0

    def test_full_week_consistency(self, daily_entries):
        snapshot = compute_statistics(daily_entries([N] * 7), WEEK)
        assert snapshot.consistency == 1.0
        assert snapshot.unique_days == 7

    def test_consistency_counts_days_not_entries(self, make_entry):
        entries = [make_entry(H, 0, hour=9), make_entry(T, 0, hour=20), make_entry(N, 1)]
        snapshot = compute_statistics(entries, WEEK)
        assert snapshot.unique_days == 2
        assert snapshot.consistency == pytest.approx(2 / 7)

    def test_identical_scores_have_no_volatility(self, daily_entries):
        assert compute_statistics(daily_entries([T] * 5), WEEK).volatility == 0.0
        assert score_volatility([1.0]) == 0.0

    def test_volatility_normalized(self):
        # pstdev of [-2, 2] is 2.0
        assert score_volatility([-2.0, 2.0]) == pytest.approx(0.5)

    # ========================================================================
    # 3. TREND
    # ========================================================================

    def test_trend_later_minus_earlier(self, daily_entries):
        assert score_trend(daily_entries([A, A, H, H])) == pytest.approx(4.0)

    def test_trend_odd_count_puts_middle_in_later_half(self, daily_entries):
        # split at 3 // 2 = 1: [A] vs [H, H]
        assert score_trend(daily_entries([A, H, H])) == pytest.approx(4.0)

    def test_trend_uses_timestamps_not_input_order(self, daily_entries):
        entries = daily_entries([A, A, H, H])
        assert score_trend(list(reversed(entries))) == pytest.approx(4.0)

    def test_single_entry_has_no_trend(self, daily_entries):
        assert score_trend(daily_entries([H])) == 0.0

    def test_low_confidence_trend_flag(self, daily_entries):
        assert compute_statistics(daily_entries([H] * 5), WEEK).low_confidence_trend is True
        assert compute_statistics(daily_entries([H] * 6), WEEK).low_confidence_trend is False

    # ========================================================================
    # 4. END TO END
    # ========================================================================

    def test_happy_week_snapshot(self, happy_week):
        snapshot = compute_statistics(happy_week, WEEK)

        assert snapshot.average_score == pytest.approx(12 / 7)
        assert snapshot.trend == pytest.approx(-0.5)
        assert snapshot.volatility == pytest.approx(0.175, abs=1e-3)
        assert snapshot.consistency == 1.0
        assert snapshot.dominant_mood is H
        assert snapshot.to_dict()["dominant_mood"] == "happy"
