from moodjournal.core.models import MoodCategory
from moodjournal.core.text_signals import (
    TextInsight, TextSignalExtractor, count_keywords, extract_text_signals
)


class TestTextSignals:
    """Test suite for note keyword signals."""

    def test_count_keywords_is_substring_based(self):
        hits = count_keywords("meditation then meditate", ["meditat", "yoga"])
        assert hits == {"meditat": 2}

    def test_stress_keyword_names_most_frequent(self):
        signals = TextSignalExtractor.extract(["Deadline stress", "deadline again", "ok"], 3)

        assert signals.has(TextInsight.STRESS_KEYWORD)
        assert signals.top_stress_keyword == "deadline"
        assert signals.stress_hits == {"stress": 1, "deadline": 2}
        assert "'deadline'" in signals.insights[0]

    def test_stress_without_self_care(self):
        signals = TextSignalExtractor.extract(["deadline stress", "deadline again", "ok"], 3)
        assert signals.has(TextInsight.LOW_SELF_CARE)
        assert not signals.has(TextInsight.HEALTHY_ACTIVITY)

    def test_healthy_activity_replaces_low_self_care(self):
        signals = TextSignalExtractor.extract(["deadline pressure", "went for a walk"], 2)

        assert signals.has(TextInsight.HEALTHY_ACTIVITY)
        assert not signals.has(TextInsight.LOW_SELF_CARE)

    def test_positive_notes(self):
        signals = TextSignalExtractor.extract(["Great fun", "love it"], 2)

        assert signals.positive_total == 3
        assert signals.has(TextInsight.POSITIVE_NOTES)

    def test_japanese_keywords(self):
        signals = TextSignalExtractor.extract(["残業でストレス", "朝の散歩"], 2)

        assert signals.stress_hits == {"ストレス": 1, "残業": 1}
        assert signals.health_hits == {"散歩": 1}

    def test_no_notes(self, make_entry):
        signals = extract_text_signals([make_entry(MoodCategory.HAPPY), make_entry(MoodCategory.TIRED, 1)])

        assert signals.insights == []
        assert signals.stress_total == signals.positive_total == signals.health_total == 0
        assert signals.top_stress_keyword is None

    def test_ratio_uses_all_entries(self, make_entry):
        # one stress hit over five entries stays below the 30% threshold
        entries = [make_entry(MoodCategory.NORMAL, i) for i in range(4)]
        entries.append(make_entry(MoodCategory.ANGRY, 4, text="so busy"))

        signals = extract_text_signals(entries)

        assert signals.stress_total == 1
        assert not signals.has(TextInsight.STRESS_KEYWORD)
