import pytest
from datetime import date, datetime, time

from moodjournal.core.models import (
    MAX_NOTE_LENGTH, AnalysisWindow, MoodCategory, MoodEntry, RecordedMoods,
    all_categories, resolve_category, truncate_note
)


class TestMoodTaxonomy:
    """Mood categories and their fixed mappings."""

    def test_canonical_order(self):
        assert all_categories() == [
            MoodCategory.HAPPY, MoodCategory.NORMAL, MoodCategory.TIRED,
            MoodCategory.ANGRY, MoodCategory.SLEEPY
        ]

    def test_scores(self):
        assert MoodCategory.HAPPY.score == 2.0
        assert MoodCategory.NORMAL.score == 0.0
        assert MoodCategory.TIRED.score == -1.0
        assert MoodCategory.SLEEPY.score == -0.5
        assert MoodCategory.ANGRY.score == -2.0

    def test_every_category_has_display_data(self):
        for mood in all_categories():
            assert mood.display_name
            assert mood.emoji
            assert mood.theme_color.startswith("#")
            assert mood.dark_theme_color.startswith("#")

    def test_resolve_category(self):
        assert resolve_category("happy") is MoodCategory.HAPPY
        assert resolve_category(" Sleepy ") is MoodCategory.SLEEPY
        assert resolve_category(MoodCategory.ANGRY) is MoodCategory.ANGRY

    def test_resolve_unknown_identifier(self):
        assert resolve_category("ecstatic") is None
        assert resolve_category(None) is None
        assert resolve_category(3) is None


class TestMoodEntry:

    def test_note_truncated_not_rejected(self):
        assert truncate_note(None) is None
        assert len(truncate_note("x" * 500)) == MAX_NOTE_LENGTH

        entry = MoodEntry.create(MoodCategory.HAPPY, text="y" * 200)
        assert len(entry.text) == 140

    def test_create_assigns_id_and_raw_mood(self):
        when = datetime(2024, 6, 3, 8, 30)
        first = MoodEntry.create(MoodCategory.TIRED, timestamp=when)
        second = MoodEntry.create("tired", timestamp=when)

        assert first.id != second.id
        assert first.mood == "tired"
        assert first.category is MoodCategory.TIRED
        assert first.day == date(2024, 6, 3)

    def test_edit_keeps_id_and_timestamp(self):
        entry = MoodEntry.create(MoodCategory.HAPPY, text="before", timestamp=datetime(2024, 6, 3, 9))
        edited = entry.with_changes(mood=MoodCategory.ANGRY, text="after")

        assert edited.id == entry.id
        assert edited.timestamp == entry.timestamp
        assert edited.mood == "angry"
        assert edited.text == "after"

    def test_unknown_mood_has_no_category(self):
        entry = MoodEntry(id="1", mood="bogus", timestamp=datetime(2024, 6, 3))
        assert entry.category is None

    def test_document_round_trip_with_iso_timestamp(self):
        doc = {"_id": "abc", "mood": "normal", "text": None, "timestamp": "2024-06-03T10:00:00"}
        entry = MoodEntry.from_document(doc)

        assert entry.id == "abc"
        assert entry.timestamp == datetime(2024, 6, 3, 10, 0)
        assert entry.to_document()["timestamp"] == datetime(2024, 6, 3, 10, 0)

    def test_document_without_timestamp_is_rejected(self):
        with pytest.raises(ValueError):
            MoodEntry.from_document({"_id": "abc", "mood": "happy"})


class TestAnalysisWindow:

    def test_last_days_is_inclusive(self):
        window = AnalysisWindow.last_days(7, today=date(2024, 6, 9))
        assert window.start == date(2024, 6, 3)
        assert window.days == 7

    def test_bounds_cover_whole_days(self):
        start, end = AnalysisWindow(date(2024, 6, 3), date(2024, 6, 4)).bounds()
        assert start == datetime(2024, 6, 3, 0, 0)
        assert end == datetime.combine(date(2024, 6, 4), time.max)

    def test_contains(self):
        window = AnalysisWindow(date(2024, 6, 3), date(2024, 6, 9))
        assert window.contains(datetime(2024, 6, 9, 23, 59))
        assert not window.contains(datetime(2024, 6, 10, 0, 1))

    def test_spanning_entries(self, make_entry):
        entries = [make_entry(MoodCategory.HAPPY, 0), make_entry(MoodCategory.HAPPY, 4)]
        window = AnalysisWindow.spanning(entries)
        assert window.days == 5


def test_recorded_moods_split(make_entry):
    good = make_entry(MoodCategory.HAPPY)
    bad = MoodEntry(id="x", mood="bogus", timestamp=good.timestamp)

    grouped = RecordedMoods.split([good, bad])

    assert grouped.scored == [good]
    assert grouped.malformed == [bad]
