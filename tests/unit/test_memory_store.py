import pytest
from datetime import datetime

from moodjournal.adapters.repositories.memory import InMemoryEntryStore
from moodjournal.core.models import MoodCategory


class TestInMemoryEntryStore:

    def setup_method(self):
        self.store = InMemoryEntryStore()
        self.morning = self.store.create_entry(MoodCategory.TIRED, "slow start", datetime(2024, 6, 3, 7))
        self.evening = self.store.create_entry("happy", None, datetime(2024, 6, 4, 20))

    def test_fetch_range_is_inclusive_and_sorted(self):
        entries = self.store.fetch_entries(datetime(2024, 6, 3, 7), datetime(2024, 6, 4, 20))
        assert entries == [self.morning, self.evening]

    def test_fetch_empty_range(self):
        assert self.store.fetch_entries(datetime(2025, 1, 1), datetime(2025, 1, 2)) == []

    def test_create_rejects_unknown_mood(self):
        with pytest.raises(ValueError):
            self.store.create_entry("ecstatic")
        assert len(self.store) == 2

    def test_update_keeps_timestamp(self):
        assert self.store.update_entry(self.morning.id, mood="normal", text="better")

        updated = self.store.all_entries()[0]
        assert updated.mood == "normal"
        assert updated.text == "better"
        assert updated.timestamp == self.morning.timestamp

    def test_update_missing(self):
        assert not self.store.update_entry("missing", mood="happy")

    def test_delete(self):
        assert self.store.delete_entry(self.evening.id)
        assert not self.store.delete_entry(self.evening.id)
        assert len(self.store) == 1

    def test_statistics(self):
        counts = self.store.get_mood_statistics()

        assert counts[MoodCategory.TIRED] == 1
        assert counts[MoodCategory.HAPPY] == 1
        assert counts[MoodCategory.ANGRY] == 0
        assert self.store.get_mood_statistics(start=datetime(2024, 6, 4))[MoodCategory.TIRED] == 0
