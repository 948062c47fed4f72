import csv
import io
from datetime import datetime

from moodjournal.adapters import export
from moodjournal.core.models import MoodCategory, MoodEntry


class TestCsvExport:

    def setup_method(self):
        self.entries = [
            MoodEntry.create(MoodCategory.TIRED, text='Said "no" to\novertime', timestamp=datetime(2024, 6, 4, 21, 5)),
            MoodEntry.create(MoodCategory.HAPPY, text="Picnic", timestamp=datetime(2024, 6, 3, 9, 30)),
            MoodEntry.create(MoodCategory.NORMAL, timestamp=datetime(2024, 6, 5, 12, 0)),
        ]

    def test_entries_csv(self):
        lines = export.entries_to_csv(self.entries).splitlines()

        assert lines[0] == "Date,Time,Emoji,Mood,Text"
        assert lines[1] == '2024-06-03,09:30,😃,Happy,"Picnic"'
        assert lines[2] == '2024-06-04,21:05,😫,Tired,"Said ""no"" to overtime"'
        assert lines[3] == '2024-06-05,12:00,🙂,Normal,""'

    def test_unknown_mood_with_comma_keeps_five_columns(self):
        entry = MoodEntry.create("meh, ok", text="Fine", timestamp=datetime(2024, 6, 6, 8, 15))

        content = export.entries_to_csv([entry])
        rows = list(csv.reader(io.StringIO(content)))

        assert content.splitlines()[1] == '2024-06-06,08:15,,"meh, ok","Fine"'
        assert rows[1] == ["2024-06-06", "08:15", "", "meh, ok", "Fine"]

    def test_quote_text_flattens_carriage_returns(self):
        assert export.quote_text("a\r\nb\rc") == '"a b c"'

    def test_statistics_csv(self):
        counts = {MoodCategory.HAPPY: 3, MoodCategory.TIRED: 2}
        lines = export.statistics_to_csv(counts).splitlines()

        assert lines[0] == "Emoji,Mood,Count,Percentage"
        assert lines[1] == "😃,Happy,3,60.00"
        assert lines[2] == "🙂,Normal,0,0.00"
        assert lines[3] == "😫,Tired,2,40.00"
        assert len(lines) == 6

    def test_statistics_with_no_entries(self):
        rows = export.statistics_rows({})
        assert [row[3] for row in rows] == ["0.00"] * 5

    def test_export_files(self, tmp_path):
        entries_path = tmp_path / "out" / "moods.csv"
        stats_path = tmp_path / "stats.csv"

        export.export_entries(self.entries, str(entries_path))
        export.export_statistics({MoodCategory.SLEEPY: 1}, str(stats_path))

        assert entries_path.read_text(encoding="utf-8").count("\n") == 4
        assert "😴,Sleepy,1,100.00" in stats_path.read_text(encoding="utf-8")
