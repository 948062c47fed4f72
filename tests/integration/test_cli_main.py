import os
from unittest.mock import patch

from moodjournal.main import main, parse_arguments, render_result
from moodjournal.core.reports import FeatureLocked, InsufficientData, ProFeature


class TestArguments:

    def test_defaults(self):
        args = parse_arguments([])

        assert args.report == "weekly"
        assert args.period == "month"
        assert args.sample is None

    def test_sample_flag_without_value(self):
        assert parse_arguments(["--sample"]).sample == "scenarios"
        assert parse_arguments(["--sample", "random"]).sample == "random"


class TestMain:

    def test_weekly_from_sample(self, capsys):
        assert main(["--sample", "--seed", "1"]) == 0
        assert "WEEKLY INSIGHT" in capsys.readouterr().out

    def test_coaching_from_sample(self, capsys):
        assert main(["--sample", "--report", "coaching"]) == 0

        out = capsys.readouterr().out
        assert "PERSONAL COACHING" in out
        assert "Action items:" in out

    def test_detailed_from_sample(self, capsys):
        assert main(["--sample", "--report", "detailed", "--period", "three_months"]) == 0
        assert "DETAILED REPORT  3 months" in capsys.readouterr().out

    def test_seeded_random_sample_is_reproducible(self, capsys):
        main(["--sample", "random", "--seed", "5"])
        first = capsys.readouterr().out
        main(["--sample", "random", "--seed", "5"])
        assert capsys.readouterr().out == first

    def test_locked_feature(self, capsys):
        with patch.dict(os.environ, {"MOODJOURNAL_PRO_FEATURES": "weekly_insights"}):
            assert main(["--sample", "--report", "detailed"]) == 0
        assert "[LOCKED] 'detailed_reports'" in capsys.readouterr().out

    def test_missing_mongodb_uri(self, capsys):
        assert main(["--report", "weekly"]) == 1
        assert capsys.readouterr().out == ""

    def test_exports(self, tmp_path):
        entries_path = tmp_path / "moods.csv"
        stats_path = tmp_path / "stats.csv"

        code = main(["--sample", "--export-csv", str(entries_path),
                     "--export-statistics", str(stats_path)])

        assert code == 0
        assert entries_path.read_text(encoding="utf-8").startswith("Date,Time,Emoji,Mood,Text\n")
        assert len(stats_path.read_text(encoding="utf-8").splitlines()) == 6


def test_render_outcomes():
    assert render_result(FeatureLocked(ProFeature.PERSONAL_COACHING)).startswith("[LOCKED]")
    assert "2/5" in render_result(InsufficientData("personal_coaching", 5, 2))
