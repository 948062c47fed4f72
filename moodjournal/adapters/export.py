"""
CSV export of mood entries and per-mood statistics.

Entries CSV:    Date,Time,Emoji,Mood,Text   (text always quoted)
Statistics CSV: Emoji,Mood,Count,Percentage (percentage with two decimals)
"""

import csv
import io
import logging
import os
from typing import Dict, Iterable, List

from moodjournal.core.models import MoodCategory, MoodEntry, all_categories, resolve_category

logger = logging.getLogger(__name__)

ENTRY_HEADER = ["Date", "Time", "Emoji", "Mood", "Text"]
STATISTICS_HEADER = ["Emoji", "Mood", "Count", "Percentage"]


def quote_text(text: str) -> str:
    """Single-line, always-quoted text field with embedded quotes doubled."""
    flat = text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return '"' + flat.replace('"', '""') + '"'


def entries_to_csv(entries: Iterable[MoodEntry]) -> str:
    """Entries sorted by time. Unknown mood identifiers are written raw with an empty emoji."""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(ENTRY_HEADER)
    # Leading columns use minimal quoting; the row ends with the always-quoted text
    fields = csv.writer(buffer, lineterminator=",")
    for entry in sorted(entries, key=lambda e: e.timestamp):
        category = resolve_category(entry.mood)
        fields.writerow([
            entry.timestamp.strftime("%Y-%m-%d"),
            entry.timestamp.strftime("%H:%M"),
            category.emoji if category else "",
            category.display_name if category else entry.mood,
        ])
        buffer.write(quote_text(entry.text or "") + "\n")
    return buffer.getvalue()


def statistics_rows(counts: Dict[MoodCategory, int]) -> List[List[str]]:
    total = sum(counts.values())
    rows = []
    for mood in all_categories():
        count = counts.get(mood, 0)
        percentage = count / total * 100 if total else 0.0
        rows.append([mood.emoji, mood.display_name, str(count), f"{percentage:.2f}"])
    return rows


def statistics_to_csv(counts: Dict[MoodCategory, int]) -> str:
    """All five categories in canonical order, zero counts included."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(STATISTICS_HEADER)
    writer.writerows(statistics_rows(counts))
    return buffer.getvalue()


def _write(path: str, content: str) -> None:
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(content)


def export_entries(entries: List[MoodEntry], path: str) -> str:
    _write(path, entries_to_csv(entries))
    logger.info(f"[OK] Exported {len(entries)} entries to {path}")
    return path


def export_statistics(counts: Dict[MoodCategory, int], path: str) -> str:
    _write(path, statistics_to_csv(counts))
    logger.info(f"[OK] Exported mood statistics to {path}")
    return path
