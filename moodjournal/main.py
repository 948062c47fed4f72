"""
MoodJournal Insights: command-line report generator.

This module wires the insight pipeline end to end:
1. Loads configuration (.env, environment variables, CLI flags)
2. Opens the entry store (MongoDB, or in-memory sample data)
3. Resolves the feature gate (environment list, sample unlock, or MongoDB entitlements)
4. Generates the requested report and prints it
5. Optionally exports entries and per-mood statistics as CSV

Supports execution modes:
- Normal: entries and entitlements from MongoDB (MONGODB_URI)
- Sample: generated entries in memory, every report unlocked
"""

import os
import sys
import argparse
import logging
import random
from datetime import datetime
from typing import List, Optional, Union

from dotenv import load_dotenv

from moodjournal.adapters import export
from moodjournal.adapters.feature_gates import PRO_FEATURES_ENV, EnvFeatureGate, StaticFeatureGate
from moodjournal.adapters.repositories import mongo as mongo_client
from moodjournal.adapters.repositories.memory import InMemoryEntryStore
from moodjournal.core.reports import (
    DetailedReport, DetailedReportGenerator, FeatureGate, FeatureLocked, InsufficientData,
    PersonalCoaching, PersonalCoachingSystem, ReportPeriod, WeeklyInsight, WeeklyInsightGenerator
)
from moodjournal.utils import sample_data
from moodjournal.utils.logger import setup_logger

logger = logging.getLogger(__name__)

SEED_ENV = "MOODJOURNAL_SEED"
RULE = "=" * 60


# ============================================================================
# ARGUMENT PARSING
# ============================================================================

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="MoodJournal Insights: weekly insight, personal coaching and detailed reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                                  # Weekly insight from MongoDB
  python run.py --sample                         # Weekly insight from sample data
  python run.py --sample --report coaching       # Personal coaching
  python run.py --report detailed --period year  # 12-month detailed report
  python run.py --sample random --seed 7         # Reproducible random week
  python run.py --export-csv out/moods.csv       # Also export entries of the period
        """
    )

    parser.add_argument(
        "--report",
        choices=["weekly", "coaching", "detailed"],
        default="weekly",
        help="Report to generate (default: weekly)"
    )
    parser.add_argument(
        "--period",
        choices=[p.value for p in ReportPeriod],
        default=ReportPeriod.MONTH.value,
        help="Detailed report and export period (default: month)"
    )
    parser.add_argument(
        "--sample",
        nargs="?",
        const="scenarios",
        choices=["scenarios", "random"],
        help="Use in-memory sample entries instead of MongoDB"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help=f"Random seed for templates and sample data (default: ${SEED_ENV})"
    )
    parser.add_argument(
        "--export-csv",
        metavar="PATH",
        help="Write the entries of the period to a CSV file"
    )
    parser.add_argument(
        "--export-statistics",
        metavar="PATH",
        help="Write per-mood counts of the period to a CSV file"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging"
    )

    return parser.parse_args(argv)


def resolve_seed(args: argparse.Namespace) -> Optional[int]:
    if args.seed is not None:
        return args.seed
    raw = os.environ.get(SEED_ENV)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[WARN] Ignoring non-integer {SEED_ENV}={raw!r}")
        return None


# ============================================================================
# COLLABORATORS
# ============================================================================

def build_store(args: argparse.Namespace, rng: random.Random,
                now: datetime) -> Union[InMemoryEntryStore, mongo_client.MongoEntryStore]:
    """
    Raises:
        MongoDBConnectionError: If MongoDB is configured but unreachable.
    """
    if args.sample == "random":
        return InMemoryEntryStore(sample_data.random_week(rng, now))
    if args.sample:
        return InMemoryEntryStore(sample_data.coaching_scenarios(now))
    return mongo_client.MongoEntryStore.from_env()


def build_feature_gate(args: argparse.Namespace) -> FeatureGate:
    if os.environ.get(PRO_FEATURES_ENV):
        return EnvFeatureGate()
    if args.sample:
        return StaticFeatureGate.unlocked()
    db = mongo_client.get_database()
    return mongo_client.MongoFeatureGate(db[mongo_client.ENTITLEMENTS_COLLECTION_NAME])


# ============================================================================
# RENDERING
# ============================================================================

def _bullets(items) -> List[str]:
    return [f"  - {item}" for item in items]


def render_weekly(insight: WeeklyInsight) -> str:
    stats = insight.statistics
    lines = [
        RULE,
        f"WEEKLY INSIGHT  {insight.week_range_text}",
        RULE,
        insight.content,
        "",
        f"Dominant mood: {insight.dominant_mood.emoji} {insight.dominant_mood.display_name}",
        f"Recording days: {insight.recording_days}/{stats.window_days}",
        f"Average score: {stats.average_score:+.2f}",
        "",
        "Highlights:",
        *_bullets(insight.highlights),
        "",
        insight.encouragement,
        f"Next week: {insight.next_week_focus}",
    ]
    return "\n".join(lines)


def render_coaching(coaching: PersonalCoaching) -> str:
    pattern = coaching.mood_pattern
    lines = [
        RULE,
        f"PERSONAL COACHING  {pattern.emoji} {pattern.display_name}",
        RULE,
        coaching.primary_advice,
        "",
        "Action items:",
        *_bullets(coaching.action_items),
        "",
        "Tailored advice:",
        *(_bullets(coaching.contextual_advice) or ["  (none)"]),
        "",
        "Next steps:",
        *_bullets(coaching.next_steps),
    ]
    return "\n".join(lines)


def render_detailed(report: DetailedReport) -> str:
    overview = report.overview
    lines = [
        RULE,
        f"DETAILED REPORT  {report.period.display_name} ({report.window.start} -> {report.window.end})",
        RULE,
        f"Records: {overview.total_records}   Recording days: {overview.recording_days}",
        f"Average score: {overview.average_mood_score:+.2f}   "
        f"Dominant: {overview.dominant_mood.emoji} {overview.dominant_mood.display_name}",
        f"Consistency: {overview.consistency_rate:.0%}   Improvement: {overview.improvement_rate:+.2f}",
        f"Pattern: {report.mood_pattern.emoji} {report.mood_pattern.display_name}",
        "",
        "Mood trends:",
    ]
    for trend in report.mood_trends:
        peaks = ", ".join(trend.peak_periods) or "-"
        lines.append(
            f"  {trend.mood.emoji} {trend.mood.display_name:<7} {trend.frequency:>3} "
            f"({trend.percentage:5.1f}%) {trend.direction.emoji}  peaks: {peaks}"
        )
    lines += ["", "Pattern insights:"]
    for insight in report.pattern_insights:
        lines.append(f"  [{insight.impact.value.upper()}] {insight.title}: {insight.description}")
    lines += ["", "Recommendations:", *_bullets(report.recommendations)]
    if report.contextual_advice:
        lines += ["", "Tailored advice:", *_bullets(report.contextual_advice)]
    if report.charts.monthly_overview:
        lines += ["", "Monthly averages:"]
        lines += [f"  {month}: {score:+.2f}" for month, score in report.charts.monthly_overview]
    return "\n".join(lines)


def render_result(result) -> str:
    if isinstance(result, FeatureLocked):
        return f"[LOCKED] '{result.feature.value}' is a Pro feature. Upgrade to unlock it."
    if isinstance(result, InsufficientData):
        return f"Not enough data yet ({result.actual}/{result.required} entries). {result.message}"
    if isinstance(result, WeeklyInsight):
        return render_weekly(result)
    if isinstance(result, PersonalCoaching):
        return render_coaching(result)
    return render_detailed(result)


# ============================================================================
# MAIN
# ============================================================================

def run_exports(args: argparse.Namespace, store, now: datetime) -> None:
    if not (args.export_csv or args.export_statistics):
        return
    start, end = ReportPeriod(args.period).window(now.date()).bounds()
    if args.export_csv:
        export.export_entries(store.fetch_entries(start, end), args.export_csv)
    if args.export_statistics:
        export.export_statistics(store.get_mood_statistics(start, end), args.export_statistics)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_arguments(argv)
    setup_logger("moodjournal", logging.DEBUG if args.verbose else logging.INFO)

    now = datetime.now()
    seed = resolve_seed(args)
    rng = random.Random(seed)
    logger.info(f"--- MoodJournal Insights: {args.report} report (seed={seed}) ---")

    try:
        store = build_store(args, rng, now)
        gate = build_feature_gate(args)
    except mongo_client.MongoDBConnectionError as e:
        logger.error(f"Cannot open entry store: {e}")
        logger.warning("[WARN] Set MONGODB_URI or run with --sample")
        return 1

    clock = lambda: now
    if args.report == "weekly":
        result = WeeklyInsightGenerator(store, gate, rng=rng, clock=clock).generate()
    elif args.report == "coaching":
        result = PersonalCoachingSystem(store, gate, clock=clock).generate()
    else:
        result = DetailedReportGenerator(store, gate, clock=clock).generate(ReportPeriod(args.period))

    print(render_result(result))

    try:
        run_exports(args, store, now)
    except (OSError, mongo_client.MongoDBOperationError) as e:
        logger.error(f"Export failed: {e}")
        return 1

    logger.info("--- Execution Complete ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
