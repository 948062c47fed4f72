"""
Report assemblers: weekly insight, personal coaching and detailed report.

Each assembler follows the same pipeline:
1. Feature gate check (locked features never run)
2. Entry store fetch for the report window (store failures = no data)
3. Minimum entry check (below it the result is InsufficientData)
4. Statistics -> time/text patterns -> advice selection -> report
5. History insertion (newest first, capped, oldest evicted)

The pure `generate_*` functions run steps 3-4 on entries the caller already
holds; the generator classes add the collaborators and history.
"""

import logging
import random
import threading
import uuid
from calendar import monthrange
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import (
    Any, Callable, Deque, Dict, Generic, List, Optional, Tuple, TypeVar, Union
)

from typing_extensions import Protocol

from moodjournal.core import advice
from moodjournal.core.config import InsightConfig
from moodjournal.core.models import AnalysisWindow, MoodCategory, MoodEntry, all_categories
from moodjournal.core.patterns import (
    TimePattern, TrendDirection, WeekdayPattern, MoodTrendAnalyzer,
    analyze_time_pattern, analyze_weekday_pattern, WEEKDAYS
)
from moodjournal.core.stats import StatisticsSnapshot, compute_statistics
from moodjournal.core.text_signals import TextSignals, extract_text_signals

logger = logging.getLogger(__name__)

ReportT = TypeVar("ReportT")


# ============================================================================
# COLLABORATOR CONTRACTS
# ============================================================================

class ProFeature(Enum):
    """Paid-tier features guarded by the feature gate."""
    WEEKLY_INSIGHTS = "weekly_insights"
    PERSONAL_COACHING = "personal_coaching"
    DETAILED_REPORTS = "detailed_reports"


class EntryStoreError(Exception):
    """Raised by entry stores when entries cannot be read."""
    pass


class EntryStore(Protocol):
    def fetch_entries(self, start: datetime, end: datetime) -> List[MoodEntry]:
        """Entries with start <= timestamp <= end, any order; empty list when none."""
        ...


class FeatureGate(Protocol):
    def is_feature_enabled(self, feature_id: str) -> bool:
        ...


# ============================================================================
# OUTCOMES
# ============================================================================

@dataclass(frozen=True)
class InsufficientData:
    """Too few entries to build the report. An expected outcome, not an error."""
    report: str
    required: int
    actual: int

    @property
    def message(self) -> str:
        missing = self.required - self.actual
        return f"Record {missing} more mood{'s' if missing != 1 else ''} to unlock this report."


@dataclass(frozen=True)
class FeatureLocked:
    """The feature gate refused the report; the caller routes to the upgrade flow."""
    feature: ProFeature


# ============================================================================
# REPORTS
# ============================================================================

def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class WeeklyInsight:
    window: AnalysisWindow
    content: str
    family: advice.WeekFamily
    dominant_mood: MoodCategory
    recording_days: int
    highlights: Tuple[str, ...]
    encouragement: str
    next_week_focus: str
    statistics: StatisticsSnapshot
    time_pattern: TimePattern
    text_signals: TextSignals
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def week_range_text(self) -> str:
        return f"{self.window.start:%b %d} - {self.window.end:%b %d}"


@dataclass(frozen=True)
class PersonalCoaching:
    window: AnalysisWindow
    mood_pattern: advice.MoodPattern
    primary_advice: str
    action_items: Tuple[str, ...]
    next_steps: Tuple[str, ...]
    contextual_advice: Tuple[str, ...]
    statistics: StatisticsSnapshot
    time_pattern: TimePattern
    text_signals: TextSignals
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)


class ReportPeriod(Enum):
    MONTH = "month"
    THREE_MONTHS = "three_months"
    SIX_MONTHS = "six_months"
    YEAR = "year"

    @property
    def months(self) -> int:
        return {"month": 1, "three_months": 3, "six_months": 6, "year": 12}[self.value]

    @property
    def display_name(self) -> str:
        return {"month": "1 month", "three_months": "3 months",
                "six_months": "6 months", "year": "1 year"}[self.value]

    def window(self, today: Optional[date] = None) -> AnalysisWindow:
        """Calendar months back from today; the day the range started from is excluded."""
        end = today or date.today()
        return AnalysisWindow(start=_months_before(end, self.months) + timedelta(days=1), end=end)


def _months_before(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


class PatternType(Enum):
    WEEKLY_PATTERN = "weekly_pattern"
    VOLATILITY = "volatility"
    CONSISTENCY = "consistency"
    TREND = "trend"


class PatternImpact(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def color(self) -> str:
        return {"low": "#4CAF50", "medium": "#FF9800", "high": "#F44336"}[self.value]


@dataclass(frozen=True)
class PatternInsight:
    type: PatternType
    title: str
    description: str
    impact: PatternImpact
    actionable: bool


@dataclass(frozen=True)
class MoodTrend:
    mood: MoodCategory
    frequency: int
    percentage: float
    direction: TrendDirection
    peak_periods: Tuple[str, ...]


@dataclass(frozen=True)
class OverviewMetrics:
    total_records: int
    recording_days: int
    average_mood_score: float
    dominant_mood: MoodCategory
    consistency_rate: float
    improvement_rate: float


@dataclass(frozen=True)
class ChartData:
    distribution: Dict[MoodCategory, int]
    daily_trends: Tuple[Tuple[datetime, float, MoodCategory], ...]
    weekday_averages: Tuple[float, ...]   # Monday..Sunday, 0.0 when no entries
    monthly_overview: Tuple[Tuple[str, float], ...]


@dataclass(frozen=True)
class DetailedReport:
    period: ReportPeriod
    window: AnalysisWindow
    overview: OverviewMetrics
    mood_trends: Tuple[MoodTrend, ...]
    pattern_insights: Tuple[PatternInsight, ...]
    recommendations: Tuple[str, ...]
    mood_pattern: advice.MoodPattern
    contextual_advice: Tuple[str, ...]
    charts: ChartData
    statistics: StatisticsSnapshot
    time_pattern: TimePattern
    text_signals: TextSignals
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)


WeeklyResult = Union[WeeklyInsight, InsufficientData, FeatureLocked]
CoachingResult = Union[PersonalCoaching, InsufficientData, FeatureLocked]
DetailedResult = Union[DetailedReport, InsufficientData, FeatureLocked]


# ============================================================================
# WEEKLY INSIGHT
# ============================================================================

def generate_weekly_insight(entries: List[MoodEntry],
                            window: Optional[AnalysisWindow] = None,
                            rng: Optional[random.Random] = None) -> Union[WeeklyInsight, InsufficientData]:
    """
    Builds the weekly insight for the last 7 days of entries.

    Args:
        entries: Entries of the week.
        window: Consistency window; defaults to the 7 days ending today.
        rng: Random source for the template pick (seed it for stable output).
    """
    if len(entries) < InsightConfig.WEEKLY_MIN_ENTRIES:
        return InsufficientData("weekly_insight", InsightConfig.WEEKLY_MIN_ENTRIES, len(entries))

    window = window or AnalysisWindow.last_days(InsightConfig.WEEKLY_WINDOW_DAYS)
    snapshot = compute_statistics(entries, window)
    time_pattern = analyze_time_pattern(entries)
    signals = extract_text_signals(entries)

    family, content = advice.render_weekly_summary(snapshot, rng)
    highlights = advice.weekly_highlights(snapshot) + time_pattern.insights + signals.insights

    return WeeklyInsight(
        window=window,
        content=content,
        family=family,
        dominant_mood=snapshot.dominant_mood,
        recording_days=snapshot.unique_days,
        highlights=tuple(highlights),
        encouragement=advice.weekly_encouragement(snapshot),
        next_week_focus=advice.next_week_focus(snapshot),
        statistics=snapshot,
        time_pattern=time_pattern,
        text_signals=signals,
    )


# ============================================================================
# PERSONAL COACHING
# ============================================================================

def generate_personal_coaching(entries: List[MoodEntry],
                               window: Optional[AnalysisWindow] = None) -> Union[PersonalCoaching, InsufficientData]:
    """Builds personal coaching over the last 14 days of entries."""
    if len(entries) < InsightConfig.COACHING_MIN_ENTRIES:
        return InsufficientData("personal_coaching", InsightConfig.COACHING_MIN_ENTRIES, len(entries))

    window = window or AnalysisWindow.last_days(InsightConfig.COACHING_WINDOW_DAYS)
    snapshot = compute_statistics(entries, window)
    time_pattern = analyze_time_pattern(entries)
    signals = extract_text_signals(entries)
    pattern = advice.classify_snapshot(snapshot)

    return PersonalCoaching(
        window=window,
        mood_pattern=pattern,
        primary_advice=advice.pattern_advice(pattern),
        action_items=tuple(advice.action_items(pattern, snapshot)),
        next_steps=tuple(advice.next_steps(pattern)),
        contextual_advice=tuple(advice.contextual_advice(snapshot, time_pattern, signals)),
        statistics=snapshot,
        time_pattern=time_pattern,
        text_signals=signals,
    )


# ============================================================================
# DETAILED REPORT
# ============================================================================

class DetailedReportBuilder:
    """Sections of the detailed report, from the shared analysis results."""

    def __init__(self, entries: List[MoodEntry], snapshot: StatisticsSnapshot,
                 weekdays: WeekdayPattern):
        self.entries = entries
        self.snapshot = snapshot
        self.weekdays = weekdays

    @property
    def overall_trend(self) -> float:
        # Low-n trends are too noisy for a long-period report
        return 0.0 if self.snapshot.low_confidence_trend else self.snapshot.trend

    def overview(self) -> OverviewMetrics:
        return OverviewMetrics(
            total_records=self.snapshot.total_entries,
            recording_days=self.snapshot.unique_days,
            average_mood_score=self.snapshot.average_score,
            dominant_mood=self.snapshot.dominant_mood,
            consistency_rate=self.snapshot.consistency,
            improvement_rate=self.overall_trend,
        )

    def mood_trends(self) -> List[MoodTrend]:
        total = self.snapshot.total_entries
        trends = [
            MoodTrend(
                mood=mood,
                frequency=self.snapshot.distribution[mood],
                percentage=self.snapshot.distribution[mood] / total * 100 if total else 0.0,
                direction=MoodTrendAnalyzer.direction(self.entries, mood),
                peak_periods=tuple(MoodTrendAnalyzer.peak_weekdays(self.entries, mood)),
            )
            for mood in all_categories()
        ]
        return sorted(trends, key=lambda t: t.frequency, reverse=True)

    def pattern_insights(self) -> List[PatternInsight]:
        insights: List[PatternInsight] = []

        if self.weekdays.best_day is not None:
            insights.append(PatternInsight(
                type=PatternType.WEEKLY_PATTERN,
                title="Weekly pattern",
                description=(f"Your mood is best on {self.weekdays.best_day_name} "
                             f"and tends to dip on {self.weekdays.worst_day_name}."),
                impact=(PatternImpact.HIGH if self.weekdays.spread > InsightConfig.WEEKDAY_HIGH_IMPACT_SPREAD
                        else PatternImpact.MEDIUM),
                actionable=True,
            ))

        volatility = self.snapshot.volatility
        if volatility > 0:
            if volatility > InsightConfig.VOLATILITY_HIGH:
                impact, description = PatternImpact.HIGH, (
                    "Your mood varies a lot from day to day. Building a steady routine is likely to help.")
            elif volatility > InsightConfig.VOLATILITY_MEDIUM:
                impact, description = PatternImpact.MEDIUM, (
                    "Your mood moves within a moderate range. That is natural, and knowing the "
                    "pattern makes it more predictable.")
            else:
                impact, description = PatternImpact.LOW, (
                    "Your mood is steady without large swings. Keeping this stability is what matters.")
            insights.append(PatternInsight(
                type=PatternType.VOLATILITY,
                title="Mood volatility",
                description=description,
                impact=impact,
                actionable=volatility > InsightConfig.VOLATILITY_MEDIUM,
            ))

        consistency = self.snapshot.consistency
        if consistency > InsightConfig.CONSISTENCY_EXCELLENT:
            impact, actionable, description = PatternImpact.LOW, False, (
                "You journal very consistently. It has become a solid habit.")
        elif consistency > InsightConfig.CONSISTENCY_GOOD:
            impact, actionable, description = PatternImpact.MEDIUM, True, (
                "Your journaling is fairly consistent. A steadier habit will make the analysis more precise.")
        else:
            impact, actionable, description = PatternImpact.HIGH, True, (
                "There is room to journal more regularly. Regular entries reveal your mood patterns in more detail.")
        insights.append(PatternInsight(
            type=PatternType.CONSISTENCY,
            title="Journaling consistency",
            description=description,
            impact=impact,
            actionable=actionable,
        ))

        trend = self.overall_trend
        if trend > InsightConfig.OVERALL_TREND_DELTA:
            impact, description = PatternImpact.LOW, (
                "Your mood is improving overall. Your current habits seem to be helping.")
        elif trend < -InsightConfig.OVERALL_TREND_DELTA:
            impact, description = PatternImpact.HIGH, (
                "Your mood is trending down. Reviewing your habits and stressors could help.")
        else:
            impact, description = PatternImpact.MEDIUM, (
                "Your mood is relatively stable. Small improvements add up.")
        insights.append(PatternInsight(
            type=PatternType.TREND,
            title="Overall trend",
            description=description,
            impact=impact,
            actionable=True,
        ))

        return insights

    def recommendations(self) -> List[str]:
        recommendations: List[str] = []

        if self.snapshot.consistency < InsightConfig.RECOMMEND_CONSISTENCY_BELOW:
            recommendations.append("Journal at the same time every day to build the habit")
        if self.snapshot.volatility > InsightConfig.RECOMMEND_VOLATILITY_ABOVE:
            recommendations.append("Keep regular sleep and meal times to steady your mood")
        if self.overall_trend < InsightConfig.RECOMMEND_TREND_BELOW:
            recommendations.append("Try relaxation or light exercise to lift your mood")

        dominant = {
            MoodCategory.TIRED: "When tiredness dominates, prioritize rest and stress management",
            MoodCategory.SLEEPY: "When sleepiness dominates, review your sleep quality and hours",
            MoodCategory.ANGRY: "When irritation dominates, finding a way to release stress is key",
        }.get(self.snapshot.dominant_mood)
        if dominant:
            recommendations.append(dominant)

        recommendations.append("Keep journaling to reveal more detailed patterns")
        return recommendations

    def charts(self) -> ChartData:
        daily = sorted(
            ((e.timestamp, e.category.score, e.category) for e in self.entries if e.category is not None),
            key=lambda point: point[0],
        )

        monthly: Dict[str, List[float]] = {}
        for timestamp, score, _ in daily:
            monthly.setdefault(f"{timestamp:%Y-%m}", []).append(score)

        return ChartData(
            distribution=dict(self.snapshot.distribution),
            daily_trends=tuple(daily),
            weekday_averages=tuple(self.weekdays.averages.get(day, 0.0) for day in range(len(WEEKDAYS))),
            monthly_overview=tuple(
                (month, sum(scores) / len(scores)) for month, scores in sorted(monthly.items())
            ),
        )


def generate_detailed_report(entries: List[MoodEntry], period: ReportPeriod,
                             today: Optional[date] = None) -> Union[DetailedReport, InsufficientData]:
    """Builds the detailed report for a 1/3/6/12-month period ending today."""
    if len(entries) < InsightConfig.DETAILED_MIN_ENTRIES:
        return InsufficientData("detailed_report", InsightConfig.DETAILED_MIN_ENTRIES, len(entries))

    window = period.window(today)
    snapshot = compute_statistics(entries, window)
    time_pattern = analyze_time_pattern(entries)
    signals = extract_text_signals(entries)
    builder = DetailedReportBuilder(entries, snapshot, analyze_weekday_pattern(entries))

    return DetailedReport(
        period=period,
        window=window,
        overview=builder.overview(),
        mood_trends=tuple(builder.mood_trends()),
        pattern_insights=tuple(builder.pattern_insights()),
        recommendations=tuple(builder.recommendations()),
        mood_pattern=advice.classify_snapshot(snapshot),
        contextual_advice=tuple(advice.contextual_advice(snapshot, time_pattern, signals)),
        charts=builder.charts(),
        statistics=snapshot,
        time_pattern=time_pattern,
        text_signals=signals,
    )


# ============================================================================
# HISTORY & SINGLE-FLIGHT
# ============================================================================

class ReportHistory(Generic[ReportT]):
    """Caller-owned report history: newest first, oldest evicted past the cap."""

    def __init__(self, cap: int):
        if cap <= 0:
            raise ValueError("History cap must be positive")
        self.cap = cap
        self._items: Deque[ReportT] = deque(maxlen=cap)

    def add(self, report: ReportT) -> None:
        self._items.appendleft(report)

    @property
    def items(self) -> List[ReportT]:
        return list(self._items)

    @property
    def latest(self) -> Optional[ReportT]:
        return self._items[0] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class _Flight:
    def __init__(self):
        self.done = threading.Event()
        self.result: Any = None
        self.error: Optional[BaseException] = None


class SingleFlight:
    """
    At most one in-flight call. Callers arriving while a call runs wait for it
    and share its result (or its exception) instead of running again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._flight: Optional[_Flight] = None

    @property
    def in_flight(self) -> bool:
        return self._flight is not None

    def run(self, fn: Callable[[], Any]) -> Any:
        with self._lock:
            flight = self._flight
            leader = flight is None
            if leader:
                flight = self._flight = _Flight()

        if not leader:
            logger.info("[SINGLE-FLIGHT] Joining generation already in progress")
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.result

        try:
            flight.result = fn()
            return flight.result
        except BaseException as e:
            flight.error = e
            raise
        finally:
            with self._lock:
                self._flight = None
            flight.done.set()


# ============================================================================
# GENERATORS
# ============================================================================

class _ReportGenerator(Generic[ReportT]):
    """Feature gate -> store fetch -> assemble -> history, one flight per request key."""

    feature: ProFeature
    history_cap: int

    def __init__(self, store: EntryStore, feature_gate: FeatureGate,
                 history: Optional[ReportHistory] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.feature_gate = feature_gate
        self.history: ReportHistory = history if history is not None else ReportHistory(self.history_cap)
        self.clock = clock
        self._flights: Dict[Any, SingleFlight] = {}
        self._flights_lock = threading.Lock()

    @property
    def is_generating(self) -> bool:
        with self._flights_lock:
            return any(flight.in_flight for flight in self._flights.values())

    def _flight_for(self, key: Any = None) -> SingleFlight:
        """One flight per key; requests under different keys never share a result."""
        with self._flights_lock:
            flight = self._flights.get(key)
            if flight is None:
                flight = self._flights[key] = SingleFlight()
            return flight

    def _fetch(self, window: AnalysisWindow) -> List[MoodEntry]:
        start, end = window.bounds()
        try:
            entries = list(self.store.fetch_entries(start, end))
        except EntryStoreError as e:
            logger.warning(f"[WARN] Entry store unavailable, treating as no data: {e}")
            return []
        logger.info(f"[OK] Fetched {len(entries)} entries for {window.start} -> {window.end}")
        return sorted(entries, key=lambda entry: entry.timestamp)

    def _run(self, window: AnalysisWindow, build: Callable[[List[MoodEntry]], Any]) -> Any:
        if not self.feature_gate.is_feature_enabled(self.feature.value):
            logger.info(f"[LOCKED] {self.feature.value} is not enabled")
            return FeatureLocked(self.feature)

        result = build(self._fetch(window))
        if isinstance(result, InsufficientData):
            logger.info(f"[INSIGHTS] {result.report}: {result.actual}/{result.required} entries, skipped")
            return result

        self.history.add(result)
        logger.info(f"[INSIGHTS] {self.feature.value} generated ({len(self.history)} in history)")
        return result


class WeeklyInsightGenerator(_ReportGenerator[WeeklyInsight]):
    feature = ProFeature.WEEKLY_INSIGHTS
    history_cap = InsightConfig.WEEKLY_HISTORY_CAP

    def __init__(self, store: EntryStore, feature_gate: FeatureGate,
                 history: Optional[ReportHistory] = None,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = datetime.now):
        super().__init__(store, feature_gate, history, clock)
        self.rng = rng or random.Random()

    def generate(self) -> WeeklyResult:
        window = AnalysisWindow.last_days(InsightConfig.WEEKLY_WINDOW_DAYS, self.clock().date())
        return self._flight_for().run(
            lambda: self._run(window, lambda entries: generate_weekly_insight(entries, window, self.rng))
        )


class PersonalCoachingSystem(_ReportGenerator[PersonalCoaching]):
    feature = ProFeature.PERSONAL_COACHING
    history_cap = InsightConfig.COACHING_HISTORY_CAP

    def generate(self) -> CoachingResult:
        window = AnalysisWindow.last_days(InsightConfig.COACHING_WINDOW_DAYS, self.clock().date())
        return self._flight_for().run(
            lambda: self._run(window, lambda entries: generate_personal_coaching(entries, window))
        )


class DetailedReportGenerator(_ReportGenerator[DetailedReport]):
    feature = ProFeature.DETAILED_REPORTS
    history_cap = InsightConfig.DETAILED_HISTORY_CAP

    def generate(self, period: ReportPeriod = ReportPeriod.MONTH) -> DetailedResult:
        today = self.clock().date()
        window = period.window(today)
        return self._flight_for(period).run(
            lambda: self._run(window, lambda entries: generate_detailed_report(entries, period, today))
        )
