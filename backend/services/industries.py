"""
Industry analytics: detailed ranking, new industries and industries to watch.

Key Functions:
- build_industry_stats: Group processed rows by industry
- rank_industries: Ranking with dominant sentiment / urgency labels
- compute_watch_thresholds: Percentile-based volume and conversion thresholds
- find_industries_to_watch: Expansion opportunities vs strategy needed
- previous_month_window: [first of previous month, first of current month)
- find_new_industries: Industries first seen in that window

Industries-to-watch thresholds:
    Only industries with at least MIN_CLIENTS_FOR_RELIABILITY clients qualify.
    Over the qualifying industries, ascending client counts and conversion
    rates are indexed at floor(n * 0.33) and floor(n * 0.67):

        lowVolume      = clients[floor(n * LOW)]
        highVolume     = clients[floor(n * HIGH)]
        lowConversion  = rates[floor(n * LOW)]
        highConversion = rates[floor(n * HIGH)]

    expansionOpportunities: clients <= lowVolume and rate >= highConversion,
    sorted by rate desc. strategyNeeded: clients >= highVolume and
    rate <= lowConversion, sorted by clients desc. Both capped at TOP_INDUSTRIES.
    The two segments are not mutually exclusive; an industry may appear in
    both or in neither.
"""

import asyncio
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from asyncpg import Pool

from backend.core.logging import get_component_logger
from backend.models import (
    IndustriesToWatch,
    IndustryRanking,
    IndustrySummary,
    NewIndustriesLastMonth,
    Sentiment,
    UrgencyLevel,
)
from backend.services.metrics import conversion_rate
from backend.sql import (
    SELECT_INDUSTRIES_BEFORE,
    SELECT_INDUSTRY_ROWS,
    SELECT_INDUSTRY_ROWS_IN_WINDOW,
)


# =============================================================================
# CONSTANTS
# =============================================================================

MIN_CLIENTS_FOR_RELIABILITY = 3
TOP_INDUSTRIES = 5

PERCENTILE_LOW = 0.33
PERCENTILE_HIGH = 0.67

# Fallback conversion thresholds when the percentile arrays are empty
HIGH_CONVERSION_THRESHOLD_MIN = 60.0
LOW_CONVERSION_THRESHOLD_MAX = 40.0
CONVERSION_THRESHOLD_ADJUSTMENT = 5.0

# Label scores; unknown labels score as the middle value
SENTIMENT_SCORES: Dict[str, int] = {
    Sentiment.POSITIVE.value: 3,
    Sentiment.NEUTRAL.value: 2,
    Sentiment.SKEPTICAL.value: 1,
}
URGENCY_SCORES: Dict[str, int] = {
    UrgencyLevel.IMMEDIATE.value: 3,
    UrgencyLevel.PLANNED.value: 2,
    UrgencyLevel.EXPLORATORY.value: 1,
}
MIDDLE_SCORE = 2
UPPER_LABEL_THRESHOLD = 2.5
LOWER_LABEL_THRESHOLD = 1.5


# =============================================================================
# Grouping
# =============================================================================

@dataclass
class IndustryStats:
    """Running tallies for one industry."""
    industry: str
    clients: int = 0
    closed: int = 0
    sentiments: List[str] = field(default_factory=list)
    urgency_levels: List[str] = field(default_factory=list)

    @property
    def conversion_rate(self) -> float:
        return conversion_rate(self.closed, self.clients)

    def to_summary(self) -> IndustrySummary:
        return IndustrySummary(
            industry=self.industry,
            clients=self.clients,
            closed=self.closed,
            conversionRate=self.conversion_rate,
        )


def build_industry_stats(rows: Iterable[Mapping[str, Any]]) -> List[IndustryStats]:
    """
    Group rows by industry in first-seen order.

    Rows with a null industry are skipped.
    """
    stats: Dict[str, IndustryStats] = {}
    for row in rows:
        industry = row.get('industry')
        if industry is None:
            continue
        entry = stats.get(industry)
        if entry is None:
            entry = stats[industry] = IndustryStats(industry)
        entry.clients += 1
        if row.get('closed'):
            entry.closed += 1
        if row.get('sentiment'):
            entry.sentiments.append(row['sentiment'])
        if row.get('urgencyLevel'):
            entry.urgency_levels.append(row['urgencyLevel'])
    return list(stats.values())


# =============================================================================
# Detailed Ranking
# =============================================================================

def _average_label(
    labels: Sequence[str],
    scores: Mapping[str, int],
    upper: str,
    middle: str,
    lower: str,
) -> str:
    values = [scores.get(label, MIDDLE_SCORE) for label in labels]
    average = sum(values) / len(values) if values else MIDDLE_SCORE
    if average >= UPPER_LABEL_THRESHOLD:
        return upper
    if average <= LOWER_LABEL_THRESHOLD:
        return lower
    return middle


def average_sentiment_label(sentiments: Sequence[str]) -> str:
    """positive >= 2.5, skeptical <= 1.5, otherwise neutral (mean of scores)."""
    return _average_label(
        sentiments, SENTIMENT_SCORES,
        Sentiment.POSITIVE.value, Sentiment.NEUTRAL.value, Sentiment.SKEPTICAL.value,
    )


def average_urgency_label(urgency_levels: Sequence[str]) -> str:
    """immediate >= 2.5, exploratory <= 1.5, otherwise planned (mean of scores)."""
    return _average_label(
        urgency_levels, URGENCY_SCORES,
        UrgencyLevel.IMMEDIATE.value, UrgencyLevel.PLANNED.value, UrgencyLevel.EXPLORATORY.value,
    )


def rank_industries(rows: Iterable[Mapping[str, Any]]) -> List[IndustryRanking]:
    """Every industry with its labels, sorted by client count descending."""
    ranking = [
        IndustryRanking(
            industry=stats.industry,
            clients=stats.clients,
            closed=stats.closed,
            conversionRate=stats.conversion_rate,
            averageSentiment=average_sentiment_label(stats.sentiments),
            averageUrgency=average_urgency_label(stats.urgency_levels),
        )
        for stats in build_industry_stats(rows)
    ]
    ranking.sort(key=lambda item: item.clients, reverse=True)
    return ranking


# =============================================================================
# Industries To Watch
# =============================================================================

@dataclass(frozen=True)
class WatchThresholds:
    low_volume: float
    high_volume: float
    low_conversion: float
    high_conversion: float


def _percentile_value(sorted_values: Sequence[float], percentile: float) -> float:
    return sorted_values[math.floor(len(sorted_values) * percentile)]


def compute_watch_thresholds(industries: Sequence[IndustrySummary]) -> WatchThresholds:
    """
    Percentile thresholds over the qualifying industries.

    With an empty input the volume thresholds are 0 and the conversion
    thresholds fall back to the average rate +/- 5, clamped to [60, 100] for
    the high threshold and [0, 40] for the low one.
    """
    client_counts = sorted(item.clients for item in industries)
    rates = sorted(item.conversionRate for item in industries)
    average_rate = sum(rates) / len(rates) if rates else 0.0

    if client_counts:
        low_volume = _percentile_value(client_counts, PERCENTILE_LOW)
        high_volume = _percentile_value(client_counts, PERCENTILE_HIGH)
    else:
        low_volume = high_volume = 0

    if rates:
        high_conversion = _percentile_value(rates, PERCENTILE_HIGH)
        low_conversion = _percentile_value(rates, PERCENTILE_LOW)
    else:
        high_conversion = min(
            100.0,
            max(HIGH_CONVERSION_THRESHOLD_MIN, average_rate + CONVERSION_THRESHOLD_ADJUSTMENT),
        )
        low_conversion = max(
            0.0,
            min(LOW_CONVERSION_THRESHOLD_MAX, average_rate - CONVERSION_THRESHOLD_ADJUSTMENT),
        )

    return WatchThresholds(
        low_volume=low_volume,
        high_volume=high_volume,
        low_conversion=low_conversion,
        high_conversion=high_conversion,
    )


def find_industries_to_watch(
    rows: Iterable[Mapping[str, Any]],
    logger=None,
) -> IndustriesToWatch:
    """Segment reliable industries into expansion opportunities and strategy needed."""
    all_industries = [stats.to_summary() for stats in build_industry_stats(rows)]
    industries = [item for item in all_industries if item.clients >= MIN_CLIENTS_FOR_RELIABILITY]

    if logger is not None:
        logger.debug(
            f"Industries found: {len(all_industries)}, "
            f"with {MIN_CLIENTS_FOR_RELIABILITY}+ clients: {len(industries)}"
        )

    if not industries:
        if logger is not None:
            logger.warning("No industries meet minimum reliability threshold")
        return IndustriesToWatch()

    thresholds = compute_watch_thresholds(industries)

    if logger is not None:
        logger.debug(
            f"Thresholds - low volume: {thresholds.low_volume}, high volume: {thresholds.high_volume}, "
            f"high conversion: {thresholds.high_conversion:.2f}%, low conversion: {thresholds.low_conversion:.2f}%"
        )

    expansion = [
        item for item in industries
        if item.clients <= thresholds.low_volume and item.conversionRate >= thresholds.high_conversion
    ]
    expansion.sort(key=lambda item: item.conversionRate, reverse=True)

    strategy = [
        item for item in industries
        if item.clients >= thresholds.high_volume and item.conversionRate <= thresholds.low_conversion
    ]
    strategy.sort(key=lambda item: item.clients, reverse=True)

    return IndustriesToWatch(
        expansionOpportunities=expansion[:TOP_INDUSTRIES],
        strategyNeeded=strategy[:TOP_INDUSTRIES],
    )


# =============================================================================
# New Industries Last Month
# =============================================================================

def previous_month_window(reference: date) -> Tuple[datetime, datetime]:
    """
    The calendar month before the reference date, as naive UTC datetimes.

    >>> previous_month_window(date(2024, 1, 10))
    (datetime.datetime(2023, 12, 1, 0, 0), datetime.datetime(2024, 1, 1, 0, 0))
    """
    end = datetime(reference.year, reference.month, 1)
    if reference.month == 1:
        start = datetime(reference.year - 1, 12, 1)
    else:
        start = datetime(reference.year, reference.month - 1, 1)
    return start, end


def find_new_industries(
    window_rows: Iterable[Mapping[str, Any]],
    earlier_industries: Set[str],
    month_label: str,
) -> NewIndustriesLastMonth:
    """
    Industries present in the window but never seen before it.

    Args:
        window_rows: Processed rows (industry, closed) dated inside the window.
        earlier_industries: Industries of processed rows dated before the window.
        month_label: Display label of the window, e.g. 'October 2024'.
    """
    new_industries = [
        stats.to_summary()
        for stats in build_industry_stats(window_rows)
        if stats.industry not in earlier_industries
    ]
    new_industries.sort(key=lambda item: item.clients, reverse=True)
    return NewIndustriesLastMonth(industries=new_industries, month=month_label)


# =============================================================================
# Service
# =============================================================================

class IndustriesService:
    """Industry ranking, new industries and industries to watch."""

    def __init__(self, pool: Pool, reference_date: Optional[date] = None, logger=None):
        self.pool = pool
        self.reference_date = reference_date
        self.logger = logger or get_component_logger('IndustriesService')

    def _today(self) -> date:
        return self.reference_date or datetime.now(timezone.utc).date()

    async def _fetch(self, query: str, *args: Any) -> List[Mapping[str, Any]]:
        async with self.pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def get_industries_detailed_ranking(self) -> List[IndustryRanking]:
        try:
            rows = await self._fetch(SELECT_INDUSTRY_ROWS)
        except Exception:
            self.logger.error("Error getting industries detailed ranking", exc_info=True)
            raise
        return rank_industries(rows)

    async def get_new_industries_last_month(self) -> NewIndustriesLastMonth:
        start, end = previous_month_window(self._today())
        try:
            window_rows, earlier_rows = await asyncio.gather(
                self._fetch(SELECT_INDUSTRY_ROWS_IN_WINDOW, start, end),
                self._fetch(SELECT_INDUSTRIES_BEFORE, start),
            )
        except Exception:
            self.logger.error("Error getting new industries for last month", exc_info=True)
            raise

        earlier = {row['industry'] for row in earlier_rows}
        return find_new_industries(window_rows, earlier, start.strftime('%B %Y'))

    async def get_industries_to_watch(self) -> IndustriesToWatch:
        try:
            rows = await self._fetch(SELECT_INDUSTRY_ROWS)
        except Exception:
            self.logger.error("Error getting industries to watch", exc_info=True)
            raise
        return find_industries_to_watch(rows, logger=self.logger)
