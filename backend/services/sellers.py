"""
Seller analytics: conversion per seller, weekly podium, annual ranking,
closed-deal timeline, dimension correlations and month-over-month insights.

Key Functions:
- build_seller_metrics: Per-seller totals sorted by conversion rate
- current_week_start / week_window: Seven-day window for the weekly podium
- rank_week_podium: Top sellers by closed deals inside the window
- rank_annual_sellers: Sellers with at least one closed deal in a year
- period_key / build_sellers_timeline: Closed deals per seller per week or month
- find_seller_correlations: Dimension values where a seller stands out
- build_seller_insights: Rule-based month-over-month observations

Week keys:
    A week key is YYYY-Www with
    week = ceil((days since Jan 1 + weekday of Jan 1 + 1) / 7), where the
    weekday counts from Sunday = 0 and elapsed days are whole UTC days, so
    weeks run Sunday to Saturday. It is not the ISO week number.

All timestamps are naive UTC, as stored in the clients table.
"""

import asyncio
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from asyncpg import Pool

from backend.core.errors import InvalidWeekStartError
from backend.core.logging import get_component_logger
from backend.models import (
    AnnualSellerRanking,
    Dimension,
    Granularity,
    SellerCorrelation,
    SellerInsight,
    SellerMetrics,
    SellerOfWeek,
    SellerTimelinePoint,
    UrgencyLevel,
    WeekRange,
)
from backend.services.industries import previous_month_window
from backend.services.metrics import conversion_rate, round_half_up
from backend.sql import (
    SELECT_CLOSED_SELLER_DATES,
    SELECT_SELLER_CORRELATION_ROWS,
    SELECT_SELLER_ROWS_IN_WINDOW,
    SELECT_SELLER_ROWS_SINCE,
    SELECT_SELLER_TOTALS,
)


# =============================================================================
# CONSTANTS
# =============================================================================

CURRENT_WEEK = 'current'
WEEK_LENGTH = timedelta(days=7)
TOP_SELLERS = 3

MIN_CLIENTS_FOR_RELIABILITY = 3

# A seller/value pair is relevant when any of these holds
HIGH_SUCCESS_RATE = 70.0
ABOVE_SELLER_AVERAGE = 15.0
ABOVE_OVERALL_AVERAGE = 10.0

CORRELATION_DIMENSIONS: Tuple[str, ...] = (
    Dimension.INDUSTRY.value,
    Dimension.OPERATION_SIZE.value,
    Dimension.URGENCY_LEVEL.value,
    Dimension.SENTIMENT.value,
    Dimension.DISCOVERY_SOURCE.value,
)

SIGNIFICANT_CHANGE = 15.0
ATYPICAL_LOW_URGENCY_DEALS = 3


@dataclass
class _Tally:
    total: int = 0
    closed: int = 0

    def add(self, closed: bool) -> None:
        self.total += 1
        if closed:
            self.closed += 1

    @property
    def rate(self) -> float:
        return conversion_rate(self.closed, self.total)


def _tally_by_seller(rows: Iterable[Mapping[str, Any]]) -> Dict[str, _Tally]:
    tallies: Dict[str, _Tally] = defaultdict(_Tally)
    for row in rows:
        seller = row.get('assignedSeller')
        if seller:
            tallies[seller].add(bool(row.get('closed')))
    return tallies


def _to_metrics(seller: str, tally: _Tally) -> SellerMetrics:
    return SellerMetrics(seller=seller, total=tally.total, closed=tally.closed, conversionRate=tally.rate)


# =============================================================================
# Seller Metrics
# =============================================================================

def build_seller_metrics(rows: Iterable[Mapping[str, Any]]) -> List[SellerMetrics]:
    """Grouped (seller, total, closed_count) rows, sorted by conversion rate descending."""
    metrics = [
        SellerMetrics(
            seller=row['seller'],
            total=row['total'],
            closed=row['closed_count'] or 0,
            conversionRate=conversion_rate(row['closed_count'] or 0, row['total']),
        )
        for row in rows
        if row['seller']
    ]
    metrics.sort(key=lambda item: item.conversionRate, reverse=True)
    return metrics


# =============================================================================
# Seller Of The Week
# =============================================================================

def current_week_start(reference: date) -> datetime:
    """Monday 00:00 of the reference date's week."""
    monday = reference - timedelta(days=reference.weekday())
    return datetime(monday.year, monday.month, monday.day)


def parse_week_start(week_start: Optional[str], reference: date) -> datetime:
    """
    Resolve the weekStart query value.

    None or 'current' means the current week. Anything else must be an ISO
    date (a time part is dropped) and is used as-is, even if not a Monday.

    Raises:
        InvalidWeekStartError: If the value is not a date.
    """
    if not week_start or week_start == CURRENT_WEEK:
        return current_week_start(reference)
    try:
        parsed = datetime.fromisoformat(week_start.strip())
    except ValueError:
        raise InvalidWeekStartError(week_start)
    return datetime(parsed.year, parsed.month, parsed.day)


def week_window(start: datetime, year: Optional[int] = None) -> Tuple[datetime, datetime]:
    """
    [start, start + 7 days), clamped to the given calendar year.

    The clamped window may be empty when the week lies outside the year.
    """
    end = start + WEEK_LENGTH
    if year is not None:
        start = max(start, datetime(year, 1, 1))
        end = min(end, datetime(year + 1, 1, 1))
    return start, end


def rank_week_podium(rows: Iterable[Mapping[str, Any]], limit: int = TOP_SELLERS) -> List[SellerMetrics]:
    """Top sellers by closed deals; ties keep first-seen order."""
    podium = [_to_metrics(seller, tally) for seller, tally in _tally_by_seller(rows).items()]
    podium.sort(key=lambda item: item.closed, reverse=True)
    return podium[:limit]


def format_week_range(start: datetime) -> WeekRange:
    return WeekRange(
        start=start.date().isoformat(),
        end=(start + WEEK_LENGTH - timedelta(days=1)).date().isoformat(),
    )


# =============================================================================
# Annual Ranking
# =============================================================================

def year_window(year: int) -> Tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime(year + 1, 1, 1)


def rank_annual_sellers(rows: Iterable[Mapping[str, Any]]) -> List[SellerMetrics]:
    """
    Sellers with at least one closed deal, sorted by closed deals descending.

    total counts every client of the seller in the rows, closed or not.
    """
    ranking = [
        _to_metrics(seller, tally)
        for seller, tally in _tally_by_seller(rows).items()
        if tally.closed > 0
    ]
    ranking.sort(key=lambda item: item.closed, reverse=True)
    return ranking


# =============================================================================
# Sellers Timeline
# =============================================================================

def week_number(moment: datetime) -> int:
    first_day = date(moment.year, 1, 1)
    elapsed_days = (moment.date() - first_day).days
    # Sunday = 0, as in the dashboard's week labels
    first_weekday = (first_day.weekday() + 1) % 7
    return math.ceil((elapsed_days + first_weekday + 1) / 7)


def period_key(moment: datetime, granularity: Union[Granularity, str]) -> str:
    """YYYY-Www for weeks, YYYY-MM for months."""
    if Granularity(granularity) is Granularity.WEEK:
        return f"{moment.year}-W{week_number(moment):02d}"
    return f"{moment.year}-{moment.month:02d}"


def build_sellers_timeline(
    rows: Iterable[Mapping[str, Any]],
    granularity: Union[Granularity, str] = Granularity.WEEK,
) -> List[SellerTimelinePoint]:
    """
    Closed deals per seller per period, periods in ascending order.

    Args:
        rows: Closed (assignedSeller, meetingDate) rows.
        granularity: week or month.
    """
    rows = [row for row in rows if row.get('assignedSeller') and row.get('meetingDate')]
    sellers = list(dict.fromkeys(row['assignedSeller'] for row in rows))

    periods: Dict[str, Dict[str, int]] = {}
    for row in rows:
        key = period_key(row['meetingDate'], granularity)
        counts = periods.get(key)
        if counts is None:
            counts = periods[key] = dict.fromkeys(sellers, 0)
        counts[row['assignedSeller']] += 1

    return [SellerTimelinePoint(period=key, sellers=periods[key]) for key in sorted(periods)]


# =============================================================================
# Correlations
# =============================================================================

def _tally_by_value(rows: Iterable[Mapping[str, Any]], dimension: str) -> Dict[str, _Tally]:
    tallies: Dict[str, _Tally] = defaultdict(_Tally)
    for row in rows:
        value = row.get(dimension)
        if value:
            tallies[value].add(bool(row.get('closed')))
    return tallies


def overall_dimension_averages(
    rows: Sequence[Mapping[str, Any]],
    dimensions: Sequence[str] = CORRELATION_DIMENSIONS,
) -> Dict[str, Dict[str, float]]:
    """Conversion rate per dimension value, only for values with enough clients."""
    return {
        dimension: {
            value: tally.rate
            for value, tally in _tally_by_value(rows, dimension).items()
            if tally.total >= MIN_CLIENTS_FOR_RELIABILITY
        }
        for dimension in dimensions
    }


def is_relevant_correlation(success_rate: float, seller_average: float, overall_average: float) -> bool:
    return (
        success_rate >= HIGH_SUCCESS_RATE
        or success_rate > seller_average + ABOVE_SELLER_AVERAGE
        or success_rate > overall_average + ABOVE_OVERALL_AVERAGE
    )


def find_seller_correlations(rows: Iterable[Mapping[str, Any]]) -> List[SellerCorrelation]:
    """
    Dimension values where each seller converts notably well.

    Sellers are visited in name order and dimensions in CORRELATION_DIMENSIONS
    order. A value needs MIN_CLIENTS_FOR_RELIABILITY clients of the seller to
    be considered; a value without an overall average compares against 0.
    """
    rows = list(rows)
    averages = overall_dimension_averages(rows)

    by_seller: Dict[str, List[Mapping[str, Any]]] = defaultdict(list)
    for row in rows:
        if row.get('assignedSeller'):
            by_seller[row['assignedSeller']].append(row)

    correlations: List[SellerCorrelation] = []
    for seller in sorted(by_seller):
        seller_rows = by_seller[seller]
        seller_closed = sum(1 for row in seller_rows if row.get('closed'))
        seller_average = seller_closed / len(seller_rows) * 100

        for dimension in CORRELATION_DIMENSIONS:
            for value, tally in _tally_by_value(seller_rows, dimension).items():
                if tally.total < MIN_CLIENTS_FOR_RELIABILITY:
                    continue
                overall = averages[dimension].get(value, 0.0)
                if not is_relevant_correlation(tally.rate, seller_average, overall):
                    continue
                correlations.append(SellerCorrelation(
                    seller=seller,
                    dimension=dimension,
                    value=value,
                    total=tally.total,
                    closed=tally.closed,
                    successRate=tally.rate,
                    sellerAvgConversion=round_half_up(seller_average),
                    overallAvg=round_half_up(overall),
                    performanceVsAvg=round_half_up(tally.rate - overall),
                ))
    return correlations


# =============================================================================
# Month-over-Month Insights
# =============================================================================

def build_seller_insights(
    current_rows: Sequence[Mapping[str, Any]],
    previous_rows: Sequence[Mapping[str, Any]],
) -> List[SellerInsight]:
    """
    Observations per seller, comparing this month's rows with last month's.

    - Closed deals changed by at least SIGNIFICANT_CHANGE percent (only when
      the seller closed something last month): a positive or negative
      'conversions' insight.
    - At least ATYPICAL_LOW_URGENCY_DEALS exploratory clients closed this
      month: a neutral 'urgency' insight.

    Sellers are visited in first-seen order, current month first.
    """
    sellers = list(dict.fromkeys(
        row['assignedSeller']
        for row in (*current_rows, *previous_rows)
        if row.get('assignedSeller')
    ))

    def closed_count(rows, seller, urgency=None):
        return sum(
            1 for row in rows
            if row.get('assignedSeller') == seller and row.get('closed')
            and (urgency is None or row.get('urgencyLevel') == urgency)
        )

    insights: List[SellerInsight] = []
    for seller in sellers:
        current_closed = closed_count(current_rows, seller)
        previous_closed = closed_count(previous_rows, seller)

        if previous_closed > 0:
            change = (current_closed - previous_closed) / previous_closed * 100
            if abs(change) >= SIGNIFICANT_CHANGE:
                direction = 'increased' if change > 0 else 'decreased'
                insights.append(SellerInsight(
                    seller=seller,
                    type='positive' if change > 0 else 'negative',
                    metric='conversions',
                    message=f"{seller} {direction} conversions by {abs(change):.0f}% compared to last month",
                    change=round_half_up(change),
                ))

        low_urgency = closed_count(current_rows, seller, UrgencyLevel.EXPLORATORY.value)
        if low_urgency >= ATYPICAL_LOW_URGENCY_DEALS:
            insights.append(SellerInsight(
                seller=seller,
                type='neutral',
                metric='urgency',
                message=f"{seller} closed {low_urgency} deals with low urgency clients (atypical pattern)",
                change=0.0,
            ))
    return insights


# =============================================================================
# Service
# =============================================================================

class SellersService:
    """Seller metrics, rankings, timeline, correlations and insights."""

    def __init__(self, pool: Pool, reference_date: Optional[date] = None, logger=None):
        self.pool = pool
        self.reference_date = reference_date
        self.logger = logger or get_component_logger('SellersService')

    def _today(self) -> date:
        return self.reference_date or datetime.now(timezone.utc).date()

    async def _fetch(self, query: str, *args: Any) -> List[Mapping[str, Any]]:
        async with self.pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def get_seller_metrics(self) -> List[SellerMetrics]:
        try:
            rows = await self._fetch(SELECT_SELLER_TOTALS)
        except Exception:
            self.logger.error("Error getting seller metrics", exc_info=True)
            raise
        return build_seller_metrics(rows)

    async def get_seller_of_week(
        self, week_start: Optional[str] = None, year: Optional[int] = None
    ) -> SellerOfWeek:
        """
        Raises:
            InvalidWeekStartError: Before any query, if week_start is not a date.
        """
        start = parse_week_start(week_start, self._today())
        window_start, window_end = week_window(start, year)
        try:
            rows = await self._fetch(SELECT_SELLER_ROWS_IN_WINDOW, window_start, window_end)
        except Exception:
            self.logger.error("Error getting seller of the week", exc_info=True)
            raise
        return SellerOfWeek(weekPodium=rank_week_podium(rows), weekRange=format_week_range(start))

    async def get_annual_seller_ranking(self, year: Optional[int] = None) -> AnnualSellerRanking:
        selected_year = year or self._today().year
        try:
            rows = await self._fetch(SELECT_SELLER_ROWS_IN_WINDOW, *year_window(selected_year))
        except Exception:
            self.logger.error(f"Error getting annual seller ranking for {selected_year}", exc_info=True)
            raise
        return AnnualSellerRanking(year=selected_year, ranking=rank_annual_sellers(rows))

    async def get_sellers_timeline(
        self, granularity: Granularity = Granularity.WEEK
    ) -> List[SellerTimelinePoint]:
        try:
            rows = await self._fetch(SELECT_CLOSED_SELLER_DATES)
        except Exception:
            self.logger.error("Error getting sellers timeline", exc_info=True)
            raise
        return build_sellers_timeline(rows, granularity)

    async def get_seller_correlations(self) -> List[SellerCorrelation]:
        try:
            rows = await self._fetch(SELECT_SELLER_CORRELATION_ROWS)
        except Exception:
            self.logger.error("Error getting seller correlations", exc_info=True)
            raise
        correlations = find_seller_correlations(rows)
        self.logger.debug(f"Seller correlations found: {len(correlations)}")
        return correlations

    async def get_seller_insights(self) -> List[SellerInsight]:
        previous_start, current_start = previous_month_window(self._today())
        try:
            current_rows, previous_rows = await asyncio.gather(
                self._fetch(SELECT_SELLER_ROWS_SINCE, current_start),
                self._fetch(SELECT_SELLER_ROWS_IN_WINDOW, previous_start, current_start),
            )
        except Exception:
            self.logger.error("Error getting seller insights", exc_info=True)
            raise
        return build_seller_insights(current_rows, previous_rows)
