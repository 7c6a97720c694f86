"""
Test Module for Seller Analytics.

Validates:
- Seller metrics sorted by conversion rate
- Week resolution: current Monday, explicit ISO dates, invalid input, year clamp
- Weekly podium capped at three sellers and the annual ranking filter
- Sunday-based week keys and zero-filled timeline periods
- Correlation relevance rules over the reliability minimum
- Month-over-month seller insights
"""

from datetime import date, datetime

import pytest

from backend.core.errors import InvalidWeekStartError
from backend.models import Granularity
from backend.services.sellers import (
    SellersService,
    build_seller_insights,
    build_seller_metrics,
    build_sellers_timeline,
    current_week_start,
    find_seller_correlations,
    format_week_range,
    parse_week_start,
    period_key,
    rank_annual_sellers,
    rank_week_podium,
    week_window,
)
from backend.sql import (
    SELECT_SELLER_ROWS_IN_WINDOW,
    SELECT_SELLER_ROWS_SINCE,
)


def _rows(seller, total, closed, **fields):
    return [
        {'assignedSeller': seller, 'closed': index < closed, **fields}
        for index in range(total)
    ]


class TestSellerMetrics:

    def test_sorted_by_conversion_rate(self):
        metrics = build_seller_metrics([
            {'seller': 'Ana', 'total': 4, 'closed_count': 1},
            {'seller': 'Bea', 'total': 2, 'closed_count': 2},
            {'seller': 'Carl', 'total': 3, 'closed_count': 0},
        ])

        assert [item.seller for item in metrics] == ['Bea', 'Ana', 'Carl']
        assert [item.conversionRate for item in metrics] == [100.0, 25.0, 0.0]

    @pytest.mark.asyncio
    async def test_service_uses_grouped_query(self, mock_db_pool):
        mock_db_pool.conn.fetch.return_value = [{'seller': 'Ana', 'total': 3, 'closed_count': 1}]

        metrics = await SellersService(mock_db_pool).get_seller_metrics()

        assert metrics[0].conversionRate == 33.33


class TestSellerOfWeek:

    def test_current_week_starts_on_monday(self):
        assert current_week_start(date(2024, 3, 14)) == datetime(2024, 3, 11)
        assert current_week_start(date(2024, 3, 17)) == datetime(2024, 3, 11)
        assert current_week_start(date(2024, 3, 11)) == datetime(2024, 3, 11)

    def test_parse_week_start(self):
        reference = date(2024, 3, 14)

        assert parse_week_start(None, reference) == datetime(2024, 3, 11)
        assert parse_week_start('current', reference) == datetime(2024, 3, 11)
        assert parse_week_start('2024-03-13', reference) == datetime(2024, 3, 13)
        assert parse_week_start('2024-03-13T18:30:00', reference) == datetime(2024, 3, 13)

    def test_invalid_week_start(self):
        with pytest.raises(InvalidWeekStartError, match='last-week'):
            parse_week_start('last-week', date(2024, 3, 14))

    def test_week_window_clamped_to_year(self):
        start = datetime(2024, 12, 30)

        assert week_window(start) == (start, datetime(2025, 1, 6))
        assert week_window(start, 2024) == (start, datetime(2025, 1, 1))
        assert week_window(start, 2025) == (datetime(2025, 1, 1), datetime(2025, 1, 6))

    def test_week_range_is_seven_days(self):
        week_range = format_week_range(datetime(2024, 3, 11))

        assert week_range.start == '2024-03-11'
        assert week_range.end == '2024-03-17'

    def test_podium_top_three_by_closed(self):
        rows = _rows('Ana', 5, 1) + _rows('Bea', 4, 3) + _rows('Carl', 2, 2) + _rows('Dan', 6, 4)

        podium = rank_week_podium(rows)

        assert [item.seller for item in podium] == ['Dan', 'Bea', 'Carl']
        assert podium[0].total == 6
        assert podium[0].conversionRate == 66.67

    @pytest.mark.asyncio
    async def test_service_window_and_range(self, mock_db_pool):
        mock_db_pool.conn.fetch.return_value = _rows('Ana', 2, 1)
        service = SellersService(mock_db_pool, reference_date=date(2024, 3, 14))

        result = await service.get_seller_of_week()

        query, *params = mock_db_pool.conn.fetch.await_args.args
        assert query == SELECT_SELLER_ROWS_IN_WINDOW
        assert params == [datetime(2024, 3, 11), datetime(2024, 3, 18)]
        assert result.weekRange.start == '2024-03-11'
        assert result.weekPodium[0].seller == 'Ana'

    @pytest.mark.asyncio
    async def test_invalid_week_start_raised_before_query(self, mock_db_pool):
        with pytest.raises(InvalidWeekStartError):
            await SellersService(mock_db_pool).get_seller_of_week('soon')

        mock_db_pool.acquire.assert_not_called()


class TestAnnualRanking:

    def test_only_sellers_with_closed_deals(self):
        rows = _rows('Ana', 4, 1) + _rows('Bea', 3, 0) + _rows('Carl', 5, 3)

        ranking = rank_annual_sellers(rows)

        assert [item.seller for item in ranking] == ['Carl', 'Ana']
        assert ranking[1].total == 4
        assert ranking[1].conversionRate == 25.0

    @pytest.mark.asyncio
    async def test_defaults_to_reference_year(self, mock_db_pool):
        service = SellersService(mock_db_pool, reference_date=date(2024, 3, 14))

        result = await service.get_annual_seller_ranking()

        assert result.year == 2024
        assert result.ranking == []
        params = mock_db_pool.conn.fetch.await_args.args[1:]
        assert params == (datetime(2024, 1, 1), datetime(2025, 1, 1))


class TestSellersTimeline:

    def test_week_keys_run_sunday_to_saturday(self):
        # 2024-01-01 is a Monday
        assert period_key(datetime(2024, 1, 1, 9, 0), Granularity.WEEK) == '2024-W01'
        assert period_key(datetime(2024, 1, 6, 23, 0), Granularity.WEEK) == '2024-W01'
        assert period_key(datetime(2024, 1, 7), Granularity.WEEK) == '2024-W02'

    def test_month_key(self):
        assert period_key(datetime(2024, 3, 31, 23, 59), 'month') == '2024-03'

    def test_periods_sorted_and_zero_filled(self):
        rows = [
            {'assignedSeller': 'Ana', 'meetingDate': datetime(2024, 2, 10)},
            {'assignedSeller': 'Ana', 'meetingDate': datetime(2024, 1, 2)},
            {'assignedSeller': 'Bea', 'meetingDate': datetime(2024, 1, 3)},
            {'assignedSeller': None, 'meetingDate': datetime(2024, 1, 4)},
        ]

        timeline = build_sellers_timeline(rows, Granularity.MONTH)

        assert [point.period for point in timeline] == ['2024-01', '2024-02']
        assert timeline[0].sellers == {'Ana': 1, 'Bea': 1}
        assert timeline[1].sellers == {'Ana': 1, 'Bea': 0}

    def test_empty(self):
        assert build_sellers_timeline([]) == []


class TestSellerCorrelations:

    def test_relevant_values_only(self):
        rows = (
            _rows('Ana', 3, 3, industry='retail')
            + _rows('Ana', 3, 0, industry='finance')
            + _rows('Bea', 4, 1, industry='retail')
            + _rows('Bea', 2, 2, industry='health')
        )

        correlations = find_seller_correlations(rows)

        assert len(correlations) == 1
        correlation = correlations[0]
        assert (correlation.seller, correlation.dimension, correlation.value) == ('Ana', 'industry', 'retail')
        assert correlation.successRate == 100.0
        assert correlation.sellerAvgConversion == 50.0
        assert correlation.overallAvg == 57.14
        assert correlation.performanceVsAvg == 42.86

    def test_sellers_in_name_order(self):
        rows = _rows('Zoe', 3, 3, sentiment='positive') + _rows('Ana', 3, 3, sentiment='neutral')

        correlations = find_seller_correlations(rows)

        assert [item.seller for item in correlations] == ['Ana', 'Zoe']
        assert {item.dimension for item in correlations} == {'sentiment'}


class TestSellerInsights:

    def test_month_over_month_rules(self):
        current = (
            _rows('Ana', 3, 3, urgencyLevel='exploratory')
            + _rows('Bea', 3, 3, urgencyLevel='planned')
            + _rows('Dan', 9, 9, urgencyLevel='planned')
        )
        previous = (
            _rows('Ana', 2, 2)
            + _rows('Bea', 4, 4)
            + _rows('Carl', 2, 0)
            + _rows('Dan', 10, 10)
        )

        insights = build_seller_insights(current, previous)

        assert [(item.seller, item.type, item.metric) for item in insights] == [
            ('Ana', 'positive', 'conversions'),
            ('Ana', 'neutral', 'urgency'),
            ('Bea', 'negative', 'conversions'),
        ]
        assert insights[0].message == 'Ana increased conversions by 50% compared to last month'
        assert insights[0].change == 50.0
        assert insights[1].message == 'Ana closed 3 deals with low urgency clients (atypical pattern)'
        assert insights[2].change == -25.0

    @pytest.mark.asyncio
    async def test_service_month_windows(self, mock_db_pool):
        async def fetch(query, *args):
            if query == SELECT_SELLER_ROWS_SINCE:
                return _rows('Ana', 2, 2)
            return _rows('Ana', 1, 1)

        mock_db_pool.conn.fetch.side_effect = fetch
        service = SellersService(mock_db_pool, reference_date=date(2024, 3, 14))

        insights = await service.get_seller_insights()

        calls = {call.args[0]: call.args[1:] for call in mock_db_pool.conn.fetch.await_args_list}
        assert calls[SELECT_SELLER_ROWS_SINCE] == (datetime(2024, 3, 1),)
        assert calls[SELECT_SELLER_ROWS_IN_WINDOW] == (datetime(2024, 2, 1), datetime(2024, 3, 1))
        assert insights[0].change == 100.0
