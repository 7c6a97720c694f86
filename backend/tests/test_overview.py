"""
Test Module for Overview and Dimension Aggregation.

Covers:
- Half-up rounding and conversion rate helpers
- Mode selection with first-seen tie breaking
- Overview assembly and the concurrent count queries
- Dimension validation (rejected before any query) and grouped-row mapping
- Conversion analysis across the five dimensions and the daily timeline
"""

from datetime import datetime, timezone

import pytest

from backend.core.errors import InvalidDimensionError
from backend.models import Dimension
from backend.services.conversion import ConversionAnalysisService, group_meetings_by_day
from backend.services.metrics import (
    as_utc,
    conversion_rate,
    dominant_value,
    round_half_up,
    to_naive_utc,
)
from backend.services.overview import (
    OverviewService,
    build_dimension_metrics,
    build_overview,
    get_dimension_column,
)


# =============================================================================
# Metrics Helpers
# =============================================================================


class TestRounding:
    """Rates round half-up on the exact binary value."""

    def test_exact_half_rounds_up(self):
        assert round_half_up(12.5, 0) == 13.0
        assert round_half_up(0.125, 2) == 0.13

    def test_binary_value_below_half_rounds_down(self):
        # 2.675 is stored as 2.67499999...
        assert round_half_up(2.675, 2) == 2.67

    def test_conversion_rate_two_decimals(self):
        assert conversion_rate(1, 3) == 33.33
        assert conversion_rate(2, 3) == 66.67

    def test_conversion_rate_one_decimal(self):
        assert conversion_rate(2, 3, 1) == 66.7

    def test_conversion_rate_zero_count(self):
        assert conversion_rate(0, 0) == 0.0


class TestDominantValue:

    def test_most_frequent_value(self):
        assert dominant_value(['neutral', 'positive', 'positive'], 'neutral') == 'positive'

    def test_tie_goes_to_first_seen(self):
        assert dominant_value(['skeptical', 'positive', 'positive', 'skeptical'], 'neutral') == 'skeptical'

    def test_nulls_ignored_and_default_when_empty(self):
        assert dominant_value([None, None], 'neutral') == 'neutral'
        assert dominant_value([None, 'positive'], 'neutral') == 'positive'


class TestUtcHelpers:

    def test_naive_is_treated_as_utc(self):
        assert as_utc(datetime(2024, 1, 31, 23, 30)).tzinfo == timezone.utc

    def test_aware_is_converted_and_stripped(self):
        from datetime import timedelta

        moment = datetime(2024, 1, 31, 22, 0, tzinfo=timezone(timedelta(hours=-3)))
        assert to_naive_utc(moment) == datetime(2024, 2, 1, 1, 0)


# =============================================================================
# Overview
# =============================================================================


class TestBuildOverview:

    def test_derived_counts(self):
        overview = build_overview(total=10, closed=3, processed=8)

        assert overview.totalOpen == 7
        assert overview.unprocessedClients == 2
        assert overview.conversionRate == 30.0

    def test_empty_store(self):
        overview = build_overview(0, 0, 0)

        assert overview.totalClients == 0
        assert overview.conversionRate == 0.0


class TestOverviewService:

    @pytest.mark.asyncio
    async def test_get_overview_runs_three_counts(self, mock_db_pool):
        mock_db_pool.conn.fetchval.side_effect = [3, 1, 2]

        overview = await OverviewService(mock_db_pool).get_overview()

        assert mock_db_pool.conn.fetchval.await_count == 3
        assert overview.totalClients == 3
        assert overview.totalClosed == 1
        assert overview.processedClients == 2
        assert overview.conversionRate == 33.33

    @pytest.mark.asyncio
    async def test_get_overview_propagates_errors(self, mock_db_pool):
        mock_db_pool.conn.fetchval.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            await OverviewService(mock_db_pool).get_overview()

    @pytest.mark.asyncio
    async def test_invalid_dimension_rejected_before_query(self, mock_db_pool):
        with pytest.raises(InvalidDimensionError) as exc_info:
            await OverviewService(mock_db_pool).get_metrics_by_dimension('color')

        assert 'color' in str(exc_info.value)
        mock_db_pool.acquire.assert_not_called()

    @pytest.mark.asyncio
    async def test_metrics_by_dimension(self, mock_db_pool):
        mock_db_pool.conn.fetch.return_value = [
            {'value': 'positive', 'count': 4, 'closed_count': 3},
            {'value': 'neutral', 'count': 2, 'closed_count': 0},
        ]

        metrics = await OverviewService(mock_db_pool).get_metrics_by_dimension('sentiment')

        assert metrics.dimension == 'sentiment'
        assert [item.value for item in metrics.values] == ['positive', 'neutral']
        assert metrics.values[0].conversionRate == 75.0
        assert metrics.values[0].totalInteractionVolume is None


class TestDimensionMapping:

    def test_enum_and_string_accepted(self):
        assert get_dimension_column(Dimension.URGENCY_LEVEL) == 'urgencyLevel'
        assert get_dimension_column('discoverySource') == 'discoverySource'

    def test_industry_carries_total_volume(self):
        metrics = build_dimension_metrics('industry', [
            {'value': 'retail', 'count': 2, 'closed_count': 1, 'total_interaction_volume': 300},
            {'value': 'health', 'count': 5, 'closed_count': None, 'total_interaction_volume': None},
        ])

        assert [item.value for item in metrics.values] == ['health', 'retail']
        assert metrics.values[0].closed == 0
        assert metrics.values[0].totalInteractionVolume == 0
        assert metrics.values[1].totalInteractionVolume == 300

    def test_empty_rows(self):
        assert build_dimension_metrics('sentiment', []).values == []


# =============================================================================
# Conversion Analysis and Timeline
# =============================================================================


class TestConversionAnalysis:

    @pytest.mark.asyncio
    async def test_all_five_dimensions_queried(self, mock_db_pool):
        mock_db_pool.conn.fetch.return_value = [{'value': 'x', 'count': 1, 'closed_count': 1}]

        analysis = await ConversionAnalysisService(mock_db_pool).get_conversion_analysis()

        assert mock_db_pool.conn.fetch.await_count == 5
        assert analysis.byIndustry.dimension == 'industry'
        assert analysis.byOperationSize.dimension == 'operationSize'
        assert analysis.byDiscovery.values[0].conversionRate == 100.0

    def test_group_meetings_by_day(self):
        rows = [
            {'meetingDate': datetime(2024, 1, 2, 10), 'closed': True},
            {'meetingDate': datetime(2024, 1, 1, 9), 'closed': False},
            {'meetingDate': datetime(2024, 1, 2, 18), 'closed': False},
        ]

        timeline = group_meetings_by_day(rows)

        assert [(item.date, item.total, item.closed) for item in timeline] == [
            ('2024-01-01', 1, 0),
            ('2024-01-02', 2, 1),
        ]

    def test_group_meetings_uses_utc_day(self):
        from datetime import timedelta

        late_evening = datetime(2024, 1, 1, 22, 0, tzinfo=timezone(timedelta(hours=-3)))

        timeline = group_meetings_by_day([{'meetingDate': late_evening, 'closed': False}])

        assert timeline[0].date == '2024-01-02'
