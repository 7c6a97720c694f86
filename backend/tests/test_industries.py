"""
Test Module for Industry Analytics.

Validates:
- Detailed ranking with averaged sentiment / urgency labels
- Industries-to-watch percentile thresholds (floor(n * p) indexing)
- The reliability minimum of 3 clients per industry
- The five-entry cap; a lone reliable industry lands in both lists
- Repeated calls over the same rows agree
- Previous-month window arithmetic, including the January rollover
- New industries detection against everything seen before the window
"""

import copy
from datetime import date, datetime

import pytest

from backend.models import IndustrySummary
from backend.services.industries import (
    IndustriesService,
    average_sentiment_label,
    average_urgency_label,
    compute_watch_thresholds,
    find_industries_to_watch,
    find_new_industries,
    previous_month_window,
    rank_industries,
)


def _rows(industry, total, closed):
    return [{'industry': industry, 'closed': index < closed} for index in range(total)]


class TestAverageLabels:

    def test_sentiment_thresholds(self):
        assert average_sentiment_label(['positive', 'positive', 'neutral']) == 'positive'
        assert average_sentiment_label(['positive', 'skeptical']) == 'neutral'
        assert average_sentiment_label(['skeptical', 'skeptical', 'neutral']) == 'skeptical'

    def test_unknown_labels_score_as_middle(self):
        assert average_sentiment_label(['excited', 'excited']) == 'neutral'

    def test_empty_defaults_to_middle(self):
        assert average_sentiment_label([]) == 'neutral'
        assert average_urgency_label([]) == 'planned'

    def test_urgency_thresholds(self):
        assert average_urgency_label(['immediate', 'planned']) == 'immediate'
        assert average_urgency_label(['exploratory', 'planned']) == 'exploratory'


class TestRankIndustries:

    def test_sorted_by_clients_with_labels(self, industry_rows):
        ranking = rank_industries(industry_rows)

        assert [item.industry for item in ranking] == ['health', 'retail', 'finance', 'logistics']
        retail = ranking[1]
        assert retail.closed == 3
        assert retail.conversionRate == 75.0
        assert retail.averageSentiment == 'positive'
        assert retail.averageUrgency == 'immediate'
        assert ranking[0].averageSentiment == 'skeptical'
        assert ranking[0].averageUrgency == 'exploratory'

    def test_null_industry_skipped(self):
        assert rank_industries([{'industry': None, 'closed': True}]) == []


class TestWatchThresholds:

    def test_percentile_indexing(self):
        summaries = [
            IndustrySummary(industry='a', clients=3, closed=1, conversionRate=33.33),
            IndustrySummary(industry='b', clients=4, closed=3, conversionRate=75.0),
            IndustrySummary(industry='c', clients=5, closed=0, conversionRate=0.0),
        ]

        thresholds = compute_watch_thresholds(summaries)

        assert thresholds.low_volume == 3
        assert thresholds.high_volume == 5
        assert thresholds.low_conversion == 0.0
        assert thresholds.high_conversion == 75.0

    def test_empty_input_uses_fallbacks(self):
        thresholds = compute_watch_thresholds([])

        assert thresholds.low_volume == 0
        assert thresholds.high_conversion == 60.0
        assert thresholds.low_conversion == 0.0


class TestIndustriesToWatch:

    def test_segments(self):
        rows = _rows('boutique', 3, 3) + _rows('middle', 4, 2) + _rows('enterprise', 6, 0)

        result = find_industries_to_watch(rows)

        assert [item.industry for item in result.expansionOpportunities] == ['boutique']
        assert result.expansionOpportunities[0].conversionRate == 100.0
        assert [item.industry for item in result.strategyNeeded] == ['enterprise']

    def test_unreliable_industries_excluded(self, industry_rows):
        result = find_industries_to_watch(industry_rows)

        all_listed = result.expansionOpportunities + result.strategyNeeded
        assert 'logistics' not in {item.industry for item in all_listed}
        assert [item.industry for item in result.strategyNeeded] == ['health']

    def test_no_reliable_industry(self):
        result = find_industries_to_watch(_rows('tiny', 2, 2))

        assert result.expansionOpportunities == []
        assert result.strategyNeeded == []

    def test_lists_capped_at_five(self):
        rows = []
        for index in range(10):
            rows += _rows(f'small-{index}', 3, 3)
        for index in range(10):
            rows += _rows(f'large-{index}', 10, 0)

        result = find_industries_to_watch(rows)

        assert [item.industry for item in result.expansionOpportunities] == [
            f'small-{index}' for index in range(5)
        ]
        assert [item.industry for item in result.strategyNeeded] == [
            f'large-{index}' for index in range(5)
        ]

    def test_single_reliable_industry_in_both_lists(self):
        rows = _rows('solo', 4, 2) + _rows('tiny', 2, 2)

        result = find_industries_to_watch(rows)

        assert [item.industry for item in result.expansionOpportunities] == ['solo']
        assert [item.industry for item in result.strategyNeeded] == ['solo']
        assert result.strategyNeeded[0].conversionRate == 50.0

    def test_repeated_calls_give_same_result(self, industry_rows):
        snapshot = copy.deepcopy(industry_rows)

        first = find_industries_to_watch(industry_rows)
        second = find_industries_to_watch(industry_rows)

        assert first == second
        assert rank_industries(industry_rows) == rank_industries(industry_rows)
        assert industry_rows == snapshot


class TestNewIndustries:

    def test_previous_month_window(self):
        assert previous_month_window(date(2024, 5, 20)) == (datetime(2024, 4, 1), datetime(2024, 5, 1))

    def test_previous_month_window_january(self):
        assert previous_month_window(date(2024, 1, 1)) == (datetime(2023, 12, 1), datetime(2024, 1, 1))

    def test_only_unseen_industries(self):
        window_rows = _rows('retail', 2, 1) + _rows('mining', 3, 3) + _rows('gaming', 1, 0)

        result = find_new_industries(window_rows, {'retail'}, 'April 2024')

        assert result.month == 'April 2024'
        assert [item.industry for item in result.industries] == ['mining', 'gaming']
        assert result.industries[0].conversionRate == 100.0

    @pytest.mark.asyncio
    async def test_service_queries_window_and_history(self, mock_db_pool):
        mock_db_pool.conn.fetch.side_effect = [
            _rows('mining', 2, 1),
            [{'industry': 'retail'}],
        ]
        service = IndustriesService(mock_db_pool, reference_date=date(2024, 5, 20))

        result = await service.get_new_industries_last_month()

        assert result.month == 'April 2024'
        assert result.industries[0].industry == 'mining'
        window_call, history_call = mock_db_pool.conn.fetch.await_args_list
        assert window_call.args[1:] == (datetime(2024, 4, 1), datetime(2024, 5, 1))
        assert history_call.args[1:] == (datetime(2024, 4, 1),)
