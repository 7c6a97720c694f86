"""
Test Module for Pain Points, Technical Requirements and Volume Buckets.

Validates:
- Pain point normalization (case, whitespace, punctuation) and grouping
- Display spelling is the most frequent raw spelling, first seen on ties
- Per-occurrence counting, including duplicates inside one record
- Top-N truncation for pain points and technical requirements
- Fixed volume ranges with inclusive boundaries
"""

import pytest

from backend.services.pain_points import (
    TOP_PAIN_POINTS,
    VOLUME_RANGES,
    PainPointsService,
    aggregate_pain_points,
    aggregate_technical_requirements,
    bucket_volumes,
    normalize_pain_point,
)


class TestNormalizePainPoint:

    def test_case_whitespace_and_punctuation(self):
        assert normalize_pain_point('  High   Workload! ') == 'high workload'
        assert normalize_pain_point('slow, response-times') == 'slow responsetimes'

    def test_accented_letters_are_kept(self):
        assert normalize_pain_point('Atención lenta') == 'atención lenta'

    def test_punctuation_only_is_empty(self):
        assert normalize_pain_point('...') == ''


class TestAggregatePainPoints:

    def test_groups_spelling_variants(self):
        rows = [
            {'painPoints': ['High workload'], 'closed': True},
            {'painPoints': ['high workload!'], 'closed': False},
            {'painPoints': ['High workload', 'Slow responses'], 'closed': False},
        ]

        result = aggregate_pain_points(rows)

        assert result[0].painPoint == 'High workload'
        assert result[0].count == 3
        assert result[0].conversionRate == 33.33
        assert result[1].painPoint == 'Slow responses'
        assert result[1].conversionRate == 0.0

    def test_spelling_tie_goes_to_first_seen(self):
        rows = [{'painPoints': ['slow replies', 'Slow Replies'], 'closed': False}]

        result = aggregate_pain_points(rows)

        assert len(result) == 1
        assert result[0].painPoint == 'slow replies'
        assert result[0].count == 2

    def test_duplicates_in_one_record_count_each_time(self):
        rows = [{'painPoints': ['cost', 'cost'], 'closed': True}]

        result = aggregate_pain_points(rows)

        assert result[0].count == 2
        assert result[0].conversionRate == 100.0

    def test_blank_and_null_entries_skipped(self):
        rows = [{'painPoints': [None, '!!', 'cost'], 'closed': False}]

        assert [item.painPoint for item in aggregate_pain_points(rows)] == ['cost']

    def test_punctuation_only_entries_do_not_count(self):
        rows = [
            {'painPoints': ['!!!', '   '], 'closed': True},
            {'painPoints': ['cost', '?'], 'closed': False},
        ]

        result = aggregate_pain_points(rows)

        assert len(result) == 1
        assert result[0].count == 1
        assert result[0].conversionRate == 0.0

    def test_top_ten_only(self):
        rows = [{'painPoints': [f'problem {index}'] * (index + 1), 'closed': False} for index in range(15)]

        result = aggregate_pain_points(rows)

        assert len(result) == TOP_PAIN_POINTS
        assert result[0].painPoint == 'problem 14'
        assert result[0].count == 15

    def test_empty_input(self):
        assert aggregate_pain_points([]) == []


class TestTechnicalRequirements:

    def test_exact_text_grouping(self):
        rows = [
            {'technicalRequirements': ['CRM integration', 'multi-language']},
            {'technicalRequirements': ['CRM integration', 'crm integration']},
        ]

        result = aggregate_technical_requirements(rows)

        assert result[0].requirement == 'CRM integration'
        assert result[0].count == 2
        assert {item.requirement for item in result} == {'CRM integration', 'multi-language', 'crm integration'}


class TestBucketVolumes:

    def test_all_ranges_returned_in_order(self):
        result = bucket_volumes([])

        assert [item.volumeRange for item in result] == [r.label for r in VOLUME_RANGES]
        assert all(item.count == 0 and item.conversionRate == 0.0 for item in result)

    def test_boundaries_are_inclusive(self):
        rows = [
            {'interactionVolume': 0, 'closed': True},
            {'interactionVolume': 50, 'closed': False},
            {'interactionVolume': 51, 'closed': True},
            {'interactionVolume': 300, 'closed': True},
            {'interactionVolume': 301, 'closed': False},
            {'interactionVolume': None, 'closed': True},
        ]

        counts = {item.volumeRange: (item.count, item.closed) for item in bucket_volumes(rows)}

        assert counts['0-50'] == (2, 1)
        assert counts['51-100'] == (1, 1)
        assert counts['101-200'] == (0, 0)
        assert counts['201-300'] == (1, 1)
        assert counts['300+'] == (1, 0)

    def test_rate_per_bucket(self):
        rows = [{'interactionVolume': 120, 'closed': index == 0} for index in range(3)]

        result = {item.volumeRange: item for item in bucket_volumes(rows)}

        assert result['101-200'].conversionRate == 33.33


class TestPainPointsService:

    @pytest.mark.asyncio
    async def test_get_top_pain_points(self, mock_db_pool):
        mock_db_pool.conn.fetch.return_value = [{'painPoints': ['Cost'], 'closed': True}]

        result = await PainPointsService(mock_db_pool).get_top_pain_points()

        assert result[0].painPoint == 'Cost'

    @pytest.mark.asyncio
    async def test_errors_propagate(self, mock_db_pool):
        mock_db_pool.conn.fetch.side_effect = RuntimeError("query failed")

        with pytest.raises(RuntimeError):
            await PainPointsService(mock_db_pool).get_volume_vs_conversion()
