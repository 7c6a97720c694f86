"""
Backend Services Module

This module contains the business logic of the Meeting Analytics backend.
Pure aggregation functions are exposed next to the services that feed them
from PostgreSQL, so they can be tested on plain dict rows.

Services:
- metrics: rounding, conversion rate and mode helpers shared by all aggregators
- overview: headline counts and per-dimension breakdowns
- conversion: conversion analysis across dimensions and the daily timeline
- pain_points: pain points, technical requirements, volume vs conversion
- industries: ranking, new industries last month, industries to watch
- sellers: seller metrics, rankings, timeline, correlations and insights
- timeline: monthly buckets feeding the timeline insight
- insights: absorbing LLM insight layer
- clients: client CRUD and categorization hooks
- ingestion: CSV parsing for bulk import

Every service takes the asyncpg pool and an optional logger in its
constructor; the API layer builds them per request (backend/api/dependencies.py).
"""

# =============================================================================
# Shared Metrics
# =============================================================================

from backend.services.metrics import (
    round_half_up,
    conversion_rate,
    dominant_value,
    as_utc,
    to_naive_utc,
    utc_now,
)

# =============================================================================
# Analytics Services
# =============================================================================

from backend.services.overview import (
    OverviewService,
    build_overview,
    build_dimension_metrics,
    get_dimension_column,
)

from backend.services.conversion import (
    ConversionAnalysisService,
    group_meetings_by_day,
)

from backend.services.pain_points import (
    PainPointsService,
    VOLUME_RANGES,
    aggregate_pain_points,
    aggregate_technical_requirements,
    bucket_volumes,
    normalize_pain_point,
)

from backend.services.industries import (
    IndustriesService,
    build_industry_stats,
    rank_industries,
    compute_watch_thresholds,
    find_industries_to_watch,
    find_new_industries,
    previous_month_window,
)

from backend.services.sellers import (
    SellersService,
    build_seller_metrics,
    build_seller_insights,
    build_sellers_timeline,
    find_seller_correlations,
    parse_week_start,
    period_key,
    rank_annual_sellers,
    rank_week_podium,
    week_window,
)

from backend.services.timeline import (
    build_monthly_timeline,
    format_month_label,
    month_key,
)

# =============================================================================
# Client Management
# =============================================================================

from backend.services.clients import ClientsService

from backend.services.ingestion import (
    CSV_COLUMN_MAP,
    parse_clients_csv,
)

# =============================================================================
# Insights
# =============================================================================

from backend.services.insights import InsightsService


__all__ = [
    # Metrics
    'round_half_up',
    'conversion_rate',
    'dominant_value',
    'as_utc',
    'to_naive_utc',
    'utc_now',
    # Overview
    'OverviewService',
    'build_overview',
    'build_dimension_metrics',
    'get_dimension_column',
    # Conversion
    'ConversionAnalysisService',
    'group_meetings_by_day',
    # Pain points
    'PainPointsService',
    'VOLUME_RANGES',
    'aggregate_pain_points',
    'aggregate_technical_requirements',
    'bucket_volumes',
    'normalize_pain_point',
    # Industries
    'IndustriesService',
    'build_industry_stats',
    'rank_industries',
    'compute_watch_thresholds',
    'find_industries_to_watch',
    'find_new_industries',
    'previous_month_window',
    # Sellers
    'SellersService',
    'build_seller_metrics',
    'build_seller_insights',
    'build_sellers_timeline',
    'find_seller_correlations',
    'parse_week_start',
    'period_key',
    'rank_annual_sellers',
    'rank_week_podium',
    'week_window',
    # Timeline
    'build_monthly_timeline',
    'format_month_label',
    'month_key',
    # Clients
    'ClientsService',
    'CSV_COLUMN_MAP',
    'parse_clients_csv',
    # Insights
    'InsightsService',
]
