"""
FastAPI router module for dashboard analytics endpoints.

This module implements endpoints for:
- Overview: headline counts and conversion rate
- Dimension breakdowns: by-dimension and the five-way conversion analysis
- Timeline: meetings and closed deals per UTC day
- Pain points, technical requirements and volume vs conversion
- Industry analytics: detailed ranking, new industries, industries to watch
- Seller analytics: metrics, weekly podium, annual ranking, timeline,
  correlations and month-over-month insights
- Narrative insights generated by the LLM

Error handling:
- Aggregation endpoints propagate failures as 500 responses
- An unknown dimension or an unparseable weekStart is rejected with 400
  before any query runs
- Insight endpoints never fail: the insight service returns a fallback body
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from backend.api.dependencies import (
    ConversionServiceDep,
    IndustriesServiceDep,
    InsightsServiceDep,
    OverviewServiceDep,
    PainPointsServiceDep,
    SellersServiceDep,
)
from backend.core.errors import InvalidDimensionError, InvalidWeekStartError
from backend.models import (
    AnnualSellerRanking,
    ClientPerceptionInsight,
    ConversionAnalysis,
    DimensionMetrics,
    Granularity,
    IndustriesToWatch,
    IndustryRanking,
    Insight,
    NewIndustriesLastMonth,
    OverviewMetrics,
    PainPoint,
    SellerCorrelation,
    SellerInsight,
    SellerMetrics,
    SellerOfWeek,
    SellerTimelinePoint,
    TechnicalRequirement,
    TimelineInsight,
    TimelineMetric,
    VolumeVsConversion,
)

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Overview and Dimensions
# =============================================================================


@router.get("/overview", response_model=OverviewMetrics)
async def get_overview(service: OverviewServiceDep) -> OverviewMetrics:
    """Total, closed, open, processed and unprocessed clients with the conversion rate."""
    try:
        return await service.get_overview()
    except Exception as e:
        logger.exception("Error fetching overview metrics")
        raise HTTPException(status_code=500, detail=f"Failed to fetch overview: {str(e)}")


@router.get(
    "/by-dimension",
    response_model=DimensionMetrics,
    response_model_exclude_none=True,
)
async def get_metrics_by_dimension(
    service: OverviewServiceDep,
    dimension: str = Query(..., description="industry, sentiment, urgencyLevel, discoverySource or operationSize"),
) -> DimensionMetrics:
    """
    Conversion breakdown over processed clients for one dimension.

    totalInteractionVolume is only present for the industry dimension.
    """
    try:
        return await service.get_metrics_by_dimension(dimension)
    except InvalidDimensionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Error fetching metrics for dimension {dimension}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch dimension metrics: {str(e)}")


@router.get(
    "/conversion-analysis",
    response_model=ConversionAnalysis,
    response_model_exclude_none=True,
)
async def get_conversion_analysis(service: ConversionServiceDep) -> ConversionAnalysis:
    try:
        return await service.get_conversion_analysis()
    except Exception as e:
        logger.exception("Error fetching conversion analysis")
        raise HTTPException(status_code=500, detail=f"Failed to fetch conversion analysis: {str(e)}")


@router.get("/timeline", response_model=List[TimelineMetric])
@router.get("/timeline-metrics", response_model=List[TimelineMetric])
async def get_timeline_metrics(service: ConversionServiceDep) -> List[TimelineMetric]:
    """Meetings and closed deals per UTC day, oldest first."""
    try:
        return await service.get_timeline_metrics()
    except Exception as e:
        logger.exception("Error fetching timeline metrics")
        raise HTTPException(status_code=500, detail=f"Failed to fetch timeline metrics: {str(e)}")


# =============================================================================
# Pain Points and Volume
# =============================================================================


@router.get("/pain-points", response_model=List[PainPoint])
async def get_pain_points(service: PainPointsServiceDep) -> List[PainPoint]:
    try:
        return await service.get_top_pain_points()
    except Exception as e:
        logger.exception("Error fetching pain points")
        raise HTTPException(status_code=500, detail=f"Failed to fetch pain points: {str(e)}")


@router.get("/technical-requirements", response_model=List[TechnicalRequirement])
async def get_technical_requirements(service: PainPointsServiceDep) -> List[TechnicalRequirement]:
    try:
        return await service.get_top_technical_requirements()
    except Exception as e:
        logger.exception("Error fetching technical requirements")
        raise HTTPException(status_code=500, detail=f"Failed to fetch technical requirements: {str(e)}")


@router.get("/volume-vs-conversion", response_model=List[VolumeVsConversion])
async def get_volume_vs_conversion(service: PainPointsServiceDep) -> List[VolumeVsConversion]:
    try:
        return await service.get_volume_vs_conversion()
    except Exception as e:
        logger.exception("Error fetching volume vs conversion")
        raise HTTPException(status_code=500, detail=f"Failed to fetch volume vs conversion: {str(e)}")


# =============================================================================
# Industries
# =============================================================================


@router.get("/industries-detailed-ranking", response_model=List[IndustryRanking])
async def get_industries_detailed_ranking(service: IndustriesServiceDep) -> List[IndustryRanking]:
    try:
        return await service.get_industries_detailed_ranking()
    except Exception as e:
        logger.exception("Error fetching industries ranking")
        raise HTTPException(status_code=500, detail=f"Failed to fetch industries ranking: {str(e)}")


@router.get("/new-industries-last-month", response_model=NewIndustriesLastMonth)
async def get_new_industries_last_month(service: IndustriesServiceDep) -> NewIndustriesLastMonth:
    try:
        return await service.get_new_industries_last_month()
    except Exception as e:
        logger.exception("Error fetching new industries")
        raise HTTPException(status_code=500, detail=f"Failed to fetch new industries: {str(e)}")


@router.get("/industries-to-watch", response_model=IndustriesToWatch)
async def get_industries_to_watch(service: IndustriesServiceDep) -> IndustriesToWatch:
    """Expansion opportunities (high conversion) and industries needing a new strategy (low conversion)."""
    try:
        return await service.get_industries_to_watch()
    except Exception as e:
        logger.exception("Error fetching industries to watch")
        raise HTTPException(status_code=500, detail=f"Failed to fetch industries to watch: {str(e)}")


# =============================================================================
# Sellers
# =============================================================================


@router.get("/sellers", response_model=List[SellerMetrics])
async def get_seller_metrics(service: SellersServiceDep) -> List[SellerMetrics]:
    """Clients, closed deals and conversion rate per seller, best conversion first."""
    try:
        return await service.get_seller_metrics()
    except Exception as e:
        logger.exception("Error fetching seller metrics")
        raise HTTPException(status_code=500, detail=f"Failed to fetch seller metrics: {str(e)}")


@router.get("/seller-of-week", response_model=SellerOfWeek)
async def get_seller_of_week(
    service: SellersServiceDep,
    weekStart: Optional[str] = Query(None, description="'current' or an ISO date; defaults to this week's Monday"),
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Clamp the week to this calendar year"),
) -> SellerOfWeek:
    try:
        return await service.get_seller_of_week(weekStart, year)
    except InvalidWeekStartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error fetching seller of the week")
        raise HTTPException(status_code=500, detail=f"Failed to fetch seller of the week: {str(e)}")


@router.get("/annual-seller-ranking", response_model=AnnualSellerRanking)
async def get_annual_seller_ranking(
    service: SellersServiceDep,
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Defaults to the current year"),
) -> AnnualSellerRanking:
    try:
        return await service.get_annual_seller_ranking(year)
    except Exception as e:
        logger.exception("Error fetching annual seller ranking")
        raise HTTPException(status_code=500, detail=f"Failed to fetch annual seller ranking: {str(e)}")


@router.get("/sellers-timeline", response_model=List[SellerTimelinePoint])
async def get_sellers_timeline(
    service: SellersServiceDep,
    granularity: Granularity = Query(Granularity.WEEK),
) -> List[SellerTimelinePoint]:
    """Closed deals per seller per week (YYYY-Www) or month (YYYY-MM)."""
    try:
        return await service.get_sellers_timeline(granularity)
    except Exception as e:
        logger.exception("Error fetching sellers timeline")
        raise HTTPException(status_code=500, detail=f"Failed to fetch sellers timeline: {str(e)}")


@router.get("/seller-correlations", response_model=List[SellerCorrelation])
async def get_seller_correlations(service: SellersServiceDep) -> List[SellerCorrelation]:
    try:
        return await service.get_seller_correlations()
    except Exception as e:
        logger.exception("Error fetching seller correlations")
        raise HTTPException(status_code=500, detail=f"Failed to fetch seller correlations: {str(e)}")


@router.get("/seller-insights", response_model=List[SellerInsight])
async def get_seller_insights(service: SellersServiceDep) -> List[SellerInsight]:
    try:
        return await service.get_seller_insights()
    except Exception as e:
        logger.exception("Error fetching seller insights")
        raise HTTPException(status_code=500, detail=f"Failed to fetch seller insights: {str(e)}")


# =============================================================================
# Insights (never fail, see InsightsService)
# =============================================================================


@router.get("/volume-vs-conversion-insight", response_model=Insight)
async def get_volume_vs_conversion_insight(service: InsightsServiceDep) -> Insight:
    return await service.get_volume_vs_conversion_insight()


@router.get("/pain-points-insight", response_model=Insight)
async def get_pain_points_insight(service: InsightsServiceDep) -> Insight:
    return await service.get_pain_points_insight()


@router.get("/client-perception-insight", response_model=ClientPerceptionInsight)
async def get_client_perception_insight(service: InsightsServiceDep) -> ClientPerceptionInsight:
    return await service.get_client_perception_insight()


@router.get("/client-solutions-insight", response_model=Insight)
async def get_client_solutions_insight(service: InsightsServiceDep) -> Insight:
    return await service.get_client_solutions_insight()


@router.get("/timeline-insight", response_model=TimelineInsight)
async def get_timeline_insight(service: InsightsServiceDep) -> TimelineInsight:
    return await service.get_timeline_insight()


@router.get("/industry-distribution-insight", response_model=Insight)
async def get_industry_distribution_insight(service: InsightsServiceDep) -> Insight:
    return await service.get_industry_distribution_insight()


@router.get("/industry-conversion-insight", response_model=Insight)
async def get_industry_conversion_insight(service: InsightsServiceDep) -> Insight:
    return await service.get_industry_conversion_insight()
