"""
Narrative insight service.

Each insight follows the same three-state flow:

    NoData   -> the aggregation is empty; a fixed message is returned and the
                generator is never called.
    HasData  -> the aggregation (or a recent transcript sample) is handed to
                InsightGenerator and its typed result is returned.
    Failure  -> any exception from aggregation or generation is logged and
                replaced by a fixed "unable to generate" response.

Failures are absorbed here, never propagated: the insight endpoints always
return a well-formed body. The pool itself is obtained from a provider inside
each insight, so an unreachable database is a Failure like any other.

Insights:
- volume-vs-conversion, pain points, timeline (analytics aggregations)
- client perception, client solutions (recent transcript samples)
- industry distribution, industry conversion (industry dimension breakdown)
"""

from typing import Any, Dict, List, Mapping, Optional

from backend.core.dependencies import PoolProvider
from backend.core.logging import get_component_logger
from backend.llm.generators import INSUFFICIENT_CONVERSION_MESSAGE, InsightGenerator
from backend.llm.prompts import RELIABLE_INDUSTRY_MIN_CLIENTS
from backend.models import ClientPerceptionInsight, Dimension, Insight, TimelineInsight
from backend.services.overview import OverviewService
from backend.services.pain_points import PainPointsService
from backend.services.timeline import build_monthly_timeline
from backend.sql import SELECT_PERCEPTION_SAMPLE, SELECT_SOLUTIONS_SAMPLE, SELECT_TIMELINE_ROWS


# =============================================================================
# CONSTANTS
# =============================================================================

PERCEPTION_SAMPLE_LIMIT = 20
SOLUTIONS_SAMPLE_LIMIT = 30

NO_VOLUME_DATA = 'No volume vs conversion data available to analyze.'
NO_PAIN_POINTS_DATA = 'No pain points data available to analyze.'
NO_PERCEPTION_DATA = 'No client transcripts available for perception analysis.'
NO_SOLUTIONS_DATA = 'No client transcripts available for solutions analysis.'
NO_TIMELINE_DATA = 'No timeline data available to analyze.'
NO_INDUSTRY_DATA = 'No industry data available to analyze.'

INSIGHT_FAILED = 'Unable to generate insight at this time.'
ANALYSIS_FAILED = 'Unable to generate analysis at this time.'
TIMELINE_FAILED = 'Unable to generate timeline insights at this time.'


def has_transcription(row: Mapping[str, Any]) -> bool:
    return bool((row.get('transcription') or '').strip())


class InsightsService:
    """Absorbing wrapper around InsightGenerator for every insight kind."""

    def __init__(
        self,
        pool_provider: PoolProvider,
        generator: InsightGenerator,
        overview_service: Optional[OverviewService] = None,
        pain_points_service: Optional[PainPointsService] = None,
        logger=None,
    ):
        self.pool_provider = pool_provider
        self.generator = generator
        self.logger = logger or get_component_logger('InsightsService')
        self._overview_service = overview_service
        self._pain_points_service = pain_points_service

    async def _overview(self) -> OverviewService:
        if self._overview_service is None:
            self._overview_service = OverviewService(await self.pool_provider())
        return self._overview_service

    async def _pain_points(self) -> PainPointsService:
        if self._pain_points_service is None:
            self._pain_points_service = PainPointsService(await self.pool_provider())
        return self._pain_points_service

    async def _fetch(self, query: str, *args: Any) -> List[Mapping[str, Any]]:
        pool = await self.pool_provider()
        async with pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def _fetch_sample(self, query: str, limit: int) -> List[Dict[str, Any]]:
        rows = await self._fetch(query, limit)
        return [dict(row) for row in rows if has_transcription(row)]

    # =========================================================================
    # Analytics insights
    # =========================================================================

    async def get_volume_vs_conversion_insight(self) -> Insight:
        try:
            volume_data = await (await self._pain_points()).get_volume_vs_conversion()
            if sum(item.count for item in volume_data) == 0:
                return Insight(insight=NO_VOLUME_DATA)
            return Insight(insight=await self.generator.generate_volume_insight(volume_data))
        except Exception:
            self.logger.error("Error generating volume vs conversion insight", exc_info=True)
            return Insight(insight=INSIGHT_FAILED)

    async def get_pain_points_insight(self) -> Insight:
        try:
            pain_points = await (await self._pain_points()).get_top_pain_points()
            if not pain_points:
                return Insight(insight=NO_PAIN_POINTS_DATA)
            return Insight(insight=await self.generator.generate_pain_points_insight(pain_points))
        except Exception:
            self.logger.error("Error generating pain points insight", exc_info=True)
            return Insight(insight=INSIGHT_FAILED)

    async def get_timeline_insight(self) -> TimelineInsight:
        try:
            rows = await self._fetch(SELECT_TIMELINE_ROWS)
            if not rows:
                return TimelineInsight(keyFindings=[NO_TIMELINE_DATA])

            months = build_monthly_timeline(dict(row) for row in rows)
            return await self.generator.generate_timeline_insight(months)
        except Exception:
            self.logger.error("Error generating timeline insight", exc_info=True)
            return TimelineInsight(keyFindings=[TIMELINE_FAILED])

    # =========================================================================
    # Client insights
    # =========================================================================

    async def get_client_perception_insight(self) -> ClientPerceptionInsight:
        try:
            transcripts = await self._fetch_sample(SELECT_PERCEPTION_SAMPLE, PERCEPTION_SAMPLE_LIMIT)
            if not transcripts:
                return ClientPerceptionInsight(positiveAspects=NO_PERCEPTION_DATA)
            return await self.generator.generate_perception_insight(transcripts)
        except Exception:
            self.logger.error("Error generating client perception insight", exc_info=True)
            return ClientPerceptionInsight(
                positiveAspects=ANALYSIS_FAILED,
                concerns=ANALYSIS_FAILED,
                successFactors=ANALYSIS_FAILED,
                recommendations=ANALYSIS_FAILED,
            )

    async def get_client_solutions_insight(self) -> Insight:
        try:
            transcripts = await self._fetch_sample(SELECT_SOLUTIONS_SAMPLE, SOLUTIONS_SAMPLE_LIMIT)
            if not transcripts:
                return Insight(insight=NO_SOLUTIONS_DATA)
            return Insight(insight=await self.generator.generate_solutions_insight(transcripts))
        except Exception:
            self.logger.error("Error generating client solutions insight", exc_info=True)
            return Insight(insight=INSIGHT_FAILED)

    # =========================================================================
    # Industry insights
    # =========================================================================

    async def get_industry_distribution_insight(self) -> Insight:
        try:
            metrics = await (await self._overview()).get_metrics_by_dimension(Dimension.INDUSTRY)
            if not metrics.values:
                return Insight(insight=NO_INDUSTRY_DATA)
            return Insight(
                insight=await self.generator.generate_industry_distribution_insight(metrics.values)
            )
        except Exception:
            self.logger.error("Error generating industry distribution insight", exc_info=True)
            return Insight(insight=INSIGHT_FAILED)

    async def get_industry_conversion_insight(self) -> Insight:
        try:
            metrics = await (await self._overview()).get_metrics_by_dimension(Dimension.INDUSTRY)
            if not metrics.values:
                return Insight(insight=NO_INDUSTRY_DATA)

            reliable = [item for item in metrics.values if item.count >= RELIABLE_INDUSTRY_MIN_CLIENTS]
            if not reliable:
                return Insight(insight=INSUFFICIENT_CONVERSION_MESSAGE)

            return Insight(
                insight=await self.generator.generate_industry_conversion_insight(reliable)
            )
        except Exception:
            self.logger.error("Error generating industry conversion insight", exc_info=True)
            return Insight(insight=INSIGHT_FAILED)
