"""
Conversion analysis service.

- get_conversion_analysis(): the five dimension breakdowns, fanned out
  concurrently through OverviewService.
- get_timeline_metrics(): meetings and closed deals per UTC calendar day.
"""

import asyncio
from typing import Any, Iterable, List, Mapping, Optional

from asyncpg import Pool

from backend.core.logging import get_component_logger
from backend.models import ConversionAnalysis, Dimension, TimelineMetric
from backend.services.metrics import as_utc
from backend.services.overview import OverviewService
from backend.sql import SELECT_MEETING_DATES


def group_meetings_by_day(rows: Iterable[Mapping[str, Any]]) -> List[TimelineMetric]:
    """
    Group meetings by UTC date (YYYY-MM-DD).

    Args:
        rows: Mappings with meetingDate (datetime) and closed (bool).

    Returns:
        List of TimelineMetric in ascending date order.
    """
    grouped = {}
    for row in rows:
        key = as_utc(row['meetingDate']).strftime('%Y-%m-%d')
        entry = grouped.setdefault(key, {'total': 0, 'closed': 0})
        entry['total'] += 1
        if row['closed']:
            entry['closed'] += 1

    return [
        TimelineMetric(date=key, total=entry['total'], closed=entry['closed'])
        for key, entry in sorted(grouped.items())
    ]


class ConversionAnalysisService:
    """Cross-dimension conversion analysis and the daily meeting timeline."""

    def __init__(
        self,
        pool: Pool,
        overview_service: Optional[OverviewService] = None,
        logger=None,
    ):
        self.pool = pool
        self.logger = logger or get_component_logger('ConversionAnalysisService')
        self.overview_service = overview_service or OverviewService(pool)

    async def get_conversion_analysis(self) -> ConversionAnalysis:
        """All five breakdowns; any failing branch fails the whole call."""
        by_industry, by_sentiment, by_urgency, by_discovery, by_size = await asyncio.gather(
            self.overview_service.get_metrics_by_dimension(Dimension.INDUSTRY),
            self.overview_service.get_metrics_by_dimension(Dimension.SENTIMENT),
            self.overview_service.get_metrics_by_dimension(Dimension.URGENCY_LEVEL),
            self.overview_service.get_metrics_by_dimension(Dimension.DISCOVERY_SOURCE),
            self.overview_service.get_metrics_by_dimension(Dimension.OPERATION_SIZE),
        )

        return ConversionAnalysis(
            byIndustry=by_industry,
            bySentiment=by_sentiment,
            byUrgency=by_urgency,
            byDiscovery=by_discovery,
            byOperationSize=by_size,
        )

    async def get_timeline_metrics(self) -> List[TimelineMetric]:
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(SELECT_MEETING_DATES)
        except Exception:
            self.logger.error("Error getting timeline metrics", exc_info=True)
            raise

        return group_meetings_by_day(rows)
