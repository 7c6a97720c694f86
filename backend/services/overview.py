"""
Overview aggregation service.

Computes the dashboard's headline numbers and the per-dimension conversion
breakdowns.

Key Functions:
- build_overview: Pure assembly of OverviewMetrics from the three counts
- get_dimension_column: Validate a dimension name (raises InvalidDimensionError)
- build_dimension_metrics: Pure mapping of grouped rows to DimensionMetrics

OverviewService:
- get_overview(): total/closed/processed counts fetched concurrently
- get_metrics_by_dimension(dimension): grouped breakdown pushed down to SQL

Error handling:
    Storage errors are logged and re-raised unchanged; the API layer turns
    them into 500 responses. An unknown dimension is rejected before any
    query is issued.
"""

import asyncio
from typing import Any, Iterable, Mapping, Optional

from asyncpg import Pool

from backend.core.errors import InvalidDimensionError
from backend.core.logging import get_component_logger
from backend.models import Dimension, DimensionMetrics, DimensionValue, OverviewMetrics
from backend.services.metrics import conversion_rate
from backend.sql import (
    COUNT_ALL_CLIENTS,
    COUNT_CLOSED_CLIENTS,
    COUNT_PROCESSED_CLIENTS,
    DIMENSION_COLUMNS,
    get_dimension_metrics_query,
)


# =============================================================================
# Pure Aggregation
# =============================================================================

def build_overview(total: int, closed: int, processed: int) -> OverviewMetrics:
    """
    Assemble overview metrics from raw counts.

    Args:
        total: Number of stored clients.
        closed: Number of closed deals.
        processed: Number of categorized clients.

    Returns:
        OverviewMetrics with derived open/unprocessed counts and the
        conversion rate (0 when there are no clients).
    """
    return OverviewMetrics(
        totalClients=total,
        totalClosed=closed,
        totalOpen=total - closed,
        conversionRate=conversion_rate(closed, total),
        processedClients=processed,
        unprocessedClients=total - processed,
    )


def get_dimension_column(dimension: Any) -> str:
    """
    Validate a dimension and return its canonical name.

    Args:
        dimension: Dimension enum member or its string value.

    Returns:
        str: The dimension name (also the key into DIMENSION_COLUMNS).

    Raises:
        InvalidDimensionError: If the dimension is not supported.
    """
    name = dimension.value if isinstance(dimension, Dimension) else dimension
    if name not in DIMENSION_COLUMNS:
        raise InvalidDimensionError(str(name), DIMENSION_COLUMNS.keys())
    return name


def build_dimension_metrics(dimension: str, rows: Iterable[Mapping[str, Any]]) -> DimensionMetrics:
    """
    Map grouped rows (value, count, closed_count[, total_interaction_volume])
    to a DimensionMetrics response, sorted by count descending.

    totalInteractionVolume is only set for the industry dimension.
    """
    values = []
    for row in rows:
        count = int(row['count'])
        closed = int(row['closed_count'] or 0)
        total_volume = None
        if dimension == Dimension.INDUSTRY.value:
            total_volume = int(row.get('total_interaction_volume') or 0)

        values.append(DimensionValue(
            value=row['value'],
            count=count,
            closed=closed,
            conversionRate=conversion_rate(closed, count),
            totalInteractionVolume=total_volume,
        ))

    # SQL already orders by count; re-sorting keeps the contract independent of it
    values.sort(key=lambda item: item.count, reverse=True)
    return DimensionMetrics(dimension=dimension, values=values)


# =============================================================================
# Service
# =============================================================================

class OverviewService:
    """Reads overview counts and dimension breakdowns from the clients table."""

    def __init__(self, pool: Pool, logger=None):
        self.pool = pool
        self.logger = logger or get_component_logger('OverviewService')

    async def _fetch_count(self, query: str) -> int:
        async with self.pool.acquire() as conn:
            return int(await conn.fetchval(query) or 0)

    async def get_overview(self) -> OverviewMetrics:
        """
        Headline metrics. The three counts run concurrently, each on its own
        pooled connection; if any of them fails the whole call fails.
        """
        try:
            total, closed, processed = await asyncio.gather(
                self._fetch_count(COUNT_ALL_CLIENTS),
                self._fetch_count(COUNT_CLOSED_CLIENTS),
                self._fetch_count(COUNT_PROCESSED_CLIENTS),
            )
        except Exception:
            self.logger.error("Error computing overview metrics", exc_info=True)
            raise

        return build_overview(total, closed, processed)

    async def get_metrics_by_dimension(self, dimension: Any) -> DimensionMetrics:
        """
        Conversion breakdown for one dimension over processed clients.

        Raises:
            InvalidDimensionError: Before querying, for an unknown dimension.
        """
        name = get_dimension_column(dimension)

        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(get_dimension_metrics_query(name))
        except Exception:
            self.logger.error(f"Error getting metrics by dimension {name}", exc_info=True)
            raise

        return build_dimension_metrics(name, [dict(row) for row in rows])
