"""
Pain-point, technical-requirement and interaction-volume aggregation.

Key Functions:
- normalize_pain_point: Case/punctuation/whitespace-insensitive grouping key
- aggregate_pain_points: Top pain points with canonical spelling and conversion
- aggregate_technical_requirements: Top requirements grouped by exact text
- bucket_volumes: Conversion per fixed interaction-volume range

Normalization:
    key = trim -> lowercase -> collapse whitespace runs -> drop every character
    that is neither a word character nor whitespace -> trim. Word characters are
    Unicode-aware, so accented letters ("Gestión") survive normalization.

    Entries whose key is empty (null, blank or punctuation-only such as "!!!")
    are skipped: they are not listed and do not count toward any pain point.

Canonical spelling:
    For every key a frequency map of the trimmed raw spellings is kept and the
    argmax is taken once all rows are folded in. Ties go to the spelling seen
    first.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from asyncpg import Pool

from backend.core.logging import get_component_logger
from backend.models import PainPoint, TechnicalRequirement, VolumeVsConversion
from backend.services.metrics import conversion_rate
from backend.sql import (
    SELECT_INTERACTION_VOLUMES,
    SELECT_PAIN_POINTS,
    SELECT_TECHNICAL_REQUIREMENTS,
)


# =============================================================================
# CONSTANTS
# =============================================================================

TOP_PAIN_POINTS = 10
TOP_TECHNICAL_REQUIREMENTS = 10

_WHITESPACE_RE = re.compile(r'\s+')
_PUNCTUATION_RE = re.compile(r'[^\w\s]')


@dataclass(frozen=True)
class VolumeRange:
    """Inclusive interaction-volume range; max_volume=None means unbounded."""
    label: str
    min_volume: int
    max_volume: Optional[int]

    def contains(self, volume: int) -> bool:
        if volume < self.min_volume:
            return False
        return self.max_volume is None or volume <= self.max_volume


VOLUME_RANGES: Tuple[VolumeRange, ...] = (
    VolumeRange('0-50', 0, 50),
    VolumeRange('51-100', 51, 100),
    VolumeRange('101-200', 101, 200),
    VolumeRange('201-300', 201, 300),
    VolumeRange('300+', 301, None),
)


# =============================================================================
# Pain Points
# =============================================================================

def normalize_pain_point(raw: str) -> str:
    """
    Grouping key for a free-text pain point.

    >>> normalize_pain_point('  High   Workload! ')
    'high workload'
    """
    text = _WHITESPACE_RE.sub(' ', raw.strip().lower())
    return _PUNCTUATION_RE.sub('', text).strip()


@dataclass
class _PainPointGroup:
    spellings: Counter = field(default_factory=Counter)
    count: int = 0
    closed: int = 0


def aggregate_pain_points(
    rows: Iterable[Mapping[str, Any]],
    limit: int = TOP_PAIN_POINTS,
) -> List[PainPoint]:
    """
    Group pain points by normalized key.

    Every listed pain point counts once, including duplicates inside the same
    record; closed counts the occurrences whose record is closed.

    Args:
        rows: Mappings with painPoints (list of str) and closed (bool).
        limit: Number of entries to return.

    Returns:
        Top pain points sorted by count descending.
    """
    groups: Dict[str, _PainPointGroup] = {}

    for row in rows:
        for raw in row.get('painPoints') or []:
            if raw is None:
                continue
            key = normalize_pain_point(raw)
            if not key:
                continue
            group = groups.setdefault(key, _PainPointGroup())
            group.spellings[raw.strip()] += 1
            group.count += 1
            if row.get('closed'):
                group.closed += 1

    results = [
        PainPoint(
            painPoint=group.spellings.most_common(1)[0][0],
            count=group.count,
            conversionRate=conversion_rate(group.closed, group.count),
        )
        for group in groups.values()
    ]
    results.sort(key=lambda item: item.count, reverse=True)
    return results[:limit]


def aggregate_technical_requirements(
    rows: Iterable[Mapping[str, Any]],
    limit: int = TOP_TECHNICAL_REQUIREMENTS,
) -> List[TechnicalRequirement]:
    """Group technical requirements by exact text, top N by count."""
    counts = Counter()
    for row in rows:
        for requirement in row.get('technicalRequirements') or []:
            if requirement is not None:
                counts[requirement] += 1

    return [
        TechnicalRequirement(requirement=requirement, count=count)
        for requirement, count in counts.most_common(limit)
    ]


# =============================================================================
# Volume Buckets
# =============================================================================

def bucket_volumes(rows: Iterable[Mapping[str, Any]]) -> List[VolumeVsConversion]:
    """
    Conversion per interaction-volume range.

    All five ranges are always returned; an empty range has rate 0. Rows with
    a null volume are ignored.
    """
    tallies = [[0, 0] for _ in VOLUME_RANGES]

    for row in rows:
        volume = row.get('interactionVolume')
        if volume is None:
            continue
        for index, volume_range in enumerate(VOLUME_RANGES):
            if volume_range.contains(volume):
                tallies[index][0] += 1
                if row.get('closed'):
                    tallies[index][1] += 1
                break

    return [
        VolumeVsConversion(
            volumeRange=volume_range.label,
            count=count,
            closed=closed,
            conversionRate=conversion_rate(closed, count),
        )
        for volume_range, (count, closed) in zip(VOLUME_RANGES, tallies)
    ]


# =============================================================================
# Service
# =============================================================================

class PainPointsService:
    """Pain points, technical requirements and volume-vs-conversion."""

    def __init__(self, pool: Pool, logger=None):
        self.pool = pool
        self.logger = logger or get_component_logger('PainPointsService')

    async def _fetch(self, query: str) -> List[Mapping[str, Any]]:
        async with self.pool.acquire() as conn:
            return await conn.fetch(query)

    async def get_top_pain_points(self) -> List[PainPoint]:
        try:
            rows = await self._fetch(SELECT_PAIN_POINTS)
        except Exception:
            self.logger.error("Error getting pain points", exc_info=True)
            raise
        return aggregate_pain_points(rows)

    async def get_top_technical_requirements(self) -> List[TechnicalRequirement]:
        try:
            rows = await self._fetch(SELECT_TECHNICAL_REQUIREMENTS)
        except Exception:
            self.logger.error("Error getting technical requirements", exc_info=True)
            raise
        return aggregate_technical_requirements(rows)

    async def get_volume_vs_conversion(self) -> List[VolumeVsConversion]:
        try:
            rows = await self._fetch(SELECT_INTERACTION_VOLUMES)
        except Exception:
            self.logger.error("Error getting volume vs conversion", exc_info=True)
            raise
        return bucket_volumes(rows)
