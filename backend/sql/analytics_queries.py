"""
Parameterized SQL for the analytics aggregators.

Two kinds of statements live here:

- Counts and the grouped dimension breakdown, which are pushed down to
  PostgreSQL (GROUP BY / COUNT / SUM ordered by count descending).
- Narrow projections of processed clients consumed by the in-memory
  aggregators (pain points, volume buckets, industries, sellers, timelines,
  insight samples).

Dimension columns are interpolated only after validation against
DIMENSION_COLUMNS.
"""

from typing import Dict


# Dimension name -> quoted column
DIMENSION_COLUMNS: Dict[str, str] = {
    'industry': '"industry"',
    'sentiment': '"sentiment"',
    'urgencyLevel': '"urgencyLevel"',
    'discoverySource': '"discoverySource"',
    'operationSize': '"operationSize"',
}


# =============================================================================
# Overview Counts
# =============================================================================

COUNT_ALL_CLIENTS = "SELECT COUNT(*) FROM clients"

COUNT_CLOSED_CLIENTS = 'SELECT COUNT(*) FROM clients WHERE "closed" = true'

COUNT_PROCESSED_CLIENTS = 'SELECT COUNT(*) FROM clients WHERE "processed" = true'


# =============================================================================
# Dimension Breakdown
# =============================================================================

def get_dimension_metrics_query(dimension: str) -> str:
    """
    Generate the grouped breakdown query for one dimension.

    Groups processed clients with a non-null value of the dimension. For the
    industry dimension the summed interaction volume is included as well.

    Args:
        dimension: One of the DIMENSION_COLUMNS keys. Callers validate first.

    Returns:
        str: Query yielding (value, count, closed_count[, total_interaction_volume]).

    Raises:
        KeyError: If the dimension is not whitelisted.
    """
    column = DIMENSION_COLUMNS[dimension]
    volume_select = ""
    if dimension == 'industry':
        volume_select = ',\n            SUM(COALESCE("interactionVolume", 0)) AS total_interaction_volume'

    return f"""
        SELECT
            {column} AS value,
            COUNT(*) AS count,
            SUM(CASE WHEN "closed" THEN 1 ELSE 0 END) AS closed_count{volume_select}
        FROM clients
        WHERE "processed" = true AND {column} IS NOT NULL
        GROUP BY {column}
        ORDER BY count DESC
    """


# =============================================================================
# Projections for In-Memory Aggregation
# =============================================================================

SELECT_MEETING_DATES = """
    SELECT "meetingDate", "closed"
    FROM clients
    ORDER BY "meetingDate" ASC
"""

SELECT_PAIN_POINTS = """
    SELECT "painPoints", "closed"
    FROM clients
    WHERE "processed" = true AND cardinality("painPoints") > 0
"""

SELECT_TECHNICAL_REQUIREMENTS = """
    SELECT "technicalRequirements"
    FROM clients
    WHERE "processed" = true AND cardinality("technicalRequirements") > 0
"""

SELECT_INTERACTION_VOLUMES = """
    SELECT "interactionVolume", "closed"
    FROM clients
    WHERE "processed" = true AND "interactionVolume" IS NOT NULL
"""

SELECT_INDUSTRY_ROWS = """
    SELECT "industry", "closed", "sentiment", "urgencyLevel"
    FROM clients
    WHERE "processed" = true AND "industry" IS NOT NULL
"""

# $1 = window start, $2 = window end (exclusive)
SELECT_INDUSTRY_ROWS_IN_WINDOW = """
    SELECT "industry", "closed"
    FROM clients
    WHERE "processed" = true
      AND "industry" IS NOT NULL
      AND "meetingDate" >= $1
      AND "meetingDate" < $2
"""

# $1 = window start
SELECT_INDUSTRIES_BEFORE = """
    SELECT DISTINCT "industry"
    FROM clients
    WHERE "processed" = true
      AND "industry" IS NOT NULL
      AND "meetingDate" < $1
"""

SELECT_TIMELINE_ROWS = """
    SELECT "meetingDate", "closed", "industry", "sentiment"
    FROM clients
    WHERE "processed" = true
    ORDER BY "meetingDate" ASC
"""

# $1 = sample size
SELECT_PERCEPTION_SAMPLE = """
    SELECT "transcription", "closed", "sentiment"
    FROM clients
    WHERE "processed" = true
      AND btrim("transcription") <> ''
    ORDER BY "createdAt" DESC
    LIMIT $1
"""

# $1 = sample size
SELECT_SOLUTIONS_SAMPLE = """
    SELECT "transcription", "closed", "mainMotivation", "technicalRequirements"
    FROM clients
    WHERE "processed" = true
      AND btrim("transcription") <> ''
    ORDER BY "createdAt" DESC
    LIMIT $1
"""


# =============================================================================
# Sellers
# =============================================================================

# Every client counts, processed or not
SELECT_SELLER_TOTALS = """
    SELECT
        "assignedSeller" AS seller,
        COUNT(*) AS total,
        SUM(CASE WHEN "closed" THEN 1 ELSE 0 END) AS closed_count
    FROM clients
    GROUP BY "assignedSeller"
"""

# $1 = window start (inclusive), $2 = window end (exclusive)
SELECT_SELLER_ROWS_IN_WINDOW = """
    SELECT "assignedSeller", "closed", "urgencyLevel"
    FROM clients
    WHERE "meetingDate" >= $1
      AND "meetingDate" < $2
"""

# $1 = window start (inclusive); open-ended window
SELECT_SELLER_ROWS_SINCE = """
    SELECT "assignedSeller", "closed", "urgencyLevel"
    FROM clients
    WHERE "meetingDate" >= $1
"""

SELECT_CLOSED_SELLER_DATES = """
    SELECT "assignedSeller", "meetingDate"
    FROM clients
    WHERE "closed" = true
    ORDER BY "meetingDate" ASC
"""

SELECT_SELLER_CORRELATION_ROWS = """
    SELECT "assignedSeller", "closed", "industry", "operationSize",
           "urgencyLevel", "sentiment", "discoverySource"
    FROM clients
    WHERE "processed" = true
"""
