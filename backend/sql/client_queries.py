"""
Parameterized SQL for the clients table: DDL and CRUD.

Column names are camelCase and therefore always double-quoted. Values are
always passed as $n parameters; the only interpolated identifiers come from
CLIENT_COLUMNS / UPDATABLE_COLUMNS, never from user input.

Table layout:
    clients(id TEXT PK, name, email UNIQUE, phone, "assignedSeller",
            "meetingDate" TIMESTAMP(3), closed, transcription, industry,
            "operationSize", "interactionVolume" INT, "discoverySource",
            "mainMotivation", "urgencyLevel", "painPoints" TEXT[],
            "technicalRequirements" TEXT[], sentiment, processed,
            "processedAt", "createdAt", "updatedAt")
"""

from typing import Any, List, Optional, Sequence, Tuple


# =============================================================================
# DDL
# =============================================================================

CREATE_CLIENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS clients (
        "id" TEXT PRIMARY KEY,
        "name" TEXT NOT NULL,
        "email" TEXT NOT NULL UNIQUE,
        "phone" TEXT NOT NULL DEFAULT '',
        "assignedSeller" TEXT NOT NULL,
        "meetingDate" TIMESTAMP(3) NOT NULL,
        "closed" BOOLEAN NOT NULL DEFAULT false,
        "transcription" TEXT NOT NULL,
        "industry" TEXT,
        "operationSize" TEXT,
        "interactionVolume" INTEGER CHECK ("interactionVolume" >= 0),
        "discoverySource" TEXT,
        "mainMotivation" TEXT,
        "urgencyLevel" TEXT,
        "painPoints" TEXT[] NOT NULL DEFAULT '{}',
        "technicalRequirements" TEXT[] NOT NULL DEFAULT '{}',
        "sentiment" TEXT,
        "processed" BOOLEAN NOT NULL DEFAULT false,
        "processedAt" TIMESTAMP(3),
        "createdAt" TIMESTAMP(3) NOT NULL DEFAULT CURRENT_TIMESTAMP,
        "updatedAt" TIMESTAMP(3) NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
"""

CREATE_CLIENTS_INDEXES: List[str] = [
    'CREATE INDEX IF NOT EXISTS "clients_assignedSeller_idx" ON clients ("assignedSeller")',
    'CREATE INDEX IF NOT EXISTS "clients_industry_idx" ON clients ("industry")',
    'CREATE INDEX IF NOT EXISTS "clients_closed_idx" ON clients ("closed")',
    'CREATE INDEX IF NOT EXISTS "clients_meetingDate_idx" ON clients ("meetingDate")',
]


# =============================================================================
# Column Lists
# =============================================================================

CLIENT_COLUMNS: List[str] = [
    'id', 'name', 'email', 'phone', 'assignedSeller', 'meetingDate', 'closed',
    'transcription', 'industry', 'operationSize', 'interactionVolume',
    'discoverySource', 'mainMotivation', 'urgencyLevel', 'painPoints',
    'technicalRequirements', 'sentiment', 'processed', 'processedAt',
    'createdAt', 'updatedAt',
]

# Columns a PATCH may write
UPDATABLE_COLUMNS: List[str] = [
    'name', 'email', 'phone', 'assignedSeller', 'meetingDate', 'closed',
    'transcription', 'industry', 'operationSize', 'interactionVolume',
    'discoverySource', 'mainMotivation', 'urgencyLevel', 'painPoints',
    'technicalRequirements', 'sentiment',
]

SELECT_COLUMNS = ", ".join(f'"{column}"' for column in CLIENT_COLUMNS)


# =============================================================================
# Writes
# =============================================================================

INSERT_CLIENT = f"""
    INSERT INTO clients (
        "id", "name", "email", "phone", "assignedSeller", "meetingDate",
        "closed", "transcription", "processed", "createdAt", "updatedAt"
    )
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, false, $9, $9)
    RETURNING {SELECT_COLUMNS}
"""

# Duplicate emails are skipped; RETURNING yields no row for them
INSERT_CLIENT_SKIP_DUPLICATES = """
    INSERT INTO clients (
        "id", "name", "email", "phone", "assignedSeller", "meetingDate",
        "closed", "transcription", "processed", "createdAt", "updatedAt"
    )
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, false, $9, $9)
    ON CONFLICT ("email") DO NOTHING
    RETURNING "id"
"""

MARK_CLIENT_PROCESSED = f"""
    UPDATE clients
    SET "industry" = $2,
        "operationSize" = $3,
        "interactionVolume" = $4,
        "discoverySource" = $5,
        "mainMotivation" = $6,
        "urgencyLevel" = $7,
        "painPoints" = $8,
        "technicalRequirements" = $9,
        "sentiment" = $10,
        "processed" = true,
        "processedAt" = $11,
        "updatedAt" = $11
    WHERE "id" = $1
    RETURNING {SELECT_COLUMNS}
"""

DELETE_ALL_CLIENTS = "DELETE FROM clients"


def get_update_client_query(columns: Sequence[str]) -> str:
    """
    Build an UPDATE statement for the given whitelisted columns.

    Parameter layout: $1 = id, $2..$n+1 = column values in order,
    $n+2 = updatedAt.

    Args:
        columns: Column names, each must be in UPDATABLE_COLUMNS.

    Returns:
        str: Parameterized UPDATE ... RETURNING statement.

    Raises:
        ValueError: If a column is not updatable or no column is given.
    """
    if not columns:
        raise ValueError("At least one column is required for an update")
    unknown = [column for column in columns if column not in UPDATABLE_COLUMNS]
    if unknown:
        raise ValueError(f"Columns not updatable: {', '.join(unknown)}")

    assignments = [f'"{column}" = ${index}' for index, column in enumerate(columns, start=2)]
    assignments.append(f'"updatedAt" = ${len(columns) + 2}')

    return f"""
        UPDATE clients
        SET {", ".join(assignments)}
        WHERE "id" = $1
        RETURNING {SELECT_COLUMNS}
    """


# =============================================================================
# Reads
# =============================================================================

SELECT_CLIENT_BY_ID = f'SELECT {SELECT_COLUMNS} FROM clients WHERE "id" = $1'

SELECT_UNPROCESSED_CLIENTS = f"""
    SELECT {SELECT_COLUMNS}
    FROM clients
    WHERE "processed" = false
    ORDER BY "createdAt" ASC
"""

SELECT_DISTINCT_SELLERS = """
    SELECT DISTINCT "assignedSeller" AS value FROM clients
    WHERE "assignedSeller" IS NOT NULL
    ORDER BY value
"""

SELECT_DISTINCT_INDUSTRIES = """
    SELECT DISTINCT "industry" AS value FROM clients
    WHERE "industry" IS NOT NULL
    ORDER BY value
"""

SELECT_DISTINCT_SENTIMENTS = """
    SELECT DISTINCT "sentiment" AS value FROM clients
    WHERE "sentiment" IS NOT NULL
    ORDER BY value
"""

SELECT_DISTINCT_DISCOVERY_SOURCES = """
    SELECT DISTINCT "discoverySource" AS value FROM clients
    WHERE "discoverySource" IS NOT NULL
    ORDER BY value
"""


def build_client_filter_clause(
    search: Optional[str] = None,
    assigned_seller: Optional[str] = None,
    industry: Optional[str] = None,
    closed: Optional[bool] = None,
    sentiment: Optional[str] = None,
    discovery_source: Optional[str] = None,
) -> Tuple[str, List[Any]]:
    """
    Build the WHERE clause and parameters for the client listing.

    Args:
        search: Case-insensitive substring matched against name, email and
            transcription.
        assigned_seller: Exact seller match.
        industry: Exact industry match.
        closed: Deal status.
        sentiment: Exact sentiment match.
        discovery_source: Exact discovery source match.

    Returns:
        Tuple of (clause, params). The clause is empty when no filter is set,
        otherwise it starts with "WHERE".
    """
    conditions: List[str] = []
    params: List[Any] = []

    def add(condition: str, value: Any) -> None:
        params.append(value)
        conditions.append(condition.format(n=len(params)))

    if assigned_seller:
        add('"assignedSeller" = ${n}', assigned_seller)
    if industry:
        add('"industry" = ${n}', industry)
    if closed is not None:
        add('"closed" = ${n}', closed)
    if sentiment:
        add('"sentiment" = ${n}', sentiment)
    if discovery_source:
        add('"discoverySource" = ${n}', discovery_source)
    if search:
        add(
            '("name" ILIKE ${n} OR "email" ILIKE ${n} OR "transcription" ILIKE ${n})',
            f"%{search}%",
        )

    clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return clause, params


def get_client_list_query(where_clause: str, param_count: int) -> str:
    """
    Page query for the client listing, newest meeting first.

    LIMIT and OFFSET take the two parameters following the filter parameters.
    """
    return f"""
        SELECT {SELECT_COLUMNS}
        FROM clients
        {where_clause}
        ORDER BY "meetingDate" DESC
        LIMIT ${param_count + 1} OFFSET ${param_count + 2}
    """


def get_client_count_query(where_clause: str) -> str:
    """Total rows matching the listing filters."""
    return f"SELECT COUNT(*) FROM clients {where_clause}"
