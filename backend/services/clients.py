"""
Client record management.

ClientsService is the only writer of the clients table. Records enter as
unprocessed (single create or CSV bulk import), are categorized once by the
processing pipeline (mark_as_processed), may be edited explicitly, and leave
only through delete_all.

Key Methods:
- create_client / create_many_clients: inserts, bulk insert skips duplicate emails
- find_all: filtered, paginated listing (page and count queries run concurrently)
- find_one / update_client: single-record access, ClientNotFoundError if missing
- get_unprocessed / mark_as_processed: categorization pipeline hooks
- get_unique_values: distinct filter options for the dashboard
"""

import asyncio
import uuid
from typing import List, Optional, Sequence

from asyncpg import Pool

from backend.core.errors import ClientNotFoundError
from backend.core.logging import get_component_logger
from backend.models import (
    CategorizationResult,
    ClientCreate,
    ClientFilters,
    ClientListResponse,
    ClientRecord,
    ClientUpdate,
    DeleteResult,
    UniqueValues,
)
from backend.services.metrics import to_naive_utc, utc_now
from backend.sql import (
    DELETE_ALL_CLIENTS,
    INSERT_CLIENT,
    INSERT_CLIENT_SKIP_DUPLICATES,
    MARK_CLIENT_PROCESSED,
    SELECT_CLIENT_BY_ID,
    SELECT_DISTINCT_DISCOVERY_SOURCES,
    SELECT_DISTINCT_INDUSTRIES,
    SELECT_DISTINCT_SELLERS,
    SELECT_DISTINCT_SENTIMENTS,
    SELECT_UNPROCESSED_CLIENTS,
    build_client_filter_clause,
    get_client_count_query,
    get_client_list_query,
    get_update_client_query,
)


def new_client_id() -> str:
    return str(uuid.uuid4())


def client_insert_params(client: ClientCreate, now) -> list:
    """Positional parameters for INSERT_CLIENT / INSERT_CLIENT_SKIP_DUPLICATES."""
    return [
        new_client_id(),
        client.name,
        client.email,
        client.phone,
        client.assignedSeller,
        to_naive_utc(client.meetingDate),
        client.closed,
        client.transcription,
        now,
    ]


class ClientsService:
    """CRUD and pipeline access to client records."""

    def __init__(self, pool: Pool, logger=None):
        self.pool = pool
        self.logger = logger or get_component_logger('ClientsService')

    # =========================================================================
    # Writes
    # =========================================================================

    async def create_client(self, client: ClientCreate) -> ClientRecord:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(INSERT_CLIENT, *client_insert_params(client, utc_now()))

        record = ClientRecord.from_record(row)
        self.logger.info(f"Created client {record.id}")
        return record

    async def create_many_clients(self, clients: Sequence[ClientCreate]) -> int:
        """
        Insert clients in a single transaction, skipping duplicate emails.

        Returns:
            int: Number of rows actually created.
        """
        if not clients:
            return 0

        now = utc_now()
        created = 0
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                for client in clients:
                    client_id = await conn.fetchval(
                        INSERT_CLIENT_SKIP_DUPLICATES, *client_insert_params(client, now)
                    )
                    if client_id is not None:
                        created += 1

        skipped = len(clients) - created
        self.logger.info(f"Bulk insert created {created} clients ({skipped} duplicates skipped)")
        return created

    async def update_client(self, client_id: str, update: ClientUpdate) -> ClientRecord:
        """
        Apply the fields explicitly set in the update.

        An empty update returns the current record unchanged.

        Raises:
            ClientNotFoundError: If the id does not exist.
        """
        changes = update.model_dump(exclude_unset=True)
        if not changes:
            return await self.find_one(client_id)

        if changes.get('meetingDate') is not None:
            changes['meetingDate'] = to_naive_utc(changes['meetingDate'])

        columns = list(changes)
        query = get_update_client_query(columns)
        params = [client_id, *(changes[column] for column in columns), utc_now()]

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *params)

        if row is None:
            raise ClientNotFoundError(client_id)

        self.logger.info(f"Updated client {client_id}: {', '.join(columns)}")
        return ClientRecord.from_record(row)

    async def delete_all(self) -> DeleteResult:
        async with self.pool.acquire() as conn:
            status = await conn.execute(DELETE_ALL_CLIENTS)

        # asyncpg returns the command tag, e.g. "DELETE 42"
        count = int(status.split()[-1]) if status else 0
        self.logger.info(f"Deleted {count} clients")
        return DeleteResult(count=count)

    async def mark_as_processed(self, client_id: str, result: CategorizationResult) -> ClientRecord:
        """
        Store categorization output and flag the record as processed.

        Raises:
            ClientNotFoundError: If the id does not exist.
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                MARK_CLIENT_PROCESSED,
                client_id,
                result.industry,
                result.operationSize,
                result.interactionVolume,
                result.discoverySource,
                result.mainMotivation,
                result.urgencyLevel,
                result.painPoints,
                result.technicalRequirements,
                result.sentiment,
                utc_now(),
            )

        if row is None:
            raise ClientNotFoundError(client_id)
        return ClientRecord.from_record(row)

    # =========================================================================
    # Reads
    # =========================================================================

    async def find_all(self, filters: Optional[ClientFilters] = None) -> ClientListResponse:
        filters = filters or ClientFilters()
        where_clause, params = build_client_filter_clause(
            search=filters.search,
            assigned_seller=filters.assignedSeller,
            industry=filters.industry,
            closed=filters.closed,
            sentiment=filters.sentiment,
            discovery_source=filters.discoverySource,
        )
        offset = (filters.page - 1) * filters.limit

        async def fetch_page():
            async with self.pool.acquire() as conn:
                return await conn.fetch(
                    get_client_list_query(where_clause, len(params)),
                    *params, filters.limit, offset,
                )

        async def fetch_total():
            async with self.pool.acquire() as conn:
                return await conn.fetchval(get_client_count_query(where_clause), *params)

        rows, total = await asyncio.gather(fetch_page(), fetch_total())

        return ClientListResponse(
            clients=[ClientRecord.from_record(row) for row in rows],
            total=int(total or 0),
            page=filters.page,
            limit=filters.limit,
        )

    async def find_one(self, client_id: str) -> ClientRecord:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(SELECT_CLIENT_BY_ID, client_id)

        if row is None:
            raise ClientNotFoundError(client_id)
        return ClientRecord.from_record(row)

    async def get_unprocessed(self) -> List[ClientRecord]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(SELECT_UNPROCESSED_CLIENTS)
        return [ClientRecord.from_record(row) for row in rows]

    async def get_unique_values(self) -> UniqueValues:
        async def fetch_values(query: str) -> List[str]:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query)
            return [row['value'] for row in rows]

        sellers, industries, sentiments, sources = await asyncio.gather(
            fetch_values(SELECT_DISTINCT_SELLERS),
            fetch_values(SELECT_DISTINCT_INDUSTRIES),
            fetch_values(SELECT_DISTINCT_SENTIMENTS),
            fetch_values(SELECT_DISTINCT_DISCOVERY_SOURCES),
        )
        return UniqueValues(
            sellers=sellers,
            industries=industries,
            sentiments=sentiments,
            discoverySources=sources,
        )
