"""
SQL Query Module for the Meeting Analytics backend.

Provides parameterized SQL for:
- The clients table: DDL, CRUD, listing filters (client_queries)
- Analytics: overview counts, dimension breakdowns and the projections fed
  to the in-memory aggregators (analytics_queries)

Keeps data access separate from the aggregation logic in backend.services.

Example usage:
    from backend.sql import get_dimension_metrics_query, COUNT_ALL_CLIENTS

    sql = get_dimension_metrics_query('industry')
"""

from backend.sql.client_queries import (
    CREATE_CLIENTS_TABLE,
    CREATE_CLIENTS_INDEXES,
    CLIENT_COLUMNS,
    UPDATABLE_COLUMNS,
    INSERT_CLIENT,
    INSERT_CLIENT_SKIP_DUPLICATES,
    MARK_CLIENT_PROCESSED,
    DELETE_ALL_CLIENTS,
    SELECT_CLIENT_BY_ID,
    SELECT_UNPROCESSED_CLIENTS,
    SELECT_DISTINCT_SELLERS,
    SELECT_DISTINCT_INDUSTRIES,
    SELECT_DISTINCT_SENTIMENTS,
    SELECT_DISTINCT_DISCOVERY_SOURCES,
    build_client_filter_clause,
    get_client_list_query,
    get_client_count_query,
    get_update_client_query,
)

from backend.sql.analytics_queries import (
    DIMENSION_COLUMNS,
    COUNT_ALL_CLIENTS,
    COUNT_CLOSED_CLIENTS,
    COUNT_PROCESSED_CLIENTS,
    SELECT_MEETING_DATES,
    SELECT_PAIN_POINTS,
    SELECT_TECHNICAL_REQUIREMENTS,
    SELECT_INTERACTION_VOLUMES,
    SELECT_INDUSTRY_ROWS,
    SELECT_INDUSTRY_ROWS_IN_WINDOW,
    SELECT_INDUSTRIES_BEFORE,
    SELECT_TIMELINE_ROWS,
    SELECT_PERCEPTION_SAMPLE,
    SELECT_SOLUTIONS_SAMPLE,
    SELECT_SELLER_TOTALS,
    SELECT_SELLER_ROWS_IN_WINDOW,
    SELECT_SELLER_ROWS_SINCE,
    SELECT_CLOSED_SELLER_DATES,
    SELECT_SELLER_CORRELATION_ROWS,
    get_dimension_metrics_query,
)


__all__ = [
    # Client queries
    'CREATE_CLIENTS_TABLE',
    'CREATE_CLIENTS_INDEXES',
    'CLIENT_COLUMNS',
    'UPDATABLE_COLUMNS',
    'INSERT_CLIENT',
    'INSERT_CLIENT_SKIP_DUPLICATES',
    'MARK_CLIENT_PROCESSED',
    'DELETE_ALL_CLIENTS',
    'SELECT_CLIENT_BY_ID',
    'SELECT_UNPROCESSED_CLIENTS',
    'SELECT_DISTINCT_SELLERS',
    'SELECT_DISTINCT_INDUSTRIES',
    'SELECT_DISTINCT_SENTIMENTS',
    'SELECT_DISTINCT_DISCOVERY_SOURCES',
    'build_client_filter_clause',
    'get_client_list_query',
    'get_client_count_query',
    'get_update_client_query',
    # Analytics queries
    'DIMENSION_COLUMNS',
    'COUNT_ALL_CLIENTS',
    'COUNT_CLOSED_CLIENTS',
    'COUNT_PROCESSED_CLIENTS',
    'SELECT_MEETING_DATES',
    'SELECT_PAIN_POINTS',
    'SELECT_TECHNICAL_REQUIREMENTS',
    'SELECT_INTERACTION_VOLUMES',
    'SELECT_INDUSTRY_ROWS',
    'SELECT_INDUSTRY_ROWS_IN_WINDOW',
    'SELECT_INDUSTRIES_BEFORE',
    'SELECT_TIMELINE_ROWS',
    'SELECT_PERCEPTION_SAMPLE',
    'SELECT_SOLUTIONS_SAMPLE',
    'SELECT_SELLER_TOTALS',
    'SELECT_SELLER_ROWS_IN_WINDOW',
    'SELECT_SELLER_ROWS_SINCE',
    'SELECT_CLOSED_SELLER_DATES',
    'SELECT_SELLER_CORRELATION_ROWS',
    'get_dimension_metrics_query',
]
