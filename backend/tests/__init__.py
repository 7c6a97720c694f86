'''
Meeting Analytics Backend Test Suite

Unit tests for the FastAPI backend. No database or Anthropic API is needed:
asyncpg pools and the LLM client are mocked in conftest.py.

Test Modules:
-------------
- test_overview.py: Headline metrics and dimension breakdowns
  - Conversion rate rounding and divide-by-zero
  - Dimension validation before any query
  - Daily meeting timeline and conversion analysis

- test_pain_points.py: Pain point and technical requirement aggregation
  - Normalization and grouping of free-text pain points
  - Per-pain-point conversion rates
  - Interaction volume ranges

- test_industries.py: Industry ranking, new industries, industries to watch

- test_timeline.py: Monthly buckets and the timeline prompt

- test_llm.py: Anthropic client, response parsing, insight generation,
  transcription categorization

- test_insights.py: NoData / HasData / Failure outcomes of every insight

- test_ingestion.py: CSV parsing (headers, BOM, dates, closed flag)

- test_clients.py: Client CRUD queries and pagination

- test_api.py: HTTP status mapping and response shapes

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
