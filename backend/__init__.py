"""
Meeting Analytics Backend Package.

FastAPI service for a sales-meeting analytics dashboard. Client meeting
records are imported from CSV, categorized by an LLM, and aggregated into
conversion metrics and narrative insights.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, logging, errors and dependencies
    - llm: Anthropic client, prompts, insight generation and categorization
    - models: Pydantic schemas and enums
    - services: Aggregation, insight and client management services
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
