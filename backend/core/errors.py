"""
Domain error types for the Meeting Analytics backend.

Services raise these exceptions; the API layer maps them onto HTTP status codes:

- InvalidDimensionError -> 400 (raised before any query is issued)
- InvalidWeekStartError -> 400 (raised before any query is issued)
- CsvIngestionError     -> 400
- ClientNotFoundError   -> 404
- LLMNotConfiguredError -> 503 (categorization endpoints only; insights absorb it)

Each error subclasses the closest built-in so callers that only know the
standard library hierarchy (ValueError, LookupError, RuntimeError) still
catch them.
"""

from typing import Iterable, Optional


class InvalidDimensionError(ValueError):
    """Raised when a dimension name is not one of the supported group-by keys."""

    def __init__(self, dimension: str, allowed: Iterable[str]):
        self.dimension = dimension
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid dimension '{dimension}'. Must be one of: {', '.join(self.allowed)}"
        )


class InvalidWeekStartError(ValueError):
    """Raised when a seller-of-the-week start date cannot be parsed."""

    def __init__(self, week_start: str):
        self.week_start = week_start
        super().__init__(
            f"Invalid weekStart '{week_start}'. Use 'current' or an ISO date (YYYY-MM-DD)"
        )


class ClientNotFoundError(LookupError):
    """Raised when a client id does not exist."""

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client with ID {client_id} not found")


class CsvIngestionError(ValueError):
    """Raised when an uploaded CSV cannot be turned into client records."""

    def __init__(self, message: str, rows: Optional[Iterable[int]] = None):
        self.rows = list(rows or [])
        super().__init__(message)


class LLMNotConfiguredError(RuntimeError):
    """Raised when a generation call is attempted without an Anthropic API key."""

    def __init__(self, message: str = 'Anthropic API not configured'):
        super().__init__(message)
