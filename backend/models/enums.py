"""
Enumeration definitions for the Meeting Analytics backend.

All enums inherit from both `str` and `Enum` so they serialize as their plain
string values inside Pydantic models and JSON responses.
"""

from enum import Enum


class Dimension(str, Enum):
    """
    Categorical client attributes usable as a group-by key.

    The value is the API-facing name (query parameter of /analytics/by-dimension)
    and also the quoted column name in the clients table.
    """
    INDUSTRY = "industry"
    SENTIMENT = "sentiment"
    URGENCY_LEVEL = "urgencyLevel"
    DISCOVERY_SOURCE = "discoverySource"
    OPERATION_SIZE = "operationSize"


class Sentiment(str, Enum):
    """Overall tone of the prospect during the meeting."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    SKEPTICAL = "skeptical"


class UrgencyLevel(str, Enum):
    """How soon the prospect intends to adopt a solution."""
    IMMEDIATE = "immediate"
    PLANNED = "planned"
    EXPLORATORY = "exploratory"


class OperationSize(str, Enum):
    """
    Prospect size bucket derived from weekly interaction volume.

    Guideline used by the categorization prompt: <100 small, 100-250 medium,
    >250 large.
    """
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Granularity(str, Enum):
    """Period size of the sellers timeline."""
    WEEK = "week"
    MONTH = "month"
