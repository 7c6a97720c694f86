"""
Pydantic request/response models for the Meeting Analytics backend.

This module provides type-safe data validation and serialization for all API
contracts: client records and their create/update payloads, aggregation DTOs
(overview, dimension breakdowns, pain points, volume buckets, industries,
sellers, timelines), AI insight DTOs, and categorization results.

Field names are camelCase because they are the JSON contract consumed by the
dashboard frontend and mirror the quoted column names of the clients table.

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Client Records
# =============================================================================


class ClientCreate(BaseModel):
    """
    Input for creating one client-meeting record.

    Produced by the CSV ingester or posted directly to POST /clients. New
    records always start unprocessed.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Ana Torres",
                "email": "ana.torres@example.com",
                "phone": "+56 9 1234 5678",
                "assignedSeller": "Carlos",
                "meetingDate": "2024-03-14T00:00:00Z",
                "closed": True,
                "transcription": "We receive around 200 questions a week..."
            }
        }
    )

    name: str = Field(..., min_length=1, description="Client name")
    email: str = Field(..., min_length=1, description="Client email (unique)")
    phone: str = Field(default="", description="Client phone number")
    assignedSeller: str = Field(..., min_length=1, description="Seller who ran the meeting")
    meetingDate: datetime = Field(..., description="Meeting timestamp")
    closed: bool = Field(default=False, description="Whether the deal was closed")
    transcription: str = Field(..., min_length=1, description="Meeting transcription")


class ClientUpdate(BaseModel):
    """
    Partial update for a client record.

    Only the fields explicitly present in the payload are written. Columns
    that are NOT NULL in the clients table may be omitted but not set to null.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    assignedSeller: Optional[str] = None
    meetingDate: Optional[datetime] = None
    closed: Optional[bool] = None
    transcription: Optional[str] = None
    industry: Optional[str] = None
    operationSize: Optional[str] = None
    interactionVolume: Optional[int] = Field(default=None, ge=0)
    discoverySource: Optional[str] = None
    mainMotivation: Optional[str] = None
    urgencyLevel: Optional[str] = None
    painPoints: Optional[List[str]] = None
    technicalRequirements: Optional[List[str]] = None
    sentiment: Optional[str] = None

    @field_validator(
        'name', 'email', 'phone', 'assignedSeller', 'meetingDate', 'closed',
        'transcription', 'painPoints', 'technicalRequirements',
        mode='before',
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """Explicit null is only accepted for the nullable categorical columns."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class ClientRecord(BaseModel):
    """
    One stored client-meeting record.

    Categorical fields (industry, sentiment, urgencyLevel, discoverySource,
    operationSize, mainMotivation) and interactionVolume are only populated
    once the record has been processed by the categorization pipeline.
    """
    id: str
    name: str
    email: str
    phone: str = ""
    assignedSeller: str
    meetingDate: datetime
    closed: bool = False
    transcription: str
    industry: Optional[str] = None
    operationSize: Optional[str] = None
    interactionVolume: Optional[int] = None
    discoverySource: Optional[str] = None
    mainMotivation: Optional[str] = None
    urgencyLevel: Optional[str] = None
    painPoints: List[str] = Field(default_factory=list)
    technicalRequirements: List[str] = Field(default_factory=list)
    sentiment: Optional[str] = None
    processed: bool = False
    processedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ClientRecord":
        """Build a ClientRecord from an asyncpg Record (or any mapping)."""
        data = dict(record)
        data['painPoints'] = list(data.get('painPoints') or [])
        data['technicalRequirements'] = list(data.get('technicalRequirements') or [])
        data['phone'] = data.get('phone') or ""
        return cls.model_validate(data)


class ClientFilters(BaseModel):
    """Filters and pagination for GET /clients."""
    search: Optional[str] = None
    assignedSeller: Optional[str] = None
    industry: Optional[str] = None
    closed: Optional[bool] = None
    sentiment: Optional[str] = None
    discoverySource: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class ClientListResponse(BaseModel):
    """Paginated client listing."""
    clients: List[ClientRecord]
    total: int
    page: int
    limit: int


class UniqueValues(BaseModel):
    """Distinct filter values for the dashboard's filter dropdowns."""
    sellers: List[str] = Field(default_factory=list)
    industries: List[str] = Field(default_factory=list)
    sentiments: List[str] = Field(default_factory=list)
    discoverySources: List[str] = Field(default_factory=list)


class DeleteResult(BaseModel):
    """Number of rows removed by a bulk delete."""
    count: int


# =============================================================================
# Overview & Dimension Metrics
# =============================================================================


class OverviewMetrics(BaseModel):
    """
    Global totals across every stored client.

    totalOpen = totalClients - totalClosed and
    unprocessedClients = totalClients - processedClients.
    """
    totalClients: int = Field(..., ge=0)
    totalClosed: int = Field(..., ge=0)
    totalOpen: int = Field(..., ge=0)
    conversionRate: float = Field(..., ge=0.0, le=100.0)
    processedClients: int = Field(..., ge=0)
    unprocessedClients: int = Field(..., ge=0)


class DimensionValue(BaseModel):
    """Conversion metrics for one value of a dimension."""
    value: str
    count: int = Field(..., ge=0)
    closed: int = Field(..., ge=0)
    conversionRate: float = Field(..., ge=0.0, le=100.0)
    totalInteractionVolume: Optional[int] = Field(
        default=None,
        description="Sum of interaction volume (industry dimension only)"
    )


class DimensionMetrics(BaseModel):
    """Per-value breakdown of one dimension, sorted by count descending."""
    dimension: str
    values: List[DimensionValue] = Field(default_factory=list)


class UploadResponse(BaseModel):
    """Response of POST /clients/upload."""
    message: str
    clientsCreated: int
    metrics: OverviewMetrics


# =============================================================================
# Conversion & Timeline
# =============================================================================


class ConversionAnalysis(BaseModel):
    """All five dimension breakdowns, fetched concurrently."""
    byIndustry: DimensionMetrics
    bySentiment: DimensionMetrics
    byUrgency: DimensionMetrics
    byDiscovery: DimensionMetrics
    byOperationSize: DimensionMetrics


class TimelineMetric(BaseModel):
    """Meetings held on one UTC calendar day."""
    date: str = Field(..., description="UTC date, YYYY-MM-DD")
    total: int = Field(..., ge=0)
    closed: int = Field(..., ge=0)


class TimelineIndustry(BaseModel):
    """An industry's share of one month."""
    industry: str
    count: int
    sentiment: str


class MonthlyTimelineBucket(BaseModel):
    """Monthly aggregate used to build the timeline insight prompt."""
    monthKey: str = Field(..., description="YYYY-MM, used for ordering")
    month: str = Field(..., description="Display label, e.g. 'January 2024'")
    totalMeetings: int
    totalClosed: int
    conversionRate: float = Field(..., description="One decimal place")
    avgSentiment: str = "neutral"
    topIndustries: List[TimelineIndustry] = Field(default_factory=list)


# =============================================================================
# Pain Points, Requirements & Volume
# =============================================================================


class PainPoint(BaseModel):
    """A normalized pain point with its canonical spelling."""
    painPoint: str
    count: int
    conversionRate: float


class TechnicalRequirement(BaseModel):
    """A technical requirement grouped by exact text."""
    requirement: str
    count: int


class VolumeVsConversion(BaseModel):
    """Conversion for one fixed interaction-volume range."""
    volumeRange: str
    count: int = Field(..., ge=0)
    closed: int = Field(default=0, ge=0)
    conversionRate: float = Field(..., ge=0.0, le=100.0)


# =============================================================================
# Industries
# =============================================================================


class IndustrySummary(BaseModel):
    """Clients, closed deals and conversion rate for one industry."""
    industry: str
    clients: int
    closed: int
    conversionRate: float


class IndustryRanking(IndustrySummary):
    """IndustrySummary plus the dominant sentiment and urgency labels."""
    averageSentiment: str
    averageUrgency: str


class NewIndustriesLastMonth(BaseModel):
    """Industries first seen during the previous calendar month."""
    industries: List[IndustrySummary] = Field(default_factory=list)
    month: str


class IndustriesToWatch(BaseModel):
    """Threshold-based industry segmentation; lists are capped at five entries."""
    expansionOpportunities: List[IndustrySummary] = Field(default_factory=list)
    strategyNeeded: List[IndustrySummary] = Field(default_factory=list)


# =============================================================================
# Sellers
# =============================================================================


class SellerMetrics(BaseModel):
    """Clients, closed deals and conversion rate for one seller."""
    seller: str
    total: int = Field(..., ge=0)
    closed: int = Field(..., ge=0)
    conversionRate: float = Field(..., ge=0.0, le=100.0)


class WeekRange(BaseModel):
    """Inclusive first and last day of a seven-day window, YYYY-MM-DD."""
    start: str
    end: str


class SellerOfWeek(BaseModel):
    """Top sellers by closed deals inside one week."""
    weekPodium: List[SellerMetrics] = Field(default_factory=list)
    weekRange: WeekRange


class AnnualSellerRanking(BaseModel):
    """Sellers with at least one closed deal in the year, by closed deals descending."""
    year: int
    ranking: List[SellerMetrics] = Field(default_factory=list)


class SellerTimelinePoint(BaseModel):
    """
    Closed deals per seller in one period.

    Every seller with a closed deal anywhere in the timeline appears in every
    period, with 0 where they closed nothing.
    """
    period: str = Field(..., description="YYYY-Www or YYYY-MM")
    sellers: Dict[str, int] = Field(default_factory=dict)


class SellerCorrelation(BaseModel):
    """A dimension value where a seller converts notably well."""
    seller: str
    dimension: str
    value: str
    total: int
    closed: int
    successRate: float
    sellerAvgConversion: float
    overallAvg: float
    performanceVsAvg: float


class SellerInsight(BaseModel):
    """Rule-based month-over-month observation about a seller."""
    seller: str
    type: str = Field(..., description="positive, negative or neutral")
    metric: str = Field(..., description="conversions or urgency")
    message: str
    change: float = 0.0


# =============================================================================
# AI Insights
# =============================================================================


class Insight(BaseModel):
    """A single narrative insight."""
    insight: str


class TimelineInsight(BaseModel):
    """Structured narrative about recent monthly trends."""
    keyFindings: List[str] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ClientPerceptionInsight(BaseModel):
    """How clients perceive the product, derived from transcripts."""
    positiveAspects: str = ""
    concerns: str = ""
    successFactors: str = ""
    recommendations: str = ""


# =============================================================================
# Categorization
# =============================================================================


class CategorizationResult(BaseModel):
    """Derived fields extracted from a transcription by the LLM."""
    industry: str = "Unknown"
    operationSize: str = "medium"
    interactionVolume: int = Field(default=0, ge=0)
    discoverySource: str = "Unknown"
    mainMotivation: str = "Unknown"
    urgencyLevel: str = "planned"
    painPoints: List[str] = Field(default_factory=list)
    technicalRequirements: List[str] = Field(default_factory=list)
    sentiment: str = "neutral"


class ProcessingResult(BaseModel):
    """Outcome of bulk categorization."""
    processed: int
    failed: int


class MessageResponse(BaseModel):
    """Plain acknowledgement message."""
    message: str


class ProcessAllResponse(ProcessingResult):
    """Bulk categorization outcome with an acknowledgement message."""
    message: str = "Processing completed"
