"""
Package initialization file for backend models.

Exports all Pydantic schemas and enumerations so other backend modules can
import them from backend.models directly:

    from backend.models import Dimension, ClientRecord, OverviewMetrics
"""

# =============================================================================
# Enums
# =============================================================================

from backend.models.enums import (
    Dimension,
    Granularity,
    OperationSize,
    Sentiment,
    UrgencyLevel,
)


# =============================================================================
# Schemas
# =============================================================================

from backend.models.schemas import (
    # Client records
    ClientCreate,
    ClientUpdate,
    ClientRecord,
    ClientFilters,
    ClientListResponse,
    UniqueValues,
    DeleteResult,
    UploadResponse,
    # Overview & dimensions
    OverviewMetrics,
    DimensionValue,
    DimensionMetrics,
    # Conversion & timeline
    ConversionAnalysis,
    TimelineMetric,
    TimelineIndustry,
    MonthlyTimelineBucket,
    # Pain points & volume
    PainPoint,
    TechnicalRequirement,
    VolumeVsConversion,
    # Industries
    IndustrySummary,
    IndustryRanking,
    NewIndustriesLastMonth,
    IndustriesToWatch,
    # Sellers
    SellerMetrics,
    WeekRange,
    SellerOfWeek,
    AnnualSellerRanking,
    SellerTimelinePoint,
    SellerCorrelation,
    SellerInsight,
    # Insights
    Insight,
    TimelineInsight,
    ClientPerceptionInsight,
    # Categorization
    CategorizationResult,
    ProcessingResult,
    ProcessAllResponse,
    MessageResponse,
)


__all__ = [
    # Enums
    "Dimension",
    "Granularity",
    "OperationSize",
    "Sentiment",
    "UrgencyLevel",
    # Client records
    "ClientCreate",
    "ClientUpdate",
    "ClientRecord",
    "ClientFilters",
    "ClientListResponse",
    "UniqueValues",
    "DeleteResult",
    "UploadResponse",
    # Overview & dimensions
    "OverviewMetrics",
    "DimensionValue",
    "DimensionMetrics",
    # Conversion & timeline
    "ConversionAnalysis",
    "TimelineMetric",
    "TimelineIndustry",
    "MonthlyTimelineBucket",
    # Pain points & volume
    "PainPoint",
    "TechnicalRequirement",
    "VolumeVsConversion",
    # Industries
    "IndustrySummary",
    "IndustryRanking",
    "NewIndustriesLastMonth",
    "IndustriesToWatch",
    # Sellers
    "SellerMetrics",
    "WeekRange",
    "SellerOfWeek",
    "AnnualSellerRanking",
    "SellerTimelinePoint",
    "SellerCorrelation",
    "SellerInsight",
    # Insights
    "Insight",
    "TimelineInsight",
    "ClientPerceptionInsight",
    # Categorization
    "CategorizationResult",
    "ProcessingResult",
    "ProcessAllResponse",
    "MessageResponse",
]
