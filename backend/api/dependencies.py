"""
Service factories for the API routers.

Every request gets fresh service objects bound to the shared pool; the
Anthropic client is built once per process. Tests replace any factory via
app.dependency_overrides.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from backend.core.config import get_settings
from backend.core.dependencies import PoolDep, PoolProviderDep, SettingsDep
from backend.core.logging import get_component_logger
from backend.llm import AnthropicClient, CategorizationService, InsightGenerator
from backend.services import (
    ClientsService,
    ConversionAnalysisService,
    IndustriesService,
    InsightsService,
    OverviewService,
    PainPointsService,
    SellersService,
)


@lru_cache()
def get_llm_client() -> AnthropicClient:
    return AnthropicClient.from_settings(get_settings())


LLMClientDep = Annotated[AnthropicClient, Depends(get_llm_client)]


def get_overview_service(pool: PoolDep) -> OverviewService:
    return OverviewService(pool)


def get_conversion_service(pool: PoolDep) -> ConversionAnalysisService:
    return ConversionAnalysisService(pool)


def get_pain_points_service(pool: PoolDep) -> PainPointsService:
    return PainPointsService(pool)


def get_industries_service(pool: PoolDep, settings: SettingsDep) -> IndustriesService:
    return IndustriesService(pool, reference_date=settings.reference_date)


def get_sellers_service(pool: PoolDep, settings: SettingsDep) -> SellersService:
    return SellersService(pool, reference_date=settings.reference_date)


def get_insights_service(
    pool_provider: PoolProviderDep,
    settings: SettingsDep,
    llm_client: LLMClientDep,
) -> InsightsService:
    generator = InsightGenerator(
        llm_client,
        product_name=settings.product_name,
        logger=get_component_logger('InsightGenerator'),
    )
    return InsightsService(pool_provider, generator)


def get_clients_service(pool: PoolDep) -> ClientsService:
    return ClientsService(pool)


def get_categorization_service(
    pool: PoolDep,
    settings: SettingsDep,
    llm_client: LLMClientDep,
) -> CategorizationService:
    return CategorizationService(
        llm_client,
        ClientsService(pool),
        product_name=settings.product_name,
        delay_seconds=settings.categorization_delay_seconds,
    )


OverviewServiceDep = Annotated[OverviewService, Depends(get_overview_service)]
ConversionServiceDep = Annotated[ConversionAnalysisService, Depends(get_conversion_service)]
PainPointsServiceDep = Annotated[PainPointsService, Depends(get_pain_points_service)]
IndustriesServiceDep = Annotated[IndustriesService, Depends(get_industries_service)]
SellersServiceDep = Annotated[SellersService, Depends(get_sellers_service)]
InsightsServiceDep = Annotated[InsightsService, Depends(get_insights_service)]
ClientsServiceDep = Annotated[ClientsService, Depends(get_clients_service)]
CategorizationServiceDep = Annotated[CategorizationService, Depends(get_categorization_service)]
