"""
Insight generators: aggregated data in, typed narrative out.

InsightGenerator owns the prompt -> model -> parse round trip for every
insight kind. It does not catch API errors; the insight services decide how to
degrade (see backend/services/insights.py).

Behavior shared by all generators:
- Without an API key no call is made and every text field reads
  NOT_CONFIGURED_MESSAGE.
- An empty model response is replaced with a kind-specific default sentence.
- JSON insights are parsed leniently; missing or blank keys fall back per field.
"""

from typing import Any, Mapping, Optional, Sequence

from backend.llm.client import AnthropicClient
from backend.llm.parser import ResponseParser, coerce_string_list, coerce_text
from backend.llm import prompts
from backend.core.logging import get_component_logger
from backend.models import (
    ClientPerceptionInsight,
    DimensionValue,
    MonthlyTimelineBucket,
    PainPoint,
    TimelineInsight,
    VolumeVsConversion,
)


# =============================================================================
# CONSTANTS
# =============================================================================

MAX_TOKENS_STANDARD = 200
MAX_TOKENS_MEDIUM = 250
MAX_TOKENS_TIMELINE = 400
MAX_TOKENS_CLIENT_PERCEPTION = 600

LOG_PREVIEW_LENGTH = 100

NOT_CONFIGURED_MESSAGE = 'AI insights unavailable - API not configured'
INSUFFICIENT_VOLUME_MESSAGE = 'Insufficient data to analyze volume vs conversion relationship.'
INSUFFICIENT_CONVERSION_MESSAGE = 'Insufficient data to analyze conversion rates reliably.'

DEFAULT_PAIN_POINTS_TEXT = 'The analysis reveals common client challenges that impact deal conversion rates.'
DEFAULT_VOLUME_TEXT = (
    'The analysis shows a correlation between interaction volume and conversion rates, '
    'indicating optimal engagement levels for closing deals.'
)
DEFAULT_SOLUTIONS_TEXT = (
    'Clients are seeking various solutions including automation, efficiency improvements, '
    'and enhanced customer engagement capabilities.'
)
DEFAULT_DISTRIBUTION_TEXT = 'The client base shows diverse industry representation with varying concentration levels.'

TIMELINE_FALLBACK = TimelineInsight(
    keyFindings=['Timeline analysis indicates stable performance with ongoing monitoring recommended.'],
    reasons=['Further analysis needed to identify specific reasons.'],
    recommendations=['Continue monitoring recent trends and patterns.'],
)


def perception_fallback(product_name: str) -> ClientPerceptionInsight:
    return ClientPerceptionInsight(
        positiveAspects=f'Analysis of client transcripts reveals diverse perceptions of {product_name}.',
        concerns='No significant concerns identified.',
        successFactors='Further analysis needed to identify success factors.',
        recommendations='Continue monitoring client feedback for actionable insights.',
    )


class InsightGenerator:
    """Builds prompts, calls the model and maps responses onto insight DTOs."""

    def __init__(
        self,
        client: AnthropicClient,
        parser: Optional[ResponseParser] = None,
        product_name: str = 'our platform',
        logger=None,
    ):
        self.client = client
        self.parser = parser or ResponseParser()
        self.product_name = product_name
        self.logger = logger or get_component_logger('InsightGenerator')

    def is_configured(self) -> bool:
        return self.client.is_configured()

    async def _generate_text(self, kind: str, prompt: str, max_tokens: int, default: str) -> str:
        text = (await self.client.send_message(prompt, max_tokens=max_tokens)).strip()
        self.logger.info(f"{kind} insight generated: {text[:LOG_PREVIEW_LENGTH]}")
        return text or default

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    async def generate_pain_points_insight(self, pain_points: Sequence[PainPoint]) -> str:
        if not self.is_configured():
            return NOT_CONFIGURED_MESSAGE
        return await self._generate_text(
            'Pain points',
            prompts.build_pain_points_prompt(pain_points),
            MAX_TOKENS_STANDARD,
            DEFAULT_PAIN_POINTS_TEXT,
        )

    async def generate_volume_insight(self, volume_data: Sequence[VolumeVsConversion]) -> str:
        if not self.is_configured():
            return NOT_CONFIGURED_MESSAGE
        if not any(item.count > 0 for item in volume_data):
            return INSUFFICIENT_VOLUME_MESSAGE
        return await self._generate_text(
            'Volume vs conversion',
            prompts.build_volume_prompt(volume_data),
            MAX_TOKENS_STANDARD,
            DEFAULT_VOLUME_TEXT,
        )

    async def generate_timeline_insight(self, months: Sequence[MonthlyTimelineBucket]) -> TimelineInsight:
        if not self.is_configured():
            return TimelineInsight(keyFindings=[NOT_CONFIGURED_MESSAGE])

        text = await self.client.send_message(
            prompts.build_timeline_prompt(months, self.product_name),
            max_tokens=MAX_TOKENS_TIMELINE,
        )
        parsed = self.parser.parse_json_response(text, None)
        if parsed is None:
            # Prose answer: keep its bulleted lines as the findings
            self.logger.info("Timeline insight generated without JSON")
            return TimelineInsight(
                keyFindings=self.parser.parse_array_response(text, TIMELINE_FALLBACK.keyFindings),
                reasons=list(TIMELINE_FALLBACK.reasons),
                recommendations=list(TIMELINE_FALLBACK.recommendations),
            )
        self.logger.info("Timeline insight generated")

        return TimelineInsight(
            keyFindings=coerce_string_list(parsed.get('keyFindings'), TIMELINE_FALLBACK.keyFindings),
            reasons=coerce_string_list(parsed.get('reasons'), TIMELINE_FALLBACK.reasons),
            recommendations=coerce_string_list(
                parsed.get('recommendations'), TIMELINE_FALLBACK.recommendations
            ),
        )

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    async def generate_perception_insight(
        self, transcripts: Sequence[Mapping[str, Any]]
    ) -> ClientPerceptionInsight:
        if not self.is_configured():
            return ClientPerceptionInsight(
                positiveAspects=NOT_CONFIGURED_MESSAGE,
                concerns=NOT_CONFIGURED_MESSAGE,
                successFactors=NOT_CONFIGURED_MESSAGE,
                recommendations=NOT_CONFIGURED_MESSAGE,
            )

        fallback = perception_fallback(self.product_name)
        text = await self.client.send_message(
            prompts.build_perception_prompt(transcripts, self.product_name),
            max_tokens=MAX_TOKENS_CLIENT_PERCEPTION,
        )
        parsed = self.parser.parse_json_response(text, fallback.model_dump())
        self.logger.info("Client perception insight generated")

        return ClientPerceptionInsight(
            positiveAspects=coerce_text(parsed.get('positiveAspects'), fallback.positiveAspects),
            concerns=coerce_text(parsed.get('concerns'), fallback.concerns),
            successFactors=coerce_text(parsed.get('successFactors'), fallback.successFactors),
            recommendations=coerce_text(parsed.get('recommendations'), fallback.recommendations),
        )

    async def generate_solutions_insight(self, transcripts: Sequence[Mapping[str, Any]]) -> str:
        if not self.is_configured():
            return NOT_CONFIGURED_MESSAGE
        return await self._generate_text(
            'Client solutions',
            prompts.build_solutions_prompt(transcripts, self.product_name),
            MAX_TOKENS_MEDIUM,
            DEFAULT_SOLUTIONS_TEXT,
        )

    # -------------------------------------------------------------------------
    # Industries
    # -------------------------------------------------------------------------

    async def generate_industry_distribution_insight(self, industries: Sequence[DimensionValue]) -> str:
        if not self.is_configured():
            return NOT_CONFIGURED_MESSAGE
        return await self._generate_text(
            'Industry distribution',
            prompts.build_industry_distribution_prompt(industries),
            MAX_TOKENS_STANDARD,
            DEFAULT_DISTRIBUTION_TEXT,
        )

    async def generate_industry_conversion_insight(self, industries: Sequence[DimensionValue]) -> str:
        if not self.is_configured():
            return NOT_CONFIGURED_MESSAGE

        reliable = [
            item for item in industries
            if item.count >= prompts.RELIABLE_INDUSTRY_MIN_CLIENTS
        ]
        if not reliable:
            return INSUFFICIENT_CONVERSION_MESSAGE

        top = max(reliable, key=lambda item: item.conversionRate)
        default = (
            f"{top.value} shows the highest conversion rate at {top.conversionRate:.1f}%, "
            f"indicating strong performance in this sector."
        )
        return await self._generate_text(
            'Industry conversion',
            prompts.build_industry_conversion_prompt(industries),
            MAX_TOKENS_MEDIUM,
            default,
        )
