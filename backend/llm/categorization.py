"""
Transcription categorization pipeline.

Turns a meeting transcription into the derived client fields (industry,
operation size, interaction volume, discovery source, motivation, urgency,
pain points, technical requirements, sentiment) and stores them through
ClientsService.mark_as_processed.

Bulk processing is sequential with a fixed pause between clients to stay
under the API rate limit. A failing client is logged and counted, the batch
carries on.
"""

import asyncio
from typing import Any, Dict, Optional

from backend.core.errors import LLMNotConfiguredError
from backend.core.logging import get_component_logger
from backend.llm.client import AnthropicClient
from backend.llm.parser import ResponseParser, coerce_string_list
from backend.llm.prompts import build_categorization_prompt
from backend.models import (
    CategorizationResult,
    OperationSize,
    ProcessingResult,
    Sentiment,
    UrgencyLevel,
)
from backend.services.clients import ClientsService


MAX_TOKENS_CATEGORIZATION = 1024
UNKNOWN = 'Unknown'


def _normalize_choice(value: Any, allowed, default: str) -> str:
    text = str(value or '').strip().lower()
    choices = {member.value for member in allowed}
    return text if text in choices else default


def _normalize_text(value: Any) -> str:
    if value is None:
        return UNKNOWN
    text = str(value).strip()
    return text or UNKNOWN


def _normalize_volume(value: Any) -> int:
    try:
        volume = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(volume, 0)


TEXT_FIELDS = (
    'industry',
    'operationSize',
    'discoverySource',
    'mainMotivation',
    'urgencyLevel',
    'sentiment',
)


def recover_truncated_fields(parser: ResponseParser, text: str) -> Dict[str, Any]:
    """
    Salvage the completed scalar fields of a response cut off before its
    closing brace (the model hit max_tokens mid-object).

    Arrays are not recovered; they end up empty after normalization.
    """
    recovered: Dict[str, Any] = {}
    for name in TEXT_FIELDS:
        value = parser.extract_value(text, rf'"{name}"\s*:\s*"([^"\n]*)"')
        if value:
            recovered[name] = value

    volume = parser.extract_value(text, r'"interactionVolume"\s*:\s*(-?[\d.]+(?:[eE][+-]?\d+)?)')
    if volume is not None:
        recovered['interactionVolume'] = volume
    return recovered


def normalize_categorization(data: Dict[str, Any]) -> CategorizationResult:
    """
    Clamp a parsed model response onto the allowed categorical values.

    Unknown enum values fall back to medium / planned / neutral, missing text
    fields become "Unknown" and non-list arrays become empty lists.
    """
    def as_list(value: Any):
        if not isinstance(value, list):
            return []
        return coerce_string_list(value, [])

    return CategorizationResult(
        industry=_normalize_text(data.get('industry')),
        operationSize=_normalize_choice(data.get('operationSize'), OperationSize, OperationSize.MEDIUM.value),
        interactionVolume=_normalize_volume(data.get('interactionVolume')),
        discoverySource=_normalize_text(data.get('discoverySource')),
        mainMotivation=_normalize_text(data.get('mainMotivation')),
        urgencyLevel=_normalize_choice(data.get('urgencyLevel'), UrgencyLevel, UrgencyLevel.PLANNED.value),
        painPoints=as_list(data.get('painPoints')),
        technicalRequirements=as_list(data.get('technicalRequirements')),
        sentiment=_normalize_choice(data.get('sentiment'), Sentiment, Sentiment.NEUTRAL.value),
    )


class CategorizationService:
    """Categorize unprocessed clients with the model and persist the result."""

    def __init__(
        self,
        client: AnthropicClient,
        clients_service: ClientsService,
        parser: Optional[ResponseParser] = None,
        product_name: str = 'our platform',
        delay_seconds: float = 1.0,
        logger=None,
    ):
        self.client = client
        self.clients_service = clients_service
        self.parser = parser or ResponseParser()
        self.product_name = product_name
        self.delay_seconds = delay_seconds
        self.logger = logger or get_component_logger('CategorizationService')

    async def categorize_transcription(
        self,
        transcription: str,
        client_name: str,
        closed: bool,
    ) -> CategorizationResult:
        """
        Extract derived fields from one transcription.

        Raises:
            LLMNotConfiguredError: If no API key is configured.
            anthropic.APIError: On API failures.
        """
        if not self.client.is_configured():
            raise LLMNotConfiguredError()

        prompt = build_categorization_prompt(transcription, client_name, closed, self.product_name)
        text = await self.client.send_message(prompt, max_tokens=MAX_TOKENS_CATEGORIZATION)
        parsed = self.parser.parse_json_response(text, None)
        if parsed is None:
            parsed = recover_truncated_fields(self.parser, text)
            if parsed:
                self.logger.warning(
                    f"Recovered {', '.join(parsed)} from an incomplete response for {client_name}"
                )
        return normalize_categorization(parsed)

    async def process_all_unprocessed(self) -> ProcessingResult:
        """
        Categorize every unprocessed client, one at a time.

        Raises:
            LLMNotConfiguredError: Up front, so a missing key is not reported
                as N individual failures.
        """
        if not self.client.is_configured():
            raise LLMNotConfiguredError()

        clients = await self.clients_service.get_unprocessed()
        self.logger.info(f"Processing {len(clients)} unprocessed clients")

        processed = 0
        failed = 0
        for record in clients:
            try:
                result = await self.categorize_transcription(
                    record.transcription, record.name, record.closed
                )
                await self.clients_service.mark_as_processed(record.id, result)
                processed += 1
                self.logger.info(f"Processed client {record.id} ({record.name})")
                await asyncio.sleep(self.delay_seconds)
            except Exception:
                failed += 1
                self.logger.error(f"Failed to process client {record.id}", exc_info=True)

        self.logger.info(f"Processing complete: {processed} processed, {failed} failed")
        return ProcessingResult(processed=processed, failed=failed)

    async def process_single(self, client_id: str) -> None:
        """
        Categorize one client unless it is already processed.

        Raises:
            ClientNotFoundError: If the id does not exist.
            LLMNotConfiguredError: If no API key is configured.
        """
        record = await self.clients_service.find_one(client_id)
        if record.processed:
            self.logger.warning(f"Client {client_id} already processed, skipping")
            return

        result = await self.categorize_transcription(record.transcription, record.name, record.closed)
        await self.clients_service.mark_as_processed(record.id, result)
        self.logger.info(f"Processed client {client_id}")
