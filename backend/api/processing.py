"""
FastAPI router module for LLM categorization of client transcriptions.

Endpoints:
- POST /process-all: categorize every unprocessed client (sequential)
- POST /process/{client_id}: categorize one client; already processed
  clients are left untouched

A missing Anthropic API key is reported as 503.
"""

import logging

from fastapi import APIRouter, HTTPException

from backend.api.dependencies import CategorizationServiceDep
from backend.core.errors import ClientNotFoundError, LLMNotConfiguredError
from backend.models import MessageResponse, ProcessAllResponse

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/process-all", response_model=ProcessAllResponse)
async def process_all(service: CategorizationServiceDep) -> ProcessAllResponse:
    """Per-client failures are counted in `failed`, they do not fail the request."""
    try:
        result = await service.process_all_unprocessed()
        return ProcessAllResponse(processed=result.processed, failed=result.failed)
    except LLMNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Error processing clients")
        raise HTTPException(status_code=500, detail=f"Failed to process clients: {str(e)}")


@router.post("/process/{client_id}", response_model=MessageResponse)
async def process_one(client_id: str, service: CategorizationServiceDep) -> MessageResponse:
    try:
        await service.process_single(client_id)
        return MessageResponse(message="Client processed successfully")
    except ClientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LLMNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception(f"Error processing client {client_id}")
        raise HTTPException(status_code=500, detail=f"Failed to process client: {str(e)}")
