"""
FastAPI router module for client record management.

This module implements endpoints for:
- CSV bulk upload (multipart field "file"), returning the refreshed overview
- Single client creation and partial update
- Filtered, paginated listing and single-record lookup
- Distinct filter values for the dashboard
- Deleting every client

Error mapping:
- Missing file, non-.csv filename or unparseable CSV -> 400
- Unknown client id -> 404
- Anything else -> 500
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from backend.api.dependencies import ClientsServiceDep, OverviewServiceDep
from backend.core.errors import ClientNotFoundError, CsvIngestionError
from backend.models import (
    ClientCreate,
    ClientFilters,
    ClientListResponse,
    ClientRecord,
    ClientUpdate,
    DeleteResult,
    UniqueValues,
    UploadResponse,
)
from backend.services.ingestion import parse_clients_csv

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Upload and Create
# =============================================================================


@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_csv(
    clients_service: ClientsServiceDep,
    overview_service: OverviewServiceDep,
    file: Optional[UploadFile] = File(default=None),
) -> UploadResponse:
    """
    Import clients from a CSV export.

    Rows whose email already exists are skipped. The response carries the
    number of clients created and the overview metrics after the import.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if not (file.filename or '').lower().endswith('.csv'):
        raise HTTPException(status_code=400, detail="Only CSV files are allowed")

    try:
        content = await file.read()
        clients = parse_clients_csv(content)
        created = await clients_service.create_many_clients(clients)
        metrics = await overview_service.get_overview()

        logger.info(f"CSV upload {file.filename}: {created} of {len(clients)} rows created")
        return UploadResponse(
            message="CSV uploaded and processed successfully",
            clientsCreated=created,
            metrics=metrics,
        )
    except CsvIngestionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error uploading CSV")
        raise HTTPException(status_code=500, detail=f"Failed to upload CSV: {str(e)}")


@router.post("", response_model=ClientRecord, status_code=201)
async def create_client(client: ClientCreate, service: ClientsServiceDep) -> ClientRecord:
    try:
        return await service.create_client(client)
    except Exception as e:
        logger.exception("Error creating client")
        raise HTTPException(status_code=500, detail=f"Failed to create client: {str(e)}")


# =============================================================================
# Reads
# =============================================================================


@router.get("/metadata/unique-values", response_model=UniqueValues)
async def get_unique_values(service: ClientsServiceDep) -> UniqueValues:
    try:
        return await service.get_unique_values()
    except Exception as e:
        logger.exception("Error fetching unique values")
        raise HTTPException(status_code=500, detail=f"Failed to fetch unique values: {str(e)}")


@router.get("", response_model=ClientListResponse)
async def list_clients(
    service: ClientsServiceDep,
    search: Optional[str] = Query(default=None, description="Matches name, email or transcription"),
    assignedSeller: Optional[str] = Query(default=None),
    industry: Optional[str] = Query(default=None),
    closed: Optional[bool] = Query(default=None),
    sentiment: Optional[str] = Query(default=None),
    discoverySource: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ClientListResponse:
    """List clients, newest meeting first."""
    filters = ClientFilters(
        search=search,
        assignedSeller=assignedSeller,
        industry=industry,
        closed=closed,
        sentiment=sentiment,
        discoverySource=discoverySource,
        page=page,
        limit=limit,
    )
    try:
        return await service.find_all(filters)
    except Exception as e:
        logger.exception("Error listing clients")
        raise HTTPException(status_code=500, detail=f"Failed to list clients: {str(e)}")


@router.get("/{client_id}", response_model=ClientRecord)
async def get_client(client_id: str, service: ClientsServiceDep) -> ClientRecord:
    try:
        return await service.find_one(client_id)
    except ClientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Error fetching client {client_id}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch client: {str(e)}")


# =============================================================================
# Update and Delete
# =============================================================================


@router.patch("/{client_id}", response_model=ClientRecord)
async def update_client(client_id: str, update: ClientUpdate, service: ClientsServiceDep) -> ClientRecord:
    try:
        return await service.update_client(client_id, update)
    except ClientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Error updating client {client_id}")
        raise HTTPException(status_code=500, detail=f"Failed to update client: {str(e)}")


@router.delete("", response_model=DeleteResult)
async def delete_all_clients(service: ClientsServiceDep) -> DeleteResult:
    try:
        return await service.delete_all()
    except Exception as e:
        logger.exception("Error deleting clients")
        raise HTTPException(status_code=500, detail=f"Failed to delete clients: {str(e)}")
