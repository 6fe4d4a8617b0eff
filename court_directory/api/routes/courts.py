"""Court route handlers (create, list, get, update, remove)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from court_directory.api.routes import limiter
from court_directory.database.db import get_db_session
from court_directory.database.models import CourtCost, CourtStatus, CourtType
from court_directory.models.schemas import (
    CourtIdResponse,
    CourtPageResponse,
    CourtResponse,
    CreateCourtRequest,
    UpdateCourtRequest,
)
from court_directory.services import court_service
from court_directory.services.court_service import CourtNotFoundError, CourtValidationError
from court_directory.services.pagination import InvalidCursorError
from court_directory.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)
router = APIRouter()

COURT_NOT_FOUND_RESPONSE = HTTPException(status_code=404, detail="Court not found")


@router.post("/api/courts", response_model=CourtIdResponse, status_code=201)
@limiter.limit("30/minute")
async def create_court(
    request: Request,
    payload: CreateCourtRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Create a court. Timestamps are set by the server."""
    try:
        court_id = await court_service.create_court(session, **payload.model_dump())
        return {"id": court_id}
    except CourtValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error creating court: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating court")


@router.get("/api/courts", response_model=CourtPageResponse)
async def list_courts(
    num_items: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="numItems"),
    cursor: Optional[str] = Query(None),
    search_query: Optional[str] = Query(None, alias="searchQuery"),
    status: Optional[CourtStatus] = Query(None),
    court_type: Optional[CourtType] = Query(None, alias="courtType"),
    cost: Optional[CourtCost] = Query(None),
    state: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List courts, one page at a time.

    Pass ``continueCursor`` from the previous response as ``cursor`` to fetch
    the next page. Only one of searchQuery / status / courtType / location is
    used per call, in that priority order.
    """
    try:
        return await court_service.list_courts(
            session,
            num_items=num_items,
            cursor=cursor,
            search_query=search_query,
            status=status.value if status else None,
            court_type=court_type.value if court_type else None,
            cost=cost.value if cost else None,
            state=state,
            city=city,
        )
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CourtValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error listing courts: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Error listing courts")


@router.get("/api/courts/{court_id}", response_model=CourtResponse)
async def get_court(court_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get a single court by id."""
    try:
        court = await court_service.get_court(session, court_id)
        if not court:
            raise COURT_NOT_FOUND_RESPONSE
        return court
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error getting court %s: %s", court_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Error getting court")


@router.patch("/api/courts/{court_id}", response_model=CourtIdResponse)
async def update_court(
    court_id: int,
    payload: UpdateCourtRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Update the supplied court fields; omitted fields keep their values."""
    try:
        updated_id = await court_service.update_court(
            session, court_id, **payload.model_dump(exclude_unset=True)
        )
        return {"id": updated_id}
    except CourtNotFoundError:
        raise COURT_NOT_FOUND_RESPONSE
    except CourtValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error updating court %s: %s", court_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating court")


@router.delete("/api/courts/{court_id}", response_model=CourtIdResponse)
async def remove_court(court_id: int, session: AsyncSession = Depends(get_db_session)):
    """Permanently delete a court."""
    try:
        removed_id = await court_service.remove_court(session, court_id)
        return {"id": removed_id}
    except CourtNotFoundError:
        raise COURT_NOT_FOUND_RESPONSE
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error removing court %s: %s", court_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Error removing court")
