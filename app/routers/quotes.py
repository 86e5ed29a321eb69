"""
ATLAS Ops - Quotes Router
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.models.enums import QuoteStatus
from app.schemas.invoice import ConvertQuoteRequest, InvoiceResponse
from app.schemas.quote import (
    QuoteCreate,
    QuoteListResponse,
    QuoteResponse,
    QuoteStatusUpdate,
)
from app.services.invoice_service import InvoiceService
from app.services.quote_service import QuoteRequest, QuoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["Quotes"])


@router.post("", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
async def create_quote(
    request: QuoteCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Price and store a quote. A supplied coupon is redeemed."""
    service = QuoteService(db)
    quote = await service.create_quote(QuoteRequest(**request.model_dump()))
    return quote


@router.get("", response_model=QuoteListResponse)
async def list_quotes(
    status_filter: Optional[QuoteStatus] = Query(None, alias="status"),
    user_id: Optional[UUID] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
):
    """List quotes. `total` counts every match, not just this page."""
    service = QuoteService(db)
    quotes = await service.list_quotes(
        status=status_filter, user_id=user_id, limit=limit, offset=offset
    )
    return QuoteListResponse(
        items=[QuoteResponse.model_validate(q) for q in quotes],
        total=await service.count_quotes(status=status_filter, user_id=user_id),
    )


@router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote(
    quote_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    return await QuoteService(db).get_quote(quote_id)


@router.post("/{quote_id}/status", response_model=QuoteResponse)
async def update_quote_status(
    quote_id: UUID,
    request: QuoteStatusUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Move a quote along its workflow (submit, approve, reject)."""
    return await QuoteService(db).transition(quote_id, request.status)


@router.post(
    "/{quote_id}/convert",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def convert_quote(
    quote_id: UUID,
    request: Optional[ConvertQuoteRequest] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """Issue an invoice for an approved quote."""
    notes = request.notes if request else None
    return await InvoiceService(db).convert_quote(quote_id, notes=notes)
