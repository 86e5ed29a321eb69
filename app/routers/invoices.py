"""
ATLAS Ops - Invoices Router
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.models.enums import InvoiceStatus
from app.schemas.invoice import (
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatusUpdate,
    MarkOverdueRequest,
    MarkOverdueResponse,
)
from app.services.invoice_service import InvoiceService
from app.services.pricing_engine import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    user_id: Optional[UUID] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
):
    service = InvoiceService(db)
    invoices = await service.list_invoices(
        status=status_filter, user_id=user_id, limit=limit, offset=offset
    )
    return InvoiceListResponse(
        items=[InvoiceResponse.model_validate(i) for i in invoices],
        total=await service.count_invoices(status=status_filter, user_id=user_id),
    )


@router.post("/mark-overdue", response_model=MarkOverdueResponse)
async def mark_overdue(
    request: Optional[MarkOverdueRequest] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """Move every sent invoice past its due date to overdue."""
    as_of = (request.as_of if request else None) or utcnow()
    updated = await InvoiceService(db).mark_overdue(as_of)
    return MarkOverdueResponse(updated=updated, as_of=as_of.date())


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    return await InvoiceService(db).get_invoice(invoice_id)


@router.post("/{invoice_id}/status", response_model=InvoiceResponse)
async def update_invoice_status(
    invoice_id: UUID,
    request: InvoiceStatusUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Move an invoice along its workflow (send, pay, mark overdue, cancel)."""
    return await InvoiceService(db).transition(invoice_id, request.status)
