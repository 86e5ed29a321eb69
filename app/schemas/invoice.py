"""
ATLAS Ops - Invoice Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import InvoiceStatus
from app.schemas.pricing import Money


class ConvertQuoteRequest(BaseModel):
    notes: Optional[str] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceResponse(BaseModel):
    id: UUID
    invoice_number: str
    quote_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    amount: Money
    tax_percent: Decimal
    tax_amount: Money
    total_amount: Money
    due_date: Optional[date] = None
    status: InvoiceStatus
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceListResponse(BaseModel):
    items: List[InvoiceResponse]
    total: int


class MarkOverdueRequest(BaseModel):
    as_of: Optional[datetime] = Field(None, description="Defaults to now (UTC)")


class MarkOverdueResponse(BaseModel):
    updated: int
    as_of: date
