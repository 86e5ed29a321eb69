"""
ATLAS Ops - Quote Schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import QuoteStatus
from app.schemas.pricing import Money


class QuoteCreate(BaseModel):
    """Quote request from the client portal."""
    service_id: UUID
    client_type: str = Field(..., min_length=1, max_length=100)
    industry: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    complexity: str = Field("standard", max_length=50)
    addon_ids: List[UUID] = Field(default_factory=list)
    coupon_code: Optional[str] = Field(None, max_length=50)
    user_id: Optional[UUID] = None
    contact_name: Optional[str] = Field(None, max_length=200)
    contact_email: Optional[str] = Field(None, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=50)
    contact_company: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    submit: bool = Field(True, description="False saves the quote as a draft")


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus


class QuoteResponse(BaseModel):
    id: UUID
    quote_number: str
    user_id: Optional[UUID] = None
    service_id: Optional[UUID] = None
    service_type: str
    client_type: str
    industry: Optional[str] = None
    region: Optional[str] = None
    complexity: str
    addons: Optional[List[str]] = None
    features: Optional[List[str]] = None
    coupon_code: Optional[str] = None
    discount_percent: Optional[Decimal] = None
    estimated_price: Money
    final_price: Money
    status: QuoteStatus
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_company: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuoteListResponse(BaseModel):
    items: List[QuoteResponse]
    total: int
