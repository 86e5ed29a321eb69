"""
ATLAS Ops - Schemas Package

Pydantic schemas for request/response validation.
"""

from app.schemas.entitlement import (
    TierInfo,
    ModuleAccessResponse,
    NavigationResponse,
    EntitlementCheckResponse,
)
from app.schemas.pricing import (
    Money,
    ModifierInput,
    CouponInput,
    PriceCalculateRequest,
    PriceBreakdownResponse,
    PricePreviewRequest,
    PricePreviewResponse,
    CouponValidateRequest,
    CouponValidateResponse,
)
from app.schemas.quote import (
    QuoteCreate,
    QuoteResponse,
    QuoteStatusUpdate,
    QuoteListResponse,
)
from app.schemas.invoice import (
    ConvertQuoteRequest,
    InvoiceResponse,
    InvoiceStatusUpdate,
    InvoiceListResponse,
    MarkOverdueRequest,
    MarkOverdueResponse,
)

__all__ = [
    # Entitlements
    "TierInfo",
    "ModuleAccessResponse",
    "NavigationResponse",
    "EntitlementCheckResponse",
    # Pricing
    "Money",
    "ModifierInput",
    "CouponInput",
    "PriceCalculateRequest",
    "PriceBreakdownResponse",
    "PricePreviewRequest",
    "PricePreviewResponse",
    "CouponValidateRequest",
    "CouponValidateResponse",
    # Quotes
    "QuoteCreate",
    "QuoteResponse",
    "QuoteStatusUpdate",
    "QuoteListResponse",
    # Invoices
    "ConvertQuoteRequest",
    "InvoiceResponse",
    "InvoiceStatusUpdate",
    "InvoiceListResponse",
    "MarkOverdueRequest",
    "MarkOverdueResponse",
]
