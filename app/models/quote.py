"""
ATLAS Ops - Quote Model

Client quote requests. Prices are fixed at creation; afterwards only
`status` moves, forward-only (see QuoteService).
"""

import uuid
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Text, Numeric, Uuid, Enum as SQLEnum, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.enums import QuoteStatus

if TYPE_CHECKING:
    from app.models.invoice import Invoice


class Quote(BaseModel):
    """Priced quote for a service plan."""
    __tablename__ = "quotes"

    quote_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True, index=True)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)

    # What was quoted
    service_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    service_type: Mapped[str] = mapped_column(String(150), nullable=False)
    client_type: Mapped[str] = mapped_column(String(100), nullable=False)
    industry: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    complexity: Mapped[str] = mapped_column(String(50), nullable=False, default="standard")
    addons: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    features: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)

    # Pricing (pre-tax)
    coupon_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    discount_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    estimated_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Gross price before coupon discount"
    )
    final_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Price after coupon discount, before tax"
    )

    status: Mapped[QuoteStatus] = mapped_column(
        SQLEnum(QuoteStatus, name="quote_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=QuoteStatus.PENDING,
    )

    # Contact
    contact_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    contact_company: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    invoice: Mapped[Optional["Invoice"]] = relationship(
        "Invoice",
        back_populates="quote",
        uselist=False,
        lazy="selectin",
    )
