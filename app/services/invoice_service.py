"""
ATLAS Ops - Invoice Service

Converts approved quotes into tax invoices and moves invoices through
their payment workflow:

    draft -> sent -> paid
      |        |---> overdue -> paid
      |        |        |
      +--------+--------+---> cancelled
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.enums import InvoiceStatus, QuoteStatus
from app.models.invoice import Invoice
from app.models.quote import Quote
from app.services.pricing_engine import apply_tax, quantize_money, utcnow
from app.tier_config import format_inr
from app.utils.error_handling import (
    ConflictException,
    ErrorCode,
    InvalidStatusTransitionException,
    InvoiceNotFoundException,
    QuoteNotFoundException,
)

logger = logging.getLogger(__name__)


INVOICE_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


def can_transition_invoice(current: InvoiceStatus, new: InvoiceStatus) -> bool:
    return new in INVOICE_TRANSITIONS[current]


class InvoiceService:
    """Service for invoice operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # INVOICE NUMBER GENERATION
    # ===========================================

    async def generate_invoice_number(self, as_of: Optional[datetime] = None) -> str:
        """
        Generate unique invoice number.

        Format: INV-YYYYMM-NNNN (e.g., INV-202610-0001)
        """
        today = (as_of or utcnow()).date()
        prefix = f"INV-{today.year}{today.month:02d}"

        result = await self.db.execute(
            select(func.count(Invoice.id)).where(Invoice.invoice_number.like(f"{prefix}%"))
        )
        count = result.scalar() or 0
        return f"{prefix}-{count + 1:04d}"

    # ===========================================
    # READ
    # ===========================================

    async def get_invoice(self, invoice_id: uuid.UUID) -> Invoice:
        invoice = await self.db.get(Invoice, invoice_id, populate_existing=True)
        if invoice is None:
            raise InvoiceNotFoundException(invoice_id)
        return invoice

    @staticmethod
    def _filters(status: Optional[InvoiceStatus], user_id: Optional[uuid.UUID]) -> list:
        filters = []
        if status is not None:
            filters.append(Invoice.status == status)
        if user_id is not None:
            filters.append(Invoice.user_id == user_id)
        return filters

    async def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        user_id: Optional[uuid.UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Invoice]:
        query = (
            select(Invoice)
            .where(*self._filters(status, user_id))
            .order_by(Invoice.created_at.desc(), Invoice.invoice_number.desc())
        )
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def count_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> int:
        result = await self.db.execute(
            select(func.count(Invoice.id)).where(*self._filters(status, user_id))
        )
        return result.scalar() or 0

    # ===========================================
    # QUOTE CONVERSION
    # ===========================================

    async def convert_quote(
        self,
        quote_id: uuid.UUID,
        as_of: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> Invoice:
        """
        Create a sent invoice from an approved quote.

        The invoice amount is the quote's final (post-discount) price; tax
        is added at the configured rate and the due date is set
        `invoice_due_days` ahead. The quote becomes CONVERTED in the same
        transaction.
        """
        as_of = as_of or utcnow()

        quote = await self.db.get(Quote, quote_id, populate_existing=True)
        if quote is None:
            raise QuoteNotFoundException(quote_id)

        if quote.status == QuoteStatus.CONVERTED:
            raise ConflictException(
                f"Quote {quote.quote_number} has already been converted",
                code=ErrorCode.DUPLICATE_ENTRY,
                details={"quote_id": str(quote.id)},
            )
        if quote.status != QuoteStatus.APPROVED:
            raise InvalidStatusTransitionException("quote", quote.status.value, QuoteStatus.CONVERTED.value)

        amount = quantize_money(quote.final_price)
        tax_amount, total_amount = apply_tax(amount, settings.tax_rate)

        try:
            invoice = Invoice(
                invoice_number=await self.generate_invoice_number(as_of),
                quote_id=quote.id,
                user_id=quote.user_id,
                amount=amount,
                tax_percent=settings.tax_percent,
                tax_amount=tax_amount,
                total_amount=total_amount,
                due_date=as_of.date() + timedelta(days=settings.invoice_due_days),
                status=InvoiceStatus.SENT,
                notes=notes,
            )
            self.db.add(invoice)
            claimed = await self.db.execute(
                update(Quote)
                .where(and_(Quote.id == quote.id, Quote.status == QuoteStatus.APPROVED))
                .values(status=QuoteStatus.CONVERTED)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                raise ConflictException(
                    f"Quote {quote.quote_number} has already been converted",
                    code=ErrorCode.DUPLICATE_ENTRY,
                    details={"quote_id": str(quote.id)},
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(invoice)
        logger.info(
            f"Quote {quote.quote_number} converted to invoice {invoice.invoice_number}: "
            f"{format_inr(invoice.total_amount)} due {invoice.due_date.isoformat()}"
        )
        return invoice

    # ===========================================
    # WORKFLOW
    # ===========================================

    async def transition(
        self,
        invoice_id: uuid.UUID,
        new_status: InvoiceStatus,
        as_of: Optional[datetime] = None,
    ) -> Invoice:
        """
        Move an invoice along the workflow. PAID stamps `paid_at`.

        Guarded by the status read, so a concurrent move wins at most once.
        """
        invoice = await self.get_invoice(invoice_id)
        if not can_transition_invoice(invoice.status, new_status):
            raise InvalidStatusTransitionException("invoice", invoice.status.value, new_status.value)

        previous = invoice.status
        values = {"status": new_status}
        if new_status == InvoiceStatus.PAID:
            values["paid_at"] = as_of or utcnow()

        result = await self.db.execute(
            update(Invoice)
            .where(and_(Invoice.id == invoice_id, Invoice.status == previous))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            current = await self.get_invoice(invoice_id)
            raise InvalidStatusTransitionException("invoice", current.status.value, new_status.value)

        await self.db.commit()
        invoice = await self.get_invoice(invoice_id)

        logger.info(f"Invoice {invoice.invoice_number}: {previous.value} -> {new_status.value}")
        return invoice

    async def mark_paid(self, invoice_id: uuid.UUID, as_of: Optional[datetime] = None) -> Invoice:
        return await self.transition(invoice_id, InvoiceStatus.PAID, as_of)

    async def cancel_invoice(self, invoice_id: uuid.UUID) -> Invoice:
        return await self.transition(invoice_id, InvoiceStatus.CANCELLED)

    async def mark_overdue(self, as_of: Optional[datetime] = None) -> int:
        """
        Flag every sent invoice whose due date has passed.

        Returns the number of invoices moved to OVERDUE.
        """
        today = (as_of or utcnow()).date()
        result = await self.db.execute(
            update(Invoice)
            .where(
                and_(
                    Invoice.status == InvoiceStatus.SENT,
                    Invoice.due_date.is_not(None),
                    Invoice.due_date < today,
                )
            )
            .values(status=InvoiceStatus.OVERDUE)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        updated = result.rowcount
        if updated:
            logger.info(f"Marked {updated} invoice(s) overdue as of {today.isoformat()}")
        return updated
