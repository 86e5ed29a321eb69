"""
ATLAS Ops - Pricing Engine

Pure price composition used by quotes and invoices:

    base price x active modifiers  (multiplicative)
    + add-ons                      (flat, not multiplied)
    - coupon discount              (floored at zero)
    + tax on the discounted subtotal

Nothing here touches the database. Coupon usage counters are owned by
CouponService, which redeems atomically.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple, Union

from app.models.enums import DiscountType, ModifierType
from app.utils.error_handling import (
    MAX_AMOUNT,
    CouponInvalidException,
    InvalidInputException,
    validate_amount,
)


Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def quantize_money(amount: Decimal, field: str = "amount") -> Decimal:
    """
    Round to the currency minor unit (2 dp, half-up).

    Results that do not fit the money columns raise InvalidInputException.
    """
    try:
        value = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInputException(field, amount, f"{field} is out of range")
    if abs(value) >= MAX_AMOUNT:
        raise InvalidInputException(field, amount, f"{field} must be less than {MAX_AMOUNT}")
    return value


def tax_rate_from_percent(percent: Number) -> Decimal:
    """Convert a tax percentage (18) to a rate (0.18)."""
    return validate_amount(percent, "tax_percent") / HUNDRED


# =============================================================================
# DOMAIN TYPES
# =============================================================================

@dataclass(frozen=True)
class PriceModifier:
    """A multiplicative adjustment keyed by a client attribute."""
    modifier_type: ModifierType
    key: str
    multiplier: Number
    active: bool = True


@dataclass(frozen=True)
class Coupon:
    """A usage-limited, time-bounded discount."""
    code: str
    discount_type: DiscountType
    value: Number
    max_uses: Optional[int] = None
    current_uses: int = 0
    valid_until: Optional[Union[datetime, date]] = None
    active: bool = True

    def usability_error(self, as_of: Optional[datetime] = None) -> Optional[str]:
        """Reason the coupon cannot be used at `as_of`, or None if usable."""
        if not self.active:
            return "inactive"
        if self.valid_until is not None and _is_past(self.valid_until, as_of or utcnow()):
            return "expired"
        if self.max_uses is not None and self.current_uses >= self.max_uses:
            return "exhausted"
        return None

    def is_usable(self, as_of: Optional[datetime] = None) -> bool:
        return self.usability_error(as_of) is None

    @property
    def remaining_uses(self) -> Optional[int]:
        """Remaining uses (None if unlimited)."""
        if self.max_uses is None:
            return None
        return max(0, self.max_uses - self.current_uses)


@dataclass(frozen=True)
class PriceBreakdown:
    """Result of a price computation. All amounts are rounded to 2 dp."""
    base_price: Decimal
    multiplier: Decimal
    modified_base: Decimal
    addons_total: Decimal
    gross_amount: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    coupon_code: Optional[str] = None

    @property
    def discount_percent(self) -> Decimal:
        """Effective discount as a percentage of the gross amount."""
        if self.gross_amount == 0:
            return Decimal("0")
        return quantize_money(self.discount_amount / self.gross_amount * HUNDRED)


# =============================================================================
# COMPUTATION
# =============================================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_past(valid_until: Union[datetime, date], as_of: datetime) -> bool:
    """True if `as_of` is after `valid_until`. Naive datetimes are taken as UTC."""
    if not isinstance(valid_until, datetime):
        # Date-only expiry covers the whole day
        return as_of.date() > valid_until
    if valid_until.tzinfo is None:
        valid_until = valid_until.replace(tzinfo=timezone.utc)
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)
    return as_of > valid_until


def combined_multiplier(modifiers: Iterable[PriceModifier]) -> Decimal:
    """Product of all active multipliers (1 when none apply)."""
    product = Decimal("1")
    for modifier in modifiers:
        if not modifier.active:
            continue
        product *= validate_amount(
            modifier.multiplier,
            f"multiplier[{modifier.modifier_type.value}:{modifier.key}]",
            strictly_positive=True,
        )
    return product


def calculate_discount(gross: Decimal, coupon: Coupon) -> Decimal:
    """Discount for `coupon` on `gross`, never more than `gross`."""
    value = validate_amount(coupon.value, "coupon.value")
    if coupon.discount_type == DiscountType.PERCENTAGE:
        discount = gross * value / HUNDRED
    else:
        discount = value
    return min(discount, gross)


def apply_tax(amount: Number, tax_rate: Number) -> Tuple[Decimal, Decimal]:
    """
    Apply tax to an already-discounted amount.

    Returns (tax_amount, total_amount), both rounded to 2 dp.
    """
    subtotal = quantize_money(validate_amount(amount, "amount"))
    rate = validate_amount(tax_rate, "tax_rate")
    tax_amount = quantize_money(subtotal * rate, "tax_amount")
    return tax_amount, quantize_money(subtotal + tax_amount, "total_amount")


def compute_final_price(
    base_price: Number,
    modifiers: Iterable[PriceModifier] = (),
    addons: Iterable[Number] = (),
    coupon: Optional[Coupon] = None,
    tax_rate: Number = Decimal("0"),
    as_of: Optional[datetime] = None,
) -> PriceBreakdown:
    """
    Compose a final price.

    Args:
        base_price: Service base price, must be >= 0
        modifiers: Candidate modifiers; inactive ones are ignored
        addons: Flat add-on prices, each >= 0
        coupon: Optional coupon; must be usable at `as_of`
        tax_rate: Fraction, e.g. Decimal("0.18")
        as_of: Reference time for coupon expiry (defaults to now, UTC)

    Raises:
        InvalidInputException: negative or non-finite numeric input
        CouponInvalidException: coupon supplied but inactive, expired or exhausted
    """
    base = validate_amount(base_price, "base_price")
    addon_values = [validate_amount(price, f"addons[{i}]") for i, price in enumerate(addons)]
    rate = validate_amount(tax_rate, "tax_rate")

    multiplier = combined_multiplier(modifiers)
    modified_base = base * multiplier
    addons_total = sum(addon_values, Decimal("0"))
    gross = modified_base + addons_total

    discount = Decimal("0")
    if coupon is not None:
        reason = coupon.usability_error(as_of)
        if reason is not None:
            raise CouponInvalidException(coupon.code, reason)
        discount = calculate_discount(gross, coupon)

    gross_rounded = quantize_money(gross, "gross_amount")
    discount_rounded = min(quantize_money(discount), gross_rounded)
    subtotal = gross_rounded - discount_rounded
    tax_amount, total_amount = apply_tax(subtotal, rate)

    return PriceBreakdown(
        base_price=quantize_money(base, "base_price"),
        multiplier=multiplier,
        modified_base=quantize_money(modified_base, "modified_base"),
        addons_total=quantize_money(addons_total, "addons_total"),
        gross_amount=gross_rounded,
        discount_amount=discount_rounded,
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        total_amount=total_amount,
        coupon_code=coupon.code if coupon is not None else None,
    )
