"""
ATLAS Ops - Routers Package

FastAPI route handlers.

Routers:
- entitlements: Tier catalogue, navigation and module access checks
- pricing: Price calculation, catalogue previews, coupon validation
- quotes: Quote creation and workflow, conversion to invoices
- invoices: Invoice workflow and overdue sweep
"""

from app.routers import (
    entitlements,
    pricing,
    quotes,
    invoices,
)

__all__ = [
    "entitlements",
    "pricing",
    "quotes",
    "invoices",
]
