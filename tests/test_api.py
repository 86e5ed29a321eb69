"""
ATLAS Ops - API Endpoint Tests

HTTP-level tests through httpx.AsyncClient against the FastAPI app,
with the database session overridden to the in-memory test database.
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient


# =============================================================================
# HEALTH
# =============================================================================

class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_api_root(self, client: AsyncClient):
        response = await client.get("/api/v1")
        assert response.status_code == 200
        assert response.json()["endpoints"]["quotes"] == "/api/v1/quotes"


# =============================================================================
# ENTITLEMENTS
# =============================================================================

class TestEntitlementEndpoints:

    async def test_tiers(self, client: AsyncClient):
        response = await client.get("/api/v1/entitlements/tiers")
        assert response.status_code == 200
        tiers = response.json()
        assert [t["tier"] for t in tiers] == ["basic", "standard", "advanced", "enterprise"]
        assert "Meetings" in tiers[1]["modules"]
        assert "Meetings" not in tiers[0]["modules"]

    async def test_navigation(self, client: AsyncClient):
        response = await client.get("/api/v1/entitlements/navigation", params={"tier": "advanced"})
        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == "advanced"
        by_name = {m["module"]: m for m in data["modules"]}
        assert by_name["AI Dashboard"]["allowed"] is True
        assert by_name["MSP Monitoring"]["locked"] is True

    async def test_navigation_unknown_tier_is_basic(self, client: AsyncClient):
        response = await client.get("/api/v1/entitlements/navigation", params={"tier": "gold"})
        assert response.status_code == 200
        assert response.json()["tier"] == "basic"

    async def test_check_denied_with_upgrades(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/entitlements/check",
            params={"tier": "basic", "module": "Team Directory"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["allowed"] is False
        assert data["known_module"] is True
        assert data["required_tier"] == "standard"
        assert data["upgrade_options"] == ["standard", "advanced", "enterprise"]

    async def test_check_unknown_module(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/entitlements/check",
            params={"tier": "enterprise", "module": "Warp Drive"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["allowed"] is False
        assert data["known_module"] is False
        assert data["required_tier"] is None

    async def test_check_requires_module(self, client: AsyncClient):
        response = await client.get("/api/v1/entitlements/check", params={"tier": "basic"})
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"


# =============================================================================
# PRICING
# =============================================================================

class TestPricingEndpoints:

    async def test_calculate(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/pricing/calculate",
            json={
                "base_price": "50000",
                "modifiers": [{"modifier_type": "client_type", "key": "enterprise", "multiplier": "1.5"}],
                "addons": ["2000"],
                "coupon": {"code": "save10", "discount_type": "percentage", "value": "10"},
                "tax_percent": "18",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["gross_amount"] == "77000.00"
        assert data["subtotal"] == "69300.00"
        assert data["tax_amount"] == "12474.00"
        assert data["total_amount"] == "81774.00"
        assert data["coupon_code"] == "SAVE10"
        assert data["currency"] == "INR"

    async def test_calculate_uses_configured_tax(self, client: AsyncClient):
        response = await client.post("/api/v1/pricing/calculate", json={"base_price": 1000})
        assert response.status_code == 200
        assert response.json()["total_amount"] == "1180.00"

    async def test_calculate_negative_base_price(self, client: AsyncClient):
        response = await client.post("/api/v1/pricing/calculate", json={"base_price": -5})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "INVALID_INPUT"
        assert detail["field"] == "base_price"

    async def test_calculate_expired_coupon(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/pricing/calculate",
            json={
                "base_price": 1000,
                "coupon": {
                    "code": "OLD",
                    "discount_type": "fixed",
                    "value": 100,
                    "valid_until": "2020-01-01T00:00:00Z",
                },
            },
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "COUPON_INVALID"
        assert detail["details"]["reason"] == "expired"

    async def test_calculate_amount_beyond_money_range(self, client: AsyncClient):
        response = await client.post("/api/v1/pricing/calculate", json={"base_price": "1e30"})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "INVALID_INPUT"
        assert detail["field"] == "base_price"

    async def test_calculate_date_only_coupon_valid_all_day(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/pricing/calculate",
            json={
                "base_price": 1000,
                "coupon": {
                    "code": "LASTDAY",
                    "discount_type": "percentage",
                    "value": 10,
                    "valid_until": "2026-10-18",
                },
                "as_of": "2026-10-18T12:00:00Z",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["subtotal"] == "900.00"
        assert data["total_amount"] == "1062.00"

    async def test_calculate_date_only_coupon_expires_next_day(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/pricing/calculate",
            json={
                "base_price": 1000,
                "coupon": {
                    "code": "LASTDAY",
                    "discount_type": "percentage",
                    "value": 10,
                    "valid_until": "2026-10-18",
                },
                "as_of": "2026-10-19T00:00:01Z",
            },
        )
        assert response.status_code == 422
        assert response.json()["detail"]["details"]["reason"] == "expired"

    async def test_preview(self, client: AsyncClient, catalogue):
        response = await client.post(
            "/api/v1/pricing/preview",
            json={
                "service_id": str(catalogue["service"].id),
                "client_type": "enterprise",
                "addon_ids": [str(catalogue["addon"].id)],
                "coupon_code": "SAVE10",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["service_name"] == "Managed IT Support"
        assert data["plan_tier"] == "standard"
        assert data["addons"] == ["Cloud Backup"]
        assert data["breakdown"]["total_amount"] == "81774.00"

    async def test_preview_unknown_service(self, client: AsyncClient):
        response = await client.post("/api/v1/pricing/preview", json={"service_id": str(uuid4())})
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    async def test_validate_coupon(self, client: AsyncClient, save10_coupon):
        response = await client.post("/api/v1/pricing/coupons/validate", json={"code": "save10"})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["code"] == "SAVE10"
        assert data["value"] == "10.00"
        assert data["remaining_uses"] == 5

    async def test_validate_unknown_coupon(self, client: AsyncClient):
        response = await client.post("/api/v1/pricing/coupons/validate", json={"code": "NOPE"})
        assert response.status_code == 422
        assert response.json()["detail"]["details"]["reason"] == "not_found"


# =============================================================================
# QUOTES AND INVOICES
# =============================================================================

@pytest.fixture
def quote_payload(catalogue):
    return {
        "service_id": str(catalogue["service"].id),
        "client_type": "enterprise",
        "addon_ids": [str(catalogue["addon"].id)],
        "coupon_code": "SAVE10",
        "contact_name": "Asha Rao",
        "contact_email": "asha@example.com",
    }


class TestQuoteEndpoints:

    async def test_create_quote(self, client: AsyncClient, quote_payload):
        response = await client.post("/api/v1/quotes", json=quote_payload)
        assert response.status_code == 201
        data = response.json()
        assert data["quote_number"].startswith("QT-")
        assert data["status"] == "pending"
        assert data["estimated_price"] == "77000.00"
        assert data["final_price"] == "69300.00"

    async def test_get_and_list_quotes(self, client: AsyncClient, quote_payload):
        created = (await client.post("/api/v1/quotes", json=quote_payload)).json()

        response = await client.get(f"/api/v1/quotes/{created['id']}")
        assert response.status_code == 200
        assert response.json()["quote_number"] == created["quote_number"]

        listing = (await client.get("/api/v1/quotes", params={"status": "pending"})).json()
        assert listing["total"] == 1
        assert listing["items"][0]["id"] == created["id"]

    async def test_list_total_counts_all_pages(self, client: AsyncClient, quote_payload):
        for _ in range(3):
            await client.post("/api/v1/quotes", json={**quote_payload, "coupon_code": None})

        listing = (await client.get("/api/v1/quotes", params={"limit": 2})).json()
        assert len(listing["items"]) == 2
        assert listing["total"] == 3

    async def test_get_unknown_quote(self, client: AsyncClient):
        response = await client.get(f"/api/v1/quotes/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "QUOTE_NOT_FOUND"

    async def test_invalid_transition(self, client: AsyncClient, quote_payload):
        created = (await client.post("/api/v1/quotes", json=quote_payload)).json()
        response = await client.post(
            f"/api/v1/quotes/{created['id']}/status", json={"status": "converted"}
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "INVALID_STATUS_TRANSITION"

    async def test_full_lifecycle(self, client: AsyncClient, quote_payload):
        """Create, approve, convert, then pay."""
        quote = (await client.post("/api/v1/quotes", json=quote_payload)).json()

        approved = await client.post(f"/api/v1/quotes/{quote['id']}/status", json={"status": "approved"})
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"

        converted = await client.post(f"/api/v1/quotes/{quote['id']}/convert")
        assert converted.status_code == 201
        invoice = converted.json()
        assert invoice["invoice_number"].startswith("INV-")
        assert invoice["amount"] == "69300.00"
        assert invoice["tax_amount"] == "12474.00"
        assert invoice["total_amount"] == "81774.00"
        assert invoice["status"] == "sent"

        quote_after = (await client.get(f"/api/v1/quotes/{quote['id']}")).json()
        assert quote_after["status"] == "converted"

        paid = await client.post(f"/api/v1/invoices/{invoice['id']}/status", json={"status": "paid"})
        assert paid.status_code == 200
        assert paid.json()["status"] == "paid"
        assert paid.json()["paid_at"] is not None

        again = await client.post(f"/api/v1/quotes/{quote['id']}/convert")
        assert again.status_code == 409


class TestInvoiceEndpoints:

    async def _sent_invoice(self, client: AsyncClient, quote_payload) -> dict:
        quote = (await client.post("/api/v1/quotes", json=quote_payload)).json()
        await client.post(f"/api/v1/quotes/{quote['id']}/status", json={"status": "approved"})
        return (await client.post(f"/api/v1/quotes/{quote['id']}/convert", json={"notes": "Net 30"})).json()

    async def test_list_and_get(self, client: AsyncClient, quote_payload):
        invoice = await self._sent_invoice(client, quote_payload)
        assert invoice["notes"] == "Net 30"

        listing = (await client.get("/api/v1/invoices")).json()
        assert listing["total"] == 1

        response = await client.get(f"/api/v1/invoices/{invoice['id']}")
        assert response.status_code == 200
        assert response.json()["invoice_number"] == invoice["invoice_number"]

    async def test_get_unknown_invoice(self, client: AsyncClient):
        response = await client.get(f"/api/v1/invoices/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "INVOICE_NOT_FOUND"

    async def test_mark_overdue(self, client: AsyncClient, quote_payload):
        invoice = await self._sent_invoice(client, quote_payload)

        response = await client.post(
            "/api/v1/invoices/mark-overdue", json={"as_of": "2099-01-01T00:00:00Z"}
        )
        assert response.status_code == 200
        assert response.json()["updated"] == 1

        refreshed = (await client.get(f"/api/v1/invoices/{invoice['id']}")).json()
        assert refreshed["status"] == "overdue"

    async def test_invalid_invoice_transition(self, client: AsyncClient, quote_payload):
        invoice = await self._sent_invoice(client, quote_payload)
        response = await client.post(f"/api/v1/invoices/{invoice['id']}/status", json={"status": "draft"})
        assert response.status_code == 409
