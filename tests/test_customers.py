"""
Tests for Customers API

Tests single and bulk customer ingestion.
"""

import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import Customer
from tests.factories import CustomerFactory


def customer_payload(**overrides) -> dict:
    data = CustomerFactory(**overrides)
    data["last_visit"] = data["last_visit"].isoformat()
    return data


class TestCreateCustomer:

    @pytest.mark.asyncio
    async def test_create_customer(self, client: AsyncClient):
        response = await client.post(
            "/api/v2/customers/",
            json=customer_payload(name="Dana", email="dana@example.com", total_spending=320.5, visit_count=4),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] is not None
        assert data["email"] == "dana@example.com"
        assert data["total_spending"] == 320.5
        assert data["visit_count"] == 4

    @pytest.mark.asyncio
    async def test_last_visit_defaults_to_now(self, client: AsyncClient, test_db: AsyncSession):
        response = await client.post("/api/v2/customers/", json={"name": "Eli", "email": "eli@example.com"})

        assert response.status_code == 201
        customer = await test_db.get(Customer, response.json()["id"])
        assert customer.total_spending == 0
        assert customer.visit_count == 0
        assert datetime.utcnow() - customer.last_visit < timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_timezone_aware_last_visit_stored_as_utc(self, client: AsyncClient, test_db: AsyncSession):
        response = await client.post(
            "/api/v2/customers/",
            json={"name": "Fay", "email": "fay@example.com", "last_visit": "2026-03-01T12:00:00+02:00"},
        )

        customer = await test_db.get(Customer, response.json()["id"])
        assert customer.last_visit == datetime(2026, 3, 1, 10, 0, 0)

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client: AsyncClient):
        payload = {"name": "Gus", "email": "gus@example.com"}
        await client.post("/api/v2/customers/", json=payload)

        response = await client.post("/api/v2/customers/", json=payload)

        assert response.status_code == 409
        assert response.json()["code"] == "RES_003"

    @pytest.mark.asyncio
    async def test_invalid_payload(self, client: AsyncClient):
        response = await client.post(
            "/api/v2/customers/",
            json={"name": "Hal", "email": "not-an-email", "visit_count": -1},
        )

        assert response.status_code == 422
        fields = {error["field"] for error in response.json()["errors"]}
        assert {"body.email", "body.visit_count"} <= fields

    @pytest.mark.asyncio
    async def test_get_customer(self, client: AsyncClient, make_customers):
        [customer] = await make_customers({"name": "Ivy"})

        response = await client.get(f"/api/v2/customers/{customer.id}")

        assert response.status_code == 200
        assert response.json()["name"] == "Ivy"

    @pytest.mark.asyncio
    async def test_get_customer_not_found(self, client: AsyncClient):
        response = await client.get("/api/v2/customers/424242")

        assert response.status_code == 404
        assert response.json()["code"] == "RES_001"


class TestBulkCreateCustomers:

    @pytest.mark.asyncio
    async def test_bulk_create(self, client: AsyncClient, test_db: AsyncSession):
        rows = [customer_payload() for _ in range(3)]

        response = await client.post("/api/v2/customers/bulk", json={"customers": rows})

        assert response.status_code == 201
        assert response.json() == {"created": 3, "skipped": 0}
        total = await test_db.execute(select(func.count(Customer.id)))
        assert total.scalar() == 3

    @pytest.mark.asyncio
    async def test_existing_and_repeated_emails_are_skipped(self, client: AsyncClient, make_customers):
        await make_customers({"email": "taken@example.com"})
        rows = [
            customer_payload(email="taken@example.com"),
            customer_payload(email="new@example.com"),
            customer_payload(email="new@example.com"),
        ]

        response = await client.post("/api/v2/customers/bulk", json={"customers": rows})

        assert response.status_code == 201
        assert response.json() == {"created": 1, "skipped": 2}

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, client: AsyncClient):
        response = await client.post("/api/v2/customers/bulk", json={"customers": []})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_imported_customers_feed_audience_preview(self, client: AsyncClient):
        rows = [
            customer_payload(total_spending=900.0),
            customer_payload(total_spending=50.0),
        ]
        await client.post("/api/v2/customers/bulk", json={"customers": rows})

        response = await client.post(
            "/api/v2/segments/preview-audience",
            json={"rules": {"conditions": [{"field": "totalSpending", "operator": ">", "value": 500}]}},
        )

        assert response.json()["audience_size"] == 1
