"""
Tests for Campaigns API

Tests campaign creation with audience sizing, listing, lookup and preview.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from app.models.campaign import Campaign


LAPSED_BIG_SPENDERS = {
    "logic": "AND",
    "conditions": [
        {"field": "totalSpending", "operator": ">", "value": 500},
        {"field": "visitCount", "operator": "<", "value": 3},
    ],
    "connectors": ["AND"],
}


@pytest_asyncio.fixture
async def sample_customers(make_customers):
    return await make_customers(
        {"name": "Asha", "total_spending": 900.0, "visit_count": 1},
        {"name": "Ben", "total_spending": 650.0, "visit_count": 8},
        {"name": "Chen", "total_spending": 40.0, "visit_count": 0},
    )


class TestCampaignCRUD:

    @pytest.mark.asyncio
    async def test_create_campaign_computes_audience_size(self, client: AsyncClient, sample_customers):
        response = await client.post(
            "/api/v2/campaigns/",
            json={"name": "Win back", "description": "Big spenders who rarely visit", "rules": LAPSED_BIG_SPENDERS},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "draft"
        assert data["audience_size"] == 1
        assert data["rules"] == LAPSED_BIG_SPENDERS

    @pytest.mark.asyncio
    async def test_create_campaign_requires_rules(self, client: AsyncClient):
        response = await client.post("/api/v2/campaigns/", json={"name": "No rules"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_campaign(self, client: AsyncClient, test_db):
        campaign = Campaign(name="Stored", rules={"conditions": []}, audience_size=7)
        test_db.add(campaign)
        await test_db.commit()
        await test_db.refresh(campaign)

        response = await client.get(f"/api/v2/campaigns/{campaign.id}")

        assert response.status_code == 200
        assert response.json()["audience_size"] == 7

    @pytest.mark.asyncio
    async def test_get_campaign_not_found(self, client: AsyncClient):
        response = await client.get("/api/v2/campaigns/31337")

        assert response.status_code == 404
        assert response.json()["detail"] == "Campaign with ID 31337 was not found"

    @pytest.mark.asyncio
    async def test_list_campaigns_paginates_and_filters(self, client: AsyncClient, test_db):
        test_db.add_all([
            Campaign(name="One", rules={}, status="draft"),
            Campaign(name="Two", rules={}, status="active"),
            Campaign(name="Three", rules={}, status="draft"),
        ])
        await test_db.commit()

        response = await client.get("/api/v2/campaigns/", params={"page_size": 2})
        data = response.json()
        assert data["total"] == 3
        assert len(data["items"]) == 2

        response = await client.get("/api/v2/campaigns/", params={"status": "draft"})
        data = response.json()
        assert data["total"] == 2
        assert {c["name"] for c in data["items"]} == {"One", "Three"}

    @pytest.mark.asyncio
    async def test_list_campaigns_rejects_unknown_status(self, client: AsyncClient):
        response = await client.get("/api/v2/campaigns/", params={"status": "shipped"})

        assert response.status_code == 422


class TestCampaignAudiencePreview:

    @pytest.mark.asyncio
    async def test_preview(self, client: AsyncClient, sample_customers):
        response = await client.post("/api/v2/campaigns/preview-audience", json={"rules": LAPSED_BIG_SPENDERS})

        assert response.status_code == 200
        data = response.json()
        assert data["audience_size"] == 1
        assert data["sample_customers"][0]["name"] == "Asha"
