"""
Campaigns API - audience-targeted campaigns defined by rule documents.
"""

from fastapi import APIRouter, Query
from sqlalchemy import select, func
from typing import Optional
import logging

from app.api.deps import DbSession
from app.exceptions import NotFoundError
from app.models.campaign import Campaign
from app.schemas.campaign import (
    CampaignCreate,
    CampaignResponse,
    CampaignListResponse,
    CampaignStatus,
)
from app.schemas.segment import AudiencePreviewRequest, AudiencePreviewResponse
from app.services.audience_service import AudienceService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=CampaignListResponse)
async def list_campaigns(
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status: Optional[CampaignStatus] = None,
):
    """List campaigns, newest first."""
    query = select(Campaign)
    if status:
        query = query.where(Campaign.status == status)

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    offset = (page - 1) * page_size
    query = query.order_by(Campaign.created_at.desc(), Campaign.id.desc()).offset(offset).limit(page_size)
    result = await db.execute(query)
    campaigns = result.scalars().all()

    return CampaignListResponse(
        items=[CampaignResponse.model_validate(c) for c in campaigns],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/preview-audience", response_model=AudiencePreviewResponse)
async def preview_campaign_audience(request: AudiencePreviewRequest, db: DbSession):
    """Audience size and a small sample for campaign rules."""
    service = AudienceService(db)
    audience_size = await service.count(request.rules)
    sample = await service.sample(request.rules)
    return AudiencePreviewResponse(audience_size=audience_size, sample_customers=sample)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(campaign_id: int, db: DbSession):
    """Get a single campaign."""
    result = await db.execute(select(Campaign).where(Campaign.id == campaign_id))
    campaign = result.scalar_one_or_none()

    if not campaign:
        raise NotFoundError("Campaign", str(campaign_id))

    return campaign


@router.post("/", response_model=CampaignResponse, status_code=201)
async def create_campaign(data: CampaignCreate, db: DbSession):
    """Create a draft campaign; audience size is computed from its rules."""
    audience_size = await AudienceService(db).count(data.rules)

    campaign = Campaign(**data.model_dump(), audience_size=audience_size, status="draft")
    db.add(campaign)
    await db.commit()
    await db.refresh(campaign)

    logger.info(f"Created campaign {campaign.id} ({campaign.name}), audience_size={audience_size}")
    return campaign
