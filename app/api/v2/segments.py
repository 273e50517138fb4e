"""
Audience Segments API - saved rule documents and audience previews.
"""

from fastapi import APIRouter, status
from sqlalchemy import select, func
import logging

from app.api.deps import DbSession
from app.exceptions import NotFoundError
from app.models.segment import AudienceSegment
from app.schemas.segment import (
    SegmentCreate,
    SegmentResponse,
    SegmentListResponse,
    AudiencePreviewRequest,
    AudiencePreviewResponse,
)
from app.services.audience_service import AudienceService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=SegmentListResponse)
async def list_segments(db: DbSession):
    """List saved segments, newest first."""
    total_result = await db.execute(select(func.count(AudienceSegment.id)))
    total = total_result.scalar() or 0

    result = await db.execute(
        select(AudienceSegment).order_by(AudienceSegment.created_at.desc(), AudienceSegment.id.desc())
    )
    segments = result.scalars().all()

    return SegmentListResponse(
        items=[SegmentResponse.model_validate(s) for s in segments],
        total=total,
    )


@router.post("/preview-audience", response_model=AudiencePreviewResponse)
async def preview_audience(request: AudiencePreviewRequest, db: DbSession):
    """Audience size and a small sample for a rule document."""
    service = AudienceService(db)
    audience_size = await service.count(request.rules)
    sample = await service.sample(request.rules)
    return AudiencePreviewResponse(audience_size=audience_size, sample_customers=sample)


@router.get("/{segment_id}", response_model=SegmentResponse)
async def get_segment(segment_id: int, db: DbSession):
    """Get a single segment."""
    result = await db.execute(select(AudienceSegment).where(AudienceSegment.id == segment_id))
    segment = result.scalar_one_or_none()

    if not segment:
        raise NotFoundError("Segment", str(segment_id))

    return segment


@router.post("/", response_model=SegmentResponse, status_code=status.HTTP_201_CREATED)
async def create_segment(data: SegmentCreate, db: DbSession):
    """Create a segment, or replace the rules of the one with the same name."""
    result = await db.execute(select(AudienceSegment).where(AudienceSegment.name == data.name))
    segment = result.scalar_one_or_none()

    size = await AudienceService(db).count(data.rules)

    if segment:
        segment.description = data.description
        segment.rules = data.rules
        segment.size = size
        logger.info(f"Updated segment {segment.id} ({segment.name}), size={size}")
    else:
        segment = AudienceSegment(**data.model_dump(), size=size)
        db.add(segment)

    await db.commit()
    await db.refresh(segment)
    logger.info(f"Saved segment {segment.id} ({segment.name}), size={size}")
    return segment
