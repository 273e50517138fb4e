"""
Audience Segment Schemas
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Optional


class SegmentCreate(BaseModel):
    """Create a segment, or update the one that already has this name."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    rules: dict[str, Any] = Field(..., description="Rule document: {logic, conditions, connectors?}")


class SegmentResponse(BaseModel):
    """Segment response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    rules: dict[str, Any]
    size: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SegmentListResponse(BaseModel):
    items: list[SegmentResponse]
    total: int


class AudiencePreviewRequest(BaseModel):
    rules: dict[str, Any]


class AudiencePreviewResponse(BaseModel):
    audience_size: int
    sample_customers: list[dict[str, Any]]
