"""
Campaign Schemas
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Literal, Optional


CampaignStatus = Literal["draft", "active", "paused", "completed"]


class CampaignCreate(BaseModel):
    """Schema for creating a campaign."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    rules: dict[str, Any]


class CampaignResponse(BaseModel):
    """Campaign response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    status: CampaignStatus = "draft"
    rules: dict[str, Any]
    audience_size: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CampaignListResponse(BaseModel):
    items: list[CampaignResponse]
    total: int
    page: int
    page_size: int
