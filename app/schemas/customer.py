from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional


class CustomerCreate(BaseModel):
    """Schema for creating a customer."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    total_spending: float = Field(0, ge=0)
    visit_count: int = Field(0, ge=0)
    last_visit: Optional[datetime] = None


class CustomerBulkCreate(BaseModel):
    """Batch import; rows whose email already exists are skipped."""
    customers: list[CustomerCreate] = Field(..., min_length=1)


class CustomerBulkResult(BaseModel):
    created: int
    skipped: int


class CustomerResponse(BaseModel):
    """Schema for customer response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    total_spending: float
    visit_count: int
    last_visit: Optional[datetime] = None
    created_at: Optional[datetime] = None
