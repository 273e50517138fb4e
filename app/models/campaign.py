"""
Campaign model.

A campaign targets the customers matched by its rule document. Message
delivery is not modelled; only the audience definition and its size.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
from app.database import Base


class Campaign(Base):
    """Campaign targeting an audience defined by rules."""

    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)

    status = Column(
        SQLEnum("draft", "active", "paused", "completed", name="campaign_status_enum"), default="draft"
    )

    # Target audience
    rules = Column(JSON, nullable=False)
    audience_size = Column(Integer, nullable=False, default=0)  # computed at creation

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Campaign {self.name} status={self.status}>"
