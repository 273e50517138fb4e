"""
Audience segment model.

Rules are stored verbatim as the JSON rule document, e.g.
{
    "logic": "AND",
    "conditions": [
        {"field": "totalSpending", "operator": ">", "value": 500},
        {"field": "lastVisit", "operator": "before", "value": 60}
    ],
    "connectors": ["AND"]
}
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.sql import func
from app.database import Base


class AudienceSegment(Base):
    """Named audience defined by a rule document."""

    __tablename__ = "audience_segments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text)
    rules = Column(JSON, nullable=False)

    # Matching customer count, recomputed whenever rules change
    size = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<AudienceSegment {self.name} size={self.size}>"
