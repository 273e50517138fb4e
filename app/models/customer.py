from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from app.database import Base


class Customer(Base):
    """Customer record targeted by audience rules."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20))

    # Attributes the audience rule compiler filters on
    total_spending = Column(Float, nullable=False, default=0)
    visit_count = Column(Integer, nullable=False, default=0)
    last_visit = Column(DateTime)  # naive UTC

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Customer {self.name} <{self.email}>>"
