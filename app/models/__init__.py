from app.models.customer import Customer
from app.models.segment import AudienceSegment
from app.models.campaign import Campaign

__all__ = [
    "Customer",
    "AudienceSegment",
    "Campaign",
]
