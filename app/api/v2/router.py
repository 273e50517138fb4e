from fastapi import APIRouter
from app.api.v2 import ai, campaigns, customers, segments

api_router = APIRouter()

# Include all v2 routers
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(campaigns.router, prefix="/campaigns", tags=["campaigns"])
api_router.include_router(segments.router, prefix="/segments", tags=["segments"])
