from app.schemas.audience_rules import (
    RuleLogic,
    RuleCondition,
    RuleDocument,
    ProviderRulesPayload,
    NaturalLanguageRulesRequest,
    NaturalLanguageRulesResponse,
)
from app.schemas.segment import (
    SegmentCreate,
    SegmentResponse,
    SegmentListResponse,
    AudiencePreviewRequest,
    AudiencePreviewResponse,
)
from app.schemas.campaign import (
    CampaignCreate,
    CampaignResponse,
    CampaignListResponse,
)
from app.schemas.customer import (
    CustomerCreate,
    CustomerBulkCreate,
    CustomerBulkResult,
    CustomerResponse,
)

__all__ = [
    "RuleLogic",
    "RuleCondition",
    "RuleDocument",
    "ProviderRulesPayload",
    "NaturalLanguageRulesRequest",
    "NaturalLanguageRulesResponse",
    "SegmentCreate",
    "SegmentResponse",
    "SegmentListResponse",
    "AudiencePreviewRequest",
    "AudiencePreviewResponse",
    "CampaignCreate",
    "CampaignResponse",
    "CampaignListResponse",
    "CustomerCreate",
    "CustomerBulkCreate",
    "CustomerBulkResult",
    "CustomerResponse",
]
