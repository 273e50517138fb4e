# Services module
from app.services.audience_service import AudienceService
from app.services.audience_rules import RuleInferencer, compile_rules, explain_rules

__all__ = [
    "AudienceService",
    # Audience rule engine
    "RuleInferencer",
    "compile_rules",
    "explain_rules",
]
