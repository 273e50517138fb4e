"""
Audience rule engine.

- compile_rules: rule document -> SQLAlchemy filter over customers
- RuleInferencer: free text -> rule document (local heuristics, optional provider)
- explain_rules: rule document -> human-readable sentence
"""

from app.services.audience_rules.compiler import compile_rules
from app.services.audience_rules.config import RuleInferenceConfig
from app.services.audience_rules.explanation import explain_rules
from app.services.audience_rules.heuristics import extract_rules
from app.services.audience_rules.inferencer import InferenceOutcome, InferenceResult, RuleInferencer

__all__ = [
    "compile_rules",
    "explain_rules",
    "extract_rules",
    "RuleInferenceConfig",
    "RuleInferencer",
    "InferenceOutcome",
    "InferenceResult",
]
