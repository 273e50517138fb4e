"""
FastAPI Dependencies

Provides dependency injection for database sessions and the audience
rule inferencer.
"""

from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.config import settings
from app.services.audience_rules import RuleInferenceConfig, RuleInferencer


def get_rule_inferencer() -> RuleInferencer:
    """Build an inferencer from the current settings."""
    return RuleInferencer(RuleInferenceConfig.from_settings(settings))


DbSession = Annotated[AsyncSession, Depends(get_db)]
Inferencer = Annotated[RuleInferencer, Depends(get_rule_inferencer)]
