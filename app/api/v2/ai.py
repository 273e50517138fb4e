"""
AI-assisted audience rule endpoints.
"""

from fastapi import APIRouter
import logging

from app.api.deps import Inferencer
from app.schemas.audience_rules import NaturalLanguageRulesRequest, NaturalLanguageRulesResponse
from app.services.audience_rules import explain_rules

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/nl-to-rules", response_model=NaturalLanguageRulesResponse)
async def natural_language_to_rules(
    request: NaturalLanguageRulesRequest,
    inferencer: Inferencer,
):
    """
    Convert a natural language audience description into rules.

    Examples:
    - "customers who spent over 500 and visited more than 3 times"
    - "customers who haven't visited in the last 2 months"
    - "spent between 100 and 500"
    """
    result = await inferencer.infer(request.prompt)
    if result.error:
        logger.info(f"nl-to-rules used local heuristics after provider error: {result.error}")

    return NaturalLanguageRulesResponse(
        prompt=request.prompt,
        rules=result.rules.to_response(),
        explanation=explain_rules(result.rules),
        outcome=result.outcome.value,
    )
