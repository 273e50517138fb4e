"""
Audience Rule Schemas

A rule document describes an audience as a flat list of conditions:

    {
        "logic": "AND",
        "conditions": [
            {"field": "totalSpending", "operator": ">", "value": 500},
            {"field": "visitCount", "operator": ">", "value": 3}
        ],
        "connectors": ["OR"],
        "provider": null
    }

`connectors[i]` joins condition i and i+1. `provider` names the external
text-generation provider that produced the document, or is null when it was
inferred locally.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, model_validator


class RuleLogic(str, Enum):
    AND = "AND"
    OR = "OR"


class RuleCondition(BaseModel):
    """Single (field, operator, value) predicate over a customer attribute."""

    model_config = ConfigDict(frozen=True)

    field: StrictStr = Field(..., description="totalSpending, visitCount, lastVisit, email or <noun>Count")
    operator: StrictStr = Field(..., description=">, <, >=, <=, contains, before, after")
    value: Union[StrictInt, StrictFloat, StrictStr]


class RuleDocument(BaseModel):
    """Structured audience filter, authored directly or inferred from text."""

    model_config = ConfigDict(frozen=True)

    logic: RuleLogic = RuleLogic.AND
    conditions: tuple[RuleCondition, ...] = ()
    connectors: Optional[tuple[RuleLogic, ...]] = None
    provider: Optional[str] = None

    @model_validator(mode="after")
    def check_connector_count(self) -> "RuleDocument":
        if self.connectors and len(self.connectors) != len(self.conditions) - 1:
            raise ValueError(
                f"connectors must have exactly {max(len(self.conditions) - 1, 0)} entries, "
                f"got {len(self.connectors)}"
            )
        return self

    def to_response(self) -> dict[str, Any]:
        """JSON-ready dict; `connectors` is left out when absent."""
        data = self.model_dump(mode="json")
        if data["connectors"] is None:
            data.pop("connectors")
        return data


class ProviderRulesPayload(BaseModel):
    """Shape a text-generation provider must return for its answer to be used."""

    logic: RuleLogic
    conditions: list[RuleCondition]
    connectors: Optional[list[RuleLogic]] = None

    def to_document(self, provider: str) -> RuleDocument:
        return RuleDocument(
            logic=self.logic,
            conditions=tuple(self.conditions),
            connectors=tuple(self.connectors) if self.connectors is not None else None,
            provider=provider,
        )


class NaturalLanguageRulesRequest(BaseModel):
    """Request for converting free text into audience rules."""

    prompt: str = Field(..., min_length=1, description="e.g. 'customers who spent over 500 in the last 2 months'")


class NaturalLanguageRulesResponse(BaseModel):
    """Inferred rule document plus a human-readable explanation."""

    prompt: str
    rules: dict[str, Any]
    explanation: str
    outcome: str = Field(..., description="local_heuristic, provider or provider_fallback")
