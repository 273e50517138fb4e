"""
Natural-language audience rule inference.

Local heuristics always run first. When a text-generation provider is enabled
it is consulted either before trusting the heuristics (provider-first) or when
the heuristics found fewer than two conditions. Provider problems never reach
the caller: the result records what happened in `InferenceResult.outcome`.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_exponential

from app.schemas.audience_rules import ProviderRulesPayload, RuleDocument
from app.services.audience_rules.config import RuleInferenceConfig
from app.services.audience_rules.heuristics import extract_rules
from app.services.audience_rules.providers import RuleProvider, RuleProviderError, build_rule_provider
from app.services.audience_rules.response_parsing import locate_json_payload

logger = logging.getLogger(__name__)

PROVIDER_FIRST_ATTEMPTS = 3
PROVIDER_FALLBACK_ATTEMPTS = 2

# Fewer heuristic conditions than this counts as a weak local result
WEAK_RESULT_CONDITIONS = 2


class InferenceOutcome(str, Enum):
    LOCAL_HEURISTIC = "local_heuristic"
    PROVIDER = "provider"
    PROVIDER_FALLBACK = "provider_fallback"


@dataclass(frozen=True)
class InferenceResult:
    """Inferred rules plus how they were obtained."""

    rules: RuleDocument
    outcome: InferenceOutcome
    error: Optional[str] = None


class RuleInferencer:
    """Converts free-text audience descriptions into rule documents."""

    def __init__(self, config: RuleInferenceConfig, provider: Optional[RuleProvider] = None):
        self.config = config
        self.provider = provider if provider is not None else build_rule_provider(config)

    @property
    def provider_available(self) -> bool:
        return bool(self.config.provider_enabled and self.config.api_key and self.provider is not None)

    def infer_local(self, prompt: str) -> RuleDocument:
        return extract_rules(prompt)

    async def infer(self, prompt: str) -> InferenceResult:
        """Infer rules for `prompt`. Never raises."""
        local_rules = self.infer_local(prompt)
        if not self.provider_available:
            return InferenceResult(rules=local_rules, outcome=InferenceOutcome.LOCAL_HEURISTIC)

        errors: List[str] = []

        if self.config.provider_first_active:
            logger.debug(f"Provider-first enabled; attempting provider ({self.provider.name})")
            try:
                rules = await self._request_provider_rules(prompt, PROVIDER_FIRST_ATTEMPTS)
                return InferenceResult(rules=rules, outcome=InferenceOutcome.PROVIDER)
            except Exception as e:
                logger.warning(f"Provider-first failed ({type(e).__name__}: {e}), falling back to local heuristics")
                errors.append(f"{type(e).__name__}: {e}")

        if len(local_rules.conditions) < WEAK_RESULT_CONDITIONS:
            logger.debug(f"Local heuristics weak; attempting provider fallback ({self.provider.name})")
            try:
                rules = await self._request_provider_rules(prompt, PROVIDER_FALLBACK_ATTEMPTS)
                return InferenceResult(rules=rules, outcome=InferenceOutcome.PROVIDER)
            except Exception as e:
                logger.warning(f"Provider fallback failed ({type(e).__name__}: {e}), returning local heuristics")
                errors.append(f"{type(e).__name__}: {e}")

        if errors:
            return InferenceResult(
                rules=local_rules,
                outcome=InferenceOutcome.PROVIDER_FALLBACK,
                error=errors[-1],
            )
        return InferenceResult(rules=local_rules, outcome=InferenceOutcome.LOCAL_HEURISTIC)

    def retrying(self, attempts: int) -> AsyncRetrying:
        """Retry policy: waits backoff_base * 2**n after attempt n, re-raises the last error."""
        return AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self.config.backoff_base * 2),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )

    async def _request_provider_rules(self, prompt: str, attempts: int) -> RuleDocument:
        """Call the provider up to `attempts` times."""
        async for attempt in self.retrying(attempts):
            with attempt:
                return await self._provider_attempt(prompt)

    async def _provider_attempt(self, prompt: str) -> RuleDocument:
        text = await self.provider.generate(prompt)
        payload = locate_json_payload(text)
        if payload is None:
            raise RuleProviderError("Failed to parse JSON from provider response")
        rules = ProviderRulesPayload.model_validate(payload).to_document(self.provider.name)
        if not rules.conditions:
            raise RuleProviderError("Provider returned no conditions")
        return rules
