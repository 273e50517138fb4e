"""
Text-generation providers for audience rule inference.

Each provider performs exactly one HTTP call per `generate()` and returns the
generated text. Failures (connection errors, timeouts, non-2xx) propagate as
httpx exceptions so the caller can retry; nothing here falls back silently.
"""

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from app.services.audience_rules.config import RuleInferenceConfig
from app.services.audience_rules.response_parsing import extract_provider_text

logger = logging.getLogger(__name__)


RULES_SYSTEM_PROMPT = (
    "You are a strict JSON generator. Convert the user's segmentation request into JSON only. "
    "DO NOT include any explanatory text. Respond only with JSON. "
    "Fields allowed: totalSpending, visitCount, lastVisit, email, emailCount. "
    "Operators allowed: >, <, >=, <=, =, contains, before, after. "
    'Output shape: { "logic": "AND"|"OR", "conditions": [{ "field": string, "operator": string, '
    '"value": string|number }], "connectors": ["AND"|"OR"] (optional) }'
)

GEMINI_URL_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class RuleProviderError(Exception):
    """Provider answered, but not with something usable as a rule document."""


def build_rules_prompt(prompt: str) -> str:
    return f"{RULES_SYSTEM_PROMPT}\n\nUser: {prompt}"


class RuleProvider:
    """Base class for a text-generation vendor."""

    name = "NONE"

    def __init__(
        self,
        api_key: str,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        raise NotImplementedError

    def headers(self) -> Dict[str, str]:
        raise NotImplementedError

    def payload(self, full_prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    async def generate(self, prompt: str) -> str:
        """Send the rules prompt and return the generated text."""
        full_prompt = build_rules_prompt(prompt)
        start = time.time()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, headers=self.headers(), json=self.payload(full_prompt))
            response.raise_for_status()
            try:
                data = response.json()
            except ValueError:
                data = response.text

        duration_ms = int((time.time() - start) * 1000)
        logger.debug(f"{self.name} rules response in {duration_ms}ms")

        text = extract_provider_text(data) or (json.dumps(data) if data else None)
        if not text:
            raise RuleProviderError(f"Empty {self.name} response")
        return text


class GeminiRuleProvider(RuleProvider):
    """Google Gemini generateContent API, authenticated with X-goog-api-key."""

    name = "GEMINI"

    def __init__(self, api_key: str, api_url: Optional[str] = None, model: str = "gemini-pro", **kwargs):
        super().__init__(api_key, **kwargs)
        self.api_url = api_url
        self.model = model

    @property
    def url(self) -> str:
        return self.api_url or GEMINI_URL_TEMPLATE.format(model=self.model)

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "X-goog-api-key": self.api_key}

    def payload(self, full_prompt: str) -> Dict[str, Any]:
        return {"contents": [{"parts": [{"text": full_prompt}]}]}


class OpenAIRuleProvider(RuleProvider):
    """OpenAI-style completions endpoint with bearer auth."""

    name = "OPENAI"

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.openai.com/v1/completions",
        model: str = "gpt-3.5-turbo-instruct",
        **kwargs,
    ):
        super().__init__(api_key, **kwargs)
        self.api_url = api_url
        self.model = model

    @property
    def url(self) -> str:
        return self.api_url

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}

    def payload(self, full_prompt: str) -> Dict[str, Any]:
        return {"model": self.model, "prompt": full_prompt, "max_tokens": 512, "temperature": 0}


def build_rule_provider(
    config: RuleInferenceConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[RuleProvider]:
    """Gemini when its key is configured, else OpenAI, else no provider."""
    if config.gemini_api_key:
        return GeminiRuleProvider(
            config.gemini_api_key,
            api_url=config.gemini_api_url,
            model=config.gemini_model,
            timeout=config.request_timeout,
            transport=transport,
        )
    if config.openai_api_key:
        return OpenAIRuleProvider(
            config.openai_api_key,
            api_url=config.openai_api_url,
            model=config.openai_model,
            timeout=config.request_timeout,
            transport=transport,
        )
    return None
