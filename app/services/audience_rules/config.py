"""Immutable configuration for audience rule inference."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class RuleInferenceConfig(BaseModel):
    """Provider switches and credentials, passed explicitly to the inferencer."""

    model_config = ConfigDict(frozen=True)

    provider_enabled: bool = False
    provider_first: bool = False

    gemini_api_key: Optional[str] = None
    gemini_api_url: Optional[str] = None
    gemini_model: str = "gemini-pro"

    openai_api_key: Optional[str] = None
    openai_api_url: str = "https://api.openai.com/v1/completions"
    openai_model: str = "gpt-3.5-turbo-instruct"

    request_timeout: float = 20.0
    backoff_base: float = 0.2  # seconds; wait after attempt n is base * 2**n

    @classmethod
    def from_settings(cls, settings) -> "RuleInferenceConfig":
        return cls(
            provider_enabled=settings.ENABLE_PROVIDER_NL_TO_RULES,
            provider_first=settings.PROVIDER_FIRST_NL_TO_RULES,
            gemini_api_key=settings.GEMINI_API_KEY,
            gemini_api_url=settings.GEMINI_API_URL,
            gemini_model=settings.GEMINI_MODEL,
            openai_api_key=settings.OPENAI_API_KEY,
            openai_api_url=settings.OPENAI_API_URL,
            openai_model=settings.OPENAI_MODEL,
            request_timeout=settings.AI_PROVIDER_TIMEOUT_SECONDS,
        )

    @property
    def api_key(self) -> Optional[str]:
        return self.gemini_api_key or self.openai_api_key

    @property
    def provider_first_active(self) -> bool:
        # A Gemini key turns provider-first on whenever providers are enabled
        return self.provider_first or (self.provider_enabled and bool(self.gemini_api_key))
