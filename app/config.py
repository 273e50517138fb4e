from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://localhost:5432/campaign_crm"

    @field_validator('DATABASE_URL', mode='before')
    @classmethod
    def convert_database_url(cls, v: str) -> str:
        """Convert postgresql:// to postgresql+asyncpg:// for async support."""
        if v and v.startswith('postgresql://'):
            return v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    # CORS
    FRONTEND_URL: str = "http://localhost:5173"

    # Audience rule inference (natural language -> rules)
    ENABLE_PROVIDER_NL_TO_RULES: bool = False
    PROVIDER_FIRST_NL_TO_RULES: bool = False

    # Gemini
    GEMINI_API_KEY: str | None = None
    GEMINI_API_URL: str | None = None
    GEMINI_MODEL: str = "gemini-pro"

    # OpenAI
    OPENAI_API_KEY: str | None = None
    OPENAI_API_URL: str = "https://api.openai.com/v1/completions"
    OPENAI_MODEL: str = "gpt-3.5-turbo-instruct"

    AI_PROVIDER_TIMEOUT_SECONDS: float = 20.0

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    DOCS_ENABLED: bool = True

    @model_validator(mode='after')
    def disable_debug_in_production(self) -> "Settings":
        """Never run with DEBUG on in production-like environments."""
        if self.is_production:
            self.DEBUG = False
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in ("production", "staging")

    @property
    def sqlalchemy_echo(self) -> bool:
        # SECURITY: echo would log bound parameters
        return self.DEBUG and not self.is_production

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
