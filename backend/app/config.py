import logging
from pydantic_settings import BaseSettings
from pydantic import model_validator, ConfigDict
from functools import lru_cache

logger = logging.getLogger(__name__)

KNOWN_PROVIDERS = ("openai", "anthropic")


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment: "development" or "production"
    environment: str = "development"

    # LLM used for SQL generation, answers and insights, as "provider:model"
    ai_model: str = "openai:gpt-4o"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    ai_timeout_seconds: float = 30.0
    ai_max_tokens: int = 2000

    # Directory holding sample_ad_sales.csv, sample_total_sales.csv, sample_eligibility.csv
    data_dir: str = "data"

    history_default_limit: int = 10
    summary_growth_rate: float = 15.0  # No historical data to derive a real rate from

    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @model_validator(mode="after")
    def _validate_ai_settings(self) -> "Settings":
        """Reject unknown providers; enforce the provider key in production."""
        if self.ai_provider not in KNOWN_PROVIDERS:
            raise ValueError(
                f"AI_MODEL must look like 'provider:model' with provider in {KNOWN_PROVIDERS}, "
                f"got {self.ai_model!r}"
            )
        if self.is_production:
            if self.ai_provider == "openai" and not self.openai_api_key:
                raise ValueError("OPENAI_API_KEY must be set in production when AI_MODEL uses openai.")
            if self.ai_provider == "anthropic" and not self.anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY must be set in production when AI_MODEL uses anthropic.")
        if self.ai_timeout_seconds <= 0:
            logger.warning("AI_TIMEOUT_SECONDS <= 0; completion calls will time out immediately.")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def ai_provider(self) -> str:
        if ":" not in self.ai_model:
            return "openai"
        return self.ai_model.split(":", 1)[0].strip().lower()

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return origins or ["http://localhost:5173", "http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
