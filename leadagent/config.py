"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # so APOLLO_API_KEY works regardless of case
    )

    # Apollo (contact enrichment provider)
    apollo_api_key: str = ""
    apollo_base_url: str = "https://api.apollo.io/api/v1"

    # Public address the provider calls back into
    public_base_url: str = "http://localhost:8000"

    # Exa (company search)
    exa_api_key: str = ""
    exa_base_url: str = "https://api.exa.ai"

    # OpenAI (or compatible API)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None  # For Azure/OpenRouter

    # Enrichment pacing; provider rate limits
    enrich_batch_size: int = 10
    enrich_batch_delay_seconds: float = 0.5
    company_delay_seconds: float = 0.5
    search_page_size: int = 10

    # Phone job lifecycle
    job_retention_seconds: float = 60 * 60
    job_sweep_interval_seconds: float = 10 * 60

    # Client-side polling budget
    poll_max_attempts: int = 30
    poll_interval_seconds: float = 2.0

    # App
    log_level: str = "INFO"
    http_timeout_seconds: float = 30.0

    @property
    def webhook_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}/enrichment/webhook"


settings = Settings()
