"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from homefix.errors import ConfigurationError

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_MODELS = {
    "gemini": "gemini-2.5-flash",
    "openai": "gpt-4.1-mini",
}
STORAGE_BACKENDS = {"file", "memory", "supabase"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_key: str | None = None
    ai_provider: str = "gemini"
    ai_model: str | None = None
    storage_backend: str = "file"
    storage_path: str = ".homefix/storage.json"
    storage_namespace: str = "homefix_"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def resolved_ai_model(self) -> str:
        """Return the configured model or the provider default."""
        return self.ai_model or DEFAULT_MODELS[self.ai_provider]


def load_settings(settings: Settings | None = None) -> Settings:
    """Load settings and fail fast on anything that would block usage."""
    resolved = settings or Settings()
    if not resolved.api_key or not resolved.api_key.strip():
        raise ConfigurationError("API_KEY environment variable not set")
    if resolved.ai_provider not in DEFAULT_MODELS:
        raise ConfigurationError(
            f"Unknown model provider: {resolved.ai_provider!r}"
        )
    if resolved.storage_backend not in STORAGE_BACKENDS:
        raise ConfigurationError(
            f"Unknown storage backend: {resolved.storage_backend!r}"
        )
    if resolved.storage_backend == "supabase" and not (
        resolved.supabase_url and resolved.supabase_service_key
    ):
        raise ConfigurationError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for supabase storage"
        )
    return resolved
