"""Configuration management."""


from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API Keys
    voyage_api_key: str = ""
    anthropic_api_key: str = ""

    # Capability models
    voyage_model: str = "voyage-3"
    anthropic_model: str = "claude-3-5-haiku-latest"
    anthropic_max_tokens: int = 600

    # Capability budget (shared by ingestion and the background sweep)
    capability_quota: int = Field(default=14, description="Calls allowed per window, kept under a 15/min provider limit")  # noqa: E501
    capability_window_seconds: float = 60.0

    # Clustering windows
    family_sample_limit: int = 400
    link_window: int = 200
    link_cap: int = 140
    listing_limit: int = 100

    # Background re-classification
    disable_reclassification: bool = False
    reclassify_interval_seconds: int = 300
    reclassify_startup_delay_seconds: int = 30
    reclassify_batch_size: int = 10
    reclassify_pause_seconds: float = 1.0

    # App config
    debug: bool = True
    cors_origins: str = Field(default="", description="Comma separated list; empty allows any origin")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore extra fields in .env file
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parsed CORS origins."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
