"""Application configuration using pydantic-settings."""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    gemini_api_key: str = ""

    # Server
    port: int = 8080
    host: str = "0.0.0.0"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # HTTP Settings
    http_timeout: int = 60  # seconds, applied to Gemini and storage calls
    extract_timeout: float = 110.0  # seconds, whole multi-image submission

    # Uploads
    max_image_size: int = 10 * 1024 * 1024  # 10MB
    max_audio_size: int = 25 * 1024 * 1024  # 25MB
    max_images_per_request: int = 10

    # Rate Limiting
    rate_limit_per_hour: int = 100

    # CORS
    cors_origins: str = "*"  # Comma-separated origins or "*" for all

    # Gemini Settings
    gemini_image_model: str = "gemini-2.5-flash"
    gemini_text_model: str = "gemini-2.5-flash"
    gemini_audio_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.0
    gemini_max_tokens: int = 4096

    # Supabase (PostgREST) storage
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Get list of CORS origins."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def storage_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


# Global settings instance
settings = Settings()
