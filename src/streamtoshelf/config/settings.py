"""Application settings loaded from environment variables and .env."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SpotifySettings(BaseSettings):
    """Spotify Web API (metadata search) settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_", env_file=".env", extra="ignore"
    )

    client_id: str = Field(default="", description="Client-credentials app ID")
    client_secret: str = Field(default="", description="Client-credentials app secret")
    token_url: str = "https://accounts.spotify.com/api/token"
    api_base_url: str = "https://api.spotify.com/v1"
    search_timeout: float = Field(default=10.0, gt=0)
    autocomplete_timeout: float = Field(default=5.0, gt=0)
    search_limit: int = Field(default=20, ge=1, le=50)
    autocomplete_limit: int = Field(default=8, ge=1, le=50)
    # Subtracted from expires_in so a token never dies mid-request
    token_safety_margin: int = Field(default=60, ge=0)

    @property
    def is_configured(self) -> bool:
        """Check if both client credentials are present."""
        return bool(self.client_id and self.client_secret)


class SonglinkSettings(BaseSettings):
    """Odesli / song.link cross-platform resolver settings."""

    model_config = SettingsConfigDict(
        env_prefix="SONGLINK_", env_file=".env", extra="ignore"
    )

    api_url: str = "https://api.song.link/v1-alpha.1/links"
    timeout: float = Field(default=10.0, gt=0)


class DiscogsSettings(BaseSettings):
    """Discogs marketplace catalog settings."""

    model_config = SettingsConfigDict(
        env_prefix="DISCOGS_", env_file=".env", extra="ignore"
    )

    token: str = Field(default="", description="Personal access token, lookup disabled if empty")
    search_url: str = "https://api.discogs.com/database/search"
    site_url: str = "https://www.discogs.com"
    user_agent: str = "StreamToShelf/1.0"
    timeout: float = Field(default=10.0, gt=0)
    per_page: int = Field(default=5, ge=1, le=100)

    @property
    def is_configured(self) -> bool:
        """Check if a token is set."""
        return bool(self.token)


class ImageProxySettings(BaseSettings):
    """Artwork proxy settings."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_PROXY_", env_file=".env", extra="ignore"
    )

    timeout: float = Field(default=10.0, gt=0)
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    user_agent: str = (
        "Mozilla/5.0 (compatible; StreamToShelf/1.0; +https://stream-to-shelf.vercel.app)"
    )
    cache_control: str = "public, max-age=31536000, immutable"


# Hey future me, Settings is the ROOT. Service sections are nested BaseSettings with their own
# env prefixes (SPOTIFY_CLIENT_ID, DISCOGS_TOKEN, ...), so each client only ever sees its own
# section. Top-level fields have no prefix (APP_NAME, LOG_LEVEL, SITE_URL).
# Don't call get_settings() at import time in modules - tests clear the cache between runs!
class Settings(BaseSettings):
    """Root application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "StreamToShelf"
    app_env: Literal["development", "production", "test"] = "development"
    site_url: str = "https://stream-to-shelf.vercel.app"
    log_level: str = "INFO"
    log_json: bool = False

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    songlink: SonglinkSettings = Field(default_factory=SonglinkSettings)
    discogs: DiscogsSettings = Field(default_factory=DiscogsSettings)
    image_proxy: ImageProxySettings = Field(default_factory=ImageProxySettings)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @field_validator("site_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
