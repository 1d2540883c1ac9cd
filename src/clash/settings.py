"""Client configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server addresses
    local_api_base: str = "https://localhost:8080"
    production_api_base: str = "https://api.clash.nwrenger.dev"

    # HTTP
    request_timeout: float = 10.0

    # Development mode (talk to the local server)
    dev_mode: bool = False

    @property
    def api_base(self) -> str:
        """Base URL of the REST API for the selected environment."""
        base = self.local_api_base if self.dev_mode else self.production_api_base
        return base.rstrip("/")

    @property
    def ws_base(self) -> str:
        """Base URL for WebSocket connections, derived from the API base."""
        base = self.api_base
        if base.startswith("https://"):
            return "wss://" + base.removeprefix("https://")
        if base.startswith("http://"):
            return "ws://" + base.removeprefix("http://")
        return base


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
