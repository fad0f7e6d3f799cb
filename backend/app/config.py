import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Device Intake Bridge"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = []

    # Shared secret expected in the X-Auth header
    intake_auth: str = ""

    # Discord bot
    discord_token: str = ""
    discord_application_id: str = ""
    discord_public_key: str = ""
    discord_guild_id: str = ""
    discord_api_base_url: str = "https://discord.com/api/v10"

    # Channels
    password_channel_id: str = ""
    intake_channel_id: str = ""              # falls back to password_channel_id
    logtext_channel_id: str = ""

    default_password: str = "letmein"
    password_sync_interval: int = 120        # seconds

    # Record store
    data_dir: str = "data"
    db_file: str = "db.json"

    # Roblox avatar lookup
    roblox_users_url: str = "https://users.roblox.com/v1/usernames/users"
    roblox_thumbnails_url: str = "https://thumbnails.roblox.com/v1/users/avatar-headshot"

    # Search card limits
    search_max_items: int = 10
    search_max_timestamps: int = 15

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_discord: str = "INFO"          # Discord REST adapter
    log_level_store: str = "INFO"            # JSON record store

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    @property
    def db_path(self) -> Path:
        return Path(self.data_dir) / self.db_file

    @property
    def effective_intake_channel_id(self) -> str:
        return self.intake_channel_id or self.password_channel_id

    def model_post_init(self, __context: object) -> None:
        if not self.intake_auth:
            _config_logger.warning("INTAKE_AUTH is empty; every authenticated request will be rejected")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
