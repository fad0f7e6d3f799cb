"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.application.services import PasswordService, PasswordSyncWorker
from app.domain.exceptions import ChatPlatformError
from app.infrastructure.dependencies import get_discord_client, get_password_state
from app.infrastructure.discord.commands import SLASH_COMMANDS
from app.infrastructure.logging.log_config import setup_logging
from app.presentation.api.v1.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — prepare storage, register commands, start password sync."""
    settings = get_settings()
    setup_logging()

    # 1. Ensure the data directory exists
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)

    discord = get_discord_client()
    worker: PasswordSyncWorker | None = None

    if not discord.is_ready:
        logger.warning("DISCORD_TOKEN is not configured; chat features are disabled.")
    else:
        # 2. Register slash commands (prefer guild for instant updates)
        try:
            await discord.register_commands(SLASH_COMMANDS, settings.discord_guild_id)
        except ChatPlatformError:
            logger.exception("Command registration failed")

        # 3. Keep the password message in sync
        if settings.password_channel_id:
            passwords = PasswordService(
                discord, get_password_state(), settings.password_channel_id
            )
            worker = PasswordSyncWorker(passwords, interval=settings.password_sync_interval)
            await worker.start()
        else:
            logger.warning("PASSWORD_CHANNEL_ID is not configured; password sync is disabled.")

    yield

    # Shutdown
    if worker is not None:
        await worker.stop()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )
