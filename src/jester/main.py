"""Jester Telegram bot - Main entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jester.api.routes import router
from jester.core.config import settings
from jester.core.constants import BOT_VERSION
from jester.core.errors import InvalidKeyError
from jester.core.logging import logger

# Reduce noise from third-party loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Build the FastAPI app. Services are wired on startup."""
    app = FastAPI(
        title="Jester: Telegram Bot",
        description="AI answers, jokes, weather, horoscopes and a roulette game for Telegram chats",
        version=BOT_VERSION,
    )
    app.state.services = None
    app.state.scheduler = None
    app.state.telegram = None

    # Include routes
    app.include_router(router)

    @app.exception_handler(InvalidKeyError)
    async def invalid_key_handler(request: Request, exc: InvalidKeyError):
        logger.info(f"Rejected lookup: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc), "valid_keys": exc.valid_keys})

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        from jester.interfaces.telegram import TelegramChannel
        from jester.services.chat.orchestrator import DispatchOrchestrator
        from jester.services.container import build_services
        from jester.services.scheduler import TaskScheduler

        logger.info("=" * 60)
        logger.info("Jester bot starting up")
        logger.info(f"AI endpoint: {settings.ai.base_url}")
        logger.info(f"AI model: {settings.ai.model_name}")

        if app.state.services is None:
            app.state.services = build_services(settings)
        services = app.state.services

        app.state.scheduler = TaskScheduler(
            jokes=services.jokes,
            weather=services.weather,
            horoscopes=services.horoscopes,
            audit_log=services.audit_log,
            timezone=settings.horoscope.timezone,
            retention_days=settings.audit.retention_days,
        )
        app.state.scheduler.start()

        channel = TelegramChannel(
            orchestrator=DispatchOrchestrator(services),
            bot_token=settings.telegram.bot_token,
            bot_username=settings.telegram.bot_username,
            messaging=settings.messaging,
            game=settings.game,
            zodiac=services.content.zodiac,
        )
        if channel.is_available():
            await channel.start()
            app.state.telegram = channel
        else:
            logger.warning("TELEGRAM_BOT_TOKEN is not set, running the HTTP API only")

        logger.info("=" * 60)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        logger.info("Jester bot shutting down")

        if app.state.telegram is not None:
            await app.state.telegram.stop()
            app.state.telegram = None
        if app.state.scheduler is not None:
            app.state.scheduler.stop()
            app.state.scheduler = None

    return app


app = create_app()


def run():
    """Console entry point."""
    import uvicorn
    uvicorn.run(
        "jester.main:app",
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
