"""API routes."""
import sqlite3

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from jester.core.constants import BOT_VERSION
from jester.core.errors import InvalidKeyError
from jester.core.logging import logger
from jester.models.schemas import FailureReason
from jester.services.container import ServiceContainer

router = APIRouter()


def get_services(request: Request) -> ServiceContainer:
    """Services built at startup and kept on the app state."""
    return request.app.state.services


@router.get("/", response_class=PlainTextResponse)
def root():
    """Liveness banner."""
    return "🤖 Jester bot is running! Check /api/health for status."


@router.get("/api/health")
def health_check(services: ServiceContainer = Depends(get_services)):
    """Health check endpoint with message log statistics."""
    audit_log = services.audit_log
    if audit_log is None:
        return {"status": "UP", "database": "disabled", "bot": "running"}

    try:
        stats = audit_log.statistics()
    except sqlite3.Error as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "DOWN", "database": "disconnected", "error": str(e)},
        )

    return {
        "status": "UP",
        "database": "connected",
        "bot": "running",
        **stats,
    }


@router.get("/api/info")
def info():
    """Static description of the bot."""
    return {
        "name": "Jester Telegram Bot",
        "version": BOT_VERSION,
        "description": "Telegram бот с AI, анекдотами, погодой, гороскопами и рулеткой",
        "features": [
            "Google Gemini AI integration",
            "SQLite message logging",
            "Message splitting",
            "Interactive keyboards",
            "Special keyword reactions",
            "Jokes, weather and daily horoscopes",
            "Roulette game with statistics",
        ],
    }


@router.get("/api/v1/get-horoscope/daily", response_class=PlainTextResponse)
def daily_horoscope(
    sign: str = Query(...),
    day: str = Query("today", alias="Day"),
    services: ServiceContainer = Depends(get_services),
):
    """Today's horoscope for a sign. ``Day`` is accepted but only today is served."""
    horoscopes = services.horoscopes
    result = horoscopes.get(sign)
    if result.failure is FailureReason.INVALID_KEY:
        raise InvalidKeyError(sign, horoscopes.signs)
    return result.content
