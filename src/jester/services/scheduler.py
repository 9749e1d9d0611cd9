"""Background task scheduler."""
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from jester.core.logging import logger
from jester.services.audit_log import AuditLog
from jester.services.horoscope import HoroscopeService
from jester.services.joke import JokeService
from jester.services.weather import WeatherService


class TaskScheduler:
    """Periodic cache refreshes and message log cleanup."""

    def __init__(
        self,
        jokes: JokeService,
        weather: WeatherService,
        horoscopes: HoroscopeService,
        audit_log: Optional[AuditLog] = None,
        timezone: str = "Europe/Moscow",
        retention_days: int = 30,
    ):
        """Initialize scheduler."""
        self.jokes = jokes
        self.weather = weather
        self.horoscopes = horoscopes
        self.audit_log = audit_log
        self.timezone = timezone
        self.retention_days = retention_days
        self.scheduler = BackgroundScheduler(timezone=timezone)

    def daily_update(self):
        """New day: fresh horoscopes and weather."""
        logger.info("🕛 Starting daily update")
        try:
            outcome = self.horoscopes.refresh()
            logger.info(f"Horoscopes refreshed: {'ok' if outcome.ok else outcome.message}")
            if self.weather.configured:
                self.weather.refresh()
        except Exception as e:
            logger.error(f"Error in daily update: {e}", exc_info=True)

    def update_jokes(self):
        """Refresh the joke cache."""
        try:
            outcome = self.jokes.refresh()
            logger.info(f"Joke cache refreshed: {'ok' if outcome.ok else outcome.message}")
        except Exception as e:
            logger.error(f"Error refreshing jokes: {e}", exc_info=True)

    def update_weather(self):
        """Refresh the weather cache."""
        if not self.weather.configured:
            return
        try:
            self.weather.refresh()
        except Exception as e:
            logger.warning(f"Error refreshing weather: {e}")

    def weekly_cleanup(self):
        """Drop old message log records."""
        if self.audit_log is None:
            return
        try:
            self.audit_log.cleanup(self.retention_days)
        except Exception as e:
            logger.error(f"Error in weekly cleanup: {e}", exc_info=True)

    def start(self):
        """Start the scheduler."""
        self.scheduler.add_job(
            self.daily_update,
            CronTrigger(hour=0, minute=0, timezone=self.timezone),
            id='daily_update',
            name='Daily horoscope and weather update',
            replace_existing=True
        )

        self.scheduler.add_job(
            self.update_jokes,
            CronTrigger(hour='*/6', minute=0, timezone=self.timezone),
            id='update_jokes',
            name='Joke cache refresh',
            replace_existing=True
        )

        self.scheduler.add_job(
            self.update_weather,
            CronTrigger(minute='*/30', timezone=self.timezone),
            id='update_weather',
            name='Weather cache refresh',
            replace_existing=True
        )

        self.scheduler.add_job(
            self.weekly_cleanup,
            CronTrigger(day_of_week='sun', hour=2, minute=0, timezone=self.timezone),
            id='weekly_cleanup',
            name='Message log cleanup',
            replace_existing=True
        )

        self.scheduler.start()
        logger.info(f"✅ Task scheduler started ({self.timezone})")
        logger.info("   - Horoscopes + weather: daily at 00:00")
        logger.info("   - Jokes: every 6 hours")
        logger.info("   - Weather: every 30 minutes")
        logger.info("   - Message log cleanup: Sundays at 02:00")

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Task scheduler stopped")
