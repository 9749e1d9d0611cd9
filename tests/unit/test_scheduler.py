"""
Tests for the background task scheduler.
"""
from unittest.mock import MagicMock

import pytest

from jester.models.schemas import RefreshOutcome
from jester.services.scheduler import TaskScheduler


@pytest.fixture
def scheduler():
    jokes = MagicMock()
    jokes.refresh.return_value = RefreshOutcome(ok=True)
    weather = MagicMock()
    weather.configured = True
    horoscopes = MagicMock()
    horoscopes.refresh.return_value = RefreshOutcome(ok=True)
    return TaskScheduler(
        jokes=jokes,
        weather=weather,
        horoscopes=horoscopes,
        audit_log=MagicMock(),
        timezone="Europe/Moscow",
        retention_days=14,
    )


class TestJobs:
    """The job bodies, called directly."""

    def test_daily_update(self, scheduler):
        scheduler.daily_update()
        scheduler.horoscopes.refresh.assert_called_once()
        scheduler.weather.refresh.assert_called_once()

    def test_daily_update_skips_unconfigured_weather(self, scheduler):
        scheduler.weather.configured = False
        scheduler.daily_update()
        scheduler.weather.refresh.assert_not_called()

    def test_update_jokes(self, scheduler):
        scheduler.update_jokes()
        scheduler.jokes.refresh.assert_called_once()

    def test_update_weather(self, scheduler):
        scheduler.update_weather()
        scheduler.weather.refresh.assert_called_once()

    def test_update_weather_unconfigured(self, scheduler):
        scheduler.weather.configured = False
        scheduler.update_weather()
        scheduler.weather.refresh.assert_not_called()

    def test_weekly_cleanup(self, scheduler):
        scheduler.weekly_cleanup()
        scheduler.audit_log.cleanup.assert_called_once_with(14)

    def test_weekly_cleanup_without_log(self, scheduler):
        scheduler.audit_log = None
        scheduler.weekly_cleanup()

    def test_job_errors_are_contained(self, scheduler):
        scheduler.horoscopes.refresh.side_effect = RuntimeError("boom")
        scheduler.jokes.refresh.side_effect = RuntimeError("boom")
        scheduler.audit_log.cleanup.side_effect = RuntimeError("boom")

        scheduler.daily_update()
        scheduler.update_jokes()
        scheduler.weekly_cleanup()


class TestLifecycle:
    def test_start_registers_jobs(self, scheduler):
        scheduler.start()
        try:
            ids = {job.id for job in scheduler.scheduler.get_jobs()}
            assert ids == {"daily_update", "update_jokes", "update_weather", "weekly_cleanup"}
            assert scheduler.scheduler.running
        finally:
            scheduler.stop()
        assert not scheduler.scheduler.running

    def test_stop_when_not_started(self, scheduler):
        scheduler.stop()
