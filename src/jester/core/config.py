"""
Application configuration with layered loading.

Configuration precedence (highest to lowest):
1. Environment variables
2. config.yml values
3. Default values defined here

A missing credential never stops the process: the service that needs it
degrades to its fallback content instead.
"""
import os
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load .env file first (lowest priority, will be overridden by config.yml and env vars)
load_dotenv()

# Setup basic logging for config loading
logger = logging.getLogger(__name__)


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "config.example.yml").exists() or (parent / "pyproject.toml").exists():
            return parent
    return Path(os.getenv("JESTER_ROOT", os.getcwd()))


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """Load configuration from YAML file if it exists."""
    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}")
        return {}

    try:
        import yaml
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except Exception as e:
        logger.error(f"Error loading config file {config_path}: {e}")
        return {}


def _get_nested(d: Dict, *keys, default=None):
    """Safely get a nested dictionary value."""
    for key in keys:
        if isinstance(d, dict):
            d = d.get(key, default)
        else:
            return default
    return d if d is not None else default


def _env_or_yaml(env_key: str, yaml_config: Dict, *yaml_keys, default=None):
    """Get value from environment variable, falling back to YAML config, then default."""
    env_value = os.getenv(env_key)
    if env_value is not None:
        return env_value

    yaml_value = _get_nested(yaml_config, *yaml_keys)
    if yaml_value is not None:
        return yaml_value

    return default


# Find project root and load YAML config
PROJECT_ROOT = _find_project_root()
YAML_CONFIG = _load_yaml_config(PROJECT_ROOT / "config.yml")


def _setting(env_key: Optional[str], *yaml_keys, default=None, cast=None):
    """
    Field read from the environment or config.yml each time its model is built,
    so reload_config() picks up changed values.
    """
    def factory():
        if env_key:
            value = _env_or_yaml(env_key, YAML_CONFIG, *yaml_keys, default=default)
        else:
            value = _get_nested(YAML_CONFIG, *yaml_keys, default=default)
        if cast is not None and value is not None:
            return cast(value)
        return value
    return Field(default_factory=factory)


def _paths_root() -> Path:
    return Path(_env_or_yaml("JESTER_ROOT", YAML_CONFIG, "paths", "root", default=str(PROJECT_ROOT)))


def _paths_data() -> Path:
    return Path(_env_or_yaml("JESTER_DATA_PATH", YAML_CONFIG, "paths", "data", default=str(_paths_root() / "data")))


def _is_true(value) -> bool:
    return str(value).lower() == "true"


class PathsConfig(BaseModel):
    """Path configuration."""
    root: Path = Field(default_factory=_paths_root)
    data: Path = Field(default_factory=_paths_data)


class TelegramConfig(BaseModel):
    """Telegram bot configuration."""
    bot_token: str = _setting("TELEGRAM_BOT_TOKEN", "telegram", "bot_token", default="")
    bot_username: str = _setting("TELEGRAM_BOT_USERNAME", "telegram", "bot_username", default="")


class AIConfig(BaseModel):
    """AI Gateway (Gemini via the OpenAI-compatible endpoint) configuration."""
    api_key: str = _setting("GOOGLE_AI_API_KEY", "ai", "api_key", default="")
    base_url: str = _setting("GOOGLE_AI_BASE_URL", "ai", "base_url",
                             default="https://generativelanguage.googleapis.com/v1beta/openai/")
    model_name: str = _setting("GOOGLE_AI_MODEL", "ai", "model_name", default="gemini-2.5-flash")
    connect_timeout: float = _setting(None, "ai", "connect_timeout", default=30.0, cast=float)
    read_timeout: float = _setting(None, "ai", "read_timeout", default=60.0, cast=float)


class WeatherConfig(BaseModel):
    """Weather integration configuration."""
    api_key: str = _setting("WEATHER_API_KEY", "weather", "api_key", default="")
    city: str = _setting("WEATHER_CITY", "weather", "city", default="Moscow")
    api_url: str = _setting(None, "weather", "api_url", default="https://api.openweathermap.org/data/2.5/weather")
    ttl_minutes: int = _setting(None, "weather", "ttl_minutes", default=30, cast=int)
    timeout: float = _setting(None, "weather", "timeout", default=15.0, cast=float)


class JokeConfig(BaseModel):
    """Joke RSS configuration."""
    rss_url: str = _setting("JOKE_RSS_URL", "joke", "rss_url", default="https://www.anekdot.ru/rss/export_j.xml")
    backup_rss_url: str = _setting(None, "joke", "backup_rss_url", default="https://www.anekdot.ru/rss/random_j.xml")
    ttl_hours: int = _setting(None, "joke", "ttl_hours", default=6, cast=int)
    connect_timeout: float = _setting(None, "joke", "connect_timeout", default=30.0, cast=float)
    read_timeout: float = _setting(None, "joke", "read_timeout", default=30.0, cast=float)
    write_timeout: float = _setting(None, "joke", "write_timeout", default=15.0, cast=float)


class HoroscopeConfig(BaseModel):
    """Daily horoscope configuration."""
    api_url: str = _setting("HOROSCOPE_API_URL", "horoscope", "api_url",
                            default="https://horoscope-app-api.vercel.app/api/v1/get-horoscope/daily")
    ttl_hours: int = _setting(None, "horoscope", "ttl_hours", default=24, cast=int)
    timezone: str = _setting("JESTER_TIMEZONE", "horoscope", "timezone", default="Europe/Moscow")
    request_delay: float = _setting(None, "horoscope", "request_delay", default=0.5, cast=float)
    timeout: float = _setting(None, "horoscope", "timeout", default=15.0, cast=float)


class GameConfig(BaseModel):
    """Roulette game configuration."""
    history_size: int = _setting(None, "game", "history_size", default=100, cast=int)
    animation_delay: float = _setting(None, "game", "animation_delay", default=4.0, cast=float)


class MessagingConfig(BaseModel):
    """Outbound message sizing and pacing."""
    max_message_length: int = _setting(None, "messaging", "max_message_length", default=4096, cast=int)
    part_margin: int = _setting(None, "messaging", "part_margin", default=100, cast=int)
    message_delay: float = _setting(None, "messaging", "message_delay", default=0.2, cast=float)


class AuditConfig(BaseModel):
    """Message log configuration."""
    enabled: bool = _setting("JESTER_AUDIT_ENABLED", "audit", "enabled", default="true", cast=_is_true)
    db_file: str = _setting(None, "audit", "db_file", default="messages.db")
    retention_days: int = _setting(None, "audit", "retention_days", default=30, cast=int)


class APIConfig(BaseModel):
    """HTTP API configuration."""
    host: str = _setting("HOST", "api", "host", default="0.0.0.0")
    port: int = _setting("PORT", "api", "port", default=8080, cast=int)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = _setting("JESTER_LOG_LEVEL", "logging", "level", default="INFO")


class ContentConfig(BaseModel):
    """Location of the trigger/fallback content table."""
    path: Optional[str] = _setting("JESTER_CONTENT_PATH", "content", "path", default=None)


class Settings(BaseModel):
    """
    Application settings with layered configuration.

    Configuration is loaded from (in order of precedence):
    1. Environment variables
    2. config.yml
    3. Default values
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    joke: JokeConfig = Field(default_factory=JokeConfig)
    horoscope: HoroscopeConfig = Field(default_factory=HoroscopeConfig)
    game: GameConfig = Field(default_factory=GameConfig)
    messaging: MessagingConfig = Field(default_factory=MessagingConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)

    @property
    def audit_db_path(self) -> Path:
        """Message log database path."""
        return self.paths.data / self.audit.db_file

    @property
    def weather_configured(self) -> bool:
        return bool(self.weather.api_key.strip())

    @property
    def ai_configured(self) -> bool:
        return bool(self.ai.api_key.strip())


# Create singleton instance
settings = Settings()


def get_config_source(key: str) -> str:
    """
    Get the source of a configuration value.

    Returns 'env', 'yaml', or 'default'.
    """
    env_key = key.upper().replace(".", "_")
    if os.getenv(env_key) is not None:
        return "env"

    keys = key.split(".")
    yaml_value = _get_nested(YAML_CONFIG, *keys)
    if yaml_value is not None:
        return "yaml"

    return "default"


def reload_config():
    """Reload configuration from files."""
    global YAML_CONFIG, settings
    YAML_CONFIG = _load_yaml_config(PROJECT_ROOT / "config.yml")
    settings = Settings()
    logger.info("Configuration reloaded")
