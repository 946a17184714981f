import logging
import os
from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

import pytz
from dotenv import load_dotenv

LEDGER_BACKENDS = ("json", "sqlite", "mysql", "memory")
MYSQL_VARIABLES = ("DATABASE_HOST", "DATABASE_PORT", "DATABASE_USER", "DATABASE_PASSWORD", "DATABASE_NAME")
TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class Settings:
    discord_token: str
    channel_id: int
    post_time: time = time(8, 0)
    timezone: str = "US/Central"
    command_prefix: str = "!"
    ledger_backend: str = "json"
    ledger_path: str = "ongoing_events.json"
    mysql_host: Optional[str] = None
    mysql_port: int = 3306
    mysql_user: Optional[str] = None
    mysql_password: Optional[str] = None
    mysql_database: Optional[str] = None
    decay_guard: bool = True
    log_level: int = logging.INFO

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    def now(self):
        return datetime.now(self.tz)

    def today(self):
        """Today's date in the configured timezone."""
        return self.now().date()


def parse_post_time(value):
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ValueError(f"❌ POST_TIME must look like HH:MM, got '{value}'.") from None


def load_settings(env=None) -> Settings:
    """Read settings from the environment (and a .env file when env is not given)."""
    if env is None:
        load_dotenv()
        env = os.environ

    token = env.get("DISCORD_TOKEN")
    if not token:
        raise ValueError("❌ DISCORD_TOKEN not found. Please set it in your .env file.")

    channel_id = env.get("CHANNEL_ID")
    if not channel_id:
        raise ValueError("❌ CHANNEL_ID not found. Please set it in your .env file.")
    try:
        channel_id = int(channel_id)
    except ValueError:
        raise ValueError(f"❌ CHANNEL_ID must be a number, got '{channel_id}'.") from None

    timezone_name = env.get("TIMEZONE", "US/Central")
    try:
        pytz.timezone(timezone_name)
    except pytz.exceptions.UnknownTimeZoneError:
        raise ValueError(f"❌ Unknown TIMEZONE '{timezone_name}'.") from None

    backend = env.get("LEDGER_BACKEND", "json").lower()
    if backend not in LEDGER_BACKENDS:
        raise ValueError(f"❌ LEDGER_BACKEND must be one of {', '.join(LEDGER_BACKENDS)}, got '{backend}'.")

    settings = Settings(
        discord_token=token,
        channel_id=channel_id,
        post_time=parse_post_time(env.get("POST_TIME", "08:00")),
        timezone=timezone_name,
        command_prefix=env.get("COMMAND_PREFIX", "!"),
        ledger_backend=backend,
        ledger_path=env.get("LEDGER_PATH", "weather_bot.db" if backend == "sqlite" else "ongoing_events.json"),
        decay_guard=env.get("DECAY_GUARD", "true").lower() in TRUE_VALUES,
        log_level=logging.getLevelName(env.get("LOG_LEVEL", "INFO").upper()),
    )
    if not isinstance(settings.log_level, int):
        raise ValueError(f"❌ Unknown LOG_LEVEL '{env.get('LOG_LEVEL')}'.")

    if backend == "mysql":
        if not all(env.get(name) for name in MYSQL_VARIABLES):
            raise ValueError("❌ Database credentials not found. Please set them in your .env file.")
        settings.mysql_host = env["DATABASE_HOST"]
        settings.mysql_port = int(env["DATABASE_PORT"])
        settings.mysql_user = env["DATABASE_USER"]
        settings.mysql_password = env["DATABASE_PASSWORD"]
        settings.mysql_database = env["DATABASE_NAME"]

    return settings
