"""
config.py
=========
Environment configuration and logging setup.

  DTZ_SITE             wiki host (default: commons.wikimedia.org)
  DTZ_PATH             script path (default: /w/)
  DTZ_USER_AGENT       User-Agent sent with every request
  DTZ_USERNAME         BotPassword user name, e.g. "Example@dtz"
  DTZ_PASSWORD         BotPassword password
  DTZ_CONSUMER_TOKEN   OAuth owner-only consumer; used instead of the
  DTZ_CONSUMER_SECRET  bot password when all four are set
  DTZ_ACCESS_TOKEN
  DTZ_ACCESS_SECRET
  DTZ_MAX_LAG          maxlag sent to the API (default: 5)
  DTZ_LOG_LEVEL        logging level (default: INFO)
"""

import logging
import os
from dataclasses import dataclass

from .errors import ConfigError

COMMONS_URL = "commons.wikimedia.org"
COMMONS_WIKI = f"https://{COMMONS_URL}/wiki/"
DEFAULT_USER_AGENT = "dtz/1.0 (https://commons.wikimedia.org/wiki/Template:DTZ)"
EDIT_SUMMARY = "Set date from Exif with time zone"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


@dataclass(frozen=True)
class Settings:
    site: str = COMMONS_URL
    path: str = "/w/"
    user_agent: str = DEFAULT_USER_AGENT
    username: str = ""
    password: str = ""
    consumer_token: str = ""
    consumer_secret: str = ""
    access_token: str = ""
    access_secret: str = ""
    max_lag: int = 5
    log_level: str = "INFO"

    @property
    def uses_oauth(self) -> bool:
        return all((self.consumer_token, self.consumer_secret, self.access_token, self.access_secret))


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ
    try:
        max_lag = int(env.get("DTZ_MAX_LAG", "5"))
    except ValueError as e:
        raise ConfigError(f"DTZ_MAX_LAG must be an integer: {e}") from e
    settings = Settings(
        site=env.get("DTZ_SITE", COMMONS_URL),
        path=env.get("DTZ_PATH", "/w/"),
        user_agent=env.get("DTZ_USER_AGENT", DEFAULT_USER_AGENT),
        username=env.get("DTZ_USERNAME", ""),
        password=env.get("DTZ_PASSWORD", ""),
        consumer_token=env.get("DTZ_CONSUMER_TOKEN", ""),
        consumer_secret=env.get("DTZ_CONSUMER_SECRET", ""),
        access_token=env.get("DTZ_ACCESS_TOKEN", ""),
        access_secret=env.get("DTZ_ACCESS_SECRET", ""),
        max_lag=max_lag,
        log_level=env.get("DTZ_LOG_LEVEL", "INFO").upper(),
    )
    if not settings.uses_oauth and not (settings.username and settings.password):
        raise ConfigError(
            "Set DTZ_USERNAME and DTZ_PASSWORD, or the four DTZ_CONSUMER_*/DTZ_ACCESS_* OAuth variables."
        )
    return settings


def configure_logging(level="INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
