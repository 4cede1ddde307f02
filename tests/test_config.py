from __future__ import annotations

import pytest

from commons_dtz.config import COMMONS_URL, load_settings
from commons_dtz.errors import ConfigError


def test_bot_password_settings() -> None:
    settings = load_settings({"DTZ_USERNAME": "Jane@dtz", "DTZ_PASSWORD": "secret", "DTZ_LOG_LEVEL": "debug"})
    assert settings.site == COMMONS_URL
    assert settings.path == "/w/"
    assert settings.max_lag == 5
    assert settings.log_level == "DEBUG"
    assert not settings.uses_oauth


def test_oauth_settings() -> None:
    env = {
        "DTZ_CONSUMER_TOKEN": "ct", "DTZ_CONSUMER_SECRET": "cs",
        "DTZ_ACCESS_TOKEN": "at", "DTZ_ACCESS_SECRET": "as",
    }
    assert load_settings(env).uses_oauth


@pytest.mark.parametrize(
    "env",
    [{}, {"DTZ_USERNAME": "Jane"}, {"DTZ_CONSUMER_TOKEN": "ct", "DTZ_ACCESS_TOKEN": "at"},
     {"DTZ_USERNAME": "Jane", "DTZ_PASSWORD": "x", "DTZ_MAX_LAG": "soon"}],
)
def test_bad_settings(env) -> None:
    with pytest.raises(ConfigError):
        load_settings(env)
