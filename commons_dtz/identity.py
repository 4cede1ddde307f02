"""
identity.py
===========
Opens an authenticated Commons session and checks who we are editing as.

Editing is refused for anonymous sessions, for users who are not
autoconfirmed and for blocked users.
"""

import logging

import mwclient
import requests
from mwclient.errors import LoginError, MwClientError

from .config import Settings
from .errors import ConfigError

log = logging.getLogger(__name__)

REQUIRED_GROUP = "autoconfirmed"


def connect(settings: Settings) -> mwclient.Site:
    """Log in with OAuth owner-only tokens if configured, else a bot password."""
    kwargs = dict(
        path=settings.path,
        clients_useragent=settings.user_agent,
        max_lag=settings.max_lag,
    )
    try:
        if settings.uses_oauth:
            site = mwclient.Site(
                settings.site,
                consumer_token=settings.consumer_token,
                consumer_secret=settings.consumer_secret,
                access_token=settings.access_token,
                access_secret=settings.access_secret,
                **kwargs,
            )
        else:
            site = mwclient.Site(settings.site, **kwargs)
            site.login(settings.username, settings.password)
    except LoginError as e:
        raise ConfigError(f"Login failed: {e}") from e
    except (MwClientError, requests.RequestException) as e:
        raise ConfigError(f"Cannot connect to {settings.site}: {e}") from e
    return site


def check_userinfo(info: dict) -> str:
    """Return the user name from a ``meta=userinfo`` result or raise ConfigError."""
    if info.get("anon") or not info.get("id"):
        raise ConfigError("Not logged in.")
    if REQUIRED_GROUP not in (info.get("groups") or []):
        raise ConfigError("User is not autoconfirmed.")
    if info.get("blockid") or info.get("blockedby"):
        raise ConfigError("User is blocked.")
    name = info.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError("userinfo has no user name.")
    return name


def resolve_identity(site: mwclient.Site) -> str:
    try:
        data = site.get("query", meta="userinfo", uiprop="groups|blockinfo", formatversion=2)
    except (MwClientError, requests.RequestException) as e:
        raise ConfigError(f"Could not fetch user info: {e}") from e
    name = check_userinfo(data.get("query", {}).get("userinfo", {}))
    log.info("Editing as user %s", name)
    return name
