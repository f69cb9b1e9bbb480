"""Client session helpers: token lookup, cleanup and request auth headers.

The store is any ``MutableMapping[str, str]`` owned by the caller, holding
the bearer token under ``token`` and the session kind under ``userType``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping

from tokenwatch.config import InspectorConfig
from tokenwatch.inspector import is_token_expired

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_TYPE_KEY = "userType"
COOKIE_NAME = "token"
GUEST_USER_TYPE = "guest"


def get_cookie_token(cookie_header: str | None) -> str | None:
    """Return the first ``token`` cookie value from a Cookie header string."""
    if not cookie_header:
        return None
    for pair in cookie_header.split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep and name.strip() == COOKIE_NAME:
            return value.strip()
    return None


def get_token(
    store: Mapping[str, str],
    override: str | None = None,
    cookie_header: str | None = None,
) -> str | None:
    """Find the current token: store first, then ``override``, then the cookie."""
    return store.get(TOKEN_KEY) or override or get_cookie_token(cookie_header) or None


def clear_expired_token(
    store: MutableMapping[str, str],
    now: int | float | None = None,
    config: InspectorConfig | None = None,
) -> bool:
    """Drop the stored token and session kind if the token is expired.

    Returns True when something was removed.
    """
    token = store.get(TOKEN_KEY)
    if not token:
        return False
    if not is_token_expired(token, now=now, config=config):
        return False

    store.pop(TOKEN_KEY, None)
    store.pop(USER_TYPE_KEY, None)
    logger.info("Cleared expired session token")
    return True


def auth_headers(
    store: Mapping[str, str],
    now: int | float | None = None,
    config: InspectorConfig | None = None,
) -> dict[str, str]:
    """Build request auth headers from the store.

    An unexpired token gives a Bearer header, a guest session gives
    ``X-User-Type: guest``, anything else gives no headers.
    """
    token = store.get(TOKEN_KEY)
    if token and not is_token_expired(token, now=now, config=config):
        return {"Authorization": f"Bearer {token}"}
    if store.get(USER_TYPE_KEY) == GUEST_USER_TYPE:
        return {"X-User-Type": GUEST_USER_TYPE}
    return {}
