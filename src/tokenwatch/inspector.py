"""Structural and expiry checks for compact bearer tokens.

Nothing here verifies a signature: the header and payload are decoded and
their claims compared against the clock. Every public predicate is fail
closed and never raises, so a malformed token always reads as invalid or
expired.
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from typing import Any

from jwt.utils import base64url_decode

from tokenwatch.config import InspectorConfig
from tokenwatch.models import TokenInspection, TokenStatus

logger = logging.getLogger(__name__)

SEGMENT_COUNT = 3

# base64url or standard alphabet, optional padding
_SEGMENT_RE = re.compile(r"[A-Za-z0-9+/_-]*={0,2}")

_DEFAULT_CONFIG = InspectorConfig()


def decode_segment(segment: str) -> dict[str, Any]:
    """Decode one base64url JSON segment into a dict.

    Raises ValueError (binascii.Error, UnicodeDecodeError and
    json.JSONDecodeError included) if the segment is not a JSON object.
    """
    if not _SEGMENT_RE.fullmatch(segment):
        raise ValueError("Segment contains characters outside the base64 alphabet")
    try:
        decoded = json.loads(base64url_decode(segment).decode("utf-8"))
    except RecursionError as exc:
        raise ValueError("Segment JSON is nested too deeply") from exc
    if not isinstance(decoded, dict):
        raise ValueError(f"Segment is a JSON {type(decoded).__name__}, not an object")
    return decoded


def _now(now: int | float | None) -> int | float:
    return int(time.time()) if now is None else now


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def _decode_payload(token: Any) -> dict[str, Any] | None:
    """Payload claims of a token, or None when they cannot be decoded."""
    if not token or not isinstance(token, str):
        return None
    segments = token.split(".")
    if len(segments) < 2:
        return None
    try:
        return decode_segment(segments[1])
    except ValueError as exc:
        logger.debug("Undecodable token payload: %s", exc)
        return None


def _evaluate_claims(
    claims: dict[str, Any],
    now: int | float,
    config: InspectorConfig,
) -> tuple[TokenStatus, str]:
    """Compare exp/iat claims with ``now``."""
    exp = claims.get("exp")
    iat = claims.get("iat")

    if "exp" in claims and not _is_number(exp):
        return TokenStatus.MALFORMED, "exp claim is not a number"
    if iat and not _is_number(iat):
        return TokenStatus.MALFORMED, "iat claim is not a number"

    if "exp" not in claims:
        if not config.allow_missing_exp:
            logger.debug("Token has no exp claim; treating as expired")
            return TokenStatus.EXPIRED, "no exp claim"
    elif now >= exp:
        return TokenStatus.EXPIRED, "token has expired"

    if iat and now < iat:
        return TokenStatus.NOT_YET_VALID, "token issued in the future"

    return TokenStatus.VALID, "ok"


def is_valid_jwt(token: Any) -> bool:
    """True if ``token`` is three segments with decodable JSON header and payload.

    The third segment is not examined.
    """
    if not token or not isinstance(token, str):
        return False
    segments = token.split(".")
    if len(segments) != SEGMENT_COUNT:
        return False
    try:
        decode_segment(segments[0])
        decode_segment(segments[1])
    except ValueError as exc:
        logger.debug("Token failed structural check: %s", exc)
        return False
    return True


def is_token_expired(
    token: Any,
    now: int | float | None = None,
    config: InspectorConfig | None = None,
) -> bool:
    """True unless the payload has an unexpired, already-issued window.

    Only the payload segment is read. Absent, undecodable or non-numeric
    claims all count as expired.
    """
    claims = _decode_payload(token)
    if claims is None:
        return True
    status, _ = _evaluate_claims(claims, _now(now), config or _DEFAULT_CONFIG)
    return status != TokenStatus.VALID


def is_token_expiring_soon(
    token: Any,
    now: int | float | None = None,
    config: InspectorConfig | None = None,
) -> bool:
    """True if the token's exp falls within the configured refresh window.

    Already expired tokens also report True. Undecodable tokens and tokens
    without a numeric exp report False.
    """
    claims = _decode_payload(token)
    if claims is None:
        return False
    exp = claims.get("exp")
    if not _is_number(exp):
        return False
    config = config or _DEFAULT_CONFIG
    return exp - _now(now) < config.expiring_soon_seconds


def inspect_token(
    token: Any,
    now: int | float | None = None,
    config: InspectorConfig | None = None,
) -> TokenInspection:
    """Decode a token and classify it as valid, expired, not yet valid or malformed."""
    if not token or not isinstance(token, str):
        return TokenInspection(
            status=TokenStatus.MALFORMED, reason="token is empty or not a string",
        )

    segments = token.split(".")
    if len(segments) != SEGMENT_COUNT:
        return TokenInspection(
            status=TokenStatus.MALFORMED,
            reason=f"expected {SEGMENT_COUNT} segments, got {len(segments)}",
        )

    try:
        header = decode_segment(segments[0])
    except ValueError as exc:
        return TokenInspection(status=TokenStatus.MALFORMED, reason=f"bad header: {exc}")
    try:
        claims = decode_segment(segments[1])
    except ValueError as exc:
        return TokenInspection(
            status=TokenStatus.MALFORMED, reason=f"bad payload: {exc}", header=header,
        )

    now = _now(now)
    status, reason = _evaluate_claims(claims, now, config or _DEFAULT_CONFIG)
    exp = claims.get("exp")
    return TokenInspection(
        status=status,
        reason=reason,
        header=header,
        claims=claims,
        expires_in=exp - now if _is_number(exp) else None,
    )
