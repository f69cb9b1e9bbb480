"""Shared test fixtures."""

from __future__ import annotations

import json

import pytest
from jwt.utils import base64url_encode

NOW = 1_700_000_000


def encode_segment(data) -> str:
    """base64url-encode a JSON value without padding."""
    return base64url_encode(json.dumps(data).encode("utf-8")).decode("ascii")


@pytest.fixture
def now() -> int:
    """Fixed evaluation time in epoch seconds."""
    return NOW


@pytest.fixture
def make_token():
    """Build an unsigned header.payload.signature token from dicts."""

    def _make(payload: dict, header: dict | None = None, signature: str = "signature") -> str:
        header = header if header is not None else {"alg": "HS256", "typ": "JWT"}
        return f"{encode_segment(header)}.{encode_segment(payload)}.{signature}"

    return _make
