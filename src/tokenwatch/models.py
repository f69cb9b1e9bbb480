"""Pydantic v2 models for token inspection results."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class TokenStatus(str, Enum):
    """Outcome of inspecting a token."""

    VALID = "valid"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    MALFORMED = "malformed"


class TokenInspection(BaseModel):
    """Decoded view of a token plus its validity verdict."""

    status: TokenStatus
    reason: str = ""
    header: Optional[dict[str, Any]] = None
    claims: Optional[dict[str, Any]] = None
    expires_in: Optional[int | float] = None  # seconds until exp, negative once past

    @property
    def is_valid(self) -> bool:
        """True only for a well-formed token inside its validity window."""
        return self.status == TokenStatus.VALID
