"""
Data models for hCaptcha verification.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


# Fraction of a second, any number of digits
_FRACTION = re.compile(r"\.(\d+)")


class FailureKind(str, Enum):
    """Why a verification did not succeed."""

    TRANSPORT = "transport"
    READ = "read"
    PARSE = "parse"
    REJECTED = "rejected"


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"challenge_ts must be a string, got {type(value).__name__}")
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # and only 3 or 6 fraction digits before 3.11
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"challenge_ts is not an ISO 8601 timestamp: {value!r}") from e


def _optional(data: dict[str, Any], key: str, *kinds: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if not isinstance(value, kinds) or (isinstance(value, bool) and bool not in kinds):
        raise ValueError(f"{key} has unexpected type {type(value).__name__}")
    return value


@dataclass
class SiteVerifyResponse:
    """
    Reply of the hCaptcha siteverify endpoint.

    Attributes:
        success: Whether the proof token was accepted
        challenge_ts: When the challenge was solved
        hostname: Hostname of the site where the challenge was solved
        credit: Whether the response will be credited
        error_codes: Error codes reported by the service
        score: Risk score (Enterprise only)
        score_reason: Reasons for the risk score (Enterprise only)
    """
    success: bool
    challenge_ts: datetime | None = None
    hostname: str | None = None
    credit: bool | None = None
    error_codes: list[str] = field(default_factory=list)
    score: float | None = None
    score_reason: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SiteVerifyResponse:
        """
        Build a response from decoded JSON.

        Raises:
            ValueError: If the payload does not have the siteverify shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"siteverify reply must be a JSON object, got {type(data).__name__}")

        success = data.get("success", False)
        if not isinstance(success, bool):
            raise ValueError(f"success must be a boolean, got {type(success).__name__}")

        error_codes = data.get("error-codes") or []
        if not isinstance(error_codes, list) or not all(isinstance(c, str) for c in error_codes):
            raise ValueError("error-codes must be a list of strings")

        score = _optional(data, "score", int, float)

        return cls(
            success=success,
            challenge_ts=_parse_timestamp(data.get("challenge_ts")),
            hostname=_optional(data, "hostname", str),
            credit=_optional(data, "credit", bool),
            error_codes=list(error_codes),
            score=float(score) if score is not None else None,
            score_reason=_optional(data, "score_reason", str),
        )


@dataclass
class VerificationResult:
    """
    Outcome of one captcha verification.

    Attributes:
        verified: Whether the request may proceed
        failure: Why verification failed, None when verified
        error: Human readable failure description
        response: Parsed siteverify reply, if one was received
    """
    verified: bool
    failure: FailureKind | None = None
    error: str | None = None
    response: SiteVerifyResponse | None = None
