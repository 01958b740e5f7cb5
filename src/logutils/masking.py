"""Masking of credentials and student PII in log output.

Bearer tokens, authorization codes and passwords are replaced outright.
Emails keep their first two characters and domain; 8-digit student ids keep
their last two digits so support staff can still correlate records.
"""

from __future__ import annotations

import re
from typing import Any

MASK = "***MASKED***"

_CREDENTIAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Authorization: Bearer <token>
    re.compile(r"(bearer\s+)[A-Za-z0-9_\-\.=+/]+", re.IGNORECASE),
    # access_token=..., "token": "...", refresh-token: ...
    re.compile(
        r'(["\']?(?:access|refresh|id|auth)?[_-]?token["\']?\s*[:=]\s*)["\']?[A-Za-z0-9_\-\.]+["\']?',
        re.IGNORECASE,
    ),
    # ?code=... in callback URLs and {"code": "..."} bodies
    re.compile(r'((?:[?&]|["\']?\b)code["\']?\s*[:=]\s*)["\']?[A-Za-z0-9_\-\.~]+["\']?', re.IGNORECASE),
    re.compile(r'(["\']?password["\']?\s*[:=]\s*)["\']?[^"\'\s,}\]]+["\']?', re.IGNORECASE),
    re.compile(r'(["\']?(?:client[_-]?)?secret["\']?\s*[:=]\s*)["\']?[A-Za-z0-9_\-]+["\']?', re.IGNORECASE),
)

_EMAIL = re.compile(r"([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")
_STUDENT_ID = re.compile(r"(?<!\d)(\d{6})(\d{2})(?!\d)")

SENSITIVE_KEYWORDS: frozenset[str] = frozenset(
    {
        "password",
        "secret",
        "token",
        "authorization",
        "bearer",
        "credential",
        "code",
    }
)


def _mask_email(match: re.Match[str]) -> str:
    return f"{match.group(1)[:2]}***@{match.group(2)}"


def mask_sensitive_string(text: str) -> str:
    """Mask credentials and PII inside free text."""
    if not text:
        return text

    result = text
    for pattern in _CREDENTIAL_PATTERNS:
        result = pattern.sub(r"\g<1>" + MASK, result)
    result = _EMAIL.sub(_mask_email, result)
    result = _STUDENT_ID.sub(r"******\g<2>", result)
    return result


def is_sensitive_key(key: str) -> bool:
    """True when a field name looks like it holds a credential.

    ``code`` only matches as a whole word so ``postcode`` style names pass.
    """
    lower_key = key.lower()
    if lower_key == "code" or (lower_key.endswith("_code") and "auth" in lower_key):
        return True
    return any(keyword in lower_key for keyword in SENSITIVE_KEYWORDS - {"code"})


def mask_dict(data: dict[str, Any], depth: int = 0, max_depth: int = 8) -> dict[str, Any]:
    """Recursively mask a structured ``extra_data`` payload."""
    if depth >= max_depth:
        return data

    result: dict[str, Any] = {}
    for key, value in data.items():
        if is_sensitive_key(key):
            result[key] = MASK
        elif isinstance(value, dict):
            result[key] = mask_dict(value, depth + 1, max_depth)
        elif isinstance(value, list):
            result[key] = [
                mask_dict(item, depth + 1, max_depth)
                if isinstance(item, dict)
                else mask_sensitive_string(item) if isinstance(item, str) else item
                for item in value
            ]
        elif isinstance(value, str):
            result[key] = mask_sensitive_string(value)
        else:
            result[key] = value
    return result


class SensitiveValue:
    """Wraps a secret so that formatting it never reveals the value.

    Usage:
        logger.debug("Stored token %s", SensitiveValue(token))
    """

    def __init__(self, value: Any) -> None:
        self._value = value

    def get(self) -> Any:
        return self._value

    def __str__(self) -> str:
        return MASK

    def __repr__(self) -> str:
        return f"SensitiveValue({MASK})"

    def __bool__(self) -> bool:
        return bool(self._value)
