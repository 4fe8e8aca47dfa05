"""Log sanitisation helpers for device requests and responses."""

from __future__ import annotations

import re

from .const import LOGIN_FIELD

_PASSWORD_RE = re.compile(rf"({LOGIN_FIELD}=)[^&\s<]*", re.IGNORECASE)
_PASSWORD_TAG_RE = re.compile(
    rf"(<ID>\s*{LOGIN_FIELD}\s*</ID>\s*<VA>)(.*?)(</VA>)", re.IGNORECASE | re.DOTALL
)


def redact_text(value: str | None) -> str:
    """Return ``value`` with the device password removed."""

    if not value:
        return ""
    text = str(value)
    redacted = _PASSWORD_RE.sub(lambda match: f"{match.group(1)}***", text)
    return _PASSWORD_TAG_RE.sub(
        lambda match: f"{match.group(1)}***{match.group(3)}", redacted
    )


__all__ = ["redact_text"]
