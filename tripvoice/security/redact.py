"""Helpers for redacting sensitive values in logs and error strings."""

from __future__ import annotations

import re

_REDACTED = "***REDACTED***"

# key=... / sig=... 形式的查询串（高德 REST 请求会把 key 放在 URL 里）
_QUERY_VALUE_RE = re.compile(
    r"(?i)(?P<prefix>\b(?:key|api[_-]?key|token|secret|sig|password)\s*=\s*)(?P<value>[^&\s\"']+)"
)
_JSON_KV_RE = re.compile(
    r"(?i)(?P<prefix>[\"']?(?:api[_-]?key|llm_api_key|map_api_key|voice_api_key|secret|password)[\"']?\s*:\s*[\"']?)"
    r"(?P<value>[^\"',\s}]+)"
)
_BEARER_RE = re.compile(r"(?i)(?P<prefix>\bbearer\s+)(?P<value>[A-Za-z0-9._~+/=-]+)")
_SK_KEY_RE = re.compile(r"\bsk-[A-Za-z0-9_-]{8,}\b")


def _replace_value(pattern: re.Pattern[str], text: str) -> str:
    return pattern.sub(lambda m: f"{m.group('prefix')}{_REDACTED}", text)


def redact_sensitive(text: str) -> str:
    """Redact common secret patterns while preserving surrounding context."""
    if not text:
        return text

    redacted = str(text)
    for pattern in (_QUERY_VALUE_RE, _JSON_KV_RE, _BEARER_RE):
        redacted = _replace_value(pattern, redacted)
    return _SK_KEY_RE.sub(_REDACTED, redacted)


def mask_key(value: str | None) -> str:
    """仅保留前 4 和后 4 位，用于设置页回显"""
    if not value or len(value) <= 8:
        return "****"
    return value[:4] + "****" + value[-4:]


__all__ = ["mask_key", "redact_sensitive"]
