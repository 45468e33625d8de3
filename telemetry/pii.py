from __future__ import annotations

import hashlib
import re
from typing import Any, Dict

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
# At least 9 digits overall, separators allowed.
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{8,}\d")
GOV_ID_RE = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")

# Tenant/landlord form data and rendered documents are summarized, never logged.
SENSITIVE_FIELDS = {
    "draft",
    "data",
    "draft_data",
    "fields",
    "pdf",
    "pdf_bytes",
    "authorization",
    "access_token",
    "token",
}

MAX_LOGGED_STRING = 500


def _hash_token(text: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"[HASH:{digest}]"


def scrub_text(text: str) -> str:
    """Replace emails, phone numbers and SSN-like ids with short hashes."""
    if not text:
        return text
    scrubbed = EMAIL_RE.sub(lambda m: f"[EMAIL_{_hash_token(m.group(0))}]", text)
    scrubbed = PHONE_RE.sub(lambda m: f"[PHONE_{_hash_token(m.group(0))}]", scrubbed)
    return GOV_ID_RE.sub(lambda m: f"[ID_{_hash_token(m.group(0))}]", scrubbed)


def _summarize(value: Any) -> Dict[str, Any]:
    if isinstance(value, (bytes, bytearray)):
        return {"redacted": True, "bytes": len(value)}
    length = len(value) if hasattr(value, "__len__") else None
    return {"redacted": True, "items": length}


def scrub_value(value: Any) -> Any:
    if isinstance(value, str):
        cleaned = scrub_text(value)
        return _hash_token(cleaned) if len(cleaned) > MAX_LOGGED_STRING else cleaned
    if isinstance(value, dict):
        return sanitize_log_payload(value)
    if isinstance(value, (list, tuple)):
        return [scrub_value(item) for item in value]
    return value


def sanitize_log_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Strip or hash PII-heavy fields from a log payload."""
    if not isinstance(payload, dict):
        return {}
    cleaned: Dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            cleaned[key] = None
        elif str(key).lower() in SENSITIVE_FIELDS:
            cleaned[key] = _summarize(value)
        else:
            cleaned[key] = scrub_value(value)
    return cleaned
