"""Helpers for safe debug logging.

Queued mutations carry personal data (phone numbers of emergency contacts,
precise locations) and the recommendation client carries an API key.  This
module masks those fields before they reach DEBUG logs:

* credentials are replaced by ``<redacted>``;
* contact numbers keep only their last two digits;
* locations are coarsened to their last comma separated part (usually the
  city), and raw coordinates are dropped;
* phone numbers embedded in free text are masked like contact numbers.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "accesstoken",
        "refreshtoken",
        "authorization",
        "cookie",
        "apikey",
        "api_key",
        "key",
        "x-goog-api-key",
    }
)

_CONTACT_KEYS: frozenset[str] = frozenset(
    {"phone", "alertedcontacts", "alerted_contacts", "emergencycontacts", "emergency_contacts"}
)

_LOCATION_KEYS: frozenset[str] = frozenset({"location", "address", "lastknownlocation"})

_PHONE_RE = re.compile(r"(?<![\w.])\+?\d(?:[\s-]?\d){9,13}(?![\w.])")
_COORDINATES_RE = re.compile(r"^\s*-?\d{1,3}\.\d+\s*,\s*-?\d{1,3}\.\d+\s*$")

_MAX_DEPTH = 20


def mask_phone(value: str) -> str:
    """``+919876543211`` -> ``+9*********11``."""
    digits = [ch for ch in value if ch.isdigit()]
    if len(digits) <= 4:
        return "*" * len(value)
    prefix = "+" if value.startswith("+") else ""
    return f"{prefix}{digits[0]}{'*' * (len(digits) - 3)}{''.join(digits[-2:])}"


def coarsen_location(value: str) -> str:
    if _COORDINATES_RE.match(value):
        return "<coordinates>"
    parts = [part.strip() for part in value.split(",") if part.strip()]
    if len(parts) <= 1:
        return value
    return f"…, {parts[-1]}"


def _mask_contacts(value: Any) -> Any:
    if isinstance(value, str):
        return mask_phone(value)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [mask_phone(item) if isinstance(item, str) else "<redacted>" for item in value]
    return "<redacted>"


def _redact_text(value: str, max_string: int) -> str:
    value = _PHONE_RE.sub(lambda match: mask_phone(match.group(0)), value)
    if len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with personal data masked, for debug logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _redact_text(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for raw_key, item in value.items():
            key = str(raw_key)
            folded = key.lower()
            if folded in _SECRET_KEYS:
                out[key] = "<redacted>"
            elif folded in _CONTACT_KEYS:
                out[key] = _mask_contacts(item)
            elif folded in _LOCATION_KEYS and isinstance(item, str):
                out[key] = coarsen_location(item)
            else:
                out[key] = redact_for_log(item, max_string=max_string, _depth=_depth + 1)
        return out

    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
