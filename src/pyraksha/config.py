"""Client configuration for pyraksha."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyraksha._constants import (
    API_PREFIX,
    BASE_URL,
    CACHE_VERSION,
    DEFAULT_MAX_AGE_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_ITEMS_PER_BUCKET,
    GEMINI_MODEL,
    LONG_PRESS_SECONDS,
    PRECACHE_URLS,
    STORAGE_KEY,
)
from pyraksha.exceptions import RakshaConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_optional_number(value: str, cast: type[int] | type[float]) -> int | float | None:
    """Parse a numeric env value where ``none``/``0``/empty disable the bound."""
    normalized = value.strip().lower()
    if normalized in {"", "none", "off", "0"}:
        return None
    try:
        return cast(normalized)
    except ValueError as exc:
        raise RakshaConfigError(f"invalid numeric value: {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class RakshaConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend origin, e.g. ``"https://raksha.example.org"``.  Also used as
        the origin of the asset cache controller.
    api_prefix : str
        Path prefix of the REST endpoints.
    request_timeout : float
        Total timeout in seconds for a single backend request.
    queue_path : str or None
        File backing the durable mutation queue.  ``None`` keeps the queue
        in memory (lost on restart).
    storage_key : str
        Key under which the queue snapshot is stored.
    max_items_per_bucket : int or None
        Upper bound per queue bucket.  When exceeded the oldest entries are
        evicted.  ``None`` means unbounded.
    max_attempts : int or None
        Replay attempts after which a failing item is dropped.
    max_age : float or None
        Seconds after which a queued item is dropped instead of replayed.
    cache_version : str
        Name of the current asset cache generation.
    precache_urls : tuple[str, ...]
        Application shell manifest stored on install.
    long_press_seconds : float
        Hold duration that arms the emergency alert.
    recommendations_api_key : str or None
        Generative Language API key.  Without it the static
        recommendation set is always used.
    recommendations_model : str
        Model name for recommendation generation.
    recommendations_enabled : bool
        Disable to always serve the static recommendation set.
    api_trace_enabled : bool
        Log redacted request/response traces at DEBUG level.
    """

    base_url: str = BASE_URL
    api_prefix: str = API_PREFIX
    request_timeout: float = 15.0
    queue_path: str | None = None
    storage_key: str = STORAGE_KEY
    max_items_per_bucket: int | None = DEFAULT_MAX_ITEMS_PER_BUCKET
    max_attempts: int | None = DEFAULT_MAX_ATTEMPTS
    max_age: float | None = DEFAULT_MAX_AGE_SECONDS
    cache_version: str = CACHE_VERSION
    precache_urls: tuple[str, ...] = PRECACHE_URLS
    long_press_seconds: float = LONG_PRESS_SECONDS
    recommendations_api_key: str | None = None
    recommendations_model: str = GEMINI_MODEL
    recommendations_enabled: bool = True
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise RakshaConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.api_prefix and not self.api_prefix.startswith("/"):
            object.__setattr__(self, "api_prefix", f"/{self.api_prefix}")
        object.__setattr__(self, "api_prefix", self.api_prefix.rstrip("/"))
        if self.request_timeout <= 0:
            raise RakshaConfigError("request_timeout must be positive")
        if not self.storage_key.strip():
            raise RakshaConfigError("storage_key must be non-empty")
        if self.max_items_per_bucket is not None and self.max_items_per_bucket < 1:
            raise RakshaConfigError("max_items_per_bucket must be >= 1 or None")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise RakshaConfigError("max_attempts must be >= 1 or None")
        if self.max_age is not None and self.max_age <= 0:
            raise RakshaConfigError("max_age must be positive or None")
        if not self.cache_version.strip():
            raise RakshaConfigError("cache_version must be non-empty")
        if self.long_press_seconds <= 0:
            raise RakshaConfigError("long_press_seconds must be positive")
        object.__setattr__(self, "precache_urls", tuple(self.precache_urls))

    @property
    def api_base_url(self) -> str:
        """Base URL including the API prefix."""
        return f"{self.base_url}{self.api_prefix}"

    @classmethod
    def from_env(cls, **overrides: Any) -> RakshaConfig:
        """Create configuration from environment variables.

        Reads ``RAKSHA_*`` variables; the recommendation key also falls back
        to ``GEMINI_API_KEY`` and ``GOOGLE_AI_API_KEY``.  Explicit keyword
        arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "RAKSHA_BASE_URL": "base_url",
            "RAKSHA_API_PREFIX": "api_prefix",
            "RAKSHA_QUEUE_PATH": "queue_path",
            "RAKSHA_STORAGE_KEY": "storage_key",
            "RAKSHA_CACHE_VERSION": "cache_version",
            "RAKSHA_RECOMMENDATIONS_MODEL": "recommendations_model",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        api_key = env.get("RAKSHA_RECOMMENDATIONS_API_KEY") or env.get("GEMINI_API_KEY") or env.get("GOOGLE_AI_API_KEY")
        if api_key:
            config_kwargs["recommendations_api_key"] = api_key

        timeout_env = env.get("RAKSHA_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise RakshaConfigError(f"invalid RAKSHA_REQUEST_TIMEOUT: {timeout_env!r}") from exc

        press_env = env.get("RAKSHA_LONG_PRESS_SECONDS")
        if press_env is not None and "long_press_seconds" not in overrides:
            try:
                config_kwargs["long_press_seconds"] = float(press_env)
            except ValueError as exc:
                raise RakshaConfigError(f"invalid RAKSHA_LONG_PRESS_SECONDS: {press_env!r}") from exc

        bounds = {
            "RAKSHA_MAX_ITEMS_PER_BUCKET": ("max_items_per_bucket", int),
            "RAKSHA_MAX_ATTEMPTS": ("max_attempts", int),
            "RAKSHA_MAX_AGE": ("max_age", float),
        }
        for env_key, (field_name, cast) in bounds.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_optional_number(val, cast)

        precache_env = env.get("RAKSHA_PRECACHE_URLS")
        if precache_env is not None and "precache_urls" not in overrides:
            config_kwargs["precache_urls"] = tuple(part.strip() for part in precache_env.split(",") if part.strip())

        if "recommendations_enabled" not in overrides:
            config_kwargs["recommendations_enabled"] = _env_bool(env.get("RAKSHA_RECOMMENDATIONS_ENABLED"), True)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("RAKSHA_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
