"""Custom exception hierarchy for pyraksha."""

from __future__ import annotations


class RakshaError(Exception):
    """Base exception for all pyraksha errors."""


class RakshaConfigError(RakshaError):
    """Invalid or missing configuration."""


class RakshaTransportError(RakshaError):
    """HTTP-level failure (network, timeout, 5xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class RakshaApiError(RakshaError):
    """Backend rejected the request with a structured error body (4xx)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class RakshaValidationError(RakshaError, ValueError):
    """A mutation payload does not match the schema of its kind.

    Raised at enqueue time (and before any direct call), never during replay.
    """


class RakshaStorageError(RakshaError):
    """The local durable store could not be read, parsed or written.

    The mutation queue absorbs this error: reads degrade to an empty
    snapshot and failed writes are logged and ignored.
    """


class RakshaCacheError(RakshaError):
    """An asset request failed and no cached fallback applies."""


class RakshaRecommendationError(RakshaError):
    """The generative recommendation backend failed.

    Never surfaced by :class:`pyraksha.recommendations.RecommendationService`,
    which replaces the result with its static fallback set.
    """
