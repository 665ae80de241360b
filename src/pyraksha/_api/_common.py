"""Shared helpers for endpoint modules.

It is internal to pyraksha and may change at any time.
"""

from __future__ import annotations

from typing import Any

from pyraksha.exceptions import RakshaApiError


def expect_object(data: Any, *, endpoint: str) -> dict[str, Any]:
    """Return *data* if it is a JSON object, else raise :class:`RakshaApiError`."""
    if not isinstance(data, dict):
        raise RakshaApiError(
            f"{endpoint} returned {type(data).__name__}, expected an object",
            code="unexpected_shape",
            endpoint=endpoint,
        )
    return data


def expect_list(data: Any, *, endpoint: str) -> list[dict[str, Any]]:
    """Return the object items of a JSON array reply."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise RakshaApiError(
            f"{endpoint} returned {type(data).__name__}, expected an array",
            code="unexpected_shape",
            endpoint=endpoint,
        )
    return [item for item in data if isinstance(item, dict)]
