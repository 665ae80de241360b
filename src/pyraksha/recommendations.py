"""Generated safety recommendations with a static fallback.

The service asks a generative backend for three recommendations.  When no
backend is configured or the backend fails in any way, callers get the
static set below instead; the two cases look the same to them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from pyraksha._constants import DEFAULT_REGION, GEMINI_BASE_URL, GEMINI_MODEL, USER_AGENT
from pyraksha._redact import redact_for_log
from pyraksha.config import RakshaConfig
from pyraksha.exceptions import RakshaRecommendationError
from pyraksha.models.recommendation import Priority, RecommendationType, SafetyRecommendation

_logger = logging.getLogger(__name__)

ANALYSIS_FALLBACK = "Safety analysis unavailable. Please contact local authorities for guidance."
ANALYSIS_EMPTY = "Unable to analyze safety context at this time."

_FALLBACK: tuple[tuple[RecommendationType, str, str, Priority], ...] = (
    (
        RecommendationType.ROUTE,
        "Use Well-Lit Main Roads",
        "Avoid shortcuts and use main roads with better lighting and more people, "
        "especially during evening hours.",
        Priority.HIGH,
    ),
    (
        RecommendationType.TIME,
        "Travel During Peak Hours",
        "Plan your travel between 7 AM to 7 PM when there's more activity and better "
        "visibility in rural areas.",
        Priority.MEDIUM,
    ),
    (
        RecommendationType.GENERAL,
        "Keep Emergency Contacts Updated",
        "Ensure your family knows your travel plans and expected arrival times. "
        "Regular check-ins provide added security.",
        Priority.HIGH,
    ),
)

RECOMMENDATIONS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "recommendations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "priority": {"type": "string"},
                },
                "required": ["type", "title", "description", "priority"],
            },
        }
    },
    "required": ["recommendations"],
}


def fallback_recommendations(location: str) -> list[SafetyRecommendation]:
    return [
        SafetyRecommendation(type=kind, title=title, description=description, priority=priority, location=location)
        for kind, title, description, priority in _FALLBACK
    ]


def _incident_context(recent_incidents: Sequence[Any]) -> str:
    if not recent_incidents:
        return "No recent incidents reported"
    described = []
    for incident in recent_incidents:
        if isinstance(incident, Mapping):
            kind, where = incident.get("type"), incident.get("location")
        else:
            kind, where = getattr(incident, "type", None), getattr(incident, "location", None)
        described.append(f"{kind} at {where}")
    return "Recent incidents in the area: " + ", ".join(described)


def build_recommendations_prompt(location: str, recent_incidents: Sequence[Any], *, region: str = DEFAULT_REGION) -> str:
    return (
        f"As a women's safety expert for rural {region}, India, provide 3 specific safety "
        f"recommendations based on:\n\n"
        f"Location: {location}\n"
        f"{_incident_context(recent_incidents)}\n\n"
        "Consider:\n"
        "- Rural connectivity challenges\n"
        "- Local transportation patterns\n"
        f"- Cultural context of {region}\n"
        "- Time-based safety concerns\n"
        "- Community safety resources\n\n"
        f"Provide practical, actionable recommendations that are relevant to women's safety in rural {region}.\n\n"
        'Respond with JSON of the form {"recommendations": [{"type": "route" | "time" | "general", '
        '"title": "...", "description": "...", "priority": "low" | "medium" | "high"}]}'
    )


def build_analysis_prompt(location: str, time_of_day: str, incident_type: str, *, region: str = DEFAULT_REGION) -> str:
    return (
        f"Analyze this safety incident for rural {region} context:\n\n"
        f"Location: {location}\n"
        f"Time: {time_of_day}\n"
        f"Incident Type: {incident_type}\n\n"
        "Provide a brief analysis of contributing factors and prevention suggestions "
        f"specific to rural {region} women's safety."
    )


class RecommendationBackend(Protocol):
    """Generative text backend.  Raises :class:`RakshaRecommendationError` on failure."""

    async def generate(self, prompt: str, *, response_schema: Mapping[str, Any] | None = None) -> str:
        ...


class GeminiBackend:
    """Generative Language API (``models/{model}:generateContent``) over aiohttp."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        api_key: str,
        *,
        model: str = GEMINI_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self._http = http_session
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str, *, response_schema: Mapping[str, Any] | None = None) -> str:
        url = f"{self._base_url}/models/{self._model}:generateContent"
        body: dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": dict(response_schema),
            }
        headers = {"x-goog-api-key": self._api_key, "user-agent": USER_AGENT}

        try:
            async with self._http.post(url, json=body, headers=headers, timeout=self._timeout) as resp:
                status = resp.status
                text = await resp.text()
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise RakshaRecommendationError(f"generateContent request failed: {exc}") from exc

        if status != 200:
            raise RakshaRecommendationError(f"generateContent returned HTTP {status}: {text[:200]}")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RakshaRecommendationError("generateContent returned invalid JSON") from exc
        _logger.debug("generateContent reply: %s", redact_for_log(data))
        return _candidate_text(data)


def _candidate_text(data: Any) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RakshaRecommendationError("generateContent reply has no candidate text") from exc
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text:
        raise RakshaRecommendationError("Empty response from generateContent")
    return text


def parse_recommendations(text: str, location: str) -> list[SafetyRecommendation]:
    """Parse a ``{"recommendations": [...]}`` reply, stamping *location* on each item."""
    try:
        data = json.loads(text)
        items = data["recommendations"]
        if not isinstance(items, list) or not items:
            raise RakshaRecommendationError("reply contains no recommendations")
        return [SafetyRecommendation.model_validate({**item, "location": location}) for item in items]
    except RakshaRecommendationError:
        raise
    except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as exc:
        raise RakshaRecommendationError(f"unusable recommendations reply: {exc}") from exc


class RecommendationService:
    """Safety recommendations that always answer."""

    def __init__(self, backend: RecommendationBackend | None = None, *, region: str = DEFAULT_REGION) -> None:
        self._backend = backend
        self._region = region

    @classmethod
    def from_config(cls, config: RakshaConfig, http_session: aiohttp.ClientSession) -> RecommendationService:
        backend: GeminiBackend | None = None
        if config.recommendations_enabled and config.recommendations_api_key:
            backend = GeminiBackend(
                http_session,
                config.recommendations_api_key,
                model=config.recommendations_model,
                timeout=config.request_timeout,
            )
        return cls(backend)

    @property
    def has_backend(self) -> bool:
        return self._backend is not None

    async def generate(self, location: str, recent_incidents: Sequence[Any] = ()) -> list[SafetyRecommendation]:
        if self._backend is None:
            return fallback_recommendations(location)
        prompt = build_recommendations_prompt(location, recent_incidents, region=self._region)
        try:
            text = await self._backend.generate(prompt, response_schema=RECOMMENDATIONS_SCHEMA)
            return parse_recommendations(text, location)
        except Exception:
            _logger.warning("Recommendation backend failed; using fallback set", exc_info=True)
            return fallback_recommendations(location)

    async def analyze_context(self, location: str, time_of_day: str, incident_type: str) -> str:
        if self._backend is None:
            return ANALYSIS_FALLBACK
        prompt = build_analysis_prompt(location, time_of_day, incident_type, region=self._region)
        try:
            text = await self._backend.generate(prompt)
        except Exception:
            _logger.warning("Safety analysis failed", exc_info=True)
            return ANALYSIS_FALLBACK
        return text or ANALYSIS_EMPTY
