from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import aiohttp
import pytest
from aiohttp import test_utils, web

from pyraksha.exceptions import RakshaRecommendationError
from pyraksha.models import SafetyRecommendation
from pyraksha.models.recommendation import Priority, RecommendationType
from pyraksha.recommendations import (
    ANALYSIS_FALLBACK,
    GeminiBackend,
    RecommendationService,
    build_recommendations_prompt,
)

REPLY = {
    "recommendations": [
        {"type": "route", "title": "Use the highway", "description": "Stay on NH48.", "priority": "high"},
        {"type": "time", "title": "Leave early", "description": "Before dusk.", "priority": "medium"},
        {"type": "general", "title": "Share location", "description": "With family.", "priority": "low"},
    ]
}


class FakeBackend:
    def __init__(self, reply: str | None = None, *, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []
        self.schemas: list[Mapping[str, Any] | None] = []

    async def generate(self, prompt: str, *, response_schema: Mapping[str, Any] | None = None) -> str:
        self.prompts.append(prompt)
        self.schemas.append(response_schema)
        if self.error is not None:
            raise self.error
        return self.reply or ""


def _assert_fallback(recommendations: list[SafetyRecommendation], location: str) -> None:
    assert [rec.title for rec in recommendations] == [
        "Use Well-Lit Main Roads",
        "Travel During Peak Hours",
        "Keep Emergency Contacts Updated",
    ]
    assert [rec.type for rec in recommendations] == [
        RecommendationType.ROUTE,
        RecommendationType.TIME,
        RecommendationType.GENERAL,
    ]
    assert [rec.priority for rec in recommendations] == [Priority.HIGH, Priority.MEDIUM, Priority.HIGH]
    assert all(rec.location == location for rec in recommendations)


@pytest.mark.asyncio
async def test_backend_reply_is_parsed_and_stamped_with_location() -> None:
    backend = FakeBackend(json.dumps(REPLY))
    service = RecommendationService(backend)

    recommendations = await service.generate("Pune", [{"type": "harassment", "location": "Swargate"}])

    assert [rec.title for rec in recommendations] == ["Use the highway", "Leave early", "Share location"]
    assert all(rec.location == "Pune" for rec in recommendations)
    assert "harassment at Swargate" in backend.prompts[0]
    assert backend.schemas[0] is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "backend",
    [
        FakeBackend(error=RakshaRecommendationError("HTTP 500")),
        FakeBackend(error=RuntimeError("unexpected")),
        FakeBackend("not json"),
        FakeBackend(json.dumps({"recommendations": []})),
        FakeBackend(json.dumps({"recommendations": [{"type": "route", "title": "x"}]})),
    ],
)
async def test_any_backend_failure_yields_fallback(backend: FakeBackend) -> None:
    recommendations = await RecommendationService(backend).generate("Satara")
    _assert_fallback(recommendations, "Satara")


@pytest.mark.asyncio
async def test_no_backend_yields_fallback() -> None:
    service = RecommendationService()
    _assert_fallback(await service.generate("Nashik"), "Nashik")
    assert await service.analyze_context("Nashik", "night", "stalking") == ANALYSIS_FALLBACK


@pytest.mark.asyncio
async def test_analyze_context() -> None:
    backend = FakeBackend("Poor lighting near the depot.")
    service = RecommendationService(backend)
    assert await service.analyze_context("Pune", "21:00", "stalking") == "Poor lighting near the depot."
    assert "Incident Type: stalking" in backend.prompts[0]

    failing = RecommendationService(FakeBackend(error=RakshaRecommendationError("down")))
    assert await failing.analyze_context("Pune", "21:00", "stalking") == ANALYSIS_FALLBACK


def test_prompt_mentions_no_incidents() -> None:
    prompt = build_recommendations_prompt("Pune", [])
    assert "No recent incidents reported" in prompt
    assert "Maharashtra" in prompt


@pytest.mark.asyncio
async def test_gemini_backend_over_http() -> None:
    seen: list[dict[str, Any]] = []

    async def generate(request: web.Request) -> web.Response:
        seen.append({"key": request.headers.get("x-goog-api-key"), "body": await request.json()})
        if request.match_info["model"] == "broken-model":
            return web.json_response({"error": {"message": "bad"}}, status=400)
        return web.json_response({"candidates": [{"content": {"parts": [{"text": json.dumps(REPLY)}]}}]})

    app = web.Application()
    app.router.add_post("/v1beta/models/{model}:generateContent", generate)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        base_url = str(server.make_url("/v1beta"))
        async with aiohttp.ClientSession() as session:
            backend = GeminiBackend(session, "test-key", model="gemini-2.5-flash", base_url=base_url)
            recommendations = await RecommendationService(backend).generate("Pune")

            broken = GeminiBackend(session, "test-key", model="broken-model", base_url=base_url)
            with pytest.raises(RakshaRecommendationError):
                await broken.generate("hello")
    finally:
        await server.close()

    assert len(recommendations) == 3
    assert seen[0]["key"] == "test-key"
    assert seen[0]["body"]["generationConfig"]["responseMimeType"] == "application/json"
    assert "Pune" in seen[0]["body"]["contents"][0]["parts"][0]["text"]


def test_gemini_backend_requires_key() -> None:
    with pytest.raises(ValueError):
        GeminiBackend(None, "")  # type: ignore[arg-type]
