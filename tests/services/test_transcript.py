import asyncio

import httpx
import pytest

from app.core.constants import TRANSCRIPT_FALLBACK
from app.services.transcript import TranscriptGenerator, build_draft_transcript


@pytest.mark.parametrize("duration,opening", [
    (45, "Welcome to this lesson. In this short video"),
    (150, "Hello and welcome to this lesson."),
    (420, "Welcome to this comprehensive lesson."),
    (900, "Welcome to this in-depth lesson."),
])
def test_draft_transcript_scales_with_duration(duration, opening):
    assert build_draft_transcript(duration).startswith(opening)


def test_draft_transcript_appends_closing_for_trailing_seconds():
    assert "That concludes our lesson." in build_draft_transcript(95)
    assert "That concludes our lesson." not in build_draft_transcript(90)


def test_generate_without_service_uses_draft():
    result = asyncio.run(TranscriptGenerator(service_url="").generate("https://cdn/video.mp4", 60))
    assert result.success is True
    assert result.transcript == build_draft_transcript(60)


def test_generate_posts_to_service(monkeypatch):
    captured = {}

    async def fake_post(self, url, json=None, headers=None):
        captured.update(url=url, json=json, headers=headers)
        return httpx.Response(200, json={"transcript": "  Spoken words.  "}, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)
    generator = TranscriptGenerator(service_url="https://transcripts.microcourse.io/v1", api_key="key-1")

    result = asyncio.run(generator.generate("https://cdn/video.mp4", 120))

    assert result.success is True
    assert result.transcript == "Spoken words."
    assert captured["json"] == {"media_url": "https://cdn/video.mp4", "duration": 120}
    assert captured["headers"] == {"Authorization": "Bearer key-1"}


def test_generate_falls_back_on_service_error(monkeypatch):
    async def failing_post(self, url, json=None, headers=None):
        return httpx.Response(502, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx.AsyncClient, "post", failing_post)
    generator = TranscriptGenerator(service_url="https://transcripts.microcourse.io/v1")

    result = asyncio.run(generator.generate("https://cdn/video.mp4", 120))

    assert result.success is False
    assert result.transcript == TRANSCRIPT_FALLBACK


def test_generate_falls_back_on_empty_transcript(monkeypatch):
    async def empty_post(self, url, json=None, headers=None):
        return httpx.Response(200, json={"transcript": "   "}, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx.AsyncClient, "post", empty_post)
    result = asyncio.run(TranscriptGenerator(service_url="https://transcripts.microcourse.io/v1").generate(None, 10))

    assert result.transcript == TRANSCRIPT_FALLBACK
