"""Pytest configuration and fixtures."""

import asyncio
import os

os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient

from recipebox.main import app
from recipebox.middleware.rate_limit import limiter
from recipebox.models.recipe import Recipe


class FakeGeminiService:
    """Returns canned model text per call, in call order, and records what it was sent."""

    def __init__(self, image_responses=None, text_response="", transcript="", delays=None):
        self.image_responses = list(image_responses or [])
        self.delays = list(delays or [])
        self.text_response = text_response
        self.transcript = transcript
        self.image_calls = []
        self.text_calls = []
        self.audio_calls = []

    async def extract_recipe_text_from_image(self, image_data, mime_type):
        self.image_calls.append((image_data, mime_type))
        index = len(self.image_calls) - 1
        response = self.image_responses[index]
        if index < len(self.delays):
            await asyncio.sleep(self.delays[index])
        if isinstance(response, Exception):
            raise response
        return response

    async def extract_recipe_text_from_transcript(self, text):
        self.text_calls.append(text)
        if isinstance(self.text_response, Exception):
            raise self.text_response
        return self.text_response

    async def transcribe_audio(self, audio_data, mime_type):
        self.audio_calls.append((audio_data, mime_type))
        return self.transcript


@pytest.fixture(autouse=True)
def no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def client():
    """Create test client."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_recipe():
    def _make(**fields):
        data = {"name": "Pancakes", "time_estimation": 10}
        data.update(fields)
        return Recipe(**data)

    return _make


@pytest.fixture
def fake_gemini():
    """Factory for a FakeGeminiService."""
    return FakeGeminiService


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def jpeg_bytes():
    return b"\xff\xd8\xff\xe0" + b"\x00" * 32
