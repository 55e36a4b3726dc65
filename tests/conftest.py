"""Shared pytest fixtures for the app generator test suite.

Provides reusable fixtures for:
- Sample generation documents and raw service responses
- A fake completion client that records prompts
- Mocked Gemini HTTP responses
- AppGenerator instances writing into a temporary directory
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from appgen.config import Config, GeminiConfig, RunConfig
from appgen.errors import ServiceError
from appgen.pipeline import AppGenerator
from appgen.scaffolder import ProjectMaterializer


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A realistic generation document as the service returns it."""
    return {
        "appName": "counter-app",
        "description": "A simple counter with increment, decrement and reset.",
        "files": [
            {
                "filename": "index.html",
                "content": "<!DOCTYPE html>\n<html>\n<body>\n<h1 id=\"count\">0</h1>\n"
                "<script src=\"script.js\"></script>\n</body>\n</html>\n",
            },
            {
                "filename": "style.css",
                "content": "body { font-family: sans-serif; }\n",
            },
            {
                "filename": "script.js",
                "content": "// Counter logic\nlet count = 0;\n",
            },
        ],
    }


@pytest.fixture
def sample_response_text(sample_document: dict[str, Any]) -> str:
    """The sample document wrapped in a ```json fence."""
    return "```json\n" + json.dumps(sample_document, indent=2) + "\n```"


# ---------------------------------------------------------------------------
# Fake completion client
# ---------------------------------------------------------------------------

class FakeCompletionClient:
    """In-memory stand-in for ``GeminiClient``.

    Returns queued responses in order; an ``Exception`` in the queue is raised
    instead of returned.  Every prompt is recorded in ``prompts``.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise ServiceError("no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_client_factory():
    """Factory building ``FakeCompletionClient`` instances."""
    return FakeCompletionClient


# ---------------------------------------------------------------------------
# Config & generator
# ---------------------------------------------------------------------------

@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config writing into ``tmp_path/projects`` with no example delay."""
    return Config(
        output_dir=tmp_path / "projects",
        gemini=GeminiConfig(api_key="test-key"),
        run=RunConfig(example_delay=0.0, preview_chars=40),
    )


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed timestamp for reproducible READMEs."""
    return lambda: datetime(2026, 1, 15, 10, 30, 0)


@pytest.fixture
def make_generator(test_config: Config, fixed_clock):
    """Build an ``AppGenerator`` around the given client."""

    def _make(client: Any) -> AppGenerator:
        materializer = ProjectMaterializer(test_config.output_dir, clock=fixed_clock)
        return AppGenerator(client, test_config, materializer=materializer)

    return _make


# ---------------------------------------------------------------------------
# Mock Gemini HTTP
# ---------------------------------------------------------------------------

def make_gemini_payload(text: str, finish_reason: str = "STOP") -> dict[str, Any]:
    """Build a realistic ``generateContent`` response body."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": finish_reason,
                "index": 0,
            }
        ],
        "usageMetadata": {"promptTokenCount": 512, "candidatesTokenCount": 2048},
        "modelVersion": "gemini-2.0-flash-001",
    }


def make_mock_http_client(payload: dict[str, Any] | None = None, post_side_effect=None) -> AsyncMock:
    """Mock ``httpx.AsyncClient`` usable as an async context manager."""
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = payload or {}
    mock_response.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    if post_side_effect is not None:
        mock_client.post = AsyncMock(side_effect=post_side_effect)
    else:
        mock_client.post = AsyncMock(return_value=mock_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


@pytest.fixture
def mock_gemini(sample_response_text: str):
    """Patch ``httpx.AsyncClient`` to answer with the sample response.

    Usage:
        def test_something(mock_gemini):
            with mock_gemini as factory:
                ...
    """
    mock_client = make_mock_http_client(make_gemini_payload(sample_response_text))
    return patch("httpx.AsyncClient", return_value=mock_client)
