"""Async client for the Gemini ``generateContent`` REST endpoint.

Wraps ``POST /models/{model}:generateContent`` with structured responses.
``generate`` never raises: transport and HTTP failures come back as a
``CompletionResponse`` with ``success=False``.  ``complete`` is the contract
the pipeline uses and raises ``ServiceError`` instead.

Typical usage::

    client = GeminiClient(api_key="...")
    text = await client.complete("Create a todo app")
"""

from __future__ import annotations

import time
from typing import Any, Optional, Protocol

import httpx
from pydantic import BaseModel, Field

from appgen.errors import ServiceError

DEFAULT_MODEL = "gemini-2.0-flash-001"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class CompletionClient(Protocol):
    """Anything that turns a prompt into raw response text."""

    async def complete(self, prompt: str) -> str: ...


class CompletionResponse(BaseModel):
    """Structured response from a Gemini generation call."""

    text: str = Field(default="", description="Generated text")
    model: str = Field(default="", description="Model that produced the response")
    duration_ms: float = Field(default=0.0, description="Round-trip time in ms")
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: Optional[str] = Field(default=None, description="Error message on failure")
    finish_reason: Optional[str] = Field(default=None, description="Candidate finish reason")


class GeminiClient:
    """Async client for the Gemini REST API.

    One ``httpx.AsyncClient`` is opened per call; the client performs exactly
    one request per ``generate`` and never retries.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            headers={"x-goog-api-key": self.api_key},
        )

    def _endpoint(self) -> str:
        return f"/models/{self.model}:generateContent"

    @staticmethod
    def _build_payload(prompt: str) -> dict[str, Any]:
        return {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]},
            ],
            "generationConfig": {"responseMimeType": "application/json"},
        }

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Concatenate the text parts of the first candidate.

        Returns an empty string when the response has no candidates (for
        example when the prompt was blocked).
        """
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    @staticmethod
    def _extract_finish_reason(data: dict) -> Optional[str]:
        candidates = data.get("candidates") or []
        if candidates:
            return candidates[0].get("finishReason")
        feedback = data.get("promptFeedback") or {}
        return feedback.get("blockReason")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(self, prompt: str) -> CompletionResponse:
        """Send one prompt and return the structured response.

        Args:
            prompt: The full composed prompt.

        Returns:
            A ``CompletionResponse`` with the generated text or an error.
        """
        start = time.monotonic()
        try:
            async with self._client() as client:
                response = await client.post(self._endpoint(), json=self._build_payload(prompt))
                response.raise_for_status()
                data = response.json()
                return CompletionResponse(
                    text=self._extract_text(data),
                    model=data.get("modelVersion", self.model),
                    duration_ms=(time.monotonic() - start) * 1000.0,
                    success=True,
                    finish_reason=self._extract_finish_reason(data),
                )
        except httpx.ConnectError:
            return CompletionResponse(
                model=self.model,
                success=False,
                error=f"Cannot connect to Gemini at {self.base_url}.",
            )
        except httpx.TimeoutException:
            return CompletionResponse(
                model=self.model,
                success=False,
                error=f"Request to Gemini timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            hint = ""
            if status in (401, 403):
                hint = " (check GEMINI_API_KEY)"
            elif status == 429:
                hint = " (quota exhausted or rate limited)"
            return CompletionResponse(
                model=self.model,
                success=False,
                error=f"Gemini returned HTTP {status}{hint}: {exc.response.text[:500]}",
            )
        except ValueError as exc:
            return CompletionResponse(
                model=self.model,
                success=False,
                error=f"Gemini returned a non-JSON body: {exc}",
            )
        except Exception as exc:  # noqa: BLE001
            return CompletionResponse(
                model=self.model,
                success=False,
                error=f"Unexpected error during Gemini generate: {exc}",
            )

    async def complete(self, prompt: str) -> str:
        """Return the raw response text or raise ``ServiceError``."""
        result = await self.generate(prompt)
        if not result.success:
            raise ServiceError(result.error or "Gemini request failed")
        if not result.text.strip():
            reason = f" (finish reason: {result.finish_reason})" if result.finish_reason else ""
            raise ServiceError(f"Gemini returned an empty response{reason}")
        return result.text
