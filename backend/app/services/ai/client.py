"""Gemini client used by the request handlers.

The client is constructed explicitly (once, at application startup) and
injected into handlers. Provider failures are converted here into the
tagged ``ProviderError`` hierarchy so no handler has to inspect message
text itself.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from app.config import Settings
from app.services.ai.errors import (
    AuthenticationError,
    ModelClientConfigError,
    NetworkError,
    ProviderError,
    provider_error_from_message,
)

logger = logging.getLogger("clerksmart.ai.client")


class ModelClient(Protocol):
    model: str

    async def generate_content(self, prompt: str) -> str:
        ...


def _clean_api_key(api_key: Optional[str]) -> str:
    cleaned = (api_key or "").strip()
    if cleaned.startswith("key="):
        cleaned = cleaned[len("key="):]
    return cleaned


def extract_text(payload: dict[str, Any]) -> str:
    """Pull the first candidate's text out of a generateContent response."""
    try:
        return payload["candidates"][0]["content"]["parts"][0]["text"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


class GeminiClient:
    """Async client for the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout_seconds: float = 60.0,
        temperature: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = _clean_api_key(api_key)
        if not self._api_key:
            raise ModelClientConfigError("GEMINI_API_KEY environment variable is not set.")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    def _endpoint(self, model: str) -> str:
        return f"{self.base_url}/v1beta/models/{model}:generateContent"

    def _build_body(self, prompt: str) -> dict[str, Any]:
        body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if self.temperature is not None:
            body["generationConfig"] = {"temperature": self.temperature}
        return body

    async def generate_content(self, prompt: str, *, model: Optional[str] = None) -> str:
        """Send a single plain-text prompt and return the model's text."""
        model_name = model or self.model
        try:
            response = await self._http.post(
                self._endpoint(model_name),
                json=self._build_body(prompt),
                headers={"x-goog-api-key": self._api_key},
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"network timeout calling {model_name}: {exc}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"network error calling {model_name}: {exc}") from exc

        if response.status_code >= 400:
            message = (
                f"API request failed: {response.status_code} "
                f"{response.reason_phrase} - {response.text}"
            )
            logger.warning("Model request failed with HTTP %d", response.status_code)
            error = provider_error_from_message(message, status_code=response.status_code)
            if type(error) is ProviderError and response.status_code == 401:
                error = AuthenticationError(message, status_code=response.status_code)
            raise error

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("Model provider returned a non-JSON body") from exc
        return extract_text(payload)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()


def build_model_client(settings: Settings) -> GeminiClient:
    """Create the application's model client from settings."""
    return GeminiClient(
        settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout_seconds=settings.ai_request_timeout_seconds,
        temperature=settings.gemini_temperature,
    )


async def call_model(client: ModelClient, prompt: str) -> str:
    """Call ``client`` and re-raise untagged failures as ``ProviderError``.

    Clients other than ``GeminiClient`` may raise plain exceptions; the
    message text is classified so handlers only ever see the tagged
    hierarchy.
    """
    try:
        return await client.generate_content(prompt)
    except ProviderError:
        raise
    except Exception as exc:
        logger.warning("Model client raised %s: %s", type(exc).__name__, exc)
        raise provider_error_from_message(str(exc)) from exc
