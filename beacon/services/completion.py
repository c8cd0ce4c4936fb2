"""
Completion Backends

Stateless text-completion clients used by the AI judge. Each call is a
single HTTP request with an explicit timeout; every failure mode (transport
error, timeout, non-200 status, malformed body) surfaces as
``CompletionError`` so the judge can fall back to its fixed default.

Backends:
- Gemini (Google Generative Language REST API), the hosted default
- Ollama, for running a local model during development
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..core.config import Settings
from ..core.exceptions import CompletionError, CompletionTimeoutError, ConfigurationError

logger = logging.getLogger(__name__)

CONTENT_TYPE_JSON = "application/json"


class CompletionClient(ABC):
    """Base class for completion backends sharing one pooled HTTP client."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": CONTENT_TYPE_JSON},
            )
        return self._client

    async def _post_json(self, path: str, payload: dict[str, Any], **kwargs) -> dict:
        client = await self._get_client()
        try:
            response = await client.post(path, json=payload, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as e:
            raise CompletionTimeoutError(self.timeout) from e
        except httpx.HTTPError as e:
            raise CompletionError(f"{type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise CompletionError(
                f"HTTP {response.status_code} - {response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise CompletionError("response body is not JSON") from e

    @abstractmethod
    async def complete(self, prompt: str, temperature: float = 0.0) -> str:
        """Return the model's free-text answer to ``prompt``."""

    async def aclose(self):
        """Close HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()


class GeminiCompletionClient(CompletionClient):
    """Client for the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-flash-latest",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(base_url, timeout, client)
        self.api_key = api_key
        self.model = model
        logger.info(f"GeminiCompletionClient initialized: model={model}")

    async def complete(self, prompt: str, temperature: float = 0.0) -> str:
        data = await self._post_json(
            f"/v1beta/models/{self.model}:generateContent",
            {
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {"temperature": temperature},
            },
            headers={"x-goog-api-key": self.api_key},
        )

        try:
            parts = data["candidates"][0]["content"]["parts"]
            if not all(isinstance(part, dict) for part in parts):
                raise TypeError("candidate parts must be objects")
            return "".join(str(part.get("text", "")) for part in parts)
        except (KeyError, IndexError, TypeError) as e:
            # Blocked prompts come back without candidates
            feedback = data.get("promptFeedback") if isinstance(data, dict) else None
            raise CompletionError(f"no candidate text in response ({feedback})") from e


class OllamaCompletionClient(CompletionClient):
    """Client for a local Ollama server (``/api/generate``)."""

    def __init__(
        self,
        model: str = "llama3.2:3b",
        base_url: str = "http://localhost:11434",
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(base_url, timeout, client)
        self.model = model
        logger.info(f"OllamaCompletionClient initialized: model={model}, url={base_url}")

    async def complete(self, prompt: str, temperature: float = 0.0) -> str:
        data = await self._post_json(
            "/api/generate",
            {
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": {"temperature": temperature},
            },
        )
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise CompletionError("missing 'response' field")
        return text


def build_completion_client(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> CompletionClient:
    """Create the completion backend selected by ``settings.AI_BACKEND``."""
    backend = settings.AI_BACKEND.lower()
    if backend == "gemini":
        return GeminiCompletionClient(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.AI_TIMEOUT,
            client=client,
        )
    if backend == "ollama":
        return OllamaCompletionClient(
            model=settings.OLLAMA_MODEL,
            base_url=settings.OLLAMA_BASE_URL,
            timeout=settings.AI_TIMEOUT,
            client=client,
        )
    raise ConfigurationError(f"unsupported AI_BACKEND '{settings.AI_BACKEND}'")
