"""Text-generation client used to enrich task parsing.

One provider is configured at a time and each request is a single attempt:
callers are expected to fall back to rule-based parsing on any error.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported text-generation providers."""

    HUGGINGFACE = "huggingface"
    GEMINI = "gemini"


@dataclass
class LLMResponse:
    """Standardized response from any provider."""

    text: str
    provider: LLMProvider
    model: str
    latency_ms: int = 0
    raw_response: Any = None


@dataclass
class LLMUsageStats:
    total_requests: int = 0
    total_latency_ms: int = 0
    errors: int = 0
    last_request_at: datetime | None = None

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests


class BaseLLMProvider(ABC):
    """Abstract base class for text-generation providers."""

    provider: LLMProvider
    default_model: str

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        if client is None:
            import httpx

            self._client = httpx.Client(timeout=timeout)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()

    @abstractmethod
    def complete(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 200,
    ) -> LLMResponse:
        """Send a generation request and return the standardized response."""
        ...


class HuggingFaceProvider(BaseLLMProvider):
    """Hugging Face Inference API provider."""

    provider = LLMProvider.HUGGINGFACE
    default_model = "google/flan-t5-large"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
        api_base: str = "https://api-inference.huggingface.co",
    ) -> None:
        super().__init__(api_key, model=model, client=client, timeout=timeout)
        self.api_base = api_base.rstrip("/")

    def complete(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 200,
    ) -> LLMResponse:
        start_time = time.time()
        response = self._client.post(
            f"{self.api_base}/models/{self.model}",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "inputs": prompt,
                "parameters": {
                    "max_new_tokens": max_tokens,
                    "temperature": temperature,
                    "return_full_text": False,
                },
                # Fail fast instead of blocking while a cold model loads
                "options": {"wait_for_model": False},
            },
        )
        response.raise_for_status()
        data = response.json()

        if isinstance(data, dict) and data.get("error"):
            raise RuntimeError(f"Hugging Face model unavailable: {data['error']}")

        text = ""
        if isinstance(data, list) and data:
            first = data[0]
            if isinstance(first, dict):
                text = first.get("generated_text") or ""
        elif isinstance(data, dict):
            text = data.get("generated_text") or ""

        return LLMResponse(
            text=text,
            provider=self.provider,
            model=self.model,
            latency_ms=int((time.time() - start_time) * 1000),
            raw_response=data,
        )


class GeminiProvider(BaseLLMProvider):
    """Google Gemini API provider."""

    provider = LLMProvider.GEMINI
    default_model = "gemini-2.0-flash"

    def complete(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 200,
    ) -> LLMResponse:
        start_time = time.time()
        endpoint = (
            f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
        )
        response = self._client.post(
            endpoint,
            params={"key": self.api_key},
            json={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": temperature,
                    "maxOutputTokens": max_tokens,
                },
            },
        )
        response.raise_for_status()
        data = response.json()

        text = ""
        candidates = data.get("candidates", [])
        if candidates:
            for part in candidates[0].get("content", {}).get("parts", []):
                if "text" in part:
                    text = part["text"]
                    break

        return LLMResponse(
            text=text,
            provider=self.provider,
            model=self.model,
            latency_ms=int((time.time() - start_time) * 1000),
            raw_response=data,
        )


class LLMClient:
    """Thin wrapper over one configured provider with usage tracking."""

    def __init__(self, provider: BaseLLMProvider | None = None) -> None:
        self._provider = provider
        self._stats = LLMUsageStats()

    @property
    def is_available(self) -> bool:
        return self._provider is not None

    @property
    def provider(self) -> BaseLLMProvider | None:
        return self._provider

    def complete(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 200,
    ) -> LLMResponse:
        """Send one generation request. No retries.

        Raises:
            RuntimeError: If no provider is configured or the model is unavailable.
            httpx.HTTPError: On transport or HTTP status errors.
        """
        if self._provider is None:
            raise RuntimeError("No text-generation provider configured")

        try:
            response = self._provider.complete(
                prompt, temperature=temperature, max_tokens=max_tokens
            )
        except Exception:
            self._stats.errors += 1
            raise

        self._stats.total_requests += 1
        self._stats.total_latency_ms += response.latency_ms
        self._stats.last_request_at = datetime.now()
        return response

    def get_stats(self) -> dict[str, Any]:
        return {
            "provider": self._provider.provider.value if self._provider else None,
            "model": self._provider.model if self._provider else None,
            "requests": self._stats.total_requests,
            "avg_latency_ms": round(self._stats.avg_latency_ms, 1),
            "errors": self._stats.errors,
        }

    def close(self) -> None:
        if self._provider is not None:
            self._provider.close()


def build_provider(client: httpx.Client | None = None) -> BaseLLMProvider | None:
    """Create the provider selected in settings, or None when disabled."""
    from taskreminder.config import settings

    if not settings.has_enrichment:
        return None

    timeout = settings.enrichment_timeout_seconds
    if settings.enrichment_provider == LLMProvider.GEMINI.value:
        return GeminiProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            client=client,
            timeout=timeout,
        )
    return HuggingFaceProvider(
        api_key=settings.hf_api_token,
        model=settings.hf_model,
        client=client,
        timeout=timeout,
        api_base=settings.hf_api_base,
    )


_client: LLMClient | None = None


def get_llm_client() -> LLMClient:
    """Get or create the singleton client."""
    global _client
    if _client is None:
        _client = LLMClient(build_provider())
    return _client
