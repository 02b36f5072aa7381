"""Provider contract and the shared HTTP client for OpenAI-compatible APIs."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from media_autowriter.utils.exceptions import ProviderError
from media_autowriter.utils.logging import get_logger

logger = get_logger(__name__)

# Longest slice of an upstream error body kept on ProviderError and in logs
_MAX_ERROR_BODY = 2000


@dataclass(frozen=True)
class GenerationParams:
    """Sampling parameters for a text completion."""

    temperature: float = 0.7
    max_tokens: int = 1000


@dataclass(frozen=True)
class ImageResult:
    """Generated image reference."""

    url: str
    revised_prompt: Optional[str] = None


class LLMProvider(ABC):
    """Text and image generation against one upstream provider."""

    name: str = "provider"

    @abstractmethod
    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        params: Optional[GenerationParams] = None,
    ) -> str:
        """Return the completion text, or raise ProviderError."""

    @abstractmethod
    async def generate_image(self, prompt: str, size: str) -> ImageResult:
        """Return a reference to the generated image, or raise ProviderError."""

    async def aclose(self) -> None:
        """Release network resources."""


class OpenAICompatibleProvider(LLMProvider):
    """
    HTTP client for providers exposing ``/chat/completions`` and ``/images/generations``.

    Credentials and models are injected by the factory; nothing here reads the
    environment. Every non-success answer becomes a ProviderError carrying the
    upstream status code and raw body.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        text_model: str,
        image_model: str,
        text_timeout: float = 90.0,
        image_timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError(f"{self.name} API key is required")
        self.text_model = text_model
        self.image_model = image_model
        self.text_timeout = text_timeout
        self.image_timeout = image_timeout
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        timeout: float,
    ) -> Dict[str, Any]:
        start_time = time.time()
        try:
            response = await self._client.post(path, json=payload, timeout=timeout)
        except httpx.TimeoutException as exc:
            logger.error("provider_timeout", provider=self.name, path=path, timeout=timeout)
            raise ProviderError(self.name, f"request to {path} timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            logger.error("provider_transport_error", provider=self.name, path=path, error=str(exc))
            raise ProviderError(self.name, f"request to {path} failed: {exc}") from exc

        if response.status_code >= 400:
            body = response.text[:_MAX_ERROR_BODY]
            message = f"HTTP {response.status_code}"
            if response.status_code == 429:
                message += " (rate limit exceeded)"
            elif response.status_code == 401:
                message += " (invalid API key)"
            logger.error(
                "provider_error",
                provider=self.name,
                path=path,
                status_code=response.status_code,
                body=body,
            )
            raise ProviderError(self.name, message, status_code=response.status_code, body=body)

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                self.name,
                "response is not valid JSON",
                status_code=response.status_code,
                body=response.text[:_MAX_ERROR_BODY],
            ) from exc

        logger.debug(
            "provider_call_completed",
            provider=self.name,
            path=path,
            duration_seconds=round(time.time() - start_time, 3),
        )
        return data

    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        params: Optional[GenerationParams] = None,
    ) -> str:
        params = params or GenerationParams()
        data = await self._post_json(
            "/chat/completions",
            {
                "model": self.text_model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": params.temperature,
                "max_tokens": params.max_tokens,
                "stream": False,
            },
            timeout=self.text_timeout,
        )
        choices = data.get("choices") or []
        content = ""
        if choices:
            content = ((choices[0].get("message") or {}).get("content") or "").strip()
        if not content:
            raise ProviderError(self.name, "no content generated", status_code=200, body=str(data)[:_MAX_ERROR_BODY])
        return content

    async def generate_image(self, prompt: str, size: str) -> ImageResult:
        data = await self._post_json(
            "/images/generations",
            self._image_payload(prompt, size),
            timeout=self.image_timeout,
        )
        images = data.get("data") or []
        url = images[0].get("url") if images else None
        if not url:
            raise ProviderError(self.name, "no image generated", status_code=200, body=str(data)[:_MAX_ERROR_BODY])
        return ImageResult(url=url, revised_prompt=images[0].get("revised_prompt"))

    def _image_payload(self, prompt: str, size: str) -> Dict[str, Any]:
        return {
            "model": self.image_model,
            "prompt": prompt,
            "n": 1,
            "response_format": "url",
        }
