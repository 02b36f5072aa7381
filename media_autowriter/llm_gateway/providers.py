"""Concrete providers: OpenAI (chat + DALL-E) and xAI Grok."""

from typing import Any, Dict

from media_autowriter.llm_gateway.base import OpenAICompatibleProvider


class OpenAIProvider(OpenAICompatibleProvider):
    """OpenAI chat completions and DALL-E 3 image generation."""

    name = "openai"

    def _image_payload(self, prompt: str, size: str) -> Dict[str, Any]:
        payload = super()._image_payload(prompt, size)
        payload["size"] = size
        payload["quality"] = "standard"
        return payload


class GrokProvider(OpenAICompatibleProvider):
    """xAI Grok chat completions; its image endpoint has no size parameter."""

    name = "grok"
