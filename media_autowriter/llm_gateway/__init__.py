"""LLM gateway: text and image generation providers."""

from media_autowriter.llm_gateway.base import GenerationParams, ImageResult, LLMProvider
from media_autowriter.llm_gateway.factory import build_gateway
from media_autowriter.llm_gateway.gateway import PIPELINE_STEPS, LLMGateway
from media_autowriter.llm_gateway.providers import GrokProvider, OpenAIProvider

__all__ = [
    "GenerationParams",
    "GrokProvider",
    "ImageResult",
    "LLMGateway",
    "LLMProvider",
    "OpenAIProvider",
    "PIPELINE_STEPS",
    "build_gateway",
]
