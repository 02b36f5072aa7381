"""Gateway factory: builds providers from settings and routes pipeline steps."""

from typing import Dict, Optional

import httpx

from media_autowriter.config.settings import Settings, settings as default_settings
from media_autowriter.llm_gateway.base import LLMProvider
from media_autowriter.llm_gateway.gateway import PIPELINE_STEPS, LLMGateway
from media_autowriter.llm_gateway.providers import GrokProvider, OpenAIProvider
from media_autowriter.utils.exceptions import ConfigurationError
from media_autowriter.utils.logging import get_logger

logger = get_logger(__name__)

_STEP_SETTINGS = {
    "themes": "theme_provider",
    "audience": "audience_provider",
    "outline": "outline_provider",
    "sections": "section_provider",
    "images": "image_provider",
    "alt_text": "alt_text_provider",
    "metadata": "metadata_provider",
    "slug": "slug_provider",
}


def step_routes(config: Settings) -> Dict[str, str]:
    """Provider name per pipeline step, normalised to lowercase."""
    return {step: getattr(config, _STEP_SETTINGS[step]).strip().lower() for step in PIPELINE_STEPS}


def create_provider(
    name: str,
    config: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> LLMProvider:
    """
    Create one provider with credentials taken from settings.

    Raises:
        ConfigurationError: unknown provider name or missing API key
    """
    common = {
        "text_timeout": config.llm_request_timeout_seconds,
        "image_timeout": config.image_request_timeout_seconds,
        "transport": transport,
    }
    if name == "openai":
        if not config.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set")
        return OpenAIProvider(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            text_model=config.openai_text_model,
            image_model=config.openai_image_model,
            **common,
        )
    if name == "grok":
        if not config.grok_api_key:
            raise ConfigurationError("GROK_API_KEY is not set")
        return GrokProvider(
            api_key=config.grok_api_key,
            base_url=config.grok_base_url,
            text_model=config.grok_text_model,
            image_model=config.grok_image_model,
            **common,
        )
    raise ConfigurationError(f"Unknown LLM provider: {name}")


def build_gateway(
    config: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> LLMGateway:
    """
    Build the gateway for the providers referenced by the step routing.

    Only providers that some step actually uses need credentials.
    """
    config = config or default_settings
    routes = step_routes(config)
    providers = {name: create_provider(name, config, transport) for name in sorted(set(routes.values()))}
    logger.info("llm_gateway_created", providers=sorted(providers), routes=routes)
    return LLMGateway(providers, routes)
