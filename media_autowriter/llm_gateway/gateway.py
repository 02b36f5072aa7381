"""Per-step routing of pipeline calls to LLM providers."""

from typing import Dict, Mapping, Optional

from media_autowriter.llm_gateway.base import GenerationParams, ImageResult, LLMProvider
from media_autowriter.utils.exceptions import ConfigurationError

PIPELINE_STEPS = (
    "themes",
    "audience",
    "outline",
    "sections",
    "images",
    "alt_text",
    "metadata",
    "slug",
)


class LLMGateway:
    """
    Single entry point for every model call made by the pipeline.

    Each step name resolves to one provider, so a step can move from one
    provider to another by configuration alone.
    """

    def __init__(
        self,
        providers: Mapping[str, LLMProvider],
        routes: Mapping[str, str],
    ) -> None:
        unknown_steps = set(routes) - set(PIPELINE_STEPS)
        if unknown_steps:
            raise ConfigurationError(f"Unknown pipeline steps: {', '.join(sorted(unknown_steps))}")
        missing_steps = [step for step in PIPELINE_STEPS if step not in routes]
        if missing_steps:
            raise ConfigurationError(f"No provider routed for steps: {', '.join(missing_steps)}")
        for step, provider_name in routes.items():
            if provider_name not in providers:
                raise ConfigurationError(
                    f"Step '{step}' is routed to unconfigured provider '{provider_name}'"
                )
        self._providers: Dict[str, LLMProvider] = dict(providers)
        self._routes: Dict[str, str] = dict(routes)

    def provider_for(self, step: str) -> LLMProvider:
        try:
            return self._providers[self._routes[step]]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown pipeline step: {step}") from exc

    def provider_name(self, step: str) -> str:
        return self.provider_for(step).name

    async def generate_text(
        self,
        step: str,
        system_prompt: str,
        user_prompt: str,
        params: Optional[GenerationParams] = None,
    ) -> str:
        return await self.provider_for(step).generate_text(system_prompt, user_prompt, params)

    async def generate_image(self, prompt: str, size: str) -> ImageResult:
        return await self.provider_for("images").generate_image(prompt, size)

    async def aclose(self) -> None:
        for provider in self._providers.values():
            await provider.aclose()
