"""FastAPI dependencies for the gateway, repository, pipeline and trigger."""

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from media_autowriter.agents.article_generation.orchestrator import ArticleGenerationPipeline
from media_autowriter.agents.article_generation.scheduler import ScheduleTrigger
from media_autowriter.config.settings import settings
from media_autowriter.database.repository import ContentRepository, SQLContentRepository
from media_autowriter.llm_gateway.factory import build_gateway
from media_autowriter.llm_gateway.gateway import LLMGateway

__all__ = [
    "close_gateway",
    "get_gateway",
    "get_pipeline",
    "get_repository",
    "get_trigger",
    "verify_cron_secret",
]

_gateway: Optional[LLMGateway] = None


def get_gateway() -> LLMGateway:
    """Process-wide gateway, built on first use so missing keys surface per request."""
    global _gateway
    if _gateway is None:
        _gateway = build_gateway(settings)
    return _gateway


async def close_gateway() -> None:
    global _gateway
    if _gateway is not None:
        await _gateway.aclose()
        _gateway = None


def get_repository() -> ContentRepository:
    return SQLContentRepository()


def get_pipeline(
    gateway: LLMGateway = Depends(get_gateway),
    repository: ContentRepository = Depends(get_repository),
) -> ArticleGenerationPipeline:
    return ArticleGenerationPipeline(gateway, repository)


def get_trigger(
    pipeline: ArticleGenerationPipeline = Depends(get_pipeline),
    repository: ContentRepository = Depends(get_repository),
) -> ScheduleTrigger:
    return ScheduleTrigger(pipeline, repository)


async def verify_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>``; unset secret rejects everything."""
    secret = settings.cron_secret
    if not secret or not authorization or not hmac.compare_digest(
        authorization.encode("utf-8"), f"Bearer {secret}".encode("utf-8")
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
