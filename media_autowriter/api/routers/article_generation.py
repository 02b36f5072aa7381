"""API router for manual article generation and the theme tools."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status

from media_autowriter.agents.article_generation.duplicate_filter import (
    check_theme_duplicates,
    summarize_theme_check,
)
from media_autowriter.agents.article_generation.orchestrator import ArticleGenerationPipeline
from media_autowriter.api.dependencies import get_pipeline, get_repository
from media_autowriter.api.middleware.rate_limit import GENERATION_RATE_LIMIT, limiter
from media_autowriter.api.schemas.article_generation import (
    ArticleGenerationRequest,
    ArticleGenerationResponse,
    ThemeCheckResponse,
    ThemeDuplicateCheckRequest,
    ThemeDuplicateCheckResponse,
    ThemeGenerationRequest,
    ThemeGenerationResponse,
)
from media_autowriter.database.repository import ContentRepository
from media_autowriter.utils.exceptions import ValidationError
from media_autowriter.utils.logging import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/articles", tags=["Article Generation"])


def _require_tenant(x_media_id: Optional[str]) -> str:
    if not x_media_id or not x_media_id.strip():
        raise ValidationError("Missing required header: X-Media-Id", fields=["X-Media-Id"])
    return x_media_id.strip()


@router.post(
    "/generate-advanced",
    response_model=ArticleGenerationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate and save one article",
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_advanced_article(
    request: Request,
    payload: ArticleGenerationRequest,
    x_media_id: Optional[str] = Header(default=None),
    pipeline: ArticleGenerationPipeline = Depends(get_pipeline),
) -> ArticleGenerationResponse:
    """
    Run the full generation pipeline synchronously.

    The tenant comes from ``tenantId`` in the body or the ``X-Media-Id``
    header. The article is saved before the response is sent.
    """
    result = await pipeline.generate(payload.to_domain(header_tenant_id=x_media_id))
    logger.info(
        "article_generated",
        article_id=result.article_id,
        duration_seconds=result.duration_seconds,
    )
    return ArticleGenerationResponse.from_result(result)


@router.post(
    "/generate-themes",
    response_model=ThemeGenerationResponse,
    summary="Propose duplicate-checked article themes",
)
async def generate_themes(
    payload: ThemeGenerationRequest,
    x_media_id: Optional[str] = Header(default=None),
    pipeline: ArticleGenerationPipeline = Depends(get_pipeline),
) -> ThemeGenerationResponse:
    tenant_id = _require_tenant(x_media_id)
    results = await pipeline.propose_themes(tenant_id, payload.category_id, payload.pattern_id)
    return ThemeGenerationResponse(
        themes=[r.theme for r in results],
        candidates=[ThemeCheckResponse.from_result(r) for r in results],
        category_id=payload.category_id,
        pattern_id=payload.pattern_id,
    )


@router.post(
    "/check-theme-duplicates",
    response_model=ThemeDuplicateCheckResponse,
    summary="Check themes against the tenant's published articles",
)
async def check_duplicates(
    payload: ThemeDuplicateCheckRequest,
    x_media_id: Optional[str] = Header(default=None),
    repository: ContentRepository = Depends(get_repository),
) -> ThemeDuplicateCheckResponse:
    tenant_id = _require_tenant(x_media_id)
    themes = [theme for theme in payload.themes if theme and theme.strip()]
    if not themes:
        raise ValidationError("themes must be a non-empty list", fields=["themes"])

    existing = await repository.list_published_titles(tenant_id)
    summary = summarize_theme_check(check_theme_duplicates(themes, existing))
    logger.info(
        "theme_duplicates_checked",
        total_checked=summary["total_checked"],
        duplicates=len(summary["duplicates"]),
        existing_articles=len(existing),
    )
    return ThemeDuplicateCheckResponse(
        unique_themes=summary["unique_themes"],
        duplicates=[ThemeCheckResponse.from_result(r) for r in summary["duplicates"]],
        total_checked=summary["total_checked"],
        existing_articles_count=len(existing),
    )
