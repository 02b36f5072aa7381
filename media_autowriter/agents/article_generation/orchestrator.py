"""ArticleGenerationPipeline: end-to-end generation of one article."""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from media_autowriter.agents.article_generation.crew import (
    AudienceCrew,
    ImageCrew,
    MetadataCrew,
    OutlineCrew,
    SectionWritingCrew,
    ThemeCrew,
)
from media_autowriter.agents.article_generation.duplicate_filter import (
    check_theme_duplicates,
)
from media_autowriter.agents.article_generation.models import (
    ArticleRecord,
    ExistingTitle,
    GenerationContext,
    GenerationRequest,
    GenerationResult,
    IMAGE_SIZES,
    ThemeCheckResult,
)
from media_autowriter.agents.base_agent import BaseAgent
from media_autowriter.config.settings import Settings, settings as default_settings
from media_autowriter.database.repository import ContentRepository
from media_autowriter.llm_gateway.gateway import LLMGateway
from media_autowriter.utils.exceptions import (
    DuplicateExhaustedError,
    NotFoundError,
    PipelineTimeoutError,
    ValidationError,
)
from media_autowriter.utils.logging import clear_generation_context
from media_autowriter.utils.text import (
    build_table_of_contents,
    calculate_reading_time,
    strip_tags,
    truncate_with_ellipsis,
)

EXCERPT_MAX_LENGTH = 200


class ArticleGenerationPipeline(BaseAgent):
    """
    Turns a GenerationRequest into one persisted article.

    Steps run strictly in order and each one is wrapped in ``step_context``
    so its start, completion and failure are audit-logged. Nothing is written
    to the repository before the final commit step, so any failure or timeout
    before it leaves no partial article behind. The time budget is checked
    once more right before the commit; a commit that has started is allowed
    to finish even if the budget runs out meanwhile.
    """

    def __init__(
        self,
        gateway: LLMGateway,
        repository: ContentRepository,
        config: Optional[Settings] = None,
    ) -> None:
        super().__init__("article_generation")
        self.config = config or default_settings
        self.gateway = gateway
        self.repository = repository
        self._theme_crew = ThemeCrew(gateway, candidate_count=self.config.theme_candidate_count)
        self._audience_crew = AudienceCrew(gateway)
        self._outline_crew = OutlineCrew(gateway)
        self._writing_crew = SectionWritingCrew(gateway, max_tokens=self.config.section_max_tokens)
        self._image_crew = ImageCrew(gateway, section_image_count=self.config.section_image_count)
        self._metadata_crew = MetadataCrew(gateway)

    async def execute(self, input_data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        """Run the pipeline from a plain dict of request fields."""
        result = await self.generate(GenerationRequest(**input_data))
        return {
            "article_id": result.article_id,
            "title": result.title,
            "slug": result.slug,
        }

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate and persist one article.

        Raises:
            ValidationError: mandatory request fields are missing
            NotFoundError: a referenced entity does not exist for the tenant
            DuplicateExhaustedError: every theme duplicated an existing article
            ProviderError / LLMOutputError: a model call failed or returned unusable output
            PipelineTimeoutError: the run exceeded ``pipeline_timeout_seconds``
            PersistenceError: the final write failed
        """
        request.validate()

        generation_id = uuid4().hex
        self.set_generation_context(generation_id, request.tenant_id)
        self.audit.log_workflow_start(
            "article_generation",
            {
                "category_id": request.category_id,
                "writer_id": request.writer_id,
                "pattern_id": request.pattern_id,
                "publish_status": request.publish_status,
            },
        )
        start_time = time.time()
        budget = self.config.pipeline_timeout_seconds
        deadline = asyncio.get_running_loop().time() + budget
        progress = {"committing": False}
        run = asyncio.ensure_future(self._run(request, start_time, deadline, progress))
        try:
            done, _ = await asyncio.wait({run}, timeout=budget)
            if not done and progress["committing"]:
                # A started write runs to completion so the caller learns its id
                self.audit.log_step_warning("commit", "Time budget exceeded while committing")
                result = await run
            elif not done:
                run.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await run
                raise PipelineTimeoutError(f"Article generation exceeded {budget}s")
            else:
                result = run.result()
        except asyncio.CancelledError:
            run.cancel()
            raise
        except Exception as exc:
            self.audit.log_workflow_failed("article_generation", exc, time.time() - start_time)
            raise
        finally:
            clear_generation_context()

        self.audit.log_workflow_complete(
            "article_generation",
            {"article_id": result.article_id, "sections": result.section_count, "images": result.image_count},
            result.duration_seconds,
        )
        return result

    async def _run(
        self,
        request: GenerationRequest,
        start_time: float,
        deadline: float,
        progress: Dict[str, bool],
    ) -> GenerationResult:
        context = await self._load_context(request)
        title = await self._select_theme(request.tenant_id, context)

        async with self.step_context("target_audience") as ctx:
            if request.target_audience and request.target_audience.strip():
                target_audience = request.target_audience.strip()
                ctx["source"] = "request"
            else:
                target_audience = await self._audience_crew.run(context.category, title)
                ctx["source"] = "generated"

        async with self.step_context("outline") as ctx:
            outline = await self._outline_crew.run(title, context.category, target_audience, context.pattern)
            ctx["sections"] = len(outline)

        async with self.step_context("sections") as ctx:
            sections = await self._writing_crew.run(
                title,
                target_audience,
                outline,
                context.writer,
                context.writing_style,
            )
            ctx["sections"] = len(sections)

        content = "\n\n".join(section.to_html() for section in sections)

        async with self.step_context("images") as ctx:
            images = await self._image_crew.run(title, sections, context.image_pattern)
            ctx["images"] = len(images)

        async with self.step_context("metadata") as ctx:
            metadata = await self._metadata_crew.run(title, content)
            ctx["slug"] = metadata.slug

        record = ArticleRecord(
            tenant_id=request.tenant_id,
            title=title,
            slug=metadata.slug,
            content=content,
            sections=sections,
            excerpt=truncate_with_ellipsis(strip_tags(content), EXCERPT_MAX_LENGTH),
            meta_title=metadata.meta_title,
            meta_description=metadata.meta_description,
            images=images,
            table_of_contents=build_table_of_contents(content),
            reading_time=calculate_reading_time(content),
            target_audience=target_audience,
            category_id=context.category.id,
            writer_id=context.writer.id,
            image_prompt_pattern_id=context.image_pattern.id,
            pattern_id=context.pattern.id if context.pattern else None,
            writing_style_id=context.writing_style.id if context.writing_style else None,
            is_published=request.publish_status == "published",
            is_scheduled=request.publish_status == "scheduled",
        )

        if asyncio.get_running_loop().time() >= deadline:
            raise PipelineTimeoutError(
                f"Article generation exceeded {self.config.pipeline_timeout_seconds}s before commit"
            )
        progress["committing"] = True
        async with self.step_context("commit") as ctx:
            article_id = await asyncio.shield(self.repository.create_article(record))
            ctx["article_id"] = article_id

        return GenerationResult(
            article_id=article_id,
            title=title,
            slug=metadata.slug,
            meta_title=metadata.meta_title,
            meta_description=metadata.meta_description,
            target_audience=target_audience,
            section_count=len(sections),
            image_count=len(images),
            is_published=record.is_published,
            duration_seconds=round(time.time() - start_time, 3),
        )

    async def _load_context(self, request: GenerationRequest) -> GenerationContext:
        tenant_id = request.tenant_id
        async with self.step_context("load_context"):
            category = await self.repository.get_tenant_category(tenant_id, request.category_id)
            if category is None:
                raise NotFoundError("Category", request.category_id)

            writer = await self.repository.get_writer(tenant_id, request.writer_id)
            if writer is None:
                raise NotFoundError("Writer", request.writer_id)

            pattern = None
            if request.pattern_id:
                pattern = await self.repository.get_composition_pattern(tenant_id, request.pattern_id)
                if pattern is None:
                    raise NotFoundError("Composition pattern", request.pattern_id)

            writing_style = None
            if request.writing_style_id:
                writing_style = await self.repository.get_writing_style(tenant_id, request.writing_style_id)
                if writing_style is None:
                    raise NotFoundError("Writing style", request.writing_style_id)

            image_pattern = await self.repository.get_image_prompt_pattern(
                tenant_id, request.image_prompt_pattern_id
            )
            if image_pattern is None:
                raise NotFoundError("Image prompt pattern", request.image_prompt_pattern_id)
            if image_pattern.size not in IMAGE_SIZES:
                raise ValidationError(
                    f"Image prompt pattern has unsupported size '{image_pattern.size}'",
                    fields=["imagePromptPatternId"],
                )

        return GenerationContext(
            category=category,
            writer=writer,
            image_pattern=image_pattern,
            pattern=pattern,
            writing_style=writing_style,
        )

    async def _propose_checked_themes(
        self,
        context: GenerationContext,
        existing: Sequence[ExistingTitle],
        excluded_titles: Sequence[str] = (),
    ) -> List[ThemeCheckResult]:
        themes = await self._theme_crew.run(context.category, context.pattern, excluded_titles)
        return check_theme_duplicates(themes, existing)

    async def _select_theme(self, tenant_id: str, context: GenerationContext) -> str:
        """
        Propose themes until one is not a duplicate.

        Only total duplicate rejection triggers a re-proposal; provider errors
        propagate immediately.
        """
        async with self.step_context("themes") as ctx:
            existing = await self.repository.list_published_titles(tenant_id)
            ctx["existing_titles"] = len(existing)

            max_attempts = 1 + max(0, self.config.theme_retry_attempts)
            rejected: List[str] = []
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                retry=retry_if_exception_type(DuplicateExhaustedError),
                reraise=True,
            ):
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    results = await self._propose_checked_themes(context, existing, rejected)
                    unique = [r.theme for r in results if not r.is_duplicate]
                    if not unique:
                        rejected.extend(r.theme for r in results)
                        self.audit.log_step_warning(
                            "themes",
                            "All proposed themes duplicate existing articles",
                            details={"attempt": attempt_number, "rejected": len(results)},
                        )
                        raise DuplicateExhaustedError(rejected, attempt_number)

            ctx["attempts"] = attempt_number
            ctx["title"] = unique[0]
            return unique[0]

    async def propose_themes(
        self,
        tenant_id: str,
        category_id: str,
        pattern_id: Optional[str] = None,
    ) -> List[ThemeCheckResult]:
        """Propose and duplicate-check themes without generating an article."""
        missing = [
            name
            for name, value in (("tenantId", tenant_id), ("categoryId", category_id))
            if not (value or "").strip()
        ]
        if missing:
            raise ValidationError(f"Missing required parameters: {', '.join(missing)}", fields=missing)
        async with self.step_context("propose_themes") as ctx:
            category = await self.repository.get_tenant_category(tenant_id, category_id)
            if category is None:
                raise NotFoundError("Category", category_id)
            pattern = None
            if pattern_id:
                pattern = await self.repository.get_composition_pattern(tenant_id, pattern_id)
                if pattern is None:
                    raise NotFoundError("Composition pattern", pattern_id)
            existing = await self.repository.list_published_titles(tenant_id)
            themes = await self._theme_crew.run(category, pattern)
            results = check_theme_duplicates(themes, existing)
            ctx["candidates"] = len(results)
            return results
