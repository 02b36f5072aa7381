"""Cron endpoint: runs every scheduled generation due this hour."""

from fastapi import APIRouter, Depends

from media_autowriter.agents.article_generation.scheduler import ScheduleTrigger
from media_autowriter.api.dependencies import get_trigger, verify_cron_secret
from media_autowriter.api.schemas.scheduling import ScheduledTriggerResponse

router = APIRouter(prefix="/cron", tags=["Cron"], dependencies=[Depends(verify_cron_secret)])


@router.api_route(
    "/scheduled-articles",
    methods=["GET", "POST"],
    response_model=ScheduledTriggerResponse,
    summary="Run due scheduled generations",
)
async def run_scheduled_articles(
    trigger: ScheduleTrigger = Depends(get_trigger),
) -> ScheduledTriggerResponse:
    """
    Called hourly by the platform scheduler with ``Authorization: Bearer <CRON_SECRET>``.

    A failing schedule never fails the request; it is reported in ``results``.
    """
    summary = await trigger.run()
    return ScheduledTriggerResponse.from_summary(summary)
