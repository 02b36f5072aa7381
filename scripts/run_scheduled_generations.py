"""Run the scheduled generation trigger once, without going through the cron endpoint."""

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from media_autowriter.agents.article_generation.orchestrator import ArticleGenerationPipeline
from media_autowriter.agents.article_generation.scheduler import ScheduleTrigger
from media_autowriter.database.db_session import engine
from media_autowriter.database.repository import SQLContentRepository
from media_autowriter.llm_gateway.factory import build_gateway
from media_autowriter.utils.logging import setup_logging


async def main() -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Run every scheduled generation due at a given time")
    parser.add_argument(
        "--at",
        type=datetime.fromisoformat,
        help="ISO timestamp to evaluate schedules against (default: now, naive values are UTC)",
    )
    args = parser.parse_args()

    setup_logging()
    now = args.at or datetime.now(timezone.utc)

    gateway = build_gateway()
    repository = SQLContentRepository()
    trigger = ScheduleTrigger(ArticleGenerationPipeline(gateway, repository), repository)
    try:
        summary = await trigger.run(now)
    finally:
        await gateway.aclose()
        await engine.dispose()

    print(f"Slot: day {summary.current_day_of_week} {summary.current_time}")
    for result in summary.results:
        status = "OK " if result.success else "ERR"
        print(f"  {status} {result.schedule_name} ({result.schedule_id}) {result.article_id or result.error}")
    print(f"Executed {summary.executed_count}: {summary.succeeded} succeeded, {summary.failed} failed")
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
