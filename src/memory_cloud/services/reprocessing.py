import asyncio
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import BaseModel

from memory_cloud.core.base import ErrorLevel
from memory_cloud.core.decorators import with_error_handling
from memory_cloud.core.errors import RateLimitError
from memory_cloud.core.logging import get_logger, log_context

if TYPE_CHECKING:
    from memory_cloud.core.budget import CapabilityBudget
    from memory_cloud.core.config import Settings
    from memory_cloud.domain.models import Memory
    from memory_cloud.services import MemoryRepository
    from memory_cloud.services.classification_service import ClassificationService

logger = get_logger(__name__)

REPROCESS_JOB_ID = "reclassify_offline"
STARTUP_JOB_ID = "reclassify_offline_startup"


class ReprocessReport(BaseModel):
    """Outcome of one sweep over offline memories."""

    found: int = 0
    reprocessed: int = 0
    failed: int = 0
    stopped_by_budget: bool = False
    skipped: bool = False


class ReclassificationOrchestrator:
    """Background re-classification of memories stored while offline."""

    def __init__(
        self,
        repository: "MemoryRepository",
        classifier: "ClassificationService",
        budget: "CapabilityBudget",
        settings: "Settings",
    ):
        self.repository = repository
        self.classifier = classifier
        self.budget = budget
        self.settings = settings
        self.scheduler = AsyncIOScheduler()
        self._reprocessing = False
        self.last_report: ReprocessReport | None = None

    @property
    def is_reprocessing(self) -> bool:
        return self._reprocessing

    def _setup_jobs(self):
        """Configure the sweep: a fixed interval plus one early run after startup."""
        self.scheduler.add_job(
            self.reprocess_offline_memories,
            "interval",
            seconds=self.settings.reclassify_interval_seconds,
            id=REPROCESS_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.reprocess_offline_memories,
            "date",
            run_date=datetime.now() + timedelta(seconds=self.settings.reclassify_startup_delay_seconds),
            id=STARTUP_JOB_ID,
            max_instances=1,
            replace_existing=True,
        )

    async def start(self):
        self._setup_jobs()
        self.scheduler.start()
        logger.info(
            "ReclassificationOrchestrator started - offline memories will be re-classified",
            interval_seconds=self.settings.reclassify_interval_seconds,
        )

    async def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("ReclassificationOrchestrator shutdown complete")

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=False, default=False, passthrough=(RateLimitError,))
    async def _reprocess_one(self, memory: "Memory") -> bool:
        """Re-classify and store one memory; RateLimitError propagates.

        Only the classification fields are written back, onto the record as it
        is stored now.
        """
        updated = await self.classifier.reclassify(memory)
        stored = await self.repository.update_classification(
            memory.id,
            mood=updated.mood,
            tags=updated.tags,
            color=updated.color,
            theme_vector=updated.theme_vector,
            embedding=updated.embedding,
        )
        if stored is None:
            logger.warning("Memory disappeared during reprocessing")
            return False
        logger.info(f"Reprocessed -> {stored.mood}")
        return True

    async def reprocess_offline_memories(self) -> ReprocessReport:
        """Re-classify up to one batch of offline memories, oldest first.

        Stops as soon as the capability budget is exhausted; the remaining
        memories wait for the next run. Overlapping runs are skipped.
        """
        if self._reprocessing:
            logger.info("Reprocessing already in progress, skipping")
            return ReprocessReport(skipped=True)

        self._reprocessing = True
        report = ReprocessReport()
        try:
            memories = await self.repository.find_offline(self.settings.reclassify_batch_size)
            report.found = len(memories)
            if not memories:
                logger.debug("No offline memories to reprocess")
                return report

            logger.info(f"Found {len(memories)} offline memories to reprocess")
            for index, memory in enumerate(memories):
                if self.budget.remaining() == 0:
                    logger.info("Capability budget exhausted during reprocessing, will continue next cycle")
                    report.stopped_by_budget = True
                    break

                with log_context(memory_id=str(memory.id)):
                    try:
                        done = await self._reprocess_one(memory)
                    except RateLimitError:
                        logger.info("Rate limit hit during reprocessing, stopping for this cycle")
                        report.stopped_by_budget = True
                        break

                if done:
                    report.reprocessed += 1
                else:
                    report.failed += 1

                if index < len(memories) - 1 and self.settings.reclassify_pause_seconds > 0:
                    await asyncio.sleep(self.settings.reclassify_pause_seconds)
        finally:
            self._reprocessing = False
            self.last_report = report

        logger.info(
            "Reprocessing sweep finished",
            reprocessed=report.reprocessed,
            failed=report.failed,
            stopped_by_budget=report.stopped_by_budget,
        )
        return report

    def get_job_status(self) -> dict:
        """Get status of all scheduled jobs."""
        jobs = self.scheduler.get_jobs()
        return {
            "scheduler_running": self.scheduler.running,
            "reprocessing": self._reprocessing,
            "budget": self.budget.get_state(),
            "last_report": self.last_report.model_dump() if self.last_report else None,
            "jobs": [
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": next_run.isoformat() if (next_run := getattr(job, "next_run_time", None)) else None,
                    "func": job.func.__name__,
                }
                for job in jobs
            ],
        }
