"""Admin endpoints for background job management."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from memory_cloud.api.dependencies import get_orchestrator
from memory_cloud.core.logging import get_logger
from memory_cloud.services.reprocessing import REPROCESS_JOB_ID, ReclassificationOrchestrator

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class JobStatusResponse(BaseModel):
    scheduler_running: bool
    reprocessing: bool
    active_jobs: int
    jobs: list[dict]
    budget: dict
    last_report: dict | None = None


@router.get("/jobs/status", response_model=JobStatusResponse, operation_id="job_status")
async def get_job_status(orchestrator: ReclassificationOrchestrator = Depends(get_orchestrator)):
    """Get re-classification orchestrator status."""
    status = orchestrator.get_job_status()
    return JobStatusResponse(
        scheduler_running=status["scheduler_running"],
        reprocessing=status["reprocessing"],
        active_jobs=len(status["jobs"]),
        jobs=status["jobs"],
        budget=status["budget"],
        last_report=status["last_report"],
    )


@router.post("/jobs/trigger/{job_id}", operation_id="trigger")
async def trigger_job(job_id: str, orchestrator: ReclassificationOrchestrator = Depends(get_orchestrator)):
    """Manually trigger a background job and return its report."""
    if job_id != REPROCESS_JOB_ID:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")

    logger.info(f"Manually triggering job {job_id}")
    report = await orchestrator.reprocess_offline_memories()
    return {"message": f"Job {job_id} triggered successfully", "report": report.model_dump()}
