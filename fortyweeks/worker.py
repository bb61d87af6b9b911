"""
Outbox worker.

Usage:
    python -m fortyweeks.worker

Polls the jobs table and delivers queued emails through SES. Run one worker
process next to the API; SQLite allows a single writer at a time.
"""

import asyncio
import logging
import os

from sqlalchemy.orm import Session

from fortyweeks.core.config import settings
from fortyweeks.core.structured_logging import build_log_context
from fortyweeks.db.models import Job
from fortyweeks.db.session import SessionLocal
from fortyweeks.jobs.registry import JOB_FAILURE_HOOKS, resolve_job_handler
from fortyweeks.services import job_service

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = settings.WORKER_POLL_INTERVAL
BATCH_SIZE = settings.WORKER_BATCH_SIZE


async def process_job(db: Session, job: Job) -> None:
    handler = resolve_job_handler(job.job_type)
    logger.info("Running job %s (%s), attempt %s/%s", job.id, job.job_type, job.attempts, job.max_attempts)
    await handler(db, job)


def _after_failure(db: Session, job: Job, error: str) -> None:
    """Let the job type mirror the failure onto its own rows."""
    hook = JOB_FAILURE_HOOKS.get(job.job_type)
    if hook is None:
        return
    try:
        hook(db, job, error)
    except Exception:
        db.rollback()
        logger.exception("Failure hook for job %s raised", job.id)


async def _run_one(db: Session, job: Job) -> bool:
    job_service.mark_job_running(db, job)
    try:
        await process_job(db, job)
    except Exception as e:
        db.rollback()
        error = str(e) or type(e).__name__
        job_service.mark_job_failed(db, job, error)
        logger.error(
            "Job %s failed (%s); status=%s",
            job.id,
            type(e).__name__,
            job.status,
        )
        _after_failure(db, job, error)
        return False

    job_service.mark_job_completed(db, job)
    return True


async def run_pending_jobs(db: Session, limit: int = BATCH_SIZE) -> tuple[int, int]:
    """Run one batch of due jobs. Returns (completed, failed)."""
    jobs = job_service.get_pending_jobs(db, limit=limit)
    completed = failed = 0
    for job in jobs:
        if await _run_one(db, job):
            completed += 1
        else:
            failed += 1
    if jobs:
        logger.info("Batch done: %d completed, %d failed", completed, failed)
    return completed, failed


async def worker_loop() -> None:
    logger.info("Worker started (poll every %ss, batch of %s)", POLL_INTERVAL_SECONDS, BATCH_SIZE)
    if not settings.EMAIL_ENABLED:
        logger.warning("EMAIL_ENABLED is false; emails are logged and marked sent without SES")

    while True:
        with SessionLocal() as db:
            try:
                await run_pending_jobs(db)
            except Exception:
                logger.exception("Worker batch crashed")
        await asyncio.sleep(POLL_INTERVAL_SECONDS)


def main() -> None:
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker stopped")
    except Exception:
        logger.exception(
            "Worker crashed",
            extra=build_log_context(
                request_id=os.getenv("WORKER_INSTANCE_ID"),
                route="worker",
                method="background",
            ),
        )
        raise


if __name__ == "__main__":
    main()
