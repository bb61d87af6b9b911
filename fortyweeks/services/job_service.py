"""Job service - the outbox table the worker drains."""

from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from fortyweeks.core.config import settings
from fortyweeks.db.enums import JobStatus, JobType
from fortyweeks.db.models import Job
from fortyweeks.utils.datetime_parsing import utc_now


def schedule_job(
    db: Session,
    job_type: JobType,
    payload: dict,
    run_at: datetime | None = None,
    idempotency_key: str | None = None,
) -> Job:
    """
    Add a pending job, due now unless run_at is given.

    Flushes only, so the job lands in the same transaction as the rows it
    refers to. A repeated idempotency_key fails the flush with IntegrityError.
    """
    job = Job(
        job_type=job_type.value,
        payload=payload,
        run_at=run_at or utc_now(),
        status=JobStatus.PENDING.value,
        max_attempts=settings.JOB_MAX_ATTEMPTS,
        idempotency_key=idempotency_key,
    )
    db.add(job)
    db.flush()
    return job


def get_pending_jobs(db: Session, limit: int = 10) -> list[Job]:
    """Due pending jobs, oldest run_at first."""
    return (
        db.query(Job)
        .filter(Job.status == JobStatus.PENDING.value, Job.run_at <= utc_now())
        .order_by(Job.run_at, Job.id)
        .limit(limit)
        .all()
    )


def _save(db: Session, job: Job) -> Job:
    # Each state change is committed on its own.
    db.commit()
    db.refresh(job)
    return job


def mark_job_running(db: Session, job: Job) -> Job:
    job.status = JobStatus.RUNNING.value
    job.attempts += 1
    return _save(db, job)


def mark_job_completed(db: Session, job: Job) -> Job:
    job.status = JobStatus.COMPLETED.value
    job.completed_at = utc_now()
    job.last_error = None
    return _save(db, job)


def retry_delay(attempts: int) -> timedelta:
    return timedelta(seconds=settings.JOB_RETRY_DELAY_SECONDS * max(attempts, 1))


def mark_job_failed(db: Session, job: Job, error: str) -> Job:
    """
    Record a failed attempt.

    The job goes back to pending, due after retry_delay, until it has used
    max_attempts. Then it stays failed.
    """
    job.last_error = error
    if job.attempts < job.max_attempts:
        job.status = JobStatus.PENDING.value
        job.run_at = utc_now() + retry_delay(job.attempts)
    else:
        job.status = JobStatus.FAILED.value
    return _save(db, job)


def is_exhausted(job: Job) -> bool:
    return job.status == JobStatus.FAILED.value
