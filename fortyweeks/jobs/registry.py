"""Job type -> handler coroutine, plus optional hooks run after a failed attempt."""

from __future__ import annotations

from typing import Awaitable, Callable

from fortyweeks.db.enums import JobType
from fortyweeks.jobs.handlers import email

JobHandler = Callable[..., Awaitable[None]]
FailureHook = Callable[..., None]

JOB_HANDLERS: dict[str, JobHandler] = {
    JobType.SEND_EMAIL.value: email.process_send_email,
}

# Called with (db, job, error) once the job row records the failure.
JOB_FAILURE_HOOKS: dict[str, FailureHook] = {
    JobType.SEND_EMAIL.value: email.record_send_failure,
}


def resolve_job_handler(job_type: str) -> JobHandler:
    try:
        return JOB_HANDLERS[job_type]
    except KeyError:
        raise ValueError(f"Unknown job type: {job_type}") from None
