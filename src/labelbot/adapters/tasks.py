"""
Background tasks.

Entry points executed by the rq workers. Payloads are plain dictionaries
so that producers do not need to import the domain models.
"""

from __future__ import annotations

from typing import Any, Mapping

from rq import get_current_job

from labelbot.container import get_container
from labelbot.core.models import JobOutcome, LabelJob, SessionJob


def _mark(stage: str, **meta: Any) -> None:
    job = get_current_job()
    if job:
        job.meta["progress"] = stage
        job.meta.update(meta)
        job.save_meta()


def refresh_session_task(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Acquire and store the session of one account."""
    job = SessionJob.from_payload(payload)
    _mark("acquiring", account=job.username)

    refresher = get_container().session_refresher()
    try:
        outcome: JobOutcome = refresher.refresh(job)
    except Exception as e:
        _mark("failed", error=str(e))
        raise

    _mark(outcome.status.value)
    return outcome.to_dict()


def generate_label_task(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Render one label and deliver it to the requester."""
    job = LabelJob.from_payload(payload)
    _mark("processing", label_id=job.label_id)

    outcome = get_container().label_job_handler().handle(job)

    _mark(outcome.status.value, account=outcome.account)
    return outcome.to_dict()


__all__ = ["refresh_session_task", "generate_label_task"]
