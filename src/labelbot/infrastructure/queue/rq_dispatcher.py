"""
rq backed job queues.

Two independent queues: one for session refreshes, one for labels.
"""

from __future__ import annotations

from typing import Any, Optional

from redis import Redis
from rq import Queue, Retry

from labelbot.config.models import QueueConfig
from labelbot.core.interfaces import JobDispatcher
from labelbot.core.models import LabelJob, SessionJob
from labelbot.infrastructure.logging import get_logger

SESSION_TASK = "labelbot.adapters.tasks.refresh_session_task"
LABEL_TASK = "labelbot.adapters.tasks.generate_label_task"


class RQJobDispatcher(JobDispatcher):
    """Enqueues session and label jobs on their rq queues."""

    def __init__(self, connection: Redis, config: Optional[QueueConfig] = None, *, logger=None):
        self.config = config or QueueConfig()
        self.connection = connection
        self.session_queue = Queue(self.config.session_queue, connection=connection)
        self.label_queue = Queue(self.config.label_queue, connection=connection)
        self.logger = (logger or get_logger()).bind(component="queues")

    def _options(self, retries: int, timeout: int, description: str) -> dict[str, Any]:
        options: dict[str, Any] = {
            "job_timeout": timeout,
            "result_ttl": self.config.result_ttl,
            "failure_ttl": self.config.failure_ttl,
            "description": description,
        }
        if retries > 0:
            options["retry"] = Retry(max=retries)
        return options

    def enqueue_session_job(self, job: SessionJob) -> str:
        rq_job = self.session_queue.enqueue(
            SESSION_TASK,
            job.to_payload(),
            **self._options(self.config.session_retries, self.config.session_job_timeout, f"session:{job.username}"),
        )
        self.logger.debug("Session job queued", job_id=rq_job.id, account=job.username)
        return rq_job.id

    def enqueue_label_job(self, job: LabelJob) -> str:
        rq_job = self.label_queue.enqueue(
            LABEL_TASK,
            job.to_payload(),
            **self._options(self.config.label_retries, self.config.label_job_timeout, f"label:{job.label_id}"),
        )
        self.logger.info("Label job queued", job_id=rq_job.id, label_id=job.label_id)
        return rq_job.id

    @property
    def queues(self) -> list[Queue]:
        return [self.session_queue, self.label_queue]


__all__ = ["RQJobDispatcher", "SESSION_TASK", "LABEL_TASK"]
