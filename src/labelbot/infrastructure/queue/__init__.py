"""Background job queues."""

from labelbot.infrastructure.queue.rq_dispatcher import LABEL_TASK, SESSION_TASK, RQJobDispatcher

__all__ = ["RQJobDispatcher", "SESSION_TASK", "LABEL_TASK"]
