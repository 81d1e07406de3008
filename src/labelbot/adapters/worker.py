"""
Worker entrypoint.

Starts an rq worker over the session and label queues using the
application container.
"""

from __future__ import annotations

import os
import socket
from typing import Optional, Sequence

from rq import Worker

from labelbot.container import get_container


def start_worker(queue_names: Optional[Sequence[str]] = None, *, name: Optional[str] = None, burst: bool = False) -> bool:
    """
    Run a worker until stopped.

    Args:
        queue_names: Subset of queues to listen on; both when omitted.
        name: Worker name, defaults to ``labelbot-<hostname>-<pid>``.
        burst: Exit once the queues are empty.
    """
    container = get_container()
    logger = container.logger()
    dispatcher = container.dispatcher()

    queues = dispatcher.queues
    if queue_names:
        queues = [q for q in queues if q.name in set(queue_names)]
        if not queues:
            raise ValueError(f"Unknown queues: {', '.join(queue_names)}")

    worker_name = name or f"labelbot-{socket.gethostname()}-{os.getpid()}"
    logger.info("Starting worker", worker=worker_name, queues=",".join(q.name for q in queues))

    worker = Worker(queues, connection=dispatcher.connection, name=worker_name)
    return worker.work(burst=burst)


__all__ = ["start_worker"]
