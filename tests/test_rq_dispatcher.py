"""Tests for the rq job dispatcher."""

from __future__ import annotations

import unittest
from unittest import mock

from labelbot.config.models import QueueConfig
from labelbot.core.models import LabelJob, SessionJob
from labelbot.infrastructure.queue.rq_dispatcher import LABEL_TASK, SESSION_TASK, RQJobDispatcher

from tests.helpers import FakeLogger, make_shipment


class RQJobDispatcherTests(unittest.TestCase):

    def setUp(self) -> None:
        patcher = mock.patch("labelbot.infrastructure.queue.rq_dispatcher.Queue")
        self.queue_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.queue_cls.side_effect = lambda name, connection: mock.MagicMock(name=name)
        self.connection = object()
        self.dispatcher = RQJobDispatcher(self.connection, QueueConfig(), logger=FakeLogger())

    def test_two_named_queues(self) -> None:
        names = [call.args[0] for call in self.queue_cls.call_args_list]

        self.assertEqual(names, ["session-gen", "label-gen"])
        self.assertEqual(len(self.dispatcher.queues), 2)

    def test_session_jobs_get_one_retry(self) -> None:
        self.dispatcher.session_queue.enqueue.return_value.id = "job-1"

        job_id = self.dispatcher.enqueue_session_job(SessionJob("alice", "pw"))

        self.assertEqual(job_id, "job-1")
        args, kwargs = self.dispatcher.session_queue.enqueue.call_args
        self.assertEqual(args, (SESSION_TASK, {"username": "alice", "password": "pw"}))
        self.assertEqual(kwargs["retry"].max, 1)
        self.assertEqual(kwargs["job_timeout"], 300)

    def test_label_jobs_are_not_retried(self) -> None:
        self.dispatcher.label_queue.enqueue.return_value.id = "job-2"
        job = LabelJob(shipment=make_shipment(), label_id="label-1", requester_ref="chat-1")

        job_id = self.dispatcher.enqueue_label_job(job)

        self.assertEqual(job_id, "job-2")
        args, kwargs = self.dispatcher.label_queue.enqueue.call_args
        self.assertEqual(args[0], LABEL_TASK)
        self.assertEqual(args[1]["labelId"], "label-1")
        self.assertNotIn("retry", kwargs)
        self.assertEqual(kwargs["description"], "label:label-1")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
