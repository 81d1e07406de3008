"""Label generation job handling."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from labelbot.core.exceptions import AccountError, AccountErrorKind
from labelbot.core.interfaces import ErrorExplainer, LabelLedger, Notifier
from labelbot.core.models import JobOutcome, JobStatus, LabelJob, LabelRecord, Shipment, utcnow
from labelbot.core.services.label_protocol import LabelProtocolClient
from labelbot.core.services.session_store import SessionStore
from labelbot.infrastructure.logging import get_logger

NO_ACTIVE_SESSION_MESSAGE = "No active session found, please try again later"


def human_timestamp(moment: datetime) -> str:
    return moment.strftime("%b %d, %Y, %I:%M:%S %p")


def make_label_id(shipment: Shipment, now: Optional[datetime] = None) -> str:
    """Label ids combine the sender name with the submission time."""

    sender = shipment.sender.full_name.lower().replace(" ", "_", 1)
    return f"{sender}-{human_timestamp(now or utcnow())}"


class LabelJobHandler:
    """Turns one label job into a delivered document or an explained failure."""

    def __init__(
        self,
        sessions: SessionStore,
        protocol: LabelProtocolClient,
        ledger: LabelLedger,
        notifier: Notifier,
        explainer: ErrorExplainer,
        *,
        clock: Callable[[], datetime] = utcnow,
        logger=None,
    ):
        self.sessions = sessions
        self.protocol = protocol
        self.ledger = ledger
        self.notifier = notifier
        self.explainer = explainer
        self._clock = clock
        self.logger = (logger or get_logger()).bind(component="label_jobs")

    def handle(self, job: LabelJob) -> JobOutcome:
        log = self.logger.bind(label_id=job.label_id, requester=job.requester_ref)
        log.info("Processing label job")

        session = self.sessions.get_active()
        if session is None:
            log.warning("No active session")
            self.notifier.send_message(job.requester_ref, NO_ACTIVE_SESSION_MESSAGE)
            return JobOutcome(
                JobStatus.SKIPPED,
                message=NO_ACTIVE_SESSION_MESSAGE,
                kind=AccountErrorKind.NO_SESSION_FOUND,
            )

        log = log.bind(account=session.username)
        try:
            label = self.protocol.create_label(job.shipment, session)
            now = self._clock()
            self.ledger.append(LabelRecord(
                shipment_date=now,
                account_used=session.username,
                balance_used=Decimal("0"),
                shipment_type=job.shipment.recipient.mail_class,
                file_id=label.filename,
                created_at=now,
                updated_at=now,
            ))
            self.notifier.send_document(
                job.requester_ref,
                label.content,
                label.filename,
                caption=f"{job.label_id}-{label.filename}\nLabel Generated - {human_timestamp(now)}",
            )
        except Exception as e:
            kind = e.kind if isinstance(e, AccountError) else AccountErrorKind.ERROR
            message = e.message if isinstance(e, AccountError) else str(e)
            log.error("Label job failed", error=message, kind=kind.value)
            explanation = self.explainer.explain(message)
            self.notifier.send_message(job.requester_ref, f"Account used: {session.username}\n{explanation}")
            return JobOutcome(JobStatus.FAILED, message=message, kind=kind, account=session.username)

        log.success("Label delivered", file=label.filename)
        return JobOutcome(
            JobStatus.SUCCEEDED,
            message="Label generated",
            account=session.username,
            file_id=label.filename,
        )


__all__ = ["LabelJobHandler", "NO_ACTIVE_SESSION_MESSAGE", "make_label_id", "human_timestamp"]
