"""Session refresh cycle: fan-out on the scheduler side, acquisition on the worker side."""

from __future__ import annotations

from labelbot.core.exceptions import AccountError, AccountErrorKind
from labelbot.core.interfaces import JobDispatcher, SessionAcquirer
from labelbot.core.models import JobOutcome, JobStatus, SessionJob, enabled_accounts
from labelbot.core.services.account_store import AccountStore
from labelbot.core.services.session_store import SessionStore
from labelbot.infrastructure.logging import get_logger


class SessionRefresher:
    """Rebuilds the session pool from the enabled accounts."""

    def __init__(
        self,
        accounts: AccountStore,
        sessions: SessionStore,
        acquirer: SessionAcquirer,
        dispatcher: JobDispatcher,
        *,
        logger=None,
    ):
        self.accounts = accounts
        self.sessions = sessions
        self.acquirer = acquirer
        self.dispatcher = dispatcher
        self.logger = (logger or get_logger()).bind(component="session_refresh")

    def schedule_refresh(self) -> list[str]:
        """Drop every session and queue one refresh job per enabled account."""

        self.sessions.clear()
        job_ids = []
        for account in enabled_accounts(self.accounts.list()):
            job = SessionJob(username=account.username, password=account.password)
            job_ids.append(self.dispatcher.enqueue_session_job(job))
        self.logger.info("Session refresh queued", jobs=len(job_ids))
        return job_ids

    def refresh(self, job: SessionJob) -> JobOutcome:
        """
        Acquire a session for one account and store it.

        ``CANNOT_LOGIN`` removes the account and its session and is not
        retried. Any other failure is logged and re-raised so the queue can
        spend its retry.
        """
        log = self.logger.bind(account=job.username)
        log.info("Acquiring session")
        try:
            session = self.acquirer.acquire(job.username, job.password)
        except AccountError as e:
            if e.kind is not AccountErrorKind.CANNOT_LOGIN:
                log.error("Session acquisition failed", error=e.message, kind=e.kind.value)
                raise
            self.forget(job.username)
            log.error("Login rejected, account removed", error=e.message)
            return JobOutcome(JobStatus.FAILED, message=e.message, kind=e.kind, account=job.username)
        except Exception as e:
            log.error("Session acquisition failed", error=str(e))
            raise

        self.sessions.set_for_username(job.username, session)
        log.success("Session stored", user_id=session.user_id, balance=session.balance)
        return JobOutcome(JobStatus.SUCCEEDED, message="Session stored", account=job.username)

    def forget(self, username: str) -> None:
        """Delete an account together with its session."""

        try:
            self.accounts.delete(username)
        except AccountError as e:
            self.logger.warning("Account could not be deleted", account=username, error=e.message)
        self.sessions.delete(username)


__all__ = ["SessionRefresher"]
