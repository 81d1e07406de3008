"""Application services."""

from labelbot.core.services.account_store import AccountStore
from labelbot.core.services.bootstrap import bootstrap_accounts, read_accounts_file
from labelbot.core.services.funding import BalanceTopUp, FundingClient, TopUpReport
from labelbot.core.services.label_jobs import LabelJobHandler, make_label_id
from labelbot.core.services.label_protocol import LabelProtocolClient
from labelbot.core.services.scheduler import PeriodicTrigger, Scheduler
from labelbot.core.services.session_refresh import SessionRefresher
from labelbot.core.services.session_store import SessionStore

__all__ = [
    "AccountStore",
    "bootstrap_accounts",
    "read_accounts_file",
    "BalanceTopUp",
    "FundingClient",
    "TopUpReport",
    "LabelJobHandler",
    "make_label_id",
    "LabelProtocolClient",
    "PeriodicTrigger",
    "Scheduler",
    "SessionRefresher",
    "SessionStore",
]
