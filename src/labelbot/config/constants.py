"""Default values shared by the configuration models."""

from __future__ import annotations

from typing import Dict

ENV_PREFIX = "LABELBOT_"

VALID_ENVIRONMENTS = {"development", "production", "test"}

LEVEL_VALUES: Dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "SUCCESS": 25,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

# Persisted collections
ACCOUNTS_KEY = "accounts"
SESSIONS_KEY = "sessions"
DEFAULT_ACCOUNTS_FILE = "data/accounts.json"

# Queues
SESSION_QUEUE_NAME = "session-gen"
LABEL_QUEUE_NAME = "label-gen"
SESSION_JOB_RETRIES = 1
LABEL_JOB_RETRIES = 0

# Scheduler
REFRESH_INTERVAL_SECONDS = 15 * 60
TOPUP_INTERVAL_SECONDS = 5 * 60

# Sessions
SESSION_FRESH_MINUTES = 5

# Funding
BALANCE_FLOOR = 500
MIN_PURCHASE_AMOUNT = 10
MAX_PURCHASE_AMOUNT = 500

# Portal
PORTAL_BASE_URL = "https://print.stamps.com"
PORTAL_REFERER = "https://print.stamps.com/"
CREATE_INDICIUM_PATH = "/WebPostage/Ajax/CreateIndicium.aspx?env=WebPostage"
CREATE_TWO_UP_PATH = "/WebPostage/Ajax/CreateTwoUpLabel.aspx"
ACCOUNT_INFO_PATH = "/WebPostage/Ajax/GetAccountInfo.aspx"
PURCHASE_POSTAGE_PATH = "/WebPostage/Ajax/PurchasePostage.aspx"
RENDER_QUERY = "&printType=pdf&scale=100:98&labelMargins=0:0:0:0"

CLIENT_HINT_HEADERS: Dict[str, str] = {
    "sec-ch-ua": '"Brave";v="125", "Chromium";v="125", "Not.A/Brand";v="24"',
    "sec-ch-ua-platform": '"Linux"',
    "sec-ch-ua-mobile": "?0",
}

XHR_HEADERS: Dict[str, str] = {
    "accept": "*/*",
    "accept-language": "en-US,en;q=0.9",
    "content-type": "application/x-www-form-urlencoded; charset=UTF-8",
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-origin",
    "x-requested-with": "XMLHttpRequest",
    "Referrer-Policy": "strict-origin",
}

# Browser login
LOGIN_URL = "https://print.endicia.com/SignIn/Default.aspx"
LOGIN_TIMEOUT_SECONDS = 140
DEFAULT_SELECTORS: Dict[str, str] = {
    "username_input": 'input[type="text"][placeholder="USERNAME"]',
    "password_input": 'input[type="password"][placeholder="PASSWORD"]',
    "login_button": "a.signin-button",
}
USER_INFO_COOKIE = "user-info"

# Notifications
TELEGRAM_API_URL = "https://api.telegram.org"

# AI
DEFAULT_AI_MODEL = "gpt-4o-mini"

# Ledger
DEFAULT_LEDGER_PATH = "data/labels.db"
