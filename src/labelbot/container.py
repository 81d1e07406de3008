"""
Dependency injection container.

Wires configuration, storage, portal clients, queues and job handlers with
dependency-injector. Workers, the scheduler and the CLI all resolve their
collaborators from the global container.
"""

from __future__ import annotations

from datetime import timedelta

from dependency_injector import containers, providers

from labelbot.config import AppConfig, get_config
from labelbot.core.services import (
    AccountStore,
    BalanceTopUp,
    FundingClient,
    LabelJobHandler,
    LabelProtocolClient,
    Scheduler,
    SessionRefresher,
    SessionStore,
)
from labelbot.infrastructure.acquisition.browser_session import BrowserSessionAcquirer
from labelbot.infrastructure.ai import OpenAIAssistant, PassthroughExplainer
from labelbot.infrastructure.http import PortalClient
from labelbot.infrastructure.logging import get_logger
from labelbot.infrastructure.notify import LogNotifier, TelegramNotifier
from labelbot.infrastructure.queue import RQJobDispatcher
from labelbot.infrastructure.storage import RedisKeyValueStore, SQLiteLabelLedger, create_redis_connection


def _build_session_store(store, config: AppConfig, logger) -> SessionStore:
    return SessionStore(
        store,
        key=config.redis.sessions_key,
        fresh_for=timedelta(minutes=config.sessions.fresh_minutes),
        logger=logger,
    )


def _build_notifier(config: AppConfig, logger):
    if config.telegram.enabled:
        return TelegramNotifier(config.telegram, logger=logger)
    logger.warning("No bot token configured, notifications go to the log")
    return LogNotifier(logger)


def _build_assistant(config: AppConfig, logger):
    if not config.ai.enabled:
        return None
    return OpenAIAssistant(config.ai, logger=logger)


class ApplicationContainer(containers.DeclarativeContainer):
    """Declarative wiring of the application's singletons."""

    config = providers.Singleton(get_config)

    logger = providers.Singleton(get_logger)

    # Storage
    redis_connection = providers.Singleton(create_redis_connection, config=config.provided.redis)

    key_value_store = providers.Singleton(
        RedisKeyValueStore,
        redis_client=redis_connection,
        logger=logger,
    )

    account_store = providers.Singleton(
        AccountStore,
        store=key_value_store,
        key=config.provided.redis.accounts_key,
        logger=logger,
    )

    session_store = providers.Singleton(
        _build_session_store,
        store=key_value_store,
        config=config,
        logger=logger,
    )

    ledger = providers.Singleton(
        SQLiteLabelLedger,
        db_path=config.provided.ledger.path,
        logger=logger,
    )

    # Portal
    portal_client = providers.Singleton(PortalClient, config=config.provided.portal, logger=logger)

    label_protocol = providers.Singleton(LabelProtocolClient, portal=portal_client, logger=logger)

    funding_client = providers.Singleton(FundingClient, portal=portal_client, logger=logger)

    session_acquirer = providers.Singleton(
        BrowserSessionAcquirer,
        config=config.provided.browser,
        portal=portal_client,
        logger=logger,
    )

    # Requester side
    notifier = providers.Singleton(_build_notifier, config=config, logger=logger)

    assistant = providers.Singleton(_build_assistant, config=config, logger=logger)

    explainer = providers.Singleton(
        lambda assistant: assistant or PassthroughExplainer(),
        assistant=assistant,
    )

    # Queues
    dispatcher = providers.Singleton(
        RQJobDispatcher,
        connection=redis_connection,
        config=config.provided.queues,
        logger=logger,
    )

    # Handlers
    session_refresher = providers.Singleton(
        SessionRefresher,
        accounts=account_store,
        sessions=session_store,
        acquirer=session_acquirer,
        dispatcher=dispatcher,
        logger=logger,
    )

    label_job_handler = providers.Singleton(
        LabelJobHandler,
        sessions=session_store,
        protocol=label_protocol,
        ledger=ledger,
        notifier=notifier,
        explainer=explainer,
        logger=logger,
    )

    balance_top_up = providers.Singleton(
        BalanceTopUp,
        sessions=session_store,
        funding=funding_client,
        config=config.provided.funding,
        logger=logger,
    )

    scheduler = providers.Singleton(
        Scheduler,
        refresher=session_refresher,
        top_up=balance_top_up,
        config=config.provided.scheduler,
        logger=logger,
    )


_container: ApplicationContainer | None = None


def get_container() -> ApplicationContainer:
    """Return the global container, creating it on first use."""
    global _container
    if _container is None:
        _container = ApplicationContainer()
    return _container


def override_config(config: AppConfig) -> None:
    """Replace the configuration used by the global container."""
    container = get_container()
    container.config.override(providers.Object(config))


__all__ = [
    "ApplicationContainer",
    "get_container",
    "override_config",
]
