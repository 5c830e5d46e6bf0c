"""
Wallet Session Module

Tracks one wallet session against an injected provider:
- WalletSessionManager: discovery, connect, provider events, teardown
- reduce(): the pure transition function every state change goes through
- ProviderEventBridge: paired subscribe/unsubscribe of provider events
- AccountInfoFetcher: network + balance queries with independent failure

Usage:
    from walletnav.core.wallet import WalletSessionManager

    manager = WalletSessionManager(provider, reloader=host)
    await manager.initialize()

    session = await manager.connect()
    if session.error:
        ...
    await manager.settle()
    print(session.account, manager.session.balance)

    manager.teardown()
"""

from .errors import (
    USER_REJECTED_CODE,
    USER_REJECTED_MESSAGE,
    INFO_FETCH_FAILED_MESSAGE,
    WalletErrorKind,
    WalletError,
    ProviderUnavailableError,
    ProviderRpcError,
    UserRejectedError,
    TransactionFailedError,
)
from .models import (
    SessionStatus,
    WalletSession,
    AccountInfo,
    ConnectStarted,
    AccountAdopted,
    ConnectFailed,
    SessionCleared,
    AccountInfoFetched,
    ErrorRaised,
    ErrorCleared,
)
from .state_machine import (
    TRANSITIONS,
    InvalidTransitionError,
    SessionMessage,
    is_stale,
    reduce,
)
from .info_fetcher import AccountInfoFetcher
from .event_bridge import ProviderEventBridge, SessionEventHandlers
from .session_manager import EnvironmentReloader, WalletSessionManager

__all__ = [
    # Errors
    "USER_REJECTED_CODE",
    "USER_REJECTED_MESSAGE",
    "INFO_FETCH_FAILED_MESSAGE",
    "WalletErrorKind",
    "WalletError",
    "ProviderUnavailableError",
    "ProviderRpcError",
    "UserRejectedError",
    "TransactionFailedError",
    # Models
    "SessionStatus",
    "WalletSession",
    "AccountInfo",
    "ConnectStarted",
    "AccountAdopted",
    "ConnectFailed",
    "SessionCleared",
    "AccountInfoFetched",
    "ErrorRaised",
    "ErrorCleared",
    # State machine
    "TRANSITIONS",
    "InvalidTransitionError",
    "SessionMessage",
    "is_stale",
    "reduce",
    # Components
    "AccountInfoFetcher",
    "ProviderEventBridge",
    "SessionEventHandlers",
    "EnvironmentReloader",
    "WalletSessionManager",
]
