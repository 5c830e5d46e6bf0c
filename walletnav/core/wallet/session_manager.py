"""
Wallet session manager.

Owns the WalletSession of one mounted navigation view and is the only thing
that mutates it. Lifecycle:
- initialize(): non-intrusive account discovery, then event subscription
- connect(): user-initiated account access request
- provider events: account change, network change, disconnect
- teardown(): unsubscribe and stop accepting writes
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Set

from ...config import settings
from ...providers.base import WalletProvider
from .errors import (
    INFO_FETCH_FAILED_MESSAGE,
    USER_REJECTED_MESSAGE,
    ProviderRpcError,
    ProviderUnavailableError,
    WalletError,
    WalletErrorKind,
    connection_error_message,
    disconnect_message,
    provider_unavailable_message,
)
from .event_bridge import ProviderEventBridge, SessionEventHandlers
from .info_fetcher import AccountInfoFetcher
from .models import (
    AccountAdopted,
    AccountInfoFetched,
    ConnectFailed,
    ConnectStarted,
    ErrorCleared,
    ErrorRaised,
    SessionCleared,
    WalletSession,
)
from .state_machine import SessionMessage, is_stale, reduce


class EnvironmentReloader(Protocol):
    """Capability that rebuilds the whole wallet environment from scratch."""

    def request_reload(self, reason: str) -> None:
        ...


SessionListener = Callable[[WalletSession], None]


class WalletSessionManager:
    """
    Drives one wallet session through its state machine.

    Provider events are applied synchronously in delivery order. Info fetches
    run as tasks tagged with the account and generation they were issued for;
    results that no longer match the session are dropped. connect() and
    initialize() are serialized by a lock.
    """

    def __init__(
        self,
        provider: Optional[WalletProvider],
        reloader: Optional[EnvironmentReloader] = None,
        fetcher: Optional[AccountInfoFetcher] = None,
        wallet_name: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.provider = provider
        self.reloader = reloader
        self.fetcher = fetcher or AccountInfoFetcher()
        self.wallet_name = wallet_name or settings.wallet_name
        self.logger = logger or logging.getLogger(__name__)

        self._session = WalletSession()
        self._bridge = ProviderEventBridge(
            provider,
            SessionEventHandlers(
                on_accounts_changed=self.on_accounts_changed,
                on_chain_changed=self.on_chain_changed,
                on_disconnect=self.on_disconnect,
            ),
        )
        self._lock = asyncio.Lock()
        self._alive = True
        self._reload_requested = False
        self._pending: Set["asyncio.Task[None]"] = set()
        self._listeners: List[SessionListener] = []

    @property
    def session(self) -> WalletSession:
        return self._session

    @property
    def bridge(self) -> ProviderEventBridge:
        return self._bridge

    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def reload_requested(self) -> bool:
        return self._reload_requested

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the current session, tagged with liveness."""
        data = self._session.to_dict()
        data["alive"] = self._alive
        return data

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callback invoked with every new session."""
        self._listeners.append(listener)

    # =========================================================================
    # Transition function
    # =========================================================================

    def dispatch(self, message: SessionMessage) -> WalletSession:
        """Apply ``message`` to the session. Dropped once the session is dead."""
        if not self._alive:
            self.logger.debug(f"Dropping {type(message).__name__}: session torn down")
            return self._session

        previous = self._session
        self._session = reduce(previous, message)

        if self._session is previous:
            return previous

        if previous.status != self._session.status:
            self.logger.info(
                f"Wallet session: {previous.status.value} -> {self._session.status.value}"
            )
        if self._session.error and self._session.error != previous.error:
            self.logger.warning(f"Wallet error ({self._session.error_kind}): {self._session.error}")

        for listener in self._listeners:
            try:
                listener(self._session)
            except Exception as e:
                self.logger.error(f"Session listener error: {e}")

        return self._session

    # =========================================================================
    # Operations
    # =========================================================================

    async def initialize(self) -> WalletSession:
        """Discover already-authorized accounts, then subscribe to provider events."""
        try:
            self._require_provider()
        except ProviderUnavailableError as e:
            self.dispatch(ErrorRaised(kind=e.kind, message=e.message))
            return self._session

        async with self._lock:
            try:
                try:
                    accounts = await self.provider.list_accounts()
                except Exception as e:
                    self.logger.error(f"Account discovery failed: {e}", exc_info=True)
                    self.dispatch(ErrorRaised(
                        kind=WalletErrorKind.CONNECTION_FAILED,
                        message=connection_error_message(self.wallet_name, e),
                    ))
                    accounts = []

                if accounts and self._alive:
                    self._adopt(accounts[0])
            finally:
                # Subscribe even when discovery found nothing, unless the view
                # was unmounted while discovery was in flight.
                if self._alive:
                    self._bridge.subscribe()

        return self._session

    async def connect(self) -> WalletSession:
        """Request account access from the provider (may prompt the user)."""
        try:
            self._require_provider()
        except ProviderUnavailableError as e:
            self.dispatch(ErrorRaised(kind=e.kind, message=e.message))
            return self._session

        async with self._lock:
            if not self._alive:
                return self._session

            self.dispatch(ConnectStarted())
            try:
                accounts = await self.provider.request_accounts()
            except ProviderRpcError as e:
                if e.is_user_rejection:
                    self.dispatch(ConnectFailed(
                        kind=WalletErrorKind.USER_REJECTED,
                        message=USER_REJECTED_MESSAGE,
                    ))
                else:
                    self.logger.error(f"Wallet connection failed: {e}")
                    self.dispatch(ConnectFailed(
                        kind=WalletErrorKind.CONNECTION_FAILED,
                        message=connection_error_message(self.wallet_name, e),
                    ))
                return self._session
            except Exception as e:
                self.logger.error(f"Wallet connection failed: {e}", exc_info=True)
                self.dispatch(ConnectFailed(
                    kind=WalletErrorKind.CONNECTION_FAILED,
                    message=connection_error_message(self.wallet_name, e),
                ))
                return self._session

            if not accounts:
                self.dispatch(ConnectFailed(
                    kind=WalletErrorKind.CONNECTION_FAILED,
                    message=connection_error_message(
                        self.wallet_name, WalletError("no accounts returned")
                    ),
                ))
                return self._session

            if self._adopt(accounts[0]) is not None:
                self.dispatch(ErrorCleared())

        return self._session

    def on_accounts_changed(self, accounts: List[str]) -> Optional["asyncio.Task[None]"]:
        """Adopt the first account, or disconnect when the list is empty.

        Returns the info fetch task, if one was started.
        """
        if not self._alive:
            return None

        if not accounts:
            self.logger.info("Wallet disconnected: no accounts available")
            self.dispatch(SessionCleared())
            return None

        if not self.provider:
            return None
        return self._adopt(accounts[0])

    def on_chain_changed(self, chain_id: int) -> None:
        """Retire this session and request a full environment reload, once."""
        if not self._alive or self._reload_requested:
            return

        self._reload_requested = True
        self.logger.info(f"Network changed to {chain_id}; reloading wallet environment")
        self.teardown()

        if self.reloader is None:
            self.logger.warning("No environment reloader configured; session stays retired")
            return
        self.reloader.request_reload(f"chainChanged:{chain_id}")

    def on_disconnect(self, reason: str) -> None:
        if not self._alive:
            return
        self.dispatch(SessionCleared(
            error_kind=WalletErrorKind.DISCONNECTED,
            message=disconnect_message(self.wallet_name, reason),
        ))

    def teardown(self) -> None:
        """Remove provider subscriptions and stop accepting writes. Idempotent."""
        self._bridge.unsubscribe()
        if self._alive:
            self._alive = False
            self.logger.debug("Wallet session torn down")

    async def settle(self) -> None:
        """Wait for every in-flight info fetch to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_provider(self) -> WalletProvider:
        if not self.provider:
            raise ProviderUnavailableError(provider_unavailable_message(self.wallet_name))
        return self.provider

    def _adopt(self, account: str) -> Optional["asyncio.Task[None]"]:
        if not self._alive:
            return None
        try:
            signer = self.provider.get_signer(account)
        except Exception as e:
            self.logger.error(f"Could not derive signer for {account}: {e}", exc_info=True)
            self.dispatch(ConnectFailed(
                kind=WalletErrorKind.CONNECTION_FAILED,
                message=connection_error_message(self.wallet_name, e),
            ))
            return None
        session = self.dispatch(AccountAdopted(account=account, signer=signer))
        return self._schedule_fetch(account, session.generation)

    def _schedule_fetch(self, account: str, generation: int) -> "asyncio.Task[None]":
        task = asyncio.create_task(self._fetch_info(account, generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _fetch_info(self, account: str, generation: int) -> None:
        info = await self.fetcher.fetch(account, self.provider)

        if not self._alive:
            self.logger.debug(f"Discarding account info for {account}: session torn down")
            return

        message = AccountInfoFetched(
            account=account,
            generation=generation,
            network=info.network,
            balance=info.balance,
            failed=info.failed,
            message=INFO_FETCH_FAILED_MESSAGE if info.failed else None,
        )
        if is_stale(self._session, message):
            self.logger.info(
                f"Discarding stale account info for {account} "
                f"(current: {self._session.account})"
            )
            return

        self.dispatch(message)
