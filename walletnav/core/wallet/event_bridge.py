"""
Provider Event Bridge

Installs the three wallet listeners (account change, network change,
disconnect) on a provider and removes exactly the same three. Raw provider
payloads are normalized before they reach the session handlers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from eth_utils import is_address, to_checksum_address

from ...providers.base import ACCOUNTS_CHANGED, CHAIN_CHANGED, DISCONNECT, WalletProvider
from ...services.chains import parse_chain_id


logger = logging.getLogger(__name__)


@dataclass
class SessionEventHandlers:
    """Normalized callbacks the bridge forwards provider events to."""
    on_accounts_changed: Callable[[List[str]], Any]
    on_chain_changed: Callable[[int], Any]
    on_disconnect: Callable[[str], Any]


class ProviderEventBridge:
    """
    Scoped subscription of a session to its provider's events.

    ``subscribe`` twice is a no-op; ``unsubscribe`` without a subscription is
    a no-op. Also usable as a (sync or async) context manager.
    """

    def __init__(self, provider: Optional[WalletProvider], handlers: SessionEventHandlers):
        self.provider = provider
        self.handlers = handlers
        self._registered = False
        self.subscribe_count = 0
        self.unsubscribe_count = 0

    @property
    def is_subscribed(self) -> bool:
        return self._registered

    def subscribe(self) -> None:
        if self._registered or not self.provider:
            return

        self.provider.on(ACCOUNTS_CHANGED, self._handle_accounts_changed)
        self.provider.on(CHAIN_CHANGED, self._handle_chain_changed)
        self.provider.on(DISCONNECT, self._handle_disconnect)

        self._registered = True
        self.subscribe_count += 1
        logger.info(f"Subscribed to {self.provider.name} wallet events")

    def unsubscribe(self) -> None:
        if not self._registered or not self.provider:
            return

        self.provider.remove_listener(ACCOUNTS_CHANGED, self._handle_accounts_changed)
        self.provider.remove_listener(CHAIN_CHANGED, self._handle_chain_changed)
        self.provider.remove_listener(DISCONNECT, self._handle_disconnect)

        self._registered = False
        self.unsubscribe_count += 1
        logger.info(f"Unsubscribed from {self.provider.name} wallet events")

    def __enter__(self) -> "ProviderEventBridge":
        self.subscribe()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.unsubscribe()

    async def __aenter__(self) -> "ProviderEventBridge":
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)

    # =========================================================================
    # Normalization
    # =========================================================================

    def _handle_accounts_changed(self, payload: Any) -> None:
        accounts = normalize_accounts(payload)
        if accounts is None:
            logger.warning(f"Ignoring accountsChanged with non-list payload: {payload!r}")
            return
        logger.debug(f"accountsChanged: {accounts}")
        self.handlers.on_accounts_changed(accounts)

    def _handle_chain_changed(self, payload: Any) -> None:
        try:
            chain_id = parse_chain_id(payload)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring chainChanged with malformed chain id: {payload!r}")
            return
        logger.info(f"Network changed to: {chain_id}")
        self.handlers.on_chain_changed(chain_id)

    def _handle_disconnect(self, payload: Any) -> None:
        reason = disconnect_reason(payload)
        logger.error(f"Wallet disconnected due to: {reason}")
        self.handlers.on_disconnect(reason)


def normalize_accounts(payload: Any) -> Optional[List[str]]:
    """Checksummed addresses from an accountsChanged payload.

    Entries that are not addresses are dropped. Returns ``None`` when the
    payload is not an account list at all.
    """
    if not isinstance(payload, (list, tuple)):
        return None

    accounts = [to_checksum_address(a) for a in payload if isinstance(a, str) and is_address(a)]
    if len(accounts) != len(payload):
        logger.warning(f"Dropped {len(payload) - len(accounts)} malformed account(s) from accountsChanged")
    return accounts


def disconnect_reason(payload: Any) -> str:
    if payload is None:
        return "unknown reason"
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("reason") or payload)
    message = getattr(payload, "message", None)
    return str(message or payload)
