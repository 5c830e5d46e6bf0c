"""
Deterministic in-memory wallet.

Used for local development (``feature_flag_mock_wallet``) and in tests, where
call counts, failures and response timing need to be controlled.
"""

from __future__ import annotations

import asyncio
import hashlib
from typing import Dict, List, Optional

from .base import (
    ACCOUNTS_CHANGED,
    CHAIN_CHANGED,
    DISCONNECT,
    Network,
    TransactionRequest,
    WalletProvider,
)
from ..core.wallet.errors import DISCONNECTED_CODE, UNAUTHORIZED_CODE, ProviderRpcError, UserRejectedError
from ..services.chains import network_name


class MockWalletProvider(WalletProvider):
    name = "mock"

    def __init__(
        self,
        accounts: Optional[List[str]] = None,
        authorized: bool = False,
        chain_id: int = 1,
        balances: Optional[Dict[str, int]] = None,
    ) -> None:
        super().__init__()
        self.accounts = list(accounts or [])
        self.authorized = authorized
        self.chain_id = chain_id
        self.balances = {k.lower(): v for k, v in (balances or {}).items()}

        # Failure injection
        self.reject_requests = False
        self.request_error: Optional[Exception] = None
        self.network_error: Optional[Exception] = None
        self.balance_error: Optional[Exception] = None
        self.transaction_error: Optional[Exception] = None

        # Per-address gates; a balance query waits until its gate is set
        self.balance_gates: Dict[str, asyncio.Event] = {}
        self.discovery_gate: Optional[asyncio.Event] = None

        self.calls: Dict[str, int] = {}
        self.sent: List[TransactionRequest] = []

    def _record(self, method: str) -> None:
        self.calls[method] = self.calls.get(method, 0) + 1

    async def list_accounts(self) -> List[str]:
        self._record("list_accounts")
        if self.discovery_gate is not None:
            await self.discovery_gate.wait()
        return list(self.accounts) if self.authorized else []

    async def request_accounts(self) -> List[str]:
        self._record("request_accounts")
        await asyncio.sleep(0)
        if self.reject_requests:
            raise UserRejectedError()
        if self.request_error is not None:
            raise self.request_error
        self.authorized = True
        return list(self.accounts)

    async def get_network(self) -> Network:
        self._record("get_network")
        await asyncio.sleep(0)
        if self.network_error is not None:
            raise self.network_error
        return Network(name=network_name(self.chain_id), chain_id=self.chain_id)

    async def get_balance(self, address: str) -> int:
        self._record("get_balance")
        gate = self.balance_gates.get(address.lower())
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if self.balance_error is not None:
            raise self.balance_error
        return self.balances.get(address.lower(), 0)

    async def send_transaction(self, tx: TransactionRequest) -> str:
        self._record("send_transaction")
        await asyncio.sleep(0)
        if self.transaction_error is not None:
            raise self.transaction_error
        if not self.authorized or (tx.sender and tx.sender not in self.accounts):
            raise ProviderRpcError("The requested account has not been authorized", code=UNAUTHORIZED_CODE)
        self.sent.append(tx)
        digest = hashlib.sha256(f"{tx.sender}:{tx.to}:{tx.value}:{len(self.sent)}".encode()).hexdigest()
        return f"0x{digest}"

    # Simulated wallet UI actions

    def switch_account(self, account: str) -> None:
        self.accounts = [account] + [a for a in self.accounts if a != account]
        self.emit(ACCOUNTS_CHANGED, list(self.accounts))

    def lock(self) -> None:
        self.authorized = False
        self.emit(ACCOUNTS_CHANGED, [])

    def switch_chain(self, chain_id: int) -> None:
        self.chain_id = chain_id
        self.emit(CHAIN_CHANGED, hex(chain_id))

    def drop_connection(self, message: str = "Provider disconnected") -> None:
        self.emit(DISCONNECT, ProviderRpcError(message, code=DISCONNECTED_CODE))
