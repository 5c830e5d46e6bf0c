"""
EIP-1193 Wallet Provider.

Speaks JSON-RPC to a wallet endpoint (a browser-wallet relay or a local dev
node such as anvil/hardhat). Provider events are pushed in with ``emit``.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from eth_utils import is_address, to_checksum_address

from .base import Network, TransactionRequest, WalletProvider
from ..config import settings
from ..core.wallet.errors import DISCONNECTED_CODE, ProviderRpcError
from ..services.chains import network_name, parse_chain_id


@dataclass
class Eip1193Config:
    rpc_url: str
    timeout_s: int = 30


class Eip1193Provider(WalletProvider):
    name = "eip1193"

    def __init__(self, config: Optional[Eip1193Config] = None) -> None:
        super().__init__()
        self._config = config or Eip1193Config(
            rpc_url=settings.wallet_rpc_url,
            timeout_s=settings.rpc_timeout_seconds,
        )
        self.timeout_s = self._config.timeout_s
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    async def ready(self) -> bool:
        return bool(self._config.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Wallet endpoint not configured"}

        try:
            result = await self.request("eth_chainId")
            return {"status": "healthy", "chainId": parse_chain_id(result)}
        except Exception as exc:
            return {"status": "error", "reason": str(exc)}

    async def list_accounts(self) -> List[str]:
        return self._accounts(await self.request("eth_accounts"))

    async def request_accounts(self) -> List[str]:
        return self._accounts(await self.request("eth_requestAccounts"))

    async def get_network(self) -> Network:
        chain_id = parse_chain_id(await self.request("eth_chainId"))
        return Network(name=network_name(chain_id), chain_id=chain_id)

    async def get_balance(self, address: str) -> int:
        result = await self.request("eth_getBalance", [address, "latest"])
        if not isinstance(result, str):
            raise ProviderRpcError("Invalid response for eth_getBalance")
        return int(result, 16)

    async def send_transaction(self, tx: TransactionRequest) -> str:
        payload: Dict[str, Any] = {"to": to_checksum_address(tx.to), "value": hex(tx.value)}
        if tx.sender:
            payload["from"] = to_checksum_address(tx.sender)
        result = await self.request("eth_sendTransaction", [payload])
        if not isinstance(result, str):
            raise ProviderRpcError("Invalid response for eth_sendTransaction")
        return result

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if not await self.ready():
            raise ProviderRpcError("Wallet endpoint is not configured", code=DISCONNECTED_CODE)

        if not self._client or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)

        response = await self._client.post(
            self._config.rpc_url,
            json={"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params or []},
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        payload = response.json()
        if "error" in payload:
            error = payload["error"] or {}
            raise ProviderRpcError(
                error.get("message", "Unknown provider error"),
                code=error.get("code", -32603),
                data=error.get("data"),
            )
        return payload.get("result")

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    @staticmethod
    def _accounts(result: Any) -> List[str]:
        if not isinstance(result, list):
            raise ProviderRpcError("Invalid accounts response")
        return [to_checksum_address(a) for a in result if isinstance(a, str) and is_address(a)]
