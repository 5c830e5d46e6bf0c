from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging


logger = logging.getLogger(__name__)

ACCOUNTS_CHANGED = "accountsChanged"
CHAIN_CHANGED = "chainChanged"
DISCONNECT = "disconnect"

ProviderListener = Callable[[Any], Any]


@dataclass(frozen=True)
class Network:
    """Network identity reported by the provider."""
    name: str
    chain_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "chainId": self.chain_id}


@dataclass(frozen=True)
class TransactionRequest:
    """A native-value transfer."""
    to: str
    value: int  # wei
    sender: Optional[str] = None


class WalletProvider(ABC):
    """Wallet provider capability as consumed by the session core.

    Concrete providers supply the RPC methods; listener bookkeeping is shared.
    """

    name: str
    timeout_s: int = 30

    def __init__(self) -> None:
        self._listeners: Dict[str, List[ProviderListener]] = {}

    @abstractmethod
    async def list_accounts(self) -> List[str]:
        """Return already-authorized accounts without prompting the user"""
        pass

    @abstractmethod
    async def request_accounts(self) -> List[str]:
        """Request account access; may prompt and may raise ProviderRpcError(4001)"""
        pass

    @abstractmethod
    async def get_network(self) -> Network:
        """Return the current network identity"""
        pass

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Return the native balance of ``address`` in wei"""
        pass

    @abstractmethod
    async def send_transaction(self, tx: TransactionRequest) -> str:
        """Submit a transaction and return its hash"""
        pass

    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        return {"status": "healthy", "name": self.name}

    def get_signer(self, account: str) -> "Signer":
        """Derive a signer scoped to ``account``."""
        return Signer(provider=self, address=account)

    # Event listeners

    def on(self, event: str, listener: ProviderListener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: ProviderListener) -> None:
        if event in self._listeners:
            self._listeners[event] = [
                cb for cb in self._listeners[event] if cb != listener
            ]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, payload: Any = None) -> int:
        """Deliver ``payload`` to every listener of ``event`` in registration order."""
        listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"Provider listener error for {event}: {e}", exc_info=True)
        return len(listeners)


class Signer:
    """Authorization capability scoped to one account."""

    def __init__(self, provider: WalletProvider, address: str):
        self.provider = provider
        self.address = address

    async def send_transaction(self, to: str, value: int) -> str:
        return await self.provider.send_transaction(
            TransactionRequest(to=to, value=value, sender=self.address)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signer):
            return NotImplemented
        return self.provider is other.provider and self.address.lower() == other.address.lower()

    def __hash__(self) -> int:
        return hash((id(self.provider), self.address.lower()))

    def __repr__(self) -> str:
        return f"Signer(address={self.address!r}, provider={self.provider.name!r})"
