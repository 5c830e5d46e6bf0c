"""
Wallet session models.

WalletSession is immutable; every change produces a new instance through the
reducer in ``state_machine``. Messages are the only inputs the reducer accepts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ...providers.base import Network, Signer
from .errors import WalletErrorKind


class SessionStatus(str, Enum):
    """Connection state of a wallet session."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class WalletSession:
    """Current account/network/balance/error record for one mounted view."""
    status: SessionStatus = SessionStatus.DISCONNECTED
    account: Optional[str] = None
    signer: Optional[Signer] = None
    network: Optional[Network] = None
    balance: Optional[str] = None  # native units, decimal string

    # Orthogonal to status; may coexist with a connected account
    error: Optional[str] = None
    error_kind: Optional[WalletErrorKind] = None

    # Bumped on every account adoption or clear
    generation: int = 0

    def __post_init__(self) -> None:
        if (self.signer is None) != (self.account is None):
            raise ValueError("signer must be present exactly when account is present")
        if self.account is None and (self.network is not None or self.balance is not None):
            raise ValueError("network and balance require a connected account")
        if self.status == SessionStatus.CONNECTED and self.account is None:
            raise ValueError("connected session requires an account")
        if self.status != SessionStatus.CONNECTED and self.account is not None:
            raise ValueError(f"{self.status.value} session cannot hold an account")

    @property
    def is_connected(self) -> bool:
        return self.status == SessionStatus.CONNECTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "account": self.account,
            "network": self.network.to_dict() if self.network else None,
            "balance": self.balance,
            "error": self.error,
            "errorKind": self.error_kind.value if self.error_kind else None,
        }


# =============================================================================
# Messages
# =============================================================================

@dataclass(frozen=True)
class ConnectStarted:
    """An account access request is about to be issued."""


@dataclass(frozen=True)
class AccountAdopted:
    """The provider reported ``account`` as the active account."""
    account: str
    signer: Signer


@dataclass(frozen=True)
class ConnectFailed:
    """Discovery or an account access request failed."""
    kind: WalletErrorKind
    message: str


@dataclass(frozen=True)
class SessionCleared:
    """Drop account, signer, network and balance; optionally record why."""
    error_kind: Optional[WalletErrorKind] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class AccountInfoFetched:
    """Result of an info fetch issued for ``account`` at ``generation``."""
    account: str
    generation: int
    network: Optional[Network] = None
    balance: Optional[str] = None
    failed: bool = False
    message: Optional[str] = None


@dataclass(frozen=True)
class ErrorRaised:
    kind: WalletErrorKind
    message: str


@dataclass(frozen=True)
class ErrorCleared:
    pass


@dataclass
class AccountInfo:
    """Outcome of one network + balance query pair."""
    network: Optional[Network] = None
    balance: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)
