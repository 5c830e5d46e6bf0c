"""
Wallet Error Classification

Every failure the wallet core can observe maps onto one WalletErrorKind.
Errors are caught at the boundary where they occur and surfaced as the
session's ``error`` message; none reach the presentation layer as exceptions.
"""

from enum import Enum
from typing import Any, Optional


# EIP-1193 provider error codes
USER_REJECTED_CODE = 4001
UNAUTHORIZED_CODE = 4100
DISCONNECTED_CODE = 4900


class WalletErrorKind(str, Enum):
    """Categories of wallet errors."""

    PROVIDER_UNAVAILABLE = "provider_unavailable"  # No wallet in the environment
    USER_REJECTED = "user_rejected"                # Account access declined
    CONNECTION_FAILED = "connection_failed"        # Any other connect failure
    INFO_FETCH_FAILED = "info_fetch_failed"        # Network/balance query failed
    TRANSACTION_FAILED = "transaction_failed"      # Example transfer failed
    DISCONNECTED = "disconnected"                  # Provider-initiated disconnect


class WalletError(Exception):
    """Base class for wallet core errors."""

    kind: WalletErrorKind = WalletErrorKind.CONNECTION_FAILED

    def __init__(self, message: str, kind: Optional[WalletErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ProviderUnavailableError(WalletError):
    """No wallet provider is present in the environment."""

    kind = WalletErrorKind.PROVIDER_UNAVAILABLE


class ProviderRpcError(WalletError):
    """Error returned by the wallet provider, carrying its numeric code."""

    def __init__(self, message: str, code: int = -32603, data: Any = None):
        kind = WalletErrorKind.USER_REJECTED if code == USER_REJECTED_CODE else None
        super().__init__(message, kind=kind)
        self.code = code
        self.data = data

    @property
    def is_user_rejection(self) -> bool:
        return self.code == USER_REJECTED_CODE

    def __str__(self) -> str:
        return f"{self.message} (code {self.code})"


class UserRejectedError(ProviderRpcError):
    """The user declined the account access request."""

    def __init__(self, message: str = "User rejected the request."):
        super().__init__(message, code=USER_REJECTED_CODE)


class TransactionFailedError(WalletError):
    """The illustrative transfer could not be submitted."""

    kind = WalletErrorKind.TRANSACTION_FAILED


def provider_unavailable_message(wallet_name: str) -> str:
    return f"{wallet_name} is not installed. Please install it to use this store."


def connection_error_message(wallet_name: str, error: BaseException) -> str:
    detail = getattr(error, "message", None) or str(error) or error.__class__.__name__
    return f"Error connecting to {wallet_name}: {detail}"


def disconnect_message(wallet_name: str, reason: str) -> str:
    return f"{wallet_name} disconnected: {reason}"


USER_REJECTED_MESSAGE = "Connection rejected by user."
INFO_FETCH_FAILED_MESSAGE = "Could not fetch account information."
