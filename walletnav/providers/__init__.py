"""Wallet provider capability and its implementations.

Import concrete providers from their modules (``walletnav.providers.eip1193``,
``walletnav.providers.mock``) or use ``walletnav.providers.factory.build_provider``.
"""

from .base import (
    ACCOUNTS_CHANGED,
    CHAIN_CHANGED,
    DISCONNECT,
    Network,
    Signer,
    TransactionRequest,
    WalletProvider,
)

__all__ = [
    "ACCOUNTS_CHANGED",
    "CHAIN_CHANGED",
    "DISCONNECT",
    "Network",
    "Signer",
    "TransactionRequest",
    "WalletProvider",
]
