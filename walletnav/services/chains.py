"""Network naming for chain ids reported by the wallet."""

from __future__ import annotations

from typing import Any, Dict, Union

# Names follow the conventions wallets and ethers-style libraries report.
CHAIN_METADATA: Dict[int, Dict[str, Any]] = {
    1: {'name': 'homestead', 'native_symbol': 'ETH'},
    5: {'name': 'goerli', 'native_symbol': 'ETH'},
    10: {'name': 'optimism', 'native_symbol': 'ETH'},
    56: {'name': 'bnb', 'native_symbol': 'BNB'},
    137: {'name': 'matic', 'native_symbol': 'MATIC'},
    8453: {'name': 'base', 'native_symbol': 'ETH'},
    42161: {'name': 'arbitrum', 'native_symbol': 'ETH'},
    11155111: {'name': 'sepolia', 'native_symbol': 'ETH'},
}

UNKNOWN_NETWORK = 'unknown'


def parse_chain_id(value: Union[str, int]) -> int:
    """Normalize a chain id given as ``0x``-hex, decimal string or int.

    Raises ``ValueError`` for anything else.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid chain id: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text.startswith('0x'):
        return int(text, 16)
    return int(text)


def network_name(chain_id: int) -> str:
    """Return the conventional network name for ``chain_id``."""

    details = CHAIN_METADATA.get(chain_id)
    return details['name'] if details else UNKNOWN_NETWORK


def native_symbol(chain_id: int, default: str = 'ETH') -> str:
    """Return the native currency symbol of ``chain_id``, or ``default`` if unknown."""

    details = CHAIN_METADATA.get(chain_id)
    return details['native_symbol'] if details else default


__all__ = [
    'CHAIN_METADATA',
    'UNKNOWN_NETWORK',
    'parse_chain_id',
    'network_name',
    'native_symbol',
]
