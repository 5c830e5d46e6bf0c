"""Selects the wallet provider present in this environment."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import Settings, settings
from ..services.units import parse_ether
from .base import WalletProvider
from .eip1193 import Eip1193Config, Eip1193Provider
from .mock import MockWalletProvider

logger = logging.getLogger(__name__)


def build_provider(config: Optional[Settings] = None) -> Optional[WalletProvider]:
    """Return the configured provider, or ``None`` when no wallet is available."""

    config = config or settings

    if config.feature_flag_mock_wallet:
        logger.info("Using in-memory wallet provider")
        return MockWalletProvider(
            accounts=[config.mock_wallet_account],
            balances={config.mock_wallet_account: parse_ether(config.mock_wallet_balance)},
        )

    if config.has_wallet_endpoint:
        logger.info(f"Using EIP-1193 wallet provider at {config.wallet_rpc_url}")
        return Eip1193Provider(
            Eip1193Config(rpc_url=config.wallet_rpc_url, timeout_s=config.rpc_timeout_seconds)
        )

    logger.warning(f"No wallet provider configured; {config.wallet_name} features disabled")
    return None
