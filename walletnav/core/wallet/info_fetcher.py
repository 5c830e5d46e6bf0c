"""
Account information fetcher.

Queries network identity and native balance for a connected account. The two
queries are independent: one failing never discards the other's result.
"""

import asyncio
import logging

from ...providers.base import WalletProvider
from ...services.units import format_ether
from .models import AccountInfo


logger = logging.getLogger(__name__)


class AccountInfoFetcher:
    """Fetches network and balance for an account. No retries."""

    async def fetch(self, account: str, provider: WalletProvider) -> AccountInfo:
        network_result, balance_result = await asyncio.gather(
            provider.get_network(),
            provider.get_balance(account),
            return_exceptions=True,
        )

        info = AccountInfo()

        if isinstance(network_result, BaseException):
            self._check_cancelled(network_result)
            logger.error(f"Network query failed for {account}: {network_result}")
            info.errors.append(f"network: {network_result}")
        else:
            info.network = network_result

        if isinstance(balance_result, BaseException):
            self._check_cancelled(balance_result)
            logger.error(f"Balance query failed for {account}: {balance_result}")
            info.errors.append(f"balance: {balance_result}")
        else:
            try:
                info.balance = format_ether(balance_result)
            except (TypeError, ValueError) as e:
                logger.error(f"Unusable balance for {account}: {balance_result!r} ({e})")
                info.errors.append(f"balance: {e}")

        return info

    @staticmethod
    def _check_cancelled(result: BaseException) -> None:
        if isinstance(result, asyncio.CancelledError):
            raise result
