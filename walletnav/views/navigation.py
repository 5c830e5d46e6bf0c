"""
Navigation bar view.

Presentation glue over a WalletSessionManager: renders the connect button or
the account panel, the inline error line and the cart count, and runs the
example transfer. Never mutates the session directly.
"""

import logging
from typing import Optional

from ..config import Settings, settings
from ..core.wallet import TransactionFailedError, WalletSession, WalletSessionManager
from ..services.cart import CartCounter, EmptyCart
from ..services.chains import native_symbol
from ..services.units import parse_ether
from ..types import AccountPanel, NavigationModel, NavLink, NetworkInfo, TransferResult


logger = logging.getLogger(__name__)


class NavigationView:
    def __init__(
        self,
        manager: WalletSessionManager,
        cart: Optional[CartCounter] = None,
        config: Optional[Settings] = None,
    ):
        self.manager = manager
        self.cart = cart or EmptyCart()
        self.config = config or settings
        self.last_transfer: Optional[TransferResult] = None

    @property
    def session(self) -> WalletSession:
        return self.manager.session

    async def mount(self) -> NavigationModel:
        await self.manager.initialize()
        return self.render()

    def unmount(self) -> None:
        self.manager.teardown()

    async def connect(self) -> NavigationModel:
        await self.manager.connect()
        return self.render()

    @property
    def balance_symbol(self) -> str:
        """Native symbol of the session's network, falling back to the configured one."""
        network = self.session.network
        if network is None:
            return self.config.native_symbol
        return native_symbol(network.chain_id, default=self.config.native_symbol)

    @property
    def transfer_label(self) -> str:
        return f"Send {self.config.example_transfer_value} {self.balance_symbol} (Example)"

    def render(self) -> NavigationModel:
        session = self.session

        account_panel = None
        if session.is_connected:
            account_panel = AccountPanel(
                account=session.account,
                network=(
                    NetworkInfo(name=session.network.name, chain_id=session.network.chain_id)
                    if session.network else None
                ),
                balance=session.balance,
                balance_symbol=self.balance_symbol,
                can_transfer=session.signer is not None,
                transfer_label=self.transfer_label if session.signer else None,
            )

        return NavigationModel(
            brand=self.config.store_name,
            links=[NavLink(**link) for link in self.config.nav_links],
            cart_count=self.cart.count(),
            status=session.status.value,
            connect_label=None if session.is_connected else f"Connect {self.config.wallet_name}",
            account=account_panel,
            error=session.error,
        )

    async def send_example_transfer(self) -> TransferResult:
        """Submit the illustrative transfer. Failures are reported inline only."""
        signer = self.session.signer
        if signer is None:
            result = self._failed(TransactionFailedError("no wallet connected"))
        else:
            try:
                tx_hash = await signer.send_transaction(
                    to=self.config.example_transfer_to,
                    value=parse_ether(self.config.example_transfer_value),
                )
            except Exception as e:
                logger.error(f"Transaction error: {e}", exc_info=True)
                detail = getattr(e, "message", None) or str(e)
                result = self._failed(TransactionFailedError(detail))
            else:
                logger.info(f"Transaction sent: {tx_hash}")
                result = TransferResult(
                    success=True,
                    tx_hash=tx_hash,
                    message=f"Transaction sent! Hash: {tx_hash}",
                )

        self.last_transfer = result
        return result

    @staticmethod
    def _failed(error: TransactionFailedError) -> TransferResult:
        return TransferResult(success=False, message=f"Transaction failed: {error.message}")


def render_text(model: NavigationModel) -> str:
    """Plain-text rendering of the navigation bar, used by the CLI."""
    lines = [
        f"{model.brand}  |  " + "  ".join(link.label for link in model.links) + f"  |  Cart ({model.cart_count})",
    ]
    if model.account is None:
        lines.append(f"[ {model.connect_label} ]")
    else:
        lines.append(f"Connected Account: {model.account.account}")
        if model.account.network:
            lines.append(
                f"Network: {model.account.network.name} (Chain ID: {model.account.network.chain_id})"
            )
        if model.account.balance:
            lines.append(f"Balance: {model.account.balance} {model.account.balance_symbol}")
        if model.account.can_transfer:
            lines.append(f"[ {model.account.transfer_label} ]")
    if model.error:
        lines.append(f"Error: {model.error}")
    return "\n".join(lines)
