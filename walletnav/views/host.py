"""
Navigation host.

Keeps the currently mounted NavigationView and implements the environment
reload capability: a reload unmounts the view and mounts a brand-new one with
fresh session state against the same (shared) provider.
"""

import asyncio
import logging
from typing import Optional
from uuid import uuid4

from ..config import Settings, settings
from ..core.wallet import WalletSessionManager
from ..logging_config import bind_session_context, clear_session_context
from ..providers.base import WalletProvider
from ..services.cart import CartCounter
from .navigation import NavigationView


logger = logging.getLogger(__name__)


class NavigationHost:
    def __init__(
        self,
        provider: Optional[WalletProvider],
        cart: Optional[CartCounter] = None,
        config: Optional[Settings] = None,
    ):
        self.provider = provider
        self.cart = cart
        self.config = config or settings

        self.view: Optional[NavigationView] = None
        self.session_id: Optional[str] = None
        self.mount_count = 0
        self.reload_count = 0
        self._reload_task: Optional[asyncio.Task] = None

    @property
    def manager(self) -> Optional[WalletSessionManager]:
        return self.view.manager if self.view else None

    async def mount(self) -> NavigationView:
        if self.view is not None:
            return self.view

        manager = WalletSessionManager(
            self.provider,
            reloader=self,
            wallet_name=self.config.wallet_name,
        )
        view = NavigationView(manager, cart=self.cart, config=self.config)
        self.view = view
        self.session_id = uuid4().hex
        self.mount_count += 1
        bind_session_context(self.session_id)

        logger.info(f"Mounting navigation view {self.session_id}")
        await view.mount()
        return view

    async def unmount(self) -> None:
        view, self.view = self.view, None
        if view is None:
            return
        logger.info(f"Unmounting navigation view {self.session_id}")
        view.unmount()
        clear_session_context()

    def request_reload(self, reason: str) -> None:
        """Schedule a remount. Called by a session that has retired itself."""
        self.reload_count += 1
        logger.info(f"Reloading wallet environment ({reason})")
        self._reload_task = asyncio.create_task(self._reload())

    async def wait_reloaded(self) -> None:
        """Wait for a pending reload. A failed reload is logged once and dropped."""
        task = self._reload_task
        if task is None:
            return
        try:
            await task
        except Exception as e:
            logger.error(f"Wallet environment reload failed: {e}", exc_info=True)
        finally:
            if self._reload_task is task:
                self._reload_task = None

    async def _reload(self) -> None:
        await self.unmount()
        await self.mount()
