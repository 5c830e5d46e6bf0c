"""
Navigation API

Serves the navigation bar model and the wallet actions behind it:
- Render the bar (connect button or account panel, error line, cart count)
- Connect the wallet
- Run the example transfer
- Relay wallet events from the browser into the provider
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..config import settings
from ..providers.factory import build_provider
from ..types import NavigationModel, ProviderEventRequest, TransferResult
from ..views import NavigationHost, NavigationView

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/navigation", tags=["navigation"])

_host: Optional[NavigationHost] = None


def get_navigation_host() -> NavigationHost:
    """Get or create the navigation host."""
    global _host
    if _host is None:
        _host = NavigationHost(build_provider(settings))
    return _host


async def _mounted_view(host: NavigationHost) -> NavigationView:
    await host.wait_reloaded()
    return host.view or await host.mount()


async def _settled(host: NavigationHost) -> NavigationModel:
    await host.wait_reloaded()
    view = await _mounted_view(host)
    await view.manager.settle()
    return view.render()


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=NavigationModel)
async def get_navigation(host: NavigationHost = Depends(get_navigation_host)):
    """Render the navigation bar for the current wallet session."""
    return await _settled(host)


@router.post("/connect", response_model=NavigationModel)
async def connect_wallet(host: NavigationHost = Depends(get_navigation_host)):
    """Ask the wallet for account access."""
    view = await _mounted_view(host)
    await view.connect()
    return await _settled(host)


@router.post("/transfer", response_model=TransferResult)
async def send_example_transfer(host: NavigationHost = Depends(get_navigation_host)):
    """Submit the illustrative transfer with the connected account."""
    view = await _mounted_view(host)
    return await view.send_example_transfer()


@router.post("/provider-events", response_model=NavigationModel)
async def relay_provider_event(
    request: ProviderEventRequest,
    host: NavigationHost = Depends(get_navigation_host),
):
    """Deliver a wallet event observed in the browser to the provider's listeners."""
    if host.provider is None:
        raise HTTPException(status_code=409, detail="No wallet provider configured")

    await _mounted_view(host)
    delivered = host.provider.emit(request.event, request.data)
    logger.info(f"Relayed {request.event} to {delivered} listener(s)")
    return await _settled(host)
