from fastapi import APIRouter, Depends
from typing import Dict, Any
from .navigation import get_navigation_host
from ..views import NavigationHost

router = APIRouter()


@router.get("/healthz")
async def health_check(host: NavigationHost = Depends(get_navigation_host)) -> Dict[str, Any]:
    """Health check endpoint that reports wallet provider status"""

    provider = host.provider
    if provider is None:
        provider_status = {"status": "unavailable", "reason": "No wallet provider configured"}
    else:
        provider_status = await provider.health_check()

    manager = host.manager
    return {
        "status": "healthy" if provider_status["status"] in ["healthy", "unavailable"] else "degraded",
        "provider": provider_status,
        "session": manager.snapshot() if manager else None,
        "subscribed": manager.bridge.is_subscribed if manager else False,
    }
