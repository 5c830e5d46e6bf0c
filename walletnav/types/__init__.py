from .requests import ProviderEventRequest
from .responses import AccountPanel, NavigationModel, NavLink, NetworkInfo, TransferResult

__all__ = [
    "ProviderEventRequest",
    "AccountPanel",
    "NavigationModel",
    "NavLink",
    "NetworkInfo",
    "TransferResult",
]
