from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class NavLink(BaseModel):
    label: str = Field(description="Link text")
    path: str = Field(description="Route the link points to")


class NetworkInfo(BaseModel):
    name: str = Field(description="Network name reported by the wallet")
    chain_id: int = Field(description="EIP-155 chain id")


class AccountPanel(BaseModel):
    account: str = Field(description="Connected wallet address")
    network: Optional[NetworkInfo] = Field(default=None, description="Network, once fetched")
    balance: Optional[str] = Field(default=None, description="Native balance as a decimal string, once fetched")
    balance_symbol: str = Field(default="ETH", description="Symbol the balance is denominated in")
    can_transfer: bool = Field(default=False, description="Whether the example transfer action is offered")
    transfer_label: Optional[str] = Field(default=None, description="Label of the example transfer action")


class NavigationModel(BaseModel):
    brand: str = Field(description="Store name shown on the left")
    links: List[NavLink] = Field(default_factory=list, description="Primary navigation links")
    cart_count: int = Field(default=0, description="Items currently in the cart")
    status: str = Field(description="Wallet session status")
    connect_label: Optional[str] = Field(default=None, description="Connect button label when no account is connected")
    account: Optional[AccountPanel] = Field(default=None, description="Account details when connected")
    error: Optional[str] = Field(default=None, description="Most recent wallet error, shown inline")


class TransferResult(BaseModel):
    success: bool = Field(description="Whether the transaction was submitted")
    tx_hash: Optional[str] = Field(default=None, description="Transaction hash when submitted")
    message: str = Field(description="Inline status message")
    submitted_at: datetime = Field(default_factory=datetime.utcnow, description="Time of the attempt")
