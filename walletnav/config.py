import os

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the legacy RPC endpoint variable when the primary one is unset."""

        super().model_post_init(__context)

        if not self.wallet_rpc_url:
            fallback = os.getenv("ETH_PROVIDER_URL")
            if fallback:
                object.__setattr__(self, "wallet_rpc_url", fallback)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["auto", "json", "console"] = Field(
        default="auto",
        description="Log renderer; auto uses the console renderer at DEBUG and JSON otherwise",
    )

    # Storefront chrome
    store_name: str = Field(default="React Ecommerce", description="Brand label shown in the navigation bar")
    nav_links: List[Dict[str, str]] = Field(
        default_factory=lambda: [
            {"label": "Home", "path": "/"},
            {"label": "Products", "path": "/product"},
            {"label": "About", "path": "/about"},
            {"label": "Contact", "path": "/contact"},
        ],
        description="Navigation links rendered next to the brand",
    )

    # Wallet Provider
    wallet_name: str = Field(default="MetaMask", description="Display name of the wallet provider")
    wallet_rpc_url: str = Field(
        default="",
        description="EIP-1193 compatible JSON-RPC endpoint exposed by the wallet; empty means no wallet",
        validation_alias=AliasChoices("wallet_rpc_url", "WALLET_RPC_URL", "WALLET_PROVIDER_URL"),
    )
    rpc_timeout_seconds: int = Field(default=30, ge=1, description="Timeout for wallet RPC calls")
    native_symbol: str = Field(default="ETH", description="Symbol of the chain's native unit")

    # Illustrative transfer
    example_transfer_to: str = Field(
        default="0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
        description="Recipient of the example transfer button",
    )
    example_transfer_value: Decimal = Field(
        default=Decimal("1"),
        gt=0,
        description="Amount of the example transfer in native units",
    )

    # Feature Flags
    feature_flag_mock_wallet: bool = Field(
        default=False,
        description="Use the deterministic in-memory wallet instead of the RPC endpoint",
    )
    mock_wallet_account: str = Field(
        default="0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
        description="Account exposed by the in-memory wallet",
    )
    mock_wallet_balance: Decimal = Field(
        default=Decimal("10000"),
        ge=0,
        description="Native balance of the in-memory wallet account",
    )

    @property
    def has_wallet_endpoint(self) -> bool:
        return bool(self.wallet_rpc_url)


# Global settings instance
settings = Settings()
