from typing import Any, Literal
from pydantic import BaseModel, Field


class ProviderEventRequest(BaseModel):
    event: Literal["accountsChanged", "chainChanged", "disconnect"] = Field(
        description="Wallet event name as emitted by the provider"
    )
    data: Any = Field(default=None, description="Raw event payload")
