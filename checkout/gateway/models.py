from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

FlowType = Literal["qris", "snap"]
FLOWS: tuple[str, ...] = ("qris", "snap")


class ItemDetail(BaseModel):
    id: str
    name: str
    price: int
    quantity: int


class ExpiryPolicy(BaseModel):
    # Gateway timestamp format with explicit offset, e.g. "2026-10-19 08:00:00 +0000"
    start_time: str
    duration: int
    unit: str = "minute"


class ChargeSpec(BaseModel):
    flow: FlowType = "qris"
    order_id: str
    gross_amount: int
    items: list[ItemDetail] = Field(default_factory=list)
    expiry: ExpiryPolicy
    payment_method: str | None = None


class ChargeResult(BaseModel):
    order_id: str
    qr_url: str | None = None
    token: str | None = None
    redirect_url: str | None = None
    transaction_status: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def artifact(self) -> str | None:
        return self.qr_url or self.token


class StatusResult(BaseModel):
    order_id: str
    status: str
    status_code: str | None = None
    gross_amount: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)
