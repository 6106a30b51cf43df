from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

PENDING = "pending"
FINAL_STATUSES: frozenset[str] = frozenset({"settlement", "capture", "expire", "cancel", "deny", "failure"})
SUCCESS_STATUSES: frozenset[str] = frozenset({"settlement", "capture"})


def is_final(status: str | None) -> bool:
    return status in FINAL_STATUSES


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Order:
    order_id: str
    flow: str
    item_name: str
    quantity: int
    unit_price: float
    gross_amount: int
    status: str = PENDING
    qr_url: str | None = None
    token: str | None = None
    redirect_url: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    last_status_detail: dict[str, Any] | None = None
    placeholder: bool = False

    @property
    def is_final(self) -> bool:
        return is_final(self.status)

    @property
    def payment_artifact(self) -> str | None:
        return self.qr_url or self.token

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "flow": self.flow,
            "itemName": self.item_name,
            "qty": self.quantity,
            "unitPrice": self.unit_price,
            "grossAmount": self.gross_amount,
            "status": self.status,
            "isFinal": self.is_final,
            "qrUrl": self.qr_url,
            "token": self.token,
            "redirectUrl": self.redirect_url,
            "createdAt": self.created_at.isoformat().replace("+00:00", "Z"),
            "updatedAt": self.updated_at.isoformat().replace("+00:00", "Z"),
        }
