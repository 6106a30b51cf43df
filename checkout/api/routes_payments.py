from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from checkout.api.deps import get_orchestrator
from checkout.core.errors import NotFound
from checkout.gateway.models import FLOWS
from checkout.orders.orchestrator import TransactionOrchestrator

router = APIRouter(tags=["payments"])


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Form fields arrive as strings; the orchestrator validates amount and qty.
    item_name: Any = Field(default=None, alias="itemName")
    qty: Any = 1
    amount: Any = None
    payment_method: str | None = Field(default=None, alias="paymentMethod")


def _require_flow(flow: str) -> None:
    if flow not in FLOWS:
        raise NotFound(f"unknown payment flow: {flow}")


@router.post("/api/{flow}/create")
def create_order(
    flow: str,
    request: CreateOrderRequest,
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    _require_flow(flow)
    order = orchestrator.create_order(
        item_name=request.item_name,
        quantity=request.qty,
        unit_amount=request.amount,
        flow=flow,
        payment_method=request.payment_method,
    )

    body: dict[str, Any] = {"ok": True, "orderId": order.order_id}
    if order.token:
        body["token"] = order.token
        body["redirectUrl"] = order.redirect_url
    return body


@router.get("/api/{flow}/status/{order_id}")
def order_status(
    flow: str,
    order_id: str,
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    _require_flow(flow)
    order = orchestrator.get_order(order_id)
    if order.flow != flow and not order.placeholder:
        raise NotFound()

    status, final = orchestrator.refresh_status(order_id)
    return {"ok": True, "orderId": order_id, "status": status, "isFinal": final}
