from __future__ import annotations

from fastapi import APIRouter, Depends

from checkout.api.deps import get_orchestrator
from checkout.core.errors import NotFound
from checkout.gateway.models import FLOWS
from checkout.orders.models import SUCCESS_STATUSES
from checkout.orders.orchestrator import TransactionOrchestrator

router = APIRouter(tags=["partials"])

ORDER_VIEWS = {
    "pay": "Scan QRIS",
    "success": "Payment successful",
    "failed": "Payment failed or expired",
}


@router.get("/partial/checkout")
def checkout_partial(orchestrator: TransactionOrchestrator = Depends(get_orchestrator)):
    settings = orchestrator.settings
    return {
        "view": "checkout",
        "title": "Checkout QRIS",
        "defaults": {
            "itemName": settings.default_item_name,
            "qty": 1,
            "amount": settings.min_amount,
        },
        "minAmount": settings.min_amount,
        "itemNameMaxLength": settings.item_name_max_length,
        "flows": list(FLOWS),
    }


@router.get("/partial/{view}/{order_id}")
def order_partial(
    view: str,
    order_id: str,
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    if view not in ORDER_VIEWS:
        raise NotFound(f"unknown view: {view}")
    order = orchestrator.get_order(order_id)

    fragment = {
        "view": view,
        "title": ORDER_VIEWS[view],
        "order": order.to_public_dict(),
    }
    if view == "pay":
        fragment["statusUrl"] = f"/api/{order.flow}/status/{order.order_id}"
        fragment["pollIntervalMs"] = orchestrator.settings.poll_interval_ms
    else:
        fragment["paid"] = order.status in SUCCESS_STATUSES
    return fragment
