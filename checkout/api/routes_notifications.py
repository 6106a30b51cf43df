from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from checkout.api.deps import get_orchestrator
from checkout.core.errors import CheckoutError, Unauthorized
from checkout.orders.orchestrator import TransactionOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])

REQUIRED_FIELDS = ("order_id", "status_code", "gross_amount", "signature_key")


def _reply(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"received": False, "message": message})


@router.post("/midtrans/notification")
def midtrans_notification(
    payload: Any = Body(default=None),
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    if not isinstance(payload, dict):
        return _reply(400, "Bad request")

    values = {key: payload.get(key) for key in REQUIRED_FIELDS}
    missing = [key for key, value in values.items() if value in (None, "")]
    if missing:
        return _reply(400, f"Bad request: missing {', '.join(missing)}")

    try:
        orchestrator.apply_notification(
            order_id=str(values["order_id"]),
            status_code=str(values["status_code"]),
            gross_amount=str(values["gross_amount"]),
            signature=str(values["signature_key"]),
        )
    except Unauthorized as exc:
        return _reply(401, exc.message)
    except CheckoutError as exc:
        # 5xx makes the gateway redeliver the notification.
        logger.error("notification processing failed for %s: %s (%s)", values["order_id"], exc.message, exc.detail)
        return _reply(500, "Error")
    except Exception:
        logger.exception("unexpected error processing notification for %s", values["order_id"])
        return _reply(500, "Error")

    return {"received": True}
