from __future__ import annotations

import logging
import math
import time
from dataclasses import replace
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

from checkout.core.config import Settings, get_settings
from checkout.core.errors import ArtifactMissing, InvalidAmount, NotFound, Unauthorized
from checkout.gateway.client import PaymentGateway, build_gateway
from checkout.gateway.models import FLOWS, ChargeSpec, ExpiryPolicy, ItemDetail, StatusResult
from checkout.gateway.signature import SignatureVerifier
from checkout.orders.models import PENDING, Order
from checkout.orders.store import InMemoryOrderStore, OrderStore

logger = logging.getLogger(__name__)

GATEWAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def make_order_id() -> str:
    return f"ORDER-{int(time.time() * 1000)}-{uuid4().hex[:12]}"


def gateway_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime(GATEWAY_TIME_FORMAT)


def _to_int_amount(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def coerce_quantity(value: Any) -> int:
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, quantity)


class TransactionOrchestrator:
    """Owns every write to an order's status.

    Orders are created here after a successful charge, and only
    ``refresh_status`` and ``apply_notification`` move them afterwards.
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        store: OrderStore,
        verifier: SignatureVerifier,
        settings: Settings | None = None,
    ):
        self.gateway = gateway
        self.store = store
        self.verifier = verifier
        self.settings = settings or get_settings()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TransactionOrchestrator":
        cfg = settings or get_settings()
        return cls(
            gateway=build_gateway(cfg),
            store=InMemoryOrderStore(),
            verifier=SignatureVerifier(cfg.midtrans_server_key),
            settings=cfg,
        )

    def _coerce_amount(self, value: Any) -> Decimal:
        minimum = self.settings.min_amount
        message = f"Amount minimal {minimum}"
        if isinstance(value, bool) or value is None:
            raise InvalidAmount(message)
        try:
            as_float = float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidAmount(message) from exc
        if not math.isfinite(as_float) or as_float < minimum:
            raise InvalidAmount(message)
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            return Decimal(repr(as_float))

    def _item_name(self, value: Any) -> str:
        name = str(value or "").strip() or self.settings.default_item_name
        return name[: self.settings.item_name_max_length]

    @staticmethod
    def _items(item_name: str, unit_amount: Decimal, quantity: int, gross_amount: int) -> list[ItemDetail]:
        price = _to_int_amount(unit_amount)
        if price * quantity == gross_amount:
            return [ItemDetail(id="item-1", name=item_name, price=price, quantity=quantity)]
        # The gateway rejects item totals that differ from gross_amount.
        return [ItemDetail(id="item-1", name=item_name, price=gross_amount, quantity=1)]

    def _next_order_id(self) -> str:
        order_id = make_order_id()
        while self.store.exists(order_id):
            order_id = make_order_id()
        return order_id

    def create_order(
        self,
        item_name: Any,
        quantity: Any,
        unit_amount: Any,
        flow: str = "qris",
        payment_method: str | None = None,
    ) -> Order:
        if flow not in FLOWS:
            raise NotFound(f"unknown payment flow: {flow}")

        amount = self._coerce_amount(unit_amount)
        qty = coerce_quantity(quantity)
        name = self._item_name(item_name)
        try:
            gross_amount = _to_int_amount(amount * qty)
        except InvalidOperation as exc:
            raise InvalidAmount("Amount too large") from exc

        now = datetime.now(timezone.utc)
        order_id = self._next_order_id()
        spec = ChargeSpec(
            flow=flow,
            order_id=order_id,
            gross_amount=gross_amount,
            items=self._items(name, amount, qty, gross_amount),
            expiry=ExpiryPolicy(start_time=gateway_timestamp(now), duration=self.settings.expiry_minutes),
            payment_method=payment_method or None,
        )

        result = self.gateway.create_charge(spec)

        if flow == "qris" and not result.qr_url:
            logger.error("charge for %s succeeded without a QR action: %s", order_id, result.raw)
            raise ArtifactMissing("payment gateway returned no QR code", detail={"order_id": order_id})
        if flow == "snap" and not result.token:
            logger.error("snap transaction for %s returned no token: %s", order_id, result.raw)
            raise ArtifactMissing("payment gateway returned no checkout token", detail={"order_id": order_id})

        order = Order(
            order_id=order_id,
            flow=flow,
            item_name=name,
            quantity=qty,
            unit_price=float(amount),
            gross_amount=gross_amount,
            status=PENDING,
            qr_url=result.qr_url if flow == "qris" else None,
            token=result.token if flow == "snap" else None,
            redirect_url=result.redirect_url if flow == "snap" else None,
            created_at=now,
            updated_at=now,
        )
        # A notification may have landed while the charge call was in flight.
        early = self.store.get(order_id)
        if early is not None and early.placeholder:
            order = replace(
                order,
                status=early.status,
                last_status_detail=early.last_status_detail,
                updated_at=early.updated_at,
            )
            logger.info("order %s merged with early notification status %s", order_id, early.status)
        self.store.put(order)
        logger.info("order created: order_id=%s flow=%s gross_amount=%s", order_id, flow, gross_amount)
        return order

    def get_order(self, order_id: str) -> Order:
        order = self.store.get(order_id)
        if order is None:
            raise NotFound()
        return order

    def _write_status(self, order: Order, result: StatusResult) -> Order:
        status = result.status
        if self.settings.guard_final_status and order.is_final and status != order.status:
            logger.warning(
                "ignoring status regression for %s: %s -> %s",
                order.order_id,
                order.status,
                status,
            )
            status = order.status

        updated = replace(
            order,
            status=status,
            last_status_detail=dict(result.raw),
            updated_at=datetime.now(timezone.utc),
        )
        self.store.put(updated)
        if updated.status != order.status:
            logger.info("order %s status %s -> %s", order.order_id, order.status, updated.status)
        return updated

    def refresh_status(self, order_id: str) -> tuple[str, bool]:
        order = self.get_order(order_id)
        try:
            result = self.gateway.query_status(order_id)
        except NotFound:
            # Snap transactions are unknown upstream until the payer picks a method.
            logger.info("gateway has no transaction for %s yet; keeping %s", order_id, order.status)
            return order.status, order.is_final
        # Re-read so a concurrent webhook write is the base for this one.
        current = self.get_order(order_id)
        updated = self._write_status(current, result)
        return updated.status, updated.is_final

    def _placeholder(self, order_id: str, result: StatusResult, gross_amount: str) -> Order:
        raw_amount = result.gross_amount or gross_amount
        try:
            amount = _to_int_amount(Decimal(str(raw_amount)))
        except (InvalidOperation, ValueError):
            amount = 0
        now = datetime.now(timezone.utc)
        return Order(
            order_id=order_id,
            flow=str(result.raw.get("payment_type") or "unknown"),
            item_name="",
            quantity=1,
            unit_price=float(amount),
            gross_amount=amount,
            created_at=now,
            updated_at=now,
            placeholder=True,
        )

    def apply_notification(self, order_id: str, status_code: str, gross_amount: str, signature: str | None) -> Order:
        if not self.verifier.verify(order_id, status_code, gross_amount, signature):
            logger.warning("rejected notification with bad signature: order_id=%s", order_id)
            raise Unauthorized()

        result = self.gateway.query_status(order_id)

        order = self.store.get(order_id)
        if order is None:
            logger.warning("notification for unknown order %s; recording placeholder", order_id)
            order = self._placeholder(order_id, result, gross_amount)
        return self._write_status(order, result)
