from __future__ import annotations

import logging
import threading
from typing import Any, Protocol
from uuid import uuid4

import httpx

from checkout.core.config import Settings, get_settings
from checkout.core.errors import GatewayRejected, GatewayUnavailable, NotFound
from checkout.gateway.actions import QR_ACTION_V2, extract_qr_url_from_response
from checkout.gateway.models import ChargeResult, ChargeSpec, StatusResult

logger = logging.getLogger(__name__)

UNKNOWN_STATUS = "unknown"

# status_code the gateway reports alongside each transaction_status
STATUS_CODES: dict[str, str] = {
    "settlement": "200",
    "capture": "200",
    "cancel": "200",
    "pending": "201",
    "deny": "202",
    "failure": "202",
    "expire": "407",
}


def normalize_status(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return UNKNOWN_STATUS
    return value.strip().lower()


def _body_status_code(payload: dict[str, Any]) -> int | None:
    raw = payload.get("status_code")
    try:
        return int(str(raw))
    except (TypeError, ValueError):
        return None


def _upstream_message(payload: dict[str, Any]) -> str:
    messages = payload.get("error_messages")
    if isinstance(messages, list) and messages:
        return "; ".join(str(item) for item in messages)
    for key in ("status_message", "message", "raw_text"):
        value = payload.get(key)
        if value:
            return str(value)
    return "no message from gateway"


class PaymentGateway(Protocol):
    backend: str

    def create_charge(self, spec: ChargeSpec) -> ChargeResult:
        ...

    def query_status(self, order_id: str) -> StatusResult:
        ...


class MidtransGateway:
    """Core API (QRIS charge, status) and Snap (token) over httpx."""

    backend = "midtrans"

    def __init__(self, settings: Settings | None = None, transport: httpx.BaseTransport | None = None):
        self.settings = settings or get_settings()
        self.core_base_url = self.settings.core_api_base_url.rstrip("/")
        self.snap_base_url = self.settings.snap_base_url.rstrip("/")
        self.timeout = max(1.0, float(self.settings.gateway_timeout_seconds))
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "Content-Type": "application/json"}

    def _request(self, method: str, url: str, *, json_body: dict[str, Any] | None = None) -> tuple[int, dict[str, Any]]:
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(
                    method,
                    url,
                    headers=self._headers(),
                    json=json_body,
                    auth=(self.settings.midtrans_server_key, ""),
                )
        except httpx.TimeoutException as exc:
            logger.error("gateway timeout: %s %s (%s)", method, url, exc)
            raise GatewayUnavailable("payment gateway timed out", detail=str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.error("gateway transport error: %s %s (%s)", method, url, exc)
            raise GatewayUnavailable(detail=str(exc)) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {"raw_text": response.text}
        if not isinstance(payload, dict):
            payload = {"result": payload}
        return response.status_code, payload

    @staticmethod
    def _raise_for_error(http_status: int, payload: dict[str, Any], *, status_query: bool = False) -> None:
        body_code = _body_status_code(payload)
        effective = http_status if http_status >= 400 else (body_code or http_status)

        if effective >= 500:
            logger.error("gateway server error: http=%s body=%s", http_status, payload)
            raise GatewayUnavailable(detail=_upstream_message(payload))
        if effective == 404 and status_query:
            raise NotFound("transaction not found at gateway", detail=_upstream_message(payload))
        if effective >= 400:
            # Status answers for expired transactions carry 407 next to a real status.
            if status_query and http_status < 400 and payload.get("transaction_status"):
                return
            logger.error("gateway rejected request: http=%s body=%s", http_status, payload)
            raise GatewayRejected(detail=_upstream_message(payload))

    @staticmethod
    def _item_details(spec: ChargeSpec) -> list[dict[str, Any]]:
        return [item.model_dump() for item in spec.items]

    def _qris_body(self, spec: ChargeSpec) -> dict[str, Any]:
        body: dict[str, Any] = {
            "payment_type": "qris",
            "transaction_details": {"order_id": spec.order_id, "gross_amount": spec.gross_amount},
            "item_details": self._item_details(spec),
            "custom_expiry": {
                "order_time": spec.expiry.start_time,
                "expiry_duration": spec.expiry.duration,
                "unit": spec.expiry.unit,
            },
        }
        if spec.payment_method:
            body["qris"] = {"acquirer": spec.payment_method}
        return body

    def _snap_body(self, spec: ChargeSpec) -> dict[str, Any]:
        body: dict[str, Any] = {
            "transaction_details": {"order_id": spec.order_id, "gross_amount": spec.gross_amount},
            "item_details": self._item_details(spec),
            "expiry": {
                "start_time": spec.expiry.start_time,
                "unit": spec.expiry.unit,
                "duration": spec.expiry.duration,
            },
        }
        if spec.payment_method:
            body["enabled_payments"] = [spec.payment_method]
        return body

    def create_charge(self, spec: ChargeSpec) -> ChargeResult:
        if spec.flow == "snap":
            http_status, payload = self._request(
                "POST", f"{self.snap_base_url}/snap/v1/transactions", json_body=self._snap_body(spec)
            )
            self._raise_for_error(http_status, payload)
            return ChargeResult(
                order_id=spec.order_id,
                token=payload.get("token") or None,
                redirect_url=payload.get("redirect_url") or None,
                raw=payload,
            )

        http_status, payload = self._request("POST", f"{self.core_base_url}/v2/charge", json_body=self._qris_body(spec))
        self._raise_for_error(http_status, payload)
        return ChargeResult(
            order_id=str(payload.get("order_id") or spec.order_id),
            qr_url=extract_qr_url_from_response(payload),
            transaction_status=normalize_status(payload.get("transaction_status")),
            raw=payload,
        )

    def query_status(self, order_id: str) -> StatusResult:
        http_status, payload = self._request("GET", f"{self.core_base_url}/v2/{order_id}/status")
        self._raise_for_error(http_status, payload, status_query=True)
        return StatusResult(
            order_id=str(payload.get("order_id") or order_id),
            status=normalize_status(payload.get("transaction_status")),
            status_code=str(payload["status_code"]) if payload.get("status_code") is not None else None,
            gross_amount=str(payload["gross_amount"]) if payload.get("gross_amount") is not None else None,
            raw=payload,
        )


class FakeGateway:
    """In-process gateway for local runs and tests.

    Transactions start ``pending``; ``set_status`` moves them the way a payer
    or the gateway would. ``fail_with`` makes the next calls raise.
    """

    backend = "fake"

    def __init__(self, base_url: str = "https://fake-gateway.local"):
        self.base_url = base_url.rstrip("/")
        self.lock = threading.Lock()
        self.transactions: dict[str, dict[str, Any]] = {}
        self.charges: list[ChargeSpec] = []
        self.status_queries: list[str] = []
        self.fail_with: Exception | None = None
        self.actions_override: list[dict[str, Any]] | None = None
        self.omit_token = False

    def _payload(self, order_id: str, gross_amount: int, status: str) -> dict[str, Any]:
        return {
            "order_id": order_id,
            "transaction_id": uuid4().hex,
            "transaction_status": status,
            "status_code": STATUS_CODES.get(status, "201"),
            "gross_amount": f"{gross_amount}.00",
            "payment_type": "qris",
        }

    def create_charge(self, spec: ChargeSpec) -> ChargeResult:
        if self.fail_with is not None:
            raise self.fail_with

        payload = self._payload(spec.order_id, spec.gross_amount, "pending")
        with self.lock:
            self.charges.append(spec)
            self.transactions[spec.order_id] = payload

        if spec.flow == "snap":
            token = None if self.omit_token else uuid4().hex
            return ChargeResult(
                order_id=spec.order_id,
                token=token,
                redirect_url=f"{self.base_url}/snap/v4/redirection/{token}" if token else None,
                raw={"token": token},
            )

        if self.actions_override is not None:
            actions = self.actions_override
        else:
            actions = [{"name": QR_ACTION_V2, "method": "GET", "url": f"{self.base_url}/v2/qris/{spec.order_id}/qr-code"}]
        raw = {**payload, "actions": actions}
        return ChargeResult(
            order_id=spec.order_id,
            qr_url=extract_qr_url_from_response(raw),
            transaction_status="pending",
            raw=raw,
        )

    def set_status(self, order_id: str, status: str) -> dict[str, Any]:
        with self.lock:
            current = self.transactions.get(order_id)
            if current is None:
                current = self._payload(order_id, 0, status)
            updated = {**current, "transaction_status": status, "status_code": STATUS_CODES.get(status, "201")}
            self.transactions[order_id] = updated
            return dict(updated)

    def query_status(self, order_id: str) -> StatusResult:
        if self.fail_with is not None:
            raise self.fail_with

        with self.lock:
            self.status_queries.append(order_id)
            payload = self.transactions.get(order_id)
        if payload is None:
            raise NotFound("transaction not found at gateway", detail="Transaction doesn't exist.")
        return StatusResult(
            order_id=order_id,
            status=normalize_status(payload.get("transaction_status")),
            status_code=payload.get("status_code"),
            gross_amount=payload.get("gross_amount"),
            raw=dict(payload),
        )


def build_gateway(settings: Settings | None = None) -> PaymentGateway:
    cfg = settings or get_settings()
    if cfg.gateway_backend == "fake":
        return FakeGateway()
    return MidtransGateway(cfg)
