from __future__ import annotations

import argparse
import json

from checkout.core.config import get_settings
from checkout.core.errors import CheckoutError
from checkout.gateway.client import build_gateway
from checkout.gateway.signature import SignatureVerifier
from checkout.orders.models import is_final
from checkout.orders.orchestrator import TransactionOrchestrator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="QRIS checkout CLI")
    top = parser.add_subparsers(dest="command", required=True)

    sign = top.add_parser("sign", help="Compute a notification signature_key")
    sign.add_argument("order_id")
    sign.add_argument("status_code")
    sign.add_argument("gross_amount", help="Exactly as sent in the notification, e.g. 10000.00")

    status = top.add_parser("status", help="Query transaction status from the gateway")
    status.add_argument("order_id")

    charge = top.add_parser("charge", help="Create a transaction through the gateway")
    charge.add_argument("--amount", required=True)
    charge.add_argument("--qty", default="1")
    charge.add_argument("--item", default=None)
    charge.add_argument("--flow", choices=["qris", "snap"], default="qris")
    charge.add_argument("--payment-method", default=None)

    return parser


def _print(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _sign(args: argparse.Namespace) -> int:
    verifier = SignatureVerifier(get_settings().midtrans_server_key)
    print(verifier.sign(args.order_id, args.status_code, args.gross_amount))
    return 0


def _status(args: argparse.Namespace) -> int:
    result = build_gateway().query_status(args.order_id)
    _print(
        {
            "order_id": result.order_id,
            "status": result.status,
            "is_final": is_final(result.status),
            "raw": result.raw,
        }
    )
    return 0


def _charge(args: argparse.Namespace) -> int:
    orchestrator = TransactionOrchestrator.from_settings()
    order = orchestrator.create_order(
        item_name=args.item,
        quantity=args.qty,
        unit_amount=args.amount,
        flow=args.flow,
        payment_method=args.payment_method,
    )
    _print(order.to_public_dict())
    return 0


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    handlers = {"sign": _sign, "status": _status, "charge": _charge}
    handler = handlers.get(args.command)
    if handler is None:
        parser.error("unsupported command")
        return 2

    try:
        return handler(args)
    except CheckoutError as exc:
        _print({"ok": False, "error": type(exc).__name__, "message": exc.message, "detail": exc.detail})
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
