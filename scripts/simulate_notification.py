#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json

import requests

from checkout.core.config import get_settings
from checkout.gateway.signature import SignatureVerifier


def main() -> None:
    parser = argparse.ArgumentParser(description="Send a signed payment notification to a running checkout service")
    parser.add_argument("order_id")
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--status", default="settlement", help="transaction_status to report")
    parser.add_argument("--status-code", default="200")
    parser.add_argument("--gross-amount", required=True, help="e.g. 10000.00")
    parser.add_argument("--bad-signature", action="store_true", help="send a tampered signature_key")
    args = parser.parse_args()

    signature = SignatureVerifier(get_settings().midtrans_server_key).sign(
        args.order_id, args.status_code, args.gross_amount
    )
    if args.bad_signature:
        signature = signature[:-1] + ("0" if signature[-1] != "0" else "1")

    resp = requests.post(
        f"{args.base_url}/midtrans/notification",
        json={
            "order_id": args.order_id,
            "status_code": args.status_code,
            "gross_amount": args.gross_amount,
            "transaction_status": args.status,
            "signature_key": signature,
        },
        timeout=30,
    )
    print(f"HTTP {resp.status_code}")
    try:
        print(json.dumps(resp.json(), indent=2, ensure_ascii=False))
    except ValueError:
        print(resp.text)


if __name__ == "__main__":
    main()
