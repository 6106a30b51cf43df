from __future__ import annotations

import hmac
from hashlib import sha512


def notification_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    raw = f"{order_id}{status_code}{gross_amount}{server_key}"
    return sha512(raw.encode("utf-8")).hexdigest()


class SignatureVerifier:
    """Checks the ``signature_key`` the gateway attaches to notifications.

    signature = hex(SHA-512(order_id + status_code + gross_amount + server_key))
    """

    def __init__(self, server_key: str):
        self._server_key = server_key

    def sign(self, order_id: str, status_code: str, gross_amount: str) -> str:
        return notification_signature(str(order_id), str(status_code), str(gross_amount), self._server_key)

    def verify(self, order_id: str, status_code: str, gross_amount: str, provided_signature: str | None) -> bool:
        if not provided_signature:
            return False
        expected = self.sign(order_id, status_code, gross_amount)
        return hmac.compare_digest(expected.encode("ascii"), str(provided_signature).encode("utf-8"))
