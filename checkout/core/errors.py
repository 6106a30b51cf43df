from __future__ import annotations

from typing import Any


class CheckoutError(Exception):
    """Base error for the checkout core; carries the HTTP status it maps to."""

    status_code: int = 500
    default_message: str = "checkout error"

    def __init__(self, message: str | None = None, detail: Any = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"ok": False, "message": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidAmount(CheckoutError):
    status_code = 400
    default_message = "invalid amount"


class GatewayRejected(CheckoutError):
    """The gateway declined the request; `detail` holds its validation message."""

    status_code = 500
    default_message = "payment gateway rejected the transaction"


class GatewayUnavailable(CheckoutError):
    status_code = 500
    default_message = "payment gateway unavailable"


class ArtifactMissing(CheckoutError):
    status_code = 500
    default_message = "payment gateway returned no usable payment artifact"


class NotFound(CheckoutError):
    status_code = 404
    default_message = "Not found"


class Unauthorized(CheckoutError):
    status_code = 401
    default_message = "Invalid signature"
