from checkout.gateway.actions import extract_qr_url, extract_qr_url_from_response
from checkout.gateway.client import (
    UNKNOWN_STATUS,
    FakeGateway,
    MidtransGateway,
    PaymentGateway,
    build_gateway,
    normalize_status,
)
from checkout.gateway.models import ChargeResult, ChargeSpec, ExpiryPolicy, ItemDetail, StatusResult
from checkout.gateway.signature import SignatureVerifier, notification_signature

__all__ = [
    "UNKNOWN_STATUS",
    "ChargeResult",
    "ChargeSpec",
    "ExpiryPolicy",
    "FakeGateway",
    "ItemDetail",
    "MidtransGateway",
    "PaymentGateway",
    "SignatureVerifier",
    "StatusResult",
    "build_gateway",
    "extract_qr_url",
    "extract_qr_url_from_response",
    "normalize_status",
    "notification_signature",
]
