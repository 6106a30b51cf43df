from __future__ import annotations

from checkout.core.errors import GatewayRejected, GatewayUnavailable


def _create(client, flow: str = "qris", **body):
    payload = {"itemName": "Produk", "qty": 2, "amount": 5000}
    payload.update(body)
    return client.post(f"/api/{flow}/create", json=payload)


def _notify(client, sign, order_id: str, status_code: str = "200", gross_amount: str = "10000.00", signature: str | None = None):
    return client.post(
        "/midtrans/notification",
        json={
            "order_id": order_id,
            "status_code": status_code,
            "gross_amount": gross_amount,
            "transaction_status": "settlement",
            "signature_key": signature or sign(order_id, status_code, gross_amount),
        },
    )


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_end_to_end_qris_checkout(client, orchestrator, gateway, sign):
    created = _create(client, itemName="Produk", qty=2, amount=5000)
    assert created.status_code == 200
    body = created.json()
    assert body["ok"] is True
    assert "token" not in body
    order_id = body["orderId"]

    order = orchestrator.get_order(order_id)
    assert order.gross_amount == 10000
    assert order.status == "pending"

    pending = client.get(f"/api/qris/status/{order_id}")
    assert pending.json() == {"ok": True, "orderId": order_id, "status": "pending", "isFinal": False}

    gateway.set_status(order_id, "settlement")
    settled = client.get(f"/api/qris/status/{order_id}")
    assert settled.status_code == 200
    assert settled.json() == {"ok": True, "orderId": order_id, "status": "settlement", "isFinal": True}

    ack = _notify(client, sign, order_id)
    assert ack.status_code == 200
    assert ack.json() == {"received": True}
    assert orchestrator.get_order(order_id).status == "settlement"

    forged = _notify(client, sign, order_id, signature="0" * 128)
    assert forged.status_code == 401
    assert forged.json()["received"] is False
    assert orchestrator.get_order(order_id).status == "settlement"


def test_create_accepts_form_style_strings(client, orchestrator):
    resp = _create(client, qty="3", amount="2500")
    assert resp.status_code == 200
    assert orchestrator.get_order(resp.json()["orderId"]).gross_amount == 7500


def test_create_rejects_small_amount(client, store):
    resp = _create(client, amount=500)
    assert resp.status_code == 400
    assert resp.json() == {"ok": False, "message": "Amount minimal 1000"}
    assert len(store) == 0


def test_create_rejects_non_object_body(client):
    resp = client.post("/api/qris/create", content="not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["ok"] is False


def test_create_snap_returns_token(client, orchestrator):
    resp = _create(client, flow="snap", amount=25000, qty=1, paymentMethod="other_qris")
    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert body["redirectUrl"].endswith(body["token"])
    assert orchestrator.get_order(body["orderId"]).token == body["token"]


def test_create_gateway_rejection_surfaces_detail(client, gateway, store):
    gateway.fail_with = GatewayRejected(detail="gross_amount is not valid")
    resp = _create(client)
    assert resp.status_code == 500
    assert resp.json() == {
        "ok": False,
        "message": "payment gateway rejected the transaction",
        "detail": "gross_amount is not valid",
    }
    assert len(store) == 0


def test_create_missing_qr_is_server_error(client, gateway, store):
    gateway.actions_override = [{"name": "deeplink-redirect", "url": ""}]
    resp = _create(client)
    assert resp.status_code == 500
    assert resp.json()["message"] == "payment gateway returned no QR code"
    assert len(store) == 0


def test_unknown_flow_is_404(client):
    assert _create(client, flow="ovo").status_code == 404
    assert client.get("/api/ovo/status/ORDER-1").status_code == 404


def test_status_unknown_order_is_404(client):
    resp = client.get("/api/qris/status/ORDER-missing")
    assert resp.status_code == 404
    assert resp.json() == {"ok": False, "message": "Not found"}


def test_create_huge_amount_is_400_json(client, store):
    resp = _create(client, amount=1e30, qty=1)
    assert resp.status_code == 400
    assert resp.json() == {"ok": False, "message": "Amount too large"}
    assert len(store) == 0


def test_snap_status_pending_before_payer_chooses_method(client, gateway):
    order_id = _create(client, flow="snap", amount=25000, qty=1).json()["orderId"]
    del gateway.transactions[order_id]

    resp = client.get(f"/api/snap/status/{order_id}")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "orderId": order_id, "status": "pending", "isFinal": False}


def test_status_wrong_flow_is_404(client):
    order_id = _create(client).json()["orderId"]
    assert client.get(f"/api/snap/status/{order_id}").status_code == 404


def test_status_gateway_failure_is_500(client, gateway, orchestrator):
    order_id = _create(client).json()["orderId"]
    gateway.fail_with = GatewayUnavailable()

    resp = client.get(f"/api/qris/status/{order_id}")
    assert resp.status_code == 500
    assert resp.json() == {"ok": False, "message": "payment gateway unavailable"}
    assert orchestrator.get_order(order_id).status == "pending"


def test_notification_malformed_is_400(client):
    missing = client.post("/midtrans/notification", json={"order_id": "ORDER-1", "status_code": "200"})
    assert missing.status_code == 400
    assert "signature_key" in missing.json()["message"]

    not_object = client.post("/midtrans/notification", json=["ORDER-1"])
    assert not_object.status_code == 400

    broken = client.post("/midtrans/notification", content="{", headers={"Content-Type": "application/json"})
    assert broken.status_code == 400


def test_notification_processing_error_is_500(client, gateway, sign):
    order_id = _create(client).json()["orderId"]
    gateway.fail_with = GatewayUnavailable()

    resp = _notify(client, sign, order_id)
    assert resp.status_code == 500
    assert resp.json()["received"] is False


def test_notification_before_create_records_placeholder(client, orchestrator, gateway, sign):
    gateway.set_status("ORDER-early", "settlement")

    resp = _notify(client, sign, "ORDER-early", gross_amount="15000.00")
    assert resp.status_code == 200

    order = orchestrator.get_order("ORDER-early")
    assert order.placeholder is True
    assert order.status == "settlement"

    polled = client.get("/api/qris/status/ORDER-early")
    assert polled.status_code == 200
    assert polled.json()["isFinal"] is True


def test_checkout_partial(client):
    resp = client.get("/partial/checkout")
    assert resp.status_code == 200
    body = resp.json()
    assert body["view"] == "checkout"
    assert body["defaults"] == {"itemName": "Produk", "qty": 1, "amount": 1000}
    assert body["flows"] == ["qris", "snap"]


def test_order_partials(client, gateway):
    order_id = _create(client).json()["orderId"]

    pay = client.get(f"/partial/pay/{order_id}")
    assert pay.status_code == 200
    fragment = pay.json()
    assert fragment["view"] == "pay"
    assert fragment["order"]["orderId"] == order_id
    assert fragment["order"]["grossAmount"] == 10000
    assert fragment["order"]["qrUrl"]
    assert fragment["statusUrl"] == f"/api/qris/status/{order_id}"
    assert fragment["pollIntervalMs"] == 3000

    gateway.set_status(order_id, "settlement")
    client.get(f"/api/qris/status/{order_id}")
    success = client.get(f"/partial/success/{order_id}").json()
    assert success["paid"] is True
    assert success["order"]["isFinal"] is True

    failed = client.get(f"/partial/failed/{order_id}").json()
    assert failed["view"] == "failed"


def test_partials_404(client):
    assert client.get("/partial/pay/ORDER-missing").status_code == 404
    order_id = _create(client).json()["orderId"]
    assert client.get(f"/partial/receipt/{order_id}").status_code == 404
