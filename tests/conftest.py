from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from checkout.api.deps import get_orchestrator
from checkout.core.config import get_settings
from checkout.gateway.client import FakeGateway
from checkout.gateway.signature import SignatureVerifier
from checkout.orders.orchestrator import TransactionOrchestrator
from checkout.orders.store import InMemoryOrderStore

TEST_SERVER_KEY = "SB-Mid-server-test-key"


@pytest.fixture(scope="session", autouse=True)
def configure_test_settings():
    settings = get_settings()
    settings.gateway_backend = "fake"
    settings.midtrans_server_key = TEST_SERVER_KEY
    settings.guard_final_status = False
    settings.min_amount = 1000
    yield settings


@pytest.fixture()
def settings(configure_test_settings):
    return configure_test_settings


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture()
def orchestrator(settings, gateway, store) -> TransactionOrchestrator:
    return TransactionOrchestrator(
        gateway=gateway,
        store=store,
        verifier=SignatureVerifier(settings.midtrans_server_key),
        settings=settings,
    )


@pytest.fixture()
def client(orchestrator):
    from checkout.main import app

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def sign(orchestrator):
    return orchestrator.verifier.sign
