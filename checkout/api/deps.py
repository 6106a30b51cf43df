from __future__ import annotations

from functools import lru_cache

from checkout.orders.orchestrator import TransactionOrchestrator


@lru_cache(maxsize=1)
def get_orchestrator() -> TransactionOrchestrator:
    return TransactionOrchestrator.from_settings()
