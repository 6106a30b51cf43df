from __future__ import annotations

import threading
from typing import Protocol

from checkout.orders.models import Order


class OrderStore(Protocol):
    def get(self, order_id: str) -> Order | None:
        ...

    def put(self, order: Order) -> None:
        ...

    def exists(self, order_id: str) -> bool:
        ...


class InMemoryOrderStore:
    """Process-local order registry.

    Orders are immutable, so ``put`` swaps in a complete record under the lock
    and readers never observe a half-written one.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._orders: dict[str, Order] = {}

    def get(self, order_id: str) -> Order | None:
        with self.lock:
            return self._orders.get(order_id)

    def put(self, order: Order) -> None:
        with self.lock:
            self._orders[order.order_id] = order

    def exists(self, order_id: str) -> bool:
        with self.lock:
            return order_id in self._orders

    def __len__(self) -> int:
        with self.lock:
            return len(self._orders)
