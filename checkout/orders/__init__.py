from checkout.orders.models import FINAL_STATUSES, PENDING, SUCCESS_STATUSES, Order, is_final
from checkout.orders.orchestrator import TransactionOrchestrator, make_order_id
from checkout.orders.store import InMemoryOrderStore, OrderStore

__all__ = [
    "FINAL_STATUSES",
    "PENDING",
    "SUCCESS_STATUSES",
    "InMemoryOrderStore",
    "Order",
    "OrderStore",
    "TransactionOrchestrator",
    "is_final",
    "make_order_id",
]
