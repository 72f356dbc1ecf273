from typing import Any, Dict, List

from database import DataStore
from errors import Forbidden
from identity import Identity

ORDERS = "orders"


def client_orders(store: DataStore, user: Identity, user_id: str) -> List[Dict[str, Any]]:
    """Order history of ``user_id``, newest first. Callers only see their own."""
    if user.id != user_id:
        raise Forbidden("Access denied")
    return store.select(ORDERS, {"user_id": user_id}, order_by="created_at", descending=True)


def list_orders(store: DataStore) -> List[Dict[str, Any]]:
    return store.select(ORDERS, order_by="created_at", descending=True)


def update_status(store: DataStore, order_id: str, status: str) -> None:
    store.update(ORDERS, {"id": order_id}, {"status": status})


def delete_order(store: DataStore, order_id: str) -> None:
    store.delete(ORDERS, {"id": order_id})
