from typing import Any, Dict, Iterable

from database import DataStore
from schemas import STATUS_PENDING, DashboardStats

PENDING_MARKER = "Awaiting"
LOW_STOCK_THRESHOLD = 5


def is_pending(status: Any) -> bool:
    status = status or ""
    return PENDING_MARKER in status or status == STATUS_PENDING


def summarize(orders: Iterable[Dict[str, Any]], products: Iterable[Dict[str, Any]],
              low_stock_threshold: int = LOW_STOCK_THRESHOLD) -> DashboardStats:
    orders = list(orders)
    return DashboardStats(
        totalRevenue=sum(float(o.get("total") or 0) for o in orders),
        totalOrders=len(orders),
        pendingOrders=sum(1 for o in orders if is_pending(o.get("status"))),
        lowStock=sum(1 for p in products if int(p.get("stock") or 0) < low_stock_threshold),
    )


def dashboard_stats(store: DataStore, low_stock_threshold: int = LOW_STOCK_THRESHOLD) -> DashboardStats:
    orders = store.select("orders", fields=["total", "status"])
    products = store.select("products", fields=["stock"])
    return summarize(orders, products, low_stock_threshold)
