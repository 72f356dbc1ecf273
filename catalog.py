import logging
from typing import Any, Dict, List, Optional

from database import DataStore
from errors import UpstreamError
from schemas import HighlightUpdate, ProductUpdate

logger = logging.getLogger(__name__)

PRODUCTS = "products"


def list_products(store: DataStore) -> List[Dict[str, Any]]:
    return store.select(PRODUCTS, order_by="id")


def create_product(store: DataStore, payload: Dict[str, Any]) -> Dict[str, Any]:
    # stored as sent; the store is the only validator
    try:
        return store.insert(PRODUCTS, payload)
    except UpstreamError:
        logger.exception("Failed to save product")
        raise


def update_product(store: DataStore, product_id: str, payload: ProductUpdate) -> Optional[Dict[str, Any]]:
    # only the fields present in the request are overwritten
    data = payload.model_dump(exclude_unset=True)
    if not data:
        return store.select_one(PRODUCTS, {"id": product_id})
    try:
        return store.update_one(PRODUCTS, {"id": product_id}, data)
    except UpstreamError:
        logger.exception("Failed to update product %s", product_id)
        raise


def set_highlight(store: DataStore, product_id: str, payload: HighlightUpdate) -> None:
    store.update(PRODUCTS, {"id": product_id}, {"is_highlight": payload.is_highlight})


def delete_product(store: DataStore, product_id: str) -> None:
    store.delete(PRODUCTS, {"id": product_id})
