"""
Checkout: cart -> order row -> hosted payment page.

The steps run one after another with no lock or transaction around them.
Stock is only read, never reserved or decremented, so two concurrent
checkouts can both pass the check for the same units.
"""
import logging
from typing import Any, Dict, List

from database import DataStore
from errors import ShopError, ValidationFailed
from payments import PaymentGateway
from schemas import (
    STATUS_AWAITING_PAYMENT,
    STATUS_TEST_APPROVED,
    CartItem,
    CheckoutRequest,
    Order,
)

logger = logging.getLogger(__name__)


def check_stock(store: DataStore, cart: List[CartItem]) -> None:
    for item in cart:
        product = store.select_one("products", {"id": item.id}, fields=["stock"])
        if not product or int(product.get("stock") or 0) < item.quantity:
            raise ValidationFailed(f"Insufficient stock: {item.name}")


def cart_total(cart: List[CartItem]) -> float:
    return round(sum(item.price * item.quantity for item in cart), 2)


def build_order(req: CheckoutRequest, status: str) -> Order:
    return Order(
        customer_name=req.customer_info.name,
        customer_email=req.customer_info.email,
        shipping_address=req.customer_info.address,
        total=cart_total(req.cart),
        items=req.cart,
        user_id=req.user_id or None,
        status=status,
    )


def place_order(store: DataStore, req: CheckoutRequest, status: str) -> Dict[str, Any]:
    check_stock(store, req.cart)
    order = build_order(req, status)
    return store.insert("orders", order.model_dump())


def checkout(store: DataStore, payments: PaymentGateway, req: CheckoutRequest) -> str:
    """Place an order awaiting payment and return the hosted payment page URL."""
    order = place_order(store, req, STATUS_AWAITING_PAYMENT)
    payer = {"email": req.customer_info.email, "name": req.customer_info.name}
    items = [item.model_dump() for item in req.cart]
    try:
        return payments.create_payment_link(items, payer, external_reference=str(order["id"]))
    except ShopError as e:
        # the order row is left as inserted, still awaiting payment
        logger.error("Payment link failed for order %s: %s", order["id"], e.message)
        raise


def checkout_test(store: DataStore, req: CheckoutRequest) -> Dict[str, Any]:
    """Same as :func:`checkout` minus the payment processor; the order is pre-approved."""
    order = place_order(store, req, STATUS_TEST_APPROVED)
    logger.info(">>> Test order #%s created", order["id"])
    return order
