"""
Hosted payment pages through Stripe Checkout.

One session per order. The order id travels as ``client_reference_id`` (and in
metadata) so a later webhook can be matched back to the order row.
"""
from typing import Any, Dict, List

import stripe

from errors import UpstreamError


def to_minor_units(amount: float) -> int:
    # Stripe expects amount in smallest unit (centavos, cents)
    return int(round(float(amount) * 100))


class PaymentGateway:
    def __init__(self, secret_key: str, currency: str, site_url: str, card_installments: bool = False):
        self.secret_key = secret_key
        self.currency = currency
        self.site_url = site_url
        self.card_installments = card_installments

    def build_session_params(self, items: List[Dict[str, Any]], payer: Dict[str, Any],
                             external_reference: str) -> Dict[str, Any]:
        line_items = []
        for it in items:
            line_items.append({
                "price_data": {
                    "currency": self.currency,
                    "product_data": {"name": it.get("name") or "Item"},
                    "unit_amount": to_minor_units(it.get("price", 0)),
                },
                "quantity": int(it.get("quantity", 1)),
            })
        params: Dict[str, Any] = {
            "mode": "payment",
            "line_items": line_items,
            "customer_email": payer.get("email"),
            "client_reference_id": external_reference,
            "metadata": {"order_id": external_reference, "payer_name": payer.get("name") or ""},
            # success / failure / pending all land back on the storefront
            "success_url": self.site_url,
            "cancel_url": self.site_url,
        }
        # Stripe only toggles card installments; the plan count is chosen by the card network
        if self.card_installments:
            params["payment_method_options"] = {"card": {"installments": {"enabled": True}}}
        return params

    def create_payment_link(self, items: List[Dict[str, Any]], payer: Dict[str, Any],
                            external_reference: str) -> str:
        if not self.secret_key:
            raise UpstreamError("Payment processor not configured")
        params = self.build_session_params(items, payer, external_reference)
        try:
            session = stripe.checkout.Session.create(api_key=self.secret_key, **params)
        except stripe.StripeError as e:
            raise UpstreamError(e.user_message or str(e))
        return session.url
