import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import catalog
import checkout as checkout_flow
import orders
from auth import require_admin, require_client
from config import Settings
from dashboard import dashboard_stats
from database import DataStore, connect
from deps import get_identity, get_payments, get_settings, get_store
from errors import ShopError
from identity import Identity, IdentityClient
from payments import PaymentGateway
from schemas import (
    CheckoutRequest,
    HighlightUpdate,
    LoginRequest,
    ProductUpdate,
    SignupRequest,
    StatusUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CHECKOUT_PATHS = ("/api/checkout", "/api/checkout-teste")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Settings,
    store: Optional[DataStore] = None,
    identity: Optional[IdentityClient] = None,
    payments: Optional[PaymentGateway] = None,
) -> FastAPI:
    app = FastAPI(title="Shop API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is None:
        db = connect(settings.database_url, settings.database_name)
        store = DataStore(db) if db is not None else None
    app.state.settings = settings
    app.state.store = store
    app.state.identity = identity or IdentityClient(settings.supabase_url, settings.supabase_key)
    app.state.payments = payments or PaymentGateway(
        settings.stripe_secret_key, settings.currency, settings.site_url, settings.card_installments
    )

    app.add_exception_handler(ShopError, _shop_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    return app


def _shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{loc}: {first.get('msg', 'invalid request')}" if loc else first.get("msg", "invalid request")
    if request.url.path in CHECKOUT_PATHS:
        return JSONResponse(status_code=400, content={"status": "error", "message": message})
    return JSONResponse(status_code=400, content={"error": message})


def _checkout_error(exc: ShopError) -> JSONResponse:
    logger.warning("Checkout aborted: %s", exc.message)
    return JSONResponse(status_code=400, content={"status": "error", "message": exc.message})


@router.get("/")
def root():
    return {"name": "Shop API", "status": "ok"}


# --- Catalog ---
@router.get("/api/products")
def list_products(store: DataStore = Depends(get_store)):
    return catalog.list_products(store)


# --- Client ---
@router.get("/api/client/orders/{user_id}")
def client_orders(user_id: str, user: Identity = Depends(require_client), store: DataStore = Depends(get_store)):
    return orders.client_orders(store, user, user_id)


@router.post("/api/checkout")
def checkout(req: CheckoutRequest, store: DataStore = Depends(get_store),
             payments: PaymentGateway = Depends(get_payments)):
    try:
        url = checkout_flow.checkout(store, payments, req)
    except ShopError as e:
        return _checkout_error(e)
    return {"status": "success", "paymentUrl": url}


@router.post("/api/checkout-teste")
def checkout_test(req: CheckoutRequest, store: DataStore = Depends(get_store)):
    try:
        checkout_flow.checkout_test(store, req)
    except ShopError as e:
        return _checkout_error(e)
    return {"status": "success"}


# --- Auth ---
@router.post("/api/client/signup")
def signup(req: SignupRequest, identity: IdentityClient = Depends(get_identity)):
    try:
        data = identity.sign_up(req.email, req.password, req.name)
    except ShopError as e:
        return JSONResponse(status_code=400, content={"error": e.message})
    if data.get("session"):
        return {"success": True, "user": data["user"], "session": data["session"]}
    return {"success": True, "requireConfirmation": True}


@router.post("/api/client/login")
def client_login(req: LoginRequest, identity: IdentityClient = Depends(get_identity)):
    try:
        data = identity.sign_in(req.email, req.password)
    except ShopError:
        return JSONResponse(status_code=401, content={"error": "Incorrect credentials."})
    return {"success": True, "user": data["user"], "session": data["session"]}


@router.post("/api/admin/login")
def admin_login(req: LoginRequest, identity: IdentityClient = Depends(get_identity),
                settings: Settings = Depends(get_settings)):
    invalid = JSONResponse(status_code=401, content={"success": False, "error": "Invalid credentials."})
    if not settings.admin_email or req.email != settings.admin_email:
        logger.warning("Admin login refused for %s", req.email)
        return invalid
    try:
        data = identity.sign_in(req.email, req.password)
    except ShopError:
        return invalid
    if not data.get("session"):
        return invalid
    return {"success": True, "token": data["session"]["access_token"]}


# --- Admin ---
@router.get("/api/admin/dashboard")
def admin_dashboard(_: Identity = Depends(require_admin), store: DataStore = Depends(get_store),
                    settings: Settings = Depends(get_settings)):
    return dashboard_stats(store, settings.low_stock_threshold)


@router.post("/api/admin/products")
def admin_create_product(payload: Dict[str, Any] = Body(...), _: Identity = Depends(require_admin),
                         store: DataStore = Depends(get_store)):
    catalog.create_product(store, payload)
    return {"success": True}


@router.delete("/api/admin/products/{product_id}")
def admin_delete_product(product_id: str, _: Identity = Depends(require_admin),
                         store: DataStore = Depends(get_store)):
    catalog.delete_product(store, product_id)
    return {"success": True}


@router.patch("/api/admin/products/{product_id}/highlight")
def admin_highlight_product(product_id: str, payload: HighlightUpdate, _: Identity = Depends(require_admin),
                            store: DataStore = Depends(get_store)):
    catalog.set_highlight(store, product_id, payload)
    return {"success": True}


@router.patch("/api/admin/products/{product_id}")
def admin_update_product(product_id: str, payload: ProductUpdate, _: Identity = Depends(require_admin),
                         store: DataStore = Depends(get_store)):
    data = catalog.update_product(store, product_id, payload)
    return {"success": True, "data": data}


@router.get("/api/admin/orders")
def admin_list_orders(_: Identity = Depends(require_admin), store: DataStore = Depends(get_store)):
    return orders.list_orders(store)


@router.patch("/api/admin/orders/{order_id}")
def admin_update_order(order_id: str, payload: StatusUpdate, _: Identity = Depends(require_admin),
                       store: DataStore = Depends(get_store)):
    orders.update_status(store, order_id, payload.status)
    return {"success": True}


@router.delete("/api/admin/orders/{order_id}")
def admin_delete_order(order_id: str, _: Identity = Depends(require_admin),
                       store: DataStore = Depends(get_store)):
    orders.delete_order(store, order_id)
    return {"success": True}


settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
