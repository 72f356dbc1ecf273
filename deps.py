"""FastAPI providers for the collaborators built once in ``main.create_app``."""
from fastapi import Request

from config import Settings
from database import DataStore
from errors import InternalError
from identity import IdentityClient
from payments import PaymentGateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DataStore:
    store = request.app.state.store
    if store is None:
        raise InternalError("Database not configured")
    return store


def get_identity(request: Request) -> IdentityClient:
    return request.app.state.identity


def get_payments(request: Request) -> PaymentGateway:
    return request.app.state.payments
