"""Shared fixtures: an app wired to mongomock and in-memory identity/payment doubles."""
import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import DataStore
from errors import UpstreamError
from identity import Identity
from main import create_app

ADMIN_EMAIL = "admin@shop.test"


class FakeIdentity:
    def __init__(self):
        self.tokens = {}
        self.accounts = {}
        self.calls = []

    def add_user(self, token: str, user_id: str, email: str) -> Identity:
        user = Identity(id=user_id, email=email, raw={"id": user_id, "email": email})
        self.tokens[token] = user
        return user

    def get_user(self, token):
        self.calls.append(("get_user", token))
        return self.tokens.get(token)

    def sign_up(self, email, password, name=None):
        self.calls.append(("sign_up", email))
        if email in self.accounts:
            raise UpstreamError("User already registered")
        self.accounts[email] = password
        user = {"id": f"user-{len(self.accounts)}", "email": email, "user_metadata": {"full_name": name}}
        return {"user": user, "session": None}

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        if self.accounts.get(email) != password:
            raise UpstreamError("Invalid login credentials")
        user = {"id": f"id-{email}", "email": email}
        return {"user": user, "session": {"access_token": f"token-{email}", "user": user}}


class FakePayments:
    def __init__(self):
        self.calls = []
        self.error = None

    def create_payment_link(self, items, payer, external_reference):
        self.calls.append({"items": items, "payer": payer, "external_reference": external_reference})
        if self.error is not None:
            raise self.error
        return f"https://checkout.stripe.test/pay/{external_reference}"


@pytest.fixture
def settings() -> Settings:
    return Settings(admin_email=ADMIN_EMAIL, site_url="http://localhost:3001")


@pytest.fixture
def store() -> DataStore:
    return DataStore(mongomock.MongoClient()["shop"])


@pytest.fixture
def identity() -> FakeIdentity:
    fake = FakeIdentity()
    fake.add_user("admin-token", "admin-id", ADMIN_EMAIL)
    fake.add_user("alice-token", "alice-id", "alice@example.com")
    fake.add_user("bob-token", "bob-id", "bob@example.com")
    return fake


@pytest.fixture
def payments() -> FakePayments:
    return FakePayments()


@pytest.fixture
def client(settings, store, identity, payments) -> TestClient:
    app = create_app(settings, store=store, identity=identity, payments=payments)
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer admin-token"}


@pytest.fixture
def alice_headers():
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def product(store):
    return store.insert("products", {"name": "Oak Chair", "price": 120.0, "stock": 2,
                                     "image": "chair.png", "description": "Solid oak", "is_highlight": False})
