from concurrent.futures import Future
from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.dispatched = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            raise ConnectionRefusedError("smtp down")
        self.sent.append((to, subject, html))

    def dispatch(self, to, subject, html):
        future = Future()
        if self.fail:
            future.set_exception(ConnectionRefusedError("smtp down"))
        else:
            self.dispatched.append((to, subject, html))
            future.set_result(None)
        return future


@pytest.fixture
def settings():
    return Settings(DATABASE_URL=None, SECRET_KEY="test-secret")


@pytest.fixture
def db():
    return mongomock.MongoClient().dropstore_test


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(settings, db, mailer):
    with TestClient(create_app(settings, db=db, mailer=mailer)) as c:
        yield c


@pytest.fixture
def make_product(db):
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(name="Runner", category="Shoes", brand="Acme", price=49.0, age_days=0):
        doc = {
            "product_name": name,
            "brand_name": brand,
            "category": category,
            "price": price,
            "images": [],
            "created_at": created + timedelta(days=age_days),
        }
        return str(db["product"].insert_one(doc).inserted_id)

    return _make


@pytest.fixture
def register(client, db):
    def _register(name="A", email="a@x.com", password="p1", verify=False):
        res = client.post("/register", json={"name": name, "email": email, "password": password})
        assert res.status_code == 200
        user = db["user"].find_one({"email": email})
        if verify:
            assert client.get(f"/verify/{user['verification_token']}").status_code == 200
        return str(user["_id"])

    return _register
