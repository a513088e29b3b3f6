import os
os.environ.setdefault("DEBUG", "True")  # keep file logging off during tests

import pytest
from fastapi.testclient import TestClient

from catalog_admin.main import app
from catalog_admin.api.deps import get_bulk_job_store, get_discount_service
from catalog_admin.services.bulk_jobs import BulkJobStore
from catalog_admin.services.errors import RemoteServiceError


class FakeDiscountService:
    """In-memory stand-in for the catalog backend"""

    def __init__(self):
        self.failing = {}  # product id -> exception to raise
        self.products = []
        self.list_error = None
        self.calls = []

    def fail(self, product_id, message="Product not found"):
        self.failing[product_id] = RemoteServiceError(message, status_code=404)

    def apply_discount(self, product_id, discount_percent):
        self.calls.append(("apply", product_id, discount_percent))
        if product_id in self.failing:
            raise self.failing[product_id]
        return {"success": True, "productId": product_id}

    def remove_discount(self, product_id):
        self.calls.append(("remove", product_id))
        if product_id in self.failing:
            raise self.failing[product_id]
        return {"success": True, "productId": product_id}

    def list_discounted_products(self):
        self.calls.append(("list",))
        if self.list_error:
            raise self.list_error
        return list(self.products)


class ImmediateScheduler:
    """Runs scheduled completion callbacks right away and remembers the delays"""

    def __init__(self):
        self.delays = []

    def __call__(self, delay, callback):
        self.delays.append(delay)
        callback()


@pytest.fixture
def fake_service():
    return FakeDiscountService()


@pytest.fixture
def scheduler():
    return ImmediateScheduler()


@pytest.fixture
def job_store():
    return BulkJobStore()


@pytest.fixture
def client(fake_service, job_store):
    app.dependency_overrides[get_discount_service] = lambda: fake_service
    app.dependency_overrides[get_bulk_job_store] = lambda: job_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer testtoken"}
