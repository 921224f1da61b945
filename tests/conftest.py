import itertools

import pytest

from api import create_app
from models import storage

ADMIN_EMAIL = "admin@admin.com"
ADMIN_PASSWORD = "admin123"

_isbn_counter = itertools.count(1)
_email_counter = itertools.count(1)


def isbn13(n: int) -> str:
    """Valid ISBN-13 (978 prefix) for sequence number n."""
    base = f"978{n:09d}"
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(base))
    return base + str((10 - total % 10) % 10)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(tmp_path):
    app = create_app("testing", overrides={"DATABASE_URL": f"sqlite:///{tmp_path / 'bookstore-test.db'}"})
    yield app
    storage.close()
    storage.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    with app.app_context():
        yield storage.get_session()


def login(client, email, password) -> dict:
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return bearer(resp.get_json()["access_token"])


@pytest.fixture
def admin_headers(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def register(client):
    """Register a fresh customer; returns (headers, user dict)."""
    def _register(email=None, password="pw123456", **profile):
        email = email or f"customer{next(_email_counter)}@example.com"
        body = {"email": email, "password": password, "first_name": "Test", "last_name": "Customer"}
        body.update(profile)
        resp = client.post("/api/v1/auth/register", json=body)
        assert resp.status_code == 201, resp.get_json()
        data = resp.get_json()
        return bearer(data["access_token"]), data["user"]

    return _register


@pytest.fixture
def customer(register):
    return register()


@pytest.fixture
def customer_headers(customer):
    return customer[0]


@pytest.fixture
def make_author(client, admin_headers):
    def _make(first_name="Gabriel", last_name="Garcia", **extra):
        resp = client.post(
            "/api/v1/authors",
            json={"first_name": first_name, "last_name": last_name, **extra},
            headers=admin_headers,
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make


@pytest.fixture
def make_category(client, admin_headers):
    def _make(name="Novel", **extra):
        resp = client.post("/api/v1/categories", json={"name": name, **extra}, headers=admin_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make


@pytest.fixture
def make_publisher(client, admin_headers):
    def _make(name="Sudamericana", **extra):
        resp = client.post("/api/v1/publishers", json={"name": name, **extra}, headers=admin_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make


@pytest.fixture
def make_book(client, admin_headers):
    def _make(title="Cien anos de soledad", price="20.00", stock=10, **extra):
        body = {"isbn": isbn13(next(_isbn_counter)), "title": title, "price": price, "stock": stock}
        body.update(extra)
        resp = client.post("/api/v1/books", json=body, headers=admin_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make


@pytest.fixture
def make_address(client):
    def _make(headers, **extra):
        body = {"street": "Calle 1", "city": "Bogota", "postal_code": "110111", "country": "CO"}
        body.update(extra)
        resp = client.post("/api/v1/addresses", json=body, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make


@pytest.fixture
def place_order(client, admin_headers, make_address):
    """Cart -> checkout for `headers`; optionally move the order to `status`."""
    def _place(headers, lines, status=None):
        for book_id, quantity in lines:
            resp = client.post("/api/v1/cart", json={"book_id": book_id, "quantity": quantity}, headers=headers)
            assert resp.status_code == 201, resp.get_json()
        address = make_address(headers)
        resp = client.post("/api/v1/orders", json={"address_id": address["id"]}, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        order = resp.get_json()
        if status:
            resp = client.patch(
                f"/api/v1/orders/{order['id']}/status", json={"status": status}, headers=admin_headers
            )
            assert resp.status_code == 200, resp.get_json()
            order = resp.get_json()
        return order

    return _place
