def test_cart_requires_login(client):
    assert client.get("/api/v1/cart").status_code == 401


def test_add_accumulates_quantity(client, customer_headers, make_book):
    book = make_book(price="12.50", stock=5)

    first = client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 2}, headers=customer_headers)
    assert first.status_code == 201
    second = client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 1}, headers=customer_headers)
    assert second.status_code == 201
    assert second.get_json()["id"] == first.get_json()["id"]
    assert second.get_json()["quantity"] == 3

    items = client.get("/api/v1/cart", headers=customer_headers).get_json()
    assert len(items) == 1
    assert items[0]["title"] == book["title"]
    assert items[0]["price"] == "12.50"


def test_add_beyond_stock(client, customer_headers, make_book):
    book = make_book(stock=2)

    resp = client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 3}, headers=customer_headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Insufficient stock"

    client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 2}, headers=customer_headers)
    again = client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 1}, headers=customer_headers)
    assert again.status_code == 400


def test_add_unknown_or_inactive_book(client, customer_headers, make_book):
    missing = client.post("/api/v1/cart", json={"book_id": "nope", "quantity": 1}, headers=customer_headers)
    assert missing.status_code == 404

    hidden = make_book(is_active=False)
    resp = client.post("/api/v1/cart", json={"book_id": hidden["id"], "quantity": 1}, headers=customer_headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Book is not available"


def test_add_validates_quantity(client, customer_headers, make_book):
    book = make_book()
    resp = client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 0}, headers=customer_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "VALIDATION_ERROR"


def test_update_and_remove_items(client, customer_headers, make_book):
    book = make_book(stock=4)
    item = client.post(
        "/api/v1/cart", json={"book_id": book["id"], "quantity": 1}, headers=customer_headers
    ).get_json()

    updated = client.patch(f"/api/v1/cart/{item['id']}", json={"quantity": 4}, headers=customer_headers)
    assert updated.status_code == 200
    assert updated.get_json()["quantity"] == 4

    too_many = client.put(f"/api/v1/cart/{item['id']}", json={"quantity": 5}, headers=customer_headers)
    assert too_many.status_code == 400

    assert client.delete(f"/api/v1/cart/{item['id']}", headers=customer_headers).status_code == 204
    assert client.delete(f"/api/v1/cart/{item['id']}", headers=customer_headers).status_code == 404
    assert client.get("/api/v1/cart", headers=customer_headers).get_json() == []


def test_cart_items_are_private(client, register, make_book):
    owner_headers, _ = register()
    other_headers, _ = register()
    book = make_book()
    item = client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 1}, headers=owner_headers).get_json()

    resp = client.patch(f"/api/v1/cart/{item['id']}", json={"quantity": 1}, headers=other_headers)
    assert resp.status_code == 404
    assert client.get("/api/v1/cart", headers=other_headers).get_json() == []


def test_clear_cart(client, customer_headers, make_book):
    for _ in range(2):
        book = make_book()
        client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 1}, headers=customer_headers)

    assert client.delete("/api/v1/cart", headers=customer_headers).status_code == 204
    assert client.get("/api/v1/cart", headers=customer_headers).get_json() == []


def test_cart_hides_deactivated_books(client, admin_headers, customer_headers, make_book):
    book = make_book()
    client.post("/api/v1/cart", json={"book_id": book["id"], "quantity": 1}, headers=customer_headers)
    client.patch(f"/api/v1/books/{book['id']}", json={"is_active": False}, headers=admin_headers)

    assert client.get("/api/v1/cart", headers=customer_headers).get_json() == []
