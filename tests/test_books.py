from sqlalchemy import event

from models import storage
from tests.conftest import isbn13


def _titles(resp):
    assert resp.status_code == 200, resp.get_json()
    return [b["title"] for b in resp.get_json()["data"]]


def test_create_and_get_book(client, admin_headers, make_author, make_category, make_publisher):
    author = make_author()
    category = make_category()
    publisher = make_publisher()

    resp = client.post(
        "/api/v1/books",
        json={
            "isbn": "978-0-306-40615-7",
            "title": "El amor en los tiempos del colera",
            "price": "25.50",
            "stock": 4,
            "publication_date": "1985-09-05",
            "category_id": category["id"],
            "publisher_id": publisher["id"],
            "author_ids": [author["id"]],
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.get_json()
    book = resp.get_json()
    assert book["isbn"] == "9780306406157"
    assert book["price"] == "25.50"
    assert book["language"] == "Spanish"
    assert book["category_name"] == category["name"]
    assert book["publisher_name"] == publisher["name"]
    assert book["average_rating"] == 0
    assert book["review_count"] == 0
    assert book["authors"] == [
        {"id": author["id"], "first_name": "Gabriel", "last_name": "Garcia", "is_primary": True}
    ]

    fetched = client.get(f"/api/v1/books/{book['id']}")
    assert fetched.status_code == 200
    assert fetched.get_json()["title"] == "El amor en los tiempos del colera"


def test_create_book_requires_admin(client, customer_headers):
    body = {"isbn": isbn13(900001), "title": "X", "price": "1.00"}
    assert client.post("/api/v1/books", json=body).status_code == 401
    assert client.post("/api/v1/books", json=body, headers=customer_headers).status_code == 403


def test_create_book_validation(client, admin_headers, make_book):
    bad_isbn = client.post(
        "/api/v1/books", json={"isbn": "9780306406158", "title": "X", "price": "1.00"}, headers=admin_headers
    )
    assert bad_isbn.status_code == 400

    negative = client.post(
        "/api/v1/books", json={"isbn": isbn13(900002), "title": "X", "price": "-1"}, headers=admin_headers
    )
    assert negative.status_code == 400

    unknown_category = client.post(
        "/api/v1/books",
        json={"isbn": isbn13(900003), "title": "X", "price": "1.00", "category_id": "missing"},
        headers=admin_headers,
    )
    assert unknown_category.status_code == 400

    existing = make_book()
    duplicate = client.post(
        "/api/v1/books", json={"isbn": existing["isbn"], "title": "Y", "price": "1.00"}, headers=admin_headers
    )
    assert duplicate.status_code == 409


def test_get_missing_book(client):
    resp = client.get("/api/v1/books/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NOT_FOUND"


def test_update_book_is_partial(client, admin_headers, make_book):
    book = make_book(title="Original", price="10.00", stock=3, description="keep me")

    resp = client.patch(f"/api/v1/books/{book['id']}", json={"price": "12.00"}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["price"] == "12.00"
    assert body["title"] == "Original"
    assert body["description"] == "keep me"

    resp = client.put(f"/api/v1/books/{book['id']}", json={"is_active": False}, headers=admin_headers)
    assert resp.get_json()["is_active"] is False

    unchanged = client.patch(f"/api/v1/books/{book['id']}", json={}, headers=admin_headers)
    assert unchanged.status_code == 200
    assert unchanged.get_json()["price"] == "12.00"


def test_update_book_replaces_author_set(client, admin_headers, make_book, make_author):
    first = make_author(first_name="Isabel", last_name="Allende")
    second = make_author(first_name="Mario", last_name="Vargas")
    book = make_book(author_ids=[first["id"]])

    resp = client.patch(
        f"/api/v1/books/{book['id']}",
        json={"author_ids": [first["id"], second["id"]], "primary_author_id": second["id"]},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    authors = resp.get_json()["authors"]
    assert [a["id"] for a in authors] == [second["id"], first["id"]]
    assert [a["is_primary"] for a in authors] == [True, False]


def test_delete_book(client, admin_headers, make_book):
    book = make_book()
    assert client.delete(f"/api/v1/books/{book['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/v1/books/{book['id']}").status_code == 404
    assert client.delete(f"/api/v1/books/{book['id']}", headers=admin_headers).status_code == 404


def test_delete_book_in_orders_conflicts(client, admin_headers, make_book, customer_headers, place_order):
    book = make_book()
    place_order(customer_headers, [(book["id"], 1)])

    assert client.delete(f"/api/v1/books/{book['id']}", headers=admin_headers).status_code == 409


def test_public_listing_hides_inactive_books(client, admin_headers, make_book):
    make_book(title="Visible")
    make_book(title="Hidden", is_active=False)

    assert _titles(client.get("/api/v1/books")) == ["Visible"]

    admin_titles = _titles(client.get("/api/v1/books/admin", headers=admin_headers))
    assert sorted(admin_titles) == ["Hidden", "Visible"]


def test_listing_envelope_and_search(client, make_book):
    for i in range(12):
        make_book(title=f"Cronica {i:02d}")
    make_book(title="Pedro Paramo")

    resp = client.get("/api/v1/books?page=2&limit=5")
    body = resp.get_json()
    assert body["total"] == 13
    assert body["page"] == 2
    assert body["limit"] == 5
    assert body["totalPages"] == 3
    assert len(body["data"]) == 5

    assert _titles(client.get("/api/v1/books?search=paramo")) == ["Pedro Paramo"]
    assert client.get("/api/v1/books?page=x").status_code == 400

    huge = client.get("/api/v1/books?page=99999999999999999999")
    assert huge.status_code == 400
    assert huge.get_json()["error"] == "BAD_REQUEST"
    assert client.get("/api/v1/books?page=1000").get_json()["data"] == []


def test_listing_statement_count_does_not_grow_with_page(client, make_book, make_author):
    author = make_author()
    for i in range(6):
        make_book(title=f"Book {i}", author_ids=[author["id"]])

    def count_statements(url):
        seen = []

        def record(conn, cursor, statement, parameters, context, executemany):
            seen.append(statement)

        event.listen(storage.engine, "before_cursor_execute", record)
        try:
            assert client.get(url).status_code == 200
        finally:
            event.remove(storage.engine, "before_cursor_execute", record)
        return len(seen)

    small = count_statements("/api/v1/books?limit=1")
    large = count_statements("/api/v1/books?limit=6")
    assert small == large
    assert large <= 3


def test_advanced_search_filters(client, make_book, make_author, make_category):
    novel = make_category(name="Novel")
    poetry = make_category(name="Poetry")
    neruda = make_author(first_name="Pablo", last_name="Neruda")

    make_book(title="Veinte poemas", price="15.00", stock=2, category_id=poetry["id"], author_ids=[neruda["id"]],
              publication_date="1924-06-01", language="Spanish")
    make_book(title="Rayuela", price="30.00", stock=8, category_id=novel["id"],
              publication_date="1963-06-28", language="Spanish")
    make_book(title="Ficciones", price="20.00", stock=0, category_id=novel["id"],
              publication_date="1944-01-01", language="English")

    search = "/api/v1/books/search/advanced"
    assert _titles(client.get(f"{search}?category={novel['id']}")) == ["Ficciones", "Rayuela"]
    assert _titles(client.get(f"{search}?author={neruda['id']}")) == ["Veinte poemas"]
    assert _titles(client.get(f"{search}?minPrice=15&maxPrice=20")) == ["Ficciones", "Veinte poemas"]
    assert _titles(client.get(f"{search}?language=english")) == ["Ficciones"]
    assert _titles(client.get(f"{search}?minStock=1&maxStock=5")) == ["Veinte poemas"]
    assert _titles(client.get(f"{search}?startDate=1940-01-01&endDate=1950-12-31")) == ["Ficciones"]
    assert _titles(client.get(f"{search}?search=ayu")) == ["Rayuela"]
    assert _titles(client.get(f"{search}?sortBy=price&sortOrder=desc")) == ["Rayuela", "Ficciones", "Veinte poemas"]
    assert _titles(client.get(f"{search}?sortBy=date")) == ["Veinte poemas", "Ficciones", "Rayuela"]
    assert _titles(client.get(f"{search}?category=")) == ["Ficciones", "Rayuela", "Veinte poemas"]

    body = client.get(f"{search}?category={novel['id']}&limit=1").get_json()
    assert body["total"] == 2
    assert body["totalPages"] == 2


def test_advanced_search_rejects_bad_sort(client):
    resp = client.get("/api/v1/books/search/advanced?sortBy=popularity")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "VALIDATION_ERROR"

    assert client.get("/api/v1/books/search/advanced?sortOrder=sideways").status_code == 400
    assert client.get("/api/v1/books/search/advanced?minRating=6").status_code == 400


def test_rating_filter_and_sort(client, make_book, register, place_order):
    loved = make_book(title="Loved", stock=5)
    meh = make_book(title="Meh", stock=5)
    make_book(title="Unrated")

    for rating_loved, rating_meh in ((5, 2), (4, 3)):
        headers, _ = register()
        place_order(headers, [(loved["id"], 1), (meh["id"], 1)], status="delivered")
        for book, rating in ((loved, rating_loved), (meh, rating_meh)):
            resp = client.post("/api/v1/reviews", json={"book_id": book["id"], "rating": rating}, headers=headers)
            assert resp.status_code == 201, resp.get_json()

    search = "/api/v1/books/search/advanced"
    assert _titles(client.get(f"{search}?minRating=4")) == ["Loved"]
    assert _titles(client.get(f"{search}?minRating=0")) == ["Loved", "Meh", "Unrated"]
    assert _titles(client.get(f"{search}?sortBy=rating&sortOrder=DESC")) == ["Loved", "Meh", "Unrated"]

    body = client.get(f"/api/v1/books/{loved['id']}").get_json()
    assert body["average_rating"] == 4.5
    assert body["review_count"] == 2


def test_book_author_links(client, admin_headers, make_book, make_author):
    book = make_book()
    first = make_author(first_name="Julio", last_name="Cortazar")
    second = make_author(first_name="Jorge", last_name="Borges")
    base = f"/api/v1/books/{book['id']}/authors"

    resp = client.post(base, json={"author_id": first["id"], "is_primary": True}, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.get_json()["author_name"] == "Julio Cortazar"

    resp = client.post(base, json={"author_id": second["id"], "is_primary": True}, headers=admin_headers)
    assert resp.status_code == 201

    links = client.get(base).get_json()
    primaries = {link["author_id"]: link["is_primary"] for link in links}
    assert primaries == {first["id"]: False, second["id"]: True}

    duplicate = client.post(base, json={"author_id": first["id"]}, headers=admin_headers)
    assert duplicate.status_code == 400
    assert duplicate.get_json()["message"] == "Author is already assigned to this book"

    missing = client.post(base, json={"author_id": "nope"}, headers=admin_headers)
    assert missing.status_code == 404

    assert client.delete(f"{base}/{first['id']}", headers=admin_headers).status_code == 204
    gone = client.delete(f"{base}/{first['id']}", headers=admin_headers)
    assert gone.status_code == 404
    assert gone.get_json()["message"] == "Author-book relationship not found"


def test_bestsellers(client, make_book, register, place_order):
    popular = make_book(title="Popular", price="10.00", stock=20)
    niche = make_book(title="Niche", price="50.00", stock=20)
    pending = make_book(title="Pending", stock=20)

    headers, _ = register()
    place_order(headers, [(popular["id"], 3), (niche["id"], 1)], status="shipped")
    place_order(headers, [(pending["id"], 9)])

    rows = client.get("/api/v1/books/bestsellers").get_json()
    assert [r["title"] for r in rows] == ["Popular", "Niche"]
    assert rows[0]["total_sold"] == 3
    assert rows[0]["total_revenue"] == "30.00"

    assert len(client.get("/api/v1/books/bestsellers?limit=1").get_json()) == 1
    assert client.get("/api/v1/books/bestsellers?startDate=2000-01-01&endDate=2000-01-02").get_json() == []


def test_search_matches_description(client, make_book):
    make_book(title="Yo el Supremo", description="Una novela sobre el dictador Francia")
    make_book(title="Conversacion en La Catedral", description="Lima bajo Odria")

    assert _titles(client.get("/api/v1/books?search=dictador")) == ["Yo el Supremo"]
    assert _titles(client.get("/api/v1/books/search/advanced?search=ODRIA")) == ["Conversacion en La Catedral"]
