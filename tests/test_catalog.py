import pytest


@pytest.mark.parametrize(
    "resource, payload, update",
    [
        ("authors", {"first_name": "Octavio", "last_name": "Paz", "nationality": "MX"}, {"bio": "Poeta"}),
        ("categories", {"name": "Ensayo"}, {"description": "No ficcion"}),
        ("publishers", {"name": "Anagrama", "country": "ES", "email": "info@anagrama.es"}, {"city": "Barcelona"}),
    ],
)
def test_crud_round(client, admin_headers, customer_headers, resource, payload, update):
    base = f"/api/v1/{resource}"

    assert client.post(base, json=payload, headers=customer_headers).status_code == 403
    created = client.post(base, json=payload, headers=admin_headers)
    assert created.status_code == 201, created.get_json()
    item = created.get_json()

    listing = client.get(base).get_json()
    assert listing["total"] == 1
    assert listing["data"][0]["id"] == item["id"]

    patched = client.patch(f"{base}/{item['id']}", json=update, headers=admin_headers)
    assert patched.status_code == 200
    body = patched.get_json()
    for key, value in update.items():
        assert body[key] == value
    for key, value in payload.items():
        assert body[key] == value

    assert client.get(f"{base}/{item['id']}").status_code == 200
    assert client.delete(f"{base}/{item['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"{base}/{item['id']}").status_code == 404
    assert client.patch(f"{base}/{item['id']}", json=update, headers=admin_headers).status_code == 404


def test_create_rejects_blank_and_unknown_fields(client, admin_headers):
    blank = client.post("/api/v1/authors", json={"first_name": "  ", "last_name": "X"}, headers=admin_headers)
    assert blank.status_code == 400

    unknown = client.post("/api/v1/categories", json={"name": "X", "colour": "red"}, headers=admin_headers)
    assert unknown.status_code == 400
    assert "colour" in unknown.get_json()["details"]


def test_authors_are_ordered_by_name(client, make_author):
    make_author(first_name="Mario", last_name="Vargas")
    make_author(first_name="Isabel", last_name="Allende")
    make_author(first_name="Adolfo", last_name="Bioy")

    data = client.get("/api/v1/authors").get_json()["data"]
    assert [a["last_name"] for a in data] == ["Allende", "Bioy", "Vargas"]


def test_category_parent_rules(client, admin_headers, make_category):
    parent = make_category(name="Ficcion")
    child = make_category(name="Policial", parent_id=parent["id"])
    assert child["parent_id"] == parent["id"]

    missing = client.post("/api/v1/categories", json={"name": "X", "parent_id": "nope"}, headers=admin_headers)
    assert missing.status_code == 400

    itself = client.patch(f"/api/v1/categories/{parent['id']}", json={"parent_id": parent["id"]}, headers=admin_headers)
    assert itself.status_code == 400
    assert itself.get_json()["message"] == "A category cannot be its own parent"


def test_deleting_category_keeps_its_books(client, admin_headers, make_category, make_book):
    category = make_category()
    book = make_book(category_id=category["id"])

    assert client.delete(f"/api/v1/categories/{category['id']}", headers=admin_headers).status_code == 204
    body = client.get(f"/api/v1/books/{book['id']}").get_json()
    assert body["category_id"] is None
    assert body["category_name"] is None


def test_deleting_author_unlinks_books(client, admin_headers, make_author, make_book):
    author = make_author()
    book = make_book(author_ids=[author["id"]])

    assert client.delete(f"/api/v1/authors/{author['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/v1/books/{book['id']}").get_json()["authors"] == []
