def _defaults(client, headers):
    return [a["id"] for a in client.get("/api/v1/addresses", headers=headers).get_json() if a["is_default"]]


def test_create_and_list(client, customer, make_address):
    headers, user = customer
    address = make_address(headers, city="Quito")
    assert address["user_id"] == user["id"]
    assert address["is_default"] is False

    listing = client.get("/api/v1/addresses", headers=headers).get_json()
    assert [a["city"] for a in listing] == ["Quito"]
    assert client.get("/api/v1/addresses").status_code == 401


def test_single_default_address(client, customer_headers, make_address):
    first = make_address(customer_headers, is_default=True)
    second = make_address(customer_headers, is_default=True)
    assert _defaults(client, customer_headers) == [second["id"]]

    resp = client.patch(f"/api/v1/addresses/{first['id']}", json={"is_default": True}, headers=customer_headers)
    assert resp.status_code == 200
    assert _defaults(client, customer_headers) == [first["id"]]

    listing = client.get("/api/v1/addresses", headers=customer_headers).get_json()
    assert listing[0]["id"] == first["id"]


def test_default_flag_is_per_user(client, register, make_address):
    first_headers, _ = register()
    second_headers, _ = register()
    mine = make_address(first_headers, is_default=True)
    make_address(second_headers, is_default=True)

    assert _defaults(client, first_headers) == [mine["id"]]


def test_partial_update_keeps_other_fields(client, customer_headers, make_address):
    address = make_address(customer_headers, state="Pichincha")

    resp = client.put(f"/api/v1/addresses/{address['id']}", json={"city": "Cuenca"}, headers=customer_headers)
    body = resp.get_json()
    assert body["city"] == "Cuenca"
    assert body["state"] == "Pichincha"
    assert body["street"] == address["street"]

    cleared = client.patch(f"/api/v1/addresses/{address['id']}", json={"state": None}, headers=customer_headers)
    assert cleared.get_json()["state"] is None


def test_other_users_addresses_are_forbidden(client, register, make_address):
    owner_headers, _ = register()
    other_headers, _ = register()
    address = make_address(owner_headers, is_default=True)
    url = f"/api/v1/addresses/{address['id']}"

    assert client.get(url, headers=other_headers).status_code == 403
    assert client.patch(url, json={"city": "X"}, headers=other_headers).status_code == 403
    assert client.patch(url, json={}, headers=other_headers).status_code == 403
    assert client.delete(url, headers=other_headers).status_code == 403

    # a rejected is_default update leaves the owner's default untouched
    make_address(other_headers)
    assert client.patch(url, json={"is_default": True}, headers=other_headers).status_code == 403
    assert _defaults(client, owner_headers) == [address["id"]]

    body = client.get(url, headers=owner_headers).get_json()
    assert body["city"] == address["city"]


def test_delete_and_missing(client, customer_headers, make_address):
    address = make_address(customer_headers)
    url = f"/api/v1/addresses/{address['id']}"

    assert client.delete(url, headers=customer_headers).status_code == 204
    assert client.get(url, headers=customer_headers).status_code == 404
    assert client.patch(url, json={"city": "X"}, headers=customer_headers).status_code == 404


def test_validation(client, customer_headers):
    resp = client.post("/api/v1/addresses", json={"street": "", "city": "X"}, headers=customer_headers)
    assert resp.status_code == 400
    details = resp.get_json()["details"]
    assert {"street", "postal_code", "country"} <= set(details)
