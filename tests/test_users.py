def test_me_and_profile_update(client, customer):
    headers, user = customer

    me = client.get("/api/v1/users/me", headers=headers).get_json()
    assert me["email"] == user["email"]

    resp = client.patch("/api/v1/users/me", json={"first_name": "Lucia", "phone": "555-0101"}, headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["first_name"] == "Lucia"
    assert body["phone"] == "555-0101"
    assert body["last_name"] == user["last_name"]


def test_profile_update_cannot_change_role(client, customer_headers):
    resp = client.patch("/api/v1/users/me", json={"role": "admin"}, headers=customer_headers)
    assert resp.status_code == 400
    assert client.get("/api/v1/users/me", headers=customer_headers).get_json()["role"] == "customer"


def test_admin_lists_users_by_role(client, admin_headers, register):
    register()
    register()

    everyone = client.get("/api/v1/users", headers=admin_headers).get_json()
    assert everyone["total"] == 3

    customers = client.get("/api/v1/users?role=customer", headers=admin_headers).get_json()
    assert customers["total"] == 2
    assert {u["role"] for u in customers["data"]} == {"customer"}

    admins = client.get("/api/v1/users?role=admin", headers=admin_headers).get_json()
    assert [u["email"] for u in admins["data"]] == ["admin@admin.com"]

    assert client.get("/api/v1/users?role=superuser", headers=admin_headers).status_code == 400


def test_user_admin_endpoints_require_admin(client, customer):
    headers, user = customer
    assert client.get("/api/v1/users", headers=headers).status_code == 403
    assert client.get(f"/api/v1/users/{user['id']}", headers=headers).status_code == 403
    assert client.patch(f"/api/v1/users/{user['id']}", json={"role": "admin"}, headers=headers).status_code == 403


def test_admin_updates_user(client, admin_headers, register):
    _, user = register()
    _, other = register()
    url = f"/api/v1/users/{user['id']}"

    promoted = client.patch(url, json={"role": "admin"}, headers=admin_headers)
    assert promoted.status_code == 200
    assert promoted.get_json()["role"] == "admin"
    assert promoted.get_json()["email"] == user["email"]

    taken = client.put(url, json={"email": other["email"]}, headers=admin_headers)
    assert taken.status_code == 409

    assert client.get(url, headers=admin_headers).get_json()["role"] == "admin"
    assert client.get("/api/v1/users/nope", headers=admin_headers).status_code == 404
