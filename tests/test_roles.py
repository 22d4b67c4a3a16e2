from autodebate.core.dependencies import is_admin_user

API = "/api/v1"


def test_add_then_remove_admin_flips_is_admin(client, db, auth, users):
    target = users["general"]["id"]
    assert not is_admin_user(target, db)

    auth.login(users["admin"]["id"])
    response = client.post(f"{API}/roles/users/{target}", json={"role": "admin"})
    assert response.status_code == 201
    assert is_admin_user(target, db)

    assert client.delete(f"{API}/roles/users/{target}/admin").status_code == 204
    assert not is_admin_user(target, db)

    actions = [(row["role"], row["action"]) for row in db.rows("role_change_log", user_id=target)]
    assert actions == [("admin", "added"), ("admin", "removed")]


def test_non_admin_cannot_manage_roles(client, auth, users):
    auth.login(users["copiloto"]["id"])
    response = client.post(f"{API}/roles/users/{users['general']['id']}", json={"role": "copiloto"})
    assert response.status_code == 403


def test_duplicate_and_unknown_roles(client, auth, users):
    auth.login(users["admin"]["id"])
    assert client.post(f"{API}/roles/users/{users['general']['id']}", json={"role": "general"}).status_code == 400
    assert client.post(f"{API}/roles/users/{users['general']['id']}", json={"role": "root"}).status_code == 422
    assert client.delete(f"{API}/roles/users/{users['general']['id']}/root").status_code == 400
    assert client.delete(f"{API}/roles/users/{users['general']['id']}/copiloto").status_code == 404


def test_admin_cannot_drop_own_admin_role(client, auth, users):
    auth.login(users["admin"]["id"])
    assert client.delete(f"{API}/roles/users/{users['admin']['id']}/admin").status_code == 400


def test_list_users_with_roles_and_changes(client, auth, users):
    auth.login(users["admin"]["id"])
    client.post(f"{API}/roles/users/{users['nobody']['id']}", json={"role": "copiloto"})

    listing = {u["username"]: u for u in client.get(f"{API}/roles/users").json()}
    assert listing["admin"]["is_admin"] is True
    assert listing["nobody"]["roles"] == ["copiloto"]

    changes = client.get(f"{API}/roles/changes", params={"user_id": users["nobody"]["id"]}).json()
    assert changes[0]["action"] == "added"
    assert changes[0]["performed_by"] == users["admin"]["id"]


def test_role_matrix_visible_to_signed_in_users(client, auth, users):
    auth.login(users["general"]["id"])
    body = client.get(f"{API}/roles/matrix").json()
    assert body["roles"] == ["general", "copiloto", "admin"]
    assert "photos:upload" in body["capabilities"]["copiloto"]
    assert "photos:upload" not in body["capabilities"]["general"]


def test_role_lookup_outage_is_a_server_error(client, db, auth, users):
    db.failures.add(("select", "user_roles"))
    auth.login(users["admin"]["id"])
    response = client.get(f"{API}/roles/users")
    assert response.status_code == 500
    assert response.json()["detail"] == "Could not load user roles"
