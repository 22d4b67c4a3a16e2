from autodebate.config import settings

API = "/api/v1"


def test_me_bootstraps_profile_and_general_role(client, db, auth):
    auth.login("new-user", email="piloto@example.com")
    response = client.get(f"{API}/auth/me")
    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "piloto"
    assert body["roles"] == ["general"]
    assert body["access"]["can_download"] is True
    assert body["access"]["can_upload"] is False

    client.get(f"{API}/auth/me")
    assert len(db.rows("profiles", id="new-user")) == 1
    assert len(db.rows("user_roles", user_id="new-user")) == 1


def test_me_requires_authentication(client):
    assert client.get(f"{API}/auth/me").status_code == 403


def test_event_lifecycle(client, db, auth, users):
    auth.login(users["general"]["id"])
    assert client.post(f"{API}/events", json={"title": "Meet", "event_date": "2024-07-01"}).status_code == 403

    auth.login(users["copiloto"]["id"])
    created = client.post(f"{API}/events", json={"title": "Meet", "event_date": "2024-07-01", "location": "Lima"})
    assert created.status_code == 201
    event_id = created.json()["id"]

    db.add_row("photos", {"storage_path": "x", "uploaded_by": users["copiloto"]["id"], "event_id": event_id})
    assert client.get(f"{API}/events/{event_id}").json()["photo_count"] == 1
    assert client.get(f"{API}/events").json()[0]["photo_count"] == 1

    auth.login(users["general"]["id"])
    assert client.put(f"{API}/events/{event_id}", json={"title": "Mine"}).status_code == 403

    auth.login(users["copiloto"]["id"])
    assert client.put(f"{API}/events/{event_id}", json={"title": "Big meet"}).json()["title"] == "Big meet"
    assert client.delete(f"{API}/events/{event_id}").status_code == 204
    assert client.get(f"{API}/events/{event_id}").status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "healthy"


def test_ready_reports_supabase_outage(client, db):
    assert client.get("/ready").json() == {"status": "ready"}
    db.failures.add(("select", "profiles"))
    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json() == {"status": "unavailable"}


def test_security_headers_present(client):
    response = client.get("/health")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


def test_default_rate_limit_applies(client):
    allowed = int(settings.rate_limit.split("/")[0])
    statuses = [client.get("/").status_code for _ in range(allowed)]
    assert set(statuses) == {200}
    assert client.get("/").status_code == 429
    assert client.get("/health").status_code == 200
