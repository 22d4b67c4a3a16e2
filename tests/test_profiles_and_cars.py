API = "/api/v1"


def test_non_owner_sees_blanked_location_and_no_privacy_blob(client, db, auth, users):
    owner = db.add_profile("ana", city="Lima", country="PE", points=150, level=2,
                           privacy_settings={"show_location": False})
    auth.login(users["general"]["id"])
    body = client.get(f"{API}/profiles/{owner['id']}").json()
    assert body["city"] is None and body["country"] is None
    assert body["points"] == 150
    assert body["privacy_settings"] is None
    assert body["visibility"] == {"cars": True, "location": False, "activity": True}


def test_owner_sees_own_fields_and_settings(client, db, auth):
    owner = db.add_profile("ana", city="Lima", privacy_settings={"show_location": False})
    auth.login(owner["id"])
    body = client.get(f"{API}/profiles/me").json()
    assert body["city"] == "Lima"
    assert body["privacy_settings"] == {"show_cars": True, "show_activity": True, "show_location": False}


def test_update_profile_owner_only(client, db, auth, users):
    owner = db.add_profile("ana")
    auth.login(users["general"]["id"])
    assert client.put(f"{API}/profiles/{owner['id']}", json={"bio": "hi"}).status_code == 403

    auth.login(owner["id"])
    response = client.put(f"{API}/profiles/{owner['id']}", json={"bio": "  Drifter  ", "city": ""})
    assert response.status_code == 200
    assert response.json()["bio"] == "Drifter"
    assert db.rows("profiles", id=owner["id"])[0]["city"] is None


def test_update_privacy(client, db, auth):
    owner = db.add_profile("ana")
    auth.login(owner["id"])
    response = client.put(f"{API}/profiles/{owner['id']}/privacy",
                          json={"show_cars": False, "show_activity": True, "show_location": True})
    assert response.status_code == 200
    assert db.rows("profiles", id=owner["id"])[0]["privacy_settings"]["show_cars"] is False


def test_avatar_upload(client, db, auth, image_bytes):
    owner = db.add_profile("ana")
    auth.login(owner["id"])
    response = client.post(f"{API}/profiles/{owner['id']}/avatar",
                           files={"file": ("me.png", image_bytes, "image/png")})
    assert response.status_code == 200
    assert "/public/avatars/" in response.json()["avatar_url"]
    assert len(db.storage.objects["avatars"]) == 1


def test_community_car_filter_ignores_hidden_garages(client, db):
    shown = db.add_profile("shown", points=10)
    hidden = db.add_profile("hidden", points=20, privacy_settings={"show_cars": False})
    db.add_row("user_cars", {"user_id": shown["id"], "make": "Toyota", "model": "Supra", "year": 1994, "is_current": True})
    db.add_row("user_cars", {"user_id": hidden["id"], "make": "Toyota", "model": "Supra", "year": 1994, "is_current": True})

    body = client.get(f"{API}/profiles", params={"car_make": "toyo"}).json()
    assert [p["username"] for p in body] == ["shown"]
    assert body[0]["cars"][0]["model"] == "Supra"

    everyone = client.get(f"{API}/profiles").json()
    assert [p["username"] for p in everyone] == ["hidden", "shown"]
    assert everyone[0]["cars"] == []


def test_community_country_filter_skips_hidden_location(client, db):
    db.add_profile("visible", country="PE", city="Lima")
    db.add_profile("private", country="PE", city="Lima", privacy_settings={"show_location": False})
    db.add_profile("abroad", country="CL", city="Santiago")
    body = client.get(f"{API}/profiles", params={"country": "PE"}).json()
    assert [p["username"] for p in body] == ["visible"]


def test_showroom_respects_flags(client, db):
    owner = db.add_profile("ana", privacy_settings={"show_cars": False, "show_activity": True})
    db.add_row("user_cars", {"user_id": owner["id"], "make": "Honda", "model": "Civic", "is_current": True})
    event = db.add_row("events", {"title": "Meet", "event_date": "2024-06-01", "created_by": owner["id"]})
    db.add_row("photos", {"storage_path": "a/b/c.jpg", "uploaded_by": owner["id"], "event_id": event["id"]})

    body = client.get(f"{API}/profiles/{owner['id']}/showroom").json()
    assert body["cars"] == []
    assert body["favorite_cars"] == []
    assert len(body["photos"]) == 1


def test_car_crud_and_garage_visibility(client, db, auth, users):
    owner = users["general"]
    auth.login(owner["id"])
    created = client.post(f"{API}/cars", json={"make": " Nissan ", "model": "Silvia", "year": 1996})
    assert created.status_code == 201
    car_id = created.json()["id"]
    assert created.json()["make"] == "Nissan"

    updated = client.put(f"{API}/cars/{car_id}", json={"description": "S14"})
    assert updated.json()["description"] == "S14"

    auth.login(users["copiloto"]["id"])
    assert client.put(f"{API}/cars/{car_id}", json={"description": "mine"}).status_code == 403
    assert len(client.get(f"{API}/cars/users/{owner['id']}").json()) == 1

    db.rows("profiles", id=owner["id"])[0]["privacy_settings"] = {"show_cars": False}
    assert client.get(f"{API}/cars/users/{owner['id']}").json() == []

    auth.login(owner["id"])
    assert len(client.get(f"{API}/cars/users/{owner['id']}").json()) == 1
    assert client.delete(f"{API}/cars/{car_id}").status_code == 204
    assert db.rows("user_cars") == []


def test_favorite_cars(client, db, auth, users):
    auth.login(users["general"]["id"])
    favorite = client.post(f"{API}/cars/favorites", json={"make": "Ferrari", "model": "F40"}).json()
    assert client.get(f"{API}/cars/users/{users['general']['id']}/favorites").json()[0]["model"] == "F40"

    auth.login(users["copiloto"]["id"])
    assert client.delete(f"{API}/cars/favorites/{favorite['id']}").status_code == 403
    auth.login(users["admin"]["id"])
    assert client.delete(f"{API}/cars/favorites/{favorite['id']}").status_code == 204
