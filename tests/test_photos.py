import pytest

API = "/api/v1"


@pytest.fixture
def event(db, users):
    return db.add_row("events", {
        "title": "Track day", "event_date": "2024-06-01", "created_by": users["copiloto"]["id"]
    })


def add_photo(db, uploader_id, event_id=None, car_id=None, **fields):
    path = f"{uploader_id}/{event_id or car_id}/{len(db.tables['photos'])}_p.jpg"
    db.storage.objects["gallery"][path] = b"original"
    db.storage.objects["gallery-thumbs"][path] = b"thumb"
    return db.add_row("photos", {
        "storage_path": path, "thumbnail_path": path, "uploaded_by": uploader_id,
        "event_id": event_id, "user_car_id": car_id, "tags": [], "specs": {},
        "likes_count": 0, "favorites_count": 0, "is_thumbnail": False, **fields
    })


def thumbnail_count(db, event_id):
    return len(db.rows("photos", event_id=event_id, is_thumbnail=True))


class TestUpload:
    def test_copiloto_uploads_original_thumbnail_and_row(self, client, db, auth, users, event, image_bytes):
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("one.png", image_bytes, "image/png")), ("files", ("two.png", image_bytes, "image/png"))],
            data={"caption": "Grid", "tags": "drift, night, drift", "specs": '{"engine": "2JZ"}'},
        )
        assert response.status_code == 201
        body = response.json()
        assert len(body) == 2
        assert body[0]["tags"] == ["drift", "night"]
        assert body[0]["specs"] == {"engine": "2JZ"}
        assert body[0]["thumbnail_url"].startswith("https://fake.supabase.co/storage/v1/object/public/gallery-thumbs/")

        assert len(db.storage.objects["gallery"]) == 2
        assert len(db.storage.objects["gallery-thumbs"]) == 2
        for path in db.storage.objects["gallery"]:
            assert path.startswith(f"{users['copiloto']['id']}/{event['id']}/")
        assert db.rows("profiles", id=users["copiloto"]["id"])[0]["points"] == 20

    def test_general_user_cannot_upload_to_event(self, client, auth, users, event, image_bytes):
        auth.login(users["general"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("one.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 403

    def test_invalid_specs_rejected(self, client, auth, users, event, image_bytes):
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("one.png", image_bytes, "image/png"))],
            data={"specs": "[1, 2]"},
        )
        assert response.status_code == 400

    def test_non_image_rejected(self, client, db, auth, users, event):
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("notes.txt", b"hello", "text/plain"))],
        )
        assert response.status_code == 400
        assert db.rows("photos") == []

    def test_failed_thumbnail_upload_removes_original(self, client, db, auth, users, event, image_bytes):
        db.storage.fail_uploads.add("gallery-thumbs")
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("one.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 500
        assert db.storage.objects["gallery"] == {}
        assert db.rows("photos") == []

    def test_failed_row_insert_removes_both_files(self, client, db, auth, users, event, image_bytes):
        db.failures.add(("insert", "photos"))
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("one.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 500
        assert db.storage.objects["gallery"] == {}
        assert db.storage.objects["gallery-thumbs"] == {}

    def test_corrupt_file_rejects_whole_batch(self, client, db, auth, users, event, image_bytes):
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("a.png", image_bytes, "image/png")), ("files", ("b.png", b"not an image", "image/png"))],
        )
        assert response.status_code == 400
        assert db.rows("photos") == []
        assert db.storage.objects["gallery"] == {}
        assert db.storage.objects["gallery-thumbs"] == {}
        assert db.rows("profiles", id=users["copiloto"]["id"])[0]["points"] == 0

    def test_failure_on_later_file_undoes_earlier_files(self, client, db, auth, users, event, image_bytes):
        db.storage.fail_paths.add("second.png")
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/{event['id']}",
            files=[("files", ("first.png", image_bytes, "image/png")), ("files", ("second.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 500
        assert db.rows("photos") == []
        assert db.storage.objects["gallery"] == {}
        assert db.storage.objects["gallery-thumbs"] == {}
        assert db.rows("user_activity_log") == []
        assert db.rows("profiles", id=users["copiloto"]["id"])[0]["points"] == 0

    def test_unknown_event(self, client, auth, users, image_bytes):
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/photos/events/missing",
            files=[("files", ("one.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 404


class TestCarPhotos:
    def test_owner_uploads_car_photo_without_upload_role(self, client, db, auth, users, image_bytes):
        car = db.add_row("user_cars", {"user_id": users["general"]["id"], "make": "Mazda", "model": "MX-5", "is_current": True})
        auth.login(users["general"]["id"])
        response = client.post(
            f"{API}/cars/{car['id']}/photos",
            files=[("files", ("mx5.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 201
        assert response.json()[0]["user_car_id"] == car["id"]
        assert response.json()[0]["event_id"] is None

    def test_car_photo_cap(self, client, db, auth, users, image_bytes):
        owner = users["general"]["id"]
        car = db.add_row("user_cars", {"user_id": owner, "make": "Mazda", "model": "MX-5", "is_current": True})
        for _ in range(5):
            add_photo(db, owner, car_id=car["id"])
        auth.login(owner)
        response = client.post(
            f"{API}/cars/{car['id']}/photos",
            files=[("files", ("mx5.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 409
        assert len(db.rows("photos", user_car_id=car["id"])) == 5

    def test_other_user_cannot_upload_to_car(self, client, db, auth, users, image_bytes):
        car = db.add_row("user_cars", {"user_id": users["general"]["id"], "make": "Mazda", "model": "MX-5", "is_current": True})
        auth.login(users["copiloto"]["id"])
        response = client.post(
            f"{API}/cars/{car['id']}/photos",
            files=[("files", ("mx5.png", image_bytes, "image/png"))],
        )
        assert response.status_code == 403


    def test_hidden_garage_photo_reads_as_missing(self, client, db, auth, users):
        owner = db.add_profile("private", privacy_settings={"show_cars": False})
        db.grant(owner["id"], "general")
        car = db.add_row("user_cars", {"user_id": owner["id"], "make": "Nissan", "model": "Skyline", "is_current": True})
        photo = add_photo(db, owner["id"], car_id=car["id"])

        assert client.get(f"{API}/photos/{photo['id']}").status_code == 404
        auth.login(users["general"]["id"])
        assert client.get(f"{API}/photos/{photo['id']}").status_code == 404
        assert client.get(f"{API}/photos/{photo['id']}/download").status_code == 404
        assert client.post(f"{API}/photos/{photo['id']}/like").status_code == 404

        auth.login(owner["id"])
        assert client.get(f"{API}/photos/{photo['id']}").json()["user_car_id"] == car["id"]
        assert client.get(f"{API}/photos/{photo['id']}/download").status_code == 200


class TestThumbnails:
    def test_cap_rejects_fifth_thumbnail(self, client, db, auth, users, event):
        uploader = users["copiloto"]["id"]
        for _ in range(4):
            add_photo(db, uploader, event_id=event["id"], is_thumbnail=True)
        extra = add_photo(db, uploader, event_id=event["id"])

        auth.login(uploader)
        response = client.post(f"{API}/photos/{extra['id']}/thumbnail")
        assert response.status_code == 409
        assert thumbnail_count(db, event["id"]) == 4

    def test_unset_is_always_allowed_and_frees_a_slot(self, client, db, auth, users, event):
        uploader = users["copiloto"]["id"]
        featured = [add_photo(db, uploader, event_id=event["id"], is_thumbnail=True) for _ in range(4)]
        extra = add_photo(db, uploader, event_id=event["id"])
        auth.login(uploader)

        response = client.post(f"{API}/photos/{featured[0]['id']}/thumbnail")
        assert response.status_code == 200
        assert response.json()["thumbnail_count"] == 3
        assert response.json()["photo"]["is_thumbnail"] is False

        response = client.post(f"{API}/photos/{extra['id']}/thumbnail")
        assert response.status_code == 200
        assert response.json()["thumbnail_count"] == 4
        assert response.json()["max_thumbnails"] == 4

    def test_concurrent_selection_over_cap_is_reverted(self, client, db, auth, users, event):
        uploader = users["copiloto"]["id"]
        for _ in range(3):
            add_photo(db, uploader, event_id=event["id"], is_thumbnail=True)
        mine = add_photo(db, uploader, event_id=event["id"])
        theirs = add_photo(db, uploader, event_id=event["id"])
        fired = []

        def concurrent_writer(fake, payload, updated):
            if payload == {"is_thumbnail": True} and not fired:
                fired.append(True)
                for row in fake.tables["photos"]:
                    if row["id"] == theirs["id"]:
                        row["is_thumbnail"] = True

        db.after_update["photos"].append(concurrent_writer)
        auth.login(uploader)
        response = client.post(f"{API}/photos/{mine['id']}/thumbnail")

        assert response.status_code == 409
        assert db.rows("photos", id=mine["id"])[0]["is_thumbnail"] is False
        assert thumbnail_count(db, event["id"]) == 4

    def test_only_uploader_or_admin_toggles(self, client, db, auth, users, event):
        photo = add_photo(db, users["copiloto"]["id"], event_id=event["id"])
        auth.login(users["general"]["id"])
        assert client.post(f"{API}/photos/{photo['id']}/thumbnail").status_code == 403
        auth.login(users["admin"]["id"])
        assert client.post(f"{API}/photos/{photo['id']}/thumbnail").status_code == 200


class TestReactionsAndDownloads:
    def test_like_toggle_recounts(self, client, db, auth, users, event):
        photo = add_photo(db, users["copiloto"]["id"], event_id=event["id"])
        auth.login(users["general"]["id"])

        first = client.post(f"{API}/photos/{photo['id']}/like").json()
        assert first == {"photo_id": photo["id"], "active": True, "count": 1}
        assert db.rows("photos", id=photo["id"])[0]["likes_count"] == 1

        second = client.post(f"{API}/photos/{photo['id']}/like").json()
        assert second["active"] is False and second["count"] == 0
        assert db.rows("photo_likes") == []

    def test_favorite_counts_distinct_users(self, client, db, auth, users, event):
        photo = add_photo(db, users["copiloto"]["id"], event_id=event["id"])
        for name in ("general", "admin"):
            auth.login(users[name]["id"])
            client.post(f"{API}/photos/{photo['id']}/favorite")
        assert db.rows("photos", id=photo["id"])[0]["favorites_count"] == 2

    def test_download_requires_a_role(self, client, db, auth, users, event):
        photo = add_photo(db, users["copiloto"]["id"], event_id=event["id"])
        auth.login(users["nobody"]["id"])
        assert client.get(f"{API}/photos/{photo['id']}/download").status_code == 403

        auth.login(users["general"]["id"])
        response = client.get(f"{API}/photos/{photo['id']}/download")
        assert response.status_code == 200
        assert response.json()["expires_in"] == 60
        assert "/sign/gallery/" in response.json()["url"]

    def test_download_all(self, client, db, auth, users, event):
        for _ in range(3):
            add_photo(db, users["copiloto"]["id"], event_id=event["id"])
        auth.login(users["general"]["id"])
        response = client.get(f"{API}/photos/events/{event['id']}/download-all")
        assert response.status_code == 200
        assert len(response.json()) == 3


class TestEditAndDelete:
    def test_uploader_edits_caption_and_tags(self, client, db, auth, users, event):
        photo = add_photo(db, users["copiloto"]["id"], event_id=event["id"])
        auth.login(users["copiloto"]["id"])
        response = client.put(f"{API}/photos/{photo['id']}", json={"caption": " Pit lane ", "tags": ["pit", " lane ", "pit"]})
        assert response.status_code == 200
        assert response.json()["caption"] == "Pit lane"
        assert response.json()["tags"] == ["pit", "lane"]

    def test_delete_removes_row_and_files(self, client, db, auth, users, event):
        photo = add_photo(db, users["copiloto"]["id"], event_id=event["id"])
        auth.login(users["general"]["id"])
        assert client.delete(f"{API}/photos/{photo['id']}").status_code == 403

        auth.login(users["copiloto"]["id"])
        assert client.delete(f"{API}/photos/{photo['id']}").status_code == 204
        assert db.rows("photos") == []
        assert db.storage.objects["gallery"] == {}
        assert db.storage.objects["gallery-thumbs"] == {}


class TestShowroomSearch:
    def test_hidden_garages_are_left_out(self, client, db, users):
        shown = db.add_profile("shown")
        hidden = db.add_profile("hidden", privacy_settings={"show_cars": False})
        shown_car = db.add_row("user_cars", {"user_id": shown["id"], "make": "Honda", "model": "Civic", "year": 1999, "is_current": True})
        hidden_car = db.add_row("user_cars", {"user_id": hidden["id"], "make": "Honda", "model": "S2000", "year": 2001, "is_current": True})
        add_photo(db, shown["id"], car_id=shown_car["id"], tags=["vtec"])
        add_photo(db, hidden["id"], car_id=hidden_car["id"], tags=["vtec"])

        response = client.get(f"{API}/photos/showroom")
        assert response.status_code == 200
        assert [p["user_car"]["model"] for p in response.json()] == ["Civic"]

        response = client.get(f"{API}/photos/showroom", params={"make": "honda", "tags": "vtec"})
        assert len(response.json()) == 1

        response = client.get(f"{API}/photos/showroom", params={"query": "s2000"})
        assert response.json() == []

    def test_facets(self, client, db, users):
        owner = users["general"]["id"]
        db.add_row("user_cars", {"user_id": owner, "make": "Honda", "model": "Civic", "is_current": True})
        db.add_row("user_cars", {"user_id": owner, "make": "Honda", "model": "Integra", "is_current": True})
        response = client.get(f"{API}/photos/facets", params={"make": "Honda"})
        assert response.json()["makes"] == ["Honda"]
        assert response.json()["models"] == ["Civic", "Integra"]
