import pytest

API = "/api/v1"


@pytest.fixture
def thread(client, auth, users):
    auth.login(users["general"]["id"])
    return client.post(f"{API}/forum/threads", json={"title": "Best first car?", "content": "Go"}).json()


def test_thread_creation_awards_points(db, users, thread):
    assert thread["author_id"] == users["general"]["id"]
    assert db.rows("profiles", id=users["general"]["id"])[0]["points"] == 5


def test_replies_nest_one_level(client, auth, users, thread):
    auth.login(users["copiloto"]["id"])
    top = client.post(f"{API}/forum/threads/{thread['id']}/replies", json={"content": "Miata"}).json()
    child = client.post(f"{API}/forum/threads/{thread['id']}/replies",
                        json={"content": "Agreed", "parent_reply_id": top["id"]})
    assert child.status_code == 201

    grandchild = client.post(f"{API}/forum/threads/{thread['id']}/replies",
                             json={"content": "Too deep", "parent_reply_id": child.json()["id"]})
    assert grandchild.status_code == 400

    detail = client.get(f"{API}/forum/threads/{thread['id']}").json()
    assert detail["reply_count"] == 2
    assert len(detail["replies"]) == 1
    assert detail["replies"][0]["children"][0]["content"] == "Agreed"


def test_parent_must_belong_to_thread(client, auth, users, thread):
    other = client.post(f"{API}/forum/threads", json={"title": "Other", "content": "x"}).json()
    reply = client.post(f"{API}/forum/threads/{other['id']}/replies", json={"content": "here"}).json()
    response = client.post(f"{API}/forum/threads/{thread['id']}/replies",
                           json={"content": "wrong", "parent_reply_id": reply["id"]})
    assert response.status_code == 400


def test_pinned_threads_first(client, auth, users, thread):
    newer = client.post(f"{API}/forum/threads", json={"title": "Newer", "content": "x"}).json()
    assert client.put(f"{API}/forum/threads/{thread['id']}/pin", json={"pinned": True}).status_code == 403

    auth.login(users["admin"]["id"])
    client.put(f"{API}/forum/threads/{thread['id']}/pin", json={"pinned": True})
    titles = [t["title"] for t in client.get(f"{API}/forum/threads").json()]
    assert titles == ["Best first car?", "Newer"]

    client.put(f"{API}/forum/threads/{thread['id']}/pin", json={"pinned": False})
    titles = [t["title"] for t in client.get(f"{API}/forum/threads").json()]
    assert titles == [newer["title"], "Best first car?"]


def test_reply_like_toggle(client, db, auth, users, thread):
    reply = client.post(f"{API}/forum/threads/{thread['id']}/replies", json={"content": "x"}).json()
    auth.login(users["copiloto"]["id"])
    liked = client.post(f"{API}/forum/replies/{reply['id']}/like").json()
    assert liked == {"reply_id": reply["id"], "liked": True, "likes_count": 1}
    unliked = client.post(f"{API}/forum/replies/{reply['id']}/like").json()
    assert unliked["likes_count"] == 0
    assert db.rows("forum_replies", id=reply["id"])[0]["likes_count"] == 0


def test_delete_thread_author_or_admin(client, auth, users, thread):
    auth.login(users["copiloto"]["id"])
    assert client.delete(f"{API}/forum/threads/{thread['id']}").status_code == 403
    auth.login(users["general"]["id"])
    assert client.delete(f"{API}/forum/threads/{thread['id']}").status_code == 204
    assert client.get(f"{API}/forum/threads/{thread['id']}").status_code == 404


def test_categories(client, auth, users, thread):
    assert client.post(f"{API}/forum/categories", json={"name": "JDM"}).status_code == 403
    auth.login(users["admin"]["id"])
    category = client.post(f"{API}/forum/categories", json={"name": "JDM", "color": "#ff0000"})
    assert category.status_code == 201
    assert client.post(f"{API}/forum/categories", json={"name": "JDM"}).status_code == 400

    client.post(f"{API}/forum/threads", json={"title": "AE86", "content": "x", "category_id": category.json()["id"]})
    listed = client.get(f"{API}/forum/categories").json()
    assert listed[0]["thread_count"] == 1
    filtered = client.get(f"{API}/forum/threads", params={"category_id": category.json()["id"]}).json()
    assert [t["title"] for t in filtered] == ["AE86"]
