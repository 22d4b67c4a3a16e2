API = "/api/v1"


def test_publish_makes_post_public(client, db, auth, users):
    auth.login(users["admin"]["id"])
    post = client.post(f"{API}/blog/posts", json={"title": "Rally recap", "content": "..."}).json()
    assert post["published"] is False

    auth.logout()
    assert client.get(f"{API}/blog/posts").json() == []
    assert client.get(f"{API}/blog/posts/{post['id']}").status_code == 404

    auth.login(users["admin"]["id"])
    assert client.get(f"{API}/blog/posts/{post['id']}").status_code == 200
    assert [p["id"] for p in client.get(f"{API}/blog/admin/posts").json()] == [post["id"]]
    response = client.put(f"{API}/blog/posts/{post['id']}/publish", json={"published": True})
    assert response.json()["published"] is True

    auth.logout()
    public = client.get(f"{API}/blog/posts").json()
    assert [p["id"] for p in public] == [post["id"]]
    assert public[0]["author"]["username"] == "admin"


def test_only_admins_write_posts(client, auth, users):
    auth.login(users["copiloto"]["id"])
    assert client.post(f"{API}/blog/posts", json={"title": "x", "content": "y"}).status_code == 403
    assert client.get(f"{API}/blog/admin/posts").status_code == 403


def test_comments_award_points_and_delete_rules(client, db, auth, users):
    post = db.add_row("blog_posts", {"title": "T", "content": "C", "published": True, "author_id": users["admin"]["id"]})
    auth.login(users["general"]["id"])
    comment = client.post(f"{API}/blog/posts/{post['id']}/comments", json={"content": " Great "})
    assert comment.status_code == 201
    assert comment.json()["content"] == "Great"
    assert db.rows("profiles", id=users["general"]["id"])[0]["points"] == 1

    listed = client.get(f"{API}/blog/posts/{post['id']}/comments").json()
    assert listed[0]["author"]["username"] == "general"
    assert client.get(f"{API}/blog/posts/{post['id']}").json()["comments_count"] == 1

    auth.login(users["copiloto"]["id"])
    assert client.delete(f"{API}/blog/comments/{comment.json()['id']}").status_code == 403
    auth.login(users["admin"]["id"])
    assert client.delete(f"{API}/blog/comments/{comment.json()['id']}").status_code == 204


def test_cannot_comment_on_draft(client, db, auth, users):
    post = db.add_row("blog_posts", {"title": "T", "content": "C", "published": False, "author_id": users["admin"]["id"]})
    auth.login(users["general"]["id"])
    assert client.post(f"{API}/blog/posts/{post['id']}/comments", json={"content": "hi"}).status_code == 404


def test_draft_comments_hidden_from_readers(client, db, auth, users):
    post = db.add_row("blog_posts", {"title": "T", "content": "C", "published": False, "author_id": users["admin"]["id"]})
    db.add_row("comments", {"blog_post_id": post["id"], "author_id": users["admin"]["id"], "content": "note"})
    url = f"{API}/blog/posts/{post['id']}/comments"

    assert client.get(url).status_code == 404
    auth.login(users["general"]["id"])
    assert client.get(url).status_code == 404
    auth.login(users["admin"]["id"])
    assert [c["content"] for c in client.get(url).json()] == ["note"]


def test_featured_image_upload(client, db, auth, users, image_bytes):
    auth.login(users["admin"]["id"])
    response = client.post(f"{API}/blog/images", files={"file": ("cover.png", image_bytes, "image/png")})
    assert response.status_code == 200
    assert "/public/blog-images/" in response.json()["url"]
