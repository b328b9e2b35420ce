import math

from sqlalchemy import select

from blog.comments.models import Comment
from blog.posts.models import Post
from conftest import auth_headers


async def test_create_post_defaults(client, signup, create_post):
    token, user = await signup("Alice", "alice@example.com")

    post = await create_post(token, title="  Spaced title  ")
    assert post["title"] == "Spaced title"
    assert post["status"] == "published"
    assert post["tags"] == []
    assert post["imageUrl"] == ""
    assert post["viewCount"] == 0
    assert post["likes"] == []
    assert post["author"]["id"] == user["id"]
    assert post["author"]["name"] == "Alice"


async def test_create_post_requires_fields_and_auth(client, signup):
    token, _ = await signup("Alice", "alice@example.com")

    resp = await client.post("/posts", json={"title": "T", "content": "C", "excerpt": "E"})
    assert resp.status_code == 401

    resp = await client.post(
        "/posts",
        json={"title": "   ", "content": "C", "excerpt": "E"},
        headers=auth_headers(token),
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Title is required"}

    resp = await client.post("/posts", json={"title": "T", "content": "C"}, headers=auth_headers(token))
    assert resp.status_code == 400


async def test_tags_are_trimmed_and_deduplicated(signup, create_post):
    token, _ = await signup("Alice", "alice@example.com")
    post = await create_post(token, tags=[" python ", "web", "python", ""])
    assert post["tags"] == ["python", "web"]


async def test_listing_excludes_drafts_and_paginates(client, signup, create_post):
    token, _ = await signup("Alice", "alice@example.com")
    for i in range(5):
        await create_post(token, title=f"Published {i}")
    await create_post(token, title="Secret draft", status="draft", tags=["python"])

    resp = await client.get("/posts", params={"page": 1, "limit": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 5, "pages": math.ceil(5 / 2)}
    assert [p["title"] for p in body["posts"]] == ["Published 4", "Published 3"]

    resp = await client.get("/posts", params={"page": 3, "limit": 2})
    assert [p["title"] for p in resp.json()["posts"]] == ["Published 0"]

    for params in ({"search": "Secret"}, {"tag": "python"}, {"author": 1}):
        resp = await client.get("/posts", params=params)
        titles = [p["title"] for p in resp.json()["posts"]]
        assert "Secret draft" not in titles


async def test_malformed_pagination_falls_back_to_defaults(client, signup, create_post):
    token, _ = await signup("Alice", "alice@example.com")
    await create_post(token)

    resp = await client.get("/posts", params={"page": "abc", "limit": "-5"})
    assert resp.status_code == 200
    assert resp.json()["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    resp = await client.get("/posts", params={"limit": "100000"})
    assert resp.json()["pagination"]["limit"] == 100


async def test_search_tag_and_author_filters(client, signup, create_post):
    alice, alice_user = await signup("Alice", "alice@example.com")
    bob, bob_user = await signup("Bob", "bob@example.com")
    await create_post(alice, title="FastAPI tips", content="Dependency injection", tags=["python", "web"])
    await create_post(alice, title="Cooking", content="Pasta recipes", tags=["food"])
    await create_post(bob, title="Gardening", content="Growing tomatoes with python scripts", tags=["Python"])

    resp = await client.get("/posts", params={"search": "fastapi"})
    assert [p["title"] for p in resp.json()["posts"]] == ["FastAPI tips"]

    resp = await client.get("/posts", params={"search": "pasta tomatoes"})
    assert {p["title"] for p in resp.json()["posts"]} == {"Cooking", "Gardening"}

    resp = await client.get("/posts", params={"tag": "python"})
    assert [p["title"] for p in resp.json()["posts"]] == ["FastAPI tips"]

    resp = await client.get("/posts", params={"author": bob_user["id"]})
    assert [p["title"] for p in resp.json()["posts"]] == ["Gardening"]

    resp = await client.get("/posts", params={"author": alice_user["id"], "tag": "food"})
    assert [p["title"] for p in resp.json()["posts"]] == ["Cooking"]


async def test_view_count_increments_on_every_fetch(client, db, signup, create_post):
    token, _ = await signup("Alice", "alice@example.com")
    post = await create_post(token)

    first = await client.get(f"/posts/{post['id']}")
    second = await client.get(f"/posts/{post['id']}", headers=auth_headers(token))
    assert first.status_code == 200 and second.status_code == 200
    assert first.json()["author"]["bio"] == ""

    stored = (await db.execute(select(Post.view_count).where(Post.id == post["id"]))).scalar_one()
    assert stored == 2
    assert second.json()["viewCount"] == 2


async def test_missing_post_is_404(client):
    resp = await client.get("/posts/12345")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Post not found"}


async def test_draft_detail_visible_only_to_author(client, signup, create_post):
    alice, _ = await signup("Alice", "alice@example.com")
    bob, _ = await signup("Bob", "bob@example.com")
    draft = await create_post(alice, status="draft")

    assert (await client.get(f"/posts/{draft['id']}")).status_code == 404
    assert (await client.get(f"/posts/{draft['id']}", headers=auth_headers(bob))).status_code == 404
    assert (await client.get(f"/posts/{draft['id']}", headers=auth_headers(alice))).status_code == 200


async def test_my_posts_include_drafts(client, signup, create_post):
    alice, _ = await signup("Alice", "alice@example.com")
    bob, _ = await signup("Bob", "bob@example.com")
    await create_post(alice, title="Public")
    await create_post(alice, title="Draft", status="draft")
    await create_post(bob, title="Bob's")

    resp = await client.get("/posts/mine", headers=auth_headers(alice))
    assert {p["title"] for p in resp.json()["posts"]} == {"Public", "Draft"}

    resp = await client.get("/posts/mine", params={"status": "draft"}, headers=auth_headers(alice))
    assert [p["title"] for p in resp.json()["posts"]] == ["Draft"]


async def test_update_post_by_author_and_non_author(client, signup, create_post):
    alice, _ = await signup("Alice", "alice@example.com")
    bob, _ = await signup("Bob", "bob@example.com")
    post = await create_post(alice, tags=["a", "b"])

    resp = await client.put(f"/posts/{post['id']}", json={"title": "Hijacked"}, headers=auth_headers(bob))
    assert resp.status_code == 403
    assert resp.json() == {"error": "Not authorized to edit this post"}

    resp = await client.put(
        f"/posts/{post['id']}",
        json={"title": "Edited", "tags": ["b", "c"], "status": "draft"},
        headers=auth_headers(alice),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Edited"
    assert body["tags"] == ["b", "c"]
    assert body["status"] == "draft"
    assert body["content"] == post["content"]

    resp = await client.put("/posts/999", json={"title": "x"}, headers=auth_headers(alice))
    assert resp.status_code == 404


async def test_delete_post_removes_comments(client, db, signup, create_post):
    alice, _ = await signup("Alice", "alice@example.com")
    bob, _ = await signup("Bob", "bob@example.com")
    post = await create_post(alice)
    await client.post(f"/posts/{post['id']}/comments", json={"content": "Nice"}, headers=auth_headers(bob))

    resp = await client.delete(f"/posts/{post['id']}", headers=auth_headers(bob))
    assert resp.status_code == 403

    resp = await client.delete(f"/posts/{post['id']}", headers=auth_headers(alice))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Post deleted successfully"}

    assert (await client.get(f"/posts/{post['id']}")).status_code == 404
    assert (await client.get(f"/posts/{post['id']}/comments")).status_code == 404
    left = (await db.execute(select(Comment.id).where(Comment.post_id == post["id"]))).scalars().all()
    assert left == []


async def test_like_toggle(client, signup, create_post):
    alice, _ = await signup("Alice", "alice@example.com")
    bob, bob_user = await signup("Bob", "bob@example.com")
    post = await create_post(alice)

    resp = await client.post(f"/posts/{post['id']}/like", headers=auth_headers(bob))
    assert resp.json() == {"liked": True, "likeCount": 1}

    detail = await client.get(f"/posts/{post['id']}")
    assert detail.json()["likes"] == [{"id": bob_user["id"], "name": "Bob"}]
    assert detail.json()["likeCount"] == 1

    resp = await client.post(f"/posts/{post['id']}/like", headers=auth_headers(bob))
    assert resp.json() == {"liked": False, "likeCount": 0}


async def test_search_treats_wildcards_literally(client, signup, create_post):
    token, _ = await signup("Alice", "alice@example.com")
    await create_post(token, title="Plain post", content="nothing special")
    await create_post(token, title="Discounts", content="Save 50% today")
    await create_post(token, title="snake_case names", content="style notes")

    resp = await client.get("/posts", params={"search": "%"})
    assert [p["title"] for p in resp.json()["posts"]] == ["Discounts"]

    resp = await client.get("/posts", params={"search": "_"})
    assert [p["title"] for p in resp.json()["posts"]] == ["snake_case names"]


async def test_huge_page_and_ids_do_not_overflow(client, signup, create_post):
    token, _ = await signup("Alice", "alice@example.com")
    post = await create_post(token)
    huge = str(10**25)

    resp = await client.get("/posts", params={"page": huge})
    assert resp.status_code == 200
    assert resp.json()["pagination"]["page"] == 1
    assert [p["id"] for p in resp.json()["posts"]] == [post["id"]]

    resp = await client.get(f"/posts/{post['id']}/comments", params={"page": huge})
    assert resp.status_code == 200
    assert resp.json()["pagination"]["page"] == 1

    resp = await client.get("/posts", params={"author": huge})
    assert resp.status_code == 200
    assert resp.json()["posts"] == []

    resp = await client.get(f"/posts/{huge}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Post not found"}

    resp = await client.post(f"/posts/{huge}/like", headers=auth_headers(token))
    assert resp.status_code == 404
    assert (await client.get(f"/posts/{huge}/comments")).status_code == 404
    assert (await client.put(f"/comments/{huge}", json={"content": "x"}, headers=auth_headers(token))).status_code == 404
    assert (await client.get(f"/users/{huge}")).status_code == 404
