"""
Petstagram Backend — API Tests
================================

What:  End-to-end requests through the FastAPI app over ASGITransport,
       backed by the per-test SQLite database.

What we test:
    ✅ Status codes and camelCase bodies for every route
    ✅ Like toggling through POST / DELETE, reflected in isLiked
    ✅ Error bodies for 400 / 404 / 409
    ✅ Request ID header on every response
    ✅ Lifespan aborts on schema failure when fail-fast is on
"""

import logging
from uuid import uuid4

import pytest

from petstagram.exceptions import SchemaError


async def _create_post(client, **overrides):
    body = {
        "caption": "Living her best life! #corgi #puppyStyle",
        "photoUrl": "/photos/image1.jpg",
        "createdBy": "owner",
    }
    body.update(overrides)
    response = await client.post("/api/posts", json=body)
    assert response.status_code == 201
    return response.json()


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/health")
        assert response.headers.get("X-Request-ID")

        echoed = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert echoed.headers["X-Request-ID"] == "abc123"


class TestPostRoutes:
    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client):
        created = await _create_post(test_client, createdAt="2020-04-01T12:00:00Z")

        assert set(created) == {
            "id", "caption", "photoUrl", "createdAt", "createdBy", "isLiked", "likeCount",
        }
        assert created["isLiked"] is False
        assert created["likeCount"] == 0
        assert created["createdAt"] == "2020-04-01T12:00:00Z"

        response = await test_client.get(f"/api/posts/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_get_missing_post(self, test_client):
        response = await test_client.get(f"/api/posts/{uuid4()}")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_list_with_total(self, test_client):
        await _create_post(test_client, caption="older", createdAt="2020-01-01T00:00:00Z")
        await _create_post(test_client, caption="newer", createdAt="2020-02-01T00:00:00Z")
        await _create_post(test_client, caption="someone else", createdBy="other")

        response = await test_client.get("/api/posts", params={"createdBy": "owner"})

        assert response.status_code == 200
        assert [p["caption"] for p in response.json()] == ["newer", "older"]
        assert response.headers["X-Total-Count"] == "2"

    @pytest.mark.asyncio
    async def test_patch(self, test_client):
        created = await _create_post(test_client)

        response = await test_client.patch(
            f"/api/posts/{created['id']}", json={"caption": "Bath time is best time!"}
        )
        assert response.status_code == 200
        assert response.json()["caption"] == "Bath time is best time!"

        missing = await test_client.patch(f"/api/posts/{uuid4()}", json={"caption": "x"})
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_patch_without_fields_is_rejected(self, test_client):
        created = await _create_post(test_client)
        response = await test_client.patch(f"/api/posts/{created['id']}", json={})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_patch_reports_like_state_for_viewer(self, test_client):
        created = await _create_post(test_client)
        await test_client.post(f"/api/posts/{created['id']}/likes", json={"userId": "fan"})

        as_fan = await test_client.patch(
            f"/api/posts/{created['id']}", params={"userId": "fan"}, json={"caption": "edited"}
        )
        assert as_fan.status_code == 200
        assert as_fan.json()["isLiked"] is True
        assert as_fan.json()["likeCount"] == 1

        anonymous = await test_client.patch(f"/api/posts/{created['id']}", json={"caption": "again"})
        assert anonymous.json()["isLiked"] is False
        assert anonymous.json()["likeCount"] == 1


class TestFeedImport:
    @pytest.mark.asyncio
    async def test_import_good_feed(self, test_client, good_feed):
        response = await test_client.post(
            "/api/feed/import",
            params={"createdBy": "seed"},
            content=good_feed,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 201
        posts = response.json()
        assert [p["photoUrl"] for p in posts] == [
            "/photos/image1.jpg",
            "/photos/image2.jpg",
            "/photos/image3.jpg",
        ]
        listed = await test_client.get("/api/posts")
        assert listed.headers["X-Total-Count"] == "3"

    @pytest.mark.asyncio
    async def test_bad_json_imports_nothing(self, test_client, bad_json):
        response = await test_client.post(
            "/api/feed/import",
            params={"createdBy": "seed"},
            content=bad_json,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        listed = await test_client.get("/api/posts")
        assert listed.json() == []


class TestLikeRoutes:
    @pytest.mark.asyncio
    async def test_like_toggle(self, test_client):
        post = await _create_post(test_client)
        likes_url = f"/api/posts/{post['id']}/likes"

        first = await test_client.post(likes_url, json={"userId": "fan"})
        assert first.status_code == 201
        assert first.json()["userId"] == "fan"

        again = await test_client.post(likes_url, json={"userId": "fan"})
        assert again.status_code == 200
        assert again.json()["id"] == first.json()["id"]

        viewed = await test_client.get(f"/api/posts/{post['id']}", params={"userId": "fan"})
        assert viewed.json()["isLiked"] is True
        assert viewed.json()["likeCount"] == 1

        listed = await test_client.get(likes_url)
        assert listed.headers["X-Total-Count"] == "1"

        removed = await test_client.delete(f"{likes_url}/fan")
        assert removed.status_code == 204

        viewed = await test_client.get(f"/api/posts/{post['id']}", params={"userId": "fan"})
        assert viewed.json()["isLiked"] is False
        assert viewed.json()["likeCount"] == 0

        removed_again = await test_client.delete(f"{likes_url}/fan")
        assert removed_again.status_code == 404

    @pytest.mark.asyncio
    async def test_like_missing_post(self, test_client):
        response = await test_client.post(f"/api/posts/{uuid4()}/likes", json={"userId": "fan"})
        assert response.status_code == 404


class TestCommentRoutes:
    @pytest.mark.asyncio
    async def test_comment_flow(self, test_client):
        post = await _create_post(test_client)
        url = f"/api/posts/{post['id']}/comments"

        created = await test_client.post(url, json={"authorId": "a", "text": "So fluffy"})
        assert created.status_code == 201
        comment = created.json()
        assert comment["authorId"] == "a"
        assert comment["postId"] == post["id"]

        await test_client.post(url, json={"authorId": "b", "text": "Agreed"})

        listed = await test_client.get(url)
        assert [c["text"] for c in listed.json()] == ["So fluffy", "Agreed"]

        reversed_ = await test_client.get(url, params={"order": "desc"})
        assert [c["text"] for c in reversed_.json()] == ["Agreed", "So fluffy"]

        edited = await test_client.patch(f"/api/comments/{comment['id']}", json={"text": "So fluffy!"})
        assert edited.status_code == 200
        assert edited.json()["text"] == "So fluffy!"

    @pytest.mark.asyncio
    async def test_invalid_order(self, test_client):
        post = await _create_post(test_client)
        response = await test_client.get(
            f"/api/posts/{post['id']}/comments", params={"order": "sideways"}
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "order"

    @pytest.mark.asyncio
    async def test_order_is_case_insensitive(self, test_client):
        post = await _create_post(test_client)
        url = f"/api/posts/{post['id']}/comments"
        await test_client.post(url, json={"authorId": "a", "text": "first"})
        await test_client.post(url, json={"authorId": "b", "text": "second"})

        upper = await test_client.get(url, params={"order": "DESC"})
        assert upper.status_code == 200
        assert [c["text"] for c in upper.json()] == ["second", "first"]

        mixed = await test_client.get(url, params={"order": "Asc"})
        assert [c["text"] for c in mixed.json()] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_edit_missing_comment(self, test_client):
        response = await test_client.patch(f"/api/comments/{uuid4()}", json={"text": "x"})
        assert response.status_code == 404


class TestUserRoutes:
    @pytest.mark.asyncio
    async def test_register_and_verify(self, test_client):
        created = await test_client.post(
            "/api/users", json={"userId": "user-1", "password": "hunter2hunter2"}
        )
        assert created.status_code == 201
        assert "passwordHash" not in created.json()
        assert "password" not in created.json()

        ok = await test_client.post(
            "/api/users/verify", json={"userId": "user-1", "password": "hunter2hunter2"}
        )
        assert ok.json() == {"userId": "user-1", "valid": True}

        bad = await test_client.post(
            "/api/users/verify", json={"userId": "user-1", "password": "nope"}
        )
        assert bad.json()["valid"] is False

    @pytest.mark.asyncio
    async def test_duplicate_registration(self, test_client):
        body = {"userId": "user-1", "password": "hunter2hunter2"}
        await test_client.post("/api/users", json=body)

        response = await test_client.post("/api/users", json=body)
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"


class TestLifespan:
    @pytest.mark.asyncio
    async def test_fail_fast_aborts_startup(self, tmp_path, settings_factory, monkeypatch):
        from petstagram import main

        monkeypatch.setattr(main, "setup_logging", lambda level: None)
        app = main.create_app(settings_factory(tmp_path / "missing" / "app.db"))

        with pytest.raises(SchemaError):
            async with main.lifespan(app):
                pass

    @pytest.mark.asyncio
    async def test_startup_continues_without_fail_fast(self, tmp_path, settings_factory, monkeypatch):
        from petstagram import main

        monkeypatch.setattr(main, "setup_logging", lambda level: None)
        app = main.create_app(
            settings_factory(tmp_path / "missing" / "app.db", schema_fail_fast=False)
        )

        async with main.lifespan(app):
            assert app.state.database is not None

    @pytest.mark.asyncio
    async def test_startup_is_idempotent(self, test_settings, monkeypatch):
        from petstagram import main

        monkeypatch.setattr(main, "setup_logging", lambda level: None)
        for _ in range(2):
            app = main.create_app(test_settings)
            async with main.lifespan(app):
                pass

    @pytest.mark.asyncio
    async def test_startup_logs_server_address(self, tmp_path, settings_factory, monkeypatch, caplog):
        from petstagram import main

        monkeypatch.setattr(main, "setup_logging", lambda level: None)
        app = main.create_app(
            settings_factory(tmp_path / "app.db", backend_host="127.0.0.1", backend_port=9000)
        )

        with caplog.at_level(logging.INFO, logger="petstagram.main"):
            async with main.lifespan(app):
                pass

        assert "Server ready at http://127.0.0.1:9000" in caplog.text
