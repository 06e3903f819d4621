"""Tests for the HTTP API."""

import json
import uuid
from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from blog_aggregator.core.auth import AuthGate
from blog_aggregator.exceptions import ClientInputError, StorageError
from blog_aggregator.models import PostCreate
from blog_aggregator.storage.repositories import PostRepository
from blog_aggregator.web.app import create_app
from blog_aggregator.web.blueprints import SystemBlueprint
from blog_aggregator.web.blueprints.posts import parse_limit


def auth_header(api_key: str) -> dict:
    return {"Authorization": f"ApiKey {api_key}"}


@pytest.fixture
def add_posts(db_manager):
    """Insert posts for a feed directly through the repository."""

    def _add_posts(feed_id: str, count: int, prefix: str = "post"):
        base = datetime(2026, 1, 1)
        with db_manager.session() as session:
            repo = PostRepository(session)
            for i in range(count):
                repo.create(
                    PostCreate(
                        feed_id=uuid.UUID(feed_id),
                        title=f"{prefix} {i}",
                        url=f"https://posts.example/{prefix}/{i}",
                        published_at=base + timedelta(hours=i),
                    )
                )

    return _add_posts


class TestSystemRoutes:
    """Tests for the unauthenticated utility routes."""

    def test_index(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Hello, Blog Aggregator!"
        assert response.mimetype == "text/plain"

    def test_healthz(self, client):
        response = client.get("/v1/healthz")

        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}

    def test_err(self, client):
        response = client.get("/v1/err")

        assert response.status_code == 500
        assert response.get_json() == {"error": "Internal Server Error"}

    def test_unknown_route(self, client):
        response = client.get("/v1/nope")

        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found"}

    def test_wrong_method(self, client):
        response = client.put("/v1/healthz")

        assert response.status_code == 405
        assert response.get_json() == {"error": "Method not allowed"}


class TestUsers:
    """Tests for user registration and lookup."""

    def test_create_user(self, client):
        response = client.post("/v1/users", json={"name": "alice"})

        assert response.status_code == 201
        body = response.get_json()
        assert body["name"] == "alice"
        assert len(body["api_key"]) == 64
        assert uuid.UUID(body["id"])
        assert set(body) == {"id", "name", "api_key", "created_at", "updated_at"}

    def test_response_keeps_field_order(self, app, client):
        response = client.post("/v1/users", json={"name": "alice"})

        assert app.json.sort_keys is False
        assert list(json.loads(response.get_data(as_text=True))) == [
            "id",
            "name",
            "api_key",
            "created_at",
            "updated_at",
        ]

    @pytest.mark.parametrize("payload", [None, {}, {"name": 42}, ["alice"]])
    def test_create_user_invalid_payload(self, client, payload):
        response = client.post("/v1/users", json=payload)

        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid request payload"}

    def test_create_user_non_json_body(self, client):
        response = client.post("/v1/users", data="name=alice")

        assert response.status_code == 400

    def test_get_current_user(self, client, create_user):
        user = create_user("bob")

        response = client.get("/v1/user", headers=auth_header(user["api_key"]))

        assert response.status_code == 200
        assert response.get_json() == user

    def test_get_current_user_without_prefix(self, client, create_user):
        user = create_user()

        response = client.get("/v1/user", headers={"Authorization": user["api_key"]})

        assert response.status_code == 200
        assert response.get_json()["id"] == user["id"]

    def test_get_current_user_missing_key(self, client):
        response = client.get("/v1/user")

        assert response.status_code == 401
        assert response.get_json() == {"error": "Missing API key"}

    def test_get_current_user_unknown_key(self, client):
        response = client.get("/v1/user", headers=auth_header("0" * 64))

        assert response.status_code == 404
        assert response.get_json() == {"error": "User not found"}

    def test_get_current_user_lookup_failure(self, test_config, db_manager):
        gate = AuthGate(Mock(side_effect=OperationalError("SELECT", {}, Exception("down"))))
        client = create_app(config=test_config, db_manager=db_manager, auth_gate=gate).test_client()

        response = client.get("/v1/user", headers=auth_header("k"))

        assert response.status_code == 500
        assert response.get_json() == {"error": "Failed to retrieve user"}


class TestAuthentication:
    """Tests for the API key gate on protected routes."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("post", "/v1/feeds"),
            ("post", "/v1/feed_follows"),
            ("get", "/v1/feed_follows/all"),
            ("delete", f"/v1/feed_follows/{uuid.uuid4()}"),
            ("get", "/v1/posts"),
        ],
    )
    def test_missing_key(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert response.get_json() == {"error": "Missing API key"}

    def test_invalid_key(self, client):
        response = client.get("/v1/posts", headers=auth_header("not-a-key"))

        assert response.status_code == 401
        assert response.get_json() == {"error": "Invalid API key"}

    def test_empty_prefixed_key(self, client):
        response = client.get("/v1/posts", headers={"Authorization": "ApiKey "})

        assert response.status_code == 401
        assert response.get_json() == {"error": "Missing API key"}

    def test_rejected_request_has_no_side_effects(self, client):
        client.post(
            "/v1/feeds",
            json={"name": "x", "url": "https://x.example"},
            headers=auth_header("bogus"),
        )

        assert client.get("/v1/feeds/all").get_json() == []

    def test_lookup_failure_is_server_error(self, test_config, db_manager):
        gate = AuthGate(Mock(side_effect=OperationalError("SELECT", {}, Exception("down"))))
        client = create_app(config=test_config, db_manager=db_manager, auth_gate=gate).test_client()

        response = client.get("/v1/posts", headers=auth_header("k"))

        assert response.status_code == 500
        assert response.get_json() == {"error": "Server error"}


class TestFeeds:
    """Tests for feed creation and listing."""

    def test_create_feed_also_follows_it(self, client, create_user, create_feed):
        user = create_user()

        body = create_feed(user, name="Lane", url="https://wagslane.dev/index.xml")

        feed, follow = body["feed"], body["feed_follow"]
        assert feed["name"] == "Lane"
        assert feed["url"] == "https://wagslane.dev/index.xml"
        assert feed["user_id"] == user["id"]
        assert feed["last_fetched_at"] is None
        assert follow["feed_id"] == feed["id"]
        assert follow["user_id"] == user["id"]

        follows = client.get("/v1/feed_follows/all", headers=auth_header(user["api_key"]))
        assert [f["id"] for f in follows.get_json()] == [follow["id"]]

    @pytest.mark.parametrize("payload", [{"name": "x"}, {"url": "https://x.example"}, {"name": "x", "url": ""}])
    def test_create_feed_invalid_payload(self, client, create_user, payload):
        user = create_user()

        response = client.post("/v1/feeds", json=payload, headers=auth_header(user["api_key"]))

        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid request payload"}

    def test_duplicate_url(self, client, create_user, create_feed):
        alice = create_user("alice")
        bob = create_user("bob")
        create_feed(alice, url="https://dup.example/feed")

        response = client.post(
            "/v1/feeds",
            json={"name": "Again", "url": "https://dup.example/feed"},
            headers=auth_header(bob["api_key"]),
        )

        assert response.status_code == 400
        assert response.get_json() == {"error": "Feed URL already exists"}
        follows = client.get("/v1/feed_follows/all", headers=auth_header(bob["api_key"]))
        assert follows.get_json() == []

    def test_list_all_feeds_is_public(self, client, create_user, create_feed):
        alice = create_user("alice")
        bob = create_user("bob")
        create_feed(alice, url="https://a.example/feed")
        create_feed(bob, url="https://b.example/feed")

        response = client.get("/v1/feeds/all")

        assert response.status_code == 200
        assert {f["url"] for f in response.get_json()} == {
            "https://a.example/feed",
            "https://b.example/feed",
        }


class TestFeedFollows:
    """Tests for following and unfollowing."""

    def test_follow_another_users_feed(self, client, create_user, create_feed):
        alice = create_user("alice")
        bob = create_user("bob")
        feed = create_feed(alice)["feed"]

        response = client.post(
            "/v1/feed_follows", json={"feed_id": feed["id"]}, headers=auth_header(bob["api_key"])
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body["feed_id"] == feed["id"]
        assert body["user_id"] == bob["id"]

    def test_follow_twice(self, client, create_user, create_feed):
        alice = create_user()
        feed = create_feed(alice)["feed"]

        response = client.post(
            "/v1/feed_follows", json={"feed_id": feed["id"]}, headers=auth_header(alice["api_key"])
        )

        assert response.status_code == 400
        assert response.get_json() == {"error": "Feed already followed"}

    def test_follow_unknown_feed(self, client, create_user):
        user = create_user()

        response = client.post(
            "/v1/feed_follows",
            json={"feed_id": str(uuid.uuid4())},
            headers=auth_header(user["api_key"]),
        )

        assert response.status_code == 404
        assert response.get_json() == {"error": "Feed not found"}

    def test_follow_invalid_feed_id(self, client, create_user):
        user = create_user()

        response = client.post(
            "/v1/feed_follows", json={"feed_id": "nope"}, headers=auth_header(user["api_key"])
        )

        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid request payload"}

    def test_list_only_own_follows(self, client, create_user, create_feed):
        alice = create_user("alice")
        bob = create_user("bob")
        create_feed(alice, url="https://a.example/feed")
        create_feed(bob, url="https://b.example/feed")

        response = client.get("/v1/feed_follows/all", headers=auth_header(alice["api_key"]))

        assert [f["user_id"] for f in response.get_json()] == [alice["id"]]

    def test_unfollow(self, client, create_user, create_feed):
        user = create_user()
        follow = create_feed(user)["feed_follow"]
        headers = auth_header(user["api_key"])

        response = client.delete(f"/v1/feed_follows/{follow['id']}", headers=headers)

        assert response.status_code == 204
        assert response.get_data() == b""
        assert client.get("/v1/feed_follows/all", headers=headers).get_json() == []

    def test_unfollow_twice(self, client, create_user, create_feed):
        user = create_user()
        follow = create_feed(user)["feed_follow"]
        headers = auth_header(user["api_key"])
        client.delete(f"/v1/feed_follows/{follow['id']}", headers=headers)

        response = client.delete(f"/v1/feed_follows/{follow['id']}", headers=headers)

        assert response.status_code == 404
        assert response.get_json() == {"error": "Feed follow not found"}

    def test_cannot_unfollow_for_someone_else(self, client, create_user, create_feed):
        alice = create_user("alice")
        bob = create_user("bob")
        follow = create_feed(alice)["feed_follow"]

        response = client.delete(
            f"/v1/feed_follows/{follow['id']}", headers=auth_header(bob["api_key"])
        )

        assert response.status_code == 404
        alice_follows = client.get("/v1/feed_follows/all", headers=auth_header(alice["api_key"]))
        assert len(alice_follows.get_json()) == 1

    def test_unfollow_invalid_id(self, client, create_user):
        user = create_user()

        response = client.delete("/v1/feed_follows/not-a-uuid", headers=auth_header(user["api_key"]))

        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid feed follow ID"}


class TestPosts:
    """Tests for the reading list."""

    def test_no_posts(self, client, create_user):
        user = create_user()

        response = client.get("/v1/posts", headers=auth_header(user["api_key"]))

        assert response.status_code == 200
        assert response.get_json() == []

    def test_default_limit_newest_first(self, client, create_user, create_feed, add_posts):
        user = create_user()
        feed = create_feed(user)["feed"]
        add_posts(feed["id"], 15)

        response = client.get("/v1/posts", headers=auth_header(user["api_key"]))

        posts = response.get_json()
        assert len(posts) == 10
        assert posts[0]["title"] == "post 14"
        assert posts[-1]["title"] == "post 5"

    def test_explicit_limit(self, client, create_user, create_feed, add_posts):
        user = create_user()
        feed = create_feed(user)["feed"]
        add_posts(feed["id"], 5)

        response = client.get("/v1/posts?limit=2", headers=auth_header(user["api_key"]))

        assert [p["title"] for p in response.get_json()] == ["post 4", "post 3"]

    @pytest.mark.parametrize("limit", ["0", "-1", "abc", "1.5"])
    def test_invalid_limit(self, client, create_user, limit):
        user = create_user()

        response = client.get(f"/v1/posts?limit={limit}", headers=auth_header(user["api_key"]))

        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid limit parameter"}

    def test_only_followed_feeds(self, client, create_user, create_feed, add_posts):
        alice = create_user("alice")
        bob = create_user("bob")
        alice_feed = create_feed(alice, url="https://a.example/feed")
        bob_feed = create_feed(bob, url="https://b.example/feed")
        add_posts(alice_feed["feed"]["id"], 2, prefix="alice")
        add_posts(bob_feed["feed"]["id"], 2, prefix="bob")

        response = client.get("/v1/posts", headers=auth_header(alice["api_key"]))

        assert {p["title"] for p in response.get_json()} == {"alice 0", "alice 1"}

    def test_unfollowed_feed_drops_out(self, client, create_user, create_feed, add_posts):
        user = create_user()
        body = create_feed(user)
        add_posts(body["feed"]["id"], 3)
        headers = auth_header(user["api_key"])

        client.delete(f"/v1/feed_follows/{body['feed_follow']['id']}", headers=headers)

        assert client.get("/v1/posts", headers=headers).get_json() == []


class TestParseLimit:
    """Tests for parse_limit."""

    def test_default(self):
        assert parse_limit(None, 10) == 10
        assert parse_limit("", 7) == 7

    def test_valid(self):
        assert parse_limit("25", 10) == 25

    def test_invalid(self):
        with pytest.raises(ClientInputError):
            parse_limit("0", 10)


class TestEndToEnd:
    """A full session against the API."""

    def test_register_follow_read_unfollow(self, client, create_user, create_feed, add_posts):
        alice = create_user("alice")
        bob = create_user("bob")
        feed_body = create_feed(alice, name="Boot.dev", url="https://blog.boot.dev/index.xml")
        feed_id = feed_body["feed"]["id"]
        add_posts(feed_id, 3)

        bob_headers = auth_header(bob["api_key"])
        follow = client.post("/v1/feed_follows", json={"feed_id": feed_id}, headers=bob_headers)
        assert follow.status_code == 201

        posts = client.get("/v1/posts?limit=5", headers=bob_headers).get_json()
        assert [p["title"] for p in posts] == ["post 2", "post 1", "post 0"]
        assert all(p["feed_id"] == feed_id for p in posts)

        unfollow = client.delete(
            f"/v1/feed_follows/{follow.get_json()['id']}", headers=bob_headers
        )
        assert unfollow.status_code == 204
        assert client.get("/v1/posts", headers=bob_headers).get_json() == []

        # alice still follows her own feed
        alice_posts = client.get("/v1/posts", headers=auth_header(alice["api_key"])).get_json()
        assert len(alice_posts) == 3


class TestSessionScope:
    """Tests for storage error translation in blueprints."""

    def test_conflict_becomes_client_error(self, db_manager):
        blueprint = SystemBlueprint(db_manager)

        with pytest.raises(ClientInputError, match="Feed already followed"):
            with blueprint.session_scope("Failed to create feed follow", "Feed already followed"):
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    def test_conflict_without_message_is_storage_error(self, db_manager):
        blueprint = SystemBlueprint(db_manager)

        with pytest.raises(StorageError, match="Failed to create user"):
            with blueprint.session_scope("Failed to create user"):
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    def test_storage_failure_hides_detail(self, db_manager):
        blueprint = SystemBlueprint(db_manager)

        with pytest.raises(StorageError) as exc_info:
            with blueprint.session_scope("Failed to retrieve posts"):
                raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        assert exc_info.value.message == "Failed to retrieve posts"
