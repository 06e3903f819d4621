"""Unit tests for API key authentication."""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from blog_aggregator.core.auth import AuthGate, db_user_lookup, extract_api_key, resolve_user
from blog_aggregator.exceptions import (
    AuthError,
    InvalidCredentialError,
    MissingCredentialError,
    StorageError,
)
from blog_aggregator.models import UserCreate, UserModel
from blog_aggregator.storage.repositories import UserRepository


class TestExtractApiKey:
    """Tests for extract_api_key."""

    def test_strips_prefix(self):
        assert extract_api_key("ApiKey abc123") == "abc123"

    def test_prefix_is_optional(self):
        assert extract_api_key("abc123") == "abc123"

    @pytest.mark.parametrize(
        "value", [None, "", "   ", "ApiKey ", "ApiKey    ", "ApiKey", "  ApiKey  "]
    )
    def test_missing(self, value):
        with pytest.raises(MissingCredentialError) as exc_info:
            extract_api_key(value)

        assert exc_info.value.message == "Missing API key"
        assert exc_info.value.status_code == 401

    def test_key_starting_with_scheme_word_is_kept(self):
        assert extract_api_key("ApiKeyabc") == "ApiKeyabc"

    def test_surrounding_whitespace_around_prefixed_key(self):
        assert extract_api_key("  ApiKey   abc123  ") == "abc123"


class TestResolveUser:
    """Tests for resolve_user."""

    def test_returns_user(self):
        user = UserModel(name="alice", api_key="k")
        lookup = Mock(return_value=user)

        assert resolve_user("ApiKey k", lookup) is user
        lookup.assert_called_once_with("k")

    def test_unknown_key(self):
        with pytest.raises(InvalidCredentialError) as exc_info:
            resolve_user("ApiKey nope", Mock(return_value=None))

        assert exc_info.value.message == "Invalid API key"
        assert isinstance(exc_info.value, AuthError)

    def test_missing_key_skips_lookup(self):
        lookup = Mock()

        with pytest.raises(MissingCredentialError):
            resolve_user(None, lookup)

        lookup.assert_not_called()

    def test_lookup_failure_is_storage_error(self):
        lookup = Mock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

        with pytest.raises(StorageError) as exc_info:
            resolve_user("ApiKey k", lookup)

        assert exc_info.value.status_code == 500
        assert "db down" not in exc_info.value.message


class TestAuthGate:
    """Tests for the AuthGate interceptor."""

    def test_calls_continuation_with_user(self):
        user = UserModel(name="alice", api_key="k")
        gate = AuthGate(Mock(return_value=user))
        continuation = Mock(return_value="response")

        result = gate({"Authorization": "ApiKey k"}, continuation)

        assert result == "response"
        continuation.assert_called_once_with(user)

    def test_short_circuits_on_failure(self):
        gate = AuthGate(Mock(return_value=None))
        continuation = Mock()

        with pytest.raises(InvalidCredentialError):
            gate({"Authorization": "ApiKey k"}, continuation)

        continuation.assert_not_called()

    def test_missing_header(self):
        continuation = Mock()

        with pytest.raises(MissingCredentialError):
            AuthGate(Mock())({}, continuation)

        continuation.assert_not_called()


class TestDbUserLookup:
    """Tests for the database-backed lookup."""

    def test_finds_user_by_key(self, db_manager):
        with db_manager.session() as session:
            created = UserRepository(session).create(UserCreate(name="alice"))
            api_key, user_id = created.api_key, created.id

        user = db_user_lookup(db_manager)(api_key)

        assert user.id == user_id
        assert user.name == "alice"

    def test_unknown_key_returns_none(self, db_manager):
        assert db_user_lookup(db_manager)("missing") is None
