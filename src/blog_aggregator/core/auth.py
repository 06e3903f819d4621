"""
API key authentication.

The gate itself is framework independent: it takes the request headers and a
continuation, resolves the ``Authorization: ApiKey <token>`` credential to a
user and only then calls the continuation. ``require_api_key`` adapts it to
Flask views.
"""

from functools import wraps
from typing import Any, Callable, Mapping, Optional, TypeVar

from blog_aggregator.exceptions import (
    InvalidCredentialError,
    MissingCredentialError,
    StorageError,
)
from blog_aggregator.logger import get_logger
from blog_aggregator.models import UserModel

logger = get_logger(__name__)

AUTH_HEADER = "Authorization"
API_KEY_PREFIX = "ApiKey "

UserLookup = Callable[[str], Optional[UserModel]]
T = TypeVar("T")


def extract_api_key(header_value: Optional[str]) -> str:
    """Strip the optional ``ApiKey `` prefix from an Authorization header.

    Raises:
        MissingCredentialError: If the header is absent or carries no key
    """
    if not header_value or not header_value.strip():
        raise MissingCredentialError()

    api_key = header_value.strip()
    scheme = API_KEY_PREFIX.strip()
    # a bare "ApiKey" is the prefix with its trailing space already stripped
    if api_key == scheme or api_key.startswith(API_KEY_PREFIX):
        api_key = api_key[len(scheme):].strip()

    if not api_key:
        raise MissingCredentialError()
    return api_key


def resolve_user(header_value: Optional[str], lookup: UserLookup) -> UserModel:
    """Resolve an Authorization header value to its user.

    Args:
        header_value: Raw header value, with or without the prefix
        lookup: Callable returning the user for a bare key, or None

    Returns:
        The matching user

    Raises:
        MissingCredentialError: No key presented
        InvalidCredentialError: No user owns the key
        StorageError: The lookup itself failed
    """
    api_key = extract_api_key(header_value)

    try:
        user = lookup(api_key)
    except Exception as e:
        logger.error(f"API key lookup failed: {e}")
        raise StorageError() from e

    if user is None:
        raise InvalidCredentialError()
    return user


class AuthGate:
    """Interceptor that runs a continuation only for authenticated callers.

    Example:
        >>> gate = AuthGate(lookup)
        >>> gate(request.headers, lambda user: handle(user))
    """

    def __init__(self, lookup: UserLookup):
        self.lookup = lookup

    def authenticate(self, headers: Mapping[str, str]) -> UserModel:
        return resolve_user(headers.get(AUTH_HEADER), self.lookup)

    def __call__(self, headers: Mapping[str, str], continuation: Callable[[UserModel], T]) -> T:
        user = self.authenticate(headers)
        return continuation(user)


def db_user_lookup(db_manager) -> UserLookup:
    """Build a lookup that resolves API keys through the database.

    The returned user is detached from its session, so only its column
    attributes are safe to read.
    """
    from blog_aggregator.storage.repositories import UserRepository

    def lookup(api_key: str) -> Optional[UserModel]:
        with db_manager.session() as session:
            user = UserRepository(session).get_by_api_key(api_key)
            if user is not None:
                session.expunge(user)
            return user

    return lookup


def require_api_key(view: Callable[..., Any]) -> Callable[..., Any]:
    """Flask view decorator: inject the authenticated user as ``user``.

    The gate is read from ``current_app.extensions["auth_gate"]``. On
    failure the error propagates to the app's error handler and the view is
    never called.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        from flask import current_app, request

        gate: AuthGate = current_app.extensions["auth_gate"]
        return gate(request.headers, lambda user: view(*args, user=user, **kwargs))

    return wrapper


__all__ = [
    "AUTH_HEADER",
    "API_KEY_PREFIX",
    "AuthGate",
    "db_user_lookup",
    "extract_api_key",
    "require_api_key",
    "resolve_user",
]
