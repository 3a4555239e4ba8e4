"""Bearer token to user id resolution."""

from datetime import timedelta

from notetree.core.security import extract_token_from_header
from notetree.domains.identity import IdentityResolver

from conftest import make_token

resolver = IdentityResolver()


def test_resolves_subject_from_bearer_header():
    token = make_token({"sub": "user_42"})

    assert resolver.resolve_header(f"Bearer {token}") == "user_42"
    assert resolver.resolve_header(f"bearer {token}") == "user_42"


def test_missing_or_malformed_header_is_unauthenticated():
    assert resolver.resolve_header(None) is None
    assert resolver.resolve_header("") is None
    assert resolver.resolve_header("Basic dXNlcjpwYXNz") is None
    assert extract_token_from_header("Bearer") is None


def test_expired_token_is_unauthenticated():
    token = make_token({"sub": "user_42"}, expires_delta=timedelta(seconds=-5))

    assert resolver.resolve_token(token) is None


def test_token_without_subject_is_unauthenticated():
    token = make_token({"email": "someone@example.com"})

    assert resolver.resolve_token(token) is None


def test_tampered_token_is_unauthenticated():
    token = make_token({"sub": "user_42"})

    assert resolver.resolve_token(token[:-2] + "xx") is None
