"""Tests for connect-time token verification."""

import time

import jwt
import pytest

from app.domain.realtime.auth import ConnectionAuthenticator, normalize_secret, token_prefix
from app.utils.app_errors import AppError

SECRET = "unit-test-secret-0123456789abcdef"


def make_token(claims: dict, secret: str = SECRET, algorithm: str = "HS256") -> str:
    return jwt.encode(claims, secret, algorithm=algorithm)


class TestNormalizeSecret:
    @pytest.mark.parametrize(
        "raw",
        [
            SECRET,
            f"  {SECRET}\n",
            f'"{SECRET}"',
            f"'{SECRET}'",
            f" \"'{SECRET}'\" ",
        ],
    )
    def test_strips_whitespace_and_quotes(self, raw):
        assert normalize_secret(raw) == SECRET

    def test_none_becomes_empty(self):
        assert normalize_secret(None) == ""

    def test_unbalanced_quote_is_kept(self):
        assert normalize_secret('"abc') == '"abc'


class TestTokenPrefix:
    def test_never_returns_full_token(self):
        token = make_token({"id": "u1"})

        hint = token_prefix(token)

        assert hint == f"{token[:10]}..."
        assert token not in hint

    def test_missing_token(self):
        assert token_prefix(None) == "<none>"
        assert token_prefix("") == "<none>"


class TestConnectionAuthenticator:
    """Tests for ConnectionAuthenticator.authenticate."""

    def test_valid_token_binds_user_id(self):
        authenticator = ConnectionAuthenticator(SECRET)

        user = authenticator.authenticate(make_token({"id": "user-1"}))

        assert user.user_id == "user-1"
        assert user.expires_at is None

    def test_quoted_secret_still_verifies(self):
        """A secret copied with quotes from an env file is normalized before use."""
        authenticator = ConnectionAuthenticator(f'  "{SECRET}"  ')

        user = authenticator.authenticate(make_token({"id": "user-1"}))

        assert user.user_id == "user-1"

    @pytest.mark.parametrize(
        ("claims", "expected"),
        [
            ({"id": "a", "userId": "b", "_id": "c", "sub": "d"}, "a"),
            ({"userId": "b", "_id": "c", "sub": "d"}, "b"),
            ({"_id": "c", "sub": "d"}, "c"),
            ({"sub": "d"}, "d"),
            ({"id": 42}, "42"),
        ],
    )
    def test_subject_claim_lookup_order(self, claims, expected):
        authenticator = ConnectionAuthenticator(SECRET)

        user = authenticator.authenticate(make_token(claims))

        assert user.user_id == expected

    def test_missing_token_is_refused(self):
        authenticator = ConnectionAuthenticator(SECRET)

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate(None)

        assert exc_info.value.errcode == "E_MISSING_TOKEN"
        assert exc_info.value.status_code == 401

    def test_malformed_token_is_refused(self):
        authenticator = ConnectionAuthenticator(SECRET)

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate("not-a-jwt")

        assert exc_info.value.errcode == "E_BAD_TOKEN"

    def test_wrong_secret_is_refused(self):
        authenticator = ConnectionAuthenticator(SECRET)
        token = make_token({"id": "user-1"}, secret="another-secret-0123456789abcdef")

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate(token)

        assert exc_info.value.errcode == "E_BAD_TOKEN"

    def test_empty_secret_refuses_everything(self):
        authenticator = ConnectionAuthenticator("  ")

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate(make_token({"id": "user-1"}))

        assert exc_info.value.errcode == "E_BAD_TOKEN"

    def test_expired_token_is_refused(self):
        authenticator = ConnectionAuthenticator(SECRET)
        token = make_token({"id": "user-1", "exp": int(time.time()) - 60})

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate(token)

        assert exc_info.value.errcode == "E_TOKEN_EXPIRED"

    def test_unexpired_token_reports_expiry(self):
        authenticator = ConnectionAuthenticator(SECRET)
        exp = int(time.time()) + 600

        user = authenticator.authenticate(make_token({"id": "user-1", "exp": exp}))

        assert user.expires_at == exp

    def test_require_exp_refuses_token_without_expiry(self):
        authenticator = ConnectionAuthenticator(SECRET, require_exp=True)

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate(make_token({"id": "user-1"}))

        assert exc_info.value.errcode == "E_BAD_TOKEN"

    def test_token_without_subject_is_refused(self):
        authenticator = ConnectionAuthenticator(SECRET)

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate(make_token({"name": "nobody", "id": ""}))

        assert exc_info.value.errcode == "E_NO_SUBJECT"

    def test_algorithm_not_allowed_is_refused(self):
        authenticator = ConnectionAuthenticator(SECRET, algorithms=["HS512"])

        with pytest.raises(AppError) as exc_info:
            authenticator.authenticate(make_token({"id": "user-1"}, algorithm="HS256"))

        assert exc_info.value.errcode == "E_BAD_TOKEN"
