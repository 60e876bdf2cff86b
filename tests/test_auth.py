import datetime

import jwt
import pytest
from flask_jwt_extended import create_access_token

from nodeattr_server.auth import Role, Token, bearer_token, derive_role, role_from_claims
from conftest import JWT_SECRET_KEY


@pytest.mark.parametrize(
    "header, token",
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("Bearer ", ""),
        ("bearer abc", ""),
        ("Basic dXNlcjpwYXNz", ""),
        ("Bearerabc", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_bearer_token(header, token):
    assert bearer_token(header) == token


@pytest.mark.parametrize(
    "admin, valid, role",
    [
        (True, True, Role.ADMIN),
        (False, True, Role.USER),
        (True, False, Role.UNKNOWN),
        (False, False, Role.UNKNOWN),
    ],
)
def test_role_matrix(admin, valid, role):
    assert role_from_claims(Token(admin=admin, valid=valid)) is role
    assert derive_role("Bearer x", validator=lambda token: Token(admin=admin, valid=valid)) is role


def test_derive_role_passes_the_credential_to_the_validator():
    seen = []

    def validator(token):
        seen.append(token)
        return Token(valid=True)

    assert derive_role("Bearer secret", validator=validator) is Role.USER
    assert derive_role(None, validator=validator) is Role.USER
    assert seen == ["secret", ""]


def test_derive_role_without_token_validation():
    def validator(token):
        raise RuntimeError("You must initialize a JWTManager with this flask application before using this method")

    assert derive_role("Bearer x", validator=validator) is Role.UNKNOWN


def test_derive_role_when_the_validator_fails():
    def validator(token):
        raise ValueError("claims service returned garbage")

    assert derive_role("Bearer x", validator=validator) is Role.UNKNOWN


def test_token_from_jwt(app):
    with app.app_context():
        admin = create_access_token(identity="alice", additional_claims={"admin": True})
        user = create_access_token(identity="bob")
        not_admin = create_access_token(identity="carol", additional_claims={"admin": "yes"})

        assert derive_role(f"Bearer {admin}") is Role.ADMIN
        assert derive_role(f"Bearer {user}") is Role.USER
        assert derive_role(f"Bearer {not_admin}") is Role.USER


def test_invalid_tokens_yield_unknown(app):
    with app.app_context():
        expired = create_access_token(identity="alice", additional_claims={"admin": True}, expires_delta=datetime.timedelta(seconds=-10))
        forged = jwt.encode({"sub": "alice", "admin": True}, JWT_SECRET_KEY[::-1], algorithm="HS256")

        for token in (expired, forged, "garbage", ""):
            claims = Token.from_jwt(token)
            assert not claims.valid
            assert derive_role(f"Bearer {token}") is Role.UNKNOWN
        assert derive_role(None) is Role.UNKNOWN
