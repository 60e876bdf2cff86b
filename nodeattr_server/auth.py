"""
Bearer token validation and role derivation

The role is computed for every request from the Authorization header:
    admin   : valid token carrying the admin claim
    user    : valid token without the admin claim
    unknown : anything else
"""
import re
from enum import Enum
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
import nodeattr_server
from .config import get_config

BEARER_REGEX = re.compile(r"\ABearer\s(.*)\Z")


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"
    UNKNOWN = "unknown"


class Token:
    """
    Claims extracted from a bearer token
    """

    def __init__(self, admin: bool = False, valid: bool = False) -> None:
        self.admin = admin
        self.valid = valid

    def __repr__(self):
        return f"<Token admin={self.admin} valid={self.valid}>"

    @classmethod
    def from_jwt(cls, token: str) -> "Token":
        """
        Verify the signature and expiry of `token`
        :param token: encoded jwt
        :return: Token, invalid when the jwt can't be decoded
        """
        if not token:
            return cls()
        try:
            claims = decode_token(token)
        except (PyJWTError, JWTExtendedException) as exc:
            nodeattr_server.log.info("Rejected bearer token: %s", exc)
            return cls()
        return cls(admin=claims.get(get_config("ADMIN_CLAIM")) is True, valid=True)


def bearer_token(header) -> str:
    """
    :param header: Authorization header value
    :return: the credential following "Bearer ", or "" if the header is missing or malformed
    """
    match = BEARER_REGEX.match(header or "")
    if match:
        return match.group(1)
    return ""


def role_from_claims(claims: Token) -> Role:
    if claims.admin and claims.valid:
        return Role.ADMIN
    if claims.valid:
        return Role.USER
    return Role.UNKNOWN


def derive_role(header, validator=Token.from_jwt) -> Role:
    """
    :param header: Authorization header value
    :param validator: callable turning a credential into Token claims
    :return: Role, never raises
    """
    try:
        claims = validator(bearer_token(header))
    except Exception as exc:
        # e.g. RuntimeError: decode_token requires an app with a JWTManager
        nodeattr_server.log.error("Token validation failed: %s", exc)
        return Role.UNKNOWN
    return role_from_claims(claims)
