"""
Token codec: signed, expiring JWTs (PyJWT, HS256 by default).

Each role ("access", "refresh") has its own secret and lifetime, so a token
minted for one role never verifies as the other. Tokens carry:
    iss, sub (account id), type (role), jti, iat, exp
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Mapping

import jwt
from flask import current_app

from utils.result import Failure, Result, Success
from utils.security import generate_jti

ACCESS = "access"
REFRESH = "refresh"

REQUIRED_CLAIMS = ["exp", "iat", "sub", "jti", "type"]


class TokenError(str, Enum):
    EXPIRED_TOKEN = "expired_token"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED_TOKEN = "malformed_token"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    TokenError.EXPIRED_TOKEN: "Token expired",
    TokenError.INVALID_SIGNATURE: "Invalid token signature",
    TokenError.MALFORMED_TOKEN: "Malformed token",
}


@dataclass(frozen=True)
class RoleKey:
    secret: str
    lifetime: timedelta


@dataclass(frozen=True)
class TokenClaims:
    account_id: str
    role: str
    jti: str
    issued_at: datetime
    expires_at: datetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """Issues and verifies role-bound tokens. Performs no I/O."""

    def __init__(self, roles: Mapping[str, RoleKey], algorithm: str = "HS256", issuer: str = "videohub-api"):
        self._roles = dict(roles)
        self._algorithm = algorithm
        self._issuer = issuer

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenCodec":
        roles = {
            ACCESS: RoleKey(config["ACCESS_TOKEN_SECRET"], config["ACCESS_TOKEN_EXPIRES"]),
            REFRESH: RoleKey(config["REFRESH_TOKEN_SECRET"], config["REFRESH_TOKEN_EXPIRES"]),
        }
        return cls(
            roles,
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "videohub-api"),
        )

    def lifetime(self, role: str) -> timedelta:
        return self._roles[role].lifetime

    def issue(self, account_id: str, role: str, now: datetime | None = None) -> str:
        key = self._roles[role]
        issued = now or _now()
        payload: Dict[str, Any] = {
            "iss": self._issuer,
            "sub": str(account_id),
            "type": role,
            "jti": generate_jti(),
            "iat": int(issued.timestamp()),
            "exp": int((issued + key.lifetime).timestamp()),
        }
        return jwt.encode(payload, key.secret, algorithm=self._algorithm)

    def verify(self, token: str, role: str) -> Result[TokenClaims, TokenError]:
        """
        Decode and validate a token for the given role.
        Signature is checked before expiry, so a forged token reports
        INVALID_SIGNATURE even when its exp is in the past.
        """
        key = self._roles[role]
        if not isinstance(token, str) or not token:
            return Failure(TokenError.MALFORMED_TOKEN)
        try:
            decoded = jwt.decode(
                token,
                key.secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            return Failure(TokenError.EXPIRED_TOKEN)
        except jwt.InvalidSignatureError:
            return Failure(TokenError.INVALID_SIGNATURE)
        except jwt.InvalidTokenError:
            return Failure(TokenError.MALFORMED_TOKEN)

        # same secret configured for both roles: the type claim still separates them
        if decoded.get("type") != role:
            return Failure(TokenError.INVALID_SIGNATURE)

        return Success(
            TokenClaims(
                account_id=decoded["sub"],
                role=role,
                jti=decoded["jti"],
                issued_at=datetime.fromtimestamp(decoded["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
            )
        )


def get_codec() -> TokenCodec:
    """Codec registered on the current app by create_app()."""
    return current_app.extensions["token_codec"]
