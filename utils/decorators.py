from __future__ import annotations
from functools import wraps
from flask import request, g
from api.errors import error_response
from models import storage
from models.account import Account
from utils.result import Failure
from utils.tokens import ACCESS, get_codec

ACCESS_COOKIE = "accessToken"


def access_token_from_request() -> str | None:
    """accessToken cookie first, then an `Authorization: Bearer` header"""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    """
    Gate a view behind a valid access token.
    Verification is purely cryptographic; the stored refresh token is never consulted.
    On success the account is available as g.current_user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = access_token_from_request()
            if not token:
                return error_response("UNAUTHORIZED", "unauthorized request", 401)

            decoded = get_codec().verify(token, ACCESS)
            if isinstance(decoded, Failure):
                return error_response(
                    "UNAUTHORIZED", decoded.error.message, 401, details={"reason": decoded.error.value}
                )

            claims = decoded.value
            user = storage.get(Account, claims.account_id)
            if not user:
                return error_response("UNAUTHORIZED", "Invalid access token", 401)
            g.current_user = user
            g.current_token_jti = claims.jti
            return fn(*args, **kwargs)

        return wrapper

    return decorator
