"""
Authentication blueprint (mounted at /api/v1/users):
- POST /register
- POST /login
- POST /logout           (access token required)
- POST /refresh-token
- POST /change-password  (access token required)

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and long-lived refresh tokens (JWTs signed with HS256,
  one secret per role)
- Keeps exactly one live refresh token per account and rotates it on every refresh
- Delivers both tokens as httpOnly cookies; the access token is also returned in the body
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.account import (
    AccountCreateSchema,
    AccountOutSchema,
    ChangePasswordSchema,
    LoginSchema,
)
from services.auth import TokenPair, current_protocol
from utils.decorators import ACCESS_COOKIE, jwt_required
from utils.result import Failure
from utils.tokens import ACCESS, REFRESH, get_codec
from .errors import failure_response

REFRESH_COOKIE = "refreshToken"

bp = Blueprint("auth", __name__)

account_create_schema = AccountCreateSchema()
account_out_schema = AccountOutSchema()
login_schema = LoginSchema()
change_password_schema = ChangePasswordSchema()


def _cookie_options() -> dict:
    return {
        "httponly": current_app.config.get("COOKIE_HTTPONLY", True),
        "secure": current_app.config.get("COOKIE_SECURE", True),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_session_cookies(response, tokens: TokenPair):
    codec = get_codec()
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE, tokens.access_token,
        max_age=int(codec.lifetime(ACCESS).total_seconds()), **options
    )
    response.set_cookie(
        REFRESH_COOKIE, tokens.refresh_token,
        max_age=int(codec.lifetime(REFRESH).total_seconds()), **options
    )
    return response


def clear_session_cookies(response):
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response


@bp.post("/register")
def register():
    """
    Register a new account.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, full_name, password]
          properties:
            username: { type: string }
            email: { type: string }
            full_name: { type: string }
            password: { type: string }
            avatar: { type: string }
            cover_image: { type: string }
    responses:
      201:
        description: Created
      409:
        description: Username or email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = account_create_schema.load(payload)

    outcome = current_protocol().register(**data)
    if isinstance(outcome, Failure):
        return failure_response(outcome.error)

    return jsonify(
        {
            "data": account_out_schema.dump(outcome.value),
            "message": "Account registered successfully",
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: sets accessToken / refreshToken cookies
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (account and access token; both tokens as cookies)
      400:
        description: Missing username or password
      401:
        description: Invalid username or password
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    outcome = current_protocol().login(data.get("username"), data.get("password"))
    if isinstance(outcome, Failure):
        return failure_response(outcome.error)

    result = outcome.value
    response = jsonify(
        {
            "data": {
                "user": account_out_schema.dump(result.account),
                "accessToken": result.tokens.access_token,
            },
            "message": "User logged in successfully",
        }
    )
    set_session_cookies(response, result.tokens)
    return response, 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: clears the stored refresh token and both cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    outcome = current_protocol().logout(g.current_user.id)
    if isinstance(outcome, Failure):
        return failure_response(outcome.error)

    response = jsonify({"data": {}, "message": "User logged out successfully"})
    clear_session_cookies(response)
    return response, 200


@bp.post("/refresh-token")
def refresh():
    """
    Exchange the current refresh token for a new access/refresh pair (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: false
         schema:
           type: object
           properties:
             refreshToken: { type: string, description: "used when the refreshToken cookie is absent" }
    responses:
      200:
        description: New token pair (also set as cookies)
      401:
        description: Missing, invalid, expired or already used refresh token
    """
    presented = request.cookies.get(REFRESH_COOKIE)
    if not presented:
        payload = request.get_json(silent=True)
        # a JSON array or bare string carries no token
        if isinstance(payload, dict):
            presented = payload.get("refreshToken")

    outcome = current_protocol().refresh(presented)
    if isinstance(outcome, Failure):
        return failure_response(outcome.error)

    tokens = outcome.value
    response = jsonify(
        {
            "data": {
                "accessToken": tokens.access_token,
                "refreshToken": tokens.refresh_token,
            },
            "message": "Access token refreshed",
        }
    )
    set_session_cookies(response, tokens)
    return response, 200


@bp.post("/change-password")
@jwt_required()
def change_password():
    """
    Change password; ends the stored session
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [oldPassword, newPassword]
           properties:
             oldPassword: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed
      400:
        description: Invalid old password
      401:
        description: Unauthorized
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = change_password_schema.load(payload)

    outcome = current_protocol().change_password(
        g.current_user.id, data["old_password"], data["new_password"]
    )
    if isinstance(outcome, Failure):
        return failure_response(outcome.error)

    response = jsonify({"data": {}, "message": "Password changed successfully"})
    clear_session_cookies(response)
    return response, 200
