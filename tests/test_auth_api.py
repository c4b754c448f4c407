"""Tests for the /api/v1/users auth endpoints"""
from flask.testing import FlaskClient
from sqlalchemy.exc import OperationalError

from conftest import cookie_value, set_cookies
from models.session_record import SessionRecord

LOGIN = "/api/v1/users/login"
LOGOUT = "/api/v1/users/logout"
REFRESH = "/api/v1/users/refresh-token"
REGISTER = "/api/v1/users/register"
CHANGE_PASSWORD = "/api/v1/users/change-password"


def login(client: FlaskClient, username="ana", password="correct"):
    return client.post(LOGIN, json={"username": username, "password": password})


def test_login_sets_cookies_and_sanitized_body(client: FlaskClient, make_account):
    make_account()
    response = login(client)
    assert response.status_code == 200

    cookies = set_cookies(response)
    assert set(cookies) == {"accessToken", "refreshToken"}
    for header in cookies.values():
        assert "HttpOnly" in header
        assert "Secure" in header

    data = response.get_json()["data"]
    assert data["accessToken"] == cookie_value(cookies["accessToken"])
    user = data["user"]
    assert user["username"] == "ana"
    for hidden in ("password", "password_hash", "refresh_token", "refreshToken"):
        assert hidden not in user


def test_login_wrong_password_sets_no_cookie(client: FlaskClient, make_account):
    make_account()
    response = login(client, password="wrong")
    assert response.status_code == 401
    assert response.headers.getlist("Set-Cookie") == []
    assert response.get_json()["error"] == "INVALID_CREDENTIALS"


def test_login_unknown_user_same_response(client: FlaskClient, make_account):
    make_account()
    wrong = login(client, password="wrong").get_json()
    unknown = login(client, username="nobody").get_json()
    assert wrong == unknown


def test_login_missing_fields(client: FlaskClient):
    response = client.post(LOGIN, json={"username": "", "password": ""})
    assert response.status_code == 400
    assert response.get_json()["error"] == "VALIDATION_ERROR"


def test_refresh_rotation_then_replay(client: FlaskClient, make_account):
    make_account()
    original = cookie_value(set_cookies(login(client))["refreshToken"])

    first = client.post(REFRESH, json={"refreshToken": original})
    assert first.status_code == 200
    rotated = first.get_json()["data"]["refreshToken"]
    assert rotated != original
    assert cookie_value(set_cookies(first)["refreshToken"]) == rotated

    replay = client.post(REFRESH, json={"refreshToken": original})
    assert replay.status_code == 401
    assert replay.get_json()["message"] == "Refresh token is expired or used"
    assert replay.headers.getlist("Set-Cookie") == []


def test_refresh_prefers_cookie(client: FlaskClient, make_account):
    make_account()
    token = cookie_value(set_cookies(login(client))["refreshToken"])
    response = client.post(
        REFRESH,
        headers={"Cookie": f"refreshToken={token}"},
        json={"refreshToken": "ignored"},
    )
    assert response.status_code == 200


def test_refresh_without_token(client: FlaskClient):
    response = client.post(REFRESH)
    assert response.status_code == 401
    assert response.get_json()["message"] == "unauthorized request"


def test_refresh_with_access_token_is_rejected(client: FlaskClient, make_account):
    make_account()
    access = login(client).get_json()["data"]["accessToken"]
    response = client.post(REFRESH, json={"refreshToken": access})
    assert response.status_code == 401
    assert response.get_json()["details"]["reason"] == "invalid_signature"


def test_logout_clears_cookies_and_session(client: FlaskClient, make_account):
    make_account()
    cookies = set_cookies(login(client))
    access = cookie_value(cookies["accessToken"])
    refresh = cookie_value(cookies["refreshToken"])

    response = client.post(LOGOUT, headers={"Authorization": f"Bearer {access}"})
    assert response.status_code == 200
    cleared = set_cookies(response)
    assert set(cleared) == {"accessToken", "refreshToken"}
    assert all("Max-Age=0" in header for header in cleared.values())

    after = client.post(REFRESH, json={"refreshToken": refresh})
    assert after.status_code == 401


def test_logout_requires_access_token(client: FlaskClient):
    assert client.post(LOGOUT).status_code == 401


def test_register_then_login(client: FlaskClient):
    response = client.post(
        REGISTER,
        json={
            "username": "Dana",
            "email": "dana@example.com",
            "full_name": "Dana Reyes",
            "password": "long-enough-pw",
        },
    )
    assert response.status_code == 201
    body = response.get_json()["data"]
    assert body["username"] == "dana"
    assert "password" not in body

    assert login(client, "dana", "long-enough-pw").status_code == 200


def test_register_validation_and_conflict(client: FlaskClient, make_account):
    make_account()
    short = client.post(
        REGISTER,
        json={"username": "eve", "email": "eve@example.com", "full_name": "Eve", "password": "short"},
    )
    assert short.status_code == 422
    assert "password" in short.get_json()["details"]

    taken = client.post(
        REGISTER,
        json={"username": "ana", "email": "new@example.com", "full_name": "Ana", "password": "long-enough-pw"},
    )
    assert taken.status_code == 409


def test_change_password_flow(client: FlaskClient, make_account):
    make_account()
    cookies = set_cookies(login(client))
    access = cookie_value(cookies["accessToken"])
    refresh = cookie_value(cookies["refreshToken"])
    headers = {"Authorization": f"Bearer {access}"}

    bad = client.post(CHANGE_PASSWORD, headers=headers,
                      json={"oldPassword": "wrong", "newPassword": "new-password-1"})
    assert bad.status_code == 400

    ok = client.post(CHANGE_PASSWORD, headers=headers,
                     json={"oldPassword": "correct", "newPassword": "new-password-1"})
    assert ok.status_code == 200
    assert client.post(REFRESH, json={"refreshToken": refresh}).status_code == 401
    assert login(client, password="new-password-1").status_code == 200


def test_oversized_body_rejected(client: FlaskClient):
    response = client.post(LOGIN, data="x" * (17 * 1024), content_type="application/json")
    assert response.status_code == 413


def test_storage_failure_on_login_sets_no_cookie(client: FlaskClient, make_account, monkeypatch):
    def broken_store(self, account_id, token):
        raise OperationalError("UPDATE accounts", {}, Exception("database is locked"))

    make_account()
    monkeypatch.setattr(SessionRecord, "store", broken_store)
    response = login(client)
    assert response.status_code == 500
    assert response.get_json()["error"] == "INTERNAL_ERROR"
    assert response.headers.getlist("Set-Cookie") == []


def test_refresh_with_non_object_body(client: FlaskClient):
    for body in (["x"], "tok", 42):
        response = client.post(REFRESH, json=body)
        assert response.status_code == 401
        assert response.get_json()["message"] == "unauthorized request"
