"""Pytest configuration and fixtures"""
from typing import Callable, Dict, Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from api import create_app
from models import storage
from models.account import Account
from services.auth import AuthProtocol, current_protocol


@pytest.fixture(scope="function")
def app() -> Generator[Flask, None, None]:
    """App on a fresh in-memory database for each test"""
    app = create_app("test")
    yield app
    storage.close()


@pytest.fixture(scope="function")
def client(app: Flask) -> FlaskClient:
    """Cookie-less client: every test passes the cookies it means to send"""
    return app.test_client(use_cookies=False)


@pytest.fixture
def app_ctx(app: Flask) -> Generator[Flask, None, None]:
    with app.app_context():
        yield app


@pytest.fixture
def protocol(app_ctx: Flask) -> AuthProtocol:
    return current_protocol()


@pytest.fixture
def make_account(app: Flask) -> Callable[..., str]:
    """Create an account straight through the model; returns its id"""

    def _make(username: str = "ana", password: str = "correct", email: str | None = None,
              full_name: str = "Ana Lima") -> str:
        with app.app_context():
            account = Account(
                username=username,
                email=email or f"{username}@example.com",
                full_name=full_name,
                password=password,
            )
            storage.new(account)
            storage.save()
            return account.id

    return _make


def set_cookies(response) -> Dict[str, str]:
    """name -> raw Set-Cookie header"""
    cookies = {}
    for header in response.headers.getlist("Set-Cookie"):
        name = header.split("=", 1)[0]
        cookies[name] = header
    return cookies


def cookie_value(header: str) -> str:
    return header.split(";", 1)[0].split("=", 1)[1]
