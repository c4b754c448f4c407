"""
Auth protocol: login, logout, refresh rotation and password changes.

Per-account state is implicit in Account.refresh_token:
    Anonymous      no live refresh token stored
    Authenticated  the stored refresh token is the last one issued

Every operation returns Success(value) or Failure(AuthError); nothing here
raises for an expected failure. The HTTP layer maps AuthError.kind to a
status code.

Refresh flow:
1. Verify the presented refresh token (signature, expiry, role)
2. Load the account it names
3. Compare it with the stored token (superseded -> rejected)
4. Issue a new access/refresh pair
5. Swap the stored token with one conditional UPDATE; if another request
   rotated first, the swap fails and no token is returned
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from jwt import PyJWTError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import storage
from models.account import Account
from models.session_record import SessionRecord
from utils.result import Failure, Result, Success
from utils.security import burn_verification, hash_password, verify_password
from utils.tokens import ACCESS, REFRESH, TokenCodec, get_codec

logger = logging.getLogger(__name__)

REFRESH_REUSED = "Refresh token is expired or used"
INVALID_CREDENTIALS = "Invalid username or password"


class AuthErrorKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def status(self) -> int:
        return _STATUS[self]


_STATUS = {
    AuthErrorKind.VALIDATION_ERROR: 400,
    AuthErrorKind.INVALID_CREDENTIALS: 401,
    AuthErrorKind.UNAUTHORIZED: 401,
    AuthErrorKind.NOT_FOUND: 404,
    AuthErrorKind.CONFLICT: 409,
    AuthErrorKind.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class AuthError:
    kind: AuthErrorKind
    message: str
    # token error kind when a token was rejected, e.g. "expired_token"
    reason: str | None = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    account: Account
    tokens: TokenPair


def _fail(kind: AuthErrorKind, message: str, reason: str | None = None) -> Failure[AuthError]:
    return Failure(AuthError(kind, message, reason))


def _internal(exc: Exception, action: str) -> Failure[AuthError]:
    logger.error("failure during %s: %s", action, exc.__class__.__name__)
    return _fail(AuthErrorKind.INTERNAL_ERROR, f"Something went wrong while {action}")


class AuthProtocol:

    def __init__(self, storage, codec: TokenCodec):
        self._storage = storage
        self._codec = codec
        self._sessions = SessionRecord(storage)

    def _issue_pair(self, account_id: str) -> TokenPair:
        return TokenPair(
            access_token=self._codec.issue(account_id, ACCESS),
            refresh_token=self._codec.issue(account_id, REFRESH),
        )

    def register(
        self,
        username: str,
        email: str,
        full_name: str,
        password: str,
        avatar: str | None = None,
        cover_image: str | None = None,
    ) -> Result[Account, AuthError]:
        username = (username or "").strip().lower()
        email = (email or "").strip().lower()
        if not username or not email or not full_name or not password:
            return _fail(AuthErrorKind.VALIDATION_ERROR, "All fields are required")

        if self._storage.find_by(Account, username=username):
            return _fail(AuthErrorKind.CONFLICT, "Account with username already exists")
        if self._storage.find_by(Account, email=email):
            return _fail(AuthErrorKind.CONFLICT, "Account with email already exists")

        account = Account(
            username=username,
            email=email,
            full_name=full_name,
            password=password,
            avatar=avatar,
            cover_image=cover_image,
        )
        try:
            self._storage.new(account)
            self._storage.save()
        except IntegrityError:
            return _fail(AuthErrorKind.CONFLICT, "Account with username or email already exists")
        except SQLAlchemyError as exc:
            return _internal(exc, "registering account")
        logger.info("account registered id=%s", account.id)
        return Success(account)

    def login(self, username: str | None, password: str | None) -> Result[LoginResult, AuthError]:
        if not username or not username.strip():
            return _fail(AuthErrorKind.VALIDATION_ERROR, "username is required")
        if not password:
            return _fail(AuthErrorKind.VALIDATION_ERROR, "password is required")

        account = self._storage.find_by(Account, username=username.strip().lower())
        if account is None:
            burn_verification(password)
            logger.info("login rejected: unknown username")
            return _fail(AuthErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)
        if not verify_password(password, account.password_hash):
            logger.info("login rejected: bad password for id=%s", account.id)
            return _fail(AuthErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)

        try:
            tokens = self._issue_pair(account.id)
            # supersedes any session the account had on another device
            self._sessions.store(account.id, tokens.refresh_token)
        except (SQLAlchemyError, PyJWTError) as exc:
            return _internal(exc, "generating refresh and access token")
        logger.info("login ok id=%s", account.id)
        return Success(LoginResult(account=account, tokens=tokens))

    def logout(self, account_id: str) -> Result[None, AuthError]:
        try:
            cleared = self._sessions.clear(account_id)
        except SQLAlchemyError as exc:
            return _internal(exc, "logging out")
        if not cleared:
            return _fail(AuthErrorKind.NOT_FOUND, "Account not found")
        logger.info("logout id=%s", account_id)
        return Success(None)

    def refresh(self, presented: str | None) -> Result[TokenPair, AuthError]:
        if not presented:
            return _fail(AuthErrorKind.UNAUTHORIZED, "unauthorized request")

        decoded = self._codec.verify(presented, REFRESH)
        if isinstance(decoded, Failure):
            return _fail(AuthErrorKind.UNAUTHORIZED, decoded.error.message, reason=decoded.error.value)
        claims = decoded.value

        account = self._storage.get(Account, claims.account_id)
        if account is None:
            return _fail(AuthErrorKind.UNAUTHORIZED, "Invalid refresh token")

        if not self._sessions.matches(account.id, presented):
            logger.warning("refresh rejected: superseded token for id=%s jti=%s", account.id, claims.jti)
            return _fail(AuthErrorKind.UNAUTHORIZED, REFRESH_REUSED)

        try:
            tokens = self._issue_pair(account.id)
            rotated = self._sessions.rotate(account.id, presented, tokens.refresh_token)
        except (SQLAlchemyError, PyJWTError) as exc:
            return _internal(exc, "rotating refresh token")
        if not rotated:
            logger.warning("refresh rejected: concurrent rotation for id=%s jti=%s", account.id, claims.jti)
            return _fail(AuthErrorKind.UNAUTHORIZED, REFRESH_REUSED)

        logger.info("refresh token rotated id=%s", account.id)
        return Success(tokens)

    def change_password(self, account_id: str, old_password: str, new_password: str) -> Result[None, AuthError]:
        """
        Replace the password hash after checking the current password.
        The stored refresh token is cleared too, so every other session has
        to log in again once its access token runs out.
        """
        account = self._storage.get(Account, account_id)
        if account is None:
            return _fail(AuthErrorKind.NOT_FOUND, "Account not found")
        if not verify_password(old_password, account.password_hash):
            return _fail(AuthErrorKind.VALIDATION_ERROR, "Invalid old password")

        try:
            self._storage.update(Account, account.id, password_hash=hash_password(new_password))
            self._sessions.clear(account.id)
        except SQLAlchemyError as exc:
            return _internal(exc, "changing password")
        logger.info("password changed id=%s, session cleared", account.id)
        return Success(None)

    def update_details(self, account_id: str, full_name: str, email: str) -> Result[Account, AuthError]:
        if not full_name or not email:
            return _fail(AuthErrorKind.VALIDATION_ERROR, "All fields are required")
        email = email.strip().lower()
        account = self._storage.get(Account, account_id)
        if account is None:
            return _fail(AuthErrorKind.NOT_FOUND, "Account not found")

        other = self._storage.find_by(Account, email=email)
        if other is not None and other.id != account.id:
            return _fail(AuthErrorKind.CONFLICT, "Account with email already exists")

        account.full_name = full_name.strip()
        account.email = email
        try:
            self._storage.new(account)
            self._storage.save()
        except IntegrityError:
            return _fail(AuthErrorKind.CONFLICT, "Account with email already exists")
        except SQLAlchemyError as exc:
            return _internal(exc, "updating account")
        return Success(account)


def current_protocol() -> AuthProtocol:
    """Protocol bound to the app's storage and token codec."""
    return AuthProtocol(storage, get_codec())
