"""
SessionRecord: the single-slot store of an account's live refresh token.

Backed by Account.refresh_token. Only one refresh token is valid per
account; storing a new one supersedes the previous by overwrite.
"""
from __future__ import annotations

import hmac

from models.account import Account


class SessionRecord:

    def __init__(self, storage):
        self._storage = storage

    def store(self, account_id: str, token: str) -> bool:
        """Overwrite the stored token (last writer wins)."""
        return self._storage.update(Account, account_id, refresh_token=token)

    def matches(self, account_id: str, candidate: str | None) -> bool:
        """Exact comparison against the stored token. No stored token -> False."""
        if not candidate:
            return False
        stored = self._storage.get_value(Account, account_id, "refresh_token")
        if not stored:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), candidate.encode("utf-8"))

    def clear(self, account_id: str) -> bool:
        return self._storage.update(Account, account_id, refresh_token=None)

    def rotate(self, account_id: str, expected: str, replacement: str) -> bool:
        """Replace `expected` with `replacement` atomically; False if it was already superseded."""
        if not expected:
            return False
        return self._storage.compare_and_swap(Account, account_id, "refresh_token", expected, replacement)
