"""Tests for password hashing and verification"""
import pytest

from utils.security import burn_verification, generate_jti, hash_password, verify_password


@pytest.mark.parametrize("password", ["correct", "pässwörd-ünïcode", "x" * 200])
def test_verify_accepts_the_hashed_password(password: str):
    assert verify_password(password, hash_password(password)) is True


@pytest.mark.parametrize("wrong", ["Correct", "correct ", "", "wrong"])
def test_verify_rejects_any_other_password(wrong: str):
    stored = hash_password("correct")
    assert verify_password(wrong, stored) is False


def test_hashes_are_salted():
    first = hash_password("correct")
    second = hash_password("correct")
    assert first != second
    assert "correct" not in first


@pytest.mark.parametrize("bad_hash", [None, "", "not-a-hash", "$argon2id$v=19$garbage"])
def test_verify_returns_false_for_malformed_hash(bad_hash):
    assert verify_password("correct", bad_hash) is False


def test_verify_returns_false_for_non_string_password():
    assert verify_password(None, hash_password("correct")) is False


def test_burn_verification_never_raises():
    burn_verification("anything")
    burn_verification("")


def test_jti_is_unique():
    assert len({generate_jti() for _ in range(100)}) == 100
