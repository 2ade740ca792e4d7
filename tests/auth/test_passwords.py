"""Tests for auth/passwords.py - hashing and strength checks."""

import pytest

from auth.exceptions import WeakPasswordError
from auth.passwords import check_strength, hash_password, verify_password


class TestHashing:

    def test_hash_verifies(self):
        password_hash = hash_password("correct horse")
        assert password_hash != "correct horse"
        assert verify_password("correct horse", password_hash)
        assert not verify_password("wrong horse", password_hash)

    def test_hashes_are_salted(self):
        assert hash_password("same-password") != hash_password("same-password")

    def test_malformed_hash_is_false(self):
        assert verify_password("anything", "not-a-hash") is False


class TestCheckStrength:

    def test_accepts_min_length(self):
        check_strength("12345678", 8)

    @pytest.mark.parametrize("password", ["short", "        ", ""])
    def test_rejects(self, password):
        with pytest.raises(WeakPasswordError, match="at least 8"):
            check_strength(password, 8)
