"""Unit tests for bcrypt password hashing."""

from __future__ import annotations

import pytest

from recipe_cms.auth import hash_password, verify_password


pytestmark = pytest.mark.unit


class TestPasswords:
    """Tests for hash_password and verify_password."""

    def test_round_trip(self):
        """Should verify the password it hashed."""
        hashed = hash_password("correct horse", rounds=4)

        assert hashed.startswith("$2b$04$")
        assert verify_password("correct horse", hashed)

    def test_wrong_password(self):
        """Should reject a different password."""
        assert not verify_password("battery staple", hash_password("correct horse", rounds=4))

    def test_salts_differ(self):
        """Should salt every hash."""
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_malformed_hash_is_a_mismatch(self):
        """Should return False instead of raising on garbage hashes."""
        assert verify_password("anything", "not-a-bcrypt-hash") is False
