"""Tests for password hashing and secret helpers."""

from src.utils.secrets import hash_password, mask_secret, validate_secret_strength, verify_password


class TestPasswords:
    """Tests for hash_password / verify_password."""

    def test_hash_is_salted_bcrypt(self):
        first = hash_password("Sup3r-Long-Passw0rd")
        second = hash_password("Sup3r-Long-Passw0rd")

        assert first.startswith("$2b$")
        assert first != second
        assert verify_password("Sup3r-Long-Passw0rd", first)
        assert verify_password("Sup3r-Long-Passw0rd", second)

    def test_wrong_password(self):
        assert not verify_password("wrong", hash_password("Sup3r-Long-Passw0rd"))

    def test_unrecognized_hash(self):
        assert not verify_password("anything", "scrypt$16384$8$1$c2FsdA$ZGlnZXN0")


class TestSecretHelpers:
    def test_weak_secret(self):
        valid, issues = validate_secret_strength("password")
        assert not valid
        assert len(issues) == 3

    def test_mask(self):
        assert mask_secret("abcdefghijkl") == "abcd...ijkl"
        assert mask_secret("short") == "*****"
