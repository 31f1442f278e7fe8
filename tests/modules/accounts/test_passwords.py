"""Tests for password hashing and policy checks."""

import pytest

from modules.accounts.exceptions import AccountValidationError
from modules.accounts.passwords import (
    hash_password,
    password_problems,
    validate_password,
    verify_password,
)


class TestHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("Abcdef1!", rounds=4)
        assert hashed != "Abcdef1!"
        assert hashed.startswith("$2")

    def test_verify_round_trip(self):
        hashed = hash_password("Abcdef1!", rounds=4)
        assert verify_password("Abcdef1!", hashed) is True
        assert verify_password("abcdef1!", hashed) is False

    def test_salted(self):
        """Same password should hash differently each time."""
        assert hash_password("secret1", rounds=4) != hash_password("secret1", rounds=4)

    def test_long_passwords_truncate_at_72_bytes(self):
        base = "a" * 72
        hashed = hash_password(base + "tail-one", rounds=4)
        assert verify_password(base + "tail-two", hashed) is True

    def test_verify_rejects_empty_input(self):
        hashed = hash_password("secret1", rounds=4)
        assert verify_password("", hashed) is False
        assert verify_password("secret1", "") is False

    def test_verify_rejects_non_bcrypt_hash(self):
        assert verify_password("secret1", "plaintext-not-a-hash") is False


class TestPolicy:
    def test_basic_policy_length_only(self):
        assert password_problems("abcdef", "basic") == []
        assert password_problems("abcde", "basic") == [
            "Password must be at least 6 characters long"
        ]

    def test_strict_policy_accepts_complex_password(self):
        assert password_problems("Abcdef1!", "strict") == []

    @pytest.mark.parametrize(
        "password,problem",
        [
            ("Abc1!", "at least 8 characters"),
            ("abcdefg1!", "uppercase"),
            ("ABCDEFG1!", "lowercase"),
            ("Abcdefgh!", "number"),
            ("Abcdefgh1", "special character"),
        ],
    )
    def test_strict_policy_reports_each_rule(self, password, problem):
        problems = password_problems(password, "strict")
        assert any(problem in p for p in problems)

    def test_validate_password_raises_with_field(self):
        with pytest.raises(AccountValidationError) as exc_info:
            validate_password("short", "strict", field="new_password")
        assert "new_password" in exc_info.value.details["errors"]

    def test_validate_password_passes(self):
        validate_password("Abcdef1!", "strict")
