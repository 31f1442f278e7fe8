"""
Password hashing and password policy checks.

Hashes are salted bcrypt. Bcrypt only looks at the first 72 bytes, so
longer passwords are truncated the same way on hash and on check.
"""

import re

import bcrypt

from .exceptions import AccountValidationError

BCRYPT_MAX_BYTES = 72

BASIC_MIN_LENGTH = 6
STRICT_MIN_LENGTH = 8
SPECIAL_CHARACTERS = r"[!@#$%^&*(),.?\":{}|<>]"


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with a fresh salt."""
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored hash."""
    if not password or not password_hash:
        return False
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def password_problems(password: str, policy: str = "basic") -> list[str]:
    """
    List the ways a password breaks the policy.

    Args:
        password: Candidate password
        policy: "basic" (length only) or "strict" (length plus
            upper/lower/digit/special composition)

    Returns:
        Human-readable problems, empty when the password is acceptable.
    """
    if policy == "strict":
        problems = []
        if len(password) < STRICT_MIN_LENGTH:
            problems.append(f"Password must be at least {STRICT_MIN_LENGTH} characters long")
        if not re.search(r"[A-Z]", password):
            problems.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            problems.append("Password must contain at least one lowercase letter")
        if not re.search(r"\d", password):
            problems.append("Password must contain at least one number")
        if not re.search(SPECIAL_CHARACTERS, password):
            problems.append("Password must contain at least one special character")
        return problems

    if len(password) < BASIC_MIN_LENGTH:
        return [f"Password must be at least {BASIC_MIN_LENGTH} characters long"]
    return []


def validate_password(password: str, policy: str = "basic", field: str = "password") -> None:
    """Raise AccountValidationError if the password breaks the policy."""
    problems = password_problems(password, policy)
    if problems:
        raise AccountValidationError(problems[0], errors={field: "; ".join(problems)})
