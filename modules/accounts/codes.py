"""
One-time numeric codes for email verification and password reset.

A code is a 6-digit string stored with an absolute expiry. Only one code
per purpose is valid at a time; issuing a new one overwrites the old pair.
"""

import secrets
from datetime import datetime, timedelta
from typing import Optional

from .exceptions import CodeExpiredError, InvalidCodeError, NoPendingRequestError

CODE_LENGTH = 6


def generate_code() -> str:
    """Return a random code in the range 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def code_expiry(now: datetime, minutes: int) -> datetime:
    return now + timedelta(minutes=minutes)


def check_code(
    stored_code: Optional[str],
    stored_expiry: Optional[datetime],
    submitted: str,
    now: datetime,
    purpose: str = "verification",
) -> None:
    """
    Check a submitted code against the stored pair.

    Order matters and mirrors what clients expect: no pending pair first,
    then a mismatch, then expiry. Comparison is exact (no trimming or case
    folding).

    Raises:
        NoPendingRequestError: No code/expiry pair is stored
        InvalidCodeError: The submitted code does not match
        CodeExpiredError: The code matches but is past its expiry
    """
    if not stored_code or stored_expiry is None:
        raise NoPendingRequestError(purpose)
    if not secrets.compare_digest(stored_code.encode(), (submitted or "").encode()):
        raise InvalidCodeError(purpose)
    if stored_expiry <= now:
        raise CodeExpiredError(purpose)
