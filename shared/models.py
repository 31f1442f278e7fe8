"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    Built from a validated token plus the stored account, and made
    available to route handlers via dependency injection.
    """

    id: str = Field(..., description="Account ID")
    email: EmailStr = Field(..., description="Account email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    role: str = Field(default="user", description="Account role (user, reviewer, admin)")

    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")
    long_lived: bool = Field(default=False, description="Token was issued with remember-me")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
