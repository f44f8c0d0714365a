# skillswap/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for registration, login and password changes.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field, constr

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

Email = constr(strip_whitespace=True, to_lower=True, max_length=256, pattern=EMAIL_PATTERN)
Availability = Literal["weekdays", "weekends", "evenings", "flexible"]

class RegisterIn(BaseModel):
    """
    Request model for account registration.
    The username is derived from the email local part server-side.
    """
    email: Email  # Login identifier, stored lower-cased
    password: str = Field(min_length=4)  # Plain text, hashed server-side
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=128)] = None  # Display name
    location: Optional[constr(strip_whitespace=True, max_length=128)] = None
    availability: Optional[Availability] = None

class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    """
    email: Email
    password: str = Field(min_length=1)

class ChangePasswordIn(BaseModel):
    """
    Request model for changing the signed-in user's password.
    The current password must be supplied and match.
    """
    currentPassword: str = Field(min_length=1)
    newPassword: str = Field(min_length=4)

__all__ = ["Availability", "RegisterIn", "LoginRequest", "ChangePasswordIn"]
