# skillswap/schemas/user.py
from typing import Optional
from pydantic import BaseModel, constr

from .auth import Availability

class ProfileUpdateIn(BaseModel):
    """
    Partial profile update; only provided fields change.
    """
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=128)] = None
    location: Optional[constr(strip_whitespace=True, max_length=128)] = None
    bio: Optional[constr(strip_whitespace=True, max_length=1000)] = None
    availability: Optional[Availability] = None
    isPublic: Optional[bool] = None
    profilePicture: Optional[constr(strip_whitespace=True, max_length=1024)] = None

__all__ = ["ProfileUpdateIn"]
