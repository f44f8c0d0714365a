# skillswap/schemas/admin.py
"""
Pydantic schemas for admin console endpoints.
Defines request/response models for user moderation and broadcast messages.
"""
from pydantic import BaseModel, Field, constr
from typing import Optional, List, Literal

MessageCategory = Literal["announcement", "update", "maintenance", "alert"]

# ========== Common return model ==========
class AdminUserBase(BaseModel):
    """
    User model returned by admin endpoints.
    Includes moderation flags and activity counters.
    """
    id: int  # User unique identifier
    username: str
    email: str
    fullName: str
    location: Optional[str] = None
    isPublic: bool
    isBanned: bool
    isAdmin: bool
    avgRating: Optional[float] = None  # Running average, None until the first rating
    skillsCount: int = 0  # Skills listed by the user
    swapsCount: int = 0  # Swaps the user takes part in, either side
    createdAt: Optional[str] = None  # ISO timestamp


class AdminUserListOut(BaseModel):
    """
    Response model for paginated user list endpoint.
    """
    items: List[AdminUserBase]
    offset: int  # Pagination offset (number of items skipped)
    limit: int  # Maximum number of items per page
    total: int  # Total number of users matching the query


class AdminUserDetailOut(BaseModel):
    """
    Response model for single user detail endpoint.
    """
    user: AdminUserBase


# ========== Input model ==========
class AdminUserUpdateIn(BaseModel):
    """
    Request model for changing a user's role.
    Cannot demote yourself, and cannot demote the last admin.
    """
    isAdmin: Optional[bool] = None


class AdminBanIn(BaseModel):
    """Request model for banning / unbanning a user."""
    isBanned: bool


class AdminResetPasswordIn(BaseModel):
    """
    Request model for admin-initiated password reset.
    """
    newPassword: str = Field(min_length=6)  # New password (minimum 6 characters)


class AdminMessageIn(BaseModel):
    """
    Request model for publishing a platform message.
    Publishing also pushes it to every connected session.
    """
    title: constr(strip_whitespace=True, min_length=1, max_length=200)
    content: constr(strip_whitespace=True, min_length=1, max_length=5000)
    category: MessageCategory = "announcement"


class AdminMessageUpdateIn(BaseModel):
    title: Optional[constr(strip_whitespace=True, min_length=1, max_length=200)] = None
    content: Optional[constr(strip_whitespace=True, min_length=1, max_length=5000)] = None
    category: Optional[MessageCategory] = None


__all__ = [
    "MessageCategory",
    "AdminUserBase",
    "AdminUserListOut",
    "AdminUserDetailOut",
    "AdminUserUpdateIn",
    "AdminBanIn",
    "AdminResetPasswordIn",
    "AdminMessageIn",
    "AdminMessageUpdateIn",
]
