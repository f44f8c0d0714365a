# skillswap/api/routers/users.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from skillswap.api.deps import get_current_user
from skillswap.models.user import User
from skillswap.schemas.user import ProfileUpdateIn
from skillswap.services.users import get_own_profile, get_public_profile, search_users, update_profile

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile")
async def my_profile(user: User = Depends(get_current_user)):
    """
    Get the signed-in user's profile with skills and rating summary.
    """
    return {"success": True, "data": await get_own_profile(user)}


@router.put("/profile")
async def edit_profile(body: ProfileUpdateIn, user: User = Depends(get_current_user)):
    """
    Partially update the signed-in user's profile.

    Only fields present in the body change; an empty string clears
    location, bio or profilePicture.
    """
    return {"success": True, "data": await update_profile(user, body)}


@router.get("/search")
async def search(
    skill: Optional[str] = Query(default=None, description="Substring of a skill name"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: User = Depends(get_current_user),
):
    """
    Browse other members.

    Returns public, non-banned, non-admin users (never the caller), ordered by
    name. With `skill`, only users listing a skill whose name contains it.
    """
    return {"success": True, "data": await search_users(user, skill, page, limit)}


# Declared after /profile and /search so those paths are not captured as ids
@router.get("/{user_id}")
async def public_profile(user_id: int, user: User = Depends(get_current_user)):
    """
    Public profile with skills and recent reviews.

    Raises:
        NotFound (404): unknown user, or a private / banned profile viewed by
        somebody other than its owner or an admin
    """
    return {"success": True, "data": await get_public_profile(user_id, user)}
