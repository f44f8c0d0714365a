# skillswap/api/routers/admin.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    status,
)
from tortoise.expressions import Q

from skillswap.api.deps import require_admin
from skillswap.api.routers.messages import message_to_dict
from skillswap.core.relay import build_notification, relay
from skillswap.core.security import hash_password
from skillswap.models.admin_message import AdminMessage
from skillswap.models.rating import Rating
from skillswap.models.skill import Skill
from skillswap.models.swap_request import SWAP_STATUSES, SwapRequest
from skillswap.models.user import User
from skillswap.schemas.admin import (
    AdminBanIn,
    AdminMessageIn,
    AdminMessageUpdateIn,
    AdminResetPasswordIn,
    AdminUserDetailOut,
    AdminUserListOut,
    AdminUserUpdateIn,
)
from skillswap.schemas.swap import SwapStatus
from skillswap.services.swaps import swap_to_dict
from skillswap.services.users import rating_summaries, user_to_dict
from skillswap.utils import iso

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger("uvicorn.error")

RECENT_LIMIT = 5


# ==============================================================================
# I. Dashboard
#     GET /api/admin/stats
# ==============================================================================
@router.get("/stats", dependencies=[Depends(require_admin)])
async def stats():
    """
    Platform counters for the admin dashboard (admin only).

    Returns:
        dict: success flag and data with user / skill / swap / rating totals,
        a per-status swap breakdown, the five newest users and swaps, and the
        number of users currently connected to the notification socket.
    """
    swaps_by_status = {s: await SwapRequest.filter(status=s).count() for s in SWAP_STATUSES}
    recent_users = await User.all().order_by("-created_at", "-id").limit(RECENT_LIMIT)
    recent_swaps = await (
        SwapRequest.all()
        .order_by("-created_at", "-id")
        .limit(RECENT_LIMIT)
        .prefetch_related("requester", "offered_skill", "wanted_skill__user")
    )
    total_users = await User.all().count()
    banned_users = await User.filter(is_banned=True).count()
    return {
        "success": True,
        "data": {
            "totalUsers": total_users,
            "activeUsers": total_users - banned_users,
            "bannedUsers": banned_users,
            "totalSkills": await Skill.all().count(),
            "totalSwaps": sum(swaps_by_status.values()),
            "swapsByStatus": swaps_by_status,
            "totalRatings": await Rating.all().count(),
            "recentUsers": [user_to_dict(u) for u in recent_users],
            "recentSwaps": [swap_to_dict(s) for s in recent_swaps],
            "onlineUsers": len(relay),
        },
    }


# ==============================================================================
# II. User Management Interface
#     Prefix: /api/admin/users
# ==============================================================================
async def _admin_user_dicts(users: list[User]) -> list[dict]:
    """
    Convert User rows to the AdminUserBase shape, with activity counters.
    """
    summaries = await rating_summaries(u.id for u in users)
    items = []
    for u in users:
        items.append({
            "id": u.id,
            "username": u.username,
            "email": u.email,
            "fullName": u.full_name,
            "location": u.location,
            "isPublic": u.is_public,
            "isBanned": u.is_banned,
            "isAdmin": u.is_admin,
            "avgRating": summaries.get(u.id, (None, 0))[0],
            "skillsCount": await Skill.filter(user_id=u.id).count(),
            "swapsCount": await SwapRequest.filter(
                Q(requester_id=u.id) | Q(wanted_skill__user_id=u.id)
            ).count(),
            "createdAt": iso(u.created_at),
        })
    return items


async def _get_user_or_404(user_id: int) -> User:
    u = await User.get_or_none(id=user_id)
    if not u:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="USER_NOT_FOUND")
    return u


async def _count_admins() -> int:
    """
    Count the total number of admin users in the system.

    Note:
        Used to prevent demoting the last admin user.
    """
    return await User.filter(is_admin=True).count()


@router.get(
    "/users",
    response_model=AdminUserListOut,
    dependencies=[Depends(require_admin)],
)
async def list_users(
    q: str | None = Query(default=None, description="Fuzzy search by username/email/name"),
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """
    Get paginated list of all users (admin only).

    Returns every account, banned and admin ones included, newest first, with
    optional search filtering.

    Args:
        q: Optional search query for fuzzy matching username, email or name
        offset: Number of items to skip (for pagination)
        limit: Maximum number of items to return (1-100)

    Returns:
        AdminUserListOut: Response containing paginated user list

    Raises:
        HTTPException (403): If user is not an admin
        HTTPException (401): If user is not authenticated
    """
    qs = User.all().order_by("-created_at", "-id")
    if q:
        qs = qs.filter(Q(username__icontains=q) | Q(email__icontains=q) | Q(full_name__icontains=q))

    total = await qs.count()
    rows = await qs.offset(offset).limit(limit)
    items = await _admin_user_dicts(rows)

    return {"items": items, "offset": offset, "limit": limit, "total": total}


@router.get(
    "/users/{user_id}",
    response_model=AdminUserDetailOut,
    dependencies=[Depends(require_admin)],
)
async def get_user_detail(user_id: int):
    """
    Get detailed information about a specific user (admin only).

    Raises:
        HTTPException (404): If user not found
        HTTPException (403): If user is not an admin
    """
    u = await _get_user_or_404(user_id)
    return {"user": (await _admin_user_dicts([u]))[0]}


@router.patch(
    "/users/{user_id}",
    response_model=AdminUserDetailOut,
)
async def update_user(
    user_id: int,
    body: AdminUserUpdateIn,
    current_admin: User = Depends(require_admin),
):
    """
    Grant or revoke the admin role (admin only).

    Args:
        user_id: User id to update
        body: Request body with optional isAdmin flag
        current_admin: Current admin user (from dependency)

    Returns:
        AdminUserDetailOut: Response containing updated user details

    Raises:
        HTTPException (404): If user not found
        HTTPException (400): CANNOT_DEMOTE_SELF, LAST_ADMIN_FORBIDDEN
        HTTPException (403): If user is not an admin
    """
    u = await _get_user_or_404(user_id)

    if body.isAdmin is not None and body.isAdmin != u.is_admin:
        if not body.isAdmin:
            if current_admin.id == u.id:
                raise HTTPException(
                    status_code=400,
                    detail={"code": "CANNOT_DEMOTE_SELF", "message": "Cannot demote yourself"},
                )
            if await _count_admins() <= 1:
                raise HTTPException(
                    status_code=400,
                    detail={"code": "LAST_ADMIN_FORBIDDEN", "message": "Cannot demote the last admin"},
                )
        u.is_admin = body.isAdmin
        if u.is_admin:
            u.is_banned = False
        await u.save()
        logger.info("[admin] user %s set is_admin=%s on user %s", current_admin.id, u.is_admin, u.id)

    return {"user": (await _admin_user_dicts([u]))[0]}


@router.put("/users/{user_id}/ban")
async def ban_user(
    user_id: int,
    body: AdminBanIn,
    current_admin: User = Depends(require_admin),
):
    """
    Ban or unban a user (admin only).

    A banned user can no longer sign in or call the API, and their live
    notification socket is closed right away.

    Raises:
        HTTPException (404): If user not found
        HTTPException (400): CANNOT_BAN_ADMIN when the target is an admin
    """
    u = await _get_user_or_404(user_id)
    if body.isBanned and u.is_admin:
        raise HTTPException(
            status_code=400,
            detail={"code": "CANNOT_BAN_ADMIN", "message": "Admins cannot be banned"},
        )
    u.is_banned = body.isBanned
    await u.save()
    logger.info("[admin] user %s %s user %s", current_admin.id, "banned" if u.is_banned else "unbanned", u.id)
    if u.is_banned:
        await relay.disconnect(u.id, 1008, "Account banned")
    return {"success": True, "data": {"id": u.id, "isBanned": u.is_banned}}


@router.post("/users/{user_id}/reset-password")
async def reset_user_password(
    user_id: int,
    body: AdminResetPasswordIn,
    current_admin: User = Depends(require_admin),
):
    """
    Reset a user's password (admin only).

    Allows admins to reset any user's password without knowing the current
    password. The new password is hashed before storage.

    Raises:
        HTTPException (404): If user not found
        HTTPException (403): If user is not an admin
    """
    u = await _get_user_or_404(user_id)
    u.password_hash = hash_password(body.newPassword)
    await u.save()
    logger.info("[admin] user %s reset the password of user %s", current_admin.id, u.id)
    return {"success": True, "data": {"ok": True}}


# ==============================================================================
# III. Swap oversight
#     GET /api/admin/swaps
# ==============================================================================
@router.get("/swaps", dependencies=[Depends(require_admin)])
async def list_all_swaps(
    status_filter: Optional[SwapStatus] = Query(default=None, alias="status"),
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """
    Every swap request on the platform, newest first (admin only).
    """
    qs = SwapRequest.all()
    if status_filter:
        qs = qs.filter(status=status_filter)
    total = await qs.count()
    rows = await (
        qs.order_by("-created_at", "-id")
        .offset(offset)
        .limit(limit)
        .prefetch_related("requester", "offered_skill", "wanted_skill__user")
    )
    return {
        "success": True,
        "data": {"items": [swap_to_dict(s) for s in rows], "offset": offset, "limit": limit, "total": total},
    }


# ==============================================================================
# IV. Platform messages
#     Prefix: /api/admin/messages
#     Publishing also pushes the message to every live notification socket
# ==============================================================================
async def _get_message_or_404(message_id: int) -> AdminMessage:
    m = await AdminMessage.get_or_none(id=message_id)
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="MESSAGE_NOT_FOUND")
    return m


@router.get("/messages", dependencies=[Depends(require_admin)])
async def list_admin_messages():
    rows = await AdminMessage.all().order_by("-created_at", "-id").prefetch_related("admin")
    return {"success": True, "data": [message_to_dict(m) for m in rows]}


@router.post("/messages", status_code=status.HTTP_201_CREATED)
async def create_message(body: AdminMessageIn, current_admin: User = Depends(require_admin)):
    """
    Publish a platform message (admin only).

    Returns:
        dict: the stored message plus `delivered`, the number of live sockets
        that received the broadcast
    """
    m = await AdminMessage.create(
        admin_id=current_admin.id,
        title=body.title,
        content=body.content,
        category=body.category,
    )
    await m.fetch_related("admin")
    notice_type = "warning" if m.category in ("maintenance", "alert") else "info"
    delivered = await relay.broadcast(
        build_notification(notice_type, m.title, m.content, {"messageId": m.id, "category": m.category})
    )
    logger.info("[admin] message #%s broadcast to %d connection(s)", m.id, delivered)
    data = message_to_dict(m)
    data["delivered"] = delivered
    return {"success": True, "data": data}


@router.put("/messages/{message_id}", dependencies=[Depends(require_admin)])
async def update_message(message_id: int, body: AdminMessageUpdateIn):
    m = await _get_message_or_404(message_id)
    for field, value in body.model_dump(exclude_none=True).items():
        setattr(m, field, value)
    await m.save()
    await m.fetch_related("admin")
    return {"success": True, "data": message_to_dict(m)}


@router.delete("/messages/{message_id}", dependencies=[Depends(require_admin)])
async def delete_message(message_id: int):
    m = await _get_message_or_404(message_id)
    await m.delete()
    return {"success": True, "data": {"ok": True}}
