# skillswap/api/routers/messages.py
from fastapi import APIRouter, Depends

from skillswap.api.deps import get_current_user
from skillswap.models.admin_message import AdminMessage
from skillswap.utils import iso

router = APIRouter(prefix="/messages", tags=["messages"])


def message_to_dict(m: AdminMessage) -> dict:
    return {
        "id": m.id,
        "title": m.title,
        "content": m.content,
        "category": m.category,
        "adminId": m.admin_id,
        "adminName": m.admin.full_name if m.admin else None,
        "createdAt": iso(m.created_at),
        "updatedAt": iso(m.updated_at),
    }


@router.get("", dependencies=[Depends(get_current_user)])
async def list_messages():
    """Platform announcements, newest first (read-only)."""
    rows = await AdminMessage.all().order_by("-created_at", "-id").prefetch_related("admin")
    return {"success": True, "data": [message_to_dict(m) for m in rows]}
