# skillswap/api/routers/swaps.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from skillswap.api.deps import get_current_user
from skillswap.models.user import User
from skillswap.schemas.swap import SwapCreateIn, SwapStatus, SwapStatusIn
from skillswap.services.swaps import create_swap, delete_swap, get_swap, list_swaps, transition_swap
from skillswap.utils import iso

router = APIRouter(prefix="/swaps", tags=["swaps"])


@router.get("")
async def my_swaps(
    status_filter: Optional[SwapStatus] = Query(default=None, alias="status"),
    direction: Literal["all", "sent", "received"] = Query("all", alias="type"),
    user: User = Depends(get_current_user),
):
    """
    Swap requests the signed-in user takes part in, newest first.

    Query:
        status: only requests in this state
        type: "sent" (as requester), "received" (as provider) or "all"
    """
    return {"success": True, "data": await list_swaps(user, status_filter, direction)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def request_swap(body: SwapCreateIn, user: User = Depends(get_current_user)):
    """
    Ask another user to swap skills.

    Args:
        body: Request body containing:
            - offeredSkillId: the caller's own offered skill
            - wantedSkillId: another user's offered skill
            - providerId: optional, must be the wanted skill's owner
            - message: optional note to the provider

    Error codes:
        - INVALID_SKILL_OWNERSHIP (400): a skill is missing, of the wrong type
          or owned by the wrong user
        - DUPLICATE_PENDING_REQUEST (409): already waiting on this skill
    """
    swap = await create_swap(
        user,
        body.offeredSkillId,
        body.wantedSkillId,
        message=body.message,
        provider_id=body.providerId,
    )
    return {"success": True, "data": {"id": swap.id, "status": swap.status}}


@router.get("/{swap_id}")
async def swap_detail(swap_id: int, user: User = Depends(get_current_user)):
    return {"success": True, "data": await get_swap(swap_id, user)}


@router.put("/{swap_id}/status")
async def change_status(swap_id: int, body: SwapStatusIn, user: User = Depends(get_current_user)):
    """
    Move a swap request along its lifecycle.

    pending -> accepted / rejected (provider), cancelled (requester);
    accepted -> completed (either participant).

    Error codes:
        - NOT_FOUND (404)
        - NOT_AUTHORIZED (403) / WRONG_ACTION (400): includes suggestion and allowedActions
        - INVALID_STATE_TRANSITION (409): not allowed from the current status
    """
    swap = await transition_swap(swap_id, user, body.status)
    return {
        "success": True,
        "data": {"id": swap.id, "status": swap.status, "completedAt": iso(swap.completed_at)},
    }


@router.delete("/{swap_id}")
async def remove_swap(swap_id: int, user: User = Depends(get_current_user)):
    """Delete a pending swap request (either participant)."""
    await delete_swap(swap_id, user)
    return {"success": True, "data": {"ok": True}}
