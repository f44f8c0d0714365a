"""
Swap request lifecycle.

States: pending -> accepted | rejected | cancelled; accepted -> completed.
rejected, cancelled and completed are terminal.

Who may do what:
- accepted / rejected: provider only (owner of the wanted skill)
- cancelled: requester only
- completed: requester or provider

Every write happens inside one transaction and uses a compare-and-set on the
status observed in that transaction, so two concurrent transitions on the same
request cannot both succeed.
"""
import logging
from typing import Optional

from tortoise.expressions import Q
from tortoise.transactions import in_transaction

from skillswap.core.errors import (
    DuplicatePendingRequest,
    InvalidSkillOwnership,
    InvalidStateTransition,
    NotAuthorized,
    NotFound,
    WrongAction,
)
from skillswap.core.relay import relay
from skillswap.models.rating import Rating
from skillswap.models.skill import Skill
from skillswap.models.swap_request import SwapRequest
from skillswap.models.user import User
from skillswap.utils import iso, utc_now

logger = logging.getLogger("uvicorn.error")

ALLOWED_TRANSITIONS = {
    "pending": frozenset({"accepted", "rejected", "cancelled"}),
    "accepted": frozenset({"completed"}),
}

_STATUS_NOTICES = {
    "accepted": ("success", "Swap request accepted", "{name} accepted your request for {skill}."),
    "rejected": ("warning", "Swap request declined", "{name} declined your request for {skill}."),
    "cancelled": ("info", "Swap request cancelled", "{name} cancelled their request for {skill}."),
    "completed": ("success", "Swap completed", "{name} marked the swap for {skill} as completed. Don't forget to leave a rating!"),
}

_PREFETCH = ("requester", "offered_skill", "wanted_skill__user")


async def provider_id_for(swap: SwapRequest, conn=None) -> int:
    """The provider is always the current owner of the wanted skill."""
    qs = Skill.filter(id=swap.wanted_skill_id)
    if conn is not None:
        qs = qs.using_db(conn)
    owner_id = await qs.first().values_list("user_id", flat=True)
    if owner_id is None:
        raise NotFound("Requested skill not found")
    return owner_id


def swap_to_dict(s: SwapRequest, viewer_id: Optional[int] = None, my_rating: Optional[Rating] = None) -> dict:
    """
    Serialise a swap request loaded with requester, offered_skill and wanted_skill__user.
    """
    provider = s.wanted_skill.user
    role = None
    if viewer_id is not None:
        if viewer_id == s.requester_id:
            role = "requester"
        elif viewer_id == provider.id:
            role = "provider"
    return {
        "id": s.id,
        "status": s.status,
        "message": s.message,
        "requesterId": s.requester_id,
        "requesterName": s.requester.full_name,
        "requesterPhoto": s.requester.profile_picture,
        "providerId": provider.id,
        "providerName": provider.full_name,
        "providerPhoto": provider.profile_picture,
        "offeredSkillId": s.offered_skill_id,
        "offeredSkillName": s.offered_skill.name,
        "wantedSkillId": s.wanted_skill_id,
        "wantedSkillName": s.wanted_skill.name,
        "role": role,
        "myRating": my_rating.rating if my_rating else None,
        "createdAt": iso(s.created_at),
        "updatedAt": iso(s.updated_at),
        "completedAt": iso(s.completed_at),
    }


async def create_swap(
    requester: User,
    offered_skill_id: int,
    wanted_skill_id: int,
    message: Optional[str] = None,
    provider_id: Optional[int] = None,
) -> SwapRequest:
    """
    Create a pending swap request.

    Raises:
        InvalidSkillOwnership: offered skill is not the requester's offering, or the
            wanted skill is not another user's offering (or not owned by provider_id)
        DuplicatePendingRequest: requester already has a pending request for that skill
    """
    async with in_transaction() as conn:
        offered = await Skill.filter(id=offered_skill_id).using_db(conn).first()
        if not offered or offered.user_id != requester.id or not offered.is_offering:
            raise InvalidSkillOwnership("Invalid offered skill", field="offeredSkillId")

        wanted = await Skill.filter(id=wanted_skill_id).using_db(conn).first()
        if (
            not wanted
            or wanted.user_id == requester.id
            or not wanted.is_offering
            or (provider_id is not None and wanted.user_id != provider_id)
        ):
            raise InvalidSkillOwnership("Invalid wanted skill", field="wantedSkillId")

        duplicate = await SwapRequest.filter(
            requester_id=requester.id, wanted_skill_id=wanted.id, status="pending"
        ).using_db(conn).exists()
        if duplicate:
            raise DuplicatePendingRequest()

        swap = await SwapRequest.create(
            requester_id=requester.id,
            offered_skill_id=offered.id,
            wanted_skill_id=wanted.id,
            message=(message or "").strip() or None,
            status="pending",
            using_db=conn,
        )

    logger.info("[swaps] #%s created by user %s for skill %s", swap.id, requester.id, wanted.id)
    await relay.notify(
        wanted.user_id,
        "info",
        "New swap request",
        f"{requester.full_name} wants to learn {wanted.name} in exchange for {offered.name}.",
        details={"swapId": swap.id},
    )
    return swap


def _authorize_transition(swap: SwapRequest, provider_id: int, actor_id: int, target: str) -> None:
    is_requester = swap.requester_id == actor_id
    is_provider = provider_id == actor_id

    if target in ("accepted", "rejected"):
        if is_requester:
            raise NotAuthorized(
                "You cannot accept or reject your own swap request",
                suggestion="If you want to withdraw this request, use the cancel option instead",
                allowedActions=["cancelled"],
            )
        if not is_provider:
            raise NotAuthorized("Only the provider can accept or reject the request")
    elif target == "cancelled":
        if is_provider:
            raise WrongAction(
                "You cannot cancel this request",
                suggestion="As the provider, use the reject option instead of cancel",
                allowedActions=["rejected"],
            )
        if not is_requester:
            raise NotAuthorized("Only the requester can cancel the request")
    elif target == "completed":
        if not (is_requester or is_provider):
            raise NotAuthorized("Only the requester or provider can complete the swap")


async def transition_swap(swap_id: int, actor: User, target: str) -> SwapRequest:
    """
    Move a swap request to `target`.

    Raises:
        NotFound: no such swap request
        NotAuthorized / WrongAction: actor may not perform this transition
        InvalidStateTransition: edge not allowed from the current status, or the
            status changed concurrently
    """
    async with in_transaction() as conn:
        swap = await SwapRequest.filter(id=swap_id).using_db(conn).first()
        if not swap:
            raise NotFound("Swap request not found")
        provider_id = await provider_id_for(swap, conn)
        _authorize_transition(swap, provider_id, actor.id, target)

        current = swap.status
        if swap.is_terminal:
            raise InvalidStateTransition(
                f"Swap request is already {current}",
                currentStatus=current,
            )
        if target not in ALLOWED_TRANSITIONS.get(current, ()):
            raise InvalidStateTransition(
                f"Cannot change a {current} swap request to {target}",
                currentStatus=current,
            )

        now = utc_now()
        values = {"status": target, "updated_at": now}
        if target == "completed":
            values["completed_at"] = now
        updated = await SwapRequest.filter(id=swap.id, status=current).using_db(conn).update(**values)
        if not updated:
            raise InvalidStateTransition("Swap request was modified concurrently", currentStatus=current)

    swap.status = target
    swap.updated_at = now
    if target == "completed":
        swap.completed_at = now
    logger.info("[swaps] #%s %s -> %s by user %s", swap.id, current, target, actor.id)

    counterpart = provider_id if actor.id == swap.requester_id else swap.requester_id
    kind, title, template = _STATUS_NOTICES[target]
    skill_name = await Skill.filter(id=swap.wanted_skill_id).first().values_list("name", flat=True)
    await relay.notify(
        counterpart,
        kind,
        title,
        template.format(name=actor.full_name, skill=skill_name or "a skill"),
        details={"swapId": swap.id, "status": target},
    )
    return swap


async def delete_swap(swap_id: int, actor: User) -> None:
    """
    Delete a pending swap request (requester or provider only).

    Raises:
        NotFound, NotAuthorized, InvalidStateTransition
    """
    async with in_transaction() as conn:
        swap = await SwapRequest.filter(id=swap_id).using_db(conn).first()
        if not swap:
            raise NotFound("Swap request not found")
        provider_id = await provider_id_for(swap, conn)
        if actor.id not in (swap.requester_id, provider_id):
            raise NotAuthorized("Not authorized to delete this swap request")
        if swap.status != "pending":
            raise InvalidStateTransition(
                "Only pending swap requests can be deleted", currentStatus=swap.status
            )
        deleted = await SwapRequest.filter(id=swap.id, status="pending").using_db(conn).delete()
        if not deleted:
            raise InvalidStateTransition("Swap request was modified concurrently")

    logger.info("[swaps] #%s deleted by user %s", swap_id, actor.id)
    counterpart = provider_id if actor.id == swap.requester_id else swap.requester_id
    await relay.notify(
        counterpart, "info", "Swap request removed",
        f"{actor.full_name} removed a pending swap request.",
        details={"swapId": swap_id},
    )


async def list_swaps(user: User, status: Optional[str] = None, direction: str = "all") -> list[dict]:
    """
    Swap requests the user takes part in, newest first.

    Args:
        direction: "sent" (user is requester), "received" (user is provider) or "all"
    """
    sent = Q(requester_id=user.id)
    received = Q(wanted_skill__user_id=user.id)
    if direction == "sent":
        cond = sent
    elif direction == "received":
        cond = received
    else:
        cond = sent | received

    qs = SwapRequest.filter(cond)
    if status:
        qs = qs.filter(status=status)
    swaps = await qs.order_by("-created_at", "-id").prefetch_related(*_PREFETCH)

    my_ratings = {}
    if swaps:
        rows = await Rating.filter(rater_id=user.id, swap_id__in=[s.id for s in swaps])
        my_ratings = {r.swap_id: r for r in rows}
    return [swap_to_dict(s, viewer_id=user.id, my_rating=my_ratings.get(s.id)) for s in swaps]


async def get_swap(swap_id: int, user: User) -> dict:
    """Single swap request; non-participants get NotFound."""
    swap = await SwapRequest.filter(id=swap_id).prefetch_related(*_PREFETCH).first()
    if not swap or user.id not in (swap.requester_id, swap.wanted_skill.user_id):
        raise NotFound("Swap request not found")
    my_rating = await Rating.get_or_none(swap_id=swap.id, rater_id=user.id)
    return swap_to_dict(swap, viewer_id=user.id, my_rating=my_rating)
