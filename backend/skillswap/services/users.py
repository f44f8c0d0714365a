"""
User profiles: serialisation, own-profile updates and member search.
"""
from collections import defaultdict
from typing import Iterable, Optional

from skillswap.core.errors import NotFound
from skillswap.models.rating import Rating
from skillswap.models.review import Review
from skillswap.models.skill import Skill
from skillswap.models.user import User
from skillswap.schemas.user import ProfileUpdateIn
from skillswap.services.ratings import average_of
from skillswap.services.skills import skill_to_dict
from skillswap.utils import iso, total_pages

RECENT_REVIEWS = 10

# ProfileUpdateIn field -> User column
_PROFILE_FIELDS = {
    "name": "full_name",
    "location": "location",
    "bio": "bio",
    "availability": "availability",
    "isPublic": "is_public",
    "profilePicture": "profile_picture",
}
_CLEARABLE = ("location", "bio", "profile_picture")


async def unique_username(base: str) -> str:
    """
    Return `base` or `base<N>` so that it does not clash with an existing username.
    """
    base = (base or "user")[:56]
    candidate = base
    suffix = 1
    while await User.filter(username=candidate).exists():
        suffix += 1
        candidate = f"{base}{suffix}"  # Append number suffix to make unique
    return candidate


def user_to_dict(u: User, include_email: bool = True) -> dict:
    data = {
        "id": u.id,
        "username": u.username,
        "name": u.full_name,
        "location": u.location,
        "bio": u.bio,
        "profilePicture": u.profile_picture,
        "availability": u.availability,
        "isPublic": u.is_public,
        "isAdmin": u.is_admin,
        "createdAt": iso(u.created_at),
    }
    if include_email:
        data["email"] = u.email
    return data


async def rating_summaries(user_ids: Iterable[int]) -> dict[int, tuple[Optional[float], int]]:
    """(average, count) of received ratings per user id; users without ratings are absent."""
    ids = list(user_ids)
    if not ids:
        return {}
    scores = defaultdict(list)
    for row in await Rating.filter(rated_id__in=ids).values("rated_id", "rating"):
        scores[row["rated_id"]].append(row["rating"])
    return {uid: (average_of(vals), len(vals)) for uid, vals in scores.items()}


def _split_skills(skills) -> tuple[list[dict], list[dict]]:
    offered = [skill_to_dict(s) for s in skills if s.skill_type == "offered"]
    wanted = [skill_to_dict(s) for s in skills if s.skill_type == "wanted"]
    return offered, wanted


async def _profile(u: User, include_email: bool) -> dict:
    skills = await Skill.filter(user_id=u.id).order_by("skill_type", "name")
    avg, count = (await rating_summaries([u.id])).get(u.id, (None, 0))
    data = user_to_dict(u, include_email=include_email)
    data["offeredSkills"], data["wantedSkills"] = _split_skills(skills)
    data["avgRating"] = avg
    data["totalRatings"] = count
    return data


async def get_own_profile(user: User) -> dict:
    return await _profile(user, include_email=True)


async def update_profile(user: User, body: ProfileUpdateIn) -> dict:
    changes = body.model_dump(exclude_unset=True)
    for key, column in _PROFILE_FIELDS.items():
        if key not in changes:
            continue
        value = changes[key]
        if column in _CLEARABLE:
            value = value or None  # Empty string clears the field
        elif value is None:
            continue
        setattr(user, column, value)
    await user.save()
    return await get_own_profile(user)


async def get_public_profile(user_id: int, viewer: User) -> dict:
    """
    Profile with skills and recent reviews.

    Private or banned accounts are only visible to themselves and to admins;
    everybody else gets NotFound.
    """
    u = await User.get_or_none(id=user_id)
    if not u:
        raise NotFound("User not found")
    hidden = u.is_banned or not u.is_public
    if hidden and viewer.id != u.id and not viewer.is_admin:
        raise NotFound("User not found")

    data = await _profile(u, include_email=viewer.id == u.id or viewer.is_admin)
    reviews = await (
        Review.filter(user_id=u.id).order_by("-created_at", "-id").limit(RECENT_REVIEWS).prefetch_related("reviewer")
    )
    data["reviews"] = [
        {
            "id": r.id,
            "swapId": r.swap_id,
            "rating": r.rating,
            "comment": r.comment,
            "reviewerId": r.reviewer_id,
            "reviewerName": r.reviewer.full_name,
            "reviewerPhoto": r.reviewer.profile_picture,
            "createdAt": iso(r.created_at),
        }
        for r in reviews
    ]
    return data


async def search_users(viewer: User, skill: Optional[str], page: int, limit: int) -> dict:
    """
    Public, non-banned, non-admin members other than the viewer, ordered by name.
    With `skill`, only members owning a skill whose name contains it (case-insensitive).
    """
    qs = User.filter(is_public=True, is_banned=False, is_admin=False).exclude(id=viewer.id)
    skill = (skill or "").strip()
    if skill:
        owner_ids = await Skill.filter(name__icontains=skill).values_list("user_id", flat=True)
        qs = qs.filter(id__in=set(owner_ids))

    total = await qs.count()
    users = await (
        qs.order_by("full_name", "id").offset((page - 1) * limit).limit(limit).prefetch_related("skills")
    )
    summaries = await rating_summaries(u.id for u in users)

    items = []
    for u in users:
        skills = sorted(u.skills, key=lambda s: (s.skill_type, s.name))
        data = user_to_dict(u, include_email=False)
        data["offeredSkills"], data["wantedSkills"] = _split_skills(skills)
        data["avgRating"], data["totalRatings"] = summaries.get(u.id, (None, 0))
        items.append(data)

    return {
        "users": items,
        "pagination": {"page": page, "limit": limit, "total": total, "totalPages": total_pages(total, limit)},
    }
