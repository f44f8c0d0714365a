"""
Skill registry: a user's offered / wanted skills.

Mutations look the skill up by (id, owner); somebody else's skill is reported
as missing, never as forbidden.
"""
from tortoise.exceptions import IntegrityError
from tortoise.functions import Count

from skillswap.core.errors import DuplicateResource, NotFound
from skillswap.models.skill import Skill
from skillswap.models.user import User
from skillswap.schemas.skill import SkillIn
from skillswap.utils import iso


def skill_to_dict(s: Skill) -> dict:
    return {
        "id": s.id,
        "userId": s.user_id,
        "name": s.name,
        "type": s.skill_type,
        "description": s.description,
        "category": s.category,
        "proficiency_level": s.proficiency,
        "createdAt": iso(s.created_at),
        "updatedAt": iso(s.updated_at),
    }


async def _ensure_unique(user_id: int, name: str, skill_type: str, exclude_id: int | None = None) -> None:
    qs = Skill.filter(user_id=user_id, name__iexact=name, skill_type=skill_type)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if await qs.exists():
        raise DuplicateResource("You already have this skill listed", code="SKILL_EXISTS")


async def list_skills(user_id: int) -> list[Skill]:
    return await Skill.filter(user_id=user_id).order_by("skill_type", "name")


async def create_skill(user: User, body: SkillIn) -> Skill:
    await _ensure_unique(user.id, body.name, body.type)
    try:
        return await Skill.create(
            user_id=user.id,
            name=body.name,
            skill_type=body.type,
            description=body.description or None,
            proficiency=body.proficiency_level,
            category=body.category or "Other",
        )
    except IntegrityError:
        raise DuplicateResource("You already have this skill listed", code="SKILL_EXISTS")


async def update_skill(user: User, skill_id: int, body: SkillIn) -> Skill:
    skill = await Skill.get_or_none(id=skill_id, user_id=user.id)
    if not skill:
        raise NotFound("Skill not found")
    await _ensure_unique(user.id, body.name, body.type, exclude_id=skill.id)

    skill.name = body.name
    skill.skill_type = body.type
    skill.description = body.description or None
    skill.proficiency = body.proficiency_level
    if body.category:
        skill.category = body.category
    try:
        await skill.save()
    except IntegrityError:
        raise DuplicateResource("You already have this skill listed", code="SKILL_EXISTS")
    return skill


async def delete_skill(user: User, skill_id: int) -> None:
    deleted = await Skill.filter(id=skill_id, user_id=user.id).delete()
    if not deleted:
        raise NotFound("Skill not found")


async def popular_skills(limit: int = 20) -> list[dict]:
    """Most listed skill names with their counts."""
    rows = await (
        Skill.annotate(count=Count("id"))
        .group_by("name")
        .order_by("-count", "name")
        .limit(limit)
        .values("name", "count")
    )
    return [{"name": r["name"], "count": r["count"]} for r in rows]
