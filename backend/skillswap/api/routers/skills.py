# skillswap/api/routers/skills.py
from fastapi import APIRouter, Depends, status

from skillswap.api.deps import get_current_user
from skillswap.config import settings
from skillswap.models.user import User
from skillswap.schemas.skill import SkillIn
from skillswap.services.skills import (
    create_skill,
    delete_skill,
    list_skills,
    popular_skills,
    skill_to_dict,
    update_skill,
)

router = APIRouter(prefix="/skills", tags=["skills"])


@router.get("")
async def my_skills(user: User = Depends(get_current_user)):
    """List the signed-in user's skills, offered first, then by name."""
    skills = await list_skills(user.id)
    return {"success": True, "data": [skill_to_dict(s) for s in skills]}


@router.get("/popular")
async def popular(user: User = Depends(get_current_user)):
    """Most listed skill names across all users, with their counts."""
    return {"success": True, "data": await popular_skills(settings.popular_skills_limit)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_skill(body: SkillIn, user: User = Depends(get_current_user)):
    """
    Add a skill to the signed-in user's list.

    Error codes:
        - VALIDATION_ERROR (400): bad name / type / proficiency
        - SKILL_EXISTS (409): same name and type already listed
    """
    skill = await create_skill(user, body)
    return {"success": True, "data": skill_to_dict(skill)}


@router.put("/{skill_id}")
async def edit_skill(skill_id: int, body: SkillIn, user: User = Depends(get_current_user)):
    """
    Replace one of the signed-in user's skills.

    Error codes:
        - NOT_FOUND (404): missing, or owned by another user
        - SKILL_EXISTS (409): the new name / type collides with another entry
    """
    skill = await update_skill(user, skill_id, body)
    return {"success": True, "data": skill_to_dict(skill)}


@router.delete("/{skill_id}")
async def remove_skill(skill_id: int, user: User = Depends(get_current_user)):
    await delete_skill(user, skill_id)
    return {"success": True, "data": {"ok": True}}
