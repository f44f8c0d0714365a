# skillswap/schemas/skill.py
from typing import Literal, Optional
from pydantic import BaseModel, constr

SkillType = Literal["offered", "wanted"]
Proficiency = Literal["beginner", "intermediate", "advanced", "expert"]

class SkillIn(BaseModel):
    """
    Request model for creating or replacing a skill entry.
    """
    name: constr(strip_whitespace=True, min_length=2, max_length=100)
    type: SkillType  # "offered" (can teach) or "wanted" (wants to learn)
    description: Optional[constr(strip_whitespace=True, max_length=1000)] = None
    proficiency_level: Proficiency = "intermediate"
    category: Optional[constr(strip_whitespace=True, min_length=1, max_length=64)] = None  # Defaults to "Other"

__all__ = ["SkillType", "Proficiency", "SkillIn"]
