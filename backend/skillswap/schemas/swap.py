# skillswap/schemas/swap.py
from typing import Literal, Optional
from pydantic import BaseModel, Field

SwapStatus = Literal["pending", "accepted", "rejected", "completed", "cancelled"]
SwapTarget = Literal["accepted", "rejected", "completed", "cancelled"]  # "pending" is never a target

class SwapCreateIn(BaseModel):
    """
    Request model for creating a swap request.

    The provider is the owner of the wanted skill; `providerId` is optional and,
    when sent, must match that owner.
    """
    offeredSkillId: int = Field(gt=0)  # Requester's own offered skill
    wantedSkillId: int = Field(gt=0)   # Provider's offered skill the requester wants
    providerId: Optional[int] = Field(default=None, gt=0)
    message: Optional[str] = Field(default=None, max_length=1000)

class SwapStatusIn(BaseModel):
    status: SwapTarget

__all__ = ["SwapStatus", "SwapTarget", "SwapCreateIn", "SwapStatusIn"]
