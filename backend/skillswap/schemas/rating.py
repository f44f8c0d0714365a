# skillswap/schemas/rating.py
from typing import Optional
from pydantic import BaseModel, Field

class RatingIn(BaseModel):
    rating: int = Field(ge=1, le=5)  # Whole stars, 1..5
    feedback: Optional[str] = Field(default=None, max_length=2000)

__all__ = ["RatingIn"]
