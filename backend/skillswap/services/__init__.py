"""
Services Module

Domain logic shared by the REST routers:
- swaps: swap request lifecycle (create, status transitions, delete)
- ratings: per-swap ratings and the rated user's running average
- skills: skill registry with ownership checks
- users: profile serialisation and search helpers
"""

from .swaps import (
    ALLOWED_TRANSITIONS,
    create_swap,
    transition_swap,
    delete_swap,
    list_swaps,
    get_swap,
    swap_to_dict,
)
from .ratings import (
    RatingOutcome,
    round_rating,
    submit_rating,
    get_ratings_for_user,
)
from .skills import (
    skill_to_dict,
    list_skills,
    create_skill,
    update_skill,
    delete_skill,
    popular_skills,
)
from .users import (
    unique_username,
    user_to_dict,
    get_own_profile,
    update_profile,
    get_public_profile,
    search_users,
)

__all__ = [
    # Swap lifecycle
    "ALLOWED_TRANSITIONS",
    "create_swap",
    "transition_swap",
    "delete_swap",
    "list_swaps",
    "get_swap",
    "swap_to_dict",
    # Ratings
    "RatingOutcome",
    "round_rating",
    "submit_rating",
    "get_ratings_for_user",
    # Skills
    "skill_to_dict",
    "list_skills",
    "create_skill",
    "update_skill",
    "delete_skill",
    "popular_skills",
    # Users
    "unique_username",
    "user_to_dict",
    "get_own_profile",
    "update_profile",
    "get_public_profile",
    "search_users",
]
