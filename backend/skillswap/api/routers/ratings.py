# skillswap/api/routers/ratings.py
from fastapi import APIRouter, Depends, Response, status

from skillswap.api.deps import get_current_user
from skillswap.models.user import User
from skillswap.schemas.rating import RatingIn
from skillswap.services.ratings import get_ratings_for_user, rating_to_dict, submit_rating

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("/swap/{swap_id}")
async def rate_swap(swap_id: int, body: RatingIn, response: Response, user: User = Depends(get_current_user)):
    """
    Rate the other participant of a completed swap.

    A second submission for the same swap updates the earlier rating.

    Returns:
        201 with the new rating, or 200 when an existing rating was updated.
        data also carries the rated user's new avgRating and totalRatings.

    Error codes:
        - NOT_FOUND (404): no such swap request
        - INVALID_STATE_TRANSITION (409): swap not completed yet
        - NOT_AUTHORIZED (403): caller did not take part in the swap
    """
    outcome = await submit_rating(swap_id, user, body.rating, body.feedback)
    response.status_code = status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK
    data = rating_to_dict(outcome.rating)
    data["avgRating"] = outcome.average
    data["totalRatings"] = outcome.count
    return {"success": True, "data": data}


@router.get("/user/{user_id}")
async def user_ratings(user_id: int, user: User = Depends(get_current_user)):
    """Ratings a user has received, newest first, with average and count."""
    return {"success": True, "data": await get_ratings_for_user(user_id)}
