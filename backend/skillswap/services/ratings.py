"""
Rating aggregator.

One rating per (swap, rater), only once the swap is completed. Resubmitting
updates the existing rating in place. After every write the rated user's
`rating` column is recomputed as the mean of every rating they have received,
rounded half-up to one decimal.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from tortoise.transactions import in_transaction

from skillswap.core.errors import InvalidStateTransition, NotAuthorized, NotFound
from skillswap.core.relay import relay
from skillswap.models.rating import Rating
from skillswap.models.review import Review
from skillswap.models.swap_request import SwapRequest
from skillswap.models.user import User
from skillswap.services.swaps import provider_id_for
from skillswap.utils import iso, utc_now

logger = logging.getLogger("uvicorn.error")


@dataclass
class RatingOutcome:
    rating: Rating
    created: bool  # False when an earlier rating was updated
    average: Optional[float]  # Rated user's new average
    count: int  # Ratings the rated user has received


def round_rating(value: float) -> float:
    """Round half-up to one decimal (4.25 -> 4.3, unlike round())."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def average_of(scores) -> Optional[float]:
    scores = list(scores)
    if not scores:
        return None
    return round_rating(sum(scores) / len(scores))


async def recompute_user_rating(user_id: int, conn=None) -> tuple[Optional[float], int]:
    """
    Store the user's average of all received ratings and return (average, count).
    """
    qs = Rating.filter(rated_id=user_id)
    upd = User.filter(id=user_id)
    if conn is not None:
        qs = qs.using_db(conn)
        upd = upd.using_db(conn)
    scores = await qs.values_list("rating", flat=True)
    avg = average_of(scores)
    await upd.update(rating=avg or 0, updated_at=utc_now())
    return avg, len(scores)


async def _sync_review(rating: Rating, conn) -> None:
    """Keep the public review in step with the rating's feedback text."""
    review = await Review.filter(swap_id=rating.swap_id, reviewer_id=rating.rater_id).using_db(conn).first()
    if not rating.feedback:
        if review:
            await review.delete(using_db=conn)
        return
    if review:
        review.rating = rating.rating
        review.comment = rating.feedback
        await review.save(using_db=conn)
    else:
        await Review.create(
            user_id=rating.rated_id,
            reviewer_id=rating.rater_id,
            swap_id=rating.swap_id,
            rating=rating.rating,
            comment=rating.feedback,
            using_db=conn,
        )


async def submit_rating(swap_id: int, rater: User, score: int, feedback: Optional[str] = None) -> RatingOutcome:
    """
    Rate the other participant of a completed swap (insert or update).

    Raises:
        NotFound: no such swap request
        InvalidStateTransition: swap is not completed
        NotAuthorized: rater is not the requester or the provider
    """
    feedback = (feedback or "").strip() or None
    async with in_transaction() as conn:
        swap = await SwapRequest.filter(id=swap_id).using_db(conn).first()
        if not swap:
            raise NotFound("Swap request not found")
        if swap.status != "completed":
            raise InvalidStateTransition("Only completed swaps can be rated", currentStatus=swap.status)
        provider_id = await provider_id_for(swap, conn)
        if rater.id not in (swap.requester_id, provider_id):
            raise NotAuthorized("You are not part of this swap")

        rated_id = provider_id if rater.id == swap.requester_id else swap.requester_id

        record = await Rating.filter(swap_id=swap.id, rater_id=rater.id).using_db(conn).first()
        created = record is None
        if created:
            record = await Rating.create(
                swap_id=swap.id,
                rater_id=rater.id,
                rated_id=rated_id,
                rating=score,
                feedback=feedback,
                using_db=conn,
            )
        else:
            record.rating = score
            record.feedback = feedback
            await record.save(using_db=conn)

        await _sync_review(record, conn)
        avg, count = await recompute_user_rating(rated_id, conn)

    logger.info("[ratings] swap #%s: user %s rated user %s %s/5 (%s)",
                swap.id, rater.id, rated_id, score, "new" if created else "updated")
    await relay.notify(
        rated_id,
        "info",
        "New rating received" if created else "Rating updated",
        f"{rater.full_name} rated your swap {score}/5.",
        details={"swapId": swap.id, "rating": score, "avgRating": avg},
    )
    return RatingOutcome(rating=record, created=created, average=avg, count=count)


def rating_to_dict(r: Rating) -> dict:
    return {
        "id": r.id,
        "swapId": r.swap_id,
        "raterId": r.rater_id,
        "ratedId": r.rated_id,
        "rating": r.rating,
        "feedback": r.feedback,
        "createdAt": iso(r.created_at),
        "updatedAt": iso(r.updated_at),
    }


async def get_ratings_for_user(user_id: int) -> dict:
    """
    Ratings a user has received, newest first, with the average and the count.
    """
    if not await User.filter(id=user_id).exists():
        raise NotFound("User not found")
    ratings = await Rating.filter(rated_id=user_id).order_by("-created_at", "-id").prefetch_related("rater")
    items = []
    for r in ratings:
        item = rating_to_dict(r)
        item["raterName"] = r.rater.full_name
        item["raterPhoto"] = r.rater.profile_picture
        items.append(item)
    return {
        "ratings": items,
        "avgRating": average_of(r.rating for r in ratings),
        "totalRatings": len(ratings),
    }
