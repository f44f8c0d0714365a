# skillswap/models/rating.py
from tortoise import fields, models

class Rating(models.Model):
    """
    Score one participant gives the other after a swap is completed.
    At most one per (swap, rater); resubmitting updates it in place.
    """
    id = fields.IntField(pk=True)
    swap = fields.ForeignKeyField(
        "models.SwapRequest", related_name="ratings", null=True, on_delete=fields.SET_NULL
    )  # Cleared if the swap goes away; the score still counts toward the average
    rater = fields.ForeignKeyField("models.User", related_name="ratings_given", on_delete=fields.CASCADE)
    rated = fields.ForeignKeyField("models.User", related_name="ratings_received", on_delete=fields.CASCADE)
    rating = fields.SmallIntField()  # 1..5
    feedback = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "ratings"
        unique_together = (("swap", "rater"),)
