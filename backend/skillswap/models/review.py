# skillswap/models/review.py
from tortoise import fields, models

class Review(models.Model):
    """
    Public written review shown on a user's profile.
    Mirrors a Rating that carries feedback text; kept in step by the rating service.
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="reviews_received", on_delete=fields.CASCADE)  # Reviewed user
    reviewer = fields.ForeignKeyField("models.User", related_name="reviews_written", on_delete=fields.CASCADE)
    swap = fields.ForeignKeyField("models.SwapRequest", related_name="reviews", null=True, on_delete=fields.SET_NULL)
    rating = fields.SmallIntField()
    comment = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "reviews"
        unique_together = (("swap", "reviewer"),)
