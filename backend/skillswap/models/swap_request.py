# skillswap/models/swap_request.py
"""
Database model for swap requests.

A requester offers one of their own skills in exchange for a skill owned by
another user. That other user (the provider) is never stored: it is always
the owner of `wanted_skill`.
"""
from tortoise import fields, models

SWAP_STATUSES = ("pending", "accepted", "rejected", "completed", "cancelled")
TERMINAL_STATUSES = frozenset({"rejected", "cancelled", "completed"})

class SwapRequest(models.Model):
    """
    Swap request database model.

    Relationships:
    - Belongs to the requesting User (related_name="sent_swaps")
    - References the offered Skill (owned by the requester)
    - References the wanted Skill (owned by the provider)
    - Has many Ratings (one per participant once completed)
    """
    id = fields.IntField(pk=True)
    requester = fields.ForeignKeyField("models.User", related_name="sent_swaps", on_delete=fields.CASCADE)
    offered_skill = fields.ForeignKeyField("models.Skill", related_name="offered_in", on_delete=fields.CASCADE)
    wanted_skill = fields.ForeignKeyField("models.Skill", related_name="wanted_in", on_delete=fields.CASCADE)
    status = fields.CharField(max_length=16, default="pending", index=True)  # One of SWAP_STATUSES
    message = fields.TextField(null=True)  # Optional note from the requester
    completed_at = fields.DatetimeField(null=True)  # Stamped on transition to "completed"
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "swap_requests"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
