# skillswap/models/user.py
"""
Database model for users.
Represents a SkillSwap member account: credentials, public profile,
moderation flags and the running average of ratings received.
"""
from tortoise import fields, models

AVAILABILITY_CHOICES = ("weekdays", "weekends", "evenings", "flexible")

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Skills (related_name="skills")
    - Has many SwapRequests as requester (related_name="sent_swaps")
    - Has many Ratings given / received (related_name="ratings_given" / "ratings_received")

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique; it is the login identifier
    - is_admin grants access to the admin console; is_banned locks the account out
    """
    id = fields.IntField(pk=True)
    username = fields.CharField(max_length=64, unique=True, index=True)  # Derived from email local part
    email = fields.CharField(max_length=256, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    full_name = fields.CharField(max_length=128)
    bio = fields.TextField(null=True)
    location = fields.CharField(max_length=128, null=True)
    profile_picture = fields.CharField(max_length=1024, null=True)
    availability = fields.CharField(max_length=16, default="weekends")  # One of AVAILABILITY_CHOICES
    is_public = fields.BooleanField(default=True)  # Private profiles are hidden from search
    is_banned = fields.BooleanField(default=False)
    is_admin = fields.BooleanField(default=False)
    rating = fields.FloatField(default=0)  # Running average of ratings received, one decimal
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    def __str__(self) -> str:
        return self.email
