# skillswap/models/admin_message.py
from tortoise import fields, models

MESSAGE_CATEGORIES = ("announcement", "update", "maintenance", "alert")

class AdminMessage(models.Model):
    """
    Platform-wide announcement written by an admin.
    Readable by every signed-in user, editable only from the admin console.
    """
    id = fields.IntField(pk=True)
    admin = fields.ForeignKeyField(
        "models.User", related_name="admin_messages", null=True, on_delete=fields.SET_NULL
    )  # Author; kept as null if the author account goes away
    title = fields.CharField(max_length=200)
    content = fields.TextField()
    category = fields.CharField(max_length=16, default="announcement")  # One of MESSAGE_CATEGORIES
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "admin_messages"
