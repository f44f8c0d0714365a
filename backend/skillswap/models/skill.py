# skillswap/models/skill.py
from tortoise import fields, models

class Skill(models.Model):
    """
    A skill a user offers to teach or wants to learn.
    A user holds at most one entry per (name, skill_type).
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="skills", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=100)
    description = fields.TextField(null=True)
    category = fields.CharField(max_length=64, default="Other")
    proficiency = fields.CharField(max_length=16, default="intermediate")  # beginner | intermediate | advanced | expert
    skill_type = fields.CharField(max_length=8)  # "offered" or "wanted"
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "skills"
        unique_together = (("user", "name", "skill_type"),)

    @property
    def is_offering(self) -> bool:
        return self.skill_type == "offered"
