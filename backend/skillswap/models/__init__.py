# skillswap/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: Member account, profile and moderation flags
- Skill: Offered / wanted skill entries owned by a user
- SwapRequest: Skill exchange request and its lifecycle status
- Rating: Per-swap score from one participant to the other
- Review: Written review shown on profiles
- AdminMessage: Platform broadcast message
"""
from .user import User
from .skill import Skill
from .swap_request import SwapRequest
from .rating import Rating
from .review import Review
from .admin_message import AdminMessage
