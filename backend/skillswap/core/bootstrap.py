# skillswap/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles initial setup tasks such as creating default admin user on first startup.
"""
import os
import logging
from skillswap.models.user import User
from skillswap.core.security import hash_password
from skillswap.services.users import unique_username

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin() -> None:
    """
    If no admin exists in the database, create (or promote) one from environment variables.
    Only takes effect under the following conditions:
      - Currently no user with is_admin=True
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    Environment variables:
      ADMIN_EMAIL    (default: "admin@example.com")
      ADMIN_NAME     (default: "Administrator")
      ADMIN_PASSWORD (required, otherwise won't create)
    """
    if await User.filter(is_admin=True).exists():
        return  # Skip creation if admin already exists

    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return

    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
    admin_name = os.getenv("ADMIN_NAME", "Administrator")

    # An account with that email already registered: promote it instead of failing on the unique email
    existing = await User.get_or_none(email=admin_email)
    if existing:
        existing.is_admin = True
        existing.is_banned = False
        await existing.save()
        logger.warning("[bootstrap] Promoted existing user to admin -> email=%s id=%s", existing.email, existing.id)
        return

    u = await User.create(
        username=await unique_username(admin_email.split("@")[0]),
        email=admin_email,
        full_name=admin_name,
        password_hash=hash_password(admin_password),
        is_admin=True,
    )
    logger.warning("[bootstrap] Created default admin -> username=%s email=%s id=%s",
                   u.username, u.email, u.id)
