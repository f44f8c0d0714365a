# skillswap/core/errors.py
"""
Domain error taxonomy.

Services raise these exceptions; the handlers registered in main.py turn them
into `{"detail": {"code": ..., "message": ..., ...}}` responses, the same shape
FastAPI produces for `HTTPException(detail={...})`.
"""
from typing import Any, Optional


class SkillSwapError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400
    code: str = "ERROR"
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        if code:
            self.code = code
        self.extra = extra
        super().__init__(self.message)

    def to_detail(self) -> dict:
        detail = {"code": self.code, "message": self.message}
        detail.update(self.extra)
        return detail


class ValidationError(SkillSwapError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InvalidSkillOwnership(ValidationError):
    code = "INVALID_SKILL_OWNERSHIP"
    default_message = "Invalid skill for this swap"


class WrongAction(ValidationError):
    code = "WRONG_ACTION"
    default_message = "This action is not available to you"


class NotAuthorized(SkillSwapError):
    status_code = 403
    code = "NOT_AUTHORIZED"
    default_message = "Not authorized to perform this action"


class NotFound(SkillSwapError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class InvalidStateTransition(SkillSwapError):
    status_code = 409
    code = "INVALID_STATE_TRANSITION"
    default_message = "Invalid state transition"


class DuplicateResource(SkillSwapError):
    status_code = 409
    code = "DUPLICATE_RESOURCE"
    default_message = "Resource already exists"


class DuplicatePendingRequest(DuplicateResource):
    code = "DUPLICATE_PENDING_REQUEST"
    default_message = "You already have a pending request for this skill"


class InternalError(SkillSwapError):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"
