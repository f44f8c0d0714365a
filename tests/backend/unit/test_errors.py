"""
Unit tests for the domain error taxonomy and its HTTP rendering.
"""
import json
from unittest.mock import MagicMock

import pytest

from skillswap.core.errors import (
    DuplicatePendingRequest,
    DuplicateResource,
    InternalError,
    InvalidSkillOwnership,
    InvalidStateTransition,
    NotAuthorized,
    NotFound,
    SkillSwapError,
    ValidationError,
    WrongAction,
)
from skillswap.main import skillswap_error_handler, unhandled_error_handler


@pytest.mark.parametrize(
    "exc_cls, status, code",
    [
        (ValidationError, 400, "VALIDATION_ERROR"),
        (InvalidSkillOwnership, 400, "INVALID_SKILL_OWNERSHIP"),
        (WrongAction, 400, "WRONG_ACTION"),
        (NotAuthorized, 403, "NOT_AUTHORIZED"),
        (NotFound, 404, "NOT_FOUND"),
        (InvalidStateTransition, 409, "INVALID_STATE_TRANSITION"),
        (DuplicateResource, 409, "DUPLICATE_RESOURCE"),
        (DuplicatePendingRequest, 409, "DUPLICATE_PENDING_REQUEST"),
        (InternalError, 500, "INTERNAL_ERROR"),
    ],
)
def test_status_and_code(exc_cls, status, code):
    exc = exc_cls()
    assert isinstance(exc, SkillSwapError)
    assert exc.status_code == status
    assert exc.code == code
    assert exc.message == exc_cls.default_message


def test_subclasses_share_parent_handling():
    assert issubclass(InvalidSkillOwnership, ValidationError)
    assert issubclass(DuplicatePendingRequest, DuplicateResource)


def test_detail_carries_extra_payload():
    exc = NotAuthorized(
        "You cannot accept or reject your own swap request",
        suggestion="cancel it",
        allowedActions=["cancelled"],
    )
    assert exc.to_detail() == {
        "code": "NOT_AUTHORIZED",
        "message": "You cannot accept or reject your own swap request",
        "suggestion": "cancel it",
        "allowedActions": ["cancelled"],
    }


def test_code_override_keeps_status():
    exc = DuplicateResource("Email already registered", code="EMAIL_EXISTS")
    assert exc.code == "EMAIL_EXISTS"
    assert exc.status_code == 409
    assert DuplicateResource().code == "DUPLICATE_RESOURCE"  # class default untouched


@pytest.mark.asyncio
async def test_domain_error_rendering():
    resp = await skillswap_error_handler(MagicMock(), NotFound("Swap request not found"))
    assert resp.status_code == 404
    assert json.loads(resp.body) == {"detail": {"code": "NOT_FOUND", "message": "Swap request not found"}}


@pytest.mark.asyncio
async def test_unexpected_error_rendered_as_internal():
    resp = await unhandled_error_handler(MagicMock(), RuntimeError("boom"))
    assert resp.status_code == 500
    body = json.loads(resp.body)
    assert body["detail"]["code"] == "INTERNAL_ERROR"
    assert "boom" not in body["detail"]["message"]
