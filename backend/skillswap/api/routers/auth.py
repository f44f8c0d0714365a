# skillswap/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from tortoise.exceptions import IntegrityError

from skillswap.api.deps import get_current_user
from skillswap.core.errors import DuplicateResource, ValidationError
from skillswap.core.security import create_access_token, hash_password, verify_password
from skillswap.models.user import User
from skillswap.schemas.auth import ChangePasswordIn, LoginRequest, RegisterIn
from skillswap.services.users import unique_username, user_to_dict

router = APIRouter(prefix="/auth", tags=["auth"])

COOKIE_NAME = "accessToken"


async def _email_taken(email: str) -> bool:
    return await User.filter(email=email).exists()


def _issue_token(response: Response, user: User) -> str:
    token = create_access_token(user.id, user.email, user.is_admin)
    response.set_cookie(COOKIE_NAME, token, httponly=True, secure=False, samesite="lax")
    return token


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn, response: Response):
    """
    Register a new user account.

    Creates a new account identified by email. The username is derived from
    the email local part (with a numeric suffix when taken) and the display
    name defaults to it. The password is hashed before storage.

    Args:
        body: Request body containing:
            - email: str (must be unique, stored lower-cased)
            - password: str (min 4 characters)
            - name / location / availability: optional profile fields

    Returns:
        dict: success flag and data with the new user and an access token
        (also set as the HttpOnly "accessToken" cookie)

    Error codes:
        - VALIDATION_ERROR (400): malformed body
        - EMAIL_EXISTS (409): email already registered
    """
    if await _email_taken(body.email):
        raise DuplicateResource("Email already registered", code="EMAIL_EXISTS")

    local = body.email.split("@")[0]
    try:
        u = await User.create(
            username=await unique_username(local),
            email=body.email,
            password_hash=hash_password(body.password),
            full_name=body.name or local,
            location=body.location or None,
            availability=body.availability or "weekends",
        )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise DuplicateResource("Email already registered", code="EMAIL_EXISTS")
    token = _issue_token(response, u)
    return {"success": True, "data": {"user": user_to_dict(u), "accessToken": token}}


@router.post("/login")
async def login(payload: LoginRequest, response: Response):
    """
    Authenticate user and create access token.

    Validates user credentials and creates a JWT access token upon successful
    authentication. The token is returned in the response body and also set
    as an HttpOnly cookie for browser-based clients.

    Args:
        payload: Request body containing email and password
        response: FastAPI Response object (for setting cookies)

    Returns:
        dict: Response containing:
            - success: bool (always True on success)
            - data: dict with:
                - user: User information
                - accessToken: JWT token string

    Raises:
        HTTPException (401): If credentials are invalid
        HTTPException (403): If the account has been banned
    """
    user = await User.get_or_none(email=payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail={"code": "AUTH_INVALID_CREDENTIALS", "message": "Incorrect email or password"})
    if user.is_banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail={"code": "ACCOUNT_BANNED", "message": "This account has been banned"})
    token = _issue_token(response, user)
    return {"success": True, "data": {"user": user_to_dict(user), "accessToken": token}}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """
    Get current authenticated user information.

    Raises:
        HTTPException (401): If user is not authenticated
    """
    return {"success": True, "data": user_to_dict(user)}


@router.post("/logout")
async def logout(response: Response):
    """
    Log out the current user by clearing the access token cookie.

    Note:
        This endpoint only clears the cookie. The JWT token itself remains
        valid until it expires.
    """
    response.delete_cookie(COOKIE_NAME)
    return {"success": True}


@router.post("/change-password")
async def change_password(body: ChangePasswordIn, user: User = Depends(get_current_user)):
    """
    Change password for the currently authenticated user.

    Args:
        body: Request body containing:
            - currentPassword: str (must match the stored hash)
            - newPassword: str (min 4 characters, hashed before storage)

    Error codes:
        - INVALID_PASSWORD (400): current password does not match
    """
    if not verify_password(body.currentPassword, user.password_hash):
        raise ValidationError("Current password is incorrect", code="INVALID_PASSWORD")
    user.password_hash = hash_password(body.newPassword)
    await user.save()
    return {"success": True, "data": {"ok": True}}
