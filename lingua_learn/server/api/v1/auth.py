"""
Authentication Endpoints.

Email/password login and registration, Google sign-in and the public
admin-invite check. Every successful sign-in returns a personal access
token to be sent as ``Authorization: Bearer <token>``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.auth import AuthTokenRead, LoginRequest, RegisterRequest, UserRead
from lingua_learn.server.api.responses import created_response, success_response
from lingua_learn.server.services.auth import AuthService
from lingua_learn.server.services.deps import bearer_scheme, get_current_user
from lingua_learn.server.services.google_oauth import GoogleOAuthClient, get_google_oauth_client

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


def _token_payload(token: str, user: User, redirect_url: Optional[str] = None) -> dict:
    return AuthTokenRead(token=token, user=UserRead.model_validate(user), redirect_url=redirect_url).model_dump(
        exclude_none=True
    )


@router.post(
    "/login",
    summary="Log In",
    description="Exchange an email and password for a personal access token.",
    responses={
        200: {"description": "Signed in"},
        401: {"description": "Invalid credentials"},
        422: {"description": "Malformed request"},
    },
)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_session)):
    token, user = await AuthService(session).login(payload.email, payload.password)
    return success_response(_token_payload(token, user), "Login successful")


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a learner account, or an admin account when a valid invite token is supplied.",
    responses={
        201: {"description": "Account created"},
        422: {"description": "Validation failed (email taken, password mismatch, invalid invite)"},
    },
)
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """
    Register a new account.

    - **name**, **email**, **password**, **password_confirmation**: account details.
    - **invite_token**: optional admin invite; it must be unused, unexpired and
      issued to the same email.
    """
    token, user = await AuthService(session).register(payload)
    return created_response(_token_payload(token, user), "Registration successful")


@router.post("/logout", summary="Log Out", description="Revoke the token used for this request.")
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await AuthService(session).revoke(credentials.credentials)
    logger.info(f"User {user.id} logged out")
    return success_response(None, "Logged out successfully")


@router.get("/user", summary="Current User", description="Return the account that owns the bearer token.")
async def current_user(user: User = Depends(get_current_user)):
    return success_response(UserRead.model_validate(user))


@router.get(
    "/google",
    summary="Google Sign-In URL",
    description="Return the Google consent screen URL the frontend should redirect to.",
)
async def google_redirect(
    state: Optional[str] = Query(default=None),
    client: GoogleOAuthClient = Depends(get_google_oauth_client),
):
    return success_response({"url": client.authorization_url(state)})


@router.get(
    "/google/callback",
    summary="Google Sign-In Callback",
    description="Exchange the Google authorization code and sign the user in.",
    responses={
        200: {"description": "Signed in"},
        400: {"description": "Google did not return an id and email"},
        401: {"description": "The code could not be exchanged"},
        403: {"description": "Email domain is not allowed"},
    },
)
async def google_callback(
    code: str = Query(min_length=1),
    client: GoogleOAuthClient = Depends(get_google_oauth_client),
    session: AsyncSession = Depends(get_session),
):
    """
    Complete Google sign-in.

    The account is found by Google id, then linked by email, and created as a
    learner when neither matches.
    """
    profile = await client.fetch_profile(code)
    token, user, redirect_url = await AuthService(session).login_with_google(profile)
    return success_response(_token_payload(token, user, redirect_url), "Login successful")


@router.get(
    "/invites/{token}",
    summary="Validate Invite",
    description="Check whether an admin invite token can still be used.",
    responses={200: {"description": "Invite is valid"}, 404: {"description": "Invalid or expired invite token"}},
)
async def validate_invite(token: str, session: AsyncSession = Depends(get_session)):
    invite = await AuthService(session).validate_invite(token)
    return success_response({"valid": True, "email": invite.email})
