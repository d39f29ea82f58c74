"""
Request Dependencies.

Provides the database session, the authenticated user and the request
context to API endpoints.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.errors import AuthenticationError, AuthorizationError

from .audit import RequestContext
from .auth import AuthService

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]
BearerDep = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def get_optional_user(credentials: BearerDep, session: SessionDep) -> Optional[User]:
    """Resolve the bearer token if one was sent; anonymous requests yield None."""
    if credentials is None:
        return None
    return await AuthService(session).resolve_token(credentials.credentials)


async def get_current_user(user: Annotated[Optional[User], Depends(get_optional_user)]) -> User:
    if user is None:
        raise AuthenticationError()
    return user


async def require_admin(user: Annotated[User, Depends(get_current_user)]) -> User:
    """Gate for admin-only endpoints (the ``manage-learning-paths`` permission)."""
    if not user.is_admin:
        raise AuthorizationError()
    return user


def get_request_context(request: Request) -> RequestContext:
    return RequestContext(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

