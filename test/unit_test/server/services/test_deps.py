"""Unit tests for server services dependencies.

Tests verify the session and bearer aliases and the user resolution chain
behind the authenticated and admin-only endpoints.
"""

from types import SimpleNamespace

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from lingua_learn.core.database import get_session
from lingua_learn.core.errors import AuthenticationError, AuthorizationError
from lingua_learn.server.services.auth import AuthService
from lingua_learn.server.services.deps import (
    BearerDep,
    SessionDep,
    bearer_scheme,
    get_current_user,
    get_optional_user,
    get_request_context,
    require_admin,
)


class TestAnnotatedAliases:
    """The Annotated aliases carry the right dependencies."""

    def test_session_dep_uses_get_session(self):
        assert SessionDep.__metadata__[0].dependency == get_session

    def test_bearer_dep_uses_bearer_scheme(self):
        assert BearerDep.__metadata__[0].dependency is bearer_scheme
        assert bearer_scheme.auto_error is False


class TestUserResolution:
    """Bearer token to user resolution."""

    @pytest.mark.asyncio
    async def test_anonymous_request_has_no_user(self, session):
        assert await get_optional_user(None, session) is None

    @pytest.mark.asyncio
    async def test_valid_token_resolves_and_stamps_last_use(self, session, learner):
        token = await AuthService(session).issue_token(learner)
        await session.commit()
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        user = await get_optional_user(credentials, session)

        assert user.id == learner.id
        stored = await AuthService(session)._find_token(token)
        assert stored.last_used_at is not None

    @pytest.mark.asyncio
    async def test_unknown_token_is_anonymous(self, session, learner):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="999|not-a-real-token")
        assert await get_optional_user(credentials, session) is None

    @pytest.mark.asyncio
    async def test_current_user_required(self):
        with pytest.raises(AuthenticationError):
            await get_current_user(None)

    @pytest.mark.asyncio
    async def test_require_admin(self, learner, admin):
        assert await require_admin(admin) is admin
        with pytest.raises(AuthorizationError):
            await require_admin(learner)


class TestRequestContext:
    def test_context_reads_client_and_user_agent(self):
        request = SimpleNamespace(client=SimpleNamespace(host="10.0.0.5"), headers={"user-agent": "pytest"})
        context = get_request_context(request)
        assert context.ip_address == "10.0.0.5"
        assert context.user_agent == "pytest"

    def test_context_without_client(self):
        context = get_request_context(SimpleNamespace(client=None, headers={}))
        assert context.ip_address is None
        assert context.user_agent is None
