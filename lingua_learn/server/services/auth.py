"""
Authentication Service.

Handles password login, registration (optionally redeeming an admin invite),
personal access tokens, admin invites and Google sign-in account linking.
"""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import AdminInvite, PersonalAccessToken, User, UserRole
from lingua_learn.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ContentRuleError,
    NotFoundError,
    ValidationFailedError,
)
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.auth import RegisterRequest
from lingua_learn.core.security import (
    INVITE_TOKEN_LENGTH,
    TOKEN_SECRET_LENGTH,
    hash_password,
    hash_token,
    random_string,
    split_token,
    tokens_match,
    verify_password,
)
from lingua_learn.server.core.config import settings

logger = get_logger(__name__)


class AuthService:
    """Account and token operations bound to one database session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def issue_token(self, user: User, name: Optional[str] = None) -> str:
        """Create a personal access token and return its plain ``"{id}|{secret}"`` form."""
        secret = random_string(TOKEN_SECRET_LENGTH)
        token = PersonalAccessToken(user_id=user.id, name=name or settings.auth.token_name, token=hash_token(secret))
        self.session.add(token)
        await self.session.flush()
        return f"{token.id}|{secret}"

    async def _find_token(self, plain_token: str) -> Optional[PersonalAccessToken]:
        token_id, secret = split_token(plain_token)
        if token_id is None:
            result = await self.session.execute(
                select(PersonalAccessToken).where(PersonalAccessToken.token == hash_token(secret))
            )
            return result.scalars().first()
        token = await self.session.get(PersonalAccessToken, token_id)
        if token is None or not tokens_match(secret, token.token):
            return None
        return token

    async def resolve_token(self, plain_token: str) -> Optional[User]:
        """Return the owner of a bearer token and stamp ``last_used_at``."""
        token = await self._find_token(plain_token)
        if token is None:
            return None
        user = await self.session.get(User, token.user_id)
        if user is None:
            return None
        token.last_used_at = utc_now()
        await self.session.commit()
        return user

    async def revoke(self, plain_token: str) -> bool:
        token = await self._find_token(plain_token)
        if token is None:
            return False
        await self.session.delete(token)
        await self.session.commit()
        return True

    # ------------------------------------------------------------------
    # Login / registration
    # ------------------------------------------------------------------

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email.lower()))
        return result.scalars().first()

    async def login(self, email: str, password: str) -> Tuple[str, User]:
        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password):
            logger.info(f"Failed login attempt for {email}")
            raise AuthenticationError("Invalid credentials")
        user.last_login_at = utc_now()
        token = await self.issue_token(user)
        await self.session.commit()
        logger.info(f"User {user.id} logged in")
        return token, user

    async def register(self, payload: RegisterRequest) -> Tuple[str, User]:
        email = payload.email.lower()
        if await self.get_user_by_email(email) is not None:
            raise ValidationFailedError.single("email", "The email has already been taken.")

        invite: Optional[AdminInvite] = None
        if payload.invite_token:
            invite = await self._usable_invite(payload.invite_token)
            if invite is None or invite.email.lower() != email:
                raise ValidationFailedError.single("invite_token", "The invite token is invalid or has expired.")

        user = User(
            name=payload.name,
            email=email,
            password=hash_password(payload.password),
            role=UserRole.ADMIN.value if invite else UserRole.USER.value,
            last_login_at=utc_now(),
        )
        self.session.add(user)
        await self.session.flush()
        if invite is not None:
            invite.used_at = utc_now()
        token = await self.issue_token(user)
        await self.session.commit()
        logger.info(f"Registered user {user.id} with role {user.role}")
        return token, user

    # ------------------------------------------------------------------
    # Admin invites
    # ------------------------------------------------------------------

    async def _usable_invite(self, token: str) -> Optional[AdminInvite]:
        result = await self.session.execute(select(AdminInvite).where(AdminInvite.token == token))
        invite = result.scalars().first()
        if invite is None or not invite.is_usable():
            return None
        return invite

    async def create_invite(self, admin: User, email: str) -> AdminInvite:
        email = email.lower()
        if await self.get_user_by_email(email) is not None:
            raise ValidationFailedError.single("email", "A user with this email already exists.")
        existing = await self.session.execute(select(AdminInvite).where(AdminInvite.email == email))
        if existing.scalars().first() is not None:
            raise ValidationFailedError.single("email", "An invite has already been sent to this email.")

        invite = AdminInvite(
            email=email,
            token=random_string(INVITE_TOKEN_LENGTH),
            invited_by=admin.id,
            expires_at=utc_now() + timedelta(days=settings.auth.invite_expiry_days),
        )
        self.session.add(invite)
        await self.session.commit()
        await self.session.refresh(invite)
        logger.info(f"Admin {admin.id} invited {email}")
        return invite

    @staticmethod
    def invite_url(invite: AdminInvite) -> str:
        return f"{settings.auth.frontend_url.rstrip('/')}/register?invite={invite.token}"

    async def pending_invites(self) -> List[AdminInvite]:
        result = await self.session.execute(
            select(AdminInvite)
            .where(AdminInvite.used_at.is_(None), AdminInvite.expires_at > utc_now())
            .order_by(AdminInvite.created_at.desc())
        )
        return list(result.scalars().all())

    async def validate_invite(self, token: str) -> AdminInvite:
        invite = await self._usable_invite(token)
        if invite is None:
            raise NotFoundError("Invalid or expired invite token.")
        return invite

    # ------------------------------------------------------------------
    # Google sign-in
    # ------------------------------------------------------------------

    async def login_with_google(self, profile: dict) -> Tuple[str, User, str]:
        """Find, link or create the account for a Google profile.

        Returns:
            ``(token, user, redirect_url)``
        """
        google_id = profile.get("id")
        email = (profile.get("email") or "").lower()
        if not google_id or not email:
            raise ContentRuleError("Google did not return an account id and email.")
        domain = email.rsplit("@", 1)[-1]
        if domain not in settings.auth.allowed_google_domains:
            logger.info(f"Rejected Google sign-in from domain {domain}")
            raise AuthorizationError("Email domain is not allowed.")

        result = await self.session.execute(select(User).where(User.google_id == str(google_id)))
        user = result.scalars().first()
        if user is None:
            user = await self.get_user_by_email(email)
            if user is not None:
                user.google_id = str(google_id)
                user.avatar = profile.get("picture") or user.avatar
            else:
                user = User(
                    name=profile.get("name") or email.split("@", 1)[0],
                    email=email,
                    google_id=str(google_id),
                    avatar=profile.get("picture"),
                    role=UserRole.USER.value,
                )
                self.session.add(user)
                await self.session.flush()
        user.last_login_at = utc_now()
        token = await self.issue_token(user)
        await self.session.commit()
        redirect = "/admin" if user.is_admin else "/learn"
        return token, user, f"{settings.auth.frontend_url.rstrip('/')}{redirect}"
