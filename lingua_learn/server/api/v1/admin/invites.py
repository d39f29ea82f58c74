"""
Admin Invite Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.auth import InviteCreate, InviteRead
from lingua_learn.server.api.responses import created_response, success_response
from lingua_learn.server.services.auth import AuthService
from lingua_learn.server.services.deps import require_admin

router = APIRouter(tags=["admin-invites"])


@router.post(
    "",
    status_code=201,
    summary="Invite Admin",
    description="Create an admin invite and return the registration URL to share with the invitee.",
    responses={201: {"description": "Invite created"}, 422: {"description": "Email already registered or invited"}},
)
async def create_invite(
    payload: InviteCreate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    invite = await AuthService(session).create_invite(admin, payload.email)
    return created_response(
        {"invite_url": AuthService.invite_url(invite), "expires_at": invite.expires_at},
        "Invite created successfully",
    )


@router.get("", summary="List Pending Invites", description="Invites that are neither used nor expired.")
async def list_invites(admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    invites = await AuthService(session).pending_invites()
    return success_response([InviteRead.model_validate(invite) for invite in invites])
