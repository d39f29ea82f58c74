"""
Admin User Endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.auth import RoleUpdate, UserRead
from lingua_learn.server.api.responses import no_content_response, paginated_response, success_response
from lingua_learn.server.core import constant
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_request_context, require_admin
from lingua_learn.server.services.users import UserAdminService

router = APIRouter(tags=["admin-users"])
roles_router = APIRouter(tags=["admin-users"])


@router.get("", summary="List Users")
async def list_users(
    role: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    result = await UserAdminService(session).list(role, search, page, per_page)
    return paginated_response(result, transform=UserRead.model_validate)


@router.get("/{user_id}", summary="Get User")
async def get_user(user_id: int, admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return success_response(UserRead.model_validate(await UserAdminService(session).get(user_id)))


@router.patch(
    "/{user_id}/role",
    summary="Change User Role",
    responses={200: {"description": "Role changed"}, 400: {"description": "An admin cannot demote themself"}},
)
async def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    user = await UserAdminService(session, admin, context).update_role(user_id, payload.role)
    return success_response(UserRead.model_validate(user), "User role updated successfully")


@router.delete(
    "/{user_id}",
    status_code=204,
    summary="Delete User",
    responses={204: {"description": "User deleted"}, 400: {"description": "An admin cannot delete themself"}},
)
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await UserAdminService(session, admin, context).delete(user_id)
    return no_content_response()


@roles_router.get("", summary="List Roles", description="Every role with the number of users holding it.")
async def list_roles(admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return success_response(await UserAdminService(session).roles())
