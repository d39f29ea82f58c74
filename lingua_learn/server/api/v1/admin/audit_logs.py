"""
Admin Audit Log Endpoints.

Every listing is newest first and each entry carries the acting user's name,
a readable description and the changed keys.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import Page, get_session
from lingua_learn.core.database.entities import User
from lingua_learn.server.api.responses import paginated_response, success_response
from lingua_learn.server.core import constant
from lingua_learn.server.services.audit_logs import AuditLogQuery
from lingua_learn.server.services.deps import require_admin

router = APIRouter(tags=["admin-audit-logs"])


async def _presented(query: AuditLogQuery, page: Page):
    return paginated_response(dataclasses.replace(page, items=await query.present(page.items)))


@router.get("", summary="List Audit Logs")
async def list_audit_logs(
    action: Optional[str] = Query(default=None),
    area: Optional[str] = Query(default=None),
    user_id: Optional[int] = Query(default=None),
    date_from: Optional[datetime] = Query(default=None, alias="from"),
    date_to: Optional[datetime] = Query(default=None, alias="to"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    query = AuditLogQuery(session)
    result = await query.list(
        action=action, area=area, user_id=user_id, date_from=date_from, date_to=date_to, page=page, per_page=per_page
    )
    return await _presented(query, result)


@router.get("/user/{user_id}", summary="List Audit Logs By User")
async def list_user_audit_logs(
    user_id: int,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    query = AuditLogQuery(session)
    return await _presented(query, await query.list(user_id=user_id, page=page, per_page=per_page))


@router.get("/content/{auditable_type}/{auditable_id}", summary="List Audit Logs For Content")
async def list_content_audit_logs(
    auditable_type: str,
    auditable_id: int,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    query = AuditLogQuery(session)
    result = await query.list(auditable_type=auditable_type, auditable_id=auditable_id, page=page, per_page=per_page)
    return await _presented(query, result)


@router.get("/{log_id}", summary="Get Audit Log")
async def get_audit_log(log_id: int, admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    query = AuditLogQuery(session)
    log = await query.get(log_id)
    return success_response((await query.present([log]))[0])
