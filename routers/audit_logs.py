from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from schemas.audit_logs import AuditLog as AuditLogSchema
from schemas.common import Pagination, make_meta
from services import audit_service

router = APIRouter(prefix="/audit-logs", tags=["audit-logs"])


# ✅ [READ] 감사 로그 조회 (최신순, 페이지네이션)
@router.get("/")
def read_audit_logs(
    resource: Optional[str] = None,
    resource_id: Optional[int] = None,
    user_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    db: Session = Depends(get_db),
):
    paging = Pagination(page=page, size=size)
    total, records = audit_service.list_logs(
        db, resource=resource, resource_id=resource_id, user_id=user_id,
        offset=paging.offset, limit=paging.size,
    )
    return {
        "success": True,
        "data": [AuditLogSchema.model_validate(r).model_dump() for r in records],
        "meta": make_meta(total, paging.page, paging.size).model_dump(),
    }
