import logging
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from models.audit_logs import AuditLog as AuditLogModel
from models.enums import AuditAction

logger = logging.getLogger(__name__)


def log(
    db: Session,
    action: AuditAction,
    resource: str,
    resource_id: Optional[int],
    user_id: Optional[int],
    old_values: Optional[dict[str, Any]] = None,
    new_values: Optional[dict[str, Any]] = None,
    commit: bool = True,
) -> Optional[AuditLogModel]:
    """
    변경 이력 기록
    - 처리자(user_id)가 없는 요청은 기록하지 않음
    - 값은 JSON 컬럼에 들어가도록 jsonable_encoder로 변환 (date/Enum 등)
    """
    if user_id is None:
        return None

    entry = AuditLogModel(
        action=AuditAction(action).value,
        resource=resource,
        resource_id=resource_id,
        user_id=user_id,
        old_values=jsonable_encoder(old_values) if old_values is not None else None,
        new_values=jsonable_encoder(new_values) if new_values is not None else None,
    )
    db.add(entry)
    if commit:
        db.commit()
    logger.debug(f"감사 로그 기록: {entry.action} {resource}#{resource_id} by user={user_id}")
    return entry


def list_logs(
    db: Session,
    resource: Optional[str] = None,
    resource_id: Optional[int] = None,
    user_id: Optional[int] = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[int, list[AuditLogModel]]:
    query = db.query(AuditLogModel)
    if resource:
        query = query.filter(AuditLogModel.resource == resource)
    if resource_id is not None:
        query = query.filter(AuditLogModel.resource_id == resource_id)
    if user_id is not None:
        query = query.filter(AuditLogModel.user_id == user_id)

    total = query.count()
    records = (
        query.order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, records
