from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON
from database.db import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"  # 감사 로그 테이블

    id = Column(Integer, primary_key=True, index=True)      # 로그 고유 ID (PK)
    action = Column(String(10), nullable=False)             # CREATE / UPDATE / DELETE
    resource = Column(String(50), nullable=False)           # 대상 리소스 (예: GradeComponent)
    resource_id = Column(Integer)                           # 대상 ID
    user_id = Column(Integer, index=True)                   # 처리자 ID
    old_values = Column(JSON)                               # 변경 전 값
    new_values = Column(JSON)                               # 변경 후 값
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
