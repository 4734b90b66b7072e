from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base

from models.classes import Class as ClassModel

class GradeComponent(Base):
    __tablename__ = "grade_components"  # 성적 구성요소(중간/기말/과제 등) 테이블

    id = Column(Integer, primary_key=True, index=True)                        # 구성요소 고유 ID (PK)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)      # 강좌 ID (FK)
    name = Column(String(100), nullable=False)                                # 구성요소 이름
    type = Column(String(20), nullable=False)                                 # 유형 (GradeComponentType)
    weight = Column(Float, nullable=False)                                    # 반영 비율 (0~100, %)
    max_score = Column(Float, nullable=False)                                 # 만점
    due_date = Column(DateTime)                                               # 마감일 (선택)
    is_published = Column(Boolean, nullable=False, default=False)             # 학생 공개 여부
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # ✅ 강좌와의 관계 (N:1), 강좌 쪽에서는 class.grade_components 로 접근
    class_ = relationship(ClassModel, backref="grade_components")

    @property
    def entry_count(self) -> int:
        # entries 는 models/grade_entries.py 의 backref
        return len(self.entries)
