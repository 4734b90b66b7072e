from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base

from models.grade_components import GradeComponent as GradeComponentModel
from models.enrollments import Enrollment as EnrollmentModel

class GradeEntry(Base):
    __tablename__ = "grade_entries"  # 구성요소별 학생 점수 테이블
    __table_args__ = (UniqueConstraint("component_id", "enrollment_id", name="uq_grade_entry_component_enrollment"),)

    id = Column(Integer, primary_key=True, index=True)                                    # 점수 고유 ID (PK)
    component_id = Column(Integer, ForeignKey("grade_components.id"), nullable=False)     # 구성요소 ID (FK)
    enrollment_id = Column(Integer, ForeignKey("enrollments.id"), nullable=False)         # 수강 ID (FK)
    score = Column(Float, nullable=False)                                                 # 점수 (0 ~ max_score)
    remarks = Column(String(255))                                                         # 비고
    entered_by_id = Column(Integer)                                                       # 입력자 ID
    modified_by_id = Column(Integer)                                                      # 수정자 ID
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    modified_at = Column(DateTime)

    # ✅ 관계 설정: component.entries / enrollment.grade_entries
    component = relationship(GradeComponentModel, backref="entries")
    enrollment = relationship(EnrollmentModel, backref="grade_entries")
