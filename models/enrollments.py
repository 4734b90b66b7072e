from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base

from models.enums import EnrollmentStatus
from models.students import Student as StudentModel
from models.classes import Class as ClassModel

class Enrollment(Base):
    __tablename__ = "enrollments"  # 수강 신청 테이블
    __table_args__ = (UniqueConstraint("student_id", "class_id", name="uq_enrollment_student_class"),)

    id = Column(Integer, primary_key=True, index=True)                          # 수강 고유 ID (PK)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)     # 학생 ID (FK)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)        # 강좌 ID (FK)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=False)   # 학기 ID (FK, 강좌 학기와 동일)
    status = Column(String(20), nullable=False, default=EnrollmentStatus.REGISTERED.value)  # 수강 상태

    # ✅ 성적 확정 정보 (finalize 시 저장)
    final_percentage = Column(Float)                 # 최종 백분율
    final_grade = Column(String(5))                  # 최종 등급 (예: A, B+)
    grade_points = Column(Float)                     # 평점
    is_finalized = Column(Boolean, nullable=False, default=False)  # 성적 확정 여부
    finalized_at = Column(DateTime)                  # 확정 시각
    finalized_by_id = Column(Integer)                # 확정 처리자 ID

    # ✅ 관계 설정
    student = relationship(StudentModel, backref="enrollments", lazy="joined")
    class_ = relationship(ClassModel, backref="enrollments", lazy="joined")
