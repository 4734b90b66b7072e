from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base

# ✅ 외래키 관계 대상 모델 import
from models.courses import Course as CourseModel
from models.semesters import Semester as SemesterModel

class Class(Base):
    __tablename__ = "classes"  # 개설 강좌(분반) 테이블

    id = Column(Integer, primary_key=True, index=True)                         # 강좌 고유 ID (PK)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)      # 교과목 ID (FK)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=False)  # 학기 ID (FK)
    name = Column(String(100), nullable=False)                                 # 분반명 (예: CS101-A)
    capacity = Column(Integer, nullable=False, default=40)                     # 정원

    # ==========================================================
    # [관계 설정]
    # ==========================================================

    # ✅ 교과목과의 관계 (N:1)
    course = relationship(CourseModel, backref="classes", lazy="joined")

    # ✅ 학기와의 관계 (N:1)
    semester = relationship(SemesterModel, backref="classes", lazy="joined")
