from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base

class GradeScale(Base):
    __tablename__ = "grade_scales"  # 등급 체계 테이블

    id = Column(Integer, primary_key=True, index=True)               # 등급 체계 ID (PK)
    name = Column(String(100), unique=True, nullable=False)          # 체계 이름
    is_default = Column(Boolean, nullable=False, default=False)      # 기본 체계 여부

    # ✅ 등급 정의 목록 (1:N), 높은 구간부터 정렬
    grades = relationship(
        "GradeDefinition",
        back_populates="scale",
        cascade="all, delete-orphan",
        order_by="GradeDefinition.min_percentage.desc()",
    )


class GradeDefinition(Base):
    __tablename__ = "grade_definitions"  # 등급 정의 테이블

    id = Column(Integer, primary_key=True, index=True)                          # 등급 정의 ID (PK)
    scale_id = Column(Integer, ForeignKey("grade_scales.id"), nullable=False)   # 등급 체계 ID (FK)
    letter = Column(String(3), nullable=False)                                  # 등급 문자 (예: A+)
    min_percentage = Column(Float, nullable=False)                              # 구간 하한 (%)
    max_percentage = Column(Float, nullable=False)                              # 구간 상한 (%)
    grade_points = Column(Float, nullable=False)                                # 평점 (0.0 ~ 4.0)
    description = Column(String(100))                                           # 설명

    scale = relationship("GradeScale", back_populates="grades")
