from sqlalchemy import Column, Integer, String
from database.db import Base

class Course(Base):
    __tablename__ = "courses"  # 교과목 정보 테이블

    id = Column(Integer, primary_key=True, index=True)          # 교과목 고유 ID (PK)
    code = Column(String(20), unique=True, nullable=False)      # 과목 코드 (예: CS101)
    name = Column(String(150), nullable=False)                  # 과목명
    credits = Column(Integer, nullable=False, default=3)        # 학점
