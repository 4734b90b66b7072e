from sqlalchemy import Column, Integer, String, Date
from database.db import Base

class Semester(Base):
    __tablename__ = "semesters"  # 학기 정보 테이블

    id = Column(Integer, primary_key=True, index=True)      # 학기 고유 ID (PK)
    name = Column(String(100), nullable=False)              # 학기명 (예: Fall 2024)
    start_date = Column(Date, nullable=False)               # 학기 시작일
    end_date = Column(Date, nullable=False)                 # 학기 종료일
