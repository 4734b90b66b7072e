from sqlalchemy import Column, Integer, String
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블

    id = Column(Integer, primary_key=True, index=True)                      # 고유 학생 ID (PK)
    student_number = Column(String(30), unique=True, nullable=False)       # 학번
    first_name = Column(String(100), nullable=False)                       # 이름
    last_name = Column(String(100), nullable=False)                        # 성
    email = Column(String(150))                                            # 이메일

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
