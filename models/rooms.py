from sqlalchemy import Column, Integer, String, Boolean
from database.db import Base

class Room(Base):
    __tablename__ = "rooms"  # 강의실/시험장 테이블

    id = Column(Integer, primary_key=True, index=True)            # 강의실 고유 ID (PK)
    code = Column(String(20), unique=True, nullable=False)        # 강의실 코드 (예: R101)
    name = Column(String(100), nullable=False)                    # 강의실 이름
    building = Column(String(100))                                # 건물
    capacity = Column(Integer, nullable=False, default=30)        # 수용 인원
    is_active = Column(Boolean, nullable=False, default=True)     # 사용 가능 여부
