from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base

from models.enums import ExamStatus
from models.classes import Class as ClassModel
from models.rooms import Room as RoomModel

class Exam(Base):
    __tablename__ = "exams"  # 시험 일정 테이블

    id = Column(Integer, primary_key=True, index=True)                     # 시험 고유 ID (PK)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)   # 강좌 ID (FK)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)      # 시험장 ID (FK)
    type = Column(String(20), nullable=False)                              # 시험 유형 (ExamType)
    title = Column(String(200), nullable=False)                            # 시험명
    date = Column(Date, nullable=False, index=True)                        # 시험 날짜 (UTC 기준 일 단위)
    start_time = Column(String(5), nullable=False)                         # 시작 시각 (HH:MM)
    end_time = Column(String(5), nullable=False)                           # 종료 시각 (HH:MM)
    duration = Column(Integer, nullable=False)                             # 시험 시간 (분)
    max_score = Column(Float, nullable=False)                              # 만점
    instructions = Column(Text)                                            # 유의사항
    status = Column(String(20), nullable=False, default=ExamStatus.SCHEDULED.value)  # 시험 상태
    cancel_reason = Column(String(255))                                    # 취소 사유
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # ✅ 관계 설정
    class_ = relationship(ClassModel, backref="exams", lazy="joined")
    room = relationship(RoomModel, backref="exams", lazy="joined")
