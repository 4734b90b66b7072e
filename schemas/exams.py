from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models.enums import ExamStatus, ExamType
from schemas.classes import Class
from schemas.rooms import Room

# "HH:MM" (00:00 ~ 23:59)
HHMM = r"^([01]\d|2[0-3]):([0-5]\d)$"


# ✅ 조회/응답용 스키마
class Exam(BaseModel):
    id: int
    class_id: int
    room_id: int
    type: ExamType
    title: str
    date: date
    start_time: str
    end_time: str
    duration: int
    max_score: float
    instructions: Optional[str] = None
    status: ExamStatus
    cancel_reason: Optional[str] = None
    class_: Optional[Class] = Field(default=None, serialization_alias="class")
    room: Optional[Room] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ 시험 등록 요청 (date는 날짜/일시 모두 허용, UTC 날짜로 정규화)
class ExamCreate(BaseModel):
    class_id: int
    room_id: int
    type: ExamType
    title: str = Field(..., min_length=1, max_length=200)
    date: Union[datetime, date]
    start_time: str = Field(..., pattern=HHMM)
    end_time: str = Field(..., pattern=HHMM)
    duration: int = Field(..., gt=0, description="분 단위")
    max_score: float = Field(..., gt=0)
    instructions: Optional[str] = None


# ✅ 일정 변경 등 부분 수정 (상태 변경은 cancel/complete 엔드포인트로만)
class ExamUpdate(BaseModel):
    type: Optional[ExamType] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    date: Optional[Union[datetime, date]] = None
    start_time: Optional[str] = Field(default=None, pattern=HHMM)
    end_time: Optional[str] = Field(default=None, pattern=HHMM)
    duration: Optional[int] = Field(default=None, gt=0)
    room_id: Optional[int] = None
    max_score: Optional[float] = Field(default=None, gt=0)
    instructions: Optional[str] = None


class ExamCancel(BaseModel):
    reason: str = Field(..., min_length=1, max_length=255)


class ExamFilters(BaseModel):
    class_id: Optional[int] = None
    semester_id: Optional[int] = None
    type: Optional[ExamType] = None
    status: Optional[ExamStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ConflictCheckRequest(BaseModel):
    class_id: int
    date: Union[datetime, date]
    start_time: str = Field(..., pattern=HHMM)
    end_time: str = Field(..., pattern=HHMM)


# ✅ 학생 시험 중복 경고 (차단하지 않음)
class ExamConflict(BaseModel):
    type: Literal["student", "room"]
    description: str
    exam_id: Optional[int] = None
    exam_title: Optional[str] = None

