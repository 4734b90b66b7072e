from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.courses import Course
from schemas.semesters import Semester

# ✅ 응답(Response) / 조회(Read) 용 스키마
# DB에서 불러온 강좌 데이터를 API 응답으로 내려줄 때 사용
class Class(BaseModel):
    id: int                          # 강좌 고유 ID (PK)
    course_id: int                   # 교과목 ID (FK)
    semester_id: int                 # 학기 ID (FK)
    name: str                        # 분반명
    capacity: int                    # 정원
    course: Optional[Course] = None
    semester: Optional[Semester] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ 생성(Create) 요청용 스키마
class ClassCreate(BaseModel):
    course_id: int
    semester_id: int
    name: str = Field(..., min_length=1, max_length=100)
    capacity: int = Field(40, gt=0)
