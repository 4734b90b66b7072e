from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.enums import GradeComponentType

# ✅ 조회/응답용 스키마
class GradeComponent(BaseModel):
    id: int                                  # 구성요소 ID
    class_id: int                            # 강좌 ID
    name: str                                # 이름
    type: GradeComponentType                 # 유형
    weight: float                            # 반영 비율 (%)
    max_score: float                         # 만점
    due_date: Optional[datetime] = None      # 마감일
    is_published: bool                       # 공개 여부
    entry_count: int = 0                     # 입력된 점수 수

    model_config = ConfigDict(from_attributes=True)


# ✅ 생성 요청
class GradeComponentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: GradeComponentType
    weight: float = Field(..., ge=0, le=100)
    max_score: float = Field(..., gt=0)
    due_date: Optional[datetime] = None


# ✅ 부분 수정 요청 (보낸 필드만 반영: model_dump(exclude_unset=True))
class GradeComponentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    type: Optional[GradeComponentType] = None
    weight: Optional[float] = Field(default=None, ge=0, le=100)
    max_score: Optional[float] = Field(default=None, gt=0)
    due_date: Optional[datetime] = None
    is_published: Optional[bool] = None


class CopyComponentsRequest(BaseModel):
    source_class_id: int
    target_class_id: int


class ComponentWeight(BaseModel):
    id: int
    name: str
    weight: float


class WeightValidation(BaseModel):
    valid: bool
    total: float
    components: list[ComponentWeight]
