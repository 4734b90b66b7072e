from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

class GradeEntry(BaseModel):
    id: int
    component_id: int
    enrollment_id: int
    score: float
    remarks: Optional[str] = None
    entered_by_id: Optional[int] = None
    modified_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GradeEntryInput(BaseModel):
    enrollment_id: int
    score: float = Field(..., ge=0, description="0 ~ 구성요소 만점")
    remarks: Optional[str] = Field(default=None, max_length=255)


# ✅ POST /grade-components/{id}/grades 요청 바디
class EnterGradesRequest(BaseModel):
    grades: list[GradeEntryInput] = Field(..., min_length=1)


class GradeEntryUpdate(BaseModel):
    score: float = Field(..., ge=0)
    remarks: Optional[str] = Field(default=None, max_length=255)


class GradeStatistics(BaseModel):
    count: int
    average: float
    highest: float
    lowest: float
    median: float
    max_score: float
