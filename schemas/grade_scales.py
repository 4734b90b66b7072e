from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

class GradeDefinition(BaseModel):
    letter: str                              # 등급 문자
    min_percentage: float                    # 구간 하한
    max_percentage: float                    # 구간 상한
    grade_points: float                      # 평점
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class GradeScale(BaseModel):
    id: int
    name: str
    is_default: bool
    grades: list[GradeDefinition] = []

    model_config = ConfigDict(from_attributes=True)


class GradeDefinitionInput(BaseModel):
    letter: str = Field(..., min_length=1, max_length=3)
    min_percentage: float = Field(..., ge=0, le=100)
    max_percentage: float = Field(..., ge=0, le=100)
    grade_points: float = Field(..., ge=0, le=4)
    description: Optional[str] = Field(default=None, max_length=100)


class GradeScaleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    is_default: bool = False
    grades: list[GradeDefinitionInput] = Field(..., min_length=1)


class GradeScaleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    grades: Optional[list[GradeDefinitionInput]] = Field(default=None, min_length=1)


# ✅ 백분율 → 등급 변환 결과
class LetterGrade(BaseModel):
    letter: str
    grade_points: float
    description: Optional[str] = None
