from pydantic import BaseModel, ConfigDict, Field

# ✅ 조회/응답용 스키마
class Course(BaseModel):
    id: int                                  # 교과목 ID (PK)
    code: str                                # 과목 코드
    name: str                                # 과목명
    credits: int                             # 학점

    model_config = ConfigDict(from_attributes=True)


# ✅ 생성(Create) 전용 스키마 → id는 DB에서 자동 생성
class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)
    credits: int = Field(3, gt=0, le=12)
