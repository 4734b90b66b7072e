from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

# ✅ 구성요소별 환산 점수
class ComponentScore(BaseModel):
    component_id: int
    component_name: str
    score: float
    max_score: float
    weight: float
    weighted_score: float           # (score / max_score) * weight
    percentage: float               # score / max_score * 100 (소수 둘째 자리)


# ✅ 수강 1건의 최종 성적 계산 결과
class CalculatedGrade(BaseModel):
    enrollment_id: int
    student_id: int
    student_name: str
    component_scores: list[ComponentScore]
    total_percentage: float
    letter_grade: str
    grade_points: float


class FinalizeRequest(BaseModel):
    confirm: Literal[True] = Field(..., description="성적 확정 의사 확인 (true 필수)")


class UnfinalizeRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=255)


class GPAResult(BaseModel):
    semester_gpa: float
    cumulative_gpa: float
    total_credits: int
    total_points: float
    semester_credits: int
    semester_points: float


class TranscriptCourse(BaseModel):
    code: str
    name: str
    credits: int
    grade: str
    points: float


class TranscriptSemester(BaseModel):
    id: int
    name: str
    courses: list[TranscriptCourse]
    semester_credits: int
    semester_points: float
    semester_gpa: float


class TranscriptStudent(BaseModel):
    id: int
    student_number: str
    name: str


class Transcript(BaseModel):
    student: TranscriptStudent
    semesters: list[TranscriptSemester]
    cumulative_credits: int
    cumulative_points: float
    cumulative_gpa: float
    generated_at: datetime


class CurrentGrade(BaseModel):
    percentage: float
    letter: str
    points: float


class EnrollmentGrades(BaseModel):
    enrollment_id: int
    status: str
    is_finalized: bool
    final_grade: Optional[str] = None
    final_percentage: Optional[float] = None
    student: TranscriptStudent
    class_id: int
    class_name: str
    course_code: str
    components: list[ComponentScore]
    current_grade: CurrentGrade
