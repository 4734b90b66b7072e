from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from models.enums import EnrollmentStatus

class Enrollment(BaseModel):
    id: int
    student_id: int
    class_id: int
    semester_id: int
    status: EnrollmentStatus
    final_percentage: Optional[float] = None
    final_grade: Optional[str] = None
    grade_points: Optional[float] = None
    is_finalized: bool = False
    finalized_at: Optional[datetime] = None
    finalized_by_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ 수강 신청 (학기는 강좌에서 가져옴)
class EnrollmentCreate(BaseModel):
    student_id: int
    class_id: int


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus
