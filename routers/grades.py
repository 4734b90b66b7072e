from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id, require_user_id
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.grade_calculation import (
    CalculatedGrade,
    EnrollmentGrades,
    FinalizeRequest,
    GPAResult,
    Transcript,
    UnfinalizeRequest,
)
from services import grade_calculation_service

router = APIRouter(tags=["grades"], responses=COMMON_ERROR_RESPONSES)

# ==========================================================
# [1단계] 성적 계산 조회
# ==========================================================

# ✅ [READ] 수강 1건의 구성요소별 점수 + 현재 등급
@router.get("/enrollments/{enrollment_id}/grades")
def read_enrollment_grades(enrollment_id: int, db: Session = Depends(get_db)):
    view = grade_calculation_service.get_enrollment_grades(db, enrollment_id)
    return {"success": True, "data": EnrollmentGrades(**view).model_dump()}


# ✅ [READ] 강좌 전체 성적 (백분율 내림차순)
@router.get("/classes/{class_id}/grades")
def read_class_grades(class_id: int, db: Session = Depends(get_db)):
    grades = grade_calculation_service.calculate_class_grades(db, class_id)
    return {"success": True, "data": [CalculatedGrade(**g).model_dump() for g in grades]}


# ==========================================================
# [2단계] 성적 확정 / 확정 취소
# ==========================================================

# ✅ [FINALIZE] 강좌 성적 확정 (confirm: true 필수)
@router.post("/classes/{class_id}/grades/finalize")
def finalize_grades(
    class_id: int,
    body: FinalizeRequest,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    grades = grade_calculation_service.finalize_grades(db, class_id, user_id)
    return {
        "success": True,
        "data": [CalculatedGrade(**g).model_dump() for g in grades],
        "message": f"Grades finalized for {len(grades)} students"
    }


# ✅ [UNFINALIZE] 확정 취소 (처리자 + 사유 필수)
@router.post("/classes/{class_id}/grades/unfinalize")
def unfinalize_grades(
    class_id: int,
    body: UnfinalizeRequest,
    db: Session = Depends(get_db),
    user_id: int = Depends(require_user_id),
):
    count = grade_calculation_service.unfinalize_grades(db, class_id, body.reason, user_id)
    return {
        "success": True,
        "data": {"class_id": class_id, "unfinalized": count},
        "message": f"Grades unfinalized for {count} students"
    }


# ==========================================================
# [3단계] 학생 GPA / 성적증명서
# ==========================================================

# ✅ [READ] 학기 GPA + 누적 GPA
@router.get("/students/{student_id}/gpa")
def read_student_gpa(student_id: int, semester_id: Optional[int] = None, db: Session = Depends(get_db)):
    details = grade_calculation_service.get_gpa_details(db, student_id, semester_id)
    return {"success": True, "data": GPAResult(**details).model_dump()}


# ✅ [READ] 성적증명서 (확정 성적만, 학기순)
@router.get("/students/{student_id}/transcript")
def read_student_transcript(student_id: int, db: Session = Depends(get_db)):
    transcript = grade_calculation_service.generate_transcript(db, student_id)
    return {"success": True, "data": Transcript(**transcript).model_dump()}
