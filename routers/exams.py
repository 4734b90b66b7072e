from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id
from models.enums import ExamStatus, ExamType
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.exams import (
    ConflictCheckRequest,
    Exam as ExamSchema,
    ExamCancel,
    ExamConflict,
    ExamCreate,
    ExamFilters,
    ExamUpdate,
)
from services.exam_service import exam_service

router = APIRouter(prefix="/exams", tags=["exams"], responses=COMMON_ERROR_RESPONSES)


def _serialize(exam) -> dict:
    # class_ 필드는 "class" 키로 내려줌
    return ExamSchema.model_validate(exam).model_dump(by_alias=True)


def _conflicts(conflicts) -> list:
    return [ExamConflict(**c).model_dump() for c in conflicts]


# ==========================================================
# [1단계] 등록 / 목록
# ==========================================================

# ✅ [CREATE] 시험 등록 (시험장 중복은 거부, 학생 중복은 경고로 반환)
@router.post("/", status_code=201)
def schedule_exam(
    exam: ExamCreate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    result = exam_service.schedule_exam(db, exam, user_id)
    message = "Exam scheduled successfully"
    if result["conflicts"]:
        message = f"Exam scheduled with {len(result['conflicts'])} student conflict(s)"
    return {
        "success": True,
        "data": {"exam": _serialize(result["exam"]), "conflicts": _conflicts(result["conflicts"])},
        "message": message
    }


# ✅ [READ] 시험 목록 (필터 선택)
@router.get("/")
def read_exams(
    class_id: Optional[int] = None,
    semester_id: Optional[int] = None,
    type: Optional[ExamType] = None,
    status: Optional[ExamStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    filters = ExamFilters(
        class_id=class_id,
        semester_id=semester_id,
        type=type,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    return {"success": True, "data": [_serialize(e) for e in exam_service.list_exams(db, filters)]}


# ==========================================================
# [2단계] 일정표 / 충돌 검사 (/{exam_id} 보다 먼저 등록)
# ==========================================================

# ✅ [READ] 학기 시험 일정표 (날짜별 묶음, 취소 제외)
@router.get("/schedule/{semester_id}")
def read_exam_schedule(semester_id: int, db: Session = Depends(get_db)):
    schedule = exam_service.get_exam_schedule(db, semester_id)
    return {
        "success": True,
        "data": [
            {"date": day["date"], "exams": [_serialize(e) for e in day["exams"]]}
            for day in schedule
        ]
    }


# ✅ [READ] 학생의 예정된 시험
@router.get("/student/{student_id}")
def read_student_exams(student_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": [_serialize(e) for e in exam_service.get_student_exams(db, student_id)]}


# ✅ [READ] 강좌의 시험 목록
@router.get("/class/{class_id}")
def read_class_exams(class_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": [_serialize(e) for e in exam_service.get_class_exams(db, class_id)]}


# ✅ [CHECK] 학생 시험 시간 중복 미리 확인
@router.post("/check-conflicts")
def check_conflicts(body: ConflictCheckRequest, db: Session = Depends(get_db)):
    conflicts = exam_service.check_conflicts(db, body.class_id, body.date, body.start_time, body.end_time)
    return {
        "success": True,
        "data": {"has_conflicts": bool(conflicts), "conflicts": _conflicts(conflicts)}
    }


# ==========================================================
# [3단계] 단건 관리 / 상태 전이
# ==========================================================

# ✅ [READ] 시험 상세
@router.get("/{exam_id}")
def read_exam(exam_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": _serialize(exam_service.get_exam(db, exam_id))}


# ✅ [UPDATE] 일정 변경 (상태 변경 불가)
@router.put("/{exam_id}")
def update_exam(
    exam_id: int,
    patch: ExamUpdate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    exam = exam_service.update_exam(db, exam_id, patch, user_id)
    return {"success": True, "data": _serialize(exam), "message": "Exam updated successfully"}


# ✅ [DELETE] 시험 삭제 (완료된 시험은 불가)
@router.delete("/{exam_id}")
def delete_exam(
    exam_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    exam_service.delete_exam(db, exam_id, user_id)
    return {"success": True, "data": {"exam_id": exam_id}, "message": "Exam deleted successfully"}


# ✅ [CANCEL] 시험 취소 (SCHEDULED 상태만)
@router.post("/{exam_id}/cancel")
def cancel_exam(
    exam_id: int,
    body: ExamCancel,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    exam = exam_service.cancel_exam(db, exam_id, body.reason, user_id)
    return {"success": True, "data": _serialize(exam), "message": "Exam cancelled successfully"}


# ✅ [COMPLETE] 시험 완료 처리 (SCHEDULED 상태만)
@router.post("/{exam_id}/complete")
def complete_exam(
    exam_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    exam = exam_service.complete_exam(db, exam_id, user_id)
    return {"success": True, "data": _serialize(exam), "message": "Exam marked as completed"}
