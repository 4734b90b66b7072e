from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.grade_components import GradeComponent as GradeComponentSchema
from schemas.grade_entries import EnterGradesRequest, GradeEntry as GradeEntrySchema, GradeEntryUpdate, GradeStatistics
from services import grade_entry_service

router = APIRouter(tags=["grade-entries"], responses=COMMON_ERROR_RESPONSES)


def _serialize(entry) -> dict:
    return GradeEntrySchema.model_validate(entry).model_dump()


# ==========================================================
# [1단계] 구성요소 단위 점수 입력/조회
# ==========================================================

# ✅ [UPSERT] 점수 일괄 입력 (기존 점수는 수정)
@router.post("/grade-components/{component_id}/grades")
def enter_grades(
    component_id: int,
    body: EnterGradesRequest,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    result = grade_entry_service.enter_grades(db, component_id, body.grades, user_id)
    return {
        "success": True,
        "data": {
            "entries": [_serialize(e) for e in result["entries"]],
            "skipped": result["skipped"],
        },
        "message": f"{len(result['entries'])} grades saved"
    }


# ✅ [READ] 구성요소 점수 목록 + 통계 + 미입력 수강생
@router.get("/grade-components/{component_id}/grades")
def read_component_grades(component_id: int, db: Session = Depends(get_db)):
    result = grade_entry_service.get_component_grades(db, component_id)
    return {
        "success": True,
        "data": {
            "component": GradeComponentSchema.model_validate(result["component"]).model_dump(),
            "entries": [_serialize(e) for e in result["entries"]],
            "enrolled_without_grades": result["enrolled_without_grades"],
            "statistics": GradeStatistics(**result["statistics"]).model_dump(),
        }
    }


# ✅ [READ] 수강 1건의 원점수 목록
@router.get("/enrollments/{enrollment_id}/entries")
def read_enrollment_entries(enrollment_id: int, db: Session = Depends(get_db)):
    entries = grade_entry_service.get_enrollment_entries(db, enrollment_id)
    return {"success": True, "data": [_serialize(e) for e in entries]}


# ==========================================================
# [2단계] 점수 단건 수정/삭제
# ==========================================================

# ✅ [UPDATE] 점수 수정 (확정된 수강은 불가)
@router.put("/grade-entries/{entry_id}")
def update_grade(
    entry_id: int,
    body: GradeEntryUpdate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    entry = grade_entry_service.update_grade(db, entry_id, body.score, body.remarks, user_id)
    return {"success": True, "data": _serialize(entry), "message": "Grade updated successfully"}


# ✅ [DELETE] 점수 삭제
@router.delete("/grade-entries/{entry_id}")
def delete_grade(
    entry_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    grade_entry_service.delete_grade(db, entry_id, user_id)
    return {"success": True, "data": {"entry_id": entry_id}, "message": "Grade deleted successfully"}
