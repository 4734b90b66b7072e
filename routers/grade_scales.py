from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.grade_scales import GradeScale as GradeScaleSchema, GradeScaleCreate, GradeScaleUpdate, LetterGrade
from services import grade_config_service

router = APIRouter(prefix="/grade-scales", tags=["grade-scales"], responses=COMMON_ERROR_RESPONSES)


def _serialize(scale) -> dict:
    return GradeScaleSchema.model_validate(scale).model_dump()


# ==========================================================
# [1단계] 정적 경로 (/{scale_id} 보다 먼저 등록)
# ==========================================================

# ✅ [READ] 등급 체계 목록
@router.get("/")
def read_scales(db: Session = Depends(get_db)):
    return {"success": True, "data": [_serialize(s) for s in grade_config_service.list_scales(db)]}


# ✅ [READ] 기본 등급 체계 (없으면 표준 체계 자동 생성)
@router.get("/default")
def read_default_scale(db: Session = Depends(get_db)):
    return {"success": True, "data": _serialize(grade_config_service.get_default_scale(db))}


# ✅ [CALC] 백분율 → 등급 변환
@router.get("/calculate")
def calculate_letter_grade(
    percentage: float = Query(..., ge=0, le=100, description="0~100 백분율"),
    scale_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    grade = grade_config_service.calculate_letter_grade(db, percentage, scale_id)
    return {"success": True, "data": {"percentage": percentage, **LetterGrade(**grade).model_dump()}}


# ✅ [CREATE] 등급 체계 추가
@router.post("/", status_code=201)
def create_scale(
    scale: GradeScaleCreate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    created = grade_config_service.create_scale(db, scale, user_id)
    return {"success": True, "data": _serialize(created), "message": "Grade scale created successfully"}


# ==========================================================
# [2단계] 단건 관리
# ==========================================================

# ✅ [READ] 등급 체계 상세
@router.get("/{scale_id}")
def read_scale(scale_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": _serialize(grade_config_service.get_scale(db, scale_id))}


# ✅ [UPDATE] 이름 변경 / 등급 정의 교체
@router.put("/{scale_id}")
def update_scale(
    scale_id: int,
    patch: GradeScaleUpdate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    updated = grade_config_service.update_scale(db, scale_id, patch, user_id)
    return {"success": True, "data": _serialize(updated), "message": "Grade scale updated successfully"}


# ✅ [DELETE] 등급 체계 삭제 (기본 체계는 불가)
@router.delete("/{scale_id}")
def delete_scale(
    scale_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    grade_config_service.delete_scale(db, scale_id, user_id)
    return {"success": True, "data": {"scale_id": scale_id}, "message": "Grade scale deleted successfully"}


# ✅ [UPDATE] 기본 등급 체계 지정
@router.post("/{scale_id}/default")
def set_default_scale(
    scale_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    scale = grade_config_service.set_default_scale(db, scale_id, user_id)
    return {"success": True, "data": _serialize(scale), "message": f"'{scale.name}' is now the default grade scale"}
