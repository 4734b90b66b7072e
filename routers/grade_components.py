from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.grade_components import (
    CopyComponentsRequest,
    GradeComponent as GradeComponentSchema,
    GradeComponentCreate,
    GradeComponentUpdate,
    WeightValidation,
)
from services import grade_component_service

router = APIRouter(tags=["grade-components"], responses=COMMON_ERROR_RESPONSES)


def _serialize(component) -> dict:
    return GradeComponentSchema.model_validate(component).model_dump()


# ==========================================================
# [1단계] 강좌별 구성요소
# ==========================================================

# ✅ [READ] 강좌의 성적 구성요소 목록
@router.get("/classes/{class_id}/components")
def read_class_components(class_id: int, db: Session = Depends(get_db)):
    components = grade_component_service.get_class_components(db, class_id)
    return {"success": True, "data": [_serialize(c) for c in components]}


# ✅ [CREATE] 성적 구성요소 추가 (가중치 합 100 초과 불가)
@router.post("/classes/{class_id}/components", status_code=201)
def create_component(
    class_id: int,
    component: GradeComponentCreate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    created = grade_component_service.create_component(db, class_id, component, user_id)
    return {"success": True, "data": _serialize(created), "message": "Grade component created successfully"}


# ✅ [CHECK] 가중치 합이 100인지 검사
@router.get("/classes/{class_id}/components/validate-weights")
def validate_weights(class_id: int, db: Session = Depends(get_db)):
    result = grade_component_service.validate_weights(db, class_id)
    return {"success": True, "data": WeightValidation(**result).model_dump()}


# ==========================================================
# [2단계] 구성요소 단건 관리
# ==========================================================

# ✅ [COPY] 다른 강좌의 구성요소 복사 (같은 교과목 다른 학기 등)
@router.post("/grade-components/copy", status_code=201)
def copy_components(
    body: CopyComponentsRequest,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    copied = grade_component_service.copy_components(db, body.source_class_id, body.target_class_id, user_id)
    return {
        "success": True,
        "data": [_serialize(c) for c in copied],
        "message": f"{len(copied)} grade components copied successfully"
    }


# ✅ [READ] 구성요소 상세
@router.get("/grade-components/{component_id}")
def read_component(component_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": _serialize(grade_component_service.get_component(db, component_id))}


# ✅ [UPDATE] 구성요소 수정 (보낸 필드만)
@router.put("/grade-components/{component_id}")
def update_component(
    component_id: int,
    patch: GradeComponentUpdate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    updated = grade_component_service.update_component(db, component_id, patch, user_id)
    return {"success": True, "data": _serialize(updated), "message": "Grade component updated successfully"}


# ✅ [DELETE] 구성요소 삭제 (입력된 점수가 있으면 409)
@router.delete("/grade-components/{component_id}")
def delete_component(
    component_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    grade_component_service.delete_component(db, component_id, user_id)
    return {
        "success": True,
        "data": {"component_id": component_id},
        "message": "Grade component deleted successfully"
    }


# ✅ [PUBLISH] 학생 공개
@router.post("/grade-components/{component_id}/publish")
def publish_component(
    component_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    component = grade_component_service.publish_component(db, component_id, user_id)
    return {"success": True, "data": _serialize(component), "message": "Grade component published"}


# ✅ [UNPUBLISH] 학생 비공개
@router.post("/grade-components/{component_id}/unpublish")
def unpublish_component(
    component_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id),
):
    component = grade_component_service.unpublish_component(db, component_id, user_id)
    return {"success": True, "data": _serialize(component), "message": "Grade component unpublished"}
