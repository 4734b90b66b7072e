"""
services/grade_component_service.py

- 강좌별 성적 구성요소(중간/기말/과제 ...) 등록/수정/삭제
- 불변식: 한 강좌의 구성요소 가중치 합은 100을 넘을 수 없음
- 검증 실패 시 DB에는 아무것도 쓰지 않음
"""

import logging
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.classes import Class as ClassModel
from models.enums import AuditAction
from models.grade_components import GradeComponent as GradeComponentModel
from models.grade_entries import GradeEntry as GradeEntryModel
from schemas.grade_components import GradeComponentCreate, GradeComponentUpdate
from services import audit_service
from utils.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_TOTAL_WEIGHT = 100
# 가중치 합이 정확히 100인지 판정할 때의 허용 오차 (부동소수점)
WEIGHT_TOLERANCE = 0.01


def _get_class(db: Session, class_id: int) -> ClassModel:
    class_obj = db.query(ClassModel).filter(ClassModel.id == class_id).first()
    if class_obj is None:
        raise NotFoundError("Class not found")
    return class_obj


def _total_weight(db: Session, class_id: int, exclude_id: Optional[int] = None) -> float:
    query = db.query(func.coalesce(func.sum(GradeComponentModel.weight), 0.0)).filter(
        GradeComponentModel.class_id == class_id
    )
    if exclude_id is not None:
        query = query.filter(GradeComponentModel.id != exclude_id)
    return float(query.scalar() or 0.0)


def _exceeds_limit(current_total: float, weight: float) -> bool:
    # 33.33 + 33.33 + 33.34 같은 합산 오차로 100.00000000001 이 되는 경우 방지
    return round(current_total + weight, 6) > MAX_TOTAL_WEIGHT


def _entry_count(db: Session, component_id: int) -> int:
    return db.query(func.count(GradeEntryModel.id)).filter(GradeEntryModel.component_id == component_id).scalar()


def _ensure_unique_name(db: Session, class_id: int, name: str, exclude_id: Optional[int] = None):
    query = db.query(GradeComponentModel).filter(
        GradeComponentModel.class_id == class_id,
        func.lower(GradeComponentModel.name) == name.strip().lower(),
    )
    if exclude_id is not None:
        query = query.filter(GradeComponentModel.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"A grade component named '{name}' already exists in this class")


# ==========================================================
# [조회]
# ==========================================================

def get_class_components(db: Session, class_id: int) -> list[GradeComponentModel]:
    _get_class(db, class_id)
    return (
        db.query(GradeComponentModel)
        .filter(GradeComponentModel.class_id == class_id)
        .order_by(GradeComponentModel.created_at.asc(), GradeComponentModel.id.asc())
        .all()
    )


def get_component(db: Session, component_id: int) -> GradeComponentModel:
    component = db.query(GradeComponentModel).filter(GradeComponentModel.id == component_id).first()
    if component is None:
        raise NotFoundError("Grade component not found")
    return component


# ==========================================================
# [생성/수정/삭제]
# ==========================================================

def create_component(
    db: Session, class_id: int, data: GradeComponentCreate, user_id: Optional[int] = None
) -> GradeComponentModel:
    _get_class(db, class_id)
    _ensure_unique_name(db, class_id, data.name)

    total = _total_weight(db, class_id)
    if _exceeds_limit(total, data.weight):
        raise ValidationError(
            f"Total weight would exceed 100%. Current total: {total:g}%, requested: {data.weight:g}%"
        )

    component = GradeComponentModel(
        class_id=class_id,
        name=data.name.strip(),
        type=data.type.value,
        weight=data.weight,
        max_score=data.max_score,
        due_date=data.due_date,
        is_published=False,
    )
    db.add(component)
    db.commit()
    db.refresh(component)

    logger.info(f"성적 구성요소 생성: class_id={class_id}, component_id={component.id}, weight={component.weight}")
    audit_service.log(
        db, AuditAction.CREATE, "GradeComponent", component.id, user_id,
        new_values={**data.model_dump(), "class_id": class_id},
    )
    return component


def update_component(
    db: Session, component_id: int, patch: GradeComponentUpdate, user_id: Optional[int] = None
) -> GradeComponentModel:
    component = get_component(db, component_id)
    changes: dict[str, Any] = patch.model_dump(exclude_unset=True)

    # ✅ 가중치 변경: 자기 자신을 제외한 합계 + 새 가중치 ≤ 100
    if changes.get("weight") is not None:
        others = _total_weight(db, component.class_id, exclude_id=component.id)
        if _exceeds_limit(others, changes["weight"]):
            raise ValidationError(
                f"Total weight would exceed 100%. Other components: {others:g}%, requested: {changes['weight']:g}%"
            )

    # ✅ 점수가 입력된 뒤에는 만점 변경 불가
    if changes.get("max_score") is not None and changes["max_score"] != component.max_score:
        if _entry_count(db, component.id) > 0:
            raise ConflictError("Cannot change max score when grades have been entered. Delete entries first.")

    if changes.get("name") is not None:
        _ensure_unique_name(db, component.class_id, changes["name"], exclude_id=component.id)
        changes["name"] = changes["name"].strip()

    old_values = {"name": component.name, "weight": component.weight, "max_score": component.max_score}

    for key, value in changes.items():
        # None 으로 비울 수 있는 건 마감일뿐
        if value is None and key != "due_date":
            continue
        if key == "type":
            value = value.value
        setattr(component, key, value)

    db.commit()
    db.refresh(component)

    audit_service.log(
        db, AuditAction.UPDATE, "GradeComponent", component.id, user_id,
        old_values=old_values, new_values=changes,
    )
    return component


def delete_component(db: Session, component_id: int, user_id: Optional[int] = None) -> None:
    component = get_component(db, component_id)

    if _entry_count(db, component.id) > 0:
        raise ConflictError("Cannot delete component with existing grade entries. Delete entries first.")

    old_values = {"name": component.name, "class_id": component.class_id}
    db.delete(component)
    db.commit()

    logger.info(f"성적 구성요소 삭제: component_id={component_id}")
    audit_service.log(db, AuditAction.DELETE, "GradeComponent", component_id, user_id, old_values=old_values)


def validate_weights(db: Session, class_id: int) -> dict[str, Any]:
    components = get_class_components(db, class_id)
    total = sum(c.weight for c in components)

    return {
        "valid": abs(total - MAX_TOTAL_WEIGHT) < WEIGHT_TOLERANCE,
        "total": round(total, 4),
        "components": [{"id": c.id, "name": c.name, "weight": c.weight} for c in components],
    }


def copy_components(
    db: Session, source_class_id: int, target_class_id: int, user_id: Optional[int] = None
) -> list[GradeComponentModel]:
    source_components = get_class_components(db, source_class_id)
    if not source_components:
        raise ValidationError("Source class has no grade components")

    _get_class(db, target_class_id)
    existing = db.query(func.count(GradeComponentModel.id)).filter(
        GradeComponentModel.class_id == target_class_id
    ).scalar()
    if existing:
        raise ValidationError("Target class already has grade components")

    for c in source_components:
        db.add(GradeComponentModel(
            class_id=target_class_id,
            name=c.name,
            type=c.type,
            weight=c.weight,
            max_score=c.max_score,
            due_date=c.due_date,
            is_published=False,   # 복사본은 항상 비공개로 시작
        ))
    db.commit()

    logger.info(f"성적 구성요소 복사: {source_class_id} → {target_class_id} ({len(source_components)}개)")
    audit_service.log(
        db, AuditAction.CREATE, "GradeComponent", target_class_id, user_id,
        new_values={
            "source_class_id": source_class_id,
            "target_class_id": target_class_id,
            "components_count": len(source_components),
        },
    )
    return get_class_components(db, target_class_id)


def _set_published(db: Session, component_id: int, published: bool, user_id: Optional[int]) -> GradeComponentModel:
    component = get_component(db, component_id)
    component.is_published = published
    db.commit()
    db.refresh(component)

    audit_service.log(
        db, AuditAction.UPDATE, "GradeComponent", component.id, user_id,
        new_values={"is_published": published},
    )
    return component


def publish_component(db: Session, component_id: int, user_id: Optional[int] = None) -> GradeComponentModel:
    return _set_published(db, component_id, True, user_id)


def unpublish_component(db: Session, component_id: int, user_id: Optional[int] = None) -> GradeComponentModel:
    return _set_published(db, component_id, False, user_id)
