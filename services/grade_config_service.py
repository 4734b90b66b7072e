"""
services/grade_config_service.py

- 등급 체계(GradeScale)와 등급 정의(GradeDefinition) 관리
- 백분율 → 등급/평점 변환
"""

import logging
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from models.enums import AuditAction
from models.grade_scales import GradeDefinition as GradeDefinitionModel
from models.grade_scales import GradeScale as GradeScaleModel
from schemas.grade_scales import GradeDefinitionInput, GradeScaleCreate, GradeScaleUpdate
from services import audit_service
from utils.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SCALE_NAME = "Standard Scale"

# ✅ 기본 등급 체계: 경계값을 공유하는 연속 구간 (경계값은 상위 등급)
DEFAULT_GRADE_SCALE = [
    {"letter": "A+", "min_percentage": 95, "max_percentage": 100, "grade_points": 4.0, "description": "Exceptional"},
    {"letter": "A", "min_percentage": 90, "max_percentage": 95, "grade_points": 4.0, "description": "Excellent"},
    {"letter": "A-", "min_percentage": 87, "max_percentage": 90, "grade_points": 3.7, "description": "Very Good"},
    {"letter": "B+", "min_percentage": 83, "max_percentage": 87, "grade_points": 3.3, "description": "Good"},
    {"letter": "B", "min_percentage": 80, "max_percentage": 83, "grade_points": 3.0, "description": "Above Average"},
    {"letter": "B-", "min_percentage": 77, "max_percentage": 80, "grade_points": 2.7, "description": "Average"},
    {"letter": "C+", "min_percentage": 73, "max_percentage": 77, "grade_points": 2.3, "description": "Below Average"},
    {"letter": "C", "min_percentage": 70, "max_percentage": 73, "grade_points": 2.0, "description": "Satisfactory"},
    {"letter": "C-", "min_percentage": 67, "max_percentage": 70, "grade_points": 1.7, "description": "Pass"},
    {"letter": "D+", "min_percentage": 63, "max_percentage": 67, "grade_points": 1.3, "description": "Marginal Pass"},
    {"letter": "D", "min_percentage": 60, "max_percentage": 63, "grade_points": 1.0, "description": "Minimum Pass"},
    {"letter": "F", "min_percentage": 0, "max_percentage": 60, "grade_points": 0.0, "description": "Fail"},
]

FAILING_GRADE = {"letter": "F", "grade_points": 0.0, "description": "Fail"}

# 경계 비교 허용 오차
_EPS = 1e-9


# ==========================================================
# [등급 변환]
# ==========================================================

def letter_for_percentage(percentage: float, definitions: Iterable[Any]) -> dict[str, Any]:
    """
    백분율에 해당하는 등급 정의를 찾음
    - 하한이 높은 정의부터 [min, max] 포함 여부 검사 → 경계값은 상위 등급
    - 어느 구간에도 없으면 가장 낮은 구간의 등급을 하한선으로 사용
    - 정의가 하나도 없으면 F / 0.0
    """
    ordered = sorted(definitions, key=lambda d: d.min_percentage, reverse=True)
    if not ordered:
        return dict(FAILING_GRADE)

    for definition in ordered:
        if definition.min_percentage - _EPS <= percentage <= definition.max_percentage + _EPS:
            return _as_result(definition)

    return _as_result(ordered[-1])


def _as_result(definition) -> dict[str, Any]:
    return {
        "letter": definition.letter,
        "grade_points": float(definition.grade_points),
        "description": definition.description,
    }


def validate_definitions(definitions: Sequence[GradeDefinitionInput]) -> None:
    """등급 구간이 0~100을 빈틈/겹침 없이 덮는지, 평점이 구간 순서대로 증가하는지 검사"""
    if not definitions:
        raise ValidationError("At least one grade definition is required")

    letters = [d.letter for d in definitions]
    if len(set(letters)) != len(letters):
        raise ValidationError("Grade letters must be unique within a scale")

    ordered = sorted(definitions, key=lambda d: d.min_percentage)
    for d in ordered:
        if d.min_percentage >= d.max_percentage:
            raise ValidationError(f"Grade {d.letter}: min_percentage must be less than max_percentage")

    if abs(ordered[0].min_percentage - 0) > _EPS:
        raise ValidationError("Grade ranges must start at 0")
    if abs(ordered[-1].max_percentage - 100) > _EPS:
        raise ValidationError("Grade ranges must end at 100")

    for lower, upper in zip(ordered, ordered[1:]):
        if upper.min_percentage < lower.max_percentage - _EPS:
            raise ValidationError(f"Grade ranges {lower.letter} and {upper.letter} overlap")
        if upper.min_percentage > lower.max_percentage + _EPS:
            raise ValidationError(f"Gap between grade ranges {lower.letter} and {upper.letter}")
        if upper.grade_points < lower.grade_points:
            raise ValidationError(
                f"Grade points must not decrease as percentage increases ({lower.letter} > {upper.letter})"
            )


# ==========================================================
# [등급 체계 CRUD]
# ==========================================================

def list_scales(db: Session) -> list[GradeScaleModel]:
    return db.query(GradeScaleModel).order_by(GradeScaleModel.name.asc()).all()


def get_scale(db: Session, scale_id: int) -> GradeScaleModel:
    scale = db.query(GradeScaleModel).filter(GradeScaleModel.id == scale_id).first()
    if scale is None:
        raise NotFoundError("Grade scale not found")
    return scale


def get_default_scale(db: Session) -> GradeScaleModel:
    scale = db.query(GradeScaleModel).filter(GradeScaleModel.is_default.is_(True)).first()

    # 기본 체계가 없으면 표준 체계를 만들어 사용
    if scale is None:
        logger.info("기본 등급 체계가 없어 표준 체계를 생성합니다")
        scale = create_scale(
            db,
            GradeScaleCreate(
                name=DEFAULT_SCALE_NAME,
                is_default=True,
                grades=[GradeDefinitionInput(**g) for g in DEFAULT_GRADE_SCALE],
            ),
        )
    return scale


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None):
    query = db.query(GradeScaleModel).filter(GradeScaleModel.name == name)
    if exclude_id is not None:
        query = query.filter(GradeScaleModel.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Grade scale '{name}' already exists")


def _build_definitions(grades: Sequence[GradeDefinitionInput]) -> list[GradeDefinitionModel]:
    return [
        GradeDefinitionModel(
            letter=g.letter,
            min_percentage=g.min_percentage,
            max_percentage=g.max_percentage,
            grade_points=g.grade_points,
            description=g.description,
        )
        for g in grades
    ]


def _unset_default(db: Session):
    db.query(GradeScaleModel).filter(GradeScaleModel.is_default.is_(True)).update(
        {GradeScaleModel.is_default: False}, synchronize_session="fetch"
    )


def create_scale(db: Session, data: GradeScaleCreate, user_id: Optional[int] = None) -> GradeScaleModel:
    validate_definitions(data.grades)
    _ensure_unique_name(db, data.name)

    if data.is_default:
        _unset_default(db)

    scale = GradeScaleModel(name=data.name, is_default=data.is_default, grades=_build_definitions(data.grades))
    db.add(scale)
    db.commit()
    db.refresh(scale)

    audit_service.log(
        db, AuditAction.CREATE, "GradeScale", scale.id, user_id,
        new_values={"name": data.name, "is_default": data.is_default, "grades_count": len(data.grades)},
    )
    return scale


def update_scale(db: Session, scale_id: int, data: GradeScaleUpdate, user_id: Optional[int] = None) -> GradeScaleModel:
    scale = get_scale(db, scale_id)
    old_name = scale.name

    if data.name:
        _ensure_unique_name(db, data.name, exclude_id=scale.id)
        scale.name = data.name

    # 등급 정의가 오면 통째로 교체
    if data.grades is not None:
        validate_definitions(data.grades)
        scale.grades = _build_definitions(data.grades)

    db.commit()
    db.refresh(scale)

    audit_service.log(
        db, AuditAction.UPDATE, "GradeScale", scale.id, user_id,
        old_values={"name": old_name}, new_values=data.model_dump(exclude_unset=True),
    )
    return scale


def delete_scale(db: Session, scale_id: int, user_id: Optional[int] = None) -> None:
    scale = get_scale(db, scale_id)
    if scale.is_default:
        raise ValidationError("Cannot delete the default grade scale")

    name = scale.name
    db.delete(scale)
    db.commit()
    audit_service.log(db, AuditAction.DELETE, "GradeScale", scale_id, user_id, old_values={"name": name})


def set_default_scale(db: Session, scale_id: int, user_id: Optional[int] = None) -> GradeScaleModel:
    scale = get_scale(db, scale_id)
    _unset_default(db)
    scale.is_default = True
    db.commit()
    db.refresh(scale)

    audit_service.log(db, AuditAction.UPDATE, "GradeScale", scale.id, user_id, new_values={"is_default": True})
    return scale


def calculate_letter_grade(db: Session, percentage: float, scale_id: Optional[int] = None) -> dict[str, Any]:
    scale = get_scale(db, scale_id) if scale_id is not None else get_default_scale(db)
    return letter_for_percentage(percentage, scale.grades)
