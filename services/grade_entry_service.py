import logging
from datetime import datetime, timezone
from statistics import median
from typing import Any, Optional, Sequence

from sqlalchemy.orm import Session

from models.enrollments import Enrollment as EnrollmentModel
from models.enums import AuditAction, EnrollmentStatus
from models.grade_entries import GradeEntry as GradeEntryModel
from schemas.grade_entries import GradeEntryInput
from services import audit_service
from services.grade_component_service import get_component
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _check_score(score: float, max_score: float, enrollment_id: Optional[int] = None):
    if score < 0 or score > max_score:
        target = f" for enrollment {enrollment_id}" if enrollment_id is not None else ""
        raise ValidationError(f"Invalid score{target}. Score must be between 0 and {max_score:g}")


def enter_grades(
    db: Session, component_id: int, grades: Sequence[GradeEntryInput], user_id: Optional[int] = None
) -> dict[str, Any]:
    """
    구성요소 점수 일괄 입력 (있으면 수정, 없으면 생성)
    - 확정된 수강이 하나라도 포함되면 전체 거부
    - 점수 범위는 쓰기 전에 전체 검사
    - 해당 강좌에 REGISTERED 상태가 아닌 수강은 건너뜀
    """
    component = get_component(db, component_id)
    enrollment_ids = [g.enrollment_id for g in grades]

    finalized = (
        db.query(EnrollmentModel.id)
        .filter(
            EnrollmentModel.class_id == component.class_id,
            EnrollmentModel.is_finalized.is_(True),
            EnrollmentModel.id.in_(enrollment_ids),
        )
        .count()
    )
    if finalized:
        raise ValidationError("Cannot modify grades for finalized enrollments")

    for g in grades:
        _check_score(g.score, component.max_score, g.enrollment_id)

    registered = {
        e.id
        for e in db.query(EnrollmentModel).filter(
            EnrollmentModel.class_id == component.class_id,
            EnrollmentModel.status == EnrollmentStatus.REGISTERED.value,
            EnrollmentModel.id.in_(enrollment_ids),
        )
    }
    existing = {
        e.enrollment_id: e
        for e in db.query(GradeEntryModel).filter(
            GradeEntryModel.component_id == component_id,
            GradeEntryModel.enrollment_id.in_(enrollment_ids),
        )
    }

    saved, skipped = [], []
    now = datetime.now(timezone.utc)
    for g in grades:
        if g.enrollment_id not in registered:
            skipped.append(g.enrollment_id)
            continue

        entry = existing.get(g.enrollment_id)
        if entry is None:
            entry = GradeEntryModel(
                component_id=component_id,
                enrollment_id=g.enrollment_id,
                score=g.score,
                remarks=g.remarks,
                entered_by_id=user_id,
            )
            db.add(entry)
            existing[g.enrollment_id] = entry
        else:
            entry.score = g.score
            entry.remarks = g.remarks
            entry.modified_by_id = user_id
            entry.modified_at = now
        if entry not in saved:
            saved.append(entry)

    db.commit()
    for entry in saved:
        db.refresh(entry)

    if skipped:
        logger.warning(f"점수 입력 제외 (강좌 미등록 수강): component_id={component_id}, enrollment_ids={skipped}")
    logger.info(f"점수 입력 완료: component_id={component_id}, saved={len(saved)}")

    audit_service.log(
        db, AuditAction.CREATE, "GradeEntry", component_id, user_id,
        new_values={"component_id": component_id, "entries_count": len(saved)},
    )
    return {"entries": saved, "skipped": skipped}


def calculate_statistics(scores: Sequence[float], max_score: float) -> dict[str, float]:
    if not scores:
        return {"count": 0, "average": 0.0, "highest": 0.0, "lowest": 0.0, "median": 0.0, "max_score": max_score}

    return {
        "count": len(scores),
        "average": round(sum(scores) / len(scores), 2),
        "highest": max(scores),
        "lowest": min(scores),
        "median": float(median(scores)),
        "max_score": max_score,
    }


def get_component_grades(db: Session, component_id: int) -> dict[str, Any]:
    component = get_component(db, component_id)
    entries = (
        db.query(GradeEntryModel)
        .filter(GradeEntryModel.component_id == component_id)
        .order_by(GradeEntryModel.enrollment_id.asc())
        .all()
    )
    graded = {e.enrollment_id for e in entries}

    without_grades = [
        e.id
        for e in db.query(EnrollmentModel)
        .filter(
            EnrollmentModel.class_id == component.class_id,
            EnrollmentModel.status == EnrollmentStatus.REGISTERED.value,
        )
        .order_by(EnrollmentModel.id.asc())
        if e.id not in graded
    ]

    return {
        "component": component,
        "entries": entries,
        "enrolled_without_grades": without_grades,
        "statistics": calculate_statistics([e.score for e in entries], component.max_score),
    }


def get_enrollment_entries(db: Session, enrollment_id: int) -> list[GradeEntryModel]:
    enrollment = db.query(EnrollmentModel).filter(EnrollmentModel.id == enrollment_id).first()
    if enrollment is None:
        raise NotFoundError("Enrollment not found")
    return (
        db.query(GradeEntryModel)
        .filter(GradeEntryModel.enrollment_id == enrollment_id)
        .order_by(GradeEntryModel.component_id.asc())
        .all()
    )


def _get_entry(db: Session, entry_id: int) -> GradeEntryModel:
    entry = db.query(GradeEntryModel).filter(GradeEntryModel.id == entry_id).first()
    if entry is None:
        raise NotFoundError("Grade entry not found")
    return entry


def update_grade(
    db: Session, entry_id: int, score: float, remarks: Optional[str], user_id: Optional[int] = None
) -> GradeEntryModel:
    entry = _get_entry(db, entry_id)
    if entry.enrollment.is_finalized:
        raise ValidationError("Cannot modify grades for finalized enrollment")
    _check_score(score, entry.component.max_score)

    old_score = entry.score
    entry.score = score
    entry.remarks = remarks
    entry.modified_by_id = user_id
    entry.modified_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(entry)

    audit_service.log(
        db, AuditAction.UPDATE, "GradeEntry", entry.id, user_id,
        old_values={"score": old_score}, new_values={"score": score},
    )
    return entry


def delete_grade(db: Session, entry_id: int, user_id: Optional[int] = None) -> None:
    entry = _get_entry(db, entry_id)
    if entry.enrollment.is_finalized:
        raise ValidationError("Cannot delete grades for finalized enrollment")

    old_values = {"score": entry.score, "enrollment_id": entry.enrollment_id}
    db.delete(entry)
    db.commit()
    audit_service.log(db, AuditAction.DELETE, "GradeEntry", entry_id, user_id, old_values=old_values)
