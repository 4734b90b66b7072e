"""
services/grade_calculation_service.py

- 구성요소 점수 → 가중 백분율 → 등급/평점 변환
- 강좌 성적 확정(finalize) / 확정 취소(unfinalize)
- 학기 평점(GPA), 누적 평점, 성적증명서

계산 규칙
- 점수가 입력된 구성요소만 합산: weighted = score / max_score * weight
- 미입력 구성요소는 0점이 아니라 계산에서 제외 (입력된 가중치로 재정규화하지 않음)
- GPA = Σ(평점 × 학점) / Σ학점, 확정된 수강만 포함
"""

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from models.classes import Class as ClassModel
from models.enrollments import Enrollment as EnrollmentModel
from models.enums import AuditAction, EnrollmentStatus
from models.grade_components import GradeComponent as GradeComponentModel
from models.grade_entries import GradeEntry as GradeEntryModel
from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel
from services import audit_service
from services.grade_config_service import get_default_scale, get_scale, letter_for_percentage
from utils.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# GPA 계산에 포함되는 수강 상태
GPA_STATUSES = (EnrollmentStatus.REGISTERED.value, EnrollmentStatus.COMPLETED.value)


def _round2(value: float) -> float:
    return round(value, 2)


# ==========================================================
# [순수 계산]
# ==========================================================

def weighted_score(score: float, max_score: float, weight: float) -> float:
    if max_score <= 0:
        return 0.0
    return (score / max_score) * weight


def compute_component_scores(
    components: Iterable[GradeComponentModel], entries: Iterable[GradeEntryModel]
) -> list[dict[str, Any]]:
    by_component = {e.component_id: e for e in entries}
    scores = []
    for component in components:
        entry = by_component.get(component.id)
        if entry is None:
            continue

        percentage = (entry.score / component.max_score) * 100 if component.max_score > 0 else 0.0
        scores.append({
            "component_id": component.id,
            "component_name": component.name,
            "score": entry.score,
            "max_score": component.max_score,
            "weight": component.weight,
            "weighted_score": weighted_score(entry.score, component.max_score, component.weight),
            "percentage": _round2(percentage),
        })
    return scores


def total_percentage(component_scores: Iterable[dict[str, Any]]) -> float:
    return _round2(sum(c["weighted_score"] for c in component_scores))


def compute_gpa(courses: Iterable[tuple[float, int]]) -> dict[str, float]:
    """(평점, 학점) 목록 → {gpa, credits, points}"""
    total_points = 0.0
    total_credits = 0
    for grade_points, credits in courses:
        total_points += (grade_points or 0.0) * credits
        total_credits += credits

    return {
        "gpa": _round2(total_points / total_credits) if total_credits > 0 else 0.0,
        "credits": total_credits,
        "points": _round2(total_points),
    }


# ==========================================================
# [조회 헬퍼]
# ==========================================================

def _get_enrollment(db: Session, enrollment_id: int) -> EnrollmentModel:
    enrollment = db.query(EnrollmentModel).filter(EnrollmentModel.id == enrollment_id).first()
    if enrollment is None:
        raise NotFoundError("Enrollment not found")
    return enrollment


def _get_class(db: Session, class_id: int) -> ClassModel:
    class_obj = db.query(ClassModel).filter(ClassModel.id == class_id).first()
    if class_obj is None:
        raise NotFoundError("Class not found")
    return class_obj


def _get_student(db: Session, student_id: int) -> StudentModel:
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        raise NotFoundError("Student not found")
    return student


def _finalized_enrollments(db: Session, student_id: int, semester_id: Optional[int] = None):
    query = (
        db.query(EnrollmentModel)
        .filter(
            EnrollmentModel.student_id == student_id,
            EnrollmentModel.status.in_(GPA_STATUSES),
            EnrollmentModel.is_finalized.is_(True),
            EnrollmentModel.final_grade.isnot(None),
        )
    )
    if semester_id is not None:
        query = query.filter(EnrollmentModel.semester_id == semester_id)
    return query.all()


# ==========================================================
# [성적 계산]
# ==========================================================

def calculate_final_grade(db: Session, enrollment_id: int, scale_id: Optional[int] = None) -> dict[str, Any]:
    enrollment = _get_enrollment(db, enrollment_id)
    scale = get_scale(db, scale_id) if scale_id is not None else get_default_scale(db)

    components = (
        db.query(GradeComponentModel)
        .filter(GradeComponentModel.class_id == enrollment.class_id)
        .order_by(GradeComponentModel.created_at.asc(), GradeComponentModel.id.asc())
        .all()
    )
    entries = db.query(GradeEntryModel).filter(GradeEntryModel.enrollment_id == enrollment.id).all()

    component_scores = compute_component_scores(components, entries)
    percentage = total_percentage(component_scores)
    grade = letter_for_percentage(percentage, scale.grades)

    return {
        "enrollment_id": enrollment.id,
        "student_id": enrollment.student_id,
        "student_name": enrollment.student.full_name,
        "component_scores": component_scores,
        "total_percentage": percentage,
        "letter_grade": grade["letter"],
        "grade_points": grade["grade_points"],
    }


def calculate_class_grades(db: Session, class_id: int) -> list[dict[str, Any]]:
    _get_class(db, class_id)
    enrollments = (
        db.query(EnrollmentModel)
        .filter(
            EnrollmentModel.class_id == class_id,
            EnrollmentModel.status == EnrollmentStatus.REGISTERED.value,
        )
        .order_by(EnrollmentModel.id.asc())
        .all()
    )

    grades = [calculate_final_grade(db, e.id) for e in enrollments]
    return sorted(grades, key=lambda g: g["total_percentage"], reverse=True)


def get_enrollment_grades(db: Session, enrollment_id: int) -> dict[str, Any]:
    enrollment = _get_enrollment(db, enrollment_id)
    calculated = calculate_final_grade(db, enrollment_id)

    return {
        "enrollment_id": enrollment.id,
        "status": enrollment.status,
        "is_finalized": enrollment.is_finalized,
        "final_grade": enrollment.final_grade,
        "final_percentage": enrollment.final_percentage,
        "student": {
            "id": enrollment.student.id,
            "student_number": enrollment.student.student_number,
            "name": enrollment.student.full_name,
        },
        "class_id": enrollment.class_.id,
        "class_name": enrollment.class_.name,
        "course_code": enrollment.class_.course.code,
        "components": calculated["component_scores"],
        "current_grade": {
            "percentage": calculated["total_percentage"],
            "letter": calculated["letter_grade"],
            "points": calculated["grade_points"],
        },
    }


# ==========================================================
# [성적 확정 / 확정 취소]
# ==========================================================

def finalize_grades(db: Session, class_id: int, user_id: Optional[int] = None) -> list[dict[str, Any]]:
    _get_class(db, class_id)

    already = (
        db.query(EnrollmentModel)
        .filter(EnrollmentModel.class_id == class_id, EnrollmentModel.is_finalized.is_(True))
        .count()
    )
    if already:
        raise ConflictError("Grades for this class are already finalized")

    grades = calculate_class_grades(db, class_id)

    now = datetime.now(timezone.utc)
    for grade in grades:
        enrollment = _get_enrollment(db, grade["enrollment_id"])
        enrollment.final_percentage = grade["total_percentage"]
        enrollment.final_grade = grade["letter_grade"]
        enrollment.grade_points = grade["grade_points"]
        enrollment.is_finalized = True
        enrollment.finalized_at = now
        enrollment.finalized_by_id = user_id
    db.commit()

    logger.info(f"성적 확정: class_id={class_id}, students={len(grades)}, by user={user_id}")
    audit_service.log(
        db, AuditAction.UPDATE, "Class", class_id, user_id,
        new_values={"action": "finalize_grades", "students_count": len(grades)},
    )
    return grades


def unfinalize_grades(db: Session, class_id: int, reason: str, user_id: Optional[int] = None) -> int:
    _get_class(db, class_id)
    if not reason or not reason.strip():
        raise ValidationError("Reason for unfinalizing is required")

    enrollments = (
        db.query(EnrollmentModel)
        .filter(EnrollmentModel.class_id == class_id, EnrollmentModel.is_finalized.is_(True))
        .all()
    )
    if not enrollments:
        raise ValidationError("Grades for this class are not finalized")

    for enrollment in enrollments:
        enrollment.is_finalized = False
        enrollment.finalized_at = None
        enrollment.finalized_by_id = None
    db.commit()

    # 관리자 예외 처리이므로 경고 레벨로 남김
    logger.warning(f"성적 확정 취소: class_id={class_id}, count={len(enrollments)}, by user={user_id}, reason={reason!r}")
    audit_service.log(
        db, AuditAction.UPDATE, "Class", class_id, user_id,
        new_values={"action": "unfinalize_grades", "reason": reason},
    )
    return len(enrollments)


# ==========================================================
# [GPA / 성적증명서]
# ==========================================================

def _course_rows(enrollments: Iterable[EnrollmentModel]) -> list[tuple[float, int]]:
    return [(e.grade_points or 0.0, e.class_.course.credits) for e in enrollments]


def get_gpa_details(db: Session, student_id: int, semester_id: Optional[int] = None) -> dict[str, Any]:
    _get_student(db, student_id)

    all_enrollments = _finalized_enrollments(db, student_id)
    cumulative = compute_gpa(_course_rows(all_enrollments))

    semester = {"gpa": 0.0, "credits": 0, "points": 0.0}
    if semester_id is not None:
        semester = compute_gpa(_course_rows(e for e in all_enrollments if e.semester_id == semester_id))

    return {
        "cumulative_gpa": cumulative["gpa"],
        "semester_gpa": semester["gpa"],
        "total_credits": cumulative["credits"],
        "total_points": cumulative["points"],
        "semester_credits": semester["credits"],
        "semester_points": semester["points"],
    }


def generate_transcript(db: Session, student_id: int) -> dict[str, Any]:
    student = _get_student(db, student_id)

    enrollments = (
        db.query(EnrollmentModel)
        .join(SemesterModel, SemesterModel.id == EnrollmentModel.semester_id)
        .filter(
            EnrollmentModel.student_id == student_id,
            EnrollmentModel.status.in_(GPA_STATUSES),
            EnrollmentModel.is_finalized.is_(True),
            EnrollmentModel.final_grade.isnot(None),
        )
        .order_by(SemesterModel.start_date.asc(), EnrollmentModel.id.asc())
        .all()
    )

    semesters: "OrderedDict[int, dict[str, Any]]" = OrderedDict()
    for e in enrollments:
        block = semesters.setdefault(e.semester_id, {
            "id": e.semester_id,
            "name": e.class_.semester.name,
            "courses": [],
            "rows": [],
        })
        course = e.class_.course
        block["courses"].append({
            "code": course.code,
            "name": course.name,
            "credits": course.credits,
            "grade": e.final_grade,
            "points": _round2((e.grade_points or 0.0) * course.credits),
        })
        block["rows"].append((e.grade_points or 0.0, course.credits))

    result_semesters = []
    for block in semesters.values():
        summary = compute_gpa(block.pop("rows"))
        block["courses"].sort(key=lambda c: c["code"])
        result_semesters.append({
            **block,
            "semester_credits": summary["credits"],
            "semester_points": summary["points"],
            "semester_gpa": summary["gpa"],
        })

    cumulative = compute_gpa(_course_rows(enrollments))
    return {
        "student": {
            "id": student.id,
            "student_number": student.student_number,
            "name": student.full_name,
        },
        "semesters": result_semesters,
        "cumulative_credits": cumulative["credits"],
        "cumulative_points": cumulative["points"],
        "cumulative_gpa": cumulative["gpa"],
        "generated_at": datetime.now(timezone.utc),
    }
