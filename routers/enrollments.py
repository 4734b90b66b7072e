import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from models.classes import Class as ClassModel
from models.enrollments import Enrollment as EnrollmentModel
from models.enums import EnrollmentStatus
from models.students import Student as StudentModel
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.enrollments import Enrollment as EnrollmentSchema, EnrollmentCreate, EnrollmentStatusUpdate
from utils.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrollments", tags=["enrollments"], responses=COMMON_ERROR_RESPONSES)


# ✅ [CREATE] 수강 신청
@router.post("/", status_code=201)
def create_enrollment(enrollment: EnrollmentCreate, db: Session = Depends(get_db)):
    student = db.query(StudentModel).filter(StudentModel.id == enrollment.student_id).first()
    if student is None:
        raise NotFoundError("Student not found")
    class_obj = db.query(ClassModel).filter(ClassModel.id == enrollment.class_id).first()
    if class_obj is None:
        raise NotFoundError("Class not found")

    duplicate = db.query(EnrollmentModel).filter(
        EnrollmentModel.student_id == student.id,
        EnrollmentModel.class_id == class_obj.id,
    ).first()
    if duplicate:
        raise ConflictError("Student is already enrolled in this class")

    registered = db.query(EnrollmentModel).filter(
        EnrollmentModel.class_id == class_obj.id,
        EnrollmentModel.status == EnrollmentStatus.REGISTERED.value,
    ).count()
    if registered >= class_obj.capacity:
        raise ValidationError("Class is full")

    db_enrollment = EnrollmentModel(
        student_id=student.id,
        class_id=class_obj.id,
        semester_id=class_obj.semester_id,
        status=EnrollmentStatus.REGISTERED.value,
    )
    db.add(db_enrollment)
    db.commit()
    db.refresh(db_enrollment)
    return {
        "success": True,
        "data": EnrollmentSchema.model_validate(db_enrollment).model_dump(),
        "message": "Enrollment created successfully"
    }


# ✅ [UPDATE] 수강 상태 변경 (수강 철회, 이수 처리 등)
@router.patch("/{enrollment_id}/status")
def update_enrollment_status(enrollment_id: int, body: EnrollmentStatusUpdate, db: Session = Depends(get_db)):
    enrollment = db.query(EnrollmentModel).filter(EnrollmentModel.id == enrollment_id).first()
    if enrollment is None:
        raise NotFoundError("Enrollment not found")

    logger.info(f"수강 상태 변경: enrollment_id={enrollment_id}, {enrollment.status} → {body.status.value}")
    enrollment.status = body.status.value
    db.commit()
    db.refresh(enrollment)
    return {
        "success": True,
        "data": EnrollmentSchema.model_validate(enrollment).model_dump(),
        "message": "Enrollment status updated successfully"
    }
