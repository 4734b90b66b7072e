from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from models.classes import Class as ClassModel
from models.courses import Course as CourseModel
from models.enrollments import Enrollment as EnrollmentModel
from models.semesters import Semester as SemesterModel
from schemas.classes import Class as ClassSchema, ClassCreate
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.enrollments import Enrollment as EnrollmentSchema
from utils.errors import NotFoundError

router = APIRouter(prefix="/classes", tags=["classes"], responses=COMMON_ERROR_RESPONSES)


def _get_class_or_404(db: Session, class_id: int) -> ClassModel:
    class_obj = db.query(ClassModel).filter(ClassModel.id == class_id).first()
    if class_obj is None:
        raise NotFoundError("Class not found")
    return class_obj


# ==========================================================
# [1단계] CRUD 기본 라우터
# ==========================================================

# ✅ [CREATE] 강좌(분반) 개설
@router.post("/", status_code=201)
def create_class(new_class: ClassCreate, db: Session = Depends(get_db)):
    if db.query(CourseModel).filter(CourseModel.id == new_class.course_id).first() is None:
        raise NotFoundError("Course not found")
    if db.query(SemesterModel).filter(SemesterModel.id == new_class.semester_id).first() is None:
        raise NotFoundError("Semester not found")

    db_class = ClassModel(**new_class.model_dump())
    db.add(db_class)
    db.commit()
    db.refresh(db_class)
    return {
        "success": True,
        "data": ClassSchema.model_validate(db_class).model_dump(),
        "message": "Class created successfully"
    }


# ✅ [READ] 강좌 목록 (학기 필터 선택)
@router.get("/")
def read_classes(semester_id: int = None, db: Session = Depends(get_db)):
    query = db.query(ClassModel)
    if semester_id is not None:
        query = query.filter(ClassModel.semester_id == semester_id)
    records = query.order_by(ClassModel.id.asc()).all()
    return {"success": True, "data": [ClassSchema.model_validate(r).model_dump() for r in records]}


# ✅ [READ] 강좌 상세
@router.get("/{class_id}")
def read_class(class_id: int, db: Session = Depends(get_db)):
    class_obj = _get_class_or_404(db, class_id)
    return {"success": True, "data": ClassSchema.model_validate(class_obj).model_dump()}


# ==========================================================
# [2단계] 강좌 하위 리소스
# ==========================================================

# ✅ [READ] 강좌 수강생 목록
@router.get("/{class_id}/enrollments")
def read_class_enrollments(class_id: int, db: Session = Depends(get_db)):
    _get_class_or_404(db, class_id)
    records = (
        db.query(EnrollmentModel)
        .filter(EnrollmentModel.class_id == class_id)
        .order_by(EnrollmentModel.id.asc())
        .all()
    )
    return {"success": True, "data": [EnrollmentSchema.model_validate(r).model_dump() for r in records]}
