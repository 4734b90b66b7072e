from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from models.courses import Course as CourseModel
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.courses import Course as CourseSchema, CourseCreate
from utils.errors import ConflictError, NotFoundError

router = APIRouter(prefix="/courses", tags=["courses"], responses=COMMON_ERROR_RESPONSES)


# ✅ [CREATE] 교과목 추가
@router.post("/", status_code=201)
def create_course(course: CourseCreate, db: Session = Depends(get_db)):
    if db.query(CourseModel).filter(CourseModel.code == course.code).first():
        raise ConflictError(f"Course code '{course.code}' already exists")

    db_course = CourseModel(**course.model_dump())
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    return {
        "success": True,
        "data": CourseSchema.model_validate(db_course).model_dump(),
        "message": "Course created successfully"
    }


# ✅ [READ] 전체 교과목 조회
@router.get("/")
def read_courses(db: Session = Depends(get_db)):
    records = db.query(CourseModel).order_by(CourseModel.code.asc()).all()
    return {"success": True, "data": [CourseSchema.model_validate(r).model_dump() for r in records]}


# ✅ [READ] 교과목 상세 조회
@router.get("/{course_id}")
def read_course(course_id: int, db: Session = Depends(get_db)):
    course = db.query(CourseModel).filter(CourseModel.id == course_id).first()
    if course is None:
        raise NotFoundError("Course not found")
    return {"success": True, "data": CourseSchema.model_validate(course).model_dump()}
