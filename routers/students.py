from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from models.students import Student as StudentModel
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.students import Student as StudentSchema, StudentCreate
from utils.errors import ConflictError, NotFoundError

router = APIRouter(prefix="/students", tags=["students"], responses=COMMON_ERROR_RESPONSES)


# ✅ [CREATE] 학생 추가
@router.post("/", status_code=201)
def create_student(student: StudentCreate, db: Session = Depends(get_db)):
    if db.query(StudentModel).filter(StudentModel.student_number == student.student_number).first():
        raise ConflictError(f"Student number '{student.student_number}' already exists")

    db_student = StudentModel(**student.model_dump())
    db.add(db_student)
    db.commit()
    db.refresh(db_student)
    return {
        "success": True,
        "data": StudentSchema.model_validate(db_student).model_dump(),
        "message": "Student created successfully"
    }


# ✅ [READ] 전체 학생 조회
@router.get("/")
def read_students(db: Session = Depends(get_db)):
    records = db.query(StudentModel).order_by(StudentModel.last_name.asc(), StudentModel.first_name.asc()).all()
    return {"success": True, "data": [StudentSchema.model_validate(r).model_dump() for r in records]}


# ✅ [READ] 학생 상세 조회
@router.get("/{student_id}")
def read_student(student_id: int, db: Session = Depends(get_db)):
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        raise NotFoundError("Student not found")
    return {"success": True, "data": StudentSchema.model_validate(student).model_dump()}
