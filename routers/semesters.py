from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from models.semesters import Semester as SemesterModel
from schemas.semesters import Semester as SemesterSchema, SemesterCreate

router = APIRouter(prefix="/semesters", tags=["semesters"])


# ✅ [CREATE] 학기 추가
@router.post("/", status_code=201)
def create_semester(semester: SemesterCreate, db: Session = Depends(get_db)):
    db_semester = SemesterModel(**semester.model_dump())
    db.add(db_semester)
    db.commit()
    db.refresh(db_semester)
    return {
        "success": True,
        "data": SemesterSchema.model_validate(db_semester).model_dump(),
        "message": "Semester created successfully"
    }


# ✅ [READ] 전체 학기 조회 (최근 학기 우선)
@router.get("/")
def read_semesters(db: Session = Depends(get_db)):
    records = db.query(SemesterModel).order_by(SemesterModel.start_date.desc()).all()
    return {"success": True, "data": [SemesterSchema.model_validate(r).model_dump() for r in records]}
