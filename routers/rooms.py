from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from models.enums import ExamStatus
from models.exams import Exam as ExamModel
from models.rooms import Room as RoomModel
from schemas.common import COMMON_ERROR_RESPONSES
from schemas.rooms import Room as RoomSchema, RoomCreate, RoomUpdate
from services.exam_service import exam_service
from utils.errors import ConflictError, NotFoundError, ValidationError

router = APIRouter(prefix="/rooms", tags=["rooms"], responses=COMMON_ERROR_RESPONSES)


def _get_room_or_404(db: Session, room_id: int) -> RoomModel:
    room = db.query(RoomModel).filter(RoomModel.id == room_id).first()
    if room is None:
        raise NotFoundError("Room not found")
    return room


# ==========================================================
# [1단계] CRUD 기본 라우터
# ==========================================================

# ✅ [CREATE] 강의실 추가
@router.post("/", status_code=201)
def create_room(room: RoomCreate, db: Session = Depends(get_db)):
    if db.query(RoomModel).filter(RoomModel.code == room.code).first():
        raise ConflictError(f"Room code '{room.code}' already exists")

    db_room = RoomModel(**room.model_dump())
    db.add(db_room)
    db.commit()
    db.refresh(db_room)
    return {
        "success": True,
        "data": RoomSchema.model_validate(db_room).model_dump(),
        "message": "Room created successfully"
    }


# ✅ [READ] 전체 강의실 조회
@router.get("/")
def read_rooms(active_only: bool = False, db: Session = Depends(get_db)):
    query = db.query(RoomModel)
    if active_only:
        query = query.filter(RoomModel.is_active.is_(True))
    records = query.order_by(RoomModel.code.asc()).all()
    return {"success": True, "data": [RoomSchema.model_validate(r).model_dump() for r in records]}


# ✅ [READ] 강의실 사용 가능 여부 (시험 일정 기준)
@router.get("/{room_id}/availability")
def read_room_availability(
    room_id: int,
    date: date,
    start_time: str,
    end_time: str,
    exclude_exam_id: int = None,
    db: Session = Depends(get_db),
):
    _get_room_or_404(db, room_id)
    available = exam_service.check_room_availability(db, room_id, date, start_time, end_time, exclude_exam_id)
    return {
        "success": True,
        "data": {
            "room_id": room_id,
            "date": date,
            "start_time": start_time,
            "end_time": end_time,
            "available": available,
        }
    }


# ✅ [READ] 강의실 상세
@router.get("/{room_id}")
def read_room(room_id: int, db: Session = Depends(get_db)):
    room = _get_room_or_404(db, room_id)
    return {"success": True, "data": RoomSchema.model_validate(room).model_dump()}


# ✅ [UPDATE] 강의실 수정 (보낸 필드만 반영)
@router.put("/{room_id}")
def update_room(room_id: int, updated: RoomUpdate, db: Session = Depends(get_db)):
    room = _get_room_or_404(db, room_id)

    for key, value in updated.model_dump(exclude_unset=True).items():
        if value is None and key != "building":
            continue
        setattr(room, key, value)

    db.commit()
    db.refresh(room)
    return {
        "success": True,
        "data": RoomSchema.model_validate(room).model_dump(),
        "message": "Room updated successfully"
    }


# ✅ [DELETE] 강의실 삭제 (예정된 시험이 있으면 불가)
@router.delete("/{room_id}")
def delete_room(room_id: int, db: Session = Depends(get_db)):
    room = _get_room_or_404(db, room_id)

    scheduled = db.query(ExamModel).filter(
        ExamModel.room_id == room_id,
        ExamModel.status == ExamStatus.SCHEDULED.value,
    ).count()
    if scheduled:
        raise ValidationError("Cannot delete room with scheduled exams")

    db.delete(room)
    db.commit()
    return {
        "success": True,
        "data": {"room_id": room_id},
        "message": "Room deleted successfully"
    }
