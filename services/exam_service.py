"""
services/exam_service.py

- 시험 일정 등록/변경/취소/완료/삭제
- 시험장 중복 예약 검사 (차단) / 학생 시험 시간 중복 검사 (경고만)
- 시험 상태: SCHEDULED → COMPLETED | CANCELLED (이후 변경 불가)
"""

import logging
from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from models.classes import Class as ClassModel
from models.enrollments import Enrollment as EnrollmentModel
from models.enums import AuditAction, EnrollmentStatus, ExamStatus
from models.exams import Exam as ExamModel
from models.rooms import Room as RoomModel
from schemas.exams import ExamCreate, ExamFilters, ExamUpdate
from services import audit_service
from utils.errors import NotFoundError, ValidationError
from utils.scheduling import intervals_overlap, normalize_exam_date, validate_time_range

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (ExamStatus.COMPLETED.value, ExamStatus.CANCELLED.value)

DateLike = Union[date, datetime, str]


class ExamService:
    """시험 일정 관리 서비스 (상태는 DB에만 있으므로 인스턴스는 무상태)"""

    # ======================================================
    # [조회 헬퍼]
    # ======================================================

    def _get_exam(self, db: Session, exam_id: int) -> ExamModel:
        exam = db.query(ExamModel).filter(ExamModel.id == exam_id).first()
        if exam is None:
            raise NotFoundError("Exam not found")
        return exam

    def _get_class(self, db: Session, class_id: int) -> ClassModel:
        class_obj = db.query(ClassModel).filter(ClassModel.id == class_id).first()
        if class_obj is None:
            raise NotFoundError("Class not found")
        return class_obj

    def _get_room(self, db: Session, room_id: int) -> RoomModel:
        room = db.query(RoomModel).filter(RoomModel.id == room_id).first()
        if room is None:
            raise NotFoundError("Room not found")
        if not room.is_active:
            raise ValidationError(f"Room {room.code} is not active")
        return room

    def _active_exams_on(self, db: Session, exam_date: date):
        return db.query(ExamModel).filter(
            ExamModel.date == exam_date,
            ExamModel.status != ExamStatus.CANCELLED.value,
        )

    # ======================================================
    # [충돌 검사]
    # ======================================================

    def check_room_availability(
        self,
        db: Session,
        room_id: int,
        exam_date: DateLike,
        start_time: str,
        end_time: str,
        exclude_exam_id: Optional[int] = None,
    ) -> bool:
        validate_time_range(start_time, end_time)
        day = normalize_exam_date(exam_date)

        query = self._active_exams_on(db, day).filter(ExamModel.room_id == room_id)
        if exclude_exam_id is not None:
            query = query.filter(ExamModel.id != exclude_exam_id)

        for existing in query:
            if intervals_overlap(existing.start_time, existing.end_time, start_time, end_time):
                logger.debug(
                    f"시험장 중복: room_id={room_id}, {day} {start_time}-{end_time} "
                    f"↔ exam_id={existing.id} {existing.start_time}-{existing.end_time}"
                )
                return False
        return True

    def check_conflicts(
        self, db: Session, class_id: int, exam_date: DateLike, start_time: str, end_time: str
    ) -> list[dict[str, Any]]:
        validate_time_range(start_time, end_time)
        day = normalize_exam_date(exam_date)

        student_ids = [
            row.student_id
            for row in db.query(EnrollmentModel.student_id).filter(
                EnrollmentModel.class_id == class_id,
                EnrollmentModel.status == EnrollmentStatus.REGISTERED.value,
            )
        ]
        if not student_ids:
            return []

        # 같은 학생이 REGISTERED 상태로 듣고 있는 다른 강좌들
        shared_class_ids = {
            row.class_id
            for row in db.query(EnrollmentModel.class_id).filter(
                EnrollmentModel.student_id.in_(student_ids),
                EnrollmentModel.status == EnrollmentStatus.REGISTERED.value,
                EnrollmentModel.class_id != class_id,
            )
        }
        if not shared_class_ids:
            return []

        others = (
            self._active_exams_on(db, day)
            .filter(ExamModel.class_id.in_(shared_class_ids))
            .order_by(ExamModel.start_time.asc(), ExamModel.id.asc())
        )

        conflicts = []
        for exam in others:
            if not intervals_overlap(exam.start_time, exam.end_time, start_time, end_time):
                continue
            conflicts.append({
                "type": "student",
                "description": f"Some students have {exam.class_.course.code} exam at {exam.start_time}",
                "exam_id": exam.id,
                "exam_title": exam.title,
            })
        return conflicts

    # ======================================================
    # [등록/변경]
    # ======================================================

    def schedule_exam(self, db: Session, data: ExamCreate, user_id: Optional[int] = None) -> dict[str, Any]:
        validate_time_range(data.start_time, data.end_time)
        day = normalize_exam_date(data.date)

        self._get_class(db, data.class_id)
        room = self._get_room(db, data.room_id)

        if not self.check_room_availability(db, room.id, day, data.start_time, data.end_time):
            raise ValidationError("Room is not available at the specified time")

        conflicts = self.check_conflicts(db, data.class_id, day, data.start_time, data.end_time)
        if conflicts:
            # 경고만 남기고 등록은 진행
            logger.warning(f"시험 일정 학생 중복 감지: class_id={data.class_id}, {day} {data.start_time}, {conflicts}")

        exam = ExamModel(
            class_id=data.class_id,
            room_id=room.id,
            type=data.type.value,
            title=data.title,
            date=day,
            start_time=data.start_time,
            end_time=data.end_time,
            duration=data.duration,
            max_score=data.max_score,
            instructions=data.instructions,
            status=ExamStatus.SCHEDULED.value,
        )
        db.add(exam)
        db.commit()
        db.refresh(exam)

        logger.info(f"시험 등록: exam_id={exam.id}, room={room.code}, {day} {exam.start_time}-{exam.end_time}")
        audit_service.log(
            db, AuditAction.CREATE, "Exam", exam.id, user_id,
            new_values={**data.model_dump(), "date": day},
        )
        return {"exam": exam, "conflicts": conflicts}

    def update_exam(self, db: Session, exam_id: int, patch: ExamUpdate, user_id: Optional[int] = None) -> ExamModel:
        exam = self._get_exam(db, exam_id)
        if exam.status in TERMINAL_STATUSES:
            raise ValidationError("Cannot update completed or cancelled exam")

        changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None or k == "instructions"}
        if "date" in changes:
            changes["date"] = normalize_exam_date(changes["date"])

        # 시험장/날짜/시간이 바뀌면 자기 자신을 제외하고 다시 검사
        if {"room_id", "date", "start_time", "end_time"} & changes.keys():
            room_id = changes.get("room_id", exam.room_id)
            day = changes.get("date", exam.date)
            start_time = changes.get("start_time", exam.start_time)
            end_time = changes.get("end_time", exam.end_time)

            if "room_id" in changes:
                self._get_room(db, room_id)
            if not self.check_room_availability(db, room_id, day, start_time, end_time, exclude_exam_id=exam.id):
                raise ValidationError("Room is not available at the specified time")

        old_values = {"title": exam.title, "date": exam.date, "start_time": exam.start_time, "room_id": exam.room_id}
        for key, value in changes.items():
            if key == "type":
                value = value.value
            setattr(exam, key, value)

        db.commit()
        db.refresh(exam)

        audit_service.log(db, AuditAction.UPDATE, "Exam", exam.id, user_id, old_values=old_values, new_values=changes)
        return exam

    # ======================================================
    # [상태 전이]
    # ======================================================

    def cancel_exam(self, db: Session, exam_id: int, reason: str, user_id: Optional[int] = None) -> ExamModel:
        exam = self._get_exam(db, exam_id)
        if exam.status != ExamStatus.SCHEDULED.value:
            raise ValidationError(f"Cannot cancel {exam.status.lower()} exam")

        exam.status = ExamStatus.CANCELLED.value
        exam.cancel_reason = reason
        db.commit()
        db.refresh(exam)

        logger.info(f"시험 취소: exam_id={exam.id}, reason={reason!r}")
        audit_service.log(
            db, AuditAction.UPDATE, "Exam", exam.id, user_id,
            new_values={"status": ExamStatus.CANCELLED.value, "reason": reason},
        )
        return exam

    def complete_exam(self, db: Session, exam_id: int, user_id: Optional[int] = None) -> ExamModel:
        exam = self._get_exam(db, exam_id)
        if exam.status != ExamStatus.SCHEDULED.value:
            raise ValidationError(f"Cannot complete {exam.status.lower()} exam")

        exam.status = ExamStatus.COMPLETED.value
        db.commit()
        db.refresh(exam)

        audit_service.log(db, AuditAction.UPDATE, "Exam", exam.id, user_id, new_values={"status": exam.status})
        return exam

    def delete_exam(self, db: Session, exam_id: int, user_id: Optional[int] = None) -> None:
        exam = self._get_exam(db, exam_id)
        if exam.status == ExamStatus.COMPLETED.value:
            raise ValidationError("Cannot delete completed exam")

        title = exam.title
        db.delete(exam)
        db.commit()
        audit_service.log(db, AuditAction.DELETE, "Exam", exam_id, user_id, old_values={"title": title})

    # ======================================================
    # [조회]
    # ======================================================

    def get_exam(self, db: Session, exam_id: int) -> ExamModel:
        return self._get_exam(db, exam_id)

    def list_exams(self, db: Session, filters: ExamFilters) -> list[ExamModel]:
        query = db.query(ExamModel)

        if filters.class_id is not None:
            query = query.filter(ExamModel.class_id == filters.class_id)
        if filters.semester_id is not None:
            query = query.join(ClassModel, ClassModel.id == ExamModel.class_id).filter(
                ClassModel.semester_id == filters.semester_id
            )
        if filters.type is not None:
            query = query.filter(ExamModel.type == filters.type.value)
        if filters.status is not None:
            query = query.filter(ExamModel.status == filters.status.value)
        if filters.start_date is not None:
            query = query.filter(ExamModel.date >= filters.start_date)
        if filters.end_date is not None:
            query = query.filter(ExamModel.date <= filters.end_date)

        return query.order_by(ExamModel.date.asc(), ExamModel.start_time.asc(), ExamModel.id.asc()).all()

    def get_class_exams(self, db: Session, class_id: int) -> list[ExamModel]:
        self._get_class(db, class_id)
        return self.list_exams(db, ExamFilters(class_id=class_id))

    def get_exam_schedule(self, db: Session, semester_id: int) -> list[dict[str, Any]]:
        exams = [
            e for e in self.list_exams(db, ExamFilters(semester_id=semester_id))
            if e.status != ExamStatus.CANCELLED.value
        ]

        schedule: "OrderedDict[date, list[ExamModel]]" = OrderedDict()
        for exam in exams:
            schedule.setdefault(exam.date, []).append(exam)
        return [{"date": day, "exams": day_exams} for day, day_exams in schedule.items()]

    def get_student_exams(self, db: Session, student_id: int, today: Optional[date] = None) -> list[ExamModel]:
        today = today or normalize_exam_date(datetime.now().astimezone())
        class_ids = [
            row.class_id
            for row in db.query(EnrollmentModel.class_id).filter(
                EnrollmentModel.student_id == student_id,
                EnrollmentModel.status == EnrollmentStatus.REGISTERED.value,
            )
        ]
        if not class_ids:
            return []

        return (
            db.query(ExamModel)
            .filter(
                ExamModel.class_id.in_(class_ids),
                ExamModel.status == ExamStatus.SCHEDULED.value,
                ExamModel.date >= today,
            )
            .order_by(ExamModel.date.asc(), ExamModel.start_time.asc())
            .all()
        )


# ✅ 라우터에서 공유하는 인스턴스
exam_service = ExamService()
