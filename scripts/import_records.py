import csv
import logging
import os
import sys

from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from models.courses import Course as CourseModel    # ✅ 모델 import
from models.rooms import Room as RoomModel
from models.students import Student as StudentModel

logger = logging.getLogger(__name__)

DATA_DIR = "data"  # ✅ CSV 폴더 (courses.csv / students.csv / rooms.csv)


def _read_rows(csv_path):
    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        return list(csv.DictReader(csvfile))


# ✅ 이미 있는 코드/학번은 건너뜀 (여러 번 실행해도 중복 없음)
def migrate_courses(db: Session, csv_path: str) -> int:
    existing = {code for (code,) in db.query(CourseModel.code)}
    added = 0
    for row in _read_rows(csv_path):
        if row["code"] in existing:
            continue
        db.add(CourseModel(
            code=row["code"],                        # 과목 코드 (예: CS101)
            name=row["name"],                        # 과목명
            credits=int(row.get("credits") or 3),    # 학점
        ))
        existing.add(row["code"])
        added += 1
    db.commit()
    return added


def migrate_students(db: Session, csv_path: str) -> int:
    existing = {number for (number,) in db.query(StudentModel.student_number)}
    added = 0
    for row in _read_rows(csv_path):
        if row["student_number"] in existing:
            continue
        db.add(StudentModel(
            student_number=row["student_number"],    # 학번
            first_name=row["first_name"],            # 이름
            last_name=row["last_name"],              # 성
            email=row.get("email") or None,          # 이메일
        ))
        existing.add(row["student_number"])
        added += 1
    db.commit()
    return added


def migrate_rooms(db: Session, csv_path: str) -> int:
    existing = {code for (code,) in db.query(RoomModel.code)}
    added = 0
    for row in _read_rows(csv_path):
        if row["code"] in existing:
            continue
        db.add(RoomModel(
            code=row["code"],                                    # 강의실 코드
            name=row["name"],                                    # 강의실 이름
            building=row.get("building") or None,                # 건물
            capacity=int(row.get("capacity") or 30),             # 수용 인원
            is_active=(row.get("is_active") or "true").lower() in ("1", "true", "y", "yes"),
        ))
        existing.add(row["code"])
        added += 1
    db.commit()
    return added


MIGRATIONS = [
    ("courses.csv", migrate_courses),
    ("students.csv", migrate_students),
    ("rooms.csv", migrate_rooms),
]


def migrate_all(db: Session, data_dir: str = DATA_DIR) -> dict:
    results = {}
    for filename, migrate in MIGRATIONS:
        csv_path = os.path.join(data_dir, filename)
        if not os.path.exists(csv_path):
            logger.warning(f"CSV 파일 없음, 건너뜀: {csv_path}")
            continue
        results[filename] = migrate(db, csv_path)
        logger.info(f"{filename} → DB 마이그레이션 완료: {results[filename]}건 추가")
    return results


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    db: Session = SessionLocal()
    try:
        migrate_all(db, sys.argv[1] if len(sys.argv) > 1 else DATA_DIR)
    finally:
        db.close()
    print("✅ 학사 기초 데이터 CSV → DB 마이그레이션 완료")
