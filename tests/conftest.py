# tests/conftest.py

import itertools
import os
from datetime import date

# settings 가 import 되기 전에 테스트용 DB URL 지정
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, get_db, init_db
from main import app
from models.classes import Class
from models.courses import Course
from models.enrollments import Enrollment
from models.enums import EnrollmentStatus, GradeComponentType
from models.rooms import Room
from models.semesters import Semester
from models.students import Student
from schemas.grade_components import GradeComponentCreate
from services import grade_component_service


@pytest.fixture
def engine():
    # 모든 세션이 같은 in-memory 연결을 쓰도록 StaticPool 사용
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==========================================================
# 레코드 팩토리
# ==========================================================

@pytest.fixture
def make_course(db):
    counter = itertools.count(101)

    def _make(code=None, name="Intro to Computing", credits=3):
        course = Course(code=code or f"CS{next(counter)}", name=name, credits=credits)
        db.add(course)
        db.commit()
        return course

    return _make


@pytest.fixture
def semester(db):
    record = Semester(name="Fall 2025", start_date=date(2025, 9, 1), end_date=date(2025, 12, 20))
    db.add(record)
    db.commit()
    return record


@pytest.fixture
def make_class(db, make_course, semester):
    def _make(course=None, semester_id=None, name="Section A", capacity=40):
        course = course or make_course()
        class_obj = Class(
            course_id=course.id,
            semester_id=semester_id or semester.id,
            name=name,
            capacity=capacity,
        )
        db.add(class_obj)
        db.commit()
        return class_obj

    return _make


@pytest.fixture
def make_student(db):
    counter = itertools.count(1)

    def _make(first_name="Sean", last_name="Cameron"):
        n = next(counter)
        student = Student(
            student_number=f"2025{n:04d}",
            first_name=first_name,
            last_name=last_name,
            email=f"student{n}@hums.edu",
        )
        db.add(student)
        db.commit()
        return student

    return _make


@pytest.fixture
def make_enrollment(db, make_student):
    def _make(class_obj, student=None, status=EnrollmentStatus.REGISTERED):
        student = student or make_student()
        enrollment = Enrollment(
            student_id=student.id,
            class_id=class_obj.id,
            semester_id=class_obj.semester_id,
            status=status.value,
        )
        db.add(enrollment)
        db.commit()
        return enrollment

    return _make


@pytest.fixture
def make_room(db):
    counter = itertools.count(101)

    def _make(code=None, is_active=True, capacity=40):
        room = Room(code=code or f"R{next(counter)}", name="Lecture Room", capacity=capacity, is_active=is_active)
        db.add(room)
        db.commit()
        return room

    return _make


@pytest.fixture
def make_component(db):
    def _make(class_obj, name="Midterm", weight=40, max_score=100, type=GradeComponentType.MIDTERM):
        data = GradeComponentCreate(name=name, type=type, weight=weight, max_score=max_score)
        return grade_component_service.create_component(db, class_obj.id, data)

    return _make
