import pytest

from models.enums import EnrollmentStatus
from models.grade_entries import GradeEntry
from schemas.grade_entries import GradeEntryInput
from services import grade_calculation_service, grade_entry_service
from utils.errors import NotFoundError, ValidationError


@pytest.fixture
def graded_class(make_class, make_enrollment, make_component):
    class_obj = make_class()
    enrollments = [make_enrollment(class_obj) for _ in range(3)]
    component = make_component(class_obj, name="Midterm", weight=40, max_score=50)
    return class_obj, enrollments, component


def test_enter_grades_creates_entries(db, graded_class):
    _, enrollments, component = graded_class

    result = grade_entry_service.enter_grades(
        db, component.id,
        [GradeEntryInput(enrollment_id=e.id, score=40) for e in enrollments],
        user_id=7,
    )

    assert len(result["entries"]) == 3
    assert result["skipped"] == []
    assert all(e.entered_by_id == 7 for e in result["entries"])


def test_enter_grades_upserts_existing_entry(db, graded_class):
    _, enrollments, component = graded_class
    first = grade_entry_service.enter_grades(db, component.id, [GradeEntryInput(enrollment_id=enrollments[0].id, score=30)])
    entry_id = first["entries"][0].id

    second = grade_entry_service.enter_grades(
        db, component.id, [GradeEntryInput(enrollment_id=enrollments[0].id, score=35, remarks="regraded")], user_id=3
    )

    entry = second["entries"][0]
    assert entry.id == entry_id
    assert entry.score == 35
    assert entry.remarks == "regraded"
    assert entry.modified_by_id == 3
    assert entry.modified_at is not None
    assert db.query(GradeEntry).count() == 1


def test_score_above_max_rejects_whole_batch(db, graded_class):
    _, enrollments, component = graded_class

    with pytest.raises(ValidationError) as exc:
        grade_entry_service.enter_grades(db, component.id, [
            GradeEntryInput(enrollment_id=enrollments[0].id, score=45),
            GradeEntryInput(enrollment_id=enrollments[1].id, score=51),
        ])

    assert "between 0 and 50" in exc.value.message
    assert db.query(GradeEntry).count() == 0


def test_enter_grades_skips_non_registered_enrollments(db, make_class, make_enrollment, make_component):
    class_obj = make_class()
    active = make_enrollment(class_obj)
    dropped = make_enrollment(class_obj, status=EnrollmentStatus.DROPPED)
    component = make_component(class_obj)

    result = grade_entry_service.enter_grades(db, component.id, [
        GradeEntryInput(enrollment_id=active.id, score=90),
        GradeEntryInput(enrollment_id=dropped.id, score=70),
    ])

    assert [e.enrollment_id for e in result["entries"]] == [active.id]
    assert result["skipped"] == [dropped.id]


def test_enter_grades_rejects_finalized_enrollment(db, graded_class):
    class_obj, enrollments, component = graded_class
    grade_calculation_service.finalize_grades(db, class_obj.id)

    with pytest.raises(ValidationError):
        grade_entry_service.enter_grades(db, component.id, [GradeEntryInput(enrollment_id=enrollments[0].id, score=10)])


def test_enter_grades_unknown_component(db):
    with pytest.raises(NotFoundError):
        grade_entry_service.enter_grades(db, 9999, [GradeEntryInput(enrollment_id=1, score=10)])


def test_calculate_statistics():
    stats = grade_entry_service.calculate_statistics([70, 80, 90, 100], 100)

    assert stats["count"] == 4
    assert stats["average"] == 85
    assert stats["highest"] == 100
    assert stats["lowest"] == 70
    assert stats["median"] == 85
    assert stats["max_score"] == 100


def test_calculate_statistics_empty():
    stats = grade_entry_service.calculate_statistics([], 50)
    assert stats["count"] == 0
    assert stats["average"] == 0.0


def test_component_grades_lists_students_without_grades(db, graded_class):
    _, enrollments, component = graded_class
    grade_entry_service.enter_grades(db, component.id, [
        GradeEntryInput(enrollment_id=enrollments[0].id, score=40),
        GradeEntryInput(enrollment_id=enrollments[1].id, score=30),
    ])

    result = grade_entry_service.get_component_grades(db, component.id)

    assert len(result["entries"]) == 2
    assert result["enrolled_without_grades"] == [enrollments[2].id]
    assert result["statistics"]["average"] == 35


def test_update_grade_checks_range(db, graded_class):
    _, enrollments, component = graded_class
    entry = grade_entry_service.enter_grades(
        db, component.id, [GradeEntryInput(enrollment_id=enrollments[0].id, score=40)]
    )["entries"][0]

    updated = grade_entry_service.update_grade(db, entry.id, 48, "late correction", user_id=2)
    assert updated.score == 48
    assert updated.modified_by_id == 2

    with pytest.raises(ValidationError):
        grade_entry_service.update_grade(db, entry.id, 60, None)


def test_update_grade_rejects_finalized_enrollment(db, graded_class):
    class_obj, enrollments, component = graded_class
    entry = grade_entry_service.enter_grades(
        db, component.id, [GradeEntryInput(enrollment_id=enrollments[0].id, score=40)]
    )["entries"][0]
    grade_calculation_service.finalize_grades(db, class_obj.id)

    with pytest.raises(ValidationError):
        grade_entry_service.update_grade(db, entry.id, 45, None)
    with pytest.raises(ValidationError):
        grade_entry_service.delete_grade(db, entry.id)


def test_delete_grade(db, graded_class):
    _, enrollments, component = graded_class
    entry = grade_entry_service.enter_grades(
        db, component.id, [GradeEntryInput(enrollment_id=enrollments[0].id, score=40)]
    )["entries"][0]

    grade_entry_service.delete_grade(db, entry.id)

    assert grade_entry_service.get_enrollment_entries(db, enrollments[0].id) == []
